"""Rendering of publish items into HTML pages."""
