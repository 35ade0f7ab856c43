"""Remote repository synchronization."""
