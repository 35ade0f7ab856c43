"""Heading outline extraction and anchor injection for rendered pages."""

import re
from typing import List, Optional, Set, Tuple

from bs4 import BeautifulSoup

from blog_publisher.core.models import OutlineNode
from blog_publisher.core.slugs import slugify
from blog_publisher.transforms.transliterate import Transliterator

HEADING_TAG_PATTERN = re.compile(r'^h[1-6]$')


class AnchorRegistry:
    """Hands out anchors that are unique within one page."""

    def __init__(self, transliterate: Optional[Transliterator] = None, timestamp: str = "0"):
        self.transliterate = transliterate
        self.timestamp = timestamp
        self.used: Set[str] = set()
        self.fallbacks = 0

    def anchor_for(self, text: str) -> str:
        base = slugify(text, self.transliterate, fallback="")
        if not base:
            self.fallbacks += 1
            base = f"section-{self.timestamp}-{self.fallbacks}"

        anchor, suffix = base, 0
        while anchor in self.used:
            suffix += 1
            anchor = f"{base}-{suffix}"
        self.used.add(anchor)
        return anchor


def html_text(fragment: str) -> str:
    """Visible text of an HTML fragment with whitespace collapsed."""
    return " ".join(BeautifulSoup(fragment, "html.parser").get_text().split())


def build_forest(headings: List[Tuple[int, str, str]]) -> List[OutlineNode]:
    """Nest headings by level.

    A heading becomes a child of the nearest open heading with a strictly
    lower level; a heading at the same or shallower level closes it.

    Args:
        headings: (level, text, anchor) in document order

    Returns:
        The top-level outline nodes
    """
    roots: List[OutlineNode] = []
    stack: List[OutlineNode] = []

    for level, text, anchor in headings:
        node = OutlineNode(level=level, text=text, anchor=anchor)
        while stack and stack[-1].level >= level:
            stack.pop()
        if stack:
            stack[-1].children.append(node)
        else:
            roots.append(node)
        stack.append(node)

    return roots


def add_heading_anchors(
    content_html: str,
    transliterate: Optional[Transliterator] = None,
    timestamp: str = "0",
) -> Tuple[str, List[OutlineNode]]:
    """Give every h1-h6 an id and build the page outline.

    Existing ids are replaced so anchors stay unique within the page.

    Args:
        content_html: Rendered body HTML
        transliterate: Used when slugging heading text
        timestamp: Basis for anchors of headings with no sluggable text

    Returns:
        Tuple of (rewritten HTML, outline forest)
    """
    soup = BeautifulSoup(content_html, "html.parser")
    registry = AnchorRegistry(transliterate, timestamp)
    headings: List[Tuple[int, str, str]] = []

    for tag in soup.find_all(HEADING_TAG_PATTERN):
        text = " ".join(tag.get_text().split())
        anchor = registry.anchor_for(text)
        tag["id"] = anchor
        headings.append((int(tag.name[1]), text, anchor))

    return str(soup), build_forest(headings)
