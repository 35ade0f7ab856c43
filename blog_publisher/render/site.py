"""Site rendering: publish items in, named output files out."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from blog_publisher.core.models import OutputFile, PublishItem
from blog_publisher.render.layout import Layout
from blog_publisher.render.outline import add_heading_anchors
from blog_publisher.transforms.transliterate import Transliterator

logger = logging.getLogger(__name__)

INDEX_PATH = "index.html"


def sort_items(items: List[PublishItem]) -> List[PublishItem]:
    """Newest first; items with equal dates keep extraction order."""
    return sorted(items, key=lambda item: item.date, reverse=True)


def post_path(slug: str) -> str:
    return f"{slug}.html"


def _link(item: Optional[PublishItem]) -> Optional[Dict[str, str]]:
    if item is None:
        return None
    return {"title": item.title, "slug": item.slug}


class SiteRenderer:
    """Renders the list page and one detail page per item."""

    def __init__(
        self,
        layout: Optional[Layout] = None,
        description: str = "",
        site_title: str = "Blog",
        back_label: str = "← 返回首页",
        transliterate: Optional[Transliterator] = None,
    ):
        """Initialize SiteRenderer.

        Args:
            layout: Page templates (default: bundled Jinja2 templates)
            description: Site motto shown on the list page
            site_title: Heading of the list page
            back_label: Text of the link back to the list page
            transliterate: Used when slugging heading anchors
        """
        self.layout = layout or Layout()
        self.description = description
        self.site_title = site_title
        self.back_label = back_label
        self.transliterate = transliterate

    def render(self, items: List[PublishItem]) -> List[OutputFile]:
        """Render every page of the site.

        Args:
            items: Validated items with unique identifiers

        Returns:
            index.html followed by one <slug>.html per item, newest first
        """
        ordered = sort_items(items)
        outputs = [OutputFile(INDEX_PATH, self.render_index(ordered).encode("utf-8"))]

        for position, item in enumerate(ordered):
            # Older posts sit later in the list
            older = ordered[position + 1] if position + 1 < len(ordered) else None
            newer = ordered[position - 1] if position > 0 else None
            page = self.render_post(item, prev_item=older, next_item=newer)
            outputs.append(OutputFile(post_path(item.slug), page.encode("utf-8")))

        logger.info("Rendered %d pages", len(outputs))
        return outputs

    def index_model(self, ordered: List[PublishItem]) -> Dict[str, Any]:
        return {
            "site_title": self.site_title,
            "description": self.description,
            "posts": [
                {
                    "title": item.title,
                    "slug": item.slug,
                    "date": item.date,
                    "excerpt": item.excerpt,
                    "search_text": item.search_text,
                }
                for item in ordered
            ],
        }

    def post_model(
        self,
        item: PublishItem,
        prev_item: Optional[PublishItem] = None,
        next_item: Optional[PublishItem] = None,
    ) -> Dict[str, Any]:
        timestamp = item.date.replace("-", "")
        content, outline = add_heading_anchors(item.html, self.transliterate, timestamp)
        return {
            "title": item.title,
            "date": item.date,
            "content": content,
            "outline": [node.to_dict() for node in outline],
            "prev_post": _link(prev_item),
            "next_post": _link(next_item),
            "back_label": self.back_label,
        }

    def render_index(self, ordered: List[PublishItem]) -> str:
        return self.layout.index(self.index_model(ordered))

    def render_post(
        self,
        item: PublishItem,
        prev_item: Optional[PublishItem] = None,
        next_item: Optional[PublishItem] = None,
    ) -> str:
        return self.layout.post(self.post_model(item, prev_item, next_item))


def stage(outputs: List[OutputFile], directory: Path) -> List[Path]:
    """Write outputs to a local staging directory.

    Returns:
        Paths of the written files
    """
    directory = Path(directory)
    written = []
    for output in outputs:
        target = directory / output.path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(output.content)
        written.append(target)

    logger.info("Staged %d files in %s", len(written), directory)
    return written
