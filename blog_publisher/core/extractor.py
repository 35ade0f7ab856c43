"""Item extraction: turn tagged documents into publish items."""

import datetime
import logging
import re
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional, Tuple

from blog_publisher.core.exceptions import DocumentError
from blog_publisher.core.models import (
    DocumentContext,
    ExtractionResult,
    MetadataUpdate,
    NoteError,
    PublishItem,
)
from blog_publisher.core.slugs import RESERVED_SLUGS, is_valid_slug, slugify
from blog_publisher.core.store import DocumentStore, extract_tags
from blog_publisher.render.markdown import Renderer, render_markdown
from blog_publisher.render.outline import html_text
from blog_publisher.transforms import frontmatter
from blog_publisher.transforms.transliterate import Transliterator

logger = logging.getLogger(__name__)

DATE_FIELDS = ("month", "date")
SLUG_FIELD = "slug"
EXCERPT_LENGTH = 200

YYMM_PATTERN = re.compile(r'^(\d{2})(\d{2})$')
YEAR_MONTH_PATTERN = re.compile(r'^(\d{4})-(\d{1,2})$')
FULL_DATE_PATTERN = re.compile(r'^(\d{4})-(\d{1,2})-(\d{1,2})(?:[ T].*)?$')

# Image markup: ![alt](url) and Obsidian embeds ![[file.png]]
IMAGE_PATTERN = re.compile(r'!\[\[[^\]]*\]\]|!\[[^\]]*\]\([^)]*\)')
WIKILINK_PATTERN = re.compile(r'\[\[([^\]|]+)(?:\|([^\]]+))?\]\]')


def normalize_date(value: Any) -> str:
    """Normalize a month-or-date value to YYYY-MM or YYYY-MM-DD.

    Accepts YYMM (2401), YYYY-MM, YYYY-MM-DD (optionally with a time) and
    date/datetime objects.

    Raises:
        DocumentError: If the value has the wrong shape
    """
    if isinstance(value, datetime.datetime):
        return value.strftime('%Y-%m-%d')
    if isinstance(value, datetime.date):
        return value.strftime('%Y-%m-%d')
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise DocumentError(f"Unrecognized date value: {value!r}")

    text = f"{value:04d}" if isinstance(value, int) else value.strip()

    match = YYMM_PATTERN.match(text)
    if match:
        year, month, day = 2000 + int(match.group(1)), int(match.group(2)), None
    else:
        match = YEAR_MONTH_PATTERN.match(text) or FULL_DATE_PATTERN.match(text)
        if match is None:
            raise DocumentError(f"Unrecognized date value: {value!r}")
        year, month = int(match.group(1)), int(match.group(2))
        day = int(match.group(3)) if match.re is FULL_DATE_PATTERN else None

    if not 1 <= month <= 12:
        raise DocumentError(f"Month out of range in date value: {value!r}")

    if day is None:
        return f"{year:04d}-{month:02d}"

    try:
        return datetime.date(year, month, day).strftime('%Y-%m-%d')
    except ValueError as e:
        raise DocumentError(f"Invalid date value {value!r}: {e}") from e


def strip_images(body: str) -> str:
    return IMAGE_PATTERN.sub('', body)


def search_source(body: str) -> str:
    """Markdown whose rendered text is what readers can search for.

    Images and embeds are dropped; wikilinks become their label.
    """
    text = strip_images(body)
    return WIKILINK_PATTERN.sub(lambda m: m.group(2) or m.group(1), text)


def make_excerpt(text: str, length: int = EXCERPT_LENGTH) -> str:
    if len(text) <= length:
        return text
    return text[:length].rstrip() + "..."


class ItemExtractor:
    """Builds the run's publish items from a document store.

    Handles:
    - Tag filtering
    - Date normalization and imputation
    - Identifier lookup and derivation
    - Excerpt and search text
    """

    def __init__(
        self,
        store: DocumentStore,
        tag: str = "blog",
        transliterate: Optional[Transliterator] = None,
        render: Optional[Renderer] = None,
        clock: Optional[Callable[[], datetime.datetime]] = None,
        max_workers: int = 4,
    ):
        """Initialize ItemExtractor.

        Args:
            store: Source of documents
            tag: Tag a document must carry to be published
            transliterate: Used when deriving identifiers from titles
            render: Markdown to HTML function (default: GitHub-flavoured)
            clock: Returns "now" for date imputation
            max_workers: Concurrent document reads
        """
        self.store = store
        self.tag = tag
        self.transliterate = transliterate
        self.render = render or render_markdown
        self.clock = clock or datetime.datetime.now
        self.max_workers = max(1, max_workers)

    def extract(self) -> ExtractionResult:
        """Read every tagged document and build the run's items.

        Returns:
            ExtractionResult with items in listing order, the metadata
            updates to persist, and diagnostics for excluded documents
        """
        documents = self.store.list_tagged(self.tag)
        logger.info("Found %d documents tagged '%s'", len(documents), self.tag)

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            reads = [pool.submit(self._read, document) for document in documents]

        result = ExtractionResult()
        for document, read in zip(documents, reads):
            try:
                item, patch = self.extract_one(document, read.result())
            except DocumentError as e:
                logger.warning("Excluding %s: %s", document.path.name, e)
                result.diagnostics.append(
                    NoteError(path=document.path, error=str(e), kind=e.kind, title=document.title)
                )
                continue

            result.items.append(item)
            if patch:
                result.updates.append(MetadataUpdate(context=document, patch=patch))

        return result

    def extract_one(self, document: DocumentContext, text: str) -> Tuple[PublishItem, Dict[str, Any]]:
        """Build one item and the metadata patch it needs persisted.

        Raises:
            DocumentError: If the document must be excluded from the run
        """
        metadata, body = frontmatter.parse(text)
        title = document.title
        patch: Dict[str, Any] = {}

        if self.tag not in extract_tags(metadata):
            raise DocumentError(f"Missing required tag: {self.tag}", document.path, kind="skipped")

        date, imputed = self._resolve_date(metadata)
        if imputed:
            patch["month"] = date

        slug = metadata.get(SLUG_FIELD)
        if slug is None:
            slug = slugify(title, self.transliterate)
            patch[SLUG_FIELD] = slug
        else:
            slug = str(slug).strip()

        if not slug:
            raise DocumentError("Empty identifier", document.path)
        if not is_valid_slug(slug):
            raise DocumentError(f"Invalid identifier: {slug!r}", document.path)
        if slug in RESERVED_SLUGS:
            raise DocumentError(f"Identifier {slug!r} is reserved for the post list", document.path)

        search_text = html_text(self.render(search_source(body)))
        item = PublishItem(
            context=document,
            title=title,
            date=date,
            slug=slug,
            content=body,
            html=self.render(body),
            excerpt=make_excerpt(search_text),
            search_text=search_text,
        )
        return item, patch

    def _read(self, document: DocumentContext) -> str:
        try:
            return self.store.read(document)
        except (UnicodeDecodeError, OSError) as e:
            raise DocumentError(f"Cannot read document: {e}", document.path) from e

    def _resolve_date(self, metadata: Dict[str, Any]) -> Tuple[str, bool]:
        for key in DATE_FIELDS:
            value = metadata.get(key)
            if value is not None and value != "":
                return normalize_date(value), False
        return self.clock().strftime('%Y-%m'), True
