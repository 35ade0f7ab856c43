"""
Blog Publisher - Publish tagged notes as a static blog on GitHub

A small library for turning a vault of Markdown notes into an HTML
blog and pushing it to a GitHub repository, with support for:
- Identifier generation for mixed-script titles
- Front-matter write-back of generated identifiers and dates
- Duplicate identifier detection before anything is rendered
- Atomic single-commit publishing with unchanged-file skipping
"""

from blog_publisher.core.models import NoteError, OutputFile, PublishItem, PublishResult, SyncResult, SyncStatus
from blog_publisher.core.config import PublisherConfig, load_config
from blog_publisher.core.store import VaultStore
from blog_publisher.core.extractor import ItemExtractor
from blog_publisher.core.publisher import Publisher, create_publisher_from_config
from blog_publisher.core.slugs import slugify

__version__ = "0.1.0"

__all__ = [
    "NoteError",
    "OutputFile",
    "PublishItem",
    "PublishResult",
    "SyncResult",
    "SyncStatus",
    "PublisherConfig",
    "load_config",
    "VaultStore",
    "ItemExtractor",
    "Publisher",
    "create_publisher_from_config",
    "slugify",
]
