"""Core components for Blog Publisher."""

from blog_publisher.core.exceptions import (
    ConfigurationError,
    DocumentError,
    PublishCancelled,
    PublisherError,
    RemoteConflictError,
    RemoteError,
    RemoteWriteError,
    ValidationError,
)
from blog_publisher.core.models import (
    DocumentContext,
    ExtractionResult,
    NoteError,
    OutputFile,
    PublishItem,
    PublishResult,
    SyncResult,
)
from blog_publisher.core.config import PublisherConfig, load_config
from blog_publisher.core.store import DocumentStore, VaultStore
from blog_publisher.core.extractor import ItemExtractor
from blog_publisher.core.validator import ValidationResult, validate
from blog_publisher.core.publisher import Publisher, create_publisher_from_config

__all__ = [
    "ConfigurationError",
    "DocumentError",
    "PublishCancelled",
    "PublisherError",
    "RemoteConflictError",
    "RemoteError",
    "RemoteWriteError",
    "ValidationError",
    "DocumentContext",
    "ExtractionResult",
    "NoteError",
    "OutputFile",
    "PublishItem",
    "PublishResult",
    "SyncResult",
    "PublisherConfig",
    "load_config",
    "DocumentStore",
    "VaultStore",
    "ItemExtractor",
    "ValidationResult",
    "validate",
    "Publisher",
    "create_publisher_from_config",
]
