"""Exception hierarchy for Blog Publisher.

Fatal errors (configuration, validation, remote conflict, cancellation)
stop a publish run. Soft errors (DocumentError, RemoteWriteError) are
collected into the run report and never escape the orchestrator.
"""

from pathlib import Path
from typing import Dict, List, Optional


class PublisherError(Exception):
    """Base class for all publisher errors."""


class ConfigurationError(PublisherError):
    """Missing or invalid configuration; raised before any network call."""


class ValidationError(PublisherError):
    """Two or more items resolved to the same identifier."""

    def __init__(self, collisions: Dict[str, List[str]]):
        self.collisions = collisions
        details = "; ".join(
            f"{slug}: {', '.join(titles)}" for slug, titles in collisions.items()
        )
        super().__init__(f"Duplicate identifiers: {details}")


class DocumentError(PublisherError):
    """A single document cannot be published. The run continues without it."""

    def __init__(self, message: str, path: Optional[Path] = None, kind: str = "malformed"):
        self.path = path
        self.kind = kind
        super().__init__(message)


class FrontmatterError(DocumentError):
    """The front-matter block exists but is not a YAML mapping."""


class RemoteError(PublisherError):
    """A request to the remote repository failed."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class RemoteConflictError(RemoteError):
    """The branch moved while an atomic commit was being prepared."""


class RemoteWriteError(RemoteError):
    """Writing a single file failed in per-file mode."""


class PublishCancelled(PublisherError):
    """The caller cancelled the run before the branch was updated."""
