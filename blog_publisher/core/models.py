"""Data models for Blog Publisher."""

import hashlib
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class DocumentContext:
    """Cheapest possible document reference - just location.

    Content is read through the DocumentStore when needed.
    """
    path: Path

    @property
    def title(self) -> str:
        """Titles come from the document identity, not its front-matter."""
        return self.path.stem


@dataclass
class PublishItem:
    """A document accepted for publishing in the current run."""
    context: DocumentContext
    title: str
    date: str
    slug: str
    content: str
    html: str
    excerpt: str
    search_text: str

    @property
    def path(self) -> Path:
        """Convenience accessor for the source document's path."""
        return self.context.path


@dataclass
class MetadataUpdate:
    """Front-matter keys to write back into a source document."""
    context: DocumentContext
    patch: Dict[str, Any]


@dataclass
class NoteError:
    """A diagnostic for a document at any phase.

    kind is one of: skipped, malformed, collision, persist.
    """
    path: Path
    error: str
    kind: str = "malformed"
    title: Optional[str] = None


@dataclass
class ExtractionResult:
    """Everything the extractor learned from one pass over the store."""
    items: List[PublishItem] = field(default_factory=list)
    updates: List[MetadataUpdate] = field(default_factory=list)
    diagnostics: List[NoteError] = field(default_factory=list)


@dataclass
class OutlineNode:
    """A heading in a page outline; children are deeper headings."""
    level: int
    text: str
    anchor: str
    children: List["OutlineNode"] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "text": self.text,
            "anchor": self.anchor,
            "children": [child.to_dict() for child in self.children],
        }


@dataclass(frozen=True)
class OutputFile:
    """A rendered page, the unit of synchronization."""
    path: str
    content: bytes

    @property
    def blob_sha(self) -> str:
        """Git blob hash of the content, comparable to remote tree entries."""
        header = f"blob {len(self.content)}\0".encode("ascii")
        return hashlib.sha1(header + self.content).hexdigest()


@dataclass(frozen=True)
class RemoteTreeState:
    """Snapshot of the remote branch, read fresh for every sync."""
    head_sha: str
    tree_sha: str
    blobs: Dict[str, str]

    def blob_sha(self, path: str) -> Optional[str]:
        return self.blobs.get(path)


class SyncStatus(str, Enum):
    WRITTEN = "written"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class FileOutcome:
    """What happened to one output file during sync."""
    path: str
    status: SyncStatus
    message: str = ""


@dataclass(frozen=True)
class SyncResult:
    """Per-file outcomes of one sync, in output order."""
    outcomes: Tuple[FileOutcome, ...]
    commit_sha: Optional[str] = None
    atomic: bool = True

    @property
    def success(self) -> bool:
        return all(o.status is not SyncStatus.FAILED for o in self.outcomes)

    def paths_with(self, status: SyncStatus) -> List[str]:
        return [o.path for o in self.outcomes if o.status is status]

    @property
    def written(self) -> List[str]:
        return self.paths_with(SyncStatus.WRITTEN)

    @property
    def skipped(self) -> List[str]:
        return self.paths_with(SyncStatus.SKIPPED)

    @property
    def failed(self) -> List[FileOutcome]:
        return [o for o in self.outcomes if o.status is SyncStatus.FAILED]


@dataclass
class PublishResult:
    """Result of a publish operation."""
    published_titles: List[str] = field(default_factory=list)
    failures: List[NoteError] = field(default_factory=list)
    collisions: Dict[str, List[str]] = field(default_factory=dict)
    output_paths: List[str] = field(default_factory=list)
    staged_paths: List[Path] = field(default_factory=list)
    sync: Optional[SyncResult] = None
    error: Optional[str] = None
    message: Optional[str] = None
    pushed: bool = False

    @property
    def success(self) -> bool:
        if self.error is not None:
            return False
        return self.sync is None or self.sync.success

    def summary(self) -> List[str]:
        """Human-readable lines for a presentation layer."""
        lines = [f"{f.kind}: {f.path.name} - {f.error}" for f in self.failures]

        if self.error is not None:
            lines.append(f"Publish aborted: {self.error}")
            return lines

        if self.message:
            lines.append(self.message)

        if self.sync is not None:
            for path in self.sync.written:
                lines.append(f"Published: {path}")
            for outcome in self.sync.failed:
                lines.append(f"Failed: {outcome.path} - {outcome.message}")
            if self.sync.success:
                lines.append("Blog published successfully.")
            else:
                failed = ", ".join(o.path for o in self.sync.failed)
                lines.append(f"Blog partially published; failed files: {failed}")
        elif self.output_paths:
            lines.append(f"Staged {len(self.output_paths)} files (not pushed).")

        return lines
