"""Document stores: where publishable Markdown comes from."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from blog_publisher.core.exceptions import FrontmatterError
from blog_publisher.core.models import DocumentContext
from blog_publisher.transforms import frontmatter

logger = logging.getLogger(__name__)


class DocumentStore(Protocol):
    """Capability the publisher needs from the host note store."""

    def list_tagged(self, tag: str) -> List[DocumentContext]:
        """Return every document carrying the tag."""

    def read(self, document: DocumentContext) -> str:
        """Return the raw document text."""

    def read_metadata(self, document: DocumentContext) -> Dict[str, Any]:
        """Return the document's front-matter mapping."""

    def write(self, document: DocumentContext, text: str) -> None:
        """Replace the raw document text."""


def extract_tags(metadata: Dict[str, Any]) -> List[str]:
    """Extract all tags from front-matter.

    Handles both list and string formats, with or without a leading '#'.

    Args:
        metadata: Parsed front-matter dict

    Returns:
        List of tag strings
    """
    tags = []

    if 'tags' in metadata:
        tag_data = metadata['tags']
        if isinstance(tag_data, list):
            tags.extend(str(tag) for tag in tag_data if tag is not None)
        elif isinstance(tag_data, str):
            tags.extend(part for part in tag_data.replace(',', ' ').split() if part)

    return [tag.lstrip('#') for tag in tags]


def _is_hidden(relative_path: Path) -> bool:
    """Hidden files and anything under .obsidian, .trash and the like."""
    return any(part.startswith('.') for part in relative_path.parts)


class VaultStore:
    """DocumentStore over a directory of Markdown notes."""

    def __init__(
        self,
        vault_path: Path,
        source_dirs: Optional[List[str]] = None,
    ):
        """Initialize VaultStore.

        Args:
            vault_path: Path to the vault root
            source_dirs: Subdirectories within vault to scan (default: vault root)
        """
        self.vault_path = Path(vault_path)
        self.source_dirs = [
            self.vault_path / d for d in (source_dirs or ["."])
        ]

    def list_tagged(self, tag: str) -> List[DocumentContext]:
        """Find every note whose front-matter tags include tag.

        Notes are returned in path order so that runs are reproducible.
        Hidden directories (.obsidian, .trash) are not scanned.

        Raises:
            FileNotFoundError: If none of the source directories exist
        """
        existing_dirs = [d for d in self.source_dirs if d.exists()]

        for d in self.source_dirs:
            if not d.exists():
                logger.warning("Source directory not found: %s", d)

        if not existing_dirs:
            dirs = ', '.join(str(d) for d in self.source_dirs)
            raise FileNotFoundError(f"No source directories found: {dirs}")

        tagged = []
        for source_dir in existing_dirs:
            for note_path in sorted(source_dir.rglob("*.md")):
                if _is_hidden(note_path.relative_to(source_dir)):
                    continue
                document = DocumentContext(path=note_path)
                try:
                    metadata = self.read_metadata(document)
                except FrontmatterError as e:
                    # Surface it later through the extractor's diagnostics
                    logger.warning("Failed to parse %s: %s", note_path.name, e)
                    tagged.append(document)
                    continue
                except (UnicodeDecodeError, OSError) as e:
                    logger.warning("Skipping unreadable note %s: %s", note_path.name, e)
                    continue
                if tag in extract_tags(metadata):
                    tagged.append(document)

        return tagged

    def read(self, document: DocumentContext) -> str:
        return document.path.read_text(encoding='utf-8')

    def read_metadata(self, document: DocumentContext) -> Dict[str, Any]:
        metadata, _ = frontmatter.parse(self.read(document))
        return metadata

    def write(self, document: DocumentContext, text: str) -> None:
        document.path.write_text(text, encoding='utf-8')
