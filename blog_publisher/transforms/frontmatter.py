"""Front-matter codec for Blog Publisher.

Reads and rewrites the YAML metadata block at the top of a document.
Merging re-serializes the whole resulting mapping so that a second merge
of the same patch is a no-op.
"""

import re
from typing import Any, Dict, Mapping, Tuple

import yaml

from blog_publisher.core.exceptions import FrontmatterError

# Opening marker on the first line, closing marker on its own line
FRONTMATTER_PATTERN = re.compile(
    r'\A---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)',
    re.DOTALL | re.MULTILINE,
)


class _BlockDumper(yaml.SafeDumper):
    """Indents sequence items under their key (`tags:\\n  - blog`)."""

    def increase_indent(self, flow=False, indentless=False):
        return super().increase_indent(flow, False)


def parse(text: str) -> Tuple[Dict[str, Any], str]:
    """Split a document into its metadata mapping and body.

    Args:
        text: Full document text

    Returns:
        Tuple of (metadata, body). Without a block: ({}, text)

    Raises:
        FrontmatterError: If the block is not valid YAML or not a mapping
    """
    match = FRONTMATTER_PATTERN.match(text)
    if match is None:
        return {}, text

    try:
        metadata = yaml.safe_load(match.group(1))
    except yaml.YAMLError as e:
        raise FrontmatterError(f"Invalid YAML front-matter: {e}") from e

    if metadata is None:
        metadata = {}
    if not isinstance(metadata, dict):
        raise FrontmatterError("Front-matter is not a mapping")

    return metadata, text[match.end():]


def strip(text: str) -> str:
    """Return the body without its metadata block, ignoring YAML errors."""
    match = FRONTMATTER_PATTERN.match(text)
    return text[match.end():] if match else text


def dump(metadata: Mapping[str, Any]) -> str:
    """Serialize a mapping as a flat block, keys in insertion order."""
    if not metadata:
        return ""
    return yaml.dump(
        dict(metadata),
        Dumper=_BlockDumper,
        default_flow_style=False,
        allow_unicode=True,
        sort_keys=False,
    )


def merge(text: str, patch: Mapping[str, Any]) -> str:
    """Apply a patch to a document's metadata and rewrite the block.

    The existing block is replaced in place; everything after it is kept
    byte-for-byte. Without a block, one is inserted before the body.

    Args:
        text: Full document text
        patch: Keys to add or overwrite

    Returns:
        The new document text
    """
    metadata, _ = parse(text)
    metadata.update(patch)
    block = f"---\n{dump(metadata)}---\n"

    match = FRONTMATTER_PATTERN.match(text)
    if match is None:
        return f"{block}\n{text}"
    return block + text[match.end():]
