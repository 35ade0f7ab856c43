"""Duplicate identifier detection. Any collision blocks the whole run."""

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, List

from blog_publisher.core.exceptions import ValidationError
from blog_publisher.core.models import NoteError, PublishItem
from blog_publisher.core.slugs import RESERVED_SLUGS


@dataclass
class ValidationResult:
    """Colliding identifiers mapped to the items that share them.

    An item using a reserved identifier collides with the page that owns it.
    """
    collisions: Dict[str, List[PublishItem]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.collisions

    def titles(self) -> Dict[str, List[str]]:
        return {slug: [item.title for item in items] for slug, items in self.collisions.items()}

    def diagnostics(self) -> List[NoteError]:
        """One diagnostic per colliding item."""
        errors = []
        for slug, items in self.collisions.items():
            if slug in RESERVED_SLUGS:
                message = f"Identifier '{slug}' is reserved for the post list"
            else:
                message = f"Identifier '{slug}' is shared by: {', '.join(item.title for item in items)}"
            for item in items:
                errors.append(NoteError(path=item.path, error=message, kind="collision", title=item.title))
        return errors

    def raise_for_collisions(self) -> None:
        if self.collisions:
            raise ValidationError(self.titles())


def validate(items: List[PublishItem]) -> ValidationResult:
    """Group items by identifier and report every group with more than one
    member, plus any group using a reserved identifier."""
    groups: Dict[str, List[PublishItem]] = OrderedDict()
    for item in items:
        groups.setdefault(item.slug, []).append(item)

    return ValidationResult(
        collisions={
            slug: group for slug, group in groups.items()
            if len(group) > 1 or slug in RESERVED_SLUGS
        }
    )
