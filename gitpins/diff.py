"""
Change presentation for gitpins.

Every pin, repository, version and hash bundle exposes `properties()`: an
ordered list of (label, value) strings. Comparing two property lists shows
a user what an update changed.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .domain.version import NOT_AVAILABLE

Properties = Sequence[Tuple[str, str]]


@dataclass(frozen=True)
class PropertyChange:
    """One changed property."""
    label: str
    old: str
    new: str

    def to_dict(self):
        return {'label': self.label, 'old': self.old, 'new': self.new}


def properties_of(entity) -> List[Tuple[str, str]]:
    """Property list of an entity, or an empty list for None."""
    if entity is None:
        return []
    return list(entity.properties())


def diff(old: Optional[Properties], new: Properties) -> List[PropertyChange]:
    """
    Compare two property lists.

    Labels keep the order they have in `new`, followed by labels that only
    exist in `old`. A label missing on one side counts as N/A there.
    """
    old_values = dict(old or [])
    new_values = dict(new)

    labels = [label for label, _ in new]
    labels += [label for label, _ in (old or []) if label not in new_values]

    changes = []
    for label in labels:
        before = old_values.get(label, NOT_AVAILABLE)
        after = new_values.get(label, NOT_AVAILABLE)
        if before != after:
            changes.append(PropertyChange(label=label, old=before, new=after))
    return changes


def diff_entities(old, new) -> List[PropertyChange]:
    """`diff` for two entities with a `properties()` method (old may be None)."""
    return diff(properties_of(old), properties_of(new))
