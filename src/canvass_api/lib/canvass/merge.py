"""Non-destructive merge of partial attribute payloads.

A payload may omit a field or send it as null; in both cases the stored value
wins. Only concrete values overwrite.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class MergeResult:
    """Outcome of merging a payload into a stored record.

    Attributes:
        supplied: Fields the payload carried with a non-null value.
        changes: Supplied fields whose value differs from the stored one,
            mapped to the new value.
    """

    supplied: frozenset[str] = frozenset()
    changes: dict[str, Any] = field(default_factory=dict)

    def changed(self, name: str) -> bool:
        return name in self.changes


def merge_attributes(
    current: Mapping[str, Any],
    incoming: Mapping[str, Any],
    fields: Iterable[str],
) -> MergeResult:
    """Compute which of ``fields`` the ``incoming`` payload overwrites.

    Args:
        current: Stored values keyed by field name (missing keys read as None).
        incoming: Partial payload.
        fields: Field names eligible for merging; anything else in the payload
            is ignored.

    Returns:
        MergeResult listing supplied fields and effective changes.
    """
    supplied: set[str] = set()
    changes: dict[str, Any] = {}
    for name in fields:
        value = incoming.get(name)
        if value is None:
            continue
        supplied.add(name)
        if current.get(name) != value:
            changes[name] = value
    return MergeResult(supplied=frozenset(supplied), changes=changes)


def apply_changes(target: object, changes: Mapping[str, Any]) -> None:
    """Set each changed attribute on ``target``."""
    for name, value in changes.items():
        setattr(target, name, value)
