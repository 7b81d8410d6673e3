"""An append-only log of every value written to every field."""

from __future__ import annotations

import dataclasses
from collections import defaultdict
from datetime import datetime, timezone

from .values import FieldValue


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclasses.dataclass(frozen=True)
class StoreEntry:
    """One immutable write: the value, who wrote it, when, and its signature."""

    fold_id: str
    field_name: str
    value: FieldValue
    writer_id: str
    signature: bytes = b""
    timestamp: datetime = dataclasses.field(default_factory=_utc_now)
    version: int = 0


class AppendOnlyStore:
    """Keeps every version of every field; nothing is modified or removed."""

    def __init__(self) -> None:
        self._entries: defaultdict[tuple[str, str], list[StoreEntry]] = defaultdict(
            list
        )

    def append(self, entry: StoreEntry) -> int:
        """Store ``entry`` under the next version number and return that number."""
        history = self._entries[(entry.fold_id, entry.field_name)]
        version = len(history)
        history.append(dataclasses.replace(entry, version=version))
        return version

    def get_current(self, fold_id: str, field_name: str) -> StoreEntry | None:
        """The latest entry for a field, or None if it was never written."""
        history = self._entries.get((fold_id, field_name))
        return history[-1] if history else None

    def get_history(self, fold_id: str, field_name: str) -> tuple[StoreEntry, ...]:
        """All entries for a field in write order."""
        return tuple(self._entries.get((fold_id, field_name), ()))

    def get_version(
        self, fold_id: str, field_name: str, version: int
    ) -> StoreEntry | None:
        """A specific version of a field, or None if it does not exist."""
        if version < 0:
            raise ValueError("version must not be negative")
        history = self._entries.get((fold_id, field_name), [])
        return history[version] if version < len(history) else None

    def total_entries(self) -> int:
        """Number of entries across all fields."""
        return sum(len(history) for history in self._entries.values())