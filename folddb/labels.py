"""Security labels ordered as a lattice by level."""

from __future__ import annotations

from dataclasses import dataclass

MAX_LEVEL = 2**32 - 1


@dataclass(frozen=True)
class SecurityLabel:
    """A label with a numeric level and a descriptive category.

    Ordering compares levels only; equality compares level and category.
    """

    level: int
    category: str

    def __post_init__(self) -> None:
        if isinstance(self.level, bool) or not isinstance(self.level, int):
            raise TypeError("level must be an int")
        if not 0 <= self.level <= MAX_LEVEL:
            raise ValueError(f"level must be between 0 and {MAX_LEVEL}")

    def flows_to(self, other: SecurityLabel) -> bool:
        """True when information may flow from this label to ``other``."""
        return self.level <= other.level

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, SecurityLabel):
            return NotImplemented
        return self.level < other.level

    def __le__(self, other: object) -> bool:
        if not isinstance(other, SecurityLabel):
            return NotImplemented
        return self.level <= other.level

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, SecurityLabel):
            return NotImplemented
        return self.level > other.level

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, SecurityLabel):
            return NotImplemented
        return self.level >= other.level