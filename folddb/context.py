"""The access context a caller presents when evaluating a fold."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class AccessContext:
    """Caller identity, trust distance, held public keys and paid folds.

    A trust distance of 0 means the caller is the data owner.
    """

    user_id: str
    trust_distance: int = 0
    public_keys: list[bytes] = field(default_factory=list)
    paid_folds: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if isinstance(self.trust_distance, bool) or not isinstance(
            self.trust_distance, int
        ):
            raise TypeError("trust_distance must be an int")
        if self.trust_distance < 0:
            raise ValueError("trust_distance must not be negative")

    @classmethod
    def owner(cls, user_id: str) -> AccessContext:
        """A context for the data owner: trust distance 0."""
        return cls(user_id, 0)