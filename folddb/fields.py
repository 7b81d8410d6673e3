"""Fields, their trust-distance policies and capability constraints."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .labels import SecurityLabel
from .values import FieldValue


def _check_count(name: str, number: int) -> None:
    if isinstance(number, bool) or not isinstance(number, int):
        raise TypeError(f"{name} must be an int")
    if number < 0:
        raise ValueError(f"{name} must not be negative")


@dataclass(frozen=True)
class TrustDistancePolicy:
    """Writable when distance <= write_max, readable when distance <= read_max."""

    write_max: int
    read_max: int

    def __post_init__(self) -> None:
        _check_count("write_max", self.write_max)
        _check_count("read_max", self.read_max)

    def can_write(self, trust_distance: int) -> bool:
        return trust_distance <= self.write_max

    def can_read(self, trust_distance: int) -> bool:
        return trust_distance <= self.read_max


class CapabilityKind(Enum):
    """Whether a capability grants write or read access."""

    WRITE = "Write"
    READ = "Read"


@dataclass
class CapabilityConstraint:
    """A key-bound capability with a quota that decrements on each use."""

    public_key: bytes
    remaining_quota: int
    kind: CapabilityKind

    def __post_init__(self) -> None:
        self.public_key = bytes(self.public_key)
        _check_count("remaining_quota", self.remaining_quota)


@dataclass
class Field:
    """A named value with its label, policy and optional derivation source.

    When ``transform_id`` is set, the value is derived from ``source_fold_id``;
    ``source_field_name`` defaults to this field's own name.
    """

    name: str
    value: FieldValue
    label: SecurityLabel
    policy: TrustDistancePolicy
    capabilities: list[CapabilityConstraint] = field(default_factory=list)
    transform_id: str | None = None
    source_fold_id: str | None = None
    source_field_name: str | None = None