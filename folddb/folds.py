"""Folds: policy-enforcing interfaces over a set of fields."""

from __future__ import annotations

import dataclasses
from typing import Any

from .fields import Field

FoldId = str


@dataclasses.dataclass
class Fold:
    """A set of fields owned by one user, optionally behind a payment gate."""

    id: FoldId
    owner_id: str
    fields: list[Field] = dataclasses.field(default_factory=list)
    payment_gate: Any = None

    def with_payment_gate(self, gate: Any) -> Fold:
        """Return a copy of this fold carrying ``gate``."""
        return dataclasses.replace(self, fields=list(self.fields), payment_gate=gate)

    def field(self, name: str) -> Field | None:
        """The first field called ``name``, or None."""
        return next((f for f in self.fields if f.name == name), None)