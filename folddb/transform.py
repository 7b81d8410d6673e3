"""Transform definitions and their implementations."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Union

from .expr import TransformExpr
from .labels import SecurityLabel
from .values import FieldValue

TransformFn = Callable[[FieldValue], FieldValue]
Implementation = Union[TransformFn, TransformExpr]


class Reversibility(Enum):
    """Whether writes through a derived field can reach the source."""

    REVERSIBLE = "Reversible"
    IRREVERSIBLE = "Irreversible"


@dataclass(frozen=True)
class TransformDef:
    """Metadata for a transform deriving one field from another."""

    id: str
    name: str
    reversibility: Reversibility
    min_output_label: SecurityLabel
    input_type: str
    output_type: str

    @staticmethod
    def content_hash(name: str, input_type: str, output_type: str) -> str:
        """Hex SHA-256 over name, input type and output type."""
        hasher = hashlib.sha256()
        for part in (name, input_type, output_type):
            hasher.update(part.encode("utf-8"))
        return hasher.hexdigest()


class RegisteredTransform:
    """A definition paired with a forward and optional inverse implementation.

    Implementations are either callables or serializable expressions.
    """

    def __init__(
        self,
        definition: TransformDef,
        forward: Implementation,
        inverse: Implementation | None = None,
    ) -> None:
        self.definition = definition
        self._forward = forward
        self._inverse = inverse

    @classmethod
    def from_closure(
        cls,
        definition: TransformDef,
        forward: TransformFn,
        inverse: TransformFn | None = None,
    ) -> RegisteredTransform:
        if not callable(forward) or (inverse is not None and not callable(inverse)):
            raise TypeError("closure transforms take callables")
        return cls(definition, forward, inverse)

    @classmethod
    def from_expr(
        cls,
        definition: TransformDef,
        forward: TransformExpr,
        inverse: TransformExpr | None = None,
    ) -> RegisteredTransform:
        if not isinstance(forward, TransformExpr) or (
            inverse is not None and not isinstance(inverse, TransformExpr)
        ):
            raise TypeError("expression transforms take TransformExpr values")
        return cls(definition, forward, inverse)

    @staticmethod
    def _run(impl: Implementation, value: FieldValue) -> FieldValue:
        if isinstance(impl, TransformExpr):
            return impl.evaluate(value)
        return impl(value)

    def apply(self, value: FieldValue) -> FieldValue:
        return self._run(self._forward, value)

    def apply_inverse(self, value: FieldValue) -> FieldValue | None:
        """The inverse result, or None when there is no inverse."""
        if self._inverse is None:
            return None
        return self._run(self._inverse, value)

    def has_inverse(self) -> bool:
        return self._inverse is not None

    def forward_expr(self) -> TransformExpr | None:
        return self._forward if isinstance(self._forward, TransformExpr) else None

    def inverse_expr(self) -> TransformExpr | None:
        if isinstance(self._forward, TransformExpr):
            return self._inverse  # type: ignore[return-value]
        return None