"""Values stored in or derived by fold fields."""

from __future__ import annotations

import json as _json
import math
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

I64_MIN = -(2**63)
I64_MAX = 2**63 - 1


class ValueKind(Enum):
    """The variants a field value can take."""

    STRING = "String"
    INTEGER = "Integer"
    FLOAT = "Float"
    BOOLEAN = "Boolean"
    BYTES = "Bytes"
    JSON = "Json"
    NULL = "Null"


def _is_plain_int(obj: Any) -> bool:
    return isinstance(obj, int) and not isinstance(obj, bool)


def _format_float(number: float) -> str:
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "inf" if number > 0 else "-inf"
    text = format(Decimal(repr(number)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


@dataclass(frozen=True)
class FieldValue:
    """A tagged value: the kind says how ``value`` is to be read."""

    kind: ValueKind
    value: Any = None

    def __post_init__(self) -> None:
        kind, value = self.kind, self.value
        if kind is ValueKind.STRING:
            if not isinstance(value, str):
                raise TypeError("String value must be a str")
        elif kind is ValueKind.INTEGER:
            if not _is_plain_int(value):
                raise TypeError("Integer value must be an int")
            if not I64_MIN <= value <= I64_MAX:
                raise ValueError("Integer value out of 64-bit range")
        elif kind is ValueKind.FLOAT:
            if not (_is_plain_int(value) or isinstance(value, float)):
                raise TypeError("Float value must be a number")
            object.__setattr__(self, "value", float(value))
        elif kind is ValueKind.BOOLEAN:
            if not isinstance(value, bool):
                raise TypeError("Boolean value must be a bool")
        elif kind is ValueKind.BYTES:
            if not isinstance(value, (bytes, bytearray, memoryview)):
                raise TypeError("Bytes value must be bytes-like")
            object.__setattr__(self, "value", bytes(value))
        elif kind is ValueKind.NULL:
            if value is not None:
                raise ValueError("Null carries no value")

    @classmethod
    def string(cls, text: str) -> FieldValue:
        return cls(ValueKind.STRING, text)

    @classmethod
    def integer(cls, number: int) -> FieldValue:
        return cls(ValueKind.INTEGER, number)

    @classmethod
    def float(cls, number: float) -> FieldValue:
        return cls(ValueKind.FLOAT, number)

    @classmethod
    def boolean(cls, flag: bool) -> FieldValue:
        return cls(ValueKind.BOOLEAN, flag)

    @classmethod
    def bytes(cls, data: bytes) -> FieldValue:
        return cls(ValueKind.BYTES, data)

    @classmethod
    def json(cls, data: Any) -> FieldValue:
        return cls(ValueKind.JSON, data)

    @classmethod
    def null(cls) -> FieldValue:
        return cls(ValueKind.NULL)

    @classmethod
    def from_json(cls, data: Any) -> FieldValue:
        """Map a decoded JSON value onto the closest scalar kind."""
        if isinstance(data, str):
            return cls.string(data)
        if isinstance(data, bool):
            return cls.boolean(data)
        if isinstance(data, int):
            if I64_MIN <= data <= I64_MAX:
                return cls.integer(data)
            return cls.float(float(data))
        if isinstance(data, float):
            return cls.float(data)
        if data is None:
            return cls.null()
        return cls.json(data)

    def to_json(self) -> Any:
        """Return the JSON form; bytes, null and non-finite floats become None."""
        if self.kind is ValueKind.FLOAT:
            return self.value if math.isfinite(self.value) else None
        if self.kind in (ValueKind.BYTES, ValueKind.NULL):
            return None
        return self.value

    def __str__(self) -> str:
        kind = self.kind
        if kind is ValueKind.STRING:
            return self.value
        if kind is ValueKind.INTEGER:
            return str(self.value)
        if kind is ValueKind.FLOAT:
            return _format_float(self.value)
        if kind is ValueKind.BOOLEAN:
            return "true" if self.value else "false"
        if kind is ValueKind.BYTES:
            return f"<{len(self.value)} bytes>"
        if kind is ValueKind.JSON:
            return _json.dumps(
                self.value, separators=(",", ":"), sort_keys=True, ensure_ascii=False
            )
        return "null"