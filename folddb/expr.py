"""Safe, serializable transform expressions.

Expressions are deterministic, non-Turing-complete and content-addressed:
the SHA-256 of their JSON form identifies them.
"""

from __future__ import annotations

import hashlib
import json
import math
from dataclasses import dataclass
from typing import Any, Callable

from .values import I64_MAX, I64_MIN, FieldValue, ValueKind


def _round_half_away(x: float) -> float:
    if not math.isfinite(x):
        return x
    return math.copysign(math.floor(abs(x) + 0.5), x)


def _to_i64(x: float) -> int:
    """Saturating float-to-int conversion that truncates toward zero."""
    if math.isnan(x):
        return 0
    if x >= I64_MAX:
        return I64_MAX
    if x <= I64_MIN:
        return I64_MIN
    return int(x)


def _trunc_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def _is_number(obj: Any) -> bool:
    return isinstance(obj, (int, float)) and not isinstance(obj, bool)


def _numbers(items: list[Any]) -> list[float]:
    return [float(item) for item in items if _is_number(item)]


def _round1(x: float) -> float:
    return _round_half_away(x * 10.0) / 10.0


def _float_json(x: float) -> float | None:
    return x if math.isfinite(x) else None


def _as_number(value: FieldValue) -> float | None:
    if value.kind in (ValueKind.FLOAT, ValueKind.INTEGER):
        return float(value.value)
    return None


def _json_list(value: FieldValue) -> list[Any] | None:
    if value.kind is ValueKind.JSON and isinstance(value.value, list):
        return value.value
    return None


def _json_dict(value: FieldValue) -> dict[str, Any] | None:
    if value.kind is ValueKind.JSON and isinstance(value.value, dict):
        return value.value
    return None


@dataclass(frozen=True)
class RangeLabel:
    """Label assigned to values in the inclusive range [min, max]."""

    min: int
    max: int
    label: str

    def to_json(self) -> dict[str, Any]:
        return {"min": self.min, "max": self.max, "label": self.label}


class TransformExpr:
    """A pure function from one field value to another."""

    def evaluate(self, value: FieldValue) -> FieldValue:
        raise NotImplementedError

    def to_json(self) -> Any:
        """The tagged JSON form of this expression."""
        return type(self).__name__

    def content_hash(self) -> str:
        """Hex SHA-256 of the compact JSON form."""
        text = json.dumps(self.to_json(), separators=(",", ":"), ensure_ascii=False)
        return hashlib.sha256(text.encode("utf-8")).hexdigest()


def _arith(value: FieldValue, op: Callable[[float], float]) -> FieldValue:
    number = _as_number(value)
    return FieldValue.null() if number is None else FieldValue.float(op(number))


@dataclass(frozen=True)
class Multiply(TransformExpr):
    factor: float

    def evaluate(self, value: FieldValue) -> FieldValue:
        return _arith(value, lambda n: n * self.factor)

    def to_json(self) -> Any:
        return {"Multiply": _float_json(float(self.factor))}


@dataclass(frozen=True)
class Divide(TransformExpr):
    divisor: float

    def evaluate(self, value: FieldValue) -> FieldValue:
        if self.divisor == 0.0:
            return FieldValue.null()
        return _arith(value, lambda n: n / self.divisor)

    def to_json(self) -> Any:
        return {"Divide": _float_json(float(self.divisor))}


@dataclass(frozen=True)
class Add(TransformExpr):
    addend: float

    def evaluate(self, value: FieldValue) -> FieldValue:
        return _arith(value, lambda n: n + self.addend)

    def to_json(self) -> Any:
        return {"Add": _float_json(float(self.addend))}


@dataclass(frozen=True)
class RoundNearest(TransformExpr):
    """Round to the nearest multiple of ``step``."""

    step: int

    def evaluate(self, value: FieldValue) -> FieldValue:
        n = self.step
        if n == 0:
            return FieldValue.null()
        if value.kind is ValueKind.INTEGER:
            result = _trunc_div(value.value + _trunc_div(n, 2), n) * n
            return FieldValue.integer(max(I64_MIN, min(I64_MAX, result)))
        if value.kind is ValueKind.FLOAT:
            return FieldValue.integer(_to_i64(_round_half_away(value.value / n) * n))
        return FieldValue.null()

    def to_json(self) -> Any:
        return {"RoundNearest": self.step}


@dataclass(frozen=True)
class RoundDecimal(TransformExpr):
    """Round to ``places`` decimal places."""

    places: int

    def evaluate(self, value: FieldValue) -> FieldValue:
        if value.kind is ValueKind.FLOAT:
            factor = 10.0**self.places
            return FieldValue.float(_round_half_away(value.value * factor) / factor)
        if value.kind is ValueKind.INTEGER:
            return FieldValue.float(float(value.value))
        return FieldValue.null()

    def to_json(self) -> Any:
        return {"RoundDecimal": self.places}


@dataclass(frozen=True)
class Uppercase(TransformExpr):
    def evaluate(self, value: FieldValue) -> FieldValue:
        if value.kind is ValueKind.STRING:
            return FieldValue.string(value.value.upper())
        return FieldValue.null()


@dataclass(frozen=True)
class Lowercase(TransformExpr):
    def evaluate(self, value: FieldValue) -> FieldValue:
        if value.kind is ValueKind.STRING:
            return FieldValue.string(value.value.lower())
        return FieldValue.null()


@dataclass(frozen=True)
class HashSha256(TransformExpr):
    def evaluate(self, value: FieldValue) -> FieldValue:
        if value.kind is ValueKind.STRING:
            digest = hashlib.sha256(value.value.encode("utf-8")).hexdigest()
            return FieldValue.string(digest)
        return FieldValue.null()


def _aggregate(
    value: FieldValue, func: Callable[[list[float]], FieldValue]
) -> FieldValue:
    items = _json_list(value)
    if items is None:
        return FieldValue.null()
    nums = _numbers(items)
    return func(nums) if nums else FieldValue.null()


@dataclass(frozen=True)
class ArrayAverage(TransformExpr):
    def evaluate(self, value: FieldValue) -> FieldValue:
        return _aggregate(value, lambda nums: FieldValue.float(sum(nums) / len(nums)))


@dataclass(frozen=True)
class ArraySum(TransformExpr):
    def evaluate(self, value: FieldValue) -> FieldValue:
        return _aggregate(value, lambda nums: FieldValue.float(sum(nums)))


@dataclass(frozen=True)
class ArrayMin(TransformExpr):
    def evaluate(self, value: FieldValue) -> FieldValue:
        return _aggregate(value, lambda nums: FieldValue.float(min(nums)))


@dataclass(frozen=True)
class ArrayMax(TransformExpr):
    def evaluate(self, value: FieldValue) -> FieldValue:
        return _aggregate(value, lambda nums: FieldValue.float(max(nums)))


@dataclass(frozen=True)
class ArrayCount(TransformExpr):
    def evaluate(self, value: FieldValue) -> FieldValue:
        items = _json_list(value)
        return FieldValue.null() if items is None else FieldValue.integer(len(items))


def _summary(nums: list[float]) -> FieldValue:
    return FieldValue.json(
        {
            "min": _to_i64(min(nums)),
            "max": _to_i64(max(nums)),
            "avg": _float_json(_round1(sum(nums) / len(nums))),
            "count": len(nums),
        }
    )


@dataclass(frozen=True)
class ArraySummary(TransformExpr):
    """Summary statistics: {min, max, avg, count}."""

    def evaluate(self, value: FieldValue) -> FieldValue:
        return _aggregate(value, _summary)


@dataclass(frozen=True)
class JsonGetField(TransformExpr):
    name: str

    def evaluate(self, value: FieldValue) -> FieldValue:
        obj = _json_dict(value)
        if obj is None or self.name not in obj:
            return FieldValue.null()
        return FieldValue.from_json(obj[self.name])

    def to_json(self) -> Any:
        return {"JsonGetField": self.name}


@dataclass(frozen=True)
class JsonGetLatestKey(TransformExpr):
    """Value at the lexicographically last key."""

    def evaluate(self, value: FieldValue) -> FieldValue:
        obj = _json_dict(value)
        if not obj:
            return FieldValue.null()
        return FieldValue.from_json(obj[max(obj)])


@dataclass(frozen=True)
class JsonMapValues(TransformExpr):
    """Apply ``expr`` to every value of a JSON object."""

    expr: TransformExpr

    def evaluate(self, value: FieldValue) -> FieldValue:
        obj = _json_dict(value)
        if obj is None:
            return FieldValue.null()
        return FieldValue.json(
            {
                key: self.expr.evaluate(FieldValue.from_json(obj[key])).to_json()
                for key in sorted(obj)
            }
        )

    def to_json(self) -> Any:
        return {"JsonMapValues": self.expr.to_json()}


@dataclass(frozen=True)
class RangeClassify(TransformExpr):
    """Label of the first range containing the value, else ``default``."""

    ranges: tuple[RangeLabel, ...]
    default: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "ranges", tuple(self.ranges))

    def evaluate(self, value: FieldValue) -> FieldValue:
        if value.kind is ValueKind.INTEGER:
            n = value.value
        elif value.kind is ValueKind.FLOAT:
            n = _to_i64(value.value)
        else:
            return FieldValue.string(self.default)
        label = next(
            (r.label for r in self.ranges if r.min <= n <= r.max), self.default
        )
        return FieldValue.string(label)

    def to_json(self) -> Any:
        return {
            "RangeClassify": {
                "ranges": [r.to_json() for r in self.ranges],
                "default": self.default,
            }
        }


@dataclass(frozen=True)
class TrendAnalysis(TransformExpr):
    """Compare the averages of the last two weeks in {week: [readings]}."""

    improving_threshold: float
    declining_threshold: float

    def evaluate(self, value: FieldValue) -> FieldValue:
        weeks = _json_dict(value)
        if weeks is None:
            return FieldValue.null()
        avgs: list[float] = []
        for key in sorted(weeks):
            readings = weeks[key]
            if isinstance(readings, list):
                nums = _numbers(readings)
                if nums:
                    avgs.append(sum(nums) / len(nums))
        if len(avgs) < 2:
            return FieldValue.json(
                {"direction": "insufficient data", "weeks_tracked": len(avgs)}
            )
        prev, curr = avgs[-2], avgs[-1]
        change = curr - prev
        pct = (
            _round_half_away(change / prev * 1000.0) / 10.0
            if prev != 0
            else math.copysign(math.inf, change) if change else math.nan
        )
        if change < self.improving_threshold:
            direction = "improving"
        elif change > self.declining_threshold:
            direction = "declining"
        else:
            direction = "stable"
        return FieldValue.json(
            {
                "direction": direction,
                "change_bpm": _float_json(_round1(change)),
                "change_pct": _float_json(pct),
                "current_avg": _float_json(_round1(curr)),
                "previous_avg": _float_json(_round1(prev)),
                "weeks_tracked": len(avgs),
            }
        )

    def to_json(self) -> Any:
        return {
            "TrendAnalysis": {
                "improving_threshold": _float_json(float(self.improving_threshold)),
                "declining_threshold": _float_json(float(self.declining_threshold)),
            }
        }


@dataclass(frozen=True)
class Pipeline(TransformExpr):
    """Apply steps left to right."""

    steps: tuple[TransformExpr, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "steps", tuple(self.steps))

    def evaluate(self, value: FieldValue) -> FieldValue:
        for step in self.steps:
            value = step.evaluate(value)
        return value

    def to_json(self) -> Any:
        return {"Pipeline": [step.to_json() for step in self.steps]}


_UNIT = {
    cls.__name__: cls
    for cls in (
        Uppercase,
        Lowercase,
        HashSha256,
        ArrayAverage,
        ArraySum,
        ArrayMin,
        ArrayMax,
        ArrayCount,
        ArraySummary,
        JsonGetLatestKey,
    )
}


def _float_arg(obj: Any) -> float:
    if obj is None:
        return math.nan
    if not _is_number(obj):
        raise ValueError(f"expected a number, got {obj!r}")
    return float(obj)


def _int_arg(obj: Any, minimum: int = I64_MIN) -> int:
    if not isinstance(obj, int) or isinstance(obj, bool) or obj < minimum:
        raise ValueError(f"expected an integer, got {obj!r}")
    return obj


def expr_from_json(data: Any) -> TransformExpr:
    """Rebuild an expression from its tagged JSON form."""
    if isinstance(data, str):
        if data in _UNIT:
            return _UNIT[data]()
        raise ValueError(f"unknown expression: {data!r}")
    if not isinstance(data, dict) or len(data) != 1:
        raise ValueError(f"malformed expression: {data!r}")
    ((tag, arg),) = data.items()
    if tag == "Multiply":
        return Multiply(_float_arg(arg))
    if tag == "Divide":
        return Divide(_float_arg(arg))
    if tag == "Add":
        return Add(_float_arg(arg))
    if tag == "RoundNearest":
        return RoundNearest(_int_arg(arg))
    if tag == "RoundDecimal":
        return RoundDecimal(_int_arg(arg, 0))
    if tag == "JsonGetField":
        if not isinstance(arg, str):
            raise ValueError("JsonGetField takes a string")
        return JsonGetField(arg)
    if tag == "JsonMapValues":
        return JsonMapValues(expr_from_json(arg))
    if tag == "Pipeline":
        if not isinstance(arg, list):
            raise ValueError("Pipeline takes a list")
        return Pipeline(tuple(expr_from_json(step) for step in arg))
    if tag == "RangeClassify":
        try:
            ranges = tuple(
                RangeLabel(_int_arg(r["min"]), _int_arg(r["max"]), str(r["label"]))
                for r in arg["ranges"]
            )
            return RangeClassify(ranges, str(arg["default"]))
        except (KeyError, TypeError) as exc:
            raise ValueError("malformed RangeClassify") from exc
    if tag == "TrendAnalysis":
        try:
            return TrendAnalysis(
                _float_arg(arg["improving_threshold"]),
                _float_arg(arg["declining_threshold"]),
            )
        except (KeyError, TypeError) as exc:
            raise ValueError("malformed TrendAnalysis") from exc
    raise ValueError(f"unknown expression: {tag!r}")