# folddb

`folddb` provides the building blocks of a data model built on *folds*:
policy-carrying interfaces over a set of fields. Each field holds a value, a
security label, a trust-distance policy and optional capability constraints.
A field may be derived from a field of another fold through a registered
transform. Writes are kept in an append-only store, and transforms can be
written as serialisable, content-addressed expressions.

## Modules

- `folddb.values`: `FieldValue` and `ValueKind`. A `FieldValue` is a frozen,
  tagged value (string, integer, float, boolean, bytes, JSON, null) built with
  `FieldValue.string(...)`, `FieldValue.integer(...)`, `FieldValue.float(...)`,
  `FieldValue.boolean(...)`, `FieldValue.bytes(...)`, `FieldValue.json(...)`
  and `FieldValue.null()`. Integers must fit in 64 bits.
  `FieldValue.from_json(data)` maps decoded JSON to the closest kind, and
  `to_json()` goes back (bytes, null and non-finite floats become `None`).
- `folddb.labels`: `SecurityLabel(level, category)`. `a.flows_to(b)` holds
  when `a.level <= b.level`; `<`, `<=`, `>`, `>=` compare levels only, while
  equality compares level and category.
- `folddb.context`: `AccessContext(user_id, trust_distance=0, public_keys,
  paid_folds)`. `AccessContext.owner(user_id)` gives trust distance 0.
- `folddb.fields`: `TrustDistancePolicy(write_max, read_max)` with
  `can_write` / `can_read`, `CapabilityKind`, `CapabilityConstraint` and
  `Field`.
- `folddb.folds`: `Fold(id, owner_id, fields, payment_gate=None)`.
  `field(name)` returns the first field with that name or `None`;
  `with_payment_gate(gate)` returns a copy carrying the gate.
- `folddb.store`: `AppendOnlyStore` and `StoreEntry`. `append` assigns the
  next version number for the entry's field (starting at 0) and returns it;
  `get_current`, `get_history`, `get_version` and `total_entries` read back.
- `folddb.expr`: `TransformExpr` and its variants `Multiply`, `Divide`, `Add`,
  `RoundNearest`, `RoundDecimal`, `Uppercase`, `Lowercase`, `HashSha256`,
  `ArrayAverage`, `ArraySum`, `ArrayMin`, `ArrayMax`, `ArrayCount`,
  `ArraySummary`, `JsonGetField`, `JsonGetLatestKey`, `JsonMapValues`,
  `RangeClassify` (with `RangeLabel`), `TrendAnalysis` and `Pipeline`.
  Each has `evaluate(value)`, `to_json()` and `content_hash()` (hex SHA-256 of
  the compact JSON form); `expr_from_json(data)` rebuilds an expression and
  raises `ValueError` on malformed input. Inputs of the wrong kind evaluate to
  null.
- `folddb.transform`: `Reversibility`, `TransformDef` (with the static
  `content_hash(name, input_type, output_type)`) and `RegisteredTransform`,
  built with `from_closure` (callables) or `from_expr` (expressions). It offers
  `apply`, `apply_inverse` (returns `None` without an inverse), `has_inverse`,
  `forward_expr` and `inverse_expr`.
- `folddb.registry`: `FoldRegistry` with `register_fold`,
  `register_transform`, `get_fold`, `get_transform`, `list_folds` (fold ids)
  and `list_transforms` (transform definitions). Failures raise subclasses of
  `RegistryError`: `FoldAlreadyExistsError`, `CycleDetectedError`,
  `TransformNotFoundError`, `LabelViolationError` and `InvalidTransformError`
  (a reversible transform without an inverse, or an irreversible one with an
  inverse).

## Examples

```python
from folddb.expr import Multiply, Pipeline, RoundDecimal, expr_from_json
from folddb.values import FieldValue

to_eur = Pipeline([Multiply(0.85), RoundDecimal(2)])
result = to_eur.evaluate(FieldValue.float(75000.0))
print(result.value)            # 63750.0
print(to_eur.content_hash())   # hex SHA-256 of the expression's JSON
assert expr_from_json(to_eur.to_json()) == to_eur
```

```python
from folddb.fields import Field, TrustDistancePolicy
from folddb.folds import Fold
from folddb.labels import SecurityLabel
from folddb.registry import FoldRegistry
from folddb.values import FieldValue

registry = FoldRegistry()
registry.register_fold(
    Fold(
        "employee_record",
        "company",
        [
            Field(
                "name",
                FieldValue.string("Alice Smith"),
                SecurityLabel(1, "internal"),
                TrustDistancePolicy(1, 1),
            )
        ],
    )
)
print(registry.list_folds())   # ['employee_record']
```

```python
from folddb.store import AppendOnlyStore, StoreEntry
from folddb.values import FieldValue

store = AppendOnlyStore()
store.append(StoreEntry("f1", "count", FieldValue.integer(1), "owner"))
store.append(StoreEntry("f1", "count", FieldValue.integer(2), "owner"))
print(store.get_current("f1", "count").value)   # FieldValue for 2, version 1
print(len(store.get_history("f1", "count")))    # 2
```

## What the package does not do

The package holds the data types, the registry and the store, but it does not
evaluate a fold against an `AccessContext`: nothing here checks trust
distances, capability quotas, security labels or payment at query time, and
there is no query or write entry point that applies transforms to source
folds, propagates writes through inverses, or performs rollback. There is no
trust graph, no audit log, and no signature checking; `StoreEntry.signature`
is stored as given. The payment gate on a `Fold` is an opaque value. All
state lives in memory; nothing is persisted.

## Running the tests

```
pip install -e ".[test]"
pytest
```