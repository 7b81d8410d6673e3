import pytest

from folddb.expr import Divide, Multiply
from folddb.fields import Field, TrustDistancePolicy
from folddb.folds import Fold
from folddb.labels import SecurityLabel
from folddb.registry import (
    CycleDetectedError,
    FoldAlreadyExistsError,
    FoldRegistry,
    InvalidTransformError,
    LabelViolationError,
    RegistryError,
    TransformNotFoundError,
)
from folddb.transform import RegisteredTransform, Reversibility, TransformDef
from folddb.values import FieldValue


def _def(tid, reversibility=Reversibility.IRREVERSIBLE, level=0):
    return TransformDef(
        id=tid,
        name=tid,
        reversibility=reversibility,
        min_output_label=SecurityLabel(level, "public"),
        input_type="Integer",
        output_type="Integer",
    )


def _field(name, level=0, transform_id=None, source=None):
    return Field(
        name,
        FieldValue.integer(1),
        SecurityLabel(level, "public"),
        TrustDistancePolicy(10, 10),
        transform_id=transform_id,
        source_fold_id=source,
    )


def _identity(value):
    return value


def test_register_and_get_fold():
    registry = FoldRegistry()
    fold = Fold("f1", "owner", [_field("a")])
    registry.register_fold(fold)
    assert registry.get_fold("f1") is fold
    assert registry.get_fold("missing") is None
    assert registry.list_folds() == ["f1"]


def test_duplicate_fold_rejected():
    registry = FoldRegistry()
    registry.register_fold(Fold("dup", "owner", []))
    with pytest.raises(FoldAlreadyExistsError) as info:
        registry.register_fold(Fold("dup", "owner", []))
    assert str(info.value) == "fold already exists: dup"
    assert isinstance(info.value, RegistryError)


def test_self_reference_is_cycle():
    registry = FoldRegistry()
    with pytest.raises(CycleDetectedError) as info:
        registry.register_fold(Fold("f", "owner", [_field("a", source="f")]))
    assert info.value.fold_id == "f"
    assert info.value.source_fold_id == "f"
    assert registry.get_fold("f") is None


def test_transitive_cycle_detected():
    registry = FoldRegistry()
    registry.register_fold(Fold("a", "owner", [_field("x", source="b")]))
    with pytest.raises(CycleDetectedError) as info:
        registry.register_fold(Fold("b", "owner", [_field("x", source="a")]))
    assert str(info.value) == "cycle detected: b -> a"


def test_chain_without_cycle_accepted():
    registry = FoldRegistry()
    registry.register_transform(RegisteredTransform.from_closure(_def("t"), _identity))
    registry.register_fold(Fold("f1", "owner", [_field("n")]))
    registry.register_fold(Fold("f2", "owner", [_field("n", transform_id="t", source="f1")]))
    registry.register_fold(Fold("f3", "owner", [_field("n", transform_id="t", source="f2")]))
    assert sorted(registry.list_folds()) == ["f1", "f2", "f3"]


def test_unknown_transform_rejected():
    registry = FoldRegistry()
    registry.register_fold(Fold("src", "owner", [_field("n")]))
    with pytest.raises(TransformNotFoundError) as info:
        registry.register_fold(
            Fold("d", "owner", [_field("n", transform_id="nope", source="src")])
        )
    assert info.value.transform_id == "nope"


def test_min_output_label_must_flow_to_field_label():
    registry = FoldRegistry()
    registry.register_transform(
        RegisteredTransform.from_closure(_def("t", level=2), _identity)
    )
    registry.register_fold(Fold("src", "owner", [_field("n", level=0)]))
    with pytest.raises(LabelViolationError) as info:
        registry.register_fold(
            Fold("d", "owner", [_field("n", level=1, transform_id="t", source="src")])
        )
    assert info.value.field == "n"
    assert registry.get_fold("d") is None


def test_source_label_must_flow_to_output_label():
    registry = FoldRegistry()
    registry.register_transform(RegisteredTransform.from_closure(_def("t"), _identity))
    registry.register_fold(Fold("src", "owner", [_field("n", level=3)]))
    with pytest.raises(LabelViolationError):
        registry.register_fold(
            Fold("d", "owner", [_field("n", level=1, transform_id="t", source="src")])
        )


def test_label_checks_skipped_when_source_fold_unknown():
    registry = FoldRegistry()
    registry.register_transform(
        RegisteredTransform.from_closure(_def("t", level=5), _identity)
    )
    fold = Fold("d", "owner", [_field("n", level=0, transform_id="t", source="later")])
    registry.register_fold(fold)
    assert registry.get_fold("d") is fold


def test_register_transform_returns_id():
    registry = FoldRegistry()
    transform = RegisteredTransform.from_closure(_def("upper"), _identity)
    assert registry.register_transform(transform) == "upper"
    assert registry.get_transform("upper") is transform
    assert registry.get_transform("other") is None
    assert [d.id for d in registry.list_transforms()] == ["upper"]


def test_irreversible_with_inverse_rejected():
    registry = FoldRegistry()
    transform = RegisteredTransform.from_closure(_def("t"), _identity, _identity)
    with pytest.raises(InvalidTransformError) as info:
        registry.register_transform(transform)
    assert str(info.value) == (
        "invalid transform: irreversible transform must not provide an inverse"
    )
    assert registry.list_transforms() == []


def test_reversible_without_inverse_rejected():
    registry = FoldRegistry()
    transform = RegisteredTransform.from_expr(
        _def("t", Reversibility.REVERSIBLE), Multiply(2.0)
    )
    with pytest.raises(InvalidTransformError) as info:
        registry.register_transform(transform)
    assert str(info.value) == (
        "invalid transform: reversible transform must provide an inverse"
    )


def test_reversible_expression_transform_accepted():
    registry = FoldRegistry()
    transform = RegisteredTransform.from_expr(
        _def("t", Reversibility.REVERSIBLE), Multiply(2.0), Divide(2.0)
    )
    assert registry.register_transform(transform) == "t"
    stored = registry.get_transform("t")
    assert stored.apply_inverse(stored.apply(FieldValue.float(3.0))) == FieldValue.float(3.0)