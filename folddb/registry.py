"""The fold registry, which also serves as the universal transform registry."""

from __future__ import annotations

from .folds import Fold
from .transform import RegisteredTransform, Reversibility, TransformDef


class RegistryError(Exception):
    """Base class for registration failures."""


class FoldAlreadyExistsError(RegistryError):
    def __init__(self, fold_id: str) -> None:
        super().__init__(f"fold already exists: {fold_id}")
        self.fold_id = fold_id


class CycleDetectedError(RegistryError):
    def __init__(self, fold_id: str, source_fold_id: str) -> None:
        super().__init__(f"cycle detected: {fold_id} -> {source_fold_id}")
        self.fold_id = fold_id
        self.source_fold_id = source_fold_id


class TransformNotFoundError(RegistryError):
    def __init__(self, transform_id: str) -> None:
        super().__init__(f"transform not found: {transform_id}")
        self.transform_id = transform_id


class LabelViolationError(RegistryError):
    def __init__(self, field: str, reason: str) -> None:
        super().__init__(f"security label violation on field {field}: {reason}")
        self.field = field
        self.reason = reason


class InvalidTransformError(RegistryError):
    def __init__(self, reason: str) -> None:
        super().__init__(f"invalid transform: {reason}")
        self.reason = reason


class FoldRegistry:
    """Holds fold definitions and the transforms that derive their fields."""

    def __init__(self) -> None:
        self._folds: dict[str, Fold] = {}
        self._transforms: dict[str, RegisteredTransform] = {}

    def register_fold(self, fold: Fold) -> None:
        """Add ``fold``, validating dependencies, transforms and label ordering."""
        if fold.id in self._folds:
            raise FoldAlreadyExistsError(fold.id)

        for field in fold.fields:
            source_id = field.source_fold_id
            if source_id is not None and self._would_create_cycle(fold.id, source_id):
                raise CycleDetectedError(fold.id, source_id)

            transform_id = field.transform_id
            if transform_id is None:
                continue
            transform = self._transforms.get(transform_id)
            if transform is None:
                raise TransformNotFoundError(transform_id)

            source_fold = self._folds.get(source_id) if source_id is not None else None
            if source_fold is None:
                continue
            min_label = transform.definition.min_output_label
            if not min_label.flows_to(field.label):
                raise LabelViolationError(
                    field.name,
                    f"transform min output label {min_label!r} "
                    f"does not flow to field label {field.label!r}",
                )
            source_field = source_fold.field(field.name)
            if source_field is not None and not source_field.label.flows_to(
                field.label
            ):
                raise LabelViolationError(
                    field.name,
                    f"source label {source_field.label!r} "
                    f"does not flow to output label {field.label!r}",
                )

        self._folds[fold.id] = fold

    def register_transform(self, transform: RegisteredTransform) -> str:
        """Add ``transform`` and return its identifier."""
        definition = transform.definition
        if (
            definition.reversibility is Reversibility.IRREVERSIBLE
            and transform.has_inverse()
        ):
            raise InvalidTransformError(
                "irreversible transform must not provide an inverse"
            )
        if (
            definition.reversibility is Reversibility.REVERSIBLE
            and not transform.has_inverse()
        ):
            raise InvalidTransformError("reversible transform must provide an inverse")
        self._transforms[definition.id] = transform
        return definition.id

    def get_fold(self, fold_id: str) -> Fold | None:
        return self._folds.get(fold_id)

    def get_transform(self, transform_id: str) -> RegisteredTransform | None:
        return self._transforms.get(transform_id)

    def list_folds(self) -> list[str]:
        return list(self._folds)

    def list_transforms(self) -> list[TransformDef]:
        return [t.definition for t in self._transforms.values()]

    def _would_create_cycle(self, fold_id: str, source_fold_id: str) -> bool:
        """True when ``source_fold_id`` transitively depends on ``fold_id``."""
        visited: set[str] = set()
        stack = [source_fold_id]
        while stack:
            current = stack.pop()
            if current == fold_id:
                return True
            if current in visited:
                continue
            visited.add(current)
            fold = self._folds.get(current)
            if fold is not None:
                stack.extend(
                    f.source_fold_id for f in fold.fields if f.source_fold_id is not None
                )
        return False