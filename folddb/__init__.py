"""Folds, fields, security labels, an append-only store, transform expressions and a fold registry."""

__version__ = "0.1.0"

__all__ = [
    "context",
    "expr",
    "fields",
    "folds",
    "labels",
    "registry",
    "store",
    "transform",
    "values",
]