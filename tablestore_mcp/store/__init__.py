"""Client and response models for the tabular record store."""

from .client import RecordStoreClient, build_search_formula, escape_formula_string  # noqa: F401
from .models import (  # noqa: F401
    TEXT_FIELD_TYPES,
    Base,
    BaseSchema,
    Field,
    Record,
    Table,
    View,
)

__all__ = [
    "RecordStoreClient",
    "build_search_formula",
    "escape_formula_string",
    "TEXT_FIELD_TYPES",
    "Base",
    "BaseSchema",
    "Field",
    "Record",
    "Table",
    "View",
]
