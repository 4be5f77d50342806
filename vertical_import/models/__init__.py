"""Domain models for the vertical dump importer."""

from .config_models import ImportConfiguration, Policy
from .entity import ImportableModel
from .field_mapping import (
    ContextTransform,
    DirectAttribute,
    FieldMapping,
    TransformedAttribute,
    Unrecognized,
)
from .import_result import ImportResult, Outcome
from .raw_row import RawRow

__all__ = [
    # Configuration models
    "ImportConfiguration",
    "Policy",
    "DirectAttribute",
    "TransformedAttribute",
    "ContextTransform",
    "Unrecognized",
    "FieldMapping",
    # Processing models
    "ImportableModel",
    "RawRow",
    "ImportResult",
    "Outcome",
]
