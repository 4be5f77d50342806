from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Union

"""Field map entries: how a dump column becomes a model attribute.

A configured field map is keyed by the cleaned column name (prefix stripped).
Each value is one of a closed set of variants:

- DirectAttribute: assign the raw value verbatim to ``attribute``
- TransformedAttribute: assign ``transform(raw)`` to ``attribute``
- ContextTransform: call ``apply(raw, entity)``, which sets whatever it wants
- Unrecognized: anything else; reported and skipped at import time

Callers may write entries in the short forms accepted by
``coerce_field_mapping``; they are converted once, when the configuration is
built.
"""

__all__ = [
    "DirectAttribute",
    "TransformedAttribute",
    "ContextTransform",
    "Unrecognized",
    "FieldMapping",
    "coerce_field_mapping",
    "build_field_map",
]


@dataclass(frozen=True)
class DirectAttribute:
    attribute: str


@dataclass(frozen=True)
class TransformedAttribute:
    attribute: str
    transform: Callable[[str], Any]


@dataclass(frozen=True)
class ContextTransform:
    apply: Callable[[str, Any], None]


@dataclass(frozen=True)
class Unrecognized:
    value: Any


FieldMapping = Union[DirectAttribute, TransformedAttribute, ContextTransform, Unrecognized]

_VARIANTS = (DirectAttribute, TransformedAttribute, ContextTransform, Unrecognized)


def coerce_field_mapping(value: Any) -> FieldMapping:
    """Convert a short-form map entry into a FieldMapping variant.

    Accepted short forms:
        "title"                      -> DirectAttribute("title")
        {"published": fn}            -> TransformedAttribute("published", fn)
        ("published", fn)            -> TransformedAttribute("published", fn)
        fn  (called as fn(raw, obj)) -> ContextTransform(fn)

    Anything else is wrapped in Unrecognized.
    """
    if isinstance(value, _VARIANTS):
        return value
    if isinstance(value, str) and value:
        return DirectAttribute(value)
    if isinstance(value, Mapping) and len(value) == 1:
        ((attribute, transform),) = value.items()
        if isinstance(attribute, str) and callable(transform):
            return TransformedAttribute(attribute, transform)
    if isinstance(value, tuple) and len(value) == 2:
        attribute, transform = value
        if isinstance(attribute, str) and callable(transform):
            return TransformedAttribute(attribute, transform)
    if callable(value):
        return ContextTransform(value)
    return Unrecognized(value)


def build_field_map(raw: Mapping[str, Any] | None) -> dict[str, FieldMapping]:
    """Coerce every entry of a caller-supplied field map."""
    if not raw:
        return {}
    return {str(name): coerce_field_mapping(value) for name, value in raw.items()}
