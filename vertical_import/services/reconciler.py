from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from ..models.config_models import ImportConfiguration, Policy
from ..models.field_mapping import (
    ContextTransform,
    DirectAttribute,
    TransformedAttribute,
    Unrecognized,
)
from ..models.import_result import Outcome
from ..models.raw_row import RawRow

"""Attribute mapping and insert-vs-update reconciliation.

For each column of a RawRow the target attribute is resolved in this order:

1. explicit field map entry (dispatched on its FieldMapping variant)
2. auto-mapping to a settable attribute of the same name
3. unmapped: WARN (or ImportAbortedError under Policy.RAISE)

A transform that rejects its value leaves the attribute unset; the failure is
reported per row and only aborts under on_invalid=Policy.RAISE.

A populated entity is then validated; valid entities are inserted, or merged
into the record found by the configured key.
"""

__all__ = [
    "FieldTransformError",
    "ImportAbortedError",
    "apply_field",
    "populate",
    "save_or_update",
]

logger = logging.getLogger(__name__)


class ImportAbortedError(Exception):
    """Raised when a problem occurs whose policy is Policy.RAISE."""


class FieldTransformError(ValueError):
    """A mapped transform could not convert a column value."""

    def __init__(self, name: str, value: str, cause: Exception) -> None:
        super().__init__(f"cannot convert :{name} value {value!r}: {cause}")
        self.name = name
        self.value = value


def apply_field(entity: Any, model: type, name: str, value: str, config: ImportConfiguration) -> bool:
    """Assign one column value to ``entity``.

    Returns:
        True when the column was handled (mapped or auto-mapped), False when
        it could not be assigned.

    Raises:
        FieldTransformError: a mapped transform rejected ``value``
    """
    mapping = config.field_map.get(name)
    if mapping is not None:
        if isinstance(mapping, DirectAttribute):
            setattr(entity, mapping.attribute, value)
        elif isinstance(mapping, TransformedAttribute):
            try:
                converted = mapping.transform(value)
            except ValueError as e:
                raise FieldTransformError(name, value, e) from e
            setattr(entity, mapping.attribute, converted)
        elif isinstance(mapping, ContextTransform):
            mapping.apply(value, entity)
        elif isinstance(mapping, Unrecognized):
            _unmapped(config, f"don't know how to handle {mapping.value!r} (column :{name})")
            return False
        else:  # pragma: no cover - FieldMapping is a closed set
            raise TypeError(f"unexpected field mapping {mapping!r}")
        return True

    if model.settable(name):
        setattr(entity, name, value)
        return True

    _unmapped(config, f"don't know how to set :{name}")
    return False


def _unmapped(config: ImportConfiguration, message: str) -> None:
    if config.on_unmapped is Policy.RAISE:
        raise ImportAbortedError(message)
    logger.warning(message)


def populate(
    row: RawRow,
    model: type,
    config: ImportConfiguration,
    report: Callable[[str, str], None] | None = None,
) -> tuple[Any, list[str]]:
    """Create a fresh entity and assign every column of ``row`` to it.

    ``report`` receives (column name, message) for each value a transform
    rejected; that column is left unset and the remaining columns still apply.

    Returns:
        (entity, names of the columns that could not be assigned)
    """
    entity = model()
    unmapped: list[str] = []
    for name, value in row.fields.items():
        try:
            handled = apply_field(entity, model, name, value, config)
        except FieldTransformError as e:
            if config.on_invalid is Policy.RAISE:
                raise ImportAbortedError(f"line {row.line_number}: {e}") from e
            logger.warning("line %d: %s", row.line_number, e)
            if report is not None:
                report(name, str(e))
            continue
        if not handled:
            unmapped.append(name)
    return entity, unmapped


def save_or_update(
    entity: Any,
    config: ImportConfiguration,
    report: Callable[[list[str]], None] | None = None,
) -> Outcome:
    """Validate ``entity`` and persist it (insert, or merge into a match).

    ``report`` receives the validation messages of a rejected entity,
    independent of the verbosity policy. Store failures are not caught here;
    they propagate to the caller.
    """
    errors = entity.validate()
    if errors:
        if report is not None:
            report(list(errors))
        if config.on_invalid is Policy.RAISE:
            raise ImportAbortedError(
                f"invalid {type(entity).__name__}: {'; '.join(errors)}"
            )
        if config.wants_diagnostic(entity):
            logger.error(
                ">>> ERRORS while storing %s: %s\n%s",
                type(entity).__name__,
                "; ".join(errors),
                entity.dump(),
            )
        return Outcome.INVALID

    attributes = entity.attributes()
    existing = type(entity).find_by(config.find_by, attributes.get(config.find_by))
    if existing is None:
        entity.save()
        return Outcome.INSERTED

    existing.update_attributes({k: v for k, v in attributes.items() if v is not None})
    return Outcome.UPDATED
