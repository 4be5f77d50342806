from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Union

from ..config.errors import InvalidEntityNameError
from .field_mapping import FieldMapping, build_field_map

"""Runtime configuration of one import invocation.

ImportConfiguration is immutable and passed explicitly through the scanner,
mapper and reconciler; nothing is kept in module or class level state.
"""

__all__ = [
    "ImportConfiguration",
    "Policy",
    "Verbosity",
    "DEFAULT_LINE_BREAK",
    "ENTITY_NAME_RE",
    "validate_entity_name",
]

DEFAULT_LINE_BREAK = "<br/>"

# Letters, optionally separated by "." or "::" (e.g. "Seminar", "app.models.Seminar")
ENTITY_NAME_RE = re.compile(r"^[A-Za-z]+(?:(?:\.|::)[A-Za-z]+)*$")

Verbosity = Union[bool, Callable[[Any], bool]]


class Policy(Enum):
    """What to do about a non-fatal problem (unmapped field, invalid record)."""
    WARN = "warn"
    RAISE = "raise"


def validate_entity_name(name: str) -> str:
    """Return ``name`` unchanged, or raise InvalidEntityNameError."""
    if not isinstance(name, str) or not ENTITY_NAME_RE.match(name):
        raise InvalidEntityNameError(f"{name!r} doesn't look like a class name")
    return name


@dataclass(frozen=True)
class ImportConfiguration:
    """Settings for a single import pass.

    entity_type: model identifier (validated) or an already resolved model class
    find_by: attribute used for the existence lookup (insert vs update)
    columns_prefix: prefix distinguishing column lines from content, e.g. "COLUMN_"
    field_map: cleaned column name -> FieldMapping
    verbose: report invalid records (bool, or predicate over the entity)
    line_break: marker joining multi-line values
    on_unmapped / on_invalid: WARN keeps going, RAISE aborts the run
    """
    entity_type: str | type
    find_by: str
    columns_prefix: str = ""
    field_map: Mapping[str, FieldMapping] = field(default_factory=dict)
    verbose: Verbosity = True
    line_break: str = DEFAULT_LINE_BREAK
    on_unmapped: Policy = Policy.WARN
    on_invalid: Policy = Policy.WARN

    def __post_init__(self) -> None:
        if isinstance(self.entity_type, str):
            validate_entity_name(self.entity_type)
        elif not isinstance(self.entity_type, type):
            raise InvalidEntityNameError(f"{self.entity_type!r} doesn't look like a class name")
        object.__setattr__(self, "field_map", MappingProxyType(dict(self.field_map)))
        object.__setattr__(self, "on_unmapped", Policy(self.on_unmapped))
        object.__setattr__(self, "on_invalid", Policy(self.on_invalid))

    @classmethod
    def create(
        cls,
        entity_type: str | type,
        find_by: str,
        columns_prefix: str | None = "",
        field_map: Mapping[str, Any] | None = None,
        verbose: Verbosity | None = True,
        **options: Any,
    ) -> ImportConfiguration:
        """Build a configuration from short-form options.

        ``field_map`` entries may use any form accepted by
        ``coerce_field_mapping``. ``verbose=None`` means silent.
        """
        return cls(
            entity_type=entity_type,
            find_by=str(find_by),
            columns_prefix=columns_prefix or "",
            field_map=build_field_map(field_map),
            verbose=bool(verbose) if verbose is None else verbose,
            **options,
        )

    @property
    def entity_name(self) -> str:
        if isinstance(self.entity_type, type):
            return self.entity_type.__name__
        return self.entity_type

    def wants_diagnostic(self, entity: Any) -> bool:
        """Apply the verbosity policy to a rejected entity."""
        if callable(self.verbose):
            return bool(self.verbose(entity))
        return bool(self.verbose)
