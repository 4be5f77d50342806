from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from ..config.errors import ConfigError
from ..models.config_models import DEFAULT_LINE_BREAK

"""Named value transforms usable from the YAML ``map`` section.

YAML cannot carry Python callables, so a map entry such as::

    publish: {attribute: published, transform: flag}

refers to one of the transforms registered here. Blank input and the client's
``NULL`` yield None for the typed transforms, so an empty column never
overwrites stored data. Unparsable input raises ValueError.
"""

__all__ = [
    "TRANSFORMS",
    "get_transform",
    "register_transform",
]

Transform = Callable[[str], Any]

_TRUE_WORDS = {"1", "true", "t", "yes", "y", "on"}

# how mysql -E prints an SQL null
NULL_MARKER = "NULL"


def _is_null(value: str) -> bool:
    return not value or value == NULL_MARKER


def flag(value: str) -> bool:
    return value.strip().lower() in _TRUE_WORDS


def integer(value: str) -> int | None:
    value = value.strip()
    return None if _is_null(value) else int(value)


def decimal(value: str) -> Decimal | None:
    value = value.strip()
    if _is_null(value):
        return None
    try:
        return Decimal(value)
    except InvalidOperation as e:
        raise ValueError(f"not a decimal: {value!r}") from e


def iso_date(value: str) -> date | None:
    value = value.strip()
    return None if _is_null(value) else date.fromisoformat(value)


def iso_datetime(value: str) -> datetime | None:
    value = value.strip()
    return None if _is_null(value) else datetime.fromisoformat(value)


def blank_to_none(value: str) -> str | None:
    return None if _is_null(value.strip()) else value


def strip_markup(value: str) -> str:
    return value.replace(DEFAULT_LINE_BREAK, "\n")


TRANSFORMS: dict[str, Transform] = {
    "flag": flag,
    "integer": integer,
    "decimal": decimal,
    "date": iso_date,
    "datetime": iso_datetime,
    "blank_to_none": blank_to_none,
    "strip_markup": strip_markup,
}


def register_transform(name: str, func: Transform) -> None:
    TRANSFORMS[name] = func


def get_transform(name: str) -> Transform:
    try:
        return TRANSFORMS[name]
    except KeyError:
        raise ConfigError(
            f"unknown transform {name!r} (known: {', '.join(sorted(TRANSFORMS))})"
        ) from None
