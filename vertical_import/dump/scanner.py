from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator
from pathlib import Path

from ..config.errors import DumpPatternError
from ..models.config_models import DEFAULT_LINE_BREAK
from ..models.raw_row import RawRow

"""Vertical dump scanner.

Reads the output of a client's vertical export mode (``mysql -E``)::

    *************************** 1. row ***************************
    COLUMN_title: Foo
    COLUMN_abstract: first line
    second line of the same value
    *************************** 2. row ***************************
    COLUMN_title: Bar

and yields one RawRow per block. Lines that match neither the row marker nor
the field pattern continue the value of the field opened last.
"""

__all__ = [
    "ROW_MARKER_RE",
    "build_field_pattern",
    "normalize_value",
    "scan_rows",
    "read_dump_file",
]

logger = logging.getLogger(__name__)

ROW_MARKER_RE = re.compile(r"^\s*\*+ (\d+)\. row \*+\s*$")

_TABS_RE = re.compile(r"\t+")
_ONLY_NEWLINES_RE = re.compile(r"^\n+$")
_NEWLINES_RE = re.compile(r"\n+")


def build_field_pattern(prefix: str = "") -> re.Pattern[str]:
    """Compile the field-line pattern ``<ws><prefix><name>: <value>``.

    The prefix is used as a regular expression fragment.

    Raises:
        DumpPatternError: if the resulting pattern does not compile
    """
    try:
        return re.compile(rf"^\s*{prefix or ''}(\w+): (.*)")
    except re.error as e:
        raise DumpPatternError(f"invalid columns prefix {prefix!r}: {e}") from e


def normalize_value(raw: str, line_break: str = DEFAULT_LINE_BREAK) -> str:
    """Normalize the first-line value of a field.

    Tab runs become one space, surrounding whitespace is stripped, a value made
    only of newlines becomes empty and remaining newline runs become one
    line-break marker.
    """
    value = _TABS_RE.sub(" ", raw).strip()
    value = _ONLY_NEWLINES_RE.sub("", value)
    return _NEWLINES_RE.sub(line_break, value)


def scan_rows(
    lines: Iterable[str],
    field_pattern: re.Pattern[str],
    line_break: str = DEFAULT_LINE_BREAK,
) -> Iterator[RawRow]:
    """Lazily assemble RawRows from dump lines, in source order.

    A row is emitted when the next marker is seen and once more at end of
    input. Anything before the first marker is discarded.
    """
    fields: dict[str, str] | None = None
    row_number: int | None = None
    marker_line = -1
    open_field: str | None = None
    discarded = 0

    for line_number, line in enumerate(lines, start=1):
        line = line.rstrip("\r\n")

        marker = ROW_MARKER_RE.match(line)
        if marker is not None:
            if fields is not None:
                yield RawRow(fields=fields, row_number=row_number, line_number=marker_line)
            fields = {}
            row_number = int(marker.group(1))
            marker_line = line_number
            open_field = None
            continue

        if fields is None:
            if line.strip():
                discarded += 1
            continue

        column = field_pattern.match(line)
        if column is not None:
            name, raw_value = column.group(1), column.group(2)
            # duplicates overwrite in place, keeping the first-seen position
            fields[name] = normalize_value(raw_value, line_break)
            open_field = name
            continue

        if open_field is None:
            logger.warning("line %d: continuation without an open column dropped: %r", line_number, line)
            continue

        fields[open_field] = fields[open_field] + line_break + line

    if discarded:
        logger.debug("discarded %d line(s) before the first row marker", discarded)

    if fields is not None:
        yield RawRow(fields=fields, row_number=row_number, line_number=marker_line)


def read_dump_file(
    path: Path | str,
    prefix: str = "",
    line_break: str = DEFAULT_LINE_BREAK,
    encoding: str = "utf-8",
) -> Iterator[RawRow]:
    """Scan a dump file. The file is closed however iteration ends.

    The field pattern is compiled eagerly so that a bad prefix fails here,
    not on the first ``next()``.
    """
    pattern = build_field_pattern(prefix)
    return _scan_file(Path(path), pattern, line_break, encoding)


def _scan_file(
    path: Path, pattern: re.Pattern[str], line_break: str, encoding: str
) -> Iterator[RawRow]:
    with path.open("r", encoding=encoding, newline="") as fh:
        yield from scan_rows(fh, pattern, line_break)
