"""Vertical dump reading (row markers, column lines, continuations)."""

from .scanner import build_field_pattern, normalize_value, read_dump_file, scan_rows

__all__ = [
    "build_field_pattern",
    "normalize_value",
    "read_dump_file",
    "scan_rows",
]
