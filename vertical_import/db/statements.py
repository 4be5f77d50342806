from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import psycopg2

"""Single-row SQL statements used by TableModel.

Identifiers are validated against ``^\\w+$`` and double-quoted; values always
travel as ``%s`` parameters. Driver errors are wrapped in StatementError and
propagate to the caller (the importer does not retry).
"""

__all__ = [
    "StatementError",
    "ColumnInfo",
    "quote_ident",
    "fetch_columns",
    "fetch_primary_key",
    "select_one",
    "insert_row",
    "update_rows",
]

_IDENT_RE = re.compile(r"^\w+$")


class StatementError(Exception):
    pass


@dataclass(frozen=True)
class ColumnInfo:
    name: str
    nullable: bool
    has_default: bool

    @property
    def required(self) -> bool:
        return not self.nullable and not self.has_default


def quote_ident(name: str) -> str:
    if not _IDENT_RE.match(name):
        raise StatementError(f"invalid identifier: {name!r}")
    return f'"{name}"'


def _execute(cursor: Any, sql: str, params: Sequence[Any]) -> None:
    try:
        cursor.execute(sql, params)
    except psycopg2.Error as e:
        raise StatementError(str(e).strip()) from e


def fetch_columns(cursor: Any, table: str) -> list[ColumnInfo]:
    """Column metadata from information_schema, in table order."""
    _execute(
        cursor,
        "SELECT column_name, is_nullable, column_default, is_identity "
        "FROM information_schema.columns WHERE table_name = %s ORDER BY ordinal_position",
        (table,),
    )
    return [
        ColumnInfo(
            name=name,
            nullable=(is_nullable == "YES"),
            has_default=(default is not None or is_identity == "YES"),
        )
        for name, is_nullable, default, is_identity in cursor.fetchall()
    ]


def fetch_primary_key(cursor: Any, table: str) -> list[str]:
    _execute(
        cursor,
        "SELECT kcu.column_name FROM information_schema.table_constraints tc "
        "JOIN information_schema.key_column_usage kcu "
        "ON tc.constraint_name = kcu.constraint_name AND tc.table_schema = kcu.table_schema "
        "WHERE tc.table_name = %s AND tc.constraint_type = 'PRIMARY KEY' "
        "ORDER BY kcu.ordinal_position",
        (table,),
    )
    return [r[0] for r in cursor.fetchall()]


def select_one(cursor: Any, table: str, column: str, value: Any) -> dict[str, Any] | None:
    """First row whose ``column`` equals ``value`` as a column -> value dict."""
    if value is None:
        return None
    _execute(
        cursor,
        f"SELECT * FROM {quote_ident(table)} WHERE {quote_ident(column)} = %s LIMIT 1",
        (value,),
    )
    row = cursor.fetchone()
    if row is None:
        return None
    names = [d[0] for d in cursor.description]
    return dict(zip(names, row, strict=False))


def insert_row(cursor: Any, table: str, values: Mapping[str, Any]) -> int:
    """INSERT one row; columns with None values are left to the table default."""
    present = {k: v for k, v in values.items() if v is not None}
    if not present:
        _execute(cursor, f"INSERT INTO {quote_ident(table)} DEFAULT VALUES", ())
        return cursor.rowcount
    cols_sql = ",".join(quote_ident(c) for c in present)
    placeholders = ",".join(["%s"] * len(present))
    _execute(
        cursor,
        f"INSERT INTO {quote_ident(table)} ({cols_sql}) VALUES ({placeholders})",
        list(present.values()),
    )
    return cursor.rowcount


def update_rows(
    cursor: Any, table: str, values: Mapping[str, Any], where: Mapping[str, Any]
) -> int:
    """UPDATE ``table`` SET values WHERE every ``where`` column matches."""
    if not values:
        return 0
    if not where:
        raise StatementError(f"refusing to update {table} without a WHERE clause")
    set_sql = ", ".join(f"{quote_ident(c)} = %s" for c in values)
    where_sql = " AND ".join(f"{quote_ident(c)} = %s" for c in where)
    _execute(
        cursor,
        f"UPDATE {quote_ident(table)} SET {set_sql} WHERE {where_sql}",
        [*values.values(), *where.values()],
    )
    return cursor.rowcount
