from __future__ import annotations

import logging
import pprint
from typing import Any, ClassVar

from .statements import (
    StatementError,
    fetch_columns,
    fetch_primary_key,
    insert_row,
    select_one,
    update_rows,
)

"""Table-backed model classes.

``reflect_table`` builds a TableModel subclass for one PostgreSQL table by
reading information_schema. Instances behave like plain objects: columns are
attributes (None when unset). A subclass with ``columns = None`` accepts any
attribute and has no store; the CLI uses it for ``--dry-run``.
"""

__all__ = [
    "TableModel",
    "reflect_table",
    "permissive_model",
]

logger = logging.getLogger(__name__)


class TableModel:
    table: ClassVar[str] = ""
    columns: ClassVar[tuple[str, ...] | None] = None
    required: ClassVar[frozenset[str]] = frozenset()
    primary_key: ClassVar[tuple[str, ...]] = ()
    cursor: ClassVar[Any] = None

    def __init__(self, **values: Any) -> None:
        self._lookup: tuple[str, Any] | None = None
        for name in type(self).columns or ():
            setattr(self, name, None)
        for name, value in values.items():
            setattr(self, name, value)

    @classmethod
    def settable(cls, name: str) -> bool:
        if not name.isidentifier() or name.startswith("_") or name in _RESERVED:
            return False
        return cls.columns is None or name in cls.columns

    def attributes(self) -> dict[str, Any]:
        columns = type(self).columns
        if columns is not None:
            return {name: getattr(self, name, None) for name in columns}
        return {k: v for k, v in vars(self).items() if not k.startswith("_")}

    def validate(self) -> list[str]:
        values = self.attributes()
        return [f"{name} can't be blank" for name in sorted(type(self).required) if values.get(name) in (None, "")]

    def dump(self) -> str:
        return f"#<{type(self).__name__} {pprint.pformat(self.attributes(), sort_dicts=False)}>"

    def __repr__(self) -> str:
        return self.dump()

    @classmethod
    def _require_cursor(cls) -> Any:
        if cls.cursor is None:
            raise StatementError(f"{cls.__name__} is not bound to a database cursor")
        return cls.cursor

    @classmethod
    def find_by(cls, attribute: str, value: Any) -> TableModel | None:
        found = select_one(cls._require_cursor(), cls.table, attribute, value)
        if found is None:
            return None
        instance = cls(**{k: v for k, v in found.items() if cls.settable(k)})
        instance._lookup = (attribute, value)
        return instance

    def save(self) -> None:
        cls = type(self)
        insert_row(cls._require_cursor(), cls.table, self.attributes())
        logger.debug("inserted into %s", cls.table)

    def update_attributes(self, values: dict[str, Any]) -> None:
        """Merge ``values`` into the stored record this instance was loaded from.

        Primary-key columns in ``values`` are ignored: the record keeps the key
        it was found under, even when the dump comes from another database.
        """
        cls = type(self)
        if cls.primary_key:
            where = {name: getattr(self, name, None) for name in cls.primary_key}
            changes = {k: v for k, v in values.items() if k not in cls.primary_key}
        elif self._lookup is not None:
            where = dict([self._lookup])
            changes = dict(values)
        else:
            raise StatementError(f"cannot update {cls.table}: no primary key and no lookup key")
        for name, value in changes.items():
            setattr(self, name, value)
        count = update_rows(cls._require_cursor(), cls.table, changes, where)
        logger.debug("updated %d row(s) in %s where %s", count, cls.table, where)


def reflect_table(cursor: Any, table: str, name: str | None = None) -> type[TableModel]:
    """Build a TableModel subclass mirroring ``table``.

    Raises:
        StatementError: the table does not exist or cannot be inspected
    """
    infos = fetch_columns(cursor, table)
    if not infos:
        raise StatementError(f"table not found or has no columns: {table}")
    shadowing = [c.name for c in infos if c.name in _RESERVED]
    if shadowing:
        logger.warning("table=%s columns %s clash with model methods and are skipped", table, shadowing)
        infos = [c for c in infos if c.name not in _RESERVED]
    pk = fetch_primary_key(cursor, table)
    model = type(
        name or table.title().replace("_", ""),
        (TableModel,),
        {
            "table": table,
            "columns": tuple(c.name for c in infos),
            "required": frozenset(c.name for c in infos if c.required),
            "primary_key": tuple(pk),
            "cursor": cursor,
        },
    )
    logger.debug(
        "reflected table=%s columns=%d required=%s pk=%s",
        table,
        len(infos),
        sorted(model.required),
        pk,
    )
    return model


def permissive_model(name: str, table: str = "") -> type[TableModel]:
    """A model that accepts every column and is bound to no store."""
    return type(name, (TableModel,), {"table": table, "columns": None})


# names that would shadow TableModel behaviour when assigned on an instance
_RESERVED = frozenset(name for name in dir(TableModel) if not name.startswith("__"))
