# Shared pytest fixtures
from __future__ import annotations

import importlib.util
import re
import tempfile
from collections.abc import Iterable
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import pytest

from vertical_import.logging.init import reset_logging

SAMPLE_DUMP = """\
*************************** 1. row ***************************
COLUMN_title: Foo
COLUMN_date: 2020-01-01
COLUMN_abstract: line one
line two
COLUMN_publish: 1
*************************** 2. row ***************************
COLUMN_title: Bar
COLUMN_publish: 0
COLUMN_room: B 101
"""


class MemoryStore:
    """Records kept by an in-memory model plus a log of every call made."""

    def __init__(self) -> None:
        self.records: list[Any] = []
        self.calls: list[tuple[Any, ...]] = []

    def count(self, kind: str) -> int:
        return sum(1 for c in self.calls if c[0] == kind)


def make_memory_model(
    name: str = "Seminar",
    columns: Iterable[str] = ("title", "date", "description", "published", "speaker"),
    required: Iterable[str] = ("title",),
) -> type:
    """Build a fresh ImportableModel class backed by its own MemoryStore."""
    store = MemoryStore()
    cols = tuple(columns)
    req = frozenset(required)

    class Model:
        def __init__(self) -> None:
            for c in cols:
                setattr(self, c, None)

        @classmethod
        def settable(cls, attr: str) -> bool:
            return attr in cols

        @classmethod
        def find_by(cls, attribute: str, value: Any) -> Any:
            store.calls.append(("find_by", attribute, value))
            for record in store.records:
                if getattr(record, attribute) == value:
                    return record
            return None

        def validate(self) -> list[str]:
            store.calls.append(("validate",))
            return [f"{c} can't be blank" for c in sorted(req) if not getattr(self, c)]

        def dump(self) -> str:
            return f"#<{name} {self.attributes()!r}>"

        def attributes(self) -> dict[str, Any]:
            return {c: getattr(self, c) for c in cols}

        def save(self) -> None:
            store.calls.append(("save",))
            store.records.append(self)

        def update_attributes(self, values: dict[str, Any]) -> None:
            store.calls.append(("update", dict(values)))
            for k, v in values.items():
                setattr(self, k, v)

    Model.__name__ = name
    Model.__qualname__ = name
    Model.store = store  # type: ignore[attr-defined]
    return Model


SEMINAR_COLUMNS = [
    ("id", "NO", "nextval('seminars_id_seq')", "NO"),
    ("title", "NO", None, "NO"),
    ("date", "YES", None, "NO"),
    ("description", "YES", None, "NO"),
    ("published", "YES", None, "NO"),
]


class ScriptedCursor:
    """DB-API cursor stand-in.

    Answers information_schema queries from fixed metadata, serves
    ``SELECT * ... WHERE "col" = %s`` from ``records`` and appends inserted
    rows to it. Every statement is kept in ``queries``.
    """

    _SELECT_RE = re.compile(r'WHERE "(\w+)" = %s LIMIT 1')
    _INSERT_RE = re.compile(r'INSERT INTO "\w+" \(([^)]*)\)')

    def __init__(self, columns=SEMINAR_COLUMNS, pk=("id",), records=None) -> None:
        self.columns = list(columns)
        self.pk = list(pk)
        self.records: list[dict[str, Any]] = [dict(r) for r in records or []]
        self.queries: list[tuple[str, list]] = []
        self.description: list[tuple] | None = None
        self.rowcount = 1
        self._result: list[tuple] = []

    def execute(self, sql, params=()):
        params = list(params)
        self.queries.append((sql, params))
        self._result = []
        if "information_schema.columns" in sql:
            self._result = list(self.columns)
        elif "PRIMARY KEY" in sql:
            self._result = [(c,) for c in self.pk]
        elif sql.startswith("SELECT *"):
            column = self._SELECT_RE.search(sql).group(1)
            for record in self.records:
                if record.get(column) == params[0]:
                    self.description = [(k,) for k in record]
                    self._result = [tuple(record.values())]
                    break
        elif sql.startswith("INSERT"):
            m = self._INSERT_RE.search(sql)
            names = [n.strip('"') for n in m.group(1).split(",")] if m else []
            self.records.append(dict(zip(names, params)))

    def fetchall(self):
        return self._result

    def fetchone(self):
        return self._result[0] if self._result else None

    def statements(self, verb: str) -> list[tuple[str, list]]:
        return [q for q in self.queries if q[0].startswith(verb)]


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def model_factory():
    return make_memory_model


@pytest.fixture()
def cursor_factory():
    return ScriptedCursor


@pytest.fixture()
def fake_db(monkeypatch):
    """Route the CLI's db_cursor to a ScriptedCursor; yields that cursor."""
    cursor = ScriptedCursor()

    @contextmanager
    def _db_cursor(db_cfg):
        yield cursor

    monkeypatch.setattr("vertical_import.cli.__main__.db_cursor", _db_cursor)
    return cursor


@pytest.fixture(scope="session")
def dump_generator():
    """scripts/gen_dump_dataset.py loaded as a module (scripts/ is not a package)."""
    path = Path(__file__).resolve().parents[1] / "scripts" / "gen_dump_dataset.py"
    spec = importlib.util.spec_from_file_location("gen_dump_dataset", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture()
def sample_dump_text() -> str:
    return SAMPLE_DUMP


@pytest.fixture()
def write_dump(temp_workdir: Path, sample_dump_text: str) -> Path:
    path = temp_workdir / "data" / "seminars.txt"
    path.write_text(sample_dump_text, encoding="utf-8")
    return path


@pytest.fixture()
def sample_config_yaml() -> str:
    return """entity: Seminar
table: seminars
find_by: title
columns_prefix: COLUMN_
map:
  abstract: description
  publish: {attribute: published, transform: flag}
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg
