from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import psycopg2

from ..config.loader import DatabaseConfig

"""PostgreSQL connection handling for the CLI.

Connection settings resolve in this order:
    1. DATABASE_URL / PGDSN (or ``database.dsn`` in the config) as a full DSN
    2. PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE
    3. the ``database`` section of the config file
``.env`` is loaded with override before this runs, so its values win.
"""

__all__ = [
    "resolve_dsn",
    "db_cursor",
]

logger = logging.getLogger(__name__)


def resolve_dsn(db_cfg: DatabaseConfig) -> str:
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


@contextmanager
def db_cursor(db_cfg: DatabaseConfig) -> Iterator[Any]:  # pragma: no cover (thin wrapper)
    """Yield a cursor on an autocommit connection.

    Each row's INSERT/UPDATE commits on its own; there is no transaction
    spanning several rows. Cursor and connection are closed on every exit path.
    """
    conn = psycopg2.connect(resolve_dsn(db_cfg))
    try:
        conn.autocommit = True
        cur = conn.cursor()
        try:
            yield cur
        finally:
            cur.close()
    finally:
        conn.close()
        logger.debug("database connection closed")
