from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import psycopg2

from employee_import.models.config_models import DatabaseConfig

"""psycopg2 connection handling.

Resolution order for the connection parameters:
    1. ``DATABASE_URL`` / ``PGDSN`` (the CLI loads ``.env`` first, overriding)
    2. individual ``PGHOST`` / ``PGPORT`` / ``PGUSER`` / ``PGPASSWORD`` / ``PGDATABASE``
    3. the ``database`` section of ``config/import.yml`` for anything missing
"""


def build_dsn(db_cfg: DatabaseConfig) -> str:
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
def db_cursor(db_cfg: DatabaseConfig) -> Iterator[Any]:
    """Yield a cursor on an autocommit connection.

    Autocommit makes the explicit BEGIN/COMMIT issued per row by
    ``PostgresStore.transaction()`` the only transaction boundaries.
    """
    conn = psycopg2.connect(build_dsn(db_cfg))
    conn.autocommit = True
    try:
        with conn.cursor() as cur:
            yield cur
    finally:
        conn.close()
