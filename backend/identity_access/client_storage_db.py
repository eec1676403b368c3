"""
Database-backed client storage for production use (Postgres/Supabase).

Why: The in-memory backend is not durable and does not scale across instances.
This backend persists each client context's key/value pairs in Postgres while
the cookie stays an opaque random id.

Expected table (see `backend/tools/sql/client_storage.sql`):

    create table public.client_storage (
        client_id  text not null,
        key        text not null,
        value      text not null,
        updated_at timestamptz not null default now(),
        primary key (client_id, key)
    );

Security: use a service role connection string; anon clients must not read
this table.
"""
from __future__ import annotations

import os
import re
from typing import List, Optional

import psycopg
from psycopg import sql

from .client_storage import ClientStorage

_TABLE_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,62}(?:\.[A-Za-z_][A-Za-z0-9_]{0,62})?$")


class DBStorageBackend:
    """Postgres-backed client storage.

    Parameters
    ----------
    dsn:
        Psycopg3 connection string. Falls back to `DATABASE_URL`.
    table:
        Fully qualified table name. Defaults to `public.client_storage`.
    """

    def __init__(self, dsn: str | None = None, table: str = "public.client_storage") -> None:
        self._dsn = dsn or os.getenv("DATABASE_URL", "")
        if not self._dsn:
            raise RuntimeError("No database DSN provided for DBStorageBackend")
        if not _TABLE_RE.match(table or ""):
            raise ValueError("Invalid table name")
        self._table = table

    def client(self, client_id: str) -> ClientStorage:
        return ClientStorage(self, client_id)

    def _ident(self) -> sql.Composed:
        if "." in self._table:
            schema, name = self._table.split(".", 1)
        else:
            schema, name = "public", self._table
        return sql.SQL("{}.{}").format(sql.Identifier(schema), sql.Identifier(name))

    def read(self, client_id: str, key: str) -> Optional[str]:
        stmt = sql.SQL("select value from {} where client_id = %s and key = %s").format(self._ident())
        with psycopg.connect(self._dsn) as conn:
            with conn.cursor() as cur:
                cur.execute(stmt, (client_id, key))
                row = cur.fetchone()
        return str(row[0]) if row else None

    def write(self, client_id: str, key: str, value: str) -> None:
        stmt = sql.SQL(
            "insert into {} (client_id, key, value, updated_at) values (%s, %s, %s, now()) "
            "on conflict (client_id, key) do update set value = excluded.value, updated_at = now()"
        ).format(self._ident())
        with psycopg.connect(self._dsn, autocommit=True) as conn:
            with conn.cursor() as cur:
                cur.execute(stmt, (client_id, key, value))

    def delete(self, client_id: str, key: str) -> None:
        stmt = sql.SQL("delete from {} where client_id = %s and key = %s").format(self._ident())
        with psycopg.connect(self._dsn, autocommit=True) as conn:
            with conn.cursor() as cur:
                cur.execute(stmt, (client_id, key))

    def keys(self, client_id: str) -> List[str]:
        stmt = sql.SQL("select key from {} where client_id = %s order by key").format(self._ident())
        with psycopg.connect(self._dsn) as conn:
            with conn.cursor() as cur:
                cur.execute(stmt, (client_id,))
                rows = cur.fetchall()
        return [str(r[0]) for r in rows]
