from __future__ import annotations

import os
import sqlite3
from contextlib import contextmanager
from typing import Any, Iterator

from .migrations import apply_migrations


def is_postgres_url(url: str | None) -> bool:
    if not url:
        return False
    return url.startswith("postgres://") or url.startswith("postgresql://")


class DBConn:
    def __init__(self, conn: Any, backend: str) -> None:
        self._conn = conn
        self.backend = backend

    def execute(self, sql: str, params: tuple | list | None = None):
        sql = _normalize_sql(sql, self.backend)
        params = params or ()
        cursor = self._conn.cursor()
        cursor.execute(sql, params)
        return cursor

    def commit(self) -> None:
        self._conn.commit()

    def rollback(self) -> None:
        self._conn.rollback()

    def close(self) -> None:
        self._conn.close()

    @contextmanager
    def transaction(self) -> Iterator["DBConn"]:
        """Write transaction that takes the backend's lock up front."""
        if self.backend == "sqlite" and self._conn.in_transaction:
            self._conn.commit()
        if self.backend == "sqlite":
            self._conn.execute("BEGIN IMMEDIATE")
        try:
            yield self
        except Exception:
            self._conn.rollback()
            raise
        self._conn.commit()

    def __getattr__(self, name: str):
        return getattr(self._conn, name)


def connect_db(url: str | None = None, path: str | None = None) -> DBConn:
    if url and is_postgres_url(url):
        try:
            import psycopg
        except ImportError as exc:  # pragma: no cover - depends on env
            raise RuntimeError("psycopg is required for PostgreSQL support") from exc
        conn = DBConn(psycopg.connect(url), "postgres")
    else:
        if not path:
            raise ValueError("sqlite path is required when no postgres url is set")
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        raw = sqlite3.connect(path)
        raw.execute("PRAGMA journal_mode=WAL")
        raw.execute("PRAGMA synchronous=NORMAL")
        raw.execute("PRAGMA busy_timeout=5000")
        conn = DBConn(raw, "sqlite")
    apply_migrations(conn)
    return conn


def _normalize_sql(sql: str, backend: str) -> str:
    if backend != "postgres":
        return sql
    return _convert_qmark_to_percent(sql.replace("BEGIN IMMEDIATE", "BEGIN"))


def _convert_qmark_to_percent(sql: str) -> str:
    out = []
    in_single = False
    in_double = False
    escape = False
    for ch in sql:
        if ch == "\\" and not escape:
            escape = True
            out.append(ch)
            continue
        if ch == "'" and not in_double and not escape:
            in_single = not in_single
        elif ch == '"' and not in_single and not escape:
            in_double = not in_double
        if ch == "?" and not in_single and not in_double:
            out.append("%s")
        else:
            out.append(ch)
        escape = False
    return "".join(out)
