from __future__ import annotations

import logging
from typing import Any, Callable

from .utils import utc_now_iso

Migration = Callable[[Any], None]


def apply_migrations(conn: Any) -> None:
    """Apply pending migrations on a DBConn (sqlite or postgres)."""
    logger = logging.getLogger("articlegen.migrations")
    with conn.transaction():
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_migrations (
                version TEXT PRIMARY KEY,
                applied_at TEXT NOT NULL
            )
            """
        )
        applied = {
            row[0]
            for row in conn.execute("SELECT version FROM schema_migrations").fetchall()
        }
        for version, migration in _get_migrations():
            if version in applied:
                logger.debug("migration_skipped version=%s", version)
                continue
            migration(conn)
            conn.execute(
                "INSERT INTO schema_migrations (version, applied_at) VALUES (?, ?)",
                (version, utc_now_iso()),
            )
            logger.info("migration_applied version=%s", version)


def _migration_article_jobs(conn: Any) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS article_jobs (
            id TEXT PRIMARY KEY,
            topic TEXT NOT NULL,
            primary_keyword TEXT NULL,
            payload_json TEXT NULL,
            status TEXT NOT NULL DEFAULT 'pending',
            article_id TEXT NULL,
            error TEXT NULL,
            task_id TEXT NULL,
            locked_by TEXT NULL,
            created_at TEXT NOT NULL,
            started_at TEXT NULL,
            updated_at TEXT NULL
        )
        """
    )
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_article_jobs_status_created ON article_jobs(status, created_at)"
    )


def _migration_articles(conn: Any) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS articles (
            id TEXT NOT NULL,
            slug TEXT PRIMARY KEY,
            href TEXT NOT NULL,
            status TEXT NOT NULL,
            featured INTEGER NOT NULL DEFAULT 0,
            doc_json TEXT NOT NULL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
        """
    )
    conn.execute("CREATE UNIQUE INDEX IF NOT EXISTS idx_articles_id ON articles(id)")


def _get_migrations() -> list[tuple[str, Migration]]:
    return [
        ("001_article_jobs", _migration_article_jobs),
        ("002_articles", _migration_articles),
    ]
