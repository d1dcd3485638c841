from __future__ import annotations

import json
import uuid
from typing import Any

from .config import Config, get_state_db_path
from .db import DBConn, connect_db
from .errors import PersistenceFailure
from .models import ArticleDocument, Job
from .utils import json_dumps, utc_now_iso

_JOB_COLUMNS = """
    id, topic, primary_keyword, payload_json, status, article_id, error, task_id,
    locked_by, created_at, started_at, updated_at
"""


def init_db(config: Config | None = None, path: str | None = None) -> DBConn:
    if config is not None:
        return connect_db(config.database.url or None, path or get_state_db_path(config))
    return connect_db(None, path)


def enqueue_job(
    conn: Any,
    topic: str,
    primary_keyword: str | None = None,
    payload: dict[str, object] | None = None,
) -> str:
    job_id = _new_job_id()
    now = utc_now_iso()
    conn.execute(
        """
        INSERT INTO article_jobs
            (id, topic, primary_keyword, payload_json, status, article_id, error, task_id,
             locked_by, created_at, started_at, updated_at)
        VALUES (?, ?, ?, ?, 'pending', NULL, NULL, NULL, NULL, ?, NULL, ?)
        """,
        (job_id, topic, primary_keyword, json_dumps(payload) if payload else None, now, now),
    )
    conn.commit()
    return job_id


def claim_next_job(conn: Any, worker_id: str) -> Job | None:
    """Take the oldest pending job and mark it processing, or return None.

    The conditional UPDATE guarantees a single claimant per job even when
    several workers share the store.
    """
    lock_clause = "FOR UPDATE SKIP LOCKED" if conn.backend == "postgres" else ""
    for _ in range(20):
        with conn.transaction():
            cursor = conn.execute(
                f"""
                SELECT id FROM article_jobs
                WHERE status = 'pending'
                ORDER BY created_at ASC, id ASC
                LIMIT 1
                {lock_clause}
                """
            )
            row = cursor.fetchone()
            if not row:
                return None
            now = utc_now_iso()
            cursor = conn.execute(
                """
                UPDATE article_jobs
                SET status = 'processing', locked_by = ?, started_at = ?, updated_at = ?
                WHERE id = ? AND status = 'pending'
                """,
                (worker_id, now, now, row[0]),
            )
            if cursor.rowcount != 1:
                continue
            claimed = conn.execute(
                f"SELECT {_JOB_COLUMNS} FROM article_jobs WHERE id = ?", (row[0],)
            ).fetchone()
        return _row_to_job(claimed)
    return None


def complete_job(conn: Any, job_id: str, article_id: str) -> bool:
    cursor = conn.execute(
        """
        UPDATE article_jobs
        SET status = 'completed', article_id = ?, error = NULL, updated_at = ?
        WHERE id = ? AND status = 'processing'
        """,
        (article_id, utc_now_iso(), job_id),
    )
    conn.commit()
    return cursor.rowcount == 1


def fail_job(conn: Any, job_id: str, error: str) -> bool:
    cursor = conn.execute(
        """
        UPDATE article_jobs
        SET status = 'failed', error = ?, updated_at = ?
        WHERE id = ? AND status = 'processing'
        """,
        (error, utc_now_iso(), job_id),
    )
    conn.commit()
    return cursor.rowcount == 1


def set_job_task_id(conn: Any, job_id: str, task_id: str) -> None:
    conn.execute(
        "UPDATE article_jobs SET task_id = ?, updated_at = ? WHERE id = ?",
        (task_id, utc_now_iso(), job_id),
    )
    conn.commit()


def get_job(conn: Any, job_id: str) -> Job | None:
    row = conn.execute(
        f"SELECT {_JOB_COLUMNS} FROM article_jobs WHERE id = ?", (job_id,)
    ).fetchone()
    return _row_to_job(row) if row else None


def list_jobs(conn: Any, limit: int = 50, status: str | None = None) -> list[Job]:
    if status:
        cursor = conn.execute(
            f"""
            SELECT {_JOB_COLUMNS} FROM article_jobs
            WHERE status = ?
            ORDER BY created_at DESC
            LIMIT ?
            """,
            (status, limit),
        )
    else:
        cursor = conn.execute(
            f"SELECT {_JOB_COLUMNS} FROM article_jobs ORDER BY created_at DESC LIMIT ?",
            (limit,),
        )
    return [_row_to_job(row) for row in cursor.fetchall()]


def upsert_article(conn: Any, article: ArticleDocument) -> str:
    """Insert or replace the article stored under ``article.slug``.

    Returns the stored article id.
    """
    if not isinstance(article, ArticleDocument):
        raise TypeError("upsert_article expects a finalized ArticleDocument")
    now = utc_now_iso()
    try:
        conn.execute(
            """
            INSERT INTO articles
                (id, slug, href, status, featured, doc_json, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT (slug) DO UPDATE SET
                id = excluded.id,
                href = excluded.href,
                status = excluded.status,
                featured = excluded.featured,
                doc_json = excluded.doc_json,
                updated_at = excluded.updated_at
            """,
            (
                article.id,
                article.slug,
                article.href,
                article.status,
                1 if article.featured else 0,
                json_dumps(article.doc, sort_keys=False),
                now,
                now,
            ),
        )
        row = conn.execute(
            "SELECT id FROM articles WHERE slug = ?", (article.slug,)
        ).fetchone()
        conn.commit()
    except Exception as exc:  # noqa: BLE001
        conn.rollback()
        raise PersistenceFailure(f"DB upsert failed: {exc}") from exc
    if not row:
        raise PersistenceFailure(f"DB upsert failed: no row for slug {article.slug}")
    return row[0]


def get_article_by_slug(conn: Any, slug: str) -> dict[str, object] | None:
    row = conn.execute(
        """
        SELECT id, slug, href, status, featured, doc_json, created_at, updated_at
        FROM articles
        WHERE slug = ?
        """,
        (slug,),
    ).fetchone()
    if not row:
        return None
    article_id, slug, href, status, featured, doc_json, created_at, updated_at = row
    return {
        "id": article_id,
        "slug": slug,
        "href": href,
        "status": status,
        "featured": bool(featured),
        "doc": json.loads(doc_json),
        "created_at": created_at,
        "updated_at": updated_at,
    }


def count_articles(conn: Any) -> int:
    return int(conn.execute("SELECT COUNT(*) FROM articles").fetchone()[0])


def _row_to_job(row: tuple) -> Job:
    (
        job_id,
        topic,
        primary_keyword,
        payload_json,
        status,
        article_id,
        error,
        task_id,
        locked_by,
        created_at,
        started_at,
        updated_at,
    ) = row
    try:
        payload = json.loads(payload_json) if payload_json else {}
    except json.JSONDecodeError:
        payload = {}
    return Job(
        id=job_id,
        topic=topic,
        primary_keyword=primary_keyword,
        payload=payload if isinstance(payload, dict) else {},
        status=status,
        article_id=article_id,
        error=error,
        task_id=task_id,
        locked_by=locked_by,
        created_at=created_at,
        started_at=started_at,
        updated_at=updated_at,
    )


def _new_job_id() -> str:
    return f"job_{uuid.uuid4().hex}"
