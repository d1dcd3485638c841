from articlegen.errors import PersistenceFailure
from articlegen.models import ArticleDocument
from articlegen.storage import (
    claim_next_job,
    complete_job,
    count_articles,
    enqueue_job,
    fail_job,
    get_article_by_slug,
    get_job,
    init_db,
    set_job_task_id,
    upsert_article,
)

import pytest


def _article(article_id, slug="mortgage-rates", title="Mortgage rates"):
    return ArticleDocument(
        id=article_id,
        slug=slug,
        href=f"/blog/{slug}",
        status="draft",
        featured=False,
        doc={"id": article_id, "slug": slug, "title": title},
    )


def test_enqueue_and_claim_job(config, conn):
    conn2 = init_db(config)

    job_id = enqueue_job(conn, "mortgage rates", "mortgage", {"featured": True})
    claimed = claim_next_job(conn, "worker-1")

    assert claimed is not None
    assert claimed.id == job_id
    assert claimed.status == "processing"
    assert claimed.locked_by == "worker-1"
    assert claimed.primary_keyword == "mortgage"
    assert claimed.payload == {"featured": True}

    second = claim_next_job(conn2, "worker-2")
    assert second is None
    conn2.close()


def test_claim_returns_none_when_queue_empty(conn):
    assert claim_next_job(conn, "worker-1") is None


def test_job_lifecycle_records_result(conn):
    job_id = enqueue_job(conn, "mortgage rates")
    claim_next_job(conn, "worker-1")

    assert complete_job(conn, job_id, "article-1") is True
    job = get_job(conn, job_id)
    assert job.status == "completed"
    assert job.article_id == "article-1"
    assert job.error is None
    assert job.updated_at is not None

    assert complete_job(conn, job_id, "article-2") is False
    assert get_job(conn, job_id).article_id == "article-1"


def test_fail_job_records_reason(conn):
    job_id = enqueue_job(conn, "mortgage rates")
    claim_next_job(conn, "worker-1")

    assert fail_job(conn, job_id, "Agent timeout") is True
    job = get_job(conn, job_id)
    assert job.status == "failed"
    assert job.error == "Agent timeout"
    assert job.article_id is None


def test_fail_job_ignores_unclaimed_job(conn):
    job_id = enqueue_job(conn, "mortgage rates")
    assert fail_job(conn, job_id, "nope") is False
    assert get_job(conn, job_id).status == "pending"


def test_set_job_task_id(conn):
    job_id = enqueue_job(conn, "mortgage rates")
    set_job_task_id(conn, job_id, "agent-123")
    assert get_job(conn, job_id).task_id == "agent-123"


def test_upsert_article_replaces_by_slug(conn):
    first_id = upsert_article(conn, _article("a-1", title="First"))
    second_id = upsert_article(conn, _article("a-2", title="Second"))

    assert first_id == "a-1"
    assert second_id == "a-2"
    assert count_articles(conn) == 1
    stored = get_article_by_slug(conn, "mortgage-rates")
    assert stored["id"] == "a-2"
    assert stored["doc"]["title"] == "Second"
    assert stored["featured"] is False


def test_upsert_article_requires_finalized_document(conn):
    with pytest.raises(TypeError):
        upsert_article(conn, {"slug": "raw"})


def test_upsert_article_wraps_store_errors(conn):
    conn.execute("DROP TABLE articles")
    conn.commit()
    with pytest.raises(PersistenceFailure):
        upsert_article(conn, _article("a-1"))
