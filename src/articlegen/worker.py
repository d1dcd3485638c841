from __future__ import annotations

import argparse
import logging
import os
import threading
from typing import Any

from .config import Config, ConfigError, load_config
from .models import ArticleDocument, Job, JobOutcome
from .pipelines.finalize import finalize, resolve_job_options
from .pipelines.prompt import build_generation_prompt, build_research_query
from .services import GenerationClient, ResearchClient
from .storage import (
    claim_next_job,
    complete_job,
    fail_job,
    init_db,
    set_job_task_id,
    upsert_article,
)
from .utils import configure_logging, log_event


def _setup_logging() -> logging.Logger:
    return configure_logging("articlegen.worker")


def build_clients(config: Config, logger: logging.Logger) -> tuple[ResearchClient, GenerationClient]:
    research = ResearchClient(config.firecrawl, logger=logger)
    generation = GenerationClient(config.firecrawl, config.jobs, logger=logger)
    return research, generation


def run_claimed_job(
    conn,
    config: Config,
    job: Job,
    research: ResearchClient,
    generation: GenerationClient,
    logger: logging.Logger,
) -> tuple[ArticleDocument, str]:
    """Run research, generation, finalize and persist for one claimed job.

    Raises on any stage failure; nothing is persisted unless finalize passed.
    """
    options = resolve_job_options(job, config.site)

    _log_stage(logger, job, "researching")
    evidence = research.research(build_research_query(job.topic, job.primary_keyword))

    _log_stage(logger, job, "generating")
    prompt = build_generation_prompt(job.topic, job.primary_keyword, options.language, evidence)
    raw = generation.generate(prompt, on_started=lambda task_id: set_job_task_id(conn, job.id, task_id))

    _log_stage(logger, job, "finalizing")
    article = finalize(raw, job, config)

    _log_stage(logger, job, "persisting")
    article_id = upsert_article(conn, article)
    return article, article_id


def process_claimed_job(
    conn,
    config: Config,
    job: Job,
    research: ResearchClient,
    generation: GenerationClient,
    logger: logging.Logger,
) -> JobOutcome:
    try:
        article, article_id = run_claimed_job(conn, config, job, research, generation, logger)
    except Exception as exc:  # noqa: BLE001
        message = _error_message(exc)
        log_event(logger, logging.ERROR, "job_failed", job_id=job.id, error=message)
        fail_job(conn, job.id, message)
        return JobOutcome(job_id=job.id, status="failed", error=message)

    complete_job(conn, job.id, article_id)
    log_event(
        logger,
        logging.INFO,
        "job_succeeded",
        job_id=job.id,
        article_id=article_id,
        slug=article.slug,
    )
    return JobOutcome(job_id=job.id, status="completed", article_id=article_id, slug=article.slug)


def connect_store(config: Config, logger: logging.Logger, stop_event: Any) -> Any | None:
    """Open the store and apply migrations, retrying while it is unreachable.

    Returns None only when ``stop_event`` is set before a connection succeeds.
    """
    while not stop_event.is_set():
        try:
            return init_db(config)
        except Exception as exc:  # noqa: BLE001
            log_event(logger, logging.ERROR, "loop_error", error=_error_message(exc))
            stop_event.wait(config.jobs.poll_interval_seconds)
    return None


def run_once(
    conn,
    config: Config,
    worker_id: str,
    research: ResearchClient,
    generation: GenerationClient,
    logger: logging.Logger,
) -> JobOutcome | None:
    """Claim and process at most one job. Claim errors propagate."""
    job = claim_next_job(conn, worker_id)
    if not job:
        return None
    log_event(logger, logging.INFO, "job_claimed", job_id=job.id, topic=job.topic)
    return process_claimed_job(conn, config, job, research, generation, logger)


def run_loop(
    conn,
    config: Config,
    worker_id: str,
    research: ResearchClient,
    generation: GenerationClient,
    logger: logging.Logger,
    stop_event: Any | None = None,
) -> int:
    """Process jobs one at a time until ``stop_event`` is set.

    Idle waits go through ``stop_event.wait`` so a stop request ends them early.
    """
    stop_event = stop_event or threading.Event()
    idle_seconds = config.jobs.poll_interval_seconds
    while not stop_event.is_set():
        try:
            outcome = run_once(conn, config, worker_id, research, generation, logger)
        except Exception as exc:  # noqa: BLE001
            log_event(logger, logging.ERROR, "loop_error", error=_error_message(exc))
            stop_event.wait(idle_seconds)
            continue
        if outcome is None:
            stop_event.wait(idle_seconds)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="articlegen-worker")
    parser.add_argument("--once", action="store_true", help="Process at most one job and exit")
    parser.add_argument("--worker-id", default=os.environ.get("HOSTNAME", "worker"))
    parser.add_argument("--config", default=None, help="YAML config file (defaults to AG_CONFIG_FILE)")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logger = _setup_logging()
    try:
        config = load_config(args.config)
    except ConfigError as exc:
        log_event(logger, logging.ERROR, "config_error", error=str(exc))
        return 1
    stop_event = threading.Event()
    conn = connect_store(config, logger, stop_event)
    if conn is None:
        return 0
    research, generation = build_clients(config, logger)
    log_event(logger, logging.INFO, "worker_started", worker_id=args.worker_id)
    try:
        if args.once:
            outcome = run_once(conn, config, args.worker_id, research, generation, logger)
            return 0 if outcome is None or outcome.ok else 1
        return run_loop(conn, config, args.worker_id, research, generation, logger, stop_event)
    finally:
        conn.close()


def _log_stage(logger: logging.Logger, job: Job, stage: str) -> None:
    log_event(logger, logging.INFO, "job_stage", job_id=job.id, stage=stage)


def _error_message(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


if __name__ == "__main__":
    raise SystemExit(main())
