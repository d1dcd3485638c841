from __future__ import annotations

import logging
import time
from typing import Any, Callable

from ..config import FirecrawlConfig, JobsConfig
from ..errors import (
    GenerationPollFailure,
    GenerationStartFailure,
    GenerationTaskFailure,
    GenerationTimeout,
)
from ..models import RawDocument
from ..schemas import ARTICLE_SCHEMA
from ..utils import log_event
from .http import HttpResponse, TransportError, bearer_headers, describe_body, request_json

AGENT_PATH = "/v2/agent"

STATUS_PROCESSING = "processing"
STATUS_COMPLETED = "completed"
STATUS_FAILED = "failed"


class GenerationClient:
    """Starts an asynchronous agent task and polls it to completion.

    ``poll`` enforces a wall-clock budget measured from its first call,
    independent of whatever the service reports.
    """

    def __init__(
        self,
        config: FirecrawlConfig,
        jobs: JobsConfig,
        *,
        transport: Callable[..., HttpResponse] = request_json,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        logger: logging.Logger | None = None,
    ) -> None:
        self._config = config
        self._poll_seconds = jobs.agent_poll_seconds
        self._max_wait_seconds = jobs.agent_max_wait_seconds
        self._transport = transport
        self._clock = clock
        self._sleep = sleep
        self._logger = logger or logging.getLogger("articlegen.generation")

    def start(self, prompt: str) -> str:
        payload = {
            "prompt": prompt,
            "schema": ARTICLE_SCHEMA,
            "maxCredits": self._config.agent_credits,
        }
        try:
            response = self._transport(
                "POST",
                self._config.base_url + AGENT_PATH,
                headers=bearer_headers(self._config.api_key),
                payload=payload,
                timeout_seconds=self._config.timeout_seconds,
            )
        except TransportError as exc:
            raise GenerationStartFailure(f"Agent start failed: {exc}") from exc
        body = response.body if isinstance(response.body, dict) else {}
        task_id = body.get("id")
        if not response.ok or not body.get("success") or not task_id:
            raise GenerationStartFailure(f"Agent start failed: {describe_body(response.body)}")
        log_event(self._logger, logging.INFO, "generation_started", task_id=task_id)
        return str(task_id)

    def poll(self, task_id: str) -> RawDocument:
        started = self._clock()
        attempts = 0
        while True:
            elapsed = self._clock() - started
            if elapsed > self._max_wait_seconds:
                raise GenerationTimeout(elapsed, self._max_wait_seconds)
            attempts += 1
            status, body = self._fetch_status(task_id)
            log_event(
                self._logger,
                logging.DEBUG,
                "generation_poll",
                task_id=task_id,
                attempt=attempts,
                status=status,
            )
            if status == STATUS_COMPLETED:
                return RawDocument.from_payload(body.get("data"))
            if status == STATUS_FAILED:
                raise GenerationTaskFailure(str(body.get("error") or "unknown"))
            self._sleep(self._poll_seconds)

    def generate(self, prompt: str, on_started: Callable[[str], None] | None = None) -> RawDocument:
        task_id = self.start(prompt)
        if on_started is not None:
            on_started(task_id)
        return self.poll(task_id)

    def _fetch_status(self, task_id: str) -> tuple[str | None, dict[str, Any]]:
        try:
            response = self._transport(
                "GET",
                f"{self._config.base_url}{AGENT_PATH}/{task_id}",
                headers=bearer_headers(self._config.api_key),
                payload=None,
                timeout_seconds=self._config.timeout_seconds,
            )
        except TransportError as exc:
            raise GenerationPollFailure(str(exc)) from exc
        body = response.body if isinstance(response.body, dict) else {}
        if not response.ok or not body.get("success"):
            raise GenerationPollFailure(describe_body(response.body))
        return body.get("status"), body
