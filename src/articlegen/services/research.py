from __future__ import annotations

import logging
from typing import Any, Callable

import jsonschema

from ..config import FirecrawlConfig
from ..errors import ResearchFailure
from ..models import EvidencePack
from ..schemas import RESEARCH_RESPONSE_SCHEMA, RESEARCH_SCHEMA
from ..utils import log_event
from .http import HttpResponse, TransportError, bearer_headers, describe_body, request_json

RESEARCH_PATH = "/v1/deep-research"


class ResearchClient:
    """Single-shot deep research call; any failure fails the job."""

    def __init__(
        self,
        config: FirecrawlConfig,
        *,
        transport: Callable[..., HttpResponse] = request_json,
        logger: logging.Logger | None = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._logger = logger or logging.getLogger("articlegen.research")

    def research(self, query: str) -> EvidencePack:
        payload = {
            "query": query,
            "formats": ["json"],
            "jsonOptions": {"schema": RESEARCH_SCHEMA},
            "maxCredits": self._config.research_credits,
        }
        try:
            response = self._transport(
                "POST",
                self._config.base_url + RESEARCH_PATH,
                headers=bearer_headers(self._config.api_key),
                payload=payload,
                timeout_seconds=self._config.timeout_seconds,
            )
        except TransportError as exc:
            raise ResearchFailure(f"Deep research failed: {exc}") from exc
        if not response.ok:
            raise ResearchFailure(
                f"Deep research failed: HTTP {response.status} {describe_body(response.body)}"
            )
        data = _extract_evidence(response.body)
        pack = EvidencePack.from_research(data)
        log_event(
            self._logger,
            logging.INFO,
            "research_complete",
            claims=len(pack.core_claims),
            sources=len(pack.sources),
        )
        return pack


def _extract_evidence(body: Any) -> dict[str, Any]:
    if not isinstance(body, dict):
        raise ResearchFailure("Deep research failed: response body is not an object")
    data = body.get("data")
    if data is None:
        data = body
    if isinstance(data, dict) and isinstance(data.get("json"), dict):
        data = data["json"]
    if not isinstance(data, dict):
        raise ResearchFailure("Deep research failed: evidence is not an object")
    try:
        jsonschema.validate(data, RESEARCH_RESPONSE_SCHEMA)
    except jsonschema.ValidationError as exc:
        raise ResearchFailure(f"Deep research returned malformed evidence: {exc.message}") from exc
    return data
