from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from .errors import EmptyGenerationResult

EVIDENCE_LIMITS = {
    "coreClaims": 12,
    "definitions": 10,
    "numbers": 12,
    "faq": 10,
    "sources": 25,
}


@dataclass(frozen=True)
class Job:
    id: str
    topic: str
    primary_keyword: str | None
    payload: dict[str, object]
    status: str
    article_id: str | None
    error: str | None
    task_id: str | None
    locked_by: str | None
    created_at: str
    started_at: str | None
    updated_at: str | None


class LanguageSpec(BaseModel):
    model_config = ConfigDict(extra="allow")

    code: str
    locale: str
    direction: Literal["rtl", "ltr"]
    isRTL: bool


class JobPayload(BaseModel):
    """Per-job options stored in ``article_jobs.payload_json``."""

    model_config = ConfigDict(extra="ignore")

    language: LanguageSpec | None = None
    status: Literal["draft", "published", "archived"] | None = None
    featured: bool | None = None
    siteBaseUrl: str | None = None


@dataclass(frozen=True)
class EvidencePack:
    core_claims: list[dict[str, Any]] = field(default_factory=list)
    definitions: list[dict[str, Any]] = field(default_factory=list)
    numbers: list[dict[str, Any]] = field(default_factory=list)
    faq: list[dict[str, Any]] = field(default_factory=list)
    sources: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_research(cls, data: dict[str, Any]) -> "EvidencePack":
        """Condense a research response to the fixed per-list maximums."""

        def take(key: str) -> list[dict[str, Any]]:
            items = data.get(key)
            if not isinstance(items, list):
                return []
            return list(items[: EVIDENCE_LIMITS[key]])

        return cls(
            core_claims=take("coreClaims"),
            definitions=take("definitions"),
            numbers=take("numbers"),
            faq=take("faq"),
            sources=take("sources"),
        )

    def to_prompt_dict(self) -> dict[str, Any]:
        return {
            "coreClaims": self.core_claims,
            "definitions": self.definitions,
            "numbers": self.numbers,
            "faq": self.faq,
            "sources": self.sources,
        }


@dataclass(frozen=True)
class RawDocument:
    """Untrusted generator output; only the finalizer turns it into an article."""

    data: dict[str, Any]

    @classmethod
    def from_payload(cls, payload: Any) -> "RawDocument":
        if payload is None or not isinstance(payload, dict):
            raise EmptyGenerationResult("Agent returned empty/invalid data")
        return cls(data=copy.deepcopy(payload))

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)


@dataclass(frozen=True)
class ArticleDocument:
    id: str
    slug: str
    href: str
    status: str
    featured: bool
    doc: dict[str, Any]


@dataclass(frozen=True)
class JobOutcome:
    job_id: str
    status: Literal["completed", "failed"]
    article_id: str | None = None
    slug: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == "completed"
