from __future__ import annotations

import copy
import math
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable

from ..config import Config, SiteConfig
from ..errors import EmptyGenerationResult
from ..models import ArticleDocument, Job, JobPayload, RawDocument
from ..utils import format_display_date, slugify, utc_now
from .metrics import (
    TOC_WORD_THRESHOLD,
    bullet_items,
    compute_metrics,
    enforce_bullet_limits,
    sections_meta,
    sections_of,
    subsections_of,
)

TWITTER_CARD = "summary_large_image"
ROBOTS = "index, follow"


@dataclass(frozen=True)
class JobOptions:
    language: dict[str, Any]
    status: str
    featured: bool
    site_base_url: str


def resolve_job_options(job: Job, site: SiteConfig) -> JobOptions:
    """Apply site defaults to the job payload. Raises pydantic ValidationError."""
    payload = JobPayload.model_validate(job.payload or {})
    language = payload.language.model_dump() if payload.language else dict(site.default_language)
    return JobOptions(
        language=language,
        status=payload.status or site.default_status,
        featured=bool(payload.featured),
        site_base_url=(payload.siteBaseUrl or site.base_url).rstrip("/"),
    )


def finalize(
    raw: RawDocument | None,
    job: Job,
    config: Config,
    *,
    now: datetime | None = None,
    new_id: Callable[[], str] = lambda: str(uuid.uuid4()),
) -> ArticleDocument:
    """Turn untrusted generator output into a persistable article.

    Every derived number is recomputed from content; workflow fields come
    from the job. Raises EmptyGenerationResult or SchemaViolation.
    """
    if raw is None or not isinstance(raw.data, dict):
        raise EmptyGenerationResult("Agent returned empty/invalid data")
    options = resolve_job_options(job, config.site)
    now = now or utc_now()
    iso = now.isoformat()
    doc: dict[str, Any] = copy.deepcopy(raw.data)

    doc["id"] = new_id()
    doc["slug"] = _resolve_slug(doc, job, doc["id"])
    doc["href"] = _non_empty(doc.get("href")) or f"{config.site.href_prefix}{doc['slug']}"

    doc["status"] = options.status
    doc["featured"] = options.featured
    doc["language"] = dict(options.language)

    doc["datePublished"] = _non_empty(doc.get("datePublished")) or iso
    doc["dateModified"] = iso
    doc["displayDate"] = _non_empty(doc.get("displayDate")) or format_display_date(
        now, options.language.get("locale", "")
    )
    doc["version"] = doc["version"] if _is_finite_number(doc.get("version")) else 1

    doc["analytics"] = {"views": 0, "avgTimeOnPage": 0, "bounceRate": 0, "conversionRate": 0}

    content = doc["content"] if isinstance(doc.get("content"), dict) else {}
    doc["content"] = content
    if not isinstance(content.get("intro"), dict):
        content["intro"] = {"hook": "", "wordCount": 0}

    enforce_bullet_limits(doc)

    metrics = compute_metrics(doc)
    doc["metrics"] = metrics
    word_count = metrics["wordCount"]
    content["intro"]["wordCount"] = word_count["bySection"]["intro"]
    _stamp_section_counts(doc, word_count["bySection"]["sections"])

    toc = content["tableOfContents"] if isinstance(content.get("tableOfContents"), dict) else {}
    toc.setdefault("sections", [])
    toc["enabled"] = word_count["total"] > TOC_WORD_THRESHOLD
    content["tableOfContents"] = toc

    content["sectionsMeta"] = sections_meta(
        len(sections_of(doc)), word_count["total"], word_count["bySection"]["intro"]
    )

    doc["metadata"] = _fill_metadata(doc, options.site_base_url)

    return ArticleDocument(
        id=doc["id"],
        slug=doc["slug"],
        href=doc["href"],
        status=doc["status"],
        featured=doc["featured"],
        doc=doc,
    )


def _resolve_slug(doc: dict[str, Any], job: Job, article_id: str) -> str:
    for candidate in (doc.get("slug"), doc.get("title"), job.topic):
        slug = slugify(_non_empty(candidate) or "")
        if slug:
            return slug
    return f"article-{article_id[:8]}"


def _stamp_section_counts(doc: dict[str, Any], section_words: list[int]) -> None:
    for section, words in zip(sections_of(doc), section_words):
        if not isinstance(section, dict):
            continue
        section["wordCount"] = words
        for block in [section, *subsections_of(section)]:
            items = bullet_items(block)
            if items is not None:
                block["bulletPoints"]["count"] = len(items)


def _fill_metadata(doc: dict[str, Any], site_base_url: str) -> dict[str, Any]:
    metadata = doc["metadata"] if isinstance(doc.get("metadata"), dict) else {}
    metadata["canonicalUrl"] = _non_empty(metadata.get("canonicalUrl")) or f"{site_base_url}{doc['href']}"
    metadata["ogTitle"] = _non_empty(metadata.get("ogTitle")) or _non_empty(doc.get("title")) or ""
    metadata["ogDescription"] = (
        _non_empty(metadata.get("ogDescription")) or _non_empty(doc.get("description")) or ""
    )
    metadata["twitterCard"] = _non_empty(metadata.get("twitterCard")) or TWITTER_CARD
    metadata["robots"] = _non_empty(metadata.get("robots")) or ROBOTS
    image = doc.get("image")
    if not _non_empty(metadata.get("ogImage")) and isinstance(image, dict):
        image_url = _non_empty(image.get("url"))
        if image_url:
            metadata["ogImage"] = image_url
    return metadata


def _non_empty(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _is_finite_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)
