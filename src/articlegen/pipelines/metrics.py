from __future__ import annotations

from typing import Any

from ..errors import SchemaViolation
from ..utils import clamp, count_words, round_half_up, safe_string

MAX_BULLET_ITEMS = 5
TOC_WORD_THRESHOLD = 1200
WORDS_PER_MINUTE = 200
MAX_READING_MINUTES = 10
MAX_SHAREABLE_SECTIONS = 6


def _list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def sections_of(doc: dict[str, Any]) -> list[Any]:
    return _list(_dict(doc.get("content")).get("sections"))


def subsections_of(section: Any) -> list[Any]:
    return _list(_dict(section).get("subsections"))


def bullet_items(block: Any) -> list[Any] | None:
    """Items of a block's bullet list, or None when it has no list."""
    items = _dict(_dict(block).get("bulletPoints")).get("items")
    return items if isinstance(items, list) else None


def enforce_bullet_limits(doc: dict[str, Any]) -> None:
    for index, section in enumerate(sections_of(doc)):
        _check_items(bullet_items(section), f"sections[{index}]")
        for sub_index, sub in enumerate(subsections_of(section)):
            _check_items(bullet_items(sub), f"sections[{index}].subsections[{sub_index}]")


def _check_items(items: list[Any] | None, where: str) -> None:
    if items is not None and len(items) > MAX_BULLET_ITEMS:
        raise SchemaViolation(
            f"Validation: bulletPoints.items > {MAX_BULLET_ITEMS} at {where} ({len(items)} items)"
        )


def _block_words(block: Any) -> int:
    words = 0
    for paragraph in _list(_dict(block).get("paragraphs")):
        words += count_words(safe_string(_dict(paragraph).get("text")))
    for item in bullet_items(block) or []:
        words += count_words(safe_string(_dict(item).get("text")))
    return words


def section_word_count(section: Any) -> int:
    return _block_words(section) + sum(_block_words(sub) for sub in subsections_of(section))


def intro_word_count(doc: dict[str, Any]) -> int:
    intro = _dict(_dict(doc.get("content")).get("intro"))
    return count_words(safe_string(intro.get("hook")))


def reading_time_minutes(total_words: int) -> int:
    return clamp(round_half_up(total_words / WORDS_PER_MINUTE), 1, MAX_READING_MINUTES)


def compute_metrics(doc: dict[str, Any]) -> dict[str, Any]:
    """Derive the metrics block from document content alone."""
    sections = sections_of(doc)
    intro_words = intro_word_count(doc)
    section_words = [section_word_count(section) for section in sections]
    total_words = intro_words + sum(section_words)

    def level(section: Any) -> Any:
        return _dict(_dict(section).get("heading")).get("level")

    h2_count = sum(1 for section in sections if level(section) == 2)
    h3_count = sum(1 for section in sections if level(section) == 3) + sum(
        len(subsections_of(section)) for section in sections
    )
    bullet_list_count = sum(1 for section in sections if bullet_items(section)) + sum(
        1 for section in sections for sub in subsections_of(section) if bullet_items(sub)
    )

    external_links = _list(_dict(doc.get("seo")).get("externalLinks"))
    button = _dict(_dict(_dict(doc.get("content")).get("cta")).get("button"))

    return {
        "wordCount": {
            "total": total_words,
            "bySection": {"intro": intro_words, "sections": section_words},
            "readingTimeMinutes": reading_time_minutes(total_words),
        },
        "structure": {
            "h1Count": 1,
            "h2Count": h2_count,
            "h3Count": h3_count,
            "bulletListCount": bullet_list_count,
            "maxBulletItemsPerList": MAX_BULLET_ITEMS,
        },
        # not computed here
        "readability": {
            "avgSentenceLength": 0,
            "avgParagraphLength": 0,
            "fleschKincaidGrade": 0,
        },
        "engagement": {
            "estimatedClicks": len(external_links),
            "callToActionPresent": bool(button.get("href")),
            "shareableSections": clamp(h2_count, 1, MAX_SHAREABLE_SECTIONS),
        },
    }


def sections_meta(section_count: int, total_words: int, intro_words: int) -> dict[str, int]:
    if section_count == 0:
        return {"count": 0, "avgWordsPerSection": 0}
    return {
        "count": section_count,
        "avgWordsPerSection": round_half_up((total_words - intro_words) / section_count),
    }
