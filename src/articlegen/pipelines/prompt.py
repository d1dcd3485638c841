from __future__ import annotations

import json
from typing import Any

from ..models import EvidencePack
from .metrics import MAX_BULLET_ITEMS, TOC_WORD_THRESHOLD


def build_research_query(topic: str, primary_keyword: str | None) -> str:
    if primary_keyword:
        return f"{topic}\nPrimary keyword: {primary_keyword}"
    return topic


def build_generation_prompt(
    topic: str,
    primary_keyword: str | None,
    language: dict[str, Any],
    evidence: EvidencePack,
) -> str:
    language_json = json.dumps(language, ensure_ascii=False)
    evidence_json = json.dumps(evidence.to_prompt_dict(), ensure_ascii=False)
    return f"""
Return ONE JSON object only (no markdown) matching the provided JSON Schema EXACTLY.

QUALITY & ACCURACY:
- Use ONLY facts/claims supported by the Research Pack.
- Put URLs you relied on into seo.externalLinks (real URLs only).
- Do not invent numbers or legal/financial claims. If uncertain, say so or omit.
- bulletPoints.count MUST equal bulletPoints.items.length everywhere.
- bullet lists max {MAX_BULLET_ITEMS} items; aeo.speakable max 10 items.
- analytics values must be 0.
- content.tableOfContents.enabled must be true only if total wordCount > {TOC_WORD_THRESHOLD}.

STRUCTURE:
- title: 50-60 chars; include primary keyword naturally.
- description: 150-160 chars.
- intro.hook: direct answer in 1-3 sentences.
- 3-5 H2 sections recommended.
- Must include content.sectionsMeta (count + avgWordsPerSection).

LANGUAGE:
- Produce content in {language.get("locale", "")}
- Set language object exactly: {language_json}

INPUTS:
Topic: {topic}
Primary keyword: {primary_keyword or ""}

RESEARCH PACK (JSON):
{evidence_json}
"""
