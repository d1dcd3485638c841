from __future__ import annotations

from typing import Any

# Structured evidence requested from deep research.
RESEARCH_SCHEMA: dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "required": ["coreClaims", "definitions", "numbers", "faq", "sources"],
    "properties": {
        "coreClaims": {
            "type": "array",
            "items": {
                "type": "object",
                "additionalProperties": False,
                "required": ["claim", "confidence", "sources"],
                "properties": {
                    "claim": {"type": "string"},
                    "confidence": {"enum": ["high", "medium", "low"]},
                    "sources": {"type": "array", "items": {"type": "string"}},
                },
            },
        },
        "definitions": {
            "type": "array",
            "items": {
                "type": "object",
                "additionalProperties": False,
                "required": ["term", "definition", "source"],
                "properties": {
                    "term": {"type": "string"},
                    "definition": {"type": "string"},
                    "source": {"type": "string"},
                },
            },
        },
        "numbers": {
            "type": "array",
            "items": {
                "type": "object",
                "additionalProperties": False,
                "required": ["metric", "value", "context", "source"],
                "properties": {
                    "metric": {"type": "string"},
                    "value": {"type": "string"},
                    "context": {"type": "string"},
                    "source": {"type": "string"},
                },
            },
        },
        "faq": {
            "type": "array",
            "items": {
                "type": "object",
                "additionalProperties": False,
                "required": ["question", "shortAnswer", "source"],
                "properties": {
                    "question": {"type": "string"},
                    "shortAnswer": {"type": "string"},
                    "source": {"type": "string"},
                },
            },
        },
        "sources": {
            "type": "array",
            "items": {
                "type": "object",
                "additionalProperties": False,
                "required": ["url", "title", "publisher", "type"],
                "properties": {
                    "url": {"type": "string"},
                    "title": {"type": "string"},
                    "publisher": {"type": "string"},
                    "type": {
                        "enum": [
                            "gov",
                            "major_news",
                            "official_org",
                            "academic",
                            "commercial",
                            "blog",
                            "other",
                        ]
                    },
                },
            },
        },
    },
}

# Accepts research bodies that carry extra top-level fields or omit a list;
# list items are still checked against RESEARCH_SCHEMA.
RESEARCH_RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": RESEARCH_SCHEMA["properties"],
}

_PARAGRAPH: dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "required": ["text", "isSpeakable", "entities"],
    "properties": {
        "text": {"type": "string"},
        "isSpeakable": {"type": "boolean"},
        "entities": {
            "type": "array",
            "items": {
                "type": "object",
                "additionalProperties": False,
                "required": ["text", "isBold"],
                "properties": {
                    "text": {"type": "string"},
                    "isBold": {"type": "boolean"},
                },
            },
        },
    },
}

_BULLET_POINTS: dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "required": ["type", "count", "items"],
    "properties": {
        "type": {"enum": ["unordered", "numbered"]},
        "count": {"type": "number"},
        "items": {
            "type": "array",
            "items": {
                "type": "object",
                "additionalProperties": False,
                "required": ["text", "isSpeakable"],
                "properties": {
                    "text": {"type": "string"},
                    "isSpeakable": {"type": "boolean"},
                },
            },
        },
    },
}


def _object(required: list[str], properties: dict[str, Any]) -> dict[str, Any]:
    return {
        "type": "object",
        "additionalProperties": False,
        "required": required,
        "properties": properties,
    }


def _numbers(*names: str) -> dict[str, Any]:
    return {name: {"type": "number"} for name in names}


_METRICS = _object(
    ["wordCount", "structure", "readability", "engagement"],
    {
        "wordCount": _object(
            ["total", "bySection", "readingTimeMinutes"],
            {
                "total": {"type": "number"},
                "bySection": _object(
                    ["intro", "sections"],
                    {
                        "intro": {"type": "number"},
                        "sections": {"type": "array", "items": {"type": "number"}},
                    },
                ),
                "readingTimeMinutes": {"type": "number"},
            },
        ),
        "structure": _object(
            ["h1Count", "h2Count", "h3Count", "bulletListCount", "maxBulletItemsPerList"],
            _numbers("h1Count", "h2Count", "h3Count", "bulletListCount", "maxBulletItemsPerList"),
        ),
        "readability": _object(
            ["avgSentenceLength", "avgParagraphLength", "fleschKincaidGrade"],
            _numbers("avgSentenceLength", "avgParagraphLength", "fleschKincaidGrade"),
        ),
        "engagement": _object(
            ["estimatedClicks", "callToActionPresent", "shareableSections"],
            {
                "estimatedClicks": {"type": "number"},
                "callToActionPresent": {"type": "boolean"},
                "shareableSections": {"type": "number"},
            },
        ),
    },
)

_SECTION = _object(
    ["id", "heading", "paragraphs", "bulletPoints", "subsections", "table", "wordCount"],
    {
        "id": {"type": "string"},
        "heading": _object(
            ["level", "text", "type"],
            {
                "level": {"type": "number"},
                "text": {"type": "string"},
                "type": {"enum": ["main", "subsection"]},
            },
        ),
        "paragraphs": {"type": "array", "items": _PARAGRAPH},
        "bulletPoints": _BULLET_POINTS,
        "subsections": {
            "type": "array",
            "items": _object(
                ["heading", "paragraphs", "bulletPoints"],
                {
                    "heading": {"type": "string"},
                    "paragraphs": {"type": "array", "items": _PARAGRAPH},
                    "bulletPoints": _BULLET_POINTS,
                },
            ),
        },
        "table": _object(
            ["title", "headers", "rows"],
            {
                "title": {"type": "string"},
                "headers": {"type": "array", "items": {"type": "string"}},
                "rows": {
                    "type": "array",
                    "items": {"type": "array", "items": {"type": "string"}},
                },
            },
        ),
        "wordCount": {"type": "number"},
    },
)

_CONTENT = _object(
    ["intro", "tableOfContents", "sections", "sectionsMeta", "cta", "tldr"],
    {
        "intro": _object(
            ["hook", "wordCount"],
            {"hook": {"type": "string"}, "wordCount": {"type": "number"}},
        ),
        "tableOfContents": _object(
            ["enabled", "sections"],
            {
                "enabled": {"type": "boolean"},
                "sections": {
                    "type": "array",
                    "items": _object(
                        ["id", "title", "level"],
                        {
                            "id": {"type": "string"},
                            "title": {"type": "string"},
                            "level": {"type": "number"},
                        },
                    ),
                },
            },
        ),
        "sections": {"type": "array", "items": _SECTION},
        "sectionsMeta": _object(["count", "avgWordsPerSection"], _numbers("count", "avgWordsPerSection")),
        "cta": _object(
            ["heading", "text", "button"],
            {
                "heading": {"type": "string"},
                "text": {"type": "string"},
                "button": _object(
                    ["text", "href", "type"],
                    {
                        "text": {"type": "string"},
                        "href": {"type": "string"},
                        "type": {"enum": ["primary", "secondary"]},
                    },
                ),
            },
        ),
        "tldr": _object(
            ["enabled", "heading", "points"],
            {
                "enabled": {"type": "boolean"},
                "heading": {"type": "string"},
                "points": {"type": "array", "items": {"type": "string"}},
            },
        ),
    },
)

_STRING_LIST = {"type": "array", "items": {"type": "string"}}

# Output contract handed to the generation agent.
ARTICLE_SCHEMA: dict[str, Any] = _object(
    [
        "id", "slug", "href",
        "title", "description",
        "content",
        "author", "publisher",
        "image",
        "datePublished", "dateModified", "displayDate", "version",
        "seo", "aeo",
        "metrics",
        "category", "subcategories", "tags", "articleSection", "primaryTopic",
        "schema",
        "language",
        "status", "featured", "relatedArticles",
        "analytics",
        "metadata",
    ],
    {
        "id": {"type": "string"},
        "slug": {"type": "string"},
        "href": {"type": "string"},
        "title": {"type": "string"},
        "description": {"type": "string"},
        "content": _CONTENT,
        "author": {"type": "object"},
        "publisher": {"type": "object"},
        "image": {"type": "object"},
        "datePublished": {"type": "string"},
        "dateModified": {"type": "string"},
        "displayDate": {"type": "string"},
        "version": {"type": "number"},
        "seo": {"type": "object"},
        "aeo": {"type": "object"},
        "metrics": _METRICS,
        "category": {"type": "string"},
        "subcategories": _STRING_LIST,
        "tags": _STRING_LIST,
        "articleSection": {"type": "string"},
        "primaryTopic": {"type": "string"},
        "schema": {"type": "object"},
        "language": _object(
            ["code", "locale", "direction", "isRTL"],
            {
                "code": {"type": "string"},
                "locale": {"type": "string"},
                "direction": {"enum": ["rtl", "ltr"]},
                "isRTL": {"type": "boolean"},
            },
        ),
        "status": {"enum": ["draft", "published", "archived"]},
        "featured": {"type": "boolean"},
        "relatedArticles": _STRING_LIST,
        "analytics": _object(
            ["views", "avgTimeOnPage", "bounceRate", "conversionRate"],
            _numbers("views", "avgTimeOnPage", "bounceRate", "conversionRate"),
        ),
        "metadata": _object(
            ["canonicalUrl", "ogImage", "ogTitle", "ogDescription", "twitterCard", "robots"],
            {
                "canonicalUrl": {"type": "string"},
                "ogImage": {"type": "string"},
                "ogTitle": {"type": "string"},
                "ogDescription": {"type": "string"},
                "twitterCard": {"type": "string"},
                "robots": {"type": "string"},
            },
        ),
    },
)
