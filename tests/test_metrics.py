import pytest

from articlegen.errors import SchemaViolation
from articlegen.pipelines.metrics import (
    compute_metrics,
    enforce_bullet_limits,
    reading_time_minutes,
    sections_meta,
)

from fakes import make_raw_doc, make_section, make_subsection


@pytest.mark.parametrize("total,expected", [(0, 1), (400, 2), (2000, 10), (5000, 10), (300, 2), (299, 1)])
def test_reading_time_is_rounded_and_clamped(total, expected):
    assert reading_time_minutes(total) == expected


def test_word_count_sums_intro_sections_bullets_and_subsections():
    doc = make_raw_doc(
        hook="one two three",
        sections=[
            make_section(
                paragraphs=["a b c d", "e f"],
                bullets=["g h", "i"],
                subsections=[make_subsection(paragraphs=["j k"], bullets=["l m n"])],
            ),
            make_section(level=3, paragraphs=["o p q r s"]),
        ],
    )
    metrics = compute_metrics(doc)
    assert metrics["wordCount"]["bySection"] == {"intro": 3, "sections": [14, 5]}
    assert metrics["wordCount"]["total"] == 22
    assert metrics["wordCount"]["total"] == 3 + sum(metrics["wordCount"]["bySection"]["sections"])


def test_structure_counts():
    doc = make_raw_doc(
        sections=[
            make_section(level=2, bullets=["x"], subsections=[make_subsection(bullets=["y"]), make_subsection()]),
            make_section(level=2, bullets=[]),
            make_section(level=3),
        ]
    )
    structure = compute_metrics(doc)["structure"]
    assert structure["h1Count"] == 1
    assert structure["h2Count"] == 2
    assert structure["h3Count"] == 3
    assert structure["bulletListCount"] == 2
    assert structure["maxBulletItemsPerList"] == 5


def test_engagement_uses_external_links_and_cta():
    doc = make_raw_doc(sections=[make_section(level=2) for _ in range(8)])
    engagement = compute_metrics(doc)["engagement"]
    assert engagement["estimatedClicks"] == 2
    assert engagement["callToActionPresent"] is True
    assert engagement["shareableSections"] == 6


def test_engagement_defaults_without_sections_or_cta():
    doc = {"content": {"intro": {"hook": ""}}}
    metrics = compute_metrics(doc)
    assert metrics["engagement"] == {
        "estimatedClicks": 0,
        "callToActionPresent": False,
        "shareableSections": 1,
    }
    assert metrics["readability"] == {
        "avgSentenceLength": 0,
        "avgParagraphLength": 0,
        "fleschKincaidGrade": 0,
    }
    assert metrics["wordCount"]["readingTimeMinutes"] == 1


def test_bullet_limit_allows_five_items():
    doc = make_raw_doc(sections=[make_section(bullets=["a"] * 5)])
    enforce_bullet_limits(doc)


def test_bullet_limit_rejects_six_items_in_section():
    doc = make_raw_doc(sections=[make_section(bullets=["a"] * 6)])
    with pytest.raises(SchemaViolation):
        enforce_bullet_limits(doc)


def test_bullet_limit_rejects_six_items_in_subsection():
    doc = make_raw_doc(
        sections=[make_section(bullets=["a"], subsections=[make_subsection(bullets=["b"] * 6)])]
    )
    with pytest.raises(SchemaViolation) as excinfo:
        enforce_bullet_limits(doc)
    assert "subsections[0]" in str(excinfo.value)


def test_sections_meta_average_and_empty():
    assert sections_meta(0, 10, 10) == {"count": 0, "avgWordsPerSection": 0}
    assert sections_meta(2, 13, 2) == {"count": 2, "avgWordsPerSection": 6}
    assert sections_meta(3, 100, 1) == {"count": 3, "avgWordsPerSection": 33}
