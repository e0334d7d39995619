"""Tests for the rule-based fallback analyzer."""

from __future__ import annotations

import math
import re
from datetime import datetime, timezone

from insightforge.analysis.fallback import FALLBACK_METHOD, FallbackAnalyzer, is_fallback_document
from insightforge.models import ContentType

SAMPLE = (
    "Alice emailed bob@example.com on 2024-03-01. She visited https://example.org/docs today!"
    "\n\n"
    "The budget was 1,250.50 dollars. Alice approved the budget quickly?"
)


def _fixed_clock() -> datetime:
    return datetime(2024, 1, 1, tzinfo=timezone.utc)


def _analyze(text: str = SAMPLE, content_type: ContentType = ContentType.GENERAL_TEXT) -> dict:
    return FallbackAnalyzer(clock=_fixed_clock).analyze(text, content_type)


def test_counts_match_naive_splits():
    stats = _analyze()["content_analysis"]
    words = [w for w in re.split(r"\s+", SAMPLE) if w]
    sentences = [s for s in re.split(r"[.!?]+", SAMPLE) if s.strip()]
    paragraphs = [p for p in re.split(r"\n\s*\n", SAMPLE) if p.strip()]

    assert stats["word_count"] == len(words) == 19
    assert stats["sentence_count"] == len(sentences) == 7
    assert stats["paragraph_count"] == len(paragraphs) == 2
    assert stats["average_sentence_length"] == 3
    assert stats["reading_time_minutes"] == math.ceil(19 / 200)


def test_reading_time_rounds_up():
    text = " ".join(["word"] * 401)
    assert _analyze(text)["content_analysis"]["reading_time_minutes"] == 3


def test_entities_are_extracted():
    entities = _analyze()["extracted_entities"]
    assert entities["emails"] == ["bob@example.com"]
    assert entities["urls"] == ["https://example.org/docs"]
    assert entities["dates"] == ["2024-03-01"]
    assert entities["numbers"] == ["2024", "03", "01", "1,250.50"]


def test_numbers_capped_at_ten():
    text = " ".join(str(n) for n in range(25))
    assert len(_analyze(text)["extracted_entities"]["numbers"]) == 10


def test_key_terms_ranked_by_frequency():
    terms = _analyze()["key_terms"]
    assert terms[:2] == [{"word": "alice", "count": 2}, {"word": "budget", "count": 2}]
    assert len(terms) == 10
    assert all(len(term["word"]) > 3 for term in terms)


def test_paragraph_previews():
    long_paragraph = "word " * 30
    document = _analyze(f"Intro line here.\n\n{long_paragraph}")
    paragraphs = document["structure"]["paragraphs"]
    assert paragraphs[0] == {"index": 1, "word_count": 3, "preview": "Intro line here."}
    assert paragraphs[1]["index"] == 2
    assert paragraphs[1]["word_count"] == 30
    assert paragraphs[1]["preview"] == long_paragraph[:100] + "..."


def test_metadata_marks_fallback():
    document = _analyze(content_type=ContentType.NARRATIVE)
    assert document["document_type"] == "Narrative/Story"
    assert document["metadata"] == {
        "analysis_method": FALLBACK_METHOD,
        "processing_timestamp": "2024-01-01T00:00:00+00:00",
        "content_type_detected": "Narrative/Story",
    }
    assert is_fallback_document(document)
    assert not is_fallback_document({"metadata": {"analysis_method": "model"}})
