"""Deterministic rule-based analyzer used when the generative service is unusable."""

from __future__ import annotations

import math
import re
from collections import Counter
from datetime import datetime, timezone
from typing import Callable, Dict, List

from insightforge.models import ContentType, StructuredDocument

FALLBACK_METHOD = "fallback_rule_based"

_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_PARAGRAPH_SPLIT = re.compile(r"\n\s*\n")
_NON_WORD = re.compile(r"[^\w]")

EMAIL_PATTERN = re.compile(r"[\w.-]+@[\w.-]+\.\w+")
URL_PATTERN = re.compile(r"https?://[\w.-]+\.[a-z]{2,}[\w/.-]*", re.IGNORECASE)
DATE_PATTERN = re.compile(r"\d{1,2}/\d{1,2}/\d{4}|\d{4}-\d{2}-\d{2}")
NUMBER_PATTERN = re.compile(r"\d+(?:,\d{3})*(?:\.\d+)?")

WORDS_PER_MINUTE = 200
MAX_NUMBERS = 10
TOP_TERMS = 10
MIN_TERM_LENGTH = 4
PREVIEW_LENGTH = 100


def split_words(text: str) -> List[str]:
    return text.split()


def split_sentences(text: str) -> List[str]:
    return [part for part in _SENTENCE_SPLIT.split(text) if part.strip()]


def split_paragraphs(text: str) -> List[str]:
    return [part for part in _PARAGRAPH_SPLIT.split(text) if part.strip()]


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class FallbackAnalyzer:
    """Builds a fixed-schema document purely from lexical statistics of the text."""

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or _utc_now

    def analyze(self, text: str, content_type: ContentType) -> StructuredDocument:
        words = split_words(text)
        sentences = split_sentences(text)
        paragraphs = split_paragraphs(text)
        average_sentence_length = _round_half_up(len(words) / len(sentences)) if sentences else 0

        return {
            "document_type": content_type.value,
            "content_analysis": {
                "word_count": len(words),
                "sentence_count": len(sentences),
                "paragraph_count": len(paragraphs),
                "average_sentence_length": average_sentence_length,
                "reading_time_minutes": math.ceil(len(words) / WORDS_PER_MINUTE),
            },
            "extracted_entities": self._extract_entities(text),
            "key_terms": self._key_terms(words),
            "structure": {"paragraphs": [self._describe_paragraph(index, para) for index, para in enumerate(paragraphs, start=1)]},
            "metadata": {
                "analysis_method": FALLBACK_METHOD,
                "processing_timestamp": self._clock().isoformat(),
                "content_type_detected": content_type.value,
            },
        }

    @staticmethod
    def _extract_entities(text: str) -> Dict[str, List[str]]:
        return {
            "emails": EMAIL_PATTERN.findall(text),
            "urls": URL_PATTERN.findall(text),
            "dates": DATE_PATTERN.findall(text),
            "numbers": NUMBER_PATTERN.findall(text)[:MAX_NUMBERS],
        }

    @staticmethod
    def _key_terms(words: List[str]) -> List[Dict[str, object]]:
        frequencies: Counter[str] = Counter()
        for word in words:
            cleaned = _NON_WORD.sub("", word.lower())
            if len(cleaned) >= MIN_TERM_LENGTH:
                frequencies[cleaned] += 1
        # most_common keeps first-seen order for equal counts
        return [{"word": word, "count": count} for word, count in frequencies.most_common(TOP_TERMS)]

    @staticmethod
    def _describe_paragraph(index: int, paragraph: str) -> Dict[str, object]:
        preview = paragraph[:PREVIEW_LENGTH]
        if len(paragraph) > PREVIEW_LENGTH:
            preview += "..."
        return {"index": index, "word_count": len(paragraph.split()), "preview": preview}


def is_fallback_document(document: StructuredDocument) -> bool:
    """Return True when ``document`` metadata marks a fallback analysis."""

    metadata = document.get("metadata")
    if not isinstance(metadata, dict):
        return False
    method = metadata.get("analysis_method")
    return isinstance(method, str) and "fallback" in method


__all__ = ["FALLBACK_METHOD", "FallbackAnalyzer", "is_fallback_document", "split_paragraphs", "split_sentences", "split_words"]
