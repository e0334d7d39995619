"""Rule-based content type detection."""

from __future__ import annotations

import re
from typing import Callable, Sequence, Tuple

from insightforge.models import ContentType

_DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}|\d{1,2}/\d{1,2}/\d{4}")


def _contains_all(lowered: str, *terms: str) -> bool:
    return all(term in lowered for term in terms)


def _contains_any(lowered: str, *terms: str) -> bool:
    return any(term in lowered for term in terms)


Rule = Tuple[ContentType, Callable[[str, str], bool]]

# Evaluated top to bottom; several rules can match the same text.
RULES: Sequence[Rule] = (
    (
        ContentType.ACADEMIC_PAPER,
        lambda text, lowered: _contains_all(lowered, "abstract", "introduction", "conclusion"),
    ),
    (
        ContentType.RECIPE,
        lambda text, lowered: "ingredients" in lowered and _contains_any(lowered, "recipe", "instructions"),
    ),
    (
        ContentType.RESUME,
        lambda text, lowered: _contains_all(lowered, "experience", "education", "skills"),
    ),
    (
        ContentType.CREDENTIALS_LIST,
        lambda text, lowered: _contains_any(lowered, "email", "@") and "password" in lowered,
    ),
    (
        ContentType.DATE_BASED,
        lambda text, lowered: _DATE_PATTERN.search(lowered) is not None,
    ),
    (
        ContentType.MEETING_NOTES,
        lambda text, lowered: "meeting" in lowered and _contains_any(lowered, "agenda", "minutes"),
    ),
    (
        ContentType.STRUCTURED_DATA,
        lambda text, lowered: len(text.split("\n")) > 10 and "," in text,
    ),
    (
        ContentType.NARRATIVE,
        lambda text, lowered: _contains_any(lowered, "story", "chapter") or len(text.split(".")) > 20,
    ),
    (
        ContentType.PRODUCT_INFORMATION,
        lambda text, lowered: "product" in lowered and _contains_any(lowered, "price", "feature"),
    ),
)


def classify_content(text: str) -> ContentType:
    """Label ``text`` with the first matching content type, else General Text."""

    lowered = text.lower()
    for content_type, predicate in RULES:
        if predicate(text, lowered):
            return content_type
    return ContentType.GENERAL_TEXT


__all__ = ["RULES", "classify_content"]
