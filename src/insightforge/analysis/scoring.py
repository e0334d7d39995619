"""Confidence scoring and field reporting over structured documents."""

from __future__ import annotations

import json
from typing import List

from insightforge.analysis.fallback import is_fallback_document
from insightforge.models import StructuredDocument

BASE_CONFIDENCE = 0.5
MIN_CONFIDENCE = 0.30
MAX_CONFIDENCE = 0.95
DEFAULT_FIELD_DEPTH = 3


def _serialized_length(document: StructuredDocument) -> int:
    return len(json.dumps(document, separators=(",", ":"), ensure_ascii=False))


def score_confidence(document: StructuredDocument, original_text: str) -> float:
    """Heuristic extraction-quality score clamped to [0.30, 0.95]."""

    confidence = BASE_CONFIDENCE

    key_count = len(document)
    if key_count > 5:
        confidence += 0.1
    if key_count > 10:
        confidence += 0.1

    values = list(document.values())
    if any(isinstance(value, list) for value in values):
        confidence += 0.1
    if any(isinstance(value, dict) for value in values):
        confidence += 0.1

    ratio = _serialized_length(document) / len(original_text) if original_text else 0.0
    if ratio > 0.1:
        confidence += 0.1
    if ratio > 0.3:
        confidence += 0.1

    if not is_fallback_document(document):
        confidence += 0.2

    return round(min(MAX_CONFIDENCE, max(MIN_CONFIDENCE, confidence)), 2)


def extract_fields(document: StructuredDocument, max_depth: int = DEFAULT_FIELD_DEPTH, prefix: str = "") -> List[str]:
    """Dotted key paths in depth-first encounter order.

    Lists are reported as a single field and never descended into. Recursion
    stops once ``prefix`` already holds ``max_depth`` segments.
    """

    fields: List[str] = []
    depth = len(prefix.split(".")) if prefix else 0
    for key, value in document.items():
        full_key = f"{prefix}.{key}" if prefix else key
        fields.append(full_key)
        if isinstance(value, dict) and depth < max_depth:
            fields.extend(extract_fields(value, max_depth, full_key))
    return fields


def filter_document(document: StructuredDocument, term: str | None) -> StructuredDocument:
    """Keep top-level entries whose key or serialized value mentions ``term``."""

    if not term:
        return document
    needle = term.lower()
    return {
        key: value
        for key, value in document.items()
        if needle in key.lower() or needle in json.dumps(value, ensure_ascii=False).lower()
    }


__all__ = ["extract_fields", "filter_document", "score_confidence"]
