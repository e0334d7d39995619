"""Text analysis components: classification, chunking, extraction and scoring."""

from .chunking import chunk_text
from .classifier import classify_content
from .extraction import ExtractionConfig, StructuredExtractor, merge_documents, parse_json_response
from .fallback import FallbackAnalyzer
from .scoring import extract_fields, filter_document, score_confidence

__all__ = [
    "ExtractionConfig",
    "FallbackAnalyzer",
    "StructuredExtractor",
    "chunk_text",
    "classify_content",
    "extract_fields",
    "filter_document",
    "merge_documents",
    "parse_json_response",
    "score_confidence",
]
