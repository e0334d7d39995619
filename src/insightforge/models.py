"""Shared domain models used across the InsightForge pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Literal, Sequence, Union

JsonScalar = Union[str, int, float, bool, None]
JsonValue = Union[JsonScalar, List["JsonValue"], Dict[str, "JsonValue"]]
StructuredDocument = Dict[str, JsonValue]


class ContentType(str, Enum):
    """Closed vocabulary of detected content genres."""

    ACADEMIC_PAPER = "Academic Paper"
    RECIPE = "Recipe"
    RESUME = "Resume/CV"
    CREDENTIALS_LIST = "Credentials List"
    DATE_BASED = "Date-based Content"
    MEETING_NOTES = "Meeting Notes"
    STRUCTURED_DATA = "Structured Data"
    NARRATIVE = "Narrative/Story"
    PRODUCT_INFORMATION = "Product Information"
    GENERAL_TEXT = "General Text"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TextChunk:
    """Trimmed slice of the request text plus its offsets in the source."""

    text: str
    start: int
    end: int
    order: int


@dataclass(frozen=True)
class Extracted:
    """Extraction produced a usable structured document."""

    document: StructuredDocument
    chunks_used: int = 1


@dataclass(frozen=True)
class UseFallback:
    """Extraction produced nothing usable; the rule-based analyzer must run."""

    reason: str


ExtractionOutcome = Union[Extracted, UseFallback]


@dataclass(frozen=True)
class AnalysisResult:
    """Final record returned to the caller for a successful analysis."""

    data: StructuredDocument
    fields: Sequence[str]
    input_type: ContentType
    confidence: float
    summary: str
    word_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "data": self.data,
            "fields": list(self.fields),
            "input_type": self.input_type.value,
            "confidence": self.confidence,
            "summary": self.summary,
            "word_count": self.word_count,
        }


ErrorType = Literal["validation", "analysis", "unexpected"]


@dataclass(frozen=True)
class AnalysisResponse:
    """Envelope returned by the pipeline entry point."""

    success: bool
    data: AnalysisResult | None = None
    error: str | None = None
    error_type: ErrorType | None = None

    @classmethod
    def ok(cls, result: AnalysisResult) -> "AnalysisResponse":
        return cls(success=True, data=result)

    @classmethod
    def fail(cls, message: str, error_type: ErrorType) -> "AnalysisResponse":
        return cls(success=False, error=message, error_type=error_type)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"success": self.success}
        if self.data is not None:
            payload["data"] = self.data.to_dict()
        if self.error is not None:
            payload["error"] = self.error
        return payload
