"""Pydantic models for the InsightForge API."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from insightforge.models import ContentType


class AnalyzeRequest(BaseModel):
    text: str = Field(..., description="Raw unstructured text to analyse")
    search: Optional[str] = Field(
        default=None,
        description="Only return top-level entries whose key or value mentions this term",
    )


class AnalysisPayload(BaseModel):
    data: Dict[str, Any] = Field(..., description="Structured document extracted from the text")
    fields: List[str] = Field(..., description="Dotted key paths present in the document")
    input_type: ContentType = Field(..., description="Detected content type")
    confidence: float = Field(..., ge=0.0, le=1.0)
    summary: str
    word_count: int = Field(..., ge=0)


class AnalyzeResponse(BaseModel):
    success: bool
    data: Optional[AnalysisPayload] = None
    error: Optional[str] = None
