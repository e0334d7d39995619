"""Generative-service driven structured extraction with multi-chunk merging."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Literal, Sequence

from insightforge.analysis.chunking import DEFAULT_CHUNK_SIZE, chunk_text
from insightforge.analysis.fallback import FallbackAnalyzer
from insightforge.llm import ChatMessage, GenerationConfig, TextGenerationBackend
from insightforge.metrics.observability import PipelineMetrics, TimedSection, get_logger
from insightforge.models import (
    ContentType,
    Extracted,
    ExtractionOutcome,
    StructuredDocument,
    TextChunk,
    UseFallback,
)

ConflictPolicy = Literal["keep_first", "prefer_source"]

_FENCE_PATTERN = re.compile(r"```(?:json)?\n?|\n?```")
_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")

SYSTEM_PROMPT = (
    "You are an expert data analyst and organizer. Transform unstructured text into well-organized, "
    "structured JSON data. Focus on clarity, usefulness, and logical organization."
)

_USER_PROMPT_TEMPLATE = """Analyze and organize this {content_type} content into a structured JSON format. Extract key information, entities, relationships, and organize data logically. Focus on making the content more readable and structured.

Rules:
1. Return only valid JSON without markdown formatting
2. Create meaningful categories and subcategories
3. Extract entities like names, dates, locations, etc.
4. Identify patterns and relationships
5. Organize information hierarchically
6. Include metadata where relevant

Content to analyze:
{chunk}"""


@dataclass(frozen=True)
class ExtractionConfig:
    """Chunking, cost cap and merge policy for structured extraction."""

    chunk_size: int = DEFAULT_CHUNK_SIZE
    max_chunks: int = 2
    conflict_policy: ConflictPolicy = "keep_first"
    generation: GenerationConfig = GenerationConfig(max_tokens=1500, temperature=0.2)


def build_extraction_messages(chunk: str, content_type: ContentType) -> list[ChatMessage]:
    return [
        ChatMessage(role="system", content=SYSTEM_PROMPT),
        ChatMessage(role="user", content=_USER_PROMPT_TEMPLATE.format(content_type=content_type.value, chunk=chunk)),
    ]


def parse_json_response(raw: str) -> StructuredDocument | None:
    """Recover a JSON object from a model reply.

    Code fences are stripped and the remainder parsed strictly; failing that,
    the span from the first ``{`` to the last ``}`` is parsed. Anything that
    does not decode to an object yields ``None``.
    """

    cleaned = _FENCE_PATTERN.sub("", raw).strip()
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError:
        match = _OBJECT_PATTERN.search(raw)
        if match is None:
            return None
        try:
            parsed = json.loads(match.group(0))
        except json.JSONDecodeError:
            return None
    return parsed if isinstance(parsed, dict) else None


def _canonical(value: Any) -> str:
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _dedupe(items: Sequence[Any]) -> list[Any]:
    seen: set[str] = set()
    ordered: list[Any] = []
    for item in items:
        key = _canonical(item)
        if key in seen:
            continue
        seen.add(key)
        ordered.append(item)
    return ordered


def merge_documents(
    target: StructuredDocument,
    source: StructuredDocument,
    policy: ConflictPolicy = "keep_first",
) -> StructuredDocument:
    """Merge ``source`` into ``target`` in place and return ``target``.

    Lists are concatenated and deduplicated by canonical JSON, nested objects
    merge recursively, and keys missing from ``target`` are copied. Other
    conflicts keep the target value under ``keep_first`` and take the source
    value under ``prefer_source``.
    """

    for key, value in source.items():
        if key not in target:
            target[key] = value
            continue
        existing = target[key]
        if isinstance(existing, list) and isinstance(value, list):
            target[key] = _dedupe([*existing, *value])
        elif isinstance(existing, dict) and isinstance(value, dict):
            merge_documents(existing, value, policy)
        elif policy == "prefer_source":
            target[key] = value
    return target


class StructuredExtractor:
    """Runs per-chunk extraction requests and merges what parses."""

    def __init__(
        self,
        backend: TextGenerationBackend,
        config: ExtractionConfig | None = None,
        fallback: FallbackAnalyzer | None = None,
    ) -> None:
        self._backend = backend
        self._config = config or ExtractionConfig()
        self._fallback = fallback or FallbackAnalyzer()
        self._logger = get_logger("extraction")

    def run(self, text: str, content_type: ContentType) -> ExtractionOutcome:
        try:
            return self._run_chunks(text, content_type)
        except Exception as exc:  # noqa: BLE001 - any extraction failure routes to the fallback analyzer
            self._logger.error("extraction.failed", detail=str(exc))
            return UseFallback(reason="extraction_error")

    def _run_chunks(self, text: str, content_type: ContentType) -> ExtractionOutcome:
        chunks = chunk_text(text, self._config.chunk_size)
        PipelineMetrics.observe_chunks(len(chunks))
        selected = chunks[: self._config.max_chunks]
        if len(chunks) > len(selected):
            self._logger.info("extraction.chunks_capped", total=len(chunks), processed=len(selected))

        combined: StructuredDocument | None = None
        used = 0
        for chunk in selected:
            parsed = self._extract_chunk(chunk, content_type)
            if parsed is None:
                continue
            used += 1
            if combined is None:
                combined = parsed
            else:
                merge_documents(combined, parsed, self._config.conflict_policy)

        if not combined:
            return UseFallback(reason="no_usable_chunks")
        return Extracted(document=combined, chunks_used=used)

    def extract(self, text: str, content_type: ContentType) -> StructuredDocument:
        """Return the merged document, or the rule-based document on failure."""

        outcome = self.run(text, content_type)
        if isinstance(outcome, Extracted):
            return outcome.document
        PipelineMetrics.observe_fallback(outcome.reason)
        return self._fallback.analyze(text, content_type)

    def _extract_chunk(self, chunk: TextChunk, content_type: ContentType) -> StructuredDocument | None:
        if not chunk.text:
            return None
        messages = build_extraction_messages(chunk.text, content_type)
        try:
            with TimedSection(lambda seconds: PipelineMetrics.observe_generation("extraction", seconds)):
                reply = self._backend.complete(messages, self._config.generation)
        except Exception as exc:  # noqa: BLE001 - a failed chunk is skipped, not fatal to the others
            self._logger.warning("extraction.request_failed", chunk=chunk.order, detail=str(exc))
            return None
        if not reply:
            self._logger.warning("extraction.empty_reply", chunk=chunk.order)
            return None
        parsed = parse_json_response(reply)
        if parsed is None:
            self._logger.warning("extraction.chunk_unparseable", chunk=chunk.order)
        return parsed


__all__ = [
    "ConflictPolicy",
    "ExtractionConfig",
    "StructuredExtractor",
    "build_extraction_messages",
    "merge_documents",
    "parse_json_response",
]
