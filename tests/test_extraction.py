"""Tests for structured extraction, JSON recovery and merging."""

from __future__ import annotations

from typing import Sequence

from insightforge.analysis.extraction import (
    ExtractionConfig,
    StructuredExtractor,
    merge_documents,
    parse_json_response,
)
from insightforge.llm import ChatMessage, GenerationConfig, TextGenerationError
from insightforge.models import ContentType, Extracted, UseFallback


class StubBackend:
    def __init__(self, replies: Sequence[object]) -> None:
        self.replies = list(replies)
        self.calls: list[Sequence[ChatMessage]] = []

    def complete(self, messages: Sequence[ChatMessage], config: GenerationConfig) -> str | None:
        self.calls.append(messages)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


def _two_chunk_text() -> str:
    return "First chunk sentence here. " * 3 + "Second chunk sentence follows. " * 2


def _extractor(backend: StubBackend, **overrides) -> StructuredExtractor:
    return StructuredExtractor(backend, ExtractionConfig(chunk_size=100, **overrides))


def test_parse_plain_json():
    assert parse_json_response('{"a": 1}') == {"a": 1}


def test_parse_strips_code_fences():
    assert parse_json_response('```json\n{"k": [1, 2]}\n```') == {"k": [1, 2]}
    assert parse_json_response('```\n{"k": true}\n```') == {"k": True}


def test_parse_recovers_embedded_object():
    reply = 'Here is the data: {"k": {"n": 2}} hope it helps'
    assert parse_json_response(reply) == {"k": {"n": 2}}


def test_parse_rejects_garbage_and_non_objects():
    assert parse_json_response("no json at all") is None
    assert parse_json_response("{broken: json}") is None
    assert parse_json_response("[1, 2, 3]") is None


def test_merge_with_empty_source_is_noop():
    target = {"a": [1], "b": {"c": "x"}}
    assert merge_documents(target, {}) == {"a": [1], "b": {"c": "x"}}


def test_merge_dedupes_lists_structurally():
    target = {"people": [{"name": "Ada", "role": "eng"}]}
    source = {"people": [{"role": "eng", "name": "Ada"}, {"name": "Bob"}]}
    merge_documents(target, source)
    assert target["people"] == [{"name": "Ada", "role": "eng"}, {"name": "Bob"}]


def test_merge_keeps_target_scalars_and_recurses():
    target = {"title": "first", "count": 0, "meta": {"lang": "en"}}
    source = {"title": "second", "count": 5, "meta": {"lang": "fr", "pages": 3}, "extra": None}
    merge_documents(target, source)
    assert target == {"title": "first", "count": 0, "meta": {"lang": "en", "pages": 3}, "extra": None}


def test_merge_prefer_source_policy_overwrites_scalars():
    target = {"title": "first", "tags": ["a"]}
    merge_documents(target, {"title": "second", "tags": ["b"]}, policy="prefer_source")
    assert target == {"title": "second", "tags": ["a", "b"]}


def test_two_chunks_merge_first_wins():
    backend = StubBackend(['{"a": [1, 2], "b": "x"}', '{"a": [2, 3], "b": "y", "c": 5}'])
    outcome = _extractor(backend).run(_two_chunk_text(), ContentType.GENERAL_TEXT)
    assert isinstance(outcome, Extracted)
    assert outcome.document == {"a": [1, 2, 3], "b": "x", "c": 5}
    assert outcome.chunks_used == 2


def test_only_first_chunks_are_processed():
    backend = StubBackend(['{"a": 1}', '{"b": 2}', '{"c": 3}'])
    text = "Sentence padding text. " * 20
    outcome = _extractor(backend).run(text, ContentType.GENERAL_TEXT)
    assert len(backend.calls) == 2
    assert isinstance(outcome, Extracted)
    assert outcome.document == {"a": 1, "b": 2}


def test_prompt_carries_content_type_and_chunk():
    backend = StubBackend(['{"a": 1}'])
    StructuredExtractor(backend).run("Some short recipe text with ingredients.", ContentType.RECIPE)
    system, user = backend.calls[0]
    assert system.role == "system"
    assert user.role == "user"
    assert "Analyze and organize this Recipe content" in user.content
    assert user.content.endswith("Some short recipe text with ingredients.")


def test_failed_first_chunk_lets_second_become_accumulator():
    backend = StubBackend([TextGenerationError("down"), '{"b": "y"}'])
    outcome = _extractor(backend).run(_two_chunk_text(), ContentType.GENERAL_TEXT)
    assert isinstance(outcome, Extracted)
    assert outcome.document == {"b": "y"}
    assert outcome.chunks_used == 1


def test_no_usable_chunks_signals_fallback():
    backend = StubBackend(["not json", None])
    outcome = _extractor(backend).run(_two_chunk_text(), ContentType.GENERAL_TEXT)
    assert outcome == UseFallback(reason="no_usable_chunks")


def test_unexpected_backend_error_skips_only_that_chunk():
    backend = StubBackend(['{"a": 1}', RuntimeError("connection reset")])
    outcome = _extractor(backend).run(_two_chunk_text(), ContentType.GENERAL_TEXT)
    assert outcome == Extracted({"a": 1}, chunks_used=1)


def test_unexpected_backend_error_on_only_chunk_signals_fallback():
    backend = StubBackend([RuntimeError("bug")])
    outcome = StructuredExtractor(backend).run("short text for the service", ContentType.GENERAL_TEXT)
    assert outcome == UseFallback(reason="no_usable_chunks")


def test_chunking_error_signals_fallback(monkeypatch):
    def broken_chunker(text, max_size):
        raise ValueError("bad window")

    monkeypatch.setattr("insightforge.analysis.extraction.chunk_text", broken_chunker)
    backend = StubBackend([])
    outcome = StructuredExtractor(backend).run("short text for the service", ContentType.GENERAL_TEXT)
    assert outcome == UseFallback(reason="extraction_error")
    assert backend.calls == []


def test_extract_returns_fallback_document_on_failure():
    backend = StubBackend([TextGenerationError("down")])
    document = StructuredExtractor(backend).extract("one two three four five", ContentType.GENERAL_TEXT)
    assert document["metadata"]["analysis_method"] == "fallback_rule_based"
    assert document["content_analysis"]["word_count"] == 5
