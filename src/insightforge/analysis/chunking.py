"""Sentence/paragraph aligned text chunking."""

from __future__ import annotations

from typing import List

from insightforge.models import TextChunk

DEFAULT_CHUNK_SIZE = 3500
# A break point is only used when it lies past this fraction of the window.
MIN_BREAK_FRACTION = 0.7


def _find_break(text: str, start: int, end: int) -> int:
    last_sentence = text.rfind(".", start, end)
    last_paragraph = text.rfind("\n\n", start, end)
    return max(last_sentence, last_paragraph)


def chunk_text(text: str, max_size: int = DEFAULT_CHUNK_SIZE) -> List[TextChunk]:
    """Split ``text`` into ordered, contiguous chunks of at most ``max_size`` characters.

    Cuts prefer the last ``.`` or blank line inside the window when it falls
    beyond 70% of ``max_size``; otherwise the window edge is used. Each chunk
    keeps its source offsets so ``text[chunk.start:chunk.end]`` across all
    chunks reproduces the input exactly.
    """

    if max_size <= 0:
        raise ValueError("max_size must be positive")
    if len(text) <= max_size:
        return [TextChunk(text=text.strip(), start=0, end=len(text), order=0)]

    chunks: List[TextChunk] = []
    cursor = 0
    while cursor < len(text):
        end = min(cursor + max_size, len(text))
        if end < len(text):
            break_point = _find_break(text, cursor, end)
            if break_point > cursor + max_size * MIN_BREAK_FRACTION:
                end = break_point + 1
        chunks.append(TextChunk(text=text[cursor:end].strip(), start=cursor, end=end, order=len(chunks)))
        cursor = end
    return chunks


__all__ = ["DEFAULT_CHUNK_SIZE", "chunk_text"]
