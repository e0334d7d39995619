"""Short prose summaries from the generative service."""

from __future__ import annotations

from dataclasses import dataclass

from insightforge.llm import ChatMessage, GenerationConfig, TextGenerationBackend
from insightforge.metrics.observability import PipelineMetrics, TimedSection, get_logger

SUMMARY_FAILED = "Summary generation failed"
SUMMARY_UNAVAILABLE = "Unable to generate summary"

SYSTEM_PROMPT = (
    "You are a skilled summarizer. Create a concise, informative summary of the given text. "
    "Focus on the main points and key information."
)


@dataclass(frozen=True)
class SummaryConfig:
    """Configuration for summary generation."""

    input_chars: int = 2000
    generation: GenerationConfig = GenerationConfig(max_tokens=200, temperature=0.3)


class Summarizer:
    """Produces a 2-3 sentence summary; never raises."""

    def __init__(self, backend: TextGenerationBackend, config: SummaryConfig | None = None) -> None:
        self._backend = backend
        self._config = config or SummaryConfig()
        self._logger = get_logger("summary")

    def summarize(self, text: str) -> str:
        truncated = text[: self._config.input_chars]
        messages = [
            ChatMessage(role="system", content=SYSTEM_PROMPT),
            ChatMessage(
                role="user",
                content=f"Please provide a brief summary (2-3 sentences) of the following text:\n\n{truncated}",
            ),
        ]
        try:
            with TimedSection(lambda seconds: PipelineMetrics.observe_generation("summary", seconds)):
                reply = self._backend.complete(messages, self._config.generation)
        except Exception as exc:  # noqa: BLE001 - summary failure must not abort analysis
            self._logger.warning("summary.failed", detail=str(exc))
            return SUMMARY_UNAVAILABLE
        if reply and reply.strip():
            return reply.strip()
        self._logger.warning("summary.empty_reply")
        return SUMMARY_FAILED


__all__ = ["SUMMARY_FAILED", "SUMMARY_UNAVAILABLE", "SummaryConfig", "Summarizer"]
