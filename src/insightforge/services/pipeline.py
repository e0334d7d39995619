"""Analysis orchestration: validation, classification, extraction and scoring."""

from __future__ import annotations

import time
from dataclasses import dataclass, field

from insightforge.analysis.classifier import classify_content
from insightforge.analysis.extraction import ExtractionConfig, StructuredExtractor
from insightforge.analysis.fallback import FallbackAnalyzer, split_words
from insightforge.analysis.scoring import DEFAULT_FIELD_DEPTH, extract_fields, score_confidence
from insightforge.config import Settings, get_settings
from insightforge.llm import GenerationConfig, ServiceCredentials, TextGenerationBackend, WorkersAIClient
from insightforge.metrics.observability import PipelineMetrics, get_logger
from insightforge.models import AnalysisResponse, AnalysisResult, Extracted
from insightforge.services.summarizer import SummaryConfig, Summarizer

NO_TEXT_MESSAGE = "No text provided for analysis"
TOO_SHORT_MESSAGE = "Text is too short for meaningful analysis"
UNEXPECTED_MESSAGE = "An unexpected error occurred during text analysis"


class InputValidationError(ValueError):
    """Raised when request text cannot be analysed; the message is user facing."""


@dataclass(frozen=True)
class AnalysisConfig:
    """Limits and component configuration for one pipeline."""

    min_words: int = 5
    max_characters: int = 50_000
    field_max_depth: int = DEFAULT_FIELD_DEPTH
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    summary: SummaryConfig = field(default_factory=SummaryConfig)


def validate_input(text: str, config: AnalysisConfig) -> int:
    """Check request limits in order and return the word count."""

    if not text or not text.strip():
        raise InputValidationError(NO_TEXT_MESSAGE)
    word_count = len(split_words(text))
    if word_count < config.min_words:
        raise InputValidationError(TOO_SHORT_MESSAGE)
    if len(text) > config.max_characters:
        raise InputValidationError(
            f"Text is too long. Please limit to {config.max_characters:,} characters or less.",
        )
    return word_count


class AnalysisPipeline:
    """Turns one text into an :class:`AnalysisResponse`."""

    def __init__(
        self,
        backend: TextGenerationBackend,
        config: AnalysisConfig | None = None,
        fallback: FallbackAnalyzer | None = None,
    ) -> None:
        self._config = config or AnalysisConfig()
        self._fallback = fallback or FallbackAnalyzer()
        self._summarizer = Summarizer(backend, self._config.summary)
        self._extractor = StructuredExtractor(backend, self._config.extraction, fallback=self._fallback)
        self._logger = get_logger("pipeline")

    @property
    def config(self) -> AnalysisConfig:
        return self._config

    def analyze(self, text: str) -> AnalysisResponse:
        start = time.perf_counter()
        response = self._analyze(text)
        status = "ok" if response.success else response.error_type or "failed"
        PipelineMetrics.observe_analysis(time.perf_counter() - start, status)
        return response

    def _analyze(self, text: str) -> AnalysisResponse:
        try:
            word_count = validate_input(text, self._config)
            content_type = classify_content(text)
            self._logger.info("analysis.classified", content_type=content_type.value, word_count=word_count)
            try:
                summary = self._summarizer.summarize(text)
                outcome = self._extractor.run(text, content_type)
                if isinstance(outcome, Extracted):
                    document = outcome.document
                else:
                    self._logger.info("analysis.fallback", reason=outcome.reason)
                    PipelineMetrics.observe_fallback(outcome.reason)
                    document = self._fallback.analyze(text, content_type)
                confidence = score_confidence(document, text)
                fields = extract_fields(document, self._config.field_max_depth)
            except Exception as exc:  # noqa: BLE001 - reported to the caller as a failed analysis
                self._logger.error("analysis.failed", detail=str(exc))
                return AnalysisResponse.fail(f"Analysis failed: {exc}", "analysis")
        except InputValidationError as exc:
            self._logger.info("analysis.rejected", reason=str(exc))
            return AnalysisResponse.fail(str(exc), "validation")
        except Exception as exc:  # noqa: BLE001 - outermost boundary
            self._logger.error("analysis.unexpected_error", detail=str(exc))
            return AnalysisResponse.fail(UNEXPECTED_MESSAGE, "unexpected")

        PipelineMetrics.observe_confidence(confidence)
        self._logger.info(
            "analysis.complete",
            content_type=content_type.value,
            confidence=confidence,
            field_count=len(fields),
        )
        return AnalysisResponse.ok(
            AnalysisResult(
                data=document,
                fields=fields,
                input_type=content_type,
                confidence=confidence,
                summary=summary,
                word_count=word_count,
            ),
        )


def build_analysis_config(settings: Settings) -> AnalysisConfig:
    return AnalysisConfig(
        min_words=settings.min_words,
        max_characters=settings.max_characters,
        field_max_depth=settings.field_max_depth,
        extraction=ExtractionConfig(
            chunk_size=settings.chunk_size,
            max_chunks=settings.max_chunks,
            conflict_policy=settings.merge_conflict_policy,
            generation=GenerationConfig(
                max_tokens=settings.extraction_max_tokens,
                temperature=settings.extraction_temperature,
            ),
        ),
        summary=SummaryConfig(
            input_chars=settings.summary_input_chars,
            generation=GenerationConfig(
                max_tokens=settings.summary_max_tokens,
                temperature=settings.summary_temperature,
            ),
        ),
    )


def build_pipeline(settings: Settings | None = None, backend: TextGenerationBackend | None = None) -> AnalysisPipeline:
    """Wire a pipeline from settings; ``backend`` replaces the HTTP client."""

    settings = settings or get_settings()
    if backend is None:
        backend = WorkersAIClient(
            ServiceCredentials(
                account_id=settings.cloudflare_account_id,
                api_token=settings.cloudflare_api_token,
                base_url_template=settings.ai_base_url_template,
            ),
            model=settings.text_model,
            timeout=settings.request_timeout_seconds,
        )
    return AnalysisPipeline(backend, build_analysis_config(settings))


def analyze_text(text: str, *, pipeline: AnalysisPipeline | None = None) -> AnalysisResponse:
    """Convenience entry point using environment settings."""

    return (pipeline or build_pipeline()).analyze(text)
