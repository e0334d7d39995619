"""Observability helpers for InsightForge."""

from __future__ import annotations

import logging
import time

import structlog
from prometheus_client import Counter, Histogram

_logger_configured = False


def configure_logging(level: int = logging.INFO) -> None:
    global _logger_configured  # noqa: PLW0603 - module-level guard
    if _logger_configured:
        return
    logging.basicConfig(level=level, format="%(message)s")
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _logger_configured = True


def bind_correlation_id(correlation_id: str) -> None:
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id)


def clear_correlation_id() -> None:
    structlog.contextvars.clear_contextvars()


def get_logger(name: str = "insightforge") -> structlog.BoundLogger:
    configure_logging()
    return structlog.get_logger(name)


class PipelineMetrics:
    """Prometheus metrics for pipeline stages."""

    analysis_latency = Histogram(
        "insightforge_analysis_duration_seconds",
        "Time spent analysing one request end to end.",
        buckets=(0.01, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
    )
    analysis_outcomes = Counter(
        "insightforge_analysis_total",
        "Analysis requests by outcome.",
        ["status"],
    )
    generation_latency = Histogram(
        "insightforge_generation_duration_seconds",
        "Time spent waiting on the generative text service.",
        ["purpose"],
        buckets=(0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0),
    )
    fallback_total = Counter(
        "insightforge_fallback_total",
        "Rule-based fallback analyses by reason.",
        ["reason"],
    )
    chunk_count = Histogram(
        "insightforge_chunk_count",
        "Chunks produced per analysed text.",
        buckets=(1, 2, 3, 5, 8, 13, 21),
    )
    confidence = Histogram(
        "insightforge_confidence_score",
        "Confidence score of returned analyses.",
        buckets=(0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9, 0.95),
    )

    @classmethod
    def observe_analysis(cls, duration_seconds: float, status: str) -> None:
        cls.analysis_latency.observe(duration_seconds)
        cls.analysis_outcomes.labels(status=status).inc()

    @classmethod
    def observe_generation(cls, purpose: str, duration_seconds: float) -> None:
        cls.generation_latency.labels(purpose=purpose).observe(duration_seconds)

    @classmethod
    def observe_fallback(cls, reason: str) -> None:
        cls.fallback_total.labels(reason=reason).inc()

    @classmethod
    def observe_chunks(cls, count: int) -> None:
        cls.chunk_count.observe(count)

    @classmethod
    def observe_confidence(cls, score: float) -> None:
        cls.confidence.observe(score)


class TimedSection:
    """Context manager capturing elapsed time for metrics."""

    def __init__(self, callback) -> None:
        self._callback = callback
        self._start = 0.0

    def __enter__(self) -> "TimedSection":
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: D401
        duration = time.perf_counter() - self._start
        self._callback(duration)


__all__ = [
    "PipelineMetrics",
    "TimedSection",
    "bind_correlation_id",
    "clear_correlation_id",
    "configure_logging",
    "get_logger",
]
