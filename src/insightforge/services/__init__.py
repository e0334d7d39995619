"""Service layer orchestrations for InsightForge."""

from insightforge.llm import (
    ChatMessage,
    GenerationConfig,
    MissingCredentialsError,
    ServiceCredentials,
    TextGenerationBackend,
    TextGenerationError,
    WorkersAIClient,
)
from .pipeline import AnalysisConfig, AnalysisPipeline, InputValidationError, analyze_text, build_pipeline
from .summarizer import Summarizer, SummaryConfig

__all__ = [
    "AnalysisConfig",
    "AnalysisPipeline",
    "ChatMessage",
    "GenerationConfig",
    "InputValidationError",
    "MissingCredentialsError",
    "ServiceCredentials",
    "Summarizer",
    "SummaryConfig",
    "TextGenerationBackend",
    "TextGenerationError",
    "WorkersAIClient",
    "analyze_text",
    "build_pipeline",
]
