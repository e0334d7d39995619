"""FastAPI application exposing the InsightForge analysis pipeline."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable
from uuid import uuid4

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from insightforge.analysis.scoring import DEFAULT_FIELD_DEPTH, extract_fields, filter_document
from insightforge.api.schemas import AnalysisPayload, AnalyzeRequest, AnalyzeResponse
from insightforge.config import Settings, get_settings
from insightforge.metrics.observability import bind_correlation_id, clear_correlation_id, configure_logging, get_logger
from insightforge.models import AnalysisResponse
from insightforge.services.pipeline import AnalysisPipeline, build_pipeline

_ERROR_STATUS = {
    "validation": status.HTTP_400_BAD_REQUEST,
    "analysis": status.HTTP_500_INTERNAL_SERVER_ERROR,
    "unexpected": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


@dataclass(frozen=True)
class AppDependencies:
    pipeline: AnalysisPipeline


def _build_dependencies(settings: Settings) -> AppDependencies:
    return AppDependencies(pipeline=build_pipeline(settings))


class RateLimiter:
    """Sliding-window request limiter keyed by client and path."""

    def __init__(self, requests: int, window_seconds: int, clock: Callable[[], float] = time.time) -> None:
        self.requests = requests
        self.window = window_seconds
        self._clock = clock
        self._buckets: dict[str, list[float]] = {}

    @property
    def tracked_keys(self) -> int:
        return len(self._buckets)

    def __call__(self, request: Request) -> None:
        client_ip = request.headers.get("x-forwarded-for") or (request.client.host if request.client else "-")
        key = f"{client_ip}:{request.url.path}"
        now = self._clock()
        self._evict(now - self.window)
        bucket = self._buckets.setdefault(key, [])
        if len(bucket) >= self.requests:
            raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail="Rate limit exceeded")
        bucket.append(now)

    def _evict(self, cutoff: float) -> None:
        # Keys whose bucket drained are removed.
        for key in list(self._buckets):
            bucket = self._buckets[key]
            while bucket and bucket[0] < cutoff:
                bucket.pop(0)
            if not bucket:
                del self._buckets[key]


def _to_response_model(
    response: AnalysisResponse,
    search: str | None,
    max_depth: int = DEFAULT_FIELD_DEPTH,
) -> AnalyzeResponse:
    if response.data is None:
        return AnalyzeResponse(success=response.success, error=response.error)
    result = response.data
    document = dict(result.data)
    fields = list(result.fields)
    if search:
        document = filter_document(document, search)
        fields = extract_fields(document, max_depth)
    payload = AnalysisPayload(
        data=document,
        fields=fields,
        input_type=result.input_type,
        confidence=result.confidence,
        summary=result.summary,
        word_count=result.word_count,
    )
    return AnalyzeResponse(success=True, data=payload)


def create_app(*, settings: Settings | None = None, dependencies: AppDependencies | None = None) -> FastAPI:
    settings = settings or get_settings()
    deps = dependencies or _build_dependencies(settings)

    configure_logging()
    logger = get_logger("api")
    app = FastAPI(title="InsightForge API", version="0.1.0")
    app.state.dependencies = deps

    if settings.cors_allow_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.cors_allow_origins),
            allow_credentials=settings.cors_allow_credentials,
            allow_methods=list(settings.cors_allow_methods),
            allow_headers=list(settings.cors_allow_headers),
        )

    @app.middleware("http")
    async def add_correlation_id(request: Request, call_next):  # type: ignore[override]
        correlation_id = request.headers.get("X-Request-ID", uuid4().hex)
        request.state.correlation_id = correlation_id
        bind_correlation_id(correlation_id)
        try:
            response = await call_next(request)
        finally:
            clear_correlation_id()
        response.headers["X-Correlation-ID"] = correlation_id
        return response

    def require_api_key(request: Request) -> None:
        expected = settings.api_key
        if not expected:
            return
        provided = request.headers.get("X-API-Key")
        if provided != expected:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API key")

    rate_limiter = RateLimiter(settings.rate_limit_requests, settings.rate_limit_window_seconds)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        correlation_id = getattr(request.state, "correlation_id", uuid4().hex)
        logger.error("unhandled.error", correlation_id=correlation_id, detail=str(exc))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal Server Error", "correlation_id": correlation_id},
        )

    def get_dependencies(request: Request) -> AppDependencies:
        return request.app.state.dependencies

    def get_pipeline(dep: AppDependencies = Depends(get_dependencies)) -> AnalysisPipeline:
        return dep.pipeline

    @app.post("/analyze", response_model=AnalyzeResponse)
    def analyze(
        payload: AnalyzeRequest,
        pipeline: AnalysisPipeline = Depends(get_pipeline),
        _auth: None = Depends(require_api_key),
        _rl: None = Depends(rate_limiter),
    ) -> JSONResponse:
        response = pipeline.analyze(payload.text)
        body = _to_response_model(response, payload.search, pipeline.config.field_max_depth)
        status_code = status.HTTP_200_OK
        if not response.success:
            status_code = _ERROR_STATUS.get(response.error_type or "", status.HTTP_500_INTERNAL_SERVER_ERROR)
        content = {key: value for key, value in body.model_dump(mode="json").items() if value is not None}
        return JSONResponse(status_code=status_code, content=content)

    @app.get("/metrics")
    async def metrics() -> Response:
        payload = generate_latest()
        return Response(content=payload, media_type=CONTENT_TYPE_LATEST)

    @app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        from insightforge import __version__

        return {"status": "ok", "version": __version__, "environment": settings.environment}

    @app.head("/healthz")
    async def healthcheck_head() -> Response:
        return Response(status_code=status.HTTP_200_OK)

    @app.get("/livez")
    async def liveness() -> dict[str, str]:
        return {"status": "alive"}

    @app.get("/healthz/ready")
    async def readiness() -> dict[str, str]:
        # Without credentials every analysis runs on the rule-based path.
        mode = "generative" if settings.has_credentials else "fallback_only"
        return {"status": "ready", "mode": mode}

    return app


app = create_app()
