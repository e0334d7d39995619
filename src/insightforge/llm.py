"""Client for the external generative-text service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Protocol, Sequence

import httpx

from insightforge.metrics.observability import get_logger

DEFAULT_BASE_URL_TEMPLATE = "https://api.cloudflare.com/client/v4/accounts/{account_id}/ai/run/{model}"
DEFAULT_TEXT_MODEL = "@cf/meta/llama-3.1-8b-instruct"


class TextGenerationError(RuntimeError):
    """Raised when the generative text service cannot produce a completion."""


class MissingCredentialsError(TextGenerationError):
    """Raised before any network I/O when credentials are not configured."""


class TextGenerationHTTPError(TextGenerationError):
    """Raised when the service answers with a non-success status."""

    def __init__(self, status_code: int, detail: str) -> None:
        super().__init__(f"Generative service error: {status_code} - {detail}")
        self.status_code = status_code


@dataclass(frozen=True)
class ServiceCredentials:
    """Account, token and endpoint used to reach the generative service."""

    account_id: str | None = None
    api_token: str | None = None
    base_url_template: str = DEFAULT_BASE_URL_TEMPLATE

    @property
    def configured(self) -> bool:
        return bool(self.account_id and self.api_token)

    def endpoint(self, model: str) -> str:
        return self.base_url_template.format(account_id=self.account_id, model=model)


@dataclass(frozen=True)
class GenerationConfig:
    """Per-call generation parameters."""

    max_tokens: int = 1500
    temperature: float = 0.2


@dataclass(frozen=True)
class ChatMessage:
    role: str
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


class TextGenerationBackend(Protocol):
    """Protocol describing the request/response completion contract."""

    def complete(self, messages: Sequence[ChatMessage], config: GenerationConfig) -> str | None:
        """Return the completion text, ``None`` when the reply carried no text."""


class WorkersAIClient:
    """HTTPX client for a Workers-AI style ``/ai/run/{model}`` endpoint."""

    def __init__(
        self,
        credentials: ServiceCredentials,
        *,
        model: str = DEFAULT_TEXT_MODEL,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._credentials = credentials
        self._model = model
        self._timeout = timeout
        self._transport = transport
        self._logger = get_logger("llm")

    @property
    def model(self) -> str:
        return self._model

    def complete(self, messages: Sequence[ChatMessage], config: GenerationConfig) -> str | None:
        if not self._credentials.configured:
            raise MissingCredentialsError("Generative service credentials not configured")

        payload = {
            "messages": [message.to_dict() for message in messages],
            "max_tokens": config.max_tokens,
            "temperature": config.temperature,
        }
        headers = {"Authorization": f"Bearer {self._credentials.api_token}"}
        url = self._credentials.endpoint(self._model)
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as exc:
            self._logger.error("llm.request_failed", model=self._model, detail=str(exc))
            raise TextGenerationError(f"Failed to call generative service: {exc}") from exc

        if response.status_code >= 400:
            self._logger.error("llm.bad_status", model=self._model, status_code=response.status_code)
            raise TextGenerationHTTPError(response.status_code, response.text)
        try:
            body = response.json()
        except ValueError as exc:
            raise TextGenerationError("Generative service returned a non-JSON body") from exc
        return _response_text(body)


def _response_text(body: Any) -> str | None:
    if not isinstance(body, Mapping):
        return None
    result = body.get("result")
    if isinstance(result, Mapping):
        text = result.get("response")
        if isinstance(text, str) and text:
            return text
    return None


__all__ = [
    "ChatMessage",
    "DEFAULT_BASE_URL_TEMPLATE",
    "DEFAULT_TEXT_MODEL",
    "GenerationConfig",
    "MissingCredentialsError",
    "ServiceCredentials",
    "TextGenerationBackend",
    "TextGenerationError",
    "TextGenerationHTTPError",
    "WorkersAIClient",
]
