"""Tests for the generative service HTTP client."""

from __future__ import annotations

import json

import httpx
import pytest

from insightforge.llm import (
    ChatMessage,
    GenerationConfig,
    MissingCredentialsError,
    ServiceCredentials,
    TextGenerationError,
    TextGenerationHTTPError,
    WorkersAIClient,
)

CREDENTIALS = ServiceCredentials(
    account_id="acct",
    api_token="tok",
    base_url_template="https://ai.test/accounts/{account_id}/run/{model}",
)
MESSAGES = [ChatMessage(role="system", content="sys"), ChatMessage(role="user", content="hello")]


def _client(handler, credentials: ServiceCredentials = CREDENTIALS) -> WorkersAIClient:
    return WorkersAIClient(credentials, model="test-model", transport=httpx.MockTransport(handler))


def test_complete_posts_messages_and_returns_text():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"result": {"response": "hi there"}, "success": True})

    text = _client(handler).complete(MESSAGES, GenerationConfig(max_tokens=50, temperature=0.1))

    assert text == "hi there"
    request = seen[0]
    assert str(request.url) == "https://ai.test/accounts/acct/run/test-model"
    assert request.headers["Authorization"] == "Bearer tok"
    body = json.loads(request.content)
    assert body == {
        "messages": [{"role": "system", "content": "sys"}, {"role": "user", "content": "hello"}],
        "max_tokens": 50,
        "temperature": 0.1,
    }


def test_missing_credentials_fail_before_network():
    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover - must not be reached
        raise AssertionError("network should not be used")

    client = _client(handler, ServiceCredentials(account_id=None, api_token=None))
    with pytest.raises(MissingCredentialsError):
        client.complete(MESSAGES, GenerationConfig())


def test_error_status_raises_http_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="upstream exploded")

    with pytest.raises(TextGenerationHTTPError) as excinfo:
        _client(handler).complete(MESSAGES, GenerationConfig())
    assert excinfo.value.status_code == 500
    assert "upstream exploded" in str(excinfo.value)


def test_transport_error_is_wrapped():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TextGenerationError):
        _client(handler).complete(MESSAGES, GenerationConfig())


def test_reply_without_text_returns_none():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"result": {}, "success": True})

    assert _client(handler).complete(MESSAGES, GenerationConfig()) is None
