# tests/test_llm_client.py

from __future__ import annotations

import json

import httpx
import pytest

from getodone.core.errors import GenerationRejected, GenerationUnreachable
from getodone.llm.client import OpenAICompatibleGenerator, friendly_generation_error


def _completion(content: str | None) -> dict:
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "created": 0,
        "model": "test-model",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
    }


def _generator(handler) -> OpenAICompatibleGenerator:
    return OpenAICompatibleGenerator(
        base_url="https://llm.test/v1",
        http_client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


def test_generate_sends_single_request_and_returns_content_verbatim() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_completion("  Go write that report!\n"))

    text = _generator(handler).generate("PROMPT", "sk-test", "test-model")

    assert text == "  Go write that report!\n"
    assert len(seen) == 1
    req = seen[0]
    assert req.method == "POST"
    assert req.url.path.endswith("/chat/completions")
    assert req.headers["authorization"] == "Bearer sk-test"
    body = json.loads(req.content)
    assert body["model"] == "test-model"
    assert body["messages"] == [{"role": "user", "content": "PROMPT"}]
    assert body["max_tokens"] == 100


def test_error_body_message_is_surfaced() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"error": {"message": "invalid_api_key"}})

    with pytest.raises(GenerationRejected) as exc:
        _generator(handler).generate("p", "bad", "m")

    assert exc.value.message == "invalid_api_key"
    assert friendly_generation_error(exc.value) == "Error from AI: invalid_api_key"


def test_error_without_message_falls_back_to_status_line() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    with pytest.raises(GenerationRejected) as exc:
        _generator(handler).generate("p", "k", "m")

    assert exc.value.message == "500 Internal Server Error"


def test_no_retry_on_rejection() -> None:
    calls = {"n": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        return httpx.Response(429, json={"error": {"message": "rate limited"}})

    with pytest.raises(GenerationRejected):
        _generator(handler).generate("p", "k", "m")
    assert calls["n"] == 1


def test_network_failure_is_unreachable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(GenerationUnreachable):
        _generator(handler).generate("p", "k", "m")


def test_malformed_body_is_unreachable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"choices": []})

    with pytest.raises(GenerationUnreachable):
        _generator(handler).generate("p", "k", "m")


def test_null_content_becomes_empty_string() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=_completion(None))

    assert _generator(handler).generate("p", "k", "m") == ""
