from __future__ import annotations

import json

import httpx
import pytest

from nudge.providers.local_provider import LocalProvider


def _provider(handler, endpoints=None) -> LocalProvider:
    return LocalProvider(
        endpoints=endpoints or ["http://gpu-box:11434/api/generate"],
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_404_retries_same_endpoint_with_secondary_model() -> None:
    seen: list[tuple[str, str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        seen.append((str(request.url), body["model"]))
        if body["model"] == "llama3.2":
            return httpx.Response(404, json={"error": "model not found"})
        return httpx.Response(200, json={"response": "  from llama3  "})

    answer = await _provider(handler).try_respond("hello", "")

    assert answer == "from llama3"
    assert [model for _, model in seen] == ["llama3.2", "llama3"]
    assert seen[0][0] == seen[1][0]


@pytest.mark.asyncio
async def test_other_errors_advance_to_next_endpoint() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "first":
            return httpx.Response(500, text="boom")
        return httpx.Response(200, json={"response": "second wins"})

    provider = _provider(handler, ["http://first/api/generate", "http://second/api/generate"])
    assert await provider.try_respond("hi", "") == "second wins"


@pytest.mark.asyncio
async def test_connection_error_advances_and_exhaustion_returns_none() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    provider = _provider(handler, ["http://a/api/generate", "http://b/api/generate"])
    assert await provider.try_respond("hi", "") is None


@pytest.mark.asyncio
async def test_one_char_answer_is_not_usable() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"response": " . "})

    assert await _provider(handler).try_respond("hi", "") is None


@pytest.mark.asyncio
async def test_malformed_json_is_swallowed() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>not json</html>")

    assert await _provider(handler).try_respond("hi", "") is None


@pytest.mark.asyncio
async def test_request_body_shape_and_prompt() -> None:
    captured: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        captured.update(json.loads(request.content))
        return httpx.Response(200, json={"response": "ok then"})

    await _provider(handler).try_respond("plan my day", "Be kind.")

    assert captured["stream"] is False
    assert captured["options"] == {"temperature": 0.7, "max_tokens": 150}
    assert captured["prompt"] == "Be kind.\n\nUser message: plan my day\n\nResponse:"


def test_prompt_is_bare_message_without_personality() -> None:
    assert LocalProvider.build_prompt("hey", "") == "hey"
