from __future__ import annotations

import json

import httpx
import pytest

from nudge.providers.hub_provider import (
    HubProvider,
    build_request_body,
    extract_generated_text,
    is_conversational,
)

MODELS = ["microsoft/DialoGPT-medium", "facebook/blenderbot-400M-distill", "distilgpt2"]


def _provider(handler) -> HubProvider:
    return HubProvider(
        token="hf_test",
        api_base="https://hub.test/models",
        whoami_url="https://hub.test/api/whoami-v2",
        models=MODELS,
        transport=httpx.MockTransport(handler),
    )


def test_request_shape_depends_on_model_family() -> None:
    assert is_conversational("microsoft/DialoGPT-medium")
    dialog = build_request_body("microsoft/DialoGPT-medium", "hi")
    assert dialog["inputs"] == {"past_user_inputs": [], "generated_responses": [], "text": "hi"}

    plain = build_request_body("distilgpt2", "hi")
    assert plain["inputs"] == "hi"
    assert plain["parameters"]["max_length"] == 100


def test_extract_generated_text_shapes() -> None:
    assert extract_generated_text({"conversation": {"generated_responses": [" yo "]}}) == "yo"
    assert extract_generated_text([{"generated_text": "hi there friend"}], "hi") == "there friend"
    assert extract_generated_text({"generated_text": "echo answer"}, "echo") == "answer"
    assert extract_generated_text({"unexpected": True}) == ""
    assert extract_generated_text("nope") == ""


@pytest.mark.asyncio
async def test_loading_models_are_skipped() -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        assert request.headers["Authorization"] == "Bearer hf_test"
        if "DialoGPT" in request.url.path:
            return httpx.Response(503, json={"error": "Model is currently loading"})
        if "blenderbot" in request.url.path:
            return httpx.Response(400, text="Model is warming up")
        return httpx.Response(200, json=[{"generated_text": "a fine answer"}])

    assert await _provider(handler).try_respond("hello", "") == "a fine answer"
    assert len(calls) == 3


@pytest.mark.asyncio
async def test_overlong_answers_are_rejected() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"generated_text": "x" * 300})

    assert await _provider(handler).try_respond("hello", "") is None


@pytest.mark.asyncio
async def test_dialogue_model_answer_returned_first() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        assert isinstance(body["inputs"], dict)
        return httpx.Response(200, json={"conversation": {"generated_responses": ["hey you"]}})

    assert await _provider(handler).try_respond("hello", "") == "hey you"


@pytest.mark.asyncio
async def test_check_credentials() -> None:
    def ok(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"name": "someone"})

    def denied(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"error": "Invalid token"})

    def broken(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("no route", request=request)

    assert await _provider(ok).check_credentials() is True
    assert await _provider(denied).check_credentials() is False
    assert await _provider(broken).check_credentials() is False


def test_placeholder_token_is_not_configured() -> None:
    assert not HubProvider(token="your_hugging_face_token_here").is_configured()
    assert not HubProvider(token="").is_configured()
