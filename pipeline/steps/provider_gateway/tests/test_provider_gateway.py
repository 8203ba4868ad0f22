"""
Test suite for Provider Gateway Step

HTTP traffic is mocked with respx; no real provider is called.

Run with:
    pytest pipeline/steps/provider_gateway/tests/test_provider_gateway.py -v
"""

import json

import httpx
import pytest
import respx

from pipeline.core.exceptions import ProviderError
from pipeline.models.core import ComposeData, ComposeRequest, PromptBranch, RenderedPrompt
from pipeline.steps.provider_gateway import DEFAULT_API_URL, ChatCompletionProvider, ProviderGatewayStep


CUSTOM_URL = "https://llm.internal.example/v1/chat/completions"


def completion(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}], "usage": {"total_tokens": 42}}


@pytest.fixture
def provider():
    return ChatCompletionProvider(api_key="sk-test", model="gpt-test", max_tokens=500)


def test_missing_api_key_is_rejected():
    with pytest.raises(ValueError):
        ChatCompletionProvider(api_key="")


def test_default_url_used_when_unset(provider):
    assert provider.api_url == DEFAULT_API_URL


@pytest.mark.parametrize("creativity,expected", [
    ("low", 0.2),
    ("medium", 0.5),
    ("high", 0.8),
    ("HIGH", 0.8),
    ("extreme", 0.5),
    (None, 0.5),
])
def test_temperature_for(provider, creativity, expected):
    assert provider.temperature_for(creativity) == expected


def test_unknown_creativity_uses_configured_default():
    provider = ChatCompletionProvider(api_key="sk-test", default_creativity="low")

    assert provider.temperature_for("extreme") == 0.2


@pytest.mark.asyncio
@respx.mock
async def test_generate_sends_expected_request(provider):
    route = respx.post(DEFAULT_API_URL).mock(return_value=httpx.Response(200, json=completion("Dear Bob,")))

    email = await provider.generate("Write an email", "high")

    assert email == "Dear Bob,"
    request = route.calls.last.request
    assert request.headers["Authorization"] == "Bearer sk-test"
    body = json.loads(request.content)
    assert body == {
        "model": "gpt-test",
        "messages": [
            {"role": "system", "content": "You are a helpful personal assistant."},
            {"role": "user", "content": "Write an email"},
        ],
        "max_completion_tokens": 500,
        "temperature": 0.8,
        "n": 1,
        "stream": False,
    }


@pytest.mark.asyncio
@respx.mock
async def test_generate_uses_configured_url():
    provider = ChatCompletionProvider(api_key="sk-test", api_url=CUSTOM_URL)
    route = respx.post(CUSTOM_URL).mock(return_value=httpx.Response(200, json=completion("Hi")))

    await provider.generate("prompt")

    assert route.called


@pytest.mark.asyncio
@respx.mock
async def test_vendor_error(provider):
    respx.post(DEFAULT_API_URL).mock(
        return_value=httpx.Response(401, json={"error": {"message": "Incorrect API key provided"}})
    )

    with pytest.raises(ProviderError) as exc_info:
        await provider.generate("prompt")

    assert exc_info.value.reason == ProviderError.VENDOR
    assert exc_info.value.status_code == 401
    assert "Incorrect API key provided" in str(exc_info.value)


@pytest.mark.asyncio
@respx.mock
async def test_invalid_json_is_vendor_error(provider):
    respx.post(DEFAULT_API_URL).mock(return_value=httpx.Response(200, text="<html>oops</html>"))

    with pytest.raises(ProviderError) as exc_info:
        await provider.generate("prompt")

    assert exc_info.value.reason == ProviderError.VENDOR


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [
    completion(""),
    completion(None),
    {"choices": []},
    {},
])
async def test_empty_content(provider, payload):
    with respx.mock:
        respx.post(DEFAULT_API_URL).mock(return_value=httpx.Response(200, json=payload))

        with pytest.raises(ProviderError) as exc_info:
            await provider.generate("prompt")

    assert exc_info.value.reason == ProviderError.EMPTY_CONTENT


@pytest.mark.asyncio
@respx.mock
async def test_timeout_is_transport_error(provider):
    respx.post(DEFAULT_API_URL).mock(side_effect=httpx.ReadTimeout("timed out"))

    with pytest.raises(ProviderError) as exc_info:
        await provider.generate("prompt")

    assert exc_info.value.reason == ProviderError.TRANSPORT


@pytest.mark.asyncio
@respx.mock
async def test_connection_error_is_transport_error(provider):
    respx.post(DEFAULT_API_URL).mock(side_effect=httpx.ConnectError("connection refused"))

    with pytest.raises(ProviderError) as exc_info:
        await provider.generate("prompt")

    assert exc_info.value.reason == ProviderError.TRANSPORT


@pytest.mark.asyncio
@respx.mock
async def test_step_stores_generated_text(provider):
    respx.post(DEFAULT_API_URL).mock(return_value=httpx.Response(200, json=completion("Dear Bob,\n\nThanks.")))
    compose_data = ComposeData(
        request_id="r",
        caller_identity="c",
        form={},
        request=ComposeRequest(
            sender_name="Alice", style="Formal", length="short", creativity="low", language="English",
            instruction="thank Bob",
        ),
        prompt=RenderedPrompt(text="Write it", branch=PromptBranch.COMPOSE),
    )

    await ProviderGatewayStep(provider).execute(compose_data)

    assert compose_data.generated_text == "Dear Bob,\n\nThanks."
