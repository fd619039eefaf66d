# File: tests/test_service.py
from types import SimpleNamespace

import anthropic
import httpx
import pytest

from access_scout.config import ScannerConfig
from access_scout.enrichment.service import AnthropicService, build_ai_service
from access_scout.errors import EnrichmentCallError


class FakeMessages:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error is not None:
            raise self.error
        return self.response


def fake_client(messages):
    return SimpleNamespace(messages=messages)


def text_response(*texts):
    return SimpleNamespace(content=[SimpleNamespace(type="text", text=t) for t in texts])


@pytest.mark.asyncio()
async def test_complete_sends_image_before_text():
    messages = FakeMessages(text_response('{"summary": "ok"}'))
    service = AnthropicService("claude-test", client=fake_client(messages))

    text = await service.complete("Review this page", image_png_b64="aGVsbG8=", max_tokens=2048)

    assert text == '{"summary": "ok"}'
    assert messages.kwargs["model"] == "claude-test"
    assert messages.kwargs["max_tokens"] == 2048
    content = messages.kwargs["messages"][0]["content"]
    assert [block["type"] for block in content] == ["image", "text"]
    assert content[0]["source"] == {"type": "base64", "media_type": "image/png", "data": "aGVsbG8="}
    assert content[1]["text"] == "Review this page"


@pytest.mark.asyncio()
async def test_complete_text_only():
    messages = FakeMessages(text_response("part one", "part two"))
    service = AnthropicService("claude-test", client=fake_client(messages))
    assert await service.complete("Explain") == "part one\npart two"
    assert [block["type"] for block in messages.kwargs["messages"][0]["content"]] == ["text"]


@pytest.mark.asyncio()
async def test_api_error_is_wrapped():
    error = anthropic.APIConnectionError(request=httpx.Request("POST", "https://api.anthropic.com/v1/messages"))
    service = AnthropicService("claude-test", client=fake_client(FakeMessages(error=error)))
    with pytest.raises(EnrichmentCallError):
        await service.complete("Explain")


@pytest.mark.asyncio()
async def test_empty_response_is_an_error():
    service = AnthropicService("claude-test", client=fake_client(FakeMessages(text_response("  "))))
    with pytest.raises(EnrichmentCallError):
        await service.complete("Explain")


def test_build_ai_service_without_key():
    assert build_ai_service(ScannerConfig()) is None


def test_build_ai_service_with_key():
    service = build_ai_service(ScannerConfig(ai_api_key="sk-test", ai_model="claude-x"))
    assert isinstance(service, AnthropicService)
    assert service.model == "claude-x"
