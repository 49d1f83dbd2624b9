from __future__ import annotations

from types import SimpleNamespace

import pytest

from mediacheck.core.config import Settings
from mediacheck.core.errors import UpstreamFailure
from mediacheck.services.completion_client import OpenAICompletionClient, TokenUsage


class StubCompletions:
    def __init__(self, response) -> None:
        self.response = response
        self.kwargs: dict | None = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        return self.response


def stub_client(response) -> tuple[SimpleNamespace, StubCompletions]:
    completions = StubCompletions(response)
    return SimpleNamespace(chat=SimpleNamespace(completions=completions)), completions


def chat_response(content, usage=None) -> SimpleNamespace:
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(role="assistant", content=content), finish_reason="stop")],
        usage=usage,
    )


@pytest.mark.asyncio
async def test_complete_maps_content_and_usage() -> None:
    usage = SimpleNamespace(prompt_tokens=343, completion_tokens=64, total_tokens=407)
    sdk, completions = stub_client(chat_response("閱聽人應該確保登記網站的正確性", usage))
    client = OpenAICompletionClient(Settings(_env_file=None), client=sdk)
    request = {"model": "gpt-3.5-turbo", "messages": [{"role": "user", "content": "hi"}]}

    result = await client.complete(request)

    assert completions.kwargs == request
    assert result.message_content == "閱聽人應該確保登記網站的正確性"
    assert result.usage == TokenUsage(prompt_tokens=343, completion_tokens=64, total_tokens=407)
    assert result.usage.to_record() == {"promptTokens": 343, "completionTokens": 64, "totalTokens": 407}


@pytest.mark.asyncio
async def test_complete_without_usage() -> None:
    sdk, _ = stub_client(chat_response("ok"))
    client = OpenAICompletionClient(Settings(_env_file=None), client=sdk)

    result = await client.complete({"model": "m", "messages": []})

    assert result.usage is None


@pytest.mark.asyncio
async def test_complete_rejects_empty_choices() -> None:
    sdk, _ = stub_client(SimpleNamespace(choices=[], usage=None))
    client = OpenAICompletionClient(Settings(_env_file=None), client=sdk)

    with pytest.raises(UpstreamFailure):
        await client.complete({"model": "m", "messages": []})
