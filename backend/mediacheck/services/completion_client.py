from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

from openai import AsyncOpenAI

from mediacheck.core.config import Settings
from mediacheck.core.errors import UpstreamFailure


@dataclass(frozen=True)
class TokenUsage:
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int

    def to_record(self) -> dict[str, int]:
        return {
            "promptTokens": self.prompt_tokens,
            "completionTokens": self.completion_tokens,
            "totalTokens": self.total_tokens,
        }


@dataclass(frozen=True)
class CompletionResult:
    message_content: str
    usage: TokenUsage | None = None


class CompletionClient(Protocol):
    async def complete(self, request: dict[str, Any]) -> CompletionResult: ...


class OpenAICompletionClient:
    """Chat completions through the OpenAI SDK.

    The SDK client is built on first use, so a missing API key surfaces as a
    failed completion instead of failing application startup.
    """

    def __init__(self, settings: Settings, client: AsyncOpenAI | None = None) -> None:
        self._settings = settings
        self._client = client

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(
                api_key=self._settings.openai_api_key,
                base_url=self._settings.openai_base_url,
                timeout=self._settings.openai_timeout_seconds,
            )
        return self._client

    async def complete(self, request: dict[str, Any]) -> CompletionResult:
        response = await self._get_client().chat.completions.create(**request)
        if not response.choices:
            raise UpstreamFailure("Completion API returned no choices")

        content = response.choices[0].message.content
        if content is None:
            raise UpstreamFailure("Completion API returned an empty message")

        usage = None
        if response.usage is not None:
            usage = TokenUsage(
                prompt_tokens=response.usage.prompt_tokens,
                completion_tokens=response.usage.completion_tokens,
                total_tokens=response.usage.total_tokens,
            )
        return CompletionResult(message_content=content, usage=usage)
