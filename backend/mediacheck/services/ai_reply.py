"""Create AI replies for articles without duplicating completion calls.

The response store is the only synchronization point. A caller first looks
for a successful reply, then for a LOADING reply created within the recency
window. It polls while one exists and creates a new reply once none does.
Coordinators in different processes cooperate through the same rows.

Two callers that both observe zero in-flight replies at the same instant will
both create one. That duplicate is accepted; no lock is taken.

The recency cutoff is computed from this process's clock, so processes sharing
the store need synchronized clocks.
"""
from __future__ import annotations

import asyncio
import logging
import time
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from mediacheck.core.config import Settings
from mediacheck.core.errors import AIReplyWaitTimeout, NotFound, Unauthorized
from mediacheck.models import AIResponse, AIResponseStatus, AIResponseType
from mediacheck.services.completion_client import CompletionClient, CompletionResult
from mediacheck.services.prompts import build_completion_request, format_reply_date, serialize_request
from mediacheck.services.stores import AIResponseStore, ArticleStore, utc_now

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Requester:
    id: str
    app_id: str


@dataclass(frozen=True)
class AIReplyPolicy:
    recency_window: timedelta = timedelta(seconds=60)
    poll_interval: float = 1.0
    max_wait: float | None = None
    timezone: str = "Asia/Taipei"
    model: str = "gpt-3.5-turbo"

    @classmethod
    def from_settings(cls, settings: Settings) -> AIReplyPolicy:
        return cls(
            recency_window=timedelta(seconds=settings.ai_reply_recency_window_seconds),
            poll_interval=settings.ai_reply_poll_interval_ms / 1000,
            max_wait=settings.ai_reply_max_wait_seconds,
            timezone=settings.ai_reply_timezone,
            model=settings.openai_model,
        )


def describe_error(error: BaseException) -> str:
    message = str(error)
    name = type(error).__name__
    return f"{name}: {message}" if message else name


class AIReplyCoordinator:
    def __init__(
        self,
        articles: ArticleStore,
        responses: AIResponseStore,
        completions: CompletionClient,
        policy: AIReplyPolicy | None = None,
        *,
        clock: Callable[[], datetime] = utc_now,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self._articles = articles
        self._responses = responses
        self._completions = completions
        self._policy = policy or AIReplyPolicy()
        self._clock = clock
        self._sleep = sleep
        self._monotonic = monotonic

    async def request_ai_reply(self, article_id: str, requester: Requester | None) -> AIResponse:
        if requester is None:
            raise Unauthorized("Invalid authentication header")

        article = await self._articles.get(article_id)
        if article is None:
            raise NotFound(f"Article {article_id} does not exist.")

        existing = await self._wait_for_existing(article_id)
        if existing is not None:
            return existing

        return await self._create(article_id, article.text, requester)

    async def _wait_for_existing(self, article_id: str) -> AIResponse | None:
        """Return the latest successful reply, or None once nobody is producing one."""
        deadline = None
        if self._policy.max_wait is not None:
            deadline = self._monotonic() + self._policy.max_wait

        attempt = 0
        while True:
            successful = await self._responses.find_latest(
                article_id, AIResponseType.AI_REPLY, AIResponseStatus.SUCCESS
            )
            if successful is not None:
                logger.info(
                    "Returning existing AI reply %s",
                    successful.id,
                    extra={"article_id": article_id},
                )
                return successful

            loading = await self._responses.count(
                article_id,
                AIResponseType.AI_REPLY,
                AIResponseStatus.LOADING,
                created_since=self._clock() - self._policy.recency_window,
            )
            if loading == 0:
                return None

            if deadline is not None and self._monotonic() >= deadline:
                raise AIReplyWaitTimeout(
                    f"AI reply for article {article_id} is still loading after {self._policy.max_wait}s"
                )

            attempt += 1
            logger.debug(
                "Waiting for %d loading AI reply(s), attempt %d",
                loading,
                attempt,
                extra={"article_id": article_id},
            )
            await self._sleep(self._policy.poll_interval)

    async def _create(self, article_id: str, article_text: str, requester: Requester) -> AIResponse:
        today = format_reply_date(self._clock(), self._policy.timezone)
        completion_request = build_completion_request(article_text, today, self._policy.model)

        placeholder = AIResponse(
            id=str(uuid.uuid4()),
            user_id=requester.id,
            app_id=requester.app_id,
            doc_id=article_id,
            type=AIResponseType.AI_REPLY,
            status=AIResponseStatus.LOADING,
            request=serialize_request(completion_request),
            created_at=self._clock(),
        )
        logger.info(
            "Creating AI reply %s",
            placeholder.id,
            extra={"article_id": article_id, "user_id": requester.id, "app_id": requester.app_id},
        )

        inserting = asyncio.ensure_future(self._responses.insert(placeholder))
        completing = asyncio.ensure_future(self._complete(completion_request, article_id))
        try:
            response_id, outcome = await asyncio.gather(inserting, completing)
        except BaseException:
            completing.cancel()
            inserting.cancel()
            raise

        return await self._responses.update(response_id, self._final_fields(outcome))

    async def _complete(self, request: dict[str, Any], article_id: str) -> CompletionResult | Exception:
        try:
            return await self._completions.complete(request)
        except Exception as exc:
            logger.exception("Completion API failed", extra={"article_id": article_id})
            return exc

    def _final_fields(self, outcome: CompletionResult | Exception) -> dict[str, Any]:
        if isinstance(outcome, Exception):
            return {
                "status": AIResponseStatus.ERROR,
                "text": describe_error(outcome),
                "updated_at": self._clock(),
            }

        fields: dict[str, Any] = {
            "status": AIResponseStatus.SUCCESS,
            "text": outcome.message_content,
            "updated_at": self._clock(),
        }
        if outcome.usage is not None:
            fields["usage"] = outcome.usage.to_record()
        return fields
