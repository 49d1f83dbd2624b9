from __future__ import annotations

from collections.abc import AsyncGenerator
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mediacheck.core.config import Settings, get_settings
from mediacheck.core.errors import Unauthorized
from mediacheck.core.security import TokenPayloadError, decode_access_token
from mediacheck.db.session import get_session_factory
from mediacheck.models import User
from mediacheck.services.ai_reply import AIReplyCoordinator, AIReplyPolicy, Requester
from mediacheck.services.completion_client import CompletionClient, OpenAICompletionClient
from mediacheck.services.stores import AIResponseStore, ArticleStore

bearer_scheme = HTTPBearer(auto_error=False)

SessionFactory = Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)]


async def get_db(session_factory: SessionFactory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@lru_cache
def _default_completion_client() -> OpenAICompletionClient:
    return OpenAICompletionClient(get_settings())


def get_completion_client() -> CompletionClient:
    return _default_completion_client()


async def get_current_user(
    db: Annotated[AsyncSession, Depends(get_db)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> User:
    if credentials is None:
        raise Unauthorized("Missing authorization token")

    try:
        payload = decode_access_token(credentials.credentials)
    except TokenPayloadError as exc:
        raise Unauthorized(str(exc)) from exc

    result = await db.execute(
        select(User).where(
            User.id == payload["sub"],
            User.app_id == payload["app_id"],
            User.is_active.is_(True),
        )
    )
    user = result.scalar_one_or_none()
    if not user:
        raise Unauthorized("User not found or inactive")
    return user


def get_requester(current_user: Annotated[User, Depends(get_current_user)]) -> Requester:
    return Requester(id=current_user.id, app_id=current_user.app_id)


def get_article_store(session_factory: SessionFactory) -> ArticleStore:
    return ArticleStore(session_factory)


def get_ai_response_store(session_factory: SessionFactory) -> AIResponseStore:
    return AIResponseStore(session_factory)


def get_ai_reply_coordinator(
    articles: Annotated[ArticleStore, Depends(get_article_store)],
    responses: Annotated[AIResponseStore, Depends(get_ai_response_store)],
    completions: Annotated[CompletionClient, Depends(get_completion_client)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AIReplyCoordinator:
    return AIReplyCoordinator(articles, responses, completions, AIReplyPolicy.from_settings(settings))


def get_request_id(request: Request | None) -> str | None:
    if request is None:
        return None
    return getattr(request.state, "request_id", None)
