from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from mediacheck.api.deps import (
    get_ai_reply_coordinator,
    get_ai_response_store,
    get_article_store,
    get_requester,
)
from mediacheck.core.errors import NotFound
from mediacheck.models import AIResponseType
from mediacheck.schemas.ai_reply import AIReplyOut, AIResponseOut
from mediacheck.services.ai_reply import AIReplyCoordinator, Requester
from mediacheck.services.stores import AIResponseStore, ArticleStore

router = APIRouter(prefix="/articles", tags=["articles"])


@router.post("/{article_id}/ai-reply", response_model=AIReplyOut)
async def create_ai_reply(
    article_id: str,
    requester: Annotated[Requester, Depends(get_requester)],
    coordinator: Annotated[AIReplyCoordinator, Depends(get_ai_reply_coordinator)],
) -> AIReplyOut:
    """Create an AI reply for an article. If one exists, return it instead."""
    response = await coordinator.request_ai_reply(article_id, requester)
    return AIReplyOut.model_validate(response)


@router.get("/{article_id}/ai-replies", response_model=list[AIResponseOut])
async def list_ai_replies(
    article_id: str,
    _: Annotated[Requester, Depends(get_requester)],
    articles: Annotated[ArticleStore, Depends(get_article_store)],
    responses: Annotated[AIResponseStore, Depends(get_ai_response_store)],
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
) -> list[AIResponseOut]:
    if await articles.get(article_id) is None:
        raise NotFound(f"Article {article_id} does not exist.")

    items = await responses.list_for_doc(article_id, AIResponseType.AI_REPLY, limit=limit)
    return [AIResponseOut.model_validate(item) for item in items]
