from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mediacheck.core.errors import PersistenceFailure
from mediacheck.models import AIResponse, AIResponseStatus, AIResponseType, Article


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ArticleStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, article_id: str) -> Article | None:
        try:
            async with self._session_factory() as session:
                return await session.get(Article, article_id)
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"Cannot load article {article_id}: {exc}") from exc


class AIResponseStore:
    """Persisted AI responses.

    Every call runs in its own session and commits before returning, so a write
    is visible to all other coordinators sharing the database as soon as the
    call completes.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @staticmethod
    def _matching(doc_id: str, response_type: AIResponseType, status: AIResponseStatus) -> list[Any]:
        return [
            AIResponse.type == response_type,
            AIResponse.doc_id == doc_id,
            AIResponse.status == status,
        ]

    async def find_latest(
        self,
        doc_id: str,
        response_type: AIResponseType,
        status: AIResponseStatus,
    ) -> AIResponse | None:
        query = (
            select(AIResponse)
            .where(*self._matching(doc_id, response_type, status))
            .order_by(AIResponse.created_at.desc())
            .limit(1)
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(query)
                return result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"Cannot search AI responses: {exc}") from exc

    async def count(
        self,
        doc_id: str,
        response_type: AIResponseType,
        status: AIResponseStatus,
        created_since: datetime | None = None,
    ) -> int:
        conditions = self._matching(doc_id, response_type, status)
        if created_since is not None:
            conditions.append(AIResponse.created_at >= created_since)

        try:
            async with self._session_factory() as session:
                result = await session.execute(select(func.count()).select_from(AIResponse).where(*conditions))
                return int(result.scalar() or 0)
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"Cannot count AI responses: {exc}") from exc

    async def insert(self, record: AIResponse) -> str:
        try:
            async with self._session_factory() as session:
                session.add(record)
                await session.commit()
                return record.id
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"Cannot create AI reply: {exc}") from exc

    async def update(self, response_id: str, fields: dict[str, Any]) -> AIResponse:
        """Finalize a LOADING response and return the updated snapshot."""
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    update(AIResponse)
                    .where(AIResponse.id == response_id, AIResponse.status == AIResponseStatus.LOADING)
                    .values(**fields)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount != 1:
                    await session.rollback()
                    raise PersistenceFailure(f"AI response {response_id} is not a loading response")
                await session.commit()
                updated = await session.get(AIResponse, response_id, populate_existing=True)
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"Cannot update AI response {response_id}: {exc}") from exc

        if updated is None:
            raise PersistenceFailure(f"AI response {response_id} disappeared after update")
        return updated

    async def list_for_doc(
        self,
        doc_id: str,
        response_type: AIResponseType,
        limit: int = 50,
    ) -> list[AIResponse]:
        query = (
            select(AIResponse)
            .where(AIResponse.doc_id == doc_id, AIResponse.type == response_type)
            .order_by(AIResponse.created_at.desc())
            .limit(limit)
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(query)
                return list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"Cannot list AI responses: {exc}") from exc

