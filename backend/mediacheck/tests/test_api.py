from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import timedelta

import httpx
import pytest
import pytest_asyncio

from mediacheck.api.deps import get_completion_client
from mediacheck.core.security import create_access_token
from mediacheck.db.session import get_session_factory
from mediacheck.main import app
from mediacheck.models import AIResponseStatus, User
from mediacheck.services.stores import utc_now
from mediacheck.tests.factories import FakeCompletionClient, add_ai_response, add_article


@pytest_asyncio.fixture
async def completions() -> FakeCompletionClient:
    return FakeCompletionClient()


@pytest_asyncio.fixture
async def client(session_factory, completions) -> AsyncGenerator[httpx.AsyncClient, None]:
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_completion_client] = lambda: completions
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def auth_headers(session_factory) -> dict[str, str]:
    async with session_factory() as session:
        session.add(User(id="test", app_id="test", name="Tester"))
        await session.commit()
    token, _ = create_access_token("test", "test")
    return {"Authorization": f"Bearer {token}"}


@pytest.mark.asyncio
async def test_create_ai_reply_requires_identity(client) -> None:
    response = await client.post("/api/v1/articles/reported-article/ai-reply")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


@pytest.mark.asyncio
async def test_token_for_unknown_user_is_rejected(client) -> None:
    token, _ = create_access_token("ghost", "test")

    response = await client.post(
        "/api/v1/articles/reported-article/ai-reply",
        headers={"Authorization": f"Bearer {token}"},
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_create_ai_reply_for_missing_article(client, auth_headers) -> None:
    response = await client.post("/api/v1/articles/does-not-exist/ai-reply", headers=auth_headers)

    assert response.status_code == 404
    error = response.json()["error"]
    assert error["code"] == "NOT_FOUND"
    assert error["message"] == "Article does-not-exist does not exist."
    assert error["request_id"] == response.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_create_ai_reply(client, auth_headers, session_factory, completions) -> None:
    await add_article(session_factory, "reported-article")

    response = await client.post("/api/v1/articles/reported-article/ai-reply", headers=auth_headers)

    assert response.status_code == 200
    body = response.json()
    assert set(body) == {"id", "text", "status", "updatedAt", "usage"}
    assert body["status"] == "SUCCESS"
    assert body["text"] == "hello"
    assert body["usage"] == {"promptTokens": 10, "completionTokens": 5, "totalTokens": 15}
    assert body["updatedAt"] is not None
    assert len(completions.requests) == 1


@pytest.mark.asyncio
async def test_create_ai_reply_returns_existing_success(client, auth_headers, session_factory, completions) -> None:
    await add_article(session_factory, "ai-replied-article")
    await add_ai_response(
        session_factory,
        "ai-reply-latest",
        "ai-replied-article",
        AIResponseStatus.SUCCESS,
        utc_now() - timedelta(seconds=10),
        text="existing",
    )

    response = await client.post("/api/v1/articles/ai-replied-article/ai-reply", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["id"] == "ai-reply-latest"
    assert response.json()["status"] == "SUCCESS"
    assert completions.requests == []


@pytest.mark.asyncio
async def test_list_ai_replies(client, auth_headers, session_factory) -> None:
    await add_article(session_factory, "reported-article")
    now = utc_now()
    await add_ai_response(session_factory, "errored", "reported-article", AIResponseStatus.ERROR, now - timedelta(minutes=5))
    await add_ai_response(session_factory, "succeeded", "reported-article", AIResponseStatus.SUCCESS, now)

    response = await client.get("/api/v1/articles/reported-article/ai-replies", headers=auth_headers)

    assert response.status_code == 200
    items = response.json()
    assert [item["id"] for item in items] == ["succeeded", "errored"]
    assert items[0]["docId"] == "reported-article"
    assert items[0]["type"] == "AI_REPLY"


@pytest.mark.asyncio
async def test_list_ai_replies_for_missing_article(client, auth_headers) -> None:
    response = await client.get("/api/v1/articles/does-not-exist/ai-replies", headers=auth_headers)

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_health(client) -> None:
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
