import httpx
import pytest

from middleware.auth import get_current_user
from routes.comments import get_comment_service
from server import app

ALICE = {"id": "u1", "name": "Alice", "role": "member"}
BOB = {"id": "u2", "name": "Bob", "role": "member"}
ADMIN = {"id": "u9", "name": "Root", "role": "admin"}


@pytest.fixture
def as_user(service):
    """Install dependency overrides; call the returned function to switch user."""
    current = {"user": ALICE}
    app.dependency_overrides[get_comment_service] = lambda: service
    app.dependency_overrides[get_current_user] = lambda: current["user"]

    def switch(user):
        current["user"] = user

    yield switch
    app.dependency_overrides.clear()


@pytest.fixture
async def client(as_user):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


async def _post(client, doc_id="doc-1", content="first!"):
    response = await client.post("/api/comments", json={"doc_id": doc_id, "content": content})
    assert response.status_code == 200
    return response.json()


async def test_create_and_list(client):
    body = await _post(client, content="what a stupid bug")
    assert body == {"code": 200, "message": "success", "data": None}

    response = await client.get("/api/documents/doc-1/comments", params={"page": 0, "rows": 5})
    data = response.json()["data"]
    assert data["totalNum"] == 1
    comment = data["comments"][0]
    assert comment["user_id"] == "u1"
    assert comment["user_name"] == "Alice"
    assert comment["content"] == "what a ****** bug"


async def test_author_comes_from_token(client, stored):
    response = await client.post(
        "/api/comments", json={"doc_id": "doc-1", "content": "hi", "user_id": "forged"}
    )

    assert response.json()["code"] == 200
    assert stored[0]["user_id"] == "u1"


async def test_edit_and_delete_are_owner_only(client, as_user, stored):
    await _post(client)
    comment_id = stored[0]["id"]

    as_user(BOB)
    denied = await client.put(f"/api/comments/{comment_id}", json={"content": "mine now"})
    assert denied.json() == {"code": 1203, "message": "operation failed", "data": None}
    denied = await client.delete(f"/api/comments/{comment_id}")
    assert denied.json()["code"] == 1203
    assert stored[0]["content"] == "first!"

    as_user(ALICE)
    edited = await client.put(f"/api/comments/{comment_id}", json={"content": "second thoughts"})
    assert edited.json()["code"] == 200
    assert stored[0]["content"] == "second thoughts"
    deleted = await client.delete(f"/api/comments/{comment_id}")
    assert deleted.json()["code"] == 200
    assert stored == []


async def test_all_comments_count_search_and_stats(client):
    await _post(client, doc_id="doc-1", content="Hello world")
    await _post(client, doc_id="doc-2", content="nothing here")

    all_comments = (await client.get("/api/comments", params={"page": 1, "rows": 10})).json()
    assert all_comments["data"]["total"] == 2

    count = (await client.get("/api/documents/doc-1/comments/count")).json()
    assert count["data"] == 1

    search = (await client.get("/api/comments/search", params={"keyword": "HELLO"})).json()
    assert search["data"] == ["doc-1"]

    empty = (await client.get("/api/comments/search")).json()
    assert empty["data"] == []

    stats = (await client.get("/api/comments/stats")).json()
    assert stats["data"] == {"total": 2}


async def test_purge_requires_moderator(client, as_user, stored):
    await _post(client)
    await _post(client)

    forbidden = await client.delete("/api/documents/doc-1/comments")
    assert forbidden.status_code == 403
    assert len(stored) == 2

    as_user(ADMIN)
    purged = await client.delete("/api/documents/doc-1/comments")
    assert purged.json()["data"] == {"removed": 2}
    assert stored == []


async def test_storage_failure_on_helper_route(client, gateway):
    gateway.failing.add("estimated_count")

    response = await client.get("/api/comments/stats")

    assert response.status_code == 200
    assert response.json()["code"] == 1205


async def test_health(client):
    response = await client.get("/api/health")
    assert response.json()["status"] == "healthy"


async def test_comments_require_token(service):
    app.dependency_overrides[get_comment_service] = lambda: service
    try:
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
            response = await c.post("/api/comments", json={"doc_id": "doc-1", "content": "hi"})
    finally:
        app.dependency_overrides.clear()

    assert response.status_code in (401, 403)


@pytest.mark.parametrize("path,params", [
    ("/api/documents/doc-1/comments", {"page": 1, "rows": -2}),
    ("/api/documents/doc-1/comments", {"page": -1, "rows": 2}),
    ("/api/documents/doc-1/comments", {"rows": 0}),
    ("/api/comments", {"page": 2, "rows": -1}),
    ("/api/comments", {"page": 0}),
    ("/api/comments", {"rows": 10_000}),
])
async def test_listing_rejects_out_of_range_paging(client, gateway, path, params):
    response = await client.get(path, params=params)

    assert response.status_code == 422
    assert gateway.calls == []
