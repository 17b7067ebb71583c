"""API test fixtures: FastAPI test client bound to the test marketplace.

Invariants:
    - get_marketplace overridden to return the per-test Marketplace
    - Bearer sessions cleared after each test

Design Decisions:
    - Lifespan is not run: the override supplies everything startup would build
"""

import pytest
from httpx import ASGITransport, AsyncClient

import swapsquare.api.dependencies as deps
from swapsquare.main import app


@pytest.fixture
async def client(market):
    app.dependency_overrides[deps.get_marketplace] = lambda: market
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
    app.dependency_overrides.clear()
    deps._sessions.clear()


@pytest.fixture
def sign_up(client):
    """Register a user over HTTP; returns (user_id, auth headers)."""
    async def _sign_up(name, city="Winnipeg", password="secret1"):
        res = await client.post("/api/v1/auth/register", json={
            "name": name, "city": city,
            "email": f"{name.lower()}@example.com", "password": password,
        })
        assert res.status_code == 201, res.text
        body = res.json()
        return body["user_id"], {"Authorization": f"Bearer {body['token']}"}
    return _sign_up


@pytest.fixture
def upload_item(client):
    """POST a multipart item; returns the response."""
    async def _upload(headers, title="Desk lamp", images=1, size=16, content_type="image/png"):
        files = [
            ("images", (f"photo{n}.png", b"x" * size, content_type))
            for n in range(images)
        ]
        return await client.post(
            "/api/v1/items",
            data={
                "title": title, "category": "Home",
                "condition": "Good", "description": "Works",
            },
            files=files or None,
            headers=headers,
        )
    return _upload
