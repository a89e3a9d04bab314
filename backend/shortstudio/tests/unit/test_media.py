"""Testy wyszukiwania mediów, podpowiedzi i panelu analityki."""

import httpx
import pytest
from httpx import AsyncClient

from shortstudio.api.deps import get_media_search
from shortstudio.main import app
from shortstudio.models.video import VideoStatus
from shortstudio.services.media.stock_provider import MediaSearch
from shortstudio.tests.fakes import seed_video


def pexels_handler(request: httpx.Request) -> httpx.Response:
    if request.headers.get("Authorization") != "px-key":
        return httpx.Response(401, json={"error": "Invalid API key"})
    return httpx.Response(
        200,
        json={"photos": [{"id": 3, "src": {"portrait": "https://images.test/3.jpg"}, "photographer": "Ola"}]},
    )


@pytest.fixture
def pexels():
    client = httpx.AsyncClient(transport=httpx.MockTransport(pexels_handler))
    app.dependency_overrides[get_media_search] = lambda: MediaSearch(http_client=client)
    yield
    app.dependency_overrides.pop(get_media_search, None)


@pytest.mark.asyncio
async def test_search_requires_pexels_key(client: AsyncClient, auth_headers, pexels):
    response = await client.get("/api/v1/media/search", headers=auth_headers, params={"query": "city"})

    assert response.status_code == 424
    assert response.json()["error"] == "credential_missing"


@pytest.mark.asyncio
async def test_search_photos(client: AsyncClient, auth_headers, pexels):
    await client.put("/api/v1/api-keys", headers=auth_headers, json={"keys": {"pexels": "px-key"}})

    response = await client.get("/api/v1/media/search", headers=auth_headers, params={"query": "city"})

    assert response.status_code == 200
    assert response.json() == [
        {
            "id": "3",
            "media_type": "photo",
            "url": "https://images.test/3.jpg",
            "preview_url": None,
            "width": None,
            "height": None,
            "author": "Ola",
        }
    ]


@pytest.mark.asyncio
async def test_search_upstream_error(client: AsyncClient, auth_headers, pexels):
    await client.put("/api/v1/api-keys", headers=auth_headers, json={"keys": {"pexels": "wrong"}})

    response = await client.get("/api/v1/media/search", headers=auth_headers, params={"query": "city"})

    assert response.status_code == 502
    assert response.json()["detail"] == "Invalid API key"


@pytest.mark.asyncio
async def test_suggestions_from_script(client: AsyncClient, auth_headers, test_user, db):
    video = await seed_video(db, user=test_user)

    response = await client.get(
        "/api/v1/media/suggestions", headers=auth_headers, params={"script_id": str(video.script_id)}
    )

    assert response.json() == {"queries": ["panorama miasta o świcie", "kawa na parapecie"]}


@pytest.mark.asyncio
async def test_dashboard_counts(client: AsyncClient, auth_headers, test_user, db):
    await seed_video(db, user=test_user)
    await seed_video(db, user=test_user, status=VideoStatus.FAILED)

    response = await client.get("/api/v1/analytics/dashboard", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["total_series"] == 2
    assert data["total_videos"] == 2
    assert data["videos_by_status"] == {"pending": 1, "failed": 1}
