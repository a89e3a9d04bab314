"""Testy endpointów serii."""

import pytest
from httpx import AsyncClient


async def _create(client: AsyncClient, headers: dict, **fields) -> dict:
    payload = {"title": "Finanse osobiste", "topic": "Porady dotyczące oszczędzania pieniędzy"}
    payload.update(fields)
    response = await client.post("/api/v1/series", headers=headers, json=payload)
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_create_series(client: AsyncClient, auth_headers):
    data = await _create(client, auth_headers, platform="both", content_prompt="Krótko, konkretnie")

    assert data["title"] == "Finanse osobiste"
    assert data["topic"] == "Porady dotyczące oszczędzania pieniędzy"
    assert data["platform"] == "both"
    assert data["status"] == "active"


@pytest.mark.asyncio
async def test_create_series_unknown_platform(client: AsyncClient, auth_headers):
    response = await client.post(
        "/api/v1/series",
        headers=auth_headers,
        json={"title": "Test", "topic": "Test", "platform": "instagram"},
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_series(client: AsyncClient, auth_headers):
    await _create(client, auth_headers, title="Test")

    response = await client.get("/api/v1/series", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert data["items"][0]["title"] == "Test"


@pytest.mark.asyncio
async def test_update_series(client: AsyncClient, auth_headers):
    series_id = (await _create(client, auth_headers, title="Old Title"))["id"]

    response = await client.patch(
        f"/api/v1/series/{series_id}",
        headers=auth_headers,
        json={"title": "New Title", "platform": "tiktok", "topic": "Inny temat"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "New Title"
    # Platforma i temat nie zmieniają się po utworzeniu
    assert data["platform"] == "youtube"
    assert data["topic"] == "Porady dotyczące oszczędzania pieniędzy"


@pytest.mark.asyncio
async def test_archive_series(client: AsyncClient, auth_headers):
    series_id = (await _create(client, auth_headers, title="To Archive"))["id"]

    delete_resp = await client.delete(f"/api/v1/series/{series_id}", headers=auth_headers)
    assert delete_resp.status_code == 204

    list_resp = await client.get("/api/v1/series", headers=auth_headers)
    assert series_id not in [s["id"] for s in list_resp.json()["items"]]

    archived = await client.get("/api/v1/series", headers=auth_headers, params={"status": "archived"})
    assert series_id in [s["id"] for s in archived.json()["items"]]

    patch_resp = await client.patch(
        f"/api/v1/series/{series_id}", headers=auth_headers, json={"title": "Reaktywacja"}
    )
    assert patch_resp.status_code == 409


@pytest.mark.asyncio
async def test_series_of_other_user_not_found(client: AsyncClient, auth_headers):
    series_id = (await _create(client, auth_headers))["id"]

    register = await client.post(
        "/api/v1/auth/register",
        json={"email": "other@example.com", "password": "otherpassword123"},
    )
    other_headers = {"Authorization": f"Bearer {register.json()['access_token']}"}

    response = await client.get(f"/api/v1/series/{series_id}", headers=other_headers)
    assert response.status_code == 404
    assert response.json()["error"] == "not_found"
