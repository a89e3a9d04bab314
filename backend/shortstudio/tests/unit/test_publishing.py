"""Testy publisherów i odświeżania tokenów OAuth."""

import json
import uuid
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from shortstudio.core.exceptions import CredentialMissing, UpstreamError
from shortstudio.models.platform_connection import PlatformConnection
from shortstudio.services.providers.base import Result
from shortstudio.services.publishing.base import PublishRequest, SimulatedPublisher, get_publisher
from shortstudio.services.publishing.oauth_exchange import needs_refresh, refresh_access_token
from shortstudio.services.publishing.tiktok_publisher import TikTokPublisher
from shortstudio.services.publishing.youtube_publisher import YouTubePublisher

REQUEST = PublishRequest(
    user_id=uuid.uuid4(),
    platform="youtube",
    video_url="https://cdn.test/out.mp4",
    title="Poranek w mieście",
    description="Opis",
    tags=["miasto"],
)


async def keys(provider: str) -> Result[str]:
    return Result.success(f"{provider}-token")


async def no_keys(provider: str) -> Result[str]:
    return Result.failure(CredentialMissing(provider))


@pytest.mark.asyncio
async def test_simulated_publisher_ids():
    youtube = await SimulatedPublisher("youtube", keys, delay=0).publish(REQUEST)
    tiktok = await SimulatedPublisher("tiktok", keys, delay=0).publish(REQUEST)

    assert youtube.value.content_id.startswith("YT_")
    assert len(youtube.value.content_id) == 13
    assert youtube.value.url == f"https://youtube.com/shorts/{youtube.value.content_id}"
    assert tiktok.value.content_id.startswith("TT_")
    assert tiktok.value.url.startswith("https://tiktok.com/@user/video/TT_")


@pytest.mark.asyncio
async def test_simulated_publisher_requires_platform_key():
    result = await SimulatedPublisher("youtube", no_keys, delay=0).publish(REQUEST)
    assert isinstance(result.error, CredentialMissing)


def test_get_publisher_modes():
    assert isinstance(get_publisher("tiktok", credentials=keys, mode="simulated"), SimulatedPublisher)
    assert isinstance(get_publisher("youtube", credentials=keys, tokens=keys, mode="oauth"), YouTubePublisher)
    with pytest.raises(ValueError):
        get_publisher("youtube", credentials=keys, mode="oauth")


@pytest.mark.asyncio
async def test_youtube_resumable_upload():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append((request.method, str(request.url)))
        if request.url.host == "cdn.test":
            return httpx.Response(200, content=b"mp4-bytes")
        if request.method == "POST":
            assert request.headers["Authorization"] == "Bearer youtube-token"
            assert json.loads(request.content)["snippet"]["title"] == "Poranek w mieście"
            return httpx.Response(200, headers={"Location": "https://upload.test/session-1"})
        assert request.content == b"mp4-bytes"
        return httpx.Response(200, json={"id": "yt-123"})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    result = await YouTubePublisher(keys, http_client=client).publish(REQUEST)

    assert result.value.content_id == "yt-123"
    assert result.value.url == "https://www.youtube.com/shorts/yt-123"
    assert [method for method, _ in calls] == ["GET", "POST", "PUT"]


@pytest.mark.asyncio
async def test_tiktok_init_error_is_upstream_error():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "cdn.test":
            return httpx.Response(200, content=b"mp4-bytes")
        return httpx.Response(
            200,
            json={"data": {}, "error": {"code": "spam_risk_too_many_posts", "message": "Too many posts"}},
        )

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    result = await TikTokPublisher(keys, http_client=client).publish(REQUEST)

    assert isinstance(result.error, UpstreamError)
    assert "Too many posts" in str(result.error)


@pytest.mark.asyncio
async def test_refresh_keeps_previous_refresh_token():
    def handler(request: httpx.Request) -> httpx.Response:
        assert b"grant_type=refresh_token" in request.content
        return httpx.Response(200, json={"access_token": "new-access", "expires_in": 3600})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    tokens = await refresh_access_token("youtube", "old-refresh", http_client=client)

    assert tokens.access_token == "new-access"
    assert tokens.refresh_token == "old-refresh"


def test_needs_refresh():
    now = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    connection = PlatformConnection(platform="youtube", access_token="a", refresh_token="r")

    connection.token_expires_at = now + timedelta(minutes=2)
    assert needs_refresh(connection, now)

    connection.token_expires_at = now + timedelta(hours=1)
    assert not needs_refresh(connection, now)

    connection.refresh_token = None
    connection.token_expires_at = now
    assert not needs_refresh(connection, now)
