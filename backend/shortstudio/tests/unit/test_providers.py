"""Testy adapterów dostawców na atrapie transportu httpx."""

import json

import httpx
import pytest

from shortstudio.core.exceptions import CredentialMissing, TransportError, UpstreamError
from shortstudio.services.llm.script_generator import ScriptGenerator
from shortstudio.services.media.stock_provider import MediaSearch, MediaType
from shortstudio.services.providers.base import Result
from shortstudio.services.tts.tts_service import VoiceSynthesizer
from shortstudio.services.video.renderer import RenderService, RenderState


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


async def keys(provider: str) -> Result[str]:
    return Result.success(f"{provider}-key")


async def no_keys(provider: str) -> Result[str]:
    return Result.failure(CredentialMissing(provider))


# ── Shotstack ──

@pytest.mark.asyncio
async def test_render_submit_returns_job_id():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["key"] = request.headers["x-api-key"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(201, json={"success": True, "response": {"id": "render-42"}})

    result = await RenderService(http_client=mock_client(handler)).submit(keys, {"timeline": {"tracks": []}})

    assert result.ok
    assert result.value.job_id == "render-42"
    assert seen["key"] == "shotstack-key"
    assert seen["body"] == {"timeline": {"tracks": []}}


@pytest.mark.asyncio
async def test_render_upstream_error_keeps_provider_message():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"message": "quota exceeded"})

    result = await RenderService(http_client=mock_client(handler)).submit(keys, {})

    assert isinstance(result.error, UpstreamError)
    assert str(result.error) == "quota exceeded"
    assert result.error.provider == "shotstack"
    assert result.error.status_code == 500


@pytest.mark.asyncio
async def test_render_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    result = await RenderService(http_client=mock_client(handler)).submit(keys, {})

    assert isinstance(result.error, TransportError)
    with pytest.raises(TransportError):
        result.unwrap()


@pytest.mark.asyncio
async def test_render_status_done():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith("/render/render-42")
        return httpx.Response(
            200,
            json={"response": {"id": "render-42", "status": "done", "url": "https://cdn.test/out.mp4"}},
        )

    result = await RenderService(http_client=mock_client(handler)).status(keys, "render-42")

    assert result.value.state == RenderState.READY
    assert result.value.url == "https://cdn.test/out.mp4"


@pytest.mark.asyncio
async def test_render_status_in_progress():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"response": {"id": "render-42", "status": "rendering"}})

    result = await RenderService(http_client=mock_client(handler)).status(keys, "render-42")
    assert result.value.state == RenderState.PROCESSING


@pytest.mark.asyncio
async def test_missing_key_sends_nothing():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("żądanie nie powinno zostać wysłane")

    result = await RenderService(http_client=mock_client(handler)).submit(no_keys, {})

    assert isinstance(result.error, CredentialMissing)
    assert result.error.provider == "shotstack"


# ── ElevenLabs ──

@pytest.mark.asyncio
async def test_tts_returns_audio_bytes():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["xi-api-key"] == "elevenlabs-key"
        assert request.url.path.endswith("/text-to-speech/voice-1")
        assert json.loads(request.content)["text"] == "Dzień dobry"
        return httpx.Response(200, content=b"ID3audio")

    synth = VoiceSynthesizer(http_client=mock_client(handler))
    result = await synth.synthesize(keys, "Dzień dobry", voice_id="voice-1")

    assert result.value == b"ID3audio"


@pytest.mark.asyncio
async def test_tts_nested_error_message():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"detail": {"status": "invalid_api_key", "message": "Invalid API key"}})

    result = await VoiceSynthesizer(http_client=mock_client(handler)).synthesize(keys, "x")

    assert str(result.error) == "Invalid API key"


# ── Pexels ──

@pytest.mark.asyncio
async def test_media_search_photos():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Authorization"] == "pexels-key"
        assert request.url.params["orientation"] == "portrait"
        return httpx.Response(
            200,
            json={
                "photos": [
                    {
                        "id": 1,
                        "width": 1080,
                        "height": 1920,
                        "photographer": "Anna",
                        "src": {"portrait": "https://images.test/1-portrait.jpg", "medium": "https://images.test/1-m.jpg"},
                    },
                    {"id": 2, "src": {}},
                ]
            },
        )

    result = await MediaSearch(http_client=mock_client(handler)).search(keys, "city")

    assert [c.url for c in result.value] == ["https://images.test/1-portrait.jpg"]
    assert result.value[0].author == "Anna"


@pytest.mark.asyncio
async def test_media_search_videos_prefers_portrait_file():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/videos/search"
        return httpx.Response(
            200,
            json={
                "videos": [
                    {
                        "id": 7,
                        "image": "https://images.test/7.jpg",
                        "user": {"name": "Jan"},
                        "video_files": [
                            {"link": "https://videos.test/wide.mp4", "width": 3840, "height": 2160, "file_type": "video/mp4"},
                            {"link": "https://videos.test/tall.mp4", "width": 1080, "height": 1920, "file_type": "video/mp4"},
                        ],
                    }
                ]
            },
        )

    result = await MediaSearch(http_client=mock_client(handler)).search(keys, "city", media_type=MediaType.VIDEO)

    assert result.value[0].url == "https://videos.test/tall.mp4"


# ── OpenAI ──

def _completion(content: str) -> dict:
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "created": 0,
        "model": "gpt-4",
        "choices": [
            {"index": 0, "message": {"role": "assistant", "content": content}, "finish_reason": "stop"}
        ],
    }


@pytest.mark.asyncio
async def test_script_generator_extracts_title():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Authorization"] == "Bearer openai-key"
        body = json.loads(request.content)
        assert "oszczędzanie" in body["messages"][1]["content"]
        return httpx.Response(200, json=_completion("TITLE: Oszczędzaj mądrze\n\n[00:00] [portfel]\nZacznij od budżetu."))

    generator = ScriptGenerator(http_client=mock_client(handler))
    result = await generator.generate(keys, topic="oszczędzanie", platform="youtube")

    assert result.value.title == "Oszczędzaj mądrze"
    assert result.value.model_id == "gpt-4"


@pytest.mark.asyncio
async def test_script_generator_upstream_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, json={"error": {"message": "Rate limit reached", "type": "requests"}})

    result = await ScriptGenerator(http_client=mock_client(handler)).generate(keys, topic="x", platform="tiktok")

    assert isinstance(result.error, UpstreamError)
    assert str(result.error) == "Rate limit reached"
    assert result.error.status_code == 429
