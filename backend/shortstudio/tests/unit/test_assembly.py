"""Testy orkiestratora montażu na fałszywych adapterach."""

import uuid

import pytest
from botocore.exceptions import ClientError

from shortstudio.core.exceptions import PreconditionFailed, TransportError, UpstreamError, ValidationError
from shortstudio.models.publish_job import PublishStatus
from shortstudio.models.script import ScriptStatus
from shortstudio.models.video import VideoStatus
from shortstudio.services.providers.base import Result
from shortstudio.services.video.renderer import RenderState, RenderStatus
from shortstudio.tests.fakes import FakeAssemblerFactory, FakeStorage, seed_video


@pytest.fixture
def fakes():
    return FakeAssemblerFactory()


@pytest.mark.asyncio
async def test_assemble_submits_render(db, fakes):
    video = await seed_video(db)

    outcome = await fakes(db, uuid.uuid4()).assemble(video.id)

    assert outcome.ok
    assert outcome.render_job_id == "job-1"
    assert video.status == VideoStatus.PROCESSING
    assert video.render_job_id == "job-1"
    assert video.voiceover_key == f"voiceovers/{video.id}.mp3"
    assert fakes.storage.objects[video.voiceover_key] == b"ID3-fake-audio"
    assert fakes.voice.texts == ["Miasto budzi się do życia. Pierwsza kawa smakuje najlepiej."]

    edit = fakes.renderer.edits[0]
    assert edit["timeline"]["soundtrack"]["src"] == video.voiceover_url
    visuals = edit["timeline"]["tracks"][-1]["clips"]
    assert [clip["asset"]["type"] for clip in visuals] == ["image", "video"]
    assert [clip["start"] for clip in visuals] == [0, 5]


@pytest.mark.asyncio
async def test_render_failure_marks_video_failed(db, fakes):
    video = await seed_video(db)
    fakes.renderer.submit_result = Result.failure(UpstreamError("quota exceeded", provider="shotstack"))

    outcome = await fakes(db, uuid.uuid4()).assemble(video.id)

    assert not outcome.ok
    assert outcome.error == "quota exceeded"
    assert video.status == VideoStatus.FAILED
    assert video.error_message == "quota exceeded"


@pytest.mark.asyncio
async def test_voice_failure_stops_before_storage(db, fakes):
    video = await seed_video(db)
    fakes.voice.result = Result.failure(TransportError("elevenlabs: ReadTimeout", provider="elevenlabs"))

    outcome = await fakes(db, uuid.uuid4()).assemble(video.id)

    assert outcome.error == "elevenlabs: ReadTimeout"
    assert video.status == VideoStatus.FAILED
    assert fakes.storage.objects == {}
    assert fakes.renderer.edits == []


@pytest.mark.asyncio
async def test_storage_failure_marks_video_failed(db, fakes):
    class BrokenStorage(FakeStorage):
        def upload_bytes(self, data, key, content_type="application/octet-stream"):
            raise ClientError({"Error": {"Code": "AccessDenied", "Message": "Access Denied"}}, "PutObject")

    fakes.storage = BrokenStorage()
    video = await seed_video(db)

    outcome = await fakes(db, uuid.uuid4()).assemble(video.id)

    assert video.status == VideoStatus.FAILED
    assert "Access Denied" in outcome.error


@pytest.mark.asyncio
async def test_script_without_scenes_fails(db, fakes):
    video = await seed_video(db, content="TITLE: Pusty\n\nSama narracja bez znaczników.")

    outcome = await fakes(db, uuid.uuid4()).assemble(video.id)

    assert video.status == VideoStatus.FAILED
    assert outcome.error
    assert fakes.voice.texts == []


@pytest.mark.asyncio
async def test_assemble_requires_approved_script(db, fakes):
    video = await seed_video(db, script_status=ScriptStatus.DRAFT)

    with pytest.raises(PreconditionFailed):
        await fakes(db, uuid.uuid4()).assemble(video.id)
    assert video.status == VideoStatus.PENDING


@pytest.mark.asyncio
async def test_assemble_requires_media(db, fakes):
    video = await seed_video(db, media_assets=[])

    with pytest.raises(ValidationError):
        await fakes(db, uuid.uuid4()).assemble(video.id)


@pytest.mark.asyncio
async def test_assemble_only_from_pending(db, fakes):
    video = await seed_video(db, status=VideoStatus.READY)

    with pytest.raises(PreconditionFailed):
        await fakes(db, uuid.uuid4()).assemble(video.id)


# ── Status renderu ──

@pytest.mark.asyncio
async def test_render_status_applied_once(db, fakes):
    video = await seed_video(db, status=VideoStatus.PROCESSING, render_job_id="job-1")
    assembler = fakes(db, uuid.uuid4())
    done = RenderStatus(job_id="job-1", state=RenderState.READY, url="https://cdn.test/out.mp4")

    assert await assembler.apply_render_status(video.id, done) is True
    assert video.status == VideoStatus.READY
    assert video.video_url == "https://cdn.test/out.mp4"

    assert await assembler.apply_render_status(video.id, done) is False
    failed = RenderStatus(job_id="job-1", state=RenderState.FAILED, error="late failure")
    assert await assembler.apply_render_status(video.id, failed) is False
    assert video.status == VideoStatus.READY


@pytest.mark.asyncio
async def test_render_status_for_other_job_ignored(db, fakes):
    video = await seed_video(db, status=VideoStatus.PROCESSING, render_job_id="job-1")
    stale = RenderStatus(job_id="job-0", state=RenderState.FAILED)

    assert await fakes(db, uuid.uuid4()).apply_render_status(video.id, stale) is False
    assert video.status == VideoStatus.PROCESSING


@pytest.mark.asyncio
async def test_render_done_without_url_fails(db, fakes):
    video = await seed_video(db, status=VideoStatus.PROCESSING, render_job_id="job-1")

    await fakes(db, uuid.uuid4()).apply_render_status(video.id, RenderStatus(job_id="job-1", state=RenderState.READY))

    assert video.status == VideoStatus.FAILED
    assert video.error_message == "Render zakończony bez adresu pliku"


@pytest.mark.asyncio
async def test_refresh_poll_error_keeps_state(db, fakes):
    video = await seed_video(db, status=VideoStatus.PROCESSING, render_job_id="job-1")
    fakes.renderer.status_result = Result.failure(TransportError("shotstack: ConnectError", provider="shotstack"))

    refreshed = await fakes(db, uuid.uuid4()).refresh_render_status(video.id)

    assert refreshed.status == VideoStatus.PROCESSING
    assert fakes.renderer.polls == 1


@pytest.mark.asyncio
async def test_refresh_applies_provider_failure(db, fakes):
    video = await seed_video(db, status=VideoStatus.PROCESSING, render_job_id="job-1")
    fakes.renderer.status_result = Result.success(
        RenderStatus(job_id="job-1", state=RenderState.FAILED, error="Asset not found")
    )

    refreshed = await fakes(db, uuid.uuid4()).refresh_render_status(video.id)

    assert refreshed.status == VideoStatus.FAILED
    assert refreshed.error_message == "Asset not found"


@pytest.mark.asyncio
async def test_mark_failed_after_terminal_state_is_noop(db, fakes):
    video = await seed_video(db, status=VideoStatus.READY, video_url="https://cdn.test/out.mp4")

    assert await fakes(db, uuid.uuid4()).mark_failed(video.id, "timeout") is False
    assert video.status == VideoStatus.READY


# ── Publikacja ──

@pytest.mark.asyncio
async def test_partial_publish_then_retry(db, fakes):
    video = await seed_video(db, status=VideoStatus.READY, video_url="https://cdn.test/out.mp4")
    fakes.publishers["tiktok"].break_transport()
    assembler = fakes(db, uuid.uuid4())

    first = await assembler.publish(video.id)

    assert first["youtube"].ok
    assert first["youtube"].content_id == "youtube-1"
    assert first["tiktok"].status == PublishStatus.FAILED
    assert first["tiktok"].error == "connection reset"
    assert video.status == VideoStatus.READY

    fakes.publishers["tiktok"].fail_with = None
    second = await assembler.publish(video.id)

    assert second["tiktok"].ok
    assert second["youtube"].content_id == "youtube-1"
    assert len(fakes.publishers["youtube"].requests) == 1
    assert video.status == VideoStatus.PUBLISHED
    assert video.published_at is not None


@pytest.mark.asyncio
async def test_publish_request_carries_video_metadata(db, fakes):
    video = await seed_video(db, platform="youtube", status=VideoStatus.READY, video_url="https://cdn.test/out.mp4")

    await fakes(db, uuid.uuid4()).publish(video.id)

    request = fakes.publishers["youtube"].requests[0]
    assert request.video_url == "https://cdn.test/out.mp4"
    assert request.tags == ["miasto", "poranek"]
    assert fakes.publishers["tiktok"].requests == []
    assert video.status == VideoStatus.PUBLISHED


@pytest.mark.asyncio
async def test_publish_requires_ready_video(db, fakes):
    video = await seed_video(db)

    with pytest.raises(PreconditionFailed):
        await fakes(db, uuid.uuid4()).publish(video.id)


@pytest.mark.asyncio
async def test_publish_rejects_unknown_platform(db, fakes):
    video = await seed_video(db, status=VideoStatus.READY, video_url="https://cdn.test/out.mp4")

    with pytest.raises(ValidationError):
        await fakes(db, uuid.uuid4()).publish(video.id, ["instagram"])


@pytest.mark.asyncio
async def test_discard_removes_voiceover(db, fakes):
    video = await seed_video(db)
    assembler = fakes(db, uuid.uuid4())
    await assembler.assemble(video.id)
    key = video.voiceover_key

    await assembler.discard(video.id)

    assert fakes.storage.deleted == [key]
