"""Testy harmonogramów publikacji."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient
from sqlalchemy import update

from shortstudio.core.exceptions import NotFound, PreconditionFailed, ValidationError
from shortstudio.models.schedule import Schedule, ScheduleStatus
from shortstudio.models.series import Series
from shortstudio.models.video import VideoStatus
from shortstudio.services.pipeline.schedules import ScheduleService
from shortstudio.tests.fakes import FakeAssemblerFactory, seed_video

READY = {"status": VideoStatus.READY, "video_url": "https://cdn.test/out.mp4"}


async def _owner(db, video) -> uuid.UUID:
    series = await db.get(Series, video.series_id)
    return series.user_id


@pytest.mark.asyncio
async def test_create_validates_platforms(db):
    video = await seed_video(db)
    service = ScheduleService(db)
    when = datetime.now(timezone.utc) + timedelta(hours=1)

    with pytest.raises(ValidationError):
        await service.create(await _owner(db, video), video.id, when, ["instagram"])
    with pytest.raises(ValidationError):
        await service.create(await _owner(db, video), video.id, when, [])


@pytest.mark.asyncio
async def test_create_checks_video_owner(db):
    video = await seed_video(db)

    with pytest.raises(NotFound):
        await ScheduleService(db).create(uuid.uuid4(), video.id, datetime.now(timezone.utc), ["youtube"])


@pytest.mark.asyncio
async def test_due_returns_only_past_schedules(db):
    video = await seed_video(db, **READY)
    owner = await _owner(db, video)
    service = ScheduleService(db)
    now = datetime.now(timezone.utc)

    past = await service.create(owner, video.id, now - timedelta(minutes=5), ["youtube"])
    await service.create(owner, video.id, now + timedelta(hours=1), ["tiktok"])

    assert [s.id for s in await service.due(now)] == [past.id]


@pytest.mark.asyncio
async def test_run_waits_for_render(db):
    video = await seed_video(db, status=VideoStatus.PROCESSING)
    service = ScheduleService(db)
    schedule = await service.create(await _owner(db, video), video.id, datetime.now(timezone.utc), ["youtube"])

    assert await service.run(schedule, FakeAssemblerFactory()(db, uuid.uuid4())) is None
    assert schedule.status == ScheduleStatus.SCHEDULED


@pytest.mark.asyncio
async def test_run_records_results_per_platform(db):
    fakes = FakeAssemblerFactory()
    fakes.publishers["tiktok"].break_transport()
    video = await seed_video(db, **READY)
    service = ScheduleService(db)
    schedule = await service.create(
        await _owner(db, video), video.id, datetime.now(timezone.utc), ["youtube", "tiktok"]
    )

    done = await service.run(schedule, fakes(db, uuid.uuid4()))

    assert done.status == ScheduleStatus.FAILED
    assert done.results["youtube"]["ok"] is True
    assert done.results["tiktok"] == {
        "ok": False,
        "status": "failed",
        "content_id": None,
        "url": None,
        "error": "connection reset",
    }

    with pytest.raises(PreconditionFailed):
        await service.cancel(await _owner(db, video), schedule.id)


@pytest.mark.asyncio
async def test_run_skips_schedule_claimed_by_another_run(db):
    fakes = FakeAssemblerFactory()
    video = await seed_video(db, **READY)
    service = ScheduleService(db)
    schedule = await service.create(await _owner(db, video), video.id, datetime.now(timezone.utc), ["youtube"])
    await db.commit()

    # Inny przebieg schedulera przejął harmonogram; lokalny obiekt tego nie widzi
    await db.execute(
        update(Schedule)
        .where(Schedule.id == schedule.id)
        .values(status=ScheduleStatus.RUNNING)
        .execution_options(synchronize_session=False)
    )
    await db.commit()

    with pytest.raises(PreconditionFailed):
        await service.run(schedule, fakes(db, uuid.uuid4()))
    assert fakes.publishers["youtube"].requests == []


@pytest.mark.asyncio
async def test_run_on_failed_video_marks_schedule_failed(db):
    video = await seed_video(db, status=VideoStatus.FAILED)
    service = ScheduleService(db)
    schedule = await service.create(await _owner(db, video), video.id, datetime.now(timezone.utc), ["youtube"])

    done = await service.run(schedule, FakeAssemblerFactory()(db, uuid.uuid4()))

    assert done.status == ScheduleStatus.FAILED
    assert done.results["youtube"]["ok"] is False


@pytest.mark.asyncio
async def test_schedule_api_flow(client: AsyncClient, auth_headers, test_user, db, assembler_factory):
    video = await seed_video(db, user=test_user, **READY)
    when = (datetime.now(timezone.utc) + timedelta(days=1)).isoformat()

    created = await client.post(
        "/api/v1/schedules",
        headers=auth_headers,
        json={"video_id": str(video.id), "scheduled_time": when, "platforms": ["youtube"]},
    )
    assert created.status_code == 201
    schedule_id = created.json()["id"]

    listed = await client.get("/api/v1/schedules", headers=auth_headers)
    assert [s["id"] for s in listed.json()] == [schedule_id]

    published = await client.post(f"/api/v1/schedules/{schedule_id}/publish-now", headers=auth_headers)
    assert published.status_code == 200
    assert published.json()["status"] == "published"
    assert published.json()["results"]["youtube"]["content_id"] == "youtube-1"


@pytest.mark.asyncio
async def test_cancel_schedule(client: AsyncClient, auth_headers, test_user, db):
    video = await seed_video(db, user=test_user)
    when = (datetime.now(timezone.utc) + timedelta(days=1)).isoformat()
    created = await client.post(
        "/api/v1/schedules",
        headers=auth_headers,
        json={"video_id": str(video.id), "scheduled_time": when, "platforms": ["tiktok"]},
    )

    response = await client.delete(f"/api/v1/schedules/{created.json()['id']}", headers=auth_headers)
    assert response.status_code == 204

    listed = await client.get("/api/v1/schedules", headers=auth_headers)
    assert listed.json() == []
