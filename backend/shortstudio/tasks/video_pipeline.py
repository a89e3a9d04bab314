"""
Pipeline montażu wideo — zadania Celery.
assemble_video_task zleca render, poll_render_task odpytuje jego status
co RENDER_POLL_INTERVAL_SECONDS, aż wideo osiągnie stan końcowy.
"""

import asyncio
import uuid

import structlog

from shortstudio.core.config import get_settings
from shortstudio.tasks.celery_app import celery_app

settings = get_settings()
logger = structlog.get_logger()


def _run_async(coro):
    """Helper do uruchamiania async w Celery (sync worker)."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@celery_app.task(name="shortstudio.tasks.video_pipeline.assemble_video_task")
def assemble_video_task(video_id: str):
    """
    Montaż: lektor → storage → timeline → zlecenie renderu.
    Bez ponowień — porażka dostawcy kończy się stanem `failed` z jego komunikatem.
    """
    logger.info("Pipeline start", video_id=video_id)
    outcome = _run_async(_assemble(video_id))
    if outcome["ok"]:
        poll_render_task.apply_async((video_id, 1), countdown=settings.RENDER_POLL_INTERVAL_SECONDS)
    return outcome


async def _assemble(video_id: str) -> dict:
    from shortstudio.core.database import session_scope
    from shortstudio.core.exceptions import StudioError
    from shortstudio.services.pipeline.assembly import VideoAssembler, video_owner

    async with session_scope() as db:
        try:
            user_id = await video_owner(db, uuid.UUID(video_id))
            outcome = await VideoAssembler.for_user(db, user_id).assemble(uuid.UUID(video_id))
        except StudioError as exc:
            logger.warning("Montaż odrzucony", video_id=video_id, error=str(exc))
            return {"ok": False, "status": None, "error": str(exc)}

    return {
        "ok": outcome.ok,
        "status": outcome.status,
        "render_job_id": outcome.render_job_id,
        "error": outcome.error,
    }


@celery_app.task(name="shortstudio.tasks.video_pipeline.poll_render_task")
def poll_render_task(video_id: str, attempt: int = 1):
    """Jedno odpytanie renderu; dopóki trwa — planuje kolejne."""
    status = _run_async(_poll(video_id, attempt))
    if status == "processing":
        poll_render_task.apply_async((video_id, attempt + 1), countdown=settings.RENDER_POLL_INTERVAL_SECONDS)
    return status


async def _poll(video_id: str, attempt: int) -> str | None:
    from shortstudio.core.database import session_scope
    from shortstudio.core.exceptions import StudioError
    from shortstudio.models.video import VideoStatus
    from shortstudio.services.pipeline.assembly import VideoAssembler, video_owner

    async with session_scope() as db:
        try:
            user_id = await video_owner(db, uuid.UUID(video_id))
            assembler = VideoAssembler.for_user(db, user_id)
            video = await assembler.refresh_render_status(uuid.UUID(video_id))
        except StudioError as exc:
            logger.warning("Polling renderu przerwany", video_id=video_id, error=str(exc))
            return None

        if video.status == VideoStatus.PROCESSING and attempt >= settings.RENDER_POLL_MAX_ATTEMPTS:
            logger.warning("Render przekroczył limit czasu", video_id=video_id, attempts=attempt)
            await assembler.mark_failed(video.id, "Przekroczono czas oczekiwania na render")

        return video.status
