"""
Scheduler — publikacja wg harmonogramów i odświeżanie tokenów platform.
"""

import asyncio
from datetime import datetime, timedelta, timezone

import structlog

from shortstudio.tasks.celery_app import celery_app

logger = structlog.get_logger()


def _run_async(coro):
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@celery_app.task(name="shortstudio.tasks.scheduler.dispatch_due_schedules")
def dispatch_due_schedules():
    """Co minutę: publikuje harmonogramy, których czas minął."""
    logger.info("Scheduler: sprawdzanie harmonogramów")
    return _run_async(_dispatch())


async def _dispatch() -> dict:
    from shortstudio.core.database import session_scope
    from shortstudio.core.exceptions import PreconditionFailed
    from shortstudio.models.schedule import Schedule
    from shortstudio.services.pipeline.assembly import VideoAssembler, video_owner
    from shortstudio.services.pipeline.schedules import ScheduleService

    summary = {"published": 0, "failed": 0, "waiting": 0}
    async with session_scope() as db:
        service = ScheduleService(db)
        # Po rollbacku obiekty sesji wygasają, więc pętla idzie po samych identyfikatorach
        due = [(schedule.id, list(schedule.platforms)) for schedule in await service.due()]

        for schedule_id, platforms in due:
            try:
                schedule = await db.get(Schedule, schedule_id, populate_existing=True)
                if schedule is None:
                    continue
                user_id = await video_owner(db, schedule.video_id)
                done = await service.run(schedule, VideoAssembler.for_user(db, user_id))
            except PreconditionFailed as exc:
                # Przejęty przez inny przebieg albo już wykonany
                logger.info("Scheduler: harmonogram pominięty", schedule_id=str(schedule_id), reason=str(exc))
                continue
            except Exception as exc:
                logger.error("Scheduler: błąd harmonogramu", schedule_id=str(schedule_id), error=str(exc))
                await db.rollback()
                db.expunge_all()
                await service.mark_failed(schedule_id, platforms, str(exc))
                summary["failed"] += 1
                continue

            if done is None:
                summary["waiting"] += 1
            else:
                summary[done.status] += 1

    logger.info("Scheduler: przebieg zakończony", **summary)
    return summary


@celery_app.task(name="shortstudio.tasks.scheduler.refresh_expiring_tokens")
def refresh_expiring_tokens():
    """Odświeża tokeny platform, które wkrótce wygasną."""
    logger.info("Scheduler: odświeżanie tokenów")
    return _run_async(_refresh_tokens())


async def _refresh_tokens() -> int:
    from sqlalchemy import select

    from shortstudio.core.database import session_scope
    from shortstudio.core.exceptions import ProviderError
    from shortstudio.models.platform_connection import PlatformConnection
    from shortstudio.services.publishing.oauth_exchange import refresh_access_token

    threshold = datetime.now(timezone.utc) + timedelta(hours=2)
    refreshed = 0

    async with session_scope() as db:
        result = await db.execute(
            select(PlatformConnection).where(
                PlatformConnection.is_active.is_(True),
                PlatformConnection.token_expires_at.isnot(None),
                PlatformConnection.token_expires_at <= threshold,
                PlatformConnection.refresh_token.isnot(None),
            )
        )
        for conn in result.scalars().all():
            try:
                tokens = await refresh_access_token(conn.platform, conn.refresh_token)
            except ProviderError as exc:
                logger.error("Token refresh błąd", platform=conn.platform, error=str(exc))
                continue

            conn.access_token = tokens.access_token
            conn.refresh_token = tokens.refresh_token
            conn.token_expires_at = tokens.expires_at
            db.add(conn)
            refreshed += 1

    logger.info("Tokeny odświeżone", count=refreshed)
    return refreshed
