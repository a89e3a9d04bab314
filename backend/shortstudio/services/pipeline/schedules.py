"""
Harmonogramy publikacji.
Beat co minutę wybiera zaległe harmonogramy i publikuje je przez orkiestrator;
użytkownik może też opublikować harmonogram od razu.
"""

import uuid
from datetime import datetime, timezone

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from shortstudio.core.exceptions import NotFound, PreconditionFailed, StudioError, ValidationError
from shortstudio.models.schedule import Schedule, ScheduleStatus
from shortstudio.models.series import PUBLISH_PLATFORMS, Series
from shortstudio.models.video import Video, VideoStatus
from shortstudio.services.pipeline.assembly import VideoAssembler

logger = structlog.get_logger()

# Wideo w tych stanach może jeszcze zostać gotowe, harmonogram czeka
_WAITING = (VideoStatus.PENDING, VideoStatus.PROCESSING)


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def validate_platforms(platforms: list[str]) -> list[str]:
    unique = list(dict.fromkeys(platforms))
    if not unique:
        raise ValidationError("Wybierz co najmniej jedną platformę")
    unknown = [p for p in unique if p not in PUBLISH_PLATFORMS]
    if unknown:
        raise ValidationError(f"Nieobsługiwane platformy: {', '.join(unknown)}")
    return unique


class ScheduleService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        user_id: uuid.UUID,
        video_id: uuid.UUID,
        scheduled_time: datetime,
        platforms: list[str],
    ) -> Schedule:
        result = await self.session.execute(
            select(Video)
            .join(Series, Video.series_id == Series.id)
            .where(Video.id == video_id, Series.user_id == user_id)
        )
        video = result.scalar_one_or_none()
        if video is None:
            raise NotFound("Wideo nie znalezione")

        schedule = Schedule(
            video_id=video.id,
            series_id=video.series_id,
            scheduled_time=_utc(scheduled_time),
            platforms=validate_platforms(platforms),
            status=ScheduleStatus.SCHEDULED,
            results={},
        )
        self.session.add(schedule)
        await self.session.flush()

        logger.info("Harmonogram utworzony", schedule_id=str(schedule.id), video_id=str(video.id))
        return schedule

    async def list_for_user(self, user_id: uuid.UUID) -> list[Schedule]:
        result = await self.session.execute(
            select(Schedule)
            .join(Series, Schedule.series_id == Series.id)
            .where(Series.user_id == user_id)
            .order_by(Schedule.scheduled_time.asc())
        )
        return list(result.scalars().all())

    async def get(self, user_id: uuid.UUID, schedule_id: uuid.UUID) -> Schedule:
        result = await self.session.execute(
            select(Schedule)
            .join(Series, Schedule.series_id == Series.id)
            .where(Schedule.id == schedule_id, Series.user_id == user_id)
        )
        schedule = result.scalar_one_or_none()
        if schedule is None:
            raise NotFound("Harmonogram nie znaleziony")
        return schedule

    async def cancel(self, user_id: uuid.UUID, schedule_id: uuid.UUID) -> None:
        schedule = await self.get(user_id, schedule_id)
        if schedule.status != ScheduleStatus.SCHEDULED:
            raise PreconditionFailed("Można anulować tylko oczekujący harmonogram")
        await self.session.delete(schedule)
        await self.session.flush()

    async def due(self, now: datetime | None = None, limit: int = 100) -> list[Schedule]:
        now = _utc(now or datetime.now(timezone.utc))
        result = await self.session.execute(
            select(Schedule)
            .where(
                Schedule.status == ScheduleStatus.SCHEDULED,
                Schedule.scheduled_time <= now,
            )
            .order_by(Schedule.scheduled_time.asc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def run(self, schedule: Schedule, assembler: VideoAssembler) -> Schedule | None:
        """
        Publikuje harmonogram. Zwraca None, gdy wideo jeszcze się renderuje
        (harmonogram zostaje w kolejce do następnego przebiegu).
        Przed publikacją harmonogram jest przejmowany (scheduled → running),
        więc równoległe przebiegi nie publikują go dwa razy.
        """
        if schedule.status != ScheduleStatus.SCHEDULED:
            raise PreconditionFailed("Harmonogram został już wykonany")

        video = await self.session.get(Video, schedule.video_id)
        if video is None:
            raise NotFound("Wideo nie znalezione")
        if video.status in _WAITING:
            logger.info("Harmonogram czeka na render", schedule_id=str(schedule.id), video_status=video.status)
            return None

        if not await self.claim(schedule):
            raise PreconditionFailed("Harmonogram jest już wykonywany")

        try:
            outcomes = await assembler.publish(video.id, list(schedule.platforms))
        except StudioError as exc:
            schedule.results = {p: {"ok": False, "status": "failed", "error": str(exc)} for p in schedule.platforms}
            schedule.status = ScheduleStatus.FAILED
        else:
            schedule.results = {p: outcome.as_dict() for p, outcome in outcomes.items()}
            all_ok = all(outcome.ok for outcome in outcomes.values())
            schedule.status = ScheduleStatus.PUBLISHED if all_ok else ScheduleStatus.FAILED

        self.session.add(schedule)
        await self.session.commit()

        logger.info("Harmonogram wykonany", schedule_id=str(schedule.id), status=schedule.status)
        return schedule

    async def claim(self, schedule: Schedule) -> bool:
        result = await self.session.execute(
            update(Schedule)
            .where(Schedule.id == schedule.id, Schedule.status == ScheduleStatus.SCHEDULED)
            .values(status=ScheduleStatus.RUNNING)
        )
        await self.session.commit()
        return result.rowcount == 1

    async def mark_failed(self, schedule_id: uuid.UUID, platforms: list[str], error: str) -> None:
        """Zamyka harmonogram po nieoczekiwanym błędzie; sesja musi być już wycofana."""
        await self.session.execute(
            update(Schedule)
            .where(Schedule.id == schedule_id)
            .values(
                status=ScheduleStatus.FAILED,
                results={p: {"ok": False, "status": "failed", "error": error} for p in platforms},
            )
        )
        await self.session.commit()
        logger.warning("Harmonogram oznaczony jako nieudany", schedule_id=str(schedule_id), error=error)
