"""Endpointy analityki — liczniki panelu użytkownika."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from shortstudio.api.deps import get_current_user
from shortstudio.core.database import get_db
from shortstudio.models.publish_job import PublishJob, PublishStatus
from shortstudio.models.schedule import Schedule
from shortstudio.models.script import Script
from shortstudio.models.series import Series, SeriesStatus
from shortstudio.models.user import User
from shortstudio.models.video import Video

router = APIRouter()


class DashboardStats(BaseModel):
    total_series: int
    active_series: int
    total_scripts: int
    scripts_by_status: dict[str, int]
    total_videos: int
    videos_by_status: dict[str, int]
    schedules_by_status: dict[str, int]
    published_by_platform: dict[str, int]


async def _grouped(db: AsyncSession, query) -> dict[str, int]:
    result = await db.execute(query)
    return {str(key): count for key, count in result.all()}


@router.get("/dashboard", response_model=DashboardStats)
async def get_dashboard_stats(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Agregowane liczniki: serie, skrypty, wideo i harmonogramy wg statusu."""
    series_by_status = await _grouped(
        db,
        select(Series.status, func.count())
        .where(Series.user_id == current_user.id)
        .group_by(Series.status),
    )
    scripts_by_status = await _grouped(
        db,
        select(Script.status, func.count())
        .join(Series, Script.series_id == Series.id)
        .where(Series.user_id == current_user.id)
        .group_by(Script.status),
    )
    videos_by_status = await _grouped(
        db,
        select(Video.status, func.count())
        .join(Series, Video.series_id == Series.id)
        .where(Series.user_id == current_user.id)
        .group_by(Video.status),
    )
    schedules_by_status = await _grouped(
        db,
        select(Schedule.status, func.count())
        .join(Series, Schedule.series_id == Series.id)
        .where(Series.user_id == current_user.id)
        .group_by(Schedule.status),
    )
    published_by_platform = await _grouped(
        db,
        select(PublishJob.platform, func.count())
        .join(Video, PublishJob.video_id == Video.id)
        .join(Series, Video.series_id == Series.id)
        .where(Series.user_id == current_user.id, PublishJob.status == PublishStatus.PUBLISHED)
        .group_by(PublishJob.platform),
    )

    return DashboardStats(
        total_series=sum(series_by_status.values()),
        active_series=series_by_status.get(SeriesStatus.ACTIVE.value, 0),
        total_scripts=sum(scripts_by_status.values()),
        scripts_by_status=scripts_by_status,
        total_videos=sum(videos_by_status.values()),
        videos_by_status=videos_by_status,
        schedules_by_status=schedules_by_status,
        published_by_platform=published_by_platform,
    )
