"""
Endpointy wideo — montaż z zatwierdzonego skryptu, status renderu, publikacja.
Montaż idzie do kolejki; status renderu można też odświeżyć ręcznie.
"""

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from shortstudio.api.deps import (
    AssemblerFactory,
    AssemblyEnqueuer,
    PaginationParams,
    get_assembler_factory,
    get_assembly_enqueuer,
    get_current_user,
    load_script,
    load_video,
)
from shortstudio.core.database import get_db
from shortstudio.core.exceptions import PreconditionFailed
from shortstudio.models.series import Series
from shortstudio.models.user import User
from shortstudio.models.video import Video, VideoStatus
from shortstudio.schemas.video import (
    PublishResultResponse,
    VideoCreateRequest,
    VideoListResponse,
    VideoPublishRequest,
    VideoResponse,
)

router = APIRouter()


@router.get("", response_model=VideoListResponse)
async def list_videos(
    series_id: uuid.UUID | None = Query(default=None),
    status_filter: VideoStatus | None = Query(default=None, alias="status"),
    pagination: PaginationParams = Depends(),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Lista wideo użytkownika z filtrami i paginacją."""
    base_query = (
        select(Video)
        .join(Series, Video.series_id == Series.id)
        .where(Series.user_id == current_user.id)
    )
    if series_id:
        base_query = base_query.where(Video.series_id == series_id)
    if status_filter:
        base_query = base_query.where(Video.status == status_filter)

    count_result = await db.execute(select(func.count()).select_from(base_query.subquery()))
    total = count_result.scalar() or 0

    result = await db.execute(
        base_query.order_by(Video.created_at.desc())
        .offset(pagination.offset)
        .limit(pagination.page_size)
    )
    items = list(result.scalars().all())

    return VideoListResponse(
        items=items,
        total=total,
        page=pagination.page,
        page_size=pagination.page_size,
    )


@router.post("", response_model=VideoResponse, status_code=status.HTTP_202_ACCEPTED)
async def create_video(
    body: VideoCreateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    enqueue: AssemblyEnqueuer = Depends(get_assembly_enqueuer),
):
    """
    Tworzy rekord Video w statusie PENDING i wysyła montaż do kolejki.
    Wymaga zatwierdzonego skryptu i niepustej listy mediów.
    """
    script = await load_script(db, current_user, body.script_id)
    if not script.is_approved:
        raise PreconditionFailed("Skrypt musi być zatwierdzony przed montażem")

    series = await db.get(Series, script.series_id)
    if series.is_archived:
        raise PreconditionFailed("Seria jest zarchiwizowana")

    video = Video(
        series_id=series.id,
        script_id=script.id,
        title=body.title or script.title,
        description=body.description,
        tags=body.tags,
        platform=series.platform,
        status=VideoStatus.PENDING,
        media_assets=body.media_assets,
    )
    db.add(video)
    # Commit przed wysłaniem zadania: worker musi zobaczyć rekord
    await db.commit()
    await db.refresh(video)

    enqueue(video.id)
    return video


@router.get("/{video_id}", response_model=VideoResponse)
async def get_video(
    video_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await load_video(db, current_user, video_id)


@router.post("/{video_id}/refresh", response_model=VideoResponse)
async def refresh_render_status(
    video_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    assembler_factory: AssemblerFactory = Depends(get_assembler_factory),
):
    """Jednorazowe odpytanie serwisu renderującego o status."""
    video = await load_video(db, current_user, video_id)
    video = await assembler_factory(db, current_user.id).refresh_render_status(video.id)
    await db.refresh(video)
    return video


@router.post("/{video_id}/publish", response_model=dict[str, PublishResultResponse])
async def publish_video(
    video_id: uuid.UUID,
    body: VideoPublishRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    assembler_factory: AssemblerFactory = Depends(get_assembler_factory),
):
    """Publikacja gotowego wideo — wynik osobno dla każdej platformy."""
    video = await load_video(db, current_user, video_id)
    outcomes = await assembler_factory(db, current_user.id).publish(video.id, body.platforms or None)
    return {platform: outcome.as_dict() for platform, outcome in outcomes.items()}


@router.delete("/{video_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_video(
    video_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    assembler_factory: AssemblerFactory = Depends(get_assembler_factory),
):
    """Usuwa wideo razem z plikiem lektora w storage."""
    video = await load_video(db, current_user, video_id)
    await assembler_factory(db, current_user.id).discard(video.id)
