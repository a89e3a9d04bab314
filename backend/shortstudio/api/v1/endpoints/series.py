"""
Endpointy CRUD serii wideo.
Platforma i temat są ustalane przy tworzeniu; archiwizacja jest nieodwracalna.
"""

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from shortstudio.api.deps import PaginationParams, get_current_user, load_series
from shortstudio.core.database import get_db
from shortstudio.core.exceptions import PreconditionFailed
from shortstudio.models.series import Series, SeriesStatus
from shortstudio.models.user import User
from shortstudio.schemas.series import (
    SeriesCreateRequest,
    SeriesListResponse,
    SeriesResponse,
    SeriesUpdateRequest,
)

router = APIRouter()


@router.get("", response_model=SeriesListResponse)
async def list_series(
    status_filter: SeriesStatus | None = Query(default=None, alias="status"),
    pagination: PaginationParams = Depends(),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Lista serii użytkownika; zarchiwizowane tylko na wyraźne żądanie."""
    base_query = select(Series).where(Series.user_id == current_user.id)
    if status_filter is None:
        base_query = base_query.where(Series.status != SeriesStatus.ARCHIVED)
    else:
        base_query = base_query.where(Series.status == status_filter)

    count_result = await db.execute(select(func.count()).select_from(base_query.subquery()))
    total = count_result.scalar() or 0

    result = await db.execute(
        base_query.order_by(Series.created_at.desc())
        .offset(pagination.offset)
        .limit(pagination.page_size)
    )
    items = list(result.scalars().all())

    return SeriesListResponse(
        items=items,
        total=total,
        page=pagination.page,
        page_size=pagination.page_size,
    )


@router.post("", response_model=SeriesResponse, status_code=status.HTTP_201_CREATED)
async def create_series(
    body: SeriesCreateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    series = Series(
        user_id=current_user.id,
        title=body.title,
        description=body.description,
        platform=body.platform,
        topic=body.topic,
        content_prompt=body.content_prompt,
        status=SeriesStatus.ACTIVE,
    )
    db.add(series)
    await db.flush()
    await db.refresh(series)
    return series


@router.get("/{series_id}", response_model=SeriesResponse)
async def get_series(
    series_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await load_series(db, current_user, series_id)


@router.patch("/{series_id}", response_model=SeriesResponse)
async def update_series(
    series_id: uuid.UUID,
    body: SeriesUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    series = await load_series(db, current_user, series_id)
    if series.is_archived:
        raise PreconditionFailed("Seria jest zarchiwizowana")

    update_data = body.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        if value is not None or field == "description":
            setattr(series, field, value)

    db.add(series)
    await db.flush()
    await db.refresh(series)
    return series


@router.delete("/{series_id}", status_code=status.HTTP_204_NO_CONTENT)
async def archive_series(
    series_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Archiwizacja serii — znika z domyślnej listy, dane zostają."""
    series = await load_series(db, current_user, series_id)
    series.status = SeriesStatus.ARCHIVED
    db.add(series)
    await db.flush()
