"""Endpointy połączeń z platformami (OAuth) i historii publikacji."""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shortstudio.api.deps import get_current_user
from shortstudio.core.database import get_db
from shortstudio.core.exceptions import NotFound
from shortstudio.models.platform_connection import PlatformConnection
from shortstudio.models.publish_job import PublishJob
from shortstudio.models.series import Series
from shortstudio.models.user import User
from shortstudio.models.video import Video
from shortstudio.schemas.publishing import ConnectPlatformRequest, PlatformConnectionResponse
from shortstudio.schemas.video import PublishJobResponse
from shortstudio.services.publishing.oauth_exchange import exchange_oauth_code

router = APIRouter()


# ── Połączenia z platformami ──


@router.get("/connections", response_model=list[PlatformConnectionResponse])
async def list_connections(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Lista podłączonych platform."""
    result = await db.execute(
        select(PlatformConnection).where(
            PlatformConnection.user_id == current_user.id,
            PlatformConnection.is_active.is_(True),
        )
    )
    return list(result.scalars().all())


@router.post("/connections", response_model=PlatformConnectionResponse, status_code=status.HTTP_201_CREATED)
async def connect_platform(
    body: ConnectPlatformRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Podłączenie platformy (wymiana auth_code na tokeny)."""
    tokens = await exchange_oauth_code(body.platform, body.auth_code, body.redirect_uri)

    existing = await db.execute(
        select(PlatformConnection).where(
            PlatformConnection.user_id == current_user.id,
            PlatformConnection.platform == body.platform,
        )
    )
    conn = existing.scalars().first()

    if conn is None:
        conn = PlatformConnection(user_id=current_user.id, platform=body.platform)

    conn.access_token = tokens.access_token
    conn.refresh_token = tokens.refresh_token
    conn.token_expires_at = tokens.expires_at
    conn.platform_user_id = tokens.user_id
    conn.scopes = tokens.scopes
    conn.is_active = True

    db.add(conn)
    await db.flush()
    await db.refresh(conn)
    return conn


@router.delete("/connections/{connection_id}", status_code=status.HTTP_204_NO_CONTENT)
async def disconnect_platform(
    connection_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(PlatformConnection).where(
            PlatformConnection.id == connection_id,
            PlatformConnection.user_id == current_user.id,
        )
    )
    conn = result.scalar_one_or_none()
    if not conn:
        raise NotFound("Połączenie nie znalezione")

    conn.is_active = False
    db.add(conn)
    await db.flush()


# ── Historia publikacji ──


@router.get("/jobs", response_model=list[PublishJobResponse])
async def list_publish_jobs(
    video_id: uuid.UUID | None = None,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Stan publikacji per platforma."""
    query = (
        select(PublishJob)
        .join(Video, PublishJob.video_id == Video.id)
        .join(Series, Video.series_id == Series.id)
        .where(Series.user_id == current_user.id)
    )
    if video_id:
        query = query.where(PublishJob.video_id == video_id)

    result = await db.execute(query.order_by(PublishJob.created_at.desc()))
    return list(result.scalars().all())
