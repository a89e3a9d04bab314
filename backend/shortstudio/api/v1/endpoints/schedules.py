"""Endpointy harmonogramów publikacji."""

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from shortstudio.api.deps import AssemblerFactory, get_assembler_factory, get_current_user
from shortstudio.core.database import get_db
from shortstudio.core.exceptions import PreconditionFailed
from shortstudio.models.user import User
from shortstudio.schemas.schedule import ScheduleCreateRequest, ScheduleResponse
from shortstudio.services.pipeline.schedules import ScheduleService

router = APIRouter()


@router.post("", response_model=ScheduleResponse, status_code=status.HTTP_201_CREATED)
async def create_schedule(
    body: ScheduleCreateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await ScheduleService(db).create(
        current_user.id, body.video_id, body.scheduled_time, body.platforms
    )


@router.get("", response_model=list[ScheduleResponse])
async def list_schedules(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await ScheduleService(db).list_for_user(current_user.id)


@router.delete("/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_schedule(
    schedule_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await ScheduleService(db).cancel(current_user.id, schedule_id)


@router.post("/{schedule_id}/publish-now", response_model=ScheduleResponse)
async def publish_now(
    schedule_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    assembler_factory: AssemblerFactory = Depends(get_assembler_factory),
):
    """Natychmiastowa publikacja harmonogramu, bez czekania na beat."""
    service = ScheduleService(db)
    schedule = await service.get(current_user.id, schedule_id)
    done = await service.run(schedule, assembler_factory(db, current_user.id))
    if done is None:
        raise PreconditionFailed("Wideo nie jest jeszcze gotowe do publikacji")
    return done
