"""Endpointy zarządzania profilem użytkownika."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from shortstudio.api.deps import get_current_user
from shortstudio.core.database import get_db
from shortstudio.models.base import utcnow
from shortstudio.models.user import User
from shortstudio.schemas.user import UserResponse, UserUpdateRequest

router = APIRouter()


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """Pobranie profilu zalogowanego użytkownika."""
    return current_user


@router.patch("/me", response_model=UserResponse)
async def update_me(
    body: UserUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    update_data = body.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in update_data.items():
        setattr(current_user, field, value)
    db.add(current_user)
    await db.flush()
    return current_user


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
async def delete_me(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Soft-delete konta użytkownika (RODO)."""
    current_user.deleted_at = utcnow()
    current_user.is_active = False
    db.add(current_user)
    await db.flush()
