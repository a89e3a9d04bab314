"""
Zależności API — autentykacja, paginacja, własność zasobów i okablowanie serwisów.
Adaptery i orkiestrator są dostarczane przez zależności, więc testy podmieniają
je przez `app.dependency_overrides`.
"""

import uuid
from collections.abc import Callable

from fastapi import Depends, HTTPException, Query, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shortstudio.core.database import get_db
from shortstudio.core.exceptions import NotFound
from shortstudio.core.security import decode_token_of_type
from shortstudio.models.script import Script
from shortstudio.models.series import Series
from shortstudio.models.user import User
from shortstudio.models.video import Video
from shortstudio.services.credentials.store import CredentialStore
from shortstudio.services.llm.script_generator import ScriptGenerator
from shortstudio.services.media.stock_provider import MediaSearch
from shortstudio.services.pipeline.assembly import VideoAssembler
from shortstudio.services.tts.tts_service import VoiceSynthesizer

security_scheme = HTTPBearer()

AssemblerFactory = Callable[[AsyncSession, uuid.UUID], VideoAssembler]
AssemblyEnqueuer = Callable[[uuid.UUID], None]


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Walidacja tokena JWT i pobranie aktualnego użytkownika."""
    try:
        payload = decode_token_of_type(credentials.credentials, "access")
        user_id = uuid.UUID(payload["sub"])
    except (JWTError, KeyError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token wygasł lub jest nieprawidłowy",
        )

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Użytkownik nie istnieje lub jest dezaktywowany",
        )

    if user.deleted_at is not None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Konto zostało usunięte",
        )

    return user


class PaginationParams:
    def __init__(
        self,
        page: int = Query(default=1, ge=1),
        page_size: int = Query(default=20, ge=1, le=100),
    ):
        self.page = page
        self.page_size = page_size
        self.offset = (page - 1) * page_size


# ── Własność zasobów ──

async def load_series(db: AsyncSession, user: User, series_id: uuid.UUID) -> Series:
    result = await db.execute(
        select(Series).where(Series.id == series_id, Series.user_id == user.id)
    )
    series = result.scalar_one_or_none()
    if series is None:
        raise NotFound("Seria nie znaleziona")
    return series


async def load_script(db: AsyncSession, user: User, script_id: uuid.UUID) -> Script:
    result = await db.execute(
        select(Script)
        .join(Series, Script.series_id == Series.id)
        .where(Script.id == script_id, Series.user_id == user.id)
    )
    script = result.scalar_one_or_none()
    if script is None:
        raise NotFound("Skrypt nie znaleziony")
    return script


async def load_video(db: AsyncSession, user: User, video_id: uuid.UUID) -> Video:
    result = await db.execute(
        select(Video)
        .join(Series, Video.series_id == Series.id)
        .where(Video.id == video_id, Series.user_id == user.id)
    )
    video = result.scalar_one_or_none()
    if video is None:
        raise NotFound("Wideo nie znalezione")
    return video


# ── Serwisy ──

def get_credential_store(db: AsyncSession = Depends(get_db)) -> CredentialStore:
    return CredentialStore(db)


def get_script_generator() -> ScriptGenerator:
    return ScriptGenerator()


def get_voice_synthesizer() -> VoiceSynthesizer:
    return VoiceSynthesizer()


def get_media_search() -> MediaSearch:
    return MediaSearch()


def get_assembler_factory() -> AssemblerFactory:
    return VideoAssembler.for_user


def get_assembly_enqueuer() -> AssemblyEnqueuer:
    from shortstudio.tasks.video_pipeline import assemble_video_task

    def enqueue(video_id: uuid.UUID) -> None:
        assemble_video_task.delay(str(video_id))

    return enqueue
