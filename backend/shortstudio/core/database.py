"""
Warstwa bazy danych — silnik async SQLAlchemy + fabryka sesji.
Serwisy nie sięgają po globalnego klienta: sesję dostają z zewnątrz
(zależność FastAPI `get_db` albo `session_scope` w zadaniach Celery).
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from shortstudio.core.config import get_settings

settings = get_settings()


class Base(DeclarativeBase):
    pass


def build_engine(url: str | None = None) -> AsyncEngine:
    """Tworzy nowy silnik — osobny dla każdej pętli zdarzeń (Celery)."""
    url = url or settings.DATABASE_URL
    kwargs = {"pool_pre_ping": True}
    if not url.startswith("sqlite"):
        kwargs.update(pool_size=settings.DB_POOL_SIZE, max_overflow=settings.DB_MAX_OVERFLOW)
    return create_async_engine(url, **kwargs)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = build_engine()
async_session_factory = build_session_factory(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Zależność FastAPI — sesja z commitem na końcu żądania."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def session_scope(url: str | None = None) -> AsyncGenerator[AsyncSession, None]:
    """
    Sesja dla zadań w tle. Celery uruchamia każde zadanie w nowej pętli,
    więc silnik modułowy (związany z pętlą rodzica) nie nadaje się do użycia.
    """
    local_engine = build_engine(url)
    factory = build_session_factory(local_engine)
    try:
        async with factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
    finally:
        await local_engine.dispose()


async def init_db() -> None:
    import shortstudio.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    await engine.dispose()
