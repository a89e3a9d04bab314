"""
Fixtures testowe — SQLite (aiosqlite) + testowy klient HTTP.
Zmienne środowiskowe muszą być ustawione przed importem aplikacji:
ustawienia i silnik bazy powstają przy imporcie modułów.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("SIMULATED_PUBLISH_DELAY_SECONDS", "0")
os.environ.setdefault("CREDENTIALS_ENCRYPTION_KEY", "")

from collections.abc import AsyncGenerator  # noqa: E402

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402

import shortstudio.models  # noqa: E402,F401
from shortstudio.api.deps import get_assembler_factory, get_assembly_enqueuer  # noqa: E402
from shortstudio.core.database import Base, get_db  # noqa: E402
from shortstudio.core.security import create_access_token, hash_password  # noqa: E402
from shortstudio.main import app  # noqa: E402
from shortstudio.models.user import User  # noqa: E402
from shortstudio.tests.fakes import FakeAssemblerFactory  # noqa: E402

TEST_DATABASE_URL = os.environ["DATABASE_URL"]

test_engine = create_async_engine(TEST_DATABASE_URL, echo=False)
test_session_factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(autouse=True)
async def setup_db():
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with test_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


app.dependency_overrides[get_db] = override_get_db


@pytest_asyncio.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with test_session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def enqueued():
    """Zadania montażu wysłane przez API (zamiast Celery)."""
    calls = []
    app.dependency_overrides[get_assembly_enqueuer] = lambda: calls.append
    yield calls
    app.dependency_overrides.pop(get_assembly_enqueuer, None)


@pytest_asyncio.fixture
async def assembler_factory():
    """Orkiestrator z fałszywymi adapterami podpięty pod API."""
    factory = FakeAssemblerFactory()
    app.dependency_overrides[get_assembler_factory] = lambda: factory
    yield factory
    app.dependency_overrides.pop(get_assembler_factory, None)


@pytest_asyncio.fixture
async def client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest_asyncio.fixture
async def test_user():
    async with test_session_factory() as session:
        user = User(
            email="test@example.com",
            hashed_password=hash_password("testpassword123"),
            full_name="Test User",
            is_active=True,
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user


@pytest_asyncio.fixture
async def auth_headers(test_user):
    token = create_access_token(str(test_user.id))
    return {"Authorization": f"Bearer {token}"}
