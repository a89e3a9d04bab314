"""
Główna aplikacja FastAPI — ShortStudio.
Structured logging, CORS, rate limiting, Sentry, health checks,
mapowanie błędów domenowych na odpowiedzi HTTP.
"""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from sqlalchemy import text

from shortstudio.api.v1.router import api_router
from shortstudio.core.config import get_settings
from shortstudio.core.database import close_db, init_db
from shortstudio.core.exceptions import (
    CredentialMissing,
    NotFound,
    ParseError,
    PreconditionFailed,
    ProviderError,
    StudioError,
    ValidationError,
)

settings = get_settings()
logger = structlog.get_logger()

# Kolejność ma znaczenie: pierwsze dopasowanie wygrywa
ERROR_STATUS: list[tuple[type[StudioError], int]] = [
    (CredentialMissing, status.HTTP_424_FAILED_DEPENDENCY),
    (ProviderError, status.HTTP_502_BAD_GATEWAY),
    (ValidationError, 422),
    (ParseError, 422),
    (PreconditionFailed, status.HTTP_409_CONFLICT),
    (NotFound, status.HTTP_404_NOT_FOUND),
]


def status_for(exc: StudioError) -> int:
    for error_type, code in ERROR_STATUS:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_400_BAD_REQUEST


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle — inicjalizacja i zamknięcie zasobów."""
    logger.info("Uruchamianie ShortStudio API", version=settings.APP_VERSION)

    if settings.ENVIRONMENT == "development":
        await init_db()

    if settings.SENTRY_DSN:
        import sentry_sdk
        from sentry_sdk.integrations.fastapi import FastApiIntegration

        sentry_sdk.init(dsn=settings.SENTRY_DSN, integrations=[FastApiIntegration()])

    yield

    await close_db()
    logger.info("ShortStudio API zamknięte")


limiter = Limiter(key_func=get_remote_address, default_limits=[f"{settings.RATE_LIMIT_PER_MINUTE}/minute"])

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="API do tworzenia, montażu i publikacji krótkich pionowych wideo",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix=settings.API_V1_PREFIX)


# ── Health Checks ──

@app.get("/health")
async def health_check():
    return {"status": "ok", "version": settings.APP_VERSION}


@app.get("/health/ready")
async def readiness_check():
    """Sprawdzenie gotowości bazy danych."""
    from shortstudio.core.database import engine

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as exc:
        logger.warning("Baza niedostępna", error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable"},
        )

    return {"status": "ready"}


# ── Obsługa błędów ──

@app.exception_handler(StudioError)
async def studio_error_handler(request: Request, exc: StudioError):
    code = status_for(exc)
    log = logger.warning if code < 500 else logger.error
    log("Błąd domenowy", error=exc.code, message=exc.message, path=request.url.path)

    content = {"detail": exc.message, "error": exc.code}
    if isinstance(exc, ProviderError) and exc.provider:
        content["provider"] = exc.provider
    if isinstance(exc, ParseError) and exc.line_number is not None:
        content["line_number"] = exc.line_number
    return JSONResponse(status_code=code, content=content)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error("Nieobsłużony wyjątek", error=str(exc), path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Wewnętrzny błąd serwera"},
    )
