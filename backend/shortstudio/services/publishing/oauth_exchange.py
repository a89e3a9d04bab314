"""
Wymiana kodów OAuth na tokeny dla platform (YouTube, TikTok) i odświeżanie
wygasających tokenów połączonych kont.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import httpx
import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shortstudio.core.config import get_settings
from shortstudio.core.exceptions import CredentialMissing, ProviderError, UpstreamError, ValidationError
from shortstudio.models.platform_connection import PlatformConnection
from shortstudio.services.providers.base import CredentialLookup, ProviderAdapter, Result, json_body

settings = get_settings()
logger = structlog.get_logger()

TOKEN_URLS = {
    "youtube": "https://oauth2.googleapis.com/token",
    "tiktok": "https://open.tiktokapis.com/v2/oauth/token/",
}
DEFAULT_EXPIRES_IN = {"youtube": 3600, "tiktok": 86400}

# Token odświeżany z wyprzedzeniem, żeby nie wygasł w trakcie uploadu
REFRESH_MARGIN = timedelta(minutes=5)


@dataclass(frozen=True)
class OAuthTokens:
    access_token: str
    refresh_token: str | None
    expires_at: datetime
    user_id: str | None = None
    scopes: str = ""


def _client_credentials(platform: str) -> dict[str, str]:
    if platform == "youtube":
        return {"client_id": settings.YOUTUBE_CLIENT_ID, "client_secret": settings.YOUTUBE_CLIENT_SECRET}
    return {"client_key": settings.TIKTOK_CLIENT_KEY, "client_secret": settings.TIKTOK_CLIENT_SECRET}


class _TokenEndpoint(ProviderAdapter):
    def __init__(self, platform: str, http_client: httpx.AsyncClient | None = None):
        if platform not in TOKEN_URLS:
            raise ValidationError(f"Nieznana platforma: {platform}")
        super().__init__(http_client=http_client, base_url=TOKEN_URLS[platform])
        self.provider = platform

    async def grant(self, form: dict[str, str]) -> OAuthTokens:
        sent = await self.request(
            "POST",
            "",
            data={**_client_credentials(self.provider), **form},
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
        data = json_body(sent.unwrap())
        if not data.get("access_token"):
            message = data.get("error_description") or data.get("error") or "Brak access_token w odpowiedzi"
            raise UpstreamError(str(message), provider=self.provider)

        expires_in = int(data.get("expires_in") or DEFAULT_EXPIRES_IN[self.provider])
        return OAuthTokens(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            expires_at=datetime.now(timezone.utc) + timedelta(seconds=expires_in),
            user_id=data.get("open_id"),
            scopes=data.get("scope", ""),
        )


async def exchange_oauth_code(
    platform: str,
    auth_code: str,
    redirect_uri: str,
    http_client: httpx.AsyncClient | None = None,
) -> OAuthTokens:
    """Wymienia authorization code na access+refresh tokeny."""
    logger.info("Wymiana kodu OAuth", platform=platform)
    return await _TokenEndpoint(platform, http_client).grant(
        {
            "code": auth_code,
            "grant_type": "authorization_code",
            "redirect_uri": redirect_uri,
        }
    )


async def refresh_access_token(
    platform: str,
    refresh_token: str,
    http_client: httpx.AsyncClient | None = None,
) -> OAuthTokens:
    logger.info("Odświeżanie tokenu OAuth", platform=platform)
    tokens = await _TokenEndpoint(platform, http_client).grant(
        {"refresh_token": refresh_token, "grant_type": "refresh_token"}
    )
    # Google nie zwraca nowego refresh tokenu, stary pozostaje ważny
    if tokens.refresh_token is None:
        tokens = OAuthTokens(
            access_token=tokens.access_token,
            refresh_token=refresh_token,
            expires_at=tokens.expires_at,
            user_id=tokens.user_id,
            scopes=tokens.scopes,
        )
    return tokens


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def needs_refresh(connection: PlatformConnection, now: datetime | None = None) -> bool:
    if connection.token_expires_at is None or not connection.refresh_token:
        return False
    now = now or datetime.now(timezone.utc)
    return _as_utc(connection.token_expires_at) - now <= REFRESH_MARGIN


async def ensure_fresh_token(
    connection: PlatformConnection,
    http_client: httpx.AsyncClient | None = None,
) -> PlatformConnection:
    """Odświeża token połączenia, jeśli wygasa; zmiany zostają w sesji wywołującego."""
    if not needs_refresh(connection):
        return connection

    tokens = await refresh_access_token(connection.platform, connection.refresh_token, http_client)
    connection.access_token = tokens.access_token
    connection.refresh_token = tokens.refresh_token
    connection.token_expires_at = tokens.expires_at
    return connection


def connection_token_lookup(
    session: AsyncSession,
    user_id: uuid.UUID,
    http_client: httpx.AsyncClient | None = None,
) -> CredentialLookup:
    """Źródło tokenów OAuth dla publisherów — ten sam kontrakt co magazyn kluczy."""

    async def lookup(platform: str) -> Result[str]:
        result = await session.execute(
            select(PlatformConnection).where(
                PlatformConnection.user_id == user_id,
                PlatformConnection.platform == platform,
                PlatformConnection.is_active.is_(True),
            )
        )
        connection = result.scalars().first()
        if connection is None:
            return Result.failure(CredentialMissing(platform))
        try:
            connection = await ensure_fresh_token(connection, http_client)
        except ProviderError as exc:
            return Result.failure(exc)
        return Result.success(connection.access_token)

    return lookup
