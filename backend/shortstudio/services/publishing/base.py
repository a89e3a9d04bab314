"""
Wspólny interfejs publikacji na platformach.

Dwa warianty za tym samym interfejsem:
  - SimulatedPublisher — jawna atrapa (stałe opóźnienie + syntetyczny identyfikator),
  - OAuthPublisher     — prawdziwy upload na tokenie OAuth użytkownika.
Orkiestrator nie rozróżnia wariantów.
"""

import asyncio
import secrets
import string
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import httpx
import structlog

from shortstudio.core.config import get_settings
from shortstudio.core.exceptions import UpstreamError
from shortstudio.services.providers.base import CredentialLookup, ProviderAdapter, Result

settings = get_settings()
logger = structlog.get_logger()

_ID_ALPHABET = string.ascii_lowercase + string.digits


@dataclass(frozen=True)
class PublishRequest:
    user_id: uuid.UUID
    platform: str
    video_url: str
    title: str
    description: str = ""
    tags: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class PublishReceipt:
    platform: str
    content_id: str
    url: str | None = None


class Publisher(ABC):
    platform: str = ""

    @abstractmethod
    async def publish(self, request: PublishRequest) -> Result[PublishReceipt]:
        """Publikuje gotowe wideo; błędy wracają jako `Result.failure`."""


class SimulatedPublisher(Publisher):
    """
    Atrapa publikacji. Wymaga klucza platformy w magazynie kluczy, czeka
    SIMULATED_PUBLISH_DELAY_SECONDS i zwraca identyfikator `YT_…` / `TT_…`.
    Nic nie jest wysyłane do platformy.
    """

    PREFIXES = {"youtube": "YT_", "tiktok": "TT_"}
    URLS = {
        "youtube": "https://youtube.com/shorts/{id}",
        "tiktok": "https://tiktok.com/@user/video/{id}",
    }

    def __init__(self, platform: str, credentials: CredentialLookup, delay: float | None = None):
        if platform not in self.PREFIXES:
            raise ValueError(f"Nieznana platforma: {platform}")
        self.platform = platform
        self.credentials = credentials
        self.delay = settings.SIMULATED_PUBLISH_DELAY_SECONDS if delay is None else delay

    async def publish(self, request: PublishRequest) -> Result[PublishReceipt]:
        key = await self.credentials(self.platform)
        if not key.ok:
            return Result.failure(key.error)

        logger.info("Symulowana publikacja", platform=self.platform, title=request.title)
        if self.delay > 0:
            await asyncio.sleep(self.delay)

        content_id = self.PREFIXES[self.platform] + "".join(secrets.choice(_ID_ALPHABET) for _ in range(10))
        return Result.success(
            PublishReceipt(
                platform=self.platform,
                content_id=content_id,
                url=self.URLS[self.platform].format(id=content_id),
            )
        )


class OAuthPublisher(ProviderAdapter, Publisher):
    """Upload w imieniu użytkownika; `tokens` zwraca access token połączonego konta."""

    def __init__(self, tokens: CredentialLookup, http_client: httpx.AsyncClient | None = None):
        super().__init__(http_client=http_client)
        self.tokens = tokens
        self.provider = self.platform

    async def _download(self, url: str) -> Result[bytes]:
        """Pobiera wyrenderowany plik — platformy przyjmują bajty, nie URL."""
        sent = await self.request("GET", url)
        if not sent.ok:
            return Result.failure(sent.error)
        if not sent.value.content:
            return Result.failure(UpstreamError("Pusty plik wideo", provider=self.provider))
        return Result.success(sent.value.content)


def get_publisher(
    platform: str,
    *,
    credentials: CredentialLookup,
    tokens: CredentialLookup | None = None,
    mode: str | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> Publisher:
    """
    Wybiera wariant wg PUBLISHER_MODE.
    `credentials` — klucze API użytkownika, `tokens` — tokeny OAuth połączonych kont.
    """
    mode = mode or settings.PUBLISHER_MODE
    if mode == "simulated":
        return SimulatedPublisher(platform, credentials)

    if tokens is None:
        raise ValueError("Tryb OAuth wymaga źródła tokenów")

    from shortstudio.services.publishing.tiktok_publisher import TikTokPublisher
    from shortstudio.services.publishing.youtube_publisher import YouTubePublisher

    publishers = {"youtube": YouTubePublisher, "tiktok": TikTokPublisher}
    if platform not in publishers:
        raise ValueError(f"Nieznana platforma: {platform}")
    return publishers[platform](tokens, http_client=http_client)
