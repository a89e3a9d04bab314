"""
Magazyn kluczy API — jedno miejsce odczytu i zapisu sekretów użytkownika.
Adaptery dostają `CredentialLookup` powiązany z użytkownikiem i pytają
wyłącznie o swojego dostawcę.
"""

import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shortstudio.core.exceptions import CredentialMissing
from shortstudio.models.api_key_set import ApiKeySet
from shortstudio.services.credentials.codec import SecretCodec, get_codec
from shortstudio.services.providers.base import CredentialLookup, Result

logger = structlog.get_logger()

PROVIDERS = ("openai", "elevenlabs", "pexels", "shotstack", "youtube", "tiktok")


def mask_secret(secret: str) -> str:
    if len(secret) <= 8:
        return "*" * len(secret)
    return f"{secret[:4]}{'*' * (len(secret) - 8)}{secret[-4:]}"


class CredentialStore:
    def __init__(self, session: AsyncSession, codec: SecretCodec | None = None):
        self.session = session
        self.codec = codec or get_codec()

    async def _load(self, user_id: uuid.UUID) -> ApiKeySet | None:
        result = await self.session.execute(select(ApiKeySet).where(ApiKeySet.user_id == user_id))
        return result.scalar_one_or_none()

    async def save_api_keys(self, user_id: uuid.UUID, keys: dict[str, str]) -> dict[str, str]:
        """Nadpisuje cały zestaw kluczy użytkownika. Puste wartości są pomijane."""
        encoded = {
            name: self.codec.encode(value)
            for name, value in keys.items()
            if value
        }

        row = await self._load(user_id)
        if row is None:
            row = ApiKeySet(user_id=user_id, keys=encoded)
        else:
            row.keys = encoded
        self.session.add(row)
        await self.session.flush()

        logger.info("Zapisano klucze API", user_id=str(user_id), providers=sorted(encoded))
        return encoded

    async def fetch_api_keys(self, user_id: uuid.UUID) -> dict[str, str]:
        row = await self._load(user_id)
        if row is None or not row.keys:
            return {}
        return {name: self.codec.decode(value) for name, value in row.keys.items()}

    async def remove(self, user_id: uuid.UUID, provider: str) -> bool:
        row = await self._load(user_id)
        if row is None or provider not in (row.keys or {}):
            return False
        row.keys = {name: value for name, value in row.keys.items() if name != provider}
        self.session.add(row)
        await self.session.flush()
        return True

    async def get(self, user_id: uuid.UUID, provider: str) -> Result[str]:
        """Typowany dostęp do jednego sekretu; brak klucza to CredentialMissing, nie wyjątek."""
        keys = await self.fetch_api_keys(user_id)
        secret = keys.get(provider, "")
        if not secret:
            return Result.failure(CredentialMissing(provider))
        return Result.success(secret)

    def lookup(self, user_id: uuid.UUID) -> CredentialLookup:
        async def _lookup(provider: str) -> Result[str]:
            return await self.get(user_id, provider)

        return _lookup
