"""
Serwis Text-to-Speech — ElevenLabs.
Zwraca surowe bajty audio; udostępnienie ich pod URL-em (storage) należy
do orkiestratora, który jest też właścicielem pliku.
"""

from dataclasses import dataclass

import structlog

from shortstudio.core.config import get_settings
from shortstudio.core.exceptions import UpstreamError
from shortstudio.services.providers.base import CredentialLookup, ProviderAdapter, Result, json_body

settings = get_settings()
logger = structlog.get_logger()


@dataclass(frozen=True)
class Voice:
    id: str
    name: str
    category: str = ""
    preview_url: str | None = None


class VoiceSynthesizer(ProviderAdapter):
    provider = "elevenlabs"
    base_url = settings.ELEVENLABS_BASE_URL

    def __init__(self, *args, model_id: str | None = None, default_voice_id: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.model_id = model_id or settings.ELEVENLABS_MODEL_ID
        self.default_voice_id = default_voice_id or settings.ELEVENLABS_DEFAULT_VOICE_ID

    async def synthesize(
        self,
        credentials: CredentialLookup,
        text: str,
        voice_id: str | None = None,
    ) -> Result[bytes]:
        key = await self._credential(credentials)
        if not key.ok:
            return Result.failure(key.error)

        voice = voice_id or self.default_voice_id
        logger.info("ElevenLabs TTS", voice_id=voice, text_length=len(text))

        sent = await self.request(
            "POST",
            f"/text-to-speech/{voice}",
            headers={
                "xi-api-key": key.value,
                "Content-Type": "application/json",
                "Accept": "audio/mpeg",
            },
            json={
                "text": text,
                "model_id": self.model_id,
                "voice_settings": {
                    "stability": 0.5,
                    "similarity_boost": 0.5,
                },
            },
        )
        if not sent.ok:
            return Result.failure(sent.error)

        audio = sent.value.content
        if not audio:
            return Result.failure(UpstreamError("Serwis TTS zwrócił puste audio", provider=self.provider))

        logger.info("Audio wygenerowane", size_bytes=len(audio))
        return Result.success(audio)

    async def list_voices(self, credentials: CredentialLookup) -> Result[list[Voice]]:
        key = await self._credential(credentials)
        if not key.ok:
            return Result.failure(key.error)

        sent = await self.request(
            "GET",
            "/voices",
            headers={"xi-api-key": key.value, "Accept": "application/json"},
        )
        if not sent.ok:
            return Result.failure(sent.error)

        return Result.success(
            [
                Voice(
                    id=v["voice_id"],
                    name=v.get("name", ""),
                    category=v.get("category", ""),
                    preview_url=v.get("preview_url"),
                )
                for v in json_body(sent.value).get("voices", [])
                if v.get("voice_id")
            ]
        )
