"""
Serwis renderujący — Shotstack Edit API.
Zlecenie renderu zwraca identyfikator zadania; gotowy URL pliku
pojawia się dopiero w odpowiedzi endpointu statusu.
"""

from dataclasses import dataclass, replace
from enum import StrEnum
from typing import Any

import structlog

from shortstudio.core.config import get_settings
from shortstudio.core.exceptions import UpstreamError
from shortstudio.services.providers.base import CredentialLookup, ProviderAdapter, Result, json_body

settings = get_settings()
logger = structlog.get_logger()


class RenderState(StrEnum):
    PROCESSING = "processing"
    READY = "ready"
    FAILED = "failed"


# Stany Shotstack: queued, fetching, rendering, saving, done, failed
_STATE_MAP = {
    "done": RenderState.READY,
    "failed": RenderState.FAILED,
}


def map_render_state(provider_state: str | None) -> RenderState:
    return _STATE_MAP.get((provider_state or "").lower(), RenderState.PROCESSING)


@dataclass(frozen=True)
class RenderJob:
    job_id: str


@dataclass(frozen=True)
class RenderStatus:
    job_id: str
    state: RenderState
    url: str | None = None
    thumbnail_url: str | None = None
    error: str | None = None
    provider_state: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.state in (RenderState.READY, RenderState.FAILED)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "RenderStatus":
        """Buduje status z pola `response` (polling) lub z treści callbacku."""
        data = payload.get("response", payload)
        provider_state = data.get("status")
        return cls(
            job_id=str(data.get("id", "")),
            state=map_render_state(provider_state),
            url=data.get("url"),
            thumbnail_url=data.get("poster") or data.get("thumbnail"),
            error=data.get("error"),
            provider_state=provider_state,
        )


class RenderService(ProviderAdapter):
    provider = "shotstack"
    base_url = settings.SHOTSTACK_BASE_URL

    async def submit(self, credentials: CredentialLookup, edit: dict[str, Any]) -> Result[RenderJob]:
        key = await self._credential(credentials)
        if not key.ok:
            return Result.failure(key.error)

        tracks = edit.get("timeline", {}).get("tracks", [])
        logger.info("Zlecenie renderu", clips=sum(len(t.get("clips", [])) for t in tracks))

        sent = await self.request(
            "POST",
            "/render",
            headers={"x-api-key": key.value, "Content-Type": "application/json"},
            json=edit,
        )
        if not sent.ok:
            return Result.failure(sent.error)

        job_id = (json_body(sent.value).get("response") or {}).get("id")
        if not job_id:
            return Result.failure(
                UpstreamError("Serwis renderujący nie zwrócił identyfikatora zadania", provider=self.provider)
            )

        logger.info("Render zlecony", job_id=job_id)
        return Result.success(RenderJob(job_id=job_id))

    async def status(self, credentials: CredentialLookup, job_id: str) -> Result[RenderStatus]:
        key = await self._credential(credentials)
        if not key.ok:
            return Result.failure(key.error)

        sent = await self.request(
            "GET",
            f"/render/{job_id}",
            headers={"x-api-key": key.value, "Accept": "application/json"},
        )
        if not sent.ok:
            return Result.failure(sent.error)

        status = RenderStatus.from_payload(json_body(sent.value))
        if not status.job_id:
            status = replace(status, job_id=job_id)
        return Result.success(status)
