"""
Wyszukiwarka mediów stockowych — Pexels API.
Zwraca kandydatów z bezpośrednim URL-em zasobu, filtrowanych do orientacji pionowej.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

import structlog

from shortstudio.core.config import get_settings
from shortstudio.services.providers.base import CredentialLookup, ProviderAdapter, Result, json_body

settings = get_settings()
logger = structlog.get_logger()


class MediaType(StrEnum):
    PHOTO = "photo"
    VIDEO = "video"


@dataclass(frozen=True)
class MediaCandidate:
    id: str
    media_type: MediaType
    url: str
    preview_url: str | None = None
    width: int | None = None
    height: int | None = None
    author: str | None = None


def _photo_candidate(photo: dict[str, Any]) -> MediaCandidate | None:
    src = photo.get("src") or {}
    url = src.get("portrait") or src.get("large2x") or src.get("original")
    if not url:
        return None
    return MediaCandidate(
        id=str(photo.get("id", "")),
        media_type=MediaType.PHOTO,
        url=url,
        preview_url=src.get("medium") or src.get("small"),
        width=photo.get("width"),
        height=photo.get("height"),
        author=photo.get("photographer"),
    )


def _best_video_file(files: list[dict[str, Any]]) -> dict[str, Any] | None:
    """Najwyższa rozdzielczość wśród plików mp4 w orientacji pionowej (z fallbackiem na dowolny mp4)."""
    mp4 = [f for f in files if f.get("link") and f.get("file_type", "video/mp4") == "video/mp4"]
    portrait = [f for f in mp4 if (f.get("height") or 0) >= (f.get("width") or 0)]
    pool = portrait or mp4
    if not pool:
        return None
    return max(pool, key=lambda f: (f.get("height") or 0) * (f.get("width") or 0))


def _video_candidate(video: dict[str, Any]) -> MediaCandidate | None:
    best = _best_video_file(video.get("video_files") or [])
    if best is None:
        return None
    user = video.get("user") or {}
    return MediaCandidate(
        id=str(video.get("id", "")),
        media_type=MediaType.VIDEO,
        url=best["link"],
        preview_url=video.get("image"),
        width=best.get("width"),
        height=best.get("height"),
        author=user.get("name"),
    )


class MediaSearch(ProviderAdapter):
    provider = "pexels"
    base_url = settings.PEXELS_BASE_URL

    async def search(
        self,
        credentials: CredentialLookup,
        query: str,
        media_type: MediaType = MediaType.PHOTO,
        per_page: int | None = None,
    ) -> Result[list[MediaCandidate]]:
        key = await self._credential(credentials)
        if not key.ok:
            return Result.failure(key.error)

        path = "/v1/search" if media_type == MediaType.PHOTO else "/videos/search"
        logger.info("Pexels wyszukiwanie", query=query, media_type=str(media_type))

        sent = await self.request(
            "GET",
            path,
            headers={"Authorization": key.value},
            params={
                "query": query,
                "per_page": per_page or settings.PEXELS_PER_PAGE,
                "orientation": "portrait",
            },
        )
        if not sent.ok:
            return Result.failure(sent.error)

        body = json_body(sent.value)
        if media_type == MediaType.PHOTO:
            candidates = [_photo_candidate(p) for p in body.get("photos", [])]
        else:
            candidates = [_video_candidate(v) for v in body.get("videos", [])]

        found = [c for c in candidates if c is not None]
        logger.info("Pexels wyniki", query=query, count=len(found))
        return Result.success(found)
