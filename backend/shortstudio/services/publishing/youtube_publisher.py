"""
Publikacja wideo na YouTube — resumable upload (YouTube Data API v3).
"""

import structlog

from shortstudio.core.exceptions import UpstreamError
from shortstudio.services.providers.base import Result, json_body
from shortstudio.services.publishing.base import OAuthPublisher, PublishReceipt, PublishRequest

logger = structlog.get_logger()


class YouTubePublisher(OAuthPublisher):
    platform = "youtube"
    base_url = "https://www.googleapis.com/upload/youtube/v3/videos"

    CATEGORY_ID = "22"  # People & Blogs

    async def publish(self, request: PublishRequest) -> Result[PublishReceipt]:
        token = await self._credential(self.tokens)
        if not token.ok:
            return Result.failure(token.error)

        video = await self._download(request.video_url)
        if not video.ok:
            return Result.failure(video.error)

        logger.info("YouTube upload start", title=request.title, size_bytes=len(video.value))

        # Krok 1: Inicjalizacja sesji uploadu
        metadata = {
            "snippet": {
                "title": request.title[:100],
                "description": request.description[:5000],
                "tags": request.tags[:30],
                "categoryId": self.CATEGORY_ID,
            },
            "status": {
                "privacyStatus": "public",
                "selfDeclaredMadeForKids": False,
            },
        }
        init = await self.request(
            "POST",
            "?uploadType=resumable&part=snippet,status",
            headers={
                "Authorization": f"Bearer {token.value}",
                "Content-Type": "application/json",
                "X-Upload-Content-Type": "video/mp4",
            },
            json=metadata,
        )
        if not init.ok:
            return Result.failure(init.error)

        upload_url = init.value.headers.get("Location")
        if not upload_url:
            return Result.failure(UpstreamError("YouTube nie zwrócił adresu uploadu", provider=self.provider))

        # Krok 2: Upload pliku
        upload = await self.request(
            "PUT",
            upload_url,
            headers={
                "Authorization": f"Bearer {token.value}",
                "Content-Type": "video/mp4",
            },
            content=video.value,
        )
        if not upload.ok:
            return Result.failure(upload.error)

        video_id = json_body(upload.value).get("id")
        if not video_id:
            return Result.failure(UpstreamError("YouTube nie zwrócił identyfikatora wideo", provider=self.provider))

        url = f"https://www.youtube.com/shorts/{video_id}"
        logger.info("YouTube upload zakończony", video_id=video_id, url=url)
        return Result.success(PublishReceipt(platform=self.platform, content_id=video_id, url=url))
