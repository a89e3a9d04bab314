"""
Publikacja wideo na TikTok — Content Posting API (v2), dwuetapowy FILE_UPLOAD.
"""

import structlog

from shortstudio.core.exceptions import UpstreamError
from shortstudio.services.providers.base import Result, json_body
from shortstudio.services.publishing.base import OAuthPublisher, PublishReceipt, PublishRequest

logger = structlog.get_logger()


class TikTokPublisher(OAuthPublisher):
    platform = "tiktok"
    base_url = "https://open.tiktokapis.com/v2"

    async def publish(self, request: PublishRequest) -> Result[PublishReceipt]:
        token = await self._credential(self.tokens)
        if not token.ok:
            return Result.failure(token.error)

        video = await self._download(request.video_url)
        if not video.ok:
            return Result.failure(video.error)

        file_size = len(video.value)
        logger.info("TikTok upload start", title=request.title, size_bytes=file_size)

        caption = request.title
        hashtags = " ".join(f"#{tag.lstrip('#')}" for tag in request.tags if tag)
        if hashtags:
            caption = f"{caption} {hashtags}"

        # Krok 1: Inicjalizacja uploadu
        init = await self.request(
            "POST",
            "/post/publish/video/init/",
            headers={
                "Authorization": f"Bearer {token.value}",
                "Content-Type": "application/json; charset=UTF-8",
            },
            json={
                "post_info": {
                    "title": caption[:2200],
                    "privacy_level": "PUBLIC_TO_EVERYONE",
                    "disable_comment": False,
                },
                "source_info": {
                    "source": "FILE_UPLOAD",
                    "video_size": file_size,
                    "chunk_size": file_size,
                    "total_chunk_count": 1,
                },
            },
        )
        if not init.ok:
            return Result.failure(init.error)

        body = json_body(init.value)
        error = body.get("error") or {}
        if error.get("code") not in (None, "ok"):
            return Result.failure(
                UpstreamError(error.get("message") or error["code"], provider=self.provider)
            )

        data = body.get("data") or {}
        publish_id, upload_url = data.get("publish_id"), data.get("upload_url")
        if not publish_id or not upload_url:
            return Result.failure(UpstreamError("TikTok nie zwrócił sesji uploadu", provider=self.provider))

        # Krok 2: Upload pliku (jeden chunk)
        upload = await self.request(
            "PUT",
            upload_url,
            headers={
                "Content-Type": "video/mp4",
                "Content-Range": f"bytes 0-{file_size - 1}/{file_size}",
            },
            content=video.value,
        )
        if not upload.ok:
            return Result.failure(upload.error)

        logger.info("TikTok upload zakończony", publish_id=publish_id)
        # URL posta jest znany dopiero po moderacji, TikTok zwraca tylko publish_id
        return Result.success(PublishReceipt(platform=self.platform, content_id=publish_id, url=None))
