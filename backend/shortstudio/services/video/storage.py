"""
Serwis przechowywania plików — S3/MinIO.
Trzyma nagrania lektora, do których serwis renderujący musi mieć dostęp
przez cały czas trwania renderu.
"""

import io
import uuid

import boto3
import structlog
from botocore.config import Config

from shortstudio.core.config import get_settings

settings = get_settings()
logger = structlog.get_logger()


class StorageService:
    def __init__(self, client=None, bucket: str | None = None):
        self.bucket = bucket or settings.S3_BUCKET_NAME
        if client is None:
            kwargs = {
                "aws_access_key_id": settings.S3_ACCESS_KEY or None,
                "aws_secret_access_key": settings.S3_SECRET_KEY or None,
                "region_name": settings.S3_REGION,
                "config": Config(signature_version="s3v4"),
            }
            if settings.S3_ENDPOINT_URL:
                kwargs["endpoint_url"] = settings.S3_ENDPOINT_URL
            client = boto3.client("s3", **kwargs)
        self.s3 = client

    def url_for(self, key: str) -> str:
        if settings.S3_ENDPOINT_URL:
            return f"{settings.S3_ENDPOINT_URL}/{self.bucket}/{key}"
        return f"https://{self.bucket}.s3.{settings.S3_REGION}.amazonaws.com/{key}"

    def upload_bytes(self, data: bytes, key: str, content_type: str = "application/octet-stream") -> str:
        """Uploaduje bajty do S3 i zwraca URL obiektu."""
        logger.info("Upload do S3", key=key, content_type=content_type, size_bytes=len(data))
        self.s3.upload_fileobj(io.BytesIO(data), self.bucket, key, ExtraArgs={"ContentType": content_type})
        return self.url_for(key)

    def delete_file(self, key: str) -> None:
        logger.info("Usuwanie z S3", key=key)
        self.s3.delete_object(Bucket=self.bucket, Key=key)

    @staticmethod
    def voiceover_key(video_id: uuid.UUID | str) -> str:
        return f"voiceovers/{video_id}.mp3"
