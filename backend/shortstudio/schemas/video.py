"""Schematy wideo i publikacji."""

import uuid
from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, Field, StringConstraints

# Referencja medium (URL) nie może być pusta ani z samych spacji
AssetRef = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class VideoCreateRequest(BaseModel):
    """Montaż wideo z zatwierdzonego skryptu i wybranych mediów."""

    script_id: uuid.UUID
    media_assets: list[AssetRef] = Field(min_length=1)
    title: str | None = None
    description: str = ""
    tags: list[str] = Field(default_factory=list)


class VideoPublishRequest(BaseModel):
    """Pusta lista = wszystkie platformy wideo."""

    platforms: list[str] = Field(default_factory=list)


class VideoResponse(BaseModel):
    id: uuid.UUID
    series_id: uuid.UUID
    script_id: uuid.UUID | None
    title: str
    description: str
    tags: list[str]
    platform: str
    status: str
    error_message: str | None
    media_assets: list[str]
    voiceover_url: str | None
    render_job_id: str | None
    video_url: str | None
    thumbnail_url: str | None
    published_at: datetime | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class VideoListResponse(BaseModel):
    items: list[VideoResponse]
    total: int
    page: int
    page_size: int


class PublishResultResponse(BaseModel):
    ok: bool
    status: str
    content_id: str | None = None
    url: str | None = None
    error: str | None = None


class PublishJobResponse(BaseModel):
    id: uuid.UUID
    video_id: uuid.UUID
    platform: str
    status: str
    platform_content_id: str | None
    platform_url: str | None
    error_message: str | None
    attempts: int
    published_at: datetime | None
    created_at: datetime

    model_config = {"from_attributes": True}
