"""Schematy serii wideo."""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from shortstudio.models.series import Platform, SeriesStatus


class SeriesCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=500)
    description: str | None = None
    platform: Platform = Platform.YOUTUBE
    topic: str = Field(min_length=1)
    content_prompt: str = ""


class SeriesUpdateRequest(BaseModel):
    """Platforma i temat są niezmienne po utworzeniu serii."""

    title: str | None = Field(default=None, min_length=1, max_length=500)
    description: str | None = None
    content_prompt: str | None = None
    status: SeriesStatus | None = None


class SeriesResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    description: str | None
    platform: str
    topic: str
    content_prompt: str
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class SeriesListResponse(BaseModel):
    items: list[SeriesResponse]
    total: int
    page: int
    page_size: int
