"""Schematy harmonogramów publikacji."""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class ScheduleCreateRequest(BaseModel):
    video_id: uuid.UUID
    scheduled_time: datetime
    platforms: list[str] = Field(min_length=1)


class ScheduleResponse(BaseModel):
    id: uuid.UUID
    video_id: uuid.UUID
    series_id: uuid.UUID
    scheduled_time: datetime
    platforms: list[str]
    status: str
    results: dict[str, Any]
    created_at: datetime

    model_config = {"from_attributes": True}
