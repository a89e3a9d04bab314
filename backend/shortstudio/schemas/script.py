"""Schematy skryptów i podglądu scen."""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field

from shortstudio.schemas.video import AssetRef


class ScriptGenerateRequest(BaseModel):
    """Dodatkowe instrukcje są doklejane do promptu serii."""

    series_id: uuid.UUID
    instructions: str = ""


class ScriptUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=500)
    content: str | None = Field(default=None, min_length=1)


class ScriptResponse(BaseModel):
    id: uuid.UUID
    series_id: uuid.UUID
    title: str
    content: str
    status: str
    model_id: str
    generation_prompt: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ScenePreviewRequest(BaseModel):
    assets: list[AssetRef] = Field(min_length=1)


class SceneResponse(BaseModel):
    start_offset_seconds: int
    duration_seconds: int
    asset_ref: str
    narration_text: str | None
    visual_hint: str | None

    model_config = {"from_attributes": True}
