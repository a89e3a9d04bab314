"""Schematy połączeń z platformami (OAuth)."""

import uuid
from datetime import datetime

from pydantic import BaseModel


class ConnectPlatformRequest(BaseModel):
    platform: str
    auth_code: str
    redirect_uri: str


class PlatformConnectionResponse(BaseModel):
    id: uuid.UUID
    platform: str
    platform_user_id: str | None
    platform_username: str | None
    token_expires_at: datetime | None
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}
