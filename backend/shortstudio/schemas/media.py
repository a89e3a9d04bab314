"""Schematy wyszukiwania mediów i głosów lektora."""

from pydantic import BaseModel

from shortstudio.services.media.stock_provider import MediaType


class MediaCandidateResponse(BaseModel):
    id: str
    media_type: MediaType
    url: str
    preview_url: str | None = None
    width: int | None = None
    height: int | None = None
    author: str | None = None

    model_config = {"from_attributes": True}


class MediaSuggestionsResponse(BaseModel):
    queries: list[str]


class VoiceResponse(BaseModel):
    id: str
    name: str
    category: str = ""
    preview_url: str | None = None

    model_config = {"from_attributes": True}
