"""Endpointy wyszukiwania mediów stockowych i głosów lektora."""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from shortstudio.api.deps import (
    get_credential_store,
    get_current_user,
    get_media_search,
    get_voice_synthesizer,
    load_script,
)
from shortstudio.core.database import get_db
from shortstudio.models.user import User
from shortstudio.schemas.media import MediaCandidateResponse, MediaSuggestionsResponse, VoiceResponse
from shortstudio.services.credentials.store import CredentialStore
from shortstudio.services.media.stock_provider import MediaSearch, MediaType
from shortstudio.services.scripts.parser import visual_hints
from shortstudio.services.tts.tts_service import VoiceSynthesizer

router = APIRouter()
voices_router = APIRouter()


@router.get("/search", response_model=list[MediaCandidateResponse])
async def search_media(
    query: str = Query(min_length=1),
    media_type: MediaType = Query(default=MediaType.PHOTO),
    per_page: int = Query(default=20, ge=1, le=80),
    current_user: User = Depends(get_current_user),
    store: CredentialStore = Depends(get_credential_store),
    search: MediaSearch = Depends(get_media_search),
):
    found = await search.search(store.lookup(current_user.id), query, media_type, per_page)
    return [MediaCandidateResponse.model_validate(c) for c in found.unwrap()]


@router.get("/suggestions", response_model=MediaSuggestionsResponse)
async def media_suggestions(
    script_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Podpowiedzi zapytań z wizualnych wskazówek skryptu."""
    script = await load_script(db, current_user, script_id)
    return MediaSuggestionsResponse(queries=visual_hints(script.content))


@voices_router.get("", response_model=list[VoiceResponse])
async def list_voices(
    current_user: User = Depends(get_current_user),
    store: CredentialStore = Depends(get_credential_store),
    voice: VoiceSynthesizer = Depends(get_voice_synthesizer),
):
    voices = await voice.list_voices(store.lookup(current_user.id))
    return [VoiceResponse.model_validate(v) for v in voices.unwrap()]
