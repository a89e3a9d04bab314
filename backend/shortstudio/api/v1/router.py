"""Główny router API v1."""

from fastapi import APIRouter

from shortstudio.api.v1.endpoints import (
    analytics,
    api_keys,
    auth,
    media,
    publishing,
    schedules,
    scripts,
    series,
    users,
    videos,
    webhooks,
)

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Autoryzacja"])
api_router.include_router(users.router, prefix="/users", tags=["Użytkownicy"])
api_router.include_router(api_keys.router, prefix="/api-keys", tags=["Klucze API"])
api_router.include_router(series.router, prefix="/series", tags=["Serie"])
api_router.include_router(scripts.router, prefix="/scripts", tags=["Skrypty"])
api_router.include_router(media.router, prefix="/media", tags=["Media"])
api_router.include_router(media.voices_router, prefix="/voices", tags=["Media"])
api_router.include_router(videos.router, prefix="/videos", tags=["Wideo"])
api_router.include_router(schedules.router, prefix="/schedules", tags=["Harmonogramy"])
api_router.include_router(publishing.router, prefix="/publishing", tags=["Publikacja"])
api_router.include_router(analytics.router, prefix="/analytics", tags=["Analityka"])
api_router.include_router(webhooks.router, prefix="/webhooks", tags=["Webhooks"])
