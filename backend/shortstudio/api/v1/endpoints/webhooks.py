"""
Webhooks — powiadomienie serwisu renderującego o zakończeniu renderu.
Treść callbacku służy tylko do wskazania zadania; stan jest potwierdzany
odpytaniem serwisu, więc podrobiony callback niczego nie zmieni.
"""

from typing import Any

import structlog
from fastapi import APIRouter, Body, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shortstudio.api.deps import AssemblerFactory, get_assembler_factory
from shortstudio.core.database import get_db
from shortstudio.models.video import Video
from shortstudio.services.pipeline.assembly import video_owner
from shortstudio.services.video.renderer import RenderStatus

router = APIRouter()
logger = structlog.get_logger()


@router.post("/render")
async def render_callback(
    payload: dict[str, Any] = Body(...),
    db: AsyncSession = Depends(get_db),
    assembler_factory: AssemblerFactory = Depends(get_assembler_factory),
):
    """Callback Shotstack. Zawsze 2xx — inaczej dostawca ponawia wysyłkę."""
    reported = RenderStatus.from_payload(payload)
    if not reported.job_id:
        return {"received": True, "matched": False}

    result = await db.execute(select(Video).where(Video.render_job_id == reported.job_id))
    video = result.scalars().first()
    if video is None:
        logger.info("Callback renderu bez wideo", job_id=reported.job_id)
        return {"received": True, "matched": False}

    logger.info("Callback renderu", job_id=reported.job_id, reported_state=reported.provider_state)
    user_id = await video_owner(db, video.id)
    video = await assembler_factory(db, user_id).refresh_render_status(video.id)
    return {"received": True, "matched": True, "status": video.status}
