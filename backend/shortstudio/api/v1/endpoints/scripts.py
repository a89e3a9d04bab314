"""
Endpointy skryptów — generacja przez LLM, edycja, zatwierdzanie, podgląd scen.
Edycja treści cofa skrypt do wersji roboczej.
"""

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shortstudio.api.deps import (
    get_credential_store,
    get_current_user,
    get_script_generator,
    load_script,
    load_series,
)
from shortstudio.core.config import get_settings
from shortstudio.core.database import get_db
from shortstudio.core.exceptions import PreconditionFailed, ValidationError
from shortstudio.models.script import Script, ScriptStatus
from shortstudio.models.series import Series
from shortstudio.models.user import User
from shortstudio.schemas.script import (
    ScenePreviewRequest,
    SceneResponse,
    ScriptGenerateRequest,
    ScriptResponse,
    ScriptUpdateRequest,
)
from shortstudio.services.credentials.store import CredentialStore
from shortstudio.services.llm.script_generator import ScriptGenerator
from shortstudio.services.scripts.parser import SceneSequence, extract_title

router = APIRouter()
settings = get_settings()


def _instructions(series: Series, extra: str) -> str:
    return "\n".join(part.strip() for part in (series.content_prompt, extra) if part and part.strip())


@router.post("", response_model=ScriptResponse, status_code=status.HTTP_201_CREATED)
async def generate_script(
    body: ScriptGenerateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    store: CredentialStore = Depends(get_credential_store),
    generator: ScriptGenerator = Depends(get_script_generator),
):
    """Generuje skrypt dla serii (temat + prompt serii + dodatkowe instrukcje)."""
    series = await load_series(db, current_user, body.series_id)
    if series.is_archived:
        raise PreconditionFailed("Seria jest zarchiwizowana")

    instructions = _instructions(series, body.instructions)
    generated = await generator.generate(
        store.lookup(current_user.id),
        topic=series.topic,
        platform=series.platform,
        instructions=instructions,
    )
    script_data = generated.unwrap()

    script = Script(
        series_id=series.id,
        title=script_data.title,
        content=script_data.content,
        status=ScriptStatus.DRAFT,
        model_id=script_data.model_id,
        generation_prompt=script_data.prompt,
    )
    db.add(script)
    await db.flush()
    await db.refresh(script)
    return script


@router.get("", response_model=list[ScriptResponse])
async def list_scripts(
    series_id: uuid.UUID | None = Query(default=None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    query = (
        select(Script)
        .join(Series, Script.series_id == Series.id)
        .where(Series.user_id == current_user.id)
    )
    if series_id is not None:
        query = query.where(Script.series_id == series_id)

    result = await db.execute(query.order_by(Script.created_at.desc()))
    return list(result.scalars().all())


@router.get("/{script_id}", response_model=ScriptResponse)
async def get_script(
    script_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await load_script(db, current_user, script_id)


@router.patch("/{script_id}", response_model=ScriptResponse)
async def update_script(
    script_id: uuid.UUID,
    body: ScriptUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    script = await load_script(db, current_user, script_id)

    if body.title is not None:
        script.title = body.title
    if body.content is not None and body.content != script.content:
        script.content = body.content
        script.status = ScriptStatus.DRAFT
        if body.title is None:
            script.title = extract_title(body.content, fallback=script.title)

    db.add(script)
    await db.flush()
    await db.refresh(script)
    return script


@router.post("/{script_id}/approve", response_model=ScriptResponse)
async def approve_script(
    script_id: uuid.UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Zatwierdzenie — skrypt musi dać się sparsować (błędny znacznik czasu = 422)."""
    script = await load_script(db, current_user, script_id)
    # Walidacja znaczników; zasób zastępczy, bo media nie są jeszcze wybrane
    scenes = list(SceneSequence(script.content, ["-"], settings.SCENE_DURATION_SECONDS))
    if not scenes:
        raise ValidationError("Skrypt nie zawiera żadnej sceny ze znacznikiem czasu")

    script.status = ScriptStatus.APPROVED
    db.add(script)
    await db.flush()
    await db.refresh(script)
    return script


@router.post("/{script_id}/scenes", response_model=list[SceneResponse])
async def preview_scenes(
    script_id: uuid.UUID,
    body: ScenePreviewRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Podgląd podziału na sceny dla wybranej listy mediów."""
    script = await load_script(db, current_user, script_id)
    return [
        SceneResponse.model_validate(scene)
        for scene in SceneSequence(script.content, body.assets, settings.SCENE_DURATION_SECONDS)
    ]
