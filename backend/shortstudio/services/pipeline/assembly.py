"""
Orkiestrator montażu wideo.

Prowadzi Video od `pending` do stanu końcowego:
  skrypt (zatwierdzony) + media → lektor → storage → sceny → timeline → render
  → status renderu → publikacja na platformach.

Adaptery są wstrzykiwane, orkiestrator nie zna ich wariantów. Każda porażka
adaptera kończy się `failed` + komunikatem dostawcy w `error_message`.
"""

import asyncio
import uuid
from collections.abc import Mapping
from dataclasses import dataclass

import httpx
import structlog
from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import BotoCoreError, ClientError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shortstudio.core.config import get_settings
from shortstudio.core.exceptions import NotFound, PreconditionFailed, StudioError, ValidationError
from shortstudio.models.base import utcnow
from shortstudio.models.publish_job import PublishJob, PublishStatus
from shortstudio.models.script import Script
from shortstudio.models.series import PUBLISH_PLATFORMS, Series
from shortstudio.models.video import Video, VideoStatus, can_transition
from shortstudio.services.credentials.store import CredentialStore
from shortstudio.services.providers.base import CredentialLookup
from shortstudio.services.publishing.base import Publisher, PublishRequest, get_publisher
from shortstudio.services.publishing.oauth_exchange import connection_token_lookup
from shortstudio.services.scripts.parser import SceneSequence, narration_text
from shortstudio.services.tts.tts_service import VoiceSynthesizer
from shortstudio.services.video.renderer import RenderService, RenderState, RenderStatus
from shortstudio.services.video.storage import StorageService
from shortstudio.services.video.timeline import build_timeline

settings = get_settings()
logger = structlog.get_logger()


@dataclass(frozen=True)
class AssemblyOutcome:
    video_id: uuid.UUID
    status: str
    render_job_id: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class PublishOutcome:
    platform: str
    status: str
    content_id: str | None = None
    url: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == PublishStatus.PUBLISHED

    def as_dict(self) -> dict:
        return {
            "ok": self.ok,
            "status": self.status,
            "content_id": self.content_id,
            "url": self.url,
            "error": self.error,
        }


class _StepFailed(Exception):
    """Wewnętrzny sygnał: krok pipeline'u nie powiódł się, komunikat trafia do wideo."""


def render_callback_url() -> str | None:
    if not settings.RENDER_CALLBACK_ENABLED:
        return None
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}{settings.API_V1_PREFIX}/webhooks/render"


async def video_owner(session: AsyncSession, video_id: uuid.UUID) -> uuid.UUID:
    """Właściciel wideo (przez serię) — zadania w tle działają na jego kluczach."""
    result = await session.execute(
        select(Series.user_id).join(Video, Video.series_id == Series.id).where(Video.id == video_id)
    )
    user_id = result.scalar_one_or_none()
    if user_id is None:
        raise NotFound(f"Wideo {video_id} nie istnieje")
    return user_id


class VideoAssembler:
    def __init__(
        self,
        session: AsyncSession,
        credentials: CredentialLookup,
        voice: VoiceSynthesizer,
        renderer: RenderService,
        storage: StorageService,
        publishers: Mapping[str, Publisher],
        scene_duration: int | None = None,
        callback_url: str | None = None,
    ):
        self.session = session
        self.credentials = credentials
        self.voice = voice
        self.renderer = renderer
        self.storage = storage
        self.publishers = publishers
        self.scene_duration = scene_duration or settings.SCENE_DURATION_SECONDS
        self.callback_url = callback_url

    @classmethod
    def for_user(
        cls,
        session: AsyncSession,
        user_id: uuid.UUID,
        http_client: httpx.AsyncClient | None = None,
    ) -> "VideoAssembler":
        """Domyślne okablowanie: klucze użytkownika, prawdziwe adaptery, publisher wg PUBLISHER_MODE."""
        credentials = CredentialStore(session).lookup(user_id)
        tokens = connection_token_lookup(session, user_id, http_client)
        return cls(
            session=session,
            credentials=credentials,
            voice=VoiceSynthesizer(http_client=http_client),
            renderer=RenderService(http_client=http_client),
            storage=StorageService(),
            publishers={
                platform: get_publisher(
                    platform, credentials=credentials, tokens=tokens, http_client=http_client
                )
                for platform in PUBLISH_PLATFORMS
            },
            callback_url=render_callback_url(),
        )

    async def _video(self, video_id: uuid.UUID) -> Video:
        video = await self.session.get(Video, video_id)
        if video is None:
            raise NotFound(f"Wideo {video_id} nie istnieje")
        return video

    async def _transition(self, video: Video, target: VideoStatus, error: str | None = None) -> None:
        if not can_transition(video.status, target):
            raise PreconditionFailed(f"Niedozwolone przejście statusu: {video.status} → {target}")
        logger.info("Zmiana statusu wideo", video_id=str(video.id), old=video.status, new=str(target))
        video.status = target
        video.error_message = error
        if target == VideoStatus.PUBLISHED:
            video.published_at = utcnow()
        self.session.add(video)
        await self.session.commit()

    # ── Montaż ──

    async def assemble(self, video_id: uuid.UUID) -> AssemblyOutcome:
        video = await self._video(video_id)
        if video.status != VideoStatus.PENDING:
            raise PreconditionFailed(f"Montaż możliwy tylko dla wideo w stanie pending (jest: {video.status})")

        script = await self.session.get(Script, video.script_id) if video.script_id else None
        if script is None or not script.is_approved:
            raise PreconditionFailed("Skrypt musi być zatwierdzony przed montażem")
        if not video.media_assets:
            raise ValidationError("Wideo nie ma wybranych mediów")

        await self._transition(video, VideoStatus.PROCESSING)
        try:
            job_id = await self._run_assembly(video, script)
        except (_StepFailed, StudioError) as exc:
            message = str(exc)
            logger.warning("Montaż nieudany", video_id=str(video.id), error=message)
            await self._transition(video, VideoStatus.FAILED, error=message)
            return AssemblyOutcome(video_id=video.id, status=video.status, error=message)

        return AssemblyOutcome(video_id=video.id, status=video.status, render_job_id=job_id)

    async def _run_assembly(self, video: Video, script: Script) -> str:
        scenes = list(SceneSequence(script.content, video.media_assets, self.scene_duration))
        if not scenes:
            raise ValidationError("Skrypt nie zawiera żadnej sceny ze znacznikiem czasu")

        narration = narration_text(scenes)
        if not narration:
            raise ValidationError("Skrypt nie zawiera narracji")

        # Lektor: jedna ścieżka dla całego wideo
        audio = await self.voice.synthesize(self.credentials, narration)
        if not audio.ok:
            raise _StepFailed(str(audio.error))

        key = StorageService.voiceover_key(video.id)
        try:
            voiceover_url = await asyncio.to_thread(self.storage.upload_bytes, audio.value, key, "audio/mpeg")
        except (BotoCoreError, ClientError, S3UploadFailedError) as exc:
            raise _StepFailed(f"Zapis lektora nie powiódł się: {exc}") from exc

        video.voiceover_key = key
        video.voiceover_url = voiceover_url
        self.session.add(video)
        await self.session.commit()

        edit = build_timeline(scenes, voiceover_url, callback_url=self.callback_url)
        job = await self.renderer.submit(self.credentials, edit)
        if not job.ok:
            raise _StepFailed(str(job.error))

        video.render_job_id = job.value.job_id
        self.session.add(video)
        await self.session.commit()

        logger.info("Render zlecony", video_id=str(video.id), job_id=job.value.job_id, scenes=len(scenes))
        return job.value.job_id

    # ── Status renderu ──

    async def apply_render_status(self, video_id: uuid.UUID, status: RenderStatus) -> bool:
        """
        Nanosi raport o renderze. Zwraca True tylko przy faktycznej zmianie stanu;
        powtórzony lub nieaktualny raport nic nie zmienia.
        """
        video = await self._video(video_id)

        if status.job_id and video.render_job_id and status.job_id != video.render_job_id:
            logger.info("Raport dla innego zadania renderu", video_id=str(video_id), job_id=status.job_id)
            return False
        if status.state == RenderState.PROCESSING:
            return False

        target = VideoStatus.READY if status.state == RenderState.READY else VideoStatus.FAILED
        if not can_transition(video.status, target):
            return False

        if target == VideoStatus.READY and not status.url:
            await self._transition(video, VideoStatus.FAILED, error="Render zakończony bez adresu pliku")
            return True

        if target == VideoStatus.READY:
            video.video_url = status.url
            video.thumbnail_url = status.thumbnail_url
            await self._transition(video, VideoStatus.READY)
        else:
            await self._transition(video, VideoStatus.FAILED, error=status.error or "Render nie powiódł się")
        return True

    async def refresh_render_status(self, video_id: uuid.UUID) -> Video:
        """Jednorazowe odpytanie serwisu renderującego. Błąd odpytania nie zmienia stanu."""
        video = await self._video(video_id)
        if video.status != VideoStatus.PROCESSING:
            return video
        if not video.render_job_id:
            raise PreconditionFailed("Wideo nie ma zleconego renderu")

        polled = await self.renderer.status(self.credentials, video.render_job_id)
        if not polled.ok:
            logger.warning("Odpytanie renderu nieudane", video_id=str(video_id), error=str(polled.error))
            return video

        await self.apply_render_status(video_id, polled.value)
        return video

    async def mark_failed(self, video_id: uuid.UUID, message: str) -> bool:
        video = await self._video(video_id)
        if not can_transition(video.status, VideoStatus.FAILED):
            return False
        await self._transition(video, VideoStatus.FAILED, error=message)
        return True

    # ── Publikacja ──

    async def publish(
        self,
        video_id: uuid.UUID,
        platforms: list[str] | None = None,
    ) -> dict[str, PublishOutcome]:
        """
        Publikuje gotowe wideo na wskazanych platformach (domyślnie platformy wideo).
        Wynik per platforma; częściowy sukces jest stanem poprawnym. Platforma już
        opublikowana nie jest publikowana ponownie.
        """
        video = await self._video(video_id)
        if video.status not in (VideoStatus.READY, VideoStatus.PUBLISHED):
            raise PreconditionFailed(f"Publikacja wymaga gotowego wideo (jest: {video.status})")
        if not video.video_url:
            raise PreconditionFailed("Wideo nie ma adresu wyrenderowanego pliku")

        targets = list(dict.fromkeys(platforms or video.target_platforms()))
        unknown = [p for p in targets if p not in PUBLISH_PLATFORMS or p not in self.publishers]
        if not targets or unknown:
            raise ValidationError(f"Nieobsługiwane platformy: {', '.join(unknown) or '-'}")

        series = await self.session.get(Series, video.series_id)
        result = await self.session.execute(select(PublishJob).where(PublishJob.video_id == video.id))
        jobs = {job.platform: job for job in result.scalars().all()}

        outcomes: dict[str, PublishOutcome] = {}
        for platform in targets:
            job = jobs.get(platform)
            if job is None:
                job = PublishJob(video_id=video.id, platform=platform, status=PublishStatus.PENDING, attempts=0)
                jobs[platform] = job

            if job.status != PublishStatus.PUBLISHED:
                await self._publish_one(video, series, job)
            outcomes[platform] = PublishOutcome(
                platform=platform,
                status=job.status,
                content_id=job.platform_content_id,
                url=job.platform_url,
                error=job.error_message,
            )

        done = all(
            jobs.get(p) is not None and jobs[p].status == PublishStatus.PUBLISHED
            for p in video.target_platforms()
        )
        if done and can_transition(video.status, VideoStatus.PUBLISHED):
            await self._transition(video, VideoStatus.PUBLISHED)
        else:
            await self.session.commit()

        logger.info(
            "Publikacja zakończona",
            video_id=str(video.id),
            results={p: o.status for p, o in outcomes.items()},
        )
        return outcomes

    async def _publish_one(self, video: Video, series: Series, job: PublishJob) -> None:
        job.status = PublishStatus.UPLOADING
        job.attempts = (job.attempts or 0) + 1
        job.error_message = None
        self.session.add(job)
        await self.session.flush()

        request = PublishRequest(
            user_id=series.user_id,
            platform=job.platform,
            video_url=video.video_url,
            title=video.title,
            description=video.description or "",
            tags=list(video.tags or []),
        )
        published = await self.publishers[job.platform].publish(request)

        if published.ok:
            job.status = PublishStatus.PUBLISHED
            job.platform_content_id = published.value.content_id
            job.platform_url = published.value.url
            job.published_at = utcnow()
        else:
            job.status = PublishStatus.FAILED
            job.error_message = str(published.error)
            logger.warning("Publikacja na platformie nieudana", platform=job.platform, error=job.error_message)
        self.session.add(job)
        await self.session.flush()

    # ── Usuwanie ──

    async def discard(self, video_id: uuid.UUID) -> None:
        """Usuwa wideo razem z należącym do niego plikiem lektora."""
        video = await self._video(video_id)
        if video.voiceover_key:
            try:
                await asyncio.to_thread(self.storage.delete_file, video.voiceover_key)
            except (BotoCoreError, ClientError) as exc:
                logger.warning("Nie udało się usunąć lektora", key=video.voiceover_key, error=str(exc))
        await self.session.delete(video)
        await self.session.flush()
