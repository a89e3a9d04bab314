"""
Model pojedynczego wideo.
State machine: pending → processing → {ready, failed}; ready → published.
"""

import uuid
from datetime import datetime
from enum import StrEnum

from sqlalchemy import DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shortstudio.models.base import BaseModel, JSONType


class VideoStatus(StrEnum):
    PENDING = "pending"
    PROCESSING = "processing"
    READY = "ready"
    PUBLISHED = "published"
    FAILED = "failed"


VIDEO_TRANSITIONS: dict[str, set[str]] = {
    VideoStatus.PENDING: {VideoStatus.PROCESSING, VideoStatus.FAILED},
    VideoStatus.PROCESSING: {VideoStatus.READY, VideoStatus.FAILED},
    VideoStatus.READY: {VideoStatus.PUBLISHED},
    VideoStatus.PUBLISHED: set(),
    VideoStatus.FAILED: set(),
}


def can_transition(current: str, target: str) -> bool:
    return target in VIDEO_TRANSITIONS.get(current, set())


class Video(BaseModel):
    __tablename__ = "videos"

    series_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("series.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    script_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("scripts.id", ondelete="SET NULL"),
        nullable=True,
    )

    # Treść
    title: Mapped[str] = mapped_column(String(500), default="")
    description: Mapped[str] = mapped_column(Text, default="")
    tags: Mapped[list[str]] = mapped_column(JSONType, default=list)
    platform: Mapped[str] = mapped_column(String(20), nullable=False)

    # Status pipeline
    status: Mapped[str] = mapped_column(String(20), default=VideoStatus.PENDING, index=True)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Wybrane media (URL-e w kolejności użycia)
    media_assets: Mapped[list[str]] = mapped_column(JSONType, default=list)

    # Lektor: obiekt w storage należy do wideo do czasu jego usunięcia
    voiceover_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    voiceover_key: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Rendering: identyfikator zadania i URL gotowego pliku to osobne pola
    render_job_id: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    video_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    thumbnail_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    published_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Relacje
    series = relationship("Series", back_populates="videos")
    script = relationship("Script")
    publish_jobs = relationship(
        "PublishJob", back_populates="video", cascade="all, delete-orphan"
    )
    schedules = relationship(
        "Schedule", back_populates="video", cascade="all, delete-orphan"
    )

    def target_platforms(self) -> list[str]:
        from shortstudio.models.series import Platform

        return Platform(self.platform).targets()
