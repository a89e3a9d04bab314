"""Harmonogram publikacji — jedno wideo, jedna seria, zbiór platform."""

import uuid
from datetime import datetime
from enum import StrEnum
from typing import Any

from sqlalchemy import DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shortstudio.models.base import BaseModel, JSONType


class ScheduleStatus(StrEnum):
    SCHEDULED = "scheduled"
    RUNNING = "running"
    PUBLISHED = "published"
    FAILED = "failed"


class Schedule(BaseModel):
    __tablename__ = "schedules"

    video_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("videos.id", ondelete="CASCADE"), nullable=False, index=True
    )
    series_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("series.id", ondelete="CASCADE"), nullable=False, index=True
    )
    scheduled_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    platforms: Mapped[list[str]] = mapped_column(JSONType, default=list)
    status: Mapped[str] = mapped_column(String(20), default=ScheduleStatus.SCHEDULED, index=True)

    # Wynik per platforma: {"youtube": {"ok": true, ...}, "tiktok": {"ok": false, "error": "..."}}
    results: Mapped[dict[str, Any]] = mapped_column(JSONType, default=dict)

    video = relationship("Video", back_populates="schedules")
