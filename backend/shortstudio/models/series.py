"""Model serii — powracający temat z ustalonym promptem i platformą docelową."""

import uuid
from enum import StrEnum

from sqlalchemy import ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shortstudio.models.base import BaseModel


class Platform(StrEnum):
    YOUTUBE = "youtube"
    TIKTOK = "tiktok"
    BOTH = "both"

    def targets(self) -> list[str]:
        """Konkretne platformy publikacji (bez wartości zbiorczej `both`)."""
        if self is Platform.BOTH:
            return [Platform.YOUTUBE.value, Platform.TIKTOK.value]
        return [self.value]


PUBLISH_PLATFORMS = (Platform.YOUTUBE.value, Platform.TIKTOK.value)


class SeriesStatus(StrEnum):
    ACTIVE = "active"
    PAUSED = "paused"
    ARCHIVED = "archived"


class Series(BaseModel):
    __tablename__ = "series"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Niezmienne po utworzeniu
    platform: Mapped[str] = mapped_column(String(20), default=Platform.YOUTUBE, nullable=False)
    topic: Mapped[str] = mapped_column(Text, nullable=False)

    content_prompt: Mapped[str] = mapped_column(Text, default="")
    status: Mapped[str] = mapped_column(String(20), default=SeriesStatus.ACTIVE, index=True)

    # Relacje
    user = relationship("User", back_populates="series")
    scripts = relationship("Script", back_populates="series")
    videos = relationship("Video", back_populates="series")

    @property
    def is_archived(self) -> bool:
        return self.status == SeriesStatus.ARCHIVED
