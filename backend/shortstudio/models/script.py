"""Model skryptu — tekst narracji ze znacznikami czasu dla jednego wideo."""

import uuid
from enum import StrEnum

from sqlalchemy import ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shortstudio.models.base import BaseModel


class ScriptStatus(StrEnum):
    DRAFT = "draft"
    APPROVED = "approved"


class Script(BaseModel):
    __tablename__ = "scripts"

    series_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("series.id", ondelete="CASCADE"), nullable=False, index=True
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=ScriptStatus.DRAFT)
    model_id: Mapped[str] = mapped_column(String(100), default="")
    generation_prompt: Mapped[str] = mapped_column(Text, default="")

    series = relationship("Series", back_populates="scripts")

    @property
    def is_approved(self) -> bool:
        return self.status == ScriptStatus.APPROVED
