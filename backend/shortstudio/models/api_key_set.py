"""
Zestaw kluczy API użytkownika — jeden rekord na użytkownika,
mapowanie dostawca → zakodowany sekret. Zapis nadpisuje całość.
"""

import uuid

from sqlalchemy import ForeignKey, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shortstudio.models.base import BaseModel, JSONType


class ApiKeySet(BaseModel):
    __tablename__ = "api_keys"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    keys: Mapped[dict[str, str]] = mapped_column(JSONType, default=dict)

    user = relationship("User", back_populates="api_key_set")

    def __repr__(self) -> str:
        return f"<ApiKeySet user_id={self.user_id} providers={sorted(self.keys or {})}>"
