"""Model użytkownika."""

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shortstudio.models.base import BaseModel, SoftDeleteMixin


class User(BaseModel, SoftDeleteMixin):
    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    hashed_password: Mapped[str | None] = mapped_column(String(255), nullable=True)
    full_name: Mapped[str] = mapped_column(String(255), default="")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)

    # Relacje
    series = relationship("Series", back_populates="user")
    api_key_set = relationship("ApiKeySet", back_populates="user", uselist=False)
    platform_connections = relationship("PlatformConnection", back_populates="user")
