"""Staff account ORM model."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Enum, String
from sqlalchemy.orm import Mapped, mapped_column

from qrmenu.db.base import Base

USER_ROLES = ("ADMIN", "MANAGER", "SERVER")
USER_ROLE_ALIASES: dict[str, str] = {
    "ADMINISTRATOR": "ADMIN",
    "WAITER": "SERVER",
    "STAFF": "SERVER",
}


def normalize_user_role(value: str | None) -> str:
    """Return canonical upper-case role or raise ValueError."""
    normalized = str(value or "").strip().upper()
    normalized = USER_ROLE_ALIASES.get(normalized, normalized)
    if normalized not in USER_ROLES:
        raise ValueError(f"Unknown role: {value}")
    return normalized


class User(Base):
    """Staff account used for dashboard and API login."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    username: Mapped[str] = mapped_column(String(128), nullable=False, unique=True, index=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(Enum(*USER_ROLES, name="user_role"), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
