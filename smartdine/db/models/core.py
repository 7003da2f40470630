"""SQLAlchemy models backing the persisted profile slot."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from smartdine.db.base import Base


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class UserProfileRecord(Base):
    __tablename__ = "user_profiles"

    location: Mapped[str | None] = mapped_column(String(128))
    # Profile fields this service does not own, kept so merges never drop them.
    extra: Mapped[dict | None] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )


__all__ = ["UserProfileRecord"]
