"""
SQLAlchemy ORM models for the identity store.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import Column, DateTime, String, Uuid
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    user_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    username = Column(String(64), unique=True, nullable=False, index=True)
    email = Column(String(255), nullable=True)
    display_name = Column(String(128))
    password_hash = Column(String(255), nullable=False, default="")
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    def to_public(self) -> Dict[str, Any]:
        """Profile as returned by the API (no credential material)."""
        created = self.created_at
        # SQLite hands back naive datetimes; stored values are always UTC
        if created is not None and created.tzinfo is None:
            created = created.replace(tzinfo=timezone.utc)
        return {
            "id": str(self.user_id),
            "username": self.username,
            "email": self.email,
            "display_name": self.display_name,
            "created_at": created.isoformat() if created else None,
        }
