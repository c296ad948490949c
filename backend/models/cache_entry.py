"""
DB model for the key/value cache (one row per key, latest write wins).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class CacheEntry(Base):
    """Disposable memo of an upstream answer; visible while expires_at > now."""

    __tablename__ = "cache"

    key: Mapped[str] = mapped_column(Text, primary_key=True)
    value: Mapped[Any] = mapped_column(JSON, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
