"""
Shared SQLAlchemy base and mixins for Chirpy.

- TimestampMixin: created_at / updated_at set by the database
- BaseModel: adds a UUID String(36) primary key

Timestamps are UTC.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


def _uuid_str() -> str:
    """Return a canonical UUIDv4 string (36 chars, with hyphens)."""
    return str(uuid.uuid4())


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin:
    # set client-side: CURRENT_TIMESTAMP on SQLite only has second precision
    created_at = Column(DateTime(timezone=True), default=_utc_now, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utc_now, onupdate=_utc_now, nullable=False)


class BaseModel(TimestampMixin):
    """
    Base mixin for models keyed by a UUID string.
    Accepts column values as kwargs and assigns an id when none is given.
    """

    id = Column(String(36), primary_key=True, default=_uuid_str, nullable=False)

    def __init__(self, **kwargs):
        for key, value in kwargs.items():
            setattr(self, key, value)
        if getattr(self, "id", None) is None:
            self.id = _uuid_str()

    def __str__(self) -> str:
        return f"[{self.__class__.__name__}] ({self.id})"
