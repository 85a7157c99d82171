"""Declarative base and shared column mixins."""

import uuid
from datetime import datetime, UTC
from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def utcnow() -> datetime:
    return datetime.now(UTC)


def new_document_id() -> str:
    """Opaque document id, same shape for every collection"""
    return uuid.uuid4().hex


class Base(DeclarativeBase):
    pass


class TimestampMixin:
    """created_at / updated_at maintained by SQLAlchemy"""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
