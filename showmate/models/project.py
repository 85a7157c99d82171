"""Project and its sub-resource collections (events, posts, messages)."""

from datetime import datetime
from sqlalchemy import String, Integer, Text, DateTime, JSON
from sqlalchemy.orm import Mapped, mapped_column

from showmate.models.base import Base, TimestampMixin, new_document_id


class Project(Base, TimestampMixin):
    """
    A live-event production project.

    Memberships, events, posts, messages and notifications reference the
    project by id only. There are no foreign keys: teardown of everything
    that points at a project is done explicitly by the deletion flow.
    """

    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_document_id)
    project_name: Mapped[str] = mapped_column(String(255), nullable=False)
    owner_id: Mapped[str | None] = mapped_column(String(128), nullable=True)

    def __repr__(self) -> str:
        return f"<Project(id='{self.id}', project_name='{self.project_name}')>"


class Event(Base, TimestampMixin):
    """Scheduled event of a project; `members` holds membership ids"""

    __tablename__ = "events"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_document_id)
    project_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    starts_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    ends_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    members: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)


class Post(Base, TimestampMixin):
    """
    Role assignment shown on the project board.

    Display aggregation only; membership state lives on ProjectMembership.
    """

    __tablename__ = "posts"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_document_id)
    project_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    role_id: Mapped[str] = mapped_column(String(128), nullable=False)
    label: Mapped[str] = mapped_column(String(255), nullable=False)
    icon: Mapped[str | None] = mapped_column(String(255), nullable=True)
    category: Mapped[str | None] = mapped_column(String(255), nullable=True)
    priority: Mapped[int | None] = mapped_column(Integer, nullable=True)
    members: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)


class Message(Base, TimestampMixin):
    """Project chat message"""

    __tablename__ = "messages"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_document_id)
    project_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    author_id: Mapped[str] = mapped_column(String(128), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False, default="")
