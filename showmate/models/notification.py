"""Notification mailbox entry."""

from datetime import datetime
from enum import Enum as PyEnum
from sqlalchemy import String, Text, Boolean, DateTime, Enum, JSON, Index
from sqlalchemy.orm import Mapped, mapped_column

from showmate.models.base import Base, new_document_id, utcnow


class NotificationType(str, PyEnum):
    """Notification type enumeration"""

    PROJECT_INVITE = "project_invite"  # actionable: accept / decline
    PROJECT_INVITE_ACCEPTED = "project_invite_accepted"
    INVITATION_REFUSED = "invitation_refused"
    PROJECT_MEMBER_ADDED = "project_member_added"
    PROJECT_REMOVED_FROM = "project_removed_from"
    PROJECT_DELETED = "project_deleted"

    @property
    def is_actionable(self) -> bool:
        return self is NotificationType.PROJECT_INVITE


class Notification(Base):
    """
    Mailbox entry addressed to one user.

    `context` holds the type-specific payload (see
    showmate.schemas.notification_context); `project_id` is copied out
    of it so notifications about a project can be queried and purged.

    For PROJECT_INVITE, responded=False means the invitation still
    awaits the recipient's decision.
    """

    __tablename__ = "notifications"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_document_id)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    type: Mapped[NotificationType] = mapped_column(
        Enum(NotificationType, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    message: Mapped[str] = mapped_column(Text, nullable=False)
    context: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    project_id: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    responded: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    accepted: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    responded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_notifications_user_project_type", "user_id", "project_id", "type"),
    )

    def __repr__(self) -> str:
        return f"<Notification(id='{self.id}', user_id='{self.user_id}', type={self.type.value})>"
