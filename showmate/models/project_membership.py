"""Project membership model linking users to projects with a role."""

from datetime import datetime
from enum import Enum as PyEnum
from sqlalchemy import String, Boolean, DateTime, Enum, JSON
from sqlalchemy.orm import Mapped, mapped_column

from showmate.models.base import Base, TimestampMixin, new_document_id, utcnow
from showmate.models.permission import ProjectMemberPermission


class ProjectMemberStatus(str, PyEnum):
    """
    Status of one invite cycle.

    PENDING -> APPROVED | DECLINED. APPROVED/DECLINED may later become
    REMOVED, or go back to PENDING when the user is invited again.
    """

    PENDING = "pending"
    APPROVED = "approved"
    DECLINED = "declined"
    REMOVED = "removed"

    @property
    def is_active(self) -> bool:
        """Member, or still awaiting the user's answer"""
        return self in (ProjectMemberStatus.PENDING, ProjectMemberStatus.APPROVED)

    @property
    def is_terminal(self) -> bool:
        return not self.is_active


class ProjectMembership(Base, TimestampMixin):
    """
    One user's participation in one project.

    Contact fields (firstname ... photo_url) are copied from the user
    profile at invite time so team listings need no join.

    Constraints:
    - At most one active membership per (project_id, user_id). This is
      checked by the invitation flow before writing, not by the table:
      two concurrent invites can both pass the check.
    """

    __tablename__ = "project_memberships"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_document_id)
    project_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    role: Mapped[str] = mapped_column(String(255), nullable=False)
    permission: Mapped[ProjectMemberPermission] = mapped_column(
        Enum(ProjectMemberPermission, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=ProjectMemberPermission.VIEWER,
    )
    status: Mapped[ProjectMemberStatus] = mapped_column(
        Enum(ProjectMemberStatus, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=ProjectMemberStatus.PENDING,
    )
    invited_by: Mapped[str | None] = mapped_column(String(128), nullable=True)
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    left_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Scope of the role: whole project, or only the listed events
    is_global: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    event_ids: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)

    # Denormalized contact fields
    firstname: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    lastname: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    phone: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    photo_url: Mapped[str] = mapped_column(String(1024), nullable=False, default="")

    def __repr__(self) -> str:
        return (
            f"<ProjectMembership(project_id='{self.project_id}', user_id='{self.user_id}', "
            f"status={self.status.value})>"
        )
