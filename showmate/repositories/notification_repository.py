from typing import Optional
from sqlalchemy.orm import Session

from showmate.models.base import utcnow
from showmate.models.notification import Notification, NotificationType


class NotificationRepository:
    """Repository for Notification (mailbox) data access"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, notification: Notification) -> Notification:
        """
        Append a notification.

        Returns the persisted record with its generated id and resolved
        created_at.
        """
        self.db.add(notification)
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def get_by_id(self, notification_id: str) -> Optional[Notification]:
        """Get notification by ID"""
        if not notification_id:
            return None
        return self.db.get(Notification, notification_id)

    def find(
        self,
        user_id: Optional[str] = None,
        project_id: Optional[str] = None,
        type: Optional[NotificationType] = None,
        responded: Optional[bool] = None,
    ) -> list[Notification]:
        """
        Query notifications with optional filters.

        Every filter left as None is ignored. Results are oldest first.
        """
        query = self.db.query(Notification)

        if user_id is not None:
            query = query.filter(Notification.user_id == user_id)
        if project_id is not None:
            query = query.filter(Notification.project_id == project_id)
        if type is not None:
            query = query.filter(Notification.type == type)
        if responded is not None:
            query = query.filter(Notification.responded == responded)

        return query.order_by(Notification.created_at).all()

    def find_live_invite(self, user_id: str, project_id: str) -> Optional[Notification]:
        """The unresponded project_invite for a (user, project) pair, if any"""
        matches = self.find(
            user_id=user_id,
            project_id=project_id,
            type=NotificationType.PROJECT_INVITE,
            responded=False,
        )
        return matches[0] if matches else None

    def list_for_user(self, user_id: str) -> list[Notification]:
        """A user's mailbox, newest first"""
        return (
            self.db.query(Notification)
            .filter(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc())
            .all()
        )

    def mark_as_read_and_responded(
        self, notification_id: str, accepted: bool
    ) -> Optional[Notification]:
        """
        Record the recipient's answer. Setting fixed values makes this
        naturally idempotent.

        Returns:
            Updated Notification, or None if not found
        """
        notification = self.get_by_id(notification_id)
        if notification is None:
            return None
        notification.read = True
        notification.responded = True
        notification.accepted = accepted
        notification.responded_at = utcnow()
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def mark_all_as_read(self, user_id: str) -> int:
        """Mark every unread notification of a user as read; returns the count"""
        count = (
            self.db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.read.is_(False))
            .update({Notification.read: True}, synchronize_session=False)
        )
        self.db.commit()
        return count

    def delete_by_project(self, project_id: str) -> int:
        """Batch delete every notification referencing a project"""
        count = (
            self.db.query(Notification)
            .filter(Notification.project_id == project_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return count
