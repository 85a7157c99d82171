from typing import Optional
from sqlalchemy.orm import Session

from showmate.models.notification import Notification, NotificationType
from showmate.models.user import User
from showmate.repositories.notification_repository import NotificationRepository
from showmate.schemas.notification_context import parse_context


class NotificationService:
    """Builds and stores typed mailbox entries"""

    def __init__(self, db: Session, notification_repo: Optional[NotificationRepository] = None):
        self.db = db
        self.repo = notification_repo or NotificationRepository(db)

    def create(
        self, user_id: str, type: NotificationType, message: str, context: dict
    ) -> Notification:
        """
        Validate the context for the notification type and store the entry.

        Raises:
            ValidationException: If the context does not fit the type
        """
        typed_context = parse_context(type, context)
        notification = Notification(
            user_id=user_id,
            type=type,
            message=message,
            context=typed_context.model_dump(),
            project_id=typed_context.project_id,
            read=False,
            responded=False,
        )
        return self.repo.create(notification)

    def create_project_invite_notification(
        self, invitee_id: str, project_id: str, project_name: str, role_label: str, invited_by: str
    ) -> Notification:
        return self.create(
            invitee_id,
            NotificationType.PROJECT_INVITE,
            f'Vous avez été invité(e) à rejoindre le projet "{project_name}" en tant que {role_label}.',
            {"project_id": project_id, "invited_by": invited_by, "role": role_label},
        )

    def create_member_added_notification(
        self, user_id: str, project_id: str, project_name: str, added_by: str
    ) -> Notification:
        return self.create(
            user_id,
            NotificationType.PROJECT_MEMBER_ADDED,
            f'Vous avez été ajouté au projet "{project_name}".',
            {"project_id": project_id, "added_by": added_by},
        )

    def create_invite_accepted_notification(
        self, inviter_id: str, accepter: Optional[User], accepter_id: str, project_id: str, project_name: str
    ) -> Notification:
        accepter_name = accepter.full_name if accepter else accepter_id
        return self.create(
            inviter_id,
            NotificationType.PROJECT_INVITE_ACCEPTED,
            f'{accepter_name} a accepté votre invitation pour rejoindre le projet "{project_name}".',
            {"project_id": project_id, "accepted_by": accepter_id},
        )

    def create_invitation_refused_notification(
        self,
        inviter_id: str,
        invited_user_name: str,
        project_id: str,
        project_name: str,
        invite_id: Optional[str] = None,
        refused_by: Optional[str] = None,
    ) -> Notification:
        return self.create(
            inviter_id,
            NotificationType.INVITATION_REFUSED,
            f'{invited_user_name} a refusé votre invitation au projet "{project_name}".',
            {"project_id": project_id, "invite_id": invite_id, "refused_by": refused_by},
        )

    def create_project_removed_notification(
        self, user_id: str, project_id: str, project_name: str, removed_by: Optional[str]
    ) -> Notification:
        return self.create(
            user_id,
            NotificationType.PROJECT_REMOVED_FROM,
            f'Vous avez été retiré du projet "{project_name}".',
            {"project_id": project_id, "removed_by": removed_by},
        )

    def create_project_deleted_notification(
        self, user_id: str, project_id: str, project_name: str
    ) -> Notification:
        return self.create(
            user_id,
            NotificationType.PROJECT_DELETED,
            f'Le projet "{project_name}" a été supprimé.',
            {"project_id": project_id},
        )

    def list_user_notifications(self, user_id: str) -> list[Notification]:
        """Recipient's mailbox, newest first"""
        return self.repo.list_for_user(user_id)

    def mark_all_as_read(self, user_id: str) -> int:
        return self.repo.mark_all_as_read(user_id)
