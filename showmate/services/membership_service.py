import logging
from typing import Optional
from sqlalchemy.orm import Session

from showmate.core.exceptions import NotFoundException, ValidationException
from showmate.emails.templates import EmailType
from showmate.models.project_membership import ProjectMembership
from showmate.repositories.event_repository import EventRepository
from showmate.repositories.post_repository import PostRepository
from showmate.repositories.project_membership_repository import ProjectMembershipRepository
from showmate.repositories.project_repository import ProjectRepository
from showmate.repositories.user_repository import UserRepository
from showmate.services.best_effort import best_effort
from showmate.services.email_service import EmailService
from showmate.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


class MembershipService:
    """Team listing and member removal"""

    def __init__(
        self,
        db: Session,
        email_service: EmailService,
        *,
        membership_repo: Optional[ProjectMembershipRepository] = None,
        notification_service: Optional[NotificationService] = None,
    ):
        self.db = db
        self.email_service = email_service
        self.membership_repo = membership_repo or ProjectMembershipRepository(db)
        self.notification_service = notification_service or NotificationService(db)
        self.project_repo = ProjectRepository(db)
        self.user_repo = UserRepository(db)
        self.event_repo = EventRepository(db)
        self.post_repo = PostRepository(db)

    def list_project_members(self, project_id: str) -> list[ProjectMembership]:
        """
        Raises:
            NotFoundException: If the project does not exist
        """
        if self.project_repo.get_by_id(project_id) is None:
            raise NotFoundException("Project not found")
        return self.membership_repo.find_project_members(project_id)

    def remove_member(
        self,
        membership_id: str,
        user_id: str,
        project_id: str,
        project_name: str,
        removed_by: Optional[str] = None,
    ) -> bool:
        """
        Hard delete a membership and tell the removed user.

        Removing a membership that is already gone is a no-op: nothing is
        deleted and nobody is notified again.

        Returns:
            True if a membership was deleted

        Raises:
            ValidationException: If the membership belongs to another project or user
        """
        membership = self.membership_repo.get_by_id(membership_id)
        if membership is None:
            logger.info("Membership %s already absent, nothing to remove", membership_id)
            return False
        if membership.project_id != project_id or membership.user_id != user_id:
            raise ValidationException("Membership does not match the given project and user")

        recipient_email = membership.email
        if not self.membership_repo.delete_by_id(membership_id):
            return False
        logger.info("Membership %s of user %s removed from project %s", membership_id, user_id, project_id)

        with best_effort(self.db, "detach member from project resources", membership_id=membership_id):
            self.event_repo.detach_member_everywhere(project_id, membership_id)
            self.post_repo.remove_member_everywhere(project_id, membership_id)

        self.notification_service.create_project_removed_notification(
            user_id, project_id, project_name, removed_by
        )

        user = self.user_repo.get_by_id(user_id)
        self.email_service.send_transactional_email(
            EmailType.PROJECT_REMOVED,
            (user.email if user else None) or recipient_email,
            {"first_name": user.greeting_name if user else "", "project_name": project_name},
        )
        return True
