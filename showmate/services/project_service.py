import logging
from sqlalchemy.orm import Session

from showmate.core.exceptions import NotFoundException, ValidationException
from showmate.emails.templates import EmailType
from showmate.repositories.event_repository import EventRepository
from showmate.repositories.message_repository import MessageRepository
from showmate.repositories.notification_repository import NotificationRepository
from showmate.repositories.post_repository import PostRepository
from showmate.repositories.project_membership_repository import ProjectMembershipRepository
from showmate.repositories.project_repository import ProjectRepository
from showmate.repositories.user_repository import UserRepository
from showmate.services.best_effort import best_effort
from showmate.services.email_service import EmailService
from showmate.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

DELETED_PROJECT_NAME = "Projet supprimé"


class ProjectService:
    """Service layer for project teardown"""

    def __init__(self, db: Session, email_service: EmailService):
        self.db = db
        self.email_service = email_service
        self.project_repo = ProjectRepository(db)
        self.membership_repo = ProjectMembershipRepository(db)
        self.notification_repo = NotificationRepository(db)
        self.notification_service = NotificationService(db, self.notification_repo)
        self.event_repo = EventRepository(db)
        self.post_repo = PostRepository(db)
        self.message_repo = MessageRepository(db)
        self.user_repo = UserRepository(db)

    def delete_project(self, project_id: str) -> list[str]:
        """
        Delete a project and everything referencing it, then tell its members.

        Order: sub-resources, memberships, notifications, then the project
        document, so a crash midway never leaves children pointing at a
        deleted project. Each step is its own write; there is no enclosing
        transaction.

        Args:
            project_id: Project ID

        Returns:
            uids of the former members

        Raises:
            ValidationException: If project_id is missing
            NotFoundException: If the project does not exist
        """
        if not project_id:
            raise ValidationException("projectId is required")

        project = self.project_repo.get_by_id(project_id)
        if project is None:
            raise NotFoundException("Project not found")
        project_name = project.project_name or DELETED_PROJECT_NAME

        user_ids = list(dict.fromkeys(m.user_id for m in self.membership_repo.find_project_members(project_id)))

        events = self.event_repo.delete_by_project(project_id)
        posts = self.post_repo.delete_by_project(project_id)
        messages = self.message_repo.delete_by_project(project_id)
        memberships = self.membership_repo.delete_by_project(project_id)
        notifications = self.notification_repo.delete_by_project(project_id)
        self.project_repo.delete(project)
        logger.info(
            "Project %s deleted (%d events, %d posts, %d messages, %d memberships, %d notifications)",
            project_id, events, posts, messages, memberships, notifications,
        )

        for user_id in user_ids:
            with best_effort(self.db, "notify member of project deletion", user_id=user_id, project_id=project_id):
                self.notification_service.create_project_deleted_notification(user_id, project_id, project_name)
                user = self.user_repo.get_by_id(user_id)
                if user is not None:
                    self.email_service.send_transactional_email(
                        EmailType.PROJECT_DELETED,
                        user.email,
                        {"first_name": user.greeting_name, "project_name": project_name},
                    )

        return user_ids
