import logging
from typing import Optional
from sqlalchemy.orm import Session

from showmate.core.exceptions import ForbiddenException, NotFoundException
from showmate.models.notification import Notification
from showmate.models.project_membership import ProjectMemberStatus
from showmate.repositories.notification_repository import NotificationRepository
from showmate.repositories.project_membership_repository import ProjectMembershipRepository
from showmate.repositories.user_repository import UserRepository
from showmate.schemas.notification_context import ProjectInviteContext, parse_context
from showmate.services.best_effort import best_effort
from showmate.services.email_service import EmailService
from showmate.services.invitation_service import InvitationService

logger = logging.getLogger(__name__)


class NotificationResponseHandler:
    """Applies a recipient's accept/decline answer to an invitation"""

    def __init__(
        self,
        db: Session,
        email_service: EmailService,
        *,
        notification_repo: Optional[NotificationRepository] = None,
        membership_repo: Optional[ProjectMembershipRepository] = None,
        invitation_service: Optional[InvitationService] = None,
    ):
        self.db = db
        self.notification_repo = notification_repo or NotificationRepository(db)
        self.membership_repo = membership_repo or ProjectMembershipRepository(db)
        self.invitation_service = invitation_service or InvitationService(
            db, email_service, membership_repo=self.membership_repo
        )
        self.user_repo = UserRepository(db)

    def respond(self, notification_id: str, accepted: bool, acting_user_id: str) -> Notification:
        """
        Record the answer and move the membership accordingly.

        Accepting approves the membership. Declining declines it, sends a
        refusal notice to the inviter and emails them. A missing membership
        (e.g. already removed) skips the transition without error.

        A notification that was already answered is returned unchanged:
        the first answer stands, so the mailbox keeps matching the
        membership.

        Raises:
            NotFoundException: If the notification does not exist
            ForbiddenException: If the notification is addressed to someone else
        """
        notification = self.notification_repo.get_by_id(notification_id)
        if notification is None:
            raise NotFoundException("Notification not found")
        if notification.user_id != acting_user_id:
            raise ForbiddenException("This notification is addressed to another user")

        if notification.responded:
            return notification

        notification = self.notification_repo.mark_as_read_and_responded(notification.id, accepted)
        if not notification.type.is_actionable:
            return notification

        context: ProjectInviteContext = parse_context(notification.type, notification.context)

        if accepted:
            membership = self.membership_repo.update(
                context.project_id, acting_user_id, status=ProjectMemberStatus.APPROVED
            )
        else:
            membership = self.membership_repo.update(
                context.project_id, acting_user_id, status=ProjectMemberStatus.DECLINED
            )
            with best_effort(self.db, "notify inviter of refusal", notification_id=notification.id):
                self._fan_out_refusal(notification, context, acting_user_id)

        if membership is None:
            logger.info(
                "No membership for user %s in project %s, status transition skipped",
                acting_user_id, context.project_id,
            )

        return notification

    def _fan_out_refusal(self, notification: Notification, context: ProjectInviteContext, decliner_id: str) -> None:
        inviter = self.user_repo.get_by_id(context.invited_by)
        if inviter is None:
            logger.warning("Inviter %s not found, refusal of %s not forwarded", context.invited_by, notification.id)
            return
        decliner = self.user_repo.get_by_id(decliner_id)
        self.invitation_service.notify_inviter_of_refusal(
            inviter=inviter,
            invited_user_name=decliner.full_name if decliner else decliner_id,
            project_id=context.project_id,
            project_name=self.invitation_service.project_name_for(context.project_id),
            invite_id=notification.id,
            refused_by=decliner_id,
        )
