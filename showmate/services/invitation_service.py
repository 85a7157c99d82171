import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode
from sqlalchemy.orm import Session

from showmate.config import settings
from showmate.core.exceptions import (
    ConflictException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from showmate.emails.templates import EmailType
from showmate.models.base import utcnow
from showmate.models.permission import ProjectMemberPermission
from showmate.models.project import Post
from showmate.models.project_membership import ProjectMembership, ProjectMemberStatus
from showmate.models.user import User
from showmate.repositories.event_repository import EventRepository
from showmate.repositories.notification_repository import NotificationRepository
from showmate.repositories.post_repository import PostRepository
from showmate.repositories.project_membership_repository import ProjectMembershipRepository
from showmate.repositories.project_repository import ProjectRepository
from showmate.repositories.user_repository import UserRepository
from showmate.schemas.project_schemas import InvitationRequest, RefusedInvitationRequest
from showmate.services.best_effort import best_effort
from showmate.services.email_service import EmailService
from showmate.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

DEFAULT_PROJECT_NAME = "Ce projet"


@dataclass
class InvitationResult:
    membership: ProjectMembership
    status: ProjectMemberStatus

    @property
    def message(self) -> str:
        if self.status == ProjectMemberStatus.PENDING:
            return "Invitation sent"
        return "Member added directly"


class InvitationService:
    """
    Service layer for the invite cycle of a project membership.

    Only the membership write is authoritative. Everything after it
    (event links, role post, notification, email) is best-effort and is
    never rolled back; retrying an invite is safe because an active
    membership makes the retry fail with a conflict.
    """

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
        self.notification_repo = NotificationRepository(db)
        self.user_repo = UserRepository(db)
        self.project_repo = ProjectRepository(db)
        self.event_repo = EventRepository(db)
        self.post_repo = PostRepository(db)

    def invite_user_to_project(self, request: InvitationRequest, principal_id: str) -> InvitationResult:
        """
        Invite a technician to a project (or add them directly).

        Args:
            request: Validated invitation payload
            principal_id: Authenticated caller uid

        Returns:
            The membership written and its status

        Raises:
            ForbiddenException: If the caller is not the declared inviter
            NotFoundException: If the invitee has no user profile
            ConflictException: If the invitee is already a member or has a pending invite
        """
        if principal_id != request.invited_by_uid:
            raise ForbiddenException("Authenticated user is not the sender of the invitation")

        invitee = self.user_repo.get_by_id(request.technician_uid)
        if invitee is None:
            raise NotFoundException("User to invite not found")

        existing = self.membership_repo.find_by_project_and_user(
            request.project_id, request.technician_uid
        )
        if existing is not None and existing.status.is_active:
            raise ConflictException("This user is already a member or has a pending invitation")

        status = ProjectMemberStatus(request.status)
        fields = self._membership_fields(request, invitee, status)
        if existing is not None:
            # Terminal record for the pair: start the new cycle on the same document
            with best_effort(self.db, "detach previous cycle", membership_id=existing.id):
                self.post_repo.remove_member_everywhere(request.project_id, existing.id)
                self.event_repo.detach_member_everywhere(request.project_id, existing.id)
            membership = self.membership_repo.update_by_id(existing.id, **fields)
        else:
            membership = self.membership_repo.create(
                request.project_id, request.technician_uid, **fields
            )
        logger.info(
            "Membership %s for user %s in project %s is now %s",
            membership.id, membership.user_id, membership.project_id, status.value,
        )

        if request.link_type == "events":
            self._attach_to_events(request.project_id, request.selected_events, membership.id)

        with best_effort(self.db, "create role post", project_id=request.project_id):
            self.post_repo.create(
                Post(
                    project_id=request.project_id,
                    role_id=request.role.id,
                    label=request.role.label,
                    icon=request.role.icon,
                    category=request.role.category,
                    priority=request.role.priority,
                    members=[membership.id],
                )
            )

        if status == ProjectMemberStatus.PENDING:
            self._send_invitation(request, invitee, membership)
        else:
            self._send_added(request, invitee)

        return InvitationResult(membership=membership, status=status)

    def check_invitation(self, project_id: Optional[str], user_id: Optional[str], principal_id: str) -> bool:
        """Whether the user's membership in the project is approved"""
        self._check_accept_params(project_id, user_id, principal_id)
        membership = self.membership_repo.find_by_project_and_user(project_id, user_id)
        if membership is None:
            return False
        return membership.status == ProjectMemberStatus.APPROVED

    def accept_invitation(self, project_id: Optional[str], user_id: Optional[str], principal_id: str) -> ProjectMembership:
        """
        Accept-link flow: approve the membership, close the live invite
        notification, and tell the inviter.

        Raises:
            ValidationException: If project_id or user_id is missing
            ForbiddenException: If the caller is not the invited user
            NotFoundException: If there is no membership for the pair
        """
        self._check_accept_params(project_id, user_id, principal_id)
        membership = self.membership_repo.find_by_project_and_user(project_id, user_id)
        if membership is None:
            raise NotFoundException("No membership found for this user and project")

        already_approved = membership.status == ProjectMemberStatus.APPROVED
        membership = self.membership_repo.update_by_id(
            membership.id, status=ProjectMemberStatus.APPROVED
        )

        live_invite = self.notification_repo.find_live_invite(user_id, project_id)
        if live_invite is not None:
            self.notification_repo.mark_as_read_and_responded(live_invite.id, accepted=True)

        if not already_approved and membership.invited_by:
            self._notify_inviter_of_acceptance(membership)

        return membership

    def record_refusal(self, request: RefusedInvitationRequest) -> None:
        """
        Report a refused invitation to the inviter and decline the membership.

        Raises:
            ValidationException: If invited_by, project_id or invited_user_name is missing
            NotFoundException: If the inviter or the project does not exist
        """
        if not request.invited_by or not request.project_id or not request.invited_user_name:
            raise ValidationException("Missing parameters")

        inviter = self.user_repo.get_by_id(request.invited_by)
        if inviter is None:
            raise NotFoundException("Inviter not found")
        project = self.project_repo.get_by_id(request.project_id)
        if project is None:
            raise NotFoundException("Project not found")

        self.notify_inviter_of_refusal(
            inviter=inviter,
            invited_user_name=request.invited_user_name,
            project_id=project.id,
            project_name=project.project_name or DEFAULT_PROJECT_NAME,
            invite_id=request.invite_id,
            refused_by=request.user_id,
        )

        if request.user_id:
            declined = self.membership_repo.update(
                request.project_id, request.user_id, status=ProjectMemberStatus.DECLINED
            )
            if declined is None:
                logger.info(
                    "No membership to decline for user %s in project %s",
                    request.user_id, request.project_id,
                )

    def notify_inviter_of_refusal(
        self,
        inviter: User,
        invited_user_name: str,
        project_id: str,
        project_name: str,
        invite_id: Optional[str] = None,
        refused_by: Optional[str] = None,
    ) -> None:
        """Refusal notice to the inviter's mailbox, then a best-effort email"""
        self.notification_service.create_invitation_refused_notification(
            inviter.id,
            invited_user_name,
            project_id,
            project_name,
            invite_id=invite_id,
            refused_by=refused_by,
        )
        self.email_service.send_transactional_email(
            EmailType.INVITATION_REFUSED,
            inviter.email,
            {
                "first_name": inviter.greeting_name,
                "project_name": project_name,
                "invited_user_name": invited_user_name,
            },
        )

    def project_name_for(self, project_id: str) -> str:
        project = self.project_repo.get_by_id(project_id)
        return project.project_name if project and project.project_name else DEFAULT_PROJECT_NAME

    def _membership_fields(self, request: InvitationRequest, invitee: User, status: ProjectMemberStatus) -> dict:
        return {
            "role": request.role.label,
            "permission": ProjectMemberPermission.VIEWER,
            "status": status,
            "invited_by": request.invited_by_uid,
            "joined_at": utcnow(),
            "left_at": None,
            "is_global": request.link_type == "project",
            "event_ids": list(request.selected_events) if request.link_type == "events" else None,
            "firstname": invitee.first_name or "",
            "lastname": invitee.last_name or "",
            "email": invitee.email or "",
            "phone": invitee.phone or "",
            "photo_url": invitee.photo_url or "",
        }

    def _attach_to_events(self, project_id: str, event_ids: list[str], membership_id: str) -> None:
        """Link the membership to each selected event; one failure does not stop the others"""
        for event_id in event_ids:
            with best_effort(self.db, "attach member to event", event_id=event_id, membership_id=membership_id):
                if self.event_repo.attach_member(project_id, event_id, membership_id) is None:
                    logger.warning("Event %s not found in project %s, member not attached", event_id, project_id)

    def _send_invitation(self, request: InvitationRequest, invitee: User, membership: ProjectMembership) -> None:
        with best_effort(self.db, "create invite notification", user_id=invitee.id, project_id=request.project_id):
            self.notification_service.create_project_invite_notification(
                invitee.id,
                request.project_id,
                request.project_name,
                request.role.label,
                request.invited_by_uid,
            )

        self.email_service.send_transactional_email(
            EmailType.PROJECT_INVITATION,
            invitee.email,
            {
                "first_name": invitee.greeting_name,
                "project_name": request.project_name,
                "role_label": request.role.label,
                "accept_url": self._accept_url(request.project_id, invitee.id, membership.id),
            },
        )

    def _send_added(self, request: InvitationRequest, invitee: User) -> None:
        with best_effort(self.db, "create member added notification", user_id=invitee.id, project_id=request.project_id):
            self.notification_service.create_member_added_notification(
                invitee.id, request.project_id, request.project_name, request.invited_by_uid
            )

        self.email_service.send_transactional_email(
            EmailType.PROJECT_ADDED,
            invitee.email,
            {
                "first_name": invitee.greeting_name,
                "project_name": request.project_name,
                "role_label": request.role.label,
                "project_url": f"{settings.PUBLIC_BASE_URL}/project/{request.project_id}",
            },
        )

    def _notify_inviter_of_acceptance(self, membership: ProjectMembership) -> None:
        inviter = self.user_repo.get_by_id(membership.invited_by)
        if inviter is None:
            logger.warning("Inviter %s of membership %s not found", membership.invited_by, membership.id)
            return
        accepter = self.user_repo.get_by_id(membership.user_id)
        project_name = self.project_name_for(membership.project_id)

        with best_effort(self.db, "create invite accepted notification", membership_id=membership.id):
            self.notification_service.create_invite_accepted_notification(
                inviter.id, accepter, membership.user_id, membership.project_id, project_name
            )

        self.email_service.send_transactional_email(
            EmailType.INVITATION_ACCEPTED,
            inviter.email,
            {
                "first_name": inviter.greeting_name,
                "member_name": accepter.full_name if accepter else membership.user_id,
                "project_name": project_name,
            },
        )

    @staticmethod
    def _check_accept_params(project_id: Optional[str], user_id: Optional[str], principal_id: str) -> None:
        if not project_id or not user_id:
            raise ValidationException("Missing parameters")
        if principal_id != user_id:
            raise ForbiddenException("Action forbidden")

    @staticmethod
    def _accept_url(project_id: str, user_id: str, membership_id: str) -> str:
        query = urlencode({"project": project_id, "user": user_id, "membership": membership_id})
        return f"{settings.PUBLIC_BASE_URL}/project/{project_id}/invitations/accept?{query}"
