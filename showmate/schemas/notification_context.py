"""
Typed notification payloads.

Each NotificationType carries its own context model. Contexts are
validated when a notification is built, and parsed back the same way
when a stored notification is acted upon.
"""

from pydantic import BaseModel, ConfigDict, ValidationError

from showmate.core.exceptions import ValidationException
from showmate.models.notification import NotificationType


class _Context(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    project_id: str


class ProjectInviteContext(_Context):
    invited_by: str
    role: str


class InviteAcceptedContext(_Context):
    accepted_by: str


class InvitationRefusedContext(_Context):
    invite_id: str | None = None
    refused_by: str | None = None


class MemberAddedContext(_Context):
    added_by: str


class ProjectRemovedContext(_Context):
    removed_by: str | None = None


class ProjectDeletedContext(_Context):
    pass


NotificationContext = (
    ProjectInviteContext
    | InviteAcceptedContext
    | InvitationRefusedContext
    | MemberAddedContext
    | ProjectRemovedContext
    | ProjectDeletedContext
)

CONTEXT_MODELS: dict[NotificationType, type[_Context]] = {
    NotificationType.PROJECT_INVITE: ProjectInviteContext,
    NotificationType.PROJECT_INVITE_ACCEPTED: InviteAcceptedContext,
    NotificationType.INVITATION_REFUSED: InvitationRefusedContext,
    NotificationType.PROJECT_MEMBER_ADDED: MemberAddedContext,
    NotificationType.PROJECT_REMOVED_FROM: ProjectRemovedContext,
    NotificationType.PROJECT_DELETED: ProjectDeletedContext,
}


def parse_context(notification_type: NotificationType, data: dict) -> NotificationContext:
    """
    Validate a context payload against the model registered for its type.

    Raises:
        ValidationException: If the payload does not fit the type
    """
    model = CONTEXT_MODELS[NotificationType(notification_type)]
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ValidationException(
            f"Invalid context for {NotificationType(notification_type).value} notification: {e}"
        ) from e
