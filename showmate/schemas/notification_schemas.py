from datetime import datetime
from typing import Optional

from showmate.models.notification import NotificationType
from showmate.schemas.project_schemas import CamelModel


class NotificationResponse(CamelModel):
    """Mailbox entry as shown to its recipient"""

    id: str
    user_id: str
    type: NotificationType
    message: str
    context: dict
    project_id: Optional[str]
    read: bool
    responded: bool
    accepted: Optional[bool]
    created_at: datetime
    responded_at: Optional[datetime]


class NotificationListResponse(CamelModel):
    notifications: list[NotificationResponse]
    total: int
    unread: int


class RespondRequest(CamelModel):
    """Recipient's answer to an actionable notification"""

    accepted: bool


class MarkAllReadResponse(CamelModel):
    updated: int
