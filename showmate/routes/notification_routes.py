from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from showmate.database import get_db
from showmate.dependencies import get_current_user_id
from showmate.services.email_service import EmailService, get_email_service
from showmate.services.notification_response_service import NotificationResponseHandler
from showmate.services.notification_service import NotificationService
from showmate.schemas.notification_schemas import (
    MarkAllReadResponse,
    NotificationListResponse,
    NotificationResponse,
    RespondRequest,
)

# Handlers that send mail are plain functions so blocking SMTP runs in the threadpool
router = APIRouter()


@router.get("", response_model=NotificationListResponse)
async def list_notifications(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Authenticated user's mailbox, newest first"""
    service = NotificationService(db)
    notifications = service.list_user_notifications(user_id)
    return NotificationListResponse(
        notifications=notifications,
        total=len(notifications),
        unread=sum(1 for n in notifications if not n.read),
    )


@router.post("/read-all", response_model=MarkAllReadResponse)
async def mark_all_as_read(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Mark every unread notification of the authenticated user as read"""
    service = NotificationService(db)
    return MarkAllReadResponse(updated=service.mark_all_as_read(user_id))


@router.post("/{notification_id}/respond", response_model=NotificationResponse)
def respond_to_notification(
    notification_id: str,
    answer: RespondRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    """
    Accept or decline an invitation notification.

    - Accept: membership becomes approved
    - Decline: membership becomes declined, the inviter is notified and emailed
    """
    handler = NotificationResponseHandler(db, email_service)
    return handler.respond(notification_id, answer.accepted, user_id)
