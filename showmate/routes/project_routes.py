from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from showmate.database import get_db
from showmate.dependencies import get_current_user_id
from showmate.services.email_service import EmailService, get_email_service
from showmate.services.invitation_service import InvitationService
from showmate.services.membership_service import MembershipService
from showmate.services.project_service import ProjectService
from showmate.schemas.project_schemas import (
    AcceptedResponse,
    AcceptInvitationRequest,
    InvitationRequest,
    MemberRemovalRequest,
    MembershipResponse,
    RefusedInvitationRequest,
    SuccessResponse,
)

# Handlers that send mail are plain functions so blocking SMTP runs in the threadpool
router = APIRouter()


@router.post("/invite", response_model=SuccessResponse)
def invite_user(
    invitation: InvitationRequest,
    principal_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    """
    Invite a technician to a project in a role.

    - The authenticated user must be the declared inviter (`invitedByUid`)
    - `status: pending` (default) sends an invitation, `approved` adds directly
    - 409 if the user is already a member or has a pending invitation
    """
    service = InvitationService(db, email_service)
    result = service.invite_user_to_project(invitation, principal_id)
    return SuccessResponse(message=result.message)


@router.post("/refused-invitation", response_model=SuccessResponse)
def refused_invitation(
    refusal: RefusedInvitationRequest,
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    """
    Tell the inviter their invitation was refused.

    Creates an `invitation_refused` notification for the inviter, declines
    the membership if one exists, and emails the inviter.
    """
    service = InvitationService(db, email_service)
    service.record_refusal(refusal)
    return SuccessResponse()


@router.get("/accept-invitation", response_model=AcceptedResponse)
async def check_invitation(
    project_id: Optional[str] = Query(None, alias="projectId"),
    user_id: Optional[str] = Query(None, alias="userId"),
    principal_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    """Whether the authenticated user's invitation to the project is accepted"""
    service = InvitationService(db, email_service)
    return AcceptedResponse(accepted=service.check_invitation(project_id, user_id, principal_id))


@router.post("/accept-invitation", response_model=SuccessResponse)
def accept_invitation(
    body: AcceptInvitationRequest,
    principal_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    """Accept an invitation from the emailed accept link"""
    service = InvitationService(db, email_service)
    service.accept_invitation(body.project_id, body.user_id, principal_id)
    return SuccessResponse()


@router.delete("/member", response_model=SuccessResponse)
def remove_member(
    removal: MemberRemovalRequest,
    principal_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    """
    Remove a member from a project.

    Hard deletes the membership, notifies and emails the removed user.
    Removing an already removed membership succeeds without effect.
    """
    service = MembershipService(db, email_service)
    removed = service.remove_member(
        removal.membership_id,
        removal.user_id,
        removal.project_id,
        removal.project_name,
        removed_by=principal_id,
    )
    return SuccessResponse(message="Member removed" if removed else "Member already removed")


@router.delete("/delete", response_model=SuccessResponse)
def delete_project(
    project_id: Optional[str] = Query(None, alias="projectId"),
    principal_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    """
    Delete a project with its events, posts, messages, memberships and
    notifications. Former members are notified and emailed.
    """
    service = ProjectService(db, email_service)
    service.delete_project(project_id)
    return SuccessResponse()


@router.get("/{project_id}/members", response_model=list[MembershipResponse])
async def list_members(
    project_id: str,
    principal_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    """List all memberships of a project, whatever their status"""
    service = MembershipService(db, email_service)
    return service.list_project_members(project_id)
