from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from showmate.models.permission import ProjectMemberPermission
from showmate.models.project_membership import ProjectMemberStatus


class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class RoleRef(CamelModel):
    """Role picked from the project's role templates"""

    id: str = Field(..., min_length=1)
    label: str = Field(..., min_length=1)
    icon: Optional[str] = None
    category: Optional[str] = None
    priority: Optional[int] = None


class InvitationRequest(CamelModel):
    """Invite a technician to a project in a role"""

    project_id: str = Field(..., min_length=1)
    project_name: str = Field(..., min_length=1)
    technician_uid: str = Field(..., min_length=1)
    invited_by_uid: str = Field(..., min_length=1)
    role: RoleRef
    link_type: Literal["project", "events"] = "project"
    selected_events: list[str] = Field(default_factory=list)
    status: Literal["pending", "approved"] = Field(
        default="pending",
        description="pending sends an invitation; approved adds the member directly",
    )


class RefusedInvitationRequest(CamelModel):
    """
    Report a refused invitation to its inviter.

    Fields are optional here so missing ones are reported by the service
    with the same error shape as other business validation failures.
    """

    invite_id: Optional[str] = None
    user_id: Optional[str] = None
    project_id: Optional[str] = None
    invited_by: Optional[str] = None
    invited_user_name: Optional[str] = None


class MemberRemovalRequest(CamelModel):
    """Remove a member from a project"""

    membership_id: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    project_id: str = Field(..., min_length=1)
    project_name: str = Field(..., min_length=1)


class AcceptInvitationRequest(CamelModel):
    project_id: Optional[str] = None
    user_id: Optional[str] = None


class SuccessResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None


class AcceptedResponse(BaseModel):
    accepted: bool


class MembershipResponse(CamelModel):
    """Team listing entry"""

    id: str
    project_id: str
    user_id: str
    role: str
    permission: ProjectMemberPermission
    status: ProjectMemberStatus
    invited_by: Optional[str]
    joined_at: datetime
    left_at: Optional[datetime]
    firstname: str
    lastname: str
    email: str
    phone: str
    photo_url: str
