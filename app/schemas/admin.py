"""
Admin Request Models
"""

from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional
from uuid import UUID


class CreateStaffRequest(BaseModel):
    """Event in-charge or admin account; the password is generated and emailed"""
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: Optional[str] = None
    state: Optional[str] = Field(None, max_length=100)


class UserStatusRequest(BaseModel):
    is_active: bool


class ApprovalRequest(BaseModel):
    status: str = Field(..., description="APPROVED or REJECTED")
    remarks: Optional[str] = Field(None, max_length=1000)


class ModerateEventRequest(BaseModel):
    action: str = Field(..., description="APPROVE, REJECT, SUSPEND or RESTART")
    admin_notes: Optional[str] = Field(None, max_length=1000)
    remarks: Optional[str] = Field(None, max_length=1000)

    @property
    def notes(self) -> Optional[str]:
        return self.admin_notes or self.remarks


class EventStatusRequest(BaseModel):
    status: str
    remarks: Optional[str] = Field(None, max_length=1000)


class BulkModerateRequest(BaseModel):
    event_ids: List[UUID] = Field(..., min_length=1)
    action: str
    remarks: Optional[str] = Field(None, max_length=1000)


class AssignmentItem(BaseModel):
    user_id: UUID
    role: Optional[str] = "INCHARGE"
    result_upload: bool = False
    student_management: bool = False
    certificate_management: bool = False
    fee_management: bool = False


class AssignmentsRequest(BaseModel):
    assignments: List[AssignmentItem] = Field(default_factory=list)
