"""
Order Request Models
Event orders (certificates, medals, trophies) and bulk registration orders
"""

from pydantic import BaseModel, Field
from typing import List, Optional
from uuid import UUID


class EventOrderCreateRequest(BaseModel):
    certificates: int = Field(0, ge=0)
    medals: int = Field(0, ge=0)
    trophies: int = Field(0, ge=0)
    special_instructions: Optional[str] = None
    urgent_delivery: bool = False


class EventOrderUpdateRequest(BaseModel):
    certificates: Optional[int] = Field(None, ge=0)
    medals: Optional[int] = Field(None, ge=0)
    trophies: Optional[int] = Field(None, ge=0)
    special_instructions: Optional[str] = None
    urgent_delivery: Optional[bool] = None


class RazorpayVerifyRequest(BaseModel):
    """The triple returned by Razorpay checkout"""
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str


class AdminOrderUpdateRequest(BaseModel):
    status: Optional[str] = None
    certificate_price: Optional[float] = Field(None, ge=0)
    medal_price: Optional[float] = Field(None, ge=0)
    trophy_price: Optional[float] = Field(None, ge=0)
    total_amount: Optional[float] = Field(None, ge=0)
    admin_remarks: Optional[str] = None


class BulkOrderUpdateRequest(BaseModel):
    order_ids: List[UUID] = Field(..., min_length=1)
    status: str


class BulkRegistrationRequest(BaseModel):
    student_ids: List[UUID] = Field(..., min_length=1)
    event_fee_per_student: float = Field(..., ge=0)


class CompletionNoticeRequest(BaseModel):
    message: Optional[str] = Field(None, max_length=2000)
