"""
Pydantic schemas for request validation
"""

from app.schemas.auth import (
    StudentRegisterRequest,
    CoachRegisterRequest,
    InstituteRegisterRequest,
    ClubRegisterRequest,
    LoginRequest,
    VerifyOtpRequest,
    EmailRequest,
    ResetPasswordRequest,
    ChangePasswordRequest,
)
from app.schemas.event import EventCreateRequest, EventUpdateRequest, EventCancelRequest
from app.schemas.order import (
    EventOrderCreateRequest,
    EventOrderUpdateRequest,
    RazorpayVerifyRequest,
    AdminOrderUpdateRequest,
    BulkOrderUpdateRequest,
    BulkRegistrationRequest,
    CompletionNoticeRequest,
)
from app.schemas.payment import CreatePaymentOrderRequest, VerifyPaymentRequest

__all__ = [
    "StudentRegisterRequest",
    "CoachRegisterRequest",
    "InstituteRegisterRequest",
    "ClubRegisterRequest",
    "LoginRequest",
    "VerifyOtpRequest",
    "EmailRequest",
    "ResetPasswordRequest",
    "ChangePasswordRequest",
    "EventCreateRequest",
    "EventUpdateRequest",
    "EventCancelRequest",
    "EventOrderCreateRequest",
    "EventOrderUpdateRequest",
    "RazorpayVerifyRequest",
    "AdminOrderUpdateRequest",
    "BulkOrderUpdateRequest",
    "BulkRegistrationRequest",
    "CompletionNoticeRequest",
    "CreatePaymentOrderRequest",
    "VerifyPaymentRequest",
]
