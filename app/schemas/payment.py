"""
Subscription Payment Request Models
"""

from pydantic import BaseModel, Field
from typing import Optional


class CreatePaymentOrderRequest(BaseModel):
    user_type: str = Field(..., description="student, coach, club or institute")
    plan_id: Optional[str] = None


class VerifyPaymentRequest(BaseModel):
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str
    user_type: Optional[str] = None
