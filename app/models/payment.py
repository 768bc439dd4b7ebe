"""
Payment Model
Every Razorpay order created by the platform
"""

from sqlalchemy import Column, String, DateTime, Float, Text, ForeignKey, Uuid, func
import uuid
from app.database import Base


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    user_type = Column(String(20), nullable=False)
    payment_type = Column(String(30), nullable=False)  # SUBSCRIPTION, EVENT_ORDER, REGISTRATION_ORDER
    plan_id = Column(String(40), nullable=True)
    reference_id = Column(String(64), nullable=True, index=True)

    amount = Column(Float, nullable=False)  # rupees
    currency = Column(String(3), server_default="INR")
    razorpay_order_id = Column(String(64), nullable=True, index=True)
    razorpay_payment_id = Column(String(64), nullable=True)
    razorpay_signature = Column(String(128), nullable=True)
    status = Column(String(20), server_default="PENDING", index=True)  # PENDING, SUCCESS, FAILED
    description = Column(Text, nullable=True)
    details = Column(Text, nullable=True)  # JSON

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
