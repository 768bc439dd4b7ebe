"""
Order Models
Certificate/medal/trophy orders and bulk student registration orders
"""

from sqlalchemy import (
    Column, String, Boolean, DateTime, Integer, Float, Text, ForeignKey, Uuid,
    UniqueConstraint, func, false
)
from sqlalchemy.orm import relationship
import uuid
from app.database import Base


class EventOrder(Base):
    """Coach order for certificates, medals and trophies"""
    __tablename__ = "event_orders"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_number = Column(String(40), unique=True, nullable=False)
    event_id = Column(Uuid(as_uuid=True), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    coach_id = Column(Uuid(as_uuid=True), ForeignKey("coaches.id", ondelete="CASCADE"), nullable=False, index=True)

    certificates = Column(Integer, server_default="0")
    medals = Column(Integer, server_default="0")
    trophies = Column(Integer, server_default="0")
    special_instructions = Column(Text, nullable=True)
    urgent_delivery = Column(Boolean, default=False, server_default=false())

    # Set by admin when quoting
    certificate_price = Column(Float, nullable=True)
    medal_price = Column(Float, nullable=True)
    trophy_price = Column(Float, nullable=True)
    total_amount = Column(Float, server_default="0")

    # PENDING, QUOTED, CONFIRMED, PAYMENT_PENDING, PAID, IN_PROGRESS, COMPLETED, CANCELLED
    status = Column(String(20), server_default="PENDING", index=True)
    payment_status = Column(String(20), nullable=True)
    razorpay_order_id = Column(String(64), nullable=True, index=True)
    razorpay_payment_id = Column(String(64), nullable=True)
    payment_method = Column(String(20), nullable=True)
    payment_date = Column(DateTime(timezone=True), nullable=True)

    admin_remarks = Column(Text, nullable=True)
    processed_by = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    processed_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    event = relationship("Event", backref="orders")


class RegistrationOrder(Base):
    """Coach registering several students for an event in one payment"""
    __tablename__ = "registration_orders"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_number = Column(String(40), unique=True, nullable=False)
    event_id = Column(Uuid(as_uuid=True), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    coach_id = Column(Uuid(as_uuid=True), ForeignKey("coaches.id", ondelete="CASCADE"), nullable=False, index=True)

    event_fee_per_student = Column(Float, server_default="0")
    total_students = Column(Integer, server_default="0")
    total_fee_amount = Column(Float, server_default="0")

    status = Column(String(20), server_default="PENDING")  # PENDING, PAYMENT_PENDING, PAID, COMPLETED, CANCELLED
    payment_status = Column(String(20), server_default="PENDING")  # PENDING, PAID, FAILED
    razorpay_order_id = Column(String(64), nullable=True, index=True)
    razorpay_payment_id = Column(String(64), nullable=True)
    payment_date = Column(DateTime(timezone=True), nullable=True)
    certificate_generated = Column(Boolean, default=False, server_default=false())

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class RegistrationOrderItem(Base):
    __tablename__ = "registration_order_items"
    __table_args__ = (UniqueConstraint("registration_order_id", "student_id", name="uq_order_student"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    registration_order_id = Column(
        Uuid(as_uuid=True), ForeignKey("registration_orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    student_id = Column(Uuid(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    fee = Column(Float, server_default="0")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    order = relationship("RegistrationOrder", backref="items")
