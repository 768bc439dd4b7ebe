"""
Event Models
Events, student registrations, in-charge assignments and result files
"""

from sqlalchemy import (
    Column, String, Boolean, DateTime, Integer, Float, Text, BigInteger, ForeignKey, Uuid,
    UniqueConstraint, func, false
)
from sqlalchemy.orm import relationship
import uuid
from app.database import Base


class Event(Base):
    __tablename__ = "events"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    unique_id = Column(String(40), unique=True, nullable=False, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    sport = Column(String(100), nullable=False)
    level = Column(String(30), nullable=True)
    venue = Column(String(200), nullable=False)
    address = Column(Text, nullable=True)
    city = Column(String(100), nullable=False)
    state = Column(String(100), nullable=True)

    # Stored in UTC; clients send and receive IST wall-clock time
    start_date = Column(DateTime(timezone=True), nullable=False, index=True)
    end_date = Column(DateTime(timezone=True), nullable=True)
    registration_deadline = Column(DateTime(timezone=True), nullable=True)

    max_participants = Column(Integer, server_default="100")
    current_participants = Column(Integer, server_default="0")
    event_fee = Column(Float, server_default="0")

    # PENDING, APPROVED, ACTIVE, COMPLETED, REJECTED, SUSPENDED, CANCELLED
    status = Column(String(20), server_default="PENDING", index=True)
    creator_type = Column(String(20), nullable=False)  # COACH, INSTITUTE, CLUB, ADMIN
    created_by = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    admin_notes = Column(Text, nullable=True)
    cancellation_reason = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    creator = relationship("User", backref="events")


class EventRegistration(Base):
    __tablename__ = "event_registrations"
    __table_args__ = (UniqueConstraint("event_id", "student_id", name="uq_event_student"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    event_id = Column(Uuid(as_uuid=True), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Uuid(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    registration_order_id = Column(Uuid(as_uuid=True), ForeignKey("registration_orders.id", ondelete="SET NULL"), nullable=True)
    status = Column(String(20), server_default="REGISTERED")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    event = relationship("Event", backref="registrations")


class EventAssignment(Base):
    """Event in-charge / coordinator with per-capability flags"""
    __tablename__ = "event_assignments"
    __table_args__ = (UniqueConstraint("event_id", "user_id", name="uq_event_assignment"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    event_id = Column(Uuid(as_uuid=True), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String(20), server_default="INCHARGE")  # INCHARGE, COORDINATOR, TEAM
    result_upload = Column(Boolean, default=False, server_default=false())
    student_management = Column(Boolean, default=False, server_default=false())
    certificate_management = Column(Boolean, default=False, server_default=false())
    fee_management = Column(Boolean, default=False, server_default=false())
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class EventResultFile(Base):
    __tablename__ = "event_result_files"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    event_id = Column(Uuid(as_uuid=True), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    uploaded_by = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    original_name = Column(String(255), nullable=False)
    location = Column(Text, nullable=False)
    mime_type = Column(String(120), nullable=True)
    size_bytes = Column(BigInteger, server_default="0")
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
