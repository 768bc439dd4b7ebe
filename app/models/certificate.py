"""
Certificate Model
Issued participation and winning certificates
"""

from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Uuid, func
import uuid
from app.database import Base


class Certificate(Base):
    __tablename__ = "certificates"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    unique_id = Column(String(120), unique=True, nullable=False, index=True)
    student_id = Column(Uuid(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    event_id = Column(Uuid(as_uuid=True), ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    registration_order_id = Column(
        Uuid(as_uuid=True), ForeignKey("registration_orders.id", ondelete="SET NULL"), nullable=True
    )
    issued_by = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    certificate_type = Column(String(20), server_default="participation")  # participation, winning
    position = Column(String(50), nullable=True)
    participant_name = Column(String(150), nullable=False)
    sport_name = Column(String(100), nullable=True)
    event_name = Column(String(200), nullable=False)
    certificate_url = Column(Text, nullable=True)

    issue_date = Column(DateTime(timezone=True), server_default=func.now())
    created_at = Column(DateTime(timezone=True), server_default=func.now())
