"""
Activity Log Model
Audit trail of admin and account actions
"""

from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Uuid, func
import uuid
from app.database import Base


class ActivityLog(Base):
    __tablename__ = "activity_logs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    action = Column(String(60), nullable=False, index=True)
    resource_type = Column(String(40), nullable=True)
    resource_id = Column(String(64), nullable=True)
    details = Column(Text, nullable=True)  # JSON
    ip_address = Column(String(45), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
