"""
Club Models
Club memberships and bookable facilities
"""

from sqlalchemy import Column, String, Boolean, DateTime, Integer, Float, Text, ForeignKey, Uuid, UniqueConstraint, func, true
import uuid
from app.database import Base


class ClubMember(Base):
    """A person on a club's member list; linked to a student account when one exists"""
    __tablename__ = "club_members"
    __table_args__ = (UniqueConstraint("club_id", "email", name="uq_club_member_email"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    club_id = Column(Uuid(as_uuid=True), ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Uuid(as_uuid=True), ForeignKey("students.id", ondelete="SET NULL"), nullable=True)
    name = Column(String(150), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=False)
    sport = Column(String(100), nullable=True)
    membership_type = Column(String(20), server_default="REGULAR")  # REGULAR, PREMIUM, VIP
    fees = Column(Float, server_default="0")
    status = Column(String(20), server_default="ACTIVE", index=True)  # ACTIVE, INACTIVE, SUSPENDED
    joined_at = Column(DateTime(timezone=True), server_default=func.now())
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class ClubFacility(Base):
    __tablename__ = "club_facilities"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    club_id = Column(Uuid(as_uuid=True), ForeignKey("clubs.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(150), nullable=False)
    type = Column(String(60), nullable=False)
    description = Column(Text, nullable=True)
    capacity = Column(Integer, nullable=True)
    hourly_rate = Column(Float, server_default="0")
    available = Column(Boolean, default=True, server_default=true())
    amenities = Column(Text, nullable=True)  # JSON list
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
