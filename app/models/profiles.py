"""
Profile Models
Role specific records hanging off users: students, coaches, institutes, clubs
"""

from sqlalchemy import (
    Column, String, Boolean, DateTime, Date, Integer, Text, ForeignKey, Uuid,
    UniqueConstraint, func, true, false
)
from sqlalchemy.orm import relationship
import uuid
from app.database import Base


class Student(Base):
    __tablename__ = "students"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    name = Column(String(150), nullable=False)
    father_name = Column(String(150), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    gender = Column(String(20), nullable=True)
    sport = Column(String(100), nullable=True)
    level = Column(String(30), server_default="BEGINNER")
    school = Column(String(200), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    achievements = Column(Text, nullable=True)

    # Subscription
    payment_status = Column(String(20), server_default="PENDING")
    subscription_type = Column(String(20), nullable=True)
    subscription_expires_at = Column(DateTime(timezone=True), nullable=True)

    is_active = Column(Boolean, default=True, server_default=true())
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", backref="student_profile")


class Coach(Base):
    __tablename__ = "coaches"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    name = Column(String(150), nullable=False)
    specialization = Column(String(100), nullable=True)
    experience = Column(Integer, nullable=True)
    certifications = Column(Text, nullable=True)
    bio = Column(Text, nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)

    # Approval and subscription
    approval_status = Column(String(20), server_default="PENDING")
    approval_remarks = Column(Text, nullable=True)
    payment_status = Column(String(20), server_default="PENDING")
    subscription_type = Column(String(20), nullable=True)
    subscription_expires_at = Column(DateTime(timezone=True), nullable=True)

    # Coaches stay inactive until their subscription is paid
    is_active = Column(Boolean, default=False, server_default=false())
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", backref="coach_profile")


class Institute(Base):
    __tablename__ = "institutes"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    name = Column(String(200), nullable=False)
    institute_type = Column(String(50), nullable=True)
    contact_person = Column(String(150), nullable=True)
    address = Column(Text, nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    website = Column(String(255), nullable=True)

    approval_status = Column(String(20), server_default="PENDING")
    approval_remarks = Column(Text, nullable=True)
    payment_status = Column(String(20), server_default="PENDING")
    subscription_type = Column(String(20), nullable=True)
    subscription_expires_at = Column(DateTime(timezone=True), nullable=True)

    is_active = Column(Boolean, default=True, server_default=true())
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", backref="institute_profile")


class Club(Base):
    __tablename__ = "clubs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    name = Column(String(200), nullable=False)
    club_type = Column(String(50), nullable=True)
    sport = Column(String(100), nullable=True)
    address = Column(Text, nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    established_year = Column(Integer, nullable=True)

    payment_status = Column(String(20), server_default="PENDING")
    subscription_type = Column(String(20), nullable=True)
    subscription_expires_at = Column(DateTime(timezone=True), nullable=True)

    is_active = Column(Boolean, default=True, server_default=true())
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    user = relationship("User", backref="club_profile")


class CoachStudent(Base):
    """Coach <-> student connection"""
    __tablename__ = "coach_students"
    __table_args__ = (UniqueConstraint("coach_id", "student_id", name="uq_coach_student"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    coach_id = Column(Uuid(as_uuid=True), ForeignKey("coaches.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Uuid(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String(20), server_default="PENDING")  # PENDING, ACCEPTED, REJECTED
    initiated_by = Column(String(20), server_default="STUDENT")
    message = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class InstituteStudent(Base):
    __tablename__ = "institute_students"
    __table_args__ = (UniqueConstraint("institute_id", "student_id", name="uq_institute_student"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    institute_id = Column(Uuid(as_uuid=True), ForeignKey("institutes.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Uuid(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class InstituteCoach(Base):
    __tablename__ = "institute_coaches"
    __table_args__ = (UniqueConstraint("institute_id", "coach_id", name="uq_institute_coach"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    institute_id = Column(Uuid(as_uuid=True), ForeignKey("institutes.id", ondelete="CASCADE"), nullable=False, index=True)
    coach_id = Column(Uuid(as_uuid=True), ForeignKey("coaches.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
