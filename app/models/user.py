"""
User Model
Login identity shared by every role
"""

from sqlalchemy import Column, String, Boolean, DateTime, Uuid, func, true, false
import uuid
from app.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    unique_id = Column(String(40), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    phone = Column(String(20), unique=True, nullable=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, index=True)  # STUDENT, COACH, INSTITUTE, CLUB, ADMIN, EVENT_INCHARGE
    name = Column(String(150), nullable=True)
    state = Column(String(100), nullable=True)

    # Status
    is_active = Column(Boolean, default=True, server_default=true())
    is_verified = Column(Boolean, default=False, server_default=false())
    must_change_password = Column(Boolean, default=False, server_default=false())

    # OTP and password reset
    otp_code = Column(String(6), nullable=True)
    otp_expires_at = Column(DateTime(timezone=True), nullable=True)
    reset_token = Column(String(128), nullable=True, index=True)
    reset_token_expires_at = Column(DateTime(timezone=True), nullable=True)

    last_login = Column(DateTime(timezone=True), nullable=True)
    password_changed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
