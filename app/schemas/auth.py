"""
Auth Request Models
Registration, login, OTP and password flows
"""

from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import date


class RegisterBase(BaseModel):
    """Fields shared by every registration form"""
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: Optional[str] = Field(None, description="10-digit Indian mobile number")
    password: str = Field(..., min_length=1)
    state: Optional[str] = Field(None, max_length=100)
    city: Optional[str] = Field(None, max_length=100)


class StudentRegisterRequest(RegisterBase):
    father_name: Optional[str] = Field(None, max_length=255)
    date_of_birth: Optional[date] = None
    gender: Optional[str] = Field(None, max_length=20)
    sport: Optional[str] = Field(None, max_length=100)
    level: Optional[str] = Field(None, max_length=30)
    school: Optional[str] = Field(None, max_length=255)

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Arjun Mehta",
                "email": "arjun@example.com",
                "phone": "9876543210",
                "password": "secret123",
                "state": "Delhi",
                "sport": "Football",
            }
        }


class CoachRegisterRequest(RegisterBase):
    specialization: Optional[str] = Field(None, max_length=255)
    experience: Optional[int] = Field(None, ge=0)
    certifications: Optional[str] = None
    bio: Optional[str] = None


class InstituteRegisterRequest(RegisterBase):
    institute_type: Optional[str] = Field(None, max_length=100)
    contact_person: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = None
    website: Optional[str] = Field(None, max_length=255)


class ClubRegisterRequest(RegisterBase):
    club_type: Optional[str] = Field(None, max_length=100)
    sport: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = None
    established_year: Optional[int] = Field(None, ge=1800, le=2100)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str
    role: Optional[str] = Field(None, description="Optional; must match the account role when given")


class VerifyOtpRequest(BaseModel):
    email: EmailStr
    otp: str = Field(..., min_length=6, max_length=6)


class EmailRequest(BaseModel):
    """Resend OTP / forgot password"""
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=1)
