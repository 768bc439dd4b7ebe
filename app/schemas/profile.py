"""
Profile Request Models
Profile updates, coach connections and roster-created students
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import date


class ContactUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = None
    state: Optional[str] = Field(None, max_length=100)
    city: Optional[str] = Field(None, max_length=100)


class StudentProfileUpdate(ContactUpdate):
    father_name: Optional[str] = Field(None, max_length=255)
    date_of_birth: Optional[date] = None
    gender: Optional[str] = Field(None, max_length=20)
    sport: Optional[str] = Field(None, max_length=100)
    level: Optional[str] = Field(None, max_length=30)
    school: Optional[str] = Field(None, max_length=255)
    achievements: Optional[str] = None


class CoachProfileUpdate(ContactUpdate):
    specialization: Optional[str] = Field(None, max_length=255)
    experience: Optional[int] = Field(None, ge=0)
    certifications: Optional[str] = None
    bio: Optional[str] = None


class InstituteProfileUpdate(ContactUpdate):
    institute_type: Optional[str] = Field(None, max_length=100)
    contact_person: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = None
    website: Optional[str] = Field(None, max_length=255)


class ClubProfileUpdate(ContactUpdate):
    club_type: Optional[str] = Field(None, max_length=100)
    sport: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = None
    established_year: Optional[int] = Field(None, ge=1800, le=2100)


class ConnectionRequest(BaseModel):
    message: Optional[str] = Field(None, max_length=500)


class ConnectionResponseRequest(BaseModel):
    status: str = Field(..., description="ACCEPTED or REJECTED")
