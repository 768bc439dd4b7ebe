"""
Club Request Models
Members and facilities
"""

from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional


class ClubMemberCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    email: EmailStr
    phone: str
    sport: Optional[str] = Field(None, max_length=100)
    membership_type: str = Field("REGULAR", description="REGULAR, PREMIUM or VIP")
    fees: float = Field(0, ge=0)


class ClubMemberUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    sport: Optional[str] = Field(None, max_length=100)
    membership_type: Optional[str] = None
    fees: Optional[float] = Field(None, ge=0)
    status: Optional[str] = Field(None, description="ACTIVE, INACTIVE or SUSPENDED")


class ClubFacilityCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    type: str = Field(..., min_length=1, max_length=60)
    description: Optional[str] = None
    capacity: Optional[int] = Field(None, ge=0)
    hourly_rate: float = Field(0, ge=0)
    available: bool = True
    amenities: List[str] = []


class ClubFacilityUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    type: Optional[str] = Field(None, min_length=1, max_length=60)
    description: Optional[str] = None
    capacity: Optional[int] = Field(None, ge=0)
    hourly_rate: Optional[float] = Field(None, ge=0)
    available: Optional[bool] = None
    amenities: Optional[List[str]] = None
