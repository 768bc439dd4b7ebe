"""
Event Request Models
Dates are IST wall-clock strings unless they carry an offset
"""

from pydantic import BaseModel, Field
from typing import Optional


class EventCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    sport: str = Field(..., min_length=1, max_length=100)
    level: Optional[str] = Field(None, max_length=30)
    venue: str = Field(..., min_length=1, max_length=255)
    address: Optional[str] = None
    city: str = Field(..., min_length=1, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    start_date: str = Field(..., description="e.g. 2025-11-25T14:30:00 (IST)")
    end_date: Optional[str] = None
    registration_deadline: Optional[str] = None
    max_participants: Optional[int] = Field(None, gt=0)
    event_fee: Optional[float] = Field(None, ge=0)

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Delhi Junior Football Cup",
                "sport": "Football",
                "venue": "Jawaharlal Nehru Stadium",
                "city": "Delhi",
                "state": "Delhi",
                "start_date": "2025-11-25T14:30:00",
                "end_date": "2025-11-26T18:00:00",
                "max_participants": 200,
                "event_fee": 500,
            }
        }


class EventUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    sport: Optional[str] = Field(None, max_length=100)
    level: Optional[str] = Field(None, max_length=30)
    venue: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = None
    city: Optional[str] = Field(None, max_length=100)
    state: Optional[str] = Field(None, max_length=100)
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    registration_deadline: Optional[str] = None
    max_participants: Optional[int] = Field(None, gt=0)
    event_fee: Optional[float] = Field(None, ge=0)


class EventCancelRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=1000)
