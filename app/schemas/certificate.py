"""
Certificate Request Models
"""

from pydantic import BaseModel, Field
from typing import Dict, List
from uuid import UUID


class IssueCertificatesRequest(BaseModel):
    event_id: str = Field(..., description="Event id or unique id")
    student_ids: List[UUID] = Field(..., min_length=1)


class IssueWinningCertificatesRequest(IssueCertificatesRequest):
    positions: Dict[str, str] = Field(..., description="Student id to position, e.g. '1st'")
