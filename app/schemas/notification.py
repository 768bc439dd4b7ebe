"""
Notification Request Models
"""

from pydantic import BaseModel, Field
from typing import List
from uuid import UUID


class BulkDeleteRequest(BaseModel):
    notification_ids: List[UUID] = Field(..., min_length=1)
