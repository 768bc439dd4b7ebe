"""
Event In-charge Routes
"""

from fastapi import APIRouter, Depends

from app.auth import get_event_incharge
from app.services.event_service import event_service

router = APIRouter()


@router.get("/me/assigned-events")
async def list_assigned_events(current_user: dict = Depends(get_event_incharge)):
    """Events assigned to the signed-in in-charge, with what each assignment allows"""
    return await event_service.list_assigned_events(current_user)
