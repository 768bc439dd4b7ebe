"""
Student Routes
Profile, dashboard, coach connections and event registrations
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.auth import get_student
from app.schemas.profile import StudentProfileUpdate, ConnectionRequest
from app.services.student_service import student_service
from app.utils.helpers import get_pagination_params

router = APIRouter()


@router.get("/profile")
async def get_profile(current_user: dict = Depends(get_student)):
    return await student_service.get_profile(current_user)


@router.put("/profile")
async def update_profile(request: StudentProfileUpdate, current_user: dict = Depends(get_student)):
    return await student_service.update_profile(current_user, request.model_dump(exclude_unset=True))


@router.get("/dashboard")
async def get_dashboard(current_user: dict = Depends(get_student)):
    return await student_service.get_dashboard(current_user)


@router.get("/coaches")
async def list_coaches(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None),
    sport: Optional[str] = Query(None),
    current_user: dict = Depends(get_student)
):
    """Paid, active coaches available for connection"""
    paging = get_pagination_params(page, limit)
    return await student_service.list_coaches(
        current_user, paging["page"], paging["limit"], paging["offset"], search, sport
    )


@router.post("/connect/{coach_id}")
async def request_connection(
    coach_id: UUID,
    request: Optional[ConnectionRequest] = None,
    current_user: dict = Depends(get_student)
):
    message = request.message if request else None
    return await student_service.request_connection(current_user, str(coach_id), message)


@router.get("/connections")
async def list_connections(current_user: dict = Depends(get_student)):
    return await student_service.list_connections(current_user)


@router.delete("/connections/{connection_id}")
async def remove_connection(connection_id: UUID, current_user: dict = Depends(get_student)):
    return await student_service.remove_connection(current_user, str(connection_id))


@router.get("/event-registrations")
async def list_event_registrations(current_user: dict = Depends(get_student)):
    return await student_service.list_event_registrations(current_user)
