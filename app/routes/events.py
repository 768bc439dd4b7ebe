"""
Event Routes
Event CRUD, student registration, participants and result files
"""

from io import BytesIO
from typing import Optional
from urllib.parse import quote
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import StreamingResponse

from app.auth import get_current_user, get_student, require_roles
from app.auth.dependencies import ensure_approved, ensure_paid_coach
from app.schemas.event import EventCreateRequest, EventUpdateRequest, EventCancelRequest
from app.services.event_service import event_service
from app.utils.helpers import get_pagination_params

router = APIRouter()


async def get_event_creator(
    current_user: dict = Depends(require_roles("COACH", "INSTITUTE", "CLUB", "ADMIN"))
) -> dict:
    """Paid coaches, approved institutes, clubs and admins create events"""
    if current_user["role"] == "COACH":
        ensure_paid_coach(current_user)
    elif current_user["role"] == "INSTITUTE":
        ensure_approved(current_user)
    return current_user


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_event(request: EventCreateRequest, current_user: dict = Depends(get_event_creator)):
    """
    Create an event; it starts PENDING until an admin approves it

    Dates without an offset are read as IST.
    """
    return await event_service.create_event(current_user, request.model_dump())


@router.get("")
async def list_events(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sport: Optional[str] = Query(None),
    city: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    start_from: Optional[str] = Query(None),
    start_to: Optional[str] = Query(None),
    max_fees: Optional[float] = Query(None, ge=0),
    search: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    creator_type: Optional[str] = Query(None),
    mine: bool = Query(False),
    current_user: dict = Depends(get_current_user)
):
    paging = get_pagination_params(page, limit)
    filters = {
        "sport": sport,
        "city": city,
        "location": location,
        "start_from": start_from,
        "start_to": start_to,
        "max_fees": max_fees,
        "search": search,
        "status": status_filter,
        "creator_type": creator_type,
        "mine": mine,
    }
    return await event_service.list_events(current_user, paging["page"], paging["limit"], paging["offset"], filters)


@router.get("/results/{file_id}/download")
async def download_result_file(file_id: UUID, current_user: dict = Depends(get_current_user)):
    content, filename, mime_type = await event_service.download_result_file(current_user, str(file_id))
    return StreamingResponse(
        BytesIO(content),
        media_type=mime_type,
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"}
    )


@router.delete("/results/{file_id}")
async def delete_result_file(file_id: UUID, current_user: dict = Depends(get_current_user)):
    return await event_service.delete_result_file(current_user, str(file_id))


@router.get("/{event_id}")
async def get_event(event_id: str, current_user: dict = Depends(get_current_user)):
    """Look up an event by id or unique id"""
    return await event_service.get_event(current_user, event_id)


@router.put("/{event_id}")
async def update_event(
    event_id: str,
    request: EventUpdateRequest,
    current_user: dict = Depends(get_current_user)
):
    return await event_service.update_event(current_user, event_id, request.model_dump(exclude_unset=True))


@router.delete("/{event_id}")
async def delete_event(event_id: str, current_user: dict = Depends(get_current_user)):
    return await event_service.delete_event(current_user, event_id)


@router.put("/{event_id}/cancel")
async def cancel_event(
    event_id: str,
    request: Optional[EventCancelRequest] = None,
    current_user: dict = Depends(get_current_user)
):
    return await event_service.cancel_event(current_user, event_id, request.reason if request else None)


@router.post("/{event_id}/register", status_code=status.HTTP_201_CREATED)
async def register_for_event(event_id: str, current_user: dict = Depends(get_student)):
    return await event_service.register_student(current_user, event_id)


@router.delete("/{event_id}/register")
async def unregister_from_event(event_id: str, current_user: dict = Depends(get_student)):
    return await event_service.unregister_student(current_user, event_id)


@router.get("/{event_id}/participants")
async def list_participants(event_id: str, current_user: dict = Depends(get_current_user)):
    return await event_service.list_participants(current_user, event_id)


@router.post("/{event_id}/results", status_code=status.HTTP_201_CREATED)
async def upload_result_file(
    event_id: str,
    file: UploadFile = File(...),
    description: Optional[str] = Form(None),
    current_user: dict = Depends(get_current_user)
):
    """Upload a PDF/XLSX/XLS/CSV result sheet (max 10MB)"""
    return await event_service.upload_result_file(current_user, event_id, file, description)


@router.get("/{event_id}/results")
async def list_result_files(event_id: str, current_user: dict = Depends(get_current_user)):
    return await event_service.list_result_files(current_user, event_id)
