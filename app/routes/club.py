"""
Club Routes
Profile, dashboard, members and facilities
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.auth import get_club
from app.schemas.club import ClubFacilityCreate, ClubFacilityUpdate, ClubMemberCreate, ClubMemberUpdate
from app.schemas.profile import ClubProfileUpdate
from app.services.club_service import club_service
from app.utils.helpers import get_pagination_params

router = APIRouter()


@router.get("/profile")
async def get_profile(current_user: dict = Depends(get_club)):
    return await club_service.get_profile(current_user)


@router.put("/profile")
async def update_profile(request: ClubProfileUpdate, current_user: dict = Depends(get_club)):
    return await club_service.update_profile(current_user, request.model_dump(exclude_unset=True))


@router.get("/dashboard")
async def get_dashboard(current_user: dict = Depends(get_club)):
    return await club_service.get_dashboard(current_user)


@router.get("/members")
async def list_members(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    member_status: Optional[str] = Query(None, alias="status"),
    search: Optional[str] = Query(None),
    current_user: dict = Depends(get_club)
):
    paging = get_pagination_params(page, limit)
    return await club_service.list_members(
        current_user, paging["page"], paging["limit"], paging["offset"], member_status, search
    )


@router.post("/members", status_code=status.HTTP_201_CREATED)
async def add_member(request: ClubMemberCreate, current_user: dict = Depends(get_club)):
    return await club_service.add_member(current_user, request.model_dump())


@router.put("/members/{member_id}")
async def update_member(member_id: UUID, request: ClubMemberUpdate, current_user: dict = Depends(get_club)):
    return await club_service.update_member(current_user, str(member_id), request.model_dump(exclude_unset=True))


@router.delete("/members/{member_id}")
async def remove_member(member_id: UUID, current_user: dict = Depends(get_club)):
    return await club_service.remove_member(current_user, str(member_id))


@router.get("/facilities")
async def list_facilities(
    facility_type: Optional[str] = Query(None, alias="type"),
    available: Optional[bool] = Query(None),
    current_user: dict = Depends(get_club)
):
    return await club_service.list_facilities(current_user, facility_type, available)


@router.post("/facilities", status_code=status.HTTP_201_CREATED)
async def add_facility(request: ClubFacilityCreate, current_user: dict = Depends(get_club)):
    return await club_service.add_facility(current_user, request.model_dump())


@router.put("/facilities/{facility_id}")
async def update_facility(facility_id: UUID, request: ClubFacilityUpdate, current_user: dict = Depends(get_club)):
    return await club_service.update_facility(
        current_user, str(facility_id), request.model_dump(exclude_unset=True)
    )


@router.delete("/facilities/{facility_id}")
async def delete_facility(facility_id: UUID, current_user: dict = Depends(get_club)):
    return await club_service.delete_facility(current_user, str(facility_id))
