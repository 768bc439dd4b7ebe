"""
Admin Routes
Users, approvals, event moderation, orders, registrations and revenue
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status

from app.auth import get_admin
from app.schemas.admin import (
    CreateStaffRequest,
    UserStatusRequest,
    ApprovalRequest,
    ModerateEventRequest,
    EventStatusRequest,
    BulkModerateRequest,
    AssignmentsRequest,
)
from app.schemas.order import AdminOrderUpdateRequest, BulkOrderUpdateRequest, CompletionNoticeRequest
from app.services.admin_service import admin_service
from app.services.certificate_service import certificate_service
from app.services.event_service import event_service
from app.services.order_service import order_service
from app.services.registration_order_service import registration_order_service
from app.utils.helpers import get_pagination_params

router = APIRouter()


@router.get("/dashboard")
async def get_dashboard(current_admin: dict = Depends(get_admin)):
    """Platform-wide counts: users, events, pending approvals, orders, revenue"""
    return await admin_service.get_dashboard()


# ---- users ----

@router.get("/users")
async def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    role: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    current_admin: dict = Depends(get_admin)
):
    paging = get_pagination_params(page, limit)
    return await admin_service.list_users(
        paging["page"], paging["limit"], paging["offset"],
        {"role": role, "search": search, "is_active": is_active}
    )


@router.get("/users/{unique_id}/details")
async def get_user_details(unique_id: str, current_admin: dict = Depends(get_admin)):
    return await admin_service.get_user_details(unique_id)


@router.patch("/users/{user_id}/status")
async def set_user_status(
    user_id: UUID,
    body: UserStatusRequest,
    request: Request,
    current_admin: dict = Depends(get_admin)
):
    client_ip = request.client.host if request.client else None
    return await admin_service.set_user_status(current_admin, str(user_id), body.is_active, client_ip)


@router.get("/users/{user_id}/activity")
async def get_user_activity(
    user_id: UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    current_admin: dict = Depends(get_admin)
):
    paging = get_pagination_params(page, limit)
    return await admin_service.get_user_activity(str(user_id), paging["page"], paging["limit"], paging["offset"])


@router.post("/create-event-incharge", status_code=status.HTTP_201_CREATED)
async def create_event_incharge(request: CreateStaffRequest, current_admin: dict = Depends(get_admin)):
    """Create an event in-charge; the temporary password is emailed"""
    return await admin_service.create_staff_user(current_admin, "EVENT_INCHARGE", request.model_dump())


@router.post("/create-admin", status_code=status.HTTP_201_CREATED)
async def create_admin(request: CreateStaffRequest, current_admin: dict = Depends(get_admin)):
    return await admin_service.create_staff_user(current_admin, "ADMIN", request.model_dump())


# ---- approvals ----

@router.get("/pending-coaches")
async def pending_coaches(current_admin: dict = Depends(get_admin)):
    return await admin_service.list_pending("coach")


@router.put("/coaches/{coach_id}/approval")
async def approve_coach(coach_id: UUID, request: ApprovalRequest, current_admin: dict = Depends(get_admin)):
    return await admin_service.set_approval(current_admin, "coach", str(coach_id), request.status, request.remarks)


@router.get("/pending-institutes")
async def pending_institutes(current_admin: dict = Depends(get_admin)):
    return await admin_service.list_pending("institute")


@router.put("/institutes/{institute_id}/approval")
async def approve_institute(institute_id: UUID, request: ApprovalRequest, current_admin: dict = Depends(get_admin)):
    return await admin_service.set_approval(
        current_admin, "institute", str(institute_id), request.status, request.remarks
    )


# ---- events ----

@router.get("/events")
async def list_events(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: Optional[str] = Query(None, alias="status"),
    sport: Optional[str] = Query(None),
    city: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    creator_type: Optional[str] = Query(None),
    current_admin: dict = Depends(get_admin)
):
    paging = get_pagination_params(page, limit)
    filters = {"status": status_filter, "sport": sport, "city": city, "search": search, "creator_type": creator_type}
    return await admin_service.list_events(current_admin, paging["page"], paging["limit"], paging["offset"], filters)


@router.get("/pending-events")
async def pending_events(current_admin: dict = Depends(get_admin)):
    return await admin_service.list_pending_events()


@router.put("/events/bulk-moderate")
async def bulk_moderate(request: BulkModerateRequest, current_admin: dict = Depends(get_admin)):
    return await admin_service.bulk_moderate(
        current_admin, [str(e) for e in request.event_ids], request.action, request.remarks
    )


@router.put("/events/{event_id}/moderate")
async def moderate_event(event_id: str, request: ModerateEventRequest, current_admin: dict = Depends(get_admin)):
    """
    Moderate an event

    - **action**: APPROVE, REJECT, SUSPEND or RESTART (back to APPROVED)
    """
    return await admin_service.moderate_event(current_admin, event_id, request.action, request.notes)


@router.put("/events/{event_id}/status")
async def set_event_status(event_id: str, request: EventStatusRequest, current_admin: dict = Depends(get_admin)):
    return await admin_service.set_event_status(current_admin, event_id, request.status, request.remarks)


@router.get("/events/{event_id}/participants")
async def event_participants(event_id: str, current_admin: dict = Depends(get_admin)):
    return await event_service.list_participants(current_admin, event_id)


@router.get("/events/{event_id}/assignments")
async def get_assignments(event_id: str, current_admin: dict = Depends(get_admin)):
    return await admin_service.get_assignments(event_id)


@router.put("/events/{event_id}/assignments")
async def set_assignments(event_id: str, request: AssignmentsRequest, current_admin: dict = Depends(get_admin)):
    return await admin_service.set_assignments(
        current_admin, event_id, [a.model_dump() for a in request.assignments]
    )


@router.get("/events/{event_id}/certificates")
async def event_certificates(event_id: str, current_admin: dict = Depends(get_admin)):
    return await certificate_service.list_for_event(current_admin, event_id)


# ---- bulk registration orders ----

@router.get("/events/{event_id}/registrations/orders")
async def event_registration_orders(event_id: str, current_admin: dict = Depends(get_admin)):
    return await registration_order_service.admin_list_event_orders(event_id)


@router.post("/events/{event_id}/registrations/notify-completion")
async def notify_completion(
    event_id: str,
    request: Optional[CompletionNoticeRequest] = None,
    current_admin: dict = Depends(get_admin)
):
    return await registration_order_service.notify_completion(
        current_admin, event_id, request.message if request else None
    )


@router.post("/registrations/orders/{order_id}/generate-certificates")
async def generate_registration_certificates(order_id: UUID, current_admin: dict = Depends(get_admin)):
    return await certificate_service.generate_for_registration_order(current_admin, str(order_id))


# ---- event orders ----

@router.get("/orders")
async def list_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: Optional[str] = Query(None, alias="status"),
    event_id: Optional[UUID] = Query(None),
    coach_id: Optional[UUID] = Query(None),
    search: Optional[str] = Query(None),
    urgent_only: bool = Query(False),
    current_admin: dict = Depends(get_admin)
):
    paging = get_pagination_params(page, limit)
    filters = {
        "status": status_filter,
        "event_id": str(event_id) if event_id else None,
        "coach_id": str(coach_id) if coach_id else None,
        "search": search,
        "urgent_only": urgent_only,
    }
    return await order_service.admin_list_orders(paging["page"], paging["limit"], paging["offset"], filters)


@router.get("/orders/stats")
async def order_stats(current_admin: dict = Depends(get_admin)):
    return await order_service.admin_order_stats()


@router.put("/orders/bulk-update")
async def bulk_update_orders(request: BulkOrderUpdateRequest, current_admin: dict = Depends(get_admin)):
    return await order_service.admin_bulk_update(current_admin, [str(o) for o in request.order_ids], request.status)


@router.put("/orders/{order_id}")
async def update_order(order_id: UUID, request: AdminOrderUpdateRequest, current_admin: dict = Depends(get_admin)):
    """Quote prices or move the order along its status lifecycle"""
    return await order_service.admin_update_order(current_admin, str(order_id), request.model_dump(exclude_unset=True))


# ---- revenue ----

@router.get("/revenue/dashboard")
async def revenue_dashboard(current_admin: dict = Depends(get_admin)):
    return await admin_service.revenue_dashboard()
