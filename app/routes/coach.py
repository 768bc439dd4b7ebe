"""
Coach Routes
Profile, connection requests, roster import, event orders and bulk registrations
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Query, UploadFile, status

from app.auth import get_coach, get_paid_coach
from app.schemas.order import (
    EventOrderCreateRequest,
    EventOrderUpdateRequest,
    RazorpayVerifyRequest,
    BulkRegistrationRequest,
)
from app.schemas.profile import CoachProfileUpdate, ConnectionResponseRequest
from app.services.coach_service import coach_service
from app.services.order_service import order_service
from app.services.registration_order_service import registration_order_service
from app.services.roster_import_service import roster_import_service
from app.utils.helpers import get_pagination_params

router = APIRouter()


@router.get("/profile")
async def get_profile(current_user: dict = Depends(get_coach)):
    return await coach_service.get_profile(current_user)


@router.put("/profile")
async def update_profile(request: CoachProfileUpdate, current_user: dict = Depends(get_coach)):
    return await coach_service.update_profile(current_user, request.model_dump(exclude_unset=True))


@router.get("/dashboard")
async def get_dashboard(current_user: dict = Depends(get_coach)):
    return await coach_service.get_dashboard(current_user)


@router.get("/connection-requests")
async def list_connection_requests(
    status_filter: Optional[str] = Query("PENDING", alias="status"),
    current_user: dict = Depends(get_coach)
):
    return await coach_service.list_connection_requests(current_user, status_filter)


@router.put("/connection-requests/{connection_id}")
async def respond_to_request(
    connection_id: UUID,
    request: ConnectionResponseRequest,
    current_user: dict = Depends(get_coach)
):
    return await coach_service.respond_to_request(current_user, str(connection_id), request.status)


@router.get("/students")
async def list_students(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None),
    current_user: dict = Depends(get_coach)
):
    paging = get_pagination_params(page, limit)
    return await coach_service.list_students(
        current_user, paging["page"], paging["limit"], paging["offset"], search
    )


@router.post("/students/bulk-upload", status_code=status.HTTP_201_CREATED)
async def bulk_upload_students(
    file: UploadFile = File(...),
    current_user: dict = Depends(get_paid_coach)
):
    """
    Create student accounts from a CSV/XLSX roster

    Created students are connected to this coach straight away.
    """
    content = await file.read()
    return await roster_import_service.import_students(file.filename, content, "COACH", current_user["profile"])


# ---- event orders ----

@router.post("/events/{event_id}/orders", status_code=status.HTTP_201_CREATED)
async def create_order(
    event_id: str,
    request: EventOrderCreateRequest,
    current_user: dict = Depends(get_paid_coach)
):
    """Order certificates, medals and trophies for one of your events"""
    return await order_service.create_order(current_user, event_id, request.model_dump())


@router.get("/events/{event_id}/orders")
async def list_event_orders(event_id: str, current_user: dict = Depends(get_paid_coach)):
    return await order_service.list_event_orders(current_user, event_id)


@router.put("/events/{event_id}/orders/{order_id}")
async def update_order(
    event_id: str,
    order_id: UUID,
    request: EventOrderUpdateRequest,
    current_user: dict = Depends(get_paid_coach)
):
    return await order_service.update_order(
        current_user, event_id, str(order_id), request.model_dump(exclude_unset=True)
    )


@router.delete("/events/{event_id}/orders/{order_id}")
async def delete_order(event_id: str, order_id: UUID, current_user: dict = Depends(get_paid_coach)):
    return await order_service.delete_order(current_user, event_id, str(order_id))


@router.post("/orders/{order_id}/create-payment")
async def create_order_payment(order_id: UUID, current_user: dict = Depends(get_paid_coach)):
    return await order_service.create_payment(current_user, str(order_id))


@router.post("/orders/{order_id}/verify-payment")
async def verify_order_payment(
    order_id: UUID,
    request: RazorpayVerifyRequest,
    current_user: dict = Depends(get_paid_coach)
):
    return await order_service.verify_payment(
        current_user, str(order_id),
        request.razorpay_order_id, request.razorpay_payment_id, request.razorpay_signature
    )


# ---- bulk registrations ----

@router.post("/events/{event_id}/registrations/bulk", status_code=status.HTTP_201_CREATED)
async def create_bulk_registration(
    event_id: str,
    request: BulkRegistrationRequest,
    current_user: dict = Depends(get_paid_coach)
):
    return await registration_order_service.create_bulk_registration(
        current_user, event_id, [str(s) for s in request.student_ids], request.event_fee_per_student
    )


@router.get("/events/{event_id}/registrations/orders")
async def list_registration_orders(event_id: str, current_user: dict = Depends(get_paid_coach)):
    return await registration_order_service.list_coach_orders(current_user, event_id)


@router.post("/events/{event_id}/registrations/orders/{order_id}/payment")
async def create_registration_payment(
    event_id: str,
    order_id: UUID,
    current_user: dict = Depends(get_paid_coach)
):
    return await registration_order_service.create_payment(current_user, event_id, str(order_id))


@router.post("/events/{event_id}/registrations/orders/{order_id}/payment-success")
async def confirm_registration_payment(
    event_id: str,
    order_id: UUID,
    request: RazorpayVerifyRequest,
    current_user: dict = Depends(get_paid_coach)
):
    return await registration_order_service.confirm_payment(
        current_user, event_id, str(order_id),
        request.razorpay_order_id, request.razorpay_payment_id, request.razorpay_signature
    )
