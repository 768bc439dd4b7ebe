"""
Payment Routes
Subscription plans, Razorpay order creation and verification
"""

from fastapi import APIRouter, Depends, Query

from app.auth import get_current_user
from app.schemas.payment import CreatePaymentOrderRequest, VerifyPaymentRequest
from app.services.payment_service import payment_service
from app.utils.helpers import get_pagination_params

router = APIRouter()


@router.get("/plans")
async def get_all_plans():
    return payment_service.get_all_plans()


@router.get("/plans/{user_type}")
async def get_plans(user_type: str):
    """Plans for student, coach, club or institute"""
    return payment_service.get_plans(user_type)


@router.post("/create-order")
async def create_order(request: CreatePaymentOrderRequest, current_user: dict = Depends(get_current_user)):
    return await payment_service.create_order(current_user, request.user_type, request.plan_id)


@router.post("/verify")
async def verify_payment(request: VerifyPaymentRequest, current_user: dict = Depends(get_current_user)):
    """Verify the Razorpay signature and activate the subscription"""
    return await payment_service.verify_payment(
        current_user,
        request.razorpay_order_id,
        request.razorpay_payment_id,
        request.razorpay_signature,
        request.user_type,
    )


@router.get("/history")
async def get_history(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: dict = Depends(get_current_user)
):
    paging = get_pagination_params(page, limit)
    return await payment_service.get_history(current_user, paging["page"], paging["limit"], paging["offset"])
