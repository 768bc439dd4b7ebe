"""
Payment Service
Subscription plans, Razorpay checkout and payment history
"""

import json
import logging
import uuid
from datetime import timezone

from fastapi import HTTPException, status

from app.auth.dependencies import PROFILE_TABLES
from app.config import settings
from app.database import database, update_row
from app.payment_plans import PAYMENT_PLANS, USER_TYPES, get_plan, get_plans_for_user_type
from app.services.notification_service import notification_service
from app.services.payment_gateway import payment_gateway
from app.utils.datetime_ist import add_months, utc_now
from app.utils.financial_year import get_financial_year_end
from app.utils.helpers import get_pagination_meta
from app.utils.serializers import serialize_row
from app.utils.uid import build_receipt

logger = logging.getLogger(__name__)


def _validate_user_type(user_type: str) -> str:
    user_type = (user_type or "").lower()
    if user_type not in USER_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid user type. Must be one of: {', '.join(USER_TYPES)}"
        )
    return user_type


def subscription_terms(user_type: str, now=None) -> tuple[str, object]:
    """(subscription_type, expiry) granted by a successful subscription payment"""
    now = now or utc_now()
    if user_type == "coach":
        return "ANNUAL", get_financial_year_end(now).astimezone(timezone.utc)
    return "MONTHLY", add_months(now, 1)


def present_payment(row) -> dict:
    payment = serialize_row(row, exclude=("razorpay_signature",))
    payment["amount"] = float(payment["amount"] or 0)
    raw = payment.get("details")
    try:
        payment["details"] = json.loads(raw) if raw else None
    except (TypeError, ValueError):
        payment["details"] = None
    return payment


class PaymentService:
    """Service for subscription payments"""

    @staticmethod
    def get_plans(user_type: str) -> dict:
        user_type = _validate_user_type(user_type)
        return {"user_type": user_type, **get_plans_for_user_type(user_type)}

    @staticmethod
    def get_all_plans() -> dict:
        return {"plans": PAYMENT_PLANS}

    @staticmethod
    async def create_order(current_user: dict, user_type: str, plan_id: str = None) -> dict:
        user_type = _validate_user_type(user_type)
        if current_user["role"].lower() != user_type:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You can only purchase plans for your own account type"
            )

        plan = get_plan(user_type, plan_id)
        if not plan:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid plan")

        amount = float(plan["price"])
        receipt = build_receipt(user_type, current_user["id"])
        razorpay_order = await payment_gateway.create_order(
            payment_gateway.to_paise(amount),
            receipt,
            {"user_id": current_user["id"], "user_type": user_type, "plan_id": plan["id"]},
        )

        payment_id = str(uuid.uuid4())
        now = utc_now()
        await database.execute(
            """
            INSERT INTO payments (id, user_id, user_type, payment_type, plan_id, amount, currency,
                                  razorpay_order_id, status, description, details, created_at, updated_at)
            VALUES (:id, :user_id, :user_type, 'SUBSCRIPTION', :plan_id, :amount, :currency,
                    :rzp_order, 'PENDING', :description, :details, :now, :now)
            """,
            {
                "id": payment_id,
                "user_id": current_user["id"],
                "user_type": user_type,
                "plan_id": plan["id"],
                "amount": amount,
                "currency": settings.CURRENCY,
                "rzp_order": razorpay_order["id"],
                "description": f"{plan['name']} subscription",
                "details": json.dumps({"receipt": receipt, "plan_name": plan["name"]}),
                "now": now,
            }
        )
        logger.info("[PAYMENT] Subscription order %s for %s (%s)", razorpay_order["id"], current_user["unique_id"], plan["id"])

        return {
            "order_id": razorpay_order["id"],
            "amount": payment_gateway.to_paise(amount),
            "currency": settings.CURRENCY,
            "key_id": payment_gateway.key_id(),
            "payment_id": payment_id,
            "plan": plan,
        }

    @staticmethod
    async def verify_payment(
        current_user: dict,
        razorpay_order_id: str,
        razorpay_payment_id: str,
        razorpay_signature: str,
        user_type: str = None
    ) -> dict:
        """
        Confirm a subscription checkout. Terms follow the caller's role;
        each order can be confirmed once.
        """
        role_type = _validate_user_type(current_user["role"])
        if user_type and user_type.lower() != role_type:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You can only verify payments for your own account type"
            )
        if not payment_gateway.verify_signature(razorpay_order_id, razorpay_payment_id, razorpay_signature):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid payment signature")

        payment = await database.fetch_one(
            """
            SELECT * FROM payments
            WHERE razorpay_order_id = :rzp_order AND user_id = :user_id AND payment_type = 'SUBSCRIPTION'
            """,
            {"rzp_order": razorpay_order_id, "user_id": current_user["id"]}
        )
        if not payment:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment record not found")
        if payment["status"] != "PENDING":
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Payment has already been processed")

        now = utc_now()
        subscription_type, expires_at = subscription_terms(role_type, now)
        table = PROFILE_TABLES.get(current_user["role"])

        async with database.transaction():
            claimed = await database.fetch_one(
                """
                UPDATE payments
                SET status = 'SUCCESS', razorpay_payment_id = :pid, razorpay_signature = :sig, updated_at = :now
                WHERE id = :id AND status = 'PENDING'
                RETURNING id
                """,
                {"pid": razorpay_payment_id, "sig": razorpay_signature, "now": now, "id": str(payment["id"])}
            )
            if not claimed:
                raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Payment has already been processed")
            if table and current_user.get("profile"):
                await update_row(table, current_user["profile"]["id"], {
                    "payment_status": "SUCCESS",
                    "is_active": True,
                    "subscription_type": subscription_type,
                    "subscription_expires_at": expires_at,
                })

        await notification_service.notify(
            current_user["id"], "PAYMENT_RECEIVED", "Payment successful",
            f"Your {payment['description'] or 'subscription'} payment of INR {float(payment['amount']):.2f} was received",
            {"paymentId": str(payment["id"]), "planId": payment["plan_id"]}
        )
        logger.info("[PAYMENT] %s verified for %s", razorpay_payment_id, current_user["unique_id"])

        plans = get_plans_for_user_type(role_type)
        return {
            "message": "Payment verified successfully",
            "subscription_type": subscription_type,
            "subscription_expires_at": serialize_row({"subscription_expires_at": expires_at})["subscription_expires_at"],
            "redirect_path": plans["redirect_path"],
        }

    @staticmethod
    async def get_history(current_user: dict, page: int, limit: int, offset: int) -> dict:
        params = {"user_id": current_user["id"]}
        total = await database.fetch_val("SELECT COUNT(*) FROM payments WHERE user_id = :user_id", params)
        rows = await database.fetch_all(
            """
            SELECT * FROM payments
            WHERE user_id = :user_id
            ORDER BY created_at DESC
            LIMIT :limit OFFSET :offset
            """,
            {**params, "limit": limit, "offset": offset}
        )
        return {
            "payments": [present_payment(r) for r in rows],
            "pagination": get_pagination_meta(int(total or 0), page, limit),
        }


# Create singleton instance
payment_service = PaymentService()
