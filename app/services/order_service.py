"""
Order Service
Certificate/medal/trophy orders: coach requests, admin quotes and processing, Razorpay payment
"""

import json
import logging
import uuid
from typing import List, Optional

from fastapi import HTTPException, status

from app.config import settings
from app.database import database, update_row
from app.services.activity_log_service import activity_log_service
from app.services.email_service import email_service
from app.services.event_service import event_service
from app.services.notification_service import notification_service, order_status_notification_type
from app.services.payment_gateway import payment_gateway
from app.utils.datetime_ist import utc_now
from app.utils.helpers import get_pagination_meta, sanitize_input
from app.utils.serializers import serialize_row
from app.utils.uid import build_receipt, generate_order_number

logger = logging.getLogger(__name__)

ORDER_STATUSES = (
    "PENDING", "QUOTED", "CONFIRMED", "PAYMENT_PENDING", "PAID", "IN_PROGRESS", "COMPLETED", "CANCELLED",
)
ORDER_ITEMS = ("certificates", "medals", "trophies")
EDITABLE_STATUSES = ("PENDING",)
DELETABLE_STATUSES = ("PENDING", "QUOTED")


def present_order(row) -> dict:
    order = serialize_row(row)
    for field in ("total_amount", "certificate_price", "medal_price", "trophy_price"):
        if order.get(field) is not None:
            order[field] = float(order[field])
    return order


def validate_order_status(value: str) -> str:
    value = (value or "").upper()
    if value not in ORDER_STATUSES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid status. Must be one of: {', '.join(ORDER_STATUSES)}"
        )
    return value


def _quantities(data: dict, current: Optional[dict] = None) -> dict:
    values = {}
    for item in ORDER_ITEMS:
        raw = data.get(item)
        if raw is None:
            values[item] = int((current or {}).get(item) or 0)
            continue
        try:
            values[item] = int(raw)
        except (TypeError, ValueError):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{item} must be a number")
        if values[item] < 0:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{item} cannot be negative")
    if sum(values.values()) <= 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="At least one of certificates, medals or trophies must be greater than 0"
        )
    return values


class OrderService:
    """Service for event order operations"""

    @staticmethod
    async def _get_coach_event(current_user: dict, event_id: str) -> dict:
        event = await event_service.get_event_row(event_id)
        if str(event["created_by"]) != current_user["id"]:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="You can only manage orders for your own events"
            )
        return event

    @staticmethod
    async def get_order_row(order_id: str) -> dict:
        row = await database.fetch_one("SELECT * FROM event_orders WHERE id = :id", {"id": order_id})
        if not row:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
        return dict(row)

    @staticmethod
    async def _get_coach_order(current_user: dict, order_id: str, event_id: Optional[str] = None) -> dict:
        order = await OrderService.get_order_row(order_id)
        if str(order["coach_id"]) != str(current_user["profile"]["id"]):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
        if event_id and str(order["event_id"]) != str(event_id):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
        return order

    @staticmethod
    async def create_order(current_user: dict, event_id: str, data: dict) -> dict:
        event = await OrderService._get_coach_event(current_user, event_id)
        coach_id = str(current_user["profile"]["id"])
        quantities = _quantities(data)

        existing = await database.fetch_val(
            "SELECT COUNT(*) FROM event_orders WHERE event_id = :eid AND coach_id = :cid AND status != 'CANCELLED'",
            {"eid": str(event["id"]), "cid": coach_id}
        )
        if existing:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="An order already exists for this event. Update the existing order instead."
            )

        order_id = str(uuid.uuid4())
        order_number = await generate_order_number("event_orders", "ORD")
        now = utc_now()
        await database.execute(
            """
            INSERT INTO event_orders (
                id, order_number, event_id, coach_id, certificates, medals, trophies,
                special_instructions, urgent_delivery, total_amount, status, created_at, updated_at
            )
            VALUES (
                :id, :order_number, :eid, :cid, :certificates, :medals, :trophies,
                :special_instructions, :urgent_delivery, 0, 'PENDING', :now, :now
            )
            """,
            {
                "id": order_id,
                "order_number": order_number,
                "eid": str(event["id"]),
                "cid": coach_id,
                **quantities,
                "special_instructions": sanitize_input(data.get("special_instructions")),
                "urgent_delivery": bool(data.get("urgent_delivery")),
                "now": now,
            }
        )
        logger.info("[ORDER] %s created for event %s", order_number, event["unique_id"])

        admins = await database.fetch_all("SELECT id FROM users WHERE role = 'ADMIN' AND is_active = TRUE")
        for admin in admins:
            await notification_service.notify(
                admin["id"], "GENERAL", "New order received",
                f"Order {order_number} for {event['name']} needs a quote",
                {"orderId": order_id, "eventId": str(event["id"])}
            )

        return {"message": "Order created successfully", "order": present_order(await OrderService.get_order_row(order_id))}

    @staticmethod
    async def list_event_orders(current_user: dict, event_id: str) -> dict:
        event = await OrderService._get_coach_event(current_user, event_id)
        rows = await database.fetch_all(
            """
            SELECT * FROM event_orders
            WHERE event_id = :eid AND coach_id = :cid
            ORDER BY created_at DESC
            """,
            {"eid": str(event["id"]), "cid": str(current_user["profile"]["id"])}
        )
        return {"orders": [present_order(r) for r in rows]}

    @staticmethod
    async def update_order(current_user: dict, event_id: str, order_id: str, data: dict) -> dict:
        order = await OrderService._get_coach_order(current_user, order_id, event_id)
        if order["status"] not in EDITABLE_STATUSES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Only pending orders can be modified"
            )

        values = _quantities(data, order)
        if "special_instructions" in data:
            values["special_instructions"] = sanitize_input(data.get("special_instructions"))
        if data.get("urgent_delivery") is not None:
            values["urgent_delivery"] = bool(data["urgent_delivery"])

        await update_row("event_orders", order_id, values)
        return {"message": "Order updated successfully", "order": present_order(await OrderService.get_order_row(order_id))}

    @staticmethod
    async def delete_order(current_user: dict, event_id: str, order_id: str) -> dict:
        order = await OrderService._get_coach_order(current_user, order_id, event_id)
        if order["status"] not in DELETABLE_STATUSES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Only pending or quoted orders can be deleted"
            )
        await database.execute("DELETE FROM event_orders WHERE id = :id", {"id": order_id})
        return {"message": "Order deleted successfully"}

    @staticmethod
    async def create_payment(current_user: dict, order_id: str) -> dict:
        """Open a Razorpay order for a confirmed (priced) event order"""
        order = await OrderService._get_coach_order(current_user, order_id)
        if order.get("payment_status") == "SUCCESS":
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Order is already paid")
        if order["status"] != "CONFIRMED":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Order must be confirmed by admin before payment"
            )
        amount = float(order["total_amount"] or 0)
        if amount <= 0:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Order amount has not been set")

        razorpay_order = await payment_gateway.create_order(
            payment_gateway.to_paise(amount),
            build_receipt("order", order_id),
            {"order_id": order_id, "order_number": order["order_number"], "type": "EVENT_ORDER"},
        )

        now = utc_now()
        async with database.transaction():
            await update_row("event_orders", order_id, {
                "status": "PAYMENT_PENDING",
                "payment_status": "PENDING",
                "razorpay_order_id": razorpay_order["id"],
            })
            await database.execute(
                """
                INSERT INTO payments (id, user_id, user_type, payment_type, reference_id, amount, currency,
                                      razorpay_order_id, status, description, details, created_at, updated_at)
                VALUES (:id, :user_id, 'coach', 'EVENT_ORDER', :ref, :amount, :currency,
                        :rzp_order, 'PENDING', :description, :details, :now, :now)
                """,
                {
                    "id": str(uuid.uuid4()),
                    "user_id": current_user["id"],
                    "ref": order_id,
                    "amount": amount,
                    "currency": settings.CURRENCY,
                    "rzp_order": razorpay_order["id"],
                    "description": f"Payment for order {order['order_number']}",
                    "details": json.dumps({"order_number": order["order_number"]}),
                    "now": now,
                }
            )

        return {
            "message": "Payment order created",
            "razorpay_order_id": razorpay_order["id"],
            "amount": payment_gateway.to_paise(amount),
            "currency": settings.CURRENCY,
            "key_id": payment_gateway.key_id(),
            "order": present_order(await OrderService.get_order_row(order_id)),
        }

    @staticmethod
    async def verify_payment(
        current_user: dict,
        order_id: str,
        razorpay_order_id: str,
        razorpay_payment_id: str,
        razorpay_signature: str
    ) -> dict:
        order = await OrderService._get_coach_order(current_user, order_id)
        if order.get("razorpay_order_id") != razorpay_order_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Payment order mismatch")
        if not payment_gateway.verify_signature(razorpay_order_id, razorpay_payment_id, razorpay_signature):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid payment signature")

        now = utc_now()
        async with database.transaction():
            await update_row("event_orders", order_id, {
                "status": "PAID",
                "payment_status": "SUCCESS",
                "razorpay_payment_id": razorpay_payment_id,
                "payment_method": "razorpay",
                "payment_date": now,
            })
            await database.execute(
                """
                UPDATE payments
                SET status = 'SUCCESS', razorpay_payment_id = :pid, razorpay_signature = :sig, updated_at = :now
                WHERE razorpay_order_id = :rzp_order AND user_id = :user_id
                """,
                {
                    "pid": razorpay_payment_id,
                    "sig": razorpay_signature,
                    "now": now,
                    "rzp_order": razorpay_order_id,
                    "user_id": current_user["id"],
                }
            )

        payment = await database.fetch_one(
            "SELECT id FROM payments WHERE razorpay_order_id = :rzp_order", {"rzp_order": razorpay_order_id}
        )
        await notification_service.notify(
            current_user["id"], "PAYMENT_RECEIVED", "Payment successful",
            f"Payment received for order {order['order_number']}",
            {"orderId": order_id, "paymentId": str(payment["id"]) if payment else None}
        )
        logger.info("[ORDER] %s paid (%s)", order["order_number"], razorpay_payment_id)
        return {"message": "Payment verified successfully", "order": present_order(await OrderService.get_order_row(order_id))}

    # Admin

    @staticmethod
    async def admin_list_orders(page: int, limit: int, offset: int, filters: dict) -> dict:
        where = []
        params = {}
        if filters.get("status"):
            where.append("o.status = :status")
            params["status"] = validate_order_status(filters["status"])
        if filters.get("event_id"):
            where.append("o.event_id = :event_id")
            params["event_id"] = str(filters["event_id"])
        if filters.get("coach_id"):
            where.append("o.coach_id = :coach_id")
            params["coach_id"] = str(filters["coach_id"])
        if filters.get("urgent_only"):
            where.append("o.urgent_delivery = TRUE")
        if filters.get("search"):
            where.append(
                "(LOWER(o.order_number) LIKE :search OR LOWER(e.name) LIKE :search OR LOWER(c.name) LIKE :search)"
            )
            params["search"] = f"%{filters['search'].strip().lower()}%"
        where_clause = f"WHERE {' AND '.join(where)}" if where else ""

        base = f"""
            FROM event_orders o
            JOIN events e ON e.id = o.event_id
            JOIN coaches c ON c.id = o.coach_id
            JOIN users u ON u.id = c.user_id
            {where_clause}
        """
        total = await database.fetch_val(f"SELECT COUNT(*) {base}", params)
        rows = await database.fetch_all(
            f"""
            SELECT o.*, e.name AS event_name, e.unique_id AS event_uid,
                   c.name AS coach_name, u.email AS coach_email, u.unique_id AS coach_uid
            {base}
            ORDER BY o.urgent_delivery DESC, o.created_at DESC
            LIMIT :limit OFFSET :offset
            """,
            {**params, "limit": limit, "offset": offset}
        )

        summary_rows = await database.fetch_all(
            "SELECT status, COUNT(*) AS count FROM event_orders GROUP BY status"
        )
        counts = {r["status"]: int(r["count"]) for r in summary_rows}
        urgent = await database.fetch_val(
            """
            SELECT COUNT(*) FROM event_orders
            WHERE urgent_delivery = TRUE AND status IN ('PENDING', 'CONFIRMED', 'IN_PROGRESS')
            """
        )

        return {
            "orders": [present_order(r) for r in rows],
            "pagination": get_pagination_meta(int(total or 0), page, limit),
            "summary": {
                "pending": counts.get("PENDING", 0),
                "confirmed": counts.get("CONFIRMED", 0),
                "in_progress": counts.get("IN_PROGRESS", 0),
                "completed": counts.get("COMPLETED", 0),
                "urgent": int(urgent or 0),
            },
        }

    @staticmethod
    async def _notify_order_status(order: dict, new_status: str, remarks: Optional[str] = None):
        """Notification + email to the ordering coach; failures are logged only"""
        coach = await database.fetch_one(
            """
            SELECT u.id AS user_id, u.email, c.name, e.name AS event_name
            FROM coaches c
            JOIN users u ON u.id = c.user_id
            JOIN events e ON e.id = :eid
            WHERE c.id = :cid
            """,
            {"cid": str(order["coach_id"]), "eid": str(order["event_id"])}
        )
        if not coach:
            return

        label = new_status.replace("_", " ").title()
        message = f"Your order {order['order_number']} for {coach['event_name']} is now {label}"
        if remarks:
            message += f". {remarks}"
        await notification_service.notify(
            coach["user_id"], order_status_notification_type(new_status), f"Order {label}", message,
            {"orderId": str(order["id"]), "orderNumber": order["order_number"], "status": new_status}
        )
        try:
            await email_service.send_order_status_email(
                coach["email"], coach["name"], order["order_number"], coach["event_name"],
                new_status, float(order.get("total_amount") or 0), remarks
            )
        except Exception as e:
            logger.warning("[ORDER] Status email for %s failed: %s", order["order_number"], e)

    @staticmethod
    async def admin_update_order(admin: dict, order_id: str, data: dict) -> dict:
        """
        Quote or move an order along its lifecycle

        Unit prices recompute the total; otherwise an explicit total_amount is used.
        """
        order = await OrderService.get_order_row(order_id)
        values = {}

        if data.get("status"):
            values["status"] = validate_order_status(data["status"])

        prices = {f: data.get(f) for f in ("certificate_price", "medal_price", "trophy_price")}
        if any(p is not None for p in prices.values()):
            for field, price in prices.items():
                if price is not None and float(price) < 0:
                    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{field} cannot be negative")
            cp = float(prices["certificate_price"] if prices["certificate_price"] is not None else order["certificate_price"] or 0)
            mp = float(prices["medal_price"] if prices["medal_price"] is not None else order["medal_price"] or 0)
            tp = float(prices["trophy_price"] if prices["trophy_price"] is not None else order["trophy_price"] or 0)
            values.update({"certificate_price": cp, "medal_price": mp, "trophy_price": tp})
            values["total_amount"] = round(
                int(order["certificates"] or 0) * cp + int(order["medals"] or 0) * mp + int(order["trophies"] or 0) * tp,
                2
            )
        elif data.get("total_amount") is not None:
            if float(data["total_amount"]) < 0:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="total_amount cannot be negative")
            values["total_amount"] = round(float(data["total_amount"]), 2)

        if data.get("admin_remarks") is not None:
            values["admin_remarks"] = sanitize_input(data["admin_remarks"])

        if not values:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No valid fields to update")

        now = utc_now()
        values["processed_by"] = admin["id"]
        values["processed_at"] = now
        if values.get("status") == "COMPLETED":
            values["completed_at"] = now

        await update_row("event_orders", order_id, values)
        updated = await OrderService.get_order_row(order_id)

        await activity_log_service.log_activity(
            actor_id=admin["id"], action="order_updated", resource_type="order", resource_id=order_id,
            details={k: v for k, v in values.items() if k not in ("processed_by", "processed_at")}
        )
        if "status" in values:
            await OrderService._notify_order_status(updated, values["status"], values.get("admin_remarks"))

        return {"message": "Order updated successfully", "order": present_order(updated)}

    @staticmethod
    async def admin_order_stats() -> dict:
        status_rows = await database.fetch_all(
            "SELECT status, COUNT(*) AS count FROM event_orders GROUP BY status"
        )
        revenue = await database.fetch_val(
            "SELECT COALESCE(SUM(total_amount), 0) FROM event_orders WHERE payment_status = 'SUCCESS'"
        )
        recent = await database.fetch_all(
            """
            SELECT o.*, e.name AS event_name, c.name AS coach_name
            FROM event_orders o
            JOIN events e ON e.id = o.event_id
            JOIN coaches c ON c.id = o.coach_id
            ORDER BY o.created_at DESC
            LIMIT 5
            """
        )
        by_status = {s: 0 for s in ORDER_STATUSES}
        by_status.update({r["status"]: int(r["count"]) for r in status_rows})
        return {
            "total_orders": sum(by_status.values()),
            "by_status": by_status,
            "total_revenue": float(revenue or 0),
            "recent_orders": [present_order(r) for r in recent],
        }

    @staticmethod
    async def admin_bulk_update(admin: dict, order_ids: List[str], new_status: str) -> dict:
        new_status = validate_order_status(new_status)
        if not order_ids:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="order_ids must not be empty")

        updated, not_found = [], []
        now = utc_now()
        for order_id in order_ids:
            row = await database.fetch_one("SELECT * FROM event_orders WHERE id = :id", {"id": str(order_id)})
            if not row:
                not_found.append(str(order_id))
                continue
            values = {"status": new_status, "processed_by": admin["id"], "processed_at": now}
            if new_status == "COMPLETED":
                values["completed_at"] = now
            await update_row("event_orders", str(order_id), values)
            await OrderService._notify_order_status(dict(row), new_status)
            updated.append(str(order_id))

        await activity_log_service.log_activity(
            actor_id=admin["id"], action="orders_bulk_updated", resource_type="order",
            details={"order_ids": updated, "status": new_status}
        )
        return {
            "message": f"{len(updated)} orders updated to {new_status}",
            "updated": updated,
            "not_found": not_found,
        }

    @staticmethod
    async def paid_certificate_allowance(event_id: str, coach_id: str) -> int:
        """Certificates bought in paid orders for an event"""
        total = await database.fetch_val(
            """
            SELECT COALESCE(SUM(certificates), 0) FROM event_orders
            WHERE event_id = :eid AND coach_id = :cid
              AND (payment_status = 'SUCCESS' OR status IN ('PAID', 'IN_PROGRESS', 'COMPLETED'))
            """,
            {"eid": str(event_id), "cid": str(coach_id)}
        )
        return int(total or 0)


# Create singleton instance
order_service = OrderService()
