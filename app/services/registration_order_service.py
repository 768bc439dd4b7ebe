"""
Registration Order Service
Coaches register several of their students for an event and pay once
"""

import json
import logging
import uuid
from typing import List, Optional

from fastapi import HTTPException, status

from app.config import settings
from app.database import database, update_row
from app.services.email_service import email_service
from app.services.event_service import event_service
from app.services.notification_service import notification_service
from app.services.payment_gateway import payment_gateway
from app.utils.datetime_ist import utc_now
from app.utils.serializers import serialize_row, serialize_rows
from app.utils.uid import build_receipt, generate_order_number

logger = logging.getLogger(__name__)


def _in_clause(prefix: str, values: list, params: dict) -> str:
    slots = []
    for i, value in enumerate(values):
        params[f"{prefix}_{i}"] = str(value)
        slots.append(f":{prefix}_{i}")
    return ", ".join(slots)


class RegistrationOrderService:
    """Service for bulk registration orders"""

    @staticmethod
    async def _items(order_id: str) -> list:
        rows = await database.fetch_all(
            """
            SELECT i.id, i.student_id, i.fee, s.name AS student_name, u.unique_id AS student_uid
            FROM registration_order_items i
            JOIN students s ON s.id = i.student_id
            JOIN users u ON u.id = s.user_id
            WHERE i.registration_order_id = :oid
            ORDER BY s.name ASC
            """,
            {"oid": str(order_id)}
        )
        return serialize_rows(rows)

    @staticmethod
    async def present(row) -> dict:
        order = serialize_row(row)
        order["items"] = await RegistrationOrderService._items(order["id"])
        return order

    @staticmethod
    async def get_order_row(order_id: str) -> dict:
        row = await database.fetch_one("SELECT * FROM registration_orders WHERE id = :id", {"id": str(order_id)})
        if not row:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Registration order not found")
        return dict(row)

    @staticmethod
    async def _get_coach_order(current_user: dict, event_id: str, order_id: str) -> dict:
        order = await RegistrationOrderService.get_order_row(order_id)
        if (str(order["coach_id"]) != str(current_user["profile"]["id"])
                or str(order["event_id"]) != str(event_id)):
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Registration order not found")
        return order

    @staticmethod
    async def create_bulk_registration(
        current_user: dict,
        event_id: str,
        student_ids: List[str],
        event_fee_per_student: float
    ) -> dict:
        if event_fee_per_student is None or float(event_fee_per_student) < 0:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="event_fee_per_student must be 0 or more"
            )
        student_ids = [str(s) for s in (student_ids or [])]
        if not student_ids:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Select at least one student")
        if len(set(student_ids)) != len(student_ids):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Duplicate students in request")

        event = await event_service.get_event_row(event_id)
        coach_id = str(current_user["profile"]["id"])

        params = {"cid": coach_id}
        slots = _in_clause("sid", student_ids, params)
        accepted = await database.fetch_all(
            f"""
            SELECT student_id FROM coach_students
            WHERE coach_id = :cid AND status = 'ACCEPTED' AND student_id IN ({slots})
            """,
            params
        )
        accepted_ids = {str(r["student_id"]) for r in accepted}
        outsiders = [s for s in student_ids if s not in accepted_ids]
        if outsiders:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"{len(outsiders)} selected students are not connected to you"
            )

        params = {"eid": str(event["id"])}
        slots = _in_clause("sid", student_ids, params)
        already = await database.fetch_all(
            f"""
            SELECT s.name FROM event_registrations r
            JOIN students s ON s.id = r.student_id
            WHERE r.event_id = :eid AND r.student_id IN ({slots})
            """,
            params
        )
        if already:
            names = ", ".join(r["name"] for r in already)
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Already registered for this event: {names}"
            )

        event_service.ensure_open_for_registration(event, seats=len(student_ids))

        fee = round(float(event_fee_per_student), 2)
        order_id = str(uuid.uuid4())
        order_number = await generate_order_number("registration_orders", "REG")
        now = utc_now()

        async with database.transaction():
            await database.execute(
                """
                INSERT INTO registration_orders (
                    id, order_number, event_id, coach_id, event_fee_per_student, total_students,
                    total_fee_amount, status, payment_status, certificate_generated, created_at, updated_at
                )
                VALUES (
                    :id, :order_number, :eid, :cid, :fee, :count,
                    :total, 'PENDING', 'PENDING', FALSE, :now, :now
                )
                """,
                {
                    "id": order_id,
                    "order_number": order_number,
                    "eid": str(event["id"]),
                    "cid": coach_id,
                    "fee": fee,
                    "count": len(student_ids),
                    "total": round(fee * len(student_ids), 2),
                    "now": now,
                }
            )
            for student_id in student_ids:
                await database.execute(
                    """
                    INSERT INTO registration_order_items (id, registration_order_id, student_id, fee, created_at)
                    VALUES (:id, :oid, :sid, :fee, :now)
                    """,
                    {"id": str(uuid.uuid4()), "oid": order_id, "sid": student_id, "fee": fee, "now": now}
                )

        logger.info("[REGISTRATION] %s created with %d students for %s",
                    order_number, len(student_ids), event["unique_id"])
        order = await RegistrationOrderService.get_order_row(order_id)
        return {"message": "Registration order created", "order": await RegistrationOrderService.present(order)}

    @staticmethod
    async def list_coach_orders(current_user: dict, event_id: str) -> dict:
        event = await event_service.get_event_row(event_id)
        rows = await database.fetch_all(
            """
            SELECT * FROM registration_orders
            WHERE event_id = :eid AND coach_id = :cid
            ORDER BY created_at DESC
            """,
            {"eid": str(event["id"]), "cid": str(current_user["profile"]["id"])}
        )
        return {"orders": [await RegistrationOrderService.present(r) for r in rows]}

    @staticmethod
    async def create_payment(current_user: dict, event_id: str, order_id: str) -> dict:
        order = await RegistrationOrderService._get_coach_order(current_user, event_id, order_id)
        if order["payment_status"] == "PAID":
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Order is already paid")
        if order["status"] == "CANCELLED":
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Order has been cancelled")

        amount = float(order["total_fee_amount"] or 0)
        if amount <= 0:
            await RegistrationOrderService._settle(current_user, order, payment_id=None, signature=None)
            updated = await RegistrationOrderService.get_order_row(order_id)
            return {
                "message": "No payment required. Students registered.",
                "payment_required": False,
                "order": await RegistrationOrderService.present(updated),
            }

        razorpay_order = await payment_gateway.create_order(
            payment_gateway.to_paise(amount),
            build_receipt("registration", order_id),
            {"registration_order_id": order_id, "order_number": order["order_number"], "type": "REGISTRATION_ORDER"},
        )

        now = utc_now()
        async with database.transaction():
            await update_row("registration_orders", order_id, {
                "status": "PAYMENT_PENDING",
                "razorpay_order_id": razorpay_order["id"],
            })
            await database.execute(
                """
                INSERT INTO payments (id, user_id, user_type, payment_type, reference_id, amount, currency,
                                      razorpay_order_id, status, description, details, created_at, updated_at)
                VALUES (:id, :user_id, 'coach', 'REGISTRATION_ORDER', :ref, :amount, :currency,
                        :rzp_order, 'PENDING', :description, :details, :now, :now)
                """,
                {
                    "id": str(uuid.uuid4()),
                    "user_id": current_user["id"],
                    "ref": order_id,
                    "amount": amount,
                    "currency": settings.CURRENCY,
                    "rzp_order": razorpay_order["id"],
                    "description": f"Event registration {order['order_number']}",
                    "details": json.dumps({"students": int(order["total_students"] or 0)}),
                    "now": now,
                }
            )

        return {
            "message": "Payment order created",
            "payment_required": True,
            "razorpay_order_id": razorpay_order["id"],
            "amount": payment_gateway.to_paise(amount),
            "currency": settings.CURRENCY,
            "key_id": payment_gateway.key_id(),
        }

    @staticmethod
    async def _settle(current_user: dict, order: dict, payment_id: Optional[str], signature: Optional[str]) -> int:
        """
        Mark the order paid and register every student on it (existing
        registrations are skipped). Returns the number of new registrations.
        """
        order_id = str(order["id"])
        event_id = str(order["event_id"])
        now = utc_now()
        added = 0

        async with database.transaction():
            items = await database.fetch_all(
                """
                SELECT i.student_id FROM registration_order_items i
                WHERE i.registration_order_id = :oid
                  AND NOT EXISTS (
                    SELECT 1 FROM event_registrations r
                    WHERE r.event_id = :eid AND r.student_id = i.student_id
                  )
                """,
                {"oid": order_id, "eid": event_id}
            )

            # The event may have filled up or closed since the order was placed
            event = await event_service.get_event_row(event_id)
            if items:
                event_service.ensure_open_for_registration(event, seats=len(items), now=now)
                await event_service.claim_seats(event_id, len(items))

            for item in items:
                await database.execute(
                    """
                    INSERT INTO event_registrations (id, event_id, student_id, registration_order_id, status, created_at)
                    VALUES (:id, :eid, :sid, :oid, 'REGISTERED', :now)
                    """,
                    {"id": str(uuid.uuid4()), "eid": event_id, "sid": str(item["student_id"]), "oid": order_id, "now": now}
                )
                added += 1

            await update_row("registration_orders", order_id, {
                "status": "PAID",
                "payment_status": "PAID",
                "razorpay_payment_id": payment_id,
                "payment_date": now,
            })

            if order.get("razorpay_order_id"):
                await database.execute(
                    """
                    UPDATE payments
                    SET status = 'SUCCESS', razorpay_payment_id = :pid, razorpay_signature = :sig, updated_at = :now
                    WHERE razorpay_order_id = :rzp_order
                    """,
                    {"pid": payment_id, "sig": signature, "now": now, "rzp_order": order["razorpay_order_id"]}
                )

        payment = None
        if order.get("razorpay_order_id"):
            payment = await database.fetch_one(
                "SELECT id FROM payments WHERE razorpay_order_id = :rzp_order",
                {"rzp_order": order["razorpay_order_id"]}
            )
        await notification_service.notify(
            current_user["id"], "PAYMENT_RECEIVED", "Registration payment received",
            f"{added} students registered with order {order['order_number']}",
            {"registrationOrderId": order_id, "eventId": event_id,
             "paymentId": str(payment["id"]) if payment else None}
        )
        logger.info("[REGISTRATION] %s settled, %d students registered", order["order_number"], added)
        return added

    @staticmethod
    async def confirm_payment(
        current_user: dict,
        event_id: str,
        order_id: str,
        razorpay_order_id: str,
        razorpay_payment_id: str,
        razorpay_signature: str
    ) -> dict:
        order = await RegistrationOrderService._get_coach_order(current_user, event_id, order_id)
        if order["payment_status"] == "PAID":
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Order is already paid")
        if order.get("razorpay_order_id") != razorpay_order_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Payment order mismatch")
        if not payment_gateway.verify_signature(razorpay_order_id, razorpay_payment_id, razorpay_signature):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid payment signature")

        try:
            added = await RegistrationOrderService._settle(current_user, order, razorpay_payment_id, razorpay_signature)
        except HTTPException as e:
            logger.warning("[REGISTRATION] %s paid as %s but could not be settled: %s",
                           order["order_number"], razorpay_payment_id, e.detail)
            raise
        updated = await RegistrationOrderService.get_order_row(order_id)
        return {
            "message": "Payment successful. Students registered.",
            "registered": added,
            "order": await RegistrationOrderService.present(updated),
        }

    # Admin

    @staticmethod
    async def admin_list_event_orders(event_id: str) -> dict:
        event = await event_service.get_event_row(event_id)
        rows = await database.fetch_all(
            """
            SELECT o.*, c.name AS coach_name, u.email AS coach_email, u.unique_id AS coach_uid
            FROM registration_orders o
            JOIN coaches c ON c.id = o.coach_id
            JOIN users u ON u.id = c.user_id
            WHERE o.event_id = :eid
            ORDER BY o.created_at DESC
            """,
            {"eid": str(event["id"])}
        )
        orders = [await RegistrationOrderService.present(r) for r in rows]
        paid = [o for o in orders if o["payment_status"] == "PAID"]
        return {
            "event": {"id": str(event["id"]), "unique_id": event["unique_id"], "name": event["name"],
                      "status": event["status"]},
            "orders": orders,
            "summary": {
                "total_orders": len(orders),
                "paid_orders": len(paid),
                "total_students": sum(int(o["total_students"] or 0) for o in paid),
                "total_amount": round(sum(float(o["total_fee_amount"] or 0) for o in paid), 2),
            },
        }

    @staticmethod
    async def notify_completion(admin: dict, event_id: str, message: Optional[str] = None) -> dict:
        """
        Tell coaches with paid orders that the event is wrapped up; without
        any, the event owner and assigned users are told instead.
        """
        event = await event_service.get_event_row(event_id)
        recipients = await database.fetch_all(
            """
            SELECT DISTINCT u.id, u.email, u.name
            FROM registration_orders o
            JOIN coaches c ON c.id = o.coach_id
            JOIN users u ON u.id = c.user_id
            WHERE o.event_id = :eid AND o.payment_status = 'PAID'
            """,
            {"eid": str(event["id"])}
        )
        if not recipients:
            recipients = await database.fetch_all(
                """
                SELECT DISTINCT u.id, u.email, u.name FROM users u
                WHERE u.id = :owner
                   OR u.id IN (SELECT user_id FROM event_assignments WHERE event_id = :eid)
                """,
                {"owner": str(event["created_by"]), "eid": str(event["id"])}
            )
        if not recipients:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No one to notify for this event")

        text = message or f"{event['name']} has been completed. Thank you for participating."
        for user in recipients:
            await notification_service.notify(
                user["id"], "ORDER_COMPLETED", f"Event completed: {event['name']}", text,
                {"eventId": str(event["id"])}
            )
            try:
                await email_service.send_event_completion_email(user["email"], user["name"] or "there", event["name"], text)
            except Exception as e:
                logger.warning("[REGISTRATION] Completion email to %s failed: %s", user["email"], e)

        return {"message": f"Notified {len(recipients)} users", "notified": len(recipients)}


# Create singleton instance
registration_order_service = RegistrationOrderService()
