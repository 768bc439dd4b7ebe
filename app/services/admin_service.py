"""
Admin Service
Business logic for platform administration
"""

import logging
import uuid
from typing import List, Optional

from fastapi import HTTPException, status

from app.auth.dependencies import load_profile
from app.auth.password import generate_random_password
from app.database import database, update_row
from app.services.activity_log_service import activity_log_service
from app.services.auth_service import auth_service
from app.services.email_service import email_service
from app.services.event_service import EVENT_PERMISSIONS, EVENT_STATUSES, event_service, present_event
from app.services.notification_service import notification_service
from app.utils.commission import calculate_bulk_commission
from app.utils.datetime_ist import utc_now
from app.utils.financial_year import get_financial_year_label
from app.utils.helpers import get_pagination_meta, validate_email
from app.utils.serializers import serialize_row, serialize_rows

logger = logging.getLogger(__name__)

USER_ROLES = ("STUDENT", "COACH", "INSTITUTE", "CLUB", "EVENT_INCHARGE", "ADMIN")

MODERATION_ACTIONS = {
    "APPROVE": ("APPROVED", "EVENT_APPROVED"),
    "REJECT": ("REJECTED", "EVENT_REJECTED"),
    "SUSPEND": ("SUSPENDED", "EVENT_SUSPENDED"),
    "RESTART": ("APPROVED", "EVENT_RESTARTED"),
}

APPROVAL_TABLES = {"coach": "coaches", "institute": "institutes"}


class AdminService:
    """Service for admin operations"""

    @staticmethod
    async def get_dashboard() -> dict:
        """Counts across users, events, approvals, orders and revenue"""
        users = await database.fetch_all("SELECT role, COUNT(*) AS total FROM users GROUP BY role")
        events = await database.fetch_all("SELECT status, COUNT(*) AS total FROM events GROUP BY status")

        pending_coaches = await database.fetch_val(
            "SELECT COUNT(*) FROM coaches WHERE approval_status = 'PENDING'"
        )
        pending_institutes = await database.fetch_val(
            "SELECT COUNT(*) FROM institutes WHERE approval_status = 'PENDING'"
        )
        pending_events = await database.fetch_val("SELECT COUNT(*) FROM events WHERE status = 'PENDING'")

        orders_total = await database.fetch_val("SELECT COUNT(*) FROM event_orders")
        orders_pending = await database.fetch_val("SELECT COUNT(*) FROM event_orders WHERE status = 'PENDING'")
        revenue = await database.fetch_val(
            "SELECT COALESCE(SUM(amount), 0) FROM payments WHERE status = 'SUCCESS'"
        )

        recent_users = await database.fetch_all(
            """
            SELECT id, unique_id, name, email, role, created_at
            FROM users ORDER BY created_at DESC LIMIT 5
            """
        )

        return {
            "users": {
                "by_role": {row["role"]: int(row["total"]) for row in users},
                "total": sum(int(row["total"]) for row in users),
            },
            "events": {
                "by_status": {row["status"]: int(row["total"]) for row in events},
                "total": sum(int(row["total"]) for row in events),
            },
            "pending_approvals": {
                "coaches": int(pending_coaches or 0),
                "institutes": int(pending_institutes or 0),
                "events": int(pending_events or 0),
            },
            "orders": {"total": int(orders_total or 0), "pending": int(orders_pending or 0)},
            "revenue": {"total": round(float(revenue or 0), 2)},
            "recent_users": serialize_rows(recent_users),
        }

    # ---- users ----

    @staticmethod
    async def list_users(page: int, limit: int, offset: int, filters: dict) -> dict:
        where = []
        params = {}

        if filters.get("role"):
            role = filters["role"].upper()
            if role not in USER_ROLES:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid role")
            where.append("role = :role")
            params["role"] = role
        if filters.get("is_active") is not None:
            where.append("is_active = :is_active")
            params["is_active"] = bool(filters["is_active"])
        if filters.get("search"):
            where.append(
                "(LOWER(name) LIKE :search OR LOWER(email) LIKE :search "
                "OR LOWER(unique_id) LIKE :search OR phone LIKE :search)"
            )
            params["search"] = f"%{filters['search'].strip().lower()}%"

        where_clause = f"WHERE {' AND '.join(where)}" if where else ""
        total = await database.fetch_val(f"SELECT COUNT(*) FROM users {where_clause}", params)
        rows = await database.fetch_all(
            f"""
            SELECT * FROM users {where_clause}
            ORDER BY created_at DESC
            LIMIT :limit OFFSET :offset
            """,
            {**params, "limit": limit, "offset": offset}
        )
        return {"users": serialize_rows(rows), "pagination": get_pagination_meta(int(total or 0), page, limit)}

    @staticmethod
    async def _get_user(user_id: str) -> dict:
        row = await database.fetch_one("SELECT * FROM users WHERE id = :id", {"id": str(user_id)})
        if not row:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        return dict(row)

    @staticmethod
    async def get_user_details(unique_id: str) -> dict:
        """User, profile and role-specific activity by the public unique id"""
        row = await database.fetch_one("SELECT * FROM users WHERE unique_id = :uid", {"uid": unique_id})
        if not row:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        user = dict(row)
        user_id = str(user["id"])

        profile = await load_profile(user["role"], user_id)
        details = {"user": serialize_row(user), "profile": serialize_row(profile)}

        if user["role"] == "STUDENT" and profile:
            registrations = await database.fetch_all(
                """
                SELECT e.id, e.unique_id, e.name, e.sport, e.start_date, r.created_at AS registered_at
                FROM event_registrations r JOIN events e ON e.id = r.event_id
                WHERE r.student_id = :sid ORDER BY e.start_date DESC
                """,
                {"sid": str(profile["id"])}
            )
            certificates = await database.fetch_all(
                "SELECT unique_id, event_name, certificate_type, position, issue_date FROM certificates "
                "WHERE student_id = :sid ORDER BY issue_date DESC",
                {"sid": str(profile["id"])}
            )
            details["registrations"] = serialize_rows(registrations)
            details["certificates"] = serialize_rows(certificates)
        elif user["role"] in ("COACH", "INSTITUTE", "CLUB"):
            events = await database.fetch_all(
                "SELECT * FROM events WHERE created_by = :uid ORDER BY created_at DESC",
                {"uid": user_id}
            )
            details["events"] = [present_event(e) for e in events]
            if user["role"] == "COACH" and profile:
                students = await database.fetch_val(
                    "SELECT COUNT(*) FROM coach_students WHERE coach_id = :cid AND status = 'ACCEPTED'",
                    {"cid": str(profile["id"])}
                )
                details["connected_students"] = int(students or 0)

        payments = await database.fetch_all(
            "SELECT * FROM payments WHERE user_id = :uid ORDER BY created_at DESC LIMIT 20",
            {"uid": user_id}
        )
        details["payments"] = serialize_rows(payments, exclude=("razorpay_signature", "details"))
        return details

    @staticmethod
    async def set_user_status(admin: dict, user_id: str, is_active: bool, ip_address: Optional[str] = None) -> dict:
        user = await AdminService._get_user(user_id)
        if str(user["id"]) == admin["id"] and not is_active:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="You cannot deactivate your own account"
            )

        await update_row("users", user["id"], {"is_active": bool(is_active)})
        await activity_log_service.log_activity(
            admin["id"], "user_status_changed", "user", user["id"],
            {"is_active": bool(is_active), "previous": bool(user["is_active"])},
            ip_address
        )
        logger.info("[ADMIN] %s set %s active=%s", admin["unique_id"], user["unique_id"], is_active)

        user = await AdminService._get_user(user_id)
        return {
            "message": f"User {'activated' if is_active else 'deactivated'}",
            "user": serialize_row(user),
        }

    @staticmethod
    async def get_user_activity(user_id: str, page: int, limit: int, offset: int) -> dict:
        await AdminService._get_user(user_id)
        logs, total = await activity_log_service.get_user_activity(user_id, limit, offset)
        return {"activity": logs, "pagination": get_pagination_meta(total, page, limit)}

    @staticmethod
    async def create_staff_user(admin: dict, role: str, data: dict) -> dict:
        """Event in-charge or admin account with an emailed temporary password"""
        email = (data.get("email") or "").strip().lower()
        name = (data.get("name") or "").strip()
        if not name:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Name is required")
        if not validate_email(email):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid email address")
        phone = data.get("phone") or None
        await auth_service.ensure_unique_contact(email, phone)

        temp_password = generate_random_password(12)
        async with database.transaction():
            created = await auth_service.create_user(
                role=role,
                email=email,
                password=temp_password,
                name=name,
                phone=phone,
                state=data.get("state"),
                is_verified=True,
                must_change_password=True,
            )

        role_label = "Event In-charge" if role == "EVENT_INCHARGE" else "Admin"
        try:
            await email_service.send_account_created_email(email, name, role_label, temp_password)
        except Exception as e:
            logger.warning("[ADMIN] Credentials email to %s failed: %s", email, e)

        await activity_log_service.log_activity(
            admin["id"], f"{role.lower()}_created", "user", created["user_id"], {"email": email}
        )
        logger.info("[ADMIN] %s account %s created by %s", role, created["unique_id"], admin["unique_id"])

        user = await AdminService._get_user(created["user_id"])
        return {
            "message": f"{role_label} account created",
            "user": serialize_row(user),
            "temp_password": temp_password,
        }

    # ---- approvals ----

    @staticmethod
    async def list_pending(kind: str) -> dict:
        table = APPROVAL_TABLES[kind]
        rows = await database.fetch_all(
            f"""
            SELECT p.*, u.unique_id, u.email, u.phone
            FROM {table} p
            JOIN users u ON u.id = p.user_id
            WHERE p.approval_status = 'PENDING'
            ORDER BY p.created_at ASC
            """
        )
        return {f"{kind}s": serialize_rows(rows), "total": len(rows)}

    @staticmethod
    async def set_approval(admin: dict, kind: str, profile_id: str, new_status: str, remarks: Optional[str] = None) -> dict:
        new_status = (new_status or "").upper()
        if new_status not in ("APPROVED", "REJECTED"):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Status must be APPROVED or REJECTED")

        table = APPROVAL_TABLES[kind]
        row = await database.fetch_one(
            f"SELECT p.*, u.email FROM {table} p JOIN users u ON u.id = p.user_id WHERE p.id = :id",
            {"id": str(profile_id)}
        )
        if not row:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{kind.title()} not found")

        await update_row(table, row["id"], {"approval_status": new_status, "approval_remarks": remarks})
        await activity_log_service.log_activity(
            admin["id"], f"{kind}_{new_status.lower()}", kind, row["id"], {"remarks": remarks}
        )
        await notification_service.notify(
            row["user_id"], f"ACCOUNT_{new_status}", f"Account {new_status.lower()}",
            f"Your {kind} account has been {new_status.lower()}" + (f": {remarks}" if remarks else ""),
            {"status": new_status}
        )

        updated = await database.fetch_one(f"SELECT * FROM {table} WHERE id = :id", {"id": str(row["id"])})
        return {"message": f"{kind.title()} {new_status.lower()}", kind: serialize_row(updated)}

    # ---- events ----

    @staticmethod
    async def list_events(admin: dict, page: int, limit: int, offset: int, filters: dict) -> dict:
        return await event_service.list_events(admin, page, limit, offset, filters, admin_view=True)

    @staticmethod
    async def list_pending_events() -> dict:
        rows = await database.fetch_all(
            """
            SELECT e.*, u.name AS creator_name, u.unique_id AS creator_uid, u.email AS creator_email
            FROM events e JOIN users u ON u.id = e.created_by
            WHERE e.status = 'PENDING'
            ORDER BY e.created_at ASC
            """
        )
        now = utc_now()
        return {"events": [present_event(r, now) for r in rows], "total": len(rows)}

    @staticmethod
    async def moderate_event(admin: dict, event_id: str, action: str, remarks: Optional[str] = None) -> dict:
        """APPROVE / REJECT / SUSPEND / RESTART with notification and email to the creator"""
        action = (action or "").upper()
        if action not in MODERATION_ACTIONS:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid action. Use one of: {', '.join(MODERATION_ACTIONS)}"
            )
        new_status, notification_type = MODERATION_ACTIONS[action]

        event = await event_service.get_event_row(event_id)
        if action == "RESTART" and event["status"] != "SUSPENDED":
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only suspended events can be restarted")

        await update_row("events", event["id"], {"status": new_status, "admin_notes": remarks})
        await activity_log_service.log_activity(
            admin["id"], "event_moderated", "event", event["id"],
            {"action": action, "from": event["status"], "to": new_status, "remarks": remarks}
        )

        creator = await database.fetch_one(
            "SELECT id, email, name FROM users WHERE id = :id", {"id": str(event["created_by"])}
        )
        if creator:
            await notification_service.notify(
                creator["id"], notification_type, f"Event {new_status.lower()}",
                f"Your event {event['name']} is now {new_status}" + (f": {remarks}" if remarks else ""),
                {"eventId": str(event["id"])}
            )
            try:
                await email_service.send_event_moderation_email(
                    creator["email"], creator["name"], event["name"], new_status, remarks
                )
            except Exception as e:
                logger.warning("[EVENT] Moderation email for %s failed: %s", event["unique_id"], e)

        logger.info("[EVENT] %s %s by %s", event["unique_id"], new_status, admin["unique_id"])
        updated = await event_service.get_event_row(str(event["id"]))
        return {"message": f"Event {new_status.lower()}", "event": present_event(updated)}

    @staticmethod
    async def set_event_status(admin: dict, event_id: str, new_status: str, remarks: Optional[str] = None) -> dict:
        new_status = (new_status or "").upper()
        if new_status not in EVENT_STATUSES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid status. Use one of: {', '.join(EVENT_STATUSES)}"
            )
        event = await event_service.get_event_row(event_id)
        values = {"status": new_status}
        if remarks is not None:
            values["admin_notes"] = remarks
        await update_row("events", event["id"], values)
        await activity_log_service.log_activity(
            admin["id"], "event_status_changed", "event", event["id"],
            {"from": event["status"], "to": new_status}
        )
        updated = await event_service.get_event_row(str(event["id"]))
        return {"message": f"Event status set to {new_status}", "event": present_event(updated)}

    @staticmethod
    async def bulk_moderate(admin: dict, event_ids: List[str], action: str, remarks: Optional[str] = None) -> dict:
        if not event_ids:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No events selected")

        results = []
        for event_id in dict.fromkeys(str(e) for e in event_ids):
            try:
                outcome = await AdminService.moderate_event(admin, event_id, action, remarks)
                results.append({"event_id": event_id, "success": True, "status": outcome["event"]["status"]})
            except HTTPException as e:
                results.append({"event_id": event_id, "success": False, "error": e.detail})

        succeeded = sum(1 for r in results if r["success"])
        return {
            "message": f"{succeeded} of {len(results)} events updated",
            "results": results,
            "succeeded": succeeded,
            "failed": len(results) - succeeded,
        }

    @staticmethod
    async def get_assignments(event_id: str) -> dict:
        event = await event_service.get_event_row(event_id)
        rows = await database.fetch_all(
            """
            SELECT a.*, u.name, u.email, u.unique_id
            FROM event_assignments a JOIN users u ON u.id = a.user_id
            WHERE a.event_id = :eid
            ORDER BY u.name ASC
            """,
            {"eid": str(event["id"])}
        )
        return {"event_id": str(event["id"]), "assignments": serialize_rows(rows)}

    @staticmethod
    async def set_assignments(admin: dict, event_id: str, assignments: List[dict]) -> dict:
        """Replace the event's in-charge assignments"""
        event = await event_service.get_event_row(event_id)

        seen = set()
        rows = []
        for item in assignments or []:
            user_id = str(item.get("user_id") or "")
            if not user_id or user_id in seen:
                continue
            seen.add(user_id)
            user = await database.fetch_one("SELECT id, role FROM users WHERE id = :id", {"id": user_id})
            if not user:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"User {user_id} not found")
            if user["role"] not in ("EVENT_INCHARGE", "COACH", "INSTITUTE", "CLUB"):
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Only event in-charges and organisers can be assigned to events"
                )
            row = {
                "id": str(uuid.uuid4()),
                "event_id": str(event["id"]),
                "user_id": user_id,
                "role": (item.get("role") or "INCHARGE").upper(),
                "created_at": utc_now(),
            }
            for flag in EVENT_PERMISSIONS:
                row[flag] = bool(item.get(flag, False))
            rows.append(row)

        async with database.transaction():
            await database.execute("DELETE FROM event_assignments WHERE event_id = :eid", {"eid": str(event["id"])})
            for row in rows:
                await database.execute(
                    """
                    INSERT INTO event_assignments (
                        id, event_id, user_id, role, result_upload, student_management,
                        certificate_management, fee_management, created_at
                    )
                    VALUES (
                        :id, :event_id, :user_id, :role, :result_upload, :student_management,
                        :certificate_management, :fee_management, :created_at
                    )
                    """,
                    row
                )

        for row in rows:
            await notification_service.notify(
                row["user_id"], "EVENT_ASSIGNED", "Event assignment",
                f"You have been assigned to {event['name']}", {"eventId": str(event["id"])}
            )
        await activity_log_service.log_activity(
            admin["id"], "event_assignments_updated", "event", event["id"], {"count": len(rows)}
        )
        return {"message": f"{len(rows)} assignments saved", **(await AdminService.get_assignments(str(event["id"])))}

    # ---- revenue ----

    @staticmethod
    async def revenue_dashboard() -> dict:
        """Gross, Razorpay commission and net per payment type for successful payments"""
        rows = await database.fetch_all(
            "SELECT payment_type, amount, created_at FROM payments WHERE status = 'SUCCESS'"
        )
        by_type = {}
        for row in rows:
            by_type.setdefault(row["payment_type"], []).append(float(row["amount"] or 0))

        breakdown = {
            payment_type: {"count": len(amounts), **calculate_bulk_commission(amounts)}
            for payment_type, amounts in by_type.items()
        }
        overall = calculate_bulk_commission(float(row["amount"] or 0) for row in rows)
        return {
            "financial_year": get_financial_year_label(),
            "totals": {"count": len(rows), **overall},
            "by_payment_type": breakdown,
        }


# Create singleton instance
admin_service = AdminService()
