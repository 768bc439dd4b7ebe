"""
Coach Service
Coach profile, dashboard, connection requests and student list
"""

import logging
from datetime import timezone
from typing import Optional

from fastapi import HTTPException, status

from app.database import database, update_row
from app.services.notification_service import notification_service
from app.services.student_service import clean_updates, update_user_contact
from app.utils.datetime_ist import utc_now
from app.utils.financial_year import (
    days_remaining_in_financial_year,
    get_financial_year_end,
    get_financial_year_label,
)
from app.utils.helpers import get_pagination_meta
from app.utils.serializers import serialize_row, serialize_rows

logger = logging.getLogger(__name__)

COACH_UPDATABLE_FIELDS = ("name", "specialization", "experience", "certifications", "bio", "city", "state")
CONNECTION_RESPONSES = ("ACCEPTED", "REJECTED")


class CoachService:
    """Service for coach operations"""

    @staticmethod
    async def normalize_subscription(profile: dict) -> dict:
        """
        Paid coaches hold an ANNUAL membership ending with the financial year

        Older monthly records are rewritten on read.
        """
        if profile.get("payment_status") == "SUCCESS" and profile.get("subscription_type") != "ANNUAL":
            expires = get_financial_year_end().astimezone(timezone.utc)
            await update_row("coaches", profile["id"], {
                "subscription_type": "ANNUAL",
                "subscription_expires_at": expires,
            })
            logger.info("Coach %s subscription normalised to ANNUAL", profile["id"])
            row = await database.fetch_one("SELECT * FROM coaches WHERE id = :id", {"id": str(profile["id"])})
            return dict(row)
        return profile

    @staticmethod
    async def get_profile(current_user: dict) -> dict:
        profile = await CoachService.normalize_subscription(current_user["profile"])
        user = await database.fetch_one("SELECT * FROM users WHERE id = :id", {"id": current_user["id"]})
        return {"user": serialize_row(user), "profile": serialize_row(profile)}

    @staticmethod
    async def update_profile(current_user: dict, data: dict) -> dict:
        profile_id = str(current_user["profile"]["id"])
        values = clean_updates(data, COACH_UPDATABLE_FIELDS)
        if "experience" in values:
            try:
                values["experience"] = max(0, int(values["experience"]))
            except (TypeError, ValueError):
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="experience must be a number")

        async with database.transaction():
            await update_user_contact(current_user["id"], data)
            await update_row("coaches", profile_id, values)

        profile = await database.fetch_one("SELECT * FROM coaches WHERE id = :id", {"id": profile_id})
        return {"message": "Profile updated successfully", "profile": serialize_row(profile)}

    @staticmethod
    async def get_dashboard(current_user: dict) -> dict:
        profile = await CoachService.normalize_subscription(current_user["profile"])
        coach_id = str(profile["id"])
        user_id = current_user["id"]

        students = await database.fetch_val(
            "SELECT COUNT(*) FROM coach_students WHERE coach_id = :cid AND status = 'ACCEPTED'",
            {"cid": coach_id}
        )
        pending = await database.fetch_val(
            "SELECT COUNT(*) FROM coach_students WHERE coach_id = :cid AND status = 'PENDING'",
            {"cid": coach_id}
        )
        event_rows = await database.fetch_all(
            "SELECT status, COUNT(*) AS count FROM events WHERE created_by = :uid GROUP BY status",
            {"uid": user_id}
        )
        orders = await database.fetch_val(
            "SELECT COUNT(*) FROM event_orders WHERE coach_id = :cid",
            {"cid": coach_id}
        )
        upcoming = await database.fetch_all(
            """
            SELECT id, unique_id, name, sport, venue, city, start_date, end_date, status, current_participants
            FROM events
            WHERE created_by = :uid AND start_date > :now
            ORDER BY start_date ASC
            LIMIT 5
            """,
            {"uid": user_id, "now": utc_now()}
        )

        events_by_status = {row["status"]: int(row["count"]) for row in event_rows}
        return {
            "profile": serialize_row(profile),
            "stats": {
                "total_students": int(students or 0),
                "pending_requests": int(pending or 0),
                "total_events": sum(events_by_status.values()),
                "events_by_status": events_by_status,
                "total_orders": int(orders or 0),
                "unread_notifications": await notification_service.unread_count(user_id),
            },
            "subscription": {
                "payment_status": profile.get("payment_status"),
                "subscription_type": profile.get("subscription_type"),
                "expires_at": serialize_row(profile).get("subscription_expires_at"),
                "financial_year": get_financial_year_label(),
                "days_remaining": days_remaining_in_financial_year()
                if profile.get("payment_status") == "SUCCESS" else 0,
            },
            "upcoming_events": serialize_rows(upcoming),
        }

    @staticmethod
    async def list_connection_requests(current_user: dict, request_status: Optional[str] = "PENDING") -> dict:
        where = "cs.coach_id = :cid"
        params = {"cid": str(current_user["profile"]["id"])}
        if request_status:
            where += " AND cs.status = :status"
            params["status"] = request_status.upper()

        rows = await database.fetch_all(
            f"""
            SELECT cs.id, cs.status, cs.initiated_by, cs.message, cs.created_at,
                   s.id AS student_id, s.name AS student_name, s.sport, s.level, s.city,
                   u.unique_id AS student_uid, u.email AS student_email
            FROM coach_students cs
            JOIN students s ON s.id = cs.student_id
            JOIN users u ON u.id = s.user_id
            WHERE {where}
            ORDER BY cs.created_at DESC
            """,
            params
        )
        return {"requests": serialize_rows(rows)}

    @staticmethod
    async def respond_to_request(current_user: dict, connection_id: str, new_status: str) -> dict:
        new_status = (new_status or "").upper()
        if new_status not in CONNECTION_RESPONSES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Status must be ACCEPTED or REJECTED"
            )

        row = await database.fetch_one(
            """
            SELECT cs.id, cs.status, s.user_id AS student_user_id
            FROM coach_students cs
            JOIN students s ON s.id = cs.student_id
            WHERE cs.id = :id AND cs.coach_id = :cid
            """,
            {"id": connection_id, "cid": str(current_user["profile"]["id"])}
        )
        if not row:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Connection request not found")
        if row["status"] != "PENDING":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Request has already been {row['status'].lower()}"
            )

        await update_row("coach_students", connection_id, {"status": new_status})

        coach_name = current_user["profile"]["name"]
        await notification_service.notify(
            row["student_user_id"], f"CONNECTION_{new_status}",
            f"Connection {new_status.lower()}",
            f"Coach {coach_name} has {new_status.lower()} your connection request",
            {"connectionId": connection_id}
        )

        updated = await database.fetch_one("SELECT * FROM coach_students WHERE id = :id", {"id": connection_id})
        return {"message": f"Request {new_status.lower()}", "connection": serialize_row(updated)}

    @staticmethod
    async def list_students(
        current_user: dict,
        page: int,
        limit: int,
        offset: int,
        search: Optional[str] = None
    ) -> dict:
        where = "cs.coach_id = :cid AND cs.status = 'ACCEPTED'"
        params = {"cid": str(current_user["profile"]["id"])}
        if search:
            where += " AND (LOWER(s.name) LIKE :search OR LOWER(u.unique_id) LIKE :search OR LOWER(u.email) LIKE :search)"
            params["search"] = f"%{search.strip().lower()}%"

        base = f"""
            FROM coach_students cs
            JOIN students s ON s.id = cs.student_id
            JOIN users u ON u.id = s.user_id
            WHERE {where}
        """
        total = await database.fetch_val(f"SELECT COUNT(*) {base}", params)
        rows = await database.fetch_all(
            f"""
            SELECT s.id, s.name, s.sport, s.level, s.city, s.state, s.date_of_birth,
                   u.unique_id, u.email, u.phone, cs.created_at AS connected_at
            {base}
            ORDER BY s.name ASC
            LIMIT :limit OFFSET :offset
            """,
            {**params, "limit": limit, "offset": offset}
        )
        return {
            "students": serialize_rows(rows),
            "pagination": get_pagination_meta(int(total or 0), page, limit),
        }


# Create singleton instance
coach_service = CoachService()
