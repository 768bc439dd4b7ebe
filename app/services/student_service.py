"""
Student Service
Student profile, dashboard, coach discovery and coach connections
"""

import logging
import uuid
from datetime import date
from typing import Optional

from fastapi import HTTPException, status

from app.database import database, update_row
from app.services.notification_service import notification_service
from app.utils.datetime_ist import utc_now
from app.utils.helpers import get_pagination_meta, sanitize_input, validate_phone
from app.utils.serializers import serialize_row, serialize_rows

logger = logging.getLogger(__name__)

STUDENT_UPDATABLE_FIELDS = (
    "name", "father_name", "date_of_birth", "gender", "sport", "level",
    "school", "city", "state", "achievements",
)


async def update_user_contact(user_id: str, data: dict) -> None:
    """Copy name/phone/state changes onto the users row (phone stays unique)"""
    values = {}
    if data.get("name"):
        values["name"] = data["name"]
    if "state" in data:
        values["state"] = data["state"]
    phone = data.get("phone")
    if phone:
        if not validate_phone(phone):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid phone number. Must be 10 digits starting with 6-9"
            )
        taken = await database.fetch_val(
            "SELECT COUNT(*) FROM users WHERE phone = :phone AND id != :id",
            {"phone": phone, "id": user_id}
        )
        if taken:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Phone number is already registered")
        values["phone"] = phone
    if values:
        await update_row("users", user_id, values)


def clean_updates(data: dict, allowed) -> dict:
    values = {}
    for field in allowed:
        if field in data and data[field] is not None:
            value = data[field]
            values[field] = sanitize_input(value) if isinstance(value, str) else value
    return values


class StudentService:
    """Service for student operations"""

    @staticmethod
    async def get_profile(current_user: dict) -> dict:
        user = await database.fetch_one("SELECT * FROM users WHERE id = :id", {"id": current_user["id"]})
        return {"user": serialize_row(user), "profile": serialize_row(current_user["profile"])}

    @staticmethod
    async def update_profile(current_user: dict, data: dict) -> dict:
        profile_id = str(current_user["profile"]["id"])
        values = clean_updates(data, STUDENT_UPDATABLE_FIELDS)

        if isinstance(values.get("date_of_birth"), str):
            try:
                values["date_of_birth"] = date.fromisoformat(values["date_of_birth"][:10])
            except ValueError:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="date_of_birth must be YYYY-MM-DD"
                )
        if values.get("level"):
            values["level"] = values["level"].upper()

        async with database.transaction():
            await update_user_contact(current_user["id"], data)
            await update_row("students", profile_id, values)

        profile = await database.fetch_one("SELECT * FROM students WHERE id = :id", {"id": profile_id})
        return {"message": "Profile updated successfully", "profile": serialize_row(profile)}

    @staticmethod
    async def get_dashboard(current_user: dict) -> dict:
        student_id = str(current_user["profile"]["id"])
        now = utc_now()

        connected = await database.fetch_val(
            "SELECT COUNT(*) FROM coach_students WHERE student_id = :sid AND status = 'ACCEPTED'",
            {"sid": student_id}
        )
        pending = await database.fetch_val(
            "SELECT COUNT(*) FROM coach_students WHERE student_id = :sid AND status = 'PENDING'",
            {"sid": student_id}
        )
        registrations = await database.fetch_val(
            "SELECT COUNT(*) FROM event_registrations WHERE student_id = :sid",
            {"sid": student_id}
        )
        certificates = await database.fetch_val(
            "SELECT COUNT(*) FROM certificates WHERE student_id = :sid",
            {"sid": student_id}
        )
        upcoming = await database.fetch_all(
            """
            SELECT e.id, e.unique_id, e.name, e.sport, e.venue, e.city, e.start_date, e.end_date, e.status
            FROM event_registrations r
            JOIN events e ON e.id = r.event_id
            WHERE r.student_id = :sid AND e.start_date > :now
            ORDER BY e.start_date ASC
            LIMIT 5
            """,
            {"sid": student_id, "now": now}
        )

        return {
            "profile": serialize_row(current_user["profile"]),
            "stats": {
                "connected_coaches": int(connected or 0),
                "pending_requests": int(pending or 0),
                "event_registrations": int(registrations or 0),
                "certificates": int(certificates or 0),
                "unread_notifications": await notification_service.unread_count(current_user["id"]),
            },
            "upcoming_events": serialize_rows(upcoming),
        }

    @staticmethod
    async def list_coaches(
        current_user: dict,
        page: int,
        limit: int,
        offset: int,
        search: Optional[str] = None,
        sport: Optional[str] = None
    ) -> dict:
        """Paid, active coaches with this student's connection status"""
        where = ["c.payment_status = 'SUCCESS'", "c.is_active = TRUE", "u.is_active = TRUE"]
        params = {}
        if search:
            where.append("(LOWER(c.name) LIKE :search OR LOWER(c.city) LIKE :search OR LOWER(u.unique_id) LIKE :search)")
            params["search"] = f"%{search.strip().lower()}%"
        if sport:
            where.append("LOWER(c.specialization) LIKE :sport")
            params["sport"] = f"%{sport.strip().lower()}%"
        where_clause = " AND ".join(where)

        total = await database.fetch_val(
            f"SELECT COUNT(*) FROM coaches c JOIN users u ON u.id = c.user_id WHERE {where_clause}",
            params
        )
        rows = await database.fetch_all(
            f"""
            SELECT c.id, c.name, c.specialization, c.experience, c.bio, c.city, c.state,
                   u.unique_id, cs.status AS connection_status
            FROM coaches c
            JOIN users u ON u.id = c.user_id
            LEFT JOIN coach_students cs ON cs.coach_id = c.id AND cs.student_id = :student_id
            WHERE {where_clause}
            ORDER BY c.name ASC
            LIMIT :limit OFFSET :offset
            """,
            {**params, "student_id": str(current_user["profile"]["id"]), "limit": limit, "offset": offset}
        )

        return {
            "coaches": serialize_rows(rows),
            "pagination": get_pagination_meta(int(total or 0), page, limit),
        }

    @staticmethod
    async def request_connection(current_user: dict, coach_id: str, message: Optional[str] = None) -> dict:
        student = current_user["profile"]
        coach = await database.fetch_one(
            """
            SELECT c.id, c.name, c.user_id FROM coaches c
            WHERE c.id = :id AND c.payment_status = 'SUCCESS' AND c.is_active = TRUE
            """,
            {"id": coach_id}
        )
        if not coach:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Coach not found")

        existing = await database.fetch_one(
            "SELECT id, status FROM coach_students WHERE coach_id = :cid AND student_id = :sid",
            {"cid": coach_id, "sid": str(student["id"])}
        )
        now = utc_now()
        if existing and existing["status"] in ("PENDING", "ACCEPTED"):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Connection request already exists"
            )

        if existing:
            connection_id = str(existing["id"])
            await update_row("coach_students", connection_id, {
                "status": "PENDING", "initiated_by": "STUDENT", "message": message
            })
        else:
            connection_id = str(uuid.uuid4())
            await database.execute(
                """
                INSERT INTO coach_students (id, coach_id, student_id, status, initiated_by, message, created_at, updated_at)
                VALUES (:id, :cid, :sid, 'PENDING', 'STUDENT', :message, :now, :now)
                """,
                {"id": connection_id, "cid": coach_id, "sid": str(student["id"]), "message": message, "now": now}
            )

        await notification_service.notify(
            coach["user_id"], "CONNECTION_REQUEST", "New connection request",
            f"{student['name']} wants to connect with you",
            {"connectionId": connection_id, "studentId": str(student["id"])}
        )

        row = await database.fetch_one("SELECT * FROM coach_students WHERE id = :id", {"id": connection_id})
        return {"message": "Connection request sent", "connection": serialize_row(row)}

    @staticmethod
    async def list_connections(current_user: dict) -> dict:
        rows = await database.fetch_all(
            """
            SELECT cs.id, cs.status, cs.initiated_by, cs.message, cs.created_at, cs.updated_at,
                   c.id AS coach_id, c.name AS coach_name, c.specialization, c.city, u.unique_id AS coach_uid
            FROM coach_students cs
            JOIN coaches c ON c.id = cs.coach_id
            JOIN users u ON u.id = c.user_id
            WHERE cs.student_id = :sid
            ORDER BY cs.created_at DESC
            """,
            {"sid": str(current_user["profile"]["id"])}
        )
        return {"connections": serialize_rows(rows)}

    @staticmethod
    async def remove_connection(current_user: dict, connection_id: str) -> dict:
        row = await database.fetch_one(
            "SELECT id FROM coach_students WHERE id = :id AND student_id = :sid",
            {"id": connection_id, "sid": str(current_user["profile"]["id"])}
        )
        if not row:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Connection not found")
        await database.execute("DELETE FROM coach_students WHERE id = :id", {"id": connection_id})
        return {"message": "Connection removed"}

    @staticmethod
    async def list_event_registrations(current_user: dict) -> dict:
        rows = await database.fetch_all(
            """
            SELECT r.id, r.status, r.created_at AS registered_at,
                   e.id AS event_id, e.unique_id AS event_uid, e.name AS event_name, e.sport,
                   e.venue, e.city, e.start_date, e.end_date, e.status AS event_status
            FROM event_registrations r
            JOIN events e ON e.id = r.event_id
            WHERE r.student_id = :sid
            ORDER BY e.start_date DESC
            """,
            {"sid": str(current_user["profile"]["id"])}
        )
        return {"registrations": serialize_rows(rows)}


# Create singleton instance
student_service = StudentService()
