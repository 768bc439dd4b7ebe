"""
Institute Service
Institute profile, dashboard, enrolled students and coaches
"""

from typing import Optional

from app.database import database, update_row
from app.services.notification_service import notification_service
from app.services.student_service import clean_updates, update_user_contact
from app.utils.helpers import get_pagination_meta
from app.utils.serializers import serialize_row, serialize_rows

INSTITUTE_UPDATABLE_FIELDS = ("name", "institute_type", "contact_person", "address", "city", "state", "website")


class InstituteService:
    """Service for institute operations"""

    @staticmethod
    async def get_profile(current_user: dict) -> dict:
        user = await database.fetch_one("SELECT * FROM users WHERE id = :id", {"id": current_user["id"]})
        return {"user": serialize_row(user), "profile": serialize_row(current_user["profile"])}

    @staticmethod
    async def update_profile(current_user: dict, data: dict) -> dict:
        profile_id = str(current_user["profile"]["id"])
        values = clean_updates(data, INSTITUTE_UPDATABLE_FIELDS)

        async with database.transaction():
            await update_user_contact(current_user["id"], data)
            await update_row("institutes", profile_id, values)

        profile = await database.fetch_one("SELECT * FROM institutes WHERE id = :id", {"id": profile_id})
        return {"message": "Profile updated successfully", "profile": serialize_row(profile)}

    @staticmethod
    async def get_dashboard(current_user: dict) -> dict:
        institute_id = str(current_user["profile"]["id"])
        user_id = current_user["id"]

        students = await database.fetch_val(
            "SELECT COUNT(*) FROM institute_students WHERE institute_id = :iid",
            {"iid": institute_id}
        )
        coaches = await database.fetch_val(
            "SELECT COUNT(*) FROM institute_coaches WHERE institute_id = :iid",
            {"iid": institute_id}
        )
        event_rows = await database.fetch_all(
            "SELECT status, COUNT(*) AS count FROM events WHERE created_by = :uid GROUP BY status",
            {"uid": user_id}
        )
        recent_students = await database.fetch_all(
            """
            SELECT s.id, s.name, s.sport, u.unique_id, ins.created_at AS enrolled_at
            FROM institute_students ins
            JOIN students s ON s.id = ins.student_id
            JOIN users u ON u.id = s.user_id
            WHERE ins.institute_id = :iid
            ORDER BY ins.created_at DESC
            LIMIT 5
            """,
            {"iid": institute_id}
        )

        events_by_status = {row["status"]: int(row["count"]) for row in event_rows}
        return {
            "profile": serialize_row(current_user["profile"]),
            "stats": {
                "total_students": int(students or 0),
                "total_coaches": int(coaches or 0),
                "total_events": sum(events_by_status.values()),
                "events_by_status": events_by_status,
                "unread_notifications": await notification_service.unread_count(user_id),
            },
            "recent_students": serialize_rows(recent_students),
        }

    @staticmethod
    async def list_students(
        current_user: dict,
        page: int,
        limit: int,
        offset: int,
        search: Optional[str] = None
    ) -> dict:
        where = "ins.institute_id = :iid"
        params = {"iid": str(current_user["profile"]["id"])}
        if search:
            where += " AND (LOWER(s.name) LIKE :search OR LOWER(u.unique_id) LIKE :search OR LOWER(u.email) LIKE :search)"
            params["search"] = f"%{search.strip().lower()}%"

        base = f"""
            FROM institute_students ins
            JOIN students s ON s.id = ins.student_id
            JOIN users u ON u.id = s.user_id
            WHERE {where}
        """
        total = await database.fetch_val(f"SELECT COUNT(*) {base}", params)
        rows = await database.fetch_all(
            f"""
            SELECT s.id, s.name, s.sport, s.level, s.date_of_birth, s.state,
                   u.unique_id, u.email, u.phone, ins.created_at AS enrolled_at
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

    @staticmethod
    async def list_coaches(
        current_user: dict,
        page: int,
        limit: int,
        offset: int,
        search: Optional[str] = None,
        specialization: Optional[str] = None,
        approval_status: Optional[str] = None
    ) -> dict:
        """Coaches linked to the institute, with their student and event counts"""
        where = "ic.institute_id = :iid"
        params = {"iid": str(current_user["profile"]["id"])}
        if search:
            where += " AND (LOWER(c.name) LIKE :search OR LOWER(u.unique_id) LIKE :search OR LOWER(u.email) LIKE :search)"
            params["search"] = f"%{search.strip().lower()}%"
        if specialization:
            where += " AND LOWER(c.specialization) LIKE :specialization"
            params["specialization"] = f"%{specialization.strip().lower()}%"
        if approval_status:
            where += " AND c.approval_status = :approval_status"
            params["approval_status"] = approval_status.strip().upper()

        base = f"""
            FROM institute_coaches ic
            JOIN coaches c ON c.id = ic.coach_id
            JOIN users u ON u.id = c.user_id
            WHERE {where}
        """
        total = await database.fetch_val(f"SELECT COUNT(*) {base}", params)
        rows = await database.fetch_all(
            f"""
            SELECT c.id, c.name, c.specialization, c.experience, c.city, c.state,
                   c.approval_status, c.payment_status,
                   u.unique_id, u.email, u.phone, ic.created_at AS linked_at,
                   (SELECT COUNT(*) FROM coach_students cs
                    WHERE cs.coach_id = c.id AND cs.status = 'ACCEPTED') AS student_count,
                   (SELECT COUNT(*) FROM events e WHERE e.created_by = u.id) AS event_count
            {base}
            ORDER BY c.name ASC
            LIMIT :limit OFFSET :offset
            """,
            {**params, "limit": limit, "offset": offset}
        )
        return {
            "coaches": serialize_rows(rows),
            "pagination": get_pagination_meta(int(total or 0), page, limit),
        }


# Create singleton instance
institute_service = InstituteService()
