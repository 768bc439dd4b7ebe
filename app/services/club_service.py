"""
Club Service
Club profile, dashboard, members and facilities
"""

import json
import logging
import uuid
from typing import Optional

from fastapi import HTTPException, status

from app.database import database, update_row
from app.services.notification_service import notification_service
from app.services.student_service import clean_updates, update_user_contact
from app.utils.datetime_ist import utc_now
from app.utils.helpers import get_pagination_meta, sanitize_input, validate_phone
from app.utils.serializers import serialize_row, serialize_rows

logger = logging.getLogger(__name__)

CLUB_UPDATABLE_FIELDS = ("name", "club_type", "sport", "address", "city", "state", "established_year")
MEMBER_UPDATABLE_FIELDS = ("name", "sport", "membership_type", "fees", "status")
FACILITY_UPDATABLE_FIELDS = ("name", "type", "description", "capacity", "hourly_rate", "available", "amenities")

MEMBERSHIP_TYPES = ("REGULAR", "PREMIUM", "VIP")
MEMBER_STATUSES = ("ACTIVE", "INACTIVE", "SUSPENDED")


def _serialize_facility(row) -> dict:
    facility = serialize_row(row)
    raw = facility.get("amenities")
    facility["amenities"] = json.loads(raw) if raw else []
    return facility


def _normalize_choice(value: str, allowed: tuple, field: str) -> str:
    normalized = str(value).strip().upper()
    if normalized not in allowed:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {field}. Must be one of: {', '.join(allowed)}"
        )
    return normalized
class ClubService:
    """Service for club operations"""

    @staticmethod
    async def get_profile(current_user: dict) -> dict:
        user = await database.fetch_one("SELECT * FROM users WHERE id = :id", {"id": current_user["id"]})
        return {"user": serialize_row(user), "profile": serialize_row(current_user["profile"])}

    @staticmethod
    async def update_profile(current_user: dict, data: dict) -> dict:
        profile_id = str(current_user["profile"]["id"])
        values = clean_updates(data, CLUB_UPDATABLE_FIELDS)
        if "established_year" in values:
            try:
                values["established_year"] = int(values["established_year"])
            except (TypeError, ValueError):
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="established_year must be a year"
                )

        async with database.transaction():
            await update_user_contact(current_user["id"], data)
            await update_row("clubs", profile_id, values)

        profile = await database.fetch_one("SELECT * FROM clubs WHERE id = :id", {"id": profile_id})
        return {"message": "Profile updated successfully", "profile": serialize_row(profile)}

    @staticmethod
    async def get_dashboard(current_user: dict) -> dict:
        user_id = current_user["id"]

        event_rows = await database.fetch_all(
            "SELECT status, COUNT(*) AS count FROM events WHERE created_by = :uid GROUP BY status",
            {"uid": user_id}
        )
        participants = await database.fetch_val(
            "SELECT COALESCE(SUM(current_participants), 0) FROM events WHERE created_by = :uid",
            {"uid": user_id}
        )
        members = await database.fetch_val(
            "SELECT COUNT(*) FROM club_members WHERE club_id = :cid AND status = 'ACTIVE'",
            {"cid": str(current_user["profile"]["id"])}
        )
        recent = await database.fetch_all(
            """
            SELECT id, unique_id, name, sport, city, start_date, status, current_participants
            FROM events WHERE created_by = :uid
            ORDER BY created_at DESC
            LIMIT 5
            """,
            {"uid": user_id}
        )

        events_by_status = {row["status"]: int(row["count"]) for row in event_rows}
        return {
            "profile": serialize_row(current_user["profile"]),
            "stats": {
                "total_events": sum(events_by_status.values()),
                "events_by_status": events_by_status,
                "total_participants": int(participants or 0),
                "active_members": int(members or 0),
                "unread_notifications": await notification_service.unread_count(user_id),
            },
            "recent_events": serialize_rows(recent),
        }

    # Members

    @staticmethod
    async def _owned_row(table: str, row_id: str, club_id: str, label: str):
        row = await database.fetch_one(f"SELECT * FROM {table} WHERE id = :id", {"id": row_id})
        if not row:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"{label} not found"
            )
        if str(row["club_id"]) != club_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"This {label.lower()} belongs to another club"
            )
        return row

    @staticmethod
    async def list_members(
        current_user: dict,
        page: int,
        limit: int,
        offset: int,
        member_status: Optional[str] = None,
        search: Optional[str] = None
    ) -> dict:
        where = "club_id = :cid"
        params = {"cid": str(current_user["profile"]["id"])}
        if member_status:
            where += " AND status = :status"
            params["status"] = member_status.strip().upper()
        if search:
            where += " AND (LOWER(name) LIKE :search OR LOWER(email) LIKE :search OR phone LIKE :search)"
            params["search"] = f"%{search.strip().lower()}%"

        total = await database.fetch_val(f"SELECT COUNT(*) FROM club_members WHERE {where}", params)
        rows = await database.fetch_all(
            f"""
            SELECT * FROM club_members WHERE {where}
            ORDER BY joined_at DESC
            LIMIT :limit OFFSET :offset
            """,
            {**params, "limit": limit, "offset": offset}
        )
        return {
            "members": serialize_rows(rows),
            "pagination": get_pagination_meta(int(total or 0), page, limit),
        }

    @staticmethod
    async def add_member(current_user: dict, data: dict) -> dict:
        """
        Add a member to the club roster

        A member whose email matches a student account is linked to it.

        Raises:
            HTTPException: 400 for a bad phone or membership type, 409 when
                the email is already on this club's list
        """
        club_id = str(current_user["profile"]["id"])
        email = data["email"].strip().lower()
        phone = str(data["phone"]).strip()
        if not validate_phone(phone):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Phone must be a valid 10 digit mobile number"
            )
        membership_type = _normalize_choice(data.get("membership_type") or "REGULAR", MEMBERSHIP_TYPES, "membership type")

        existing = await database.fetch_one(
            "SELECT id FROM club_members WHERE club_id = :cid AND email = :email",
            {"cid": club_id, "email": email}
        )
        if existing:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="This person is already a member of the club"
            )

        student = await database.fetch_one(
            """
            SELECT s.id FROM students s JOIN users u ON u.id = s.user_id
            WHERE u.email = :email AND u.role = 'STUDENT'
            """,
            {"email": email}
        )
        now = utc_now()
        member_id = str(uuid.uuid4())
        await database.execute(
            """
            INSERT INTO club_members (id, club_id, student_id, name, email, phone, sport,
                                      membership_type, fees, status, joined_at, created_at, updated_at)
            VALUES (:id, :cid, :sid, :name, :email, :phone, :sport,
                    :membership_type, :fees, 'ACTIVE', :now, :now, :now)
            """,
            {
                "id": member_id,
                "cid": club_id,
                "sid": str(student["id"]) if student else None,
                "name": sanitize_input(data["name"]),
                "email": email,
                "phone": phone,
                "sport": sanitize_input(data.get("sport")),
                "membership_type": membership_type,
                "fees": float(data.get("fees") or 0),
                "now": now,
            }
        )
        logger.info("[CLUB] %s added member %s", club_id, email)

        member = await database.fetch_one("SELECT * FROM club_members WHERE id = :id", {"id": member_id})
        return {"message": "Member added successfully", "member": serialize_row(member)}

    @staticmethod
    async def update_member(current_user: dict, member_id: str, data: dict) -> dict:
        club_id = str(current_user["profile"]["id"])
        await ClubService._owned_row("club_members", member_id, club_id, "Member")

        values = clean_updates(data, MEMBER_UPDATABLE_FIELDS)
        if "membership_type" in values:
            values["membership_type"] = _normalize_choice(values["membership_type"], MEMBERSHIP_TYPES, "membership type")
        if "status" in values:
            values["status"] = _normalize_choice(values["status"], MEMBER_STATUSES, "status")
        await update_row("club_members", member_id, values)

        member = await database.fetch_one("SELECT * FROM club_members WHERE id = :id", {"id": member_id})
        return {"message": "Member updated successfully", "member": serialize_row(member)}

    @staticmethod
    async def remove_member(current_user: dict, member_id: str) -> dict:
        club_id = str(current_user["profile"]["id"])
        await ClubService._owned_row("club_members", member_id, club_id, "Member")
        await database.execute("DELETE FROM club_members WHERE id = :id", {"id": member_id})
        logger.info("[CLUB] %s removed member %s", club_id, member_id)
        return {"message": "Member removed successfully"}

    # Facilities

    @staticmethod
    async def list_facilities(
        current_user: dict,
        facility_type: Optional[str] = None,
        available: Optional[bool] = None
    ) -> dict:
        where = "club_id = :cid"
        params = {"cid": str(current_user["profile"]["id"])}
        if facility_type:
            where += " AND LOWER(type) = :type"
            params["type"] = facility_type.strip().lower()
        if available is not None:
            where += " AND available = :available"
            params["available"] = available

        rows = await database.fetch_all(
            f"SELECT * FROM club_facilities WHERE {where} ORDER BY name ASC",
            params
        )
        facilities = [_serialize_facility(row) for row in rows]
        return {"facilities": facilities, "total": len(facilities)}

    @staticmethod
    async def add_facility(current_user: dict, data: dict) -> dict:
        club_id = str(current_user["profile"]["id"])
        facility_id = str(uuid.uuid4())
        now = utc_now()
        await database.execute(
            """
            INSERT INTO club_facilities (id, club_id, name, type, description, capacity, hourly_rate,
                                         available, amenities, created_at, updated_at)
            VALUES (:id, :cid, :name, :type, :description, :capacity, :hourly_rate,
                    :available, :amenities, :now, :now)
            """,
            {
                "id": facility_id,
                "cid": club_id,
                "name": sanitize_input(data["name"]),
                "type": sanitize_input(data["type"]),
                "description": sanitize_input(data.get("description")),
                "capacity": data.get("capacity"),
                "hourly_rate": float(data.get("hourly_rate") or 0),
                "available": data.get("available", True),
                "amenities": json.dumps(data.get("amenities") or []),
                "now": now,
            }
        )
        logger.info("[CLUB] %s added facility %s", club_id, data["name"])

        facility = await database.fetch_one("SELECT * FROM club_facilities WHERE id = :id", {"id": facility_id})
        return {"message": "Facility added successfully", "facility": _serialize_facility(facility)}

    @staticmethod
    async def update_facility(current_user: dict, facility_id: str, data: dict) -> dict:
        club_id = str(current_user["profile"]["id"])
        await ClubService._owned_row("club_facilities", facility_id, club_id, "Facility")

        values = clean_updates(data, FACILITY_UPDATABLE_FIELDS)
        if "amenities" in values:
            values["amenities"] = json.dumps(values["amenities"] or [])
        await update_row("club_facilities", facility_id, values)

        facility = await database.fetch_one("SELECT * FROM club_facilities WHERE id = :id", {"id": facility_id})
        return {"message": "Facility updated successfully", "facility": _serialize_facility(facility)}

    @staticmethod
    async def delete_facility(current_user: dict, facility_id: str) -> dict:
        club_id = str(current_user["profile"]["id"])
        await ClubService._owned_row("club_facilities", facility_id, club_id, "Facility")
        await database.execute("DELETE FROM club_facilities WHERE id = :id", {"id": facility_id})
        return {"message": "Facility deleted successfully"}


# Create singleton instance
club_service = ClubService()
