"""
Event Service
Event lifecycle, student registration, permissions and result files
"""

import logging
import uuid
from typing import Optional

from fastapi import HTTPException, UploadFile, status

from app.config import settings
from app.database import database, update_row
from app.services.activity_log_service import activity_log_service
from app.services.notification_service import notification_service
from app.services.storage_service import storage_service
from app.utils.datetime_ist import ensure_datetime, format_as_ist, parse_as_ist, to_utc_iso, utc_now
from app.utils.helpers import (
    format_file_size,
    get_file_extension,
    get_pagination_meta,
    is_valid_result_file,
    sanitize_input,
)
from app.utils.serializers import serialize_row, serialize_rows
from app.utils.uid import generate_event_uid

logger = logging.getLogger(__name__)

EVENT_STATUSES = ("PENDING", "APPROVED", "ACTIVE", "COMPLETED", "REJECTED", "SUSPENDED", "CANCELLED")
OPEN_STATUSES = ("APPROVED", "ACTIVE")
CREATOR_TYPES = {"COACH": "COACH", "INSTITUTE": "INSTITUTE", "CLUB": "CLUB", "ADMIN": "ADMIN"}
EVENT_PERMISSIONS = ("result_upload", "student_management", "certificate_management", "fee_management")

EVENT_UPDATABLE_FIELDS = (
    "name", "description", "sport", "level", "venue", "address", "city", "state",
    "start_date", "end_date", "registration_deadline", "max_participants", "event_fee",
)
DATE_FIELDS = ("start_date", "end_date", "registration_deadline")

RESULT_MIME_TYPES = {
    "pdf": "application/pdf",
    "csv": "text/csv",
    "xls": "application/vnd.ms-excel",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


def get_dynamic_status(event: dict, now=None) -> Optional[str]:
    """
    Live phase of an approved/active event

    Returns 'about to start', 'ongoing' or 'ended'; None for other statuses.
    """
    if event.get("status") not in OPEN_STATUSES:
        return None
    now = now or utc_now()
    start = ensure_datetime(event.get("start_date"))
    if start is None:
        return None
    end = ensure_datetime(event.get("end_date")) or start
    if now < start:
        return "about to start"
    if now <= end:
        return "ongoing"
    return "ended"


def present_event(row, now=None) -> dict:
    event = serialize_row(row)
    raw = dict(row)
    for field in DATE_FIELDS:
        event[f"{field}_ist"] = format_as_ist(raw.get(field))
    event["dynamic_status"] = get_dynamic_status(raw, now)
    return event


def _parse_ist_field(value, field: str):
    try:
        return parse_as_ist(value)
    except (TypeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {field}. Use ISO format, e.g. 2025-11-25T14:30:00 (IST)"
        )


def validate_event_dates(start, end, deadline, require_future: bool = True, now=None):
    """
    Raises:
        HTTPException: 400 when the dates are inconsistent
    """
    now = now or utc_now()
    if start is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="start_date is required")
    if require_future and start <= now:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Event start date must be in the future")
    if end is not None and end <= start:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="End date must be after start date")
    if deadline is not None and deadline > start:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Registration deadline must be on or before the start date"
        )


def _validate_numbers(values: dict):
    if "max_participants" in values and values["max_participants"] is not None:
        if int(values["max_participants"]) < 1:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="max_participants must be at least 1")
        values["max_participants"] = int(values["max_participants"])
    if "event_fee" in values and values["event_fee"] is not None:
        if float(values["event_fee"]) < 0:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="event_fee cannot be negative")
        values["event_fee"] = float(values["event_fee"])


class EventService:
    """Service for event operations"""

    @staticmethod
    async def get_event_row(id_or_uid: str) -> dict:
        """Resolve by primary key or by event UID"""
        try:
            event_id = str(uuid.UUID(str(id_or_uid)))
            row = await database.fetch_one("SELECT * FROM events WHERE id = :id", {"id": event_id})
        except ValueError:
            row = await database.fetch_one("SELECT * FROM events WHERE unique_id = :uid", {"uid": str(id_or_uid)})
        if not row:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Event not found")
        return dict(row)

    @staticmethod
    def is_owner(current_user: dict, event: dict) -> bool:
        return str(event["created_by"]) == str(current_user["id"])

    @staticmethod
    async def get_assignment(user_id: str, event_id: str) -> Optional[dict]:
        row = await database.fetch_one(
            "SELECT * FROM event_assignments WHERE event_id = :eid AND user_id = :uid",
            {"eid": str(event_id), "uid": str(user_id)}
        )
        return dict(row) if row else None

    @staticmethod
    async def check_event_permission(current_user: dict, event: dict, permission: str) -> None:
        """
        Admins and the owner may do anything; other users need an assignment
        with the matching capability flag.

        Raises:
            HTTPException: 403 when not permitted
        """
        if current_user["role"] == "ADMIN" or EventService.is_owner(current_user, event):
            return
        assignment = await EventService.get_assignment(current_user["id"], event["id"])
        if assignment and assignment.get(permission):
            return
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have permission to perform this action for this event"
        )

    @staticmethod
    def _require_owner_or_admin(current_user: dict, event: dict):
        if current_user["role"] != "ADMIN" and not EventService.is_owner(current_user, event):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only the event creator or an admin can perform this action"
            )

    @staticmethod
    async def create_event(current_user: dict, data: dict) -> dict:
        creator_type = CREATOR_TYPES.get(current_user["role"])
        if not creator_type:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not allowed to create events")

        for field in ("name", "sport", "venue", "city", "start_date"):
            if not data.get(field):
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{field} is required")

        start = _parse_ist_field(data.get("start_date"), "start_date")
        end = _parse_ist_field(data.get("end_date"), "end_date")
        deadline = _parse_ist_field(data.get("registration_deadline"), "registration_deadline")
        validate_event_dates(start, end, deadline)

        values = {
            "max_participants": data.get("max_participants") or 100,
            "event_fee": data.get("event_fee") or 0,
        }
        _validate_numbers(values)

        unique_id = await generate_event_uid(data["sport"], data["city"], start)
        event_id = str(uuid.uuid4())
        now = utc_now()
        await database.execute(
            """
            INSERT INTO events (
                id, unique_id, name, description, sport, level, venue, address, city, state,
                start_date, end_date, registration_deadline, max_participants, current_participants,
                event_fee, status, creator_type, created_by, created_at, updated_at
            )
            VALUES (
                :id, :unique_id, :name, :description, :sport, :level, :venue, :address, :city, :state,
                :start_date, :end_date, :registration_deadline, :max_participants, 0,
                :event_fee, 'PENDING', :creator_type, :created_by, :now, :now
            )
            """,
            {
                "id": event_id,
                "unique_id": unique_id,
                "name": sanitize_input(data["name"]),
                "description": sanitize_input(data.get("description")),
                "sport": sanitize_input(data["sport"]),
                "level": data.get("level"),
                "venue": sanitize_input(data["venue"]),
                "address": sanitize_input(data.get("address")),
                "city": sanitize_input(data["city"]),
                "state": data.get("state"),
                "start_date": start,
                "end_date": end,
                "registration_deadline": deadline,
                "max_participants": values["max_participants"],
                "event_fee": values["event_fee"],
                "creator_type": creator_type,
                "created_by": current_user["id"],
                "now": now,
            }
        )
        logger.info("[EVENT] %s created %s (%s)", current_user["unique_id"], unique_id, creator_type)

        admins = await database.fetch_all("SELECT id FROM users WHERE role = 'ADMIN' AND is_active = TRUE")
        for admin in admins:
            await notification_service.notify(
                admin["id"], "GENERAL", "New event awaiting approval",
                f"{data['name']} ({unique_id}) was submitted for approval",
                {"eventId": event_id}
            )

        event = await EventService.get_event_row(event_id)
        return {"message": "Event created and submitted for approval", "event": present_event(event)}

    @staticmethod
    async def list_events(
        current_user: dict,
        page: int,
        limit: int,
        offset: int,
        filters: dict,
        admin_view: bool = False
    ) -> dict:
        """
        Paginated events visible to the caller

        Filters: sport, city/location, start_from, start_to, max_fees, search,
        status, creator_type, mine.
        """
        now = utc_now()
        role = current_user["role"]
        where = []
        params = {}

        if role == "ADMIN" or admin_view:
            pass
        elif role == "STUDENT":
            where.append("e.status IN ('APPROVED', 'ACTIVE') AND e.start_date > :now")
            params["now"] = now
        elif filters.get("mine"):
            where.append("e.created_by = :me")
            params["me"] = current_user["id"]
        else:
            where.append(
                "(e.status IN ('APPROVED', 'ACTIVE') OR e.created_by = :me"
                " OR e.id IN (SELECT event_id FROM event_assignments WHERE user_id = :me))"
            )
            params["me"] = current_user["id"]

        if filters.get("status"):
            where.append("e.status = :status")
            params["status"] = filters["status"].upper()
        if filters.get("creator_type"):
            where.append("e.creator_type = :creator_type")
            params["creator_type"] = filters["creator_type"].upper()
        if filters.get("sport"):
            where.append("LOWER(e.sport) LIKE :sport")
            params["sport"] = f"%{filters['sport'].strip().lower()}%"
        location = filters.get("city") or filters.get("location")
        if location:
            where.append("(LOWER(e.city) LIKE :location OR LOWER(e.venue) LIKE :location OR LOWER(e.state) LIKE :location)")
            params["location"] = f"%{location.strip().lower()}%"
        if filters.get("start_from"):
            where.append("e.start_date >= :start_from")
            params["start_from"] = _parse_ist_field(filters["start_from"], "start_from")
        if filters.get("start_to"):
            where.append("e.start_date <= :start_to")
            params["start_to"] = _parse_ist_field(filters["start_to"], "start_to")
        if filters.get("max_fees") is not None:
            where.append("e.event_fee <= :max_fees")
            params["max_fees"] = float(filters["max_fees"])
        if filters.get("search"):
            where.append(
                "(LOWER(e.name) LIKE :search OR LOWER(e.description) LIKE :search OR LOWER(e.unique_id) LIKE :search)"
            )
            params["search"] = f"%{filters['search'].strip().lower()}%"

        where_clause = f"WHERE {' AND '.join(where)}" if where else ""

        total = await database.fetch_val(f"SELECT COUNT(*) FROM events e {where_clause}", params)

        select_extra = ""
        join_extra = ""
        query_params = {**params, "limit": limit, "offset": offset}
        if role == "STUDENT" and current_user.get("profile"):
            select_extra = ", r.id AS registration_id"
            join_extra = "LEFT JOIN event_registrations r ON r.event_id = e.id AND r.student_id = :student_id"
            query_params["student_id"] = str(current_user["profile"]["id"])

        rows = await database.fetch_all(
            f"""
            SELECT e.*, u.name AS creator_name, u.unique_id AS creator_uid{select_extra}
            FROM events e
            JOIN users u ON u.id = e.created_by
            {join_extra}
            {where_clause}
            ORDER BY e.start_date ASC
            LIMIT :limit OFFSET :offset
            """,
            query_params
        )

        events = []
        for row in rows:
            event = present_event(row, now)
            if role == "STUDENT":
                event["is_registered"] = event.pop("registration_id", None) is not None
            events.append(event)

        return {"events": events, "pagination": get_pagination_meta(int(total or 0), page, limit)}

    @staticmethod
    async def get_event(current_user: dict, id_or_uid: str) -> dict:
        event = await EventService.get_event_row(id_or_uid)
        role = current_user["role"]
        owner = EventService.is_owner(current_user, event)
        assignment = None

        if role == "STUDENT":
            if event["status"] not in OPEN_STATUSES:
                raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="This event is not available")
        elif role != "ADMIN" and not owner:
            assignment = await EventService.get_assignment(current_user["id"], event["id"])
            if event["status"] not in OPEN_STATUSES and not assignment:
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail="You do not have access to this event"
                )

        result = present_event(event)
        result["is_owner"] = owner
        if assignment:
            result["permissions"] = {p: bool(assignment.get(p)) for p in EVENT_PERMISSIONS}
        if role == "STUDENT":
            registered = await database.fetch_val(
                "SELECT COUNT(*) FROM event_registrations WHERE event_id = :eid AND student_id = :sid",
                {"eid": str(event["id"]), "sid": str(current_user["profile"]["id"])}
            )
            result["is_registered"] = bool(registered)
        return {"event": result}

    @staticmethod
    async def list_assigned_events(current_user: dict) -> dict:
        """Events the user is assigned to, soonest first, with the assignment's capability flags"""
        rows = await database.fetch_all(
            """
            SELECT e.*, a.id AS assignment_id, a.role AS assignment_role, a.created_at AS assigned_at,
                   a.result_upload, a.student_management, a.certificate_management, a.fee_management
            FROM event_assignments a
            JOIN events e ON e.id = a.event_id
            WHERE a.user_id = :uid
            ORDER BY e.start_date ASC
            """,
            {"uid": str(current_user["id"])}
        )

        now = utc_now()
        assignments = []
        for row in rows:
            raw = dict(row)
            flags = {p: bool(raw.pop(p)) for p in EVENT_PERMISSIONS}
            assignments.append({
                "assignment_id": str(raw.pop("assignment_id")),
                "role": raw.pop("assignment_role"),
                "assigned_at": to_utc_iso(raw.pop("assigned_at")),
                "permissions": flags,
                "event": present_event(raw, now),
            })
        return {"assignments": assignments, "total": len(assignments)}

    @staticmethod
    async def update_event(current_user: dict, event_id: str, data: dict) -> dict:
        event = await EventService.get_event_row(event_id)
        EventService._require_owner_or_admin(current_user, event)

        now = utc_now()
        if ensure_datetime(event["start_date"]) <= now:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot modify an event that has already started"
            )

        values = {}
        for field in EVENT_UPDATABLE_FIELDS:
            if field in data and data[field] is not None:
                value = data[field]
                values[field] = sanitize_input(value) if isinstance(value, str) and field not in DATE_FIELDS else value

        for field in DATE_FIELDS:
            if field in values:
                values[field] = _parse_ist_field(values[field], field)

        start = values.get("start_date") or ensure_datetime(event["start_date"])
        end = values.get("end_date") if "end_date" in values else ensure_datetime(event["end_date"])
        deadline = (values.get("registration_deadline") if "registration_deadline" in values
                    else ensure_datetime(event["registration_deadline"]))
        validate_event_dates(start, end, deadline, require_future="start_date" in values, now=now)
        _validate_numbers(values)

        if "max_participants" in values and values["max_participants"] < int(event["current_participants"] or 0):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="max_participants cannot be lower than the current participant count"
            )

        if event["status"] == "REJECTED" and EventService.is_owner(current_user, event):
            values["status"] = "PENDING"

        if not values:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No valid fields to update")

        await update_row("events", event["id"], values)
        updated = await EventService.get_event_row(str(event["id"]))
        return {"message": "Event updated successfully", "event": present_event(updated)}

    @staticmethod
    async def delete_event(current_user: dict, event_id: str) -> dict:
        event = await EventService.get_event_row(event_id)
        EventService._require_owner_or_admin(current_user, event)

        registrations = await database.fetch_val(
            "SELECT COUNT(*) FROM event_registrations WHERE event_id = :eid",
            {"eid": str(event["id"])}
        )
        if registrations:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Cannot delete an event with registrations. Cancel it instead."
            )

        await database.execute("DELETE FROM events WHERE id = :id", {"id": str(event["id"])})
        await activity_log_service.log_activity(
            actor_id=current_user["id"], action="event_deleted", resource_type="event",
            resource_id=event["id"], details={"unique_id": event["unique_id"]}
        )
        return {"message": "Event deleted successfully"}

    @staticmethod
    async def cancel_event(current_user: dict, event_id: str, reason: Optional[str] = None) -> dict:
        event = await EventService.get_event_row(event_id)
        EventService._require_owner_or_admin(current_user, event)
        if event["status"] in ("COMPLETED", "CANCELLED"):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Event is already {event['status'].lower()}"
            )

        await update_row("events", event["id"], {"status": "CANCELLED", "cancellation_reason": reason})
        updated = await EventService.get_event_row(str(event["id"]))
        return {"message": "Event cancelled", "event": present_event(updated)}

    @staticmethod
    def ensure_open_for_registration(event: dict, seats: int = 1, now=None):
        """
        Raises:
            HTTPException: 400 when the event does not accept `seats` more registrations
        """
        now = now or utc_now()
        if event["status"] not in OPEN_STATUSES:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Event is not open for registration")
        if ensure_datetime(event["start_date"]) <= now:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Event has already started")
        deadline = ensure_datetime(event.get("registration_deadline"))
        if deadline is not None and deadline < now:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Registration deadline has passed")
        available = int(event["max_participants"] or 0) - int(event["current_participants"] or 0)
        if available < seats:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Event is full" if seats == 1 else f"Only {max(available, 0)} spots left in this event"
            )

    @staticmethod
    async def claim_seats(event_id: str, seats: int) -> int:
        """
        Take `seats` places in one conditional UPDATE so concurrent
        registrations cannot push the event past max_participants.

        Raises:
            HTTPException: 400 when the places are no longer free
        """
        claimed = await database.fetch_one(
            """
            UPDATE events SET current_participants = current_participants + :seats
            WHERE id = :id AND current_participants + :seats <= max_participants
            RETURNING current_participants
            """,
            {"seats": seats, "id": str(event_id)}
        )
        if not claimed:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Event is full" if seats == 1 else f"Not enough spots left for {seats} students"
            )
        return int(claimed["current_participants"])

    @staticmethod
    async def register_student(current_user: dict, event_id: str) -> dict:
        student_id = str(current_user["profile"]["id"])

        async with database.transaction():
            event = await EventService.get_event_row(event_id)
            EventService.ensure_open_for_registration(event)

            existing = await database.fetch_val(
                "SELECT COUNT(*) FROM event_registrations WHERE event_id = :eid AND student_id = :sid",
                {"eid": str(event["id"]), "sid": student_id}
            )
            if existing:
                raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Already registered for this event")

            registration_id = str(uuid.uuid4())
            await database.execute(
                """
                INSERT INTO event_registrations (id, event_id, student_id, status, created_at)
                VALUES (:id, :eid, :sid, 'REGISTERED', :now)
                """,
                {"id": registration_id, "eid": str(event["id"]), "sid": student_id, "now": utc_now()}
            )
            await EventService.claim_seats(event["id"], 1)

        return {
            "message": "Registered for event successfully",
            "registration": {"id": registration_id, "event_id": str(event["id"]), "status": "REGISTERED"},
        }

    @staticmethod
    async def unregister_student(current_user: dict, event_id: str) -> dict:
        student_id = str(current_user["profile"]["id"])

        async with database.transaction():
            event = await EventService.get_event_row(event_id)
            if ensure_datetime(event["start_date"]) <= utc_now():
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Cannot unregister after the event has started"
                )
            registration = await database.fetch_one(
                "SELECT id FROM event_registrations WHERE event_id = :eid AND student_id = :sid",
                {"eid": str(event["id"]), "sid": student_id}
            )
            if not registration:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not registered for this event")

            await database.execute("DELETE FROM event_registrations WHERE id = :id", {"id": str(registration["id"])})
            await database.execute(
                """
                UPDATE events SET current_participants = current_participants - 1
                WHERE id = :id AND current_participants > 0
                """,
                {"id": str(event["id"])}
            )

        return {"message": "Unregistered from event"}

    @staticmethod
    async def list_participants(current_user: dict, event_id: str) -> dict:
        event = await EventService.get_event_row(event_id)
        await EventService.check_event_permission(current_user, event, "student_management")

        rows = await database.fetch_all(
            """
            SELECT r.id AS registration_id, r.status, r.created_at AS registered_at,
                   s.id AS student_id, s.name, s.sport, s.level, s.city, s.state,
                   u.unique_id, u.email, u.phone
            FROM event_registrations r
            JOIN students s ON s.id = r.student_id
            JOIN users u ON u.id = s.user_id
            WHERE r.event_id = :eid
            ORDER BY s.name ASC
            """,
            {"eid": str(event["id"])}
        )
        return {
            "event": {"id": str(event["id"]), "unique_id": event["unique_id"], "name": event["name"]},
            "participants": serialize_rows(rows),
            "total": len(rows),
        }

    @staticmethod
    async def upload_result_file(
        current_user: dict,
        event_id: str,
        upload: UploadFile,
        description: Optional[str] = None
    ) -> dict:
        event = await EventService.get_event_row(event_id)
        await EventService.check_event_permission(current_user, event, "result_upload")

        filename = upload.filename or ""
        if not is_valid_result_file(filename):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Only PDF, Excel (.xlsx/.xls) and CSV files are allowed"
            )

        content = await upload.read()
        if len(content) > settings.MAX_RESULT_FILE_SIZE:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"File too large. Maximum size is {format_file_size(settings.MAX_RESULT_FILE_SIZE)}"
            )
        if not content:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="File is empty")

        extension = get_file_extension(filename)
        mime_type = RESULT_MIME_TYPES.get(extension, upload.content_type or "application/octet-stream")
        file_id = str(uuid.uuid4())
        location = await storage_service.save_bytes(
            f"results/{event['id']}/{file_id}.{extension}", content, mime_type
        )

        await database.execute(
            """
            INSERT INTO event_result_files (id, event_id, uploaded_by, original_name, location, mime_type,
                                            size_bytes, description, created_at)
            VALUES (:id, :eid, :uid, :name, :location, :mime, :size, :description, :now)
            """,
            {
                "id": file_id,
                "eid": str(event["id"]),
                "uid": current_user["id"],
                "name": filename,
                "location": location,
                "mime": mime_type,
                "size": len(content),
                "description": sanitize_input(description),
                "now": utc_now(),
            }
        )
        logger.info("[EVENT] Result file %s uploaded for %s", filename, event["unique_id"])

        row = await database.fetch_one("SELECT * FROM event_result_files WHERE id = :id", {"id": file_id})
        result = serialize_row(row, exclude=("location",))
        result["size"] = format_file_size(len(content))
        return {"message": "Result file uploaded successfully", "file": result}

    @staticmethod
    async def list_result_files(current_user: dict, event_id: str) -> dict:
        # Visibility follows the event detail rules
        event_view = await EventService.get_event(current_user, event_id)
        rows = await database.fetch_all(
            """
            SELECT f.*, u.name AS uploaded_by_name
            FROM event_result_files f
            LEFT JOIN users u ON u.id = f.uploaded_by
            WHERE f.event_id = :eid
            ORDER BY f.created_at DESC
            """,
            {"eid": event_view["event"]["id"]}
        )
        files = serialize_rows(rows, exclude=("location",))
        for f in files:
            f["size"] = format_file_size(f.get("size_bytes") or 0)
        return {"files": files}

    @staticmethod
    async def _get_result_file(file_id: str) -> dict:
        row = await database.fetch_one("SELECT * FROM event_result_files WHERE id = :id", {"id": file_id})
        if not row:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Result file not found")
        return dict(row)

    @staticmethod
    async def download_result_file(current_user: dict, file_id: str) -> tuple[bytes, str, str]:
        """Returns (content, original filename, mime type)"""
        result_file = await EventService._get_result_file(file_id)
        await EventService.get_event(current_user, str(result_file["event_id"]))
        content = await storage_service.read_bytes(result_file["location"])
        return content, result_file["original_name"], result_file["mime_type"] or "application/octet-stream"

    @staticmethod
    async def delete_result_file(current_user: dict, file_id: str) -> dict:
        result_file = await EventService._get_result_file(file_id)
        event = await EventService.get_event_row(str(result_file["event_id"]))
        await EventService.check_event_permission(current_user, event, "result_upload")

        await storage_service.delete(result_file["location"])
        await database.execute("DELETE FROM event_result_files WHERE id = :id", {"id": file_id})
        return {"message": "Result file deleted"}

    @staticmethod
    async def complete_finished_events(now=None) -> int:
        """Mark approved/active events whose end (or start) has passed as COMPLETED"""
        now = now or utc_now()
        params = {"now": now}
        condition = "status IN ('APPROVED', 'ACTIVE') AND COALESCE(end_date, start_date) < :now"

        count = await database.fetch_val(f"SELECT COUNT(*) FROM events WHERE {condition}", params)
        if count:
            await database.execute(
                f"UPDATE events SET status = 'COMPLETED', updated_at = :now WHERE {condition}",
                params
            )
            logger.info("[EVENT] Marked %d finished events as COMPLETED", count)
        return int(count or 0)


# Create singleton instance
event_service = EventService()
