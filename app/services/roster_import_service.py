"""
Roster Import Service
Bulk creation of student and coach accounts from roster files
"""

import logging
import uuid
from datetime import date

from app.auth.password import roster_password
from app.database import database
from app.services.auth_service import AuthService
from app.services.email_service import email_service
from app.services.roster_parser import roster_parser
from app.utils.datetime_ist import utc_now

logger = logging.getLogger(__name__)


class RosterImportService:
    """Service for roster imports"""

    @staticmethod
    async def _existing_contacts(rows: list) -> tuple[set, set]:
        params = {}
        email_slots = []
        for i, row in enumerate(rows):
            params[f"e_{i}"] = row["email"].lower()
            email_slots.append(f":e_{i}")
        phone_slots = []
        for i, row in enumerate(rows):
            params[f"p_{i}"] = row["phone"]
            phone_slots.append(f":p_{i}")

        found = await database.fetch_all(
            f"""
            SELECT email, phone FROM users
            WHERE email IN ({', '.join(email_slots)}) OR phone IN ({', '.join(phone_slots)})
            """,
            params
        )
        return {r["email"] for r in found}, {r["phone"] for r in found if r["phone"]}

    @staticmethod
    async def _link_student(owner: str, owner_profile_id: str, student_id: str):
        now = utc_now()
        if owner == "INSTITUTE":
            await database.execute(
                """
                INSERT INTO institute_students (id, institute_id, student_id, created_at)
                VALUES (:id, :owner_id, :student_id, :now)
                """,
                {"id": str(uuid.uuid4()), "owner_id": owner_profile_id, "student_id": student_id, "now": now}
            )
        else:
            await database.execute(
                """
                INSERT INTO coach_students (id, coach_id, student_id, status, initiated_by, created_at, updated_at)
                VALUES (:id, :owner_id, :student_id, 'ACCEPTED', 'COACH', :now, :now)
                """,
                {"id": str(uuid.uuid4()), "owner_id": owner_profile_id, "student_id": student_id, "now": now}
            )

    @staticmethod
    async def _link_coach(institute_id: str, coach_id: str):
        await database.execute(
            """
            INSERT INTO institute_coaches (id, institute_id, coach_id, created_at)
            VALUES (:id, :iid, :cid, :now)
            """,
            {"id": str(uuid.uuid4()), "iid": institute_id, "cid": coach_id, "now": utc_now()}
        )

    @staticmethod
    async def _import(filename: str, content: bytes, kind: str, create_account) -> tuple[list, list, int]:
        """
        Shared parse/validate/dedupe loop. `create_account(row, email, name,
        password)` writes one account and returns its summary entry.
        """
        rows = roster_parser.parse_roster(filename, content, kind)
        valid, errors = roster_parser.split_valid_rows(rows, kind)

        created = []
        if valid:
            taken_emails, taken_phones = await RosterImportService._existing_contacts(valid)
        for row in valid:
            email = row["email"].lower()
            if email in taken_emails:
                errors.append({"row": row["row_number"], "email": row["email"], "errors": ["Email already registered"]})
                continue
            if row["phone"] in taken_phones:
                errors.append({"row": row["row_number"], "email": row["email"], "errors": ["Phone already registered"]})
                continue

            name = f"{row['firstName'].strip()} {row['lastName'].strip()}".strip()
            password = roster_password(row["firstName"], row["phone"])
            async with database.transaction():
                entry = await create_account(row, email, name, password)

            try:
                await email_service.send_account_created_email(email, name, kind, password)
            except Exception as e:
                logger.warning("Roster credentials email to %s failed: %s", email, e)

            created.append({"row": row["row_number"], "name": name, "email": email, **entry})

        errors.sort(key=lambda e: e["row"])
        return created, errors, len(rows)

    @staticmethod
    async def import_students(filename: str, content: bytes, owner: str, owner_profile: dict) -> dict:
        """
        Create a verified student account for every valid roster row

        Args:
            filename: Uploaded file name (csv/xlsx)
            content: File bytes
            owner: 'INSTITUTE' or 'COACH'; imported students are linked to it
            owner_profile: Institute or coach profile row

        Returns:
            Summary with created students and per-row errors (spreadsheet row numbers)
        """
        async def create_student(row: dict, email: str, name: str, password: str) -> dict:
            profile = {
                "sport": row.get("sport") or owner_profile.get("sport") or owner_profile.get("specialization"),
                "level": (row.get("level") or "BEGINNER").upper(),
                "city": row.get("city") or owner_profile.get("city"),
            }
            if row.get("dateOfBirth"):
                profile["date_of_birth"] = date.fromisoformat(row["dateOfBirth"][:10])
            result = await AuthService.create_user(
                role="STUDENT",
                email=email,
                password=password,
                name=name,
                phone=row["phone"],
                state=row.get("state") or owner_profile.get("state"),
                is_verified=True,
                must_change_password=True,
                profile=profile,
            )
            await RosterImportService._link_student(owner, str(owner_profile["id"]), result["profile_id"])
            return {"student_id": result["profile_id"], "unique_id": result["unique_id"]}

        created, errors, total = await RosterImportService._import(filename, content, "student", create_student)
        logger.info("[IMPORT] %s %s imported %d students (%d errors)",
                    owner, owner_profile["id"], len(created), len(errors))

        return {
            "message": f"{len(created)} students imported",
            "total_rows": total,
            "created": len(created),
            "failed": len(errors),
            "students": created,
            "errors": errors,
        }

    @staticmethod
    async def import_coaches(filename: str, content: bytes, institute_profile: dict) -> dict:
        """
        Create coach accounts for an institute. Imported coaches still need
        admin approval and their own subscription payment.
        """
        async def create_coach(row: dict, email: str, name: str, password: str) -> dict:
            certifications = [c.strip() for c in (row.get("certifications") or "").split(",") if c.strip()]
            result = await AuthService.create_user(
                role="COACH",
                email=email,
                password=password,
                name=name,
                phone=row["phone"],
                state=row.get("state") or institute_profile.get("state"),
                is_verified=True,
                must_change_password=True,
                profile={
                    "specialization": row["specialization"],
                    "experience": int(row["experience"]) if row.get("experience") else 0,
                    "certifications": ", ".join(certifications) or None,
                    "bio": row.get("bio") or None,
                    "city": row.get("city") or institute_profile.get("city"),
                    "approval_status": "PENDING",
                },
            )
            await RosterImportService._link_coach(str(institute_profile["id"]), result["profile_id"])
            return {"coach_id": result["profile_id"], "unique_id": result["unique_id"]}

        created, errors, total = await RosterImportService._import(filename, content, "coach", create_coach)
        logger.info("[IMPORT] INSTITUTE %s imported %d coaches (%d errors)",
                    institute_profile["id"], len(created), len(errors))

        return {
            "message": f"{len(created)} coaches imported",
            "total_rows": total,
            "created": len(created),
            "failed": len(errors),
            "coaches": created,
            "errors": errors,
        }


# Create singleton instance
roster_import_service = RosterImportService()
