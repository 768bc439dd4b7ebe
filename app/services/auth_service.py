"""
Auth Service
Registration, OTP verification, login and password management
"""

import logging
import secrets
import uuid
from datetime import date, timedelta
from typing import Optional

from fastapi import HTTPException, status

from app.auth.dependencies import PROFILE_TABLES, create_access_token, load_profile
from app.auth.password import MIN_PASSWORD_LENGTH, hash_password, verify_password
from app.config import settings
from app.database import database
from app.services.activity_log_service import activity_log_service
from app.services.email_service import email_service
from app.utils.datetime_ist import ensure_datetime, utc_now
from app.utils.helpers import generate_otp, sanitize_input, validate_email, validate_phone
from app.utils.serializers import serialize_row
from app.utils.uid import generate_user_uid

logger = logging.getLogger(__name__)

REGISTRABLE_ROLES = ("STUDENT", "COACH", "INSTITUTE", "CLUB")

# Extra profile columns accepted at registration, per role
PROFILE_FIELDS = {
    "STUDENT": ("father_name", "date_of_birth", "gender", "sport", "level", "school", "city"),
    "COACH": ("specialization", "experience", "certifications", "bio", "city"),
    "INSTITUTE": ("institute_type", "contact_person", "address", "city", "website"),
    "CLUB": ("club_type", "sport", "address", "city", "established_year"),
}


def build_token(user: dict) -> str:
    return create_access_token({
        "email": user["email"],
        "role": user["role"],
        "user_id": str(user["id"]),
        "unique_id": user["unique_id"],
    })


def present_user(user_row, profile: Optional[dict] = None) -> dict:
    user = serialize_row(user_row)
    user["profile"] = serialize_row(profile) if profile else None
    return user


class AuthService:
    """Service for authentication operations"""

    @staticmethod
    def _validate_password(password: str):
        if not password or len(password) < MIN_PASSWORD_LENGTH:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )

    @staticmethod
    async def get_user_by_email(email: str) -> Optional[dict]:
        row = await database.fetch_one(
            "SELECT * FROM users WHERE email = :email",
            {"email": (email or "").strip().lower()}
        )
        return dict(row) if row else None

    @staticmethod
    async def ensure_unique_contact(email: str, phone: Optional[str]):
        """409 when the email or phone already belongs to an account"""
        existing = await database.fetch_one(
            "SELECT email, phone FROM users WHERE email = :email OR (phone IS NOT NULL AND phone = :phone)",
            {"email": email, "phone": phone or ""}
        )
        if existing:
            field = "Email" if existing["email"] == email else "Phone number"
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"{field} is already registered"
            )

    @staticmethod
    async def create_user(
        role: str,
        email: str,
        password: str,
        name: str,
        phone: Optional[str] = None,
        state: Optional[str] = None,
        is_verified: bool = True,
        must_change_password: bool = False,
        otp: Optional[str] = None,
        profile: Optional[dict] = None,
    ) -> dict:
        """
        Insert a user and, for roles that have one, its profile row

        Must run inside a transaction when the caller also writes other rows.

        Returns:
            dict with the new `user_id`, `unique_id` and `profile_id`
        """
        user_id = str(uuid.uuid4())
        unique_id = await generate_user_uid(role, state)
        now = utc_now()

        await database.execute(
            """
            INSERT INTO users (
                id, unique_id, email, phone, password_hash, role, name, state,
                is_active, is_verified, must_change_password, otp_code, otp_expires_at,
                created_at, updated_at
            )
            VALUES (
                :id, :unique_id, :email, :phone, :password_hash, :role, :name, :state,
                TRUE, :is_verified, :must_change_password, :otp_code, :otp_expires_at,
                :now, :now
            )
            """,
            {
                "id": user_id,
                "unique_id": unique_id,
                "email": email,
                "phone": phone,
                "password_hash": hash_password(password),
                "role": role,
                "name": name,
                "state": state,
                "is_verified": is_verified,
                "must_change_password": must_change_password,
                "otp_code": otp,
                "otp_expires_at": now + timedelta(minutes=settings.OTP_EXPIRY_MINUTES) if otp else None,
                "now": now,
            }
        )

        profile_id = None
        table = PROFILE_TABLES.get(role)
        if table:
            profile_id = str(uuid.uuid4())
            values = {"id": profile_id, "user_id": user_id, "name": name, "state": state, "now": now}
            values.update({k: v for k, v in (profile or {}).items() if v is not None})

            if role == "COACH":
                values.setdefault("is_active", False)
            columns = [k for k in values if k != "now"] + ["created_at", "updated_at"]
            placeholders = [f":{k}" for k in values if k != "now"] + [":now", ":now"]
            await database.execute(
                f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({', '.join(placeholders)})",
                values
            )

        return {"user_id": user_id, "unique_id": unique_id, "profile_id": profile_id}

    @staticmethod
    def _profile_values(role: str, data: dict) -> dict:
        values = {}
        for field in PROFILE_FIELDS[role]:
            value = data.get(field)
            if isinstance(value, str):
                value = sanitize_input(value) or None
            values[field] = value
        if role == "STUDENT" and isinstance(values.get("date_of_birth"), str):
            try:
                values["date_of_birth"] = date.fromisoformat(values["date_of_birth"][:10])
            except ValueError:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="date_of_birth must be YYYY-MM-DD"
                )
        if role == "STUDENT" and values.get("level"):
            values["level"] = values["level"].upper()
        return values

    @staticmethod
    async def register(role: str, data: dict) -> dict:
        """
        Register a student, coach, institute or club

        Students must confirm an emailed OTP before logging in; other
        roles receive a token straight away.
        """
        role = role.upper()
        if role not in REGISTRABLE_ROLES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid role. Must be one of: {', '.join(r.lower() for r in REGISTRABLE_ROLES)}"
            )

        email = (data.get("email") or "").strip().lower()
        phone = (data.get("phone") or "").strip() or None
        name = sanitize_input(data.get("name") or "")

        if not name:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Name is required")
        if not validate_email(email):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid email format")
        if phone and not validate_phone(phone):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid phone number. Must be 10 digits starting with 6-9"
            )
        AuthService._validate_password(data.get("password"))
        await AuthService.ensure_unique_contact(email, phone)

        profile = AuthService._profile_values(role, data)
        if role == "COACH":
            profile.update({"payment_status": "PENDING", "is_active": False, "approval_status": "PENDING"})
        elif role == "INSTITUTE":
            profile.update({"approval_status": "PENDING", "payment_status": "PENDING"})
        elif role == "CLUB":
            profile["payment_status"] = "PENDING"

        otp = generate_otp() if role == "STUDENT" else None

        async with database.transaction():
            created = await AuthService.create_user(
                role=role,
                email=email,
                password=data["password"],
                name=name,
                phone=phone,
                state=data.get("state"),
                is_verified=role != "STUDENT",
                otp=otp,
                profile=profile,
            )

        logger.info("[AUTH] Registered %s %s (%s)", role, created["unique_id"], email)

        user_row = await database.fetch_one("SELECT * FROM users WHERE id = :id", {"id": created["user_id"]})
        user = present_user(user_row, await load_profile(role, created["user_id"]))

        if otp:
            try:
                await email_service.send_otp_email(email, name, otp)
            except Exception as e:
                logger.warning("[AUTH] OTP email to %s failed: %s", email, e)
            return {
                "message": "Registration successful. Please verify your email with the OTP sent.",
                "requires_verification": True,
                "user": user,
            }

        return {
            "message": "Registration successful",
            "requires_verification": False,
            "access_token": build_token(dict(user_row)),
            "token_type": "bearer",
            "user": user,
        }

    @staticmethod
    async def verify_otp(email: str, otp: str) -> dict:
        user = await AuthService.get_user_by_email(email)
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        if user["is_verified"]:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email is already verified")
        if not user["otp_code"] or user["otp_code"] != str(otp).strip():
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid OTP")

        expires_at = ensure_datetime(user["otp_expires_at"])
        if expires_at is None or expires_at < utc_now():
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="OTP has expired")

        await database.execute(
            """
            UPDATE users
            SET is_verified = TRUE, otp_code = NULL, otp_expires_at = NULL, updated_at = :now
            WHERE id = :id
            """,
            {"id": str(user["id"]), "now": utc_now()}
        )

        user_row = await database.fetch_one("SELECT * FROM users WHERE id = :id", {"id": str(user["id"])})
        return {
            "message": "Email verified successfully",
            "access_token": build_token(dict(user_row)),
            "token_type": "bearer",
            "user": present_user(user_row, await load_profile(user["role"], user["id"])),
        }

    @staticmethod
    async def resend_otp(email: str) -> dict:
        user = await AuthService.get_user_by_email(email)
        if not user:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        if user["is_verified"]:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email is already verified")

        otp = generate_otp()
        now = utc_now()
        await database.execute(
            "UPDATE users SET otp_code = :otp, otp_expires_at = :expires, updated_at = :now WHERE id = :id",
            {
                "otp": otp,
                "expires": now + timedelta(minutes=settings.OTP_EXPIRY_MINUTES),
                "now": now,
                "id": str(user["id"]),
            }
        )
        try:
            await email_service.send_otp_email(user["email"], user["name"] or "there", otp)
        except Exception as e:
            logger.warning("[AUTH] OTP email to %s failed: %s", user["email"], e)

        return {"message": "A new OTP has been sent to your email"}

    @staticmethod
    async def login(email: str, password: str, role: Optional[str] = None, ip_address: str = None) -> dict:
        """
        Authenticate with email + password

        Raises:
            HTTPException: 401 bad credentials or role, 403 inactive or unverified
        """
        user = await AuthService.get_user_by_email(email)
        invalid = HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )
        if not user:
            raise invalid
        if role and user["role"] != role.upper():
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=f"This account is not registered as {role.lower()}"
            )
        if not verify_password(password, user["password_hash"]):
            raise invalid
        if not user["is_active"]:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Account is deactivated. Please contact support."
            )
        if not user["is_verified"]:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Please verify your email before logging in"
            )

        now = utc_now()
        await database.execute(
            "UPDATE users SET last_login = :now WHERE id = :id",
            {"now": now, "id": str(user["id"])}
        )
        await activity_log_service.log_activity(
            actor_id=user["id"], action="login", resource_type="user",
            resource_id=user["id"], ip_address=ip_address
        )

        user_row = await database.fetch_one("SELECT * FROM users WHERE id = :id", {"id": str(user["id"])})
        return {
            "message": "Login successful",
            "access_token": build_token(user),
            "token_type": "bearer",
            "user": present_user(user_row, await load_profile(user["role"], user["id"])),
        }

    @staticmethod
    async def forgot_password(email: str) -> dict:
        """Always answers the same way so account existence is not revealed"""
        user = await AuthService.get_user_by_email(email)
        if user and user["is_active"]:
            token = secrets.token_urlsafe(32)
            now = utc_now()
            await database.execute(
                """
                UPDATE users SET reset_token = :token, reset_token_expires_at = :expires, updated_at = :now
                WHERE id = :id
                """,
                {
                    "token": token,
                    "expires": now + timedelta(minutes=settings.RESET_TOKEN_EXPIRY_MINUTES),
                    "now": now,
                    "id": str(user["id"]),
                }
            )
            try:
                await email_service.send_password_reset_email(user["email"], user["name"] or "there", token)
            except Exception as e:
                logger.warning("[AUTH] Reset email to %s failed: %s", user["email"], e)

        return {"message": "If an account exists for this email, a password reset link has been sent"}

    @staticmethod
    async def reset_password(token: str, new_password: str) -> dict:
        AuthService._validate_password(new_password)
        row = await database.fetch_one(
            "SELECT id, reset_token_expires_at FROM users WHERE reset_token = :token",
            {"token": token}
        )
        if not row:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid or expired reset token")

        expires_at = ensure_datetime(row["reset_token_expires_at"])
        if expires_at is None or expires_at < utc_now():
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid or expired reset token")

        now = utc_now()
        await database.execute(
            """
            UPDATE users
            SET password_hash = :hash, reset_token = NULL, reset_token_expires_at = NULL,
                must_change_password = FALSE, password_changed_at = :now, updated_at = :now
            WHERE id = :id
            """,
            {"hash": hash_password(new_password), "now": now, "id": str(row["id"])}
        )
        return {"message": "Password has been reset successfully"}

    @staticmethod
    async def change_password(user_id: str, current_password: str, new_password: str) -> dict:
        AuthService._validate_password(new_password)
        row = await database.fetch_one("SELECT password_hash FROM users WHERE id = :id", {"id": user_id})
        if not row or not verify_password(current_password, row["password_hash"]):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Current password is incorrect")
        if current_password == new_password:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="New password must be different from the current password"
            )

        now = utc_now()
        await database.execute(
            """
            UPDATE users
            SET password_hash = :hash, must_change_password = FALSE, password_changed_at = :now, updated_at = :now
            WHERE id = :id
            """,
            {"hash": hash_password(new_password), "now": now, "id": user_id}
        )
        await activity_log_service.log_activity(
            actor_id=user_id, action="password_changed", resource_type="user", resource_id=user_id
        )
        return {"message": "Password changed successfully"}

    @staticmethod
    async def get_me(current_user: dict) -> dict:
        row = await database.fetch_one("SELECT * FROM users WHERE id = :id", {"id": current_user["id"]})
        return {"user": present_user(row, current_user.get("profile"))}


# Create singleton instance
auth_service = AuthService()
