"""
Authentication Dependencies
JWT token handling, current user lookup and role guards
"""

from datetime import timedelta
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from app.config import settings
from app.database import database
from app.utils.datetime_ist import utc_now

# Security scheme
security = HTTPBearer()

# Role -> profile table
PROFILE_TABLES = {
    "STUDENT": "students",
    "COACH": "coaches",
    "INSTITUTE": "institutes",
    "CLUB": "clubs",
}


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create JWT access token

    Args:
        data: Claims to encode (email, role, user_id, unique_id)
        expires_delta: Token expiration time

    Returns:
        Encoded JWT token
    """
    to_encode = data.copy()
    expire = utc_now() + (expires_delta or timedelta(hours=settings.JWT_EXPIRATION_HOURS))
    to_encode.update({"exp": expire})

    return jwt.encode(
        to_encode,
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM
    )


def decode_access_token(token: str) -> dict:
    """
    Decode JWT access token

    Raises:
        HTTPException: If token is invalid or expired
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )


async def load_profile(role: str, user_id) -> Optional[dict]:
    """Role specific profile row for a user, if the role has one"""
    table = PROFILE_TABLES.get(role)
    if not table:
        return None
    row = await database.fetch_one(
        f"SELECT * FROM {table} WHERE user_id = :user_id",
        {"user_id": str(user_id)}
    )
    return dict(row) if row else None


async def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security)) -> dict:
    """
    Get current authenticated user from JWT token

    The user is re-read from the database so deactivated accounts lose access
    immediately.

    Returns:
        User row (without secrets) plus `user_id` and `profile`
    """
    payload = decode_access_token(credentials.credentials)

    user_id = payload.get("user_id")
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    row = await database.fetch_one(
        """
        SELECT id, unique_id, email, phone, role, name, state, is_active, is_verified
        FROM users WHERE id = :id
        """,
        {"id": str(user_id)}
    )
    if not row:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = dict(row)
    if not user["is_active"]:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is deactivated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user["id"] = str(user["id"])
    user["user_id"] = user["id"]
    user["profile"] = await load_profile(user["role"], user["id"])
    return user


def require_roles(*roles: str):
    """
    Dependency factory allowing only the given roles

    Usage:
        current_user: dict = Depends(require_roles("COACH", "ADMIN"))
    """
    async def checker(current_user: dict = Depends(get_current_user)) -> dict:
        if current_user["role"] not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Not authorized. Required role: {', '.join(roles)}"
            )
        return current_user
    return checker


def _require_profile(current_user: dict) -> dict:
    if not current_user.get("profile"):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{current_user['role'].title()} profile not found"
        )
    return current_user


async def get_student(current_user: dict = Depends(require_roles("STUDENT"))) -> dict:
    return _require_profile(current_user)


async def get_coach(current_user: dict = Depends(require_roles("COACH"))) -> dict:
    return _require_profile(current_user)


async def get_institute(current_user: dict = Depends(require_roles("INSTITUTE"))) -> dict:
    return _require_profile(current_user)


async def get_club(current_user: dict = Depends(require_roles("CLUB"))) -> dict:
    return _require_profile(current_user)


async def get_admin(current_user: dict = Depends(require_roles("ADMIN"))) -> dict:
    return current_user


async def get_event_incharge(current_user: dict = Depends(require_roles("EVENT_INCHARGE"))) -> dict:
    return current_user


def ensure_paid_coach(current_user: dict) -> dict:
    """
    Coaches unlock events, orders and bulk registration after paying

    Raises:
        HTTPException: 403 when the coach subscription is not paid
    """
    profile = current_user.get("profile") or {}
    if profile.get("payment_status") != "SUCCESS":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Please complete your subscription payment to access this feature"
        )
    return current_user


def ensure_approved(current_user: dict) -> dict:
    """Coaches and institutes need admin approval for some features"""
    if current_user["role"] in ("COACH", "INSTITUTE"):
        profile = current_user.get("profile") or {}
        if profile.get("approval_status") != "APPROVED":
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Your account is pending admin approval"
            )
    return current_user


async def get_paid_coach(current_user: dict = Depends(get_coach)) -> dict:
    return ensure_paid_coach(current_user)


async def get_approved_institute(current_user: dict = Depends(get_institute)) -> dict:
    return ensure_approved(current_user)
