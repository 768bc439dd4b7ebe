"""
Authentication Module
Password hashing, JWT tokens and role guards
"""

from app.auth.password import hash_password, verify_password, generate_random_password, roster_password
from app.auth.dependencies import (
    create_access_token,
    decode_access_token,
    get_current_user,
    require_roles,
    get_student,
    get_coach,
    get_institute,
    get_club,
    get_admin,
    get_event_incharge,
    get_paid_coach,
    get_approved_institute,
)

__all__ = [
    "hash_password",
    "verify_password",
    "generate_random_password",
    "roster_password",
    "create_access_token",
    "decode_access_token",
    "get_current_user",
    "require_roles",
    "get_student",
    "get_coach",
    "get_institute",
    "get_club",
    "get_admin",
    "get_event_incharge",
    "get_paid_coach",
    "get_approved_institute",
]
