"""
Row Serialization
Database rows -> JSON friendly dicts, identical on PostgreSQL and SQLite
"""

import uuid
from datetime import date, datetime
from typing import Iterable, Optional

from app.utils.datetime_ist import to_utc_iso

SECRET_FIELDS = {"password_hash", "otp_code", "otp_expires_at", "reset_token", "reset_token_expires_at"}

BOOL_FIELDS = {
    "is_active", "is_verified", "is_read", "must_change_password",
    "urgent_delivery", "certificate_generated",
    "result_upload", "student_management", "certificate_management", "fee_management",
    "available",
}

DATETIME_FIELDS = {
    "created_at", "updated_at", "read_at", "last_login", "password_changed_at",
    "start_date", "end_date", "registration_deadline",
    "subscription_expires_at", "payment_date", "processed_at", "completed_at", "issue_date",
    "registered_at", "uploaded_at",
}


def serialize_row(row, exclude: Iterable[str] = ()) -> Optional[dict]:
    """
    Convert a `databases` record to a plain dict

    UUIDs become strings, timestamps become UTC ISO strings with a Z,
    SQLite 0/1 flags become booleans. Secret columns are always dropped.
    """
    if row is None:
        return None

    skipped = SECRET_FIELDS | set(exclude)
    data = {}
    for key, value in dict(row).items():
        if key in skipped:
            continue
        if isinstance(value, uuid.UUID):
            value = str(value)
        elif (key in DATETIME_FIELDS or key.endswith("_at")) and value is not None:
            value = to_utc_iso(value)
        elif key in BOOL_FIELDS and value is not None:
            value = bool(value)
        elif isinstance(value, datetime):
            value = to_utc_iso(value)
        elif isinstance(value, date):
            value = value.isoformat()
        data[key] = value
    return data


def serialize_rows(rows, exclude: Iterable[str] = ()) -> list:
    return [serialize_row(row, exclude) for row in rows]
