"""
General Helpers
Validation, OTP, pagination and small formatting utilities
"""

import math
import re
import secrets
from pathlib import Path

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^[6-9]\d{9}$")

SPREADSHEET_EXTENSIONS = {"xlsx", "xls", "csv"}
RESULT_FILE_EXTENSIONS = {"pdf", "xlsx", "xls", "csv"}


def validate_email(email: str) -> bool:
    return bool(email) and bool(EMAIL_PATTERN.match(email))


def validate_phone(phone: str) -> bool:
    """Indian mobile number: 10 digits starting 6-9"""
    return bool(phone) and bool(PHONE_PATTERN.match(str(phone)))


def generate_otp() -> str:
    """Six digit numeric OTP"""
    return str(100000 + secrets.randbelow(900000))


def get_pagination_params(page=1, limit=10) -> dict:
    """
    Clamp page/limit query values.

    Returns:
        dict with page, limit and the SQL offset
    """
    try:
        page_num = max(1, int(page))
    except (TypeError, ValueError):
        page_num = 1
    try:
        limit_num = min(100, max(1, int(limit)))
    except (TypeError, ValueError):
        limit_num = 10
    return {"page": page_num, "limit": limit_num, "offset": (page_num - 1) * limit_num}


def get_pagination_meta(total: int, page: int, limit: int) -> dict:
    total_pages = math.ceil(total / limit) if limit else 0
    return {
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": total_pages,
        "has_next": page < total_pages,
        "has_prev": page > 1,
    }


def get_file_extension(filename: str) -> str:
    return Path(filename or "").suffix.lstrip(".").lower()


def is_valid_spreadsheet(filename: str) -> bool:
    return get_file_extension(filename) in SPREADSHEET_EXTENSIONS


def is_valid_result_file(filename: str) -> bool:
    return get_file_extension(filename) in RESULT_FILE_EXTENSIONS


def format_file_size(size_bytes: int) -> str:
    """Human readable size, e.g. 1536 -> '1.5 KB'"""
    if not size_bytes:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    index = min(int(math.floor(math.log(size_bytes, 1024))), len(units) - 1)
    value = round(size_bytes / math.pow(1024, index), 2)
    if value == int(value):
        value = int(value)
    return f"{value} {units[index]}"


def sanitize_input(value):
    if not isinstance(value, str):
        return value
    return re.sub(r"[<>]", "", value.strip())
