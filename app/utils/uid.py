"""
Unique Identifier Generation

User:        <Type><Serial:4><StateCode><DDMMYY>      A0001DL071125
Event:       <Serial:2>-<Sport>-EVT-<Loc>-<MMYYYY>    01-FB-EVT-DL-112025
Certificate: STAIRS-CERT-<EventUID>-<StudentUID>
"""

import re
from datetime import datetime
from typing import Optional

from fastapi import HTTPException, status

from app.database import database
from app.utils.datetime_ist import IST, ensure_datetime, utc_now

USER_PREFIXES = {
    "STUDENT": "A",
    "COACH": "C",
    "INSTITUTE": "I",
    "CLUB": "B",
    "EVENT_INCHARGE": "E",
}

STATE_CODES = {
    "Andhra Pradesh": "AP",
    "Arunachal Pradesh": "AR",
    "Assam": "AS",
    "Bihar": "BR",
    "Chhattisgarh": "CG",
    "Goa": "GA",
    "Gujarat": "GJ",
    "Haryana": "HR",
    "Himachal Pradesh": "HP",
    "Jharkhand": "JH",
    "Karnataka": "KA",
    "Kerala": "KL",
    "Madhya Pradesh": "MP",
    "Maharashtra": "MH",
    "Manipur": "MN",
    "Meghalaya": "ML",
    "Mizoram": "MZ",
    "Nagaland": "NL",
    "Odisha": "OD",
    "Punjab": "PB",
    "Rajasthan": "RJ",
    "Sikkim": "SK",
    "Tamil Nadu": "TN",
    "Telangana": "TG",
    "Tripura": "TR",
    "Uttar Pradesh": "UP",
    "Uttarakhand": "UK",
    "West Bengal": "WB",
    "Andaman and Nicobar Islands": "AN",
    "Chandigarh": "CH",
    "Dadra and Nagar Haveli and Daman and Diu": "DD",
    "Delhi": "DL",
    "Jammu and Kashmir": "JK",
    "Ladakh": "LA",
    "Lakshadweep": "LD",
    "Puducherry": "PY",
}

# Event codes are looked up case-insensitively
SPORT_CODES = {
    "football": "FB",
    "soccer": "FB",
    "basketball": "BB",
    "basketball 3x3": "BB3",
    "cricket": "CR",
    "tennis": "TN",
    "tennis cricket": "TCR",
    "badminton": "BD",
    "volleyball": "VB",
    "beach volleyball": "BVB",
    "hockey": "HK",
    "athletics": "ATH",
    "swimming": "SW",
    "boxing": "BX",
    "kick boxing": "KBX",
    "wrestling": "WR",
    "kabaddi": "KB",
    "table tennis": "TT",
    "chess": "CH",
    "archery": "AR",
    "shooting": "SH",
    "gymnastics": "GYM",
    "weightlifting": "WL",
    "judo": "JD",
    "taekwondo": "TK",
    "karate": "KR",
    "cycling": "CY",
    "road cycling": "RC",
    "mountain biking": "MB",
    "running": "RN",
    "marathon": "MR",
    "kho kho": "KK",
    "silambam": "SL",
    "wushu": "WS",
    "yogasana": "YG",
    "throwball": "TB",
    "tug of war": "TOW",
    "skating": "SK",
    "rowing": "RW",
    "handball": "HB",
    "rugby": "RG",
    "golf": "GF",
    "triathlon": "TR",
}

LOCATION_CODES = {
    "delhi": "DL",
    "new delhi": "DL",
    "mumbai": "MH",
    "pune": "MH",
    "nagpur": "MH",
    "bangalore": "KA",
    "bengaluru": "KA",
    "mysuru": "KA",
    "hyderabad": "TS",
    "chennai": "TN",
    "coimbatore": "TN",
    "kolkata": "WB",
    "ahmedabad": "GJ",
    "vadodara": "GJ",
    "jaipur": "RJ",
    "lucknow": "UP",
    "noida": "UP",
    "ghaziabad": "UP",
    "gurgaon": "HR",
    "gurugram": "HR",
    "chandigarh": "CH",
    "bhopal": "MP",
    "indore": "MP",
    "patna": "BR",
    "guwahati": "AS",
    "bhubaneswar": "OR",
    "kochi": "KL",
    "thiruvananthapuram": "KL",
    "maharashtra": "MH",
    "karnataka": "KA",
    "tamil nadu": "TN",
    "telangana": "TS",
    "west bengal": "WB",
    "gujarat": "GJ",
    "rajasthan": "RJ",
    "uttar pradesh": "UP",
    "haryana": "HR",
    "punjab": "PB",
    "kerala": "KL",
    "odisha": "OR",
}

MAX_USER_SERIAL = 9999
MAX_EVENT_SERIAL = 99


def get_state_code(state_name: Optional[str]) -> str:
    if not state_name:
        return "DL"
    code = STATE_CODES.get(state_name.strip())
    if code:
        return code
    return state_name.strip()[:2].upper()


def _letters_only(text: str, length: int) -> str:
    return re.sub(r"[^A-Z]", "", text.strip()[:length].upper())


def get_sport_code(sport: Optional[str]) -> str:
    if not sport:
        return "OT"
    return SPORT_CODES.get(sport.strip().lower()) or _letters_only(sport, 3) or "OT"


def get_location_code(location: Optional[str]) -> str:
    if not location:
        return "DL"
    return LOCATION_CODES.get(location.strip().lower()) or _letters_only(location, 2) or "DL"


def format_ddmmyy(value: Optional[datetime] = None) -> str:
    local = (ensure_datetime(value) if value else utc_now()).astimezone(IST)
    return local.strftime("%d%m%y")


def build_user_uid(role: str, serial: int, state_code: str, ddmmyy: str) -> str:
    return f"{USER_PREFIXES[role]}{serial:04d}{state_code}{ddmmyy}"


def build_event_uid(serial: int, sport_code: str, location_code: str, mmyyyy: str) -> str:
    return f"{serial:02d}-{sport_code}-EVT-{location_code}-{mmyyyy}"


def build_certificate_uid(event_uid: str, student_uid: str) -> str:
    return f"STAIRS-CERT-{event_uid}-{student_uid}"


async def generate_user_uid(role: str, state: Optional[str] = None, on_date: Optional[datetime] = None) -> str:
    """
    Next user UID for the role/state/day.

    Admin accounts share the literal 'ADMIN' prefix with a serial suffix.

    Raises:
        HTTPException: When the 9999 accounts per role/state/day limit is hit
    """
    if role == "ADMIN":
        count = await database.fetch_val("SELECT COUNT(*) FROM users WHERE role = 'ADMIN'")
        return "ADMIN" if not count else f"ADMIN{int(count) + 1:03d}"

    prefix = USER_PREFIXES[role]
    state_code = get_state_code(state)
    ddmmyy = format_ddmmyy(on_date)
    pattern = f"{prefix}____{state_code}{ddmmyy}"

    last = await database.fetch_val(
        """
        SELECT unique_id FROM users
        WHERE unique_id LIKE :pattern
        ORDER BY unique_id DESC
        LIMIT 1
        """,
        {"pattern": pattern}
    )

    serial = 1
    if last:
        try:
            serial = int(last[len(prefix):len(prefix) + 4]) + 1
        except ValueError:
            serial = 1

    if serial > MAX_USER_SERIAL:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                f"Serial number limit reached for {prefix}{state_code}{ddmmyy}. "
                "Maximum 9999 accounts per role/state/day."
            )
        )

    return build_user_uid(role, serial, state_code, ddmmyy)


async def generate_event_uid(sport: str, location: str, start_date: datetime) -> str:
    """
    Next event UID for the sport/location/month of `start_date` (IST).

    Raises:
        HTTPException: When the 99 events per sport/location/month limit is hit
    """
    sport_code = get_sport_code(sport)
    location_code = get_location_code(location)
    mmyyyy = ensure_datetime(start_date).astimezone(IST).strftime("%m%Y")
    pattern = f"%-{sport_code}-EVT-{location_code}-{mmyyyy}"

    rows = await database.fetch_all(
        "SELECT unique_id FROM events WHERE unique_id LIKE :pattern",
        {"pattern": pattern}
    )

    serial = 1
    for row in rows:
        head = str(row["unique_id"]).split("-")[0]
        if head.isdigit():
            serial = max(serial, int(head) + 1)

    if serial > MAX_EVENT_SERIAL:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                f"Serial number limit reached for {sport_code}-EVT-{location_code}-{mmyyyy}. "
                "Maximum 99 events per sport/location/month."
            )
        )

    return build_event_uid(serial, sport_code, location_code, mmyyyy)


async def generate_certificate_uid(event_uid: str, student_uid: str) -> str:
    """Certificate UID, suffixed when an earlier certificate already took it"""
    base = build_certificate_uid(event_uid, student_uid)
    taken = await database.fetch_val(
        "SELECT COUNT(*) FROM certificates WHERE unique_id = :uid OR unique_id LIKE :prefix",
        {"uid": base, "prefix": f"{base}-%"}
    )
    if not taken:
        return base
    return f"{base}-{int(taken) + 1}"


async def generate_order_number(table: str, prefix: str) -> str:
    """ORD-<epoch ms>-<count+1:04>; `table` is one of the order tables"""
    count = await database.fetch_val(f"SELECT COUNT(*) FROM {table}")
    epoch_ms = int(utc_now().timestamp() * 1000)
    return f"{prefix}-{epoch_ms}-{int(count or 0) + 1:04d}"


def build_receipt(user_type: str, user_id: str) -> str:
    """Razorpay receipt (max 40 chars)"""
    epoch_ms = str(int(utc_now().timestamp() * 1000))
    return f"{user_type[:2]}_{str(user_id)[-6:]}_{epoch_ms[-8:]}"
