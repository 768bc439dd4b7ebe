"""
Roster Parser Service
Reads student and coach rosters (CSV or XLSX) for bulk account import
"""

import csv
import io
import logging
from datetime import date, datetime
from typing import Dict, List, Tuple

from fastapi import HTTPException, status
from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font, PatternFill

from app.config import settings
from app.utils.helpers import get_file_extension, is_valid_spreadsheet, validate_email, validate_phone

logger = logging.getLogger(__name__)

LEVELS = {"BEGINNER", "INTERMEDIATE", "ADVANCED", "PROFESSIONAL"}

# Columns, limits and template sample per roster kind
ROSTER_KINDS = {
    "student": {
        "required": ["firstName", "lastName", "email", "phone"],
        "optional": ["dateOfBirth", "sport", "level", "state"],
        "sheet": "Students",
        "sample": ["Rahul", "Sharma", "rahul.sharma@example.com", "9876543210",
                   "2008-05-14", "Football", "BEGINNER", "Delhi"],
    },
    "coach": {
        "required": ["firstName", "lastName", "email", "phone", "specialization"],
        "optional": ["experience", "certifications", "bio", "city", "state"],
        "sheet": "Coaches",
        "sample": ["Anil", "Kumar", "anil.kumar@example.com", "9876543210", "Football",
                   "8", "AIFF D License, First Aid", "Former state player", "Delhi", "Delhi"],
    },
}


def _max_rows(kind: str) -> int:
    return settings.MAX_COACH_ROSTER_ROWS if kind == "coach" else settings.MAX_ROSTER_ROWS


class RosterParser:
    """Utility for parsing roster uploads"""

    HEADER_ALIASES = {
        "firstName": {"firstname", "first name", "first_name"},
        "lastName": {"lastname", "last name", "last_name", "surname"},
        "email": {"email", "email address", "mail"},
        "phone": {"phone", "mobile", "phone number", "contact"},
        "dateOfBirth": {"dateofbirth", "date of birth", "dob", "date_of_birth"},
        "sport": {"sport", "game"},
        "level": {"level", "skill level"},
        "state": {"state"},
        "specialization": {"specialization", "specialisation", "speciality"},
        "experience": {"experience", "years of experience", "experience (years)"},
        "certifications": {"certifications", "certificates"},
        "bio": {"bio", "about"},
        "city": {"city", "location"},
    }

    @staticmethod
    def _normalize_header(header) -> str:
        if header is None:
            return ""
        return str(header).strip().lstrip("\ufeff").lower()

    @classmethod
    def _map_headers(cls, headers: List) -> Dict[str, int]:
        """Canonical column name -> index in the header row"""
        mapped = {}
        for index, h in enumerate(headers):
            normalized = cls._normalize_header(h)
            for key, aliases in cls.HEADER_ALIASES.items():
                if normalized in aliases and key not in mapped:
                    mapped[key] = index
        return mapped

    @staticmethod
    def _cell_text(value) -> str:
        if value is None:
            return ""
        if isinstance(value, datetime):
            return value.date().isoformat()
        if isinstance(value, date):
            return value.isoformat()
        if isinstance(value, float) and value.is_integer():
            # Phone numbers typed into Excel come back as floats
            return str(int(value))
        return str(value).strip()

    @classmethod
    def _read_table(cls, filename: str, content: bytes) -> List[List]:
        if not is_valid_spreadsheet(filename):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Please upload a CSV or Excel file"
            )
        extension = get_file_extension(filename)

        if extension == "csv":
            text = content.decode("utf-8-sig", errors="ignore")
            return [row for row in csv.reader(io.StringIO(text))]

        if extension == "xlsx":
            try:
                workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
            except Exception as e:
                logger.warning("Unreadable roster workbook %s: %s", filename, e)
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="Could not read the Excel file"
                )
            sheet = workbook.active
            rows = [list(row) for row in sheet.iter_rows(values_only=True)]
            workbook.close()
            return rows

        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Legacy .xls files are not supported. Save the sheet as .xlsx or .csv"
        )

    @classmethod
    def parse_roster(cls, filename: str, content: bytes, kind: str = "student") -> List[dict]:
        """
        Parse roster rows

        Each returned row carries `row_number`, the spreadsheet row
        (header is row 1).

        Raises:
            HTTPException: Empty file, missing columns or too many rows
        """
        table = cls._read_table(filename, content)
        if not table or not any(cls._cell_text(c) for c in table[0]):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="File is empty or has no headers"
            )

        header_map = cls._map_headers(table[0])
        missing = [c for c in ROSTER_KINDS[kind]["required"] if c not in header_map]
        if missing:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Missing required columns: {', '.join(missing)}"
            )

        rows = []
        for offset, raw in enumerate(table[1:], start=2):
            values = [cls._cell_text(c) for c in raw]
            if not any(values):
                continue
            record = {"row_number": offset}
            for key, index in header_map.items():
                record[key] = values[index] if index < len(values) else ""
            rows.append(record)

        if not rows:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"No {kind} rows found in file"
            )

        limit = _max_rows(kind)
        if len(rows) > limit:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Maximum {limit} {kind} records per upload"
            )

        return rows

    @staticmethod
    def validate_row(row: dict, kind: str = "student") -> List[str]:
        """Problems with a single roster row (empty list when valid)"""
        errors = []
        for column in ROSTER_KINDS[kind]["required"]:
            if not row.get(column):
                errors.append(f"{column} is required")

        if row.get("email") and not validate_email(row["email"]):
            errors.append("Invalid email format")
        if row.get("phone") and not validate_phone(row["phone"]):
            errors.append("Invalid phone number (10 digits starting with 6-9)")

        if row.get("dateOfBirth"):
            try:
                date.fromisoformat(row["dateOfBirth"][:10])
            except ValueError:
                errors.append("dateOfBirth must be YYYY-MM-DD")

        if row.get("level") and row["level"].upper() not in LEVELS:
            errors.append(f"level must be one of {', '.join(sorted(LEVELS))}")

        if kind == "coach" and row.get("experience") and not row["experience"].isdigit():
            errors.append("experience must be a whole number of years")

        return errors

    @staticmethod
    def split_valid_rows(rows: List[dict], kind: str = "student") -> Tuple[List[dict], List[dict]]:
        """Separate valid rows from rows with errors; duplicate emails/phones inside the file are errors"""
        valid, invalid = [], []
        seen_emails, seen_phones = set(), set()
        for row in rows:
            errors = RosterParser.validate_row(row, kind)
            email = (row.get("email") or "").lower()
            if email and email in seen_emails:
                errors.append("Duplicate email in file")
            if row.get("phone") and row["phone"] in seen_phones:
                errors.append("Duplicate phone in file")

            if errors:
                invalid.append({"row": row["row_number"], "email": row.get("email"), "errors": errors})
                continue

            seen_emails.add(email)
            seen_phones.add(row["phone"])
            valid.append(row)
        return valid, invalid

    @staticmethod
    def build_template(kind: str = "student") -> bytes:
        """Blank XLSX roster with the expected header row and one sample"""
        layout = ROSTER_KINDS[kind]
        workbook = Workbook()
        sheet = workbook.active
        sheet.title = layout["sheet"]

        sheet.append(layout["required"] + layout["optional"])
        sheet.append(layout["sample"])

        header_fill = PatternFill(start_color="FF1F4E79", end_color="FF1F4E79", fill_type="solid")
        for cell in sheet[1]:
            cell.font = Font(bold=True, color="FFFFFFFF")
            cell.fill = header_fill
        for column in sheet.columns:
            sheet.column_dimensions[column[0].column_letter].width = 22

        buffer = io.BytesIO()
        workbook.save(buffer)
        return buffer.getvalue()


roster_parser = RosterParser()
