import io

import pytest
from fastapi import HTTPException
from httpx import AsyncClient
from openpyxl import Workbook, load_workbook

from app.auth.password import roster_password, verify_password
from app.database import database
from app.services.roster_parser import roster_parser
from tests.helpers import create_user_with_role

CSV_ROSTER = (
    "First Name,Last Name,Email,Mobile,DOB,Sport,Level\n"
    "Rahul,Sharma,rahul.s@example.com,9876543210,2008-05-14,Football,beginner\n"
    "Priya,Patel,priya.p@example.com,9876543211,,Hockey,ADVANCED\n"
    "Bad,Row,not-an-email,123,,,\n"
    "Dup,Email,rahul.s@example.com,9876543212,,,\n"
).encode()


def test_parse_csv_maps_header_aliases():
    rows = roster_parser.parse_roster("students.csv", CSV_ROSTER)

    assert len(rows) == 4
    assert rows[0]["row_number"] == 2
    assert rows[0]["firstName"] == "Rahul"
    assert rows[0]["phone"] == "9876543210"
    assert rows[0]["dateOfBirth"] == "2008-05-14"


def test_split_reports_row_errors():
    valid, invalid = roster_parser.split_valid_rows(roster_parser.parse_roster("students.csv", CSV_ROSTER))

    assert [r["email"] for r in valid] == ["rahul.s@example.com", "priya.p@example.com"]
    assert [e["row"] for e in invalid] == [4, 5]
    assert "Invalid email format" in invalid[0]["errors"]
    assert "Duplicate email in file" in invalid[1]["errors"]


def test_missing_required_columns():
    with pytest.raises(HTTPException) as exc:
        roster_parser.parse_roster("students.csv", b"First Name,Email\nRahul,r@example.com\n")

    assert exc.value.status_code == 400
    assert "lastName" in exc.value.detail


def test_xls_is_rejected():
    with pytest.raises(HTTPException) as exc:
        roster_parser.parse_roster("students.xls", b"\xd0\xcf\x11\xe0")

    assert exc.value.status_code == 400


def test_xlsx_phone_numbers_stored_as_numbers():
    workbook = Workbook()
    sheet = workbook.active
    sheet.append(["firstName", "lastName", "email", "phone"])
    sheet.append(["Asha", "Rao", "asha@example.com", 9876543213.0])
    buffer = io.BytesIO()
    workbook.save(buffer)

    rows = roster_parser.parse_roster("students.xlsx", buffer.getvalue())

    assert rows[0]["phone"] == "9876543213"


def test_template_has_expected_headers():
    workbook = load_workbook(io.BytesIO(roster_parser.build_template()))
    headers = [cell.value for cell in workbook.active[1]]

    assert headers[:4] == ["firstName", "lastName", "email", "phone"]


async def test_coach_bulk_upload_creates_connected_students(client: AsyncClient, coach):
    response = await client.post(
        "/api/coach/students/bulk-upload",
        files={"file": ("students.csv", CSV_ROSTER, "text/csv")},
        headers=coach["headers"],
    )

    assert response.status_code == 201
    data = response.json()
    assert data["total_rows"] == 4
    assert data["created"] == 2
    assert data["failed"] == 2

    roster = await client.get("/api/coach/students", headers=coach["headers"])
    assert roster.json()["pagination"]["total"] == 2

    user = await database.fetch_one(
        "SELECT password_hash, must_change_password, is_verified FROM users WHERE email = 'rahul.s@example.com'"
    )
    assert verify_password(roster_password("Rahul", "9876543210"), user["password_hash"])
    assert user["must_change_password"]
    assert user["is_verified"]


async def test_existing_accounts_are_reported(client: AsyncClient, coach):
    await client.post("/api/coach/students/bulk-upload",
                      files={"file": ("students.csv", CSV_ROSTER, "text/csv")}, headers=coach["headers"])

    again = await client.post("/api/coach/students/bulk-upload",
                              files={"file": ("students.csv", CSV_ROSTER, "text/csv")}, headers=coach["headers"])

    assert again.json()["created"] == 0
    assert any("Email already registered" in e["errors"] for e in again.json()["errors"])


async def test_institute_template_and_upload(client: AsyncClient, institute):
    template = await client.get("/api/institute/bulk-upload/template", headers=institute["headers"])
    assert template.status_code == 200
    assert template.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )

    uploaded = await client.post(
        "/api/institute/bulk-upload/students",
        files={"file": ("students.xlsx", template.content,
                        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")},
        headers=institute["headers"],
    )
    assert uploaded.status_code == 201
    assert uploaded.json()["created"] == 1

    students = await client.get("/api/institute/students", headers=institute["headers"])
    assert students.status_code == 200
    assert students.json()["pagination"]["total"] == 1


async def test_unapproved_institute_cannot_upload(client: AsyncClient, db):
    pending = await create_user_with_role("INSTITUTE", name="New Academy", state="Delhi")

    response = await client.post(
        "/api/institute/bulk-upload/students",
        files={"file": ("students.csv", CSV_ROSTER, "text/csv")},
        headers=pending["headers"],
    )

    assert response.status_code == 403


COACH_ROSTER = (
    "First Name,Last Name,Email,Phone,Specialization,Experience,Certifications,City\n"
    "Vikram,Singh,vikram.s@example.com,9876543220,Cricket,8,\"NIS Level 1, BCCI Level A\",Pune\n"
    "Meera,Iyer,meera.i@example.com,9876543221,Swimming,,,\n"
    "No,Sport,nosport@example.com,9876543222,,3,,\n"
    "Bad,Years,years@example.com,9876543223,Hockey,ten,,\n"
).encode()


def test_coach_roster_requires_specialization():
    rows = roster_parser.parse_roster("coaches.csv", COACH_ROSTER, "coach")
    valid, invalid = roster_parser.split_valid_rows(rows, "coach")

    assert [r["email"] for r in valid] == ["vikram.s@example.com", "meera.i@example.com"]
    assert [e["row"] for e in invalid] == [4, 5]


def test_coach_template_headers():
    workbook = load_workbook(io.BytesIO(roster_parser.build_template("coach")))
    headers = [cell.value for cell in workbook.active[1]]

    assert headers[:5] == ["firstName", "lastName", "email", "phone", "specialization"]


def test_non_spreadsheet_is_rejected():
    with pytest.raises(HTTPException) as exc:
        roster_parser.parse_roster("students.txt", CSV_ROSTER)

    assert exc.value.status_code == 400
    assert exc.value.detail == "Please upload a CSV or Excel file"


async def test_institute_coach_upload_and_listing(client: AsyncClient, institute):
    response = await client.post(
        "/api/institute/bulk-upload/coaches",
        files={"file": ("coaches.csv", COACH_ROSTER, "text/csv")},
        headers=institute["headers"],
    )

    assert response.status_code == 201
    data = response.json()
    assert data["total_rows"] == 4
    assert data["created"] == 2
    assert data["failed"] == 2
    assert data["coaches"][0]["unique_id"].startswith("C0001")

    coach = await database.fetch_one(
        """
        SELECT c.approval_status, c.experience, c.certifications, c.city, u.must_change_password
        FROM coaches c JOIN users u ON u.id = c.user_id
        WHERE u.email = 'vikram.s@example.com'
        """
    )
    assert coach["approval_status"] == "PENDING"
    assert coach["experience"] == 8
    assert coach["certifications"] == "NIS Level 1, BCCI Level A"
    assert coach["city"] == "Pune"
    assert coach["must_change_password"]

    links = await database.fetch_val(
        "SELECT COUNT(*) FROM institute_coaches WHERE institute_id = :iid", {"iid": institute["profile_id"]}
    )
    assert links == 2

    listed = await client.get("/api/institute/coaches", params={"specialization": "cricket"},
                              headers=institute["headers"])
    assert listed.status_code == 200
    [row] = listed.json()["coaches"]
    assert row["email"] == "vikram.s@example.com"
    assert row["student_count"] == 0

    approved = await client.get("/api/institute/coaches", params={"approvalStatus": "approved"},
                                headers=institute["headers"])
    assert approved.json()["pagination"]["total"] == 0

    dashboard = await client.get("/api/institute/dashboard", headers=institute["headers"])
    assert dashboard.json()["stats"]["total_coaches"] == 2


async def test_institute_coach_template(client: AsyncClient, institute):
    response = await client.get("/api/institute/bulk-upload/coach-template", headers=institute["headers"])

    assert response.status_code == 200
    assert "coach_upload_template.xlsx" in response.headers["content-disposition"]


async def test_coach_roster_row_limit(client: AsyncClient, institute):
    lines = ["firstName,lastName,email,phone,specialization"]
    for i in range(51):
        lines.append(f"Coach,{i},coach{i}@example.com,98765{i:05d},Football")

    response = await client.post(
        "/api/institute/bulk-upload/coaches",
        files={"file": ("coaches.csv", "\n".join(lines).encode(), "text/csv")},
        headers=institute["headers"],
    )

    assert response.status_code == 400
