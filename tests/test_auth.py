import pytest
from fastapi import HTTPException
from httpx import AsyncClient

from app.database import database
from app.utils.uid import format_ddmmyy, generate_user_uid
from tests.helpers import DEFAULT_PASSWORD, create_user_with_role


def student_registration(**overrides) -> dict:
    data = {
        "name": "Rahul Sharma",
        "email": "rahul@example.com",
        "password": "secret123",
        "phone": "9876543210",
        "state": "Delhi",
        "sport": "Football",
        "level": "beginner",
        "date_of_birth": "2008-05-14",
    }
    data.update(overrides)
    return data


async def test_register_student_requires_otp(client: AsyncClient):
    response = await client.post("/api/auth/register/student", json=student_registration())

    assert response.status_code == 201
    data = response.json()
    assert data["requires_verification"] is True
    assert "access_token" not in data
    user = data["user"]
    assert user["role"] == "STUDENT"
    assert user["unique_id"].startswith("A0001DL")
    assert "password_hash" not in user
    assert user["profile"]["level"] == "BEGINNER"


async def test_register_coach_gets_token_and_pending_profile(client: AsyncClient):
    response = await client.post("/api/auth/register/coach", json={
        "name": "Vikram Singh",
        "email": "vikram@example.com",
        "password": "secret123",
        "state": "Maharashtra",
        "specialization": "Cricket",
    })

    assert response.status_code == 201
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["access_token"]
    assert data["user"]["unique_id"].startswith("C0001MH")
    profile = data["user"]["profile"]
    assert profile["payment_status"] == "PENDING"
    assert profile["approval_status"] == "PENDING"
    assert profile["is_active"] is False


async def test_serials_increase_per_role_state_and_day(client: AsyncClient):
    first = await client.post("/api/auth/register/student", json=student_registration())
    second = await client.post("/api/auth/register/student", json=student_registration(
        email="priya@example.com", phone="9876543211", name="Priya"
    ))

    assert first.json()["user"]["unique_id"][:5] == "A0001"
    assert second.json()["user"]["unique_id"][:5] == "A0002"


async def test_serial_limit_is_a_clear_error(client: AsyncClient):
    first = await client.post("/api/auth/register/student", json=student_registration())
    await database.execute(
        "UPDATE users SET unique_id = :uid WHERE id = :id",
        {"uid": f"A9999DL{format_ddmmyy()}", "id": first.json()["user"]["id"]}
    )

    response = await client.post("/api/auth/register/student", json=student_registration(
        email="priya@example.com", phone="9876543211", name="Priya"
    ))

    assert response.status_code == 400
    assert "Maximum 9999 accounts" in response.json()["detail"]
    count = await database.fetch_val("SELECT COUNT(*) FROM users")
    assert count == 1


async def test_generate_user_uid_stops_at_9999(db):
    await create_user_with_role("STUDENT", state="Delhi")
    await database.execute("UPDATE users SET unique_id = :uid", {"uid": f"A9999DL{format_ddmmyy()}"})

    with pytest.raises(HTTPException) as exc:
        await generate_user_uid("STUDENT", "Delhi")

    assert exc.value.status_code == 400


async def test_register_duplicate_email(client: AsyncClient):
    await client.post("/api/auth/register/student", json=student_registration())
    response = await client.post("/api/auth/register/student", json=student_registration(phone="9876543219"))

    assert response.status_code == 409
    assert "already registered" in response.json()["detail"]


async def test_register_rejects_bad_phone(client: AsyncClient):
    response = await client.post("/api/auth/register/student", json=student_registration(phone="12345"))

    assert response.status_code == 400
    assert "phone" in response.json()["detail"].lower()


async def test_register_rejects_bad_email(client: AsyncClient):
    response = await client.post("/api/auth/register/club", json={
        "name": "Kings XI", "email": "not-an-email", "password": "secret123",
    })

    assert response.status_code == 422


async def test_unverified_student_cannot_login(client: AsyncClient):
    await client.post("/api/auth/register/student", json=student_registration())
    response = await client.post("/api/auth/login", json={"email": "rahul@example.com", "password": "secret123"})

    assert response.status_code == 403


async def test_verify_otp_then_login(client: AsyncClient):
    await client.post("/api/auth/register/student", json=student_registration())
    otp = await database.fetch_val("SELECT otp_code FROM users WHERE email = 'rahul@example.com'")

    wrong = await client.post("/api/auth/verify-otp", json={"email": "rahul@example.com", "otp": "000000" if otp != "000000" else "111111"})
    assert wrong.status_code == 400

    verified = await client.post("/api/auth/verify-otp", json={"email": "rahul@example.com", "otp": otp})
    assert verified.status_code == 200
    assert verified.json()["access_token"]

    login = await client.post("/api/auth/login", json={"email": "RAHUL@example.com", "password": "secret123"})
    assert login.status_code == 200
    data = login.json()
    assert data["user"]["is_verified"] is True
    assert data["user"]["profile"]["sport"] == "Football"


async def test_resend_otp_replaces_code(client: AsyncClient):
    await client.post("/api/auth/register/student", json=student_registration())

    response = await client.post("/api/auth/resend-otp", json={"email": "rahul@example.com"})

    assert response.status_code == 200
    otp = await database.fetch_val("SELECT otp_code FROM users WHERE email = 'rahul@example.com'")
    assert otp and len(otp) == 6


async def test_login_invalid_credentials(client: AsyncClient, coach):
    response = await client.post("/api/auth/login", json={"email": coach["email"], "password": "wrongpassword"})

    assert response.status_code == 401


async def test_login_with_wrong_role(client: AsyncClient, coach):
    response = await client.post("/api/auth/login", json={
        "email": coach["email"], "password": DEFAULT_PASSWORD, "role": "student",
    })

    assert response.status_code == 401


async def test_get_current_user(client: AsyncClient, coach):
    response = await client.get("/api/auth/me", headers=coach["headers"])

    assert response.status_code == 200
    user = response.json()["user"]
    assert user["email"] == coach["email"]
    assert user["role"] == "COACH"
    assert user["profile"]["payment_status"] == "SUCCESS"


async def test_me_requires_token(client: AsyncClient):
    response = await client.get("/api/auth/me")

    assert response.status_code in (401, 403)


async def test_garbage_token_is_rejected(client: AsyncClient):
    response = await client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401


async def test_change_password(client: AsyncClient, student):
    bad = await client.post("/api/auth/change-password", headers=student["headers"], json={
        "current_password": "nope-nope", "new_password": "another123",
    })
    assert bad.status_code == 400

    ok = await client.post("/api/auth/change-password", headers=student["headers"], json={
        "current_password": DEFAULT_PASSWORD, "new_password": "another123",
    })
    assert ok.status_code == 200

    login = await client.post("/api/auth/login", json={"email": student["email"], "password": "another123"})
    assert login.status_code == 200


async def test_forgot_and_reset_password(client: AsyncClient, student):
    unknown = await client.post("/api/auth/forgot-password", json={"email": "ghost@example.com"})
    known = await client.post("/api/auth/forgot-password", json={"email": student["email"]})
    assert unknown.status_code == known.status_code == 200
    assert unknown.json()["message"] == known.json()["message"]

    token = await database.fetch_val("SELECT reset_token FROM users WHERE id = :id", {"id": student["id"]})
    assert token

    reset = await client.post("/api/auth/reset-password", json={"token": token, "new_password": "fresh-pass1"})
    assert reset.status_code == 200

    reused = await client.post("/api/auth/reset-password", json={"token": token, "new_password": "fresh-pass2"})
    assert reused.status_code == 400

    login = await client.post("/api/auth/login", json={"email": student["email"], "password": "fresh-pass1"})
    assert login.status_code == 200


async def test_deactivated_user_is_locked_out(client: AsyncClient, admin, student):
    response = await client.patch(
        f"/api/admin/users/{student['id']}/status", json={"is_active": False}, headers=admin["headers"]
    )
    assert response.status_code == 200

    me = await client.get("/api/auth/me", headers=student["headers"])
    assert me.status_code == 401

    login = await client.post("/api/auth/login", json={"email": student["email"], "password": DEFAULT_PASSWORD})
    assert login.status_code == 403
