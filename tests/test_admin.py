import uuid

from httpx import AsyncClient

from app.database import database
from tests.helpers import DEFAULT_PASSWORD, create_event, create_user_with_role, signed_payment


async def test_dashboard_counts(client: AsyncClient, admin, student, coach, unpaid_coach):
    await create_event(client, coach)

    response = await client.get("/api/admin/dashboard", headers=admin["headers"])

    assert response.status_code == 200
    data = response.json()
    assert data["users"]["by_role"]["COACH"] == 2
    assert data["users"]["total"] == 4
    assert data["events"]["by_status"] == {"PENDING": 1}
    assert data["pending_approvals"]["coaches"] == 1
    assert data["pending_approvals"]["events"] == 1
    assert len(data["recent_users"]) == 4


async def test_list_users_filters(client: AsyncClient, admin, student, coach):
    coaches = await client.get("/api/admin/users", params={"role": "coach"}, headers=admin["headers"])
    assert [u["unique_id"] for u in coaches.json()["users"]] == [coach["unique_id"]]

    searched = await client.get("/api/admin/users", params={"search": student["email"][:12]},
                                headers=admin["headers"])
    assert searched.json()["pagination"]["total"] == 1
    assert "password_hash" not in searched.json()["users"][0]

    invalid = await client.get("/api/admin/users", params={"role": "wizard"}, headers=admin["headers"])
    assert invalid.status_code == 400


async def test_user_details_by_unique_id(client: AsyncClient, admin, coach):
    await create_event(client, coach)

    response = await client.get(f"/api/admin/users/{coach['unique_id']}/details", headers=admin["headers"])

    assert response.status_code == 200
    data = response.json()
    assert data["user"]["email"] == coach["email"]
    assert data["profile"]["id"] == coach["profile_id"]
    assert len(data["events"]) == 1
    assert data["connected_students"] == 0

    missing = await client.get("/api/admin/users/A9999XX000000/details", headers=admin["headers"])
    assert missing.status_code == 404


async def test_deactivate_and_activity(client: AsyncClient, admin, student):
    response = await client.patch(f"/api/admin/users/{student['id']}/status", json={"is_active": False},
                                  headers=admin["headers"])
    assert response.status_code == 200
    assert response.json()["user"]["is_active"] is False

    locked_out = await client.get("/api/auth/me", headers=student["headers"])
    assert locked_out.status_code == 401

    activity = await client.get(f"/api/admin/users/{student['id']}/activity", headers=admin["headers"])
    assert activity.json()["pagination"]["total"] == 1
    assert activity.json()["activity"][0]["action"] == "user_status_changed"


async def test_admin_cannot_deactivate_self(client: AsyncClient, admin):
    response = await client.patch(f"/api/admin/users/{admin['id']}/status", json={"is_active": False},
                                  headers=admin["headers"])

    assert response.status_code == 400


async def test_create_event_incharge(client: AsyncClient, admin):
    response = await client.post("/api/admin/create-event-incharge", json={
        "name": "Field Officer", "email": "Officer@Example.com", "state": "Delhi",
    }, headers=admin["headers"])

    assert response.status_code == 201
    data = response.json()
    assert data["user"]["role"] == "EVENT_INCHARGE"
    assert data["user"]["email"] == "officer@example.com"
    assert data["user"]["must_change_password"] is True
    assert len(data["temp_password"]) == 12

    login = await client.post("/api/auth/login", json={
        "email": "officer@example.com", "password": data["temp_password"], "role": "EVENT_INCHARGE",
    })
    assert login.status_code == 200

    duplicate = await client.post("/api/admin/create-event-incharge", json={
        "name": "Someone Else", "email": "officer@example.com",
    }, headers=admin["headers"])
    assert duplicate.status_code == 409


async def test_create_admin(client: AsyncClient, admin):
    response = await client.post("/api/admin/create-admin", json={
        "name": "Second Admin", "email": "second.admin@example.com",
    }, headers=admin["headers"])

    assert response.status_code == 201
    assert response.json()["user"]["role"] == "ADMIN"


async def test_coach_approval(client: AsyncClient, admin, unpaid_coach):
    pending = await client.get("/api/admin/pending-coaches", headers=admin["headers"])
    assert pending.json()["total"] == 1
    assert pending.json()["coachs"][0]["unique_id"] == unpaid_coach["unique_id"]

    approved = await client.put(f"/api/admin/coaches/{unpaid_coach['profile_id']}/approval",
                                json={"status": "approved", "remarks": "Documents verified"},
                                headers=admin["headers"])
    assert approved.status_code == 200
    assert approved.json()["coach"]["approval_status"] == "APPROVED"

    inbox = await client.get("/api/notifications", headers=unpaid_coach["headers"])
    assert inbox.json()["notifications"][0]["type"] == "ACCOUNT_APPROVED"

    bad = await client.put(f"/api/admin/coaches/{unpaid_coach['profile_id']}/approval",
                           json={"status": "MAYBE"}, headers=admin["headers"])
    assert bad.status_code == 400

    missing = await client.put(f"/api/admin/coaches/{uuid.uuid4()}/approval",
                               json={"status": "APPROVED"}, headers=admin["headers"])
    assert missing.status_code == 404


async def test_institute_approval(client: AsyncClient, admin, db):
    institute = await create_user_with_role("INSTITUTE", name="Delhi Sports School", state="Delhi")

    pending = await client.get("/api/admin/pending-institutes", headers=admin["headers"])
    assert pending.json()["total"] == 1

    await client.put(f"/api/admin/institutes/{institute['profile_id']}/approval", json={"status": "APPROVED"},
                     headers=admin["headers"])

    refreshed = await client.get("/api/admin/pending-institutes", headers=admin["headers"])
    assert refreshed.json()["total"] == 0


async def test_moderation_lifecycle(client: AsyncClient, admin, coach):
    event = await create_event(client, coach)

    pending = await client.get("/api/admin/pending-events", headers=admin["headers"])
    assert [e["id"] for e in pending.json()["events"]] == [event["id"]]

    restart_early = await client.put(f"/api/admin/events/{event['id']}/moderate", json={"action": "RESTART"},
                                     headers=admin["headers"])
    assert restart_early.status_code == 400

    approved = await client.put(f"/api/admin/events/{event['id']}/moderate",
                                json={"action": "approve", "admin_notes": "Looks good"}, headers=admin["headers"])
    assert approved.json()["event"]["status"] == "APPROVED"

    suspended = await client.put(f"/api/admin/events/{event['id']}/moderate",
                                 json={"action": "SUSPEND", "remarks": "Venue issue"}, headers=admin["headers"])
    assert suspended.json()["event"]["status"] == "SUSPENDED"
    assert suspended.json()["event"]["admin_notes"] == "Venue issue"

    restarted = await client.put(f"/api/admin/events/{event['id']}/moderate", json={"action": "RESTART"},
                                 headers=admin["headers"])
    assert restarted.json()["event"]["status"] == "APPROVED"

    inbox = await client.get("/api/notifications", headers=coach["headers"])
    types = {n["type"] for n in inbox.json()["notifications"]}
    assert {"EVENT_APPROVED", "EVENT_SUSPENDED", "EVENT_RESTARTED"} <= types
    restart_notice = next(n for n in inbox.json()["notifications"] if n["type"] == "EVENT_RESTARTED")
    assert restart_notice["action_url"] == f"/events/{event['id']}"

    invalid = await client.put(f"/api/admin/events/{event['id']}/moderate", json={"action": "ARCHIVE"},
                               headers=admin["headers"])
    assert invalid.status_code == 400


async def test_bulk_moderate_reports_each_event(client: AsyncClient, admin, coach):
    first = await create_event(client, coach, name="First Meet")
    second = await create_event(client, coach, name="Second Meet")
    missing = str(uuid.uuid4())

    response = await client.put("/api/admin/events/bulk-moderate", json={
        "event_ids": [first["id"], second["id"], missing], "action": "REJECT", "remarks": "Incomplete details",
    }, headers=admin["headers"])

    assert response.status_code == 200
    data = response.json()
    assert data["succeeded"] == 2
    assert data["failed"] == 1
    assert [r["event_id"] for r in data["results"] if not r["success"]] == [missing]


async def test_admin_event_status_and_listing(client: AsyncClient, admin, coach):
    event = await create_event(client, coach)

    invalid = await client.put(f"/api/admin/events/{event['id']}/status", json={"status": "ARCHIVED"},
                               headers=admin["headers"])
    assert invalid.status_code == 400

    completed = await client.put(f"/api/admin/events/{event['id']}/status", json={"status": "completed"},
                                 headers=admin["headers"])
    assert completed.json()["event"]["status"] == "COMPLETED"

    listed = await client.get("/api/admin/events", params={"status": "COMPLETED"}, headers=admin["headers"])
    assert listed.json()["pagination"]["total"] == 1


async def test_assignments_grant_participant_access(client: AsyncClient, admin, coach):
    event = await create_event(client, coach)
    staff = await client.post("/api/admin/create-event-incharge", json={
        "name": "Ground Staff", "email": "ground.staff@example.com",
    }, headers=admin["headers"])
    incharge_id = staff.json()["user"]["id"]
    login = await client.post("/api/auth/login", json={
        "email": "ground.staff@example.com", "password": staff.json()["temp_password"], "role": "EVENT_INCHARGE",
    })
    incharge_headers = {"Authorization": f"Bearer {login.json()['access_token']}"}

    denied = await client.get(f"/api/events/{event['id']}/participants", headers=incharge_headers)
    assert denied.status_code == 403

    saved = await client.put(f"/api/admin/events/{event['id']}/assignments", json={
        "assignments": [{"user_id": incharge_id, "student_management": True}],
    }, headers=admin["headers"])
    assert saved.status_code == 200
    [assignment] = saved.json()["assignments"]
    assert assignment["student_management"] is True
    assert assignment["result_upload"] is False

    allowed = await client.get(f"/api/events/{event['id']}/participants", headers=incharge_headers)
    assert allowed.status_code == 200

    fetched = await client.get(f"/api/admin/events/{event['id']}/assignments", headers=admin["headers"])
    assert fetched.json()["assignments"][0]["email"] == "ground.staff@example.com"

    inbox = await client.get("/api/notifications", headers=incharge_headers)
    assert inbox.json()["notifications"][0]["type"] == "EVENT_ASSIGNED"


async def test_students_cannot_be_assigned(client: AsyncClient, admin, coach, student):
    event = await create_event(client, coach)

    response = await client.put(f"/api/admin/events/{event['id']}/assignments", json={
        "assignments": [{"user_id": student["id"], "result_upload": True}],
    }, headers=admin["headers"])

    assert response.status_code == 400
    count = await database.fetch_val("SELECT COUNT(*) FROM event_assignments")
    assert count == 0


async def test_revenue_dashboard(client: AsyncClient, admin, student, fake_gateway):
    order = await client.post("/api/payment/create-order", json={"user_type": "student"},
                              headers=student["headers"])
    await client.post("/api/payment/verify", json=signed_payment(order.json()["order_id"]),
                      headers=student["headers"])

    response = await client.get("/api/admin/revenue/dashboard", headers=admin["headers"])

    assert response.status_code == 200
    data = response.json()
    assert data["totals"]["count"] == 1
    assert data["totals"]["total_gross"] == 299.0
    assert data["totals"]["total_commission"] == 7.48
    assert data["totals"]["total_net"] == 291.52
    assert data["by_payment_type"]["SUBSCRIPTION"]["count"] == 1
    assert data["financial_year"].count("-") == 1


async def test_admin_login(client: AsyncClient, admin):
    response = await client.post("/api/auth/login", json={
        "email": admin["email"], "password": DEFAULT_PASSWORD, "role": "ADMIN",
    })

    assert response.status_code == 200
    assert response.json()["user"]["role"] == "ADMIN"
