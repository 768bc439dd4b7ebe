from httpx import AsyncClient

from tests.helpers import create_user_with_role


async def test_student_profile_update_and_dashboard(client: AsyncClient, student):
    updated = await client.put("/api/student/profile", json={"sport": "Kabaddi", "city": "Pune"},
                               headers=student["headers"])
    assert updated.status_code == 200

    profile = await client.get("/api/student/profile", headers=student["headers"])
    assert profile.status_code == 200

    dashboard = await client.get("/api/student/dashboard", headers=student["headers"])
    assert dashboard.status_code == 200


async def test_role_guards(client: AsyncClient, student, coach):
    assert (await client.get("/api/coach/profile", headers=student["headers"])).status_code == 403
    assert (await client.get("/api/student/profile", headers=coach["headers"])).status_code == 403
    assert (await client.get("/api/admin/dashboard", headers=coach["headers"])).status_code == 403


async def test_coach_dashboard(client: AsyncClient, coach):
    response = await client.get("/api/coach/dashboard", headers=coach["headers"])

    assert response.status_code == 200


async def test_students_find_only_paid_coaches(client: AsyncClient, student, coach, unpaid_coach):
    response = await client.get("/api/student/coaches", headers=student["headers"])

    assert response.status_code == 200
    ids = [c["id"] for c in response.json()["coaches"]]
    assert coach["profile_id"] in ids
    assert unpaid_coach["profile_id"] not in ids


async def test_connection_request_lifecycle(client: AsyncClient, student, coach):
    sent = await client.post(f"/api/student/connect/{coach['profile_id']}", json={"message": "Coach me"},
                             headers=student["headers"])
    assert sent.status_code == 200
    connection_id = sent.json()["connection"]["id"]

    duplicate = await client.post(f"/api/student/connect/{coach['profile_id']}", headers=student["headers"])
    assert duplicate.status_code == 409

    pending = await client.get("/api/coach/connection-requests", headers=coach["headers"])
    assert [r["student_name"] for r in pending.json()["requests"]] == [student["name"]]

    accepted = await client.put(f"/api/coach/connection-requests/{connection_id}", json={"status": "ACCEPTED"},
                                headers=coach["headers"])
    assert accepted.status_code == 200
    assert accepted.json()["connection"]["status"] == "ACCEPTED"

    twice = await client.put(f"/api/coach/connection-requests/{connection_id}", json={"status": "REJECTED"},
                             headers=coach["headers"])
    assert twice.status_code == 400

    roster = await client.get("/api/coach/students", headers=coach["headers"])
    assert roster.json()["pagination"]["total"] == 1

    inbox = await client.get("/api/notifications", headers=student["headers"])
    assert inbox.json()["notifications"][0]["type"] == "CONNECTION_ACCEPTED"

    removed = await client.delete(f"/api/student/connections/{connection_id}", headers=student["headers"])
    assert removed.status_code == 200
    connections = await client.get("/api/student/connections", headers=student["headers"])
    assert connections.json()["connections"] == []


async def test_rejected_request_can_be_sent_again(client: AsyncClient, student, coach):
    sent = await client.post(f"/api/student/connect/{coach['profile_id']}", headers=student["headers"])
    connection_id = sent.json()["connection"]["id"]
    await client.put(f"/api/coach/connection-requests/{connection_id}", json={"status": "REJECTED"},
                     headers=coach["headers"])

    again = await client.post(f"/api/student/connect/{coach['profile_id']}", headers=student["headers"])

    assert again.status_code == 200
    assert again.json()["connection"]["id"] == connection_id
    assert again.json()["connection"]["status"] == "PENDING"


async def test_cannot_connect_to_unpaid_coach(client: AsyncClient, student, unpaid_coach):
    response = await client.post(f"/api/student/connect/{unpaid_coach['profile_id']}", headers=student["headers"])

    assert response.status_code == 404


async def test_club_profile_and_dashboard(client: AsyncClient, db):
    club = await create_user_with_role("CLUB", name="Kings Club", state="Punjab")

    profile = await client.get("/api/club/profile", headers=club["headers"])
    dashboard = await client.get("/api/club/dashboard", headers=club["headers"])

    assert profile.status_code == 200
    assert dashboard.status_code == 200
