import uuid

from httpx import AsyncClient

from app.database import database
from tests.helpers import create_user_with_role


def member_payload(**overrides) -> dict:
    data = {
        "name": "Arjun Mehta",
        "email": "Arjun.Mehta@example.com",
        "phone": "9876543230",
        "sport": "Tennis",
        "membership_type": "premium",
        "fees": 1500,
    }
    data.update(overrides)
    return data


async def test_member_lifecycle(client: AsyncClient, db):
    club = await create_user_with_role("CLUB", name="Kings Club", state="Punjab")

    added = await client.post("/api/club/members", json=member_payload(), headers=club["headers"])
    assert added.status_code == 201
    member = added.json()["member"]
    assert member["email"] == "arjun.mehta@example.com"
    assert member["membership_type"] == "PREMIUM"
    assert member["status"] == "ACTIVE"
    assert member["student_id"] is None

    duplicate = await client.post("/api/club/members", json=member_payload(phone="9876543231"),
                                  headers=club["headers"])
    assert duplicate.status_code == 409

    updated = await client.put(f"/api/club/members/{member['id']}", json={"status": "inactive", "fees": 900},
                               headers=club["headers"])
    assert updated.status_code == 200
    assert updated.json()["member"]["status"] == "INACTIVE"
    assert updated.json()["member"]["fees"] == 900

    active = await client.get("/api/club/members", params={"status": "ACTIVE"}, headers=club["headers"])
    assert active.json()["pagination"]["total"] == 0
    searched = await client.get("/api/club/members", params={"search": "arjun"}, headers=club["headers"])
    assert searched.json()["pagination"]["total"] == 1

    removed = await client.delete(f"/api/club/members/{member['id']}", headers=club["headers"])
    assert removed.status_code == 200
    again = await client.delete(f"/api/club/members/{member['id']}", headers=club["headers"])
    assert again.status_code == 404


async def test_member_validation(client: AsyncClient, db):
    club = await create_user_with_role("CLUB", name="Kings Club", state="Punjab")

    bad_phone = await client.post("/api/club/members", json=member_payload(phone="12345"), headers=club["headers"])
    assert bad_phone.status_code == 400

    bad_type = await client.post("/api/club/members", json=member_payload(membership_type="GOLD"),
                                 headers=club["headers"])
    assert bad_type.status_code == 400

    missing = await client.post("/api/club/members", json={"name": "No Contact"}, headers=club["headers"])
    assert missing.status_code == 422


async def test_member_links_existing_student(client: AsyncClient, student):
    club = await create_user_with_role("CLUB", name="Kings Club", state="Punjab")

    added = await client.post("/api/club/members", json=member_payload(email=student["email"]),
                              headers=club["headers"])

    assert added.json()["member"]["student_id"] == student["profile_id"]


async def test_dashboard_counts_active_members(client: AsyncClient, db):
    club = await create_user_with_role("CLUB", name="Kings Club", state="Punjab")
    await client.post("/api/club/members", json=member_payload(), headers=club["headers"])

    dashboard = await client.get("/api/club/dashboard", headers=club["headers"])

    assert dashboard.json()["stats"]["active_members"] == 1


async def test_clubs_cannot_touch_each_others_rows(client: AsyncClient, db):
    owner = await create_user_with_role("CLUB", name="Kings Club", state="Punjab")
    other = await create_user_with_role("CLUB", name="Queens Club", state="Punjab")
    member = await client.post("/api/club/members", json=member_payload(), headers=owner["headers"])
    facility = await client.post("/api/club/facilities", json={"name": "Court 1", "type": "Tennis Court"},
                                 headers=owner["headers"])

    member_id = member.json()["member"]["id"]
    facility_id = facility.json()["facility"]["id"]
    assert (await client.put(f"/api/club/members/{member_id}", json={"fees": 0},
                             headers=other["headers"])).status_code == 403
    assert (await client.delete(f"/api/club/members/{member_id}", headers=other["headers"])).status_code == 403
    assert (await client.delete(f"/api/club/facilities/{facility_id}",
                                headers=other["headers"])).status_code == 403

    listed = await client.get("/api/club/members", headers=other["headers"])
    assert listed.json()["pagination"]["total"] == 0


async def test_facility_lifecycle(client: AsyncClient, db):
    club = await create_user_with_role("CLUB", name="Kings Club", state="Punjab")

    pool = await client.post("/api/club/facilities", json={
        "name": "Main Pool", "type": "Swimming Pool", "capacity": 40, "hourly_rate": 500,
        "amenities": ["Changing rooms", "Lockers"],
    }, headers=club["headers"])
    assert pool.status_code == 201
    facility = pool.json()["facility"]
    assert facility["available"] is True
    assert facility["amenities"] == ["Changing rooms", "Lockers"]

    await client.post("/api/club/facilities", json={"name": "Court 1", "type": "Tennis Court"},
                      headers=club["headers"])

    closed = await client.put(f"/api/club/facilities/{facility['id']}",
                              json={"available": False, "amenities": ["Lockers"]}, headers=club["headers"])
    assert closed.json()["facility"]["available"] is False
    assert closed.json()["facility"]["amenities"] == ["Lockers"]

    available = await client.get("/api/club/facilities", params={"available": "true"}, headers=club["headers"])
    assert [f["name"] for f in available.json()["facilities"]] == ["Court 1"]
    pools = await client.get("/api/club/facilities", params={"type": "swimming pool"}, headers=club["headers"])
    assert pools.json()["total"] == 1

    deleted = await client.delete(f"/api/club/facilities/{facility['id']}", headers=club["headers"])
    assert deleted.status_code == 200
    count = await database.fetch_val("SELECT COUNT(*) FROM club_facilities")
    assert count == 1

    missing = await client.put(f"/api/club/facilities/{uuid.uuid4()}", json={"name": "Gone"},
                               headers=club["headers"])
    assert missing.status_code == 404


async def test_facility_requires_name_and_type(client: AsyncClient, db):
    club = await create_user_with_role("CLUB", name="Kings Club", state="Punjab")

    response = await client.post("/api/club/facilities", json={"name": "Gym"}, headers=club["headers"])

    assert response.status_code == 422


async def test_club_routes_are_club_only(client: AsyncClient, coach):
    response = await client.get("/api/club/members", headers=coach["headers"])

    assert response.status_code == 403
