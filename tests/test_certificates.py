from httpx import AsyncClient

from app.services.certificate_service import certificate_service
from tests.helpers import approve_event, connect_student, create_event, create_user_with_role


async def registered_event(client: AsyncClient, coach: dict, admin: dict, players: int = 2):
    """Approved coach event with `players` self-registered students"""
    event = await create_event(client, coach)
    await approve_event(client, admin, event["id"])
    students = []
    for i in range(players):
        student = await create_user_with_role("STUDENT", name=f"Athlete {i + 1}", state="Delhi")
        response = await client.post(f"/api/events/{event['id']}/register", headers=student["headers"])
        assert response.status_code == 201, response.text
        students.append(student)
    return event, students


async def buy_certificates(client: AsyncClient, coach: dict, admin: dict, event_id: str, count: int) -> None:
    created = await client.post(f"/api/coach/events/{event_id}/orders", json={"certificates": count},
                                headers=coach["headers"])
    order_id = created.json()["order"]["id"]
    paid = await client.put(f"/api/admin/orders/{order_id}", json={"status": "PAID", "certificate_price": 20},
                            headers=admin["headers"])
    assert paid.status_code == 200, paid.text


async def test_issue_requires_paid_allowance(client: AsyncClient, coach, admin):
    event, students = await registered_event(client, coach, admin)

    response = await client.post("/api/certificates/issue", json={
        "event_id": event["id"], "student_ids": [s["profile_id"] for s in students],
    }, headers=coach["headers"])

    assert response.status_code == 400
    assert response.json()["detail"].startswith("Only 0 certificates available")


async def test_issue_participation_certificates(client: AsyncClient, coach, admin):
    event, students = await registered_event(client, coach, admin)
    await buy_certificates(client, coach, admin, event["id"], 3)

    response = await client.post("/api/certificates/issue", json={
        "event_id": event["unique_id"], "student_ids": [s["profile_id"] for s in students],
    }, headers=coach["headers"])

    assert response.status_code == 201
    data = response.json()
    assert data["remaining"] == 1
    issued = data["certificates"]
    assert len(issued) == 2
    assert issued[0]["unique_id"] == f"STAIRS-CERT-{event['unique_id']}-{students[0]['unique_id']}"
    assert "certificate_url" not in issued[0]

    inbox = await client.get("/api/notifications", headers=students[0]["headers"])
    assert inbox.json()["notifications"][0]["type"] == "CERTIFICATE_ISSUED"


async def test_duplicate_participation_certificate(client: AsyncClient, coach, admin):
    event, students = await registered_event(client, coach, admin, players=1)
    await buy_certificates(client, coach, admin, event["id"], 5)
    body = {"event_id": event["id"], "student_ids": [students[0]["profile_id"]]}
    await client.post("/api/certificates/issue", json=body, headers=coach["headers"])

    response = await client.post("/api/certificates/issue", json=body, headers=coach["headers"])

    assert response.status_code == 409
    assert "Athlete 1" in response.json()["detail"]


async def test_winning_certificate_needs_position(client: AsyncClient, coach, admin):
    event, students = await registered_event(client, coach, admin, players=1)
    await buy_certificates(client, coach, admin, event["id"], 5)
    student_id = students[0]["profile_id"]

    missing = await client.post("/api/certificates/issue/winning", json={
        "event_id": event["id"], "student_ids": [student_id], "positions": {},
    }, headers=coach["headers"])
    assert missing.status_code == 400

    issued = await client.post("/api/certificates/issue/winning", json={
        "event_id": event["id"], "student_ids": [student_id], "positions": {student_id: "1st"},
    }, headers=coach["headers"])
    assert issued.status_code == 201
    assert issued.json()["certificates"][0]["position"] == "1st"
    assert issued.json()["certificates"][0]["certificate_type"] == "winning"


async def test_issue_only_to_registered_students(client: AsyncClient, coach, admin, student):
    event, _ = await registered_event(client, coach, admin, players=1)
    await buy_certificates(client, coach, admin, event["id"], 5)

    response = await client.post("/api/certificates/issue", json={
        "event_id": event["id"], "student_ids": [student["profile_id"]],
    }, headers=coach["headers"])

    assert response.status_code == 400
    assert "not registered" in response.json()["detail"]


async def test_issue_only_for_own_event(client: AsyncClient, coach, admin):
    event, students = await registered_event(client, coach, admin, players=1)
    other = await create_user_with_role("COACH", name="Rival Coach", state="Delhi", profile={
        "payment_status": "SUCCESS", "is_active": True, "approval_status": "APPROVED",
    })

    response = await client.post("/api/certificates/issue", json={
        "event_id": event["id"], "student_ids": [students[0]["profile_id"]],
    }, headers=other["headers"])

    assert response.status_code == 403


async def test_verify_download_and_view(client: AsyncClient, coach, admin):
    event, students = await registered_event(client, coach, admin, players=1)
    await buy_certificates(client, coach, admin, event["id"], 1)
    issued = await client.post("/api/certificates/issue", json={
        "event_id": event["id"], "student_ids": [students[0]["profile_id"]],
    }, headers=coach["headers"])
    uid = issued.json()["certificates"][0]["unique_id"]

    verified = await client.get(f"/api/certificates/verify/{uid}")
    assert verified.status_code == 200
    assert verified.json()["valid"] is True
    assert verified.json()["certificate"]["participant_name"] == "Athlete 1"

    downloaded = await client.get(f"/api/certificates/{uid}/download")
    assert downloaded.status_code == 200
    assert downloaded.headers["content-type"] == "application/pdf"
    assert downloaded.content.startswith(b"%PDF")

    page = await client.get(f"/api/certificates/{uid}/html")
    assert page.status_code == 200
    assert "Athlete 1" in page.text
    assert "CERTIFICATE OF PARTICIPATION" in page.text

    unknown = await client.get("/api/certificates/verify/STAIRS-CERT-NOPE")
    assert unknown.status_code == 404


async def test_student_lists_own_certificates(client: AsyncClient, coach, admin):
    event, students = await registered_event(client, coach, admin, players=2)
    await buy_certificates(client, coach, admin, event["id"], 2)
    await client.post("/api/certificates/issue", json={
        "event_id": event["id"], "student_ids": [students[0]["profile_id"]],
    }, headers=coach["headers"])

    mine = await client.get("/api/certificates/my-certificates", headers=students[0]["headers"])
    theirs = await client.get("/api/certificates/my-certificates", headers=students[1]["headers"])

    assert len(mine.json()["certificates"]) == 1
    assert mine.json()["certificates"][0]["event_uid"] == event["unique_id"]
    assert theirs.json()["certificates"] == []


async def test_eligible_students_and_event_listing(client: AsyncClient, coach, admin):
    event, students = await registered_event(client, coach, admin, players=2)
    await buy_certificates(client, coach, admin, event["id"], 4)
    await client.post("/api/certificates/issue", json={
        "event_id": event["id"], "student_ids": [students[1]["profile_id"]],
    }, headers=coach["headers"])

    eligible = await client.get(f"/api/certificates/event/{event['id']}/eligible-students", headers=coach["headers"])
    assert eligible.status_code == 200
    flags = {s["name"]: s["has_certificate"] for s in eligible.json()["students"]}
    assert flags == {"Athlete 1": False, "Athlete 2": True}
    assert eligible.json()["remaining_certificates"] == 3

    listed = await client.get(f"/api/certificates/event/{event['id']}/issued", headers=coach["headers"])
    assert listed.json()["total"] == 1

    as_admin = await client.get(f"/api/admin/events/{event['id']}/certificates", headers=admin["headers"])
    assert as_admin.json()["total"] == 1


async def test_generate_for_registration_order(client: AsyncClient, coach, admin):
    event = await create_event(client, coach, event_fee=0)
    await approve_event(client, admin, event["id"])
    players = []
    for i in range(2):
        player = await create_user_with_role("STUDENT", name=f"Squad {i + 1}", state="Delhi")
        await connect_student(coach, player)
        players.append(player)
    created = await client.post(f"/api/coach/events/{event['id']}/registrations/bulk", json={
        "student_ids": [p["profile_id"] for p in players], "event_fee_per_student": 0,
    }, headers=coach["headers"])
    order_id = created.json()["order"]["id"]
    await client.post(f"/api/coach/events/{event['id']}/registrations/orders/{order_id}/payment",
                      headers=coach["headers"])

    too_early = await client.post(f"/api/admin/registrations/orders/{order_id}/generate-certificates",
                                  headers=admin["headers"])
    assert too_early.status_code == 400

    await client.put(f"/api/admin/events/{event['id']}/status", json={"status": "COMPLETED"},
                     headers=admin["headers"])
    first = await client.post(f"/api/admin/registrations/orders/{order_id}/generate-certificates",
                              headers=admin["headers"])
    assert first.status_code == 200
    assert first.json()["generated"] == 2
    assert first.json()["reused"] == 0

    second = await client.post(f"/api/admin/registrations/orders/{order_id}/generate-certificates",
                               headers=admin["headers"])
    assert second.json()["generated"] == 0
    assert second.json()["reused"] == 2


def test_certificate_lines_for_winner():
    lines = certificate_service.certificate_lines({
        "certificate_type": "winning",
        "position": "2nd",
        "participant_name": "Asha Rao",
        "event_name": "State Meet",
        "sport_name": "Athletics",
        "issue_date": "2025-11-25 09:00:00",
        "unique_id": "STAIRS-CERT-X",
    })

    assert lines["title"] == "CERTIFICATE OF ACHIEVEMENT"
    assert lines["achievement"] == "for securing 2nd position in"
    assert lines["issue_date"] == "25 November 2025"
    assert lines["verify_url"].endswith("/api/certificates/verify/STAIRS-CERT-X")


def test_render_pdf_produces_pdf():
    pdf = certificate_service.render_pdf({
        "certificate_type": "participation",
        "participant_name": "Asha Rao",
        "event_name": "State Meet",
        "sport_name": "Athletics",
        "unique_id": "STAIRS-CERT-Y",
    })

    assert pdf.startswith(b"%PDF")
