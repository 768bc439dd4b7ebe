import uuid

from httpx import AsyncClient

from app.database import database
from tests.helpers import approve_event, connect_student, create_event, create_user_with_role, signed_payment


async def roster(coach: dict, count: int = 2) -> list:
    students = []
    for i in range(count):
        student = await create_user_with_role("STUDENT", name=f"Player {i + 1}", state="Delhi")
        await connect_student(coach, student)
        students.append(student)
    return students


async def open_event(client: AsyncClient, coach: dict, admin: dict, **overrides) -> dict:
    event = await create_event(client, coach, **overrides)
    await approve_event(client, admin, event["id"])
    return event


async def test_bulk_registration_creates_pending_order(client: AsyncClient, coach, admin):
    event = await open_event(client, coach, admin)
    students = await roster(coach)

    response = await client.post(f"/api/coach/events/{event['id']}/registrations/bulk", json={
        "student_ids": [s["profile_id"] for s in students], "event_fee_per_student": 250,
    }, headers=coach["headers"])

    assert response.status_code == 201
    order = response.json()["order"]
    assert order["order_number"].startswith("REG-")
    assert order["status"] == "PENDING"
    assert order["total_students"] == 2
    assert float(order["total_fee_amount"]) == 500.0
    assert sorted(i["student_name"] for i in order["items"]) == ["Player 1", "Player 2"]


async def test_bulk_registration_requires_connected_students(client: AsyncClient, coach, admin, student):
    event = await open_event(client, coach, admin)

    response = await client.post(f"/api/coach/events/{event['id']}/registrations/bulk", json={
        "student_ids": [student["profile_id"]], "event_fee_per_student": 100,
    }, headers=coach["headers"])

    assert response.status_code == 400
    assert "not connected" in response.json()["detail"]


async def test_bulk_registration_rejects_duplicates_in_request(client: AsyncClient, coach, admin):
    event = await open_event(client, coach, admin)
    [player] = await roster(coach, 1)

    response = await client.post(f"/api/coach/events/{event['id']}/registrations/bulk", json={
        "student_ids": [player["profile_id"], player["profile_id"]], "event_fee_per_student": 100,
    }, headers=coach["headers"])

    assert response.status_code == 400


async def test_bulk_registration_respects_capacity(client: AsyncClient, coach, admin):
    event = await open_event(client, coach, admin, max_participants=1)
    students = await roster(coach, 2)

    response = await client.post(f"/api/coach/events/{event['id']}/registrations/bulk", json={
        "student_ids": [s["profile_id"] for s in students], "event_fee_per_student": 100,
    }, headers=coach["headers"])

    assert response.status_code == 400
    assert response.json()["detail"] == "Only 1 spots left in this event"


async def test_bulk_registration_on_pending_event(client: AsyncClient, coach):
    event = await create_event(client, coach)
    students = await roster(coach, 1)

    response = await client.post(f"/api/coach/events/{event['id']}/registrations/bulk", json={
        "student_ids": [students[0]["profile_id"]], "event_fee_per_student": 100,
    }, headers=coach["headers"])

    assert response.status_code == 400


async def test_already_registered_students_conflict(client: AsyncClient, coach, admin):
    event = await open_event(client, coach, admin)
    [player] = await roster(coach, 1)
    registered = await client.post(f"/api/events/{event['id']}/register", headers=player["headers"])
    assert registered.status_code == 201

    response = await client.post(f"/api/coach/events/{event['id']}/registrations/bulk", json={
        "student_ids": [player["profile_id"]], "event_fee_per_student": 100,
    }, headers=coach["headers"])

    assert response.status_code == 409
    assert "Player 1" in response.json()["detail"]


async def test_paid_registration_flow(client: AsyncClient, coach, admin, fake_gateway):
    event = await open_event(client, coach, admin)
    students = await roster(coach)
    created = await client.post(f"/api/coach/events/{event['id']}/registrations/bulk", json={
        "student_ids": [s["profile_id"] for s in students], "event_fee_per_student": 250,
    }, headers=coach["headers"])
    order_id = created.json()["order"]["id"]

    payment = await client.post(
        f"/api/coach/events/{event['id']}/registrations/orders/{order_id}/payment", headers=coach["headers"]
    )
    assert payment.status_code == 200
    assert payment.json()["payment_required"] is True
    assert payment.json()["amount"] == 50000
    rzp_order_id = payment.json()["razorpay_order_id"]

    confirmed = await client.post(
        f"/api/coach/events/{event['id']}/registrations/orders/{order_id}/payment-success",
        json=signed_payment(rzp_order_id), headers=coach["headers"],
    )
    assert confirmed.status_code == 200
    assert confirmed.json()["registered"] == 2
    assert confirmed.json()["order"]["payment_status"] == "PAID"

    participants = await database.fetch_val(
        "SELECT current_participants FROM events WHERE id = :id", {"id": event["id"]}
    )
    assert participants == 2
    registrations = await database.fetch_val(
        "SELECT COUNT(*) FROM event_registrations WHERE registration_order_id = :oid", {"oid": order_id}
    )
    assert registrations == 2

    again = await client.post(
        f"/api/coach/events/{event['id']}/registrations/orders/{order_id}/payment", headers=coach["headers"]
    )
    assert again.status_code == 400


async def test_free_registration_settles_without_gateway(client: AsyncClient, coach, admin, fake_gateway):
    event = await open_event(client, coach, admin, event_fee=0)
    students = await roster(coach, 1)
    created = await client.post(f"/api/coach/events/{event['id']}/registrations/bulk", json={
        "student_ids": [students[0]["profile_id"]], "event_fee_per_student": 0,
    }, headers=coach["headers"])
    order_id = created.json()["order"]["id"]

    response = await client.post(
        f"/api/coach/events/{event['id']}/registrations/orders/{order_id}/payment", headers=coach["headers"]
    )

    assert response.status_code == 200
    assert response.json()["payment_required"] is False
    assert response.json()["order"]["status"] == "PAID"
    assert fake_gateway == []


async def test_payment_success_rejects_bad_signature(client: AsyncClient, coach, admin, fake_gateway):
    event = await open_event(client, coach, admin)
    students = await roster(coach, 1)
    created = await client.post(f"/api/coach/events/{event['id']}/registrations/bulk", json={
        "student_ids": [students[0]["profile_id"]], "event_fee_per_student": 100,
    }, headers=coach["headers"])
    order_id = created.json()["order"]["id"]
    payment = await client.post(
        f"/api/coach/events/{event['id']}/registrations/orders/{order_id}/payment", headers=coach["headers"]
    )
    body = signed_payment(payment.json()["razorpay_order_id"])
    body["razorpay_payment_id"] = "pay_forged"

    response = await client.post(
        f"/api/coach/events/{event['id']}/registrations/orders/{order_id}/payment-success",
        json=body, headers=coach["headers"],
    )

    assert response.status_code == 400
    count = await database.fetch_val("SELECT COUNT(*) FROM event_registrations")
    assert count == 0


async def test_other_coach_cannot_see_order(client: AsyncClient, coach, admin):
    event = await open_event(client, coach, admin)
    students = await roster(coach, 1)
    created = await client.post(f"/api/coach/events/{event['id']}/registrations/bulk", json={
        "student_ids": [students[0]["profile_id"]], "event_fee_per_student": 100,
    }, headers=coach["headers"])
    other = await create_user_with_role("COACH", name="Other Coach", state="Delhi", profile={
        "payment_status": "SUCCESS", "is_active": True, "approval_status": "APPROVED",
    })

    response = await client.post(
        f"/api/coach/events/{event['id']}/registrations/orders/{created.json()['order']['id']}/payment",
        headers=other["headers"],
    )

    assert response.status_code == 404


async def test_admin_summary_and_completion_notice(client: AsyncClient, coach, admin):
    event = await open_event(client, coach, admin, event_fee=0)
    students = await roster(coach, 2)
    created = await client.post(f"/api/coach/events/{event['id']}/registrations/bulk", json={
        "student_ids": [s["profile_id"] for s in students], "event_fee_per_student": 0,
    }, headers=coach["headers"])
    order_id = created.json()["order"]["id"]
    await client.post(f"/api/coach/events/{event['id']}/registrations/orders/{order_id}/payment",
                      headers=coach["headers"])

    summary = await client.get(f"/api/admin/events/{event['id']}/registrations/orders", headers=admin["headers"])
    assert summary.status_code == 200
    assert summary.json()["summary"]["paid_orders"] == 1
    assert summary.json()["summary"]["total_students"] == 2

    notice = await client.post(f"/api/admin/events/{event['id']}/registrations/notify-completion",
                               json={"message": "Thanks for coming"}, headers=admin["headers"])
    assert notice.status_code == 200
    assert notice.json()["notified"] == 1

    inbox = await client.get("/api/notifications", headers=coach["headers"])
    assert any(n["message"] == "Thanks for coming" for n in inbox.json()["notifications"])


async def test_unknown_registration_order(client: AsyncClient, coach, admin):
    event = await open_event(client, coach, admin)

    response = await client.post(
        f"/api/coach/events/{event['id']}/registrations/orders/{uuid.uuid4()}/payment", headers=coach["headers"]
    )

    assert response.status_code == 404


async def test_settle_rechecks_capacity(client: AsyncClient, coach, admin, fake_gateway):
    event = await open_event(client, coach, admin, max_participants=2)
    students = await roster(coach, 2)
    created = await client.post(f"/api/coach/events/{event['id']}/registrations/bulk", json={
        "student_ids": [s["profile_id"] for s in students], "event_fee_per_student": 100,
    }, headers=coach["headers"])
    order_id = created.json()["order"]["id"]
    walk_in = await create_user_with_role("STUDENT", name="Walk In", state="Delhi")
    taken = await client.post(f"/api/events/{event['id']}/register", headers=walk_in["headers"])
    assert taken.status_code == 201

    payment = await client.post(
        f"/api/coach/events/{event['id']}/registrations/orders/{order_id}/payment", headers=coach["headers"]
    )
    confirmed = await client.post(
        f"/api/coach/events/{event['id']}/registrations/orders/{order_id}/payment-success",
        json=signed_payment(payment.json()["razorpay_order_id"]), headers=coach["headers"],
    )

    assert confirmed.status_code == 400
    row = await database.fetch_one(
        "SELECT current_participants, max_participants FROM events WHERE id = :id", {"id": event["id"]}
    )
    assert row["current_participants"] == 1
    order = await database.fetch_one("SELECT payment_status FROM registration_orders WHERE id = :id",
                                     {"id": order_id})
    assert order["payment_status"] != "PAID"


async def test_free_order_on_cancelled_event_is_not_settled(client: AsyncClient, coach, admin, fake_gateway):
    event = await open_event(client, coach, admin, event_fee=0)
    students = await roster(coach, 2)
    created = await client.post(f"/api/coach/events/{event['id']}/registrations/bulk", json={
        "student_ids": [s["profile_id"] for s in students], "event_fee_per_student": 0,
    }, headers=coach["headers"])
    order_id = created.json()["order"]["id"]
    cancelled = await client.put(f"/api/events/{event['id']}/cancel", json={"reason": "Rain"},
                                 headers=coach["headers"])
    assert cancelled.status_code == 200

    response = await client.post(
        f"/api/coach/events/{event['id']}/registrations/orders/{order_id}/payment", headers=coach["headers"]
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Event is not open for registration"
    count = await database.fetch_val("SELECT COUNT(*) FROM event_registrations")
    assert count == 0
