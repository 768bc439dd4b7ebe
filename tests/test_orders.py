import uuid

from httpx import AsyncClient

from app.database import database
from tests.helpers import create_event, signed_payment


async def place_order(client: AsyncClient, coach: dict, event_id: str, **quantities) -> dict:
    body = {"certificates": 10, "medals": 3, "trophies": 1}
    body.update(quantities)
    response = await client.post(f"/api/coach/events/{event_id}/orders", json=body, headers=coach["headers"])
    assert response.status_code == 201, response.text
    return response.json()["order"]


async def quote(client: AsyncClient, admin: dict, order_id: str, **values) -> dict:
    body = {"status": "CONFIRMED", "certificate_price": 50, "medal_price": 120, "trophy_price": 400}
    body.update(values)
    response = await client.put(f"/api/admin/orders/{order_id}", json=body, headers=admin["headers"])
    assert response.status_code == 200, response.text
    return response.json()["order"]


async def test_coach_places_order(client: AsyncClient, coach, admin):
    event = await create_event(client, coach)

    order = await place_order(client, coach, event["id"], urgent_delivery=True)

    assert order["status"] == "PENDING"
    assert order["order_number"].startswith("ORD-")
    assert order["order_number"].endswith("-0001")
    assert order["certificates"] == 10
    assert order["urgent_delivery"] is True
    assert order["total_amount"] == 0

    notices = await client.get("/api/notifications", headers=admin["headers"])
    assert "New order received" in [n["title"] for n in notices.json()["notifications"]]


async def test_order_needs_at_least_one_item(client: AsyncClient, coach):
    event = await create_event(client, coach)

    response = await client.post(f"/api/coach/events/{event['id']}/orders", json={}, headers=coach["headers"])

    assert response.status_code == 400


async def test_one_open_order_per_event(client: AsyncClient, coach):
    event = await create_event(client, coach)
    await place_order(client, coach, event["id"])

    response = await client.post(f"/api/coach/events/{event['id']}/orders", json={"medals": 2},
                                 headers=coach["headers"])

    assert response.status_code == 409


async def test_orders_only_for_own_events(client: AsyncClient, coach, admin):
    event = await create_event(client, admin)

    response = await client.post(f"/api/coach/events/{event['id']}/orders", json={"certificates": 5},
                                 headers=coach["headers"])

    assert response.status_code == 403


async def test_unpaid_coach_cannot_order(client: AsyncClient, unpaid_coach, coach):
    event = await create_event(client, coach)

    response = await client.post(f"/api/coach/events/{event['id']}/orders", json={"certificates": 5},
                                 headers=unpaid_coach["headers"])

    assert response.status_code == 403


async def test_update_and_delete_pending_order(client: AsyncClient, coach):
    event = await create_event(client, coach)
    order = await place_order(client, coach, event["id"])

    updated = await client.put(f"/api/coach/events/{event['id']}/orders/{order['id']}",
                               json={"medals": 7}, headers=coach["headers"])
    assert updated.status_code == 200
    assert updated.json()["order"]["medals"] == 7
    assert updated.json()["order"]["certificates"] == 10

    listed = await client.get(f"/api/coach/events/{event['id']}/orders", headers=coach["headers"])
    assert len(listed.json()["orders"]) == 1

    deleted = await client.delete(f"/api/coach/events/{event['id']}/orders/{order['id']}", headers=coach["headers"])
    assert deleted.status_code == 200
    listed = await client.get(f"/api/coach/events/{event['id']}/orders", headers=coach["headers"])
    assert listed.json()["orders"] == []


async def test_confirmed_order_is_locked_for_coach(client: AsyncClient, coach, admin):
    event = await create_event(client, coach)
    order = await place_order(client, coach, event["id"])
    await quote(client, admin, order["id"])

    updated = await client.put(f"/api/coach/events/{event['id']}/orders/{order['id']}",
                               json={"medals": 1}, headers=coach["headers"])
    deleted = await client.delete(f"/api/coach/events/{event['id']}/orders/{order['id']}", headers=coach["headers"])

    assert updated.status_code == 400
    assert deleted.status_code == 400


async def test_admin_quote_recomputes_total(client: AsyncClient, coach, admin):
    event = await create_event(client, coach)
    order = await place_order(client, coach, event["id"])

    quoted = await quote(client, admin, order["id"])

    # 10 x 50 + 3 x 120 + 1 x 400
    assert quoted["total_amount"] == 1260.0
    assert quoted["status"] == "CONFIRMED"

    notices = await client.get("/api/notifications", headers=coach["headers"])
    types = [n["type"] for n in notices.json()["notifications"]]
    assert "ORDER_CONFIRMED" in types
    confirmed = next(n for n in notices.json()["notifications"] if n["type"] == "ORDER_CONFIRMED")
    assert confirmed["action_url"] == f"/admin/orders/{order['id']}"


async def test_admin_rejects_unknown_status(client: AsyncClient, coach, admin):
    event = await create_event(client, coach)
    order = await place_order(client, coach, event["id"])

    response = await client.put(f"/api/admin/orders/{order['id']}", json={"status": "SHIPPED"},
                                headers=admin["headers"])

    assert response.status_code == 400


async def test_payment_requires_confirmation(client: AsyncClient, coach, fake_gateway):
    event = await create_event(client, coach)
    order = await place_order(client, coach, event["id"])

    response = await client.post(f"/api/coach/orders/{order['id']}/create-payment", headers=coach["headers"])

    assert response.status_code == 400
    assert fake_gateway == []


async def test_order_payment_flow(client: AsyncClient, coach, admin, fake_gateway):
    event = await create_event(client, coach)
    order = await place_order(client, coach, event["id"])
    await quote(client, admin, order["id"])

    created = await client.post(f"/api/coach/orders/{order['id']}/create-payment", headers=coach["headers"])
    assert created.status_code == 200
    data = created.json()
    assert data["amount"] == 126000
    assert data["currency"] == "INR"
    assert data["key_id"] == "rzp_test_key"
    assert data["order"]["status"] == "PAYMENT_PENDING"
    rzp_order_id = data["razorpay_order_id"]

    tampered = signed_payment(rzp_order_id)
    tampered["razorpay_signature"] = "0" * 64
    bad = await client.post(f"/api/coach/orders/{order['id']}/verify-payment", json=tampered,
                            headers=coach["headers"])
    assert bad.status_code == 400

    verified = await client.post(f"/api/coach/orders/{order['id']}/verify-payment",
                                 json=signed_payment(rzp_order_id), headers=coach["headers"])
    assert verified.status_code == 200
    paid = verified.json()["order"]
    assert paid["status"] == "PAID"
    assert paid["payment_status"] == "SUCCESS"

    payment = await database.fetch_one(
        "SELECT status, payment_type, amount FROM payments WHERE razorpay_order_id = :id", {"id": rzp_order_id}
    )
    assert payment["status"] == "SUCCESS"
    assert payment["payment_type"] == "EVENT_ORDER"

    stats = await client.get("/api/admin/orders/stats", headers=admin["headers"])
    assert stats.json()["total_revenue"] == 1260.0
    assert stats.json()["by_status"]["PAID"] == 1


async def test_verify_rejects_mismatched_order(client: AsyncClient, coach, admin, fake_gateway):
    event = await create_event(client, coach)
    order = await place_order(client, coach, event["id"])
    await quote(client, admin, order["id"])
    await client.post(f"/api/coach/orders/{order['id']}/create-payment", headers=coach["headers"])

    response = await client.post(f"/api/coach/orders/{order['id']}/verify-payment",
                                 json=signed_payment("order_someone_else"), headers=coach["headers"])

    assert response.status_code == 400


async def test_admin_lists_and_filters_orders(client: AsyncClient, coach, admin):
    first_event = await create_event(client, coach, name="Spring Cup")
    second_event = await create_event(client, coach, name="Autumn Cup")
    await place_order(client, coach, first_event["id"], urgent_delivery=True)
    second = await place_order(client, coach, second_event["id"])
    await quote(client, admin, second["id"])

    everything = await client.get("/api/admin/orders", headers=admin["headers"])
    assert everything.json()["pagination"]["total"] == 2
    assert everything.json()["orders"][0]["urgent_delivery"] is True
    assert everything.json()["summary"]["urgent"] == 1

    confirmed = await client.get("/api/admin/orders", params={"status": "confirmed"}, headers=admin["headers"])
    assert [o["event_name"] for o in confirmed.json()["orders"]] == ["Autumn Cup"]

    searched = await client.get("/api/admin/orders", params={"search": "spring"}, headers=admin["headers"])
    assert searched.json()["pagination"]["total"] == 1


async def test_bulk_status_update(client: AsyncClient, coach, admin):
    event = await create_event(client, coach)
    order = await place_order(client, coach, event["id"])
    missing = str(uuid.uuid4())

    response = await client.put("/api/admin/orders/bulk-update", json={
        "order_ids": [order["id"], missing], "status": "IN_PROGRESS",
    }, headers=admin["headers"])

    assert response.status_code == 200
    assert response.json()["updated"] == [order["id"]]
    assert response.json()["not_found"] == [missing]
    status_value = await database.fetch_val("SELECT status FROM event_orders WHERE id = :id", {"id": order["id"]})
    assert status_value == "IN_PROGRESS"
