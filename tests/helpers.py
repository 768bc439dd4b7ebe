"""
Shared test helpers: seeded accounts, tokens and common flows
"""
import uuid
from datetime import timedelta
from typing import Optional

from app.database import database
from app.services.auth_service import auth_service, build_token
from app.services.payment_gateway import payment_gateway
from app.utils.datetime_ist import IST, utc_now

DEFAULT_PASSWORD = 'Passw0rd!'

PAID_COACH_PROFILE = {'payment_status': 'SUCCESS', 'is_active': True, 'approval_status': 'APPROVED'}
APPROVED_PROFILE = {'payment_status': 'SUCCESS', 'approval_status': 'APPROVED'}


async def create_user_with_role(
    role: str,
    name: str = 'Test User',
    state: Optional[str] = None,
    email: Optional[str] = None,
    profile: Optional[dict] = None,
) -> dict:
    """Insert a verified account and return its ids, token and auth headers"""
    email = email or f'{role.lower()}-{uuid.uuid4().hex[:10]}@example.com'
    async with database.transaction():
        created = await auth_service.create_user(
            role=role,
            email=email,
            password=DEFAULT_PASSWORD,
            name=name,
            state=state,
            profile=profile,
        )
    token = build_token({
        'id': created['user_id'],
        'email': email,
        'role': role,
        'unique_id': created['unique_id'],
    })
    return {
        'id': created['user_id'],
        'unique_id': created['unique_id'],
        'profile_id': created['profile_id'],
        'email': email,
        'name': name,
        'token': token,
        'headers': {'Authorization': f'Bearer {token}'},
    }


def ist_string(days: int = 0, hours: int = 0) -> str:
    """IST wall-clock string offset from now"""
    moment = (utc_now() + timedelta(days=days, hours=hours)).astimezone(IST)
    return moment.strftime('%Y-%m-%dT%H:%M:%S')


def event_payload(**overrides) -> dict:
    payload = {
        'name': 'Delhi Junior Football Cup',
        'description': 'Under 16 knockout',
        'sport': 'Football',
        'venue': 'Jawaharlal Nehru Stadium',
        'city': 'Delhi',
        'state': 'Delhi',
        'start_date': ist_string(days=10),
        'end_date': ist_string(days=11),
        'registration_deadline': ist_string(days=8),
        'max_participants': 50,
        'event_fee': 500,
    }
    payload.update(overrides)
    return payload


def signed_payment(order_id: str, payment_id: str = 'pay_test000001') -> dict:
    return {
        'razorpay_order_id': order_id,
        'razorpay_payment_id': payment_id,
        'razorpay_signature': payment_gateway.generate_signature(order_id, payment_id),
    }


async def create_event(client, owner: dict, **overrides) -> dict:
    response = await client.post('/api/events', json=event_payload(**overrides), headers=owner['headers'])
    assert response.status_code == 201, response.text
    return response.json()['event']


async def approve_event(client, admin: dict, event_id: str) -> dict:
    response = await client.put(
        f'/api/admin/events/{event_id}/moderate',
        json={'action': 'APPROVE', 'admin_notes': 'Looks good'},
        headers=admin['headers'],
    )
    assert response.status_code == 200, response.text
    return response.json()


async def connect_student(coach: dict, student: dict) -> None:
    """Accepted coach/student link written straight to the table"""
    now = utc_now()
    await database.execute(
        """
        INSERT INTO coach_students (id, coach_id, student_id, status, initiated_by, created_at, updated_at)
        VALUES (:id, :cid, :sid, 'ACCEPTED', 'STUDENT', :now, :now)
        """,
        {'id': str(uuid.uuid4()), 'cid': coach['profile_id'], 'sid': student['profile_id'], 'now': now}
    )
