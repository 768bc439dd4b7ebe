"""
STAIRS Talent Hub - Test Configuration and Fixtures
"""
import os
import tempfile
from typing import AsyncGenerator

import pytest
from httpx import AsyncClient, ASGITransport
from faker import Faker

# Set testing environment before the app reads its settings
os.environ['APP_ENV'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite:///./test_stairs.db'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['RAZORPAY_KEY_ID'] = 'rzp_test_key'
os.environ['RAZORPAY_KEY_SECRET'] = 'rzp_test_secret'
os.environ['UPLOAD_DIR'] = tempfile.mkdtemp(prefix='stairs-uploads-')
os.environ.pop('SMTP_USER', None)
os.environ.pop('SMTP_PASSWORD', None)
os.environ.pop('SUPABASE_URL', None)

from app.main import app
from app.database import Base, database, engine
from app.services.payment_gateway import payment_gateway
from app import models  # noqa: F401  registers every table on the metadata

from tests.helpers import create_user_with_role, PAID_COACH_PROFILE, APPROVED_PROFILE

fake = Faker('en_IN')


@pytest.fixture(scope='function')
async def db():
    """Fresh schema for each test"""
    Base.metadata.create_all(bind=engine)
    await database.connect()
    yield database
    await database.disconnect()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
async def client(db) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac


@pytest.fixture
def fake_gateway(monkeypatch):
    """Razorpay order creation without the network; returns the created orders"""
    created = []

    async def create_order(amount_paise, receipt, notes=None):
        order = {
            'id': f'order_test{len(created) + 1:06d}',
            'amount': amount_paise,
            'currency': 'INR',
            'receipt': receipt,
            'status': 'created',
        }
        created.append(order)
        return order

    monkeypatch.setattr(payment_gateway, 'create_order', create_order)
    return created


@pytest.fixture
async def admin(db) -> dict:
    return await create_user_with_role('ADMIN', name='Site Admin')


@pytest.fixture
async def student(db) -> dict:
    return await create_user_with_role('STUDENT', name=fake.name(), state='Delhi')


@pytest.fixture
async def coach(db) -> dict:
    """Coach with a paid subscription and admin approval"""
    return await create_user_with_role('COACH', name=fake.name(), state='Delhi', profile=PAID_COACH_PROFILE)


@pytest.fixture
async def unpaid_coach(db) -> dict:
    return await create_user_with_role('COACH', name=fake.name(), state='Delhi')


@pytest.fixture
async def institute(db) -> dict:
    return await create_user_with_role('INSTITUTE', name='Modern Sports Academy', state='Delhi',
                                       profile=APPROVED_PROFILE)
