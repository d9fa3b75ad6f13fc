from __future__ import annotations
import uuid
from datetime import datetime, timedelta, timezone

import httpx
import jwt
import pytest

from customer_service.database import Database
from customer_service.errors import DeliveryError
from customer_service.main import create_app
from customer_service.settings import Settings

JWT_SECRET = "test-secret-key-for-customer-service-tests"


class FakeSender:
    """Records notifications; raises DeliveryError for the given customer ids."""

    def __init__(self, fail_for=()):
        self.sent = []
        self.fail_for = {str(c) for c in fail_for}

    async def send_back_in_stock(self, notification):
        if notification.customer_id in self.fail_for:
            raise DeliveryError(f"rejected {notification.customer_id}")
        self.sent.append(notification)


@pytest.fixture
async def database(tmp_path):
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'customer.db'}")
    await db.create_all()
    yield db
    await db.close()


@pytest.fixture
async def session(database):
    async with database.session() as s:
        yield s


@pytest.fixture
def owner():
    return uuid.uuid4()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        JWT_SECRET=JWT_SECRET,
        LOG_DIR=tmp_path / "logs",
        ALLOWED_ORIGINS="http://testserver",
        BACK_IN_STOCK_CLEANUP_DAYS=30,
    )


@pytest.fixture
def sender():
    return FakeSender()


@pytest.fixture
async def client(settings, database, sender):
    app = create_app(settings=settings, database=database, notification_sender=sender)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c


def make_token(user_id, role="customer", secret=JWT_SECRET, expires_in=3600):
    claims = {
        "sub": str(user_id),
        "role": role,
        "email": "jane@example.com",
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    }
    return jwt.encode(claims, secret, algorithm="HS256")


def auth_headers(user_id, role="customer"):
    return {"Authorization": f"Bearer {make_token(user_id, role)}"}


def address_fields(label="Home", **overrides):
    fields = {
        "label": label,
        "recipient_name": "Jane Doe",
        "phone": "+1 555 0100",
        "address_line1": "1 Main St",
        "city": "Springfield",
        "state": "IL",
        "postcode": "62701",
        "country": "USA",
    }
    fields.update(overrides)
    return fields
