"""
Shared pytest fixtures.

The database settings must be in the environment before config.py is
imported, so they are set at the top of this file.
"""

import os
import tempfile
from datetime import datetime, timezone
from decimal import Decimal

_DB_DIR = tempfile.mkdtemp(prefix="admin_dashboard_test_")
os.environ["DATABASE_TYPE"] = "sqlite"
os.environ["SQLITE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["SEED_DEMO_DATA"] = "0"

import pytest

from config import PaymentStatus
from database import drop_all_tables, get_session, init_db, Payment, User


def as_utc(value):
    """Naive test timestamps are read as UTC."""
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


@pytest.fixture
def db():
    """Fresh, empty tables for one test."""
    drop_all_tables()
    init_db()
    yield
    drop_all_tables()


@pytest.fixture
def make_user(db):
    def _make_user(email="ann@example.com", display_name=None, **fields):
        with get_session() as session:
            fields = {name: as_utc(value) for name, value in fields.items()}
            user = User(email=email, display_name=display_name, **fields)
            session.add(user)
            session.flush()
            return user.id
    return _make_user


@pytest.fixture
def make_payment(db):
    def _make_payment(user_id, amount="10.00", status=PaymentStatus.COMPLETED,
                      created_at=None, currency="USD", payment_method="Credit Card"):
        with get_session() as session:
            payment = Payment(
                user_id=user_id,
                amount=Decimal(amount),
                currency=currency,
                payment_method=payment_method,
                status=status,
                created_at=as_utc(created_at or datetime(2024, 3, 15, 12, 0)),
            )
            session.add(payment)
            session.flush()
            return payment.id
    return _make_payment
