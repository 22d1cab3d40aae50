"""
Tests for turning backend rows into validated records.
Run with: pytest test_records.py
"""

from datetime import datetime
from decimal import Decimal

import pytest

from config import PaymentStatus
from modules.records import (
    InvalidRecordError,
    default_user_settings,
    payment_record_from_row,
    user_record_from_row,
)


def payment_row(**overrides):
    row = {
        "id": "p1",
        "user_id": "u1",
        "amount": "19.99",
        "currency": "USD",
        "payment_method": "PayPal",
        "status": "Completed",
        "created_at": "2024-03-15T10:30:00Z",
        "user": {"email": "ann@example.com"},
    }
    row.update(overrides)
    return row


def test_payment_row_is_parsed():
    record = payment_record_from_row(payment_row())

    assert record.amount == Decimal("19.99")
    assert record.status is PaymentStatus.COMPLETED
    assert record.created_at == datetime(2024, 3, 15, 10, 30)
    assert record.user.email == "ann@example.com"


def test_status_is_case_insensitive():
    assert payment_record_from_row(payment_row(status="pending")).status is PaymentStatus.PENDING


def test_offset_timestamps_are_converted_to_utc():
    record = payment_record_from_row(payment_row(created_at="2024-01-01T01:00:00+02:00"))

    assert record.created_at == datetime(2023, 12, 31, 23, 0)


def test_payment_without_user():
    assert payment_record_from_row(payment_row(user=None)).user is None


@pytest.mark.parametrize("amount", ["abc", None, True, "-1", "NaN", "Infinity"])
def test_bad_amounts_are_rejected(amount):
    with pytest.raises(InvalidRecordError) as exc_info:
        payment_record_from_row(payment_row(amount=amount))

    assert exc_info.value.kind == "payment"
    assert exc_info.value.record_id == "p1"


@pytest.mark.parametrize("created_at", ["not a date", "", None])
def test_bad_timestamps_are_rejected(created_at):
    with pytest.raises(InvalidRecordError, match="created_at"):
        payment_record_from_row(payment_row(created_at=created_at))


def test_unknown_status_is_rejected():
    with pytest.raises(InvalidRecordError, match="unknown status"):
        payment_record_from_row(payment_row(status="Refunded"))


def test_user_row_is_parsed():
    record = user_record_from_row({
        "id": "u1",
        "email": "ann@example.com",
        "display_name": None,
        "provider": None,
        "last_sign_in_at": None,
        "email_confirmed_at": "2024-02-01T00:00:00",
        "created_at": datetime(2024, 1, 1),
    })

    assert record.last_sign_in_at is None
    assert record.email_confirmed_at == datetime(2024, 2, 1)


def test_user_without_email_is_rejected():
    with pytest.raises(InvalidRecordError, match="email"):
        user_record_from_row({"id": "u1", "email": None, "created_at": datetime(2024, 1, 1)})


def test_default_user_settings():
    settings = default_user_settings("u1")

    assert settings.payment_status is False
    assert settings.notification_enable is True
    assert settings.new_user is True
    assert not settings.is_saved
