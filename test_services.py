"""
Tests for the data backend services.
Run with: pytest test_services.py
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from sqlmodel import select

from config import PaymentStatus
from database import get_session, Payment, UserSettings
from modules.backend import ErrorKind
from modules.services import (
    create_payment,
    create_user,
    delete_payment,
    delete_user,
    get_dashboard_metrics,
    get_monthly_revenue,
    get_recent_payments,
    get_user_settings,
    list_payments,
    list_users,
    save_user_settings,
    update_payment,
)


def payment_form(user_id, **overrides):
    data = {
        "user_id": user_id,
        "amount": "25.00",
        "currency": "USD",
        "payment_method": "Credit Card",
        "status": "Completed",
    }
    data.update(overrides)
    return data


def count_payments():
    with get_session() as session:
        return len(session.exec(select(Payment)).all())


# =============================================================================
# DASHBOARD
# =============================================================================

def test_metrics_on_empty_database(db):
    metrics = get_dashboard_metrics().unwrap()

    assert metrics.user_count == 0
    assert metrics.total_revenue == 0
    assert metrics.active_subscriptions == 0
    assert metrics.pending_payments == 0


def test_metrics(make_user, make_payment):
    ann = make_user("ann@example.com")
    bob = make_user("bob@example.com")
    make_payment(ann, "100.00")
    make_payment(ann, "50.50")
    make_payment(bob, "999.00", status=PaymentStatus.PENDING)
    make_payment(bob, "1.00", status=PaymentStatus.FAILED)
    save_user_settings(ann, payment_status=True).unwrap()
    save_user_settings(bob, payment_status=False).unwrap()

    metrics = get_dashboard_metrics().unwrap()

    assert metrics.user_count == 2
    assert metrics.total_revenue == Decimal("150.50")
    assert metrics.active_subscriptions == 1
    assert metrics.pending_payments == 1


def test_monthly_revenue_counts_completed_payments_of_the_year(make_user, make_payment):
    ann = make_user()
    make_payment(ann, "100.00", created_at=datetime(2024, 3, 15))
    make_payment(ann, "50.00", created_at=datetime(2023, 3, 15))
    make_payment(ann, "70.00", status=PaymentStatus.PENDING, created_at=datetime(2024, 3, 20))
    make_payment(ann, "8.00", created_at=datetime(2024, 12, 31, 23, 59))

    buckets = get_monthly_revenue(2024).unwrap()

    assert len(buckets) == 12
    assert buckets[2].month_label == "Mar" and buckets[2].total == Decimal("100.00")
    assert buckets[11].total == Decimal("8.00")
    assert sum(b.total for b in buckets) == Decimal("108.00")


def test_recent_payments_are_newest_first_and_limited(make_user, make_payment):
    ann = make_user()
    for day in range(1, 8):
        make_payment(ann, "1.00", created_at=datetime(2024, 1, day))

    recent = get_recent_payments(limit=5).unwrap()

    assert len(recent) == 5
    assert [p.created_at.day for p in recent] == [7, 6, 5, 4, 3]
    assert recent[0].user.email == "ann@example.com"


# =============================================================================
# USERS
# =============================================================================

def test_create_and_list_users(db):
    first = create_user("first@example.com", display_name="First").unwrap()
    create_user("second@example.com").unwrap()

    users = list_users().unwrap()

    assert {u.email for u in users} == {"first@example.com", "second@example.com"}
    assert first.display_name == "First"
    assert first.provider is None


def test_create_user_rejects_duplicates_and_bad_email(db):
    create_user("ann@example.com").unwrap()

    assert create_user("ANN@example.com").error.kind is ErrorKind.CONFLICT
    assert create_user("not-an-email").error.kind is ErrorKind.VALIDATION
    assert create_user("x@example.com", password="123").error.kind is ErrorKind.VALIDATION


def test_delete_user_removes_settings_and_payments(make_user, make_payment):
    ann = make_user()
    bob = make_user("bob@example.com")
    make_payment(ann)
    make_payment(bob)
    save_user_settings(ann, payment_status=True).unwrap()

    result = delete_user(ann)

    assert result.ok
    assert [u.email for u in list_users().unwrap()] == ["bob@example.com"]
    assert count_payments() == 1
    with get_session() as session:
        assert session.exec(select(UserSettings)).all() == []


def test_delete_unknown_user(db):
    assert delete_user("missing").error.kind is ErrorKind.NOT_FOUND


# =============================================================================
# PAYMENTS
# =============================================================================

def test_create_update_delete_payment(make_user):
    ann = make_user()

    created = create_payment(payment_form(ann)).unwrap()
    assert created.amount == Decimal("25.00")
    assert created.user.email == "ann@example.com"

    updated = update_payment(created.id, payment_form(ann, amount="30", status="Pending", currency="EUR")).unwrap()
    assert updated.amount == Decimal("30")
    assert updated.status is PaymentStatus.PENDING
    assert updated.currency == "EUR"

    assert delete_payment(created.id).ok
    assert list_payments().unwrap() == []


def test_invalid_payment_is_not_written(make_user):
    ann = make_user()

    for data in (
        payment_form(ann, amount="-5"),
        payment_form(ann, amount="abc"),
        payment_form(ann, status="Refunded"),
        payment_form(ann, currency="BTC"),
        payment_form(ann, payment_method="Cash"),
        payment_form(None),
        payment_form("missing-user"),
    ):
        assert create_payment(data).error.kind is ErrorKind.VALIDATION

    assert count_payments() == 0


def test_update_and_delete_missing_payment(make_user):
    ann = make_user()

    assert update_payment("missing", payment_form(ann)).error.kind is ErrorKind.NOT_FOUND
    assert delete_payment("missing").error.kind is ErrorKind.NOT_FOUND


def test_list_payments_newest_first(make_user, make_payment):
    ann = make_user()
    make_payment(ann, created_at=datetime(2024, 1, 1))
    make_payment(ann, created_at=datetime(2024, 2, 1))

    payments = list_payments().unwrap()

    assert [p.created_at.month for p in payments] == [2, 1]


# =============================================================================
# USER SETTINGS
# =============================================================================

def test_settings_default_when_missing(make_user):
    ann = make_user()

    settings = get_user_settings(ann).unwrap()

    assert not settings.is_saved
    assert (settings.payment_status, settings.notification_enable, settings.new_user) == (False, True, True)


def test_save_settings_upserts_a_single_row(make_user):
    ann = make_user()

    first = save_user_settings(ann, payment_status=True, notification_enable=False, new_user=False).unwrap()
    second = save_user_settings(ann, payment_status=False).unwrap()

    assert first.id == second.id
    assert second.payment_status is False
    assert second.notification_enable is False
    assert second.updated_at >= first.updated_at
    with get_session() as session:
        assert len(session.exec(select(UserSettings)).all()) == 1

    loaded = get_user_settings(ann).unwrap()
    assert loaded.is_saved and loaded.new_user is False


def test_save_settings_for_unknown_user(db):
    assert save_user_settings("missing", payment_status=True).error.kind is ErrorKind.NOT_FOUND


# =============================================================================
# STORED ROWS
# =============================================================================

def test_timestamps_are_stored_aware_and_read_back_as_naive_utc(db):
    before = datetime.now(timezone.utc).replace(tzinfo=None)

    user = create_user("ann@example.com").unwrap()
    payment = create_payment(payment_form(user.id)).unwrap()
    settings = save_user_settings(user.id, payment_status=True).unwrap()

    after = datetime.now(timezone.utc).replace(tzinfo=None)
    for stamp in (user.created_at, payment.created_at, settings.updated_at):
        assert stamp.tzinfo is None
        assert before - timedelta(seconds=1) <= stamp <= after + timedelta(seconds=1)
    assert get_recent_payments().unwrap()[0].created_at == payment.created_at


def test_malformed_stored_payment_surfaces_as_invalid_record(make_user, make_payment):
    ann = make_user()
    make_payment(ann, "-5.00")

    for result in (list_payments(), get_recent_payments(), get_monthly_revenue(2024)):
        assert result.error.kind is ErrorKind.INVALID_RECORD
        assert "negative amount" in result.error.message
