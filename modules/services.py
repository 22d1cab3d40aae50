"""
CRUD Services for the Admin Dashboard
=====================================

This module provides the data backend operations used by the pages:
- Dashboard metrics and monthly revenue
- User operations (list, create, delete via remote function)
- Payment operations (list, create, update, delete)
- User settings (read with defaults, upsert)

All functions use the session context manager for proper transaction
handling and return a BackendResult instead of raising.

Author: Admin Dashboard Team
"""

import logging
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional

from sqlmodel import Session, select, func
from sqlalchemy.orm import selectinload

from config import Currency, PaymentMethod, PaymentStatus, RECENT_PAYMENTS_LIMIT
from database import get_session, User, Payment, UserSettings, utcnow
from modules.backend import (
    BackendError,
    BackendResult,
    ErrorKind,
    invoke_function,
    remote_function,
    run_backend_call,
)
from modules.records import (
    InvalidRecordError,
    PaymentRecord,
    UserRecord,
    UserSettingsRecord,
    default_user_settings,
    parse_amount,
    parse_status,
    payment_record_from_row,
    settings_record_from_row,
    user_record_from_row,
)
from modules.reporting import MonthlyBucket, aggregate_monthly_revenue, current_year

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')


@dataclass(frozen=True)
class DashboardMetrics:
    user_count: int
    total_revenue: Decimal
    active_subscriptions: int
    pending_payments: int


# =============================================================================
# ROW HELPERS
# =============================================================================

def _payment_to_record(payment: Payment) -> PaymentRecord:
    """Must be called while the payment's session is still open."""
    row = payment.model_dump()
    row["user"] = {"email": payment.user.email} if payment.user else None
    return payment_record_from_row(row)


def _user_to_record(user: User) -> UserRecord:
    return user_record_from_row(user.model_dump())


def validate_email_format(email: str) -> bool:
    return bool(email and EMAIL_PATTERN.match(email))


# =============================================================================
# DASHBOARD AGGREGATION QUERIES
# =============================================================================

def get_dashboard_metrics() -> BackendResult[DashboardMetrics]:
    """
    Get the four numbers shown on the dashboard cards.

    Returns:
        DashboardMetrics with user count, revenue from completed payments,
        users with an active payment status and pending payment count
    """
    def load() -> DashboardMetrics:
        with get_session() as session:
            user_count = session.exec(select(func.count(User.id))).one()
            revenue = session.exec(
                select(func.sum(Payment.amount))
                .where(Payment.status == PaymentStatus.COMPLETED)
            ).one()
            subscriptions = session.exec(
                select(func.count(UserSettings.id))
                .where(UserSettings.payment_status == True)  # noqa: E712
            ).one()
            pending = session.exec(
                select(func.count(Payment.id))
                .where(Payment.status == PaymentStatus.PENDING)
            ).one()

        return DashboardMetrics(
            user_count=user_count or 0,
            total_revenue=Decimal(str(revenue)) if revenue is not None else Decimal(0),
            active_subscriptions=subscriptions or 0,
            pending_payments=pending or 0,
        )

    return run_backend_call("loading dashboard metrics", load)


def get_monthly_revenue(year: Optional[int] = None) -> BackendResult[List[MonthlyBucket]]:
    """
    Get completed-payment revenue per month of a year.

    Args:
        year: Calendar year, defaults to the current one

    Returns:
        12 MonthlyBucket values, Jan..Dec
    """
    target_year = year if year is not None else current_year()

    def load() -> List[MonthlyBucket]:
        with get_session() as session:
            payments = session.exec(
                select(Payment).where(Payment.status == PaymentStatus.COMPLETED)
            ).all()
            records = [payment_record_from_row(p.model_dump()) for p in payments]
        return aggregate_monthly_revenue(records, target_year)

    return run_backend_call("loading monthly revenue", load)


def get_recent_payments(limit: int = RECENT_PAYMENTS_LIMIT) -> BackendResult[List[PaymentRecord]]:
    """Latest payments, newest first, with the payer's email attached."""
    def load() -> List[PaymentRecord]:
        with get_session() as session:
            payments = session.exec(
                select(Payment)
                .options(selectinload(Payment.user))
                .order_by(Payment.created_at.desc())
                .limit(limit)
            ).all()
            return [_payment_to_record(p) for p in payments]

    return run_backend_call("loading recent payments", load)


# =============================================================================
# USER OPERATIONS
# =============================================================================

def list_users() -> BackendResult[List[UserRecord]]:
    """All users, newest first."""
    def load() -> List[UserRecord]:
        with get_session() as session:
            users = session.exec(select(User).order_by(User.created_at.desc())).all()
            return [_user_to_record(u) for u in users]

    return run_backend_call("listing users", load)


def get_user(user_id: str) -> BackendResult[UserRecord]:
    def load() -> UserRecord:
        with get_session() as session:
            user = session.get(User, user_id)
            if not user:
                raise BackendError(ErrorKind.NOT_FOUND, "User not found")
            return _user_to_record(user)

    return run_backend_call("loading user", load)


def create_user(
    email: str,
    password: Optional[str] = None,
    display_name: Optional[str] = None,
) -> BackendResult[UserRecord]:
    """
    Create a user account from the "Add User" form.

    Args:
        email: Must be a valid, not yet registered address
        password: Optional; users without one cannot sign in to the dashboard
        display_name: Optional display name

    Returns:
        The created UserRecord, or a VALIDATION / CONFLICT failure
    """
    from modules.auth import hash_password, validate_password

    email = (email or "").strip().lower()
    if not validate_email_format(email):
        return BackendResult(error=BackendError(ErrorKind.VALIDATION, "Invalid email address"))
    if password:
        problem = validate_password(password)
        if problem:
            return BackendResult(error=BackendError(ErrorKind.VALIDATION, problem))

    def create() -> UserRecord:
        with get_session() as session:
            existing = session.exec(select(User).where(User.email == email)).first()
            if existing:
                raise BackendError(ErrorKind.CONFLICT, f"A user with email {email} already exists")

            user = User(
                email=email,
                display_name=(display_name or "").strip() or None,
                password_hash=hash_password(password) if password else None,
            )
            session.add(user)
            session.flush()
            logger.info(f"Created user: {email}")
            return _user_to_record(user)

    return run_backend_call("creating user", create)


@remote_function("delete-user")
def _delete_user_function(body: Mapping[str, Any]) -> Dict[str, str]:
    """
    Delete a user with their settings and payments.

    Body:
        userId: ID of the user to delete
    """
    user_id = body.get("userId")
    if not user_id:
        raise BackendError(ErrorKind.VALIDATION, "userId is required")

    with get_session() as session:
        user = session.get(User, user_id)
        if not user:
            raise BackendError(ErrorKind.NOT_FOUND, "User not found")
        session.delete(user)  # Cascade deletes settings and payments

    logger.info(f"Deleted user: {user_id}")
    return {"userId": user_id}


def delete_user(user_id: str) -> BackendResult:
    """Delete a user through the delete-user remote function."""
    return invoke_function("delete-user", {"userId": user_id})


# =============================================================================
# PAYMENT OPERATIONS
# =============================================================================

def list_payments() -> BackendResult[List[PaymentRecord]]:
    """All payments, newest first, with the payer's email attached."""
    def load() -> List[PaymentRecord]:
        with get_session() as session:
            payments = session.exec(
                select(Payment)
                .options(selectinload(Payment.user))
                .order_by(Payment.created_at.desc())
            ).all()
            return [_payment_to_record(p) for p in payments]

    return run_backend_call("listing payments", load)


def validate_payment_data(data: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Check and normalize the payment form values.

    Args:
        data: user_id, amount, currency, payment_method, status

    Returns:
        Column values ready for the payments table

    Raises:
        BackendError: VALIDATION with a message for the form
    """
    user_id = data.get("user_id")
    if not user_id:
        raise BackendError(ErrorKind.VALIDATION, "Please select a user")

    try:
        amount = parse_amount(data.get("amount"), record_id=None)
        status = parse_status(data.get("status"), record_id=None)
    except InvalidRecordError as e:
        raise BackendError(ErrorKind.VALIDATION, e.reason.capitalize())

    currency = str(data.get("currency") or "")
    if currency not in {c.value for c in Currency}:
        raise BackendError(ErrorKind.VALIDATION, f"Unsupported currency {currency!r}")

    payment_method = str(data.get("payment_method") or "")
    if payment_method not in {m.value for m in PaymentMethod}:
        raise BackendError(ErrorKind.VALIDATION, f"Unsupported payment method {payment_method!r}")

    return {
        "user_id": str(user_id),
        "amount": amount,
        "currency": currency,
        "payment_method": payment_method,
        "status": status,
    }


def create_payment(data: Mapping[str, Any]) -> BackendResult[PaymentRecord]:
    """Create a payment from the payment form values."""
    def create() -> PaymentRecord:
        values = validate_payment_data(data)
        with get_session() as session:
            if not session.get(User, values["user_id"]):
                raise BackendError(ErrorKind.VALIDATION, "Selected user does not exist")
            payment = Payment(**values)
            session.add(payment)
            session.flush()
            session.refresh(payment)
            return _payment_to_record(payment)

    return run_backend_call("creating payment", create)


def update_payment(payment_id: str, data: Mapping[str, Any]) -> BackendResult[PaymentRecord]:
    """Overwrite a payment's editable fields with the form values."""
    def update() -> PaymentRecord:
        values = validate_payment_data(data)
        with get_session() as session:
            payment = session.get(Payment, payment_id)
            if not payment:
                raise BackendError(ErrorKind.NOT_FOUND, "Payment not found")
            if not session.get(User, values["user_id"]):
                raise BackendError(ErrorKind.VALIDATION, "Selected user does not exist")

            for column, value in values.items():
                setattr(payment, column, value)
            session.add(payment)
            session.flush()
            session.refresh(payment)
            return _payment_to_record(payment)

    return run_backend_call("updating payment", update)


def delete_payment(payment_id: str) -> BackendResult[bool]:
    def delete() -> bool:
        with get_session() as session:
            payment = session.get(Payment, payment_id)
            if not payment:
                raise BackendError(ErrorKind.NOT_FOUND, "Payment not found")
            session.delete(payment)
        return True

    return run_backend_call("deleting payment", delete)


# =============================================================================
# USER SETTINGS
# =============================================================================

def get_user_settings(user_id: str) -> BackendResult[UserSettingsRecord]:
    """
    Get a user's settings.

    Returns defaults (not saved, id None) when the user has no row yet.
    """
    def load() -> UserSettingsRecord:
        with get_session() as session:
            row = session.exec(
                select(UserSettings).where(UserSettings.user_id == user_id)
            ).first()
            if row is None:
                return default_user_settings(user_id)
            return settings_record_from_row(row.model_dump())

    return run_backend_call("loading user settings", load)


def upsert_user_settings(
    session: Session,
    user_id: str,
    payment_status: Optional[bool] = None,
    notification_enable: Optional[bool] = None,
    new_user: Optional[bool] = None,
) -> UserSettings:
    """
    Insert or update a user's settings row inside an open session.

    Flags left as None keep their stored value (or the default for a new
    row). updated_at is always stamped. Nothing is committed here, so the
    caller can combine this write with others in one transaction.
    """
    if not session.get(User, user_id):
        raise BackendError(ErrorKind.NOT_FOUND, "User not found")

    row = session.exec(
        select(UserSettings).where(UserSettings.user_id == user_id)
    ).first()
    if row is None:
        row = UserSettings(user_id=user_id)

    changes = {
        "payment_status": payment_status,
        "notification_enable": notification_enable,
        "new_user": new_user,
    }
    for column, value in changes.items():
        if value is not None:
            setattr(row, column, value)
    row.updated_at = utcnow()

    session.add(row)
    session.flush()
    return row


def save_user_settings(
    user_id: str,
    payment_status: Optional[bool] = None,
    notification_enable: Optional[bool] = None,
    new_user: Optional[bool] = None,
) -> BackendResult[UserSettingsRecord]:
    """Upsert a user's settings row in its own transaction."""
    def save() -> UserSettingsRecord:
        with get_session() as session:
            row = upsert_user_settings(session, user_id, payment_status, notification_enable, new_user)
            return settings_record_from_row(row.model_dump())

    return run_backend_call("saving user settings", save)
