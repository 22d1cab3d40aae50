"""
Read-only Records
=================

Validated snapshots of the rows the data backend returns. Pages and the
reporting utilities only ever see these records, never ORM objects, so
malformed rows are rejected here (InvalidRecordError) instead of being
coerced somewhere downstream.

Author: Admin Dashboard Team
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

from config import PaymentStatus, DEFAULT_USER_SETTINGS


class InvalidRecordError(ValueError):
    """A row from the data backend could not be turned into a record."""

    def __init__(self, kind: str, record_id: Any, reason: str):
        self.kind = kind
        self.record_id = record_id
        self.reason = reason
        super().__init__(f"Invalid {kind} record {record_id!r}: {reason}")


# =============================================================================
# RECORD TYPES
# =============================================================================

@dataclass(frozen=True)
class PaymentUser:
    email: Optional[str]


@dataclass(frozen=True)
class PaymentRecord:
    id: str
    user_id: str
    amount: Decimal
    currency: str
    payment_method: str
    status: PaymentStatus
    created_at: datetime
    user: Optional[PaymentUser] = None


@dataclass(frozen=True)
class UserRecord:
    id: str
    email: str
    display_name: Optional[str]
    provider: Optional[str]
    last_sign_in_at: Optional[datetime]
    email_confirmed_at: Optional[datetime]
    created_at: datetime


@dataclass(frozen=True)
class UserSettingsRecord:
    user_id: str
    payment_status: bool
    notification_enable: bool
    new_user: bool
    id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_saved(self) -> bool:
        return self.id is not None


def default_user_settings(user_id: str) -> UserSettingsRecord:
    """Settings shown for a user that never saved any."""
    return UserSettingsRecord(user_id=user_id, **DEFAULT_USER_SETTINGS)


# =============================================================================
# FIELD PARSERS
# =============================================================================

def parse_timestamp(value: Any, *, kind: str, record_id: Any, field: str) -> datetime:
    """
    Parse a timestamp column.

    Accepts datetime objects and ISO-8601 strings (a trailing "Z" is
    read as UTC). Timezone-aware values are returned as naive UTC.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise InvalidRecordError(kind, record_id, f"unparseable {field} {value!r}")
    else:
        raise InvalidRecordError(kind, record_id, f"missing {field}")

    if parsed.tzinfo is not None:
        parsed = (parsed - parsed.utcoffset()).replace(tzinfo=None)
    return parsed


def parse_optional_timestamp(value: Any, *, kind: str, record_id: Any, field: str) -> Optional[datetime]:
    if value is None or value == "":
        return None
    return parse_timestamp(value, kind=kind, record_id=record_id, field=field)


def parse_amount(value: Any, *, record_id: Any) -> Decimal:
    """Parse a payment amount. Must be a finite, non-negative number."""
    if isinstance(value, bool) or value is None:
        raise InvalidRecordError("payment", record_id, f"non-numeric amount {value!r}")
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise InvalidRecordError("payment", record_id, f"non-numeric amount {value!r}")
    if not amount.is_finite():
        raise InvalidRecordError("payment", record_id, f"non-numeric amount {value!r}")
    if amount < 0:
        raise InvalidRecordError("payment", record_id, f"negative amount {value!r}")
    return amount


def parse_status(value: Any, *, record_id: Any) -> PaymentStatus:
    """Parse a payment status, case-insensitive."""
    if isinstance(value, PaymentStatus):
        return value
    for status in PaymentStatus:
        if isinstance(value, str) and value.strip().lower() == status.value.lower():
            return status
    raise InvalidRecordError("payment", record_id, f"unknown status {value!r}")


# =============================================================================
# ROW CONVERSION
# =============================================================================

def payment_record_from_row(row: Mapping[str, Any]) -> PaymentRecord:
    """
    Build a PaymentRecord from a backend row.

    Args:
        row: Mapping with the payments columns; an optional "user" entry
             holds a mapping with the payer's "email".

    Raises:
        InvalidRecordError: amount, status or created_at is malformed
    """
    record_id = row.get("id")
    user = row.get("user")
    return PaymentRecord(
        id=str(record_id),
        user_id=str(row.get("user_id") or ""),
        amount=parse_amount(row.get("amount"), record_id=record_id),
        currency=str(row.get("currency") or ""),
        payment_method=str(row.get("payment_method") or ""),
        status=parse_status(row.get("status"), record_id=record_id),
        created_at=parse_timestamp(row.get("created_at"), kind="payment", record_id=record_id, field="created_at"),
        user=PaymentUser(email=user.get("email")) if user else None,
    )


def user_record_from_row(row: Mapping[str, Any]) -> UserRecord:
    """Build a UserRecord from a backend row."""
    record_id = row.get("id")
    email = row.get("email")
    if not email:
        raise InvalidRecordError("user", record_id, "missing email")
    return UserRecord(
        id=str(record_id),
        email=email,
        display_name=row.get("display_name"),
        provider=row.get("provider"),
        last_sign_in_at=parse_optional_timestamp(
            row.get("last_sign_in_at"), kind="user", record_id=record_id, field="last_sign_in_at"
        ),
        email_confirmed_at=parse_optional_timestamp(
            row.get("email_confirmed_at"), kind="user", record_id=record_id, field="email_confirmed_at"
        ),
        created_at=parse_timestamp(row.get("created_at"), kind="user", record_id=record_id, field="created_at"),
    )


def settings_record_from_row(row: Mapping[str, Any]) -> UserSettingsRecord:
    record_id = row.get("id")
    return UserSettingsRecord(
        id=record_id,
        user_id=str(row.get("user_id")),
        payment_status=bool(row.get("payment_status")),
        notification_enable=bool(row.get("notification_enable")),
        new_user=bool(row.get("new_user")),
        created_at=parse_optional_timestamp(
            row.get("created_at"), kind="settings", record_id=record_id, field="created_at"
        ),
        updated_at=parse_optional_timestamp(
            row.get("updated_at"), kind="settings", record_id=record_id, field="updated_at"
        ),
    )
