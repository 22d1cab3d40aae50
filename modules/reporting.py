"""
Reporting & Filter Utilities
============================

Pure functions the pages call after each fetch:

    - aggregate_monthly_revenue: twelve Jan..Dec buckets for one year
    - filter_records / filter_users / filter_payments: search box and
      status filter of the Users and Payments tables
    - status_color and the format_* helpers used when rendering

None of these touch the database or Streamlit.

Author: Admin Dashboard Team
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, TypeVar, Union

import pandas as pd

from config import ALL_STATUSES, PaymentStatus
from modules.records import PaymentRecord, UserRecord

MONTH_LABELS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
                "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

STATUS_COLORS = {
    "completed": "green",
    "pending": "orange",
    "failed": "red",
}
DEFAULT_STATUS_COLOR = "gray"

Record = TypeVar("Record", PaymentRecord, UserRecord)


@dataclass(frozen=True)
class MonthlyBucket:
    month_label: str
    total: Decimal


def current_year(now: Optional[datetime] = None) -> int:
    """Year of the UTC clock, the same clock the month buckets use."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.year


# =============================================================================
# MONTHLY REVENUE
# =============================================================================

def aggregate_monthly_revenue(
    payments: Iterable[PaymentRecord],
    year: int,
    status: Optional[PaymentStatus] = PaymentStatus.COMPLETED,
) -> List[MonthlyBucket]:
    """
    Sum payment amounts into calendar-month buckets.

    Args:
        payments: Validated payment records, in any order
        year: Only payments created in this year are counted
        status: Only payments with this status are counted; None counts all

    Returns:
        Exactly 12 buckets, Jan..Dec. Months without payments total 0.
    """
    totals = [Decimal(0)] * 12

    for payment in payments:
        if payment.created_at.year != year:
            continue
        if status is not None and payment.status != status:
            continue
        totals[payment.created_at.month - 1] += payment.amount

    return [MonthlyBucket(label, total) for label, total in zip(MONTH_LABELS, totals)]


def monthly_revenue_frame(buckets: Sequence[MonthlyBucket]) -> pd.DataFrame:
    """DataFrame with Month/Revenue columns for the overview bar chart."""
    return pd.DataFrame(
        {
            "Month": [b.month_label for b in buckets],
            "Revenue": [float(b.total) for b in buckets],
        }
    )


def total_revenue(payments: Iterable[PaymentRecord]) -> Decimal:
    """Sum of completed payment amounts."""
    return sum(
        (p.amount for p in payments if p.status == PaymentStatus.COMPLETED),
        Decimal(0),
    )


# =============================================================================
# SEARCH & FILTER
# =============================================================================

def _contains(value: Optional[str], needle: str) -> bool:
    return value is not None and needle in value.lower()


def user_matches(user: UserRecord, query: str) -> bool:
    needle = query.lower()
    return _contains(user.email, needle) or _contains(user.display_name, needle)


def payment_matches(payment: PaymentRecord, query: str, status_filter: Optional[str] = None) -> bool:
    needle = query.lower()
    email = payment.user.email if payment.user else None
    matches_search = (
        _contains(email, needle)
        or _contains(payment.payment_method, needle)
        or _contains(payment.currency, needle)
    )

    if status_filter is None or status_filter.lower() == ALL_STATUSES:
        matches_status = True
    else:
        matches_status = payment.status.value.lower() == status_filter.lower()

    return matches_search and matches_status


def filter_users(users: Iterable[UserRecord], query: str) -> List[UserRecord]:
    """Users whose email or display name contains the query (any case)."""
    return [u for u in users if user_matches(u, query)]


def filter_payments(
    payments: Iterable[PaymentRecord],
    query: str,
    status_filter: Optional[str] = None,
) -> List[PaymentRecord]:
    """
    Payments matching the search box and the status dropdown.

    The query is searched in the payer's email, the payment method and the
    currency. status_filter is compared case-insensitively; None or "all"
    disables it.
    """
    return [p for p in payments if payment_matches(p, query, status_filter)]


def filter_records(
    records: Iterable[Record],
    query: str,
    status_filter: Optional[str] = None,
) -> List[Record]:
    """
    Filter users or payments, keeping their original order.

    The status filter only applies to payments.
    """
    result = []
    for record in records:
        if isinstance(record, PaymentRecord):
            keep = payment_matches(record, query, status_filter)
        elif isinstance(record, UserRecord):
            keep = user_matches(record, query)
        else:
            raise TypeError(f"Cannot filter {type(record).__name__}")
        if keep:
            result.append(record)
    return result


# =============================================================================
# DISPLAY FORMATTING
# =============================================================================

def status_color(status: Union[str, PaymentStatus]) -> str:
    value = status.value if isinstance(status, PaymentStatus) else str(status)
    return STATUS_COLORS.get(value.lower(), DEFAULT_STATUS_COLOR)


def status_badge(status: Union[str, PaymentStatus]) -> str:
    """Streamlit markdown badge, e.g. ':green-background[Completed]'."""
    value = status.value if isinstance(status, PaymentStatus) else str(status)
    return f":{status_color(value)}-background[{value}]"


def format_amount(amount: Union[Decimal, float, int], currency: Optional[str] = None) -> str:
    text = f"{Decimal(str(amount)).quantize(Decimal('0.01'))}"
    return f"{currency} {text}" if currency else text


def format_revenue(amount: Union[Decimal, float, int]) -> str:
    return f"${format_amount(amount)}"


def format_date(value: Optional[datetime], empty: str = "Never") -> str:
    return value.strftime("%Y-%m-%d") if value else empty


def format_datetime(value: Optional[datetime], empty: str = "Never") -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value else empty


def user_label(display_name: Optional[str], email: str) -> str:
    return f"{display_name} ({email})" if display_name else email


def payment_label(payment: PaymentRecord) -> str:
    """Selector text, e.g. '2024-03-15 · ann@example.com · USD 10.00'. Not unique."""
    email = payment.user.email if payment.user and payment.user.email else "Unknown"
    return f"{format_date(payment.created_at)} · {email} · {format_amount(payment.amount, payment.currency)}"


def index_by_id(records: Iterable[Record]) -> Dict[str, Record]:
    """Records keyed by id, in their original order, for id-keyed selectboxes."""
    return {record.id: record for record in records}


def time_ago(value: datetime, now: Optional[datetime] = None) -> str:
    """Relative age like '5 minutes ago' or '3 days ago'."""
    now = now or datetime.now(timezone.utc).replace(tzinfo=None)
    seconds = int((now - value).total_seconds())
    if seconds < 60:
        return "just now"
    for unit, size in (("day", 86400), ("hour", 3600), ("minute", 60)):
        if seconds >= size:
            count = seconds // size
            return f"{count} {unit}{'s' if count != 1 else ''} ago"
