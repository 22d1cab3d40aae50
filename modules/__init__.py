"""
Modules for the Admin Dashboard
"""

from .reporting import (
    MonthlyBucket,
    aggregate_monthly_revenue,
    filter_records,
    filter_users,
    filter_payments,
    status_color,
)

from .records import (
    InvalidRecordError,
    PaymentRecord,
    UserRecord,
    UserSettingsRecord,
)

__all__ = [
    # Reporting
    'MonthlyBucket',
    'aggregate_monthly_revenue',
    'filter_records',
    'filter_users',
    'filter_payments',
    'status_color',
    # Records
    'InvalidRecordError',
    'PaymentRecord',
    'UserRecord',
    'UserSettingsRecord',
]
