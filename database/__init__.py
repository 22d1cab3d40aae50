"""
Database Module for the Admin Dashboard
"""

from .connection import (
    get_session,
    init_db,
    drop_all_tables,
    check_database_connection,
    seed_demo_data
)

from .models import (
    User,
    Payment,
    UserSettings,
    utcnow,
)

__all__ = [
    # Connection
    'get_session',
    'init_db',
    'drop_all_tables',
    'check_database_connection',
    'seed_demo_data',
    # Tables
    'User',
    'Payment',
    'UserSettings',
    'utcnow',
]
