"""
Database Connection Manager for the Admin Dashboard
===================================================

This module handles all database connections using SQLModel/SQLAlchemy.
Supports both SQLite (development) and the hosted PostgreSQL of the
managed data platform (production).

Usage:
    from database.connection import get_session, init_db

    # Initialize database (creates tables)
    init_db()

    with get_session() as session:
        users = session.exec(select(User)).all()

Author: Admin Dashboard Team
"""

import logging
from contextlib import contextmanager
from datetime import timedelta
from decimal import Decimal
from typing import Generator

from sqlmodel import SQLModel, Session, create_engine, select, text
from sqlalchemy import event
from sqlalchemy.engine import Engine

from config import (
    DATABASE_URL,
    DATABASE_TYPE,
    DEMO_ADMIN_EMAIL,
    DEMO_ADMIN_PASSWORD,
    LOG_LEVEL,
    PaymentStatus,
)

# Set up logging
logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


# =============================================================================
# ENGINE CONFIGURATION
# =============================================================================

def get_engine_args() -> dict:
    """
    Get database-specific engine arguments.

    SQLite needs special handling for multi-threading in Streamlit.
    PostgreSQL uses connection pooling.

    Returns:
        Dictionary of engine configuration arguments
    """
    if DATABASE_TYPE == "sqlite":
        return {
            # Streamlit runs each session in its own thread
            "connect_args": {"check_same_thread": False},
            "echo": False,
        }
    else:
        return {
            "pool_size": 5,
            "max_overflow": 10,
            "pool_timeout": 30,
            "pool_recycle": 1800,        # Hosted Postgres drops idle connections
            "pool_pre_ping": True,
            "echo": False,
        }


engine = create_engine(DATABASE_URL, **get_engine_args())


# =============================================================================
# SQLITE FOREIGN KEY ENFORCEMENT
# =============================================================================

@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """
    Enable foreign key constraints for SQLite connections.
    This runs automatically when a new connection is created.
    """
    if DATABASE_TYPE == "sqlite":
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA busy_timeout=5000")
        cursor.close()


# =============================================================================
# SESSION MANAGEMENT
# =============================================================================

@contextmanager
def get_session() -> Generator[Session, None, None]:
    """
    Context manager for database sessions.

    Automatically handles commit/rollback and session cleanup.

    Usage:
        with get_session() as session:
            user = session.get(User, user_id)
            session.add(new_payment)
            # Auto-commits on exit, rolls back on exception

    Yields:
        SQLModel Session object

    Raises:
        Exception: Re-raises any database exceptions after rollback
    """
    session = Session(engine, expire_on_commit=False)
    try:
        yield session
        session.commit()
    except Exception as e:
        session.rollback()
        logger.error(f"Database error: {str(e)}")
        raise
    finally:
        session.close()


# =============================================================================
# DATABASE INITIALIZATION
# =============================================================================

def init_db() -> None:
    """
    Initialize the database by creating all tables.

    Idempotent: existing tables and data are not affected.
    """
    # Import models to register them with SQLModel
    from .models import User, Payment, UserSettings  # noqa: F401

    logger.info(f"Initializing database: {DATABASE_TYPE}")
    logger.info(f"Connection URL: {DATABASE_URL.split('@')[-1] if '@' in DATABASE_URL else DATABASE_URL}")

    SQLModel.metadata.create_all(engine)
    logger.info("Database tables created successfully")


def drop_all_tables() -> None:
    """
    DROP ALL TABLES - USE WITH EXTREME CAUTION!

    Only meant for development/test database resets.
    """
    logger.warning("Dropping all tables")
    SQLModel.metadata.drop_all(engine)


# =============================================================================
# HEALTH CHECK
# =============================================================================

def check_database_connection() -> bool:
    """
    Test the database connection.

    Returns:
        True if connection successful, False otherwise
    """
    try:
        with get_session() as session:
            session.exec(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {str(e)}")
        return False


# =============================================================================
# SEEDING (Development Only)
# =============================================================================

def seed_demo_data() -> None:
    """
    Create the demo admin account and a few sample payments.

    Does nothing if the admin already exists.
    """
    from .models import User, Payment, UserSettings, utcnow
    from modules.auth import hash_password

    with get_session() as session:
        existing = session.exec(
            select(User).where(User.email == DEMO_ADMIN_EMAIL)
        ).first()
        if existing:
            logger.info(f"User already exists: {DEMO_ADMIN_EMAIL}")
            return

        now = utcnow()
        admin = User(
            email=DEMO_ADMIN_EMAIL,
            display_name="System Admin",
            password_hash=hash_password(DEMO_ADMIN_PASSWORD),
            email_confirmed_at=now,
        )
        customer = User(email="customer@example.com", display_name="Demo Customer")
        session.add(admin)
        session.add(customer)
        session.flush()

        session.add(UserSettings(user_id=customer.id, payment_status=True, new_user=False))

        samples = [
            (Decimal("49.99"), "USD", "Credit Card", PaymentStatus.COMPLETED, 3),
            (Decimal("19.00"), "EUR", "PayPal", PaymentStatus.COMPLETED, 40),
            (Decimal("120.00"), "USD", "Bank Transfer", PaymentStatus.PENDING, 1),
            (Decimal("5.50"), "GBP", "Crypto", PaymentStatus.FAILED, 12),
        ]
        for amount, currency, method, status, days_ago in samples:
            session.add(Payment(
                user_id=customer.id,
                amount=amount,
                currency=currency,
                payment_method=method,
                status=status,
                created_at=now - timedelta(days=days_ago),
            ))

        logger.info(f"Created user: {DEMO_ADMIN_EMAIL}")

    logger.info("Demo data seeded successfully")
