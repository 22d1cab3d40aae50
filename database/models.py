"""
Database Models for the Admin Dashboard
=======================================

This file defines all database tables using SQLModel (SQLAlchemy + Pydantic).
SQLModel provides both database ORM and data validation in one package.

Tables:
    - User: Accounts managed from the Users page (and dashboard admins)
    - Payment: Payment transactions, one user each
    - UserSettings: Per-user flags (payment status, notifications, onboarding)

Author: Admin Dashboard Team
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String, Enum as SAEnum

from config import PaymentStatus


def utcnow() -> datetime:
    """Timezone-aware UTC timestamp, as stored in every table."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


# =============================================================================
# USER MODEL
# =============================================================================

class User(SQLModel, table=True):
    """
    User accounts.

    Attributes:
        id: UUID primary key (string)
        email: Unique login email
        display_name: Optional display name
        provider: Sign-in provider, None means plain email/password
        password_hash: Bcrypt hashed password (never store plain text!)
        is_active: Whether user can sign in
        last_sign_in_at: Last successful sign in
        email_confirmed_at: When the email address was confirmed
        created_at: Account creation timestamp

    Relationships:
        payments: Payments made by this user (deleted with the user)
        settings: UserSettings row, if one was saved
    """
    __tablename__ = "users"

    id: str = Field(
        default_factory=new_id,
        sa_column=Column(String(36), primary_key=True),
    )
    email: str = Field(
        sa_column=Column(String(255), unique=True, nullable=False, index=True),
        description="User email address"
    )
    display_name: Optional[str] = Field(
        sa_column=Column(String(100)),
        default=None,
        description="User's display name"
    )
    provider: Optional[str] = Field(
        sa_column=Column(String(50)),
        default=None,
        description="Auth provider (email when empty)"
    )
    password_hash: Optional[str] = Field(
        sa_column=Column(String(255)),
        default=None,
        description="Bcrypt hashed password"
    )
    is_active: bool = Field(
        default=True,
        description="Whether user account is active"
    )

    # Timestamps
    last_sign_in_at: Optional[datetime] = Field(
        sa_column=Column(DateTime(timezone=True)),
        default=None,
    )
    email_confirmed_at: Optional[datetime] = Field(
        sa_column=Column(DateTime(timezone=True)),
        default=None,
    )
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
        description="Account creation timestamp"
    )

    payments: List["Payment"] = Relationship(
        back_populates="user",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"}
    )
    settings: Optional["UserSettings"] = Relationship(
        back_populates="user",
        sa_relationship_kwargs={"cascade": "all, delete-orphan", "uselist": False}
    )


# =============================================================================
# PAYMENT MODEL
# =============================================================================

class Payment(SQLModel, table=True):
    """
    A payment transaction.

    Only payments with status COMPLETED count towards revenue.
    """
    __tablename__ = "payments"

    id: str = Field(
        default_factory=new_id,
        sa_column=Column(String(36), primary_key=True),
    )
    user_id: str = Field(
        sa_column=Column(
            String(36),
            ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        description="User who made the payment"
    )
    amount: Decimal = Field(
        sa_column=Column(Numeric(12, 2), nullable=False),
        description="Payment amount, never negative"
    )
    currency: str = Field(
        sa_column=Column(String(3), nullable=False),
        default="USD"
    )
    payment_method: str = Field(
        sa_column=Column(String(50), nullable=False),
        default="Credit Card"
    )
    status: PaymentStatus = Field(
        sa_column=Column(
            SAEnum(PaymentStatus, values_callable=lambda e: [m.value for m in e]),
            nullable=False,
            index=True,
        ),
        default=PaymentStatus.COMPLETED,
    )
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True),
    )

    user: Optional[User] = Relationship(back_populates="payments")


# =============================================================================
# USER SETTINGS MODEL
# =============================================================================

class UserSettings(SQLModel, table=True):
    """
    Per-user settings. At most one row per user.

    Attributes:
        payment_status: User has an active (paid) subscription
        notification_enable: Email notifications enabled
        new_user: User still goes through onboarding
    """
    __tablename__ = "user_settings"

    id: str = Field(
        default_factory=new_id,
        sa_column=Column(String(36), primary_key=True),
    )
    user_id: str = Field(
        sa_column=Column(
            String(36),
            ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        ),
    )
    payment_status: bool = Field(default=False, index=True)
    notification_enable: bool = Field(default=True)
    new_user: bool = Field(default=True)
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )

    user: Optional[User] = Relationship(back_populates="settings")
