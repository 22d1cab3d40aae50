"""
Configuration Settings for the Admin Dashboard
==============================================

This file contains all configuration variables for the application.
Environment variables are loaded from .env file for security.

Author: Admin Dashboard Team
"""

import os
from enum import Enum

from dotenv import load_dotenv

load_dotenv()

# =============================================================================
# DATABASE CONFIGURATION
# =============================================================================

# For Development (SQLite) - no server needed
SQLITE_URL = os.getenv("SQLITE_URL", "sqlite:///./admin_dashboard.db")

# For Production - the hosted Postgres of the managed data platform
# NEVER hardcode passwords! Use .env file or system environment variables
POSTGRES_URL = os.getenv("DATABASE_URL", SQLITE_URL)

# Options: "sqlite" or "postgresql"
DATABASE_TYPE = os.getenv("DATABASE_TYPE", "sqlite")

# Active database URL based on type
DATABASE_URL = SQLITE_URL if DATABASE_TYPE == "sqlite" else POSTGRES_URL


# =============================================================================
# APPLICATION SETTINGS
# =============================================================================

APP_NAME = os.getenv("APP_NAME", "Admin Dashboard")
APP_VERSION = "1.0.0"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Rows shown in the "Recent Payments" tab
RECENT_PAYMENTS_LIMIT = int(os.getenv("RECENT_PAYMENTS_LIMIT", "5"))

MIN_PASSWORD_LENGTH = 6

# Seed a demo admin and a handful of payments on first start
SEED_DEMO_DATA = os.getenv("SEED_DEMO_DATA", "1") == "1"
DEMO_ADMIN_EMAIL = os.getenv("DEMO_ADMIN_EMAIL", "admin@example.com")
DEMO_ADMIN_PASSWORD = os.getenv("DEMO_ADMIN_PASSWORD", "admin123")

# Sentinel value of the payment status filter that disables it
ALL_STATUSES = "all"


# =============================================================================
# ENUMS - Payment Definitions
# =============================================================================

class PaymentStatus(str, Enum):
    """
    Lifecycle state of a payment.

    Only COMPLETED payments count towards revenue.
    """
    COMPLETED = "Completed"
    PENDING = "Pending"
    FAILED = "Failed"


class Currency(str, Enum):
    USD = "USD"
    EUR = "EUR"
    GBP = "GBP"
    JPY = "JPY"


class PaymentMethod(str, Enum):
    CREDIT_CARD = "Credit Card"
    PAYPAL = "PayPal"
    BANK_TRANSFER = "Bank Transfer"
    CRYPTO = "Crypto"


# Defaults of the "Add Payment" form
DEFAULT_CURRENCY = Currency.USD
DEFAULT_PAYMENT_METHOD = PaymentMethod.CREDIT_CARD
DEFAULT_PAYMENT_STATUS = PaymentStatus.COMPLETED

# Defaults used when a user has no settings row yet
DEFAULT_USER_SETTINGS = {
    "payment_status": False,
    "notification_enable": True,
    "new_user": True,
}
