"""
Authentication Utilities for the Admin Dashboard
================================================

Password hashing with bcrypt, sign-in and account updates for the
signed-in administrator (the "actor").

The actor is an explicit value: pages read it once with current_actor()
and pass it to every function that needs to know who is acting.
st.session_state is touched only by the helpers at the bottom of this
file.

Usage:
    from modules.auth import require_auth

    actor = require_auth()
    if actor is None:
        st.stop()

Author: Admin Dashboard Team
"""

import logging
from dataclasses import dataclass
from typing import Optional

import bcrypt
from sqlmodel import select

from config import MIN_PASSWORD_LENGTH
from database import get_session, User, utcnow
from modules.backend import BackendError, BackendResult, ErrorKind, failure, run_backend_call
from modules.services import upsert_user_settings, validate_email_format

logger = logging.getLogger(__name__)

SESSION_KEY = "actor"


@dataclass(frozen=True)
class Actor:
    """The administrator currently using the dashboard."""
    id: str
    email: str
    display_name: Optional[str] = None

    @property
    def label(self) -> str:
        return self.display_name or self.email


# =============================================================================
# PASSWORD HASHING
# =============================================================================

def hash_password(password: str) -> str:
    """
    Hash a password for secure storage.

    Args:
        password: Plain text password

    Returns:
        Bcrypt hash as a string
    """
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, hashed: Optional[str]) -> bool:
    """
    Verify a password against its hash.

    Returns:
        True if password matches, False otherwise (also for a missing or
        malformed hash)
    """
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), hashed.encode('utf-8'))
    except ValueError:
        logger.warning("Stored password hash is not a bcrypt hash")
        return False


def validate_password(password: str, confirm_password: Optional[str] = None) -> Optional[str]:
    """Return a problem description, or None if the password is acceptable."""
    if confirm_password is not None and password != confirm_password:
        return "Passwords don't match"
    if len(password or "") < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    return None


# =============================================================================
# ACCOUNT OPERATIONS
# =============================================================================

def sign_in(email: str, password: str) -> BackendResult[Actor]:
    """
    Authenticate by email and password.

    Stamps last_sign_in_at on success.

    Returns:
        The Actor, or an UNAUTHORIZED failure
    """
    email = (email or "").strip().lower()

    def authenticate() -> Actor:
        with get_session() as session:
            user = session.exec(select(User).where(User.email == email)).first()
            if not user or not user.is_active or not verify_password(password, user.password_hash):
                raise BackendError(ErrorKind.UNAUTHORIZED, "Invalid email or password")

            user.last_sign_in_at = utcnow()
            session.add(user)
            logger.info(f"Signed in: {email}")
            return Actor(id=user.id, email=user.email, display_name=user.display_name)

    return run_backend_call("signing in", authenticate)


def update_profile(actor: Actor, email: str, email_notifications: bool) -> BackendResult[Actor]:
    """
    Change the actor's email and notification preference.

    Both writes share one transaction: if either fails, neither is stored.

    Returns:
        The updated Actor
    """
    email = (email or "").strip().lower()
    if not validate_email_format(email):
        return failure(ErrorKind.VALIDATION, "Invalid email address")

    def update() -> Actor:
        with get_session() as session:
            user = session.get(User, actor.id)
            if not user:
                raise BackendError(ErrorKind.NOT_FOUND, "User not found")

            if email != user.email:
                taken = session.exec(select(User).where(User.email == email)).first()
                if taken:
                    raise BackendError(ErrorKind.CONFLICT, f"{email} is already in use")
                user.email = email
                session.add(user)

            upsert_user_settings(session, user.id, notification_enable=email_notifications)
            return Actor(id=user.id, email=user.email, display_name=user.display_name)

    return run_backend_call("updating profile", update)


def update_password(actor: Actor, password: str, confirm_password: str) -> BackendResult[bool]:
    problem = validate_password(password, confirm_password)
    if problem:
        return failure(ErrorKind.VALIDATION, problem)

    def update() -> bool:
        with get_session() as session:
            user = session.get(User, actor.id)
            if not user:
                raise BackendError(ErrorKind.NOT_FOUND, "User not found")
            user.password_hash = hash_password(password)
            session.add(user)
        logger.info(f"Password updated: {actor.email}")
        return True

    return run_backend_call("updating password", update)


# =============================================================================
# STREAMLIT SESSION HELPERS
# =============================================================================

def current_actor() -> Optional[Actor]:
    """Get the signed-in actor, if any."""
    import streamlit as st

    return st.session_state.get(SESSION_KEY)


def remember_actor(actor: Actor) -> None:
    import streamlit as st

    st.session_state[SESSION_KEY] = actor


def sign_out() -> None:
    """Forget the signed-in actor."""
    import streamlit as st

    actor = st.session_state.pop(SESSION_KEY, None)
    if actor:
        logger.info(f"Signed out: {actor.email}")


def require_auth() -> Optional[Actor]:
    """
    Return the signed-in actor, or show the login form and return None.

    Usage in Streamlit page:
        actor = require_auth()
        if actor is None:
            st.stop()
    """
    import streamlit as st

    actor = current_actor()
    if actor is not None:
        return actor

    st.title("🔐 Sign in")
    st.caption("Enter your credentials to access the dashboard")

    with st.form("login_form"):
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in")

        if submitted:
            result = sign_in(email, password)
            if result.ok:
                remember_actor(result.data)
                st.rerun()
            else:
                st.error(result.error.message)

    return None
