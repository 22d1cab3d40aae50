"""
Shared Streamlit Layout
=======================

Sidebar navigation, appearance and error helpers used by app.py and
every page under pages/.

Author: Admin Dashboard Team
"""

from typing import Optional

import streamlit as st

from config import APP_NAME, APP_VERSION, SEED_DEMO_DATA
from database import init_db, check_database_connection, seed_demo_data
from modules.auth import Actor, sign_out
from modules.backend import BackendResult

NAV_ITEMS = [
    ("app.py", "Dashboard", "📊"),
    ("pages/1_👥_Users.py", "Users", "👥"),
    ("pages/2_💳_Payments.py", "Payments", "💳"),
    ("pages/3_⚙️_Settings.py", "Settings", "⚙️"),
]

DARK_MODE_CSS = """
<style>
.stApp, [data-testid="stSidebar"] {background-color: #0f172a; color: #e5e7eb;}
.stApp h1, .stApp h2, .stApp h3, .stApp p, .stApp label {color: #e5e7eb;}
[data-testid="stMetricValue"] {color: #f9fafb;}
</style>
"""


@st.cache_resource
def initialize_database():
    """Create tables and seed demo data (runs once per process)."""
    init_db()
    if SEED_DEMO_DATA:
        seed_demo_data()
    return True


def apply_appearance():
    if st.session_state.get("dark_mode"):
        st.markdown(DARK_MODE_CSS, unsafe_allow_html=True)


def render_sidebar(actor: Actor):
    """Sidebar with navigation, connection status and sign out."""
    apply_appearance()

    with st.sidebar:
        st.title(APP_NAME)
        st.caption(f"Version {APP_VERSION}")

        if check_database_connection():
            st.success("🟢 Database Connected")
        else:
            st.error("🔴 Database Error")

        st.divider()
        for path, label, icon in NAV_ITEMS:
            st.page_link(path, label=label, icon=icon)

        st.divider()
        st.write(f"👤 **{actor.label}**")
        st.caption(actor.email)
        if st.button("Sign out", key="sidebar_sign_out"):
            sign_out()
            st.success("You have been successfully signed out")
            st.rerun()


def page_header(title: str, caption: str):
    st.title(title)
    st.caption(caption)


def show_error(action: str, result: BackendResult) -> bool:
    """
    Show st.error for a failed result.

    Returns:
        True if an error was shown
    """
    if result.ok:
        return False
    st.error(f"Error {action}: {result.error.message}")
    return True


def unwrap_or_default(action: str, result: BackendResult, default: Optional[object] = None):
    """Data of a successful result; on failure show the error and return default."""
    if show_error(action, result):
        return default
    return result.data
