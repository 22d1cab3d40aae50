"""
Admin Dashboard - Main Application
==================================

This is the main entry point for the Streamlit application.
Run with: streamlit run app.py

Shows the sign-in form, then the dashboard: metric cards, the monthly
revenue chart and the most recent payments.

Author: Admin Dashboard Team
"""

import streamlit as st
import plotly.express as px

# Page configuration - MUST be first Streamlit command
st.set_page_config(
    page_title="Admin Dashboard",
    page_icon="📊",
    layout="wide",
    initial_sidebar_state="expanded"
)

from modules.auth import require_auth
from modules.reporting import (
    current_year,
    format_amount,
    time_ago,
    format_revenue,
    monthly_revenue_frame,
    status_badge,
    user_label,
)
from modules.services import (
    get_dashboard_metrics,
    get_monthly_revenue,
    get_recent_payments,
    list_users,
)
from modules.ui import initialize_database, page_header, render_sidebar, unwrap_or_default


# =============================================================================
# DASHBOARD SECTIONS
# =============================================================================

def show_metric_cards():
    """The four summary cards."""
    with st.spinner("Loading dashboard..."):
        metrics = unwrap_or_default("fetching dashboard data", get_dashboard_metrics())

    if metrics is None:
        return

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Total Users", f"+{metrics.user_count}", help="Active user accounts")
    with col2:
        st.metric("Total Revenue", format_revenue(metrics.total_revenue), help="From completed payments")
    with col3:
        st.metric("Active Subscriptions", f"+{metrics.active_subscriptions}",
                  help="Users with active payment status")
    with col4:
        st.metric("Pending Payments", f"+{metrics.pending_payments}", help="Payments awaiting completion")


def show_overview():
    """Monthly revenue bar chart for the current year."""
    year = current_year()
    st.subheader("Revenue Overview")
    st.caption(f"Monthly revenue for {year}")

    buckets = unwrap_or_default("fetching monthly revenue", get_monthly_revenue(year))
    if buckets is None:
        return

    df = monthly_revenue_frame(buckets)
    fig = px.bar(df, x="Month", y="Revenue")
    fig.update_traces(hovertemplate="Month: %{x}<br>Revenue: $%{y:.2f}<extra></extra>")
    fig.update_layout(yaxis_tickprefix="$", xaxis_title=None, yaxis_title=None, height=350)
    st.plotly_chart(fig, width='stretch')


def show_recent_payments():
    """The latest payments with payer and status."""
    st.subheader("Recent Payments")
    st.caption("Latest payment transactions")

    payments = unwrap_or_default("fetching recent payments", get_recent_payments())
    users = unwrap_or_default("fetching users", list_users(), default=[])
    if payments is None:
        return
    if not payments:
        st.info("No recent payments found.")
        return

    labels = {u.id: user_label(u.display_name, u.email) for u in users}
    for payment in payments:
        col1, col2, col3, col4 = st.columns([4, 2, 2, 2])
        col1.write(labels.get(payment.user_id, "Unknown"))
        col2.write(format_amount(payment.amount, payment.currency))
        col3.markdown(status_badge(payment.status))
        col4.caption(time_ago(payment.created_at))


# =============================================================================
# MAIN APPLICATION
# =============================================================================

def main():
    """Main application entry point."""
    initialize_database()

    actor = require_auth()
    if actor is None:
        st.stop()

    render_sidebar(actor)
    page_header("Dashboard", "Overview of your system and recent activity")

    show_metric_cards()

    tab_overview, tab_recent = st.tabs(["Overview", "Recent Payments"])
    with tab_overview:
        show_overview()
    with tab_recent:
        show_recent_payments()


if __name__ == "__main__":
    main()
