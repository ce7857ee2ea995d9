"""
Streamlit Frontend for Expense Tracker

A thin presentation layer. Every button maps to one StateManager operation
or one derivation query; no numbers are computed here.

DESIGN PRINCIPLES:
1. Read state from the manager, derive views on every render
2. Every user intent goes through the manager (validated and persisted)
3. Every outcome is reported with a short toast
"""

from datetime import date

import streamlit as st

from expense_tracker.config import get_settings
from expense_tracker.manager import StateManager, create_tracker
from expense_tracker.models import Theme, TransactionKind
from expense_tracker.reports import (
    budget_usage,
    expenses_by_category,
    goal_progress,
    monthly_series,
    recent_transactions,
    sorted_transactions,
    summary,
)
from expense_tracker.services.storage import StorageWriteError
from expense_tracker.transfer import ImportFormatError, export_snapshot
from expense_tracker.validation import ValidationError


# Page configuration
st.set_page_config(
    page_title="Expense Tracker",
    page_icon="💸",
    layout="wide",
    initial_sidebar_state="expanded",
)

LIGHT_THEME_CSS = """
<style>
    .stApp { background-color: #f5f7fb; color: #1d2433; }
</style>
"""


@st.cache_resource
def get_manager() -> StateManager:
    """Create the state manager once per server process."""
    manager = create_tracker(use_file_storage=True)
    if manager.load_error:
        st.toast("Unable to read saved data. Using defaults.", icon="⚠️")
    return manager


def format_currency(value) -> str:
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def main():
    """Main application entry point."""
    manager = get_manager()

    if manager.state.settings.theme == Theme.LIGHT:
        st.markdown(LIGHT_THEME_CSS, unsafe_allow_html=True)

    st.sidebar.title("💸 Expense Tracker")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Dashboard", "🧾 Transactions", "🎯 Goals", "⚙️ Settings"],
        index=0,
    )

    try:
        if page == "📊 Dashboard":
            render_dashboard(manager)
        elif page == "🧾 Transactions":
            render_transactions_page(manager)
        elif page == "🎯 Goals":
            render_goals_page(manager)
        elif page == "⚙️ Settings":
            render_settings_page(manager)
    except StorageWriteError:
        st.toast("Could not save your changes. Nothing was changed.", icon="❌")


def render_dashboard(manager: StateManager):
    st.title("📊 Dashboard")
    app_settings = get_settings().app
    state = manager.state
    today = date.today()

    totals = summary(state)
    col1, col2, col3 = st.columns(3)
    col1.metric("Balance", format_currency(totals.balance))
    col2.metric("Income", format_currency(totals.income))
    col3.metric("Expenses", format_currency(totals.expense))

    usage = budget_usage(state, today)
    st.subheader("Monthly budget")
    st.progress(float(usage.percent) / 100)
    st.caption(
        f"{format_currency(usage.spent)} / "
        f"{format_currency(usage.limit) if usage.is_set else '-'}"
    )
    if usage.exceeded:
        st.error("Budget exceeded, audit expenses.")
    elif not usage.is_set:
        st.info("Set a budget to start tracking.")

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Expenses by category")
        by_category = expenses_by_category(state)
        if by_category:
            st.bar_chart({"Total": {name: float(total) for name, total in by_category.items()}})
        else:
            st.caption("No data")
    with col2:
        st.subheader("Income vs expenses")
        series = monthly_series(state, app_settings.chart_months_back, today)
        st.bar_chart(
            {
                "Income": {b.month: float(b.income) for b in series},
                "Expense": {b.month: float(b.expense) for b in series},
            }
        )

    st.subheader("Recent transactions")
    recent = recent_transactions(state, app_settings.recent_transactions_limit)
    if not recent:
        st.caption("No transactions logged yet.")
    for t in recent:
        st.markdown(
            f"**{t.description}** {format_currency(t.amount)}  \n"
            f"{t.transaction_date or '-'} • {t.category}{' • Recurring' if t.recurring else ''}"
        )


def render_transactions_page(manager: StateManager):
    st.title("🧾 Transactions")

    with st.form("transaction_form", clear_on_submit=True):
        description = st.text_input("Description")
        col1, col2 = st.columns(2)
        amount = col1.text_input("Amount")
        kind = col2.selectbox("Type", [k.value for k in TransactionKind])
        category = col1.text_input("Category", placeholder="General")
        when = col2.date_input("Date", value=date.today())
        recurring = st.checkbox("Recurring")
        if st.form_submit_button("Add transaction", type="primary"):
            try:
                manager.add_transaction(description, amount, kind, category, when, recurring)
                st.toast("Transaction added!", icon="✅")
            except ValidationError as e:
                st.toast(str(e), icon="❌")

    recurring_only = st.toggle("Recurring only", key="recurring_only")
    entries = sorted_transactions(manager.state, recurring_only=recurring_only)
    if not entries:
        st.caption("No recurring transactions." if recurring_only else "No transactions yet.")
    for t in entries:
        col1, col2, col3, col4 = st.columns([2, 4, 2, 1])
        col1.write(str(t.transaction_date or "-"))
        col2.write(f"{t.description}  \n{t.category}{' • Recurring' if t.recurring else ''}")
        col3.write(("+" if t.kind == TransactionKind.INCOME else "-") + format_currency(t.amount))
        if col4.button("✕", key=f"delete_{t.id}"):
            manager.delete_transaction(t.id)
            st.toast("Transaction removed.", icon="🗑️")
            st.rerun()

    st.markdown("---")
    if st.button("Clear all transactions"):
        cleared = manager.clear_all_transactions()
        st.toast("Transactions cleared." if cleared else "Nothing to clear.")
        st.rerun()


def render_goals_page(manager: StateManager):
    st.title("🎯 Goals")

    with st.form("goal_form", clear_on_submit=True):
        name = st.text_input("Goal name")
        col1, col2 = st.columns(2)
        target = col1.text_input("Target amount")
        current = col2.text_input("Current amount", value="0")
        if st.form_submit_button("Add goal", type="primary"):
            try:
                manager.add_goal(name, target, current)
                st.toast("Goal added.", icon="✅")
            except ValidationError as e:
                st.toast(str(e), icon="❌")

    if not manager.state.goals:
        st.caption("No goals yet. Set your first target.")
    for goal in manager.state.goals:
        progress = goal_progress(goal)
        st.markdown(f"**{goal.name}**: target {format_currency(goal.target)}, "
                    f"current {format_currency(goal.current)} ({progress}%)")
        st.progress(progress / 100)
        with st.expander("Edit"):
            col1, col2 = st.columns(2)
            new_target = col1.text_input("Target", value=str(goal.target), key=f"target_{goal.id}")
            new_current = col2.text_input("Current", value=str(goal.current), key=f"current_{goal.id}")
            col1, col2 = st.columns(2)
            if col1.button("Save", key=f"save_{goal.id}"):
                try:
                    manager.edit_goal(goal.id, new_target, new_current)
                    st.toast("Goal updated.", icon="✅")
                    st.rerun()
                except ValidationError as e:
                    st.toast(str(e), icon="❌")
            if col2.button("Delete", key=f"delete_{goal.id}"):
                manager.delete_goal(goal.id)
                st.toast("Goal removed.", icon="🗑️")
                st.rerun()


def render_settings_page(manager: StateManager):
    st.title("⚙️ Settings")
    app_settings = get_settings().app

    st.markdown("### Budget")
    limit = manager.state.settings.budget_limit
    with st.form("budget_form"):
        value = st.text_input("Monthly budget limit", value=str(limit) if limit else "")
        if st.form_submit_button("Save budget"):
            try:
                manager.set_budget_limit(value)
                st.toast("Budget updated.", icon="✅")
            except ValidationError as e:
                st.toast(str(e), icon="❌")

    st.markdown("### Appearance")
    if st.button("Toggle theme"):
        theme = manager.toggle_theme()
        st.toast(f"Switched to {theme.value} mode.")
        st.rerun()

    st.markdown("### Data")
    st.download_button(
        "Export data",
        data=export_snapshot(manager.state),
        file_name=app_settings.export_filename,
        mime="application/json",
    )
    uploaded = st.file_uploader("Import data", type=["json"])
    if uploaded is not None and st.button("Replace my data with this file"):
        try:
            manager.import_snapshot(uploaded.getvalue())
            st.toast("Data imported successfully.", icon="✅")
            st.rerun()
        except ImportFormatError:
            st.toast("Failed to import data.", icon="❌")


if __name__ == "__main__":
    main()
