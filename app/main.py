import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import asyncio
import logging
from datetime import date

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from expense_tracker.async_load import load_snapshot
from expense_tracker.config import Settings, configure_logging
from expense_tracker.domain import CATEGORIES, DateWindow, parse_iso_date
from expense_tracker.errors import InvalidBudget, NetworkError, NotFound
from expense_tracker.filters import by_category, by_text
from expense_tracker.formatting import (
    alert_text,
    escape_dollars,
    format_money,
    format_percent,
    remaining_text,
    status_color,
)
from expense_tracker.functional import validate_budget_form, validate_expense_form
from expense_tracker.lazy import expenses_in_window, iter_expenses, top_categories
from expense_tracker.repository import JsonRepository
from expense_tracker.services import DashboardService, expenses_frame, spend_frame, status_frame
from expense_tracker.snapshot import (
    AddExpense,
    DeleteBudget,
    DeleteExpense,
    UpdateExpense,
    UpsertBudget,
    new_expense_id,
)
from expense_tracker.store import ExpenseStore

settings = Settings.from_env()
configure_logging(settings.log_level)
logger = logging.getLogger("expense_tracker.app")

st.set_page_config(page_title="Expense Tracker", layout="wide")

repository = JsonRepository(settings.data_file, settings.seed_file)

if "snapshot" not in st.session_state:
    try:
        st.session_state.snapshot = asyncio.run(load_snapshot(repository))
    except NetworkError as e:
        logger.error("Initial load from %s failed: %s", settings.data_file, e)
        st.error(f"Could not load your data: {e}")
        st.stop()

store = ExpenseStore(repository, threshold=settings.alert_threshold, snapshot=st.session_state.snapshot)
dashboard = DashboardService(settings.alert_threshold, settings.chart_days)
today = date.today()


def money(amount: float) -> str:
    return format_money(amount, settings.currency)


def md_money(amount: float) -> str:
    return escape_dollars(money(amount))


PAGES = ["🏠 Dashboard", "🧾 Expenses", "➕ Add Expense", "💰 Budgets", "⚙️ Settings"]

# the radio owns "page" once drawn; navigation goes through "next_page"
if "next_page" in st.session_state:
    st.session_state.page = st.session_state.pop("next_page")
elif "page" not in st.session_state:
    st.session_state.page = PAGES[0]


def go_to(page: str) -> None:
    st.session_state.next_page = page
    st.rerun()


def run_command(command, success: str) -> bool:
    """Dispatch a command; errors are reported without leaving the page."""
    try:
        results = store.dispatch(command)
    except NetworkError as e:
        st.toast(f"⚠️ Could not save: {e}")
        return False
    except NotFound as e:
        # back to the listing the record was picked from
        st.session_state.pop("editing_expense", None)
        st.session_state.pop("editing_budget", None)
        st.toast(f"⚠️ {e}")
        return False
    st.session_state.snapshot = store.snapshot
    st.session_state.flash = success
    for result in results:
        for status in result.get("alerts", []):
            st.session_state.setdefault("pending_alerts", []).append(
                f"{status.category.label}: {format_percent(status)}"
            )
    return True


st.sidebar.markdown("### 💵 Expense Tracker")
page = st.sidebar.radio("Menu", PAGES, key="page")

if st.session_state.get("flash"):
    st.success(st.session_state.pop("flash"))
for msg in st.session_state.pop("pending_alerts", []):
    st.toast(f"🔔 Budget alert: {msg}")

snapshot = store.snapshot


def render_field_errors(errors: dict, field: str) -> None:
    if field in errors:
        st.caption(f":red[{errors[field]}]")


if page == "🏠 Dashboard":
    st.title("Dashboard")
    try:
        summary = dashboard.summary(snapshot, today)
    except InvalidBudget as e:
        st.error(f"A stored budget is invalid: {e}")
        st.stop()

    k1, k2, k3, k4 = st.columns(4)
    with k1:
        st.metric("Total Expenses", money(summary["total"]))
        st.caption("All time")
    with k2:
        st.metric("This Month", money(summary["month_total"]))
        st.caption(today.strftime("%B %Y"))
    with k3:
        st.metric(f"Last {settings.chart_days} Days", money(summary["recent_total"]))
        w = summary["recent_window"]
        st.caption(f"{w.start} – {w.end}")
    with k4:
        st.metric("Avg. Daily (This Month)", money(summary["average_daily"]))
        st.caption("Per day")

    left, right = st.columns(2)
    with left:
        st.subheader("Spending by Category")
        if summary["spend_by_category"]:
            fig_pie = px.pie(
                spend_frame(summary["spend_by_category"]),
                values="Spent",
                names="Category",
            )
            fig_pie.update_layout(height=320, margin=dict(t=10, b=10, l=10, r=10))
            st.plotly_chart(fig_pie, use_container_width=True)
        else:
            st.info("No data for current month")
    with right:
        st.subheader("Daily Expenses")
        daily = summary["daily"]
        fig_bar = go.Figure(
            go.Bar(
                x=[pd.Timestamp(d).strftime("%a") for d, _ in daily],
                y=[v for _, v in daily],
                name="Daily Expenses",
                marker_color="rgba(76, 175, 80, 0.6)",
            )
        )
        fig_bar.update_layout(height=320, margin=dict(t=10, b=10, l=10, r=10))
        st.plotly_chart(fig_bar, use_container_width=True)

    st.subheader("Budget Status")
    if summary["statuses"]:
        for status in summary["statuses"]:
            c1, c2 = st.columns([3, 1])
            c1.markdown(f"**{status.category.label}**")
            c2.markdown(
                f":{'red' if status.is_over_budget else 'green'}"
                f"[{md_money(status.spent_amount)} / {md_money(status.budget_amount)}]"
            )
            st.progress(status.bar_width / 100)
            c3, c4 = st.columns([3, 1])
            c3.caption(format_percent(status))
            c4.caption(f":{status_color(status)}[{escape_dollars(remaining_text(status, settings.currency))}]")
    else:
        st.info("No budgets set. Create your first budget!")

    recent_col, alerts_col = st.columns(2)
    with recent_col:
        st.subheader("Recent Transactions")
        if summary["recent"]:
            for e in summary["recent"]:
                a, b = st.columns([3, 1])
                a.markdown(f"**{e.description}**  \n{e.date} • {e.category.label}")
                b.markdown(md_money(e.amount))
        else:
            st.info("No transactions yet")
    with alerts_col:
        st.subheader("Budget Alerts")
        if summary["alerts"]:
            for status in summary["alerts"]:
                text = f"**{status.category.label}** · {format_percent(status)}  \n{escape_dollars(alert_text(status, settings.currency))}"
                if status.percent_used >= 100:
                    st.error(text)
                else:
                    st.warning(text)
        else:
            st.info("No budget alerts")

    top = list(top_categories(summary["spend_by_category"], 3))
    if top:
        st.caption("Top categories this month: " + ", ".join(f"{c.label} ({md_money(v)})" for c, v in top))

elif page == "🧾 Expenses":
    editing = st.session_state.get("editing_expense")
    if editing:
        found = snapshot.find_expense(editing)
        if found.is_none():
            st.session_state.pop("editing_expense", None)
            st.rerun()
        expense = found.get_or_else(None)
        edit_errors = st.session_state.get("edit_errors", {})
        st.title("Edit Expense")
        with st.form("edit_expense"):
            description = st.text_input("Description", value=expense.description)
            render_field_errors(edit_errors, "description")
            amount = st.text_input("Amount", value=f"{expense.amount:.2f}")
            render_field_errors(edit_errors, "amount")
            category = st.selectbox(
                "Category", CATEGORIES, index=CATEGORIES.index(expense.category),
                format_func=lambda c: c.label,
            )
            day = st.date_input("Date", value=parse_iso_date(expense.date) or today)
            render_field_errors(edit_errors, "date")
            save, cancel = st.columns(2)
            submitted = save.form_submit_button("Update Expense")
            cancelled = cancel.form_submit_button("Cancel")
        if cancelled:
            st.session_state.pop("editing_expense", None)
            st.session_state.pop("edit_errors", None)
            st.rerun()
        if submitted:
            result = validate_expense_form(
                expense.id,
                {"description": description, "amount": amount, "category": category, "date": day},
            )
            if result.is_left():
                st.session_state.edit_errors = result.get_error()
                st.rerun()
            st.session_state.pop("edit_errors", None)
            if run_command(UpdateExpense(expense.id, result.get_or_else(None)), "Expense updated"):
                st.session_state.pop("editing_expense", None)
                st.rerun()
    else:
        st.title("Expenses")
        dates = [parse_iso_date(e.date) for e in snapshot.expenses]
        valid_dates = [d for d in dates if d is not None]
        col1, col2, col3 = st.columns(3)
        with col1:
            date_range = st.date_input(
                "Date Range",
                value=(min(valid_dates, default=today), max(valid_dates, default=today)),
                key="expense_date_range",
            )
        with col2:
            selected = st.multiselect("Category", CATEGORIES, format_func=lambda c: c.label)
        with col3:
            query = st.text_input("Search")

        filtered = snapshot.expenses
        if len(date_range) == 2:
            window = DateWindow(date_range[0].isoformat(), date_range[1].isoformat())
            filtered = tuple(expenses_in_window(filtered, window))
        if selected:
            filtered = tuple(e for e in filtered if any(by_category(c)(e) for c in selected))
        if query:
            filtered = tuple(iter_expenses(filtered, by_text(query)))

        if filtered:
            df = expenses_frame(filtered).sort_values("date", ascending=False)
            disp = df.assign(
                date=df["date"].dt.strftime("%Y-%m-%d").fillna("-"),
                amount=df["amount"].map(money),
            ).drop(columns=["id"])
            st.dataframe(disp, use_container_width=True, hide_index=True)
            st.caption(f"{len(filtered)} expenses · {md_money(sum(e.amount for e in filtered))}")
            st.download_button(
                "⬇️ Download CSV",
                expenses_frame(filtered).to_csv(index=False),
                file_name="expenses.csv",
                mime="text/csv",
            )

            labels = {f"{e.date} · {e.description} · {money(e.amount)} · #{e.id[:8]}": e.id for e in filtered}
            choice = st.selectbox("Select an expense", list(labels.keys()))
            edit_col, delete_col = st.columns(2)
            if edit_col.button("✏️ Edit"):
                st.session_state.editing_expense = labels[choice]
                st.session_state.pop("edit_errors", None)
                st.rerun()
            if delete_col.button("🗑 Delete"):
                if run_command(DeleteExpense(labels[choice]), "Expense deleted"):
                    st.rerun()
        else:
            st.info("No expenses match the selected filters")

elif page == "➕ Add Expense":
    st.title("Add Expense")
    with st.form("add_expense"):
        description = st.text_input("Description")
        render_field_errors(st.session_state.get("add_errors", {}), "description")
        amount = st.text_input("Amount", placeholder="0.00")
        render_field_errors(st.session_state.get("add_errors", {}), "amount")
        category = st.selectbox("Category", CATEGORIES, format_func=lambda c: c.label)
        day = st.date_input("Date", value=today)
        render_field_errors(st.session_state.get("add_errors", {}), "date")
        submitted = st.form_submit_button("Add Expense")

    if submitted:
        result = validate_expense_form(
            new_expense_id(),
            {"description": description, "amount": amount, "category": category, "date": day},
        )
        if result.is_left():
            st.session_state.add_errors = result.get_error()
            st.rerun()
        st.session_state.pop("add_errors", None)
        if run_command(AddExpense(result.get_or_else(None)), "Expense added"):
            go_to("🧾 Expenses")

elif page == "💰 Budgets":
    st.title("Monthly Budgets")
    try:
        statuses = dashboard.month_status(snapshot, today)
    except InvalidBudget as e:
        st.error(f"A stored budget is invalid: {e}")
        statuses = []

    if statuses:
        cols = st.columns(3)
        for idx, status in enumerate(statuses):
            with cols[idx % 3]:
                st.markdown(f"#### {status.category.label}")
                st.write(f"Budget: {md_money(status.budget_amount)}")
                st.write(f"Spent: {md_money(status.spent_amount)}")
                st.markdown(f"Remaining: :{status_color(status)}[{md_money(status.remaining_amount)}]")
                st.progress(status.bar_width / 100)
                st.caption(format_percent(status))
                e_col, d_col = st.columns(2)
                if e_col.button("✏️ Edit", key=f"edit_{status.category.value}"):
                    st.session_state.editing_budget = status.category
                    st.rerun()
                if d_col.button("🗑 Delete", key=f"del_{status.category.value}"):
                    if run_command(DeleteBudget(status.category), "Budget deleted"):
                        st.rerun()
        st.dataframe(status_frame(statuses), use_container_width=True, hide_index=True)
    else:
        st.info("No budgets found. Set your first budget!")

    st.divider()
    editing = st.session_state.get("editing_budget")
    current = snapshot.find_budget(editing).get_or_else(None) if editing is not None else None
    if editing is not None and current is None:
        # budget vanished underneath us; fall back to the add form
        st.session_state.pop("editing_budget", None)
    st.subheader("Edit Budget" if current else "Add New Budget")
    with st.form("budget_form"):
        category = st.selectbox(
            "Category",
            CATEGORIES,
            index=CATEGORIES.index(current.category) if current else 0,
            format_func=lambda c: c.label,
            disabled=current is not None,
        )
        amount = st.text_input(
            "Monthly Budget Amount", value=f"{current.amount:.2f}" if current else "", placeholder="0.00"
        )
        render_field_errors(st.session_state.get("budget_errors", {}), "amount")
        submitted = st.form_submit_button("Update Budget" if current else "Add Budget")

    if submitted:
        result = validate_budget_form(
            {"category": current.category if current else category, "amount": amount}
        )
        if result.is_left():
            st.session_state.budget_errors = result.get_error()
            st.rerun()
        st.session_state.pop("budget_errors", None)
        if run_command(UpsertBudget(result.get_or_else(None)), "Budget saved"):
            st.session_state.pop("editing_budget", None)
            st.rerun()
    if current and st.button("Cancel"):
        st.session_state.pop("editing_budget", None)
        st.rerun()

elif page == "⚙️ Settings":
    st.title("Settings")
    st.table(
        pd.DataFrame(
            [
                {"Setting": "Data file", "Value": str(settings.data_file)},
                {"Setting": "Seed file", "Value": str(settings.seed_file)},
                {"Setting": "Alert threshold", "Value": f"{settings.alert_threshold:g}%"},
                {"Setting": "Chart days", "Value": str(settings.chart_days)},
                {"Setting": "Currency", "Value": settings.currency},
                {"Setting": "Log level", "Value": settings.log_level},
            ]
        )
    )
    st.caption("Override any of these with EXPENSE_TRACKER_* environment variables.")
    if st.button("🔄 Reload from storage"):
        try:
            st.session_state.snapshot = store.load()
        except NetworkError as e:
            st.toast(f"⚠️ Could not reload: {e}")
        else:
            st.success("Reloaded")
