"""
Streamlit Frontend for the Cash Flow Ledger

A thin consumer of CashFlowLedger. All rules live in the ledger;
this file only collects input and shows results.

Flow:
1. On start, reconcile the stored balance with the stored entries
2. No balance yet -> initial balance setup
3. Otherwise: add income, browse the ledger, view summaries
"""

import asyncio
from datetime import date

import streamlit as st

from cashflow import (
    BalanceNotInitializedError,
    CashFlowError,
    CashFlowLedger,
    NotFoundError,
    StorageError,
    ValidationError,
    create_ledger,
)
from cashflow.config import get_settings, validate_all_settings
from cashflow.models import IncomeCategory


# Page configuration
st.set_page_config(
    page_title="Cash Flow",
    page_icon="💵",
    layout="wide",
    initial_sidebar_state="expanded",
)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_ledger() -> CashFlowLedger:
    """Get or create the ledger (cached), reconciling once at startup."""
    ledger = create_ledger()
    try:
        run_async(ledger.recalculate_balance())
    except BalanceNotInitializedError:
        pass  # setup page handles this
    return ledger


def money(value) -> str:
    symbol = get_settings().app.currency_symbol
    return f"{symbol}{value:,.2f}"


def show_error(error: CashFlowError):
    """Map ledger errors to user-facing messages."""
    if isinstance(error, ValidationError):
        st.error(f"Please check {error.field}: {error.reason}")
    elif isinstance(error, NotFoundError):
        st.error("That entry no longer exists. It may have been deleted.")
    elif isinstance(error, StorageError):
        st.error("Could not reach storage. Please try again.")
    else:
        st.error(str(error))


def main():
    """Main application entry point."""
    ledger = get_ledger()

    try:
        balance = run_async(ledger.get_balance())
    except BalanceNotInitializedError:
        render_setup_page(ledger)
        return
    except CashFlowError as e:
        show_error(e)
        return

    st.sidebar.title("💵 Cash Flow")
    st.sidebar.metric("Current balance", money(balance.current_balance))
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["➕ Add Income", "📒 Ledger", "📊 Summary", "⚙️ Settings"],
        index=0,
    )

    if page == "➕ Add Income":
        render_add_income_page(ledger)
    elif page == "📒 Ledger":
        render_ledger_page(ledger)
    elif page == "📊 Summary":
        render_summary_page(ledger)
    elif page == "⚙️ Settings":
        render_settings_page(ledger)


def render_setup_page(ledger: CashFlowLedger):
    """First-time setup: the initial balance."""
    st.title("👋 Welcome")
    st.markdown("Enter the balance you are starting with. Every income entry builds on it.")

    with st.form("initial_balance"):
        amount = st.number_input("Starting balance", min_value=0.01, step=100.0, format="%.2f")
        submitted = st.form_submit_button("Start tracking", type="primary")

    if submitted:
        try:
            run_async(ledger.set_initial_balance(round(amount, 2)))
        except CashFlowError as e:
            show_error(e)
        else:
            st.rerun()


def render_add_income_page(ledger: CashFlowLedger):
    """Record a new income entry."""
    st.title("➕ Add Income")

    with st.form("add_income", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            amount = st.number_input("Amount", min_value=0.01, step=10.0, format="%.2f")
            entry_date = st.date_input("Date", value=date.today())
        with col2:
            category = st.selectbox(
                "Category",
                options=list(IncomeCategory),
                format_func=lambda c: c.value,
            )
            is_recurring = st.checkbox("Recurring")
        description = st.text_input("Description", max_chars=200)
        submitted = st.form_submit_button("Save", type="primary")

    if submitted:
        try:
            entry = run_async(ledger.save_income_entry({
                "amount": round(amount, 2),
                "date": entry_date.isoformat(),
                "description": description,
                "category": category.value,
                "is_recurring": is_recurring or None,
            }))
        except CashFlowError as e:
            show_error(e)
        else:
            st.success(
                f"Saved {money(entry.amount)}. Balance after this entry: "
                f"{money(entry.balance_after)}"
            )


def render_ledger_page(ledger: CashFlowLedger):
    """Filtered entry list with edit and delete."""
    st.title("📒 Ledger")

    col1, col2, col3 = st.columns(3)
    with col1:
        categories = st.multiselect(
            "Categories",
            options=list(IncomeCategory),
            format_func=lambda c: c.value,
        )
    with col2:
        date_range = st.date_input("Date range", value=[])
    with col3:
        search_text = st.text_input("Search description")

    income_filter = {
        "categories": categories or None,
        "search_text": search_text or None,
    }
    if isinstance(date_range, (list, tuple)) and len(date_range) == 2:
        income_filter["date_range"] = {
            "start_date": date_range[0],
            "end_date": date_range[1],
        }

    try:
        entries = run_async(ledger.get_income_entries(income_filter))
    except CashFlowError as e:
        show_error(e)
        return

    if not entries:
        st.info("No income entries match. Use 'Add Income' to record one.")
        return

    st.dataframe(
        [
            {
                "Date": entry.date.isoformat(),
                "Description": entry.description,
                "Category": entry.category.value,
                "Amount": float(entry.amount),
                "Balance after": float(entry.balance_after) if entry.balance_after is not None else None,
            }
            for entry in entries
        ],
        use_container_width=True,
    )

    st.markdown("---")
    st.markdown("### Edit or delete")
    selected = st.selectbox(
        "Entry",
        options=entries,
        format_func=lambda e: f"{e.date.isoformat()} | {e.description} | {money(e.amount)}",
    )
    new_amount = st.number_input(
        "New amount", min_value=0.01, value=float(selected.amount), format="%.2f"
    )
    col1, col2 = st.columns(2)
    with col1:
        if st.button("Update amount"):
            try:
                run_async(ledger.update_income_entry(selected.id, {"amount": round(new_amount, 2)}))
            except CashFlowError as e:
                show_error(e)
            else:
                st.rerun()
    with col2:
        if st.button("Delete entry"):
            try:
                run_async(ledger.delete_income_entry(selected.id))
            except CashFlowError as e:
                show_error(e)
            else:
                st.rerun()


def render_summary_page(ledger: CashFlowLedger):
    """Monthly or yearly summary."""
    st.title("📊 Summary")

    today = date.today()
    col1, col2 = st.columns(2)
    with col1:
        year = st.number_input("Year", min_value=1, max_value=9999, value=today.year, step=1)
    with col2:
        month = st.selectbox(
            "Month",
            options=[None] + list(range(1, 13)),
            index=today.month,
            format_func=lambda m: "Whole year" if m is None else date(2000, m, 1).strftime("%B"),
        )

    try:
        if month is None:
            summary = run_async(ledger.get_yearly_summary(int(year)))
        else:
            summary = run_async(ledger.get_monthly_summary(int(year), month))
    except CashFlowError as e:
        show_error(e)
        return

    col1, col2, col3 = st.columns(3)
    col1.metric("Income", money(summary.total_income), f"{summary.trend}%")
    col2.metric("Entries", summary.entry_count)
    col3.metric("Average", money(summary.average_income))

    col1, col2 = st.columns(2)
    col1.metric("Start balance", money(summary.start_balance))
    col2.metric("End balance", money(summary.end_balance))

    if summary.category_breakdown:
        st.markdown("### By category")
        st.bar_chart({
            category.value: float(amount)
            for category, amount in summary.category_breakdown.items()
        })


def render_settings_page(ledger: CashFlowLedger):
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Configuration Status")
    status = validate_all_settings()
    for name in ("storage", "app"):
        if status.get(name, False):
            st.success(f"✅ {name.title()} settings loaded")
        else:
            st.error(f"❌ {name.title()} - {status.get(f'{name}_error', 'Not configured')}")

    st.markdown("---")
    st.markdown("### Maintenance")
    if st.button("Recalculate balance"):
        try:
            balance = run_async(ledger.recalculate_balance())
        except CashFlowError as e:
            show_error(e)
        else:
            st.success(f"Balance recalculated: {money(balance.current_balance)}")


if __name__ == "__main__":
    main()
