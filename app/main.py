"""
Streamlit Frontend for Ledgerbook

The screens a single user interacts with every day:
1. PIN entry
2. Home: record income/expense, today's (or a custom range's) totals,
   today's entries with delete, manual sync, logout
3. Statistics: period totals and an income-vs-expense chart

DESIGN PRINCIPLES:
1. Every write shows up immediately (local cache first)
2. Sync problems never block the screen
3. One explicit session context per login, dropped at logout
"""

import asyncio
from datetime import date
from typing import Optional

import streamlit as st

from ledgerbook.auth import save_theme
from ledgerbook.config import get_settings, validate_all_settings
from ledgerbook.logs import configure_logging
from ledgerbook.models import DateRange, EntryType, StatsPeriod, Theme
from ledgerbook.orchestrator import (
    InvalidEntryError,
    LedgerService,
    create_app_components,
)


# Page configuration
st.set_page_config(
    page_title="Ledgerbook",
    page_icon="💰",
    layout="centered",
    initial_sidebar_state="collapsed",
)

PERIOD_TITLES = {
    StatsPeriod.DAILY: "Today's",
    StatsPeriod.WEEKLY: "This Week's",
    StatsPeriod.MONTHLY: "This Month's",
    StatsPeriod.YEARLY: "This Year's",
    StatsPeriod.TOTAL: "All Time",
}

DARK_CSS = """
<style>
    .stApp { background-color: #111827; color: #f9fafb; }
</style>
"""


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    settings = get_settings()
    configure_logging(settings.app.log_level)
    return create_app_components(settings)


def get_ledger() -> Optional[LedgerService]:
    """The session's ledger, restoring a persisted login if there is one."""
    gate, _, cache, remote = get_components()
    ledger = st.session_state.get("ledger")
    if ledger is not None and ledger.context.active:
        return ledger

    context = gate.restore()
    if context is None:
        return None
    ledger = _open_ledger(context, cache, remote)
    run_async(ledger.refresh())
    return ledger


def _open_ledger(context, cache, remote) -> LedgerService:
    app_settings = get_settings().app
    ledger = LedgerService(
        cache=cache,
        context=context,
        remote=remote,
        default_note=app_settings.default_note,
    )
    st.session_state.ledger = ledger
    return ledger


def money(value: float) -> str:
    symbol = get_settings().app.currency_symbol
    return f"{symbol}{value:,.2f}"


def main():
    """Main application entry point."""
    ledger = get_ledger()
    if ledger is None:
        render_pin_page()
        return

    if ledger.context.theme == Theme.DARK:
        st.markdown(DARK_CSS, unsafe_allow_html=True)

    page = st.sidebar.radio("Navigate to:", ["🏠 Home", "📊 Statistics", "⚙️ Settings"])
    render_sidebar_controls(ledger)

    if page == "🏠 Home":
        render_home_page(ledger)
    elif page == "📊 Statistics":
        render_stats_page(ledger)
    else:
        render_settings_page()


def render_pin_page():
    """Render the PIN entry page."""
    gate, _, cache, remote = get_components()

    st.title("🔒 Ledgerbook")
    pin = st.text_input("Enter PIN", type="password", max_chars=12)

    if st.button("Unlock", type="primary") and pin:
        context = gate.login(pin)
        if context is None:
            st.error(get_settings().auth.wrong_secret_message)
            return
        ledger = _open_ledger(context, cache, remote)
        with st.spinner("Syncing with Google Sheets..."):
            run_async(ledger.refresh())
        st.rerun()


def render_sidebar_controls(ledger: LedgerService):
    """Theme toggle, sync and logout."""
    gate, store, _, _ = get_components()

    st.sidebar.markdown("---")
    dark = st.sidebar.toggle("Dark theme", value=ledger.context.theme == Theme.DARK)
    theme = Theme.DARK if dark else Theme.LIGHT
    if theme != ledger.context.theme:
        ledger.context.theme = theme
        save_theme(store, theme)
        st.rerun()

    if st.sidebar.button("🔄 Sync", disabled=not ledger.has_remote):
        with st.spinner("Syncing with Google Sheets..."):
            synced = run_async(ledger.refresh())
        if not synced:
            st.sidebar.caption("Showing data saved on this device.")

    if st.sidebar.button("🚪 Logout"):
        gate.logout(ledger.context)
        st.session_state.pop("ledger", None)
        st.rerun()


def render_totals(income: float, expense: float, balance: float, title: str):
    col1, col2, col3 = st.columns(3)
    col1.metric(f"{title} Income", money(income))
    col2.metric(f"{title} Expenditure", money(expense))
    col3.metric("Balance", money(balance))


def render_home_page(ledger: LedgerService):
    """Render the home page."""
    st.title("🏠 Home")
    flash = st.session_state.pop("flash", None)
    if flash:
        st.warning(flash)

    # Summary: today, or a custom range
    use_range = st.checkbox("Custom date range")
    if use_range:
        picked = st.date_input("Date range", value=(ledger.today(), ledger.today()))
        if isinstance(picked, (tuple, list)) and len(picked) == 2:
            date_range = DateRange.from_dates(picked[0], picked[1])
            totals = ledger.range_totals(date_range)
            title = "Range"
        else:
            totals = ledger.today_totals()
            title = "Today's"
    else:
        totals = ledger.today_totals()
        title = "Today's"
    render_totals(totals.income, totals.expense, totals.balance, title)

    st.markdown("---")

    # New entry
    with st.form("new_entry", clear_on_submit=True):
        amount = st.text_input("Amount", placeholder="0.00")
        note = st.text_input("Note (optional)")
        col1, col2 = st.columns(2)
        add_income = col1.form_submit_button("➕ Income", type="primary")
        add_expense = col2.form_submit_button("➖ Expense")

    if add_income or add_expense:
        entry_type = EntryType.INCOME if add_income else EntryType.EXPENSE
        try:
            outcome = run_async(ledger.add_entry(amount, note, entry_type))
        except InvalidEntryError as e:
            st.error(f"Entry not saved: {e}")
        else:
            if ledger.has_remote and not outcome.synced:
                st.session_state.flash = "Saved on this device only; Google Sheets did not confirm it."
            st.rerun()

    # Today's entries
    st.subheader("Today's entries")
    recent = ledger.recent(get_settings().app.recent_entries_limit)
    if not recent:
        st.info("No entries yet today.")
    for entry in recent:
        col1, col2, col3 = st.columns([3, 2, 1])
        sign = "+" if entry.type == EntryType.INCOME else "-"
        col1.markdown(f"**{entry.note}**  \n{entry.time}")
        col2.markdown(f"{sign}{money(entry.amount)}")
        if col3.button("🗑️", key=f"delete-{entry.id}"):
            run_async(ledger.delete_entry(entry.id))
            st.rerun()


def render_stats_page(ledger: LedgerService):
    """Render the statistics page."""
    st.title("📊 Statistics")

    period = st.radio(
        "Period",
        options=list(StatsPeriod),
        format_func=lambda p: p.value.title(),
        horizontal=True,
    )
    reference = st.date_input("Reference date", value=ledger.today())
    if not isinstance(reference, date):
        reference = ledger.today()

    totals = ledger.period_totals(period, reference)
    render_totals(totals.income, totals.expense, totals.balance, PERIOD_TITLES[period])

    st.subheader("Income vs Expense")
    series = ledger.chart(period, reference)
    st.bar_chart(
        {
            "label": [bucket.label for bucket in series],
            "income": [bucket.income for bucket in series],
            "expense": [bucket.expense for bucket in series],
        },
        x="label",
        y=["income", "expense"],
        color=["#16a34a", "#dc2626"],
        stack=False,
        sort=False,
    )


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Configuration Status")
    status = validate_all_settings()
    for name in ("auth", "remote", "app", "google_sheets"):
        if name not in status:
            continue
        if status[name]:
            st.success(f"✅ {name.replace('_', ' ').title()} - OK")
        else:
            st.error(f"❌ {name.replace('_', ' ').title()} - {status.get(f'{name}_error')}")

    st.markdown("---")
    st.markdown(
        "To configure the application, create a `.env` file. "
        "See `.env.example` for the available variables."
    )


if __name__ == "__main__":
    main()
