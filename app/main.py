"""
Streamlit Frontend for the Bill Tracker

A thin presentation layer over BillManager. It renders the add-bill form,
the status totals, the filter/sort controls and the bill list.

DESIGN PRINCIPLES:
1. No business rules here; every action is a BillManager call
2. Every action is awaited to completion before re-rendering
3. Save failures are shown, and the current (possibly unsaved) state is
   rendered anyway
"""

import asyncio

import streamlit as st

from bill_tracker.audit import configure_logging
from bill_tracker.config import get_settings
from bill_tracker.manager import BillManager, configure_collation, create_bill_manager
from bill_tracker.models.bill import BillFilter, BillFormInput, BillSort, BillStatus
from bill_tracker.services.storage import PersistenceError


BILL_TYPES = ["Energy", "Broadband", "Water", "Streaming", "Other"]
PAYMENT_METHODS = ["Credit Card", "Debit Card", "Direct Debit", "Bank Transfer", "Cash"]
STATUS_BADGES = {
    BillStatus.PAID: "🟢",
    BillStatus.UNPAID: "🔴",
    BillStatus.PENDING: "🟡",
}
SORT_LABELS = {
    BillSort.DEFAULT: "Default",
    BillSort.AMOUNT_HIGH_LOW: "Amount (High to Low)",
    BillSort.AMOUNT_LOW_HIGH: "Amount (Low to High)",
    BillSort.NAME_AZ: "Name (A-Z)",
}


# Page configuration
st.set_page_config(
    page_title="Bill Tracker",
    page_icon="🧾",
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
def get_manager() -> BillManager:
    """Get or create the bill manager (cached)."""
    configure_logging(get_settings().app.effective_log_level)
    configure_collation()
    manager = create_bill_manager()
    run_async(manager.initialize())
    return manager


def run_action(coro, success_message: str) -> None:
    """
    Await a manager action and queue its outcome for the next render.

    The page is re-run either way so the list shows the current state.
    """
    try:
        run_async(coro)
        st.session_state.flash = ("success", success_message)
    except PersistenceError as e:
        st.session_state.flash = (
            "error",
            f"Couldn't save your bills: {e}. Your change is shown but not saved.",
        )
    st.rerun()


def show_flash() -> None:
    """Show the outcome of the previous action, once."""
    flash = st.session_state.pop("flash", None)
    if flash is None:
        return
    kind, message = flash
    if kind == "error":
        st.error(message)
    else:
        st.success(message)


def main():
    """Main application entry point."""
    manager = get_manager()

    st.sidebar.title("🧾 Bill Tracker")
    st.sidebar.markdown("---")
    render_add_bill_form(manager)
    st.sidebar.markdown("---")
    render_settings(manager)

    st.title("Your Bills")
    show_flash()
    render_totals(manager)
    st.markdown("---")
    render_controls(manager)
    render_bills(manager)


def render_add_bill_form(manager: BillManager):
    """Render the add-bill form in the sidebar."""
    st.sidebar.subheader("Add a Bill")

    bill_type = st.sidebar.selectbox("Bill Type", BILL_TYPES)

    # The name inputs only apply to some bill types
    name_streaming = None
    name_other = None
    if bill_type == "Streaming":
        name_streaming = st.sidebar.text_input("Streaming Service", placeholder="e.g. Netflix")
    elif bill_type == "Other":
        name_other = st.sidebar.text_input("Bill Name", placeholder="e.g. Gym")

    with st.sidebar.form("bill-form", clear_on_submit=True):
        payment_method = st.selectbox("Payment Method", PAYMENT_METHODS)
        amount = st.number_input("Amount", min_value=0.0, step=0.01, format="%.2f")
        currency = st.text_input("Currency", value=get_settings().app.default_currency)
        status = st.selectbox(
            "Status",
            options=list(BillStatus),
            index=list(BillStatus).index(BillStatus.PENDING),
            format_func=lambda s: s.value,
        )
        submitted = st.form_submit_button("Add Bill", type="primary")

    if submitted:
        form = BillFormInput(
            category=bill_type,
            name_streaming=name_streaming,
            name_other=name_other,
            payment_method=payment_method,
            amount=amount,
            currency=currency,
            status=status.value,
        )
        run_action(manager.create_bill(form), "Bill added")


def render_totals(manager: BillManager):
    """Render totals by status."""
    totals = manager.get_totals_by_status()
    currency = get_settings().app.default_currency

    col1, col2, col3 = st.columns(3)
    col1.metric("Paid", f"{totals[BillStatus.PAID]:,.2f} {currency}")
    col2.metric("Pending", f"{totals[BillStatus.PENDING]:,.2f} {currency}")
    col3.metric("Unpaid", f"{totals[BillStatus.UNPAID]:,.2f} {currency}")


def render_controls(manager: BillManager):
    """Render the filter and sort selectors."""
    col1, col2 = st.columns([3, 2])

    with col1:
        selected_filter = st.radio(
            "Show",
            options=list(BillFilter),
            index=list(BillFilter).index(manager.current_filter),
            format_func=lambda f: f.value,
            horizontal=True,
        )
    with col2:
        selected_sort = st.selectbox(
            "Sort by",
            options=list(BillSort),
            index=list(BillSort).index(manager.current_sort),
            format_func=lambda s: SORT_LABELS[s],
        )

    manager.set_filter(selected_filter)
    manager.set_sort(selected_sort)


def render_bills(manager: BillManager):
    """Render the filtered, sorted bill list with edit and delete actions."""
    bills = manager.get_display_bills()

    if not bills:
        st.info("No bills to display.")
        return

    for bill in bills:
        badge = STATUS_BADGES.get(bill.status, "")
        title = (
            f"{badge} {bill.display_label} - "
            f"{bill.amount.value:,.2f} {bill.amount.currency} ({bill.status.value})"
        )
        with st.expander(title):
            st.markdown(f"**Type:** {bill.category} Bill")
            st.markdown(f"**Payment Method:** {bill.payment_method}")

            with st.form(f"edit-{bill.id}"):
                new_amount = st.number_input(
                    "Amount",
                    value=bill.amount.value,
                    min_value=0.0,
                    step=0.01,
                    format="%.2f",
                    key=f"amount-{bill.id}",
                )
                new_status = st.selectbox(
                    "Status",
                    options=list(BillStatus),
                    index=list(BillStatus).index(bill.status),
                    format_func=lambda s: s.value,
                    key=f"status-{bill.id}",
                )
                save_clicked = st.form_submit_button("Save Changes")

            if save_clicked:
                run_action(
                    manager.update_bill(
                        {"id": bill.id, "amount": new_amount, "status": new_status}
                    ),
                    "Bill updated",
                )

            if st.button("Delete Bill", key=f"delete-{bill.id}"):
                run_action(manager.delete_bill(bill.id), "Bill deleted")


def render_settings(manager: BillManager):
    """Render the simulated-failure switch."""
    st.sidebar.subheader("⚙️ Testing")
    store = manager.store
    current = getattr(store, "forced_failure", False)
    enabled = st.sidebar.toggle("Simulate save failures", value=current)
    if enabled != current:
        run_async(manager.set_forced_failure(enabled))


if __name__ == "__main__":
    main()
