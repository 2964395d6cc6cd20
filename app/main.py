"""
Streamlit Frontend for Spend to Save

This is the screen the user sees every time they buy something.

DESIGN PRINCIPLES:
1. One question per screen in the guided flow
2. Totals always visible at the top
3. Manual entry available at any time, with clear error messages
4. Clearing data always asks first

The page only sends events to the workflow and draws what
the ledger snapshot says. No totals are computed here.
"""

import streamlit as st

from src.ledger import ClearOutcome, PersistenceError
from src.models.ledger import EntryCategory
from src.models.workflow import PurchaseType, WorkflowStep
from src.orchestrator import SpendToSaveApp, create_app_components
from src.reports import (
    COMPLETE_MESSAGE,
    ENCOURAGEMENT_MESSAGE,
    history_lines,
    manual_entry_message,
    savings_prompt,
    totals_lines,
)
from src.workflow import InvalidAmountError


# Page configuration
st.set_page_config(
    page_title="Spend to Save",
    page_icon="💰",
    layout="centered",
)

# Manual entry options: (label, category value)
MANUAL_ENTRY_OPTIONS = [
    ("Frivolous Purchase", EntryCategory.FRIVOLOUS.value),
    ("Non-Frivolous Purchase", EntryCategory.NON_FRIVOLOUS.value),
    ("Savings", "Savings"),
]


def _flash(message: str) -> None:
    st.session_state.flash = message


@st.cache_resource
def get_app() -> SpendToSaveApp:
    """Get or create the application (cached)."""
    return create_app_components(use_storage=True, notify=_flash)


def main():
    """Main application entry point."""
    app = get_app()

    if "show_history" not in st.session_state:
        st.session_state.show_history = False
    if "confirm_clear" not in st.session_state:
        st.session_state.confirm_clear = False

    st.title("💰 Spend to Save")

    if st.session_state.get("flash"):
        st.success(st.session_state.pop("flash"))

    render_totals(app)

    if st.session_state.show_history:
        render_history(app)

    st.markdown("---")
    render_workflow(app)

    st.markdown("---")
    render_manual_entry(app)

    st.markdown("---")
    render_privacy_and_clear(app)


def render_totals(app: SpendToSaveApp):
    """Render the totals summary and the history toggle."""
    snapshot = app.snapshot()
    columns = st.columns(4)
    for column, (label, value) in zip(columns, totals_lines(snapshot, app.currency_symbol)):
        column.metric(label, value)

    label = "Hide History" if st.session_state.show_history else "View History"
    if st.button(label):
        st.session_state.show_history = not st.session_state.show_history
        st.rerun()


def render_history(app: SpendToSaveApp):
    st.subheader("Spending and Savings History")
    for line in history_lines(app.snapshot(), app.currency_symbol):
        st.markdown(f"- {line}")


def _run(action, *args):
    """Call a workflow action, showing storage failures instead of crashing."""
    try:
        action(*args)
    except PersistenceError as e:
        st.error(f"Your entry was recorded but could not be saved to disk: {e}")
        return
    st.rerun()


def render_workflow(app: SpendToSaveApp):
    """Render whichever step of the guided purchase flow is active."""
    state = app.state

    if state.step is WorkflowStep.ASK_PURCHASE_TYPE:
        st.subheader("What type of purchase did you make?")
        col1, col2 = st.columns(2)
        with col1:
            if st.button("Frivolous", type="primary"):
                _run(app.workflow.select_type, PurchaseType.FRIVOLOUS)
        with col2:
            if st.button("Non-Frivolous"):
                _run(app.workflow.select_type, PurchaseType.NON_FRIVOLOUS)

    elif state.step is WorkflowStep.ENTER_AMOUNT:
        st.subheader("How much did you spend?")
        raw_amount = st.text_input(
            "Amount",
            placeholder=f"Enter amount in {app.currency_symbol}",
        )
        col1, col2 = st.columns(2)
        with col1:
            if st.button("Submit", type="primary"):
                # Invalid amounts keep the user on this step
                _run(app.workflow.submit_amount, raw_amount)
        with col2:
            if st.button("Cancel"):
                _run(app.workflow.cancel)

    elif state.step is WorkflowStep.SHOW_SAVINGS:
        st.subheader("Time to save!")
        st.markdown(savings_prompt(state, app.currency_symbol))
        rate = app.workflow.savings_rate * 100
        st.caption(f"This is {rate.normalize():f}% of your purchase amount.")
        st.markdown("### Did you set aside this savings?")
        col1, col2 = st.columns(2)
        with col1:
            if st.button("Yes", type="primary"):
                _run(app.workflow.confirm_savings, True)
        with col2:
            if st.button("Not yet"):
                _run(app.workflow.confirm_savings, False)
        if state.encouragement_visible:
            st.info(ENCOURAGEMENT_MESSAGE)

    elif state.step is WorkflowStep.COMPLETE:
        st.subheader("Great job!")
        st.markdown(COMPLETE_MESSAGE)
        if st.button("Record Another Purchase", type="primary"):
            _run(app.workflow.reset)


def render_manual_entry(app: SpendToSaveApp):
    """Render the manual entry form."""
    st.subheader("Manual Entry")

    with st.form("manual_entry", clear_on_submit=True):
        label = st.selectbox(
            "Type",
            options=[label for label, _ in MANUAL_ENTRY_OPTIONS],
            index=None,
            placeholder="Select Type",
        )
        raw_amount = st.text_input(
            "Amount",
            placeholder=f"Enter amount in {app.currency_symbol}",
        )
        submitted = st.form_submit_button("Add Entry")

    if not submitted:
        return

    category = dict(MANUAL_ENTRY_OPTIONS).get(label)
    try:
        entry = app.manual_add(category, raw_amount)
    except InvalidAmountError as e:
        for issue in e.result.issues:
            st.error(issue.message)
        return
    except PersistenceError as e:
        st.error(f"Your entry was recorded but could not be saved to disk: {e}")
        return

    _flash(manual_entry_message(entry, label.replace(" Purchase", ""), app.currency_symbol))
    st.rerun()


def render_privacy_and_clear(app: SpendToSaveApp):
    """Render the privacy notice and the clear-data action."""
    st.caption(
        "Privacy Notice: All data is stored locally on your device. "
        "No personal information is sent to or stored on our servers."
    )

    if not st.session_state.confirm_clear:
        if st.button("Clear My Data"):
            st.session_state.confirm_clear = True
            st.rerun()
        return

    st.warning(
        "Are you sure you want to clear all your data? This action cannot be undone."
    )
    col1, col2 = st.columns(2)
    with col1:
        if st.button("Yes, clear everything", type="primary"):
            st.session_state.confirm_clear = False
            try:
                outcome = app.clear_all_data(confirm=lambda prompt: True)
            except PersistenceError as e:
                st.error(f"Could not clear saved data: {e}")
                return
            if outcome is ClearOutcome.CLEARED:
                st.rerun()
    with col2:
        if st.button("Keep my data"):
            st.session_state.confirm_clear = False
            app.clear_all_data(confirm=lambda prompt: False)
            st.rerun()


if __name__ == "__main__":
    main()
