"""
Streamlit Frontend for Piggy Bank

This is the screen a kid (and a parent looking over their shoulder)
uses to track pocket money.

DESIGN PRINCIPLES:
1. Big, friendly numbers
2. Clear error messages in simple language
3. Visual feedback for every action
4. Nothing is calculated here - all numbers come from the aggregation engine

The UI keeps its state in st.session_state only:
- the auth provider for this browser session
- the snapshot store holding what is currently on screen
- which chart view is selected
"""

import asyncio
from decimal import Decimal

import streamlit as st

from piggybank.aggregation import (
    compute_balance,
    compute_goal_progress,
    income_vs_expense,
    spending_by_category,
)
from piggybank.config import SECTIONS, get_settings, validate_all_settings
from piggybank.models.ledger import TransactionCategory, TransactionType
from piggybank.orchestrator import (
    AppComponents,
    GoalFlow,
    LedgerFlow,
    Snapshot,
    SnapshotStore,
    create_app_components,
    create_auth_provider,
)
from piggybank.services.auth import AuthenticationError
from piggybank.services.storage import GatewayError, NotAuthenticatedError, NotFoundError
from piggybank.validation import ValidationError


# Page configuration
st.set_page_config(
    page_title="Piggy Bank",
    page_icon="🐷",
    layout="centered",
    initial_sidebar_state="expanded",
)

# Custom CSS for better UX
st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
    .balance-box {
        padding: 20px;
        background-color: #fde2e4;
        border-radius: 10px;
        border-left: 5px solid #e75480;
        margin: 10px 0;
        text-align: center;
    }
    .success-box {
        padding: 20px;
        background-color: #d4edda;
        border-radius: 10px;
        border-left: 5px solid #28a745;
        margin: 10px 0;
    }
    .info-box {
        padding: 20px;
        background-color: #cce5ff;
        border-radius: 10px;
        border-left: 5px solid #004085;
        margin: 10px 0;
    }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)


TYPE_LABELS = {
    TransactionType.INCOME: "💵 Money In",
    TransactionType.EXPENSE: "🛍️ Money Out",
}

CHART_VIEWS = ["Money In vs Money Out", "Spending by Category"]


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components() -> AppComponents:
    """Get or create application components (cached)."""
    return create_app_components()


def money(amount: Decimal) -> str:
    symbol = get_settings().app.currency_symbol
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.2f}"


def show_validation_error(error: ValidationError):
    st.error(f"**{error.title}** {error.message}")


def request_refresh():
    st.session_state.needs_refresh = True


def init_session_state(components: AppComponents):
    """Initialize per-session state."""
    if "auth" not in st.session_state:
        st.session_state.auth = create_auth_provider(
            components.backend, components.user_directory
        )
    if "snapshots" not in st.session_state:
        st.session_state.snapshots = SnapshotStore()
    if "needs_refresh" not in st.session_state:
        st.session_state.needs_refresh = True
    if "chart_view" not in st.session_state:
        st.session_state.chart_view = CHART_VIEWS[0]


def load_snapshot(components: AppComponents) -> Snapshot:
    """Refetch both collections if something changed since the last run."""
    store: SnapshotStore = st.session_state.snapshots
    if st.session_state.needs_refresh:
        identity = st.session_state.auth.current_identity()
        try:
            run_async(components.dashboard_flow.refresh(identity, store))
            st.session_state.needs_refresh = False
        except GatewayError as e:
            st.error(f"Could not load your piggy bank: {str(e)}")
    return store.current


def main():
    """Main application entry point."""
    components = get_components()
    init_session_state(components)

    render_sidebar(components)

    snapshot = load_snapshot(components)
    identity = st.session_state.auth.current_identity()

    st.title("🐷 My Piggy Bank")

    if identity is None:
        st.markdown("""
        <div class="info-box">
            <h4>👋 Welcome!</h4>
            <p>Sign in from the sidebar to see your piggy bank.</p>
        </div>
        """, unsafe_allow_html=True)
        return

    render_balance_card(snapshot)

    tab_money, tab_goals, tab_charts = st.tabs(
        ["💰 Money In/Out", "🎯 Savings Goals", "📊 Charts"]
    )
    with tab_money:
        render_transactions_tab(components.ledger_flow, snapshot)
    with tab_goals:
        render_goals_tab(components.goal_flow, snapshot)
    with tab_charts:
        render_charts_tab(snapshot)


def _finish_sign_in(components: AppComponents, action, email: str, password: str):
    try:
        identity = action(email, password)
    except AuthenticationError as e:
        st.sidebar.error(str(e))
    except GatewayError as e:
        components.activity_logger.log_gateway_error("sign_in", str(e))
        st.sidebar.error(f"Could not reach your account: {e}")
    else:
        components.activity_logger.log_user_signed_in(identity.user_id)
        request_refresh()
        st.rerun()


def render_storage_status(components: AppComponents):
    """Show which store is in use and whether it actually connected."""
    st.sidebar.markdown("### Storage")

    status = validate_all_settings()
    wants_sheets = status["app"] and get_settings().app.storage_backend == "google_sheets"
    for section in SECTIONS:
        if section == "google_sheets" and not wants_sheets:
            continue
        if not status[section]:
            st.sidebar.error(f"⚠️ {section} settings: {status[f'{section}_error']}")

    if components.backend == "google_sheets":
        st.sidebar.success("✅ Google Sheets - Connected")
        return

    st.sidebar.info("🧪 In-memory demo (changes are lost on restart)")
    if components.storage_error:
        st.sidebar.warning(
            f"⚠️ Google Sheets is selected but could not connect: {components.storage_error}"
        )


def render_sidebar(components: AppComponents):
    """Render sign-in controls and backend status."""
    auth = st.session_state.auth
    identity = auth.current_identity()

    st.sidebar.title("🐷 Piggy Bank")
    st.sidebar.markdown("---")

    if auth.supports_sign_in:
        if identity is None:
            email = st.sidebar.text_input("Email", placeholder="you@example.com")
            password = st.sidebar.text_input("Password", type="password")
            col1, col2 = st.sidebar.columns(2)
            with col1:
                if st.button("Sign in", type="primary"):
                    _finish_sign_in(components, auth.sign_in, email, password)
            with col2:
                if st.button("Create account"):
                    _finish_sign_in(components, auth.sign_up, email, password)
        else:
            st.sidebar.markdown(f"Signed in as **{identity.email}**")
            if st.sidebar.button("Sign out"):
                auth.sign_out()
                components.activity_logger.log_user_signed_out(identity.user_id)
                request_refresh()
                st.rerun()
    else:
        st.sidebar.markdown("Playing with the **demo** piggy bank")

    if st.sidebar.button("🔄 Refresh"):
        request_refresh()
        st.rerun()

    st.sidebar.markdown("---")
    render_storage_status(components)


def render_balance_card(snapshot: Snapshot):
    """Render the current balance."""
    balance = compute_balance(snapshot.transactions)
    message = "Great job saving! 🎉" if balance > 0 else "Start adding some money! 💪"

    st.markdown(f"""
    <div class="balance-box">
        <p>My Balance</p>
        <p class="big-number">{money(balance)}</p>
        <p>{message}</p>
    </div>
    """, unsafe_allow_html=True)


def render_transactions_tab(ledger_flow: LedgerFlow, snapshot: Snapshot):
    """Render the add-transaction form and the transaction list."""
    identity = st.session_state.auth.current_identity()

    st.subheader("Add Money In or Out")
    with st.form("add_transaction", clear_on_submit=True):
        transaction_type = st.radio(
            "What happened?",
            options=list(TransactionType),
            format_func=lambda t: TYPE_LABELS[t],
            horizontal=True,
        )
        col1, col2 = st.columns(2)
        with col1:
            amount = st.number_input(
                "Amount",
                min_value=0.0,
                step=0.5,
                format="%.2f",
            )
        with col2:
            category = st.selectbox(
                "Category",
                options=list(TransactionCategory),
                format_func=lambda c: c.value,
            )
        description = st.text_input(
            "What was it for?",
            placeholder="e.g., Weekly allowance",
        )
        submitted = st.form_submit_button("➕ Add", type="primary")

    if submitted:
        try:
            run_async(
                ledger_flow.add_transaction(
                    identity,
                    transaction_type=transaction_type,
                    amount=str(amount),
                    category=category,
                    description=description,
                )
            )
            request_refresh()
            st.rerun()
        except ValidationError as e:
            show_validation_error(e)
        except GatewayError as e:
            st.error(f"Failed to save: {str(e)}")

    st.markdown("---")
    st.subheader("History")

    if not snapshot.transactions:
        st.info("No money in or out yet. Add your first one above!")
        return

    for transaction in snapshot.transactions:
        col1, col2, col3 = st.columns([4, 2, 1])
        with col1:
            st.markdown(
                f"**{transaction.description}**  \n"
                f"{transaction.category.value} · {transaction.date.strftime('%d %b %Y')}"
            )
        with col2:
            color = "green" if transaction.type == TransactionType.INCOME else "red"
            st.markdown(f":{color}[{money(transaction.signed_amount)}]")
        with col3:
            if st.button("🗑️", key=f"delete_transaction_{transaction.id}"):
                try:
                    run_async(ledger_flow.delete_transaction(identity, transaction.id))
                except NotFoundError:
                    st.warning("That one was already gone.")
                except GatewayError as e:
                    st.error(f"Failed to delete: {str(e)}")
                request_refresh()
                st.rerun()


def render_goals_tab(goal_flow: GoalFlow, snapshot: Snapshot):
    """Render the create-goal form and one card per goal."""
    identity = st.session_state.auth.current_identity()
    balance = compute_balance(snapshot.transactions)

    st.subheader("Start a New Goal")
    with st.form("add_goal", clear_on_submit=True):
        col1, col2 = st.columns([3, 2])
        with col1:
            name = st.text_input("What are you saving for?", placeholder="e.g., New Bike")
        with col2:
            target_amount = st.number_input(
                "How much does it cost?",
                min_value=0.0,
                step=1.0,
                format="%.2f",
            )
        submitted = st.form_submit_button("🎯 Create Goal", type="primary")

    if submitted:
        try:
            run_async(goal_flow.create_goal(identity, name, str(target_amount)))
            request_refresh()
            st.rerun()
        except ValidationError as e:
            show_validation_error(e)
        except GatewayError as e:
            st.error(f"Failed to save: {str(e)}")

    st.markdown("---")

    if not snapshot.goals:
        st.info("No goals yet. What would you like to save for?")
        return

    quick_amounts = get_settings().app.quick_add_amounts_list

    for goal in snapshot.goals:
        progress = compute_goal_progress(goal)

        st.markdown(f"### {goal.name}")
        st.progress(
            float(progress.percentage) / 100,
            text=f"{money(goal.current_amount)} of {money(goal.target_amount)} "
                 f"({progress.percentage:.0f}%)",
        )

        if progress.is_complete:
            st.markdown("""
            <div class="success-box">
                <h4>🎉 Goal reached!</h4>
            </div>
            """, unsafe_allow_html=True)
        else:
            columns = st.columns(len(quick_amounts) + 1)
            for column, amount in zip(columns, quick_amounts):
                with column:
                    if st.button(
                        f"+{money(amount)}",
                        key=f"quick_add_{goal.id}_{amount}",
                        disabled=amount > balance,
                    ):
                        apply_progress(goal_flow, goal, amount, snapshot)
            with columns[-1]:
                if st.button("🗑️ Delete", key=f"delete_goal_{goal.id}"):
                    delete_goal(goal_flow, goal.id)

            with st.expander("Add a different amount"):
                custom = st.number_input(
                    "Amount",
                    min_value=0.0,
                    step=0.5,
                    format="%.2f",
                    key=f"custom_amount_{goal.id}",
                )
                if st.button("Add to goal", key=f"custom_add_{goal.id}"):
                    apply_progress(goal_flow, goal, str(custom), snapshot)

        if progress.is_complete and st.button("🗑️ Delete", key=f"delete_goal_{goal.id}"):
            delete_goal(goal_flow, goal.id)


def apply_progress(goal_flow: GoalFlow, goal, amount, snapshot: Snapshot):
    identity = st.session_state.auth.current_identity()
    try:
        run_async(
            goal_flow.apply_progress(identity, goal, amount, list(snapshot.transactions))
        )
    except ValidationError as e:
        show_validation_error(e)
        return
    except NotFoundError:
        st.warning("That goal was already deleted.")
    except (NotAuthenticatedError, GatewayError) as e:
        st.error(f"Failed to update goal: {str(e)}")
        return
    request_refresh()
    st.rerun()


def delete_goal(goal_flow: GoalFlow, goal_id: str):
    identity = st.session_state.auth.current_identity()
    try:
        run_async(goal_flow.delete_goal(identity, goal_id))
    except NotFoundError:
        st.warning("That goal was already deleted.")
    except GatewayError as e:
        st.error(f"Failed to delete: {str(e)}")
        return
    request_refresh()
    st.rerun()


def render_charts_tab(snapshot: Snapshot):
    """Render the selected chart view as labelled progress bars."""
    view = st.radio(
        "Show me",
        options=CHART_VIEWS,
        key="chart_view",
        horizontal=True,
    )

    if view == CHART_VIEWS[0]:
        chart = income_vs_expense(snapshot.transactions)
        if not chart.has_data:
            st.info("Add some money in or out to see your chart.")
            return
        for bar in (chart.income, chart.expense):
            st.markdown(f"**{bar.label}**: {money(bar.amount)}")
            st.progress(float(bar.percentage) / 100, text=f"{bar.percentage:.0f}%")
        st.markdown(f"**Net:** {money(chart.net_balance)}")
    else:
        chart = spending_by_category(snapshot.transactions)
        if not chart.has_data:
            st.info("No spending yet. Nice saving!")
            return
        for bar in chart.bars:
            st.markdown(f"**{bar.label}**: {money(bar.amount)}")
            st.progress(float(bar.percentage) / 100, text=f"{bar.percentage:.0f}%")


if __name__ == "__main__":
    main()
