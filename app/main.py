"""
Streamlit Frontend for PocketPlan

This is the user interface for planning a month's budget and recording
what was actually spent.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Explicit confirmation before anything is deleted
3. Clear error messages next to the field that caused them
4. Totals always computed from what is on screen
5. No hidden actions

Every page reads the stores and derived views from the session's
components and hands user actions to the flows.
"""

import asyncio
from datetime import date
from decimal import Decimal

import streamlit as st

from pocketplan.auth import AuthState
from pocketplan.config import validate_all_settings
from pocketplan.models.finance import AccountType, CategoryType
from pocketplan.models.forms import (
    BudgetDraft,
    BudgetItemDraft,
    CategoryDraft,
    TransactionDraft,
    ValidationResult,
)
from pocketplan.orchestrator import AppComponents, create_app_components
from pocketplan.ui import (
    BudgetDetailState,
    BudgetTab,
    TransactionTab,
    TransactionsState,
    current_month_year,
    month_name,
)
from pocketplan.validation import (
    MAX_DESCRIPTION_LENGTH,
    MAX_NAME_LENGTH,
    MAX_TRANSACTION_DESCRIPTION_LENGTH,
    FormValidator,
)


# Page configuration
st.set_page_config(
    page_title="PocketPlan",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .big-number {
        font-size: 2.5em;
        font-weight: bold;
        color: #2c3e50;
    }
</style>
""", unsafe_allow_html=True)


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def get_components() -> AppComponents:
    """Get or create this browser session's components."""
    if "components" not in st.session_state:
        st.session_state.components = create_app_components()
        st.session_state.restore_attempted = False
    return st.session_state.components


def money(amount: Decimal) -> str:
    return f"${amount:,.2f}"


def show_field_errors(result: ValidationResult):
    for issue in result.issues:
        st.error(issue.message)


def show_store_error(store):
    error = store.error()
    if error:
        st.error(error)


def main():
    """Main application entry point."""
    components = get_components()
    session = components.session

    # Returning visitor: revalidate the stored token once
    if not st.session_state.restore_attempted:
        st.session_state.restore_attempted = True
        if session.has_token:
            run_async(session.restore())

    # Arriving from the emailed link
    link_token = st.query_params.get("token")
    if link_token and not session.is_authenticated:
        with st.spinner("Signing you in..."):
            run_async(session.verify(link_token))
        st.query_params.clear()

    if not session.is_authenticated:
        render_login_page(components)
        return

    if "categories_loaded" not in st.session_state:
        run_async(components.budget_flow.load_reference_data())
        st.session_state.categories_loaded = True

    # Sidebar navigation
    st.sidebar.title("💰 PocketPlan")
    user = session.user()
    if user:
        st.sidebar.caption(f"Signed in as {user.email}")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Dashboard", "📅 Budget", "💳 Transactions", "🏷️ Categories", "⚙️ Settings"],
        index=0,
    )

    st.sidebar.markdown("---")
    if st.sidebar.button("Log out"):
        session.logout()
        for key in ("categories_loaded", "budget_state", "transactions_state"):
            st.session_state.pop(key, None)
        st.rerun()

    # Route to appropriate page
    if page == "📊 Dashboard":
        render_dashboard_page(components)
    elif page == "📅 Budget":
        render_budget_page(components)
    elif page == "💳 Transactions":
        render_transactions_page(components)
    elif page == "🏷️ Categories":
        render_categories_page(components)
    elif page == "⚙️ Settings":
        render_settings_page()


def render_login_page(components: AppComponents):
    """Render the passwordless login page."""
    session = components.session
    st.title("💰 PocketPlan")

    if session.error():
        st.error(session.error())

    if session.state() == AuthState.LINK_SENT:
        st.success(f"We sent a login link to {session.pending_email()}. Check your inbox.")
        with st.form("verify_form"):
            token = st.text_input("Or paste the code from the email")
            if st.form_submit_button("Sign in", type="primary") and token:
                run_async(session.verify(token.strip()))
                st.rerun()
        if st.button("Use a different email"):
            session.logout()
            st.rerun()
        return

    st.markdown("Enter your email and we'll send you a link to sign in.")
    with st.form("login_form"):
        email = st.text_input("Email")
        submitted = st.form_submit_button("Send login link", type="primary")

    if submitted:
        result = FormValidator().validate_login(email)
        if result.has_errors:
            show_field_errors(result)
            return
        with st.spinner("Sending..."):
            run_async(session.request_link(email.strip()))
        st.rerun()


def render_dashboard_page(components: AppComponents):
    """Render this month's overview."""
    month, year = current_month_year()
    st.title(f"📊 {month_name(month)} {year}")

    budget = run_async(components.budget_flow.select_month(month, year))
    show_store_error(components.budgets)

    if budget is None:
        st.info("There is no budget for this month yet. Create one on the Budget page.")
        return

    summary = components.views.budget_summary()
    col1, col2, col3 = st.columns(3)
    col1.metric("Income", money(summary.total_income))
    col2.metric("Planned expenses", money(summary.total_expenses))
    col3.metric("Left to allocate", money(summary.balance))

    col1, col2, col3 = st.columns(3)
    col1.metric("Cash", money(summary.cash_amount))
    col2.metric("Monthly", money(summary.monthly_amount))
    col3.metric("Savings", money(summary.savings_amount))

    st.markdown("---")
    st.markdown("### Spent so far")
    col1, col2 = st.columns(2)
    col1.metric("Checking", money(components.views.checking_total()))
    col2.metric("Savings", money(components.views.savings_total()))

    balances = components.views.savings_balances()
    if balances:
        st.markdown("### Savings balances")
        for category_id, balance in balances.items():
            st.write(
                f"**{components.views.category_name(category_id)}**: "
                f"{money(balance.available_balance)} available "
                f"({money(balance.funded_amount)} funded, {money(balance.spent_amount)} spent)"
            )

    st.markdown("---")
    if st.button("Show month-end summary"):
        report = run_async(components.budgets.load_months_end_summary(budget.id))
        show_store_error(components.budgets)
        if report:
            rows = [
                {
                    "Type": row.category_type.value.title(),
                    "Budgeted": money(row.budgeted),
                    "Actual": money(row.actual),
                    "Variance": money(row.variance),
                }
                for row in report.categories
            ]
            st.table(rows)
            st.write(
                f"Total: {money(report.total_budgeted)} budgeted, "
                f"{money(report.total_actual)} actual"
            )


def render_budget_page(components: AppComponents):
    """Render the budget detail page."""
    if "budget_state" not in st.session_state:
        st.session_state.budget_state = BudgetDetailState(
            year_window=components.settings.app.year_window
        )
    state: BudgetDetailState = st.session_state.budget_state
    views = components.views

    col1, col2 = st.columns(2)
    with col1:
        month = st.selectbox(
            "Month",
            options=list(range(1, 13)),
            index=state.selected_month - 1,
            format_func=month_name,
        )
    with col2:
        years = state.year_options()
        year = st.selectbox(
            "Year",
            options=years,
            index=years.index(state.selected_year) if state.selected_year in years else 0,
        )
    if (month, year) != (state.selected_month, state.selected_year):
        state.select_month(month, year)

    st.title(f"📅 {state.title}")

    budget = run_async(components.budget_flow.select_month(state.selected_month, state.selected_year))
    show_store_error(components.budgets)

    if budget is None:
        render_create_budget_form(components, state)
        return

    summary = views.budget_summary()
    col1, col2, col3 = st.columns(3)
    col1.metric("Income", money(summary.total_income))
    col2.metric("Expenses", money(summary.total_expenses))
    col3.metric("Balance", money(summary.balance))

    tab = st.radio(
        "Section",
        options=list(BudgetTab),
        index=list(BudgetTab).index(state.active_tab),
        format_func=lambda t: t.value,
        horizontal=True,
    )
    state.switch_tab(tab)
    state.search = st.text_input("Search by category or amount", value=state.search)

    show_store_error(components.budget_items)

    items = state.filter_items(
        views.items_of_type(state.active_category_type), views.category_name
    )
    if not items:
        st.info("No allocations yet.")

    for item in items:
        col1, col2, col3, col4 = st.columns([3, 2, 1, 1])
        col1.write(views.category_name(item.category_id))
        col2.write(money(item.amount))
        if col3.button("Edit", key=f"edit_item_{item.id}"):
            state.start_editing(item.id)
            st.rerun()
        with col4:
            confirmed = st.checkbox("Sure?", key=f"confirm_item_{item.id}")
            if st.button("Delete", key=f"delete_item_{item.id}"):
                if run_async(components.budget_flow.delete_allocation(item.id, confirmed)):
                    st.rerun()
                elif not confirmed:
                    st.warning("Tick the box to confirm deletion.")

    st.markdown("---")
    render_allocation_form(components, state)


def render_create_budget_form(components: AppComponents, state: BudgetDetailState):
    st.info(f"There is no budget for {state.title}.")
    with st.form("create_budget_form"):
        name = st.text_input(
            "Budget name", value=f"{state.title} Budget", max_chars=MAX_NAME_LENGTH
        )
        description = st.text_area("Description (optional)", max_chars=MAX_DESCRIPTION_LENGTH)
        submitted = st.form_submit_button("Create budget", type="primary")

    if submitted:
        draft = BudgetDraft(
            month=state.selected_month,
            year=state.selected_year,
            name=name,
            description=description,
        )
        budget, result = run_async(components.budget_flow.create_budget(draft))
        if result.has_errors:
            show_field_errors(result)
        elif budget is None:
            show_store_error(components.budgets)
        else:
            st.rerun()


def render_allocation_form(components: AppComponents, state: BudgetDetailState):
    views = components.views
    category_type = state.active_category_type
    editing = components.budget_items.find(state.editing_item_id) if state.editing_item_id else None

    categories = views.categories_of_type(category_type)
    if not categories:
        st.info(f"Create a {category_type.value} category first.")
        return

    category_ids = [c.id for c in categories]
    default_index = (
        category_ids.index(editing.category_id)
        if editing and editing.category_id in category_ids else 0
    )

    st.markdown("### Edit allocation" if editing else "### Add allocation")
    with st.form("allocation_form"):
        category_id = st.selectbox(
            "Category",
            options=category_ids,
            index=default_index,
            format_func=views.category_name,
        )
        amount = st.number_input(
            "Amount",
            min_value=0.0,
            value=float(editing.amount) if editing else 0.0,
            step=10.0,
        )
        submitted = st.form_submit_button("Save", type="primary")

    if editing and st.button("Cancel edit"):
        state.stop_editing()
        st.rerun()

    if submitted:
        draft = BudgetItemDraft(
            category_id=category_id,
            amount=Decimal(str(amount)),
            category_type=category_type,
            editing_item_id=state.editing_item_id,
        )
        item, result = run_async(components.budget_flow.save_allocation(draft))
        if result.has_errors:
            show_field_errors(result)
        elif item is None:
            show_store_error(components.budget_items)
        else:
            state.stop_editing()
            st.rerun()


def render_transactions_page(components: AppComponents):
    """Render checking and savings transactions for the selected month."""
    if "transactions_state" not in st.session_state:
        st.session_state.transactions_state = TransactionsState()
    state: TransactionsState = st.session_state.transactions_state
    budget_state = st.session_state.get("budget_state") or BudgetDetailState()
    views = components.views

    st.title(f"💳 Transactions, {budget_state.title}")
    budget = run_async(
        components.budget_flow.select_month(budget_state.selected_month, budget_state.selected_year)
    )
    if budget is None:
        st.info("Create a budget for this month before recording transactions.")
        return

    tab = st.radio(
        "Account",
        options=list(TransactionTab),
        index=list(TransactionTab).index(state.active_tab),
        format_func=lambda t: t.value,
        horizontal=True,
    )
    state.switch_tab(tab)
    account_type = state.active_account_type

    show_store_error(components.transactions)
    st.metric(f"{tab.value} total", money(views.account_total(account_type)))

    for txn in views.transactions_for(account_type):
        col1, col2, col3, col4, col5 = st.columns([2, 3, 2, 1, 1])
        col1.write(txn.transaction_date.isoformat())
        col2.write(f"{views.transaction_category_name(txn)}: {txn.description or ''}")
        col3.write(money(txn.amount))
        if col4.button("Edit", key=f"edit_txn_{txn.id}"):
            state.start_editing(txn.id)
            st.rerun()
        with col5:
            confirmed = st.checkbox("Sure?", key=f"confirm_txn_{txn.id}")
            if st.button("Delete", key=f"delete_txn_{txn.id}"):
                if run_async(components.transaction_flow.delete_transaction(txn.id, confirmed)):
                    st.rerun()
                elif not confirmed:
                    st.warning("Tick the box to confirm deletion.")

    st.markdown("---")
    render_transaction_form(components, state, account_type)


def render_transaction_form(
    components: AppComponents,
    state: TransactionsState,
    account_type: AccountType,
):
    views = components.views
    editing = (
        components.transactions.find(state.editing_transaction_id)
        if state.editing_transaction_id else None
    )

    if account_type == AccountType.CHECKING:
        options = [
            item.id for item in components.budget_items.items()
            if item.category_type != CategoryType.SAVINGS
        ]
        label = "Budget item"
        fmt = views.budget_item_label
        current = editing.budget_item_id if editing else None
    else:
        options = [c.id for c in views.savings_categories()]
        label = "Savings category"
        fmt = views.category_name
        current = editing.category_id if editing else None

    if not options:
        st.info(f"Nothing to record against yet. Add a {label.lower()} first.")
        return

    st.markdown("### Edit transaction" if editing else "### Add transaction")
    with st.form("transaction_form"):
        target = st.selectbox(
            label,
            options=options,
            index=options.index(current) if current in options else 0,
            format_func=fmt,
        )
        if account_type == AccountType.SAVINGS:
            balance = views.savings_category_balance(target)
            st.caption(f"Available: {money(balance.available_balance)}")
        amount = st.number_input(
            "Amount",
            min_value=0.0,
            value=float(editing.amount) if editing else 0.0,
            step=1.0,
        )
        description = st.text_input(
            "Description", value=(editing.description or "") if editing else "",
            max_chars=MAX_TRANSACTION_DESCRIPTION_LENGTH,
        )
        txn_date = st.date_input(
            "Date", value=editing.transaction_date if editing else date.today()
        )
        submitted = st.form_submit_button("Save", type="primary")

    if editing and st.button("Cancel edit"):
        state.stop_editing()
        st.rerun()

    if submitted:
        draft = TransactionDraft(
            amount=Decimal(str(amount)),
            description=description,
            transaction_date=txn_date,
            account_type=account_type,
            budget_item_id=target if account_type == AccountType.CHECKING else None,
            category_id=target if account_type == AccountType.SAVINGS else None,
            editing_transaction_id=state.editing_transaction_id,
        )
        transaction, result = run_async(components.transaction_flow.save_transaction(draft))
        if result.has_errors:
            show_field_errors(result)
        elif transaction is None:
            show_store_error(components.transactions)
        else:
            state.stop_editing()
            st.rerun()


def render_categories_page(components: AppComponents):
    """Render category management."""
    st.title("🏷️ Categories")
    views = components.views
    flow = components.category_flow

    show_store_error(components.categories)

    for category_type in CategoryType:
        st.markdown(f"### {category_type.value.title()}")
        categories = views.categories_of_type(category_type)
        if not categories:
            st.caption("None yet.")
        for category in categories:
            col1, col2, col3 = st.columns([3, 2, 1])
            new_name = col1.text_input(
                "Name", value=category.name, key=f"name_{category.id}",
                max_chars=MAX_NAME_LENGTH,
                label_visibility="collapsed",
            )
            if col2.button("Rename", key=f"rename_{category.id}") and new_name != category.name:
                _, result = run_async(flow.rename_category(category.id, new_name))
                if result.has_errors:
                    show_field_errors(result)
                else:
                    st.rerun()
            with col3:
                confirmed = st.checkbox("Sure?", key=f"confirm_cat_{category.id}")
                if st.button("Archive", key=f"archive_{category.id}"):
                    if run_async(flow.archive_category(category.id, confirmed)):
                        st.rerun()
                    elif not confirmed:
                        st.warning("Tick the box to confirm.")

    st.markdown("---")
    st.markdown("### New category")
    with st.form("category_form"):
        name = st.text_input("Name", max_chars=MAX_NAME_LENGTH)
        category_type = st.selectbox(
            "Type",
            options=list(CategoryType),
            format_func=lambda t: t.value.title(),
        )
        description = st.text_input(
            "Description (optional)", max_chars=MAX_DESCRIPTION_LENGTH
        )
        submitted = st.form_submit_button("Create", type="primary")

    if submitted:
        category, result = run_async(flow.create_category(
            CategoryDraft(name=name, type=category_type, description=description)
        ))
        if result.has_errors:
            show_field_errors(result)
        elif category is not None:
            st.rerun()


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Configuration Status")
    status = validate_all_settings()

    for name in ("api", "auth", "app"):
        if status.get(name, False):
            st.success(f"✅ {name} settings - OK")
        else:
            st.error(f"❌ {name} settings - {status.get(f'{name}_error', 'Invalid')}")

    st.markdown("---")
    st.markdown(
        "Settings are read from environment variables or a `.env` file, "
        "e.g. `POCKETPLAN_API_BASE_URL`."
    )


if __name__ == "__main__":
    main()
