"""
Streamlit Frontend for Collection Agent Ledger

The screens the agent uses day to day: dashboard, customers, collections,
deposits and settings.

The UI holds no ledger logic. Every action calls a LedgerStore operation
and re-reads the store (or a reporting function) to redraw.
"""

from datetime import datetime, time, timezone

import streamlit as st
from pydantic import ValidationError

from src.csvio import export_customers_csv, import_customers_csv
from src.ledger import LedgerStore, LedgerValidationError
from src.models.ledger import ConfirmationMethod
from src.orchestrator import CollectionFlow, create_app_components
from src.reporting import dashboard_stats, due_reminders, filter_customers, format_currency


st.set_page_config(
    page_title="Collection Agent Ledger",
    page_icon="📒",
    layout="wide",
    initial_sidebar_state="expanded",
)


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    return create_app_components()


def money(store: LedgerStore, amount, locale: str) -> str:
    return format_currency(amount, store.app_settings.currency, locale)


def show_save_status(store: LedgerStore) -> None:
    if not store.last_save_ok:
        st.warning("Changes are kept for this session but could not be saved to storage.")


def error_text(error: Exception) -> str:
    if isinstance(error, ValidationError):
        return "; ".join(f"{'.'.join(map(str, e['loc']))}: {e['msg']}" for e in error.errors())
    return str(error)


def main():
    """Main application entry point."""
    store, collection_flow, app_config = get_components()
    locale = app_config.locale

    st.sidebar.title("📒 Collection Ledger")
    st.sidebar.caption(f"{store.agent_profile.name} · {store.agent_profile.agency_number}")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navigate to:",
        ["📊 Dashboard", "👥 Customers", "💰 Collections", "🏦 Deposits", "⚙️ Settings"],
        index=0,
    )

    if page == "📊 Dashboard":
        render_dashboard(store, locale)
    elif page == "👥 Customers":
        render_customers(store)
    elif page == "💰 Collections":
        render_collections(store, collection_flow, locale)
    elif page == "🏦 Deposits":
        render_deposits(store, locale)
    elif page == "⚙️ Settings":
        render_settings(store)

    show_save_status(store)


def render_dashboard(store: LedgerStore, locale: str):
    """Totals and due reminders."""
    st.title("📊 Dashboard")
    stats = dashboard_stats(store)

    col1, col2, col3 = st.columns(3)
    col1.metric("Total Collections", money(store, stats.total_collections, locale))
    col2.metric("Total Deposits", money(store, stats.total_deposits, locale))
    col3.metric("Balance", money(store, stats.balance, locale))

    st.subheader("Due Reminders")
    due = due_reminders(store.customers)
    if not due:
        st.info("No due reminders at the moment")
    for customer in due:
        st.markdown(f"**{customer.name}** ({customer.short_code})")


def render_customers(store: LedgerStore):
    """Customer list, add/edit/delete, CSV import/export."""
    st.title("👥 Customers")

    term = st.text_input("Filter", placeholder="Short code, name, phone or account")
    customers = filter_customers(store.customers, term)
    if customers:
        st.dataframe(
            [
                {
                    "Short Code": c.short_code,
                    "Name": c.name,
                    "Phone": c.phone,
                    "Address": c.address,
                    "Account": c.account_number,
                }
                for c in customers
            ],
            hide_index=True,
            use_container_width=True,
        )
    else:
        st.info("No customers found. Add your first customer below.")

    with st.expander("➕ Add customer"):
        with st.form("add_customer", clear_on_submit=True):
            short_code = st.text_input("Short Code", placeholder=f"Leave blank for {store.next_short_code()}")
            name = st.text_input("Name")
            phone = st.text_input("Phone")
            address = st.text_area("Address")
            account_number = st.text_input("Account Number")
            email = st.text_input("Email (optional)")
            if st.form_submit_button("Save", type="primary"):
                try:
                    customer = store.add_customer({
                        "short_code": short_code,
                        "name": name,
                        "phone": phone,
                        "address": address,
                        "account_number": account_number,
                        "email": email or None,
                    })
                    st.success(f"Customer added with short code {customer.short_code}")
                except (LedgerValidationError, ValidationError) as e:
                    st.error(error_text(e))

    if customers and store.modifications_allowed:
        with st.expander("✏️ Edit or delete customer"):
            labels = {f"{c.short_code} · {c.name}": c for c in customers}
            selected = labels[st.selectbox("Customer", list(labels))]
            with st.form("edit_customer"):
                short_code = st.text_input("Short Code", value=selected.short_code)
                name = st.text_input("Name", value=selected.name)
                phone = st.text_input("Phone", value=selected.phone)
                address = st.text_area("Address", value=selected.address)
                account_number = st.text_input("Account Number", value=selected.account_number)
                email = st.text_input("Email", value=selected.email or "")
                save, delete = st.columns(2)
                if save.form_submit_button("Update"):
                    try:
                        store.update_customer(selected.id, {
                            "short_code": short_code,
                            "name": name,
                            "phone": phone,
                            "address": address,
                            "account_number": account_number,
                            "email": email or None,
                        })
                        st.success("Customer updated successfully")
                    except (LedgerValidationError, ValidationError) as e:
                        st.error(error_text(e))
                if delete.form_submit_button("Delete"):
                    if store.delete_customer(selected.id):
                        st.success("Customer deleted successfully")
                    else:
                        st.error("Customer not found")
    elif customers:
        st.caption("Editing is disabled in settings")

    st.subheader("Import / Export")
    st.download_button(
        "⬇️ Export CSV",
        data=export_customers_csv(store.customers),
        file_name="customers.csv",
        mime="text/csv",
    )
    uploaded = st.file_uploader("Import CSV", type=["csv"])
    if uploaded is not None and st.button("Import"):
        text = uploaded.getvalue().decode("utf-8", errors="replace")
        summary = import_customers_csv(store, text)
        st.success(f"Imported {summary.added} customers, skipped {summary.skipped}")


def render_collections(store: LedgerStore, flow: CollectionFlow, locale: str):
    """Collection list and entry form."""
    st.title("💰 Collections")

    customers = filter_customers(store.customers)
    by_id = {c.id: c for c in customers}

    with st.form("add_collection", clear_on_submit=True):
        if customers:
            labels = {f"{c.short_code} · {c.name}": c.id for c in customers}
            customer_label = st.selectbox("Customer", list(labels))
        else:
            labels, customer_label = {}, None
            st.info("Add a customer first.")
        amount = st.number_input("Amount", min_value=0.0, step=100.0)
        penalty = st.number_input("Penalty", min_value=0.0, step=10.0)
        on = st.date_input("Date", value=datetime.now().date())
        if st.form_submit_button("Record", type="primary", disabled=not customers):
            try:
                collection, confirmation, over_limit = flow.record({
                    "customer_id": labels[customer_label],
                    "amount": str(amount),
                    "penalty": str(penalty),
                    "created_at": datetime.combine(on, time(12, 0), tzinfo=timezone.utc),
                })
                st.success(f"Collection added. Receipt {collection.receipt_number}")
                if over_limit:
                    st.warning("Amount is above the maximum lot amount.")
                if confirmation is not None and confirmation.sent:
                    st.info(f"Confirmation sent via {confirmation.method.value} (simulated)")
            except (LedgerValidationError, ValidationError) as e:
                st.error(error_text(e))

    rows = []
    for c in sorted(store.collections, key=lambda c: c.created_at, reverse=True):
        customer = by_id.get(c.customer_id)
        rows.append({
            "Receipt": c.receipt_number,
            "Customer": customer.name if customer else "(deleted)",
            "Amount": money(store, c.amount, locale),
            "Penalty": money(store, c.penalty, locale),
            "Date": c.created_at.date().isoformat(),
        })
    if rows:
        st.dataframe(rows, hide_index=True, use_container_width=True)

    if store.collections and store.modifications_allowed:
        with st.expander("🗑️ Delete collection"):
            receipts = {c.receipt_number or c.id: c.id for c in store.collections}
            receipt = st.selectbox("Receipt", list(receipts))
            if st.button("Delete collection"):
                if store.delete_collection(receipts[receipt]):
                    st.success("Collection deleted")
                else:
                    st.error("Collection not found")


def render_deposits(store: LedgerStore, locale: str):
    """Deposit list and entry form."""
    st.title("🏦 Deposits")
    st.metric("Cash in hand", money(store, store.compute_stats().balance, locale))

    with st.form("add_deposit", clear_on_submit=True):
        amount = st.number_input("Amount", min_value=0.0, step=500.0)
        on = st.date_input("Date", value=datetime.now().date())
        if st.form_submit_button("Record deposit", type="primary"):
            try:
                store.add_deposit({
                    "amount": str(amount),
                    "created_at": datetime.combine(on, time(12, 0), tzinfo=timezone.utc),
                })
                st.success("Deposit added successfully")
            except (LedgerValidationError, ValidationError) as e:
                st.error(error_text(e))

    deposits = sorted(store.deposits, key=lambda d: d.created_at, reverse=True)
    if deposits:
        st.dataframe(
            [
                {"Amount": money(store, d.amount, locale), "Date": d.created_at.date().isoformat()}
                for d in deposits
            ],
            hide_index=True,
            use_container_width=True,
        )

    if deposits and store.modifications_allowed:
        with st.expander("🗑️ Delete deposit"):
            labels = {
                f"{d.created_at.date().isoformat()} · {money(store, d.amount, locale)} · {d.id[:6]}": d.id
                for d in deposits
            }
            label = st.selectbox("Deposit", list(labels))
            if st.button("Delete deposit"):
                if store.delete_deposit(labels[label]):
                    st.success("Deposit deleted")
                else:
                    st.error("Deposit not found")


def render_settings(store: LedgerStore):
    """Agent profile and app settings."""
    st.title("⚙️ Settings")

    profile = store.agent_profile
    st.subheader("Agent Profile")
    with st.form("profile"):
        name = st.text_input("Name", value=profile.name)
        agency_number = st.text_input("Agency Number", value=profile.agency_number)
        validity_date = st.date_input("Validity Date", value=profile.validity_date)
        branch_address = st.text_area("Branch Address", value=profile.branch_address)
        mobile_number = st.text_input("Mobile Number", value=profile.mobile_number)
        if st.form_submit_button("Save profile"):
            try:
                store.update_agent_profile({
                    "name": name,
                    "agency_number": agency_number,
                    "validity_date": validity_date,
                    "branch_address": branch_address,
                    "mobile_number": mobile_number,
                })
                st.success("Profile saved")
            except (LedgerValidationError, ValidationError) as e:
                st.error(error_text(e))

    settings = store.app_settings
    methods = [m.value for m in ConfirmationMethod]
    st.subheader("App Settings")
    with st.form("app_settings"):
        allow_modifications = st.checkbox("Allow edit and delete", value=settings.allow_modifications)
        currency = st.text_input("Currency", value=settings.currency)
        max_lot_amount = st.number_input(
            "Max lot amount", min_value=0.0, value=float(settings.max_lot_amount), step=1000.0
        )
        auto_confirmation = st.checkbox(
            "Send confirmation automatically", value=settings.auto_confirmation_enabled
        )
        method = st.selectbox(
            "Confirmation method", methods, index=methods.index(settings.confirmation_method.value)
        )
        if st.form_submit_button("Save settings"):
            try:
                store.update_app_settings({
                    "allow_modifications": allow_modifications,
                    "currency": currency,
                    "max_lot_amount": str(max_lot_amount),
                    "auto_confirmation_enabled": auto_confirmation,
                    "confirmation_method": method,
                })
                st.success("Settings saved")
            except (LedgerValidationError, ValidationError) as e:
                st.error(error_text(e))


if __name__ == "__main__":
    main()
