"""
Streamlit Frontend for the Ledger Book

This is the interface the business owner uses daily to keep the cash book,
the staff ledgers and the tori (weight x price) records.

DESIGN PRINCIPLES:
1. Simple, clear interface
2. Every number on screen comes from the ledger package, never the UI
3. Validation warnings are shown before anything is saved
4. Every page re-fetches; nothing is cached between reruns
"""

import asyncio
from datetime import date

import streamlit as st

from ledgerbook.ledger import current_month, is_today, local_today
from ledgerbook.models import (
    AccountSession,
    CommodityRecord,
    EntryKind,
    MonthKey,
    MonthlyNote,
    Person,
    PersonLedgerEntry,
    Transaction,
    TransactionKind,
)
from ledgerbook.orchestrator import LedgerFlows, create_app_components
from ledgerbook.reports import StatementDocument, format_amount, render_text


# Page configuration
st.set_page_config(
    page_title="RDF Ledger Book",
    page_icon="📒",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .today-row {
        background-color: #e0e7ff;
        border-radius: 6px;
        padding: 4px 8px;
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


@st.cache_resource
def get_components(account_id: str, display_name: str):
    """Get or create application components for one account (cached)."""
    session = AccountSession(account_id=account_id, display_name=display_name)
    try:
        return create_app_components(session, use_storage=True)
    except Exception as e:
        st.error(f"Failed to initialize: {e}")
        return create_app_components(session, use_storage=False)


def recent_months(count: int = 12) -> list[MonthKey]:
    month = current_month()
    months = []
    for _ in range(count):
        months.append(month)
        month = month.previous()
    return months


def show_validation(flows: LedgerFlows, result, saved_label: str):
    """Show the outcome of a save attempt."""
    if not result.can_save:
        st.error(flows.validation_summary(result))
        return
    st.success(saved_label)
    if result.warnings:
        st.warning(flows.validation_summary(result))


def start_editing(key: str, record):
    """Load a record into its form; saving keeps the record's id."""
    st.session_state[key] = record
    st.rerun()


def stop_editing(key: str):
    st.session_state.pop(key, None)


def same_id(record) -> dict:
    """Constructor kwargs that make a save replace the record being edited."""
    return {"id": record.id} if record is not None else {}


def download_statement(document: StatementDocument, key: str):
    st.download_button(
        "⬇️ Download statement",
        data=render_text(document),
        file_name=f"{document.title.lower().replace(' ', '_').replace(':', '')}_{document.period.replace(' ', '_')}.txt",
        mime="text/plain",
        key=key,
    )


def main():
    """Main application entry point."""
    st.sidebar.title("📒 RDF Ledger Book")
    st.sidebar.markdown("---")

    account_id = st.sidebar.text_input("Account ID", value=st.session_state.get("account_id", ""))
    display_name = st.sidebar.text_input("Your name", value=st.session_state.get("display_name", ""))
    st.session_state.account_id = account_id.strip()
    st.session_state.display_name = display_name.strip()

    if not st.session_state.account_id:
        st.title("📒 RDF Ledger Book")
        st.info("Enter your account ID in the sidebar to open your books.")
        return

    flows, _ = get_components(st.session_state.account_id, st.session_state.display_name)

    month = st.sidebar.selectbox(
        "Month",
        options=recent_months(),
        format_func=lambda m: m.label,
    )

    st.sidebar.markdown("---")
    page = st.sidebar.radio(
        "Navigate to:",
        [
            "📊 Overview",
            "💸 Cash Book",
            "📅 Daily Ledger",
            "👷 Staff",
            "⚖️ Tori Records",
            "📄 Reports",
            "⚙️ Settings",
        ],
        index=0,
    )

    if page == "📊 Overview":
        render_overview_page(flows, month)
    elif page == "💸 Cash Book":
        render_cash_book_page(flows, month)
    elif page == "📅 Daily Ledger":
        render_daily_ledger_page(flows, month)
    elif page == "👷 Staff":
        render_staff_page(flows, month)
    elif page == "⚖️ Tori Records":
        render_tori_page(flows)
    elif page == "📄 Reports":
        render_reports_page(flows, month)
    elif page == "⚙️ Settings":
        render_settings_page()


def render_overview_page(flows: LedgerFlows, month: MonthKey):
    """Render the monthly overview."""
    st.title(f"📊 Overview: {month.label}")

    view = run_async(flows.dashboard(month))
    combined = view.combined

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Received", format_amount(combined.total_income))
    col2.metric("Business Expenses", format_amount(combined.business_expense))
    col3.metric("Staff Expenses", format_amount(combined.staff_expense))
    col4.metric("Net Balance", format_amount(combined.net_balance))

    if view.balance.note_count:
        st.caption(
            f"Cash book balance {format_amount(view.balance.summary.net_balance)} "
            f"with {view.balance.note_count} note(s): "
            f"adjusted {format_amount(view.balance.adjusted_balance)}"
        )

    st.markdown("### Staff")
    if not view.standings:
        st.info("No staff added yet.")
    for standing in view.standings:
        cols = st.columns([3, 2, 2, 2])
        cols[0].markdown(f"**{standing.person.name}**")
        cols[1].markdown(standing.balance_text)
        cols[2].markdown(f"Used {format_amount(standing.monthly_consumption)}")
        if standing.over_limit:
            cols[3].markdown(f"🔴 Over by {format_amount(-standing.monthly_remaining_limit)}")
        else:
            cols[3].markdown(f"🟢 {format_amount(standing.monthly_remaining_limit)} left")

    st.markdown("### Tori")
    col1, col2, col3 = st.columns(3)
    col1.metric("Total Due", format_amount(view.commodity.total_due))
    col2.metric("Total Paid", format_amount(view.commodity.total_paid))
    col3.metric("Remaining", format_amount(view.commodity.remaining_balance))

    st.markdown("---")
    if st.button("💡 Get spending advice"):
        with st.spinner("Thinking..."):
            st.info(run_async(flows.insights(month)))


def render_cash_book_page(flows: LedgerFlows, month: MonthKey):
    """Render the cash book: add and list income, expenses and transfers."""
    st.title("💸 Cash Book")

    editing = st.session_state.get("editing_transaction")
    kinds = list(TransactionKind)
    with st.form("transaction_form", clear_on_submit=True):
        if editing is not None:
            st.markdown(f"**Editing:** {editing.description} ({editing.date:%d %b})")
        col1, col2, col3 = st.columns(3)
        with col1:
            kind = st.selectbox(
                "Type",
                options=kinds,
                index=kinds.index(editing.kind) if editing else 0,
                format_func=lambda k: k.label,
            )
        with col2:
            when = st.date_input("Date", value=editing.date if editing else local_today())
        with col3:
            amount = st.text_input("Amount", value=str(editing.amount) if editing else "")
        description = st.text_input("Description", value=editing.description if editing else "")
        col1, col2 = st.columns(2)
        with col1:
            source = st.text_input("Source / paid to", value=(editing.source or "") if editing else "")
        with col2:
            remarks = st.text_input("Remarks", value=(editing.remarks or "") if editing else "")
        submitted = st.form_submit_button("💾 Update" if editing else "💾 Save")
        cancelled = st.form_submit_button("Cancel edit") if editing else False

    if cancelled:
        stop_editing("editing_transaction")
        st.rerun()

    if submitted:
        try:
            transaction = Transaction(
                kind=kind,
                date=when,
                description=description,
                amount=amount,
                remarks=remarks or None,
                source=source or None,
                **same_id(editing),
            )
        except ValueError as e:
            st.error(f"Invalid entry: {e}")
        else:
            result = run_async(flows.save_transaction(transaction))
            show_validation(flows, result, "Updated" if editing else "Saved")
            if result.can_save:
                stop_editing("editing_transaction")

    st.markdown(f"### {month.label}")
    transactions = run_async(flows.transactions_for_month(month))
    if not transactions:
        st.info("No transactions this month.")
    for t in transactions:
        cols = st.columns([2, 4, 2, 2, 1, 1])
        cols[0].markdown(t.date.strftime("%d %b"))
        cols[1].markdown(t.description + (f" _({t.remarks})_" if t.remarks else ""))
        cols[2].markdown(t.kind.label)
        cols[3].markdown(format_amount(t.amount))
        if cols[4].button("✏️", key=f"edit_t_{t.id}"):
            start_editing("editing_transaction", t)
        if cols[5].button("🗑️", key=f"del_t_{t.id}"):
            run_async(flows.delete_transaction(t.id))
            stop_editing("editing_transaction")
            st.rerun()


def render_daily_ledger_page(flows: LedgerFlows, month: MonthKey):
    """Render one row per day of the month, with drill-down into a day."""
    st.title("📅 Daily Ledger")

    kind = st.radio(
        "Show",
        options=[TransactionKind.EXPENSE, TransactionKind.INCOME],
        format_func=lambda k: "Expenses" if k is TransactionKind.EXPENSE else "Income",
        horizontal=True,
    )
    ledger = run_async(flows.daily_ledger(month, kind))
    st.metric(f"{month.label} total", format_amount(ledger.total))

    for bucket in ledger.days:
        label = f"{bucket.date.strftime('%a %d %b')}: {format_amount(bucket.total)} ({bucket.count})"
        if is_today(bucket.date):
            st.markdown(f'<div class="today-row">📍 {label}</div>', unsafe_allow_html=True)
        else:
            st.markdown(label)

    st.markdown("---")
    day = st.date_input(
        "Day detail",
        value=local_today() if month.contains(local_today()) else date(month.year, month.month, 1),
    )
    detail = run_async(flows.day_detail(day, kind))
    if not detail.entries:
        st.info("Nothing recorded on this day.")
    for t in detail.entries:
        st.markdown(f"- {t.description}: **{format_amount(t.amount)}** {t.kind.label}")
    st.markdown(f"**Day total: {format_amount(detail.total)}**")

    col1, col2 = st.columns(2)
    with col1:
        download_statement(
            run_async(flows.daily_ledger_statement(month, kind)), key="daily_statement"
        )
    with col2:
        download_statement(
            run_async(flows.day_detail_statement(day, kind)), key="day_statement"
        )


def render_staff_page(flows: LedgerFlows, month: MonthKey):
    """Render staff ledgers: people, their entries and monthly limits."""
    st.title("👷 Staff")

    with st.expander("➕ Add person"):
        with st.form("person_form", clear_on_submit=True):
            name = st.text_input("Name")
            col1, col2 = st.columns(2)
            with col1:
                opening = st.text_input(
                    "Opening balance",
                    value="0",
                    help="Positive: advance held by the person. Negative: owed to the person.",
                )
            with col2:
                limit = st.text_input("Monthly limit", value="0")
            if st.form_submit_button("💾 Save person"):
                try:
                    person = Person(name=name, opening_balance=opening, monthly_limit=limit)
                except ValueError as e:
                    st.error(f"Invalid person: {e}")
                else:
                    show_validation(flows, run_async(flows.save_person(person)), f"Added {person.name}")

    view = run_async(flows.dashboard(month))
    if not view.standings:
        st.info("No staff added yet.")
        return

    standing = st.selectbox(
        "Person",
        options=view.standings,
        format_func=lambda s: f"{s.person.name} ({s.balance_text})",
    )
    person = standing.person

    col1, col2, col3 = st.columns(3)
    col1.metric(standing.side.label, format_amount(standing.display_balance))
    col2.metric("Used this month", format_amount(standing.monthly_consumption))
    col3.metric("Remaining limit", format_amount(standing.monthly_remaining_limit))
    if standing.over_limit:
        st.warning(f"{person.name} is over their monthly limit.")

    editing = st.session_state.get("editing_entry")
    if editing is not None and editing.person_id != person.id:
        stop_editing("editing_entry")
        editing = None
    kinds = list(EntryKind)
    with st.form("entry_form", clear_on_submit=True):
        if editing is not None:
            st.markdown(f"**Editing:** {editing.description} ({editing.date:%d %b})")
        col1, col2, col3 = st.columns(3)
        with col1:
            kind = st.selectbox(
                "Type",
                options=kinds,
                index=kinds.index(editing.kind) if editing else 0,
                format_func=lambda k: k.value.title(),
            )
        with col2:
            when = st.date_input("Date", value=editing.date if editing else local_today())
        with col3:
            amount = st.text_input("Amount", value=str(editing.amount) if editing else "")
        description = st.text_input("Description", value=editing.description if editing else "")
        submitted = st.form_submit_button("💾 Update entry" if editing else "💾 Save entry")
        cancelled = st.form_submit_button("Cancel edit") if editing else False

    if cancelled:
        stop_editing("editing_entry")
        st.rerun()

    if submitted:
        try:
            entry = PersonLedgerEntry(
                person_id=person.id,
                date=when,
                description=description,
                amount=amount,
                kind=kind,
                **same_id(editing),
            )
        except ValueError as e:
            st.error(f"Invalid entry: {e}")
        else:
            result = run_async(flows.save_person_entry(entry))
            show_validation(flows, result, "Updated" if editing else "Saved")
            if result.can_save:
                stop_editing("editing_entry")

    st.markdown(f"### {month.label}")
    for e in standing.month_entries:
        cols = st.columns([2, 4, 2, 2, 1, 1])
        cols[0].markdown(e.date.strftime("%d %b"))
        cols[1].markdown(e.description)
        cols[2].markdown(e.kind.value.title())
        cols[3].markdown(("+" if e.kind.is_credit else "-") + format_amount(e.amount))
        if cols[4].button("✏️", key=f"edit_e_{e.id}"):
            start_editing("editing_entry", e)
        if cols[5].button("🗑️", key=f"del_e_{e.id}"):
            run_async(flows.delete_person_entry(e.id))
            stop_editing("editing_entry")
            st.rerun()

    document = run_async(flows.person_statement(person.id, month))
    if document is not None:
        download_statement(document, key="person_statement")

    if st.button(f"Delete {person.name} and all their entries", type="secondary"):
        run_async(flows.delete_person(person.id))
        st.rerun()


def render_tori_page(flows: LedgerFlows):
    """Render weight x price trade records."""
    st.title("⚖️ Tori Records")

    editing = st.session_state.get("editing_commodity")
    with st.form("tori_form", clear_on_submit=True):
        if editing is not None:
            st.markdown(f"**Editing:** {editing.description or 'record'} ({editing.date:%d %b %Y})")
        col1, col2, col3, col4 = st.columns(4)
        with col1:
            when = st.date_input("Date", value=editing.date if editing else local_today())
        with col2:
            quantity = st.text_input("Quantity", value=str(editing.quantity) if editing else "")
        with col3:
            rate = st.text_input("Rate", value=str(editing.unit_price) if editing else "")
        with col4:
            paid = st.text_input("Payment given", value=str(editing.payment_given) if editing else "0")
        description = st.text_input("Description", value=editing.description if editing else "")
        submitted = st.form_submit_button("💾 Update record" if editing else "💾 Save record")
        cancelled = st.form_submit_button("Cancel edit") if editing else False

    if cancelled:
        stop_editing("editing_commodity")
        st.rerun()

    if submitted:
        try:
            record = CommodityRecord(
                date=when,
                quantity=quantity,
                unit_price=rate,
                payment_given=paid,
                description=description,
                attachment_url=editing.attachment_url if editing else None,
                **same_id(editing),
            )
        except ValueError as e:
            st.error(f"Invalid record: {e}")
        else:
            result = run_async(flows.save_commodity_record(record))
            show_validation(flows, result, "Updated" if editing else "Saved")
            if result.can_save:
                stop_editing("editing_commodity")

    view = run_async(flows.commodity_ledger())
    totals = view.totals
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Quantity", f"{totals.total_quantity:,}")
    col2.metric("Total Due", format_amount(totals.total_due))
    col3.metric("Total Paid", format_amount(totals.total_paid))
    col4.metric("Remaining", format_amount(totals.remaining_balance))

    for r in view.records:
        cols = st.columns([2, 3, 2, 2, 2, 1, 1])
        cols[0].markdown(r.date.strftime("%d %b %Y"))
        cols[1].markdown(r.description)
        cols[2].markdown(f"{r.quantity:,} x {format_amount(r.unit_price)}")
        cols[3].markdown(format_amount(r.line_total))
        cols[4].markdown(f"Paid {format_amount(r.payment_given)}")
        if cols[5].button("✏️", key=f"edit_c_{r.id}"):
            start_editing("editing_commodity", r)
        if cols[6].button("🗑️", key=f"del_c_{r.id}"):
            run_async(flows.delete_commodity_record(r.id))
            stop_editing("editing_commodity")
            st.rerun()

    download_statement(run_async(flows.commodity_statement()), key="tori_statement")


def render_reports_page(flows: LedgerFlows, month: MonthKey):
    """Render the monthly statement and monthly notes."""
    st.title(f"📄 Reports: {month.label}")

    document = run_async(flows.monthly_statement(month))
    for item in document.summary:
        currency = f"{document.currency} " if item.monetary else ""
        st.markdown(f"**{item.label}:** {currency}{item.value}")
    st.caption(f"{document.row_count} rows on {document.page_count} page(s)")
    download_statement(document, key="monthly_statement")

    st.markdown("---")
    st.markdown("### Monthly notes")
    with st.form("note_form", clear_on_submit=True):
        col1, col2 = st.columns([3, 1])
        with col1:
            title = st.text_input("Title")
        with col2:
            amount = st.text_input("Amount", value="0")
        if st.form_submit_button("💾 Save note"):
            note = MonthlyNote(month=month, title=title, amount=amount)
            show_validation(flows, run_async(flows.save_monthly_note(note)), "Saved")

    for note in run_async(flows.monthly_notes(month)):
        cols = st.columns([4, 2, 1])
        cols[0].markdown(note.title)
        cols[1].markdown(format_amount(note.amount))
        if cols[2].button("🗑️", key=f"del_n_{note.id}"):
            run_async(flows.delete_monthly_note(note.id))
            st.rerun()


def render_settings_page():
    """Render the settings page."""
    st.title("⚙️ Settings")

    st.markdown("### Connection Status")

    from ledgerbook.config import validate_all_settings

    status = validate_all_settings()

    services = [
        ("Google Sheets (Storage)", "google_sheets"),
        ("Gemini (Insights)", "gemini"),
        ("Application", "app"),
    ]

    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - Configured")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")

    st.markdown("---")
    st.markdown("### Configuration")
    st.markdown(
        "To configure the application, create a `.env` file with your "
        "Google Sheets and Gemini settings. See `.env.example` for the "
        "required variables. Without Google Sheets the books are kept in "
        "memory only and are lost on restart."
    )


if __name__ == "__main__":
    main()
