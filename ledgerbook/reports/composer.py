"""
Statement Composer

Turns already computed aggregates into paginated statement documents.

DESIGN DECISION: The composer is a pure layout step.
- It never touches the record store
- It never recomputes a total; every number it prints was handed in
- Binary PDF output (fonts, colours) is left to whatever renders the
  document; render_text() gives a plain-text rendering for download
"""

from datetime import datetime
from decimal import Decimal
from typing import Callable, Iterable, Optional

from pydantic import BaseModel, Field

from ledgerbook.config import AppSettings, get_settings
from ledgerbook.ledger.periods import local_now
from ledgerbook.models.aggregates import (
    CombinedMonthlySummary,
    CommodityTotals,
    DailyLedger,
    DayDetail,
    Direction,
    MonthBalanceView,
    PersonStanding,
    StatementEntry,
)
from ledgerbook.models.records import CommodityRecord, EntryKind, TransactionKind


# =============================================================================
# DOCUMENT MODEL
# =============================================================================

class SummaryItem(BaseModel):
    """
    A labelled figure in the summary block under the header.

    Only monetary items carry the currency label when rendered.
    """

    label: str
    value: str
    emphasis: bool = False
    monetary: bool = False

    @classmethod
    def money(cls, label: str, amount: Decimal, emphasis: bool = False) -> "SummaryItem":
        """An amount, printed with the statement currency."""
        return cls(label=label, value=format_amount(amount), emphasis=emphasis, monetary=True)


class StatementPage(BaseModel):
    """One page of detail rows."""

    number: int = Field(ge=1)
    page_count: int = Field(ge=1)
    rows: list[list[str]] = Field(default_factory=list)

    @property
    def footer(self) -> str:
        return f"Page {self.number} of {self.page_count}"


class StatementDocument(BaseModel):
    """
    A complete statement ready for rendering.

    The summary block is printed once, above the first page's table.
    """

    business_name: str
    subtitle: str
    title: str
    period: str
    generated_at: datetime
    currency: str
    summary: list[SummaryItem] = Field(default_factory=list)
    columns: list[str] = Field(default_factory=list)
    pages: list[StatementPage] = Field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def row_count(self) -> int:
        return sum(len(page.rows) for page in self.pages)


def format_amount(amount: Decimal) -> str:
    """Thousands-separated, two decimals."""
    return f"{amount:,.2f}"


def paginate(rows: list[list[str]], rows_per_page: int) -> list[StatementPage]:
    """
    Split rows into pages.

    Always returns at least one page so an empty statement still has
    a header and a footer.
    """
    chunks = [
        rows[start:start + rows_per_page]
        for start in range(0, len(rows), rows_per_page)
    ] or [[]]
    return [
        StatementPage(number=i, page_count=len(chunks), rows=chunk)
        for i, chunk in enumerate(chunks, start=1)
    ]


# =============================================================================
# COMPOSER
# =============================================================================

class StatementComposer:
    """
    Builds StatementDocuments for each report the app offers.

    Layout settings (branding, currency, rows per page) come from AppSettings.
    """

    def __init__(
        self,
        settings: Optional[AppSettings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._settings = settings or get_settings().app
        self._clock = clock or local_now

    def _document(
        self,
        title: str,
        period: str,
        summary: list[SummaryItem],
        columns: list[str],
        rows: list[list[str]],
    ) -> StatementDocument:
        return StatementDocument(
            business_name=self._settings.business_name,
            subtitle=self._settings.business_subtitle,
            title=title,
            period=period,
            generated_at=self._clock(),
            currency=self._settings.currency_label,
            summary=summary,
            columns=columns,
            pages=paginate(rows, self._settings.statement_rows_per_page),
        )

    def monthly_statement(
        self,
        summary: CombinedMonthlySummary,
        entries: Iterable[StatementEntry],
        balance: Optional[MonthBalanceView] = None,
    ) -> StatementDocument:
        """
        The month's merged statement: cash book plus staff ledger rows.

        When a balance view is given, the notes adjustment is printed too.
        """
        items = [
            SummaryItem.money("Total Received", summary.total_income),
            SummaryItem.money("Business Expenses", summary.business_expense),
            SummaryItem.money("Staff Expenses", summary.staff_expense),
            SummaryItem.money("Total Expenses", summary.total_expense),
            SummaryItem.money("Net Balance", summary.net_balance, emphasis=True),
        ]
        if balance is not None and balance.note_count:
            items.append(SummaryItem.money("Notes", balance.notes_total))
            items.append(SummaryItem.money(
                "Adjusted Balance",
                balance.adjusted_balance,
                emphasis=True,
            ))

        rows = [
            [
                entry.date.isoformat(),
                entry.description,
                entry.label,
                format_amount(entry.amount),
                "+" if entry.direction is Direction.IN else "-",
            ]
            for entry in entries
        ]
        return self._document(
            title="Monthly Statement",
            period=summary.month.label,
            summary=items,
            columns=["Date", "Description", "Type", "Amount", "In/Out"],
            rows=rows,
        )

    def daily_ledger_statement(self, ledger: DailyLedger) -> StatementDocument:
        """Day-by-day totals for one transaction kind."""
        if ledger.kind is TransactionKind.INCOME:
            title = "Daily Income Ledger"
        else:
            title = "Daily Expense Ledger"
        rows = [
            [bucket.date.isoformat(), str(bucket.count), format_amount(bucket.total)]
            for bucket in ledger.days
        ]
        return self._document(
            title=title,
            period=ledger.month.label,
            summary=[
                SummaryItem.money("Month Total", ledger.total, emphasis=True),
                SummaryItem(
                    label="Active Days",
                    value=str(sum(1 for b in ledger.days if not b.is_empty)),
                ),
            ],
            columns=["Date", "Entries", "Total"],
            rows=rows,
        )

    def day_detail_statement(self, detail: DayDetail) -> StatementDocument:
        rows = [
            [
                t.description,
                t.kind.label,
                t.remarks or "",
                t.source or "",
                format_amount(t.amount),
            ]
            for t in detail.entries
        ]
        return self._document(
            title=f"{'Income' if detail.kind is TransactionKind.INCOME else 'Expense'} Detail",
            period=detail.date.strftime("%d %B %Y"),
            summary=[
                SummaryItem.money("Day Total", detail.total, emphasis=True),
                SummaryItem(label="Entries", value=str(len(detail.entries))),
            ],
            columns=["Description", "Type", "Remarks", "Source", "Amount"],
            rows=rows,
        )

    def person_statement(self, standing: PersonStanding) -> StatementDocument:
        """A person's month of ledger entries with their running standing."""
        person = standing.person
        rows = [
            [
                e.date.isoformat(),
                e.description,
                e.kind.value.title(),
                ("+" if e.kind is EntryKind.PAYMENT else "-") + format_amount(e.amount),
            ]
            for e in standing.month_entries
        ]
        items = [
            SummaryItem.money("Opening Balance", person.opening_balance),
            SummaryItem.money(standing.side.label, standing.display_balance, emphasis=True),
            SummaryItem.money("Monthly Limit", person.monthly_limit),
            SummaryItem.money("Used This Month", standing.monthly_consumption),
            SummaryItem.money("Remaining Limit", standing.monthly_remaining_limit),
        ]
        if standing.over_limit:
            items.append(SummaryItem(label="Status", value="Over limit", emphasis=True))
        return self._document(
            title=f"Staff Ledger: {person.name}",
            period=standing.month.label,
            summary=items,
            columns=["Date", "Description", "Type", "Amount"],
            rows=rows,
        )

    def commodity_statement(
        self,
        records: Iterable[CommodityRecord],
        totals: CommodityTotals,
        period: str = "All records",
    ) -> StatementDocument:
        """Weight x price trade records with their totals."""
        rows = [
            [
                r.date.isoformat(),
                r.description,
                f"{r.quantity:,}",
                format_amount(r.unit_price),
                format_amount(r.line_total),
                format_amount(r.payment_given),
            ]
            for r in sorted(records, key=lambda r: (r.date, r.id))
        ]
        return self._document(
            title="Tori Ledger",
            period=period,
            summary=[
                SummaryItem(label="Total Quantity", value=f"{totals.total_quantity:,}"),
                SummaryItem.money("Total Due", totals.total_due),
                SummaryItem.money("Total Paid", totals.total_paid),
                SummaryItem.money(
                    "Remaining Balance",
                    totals.remaining_balance,
                    emphasis=True,
                ),
            ],
            columns=["Date", "Description", "Quantity", "Rate", "Total", "Paid"],
            rows=rows,
        )


# =============================================================================
# TEXT RENDERING
# =============================================================================

def _table_lines(columns: list[str], rows: list[list[str]]) -> list[str]:
    widths = [len(c) for c in columns]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))

    def line(cells: list[str]) -> str:
        return "  ".join(cell.ljust(widths[i]) for i, cell in enumerate(cells)).rstrip()

    lines = [line(columns), "  ".join("-" * w for w in widths)]
    lines.extend(line(row) for row in rows)
    if not rows:
        lines.append("(no entries)")
    return lines


def render_text(document: StatementDocument) -> str:
    """Plain-text rendering of a statement, one block per page."""
    header = [
        document.business_name,
        document.subtitle,
        "",
        document.title.upper(),
        document.period.upper(),
        f"GENERATED: {document.generated_at:%d %b %Y %H:%M}",
        "",
    ]
    label_width = max((len(item.label) for item in document.summary), default=0)
    summary = [
        f"{item.label.ljust(label_width)}  "
        + (f"{document.currency} " if item.monetary else "")
        + item.value
        + (" *" if item.emphasis else "")
        for item in document.summary
    ]

    blocks = []
    for page in document.pages:
        lines = list(header)
        if page.number == 1 and summary:
            lines.extend(summary)
            lines.append("")
        lines.extend(_table_lines(document.columns, page.rows))
        lines.append("")
        lines.append(page.footer)
        blocks.append("\n".join(lines))

    return "\n\f\n".join(blocks) + "\n"
