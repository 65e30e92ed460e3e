"""Statement composition."""

from ledgerbook.reports.composer import (
    StatementComposer,
    StatementDocument,
    StatementPage,
    SummaryItem,
    format_amount,
    paginate,
    render_text,
)

__all__ = [
    "StatementComposer",
    "StatementDocument",
    "StatementPage",
    "SummaryItem",
    "format_amount",
    "paginate",
    "render_text",
]
