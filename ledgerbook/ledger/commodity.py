"""
Commodity Ledger Calculator

Weight x price trade records: what is due, what has been paid, what is
still owed to the counterparty. Computed over whatever collection the
caller passes in; no date filter is applied here.
"""

from decimal import Decimal
from typing import Iterable

from ledgerbook.models.aggregates import CommodityTotals
from ledgerbook.models.records import ZERO, CommodityRecord


def line_total(record: CommodityRecord) -> Decimal:
    return record.quantity * record.unit_price


def commodity_totals(records: Iterable[CommodityRecord]) -> CommodityTotals:
    """
    Sum quantity, amount due and payments over the records.

    remaining_balance > 0 means the business still owes the counterparty.
    """
    quantity = ZERO
    due = ZERO
    paid = ZERO
    count = 0
    for r in records:
        count += 1
        quantity += r.quantity
        due += line_total(r)
        paid += r.payment_given

    return CommodityTotals(
        total_quantity=quantity,
        total_due=due,
        total_paid=paid,
        remaining_balance=due - paid,
        record_count=count,
    )
