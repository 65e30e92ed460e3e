"""
Ledger Book

Bookkeeping for a small farm business: cash book, staff ledgers,
tori (weight x price) records and monthly statements.
"""

__version__ = "0.1.0"
