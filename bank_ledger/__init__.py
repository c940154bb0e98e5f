"""
Bank Ledger

A single-process bank ledger simulator: customer accounts with a daily
withdrawal limit, one manager account, and flat-file persistence using
Decimal money throughout.
"""

__version__ = "1.0.0"
