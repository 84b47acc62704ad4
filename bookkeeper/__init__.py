"""Bookkeeping backend: accounts, ledger entries and balance transfers."""
