"""Plain-text rendering of accounts and ledger entries."""

from tabulate import tabulate

from bookkeeper.models.account import Account
from bookkeeper.models.ledger_entry import LedgerEntry
from bookkeeper.money import format_amount


def accounts_table(accounts: list[Account], symbol: str = "₸") -> str:
    """Render accounts as a table of title and formatted balance."""
    rows = [[account.title, format_amount(account.balance, symbol)] for account in accounts]
    return tabulate(rows, headers=["Category", "Balance"], colalign=("left", "right"))


def ledger_table(entries: list[LedgerEntry], symbol: str = "₸") -> str:
    """Render ledger entries, most recent first."""
    ordered = sorted(entries, key=lambda entry: entry.time.isoformat() if entry.time else "", reverse=True)
    rows = [
        [
            entry.time.strftime("%Y-%m-%d %H:%M:%S") if entry.time else "",
            entry.kind,
            entry.from_title,
            entry.to_title,
            format_amount(entry.amount, symbol),
            entry.description,
        ]
        for entry in ordered
    ]
    return tabulate(rows, headers=["Date", "Type", "From", "To", "Amount", "Description"])
