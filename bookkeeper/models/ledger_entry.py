"""Ledger entry data model."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

EXPENSE = "expense"
INCOME = "income"


@dataclass
class LedgerEntry:
    """Represents one signed, balance-affecting transaction record."""

    id: str | None
    account_id: str
    from_title: str
    to_title: str
    amount: Decimal
    kind: str
    description: str
    time: datetime | None = None

    @classmethod
    def create_pair(
        cls,
        source_id: str,
        source_title: str,
        target_id: str,
        target_title: str,
        amount: Decimal,
        description: str,
    ) -> tuple["LedgerEntry", "LedgerEntry"]:
        """
        Create the two offsetting entries of a transfer.

        Args:
            source_id: The account being debited
            source_title: Title of the debited account
            target_id: The account being credited
            target_title: Title of the credited account
            amount: The (positive) amount moved
            description: Free text shared by both entries

        Returns:
            A (debit, credit) tuple with id=None and time=None; both are
            assigned when the entries are written
        """
        debit = cls(
            id=None,
            account_id=source_id,
            from_title=source_title,
            to_title=target_title,
            amount=-amount,
            kind=EXPENSE,
            description=description,
        )
        credit = cls(
            id=None,
            account_id=target_id,
            from_title=source_title,
            to_title=target_title,
            amount=amount,
            kind=INCOME,
            description=description,
        )
        return debit, credit
