"""Transfer result model."""

from dataclasses import dataclass
from decimal import Decimal

from bookkeeper.models.ledger_entry import LedgerEntry


@dataclass
class Transfer:
    """The outcome of a committed transfer."""

    debit: LedgerEntry
    credit: LedgerEntry
    source_balance: Decimal
    target_balance: Decimal

    @property
    def amount(self) -> Decimal:
        return self.credit.amount
