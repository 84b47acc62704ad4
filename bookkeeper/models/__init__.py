"""Data models for the bookkeeping system."""

from .account import Account
from .ledger_entry import EXPENSE, INCOME, LedgerEntry
from .transfer import Transfer
from .exceptions import (
    BookkeepingError,
    ValidationError,
    InvalidAmountError,
    InvalidTransferError,
    AccountNotFoundError,
    InsufficientFundsError,
    StoreError,
    ConcurrentModificationError,
    TransferFailedError,
    UpdateFailedError,
    DeleteFailedError,
)

__all__ = [
    "Account",
    "LedgerEntry",
    "EXPENSE",
    "INCOME",
    "Transfer",
    "BookkeepingError",
    "ValidationError",
    "InvalidAmountError",
    "InvalidTransferError",
    "AccountNotFoundError",
    "InsufficientFundsError",
    "StoreError",
    "ConcurrentModificationError",
    "TransferFailedError",
    "UpdateFailedError",
    "DeleteFailedError",
]
