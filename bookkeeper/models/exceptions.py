"""Custom exceptions for the bookkeeping system."""


class BookkeepingError(Exception):
    """Base exception for all bookkeeping-related errors."""
    pass


class ValidationError(BookkeepingError):
    """Raised when input is rejected before the store is touched."""
    pass


class InvalidAmountError(ValidationError):
    """Raised when an invalid amount is provided (e.g., negative amount)."""
    pass


class InvalidTransferError(ValidationError):
    """Raised when a transfer operation is invalid (e.g., source == target)."""
    pass


class AccountNotFoundError(BookkeepingError):
    """Raised when an account cannot be found."""
    pass


class InsufficientFundsError(BookkeepingError):
    """Raised when an account has insufficient balance for a transfer."""
    pass


class StoreError(BookkeepingError):
    """Raised when the document store fails to read or write."""
    pass


class ConcurrentModificationError(StoreError):
    """Raised at commit when a document read by an atomic unit has changed."""
    pass


class TransferFailedError(BookkeepingError):
    """Raised when a transfer keeps conflicting after all retry attempts."""
    pass


class UpdateFailedError(BookkeepingError):
    """Raised when a direct account edit keeps conflicting after all retry attempts."""
    pass


class DeleteFailedError(BookkeepingError):
    """Raised when a cascading delete batch could not be committed."""
    pass
