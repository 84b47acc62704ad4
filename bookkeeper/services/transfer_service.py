"""Transfer service: moves funds between accounts as one atomic unit."""

import logging
from decimal import Decimal

from bookkeeper.models.account import Account
from bookkeeper.models.exceptions import (
    AccountNotFoundError,
    ConcurrentModificationError,
    InsufficientFundsError,
    InvalidAmountError,
    InvalidTransferError,
    TransferFailedError,
)
from bookkeeper.models.ledger_entry import LedgerEntry
from bookkeeper.models.transfer import Transfer
from bookkeeper.money import to_amount
from bookkeeper.repositories.account_repo import AccountRepository
from bookkeeper.repositories.document_store import AtomicUnit, DocumentStore
from bookkeeper.repositories.ledger_repo import LedgerRepository

logger = logging.getLogger(__name__)


class TransferService:
    """Service layer for fund transfers between accounts."""

    def __init__(
        self,
        store: DocumentStore,
        max_attempts: int = 5,
        max_amount: Decimal = Decimal("1000000000000"),
        places: int = 2,
    ):
        """
        Initialize the TransferService with a store handle.

        Args:
            store: The transactional document store
            max_attempts: Total commit attempts before giving up on conflicts
            max_amount: Maximum allowed transfer amount (default: 10^12)
            places: Number of fractional digits an amount may carry
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._store = store
        self._account_repo = AccountRepository(store)
        self._ledger_repo = LedgerRepository(store)
        self._max_attempts = max_attempts
        self._max_amount = max_amount
        self._places = places

    def _validate(self, source: Account, target: Account, amount: Decimal | int | str) -> Decimal:
        if source.id == target.id:
            raise InvalidTransferError("Cannot transfer to the same account")

        value = to_amount(amount, self._places)
        if value < 0:
            raise InvalidAmountError(
                f"Cannot transfer negative amount: {value}. Amount must be positive."
            )
        if value == 0:
            raise InvalidAmountError("Transfer amount must be greater than zero.")
        if value > self._max_amount:
            raise InvalidAmountError(
                f"Amount {value} exceeds maximum allowed transfer of {self._max_amount}"
            )
        return value

    def transfer(
        self,
        source: Account,
        target: Account,
        amount: Decimal | int | str,
        description: str,
    ) -> Transfer:
        """
        Transfer funds from one account to another.

        Both balances are re-read inside the atomic unit, so the caller's
        copies of source and target only supply their ids. The debit and
        credit entries and both balance updates commit together or not at
        all; a conflicting concurrent commit causes the whole unit to be
        re-run from the reads.

        Args:
            source: The account to debit
            target: The account to credit
            amount: The amount to transfer (must be positive)
            description: Free text recorded on both ledger entries

        Returns:
            The committed Transfer with both entries and the new balances

        Raises:
            InvalidTransferError: If source and target are the same account
            InvalidAmountError: If the amount is invalid (not positive, too
                precise, or above the maximum)
            AccountNotFoundError: If either account no longer exists
            InsufficientFundsError: If the source balance is below the amount
            TransferFailedError: If every attempt hit a concurrent modification
        """
        value = self._validate(source, target, amount)

        def apply(unit: AtomicUnit) -> Transfer:
            # Re-read both accounts inside the unit
            fresh_source = self._account_repo.get_in(unit, source.id)
            fresh_target = self._account_repo.get_in(unit, target.id)
            if fresh_source is None:
                raise AccountNotFoundError(f"Source account {source.id} not found")
            if fresh_target is None:
                raise AccountNotFoundError(f"Target account {target.id} not found")

            # Check source has sufficient balance
            if fresh_source.balance < value:
                raise InsufficientFundsError(
                    f"Insufficient balance: {fresh_source.balance} available, {value} requested"
                )

            # Record the offsetting entries
            debit, credit = LedgerEntry.create_pair(
                source_id=fresh_source.id,
                source_title=fresh_source.title,
                target_id=fresh_target.id,
                target_title=fresh_target.title,
                amount=value,
                description=description,
            )
            self._ledger_repo.add_in(unit, debit)
            self._ledger_repo.add_in(unit, credit)

            # Update both balances
            source_balance = fresh_source.balance - value
            target_balance = fresh_target.balance + value
            self._account_repo.update_in(unit, fresh_source.id, balance=source_balance)
            self._account_repo.update_in(unit, fresh_target.id, balance=target_balance)
            return Transfer(
                debit=debit,
                credit=credit,
                source_balance=source_balance,
                target_balance=target_balance,
            )

        for attempt in range(1, self._max_attempts + 1):
            try:
                result = self._store.run_atomic_unit(apply)
            except ConcurrentModificationError as err:
                logger.warning(
                    "Transfer %s -> %s conflicted on attempt %d/%d: %s",
                    source.id, target.id, attempt, self._max_attempts, err,
                )
                continue
            except (AccountNotFoundError, InsufficientFundsError) as err:
                logger.info("Transfer %s -> %s rejected: %s", source.id, target.id, err)
                raise
            logger.info(
                "Transferred %s from %s to %s (%s)", value, source.id, target.id, description
            )
            # Fetch the entries back to pick up their commit time
            result.debit = self._ledger_repo.find_by_id(result.debit.id) or result.debit
            result.credit = self._ledger_repo.find_by_id(result.credit.id) or result.credit
            return result

        logger.error(
            "Transfer %s -> %s failed after %d attempts", source.id, target.id, self._max_attempts
        )
        raise TransferFailedError(
            f"Transfer from {source.id} to {target.id} failed after "
            f"{self._max_attempts} attempts due to concurrent modifications"
        )
