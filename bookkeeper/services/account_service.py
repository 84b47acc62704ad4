"""Account service: account lifecycle and direct edits."""

import logging
from decimal import Decimal

from bookkeeper.models.account import Account
from bookkeeper.models.exceptions import (
    AccountNotFoundError,
    ConcurrentModificationError,
    DeleteFailedError,
    StoreError,
    UpdateFailedError,
    ValidationError,
)
from bookkeeper.models.ledger_entry import LedgerEntry
from bookkeeper.money import to_amount
from bookkeeper.repositories.account_repo import AccountRepository
from bookkeeper.repositories.document_store import AtomicUnit, DocumentStore
from bookkeeper.repositories.ledger_repo import LedgerRepository

logger = logging.getLogger(__name__)


class AccountService:
    """Service layer for creating, editing and deleting accounts."""

    def __init__(self, store: DocumentStore, max_attempts: int = 5, places: int = 2):
        """
        Initialize the AccountService with a store handle.

        Args:
            store: The transactional document store
            max_attempts: Total commit attempts for a direct edit
            places: Number of fractional digits a balance may carry
        """
        self._store = store
        self._account_repo = AccountRepository(store)
        self._ledger_repo = LedgerRepository(store)
        self._max_attempts = max_attempts
        self._places = places

    def create_account(self, title: str) -> Account:
        """
        Create a new account with a zero balance.

        Raises:
            ValidationError: If the title is blank
        """
        if not title or not title.strip():
            raise ValidationError("Account title must not be empty")
        account = self._account_repo.create(title.strip())
        logger.info("Created account %s (%s)", account.id, account.title)
        return account

    def get_account(self, account_id: str) -> Account:
        return self._account_repo.get(account_id)

    def list_accounts(self) -> list[Account]:
        return self._account_repo.find_all()

    def entries(self, account_id: str) -> list[LedgerEntry]:
        return self._ledger_repo.find_by_account(account_id)

    def update_account(
        self,
        account_id: str,
        title: str | None = None,
        balance: Decimal | int | str | None = None,
    ) -> Account:
        """
        Directly edit an account's title and/or balance.

        The edit runs as an atomic unit, just like a transfer, so it cannot
        interleave with a concurrent transfer touching the same account.

        Args:
            account_id: The account to edit
            title: The new title, or None to keep it
            balance: The new balance, or None to keep it

        Returns:
            The updated Account

        Raises:
            ValidationError: If the title is blank or the balance is invalid
            AccountNotFoundError: If the account doesn't exist
            UpdateFailedError: If every attempt hit a concurrent modification
        """
        if title is not None and not title.strip():
            raise ValidationError("Account title must not be empty")
        new_balance = None if balance is None else to_amount(balance, self._places)

        def apply(unit: AtomicUnit) -> None:
            if self._account_repo.get_in(unit, account_id) is None:
                raise AccountNotFoundError(f"Account {account_id} not found")
            self._account_repo.update_in(
                unit,
                account_id,
                title=None if title is None else title.strip(),
                balance=new_balance,
            )

        for attempt in range(1, self._max_attempts + 1):
            try:
                self._store.run_atomic_unit(apply)
            except ConcurrentModificationError as err:
                logger.warning(
                    "Update of %s conflicted on attempt %d/%d: %s",
                    account_id, attempt, self._max_attempts, err,
                )
                continue
            logger.info("Updated account %s", account_id)
            return self._account_repo.get(account_id)

        logger.error("Update of %s failed after %d attempts", account_id, self._max_attempts)
        raise UpdateFailedError(
            f"Update of {account_id} failed after {self._max_attempts} attempts"
        )

    def delete_account(self, account_id: str, title: str, cascade: bool) -> None:
        """
        Delete an account, optionally with every account sharing its title.

        Without cascade only the account document is removed and its ledger
        entries are left in place, still pointing at the deleted id. With
        cascade every account titled `title` (and `account_id` itself) is
        removed together with all of their ledger entries in one batch.

        Args:
            account_id: The account to delete
            title: The title whose accounts are removed when cascading
            cascade: Whether to remove same-titled accounts and their entries

        Raises:
            DeleteFailedError: If the store rejected the delete; with cascade
                nothing was removed
        """
        if not cascade:
            try:
                self._account_repo.delete(account_id)
            except StoreError as err:
                logger.error("Error deleting account %s: %s", account_id, err)
                raise DeleteFailedError(f"Failed to delete account {account_id}") from err
            logger.info("Deleted account %s", account_id)
            return

        try:
            account_ids = [account.id for account in self._account_repo.find_by_title(title)]
            if account_id not in account_ids:
                account_ids.append(account_id)

            ops = []
            for doomed in account_ids:
                for entry in self._ledger_repo.find_by_account(doomed):
                    ops.append(self._ledger_repo.delete_op(entry.id))
            entry_count = len(ops)
            ops.extend(self._account_repo.delete_op(doomed) for doomed in account_ids)

            self._store.batch_write(ops)
        except StoreError as err:
            logger.error("Error deleting accounts titled %r: %s", title, err)
            raise DeleteFailedError(f"Failed to delete accounts titled {title!r}") from err
        logger.info(
            "Deleted %d account(s) titled %r and %d ledger entries",
            len(account_ids), title, entry_count,
        )

    def reconcile(self, account_id: str) -> Decimal:
        """
        Compare an account's balance with the sum of its ledger entries.

        Returns:
            balance - sum(entries); zero when the two agree

        Raises:
            AccountNotFoundError: If the account doesn't exist
        """
        account = self._account_repo.get(account_id)
        total = sum((entry.amount for entry in self.entries(account_id)), Decimal("0"))
        return account.balance - total
