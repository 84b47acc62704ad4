"""Account repository for document store operations."""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from bookkeeper.models.account import Account
from bookkeeper.models.exceptions import AccountNotFoundError
from bookkeeper.money import parse_amount
from bookkeeper.repositories.document_store import (
    SERVER_TIMESTAMP,
    AtomicUnit,
    Document,
    DocumentStore,
    WriteOp,
)

COLLECTION = "categories"


def _parse_balance(value: Any) -> Decimal:
    try:
        return Decimal(value)
    except InvalidOperation:
        # Older documents hold the display string, e.g. "5000 ₸"
        return parse_amount(value)


def _parse_time(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


class AccountRepository:
    """Repository for Account data access operations."""

    def __init__(self, store: DocumentStore):
        """
        Initialize the repository with a document store.

        Args:
            store: The document store holding the categories collection
        """
        self._store = store

    @staticmethod
    def to_account(doc: Document) -> Account:
        return Account(
            id=doc.id,
            title=doc.data["title"],
            balance=_parse_balance(doc.data["amount"]),
            created_at=_parse_time(doc.data.get("createdAt")),
            updated_at=_parse_time(doc.data.get("updatedAt")),
        )

    def create(self, title: str, balance: Decimal = Decimal("0")) -> Account:
        """
        Create a new account.

        Args:
            title: The account title
            balance: The opening balance

        Returns:
            The created Account, with its server-assigned creation time
        """
        account_id = self._store.new_id()
        self._store.batch_write(
            [
                WriteOp.set(
                    COLLECTION,
                    account_id,
                    {"title": title, "amount": str(balance), "createdAt": SERVER_TIMESTAMP},
                )
            ]
        )
        return self.get(account_id)

    def find_by_id(self, account_id: str) -> Account | None:
        """
        Find an account by id.

        Returns:
            Account object if found, None otherwise
        """
        doc = self._store.read_document(COLLECTION, account_id)
        return None if doc is None else self.to_account(doc)

    def get(self, account_id: str) -> Account:
        """
        Get an account by id.

        Raises:
            AccountNotFoundError: If the account doesn't exist
        """
        account = self.find_by_id(account_id)
        if account is None:
            raise AccountNotFoundError(f"Account {account_id} not found")
        return account

    def find_by_title(self, title: str) -> list[Account]:
        """Find every account sharing the given title."""
        return [self.to_account(doc) for doc in self._store.query(COLLECTION, {"title": title})]

    def find_all(self) -> list[Account]:
        return [self.to_account(doc) for doc in self._store.query(COLLECTION)]

    def get_in(self, unit: AtomicUnit, account_id: str) -> Account | None:
        """Read an account inside an atomic unit, recording the version seen."""
        doc = unit.get(COLLECTION, account_id)
        return None if doc is None else self.to_account(doc)

    def update_in(
        self,
        unit: AtomicUnit,
        account_id: str,
        title: str | None = None,
        balance: Decimal | None = None,
    ) -> None:
        """
        Buffer an update of an account's title and/or balance.

        Args:
            unit: The atomic unit to write through
            account_id: The account to update
            title: The new title, or None to keep it
            balance: The new balance, or None to keep it
        """
        fields: dict[str, Any] = {"updatedAt": SERVER_TIMESTAMP}
        if title is not None:
            fields["title"] = title
        if balance is not None:
            fields["amount"] = str(balance)
        unit.update(COLLECTION, account_id, fields)

    def delete_op(self, account_id: str) -> WriteOp:
        return WriteOp.delete(COLLECTION, account_id)

    def delete(self, account_id: str) -> None:
        """Delete a single account document; missing accounts are ignored."""
        self._store.batch_write([self.delete_op(account_id)])
