"""Ledger repository for document store operations."""

from datetime import datetime
from decimal import Decimal

from bookkeeper.models.ledger_entry import LedgerEntry
from bookkeeper.repositories.document_store import (
    SERVER_TIMESTAMP,
    AtomicUnit,
    Document,
    DocumentStore,
    WriteOp,
)

COLLECTION = "transactions"


class LedgerRepository:
    """Repository for LedgerEntry data access operations."""

    def __init__(self, store: DocumentStore):
        """
        Initialize the repository with a document store.

        Args:
            store: The document store holding the transactions collection
        """
        self._store = store

    @staticmethod
    def to_entry(doc: Document) -> LedgerEntry:
        date = doc.data.get("date")
        return LedgerEntry(
            id=doc.id,
            account_id=doc.data["categoryId"],
            from_title=doc.data.get("fromUser", ""),
            to_title=doc.data.get("toUser", ""),
            amount=Decimal(str(doc.data["amount"])),
            kind=doc.data["type"],
            description=doc.data.get("description", ""),
            time=datetime.fromisoformat(date) if date else None,
        )

    def add_in(self, unit: AtomicUnit, entry: LedgerEntry) -> str:
        """
        Buffer the insert of a new ledger entry.

        The entry's id is assigned here; its time is assigned by the store
        when the unit commits.

        Args:
            unit: The atomic unit to write through
            entry: The entry to insert

        Returns:
            The id of the new entry
        """
        entry.id = self._store.new_id()
        unit.set(
            COLLECTION,
            entry.id,
            {
                "categoryId": entry.account_id,
                "fromUser": entry.from_title,
                "toUser": entry.to_title,
                "amount": str(entry.amount),
                "description": entry.description,
                "type": entry.kind,
                "date": SERVER_TIMESTAMP,
            },
        )
        return entry.id

    def find_by_id(self, entry_id: str) -> LedgerEntry | None:
        """
        Find a ledger entry by id.

        Returns:
            LedgerEntry object if found, None otherwise
        """
        doc = self._store.read_document(COLLECTION, entry_id)
        return None if doc is None else self.to_entry(doc)

    def find_by_account(self, account_id: str) -> list[LedgerEntry]:
        """Find every entry attached to the account, oldest first."""
        return [
            self.to_entry(doc)
            for doc in self._store.query(COLLECTION, {"categoryId": account_id})
        ]

    def find_all(self) -> list[LedgerEntry]:
        return [self.to_entry(doc) for doc in self._store.query(COLLECTION)]

    def delete_op(self, entry_id: str) -> WriteOp:
        return WriteOp.delete(COLLECTION, entry_id)
