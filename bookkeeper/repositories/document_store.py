"""Document store abstraction used by the repositories and services."""

import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from bookkeeper.models.exceptions import StoreError

T = TypeVar("T")


class _ServerTimestamp:
    """Placeholder replaced with the commit time when a write is applied."""

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()

SET = "set"
UPDATE = "update"
DELETE = "delete"


@dataclass
class Document:
    """A stored document: its id within a collection and its field data."""

    id: str
    data: dict[str, Any]


@dataclass
class WriteOp:
    """A single write to be applied by a batch or an atomic unit."""

    kind: str
    collection: str
    doc_id: str
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def set(cls, collection: str, doc_id: str, data: dict[str, Any]) -> "WriteOp":
        return cls(SET, collection, doc_id, dict(data))

    @classmethod
    def update(cls, collection: str, doc_id: str, data: dict[str, Any]) -> "WriteOp":
        return cls(UPDATE, collection, doc_id, dict(data))

    @classmethod
    def delete(cls, collection: str, doc_id: str) -> "WriteOp":
        return cls(DELETE, collection, doc_id)


class AtomicUnit:
    """
    Read/write handle scoped to one optimistic atomic commit.

    Reads go straight to the store and record the version they saw (None
    when the document did not exist). Writes are buffered and only become
    visible when the owning store commits them, after checking that every
    recorded version is still current.
    """

    def __init__(self, reader: Callable[[str, str], tuple[dict[str, Any], int] | None]):
        """
        Initialize the unit with a versioned reader.

        Args:
            reader: Callable returning (data, version) for a document, or None
        """
        self._reader = reader
        self.read_versions: dict[tuple[str, str], int | None] = {}
        self.writes: list[WriteOp] = []

    def get(self, collection: str, doc_id: str) -> Document | None:
        """
        Read a document as part of this unit.

        Raises:
            StoreError: If called after a write has been buffered
        """
        if self.writes:
            raise StoreError("All reads in an atomic unit must precede its writes")
        found = self._reader(collection, doc_id)
        if found is None:
            self.read_versions[(collection, doc_id)] = None
            return None
        data, version = found
        self.read_versions[(collection, doc_id)] = version
        return Document(id=doc_id, data=data)

    def set(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        self.writes.append(WriteOp.set(collection, doc_id, data))

    def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        self.writes.append(WriteOp.update(collection, doc_id, data))

    def delete(self, collection: str, doc_id: str) -> None:
        self.writes.append(WriteOp.delete(collection, doc_id))


class DocumentStore(ABC):
    """
    Abstract transactional document store.

    Any backend offering snapshot or serializable isolation for a unit of
    reads and writes can implement this interface.
    """

    @abstractmethod
    def read_document(self, collection: str, doc_id: str) -> Document | None:
        """
        Read a single document.

        Returns:
            The Document if found, None otherwise
        """

    @abstractmethod
    def run_atomic_unit(self, body: Callable[[AtomicUnit], T]) -> T:
        """
        Run body against a fresh AtomicUnit and commit its writes all-or-nothing.

        An exception raised by body discards every buffered write and
        propagates unchanged.

        Returns:
            Whatever body returned

        Raises:
            ConcurrentModificationError: If a document read by the unit changed
                before the commit
            StoreError: If the commit itself fails
        """

    @abstractmethod
    def batch_write(self, ops: list[WriteOp]) -> None:
        """
        Apply writes without read dependencies, all-or-nothing.

        Raises:
            StoreError: If any write fails; none of the writes are applied
        """

    @abstractmethod
    def query(self, collection: str, filters: dict[str, Any] | None = None) -> list[Document]:
        """
        Find documents whose fields equal every value in filters.

        Args:
            collection: The collection to search
            filters: Field name to expected value; None matches every document

        Returns:
            Matching documents in insertion order
        """

    def new_id(self) -> str:
        """Generate an id for a document that has not been written yet."""
        return uuid.uuid4().hex
