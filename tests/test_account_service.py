"""Tests for AccountService account lifecycle operations."""

import sqlite3
from decimal import Decimal

import pytest

from bookkeeper.models.exceptions import (
    AccountNotFoundError,
    DeleteFailedError,
    InvalidAmountError,
    StoreError,
    UpdateFailedError,
    ValidationError,
)
from bookkeeper.repositories.account_repo import COLLECTION as ACCOUNTS
from bookkeeper.repositories.document_store import DELETE, WriteOp
from bookkeeper.repositories.ledger_repo import LedgerRepository
from bookkeeper.repositories.sqlite_store import SQLiteDocumentStore
from bookkeeper.services.account_service import AccountService
from bookkeeper.services.transfer_service import TransferService


class FlakyStore(SQLiteDocumentStore):
    """Fails account deletes mid-batch and can interfere before commits."""

    def __init__(self, conn):
        super().__init__(conn)
        self.fail_account_deletes = False
        self.before_commit = []

    def _apply(self, op, now):
        if self.fail_account_deletes and op.kind == DELETE and op.collection == ACCOUNTS:
            raise sqlite3.OperationalError("disk I/O error")
        super()._apply(op, now)

    def _commit(self, unit):
        if self.before_commit:
            self.before_commit.pop(0)()
        super()._commit(unit)


@pytest.fixture
def in_memory_db():
    """Create an in-memory SQLite database for testing."""
    conn = sqlite3.connect(":memory:")
    yield conn
    conn.close()


@pytest.fixture
def store(in_memory_db):
    store = FlakyStore(in_memory_db)
    store.create_table()
    return store


@pytest.fixture
def account_service(store):
    """Create an AccountService with a small retry limit."""
    return AccountService(store, max_attempts=2)


@pytest.fixture
def transfer_service(store):
    return TransferService(store)


@pytest.fixture
def ledger_repo(store):
    return LedgerRepository(store)


def _funded(account_service, title, balance):
    account = account_service.create_account(title)
    return account_service.update_account(account.id, balance=balance)


def test_create_account(account_service):
    account = account_service.create_account("  Rent ")

    assert account.id
    assert account.title == "Rent"
    assert account.balance == Decimal("0")
    assert account.created_at is not None


def test_create_account_blank_title(account_service):
    with pytest.raises(ValidationError):
        account_service.create_account("   ")


def test_get_account_not_found(account_service):
    with pytest.raises(AccountNotFoundError):
        account_service.get_account("missing")


def test_list_accounts(account_service):
    account_service.create_account("Rent")
    account_service.create_account("Food")

    assert [account.title for account in account_service.list_accounts()] == ["Rent", "Food"]


def test_update_account_balance_and_title(account_service):
    account = account_service.create_account("Rent")

    updated = account_service.update_account(account.id, title="Housing", balance="1500.75")

    assert updated.title == "Housing"
    assert updated.balance == Decimal("1500.75")
    assert updated.updated_at is not None
    assert updated.created_at == account.created_at


def test_update_account_not_found(account_service):
    with pytest.raises(AccountNotFoundError):
        account_service.update_account("missing", balance=1)


def test_update_account_invalid_balance(account_service):
    account = account_service.create_account("Rent")

    with pytest.raises(InvalidAmountError):
        account_service.update_account(account.id, balance="lots")

    assert account_service.get_account(account.id).balance == Decimal("0")


def test_update_account_blank_title(account_service):
    account = account_service.create_account("Rent")

    with pytest.raises(ValidationError):
        account_service.update_account(account.id, title=" ")


def test_update_account_retries_then_gives_up(account_service, store):
    account = account_service.create_account("Rent")
    for balance in ("1", "2"):
        store.before_commit.append(
            lambda balance=balance: store.batch_write(
                [WriteOp.update(ACCOUNTS, account.id, {"amount": balance})]
            )
        )

    with pytest.raises(UpdateFailedError):
        account_service.update_account(account.id, balance=50)

    assert account_service.get_account(account.id).balance == Decimal("2")


def test_update_account_succeeds_after_one_conflict(account_service, store):
    account = account_service.create_account("Rent")
    store.before_commit.append(
        lambda: store.batch_write([WriteOp.update(ACCOUNTS, account.id, {"title": "Other"})])
    )

    updated = account_service.update_account(account.id, balance=50)

    assert updated.balance == Decimal("50")
    assert updated.title == "Other"


def test_delete_without_cascade_leaves_entries_dangling(
    account_service, transfer_service, ledger_repo
):
    """Only the account document goes; its ledger entries stay behind."""
    source = _funded(account_service, "Savings", 1000)
    target = account_service.create_account("Rent")
    twin = account_service.create_account("Savings")
    transfer_service.transfer(source, target, 400, "rent")

    account_service.delete_account(source.id, source.title, cascade=False)

    with pytest.raises(AccountNotFoundError):
        account_service.get_account(source.id)
    [dangling] = ledger_repo.find_by_account(source.id)
    assert dangling.amount == Decimal("-400")
    # Same-titled accounts and the counterparty are untouched
    assert account_service.get_account(twin.id).title == "Savings"
    assert account_service.get_account(target.id).balance == Decimal("400")
    assert len(ledger_repo.find_by_account(target.id)) == 1


def test_delete_with_cascade_removes_titled_accounts_and_entries(
    account_service, transfer_service, ledger_repo
):
    rent_one = _funded(account_service, "Rent", 1000)
    rent_two = account_service.create_account("Rent")
    food = _funded(account_service, "Food", 500)
    transfer_service.transfer(rent_one, food, 100, "a")
    transfer_service.transfer(food, rent_two, 50, "b")

    account_service.delete_account(rent_one.id, "Rent", cascade=True)

    titles = [account.title for account in account_service.list_accounts()]
    assert titles == ["Food"]
    assert ledger_repo.find_by_account(rent_one.id) == []
    assert ledger_repo.find_by_account(rent_two.id) == []
    # Entries on surviving accounts remain
    food_entries = ledger_repo.find_by_account(food.id)
    assert sorted(entry.amount for entry in food_entries) == [Decimal("-50"), Decimal("100")]
    assert len(ledger_repo.find_all()) == 2


def test_delete_with_cascade_includes_given_id(account_service):
    """The named account goes even if the title passed in does not match it."""
    renamed = account_service.create_account("Rent")
    account_service.update_account(renamed.id, title="Housing")

    account_service.delete_account(renamed.id, "Rent", cascade=True)

    assert account_service.list_accounts() == []


def test_delete_with_cascade_is_all_or_nothing(account_service, transfer_service, store, ledger_repo):
    rent = _funded(account_service, "Rent", 1000)
    food = account_service.create_account("Food")
    transfer_service.transfer(rent, food, 100, "a")
    store.fail_account_deletes = True

    with pytest.raises(DeleteFailedError) as exc_info:
        account_service.delete_account(rent.id, "Rent", cascade=True)

    assert isinstance(exc_info.value.__cause__, StoreError)
    assert account_service.get_account(rent.id).balance == Decimal("900")
    assert len(ledger_repo.find_by_account(rent.id)) == 1
    assert len(ledger_repo.find_all()) == 2


def test_delete_without_cascade_failure(account_service, store):
    rent = account_service.create_account("Rent")
    store.fail_account_deletes = True

    with pytest.raises(DeleteFailedError):
        account_service.delete_account(rent.id, "Rent", cascade=False)

    assert account_service.get_account(rent.id).title == "Rent"


def test_reconcile(account_service, transfer_service):
    source = _funded(account_service, "Savings", 500)
    target = account_service.create_account("Rent")

    transfer_service.transfer(source, target, 200, "rent")

    # The opening balance was a direct edit, so it has no ledger entry
    assert account_service.reconcile(source.id) == Decimal("500")
    assert account_service.reconcile(target.id) == Decimal("0")


def test_entries(account_service, transfer_service):
    source = _funded(account_service, "Savings", 500)
    target = account_service.create_account("Rent")
    transfer_service.transfer(source, target, 200, "rent")

    [entry] = account_service.entries(target.id)

    assert entry.amount == Decimal("200")
