"""Application wiring: settings, logging, store and services."""

import logging
from dataclasses import dataclass

from config.settings import Settings

from bookkeeper.presentation import accounts_table
from bookkeeper.repositories.sqlite_store import SQLiteDocumentStore
from bookkeeper.services.account_service import AccountService
from bookkeeper.services.transfer_service import TransferService


@dataclass
class Bookkeeper:
    """The services of one running application, sharing a single store."""

    settings: Settings
    store: SQLiteDocumentStore
    accounts: AccountService
    transfers: TransferService


def configure_logging(settings: Settings) -> logging.Logger:
    logger = logging.getLogger('bookkeeper')
    logger.setLevel(settings.log_level)
    handler = logging.FileHandler(filename=settings.log_file, encoding='utf-8', mode='a')
    handler.setFormatter(logging.Formatter('%(asctime)s:%(levelname)s:%(name)s: %(message)s'))
    logger.addHandler(handler)
    return logger


def create_app(settings: Settings, store: SQLiteDocumentStore | None = None) -> Bookkeeper:
    """
    Build the services around one store handle.

    Args:
        settings: Loaded configuration
        store: An already-open store; when omitted one is opened at settings.db_path

    Returns:
        The wired Bookkeeper
    """
    if store is None:
        store = SQLiteDocumentStore.open(settings.db_path)
    return Bookkeeper(
        settings=settings,
        store=store,
        accounts=AccountService(
            store,
            max_attempts=settings.max_transfer_attempts,
            places=settings.currency_places,
        ),
        transfers=TransferService(
            store,
            max_attempts=settings.max_transfer_attempts,
            max_amount=settings.max_transfer_amount,
            places=settings.currency_places,
        ),
    )


def main() -> None:
    settings = Settings.load()
    configure_logging(settings)
    app = create_app(settings)
    try:
        print(accounts_table(app.accounts.list_accounts(), settings.currency_symbol))
    finally:
        app.store.close()


if __name__ == '__main__':
    main()
