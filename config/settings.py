"""Configuration management for Bookkeeper."""
import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from dotenv import find_dotenv, load_dotenv


@dataclass
class Settings:
    """Configuration settings for Bookkeeper.

    This class centralizes all configuration values; every field has a
    default and may be overridden through a BOOKKEEPER_* environment variable.
    """

    # Database Configuration
    db_path: str = 'bookkeeper.db'

    # Logging Configuration
    log_file: str = 'bookkeeper.log'
    log_level: str = 'INFO'

    # Business Rules
    max_transfer_attempts: int = 5
    max_transfer_amount: Decimal = Decimal('1000000000000')  # 1T
    currency_symbol: str = '₸'
    currency_places: int = 2

    @classmethod
    def load(cls) -> 'Settings':
        """Load settings from environment variables (and a .env file, if present).

        Returns:
            Settings: A Settings instance with values from environment variables.

        Raises:
            ValueError: If an environment variable holds a malformed value.
        """
        load_dotenv(find_dotenv(usecwd=True))
        defaults = cls()

        attempts = os.getenv('BOOKKEEPER_MAX_TRANSFER_ATTEMPTS')
        if attempts is None:
            max_attempts = defaults.max_transfer_attempts
        else:
            try:
                max_attempts = int(attempts)
            except ValueError:
                raise ValueError("BOOKKEEPER_MAX_TRANSFER_ATTEMPTS must be an integer")
            if max_attempts < 1:
                raise ValueError("BOOKKEEPER_MAX_TRANSFER_ATTEMPTS must be at least 1")

        max_amount = os.getenv('BOOKKEEPER_MAX_TRANSFER_AMOUNT')
        if max_amount is None:
            max_transfer_amount = defaults.max_transfer_amount
        else:
            try:
                max_transfer_amount = Decimal(max_amount)
            except InvalidOperation:
                raise ValueError("BOOKKEEPER_MAX_TRANSFER_AMOUNT must be a number")

        return cls(
            db_path=os.getenv('BOOKKEEPER_DB_PATH', defaults.db_path),
            log_file=os.getenv('BOOKKEEPER_LOG_FILE', defaults.log_file),
            log_level=os.getenv('BOOKKEEPER_LOG_LEVEL', defaults.log_level).upper(),
            max_transfer_attempts=max_attempts,
            max_transfer_amount=max_transfer_amount,
            currency_symbol=os.getenv('BOOKKEEPER_CURRENCY_SYMBOL', defaults.currency_symbol),
        )
