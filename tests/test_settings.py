"""Tests for configuration management."""
from decimal import Decimal

import pytest
from config.settings import Settings

ENV_VARS = (
    'BOOKKEEPER_DB_PATH',
    'BOOKKEEPER_LOG_FILE',
    'BOOKKEEPER_LOG_LEVEL',
    'BOOKKEEPER_MAX_TRANSFER_ATTEMPTS',
    'BOOKKEEPER_MAX_TRANSFER_AMOUNT',
    'BOOKKEEPER_CURRENCY_SYMBOL',
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Clear Bookkeeper variables and run from a directory without a .env file."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


def test_settings_defaults():
    """Test that all default values are correctly set."""
    settings = Settings()

    assert settings.db_path == 'bookkeeper.db'
    assert settings.log_file == 'bookkeeper.log'
    assert settings.log_level == 'INFO'
    assert settings.max_transfer_attempts == 5
    assert settings.max_transfer_amount == Decimal('1000000000000')
    assert settings.currency_symbol == '₸'
    assert settings.currency_places == 2


def test_settings_load_without_environment(clean_env):
    """Loading with nothing set yields the defaults."""
    assert Settings.load() == Settings()


def test_settings_load(clean_env):
    """Test loading Settings from environment variables."""
    clean_env.setenv('BOOKKEEPER_DB_PATH', '/tmp/books.db')
    clean_env.setenv('BOOKKEEPER_LOG_FILE', '/tmp/books.log')
    clean_env.setenv('BOOKKEEPER_LOG_LEVEL', 'debug')
    clean_env.setenv('BOOKKEEPER_MAX_TRANSFER_ATTEMPTS', '3')
    clean_env.setenv('BOOKKEEPER_MAX_TRANSFER_AMOUNT', '250000')
    clean_env.setenv('BOOKKEEPER_CURRENCY_SYMBOL', '$')

    settings = Settings.load()

    assert settings.db_path == '/tmp/books.db'
    assert settings.log_file == '/tmp/books.log'
    assert settings.log_level == 'DEBUG'
    assert settings.max_transfer_attempts == 3
    assert settings.max_transfer_amount == Decimal('250000')
    assert settings.currency_symbol == '$'


def test_settings_load_reads_dotenv_file(clean_env, tmp_path):
    """Values in a .env file in the working directory are picked up."""
    # Registers the variable with monkeypatch so the value load_dotenv sets is undone
    clean_env.setenv('BOOKKEEPER_DB_PATH', 'placeholder')
    clean_env.delenv('BOOKKEEPER_DB_PATH')
    (tmp_path / '.env').write_text('BOOKKEEPER_DB_PATH=from-dotenv.db\n', encoding='utf-8')

    settings = Settings.load()

    assert settings.db_path == 'from-dotenv.db'


def test_settings_load_invalid_attempts(clean_env):
    """Test that loading fails when the retry limit is not an integer."""
    clean_env.setenv('BOOKKEEPER_MAX_TRANSFER_ATTEMPTS', 'many')

    with pytest.raises(ValueError, match="must be an integer"):
        Settings.load()


def test_settings_load_zero_attempts(clean_env):
    clean_env.setenv('BOOKKEEPER_MAX_TRANSFER_ATTEMPTS', '0')

    with pytest.raises(ValueError, match="at least 1"):
        Settings.load()


def test_settings_load_invalid_max_amount(clean_env):
    clean_env.setenv('BOOKKEEPER_MAX_TRANSFER_AMOUNT', 'lots')

    with pytest.raises(ValueError, match="must be a number"):
        Settings.load()
