"""Amount conversion between user input, storage and display."""

import re
from decimal import Decimal, InvalidOperation

from bookkeeper.models.exceptions import InvalidAmountError

_NON_NUMERIC = re.compile(r"[^\d.-]")


def to_amount(value: Decimal | int | str, places: int = 2) -> Decimal:
    """
    Convert a caller-supplied value to an exact Decimal amount.

    Floats are rejected; pass a string or Decimal instead.

    Args:
        value: The amount as Decimal, int or numeric string
        places: Maximum number of fractional digits allowed

    Returns:
        The amount as a finite Decimal

    Raises:
        InvalidAmountError: If the value is not a finite number or too precise
    """
    if isinstance(value, (float, bool)):
        raise InvalidAmountError(f"Amount must be a Decimal, int or string, not {type(value).__name__}")
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidAmountError(f"Not a valid amount: {value!r}")
    if not amount.is_finite():
        raise InvalidAmountError(f"Amount must be finite: {value!r}")
    if amount.as_tuple().exponent < -places:
        raise InvalidAmountError(f"Amount {amount} has more than {places} decimal places")
    return amount


def parse_amount(text: str) -> Decimal:
    """
    Parse a formatted display amount such as "5 000 ₸" back into a Decimal.

    Raises:
        InvalidAmountError: If nothing numeric is left after stripping
    """
    cleaned = _NON_NUMERIC.sub("", text)
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        raise InvalidAmountError(f"Not a valid amount: {text!r}")


def format_amount(amount: Decimal, symbol: str = "₸") -> str:
    """Format an amount for display, e.g. Decimal("5000") -> "5000 ₸"."""
    return f"{amount} {symbol}"
