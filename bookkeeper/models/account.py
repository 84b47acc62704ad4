"""Account data model."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass
class Account:
    """Represents a category: a named balance bucket."""

    id: str
    title: str
    balance: Decimal
    created_at: datetime | None = None
    updated_at: datetime | None = None
