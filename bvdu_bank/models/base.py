"""Base models and numeric helpers shared across the engine."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Callable

# Precision of each numeric field family as written to the record files
MONEY = Decimal("0.01")
PRICE = Decimal("0.0001")
QUANTITY = Decimal("0.000001")
RATE = Decimal("0.000001")

# Holdings at or below this quantity are closed out
DUST_QUANTITY = Decimal("0.000001")

Clock = Callable[[], datetime]


def local_now() -> datetime:
    """Current local wall-clock time at record precision (whole seconds)."""
    return datetime.now().replace(microsecond=0)


def to_decimal(value: Decimal | float | int | str) -> Decimal:
    """Convert a user-supplied number to ``Decimal`` without float noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def quantize(value: Decimal, quantum: Decimal, rounding: str | None = None) -> Decimal:
    """Round ``value`` to the precision of ``quantum``; half-even unless ``rounding`` is given."""
    return value.quantize(quantum, rounding=rounding)


@dataclass(frozen=True)
class Session:
    """Handle returned by a successful PIN check.

    ``persisted`` is false when the login was accepted but the account
    table could not be rewritten; the reset counter and login time live in
    memory until the next successful save.
    """

    account_number: int
    opened_at: datetime
    persisted: bool = True


@dataclass
class AuditEntry:
    """One line of the administrator audit log."""

    timestamp: datetime
    entry: str  # may itself contain '|' separated details


@dataclass
class Notification:
    """Customer-facing notice addressed to one account."""

    timestamp: datetime
    account_number: int
    message: str
