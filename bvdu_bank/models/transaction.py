"""Transaction model for the cash ledger."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from bvdu_bank.models.enums import TransactionType


@dataclass(frozen=True)
class Transaction:
    """Immutable cash movement on one account.

    ``amount`` is signed: credits are positive, debits negative.
    """

    account_number: int
    timestamp: datetime
    transaction_type: TransactionType
    amount: Decimal
    balance_after: Decimal
    note: str
