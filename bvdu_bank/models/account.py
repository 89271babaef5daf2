"""Account model for the ledger."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from bvdu_bank.models.enums import AccountType


@dataclass
class Account:
    """Customer bank account.

    Cash is held in INR. Accounts are never removed from the table;
    closing one clears ``active``. ``frozen`` is set by the PIN lockout
    and only an administrator clears it (together with
    ``failed_attempts``).
    """

    account_number: int
    name: str
    account_type: AccountType
    pin: int  # 1000-9999
    balance: Decimal
    upi: str  # local@bvdu, lower-case
    loan: Decimal = Decimal("0.00")
    active: bool = True
    frozen: bool = False
    failed_attempts: int = 0
    last_login: datetime | None = None
