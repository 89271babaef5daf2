"""bvdu-bank: persistent single-user ledger and simulated-market portfolio engine.

Accounts, PIN lockout, cash movements, UPI transfers, a random-walk price
simulator with trading hours, multi-currency holdings valued in INR, and an
append-only audit trail, all kept in pipe-delimited text files.
"""

from bvdu_bank.bank import Bank
from bvdu_bank.config import BankConfig, LimitsConfig, MarketConfig, StorageConfig
from bvdu_bank.exceptions import BankError, PersistenceError
from bvdu_bank.logging import setup_logging

__version__ = "0.1.0"

__all__ = [
    "Bank",
    "BankConfig",
    "BankError",
    "LimitsConfig",
    "MarketConfig",
    "PersistenceError",
    "StorageConfig",
    "setup_logging",
]
