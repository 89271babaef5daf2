"""Domain models for the banking and trading engine."""

from bvdu_bank.models.account import Account
from bvdu_bank.models.base import AuditEntry, Notification, Session
from bvdu_bank.models.enums import AccountType, Market, TransactionType
from bvdu_bank.models.holding import Holding, HoldingValuation
from bvdu_bank.models.market import FXRates, PriceRec
from bvdu_bank.models.transaction import Transaction

__all__ = [
    "Account",
    "AccountType",
    "AuditEntry",
    "FXRates",
    "Holding",
    "HoldingValuation",
    "Market",
    "Notification",
    "PriceRec",
    "Session",
    "Transaction",
    "TransactionType",
]
