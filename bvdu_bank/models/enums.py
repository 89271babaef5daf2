"""Enumeration types for banking and market entities."""

from enum import Enum


class AccountType(str, Enum):
    SAVINGS = "Savings"
    CURRENT = "Current"

    @classmethod
    def parse(cls, value: "AccountType | str") -> "AccountType":
        """Resolve a category name case-insensitively."""
        if isinstance(value, cls):
            return value
        for member in cls:
            if member.value.lower() == str(value).strip().lower():
                return member
        raise ValueError(f"Unknown account type: {value!r}")


class TransactionType(str, Enum):
    CREATE = "CREATE"
    DEPOSIT = "DEPOSIT"
    WITHDRAW = "WITHDRAW"
    TRANSFER_IN = "TRANSFER_IN"
    TRANSFER_OUT = "TRANSFER_OUT"
    UPI_IN = "UPI_IN"
    UPI_OUT = "UPI_OUT"
    BUY = "BUY"
    SELL = "SELL"
    INTEREST = "INTEREST"


class Market(str, Enum):
    """Home market of an asset; fixes its native currency."""

    IN = "IN"  # INR
    US = "US"  # USD
    EU = "EU"  # EUR
