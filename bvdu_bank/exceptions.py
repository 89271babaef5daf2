"""Custom exception hierarchy for bvdu-bank."""


class BankError(Exception):
    """Base exception for all bvdu-bank errors."""


# --- Validation: rejected before any state changes ---


class ValidationError(BankError):
    """Raised when an operation's input is rejected."""


class InvalidAmountError(ValidationError):
    """Raised when a cash amount or rate is not strictly positive."""


class InvalidPinError(ValidationError):
    """Raised when a PIN is not a 4-digit number."""


class InvalidUpiError(ValidationError):
    """Raised when a UPI handle fails validation."""


class DuplicateUpiError(ValidationError):
    """Raised when a UPI handle is already held by another account."""


class InvalidNameError(ValidationError):
    """Raised when an account display name cannot be stored."""


class InvalidAccountTypeError(ValidationError):
    """Raised when an account category is neither Savings nor Current."""


class InvalidQuantityError(ValidationError):
    """Raised when a trade quantity is not positive or exceeds the holding."""


class InvalidPriceError(ValidationError):
    """Raised when a price or FX rate is not strictly positive."""


class InsufficientFundsError(ValidationError):
    """Raised when an account's cash balance cannot cover a debit."""


class LimitReachedError(ValidationError):
    """Raised when a table is at its configured capacity."""


class HoldingLimitReachedError(LimitReachedError):
    """Raised when the holdings table is full."""


# --- Lookups ---


class EntityNotFoundError(BankError):
    """Raised when a referenced entity does not exist."""


class AccountNotFoundError(EntityNotFoundError):
    """Raised when an account number does not resolve to a usable account."""


class UpiNotFoundError(EntityNotFoundError):
    """Raised when no active account holds a UPI handle."""


class AssetNotFoundError(EntityNotFoundError):
    """Raised when an asset id is not in the price table."""


class NotOwnedError(EntityNotFoundError):
    """Raised when an account holds no position in an asset."""


# --- State ---


class InvalidEntityStateError(BankError):
    """Raised when an entity is in an invalid state for the operation."""


class AccountInactiveError(InvalidEntityStateError):
    """Raised when an account has been deactivated."""


class AccountFrozenError(InvalidEntityStateError):
    """Raised when an account is frozen after repeated wrong PINs."""


class SameAccountTransferError(InvalidEntityStateError):
    """Raised when a transfer names its own source as destination."""


class MarketClosedError(InvalidEntityStateError):
    """Raised when an asset's market is outside its trading hours."""


# --- Security ---


class AuthenticationError(BankError):
    """Raised when a PIN check fails."""


class WrongPinError(AuthenticationError):
    """Raised on a wrong PIN.

    ``attempts_remaining`` counts the tries left before the account
    freezes; ``frozen`` is true when this attempt froze it.
    """

    def __init__(self, message: str, attempts_remaining: int = 0, frozen: bool = False) -> None:
        super().__init__(message)
        self.attempts_remaining = attempts_remaining
        self.frozen = frozen


# --- Infrastructure ---


class PersistenceError(BankError):
    """Raised when a record file cannot be read or written.

    The in-memory change that triggered the write has already been
    applied; it is durable again after the next successful save.
    """

    def __init__(self, message: str, failures: list["PersistenceError"] | None = None) -> None:
        super().__init__(message)
        self.failures = failures or []


class RecordFormatError(BankError, ValueError):
    """Raised when a record line cannot be encoded or decoded."""


class ConfigurationError(BankError):
    """Raised when configuration is invalid or missing."""
