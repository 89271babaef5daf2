"""Tests for custom exception hierarchy."""

from bvdu_bank.exceptions import (
    AccountFrozenError,
    AccountNotFoundError,
    AuthenticationError,
    BankError,
    ConfigurationError,
    EntityNotFoundError,
    HoldingLimitReachedError,
    InsufficientFundsError,
    InvalidEntityStateError,
    LimitReachedError,
    MarketClosedError,
    NotOwnedError,
    PersistenceError,
    RecordFormatError,
    ValidationError,
    WrongPinError,
)


class TestExceptionHierarchy:
    """Test exception inheritance chain."""

    def test_bank_error_is_exception(self) -> None:
        """BankError inherits from Exception."""
        assert isinstance(BankError("test"), Exception)

    def test_insufficient_funds_is_validation_error(self) -> None:
        """InsufficientFundsError is a ValidationError."""
        err = InsufficientFundsError("test")
        assert isinstance(err, ValidationError)
        assert isinstance(err, BankError)

    def test_holding_limit_is_limit_reached(self) -> None:
        """HoldingLimitReachedError is a LimitReachedError."""
        err = HoldingLimitReachedError("test")
        assert isinstance(err, LimitReachedError)
        assert isinstance(err, ValidationError)

    def test_not_found_errors(self) -> None:
        """Lookup failures share EntityNotFoundError."""
        assert isinstance(AccountNotFoundError("test"), EntityNotFoundError)
        assert isinstance(NotOwnedError("test"), EntityNotFoundError)

    def test_state_errors(self) -> None:
        """State conflicts share InvalidEntityStateError."""
        assert isinstance(AccountFrozenError("test"), InvalidEntityStateError)
        assert isinstance(MarketClosedError("test"), InvalidEntityStateError)

    def test_wrong_pin_is_not_validation_error(self) -> None:
        """WrongPinError is an authentication error, not a validation error."""
        err = WrongPinError("test")
        assert isinstance(err, AuthenticationError)
        assert not isinstance(err, ValidationError)

    def test_record_format_error_is_value_error(self) -> None:
        """RecordFormatError is both a ValueError and a BankError."""
        err = RecordFormatError("bad line")
        assert isinstance(err, ValueError)
        assert isinstance(err, BankError)

    def test_configuration_error_is_bank_error(self) -> None:
        """ConfigurationError inherits from BankError."""
        assert isinstance(ConfigurationError("test"), BankError)

    def test_exception_message(self) -> None:
        """Exception message is preserved."""
        err = AccountNotFoundError("Account 9999 not found")
        assert str(err) == "Account 9999 not found"


class TestExceptionAttributes:
    """Test attributes carried by exceptions."""

    def test_wrong_pin_defaults(self) -> None:
        """WrongPinError defaults to no attempts left and not frozen."""
        err = WrongPinError("Invalid PIN")
        assert err.attempts_remaining == 0
        assert err.frozen is False

    def test_wrong_pin_freeze(self) -> None:
        """WrongPinError carries the freeze flag."""
        err = WrongPinError("frozen", 0, frozen=True)
        assert err.frozen is True

    def test_persistence_error_failures(self) -> None:
        """PersistenceError lists its failed steps, empty by default."""
        inner = [PersistenceError("a"), PersistenceError("b")]
        err = PersistenceError("2 writes failed", failures=inner)
        assert err.failures == inner
        assert PersistenceError("x").failures == []
