"""Account ledger: account lifecycle, PIN lockout and cash movements."""

import logging
from decimal import Decimal, InvalidOperation
from functools import partial

from bvdu_bank.config import LimitsConfig
from bvdu_bank.exceptions import (
    AccountFrozenError,
    AccountInactiveError,
    AccountNotFoundError,
    DuplicateUpiError,
    InsufficientFundsError,
    InvalidAccountTypeError,
    InvalidAmountError,
    InvalidNameError,
    InvalidPinError,
    InvalidUpiError,
    LimitReachedError,
    PersistenceError,
    SameAccountTransferError,
    UpiNotFoundError,
    WrongPinError,
)
from bvdu_bank.models import Account, AccountType, Session, Transaction, TransactionType
from bvdu_bank.models.base import MONEY, Clock, local_now, quantize, to_decimal
from bvdu_bank.services.audit import AuditLog
from bvdu_bank.services.base import BaseService, log_rejections
from bvdu_bank.store.bank import BankDataStore

logger = logging.getLogger(__name__)

UPI_DOMAIN = "bvdu"
MAX_NAME_LENGTH = 49


def normalize_upi(candidate: str) -> str:
    """Validate a UPI handle and return it as ``local@bvdu``, lower-cased.

    Accepts a bare local part (``Alice``) or ``local@bvdu``. The local
    part must be non-empty ASCII letters and digits.

    Raises
    ------
    InvalidUpiError
        On empty input, more than one ``@``, another domain, or a local
        part with anything but letters and digits.
    """
    value = candidate.rstrip("\r\n")
    if not value:
        raise InvalidUpiError("UPI cannot be empty")

    local, at, domain = value.partition("@")
    if at:
        if "@" in domain:
            raise InvalidUpiError(f"UPI {value!r} has more than one '@'")
        if domain.lower() != UPI_DOMAIN:
            raise InvalidUpiError(f"UPI domain must be @{UPI_DOMAIN}, got @{domain}")
    if not local:
        raise InvalidUpiError("UPI local part cannot be empty")
    if not (local.isascii() and local.isalnum()):
        raise InvalidUpiError(f"UPI local part must be letters and digits only: {local!r}")
    return f"{local.lower()}@{UPI_DOMAIN}"


def positive_amount(amount: Decimal | float | int | str) -> Decimal:
    """Parse a cash amount, rounded to paise; must be > 0."""
    try:
        value = quantize(to_decimal(amount), MONEY)
    except (InvalidOperation, ValueError) as exc:
        raise InvalidAmountError(f"Invalid amount: {amount!r}") from exc
    if value <= 0:
        raise InvalidAmountError(f"Amount must be positive, got {amount}")
    return value


class AccountLedger(BaseService):
    """Owns the account table and every cash-affecting operation.

    All validation happens before any mutation, so a rejected call leaves
    memory and disk untouched. Each applied call saves the account table
    and appends its transaction records before returning.
    """

    def __init__(
        self,
        store: BankDataStore,
        audit: AuditLog,
        limits: LimitsConfig | None = None,
        clock: Clock = local_now,
    ) -> None:
        super().__init__(store, audit, clock)
        self.limits = limits or LimitsConfig()

    # --- Account lifecycle ---

    @log_rejections
    def create_account(
        self,
        name: str,
        account_type: AccountType | str,
        pin: int,
        initial_deposit: Decimal | float | int | str,
        upi_candidate: str = "",
    ) -> Account:
        """Open a new account.

        Parameters
        ----------
        name : str
            Display name; also the fallback UPI local part.
        account_type : AccountType | str
            ``Savings`` or ``Current`` (case-insensitive); empty means Savings.
        pin : int
            4-digit PIN, 1000-9999.
        initial_deposit : Decimal | float | int | str
            Opening cash balance in INR, zero or more.
        upi_candidate : str
            Requested handle. When empty, the name is tried and, if it is
            not a valid local part, the account number is used.

        Returns
        -------
        Account
            The persisted account.
        """
        if len(self.store.accounts) >= self.limits.max_accounts:
            raise LimitReachedError(f"Account limit of {self.limits.max_accounts} reached")

        name = name.strip()
        if not name or "|" in name or "\n" in name or "\r" in name:
            raise InvalidNameError(f"Invalid account name: {name!r}")
        if len(name) > MAX_NAME_LENGTH:
            raise InvalidNameError(f"Account name longer than {MAX_NAME_LENGTH} characters")

        try:
            category = AccountType.parse(account_type or AccountType.SAVINGS)
        except ValueError as exc:
            raise InvalidAccountTypeError(str(exc)) from exc

        if isinstance(pin, bool) or not isinstance(pin, int) or not 1000 <= pin <= 9999:
            raise InvalidPinError("PIN must be a 4-digit number")

        try:
            balance = quantize(to_decimal(initial_deposit), MONEY)
        except (InvalidOperation, ValueError) as exc:
            raise InvalidAmountError(f"Invalid initial deposit: {initial_deposit!r}") from exc
        if balance < 0:
            raise InvalidAmountError("Initial deposit cannot be negative")

        account_number = self.store.accounts.next_account_number()
        upi = self._choose_upi(upi_candidate, name, account_number)
        if self.store.accounts.upi_taken(upi):
            raise DuplicateUpiError(f"UPI {upi!r} already taken")

        account = Account(
            account_number=account_number,
            name=name,
            account_type=category,
            pin=pin,
            balance=balance,
            upi=upi,
            last_login=self._now(),
        )
        self.store.accounts.add(account)
        self._flush(
            self.store.accounts.save,
            self._record(account_number, TransactionType.CREATE, balance, balance, f"Account created (UPI:{upi})"),
            partial(self.audit.audit, f"CREATE_ACCOUNT|{account_number}|{name}|{upi}"),
            partial(self.audit.notify, account_number, "Welcome! Account created."),
        )
        logger.info("Created account %d (%s)", account_number, upi, extra={"account_number": account_number})
        return account

    @staticmethod
    def _choose_upi(candidate: str, name: str, account_number: int) -> str:
        if candidate:
            return normalize_upi(candidate)
        try:
            return normalize_upi(name)
        except InvalidUpiError:
            return f"{account_number}@{UPI_DOMAIN}"

    def get_account(self, account_number: int) -> Account:
        account = self.store.accounts.get(account_number)
        if account is None:
            raise AccountNotFoundError(f"Account {account_number} not found")
        return account

    def list_accounts(self) -> list[Account]:
        return list(self.store.accounts)

    # --- Authentication ---

    @log_rejections
    def authenticate(self, account_number: int, pin: int) -> Session:
        """Check a PIN and open a session.

        Wrong PINs count towards the lockout threshold; reaching it
        freezes the account until an administrator unfreezes it. Frozen
        accounts are refused before the PIN is looked at.

        A failed save never changes the outcome: a wrong PIN still raises
        ``WrongPinError`` with the ``PersistenceError`` as its cause, and a
        correct PIN returns a session with ``persisted`` set to false.
        """
        account = self.get_account(account_number)
        if not account.active:
            raise AccountInactiveError(f"Account {account_number} is inactive")
        if account.frozen:
            raise AccountFrozenError(f"Account {account_number} is frozen; contact the administrator")

        if account.pin != pin:
            account.failed_attempts += 1
            remaining = max(self.limits.lockout_threshold - account.failed_attempts, 0)
            if remaining == 0:
                account.frozen = True
                logger.warning("Account %d frozen after %d failed PINs", account_number, account.failed_attempts)
                error = WrongPinError("Too many failed attempts; account frozen", 0, frozen=True)
                writes = [self.store.accounts.save, partial(self.audit.audit, f"ACCOUNT_FROZEN|{account_number}")]
            else:
                error = WrongPinError(f"Invalid PIN; {remaining} attempt(s) left", remaining)
                writes = [self.store.accounts.save]
            try:
                self._flush(*writes)
            except PersistenceError as exc:
                raise error from exc
            raise error

        account.failed_attempts = 0
        account.last_login = self._now()
        try:
            self._flush(self.store.accounts.save)
        except PersistenceError:
            logger.error("Login of %d accepted but not saved", account_number)
            return Session(account_number=account_number, opened_at=account.last_login, persisted=False)
        return Session(account_number=account_number, opened_at=account.last_login)

    def session_account(self, session: Session) -> Account:
        """Resolve a session to its account, refusing closed or frozen ones."""
        account = self.get_account(session.account_number)
        if not account.active:
            raise AccountInactiveError(f"Account {account.account_number} is inactive")
        if account.frozen:
            raise AccountFrozenError(f"Account {account.account_number} is frozen")
        return account

    # --- Cash movements ---

    @log_rejections
    def deposit(self, session: Session, amount: Decimal | float | int | str) -> Decimal:
        """Credit cash; returns the new balance."""
        account = self.session_account(session)
        value = positive_amount(amount)

        account.balance += value
        self._flush(
            self.store.accounts.save,
            self._record(account.account_number, TransactionType.DEPOSIT, value, account.balance, "Deposit"),
            partial(self.audit.notify, account.account_number, "Deposit successful."),
        )
        logger.info("Deposit %s to %d", value, account.account_number)
        return account.balance

    @log_rejections
    def withdraw(self, session: Session, amount: Decimal | float | int | str) -> Decimal:
        """Debit cash; returns the new balance."""
        account = self.session_account(session)
        value = positive_amount(amount)
        if value > account.balance:
            raise InsufficientFundsError(f"Balance {account.balance} is less than {value}")

        account.balance -= value
        self._flush(
            self.store.accounts.save,
            self._record(account.account_number, TransactionType.WITHDRAW, -value, account.balance, "Withdraw"),
            partial(self.audit.notify, account.account_number, "Withdrawal processed."),
        )
        logger.info("Withdraw %s from %d", value, account.account_number)
        return account.balance

    @log_rejections
    def transfer(self, session: Session, destination: int, amount: Decimal | float | int | str) -> Decimal:
        """Move cash to another account by number; returns the source balance."""
        source = self.session_account(session)
        target = self.store.accounts.get(destination)
        if target is None or not target.active:
            raise AccountNotFoundError(f"Destination {destination} not found or not active")
        self._check_receivable(source, target)
        value = self._debitable(source, amount)

        self._move(
            source,
            target,
            value,
            (TransactionType.TRANSFER_OUT, f"Transfer to {target.account_number}"),
            (TransactionType.TRANSFER_IN, f"Transfer from {source.account_number}"),
            "You have received a transfer.",
        )
        return source.balance

    @log_rejections
    def transfer_by_upi(self, session: Session, upi: str, amount: Decimal | float | int | str) -> Decimal:
        """Move cash to the active account holding ``upi``; returns the source balance."""
        source = self.session_account(session)
        target = self.store.accounts.find_by_upi(upi.strip().lower())
        if target is None:
            raise UpiNotFoundError(f"UPI {upi!r} is not registered")
        self._check_receivable(source, target)
        value = self._debitable(source, amount)

        self._move(
            source,
            target,
            value,
            (TransactionType.UPI_OUT, f"UPI to {target.upi}"),
            (TransactionType.UPI_IN, f"UPI from {source.upi}"),
            "You received money via UPI.",
        )
        return source.balance

    @staticmethod
    def _check_receivable(source: Account, target: Account) -> None:
        if target.frozen:
            raise AccountFrozenError(f"Destination {target.account_number} is frozen")
        if target.account_number == source.account_number:
            raise SameAccountTransferError("Cannot transfer to the same account")

    @staticmethod
    def _debitable(source: Account, amount: Decimal | float | int | str) -> Decimal:
        value = positive_amount(amount)
        if value > source.balance:
            raise InsufficientFundsError(f"Balance {source.balance} is less than {value}")
        return value

    def _move(
        self,
        source: Account,
        target: Account,
        value: Decimal,
        outgoing: tuple[TransactionType, str],
        incoming: tuple[TransactionType, str],
        notice: str,
    ) -> None:
        source.balance -= value
        target.balance += value
        self._flush(
            self.store.accounts.save,
            self._record(source.account_number, outgoing[0], -value, source.balance, outgoing[1]),
            self._record(target.account_number, incoming[0], value, target.balance, incoming[1]),
            partial(self.audit.notify, target.account_number, notice),
        )
        logger.info(
            "%s %s from %d to %d",
            outgoing[0].value,
            value,
            source.account_number,
            target.account_number,
        )

    # --- Statements ---

    def mini_statement(self, account_number: int, limit: int | None = None) -> list[Transaction]:
        """Last ``limit`` transactions of an account, newest first.

        Corrupt lines in the transaction file are skipped, not treated as
        the end of the history.
        """
        limit = self.limits.mini_statement_size if limit is None else limit
        if limit <= 0:
            return []
        history = self.store.transactions.for_account(account_number, skip_invalid=True)
        return list(reversed(history[-limit:]))

    # --- Administrator operations ---

    @log_rejections
    def apply_interest(self, rate_percent: Decimal | float | int | str) -> list[Transaction]:
        """Credit ``rate_percent`` of balance to every active Savings account."""
        try:
            rate = to_decimal(rate_percent)
        except (InvalidOperation, ValueError) as exc:
            raise InvalidAmountError(f"Invalid interest rate: {rate_percent!r}") from exc
        if not rate.is_finite() or rate <= 0:
            raise InvalidAmountError("Interest rate must be positive")

        credited: list[Transaction] = []
        for account in self.store.accounts:
            if not account.active or account.account_type is not AccountType.SAVINGS:
                continue
            interest = quantize(account.balance * rate / 100, MONEY)
            account.balance += interest
            credited.append(
                self._transaction(
                    account.account_number,
                    TransactionType.INTEREST,
                    interest,
                    account.balance,
                    f"Interest applied {rate:.2f}%",
                )
            )

        self._flush(
            self.store.accounts.save,
            *[partial(self.store.transactions.append, t) for t in credited],
            partial(self.audit.audit, "ADMIN_APPLY_INTEREST"),
        )
        logger.info("Applied %s%% interest to %d savings accounts", rate, len(credited))
        return credited

    @log_rejections
    def unfreeze(self, account_number: int) -> Account:
        """Clear the lockout of an account."""
        account = self.get_account(account_number)
        account.frozen = False
        account.failed_attempts = 0
        self._flush(
            self.store.accounts.save,
            partial(self.audit.audit, f"ADMIN_UNFREEZE|{account_number}"),
        )
        logger.info("Unfroze account %d", account_number)
        return account

    @log_rejections
    def deactivate(self, account_number: int) -> Account:
        """Close an account; it stays in the table and keeps its UPI."""
        account = self.get_account(account_number)
        account.active = False
        self._flush(
            self.store.accounts.save,
            partial(self.audit.audit, f"ADMIN_DEACTIVATE|{account_number}"),
        )
        logger.info("Deactivated account %d", account_number)
        return account
