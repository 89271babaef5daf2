"""Demo population scenario: synthetic customers banking and trading."""

import logging
import random
from decimal import Decimal
from typing import Any

from bvdu_bank.bank import Bank
from bvdu_bank.exceptions import EntityNotFoundError, InvalidEntityStateError, ValidationError
from bvdu_bank.generators import AccountRequestGenerator
from bvdu_bank.models import Account, Session

logger = logging.getLogger(__name__)

OPERATIONS = ["deposit", "withdraw", "transfer", "upi", "buy", "sell"]
OPERATION_WEIGHTS = [0.25, 0.20, 0.15, 0.15, 0.15, 0.10]


class DemoPopulationScenario:
    """Populate a bank with synthetic accounts and activity.

    Every step goes through the same operations a user would call, so
    rejected steps (insufficient funds, closed markets, limits) are
    counted rather than bypassed.
    """

    def __init__(
        self,
        bank: Bank,
        num_accounts: int = 10,
        operations_per_account: int = 5,
        seed: int | None = None,
    ) -> None:
        """Initialize the scenario.

        Parameters
        ----------
        bank : Bank
            A started bank.
        num_accounts : int
            Number of accounts to open.
        operations_per_account : int
            Random operations run per opened account.
        seed : int | None
            Random seed for reproducibility.
        """
        self.bank = bank
        self.num_accounts = num_accounts
        self.operations_per_account = operations_per_account
        self.seed = seed

        self._rng = random.Random(seed)
        self._request_gen = AccountRequestGenerator(seed=seed)
        self._sessions: list[tuple[Account, Session]] = []
        self._counts: dict[str, int] = {op: 0 for op in OPERATIONS}
        self._rejected: dict[str, int] = {}

    def run(self) -> dict[str, Any]:
        """Open the accounts, then run the operations.

        Returns
        -------
        dict[str, Any]
            Accounts created, applied operation counts and rejection
            counts keyed by exception class name.
        """
        logger.info(
            "Starting demo population: %d accounts, %d operations each",
            self.num_accounts,
            self.operations_per_account,
        )

        for request in self._request_gen.generate_batch(self.num_accounts):
            try:
                account = self.bank.ledger.create_account(
                    request.name,
                    request.account_type,
                    request.pin,
                    request.initial_deposit,
                    request.upi_candidate,
                )
            except ValidationError as exc:
                self._reject("create", exc)
                continue
            session = self.bank.ledger.authenticate(account.account_number, request.pin)
            self._sessions.append((account, session))

        for _ in range(self.operations_per_account * len(self._sessions)):
            account, session = self._rng.choice(self._sessions)
            operation = self._rng.choices(OPERATIONS, weights=OPERATION_WEIGHTS, k=1)[0]
            try:
                getattr(self, f"_{operation}")(account, session)
            except (ValidationError, EntityNotFoundError, InvalidEntityStateError) as exc:
                self._reject(operation, exc)
            else:
                self._counts[operation] += 1

        summary = {
            "accounts_created": len(self._sessions),
            "applied": dict(self._counts),
            "rejected": dict(self._rejected),
        }
        logger.info(
            "Demo population done: %d accounts, %d applied, %d rejected",
            summary["accounts_created"],
            sum(self._counts.values()),
            sum(self._rejected.values()),
        )
        return summary

    def _reject(self, operation: str, exc: Exception) -> None:
        name = type(exc).__name__
        self._rejected[name] = self._rejected.get(name, 0) + 1
        logger.debug("Rejected %s: %s", operation, exc)

    def _amount(self, low: int, high: int) -> Decimal:
        return Decimal(self._rng.randint(low * 100, high * 100)) / 100

    def _peer(self, account: Account) -> Account:
        others = [a for a, _ in self._sessions if a.account_number != account.account_number]
        return self._rng.choice(others) if others else account

    def _deposit(self, account: Account, session: Session) -> None:
        self.bank.ledger.deposit(session, self._amount(100, 20000))

    def _withdraw(self, account: Account, session: Session) -> None:
        self.bank.ledger.withdraw(session, self._amount(50, 15000))

    def _transfer(self, account: Account, session: Session) -> None:
        peer = self._peer(account)
        self.bank.ledger.transfer(session, peer.account_number, self._amount(10, 5000))

    def _upi(self, account: Account, session: Session) -> None:
        peer = self._peer(account)
        self.bank.ledger.transfer_by_upi(session, peer.upi, self._amount(10, 5000))

    def _buy(self, account: Account, session: Session) -> None:
        asset = self._rng.choice([p.asset_id for p in self.bank.store.prices])
        quantity = Decimal(self._rng.randint(1, 400)) / 100
        self.bank.trading.buy(session, asset, quantity)

    def _sell(self, account: Account, session: Session) -> None:
        holdings = self.bank.trading.holdings_for(account.account_number)
        if not holdings:
            asset = self._rng.choice([p.asset_id for p in self.bank.store.prices])
            self.bank.trading.sell(session, asset, Decimal(1))
            return
        holding = self._rng.choice(holdings)
        fraction = Decimal(self._rng.choice([25, 50, 100])) / 100
        self.bank.trading.sell(session, holding.asset_id, holding.quantity * fraction)
