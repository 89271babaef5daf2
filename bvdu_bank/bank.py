"""Bank facade: loads the tables, seeds a fresh data directory and wires services."""

import logging
import random
from decimal import Decimal
from functools import partial

from bvdu_bank.config import BankConfig
from bvdu_bank.exceptions import PersistenceError, WrongPinError
from bvdu_bank.models import Account, PriceRec
from bvdu_bank.models.base import Clock, local_now
from bvdu_bank.services import AccountLedger, AuditLog, MarketSimulator, PortfolioValuation, TradingEngine
from bvdu_bank.services.base import flush
from bvdu_bank.store.bank import BankDataStore
from bvdu_bank.store.defaults import DEFAULT_ACCOUNTS, DEFAULT_PRICES

logger = logging.getLogger(__name__)


class Bank:
    """Entry point used by the presentation layer.

    Owns one ``BankDataStore`` and the services operating on it. Use
    ``Bank.open`` (or a ``with`` block) so the tables are loaded and
    seeded before the first operation.

    Parameters
    ----------
    config : BankConfig | None
        Storage, limits and market settings.
    clock : Clock | None
        Local wall clock shared by every service.
    rng : random.Random | None
        Generator for the price walk.
    """

    def __init__(
        self,
        config: BankConfig | None = None,
        clock: Clock | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.config = config or BankConfig()
        self._clock = clock or local_now
        storage = self.config.storage

        self.store = BankDataStore.from_config(storage, self.config.market, self.config.limits)
        self.audit = AuditLog(storage.audit_path, storage.notifications_path, self._clock)
        self.ledger = AccountLedger(self.store, self.audit, self.config.limits, self._clock)
        self.market = MarketSimulator(self.store, self.audit, self.config.market, self._clock, rng)
        self.valuation = PortfolioValuation(self.store)
        self.trading = TradingEngine(
            self.store, self.audit, self.ledger, self.market, self.config.limits, self._clock
        )

    @classmethod
    def open(
        cls,
        config: BankConfig | None = None,
        clock: Clock | None = None,
        rng: random.Random | None = None,
    ) -> "Bank":
        """Create a bank and load its data directory."""
        bank = cls(config, clock, rng)
        bank.start()
        return bank

    def start(self) -> None:
        """Load every table, then create whatever files are missing."""
        self.config.storage.data_dir.mkdir(parents=True, exist_ok=True)
        self.store.load_all()
        self._ensure_default_files()
        logger.info("Bank ready in %s: %s", self.config.storage.data_dir, self.store.summary())

    def close(self) -> None:
        """Rewrite every mutable table."""
        flush(
            self.store.accounts.save,
            self.store.holdings.save,
            self.store.prices.save,
            self.store.fx.save,
        )
        logger.info("Bank data saved")

    def __enter__(self) -> "Bank":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            self.close()
        except PersistenceError:
            logger.exception("Final save failed")
            if exc_type is None:
                raise

    # --- Seeding ---

    def _ensure_default_files(self) -> None:
        store = self.store
        now = self._clock()

        if not store.accounts.exists():
            for number, name, account_type, pin, balance in DEFAULT_ACCOUNTS:
                store.accounts.add(
                    Account(
                        account_number=number,
                        name=name,
                        account_type=account_type,
                        pin=pin,
                        balance=balance,
                        upi=f"{name}@bvdu",
                        last_login=now,
                    )
                )
            store.accounts.save()
            self.audit.audit("DEFAULT_ACCOUNTS_CREATED")
            logger.info("Seeded %d default accounts", len(DEFAULT_ACCOUNTS))

        if not store.transactions.exists():
            store.transactions.touch()
        if not store.holdings.exists():
            store.holdings.touch()

        if len(store.prices) == 0:
            self.ensure_default_prices()

        if not store.fx.exists():
            store.fx.rates.last_update = now
            store.fx.save()

        self.audit.ensure_files()

    def ensure_default_prices(self) -> None:
        """Seed the price table when it is empty."""
        if len(self.store.prices) > 0:
            return
        now = self._clock()
        for row in DEFAULT_PRICES:
            open_hour, close_hour = row["hours"]
            self.store.prices.add(
                PriceRec(
                    asset_id=row["asset_id"],
                    asset_name=row["name"],
                    price=Decimal(row["price"]),
                    volatility=Decimal(row["vol"]),
                    market=row["market"].value,
                    last_update=now,
                    open_hour=open_hour,
                    close_hour=close_hour,
                )
            )
        flush(
            self.store.prices.save,
            partial(self.audit.audit, "INITIALIZED_DEFAULT_PRICES"),
        )
        logger.info("Seeded %d default prices", len(DEFAULT_PRICES))

    # --- Administrator session ---

    def verify_admin(self, pin: str | int) -> None:
        """Check the administrator PIN and audit the login."""
        given = f"{pin:04d}" if isinstance(pin, int) else str(pin).strip()
        if given != self.config.admin_pin:
            logger.warning("Rejected administrator PIN")
            raise WrongPinError("Invalid admin PIN")
        self.audit.audit("ADMIN_LOGIN")

    def admin_logout(self) -> None:
        self.audit.audit("ADMIN_LOGOUT")
