"""Aggregate of every table the engine persists."""

import logging
from dataclasses import dataclass

from bvdu_bank.config import LimitsConfig, MarketConfig, StorageConfig
from bvdu_bank.models import FXRates
from bvdu_bank.store.tables import AccountTable, FxTable, HoldingTable, PriceTable, TransactionLog

logger = logging.getLogger(__name__)


@dataclass
class BankDataStore:
    """Owned tables of the engine, from process start to process end.

    The store is injected into each service; nothing else reads or writes
    the record files.
    """

    accounts: AccountTable
    holdings: HoldingTable
    prices: PriceTable
    fx: FxTable
    transactions: TransactionLog

    @classmethod
    def from_config(
        cls,
        storage: StorageConfig,
        market: MarketConfig,
        limits: LimitsConfig | None = None,
    ) -> "BankDataStore":
        """Build the tables for the files named in ``storage``."""
        limits = limits or LimitsConfig()
        return cls(
            accounts=AccountTable(storage.accounts_path, limits.max_accounts),
            holdings=HoldingTable(storage.holdings_path, limits.max_holdings),
            prices=PriceTable(storage.prices_path, limits.max_prices),
            fx=FxTable(
                storage.fx_path,
                FXRates(inr_per_usd=market.inr_per_usd, inr_per_eur=market.inr_per_eur),
            ),
            transactions=TransactionLog(storage.transactions_path),
        )

    def load_all(self) -> None:
        """Read every mutable table from disk."""
        self.fx.load()
        self.prices.load()
        self.holdings.load()
        self.accounts.load()
        logger.info(
            "Loaded %d accounts, %d holdings, %d prices",
            len(self.accounts),
            len(self.holdings),
            len(self.prices),
        )

    def save_all(self) -> None:
        """Rewrite every mutable table."""
        self.accounts.save()
        self.holdings.save()
        self.prices.save()
        self.fx.save()

    def summary(self) -> dict[str, int]:
        """Return summary counts of all tables."""
        return {
            "accounts": len(self.accounts),
            "active_accounts": sum(1 for a in self.accounts if a.active),
            "holdings": len(self.holdings),
            "prices": len(self.prices),
        }
