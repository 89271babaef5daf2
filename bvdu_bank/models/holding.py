"""Holding models for the trading engine."""

from dataclasses import dataclass
from decimal import Decimal


@dataclass
class Holding:
    """Position of one account in one asset.

    ``average_price`` is the weighted-average cost per unit in the asset's
    native currency, so FX moves show up in P/L rather than in cost basis.
    """

    account_number: int
    asset_id: str
    asset_name: str
    quantity: Decimal
    average_price: Decimal
    market: str

    @property
    def key(self) -> tuple[int, str]:
        return (self.account_number, self.asset_id)


@dataclass(frozen=True)
class HoldingValuation:
    """Valuation row of one holding, all INR amounts at current FX."""

    asset_id: str
    asset_name: str
    market: str
    quantity: Decimal
    average_price: Decimal  # native
    current_price: Decimal  # native; average cost when the asset is unpriced
    value_inr: Decimal
    unrealized_pl_inr: Decimal
    priced: bool
