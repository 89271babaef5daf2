"""Price and FX models for the market simulator."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal


@dataclass
class PriceRec:
    """Live price of one tradable asset.

    ``price`` is quoted in the native currency of ``market``. Trading hours
    are local-clock hours; ``open_hour > close_hour`` means the session
    spans midnight and ``0..24`` means the asset never closes.
    """

    asset_id: str  # e.g. AAPL, INFY, BTC
    asset_name: str
    price: Decimal
    volatility: Decimal  # 0.01 = up to ~1% per tick
    market: str  # IN, US, EU; other tags are valued as INR
    last_update: datetime | None
    open_hour: int
    close_hour: int


@dataclass
class FXRates:
    """INR conversion rates for the foreign markets."""

    inr_per_usd: Decimal
    inr_per_eur: Decimal
    last_update: datetime | None = None
