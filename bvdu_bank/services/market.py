"""Simulated market: trading hours, random price walk and FX conversion."""

import logging
import random
from decimal import Decimal, InvalidOperation
from functools import partial

from bvdu_bank.config import MarketConfig
from bvdu_bank.exceptions import AssetNotFoundError, InvalidPriceError
from bvdu_bank.models import FXRates, Market, PriceRec
from bvdu_bank.models.base import PRICE, RATE, Clock, local_now, quantize, to_decimal
from bvdu_bank.services.audit import AuditLog
from bvdu_bank.services.base import BaseService, log_rejections
from bvdu_bank.store.bank import BankDataStore

logger = logging.getLogger(__name__)


def is_market_open(price: PriceRec, hour: int) -> bool:
    """Whether ``hour`` (0-23, local) falls inside the asset's session.

    The session is ``[open_hour, close_hour)``; when ``open_hour`` is
    after ``close_hour`` it wraps past midnight.
    """
    if price.open_hour <= price.close_hour:
        return price.open_hour <= hour < price.close_hour
    return hour >= price.open_hour or hour < price.close_hour


def convert_to_inr(market: str, amount: Decimal, fx: FXRates) -> Decimal:
    """Convert a native-currency amount to INR.

    IN amounts are already INR. Unknown market tags are also treated as
    INR rather than rejected.
    """
    if market == Market.US:
        return amount * fx.inr_per_usd
    if market == Market.EU:
        return amount * fx.inr_per_eur
    return amount


class MarketSimulator(BaseService):
    """Owns the price table and FX rates.

    Prices follow a bounded symmetric random walk: each tick multiplies
    the price by ``1 + u * volatility`` with ``u`` uniform in [-1, 1].
    Only assets whose market is open at the current local hour move.

    Parameters
    ----------
    store : BankDataStore
        Engine tables.
    audit : AuditLog
        Audit sink.
    config : MarketConfig | None
        Price floor, randomize multiplier and optional seed.
    clock : Clock
        Local wall clock; decides which markets are open.
    rng : random.Random | None
        Generator for the walk; seeded from ``config.seed`` when omitted.
    """

    def __init__(
        self,
        store: BankDataStore,
        audit: AuditLog,
        config: MarketConfig | None = None,
        clock: Clock = local_now,
        rng: random.Random | None = None,
    ) -> None:
        super().__init__(store, audit, clock)
        self.config = config or MarketConfig()
        self._rng = rng or random.Random(self.config.seed)

    @property
    def fx(self) -> FXRates:
        return self.store.fx.rates

    def get(self, asset_id: str) -> PriceRec:
        price = self.store.prices.get(asset_id)
        if price is None:
            raise AssetNotFoundError(f"Asset {asset_id!r} not found")
        return price

    def is_open(self, asset: PriceRec | str) -> bool:
        price = asset if isinstance(asset, PriceRec) else self.get(asset)
        return is_market_open(price, self._now().hour)

    def convert_to_inr(self, market: str, amount: Decimal) -> Decimal:
        return convert_to_inr(market, amount, self.fx)

    def trade_value_inr(self, price: PriceRec, quantity: Decimal) -> Decimal:
        """INR value of ``quantity`` units at the current price.

        Buys and sells both go through here so they price symmetrically.
        """
        return self.convert_to_inr(price.market, price.price * quantity)

    # --- Price walk ---

    def tick(self) -> list[str]:
        """Move every open asset one step; returns the ids that moved."""
        now = self._now()
        moved = []
        for price in self.store.prices:
            if is_market_open(price, now.hour):
                self._perturb(price, Decimal(1))
                price.last_update = now
                moved.append(price.asset_id)

        self._flush(
            self.store.prices.save,
            partial(self.audit.audit, "MARKET_TICK|ALL_MARKETS"),
        )
        logger.debug("Market tick moved %d of %d assets", len(moved), len(self.store.prices))
        return moved

    def admin_randomize(self) -> None:
        """Apply a larger move to every asset, open or closed."""
        now = self._now()
        for price in self.store.prices:
            self._perturb(price, self.config.randomize_multiplier)
            price.last_update = now

        self._flush(
            self.store.prices.save,
            partial(self.audit.audit, "ADMIN_RANDOMIZE_PRICES"),
        )
        logger.info("Randomized %d prices", len(self.store.prices))

    def _perturb(self, price: PriceRec, scale: Decimal) -> None:
        change = Decimal(repr(self._rng.uniform(-1.0, 1.0))) * price.volatility * scale
        moved = quantize(price.price * (1 + change), PRICE)
        price.price = max(moved, self.config.price_floor)

    def list_prices(self, refresh: bool = True) -> list[PriceRec]:
        """All price records; with ``refresh`` a tick runs first."""
        if refresh:
            self.tick()
        return list(self.store.prices)

    # --- Administrator operations ---

    @log_rejections
    def set_price(self, asset_id: str, new_price: Decimal | float | int | str) -> PriceRec:
        """Override an asset's price."""
        price = self.get(asset_id)
        value = _positive(new_price, PRICE, "price")
        old = price.price

        price.price = value
        price.last_update = self._now()
        self._flush(
            self.store.prices.save,
            partial(self.audit.audit, f"ADMIN_SET_PRICE|{asset_id}|{old:.4f}->{value:.4f}"),
        )
        logger.info("Set %s price %s -> %s", asset_id, old, value)
        return price

    @log_rejections
    def set_fx_rates(
        self,
        inr_per_usd: Decimal | float | int | str,
        inr_per_eur: Decimal | float | int | str,
    ) -> FXRates:
        """Replace both FX rates."""
        usd = _positive(inr_per_usd, RATE, "INR per USD")
        eur = _positive(inr_per_eur, RATE, "INR per EUR")

        self.store.fx.rates = FXRates(inr_per_usd=usd, inr_per_eur=eur, last_update=self._now())
        self._flush(
            self.store.fx.save,
            partial(self.audit.audit, f"ADMIN_SET_FX|INR_USD={usd:.6f}|INR_EUR={eur:.6f}"),
        )
        logger.info("FX rates set: USD %s, EUR %s", usd, eur)
        return self.store.fx.rates


def _positive(value: Decimal | float | int | str, quantum: Decimal, label: str) -> Decimal:
    try:
        number = quantize(to_decimal(value), quantum)
    except (InvalidOperation, ValueError) as exc:
        raise InvalidPriceError(f"Invalid {label}: {value!r}") from exc
    if number <= 0:
        raise InvalidPriceError(f"{label} must be positive, got {value}")
    return number
