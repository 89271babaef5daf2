"""INR valuation and unrealized P/L of holdings; stateless."""

from decimal import Decimal

from bvdu_bank.models import FXRates, Holding, HoldingValuation, PriceRec
from bvdu_bank.models.base import MONEY, quantize
from bvdu_bank.services.market import convert_to_inr
from bvdu_bank.store.bank import BankDataStore


def value_holding(holding: Holding, price: PriceRec | None, fx: FXRates) -> HoldingValuation:
    """Value one holding at the current price, or at its cost if unpriced.

    Current price and average cost both go through the holding's market
    conversion, so P/L is ``qty * (current_inr - average_inr)``.
    """
    current = price.price if price is not None else holding.average_price
    current_inr = convert_to_inr(holding.market, current, fx)
    average_inr = convert_to_inr(holding.market, holding.average_price, fx)
    return HoldingValuation(
        asset_id=holding.asset_id,
        asset_name=holding.asset_name,
        market=holding.market,
        quantity=holding.quantity,
        average_price=holding.average_price,
        current_price=current,
        value_inr=holding.quantity * current_inr,
        unrealized_pl_inr=holding.quantity * (current_inr - average_inr),
        priced=price is not None,
    )


class PortfolioValuation:
    """Read-only views over holdings, prices and FX rates."""

    def __init__(self, store: BankDataStore) -> None:
        self.store = store

    def holdings(self, account_number: int) -> list[HoldingValuation]:
        """Per-holding valuation rows for one account, in table order."""
        fx = self.store.fx.rates
        return [
            value_holding(h, self.store.prices.get(h.asset_id), fx)
            for h in self.store.holdings.for_account(account_number)
        ]

    def portfolio_value_inr(self, account_number: int) -> Decimal:
        total = sum((row.value_inr for row in self.holdings(account_number)), Decimal(0))
        return quantize(total, MONEY)

    def unrealized_pl_inr(self, account_number: int) -> Decimal:
        total = sum((row.unrealized_pl_inr for row in self.holdings(account_number)), Decimal(0))
        return quantize(total, MONEY)
