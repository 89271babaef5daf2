"""Tests for portfolio valuation."""

from decimal import Decimal

from bvdu_bank import Bank
from bvdu_bank.models import FXRates, Holding, PriceRec, Session
from bvdu_bank.services import value_holding

FX = FXRates(inr_per_usd=Decimal("83.5"), inr_per_eur=Decimal("88.2"))


def price(asset_id: str, value: str, market: str) -> PriceRec:
    return PriceRec(asset_id, asset_id, Decimal(value), Decimal("0.01"), market, None, 0, 24)


class TestValueHolding:
    """Tests for value_holding."""

    def test_gain_in_inr(self) -> None:
        """Domestic gain is valued at the current price."""
        holding = Holding(1001, "INFY", "Infosys Ltd", Decimal("10"), Decimal("100"), "IN")

        row = value_holding(holding, price("INFY", "120", "IN"), FX)

        assert row.value_inr == Decimal("1200")
        assert row.unrealized_pl_inr == Decimal("200")
        assert row.priced is True

    def test_loss_in_foreign_market(self) -> None:
        """EUR holding converts to INR at the EUR rate."""
        holding = Holding(1001, "SIE", "Siemens", Decimal("2"), Decimal("120"), "EU")

        row = value_holding(holding, price("SIE", "110", "EU"), FX)

        assert row.value_inr == Decimal("2") * Decimal("110") * Decimal("88.2")
        assert row.unrealized_pl_inr == Decimal("-1764.0")

    def test_unpriced_falls_back_to_cost(self) -> None:
        """A holding without a price is valued at cost with zero P/L."""
        holding = Holding(1001, "GONE", "Delisted", Decimal("3"), Decimal("50"), "US")

        row = value_holding(holding, None, FX)

        assert row.priced is False
        assert row.current_price == Decimal("50")
        assert row.value_inr == Decimal("3") * Decimal("50") * Decimal("83.5")
        assert row.unrealized_pl_inr == 0

    def test_unknown_market_valued_as_inr(self) -> None:
        """An unknown market tag converts at 1:1."""
        holding = Holding(1001, "SONY", "Sony", Decimal("1"), Decimal("10"), "JP")

        row = value_holding(holding, price("SONY", "12", "JP"), FX)

        assert row.value_inr == Decimal("12")


class TestPortfolioValuation:
    """Tests for PortfolioValuation over a live bank."""

    def test_empty_portfolio(self, bank: Bank) -> None:
        """An account without holdings is worth nothing."""
        assert bank.valuation.holdings(1001) == []
        assert bank.valuation.portfolio_value_inr(1001) == Decimal("0.00")
        assert bank.valuation.unrealized_pl_inr(1001) == Decimal("0.00")

    def test_mixed_portfolio(self, bank: Bank, session: Session) -> None:
        """Domestic and foreign holdings add up in INR."""
        bank.market.set_price("INFY", 100)
        bank.trading.buy(session, "INFY", 10)
        bank.trading.buy(session, "AAPL", "0.5")
        bank.market.set_price("INFY", 120)
        bank.market.set_price("AAPL", 200)

        rows = bank.valuation.holdings(1001)

        assert [r.asset_id for r in rows] == ["INFY", "AAPL"]
        assert bank.valuation.portfolio_value_inr(1001) == Decimal("9550.00")
        assert bank.valuation.unrealized_pl_inr(1001) == Decimal("617.50")

    def test_fx_move_changes_pl(self, bank: Bank, session: Session) -> None:
        """A rate change alone moves value and P/L."""
        bank.trading.buy(session, "AAPL", "0.5")
        bank.market.set_fx_rates(90, "88.2")

        assert bank.valuation.unrealized_pl_inr(1001) == Decimal("0.00")
        assert bank.valuation.portfolio_value_inr(1001) == Decimal("8550.00")

    def test_removed_price_uses_cost(self, bank: Bank, session: Session) -> None:
        """A holding whose price was removed is valued at cost."""
        bank.market.set_price("TCS", 100)
        bank.trading.buy(session, "TCS", 3)
        bank.store.prices.remove("TCS")

        (row,) = bank.valuation.holdings(1001)

        assert row.priced is False
        assert bank.valuation.portfolio_value_inr(1001) == Decimal("300.00")
