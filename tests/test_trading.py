"""Tests for the trading engine."""

import logging
from decimal import Decimal

import pytest

from bvdu_bank import Bank, BankConfig, LimitsConfig
from bvdu_bank.exceptions import (
    AssetNotFoundError,
    HoldingLimitReachedError,
    InsufficientFundsError,
    InvalidQuantityError,
    MarketClosedError,
    NotOwnedError,
)
from bvdu_bank.models import Session, TransactionType
from bvdu_bank.services import weighted_average


class TestWeightedAverage:
    """Tests for cost-basis averaging."""

    def test_example(self) -> None:
        """Average of 10 at 100 and 5 at 200 is 133.3333."""
        avg = weighted_average(Decimal("10"), Decimal("100"), Decimal("5"), Decimal("200"))
        assert avg == Decimal("133.3333")

    def test_same_price(self) -> None:
        """Buying more at the same price keeps the average."""
        assert weighted_average(Decimal("3"), Decimal("50"), Decimal("7"), Decimal("50")) == Decimal("50.0000")


class TestBuy:
    """Tests for TradingEngine.buy."""

    def test_buy_then_average(self, bank: Bank, session: Session) -> None:
        """A second buy re-averages the holding and debits cash."""
        bank.market.set_price("INFY", 100)
        bank.trading.buy(session, "INFY", 10)
        bank.market.set_price("INFY", 200)

        holding = bank.trading.buy(session, "INFY", 5)

        assert holding.quantity == Decimal("15")
        assert holding.average_price == Decimal("133.3333")
        assert bank.ledger.get_account(1001).balance == Decimal("8000.00")
        assert len(bank.trading.holdings_for(1001)) == 1

    def test_buy_records_history(self, bank: Bank, session: Session) -> None:
        """A buy logs a transaction, an audit line and a notification."""
        bank.market.set_price("INFY", 100)

        bank.trading.buy(session, "INFY", "2.5")

        (txn,) = bank.store.transactions.for_account(1001)
        assert txn.transaction_type is TransactionType.BUY
        assert txn.amount == Decimal("-250.00")
        assert txn.balance_after == Decimal("9750.00")
        assert txn.note == "Bought INFY x 2.5000"
        assert [e.entry for e in bank.audit.entries()][-1] == "BUY|1001|INFY|2.5000|250.00INR"
        assert [n.message for n in bank.audit.notifications_for(1001)] == ["Bought INFY x 2.5000"]

    def test_buy_foreign_asset(self, bank: Bank, session: Session) -> None:
        """A USD asset is paid for in INR at the USD rate."""
        holding = bank.trading.buy(session, "AAPL", "0.5")

        assert holding.average_price == Decimal("190")
        assert holding.market == "US"
        assert bank.ledger.get_account(1001).balance == Decimal("2067.50")

    def test_buy_is_persisted(self, bank: Bank, session: Session, config: BankConfig) -> None:
        """Cash and holding changes survive a restart."""
        bank.trading.buy(session, "SIE", "0.5")

        reopened = Bank.open(config)
        (holding,) = reopened.trading.holdings_for(1001)
        assert holding.asset_id == "SIE"
        assert holding.quantity == Decimal("0.5")
        assert reopened.ledger.get_account(1001).balance == Decimal("4708.00")

    def test_market_closed(self, bank: Bank, session: Session, clock) -> None:
        """Buying outside market hours is refused."""
        clock.set_hour(20)

        with pytest.raises(MarketClosedError):
            bank.trading.buy(session, "INFY", 1)
        assert bank.trading.holdings_for(1001) == []

    def test_insufficient_funds(self, bank: Bank, session: Session) -> None:
        """An unaffordable buy is refused and changes nothing."""
        with pytest.raises(InsufficientFundsError):
            bank.trading.buy(session, "BTC", 1)
        assert bank.ledger.get_account(1001).balance == Decimal("10000.00")

    @pytest.mark.parametrize("quantity", [0, -1, "lots", "0.0000001"])
    def test_invalid_quantity(self, bank: Bank, session: Session, quantity: object) -> None:
        """Zero, negative, non-numeric and too-fine quantities are refused."""
        with pytest.raises(InvalidQuantityError):
            bank.trading.buy(session, "INFY", quantity)

    def test_unknown_asset(self, bank: Bank, session: Session) -> None:
        """Buying an unknown asset raises AssetNotFoundError."""
        with pytest.raises(AssetNotFoundError):
            bank.trading.buy(session, "GOOG", 1)

    def test_holding_limit_checked_before_debit(self, config: BankConfig, clock) -> None:
        """A full holdings table refuses a new asset before taking cash."""
        config.limits = LimitsConfig(max_holdings=1)
        bank = Bank.open(config, clock=clock)
        session = bank.ledger.authenticate(1001, 1234)
        bank.market.set_price("INFY", 100)
        bank.market.set_price("TCS", 100)
        bank.trading.buy(session, "INFY", 1)

        with pytest.raises(HoldingLimitReachedError):
            bank.trading.buy(session, "TCS", 1)

        assert bank.ledger.get_account(1001).balance == Decimal("9900.00")
        bank.trading.buy(session, "INFY", 1)
        assert bank.trading.holdings_for(1001)[0].quantity == Decimal("2")


class TestSell:
    """Tests for TradingEngine.sell."""

    def test_sell_all_removes_holding(self, bank: Bank, session: Session) -> None:
        """Selling everything credits cash and removes the holding."""
        bank.market.set_price("INFY", 100)
        bank.trading.buy(session, "INFY", 10)
        bank.market.set_price("INFY", 200)
        bank.trading.buy(session, "INFY", 5)

        proceeds = bank.trading.sell(session, "INFY", 15)

        assert proceeds == Decimal("3000.00")
        assert bank.trading.holdings_for(1001) == []
        assert bank.ledger.get_account(1001).balance == Decimal("11000.00")

    def test_sell_foreign_uses_current_fx(self, bank: Bank, session: Session) -> None:
        """Proceeds use the FX rate at the time of sale."""
        bank.trading.buy(session, "AAPL", "0.5")
        bank.market.set_fx_rates(90, "88.2")

        proceeds = bank.trading.sell(session, "AAPL", "0.5")

        assert proceeds == Decimal("8550.00")
        (_, txn) = bank.store.transactions.for_account(1001)
        assert txn.transaction_type is TransactionType.SELL
        assert txn.amount == Decimal("8550.00")
        assert [e.entry for e in bank.audit.entries()][-1] == "SELL|1001|AAPL|0.5000|8550.00INR"

    def test_partial_sell_keeps_average(self, bank: Bank, session: Session) -> None:
        """A partial sale leaves the average price unchanged."""
        bank.market.set_price("TCS", 100)
        bank.trading.buy(session, "TCS", 4)
        bank.market.set_price("TCS", 150)

        bank.trading.sell(session, "TCS", 1)

        (holding,) = bank.trading.holdings_for(1001)
        assert holding.quantity == Decimal("3")
        assert holding.average_price == Decimal("100")

    def test_dust_is_closed_out(self, bank: Bank, session: Session) -> None:
        """A remainder below the dust threshold is removed."""
        bank.market.set_price("INFY", 100)
        bank.trading.buy(session, "INFY", 1)

        bank.trading.sell(session, "INFY", "0.999999")

        assert bank.trading.holdings_for(1001) == []

    def test_sell_while_closed(self, bank: Bank, session: Session, clock) -> None:
        """Selling is allowed outside market hours."""
        bank.market.set_price("INFY", 100)
        bank.trading.buy(session, "INFY", 2)
        clock.set_hour(23)

        assert bank.trading.sell(session, "INFY", 1) == Decimal("100.00")

    def test_not_owned(self, bank: Bank, session: Session) -> None:
        """Selling an asset not held raises NotOwnedError."""
        with pytest.raises(NotOwnedError):
            bank.trading.sell(session, "TCS", 1)

    def test_other_accounts_holding_not_owned(self, bank: Bank, session: Session, other_session: Session) -> None:
        """Another account's holding cannot be sold."""
        bank.market.set_price("INFY", 100)
        bank.trading.buy(other_session, "INFY", 1)

        with pytest.raises(NotOwnedError):
            bank.trading.sell(session, "INFY", 1)

    def test_oversell(self, bank: Bank, session: Session) -> None:
        """Selling more than held is refused."""
        bank.market.set_price("INFY", 100)
        bank.trading.buy(session, "INFY", 2)

        with pytest.raises(InvalidQuantityError):
            bank.trading.sell(session, "INFY", "2.000001")
        assert bank.trading.holdings_for(1001)[0].quantity == Decimal("2")


class TestTradeRounding:
    """Tests for paisa rounding of trade cash."""

    def test_cost_rounds_up_to_a_paisa(self, bank: Bank, session: Session) -> None:
        """A buy worth a fraction of a paisa costs one paisa."""
        bank.market.set_price("INFY", 1500)

        bank.trading.buy(session, "INFY", "0.000003")

        (txn,) = bank.store.transactions.for_account(1001)
        assert txn.amount == Decimal("-0.01")
        assert bank.ledger.get_account(1001).balance == Decimal("9999.99")

    def test_proceeds_round_down_to_a_paisa(self, bank: Bank, session: Session) -> None:
        """Sale proceeds drop the fraction of a paisa."""
        bank.market.set_price("INFY", 100)
        bank.trading.buy(session, "INFY", 1)

        proceeds = bank.trading.sell(session, "INFY", "0.123457")

        assert proceeds == Decimal("12.34")
        assert bank.ledger.get_account(1001).balance == Decimal("9912.34")

    def test_sell_worth_less_than_a_paisa(self, bank: Bank, session: Session) -> None:
        """Selling a sliver that would pay nothing is refused and changes nothing."""
        bank.market.set_price("INFY", 1500)
        bank.trading.buy(session, "INFY", 1)

        with pytest.raises(InvalidQuantityError):
            bank.trading.sell(session, "INFY", "0.000003")

        assert bank.trading.holdings_for(1001)[0].quantity == Decimal("1")
        assert bank.ledger.get_account(1001).balance == Decimal("8500.00")

    def test_many_tiny_buys_cannot_create_cash(self, bank: Bank, session: Session) -> None:
        """Splitting a position into sub-paisa buys never ends with more cash."""
        bank.market.set_price("INFY", 1500)
        for _ in range(100):
            bank.trading.buy(session, "INFY", "0.000003")
        (holding,) = bank.trading.holdings_for(1001)
        assert holding.quantity == Decimal("0.0003")

        bank.trading.sell(session, "INFY", holding.quantity)

        balance = bank.ledger.get_account(1001).balance
        assert balance == Decimal("9999.45")
        assert balance < Decimal("10000.00")


class TestRejectionLogging:
    """Tests for warnings on refused trades."""

    def test_closed_market_buy_is_logged(self, bank: Bank, session: Session, clock, caplog) -> None:
        """A refused buy leaves a warning naming the operation and the error."""
        clock.set_hour(20)

        with caplog.at_level(logging.WARNING, logger="bvdu_bank"):
            with pytest.raises(MarketClosedError):
                bank.trading.buy(session, "INFY", 1)

        (record,) = [r for r in caplog.records if "rejected" in r.getMessage()]
        assert record.levelno == logging.WARNING
        assert "TradingEngine.buy" in record.getMessage()
        assert "MarketClosedError" in record.getMessage()
