"""Trading engine: buys and sells against account cash at live prices."""

import logging
from decimal import ROUND_CEILING, ROUND_FLOOR, Decimal, InvalidOperation
from functools import partial

from bvdu_bank.config import LimitsConfig
from bvdu_bank.exceptions import (
    HoldingLimitReachedError,
    InsufficientFundsError,
    InvalidQuantityError,
    MarketClosedError,
    NotOwnedError,
)
from bvdu_bank.models import Holding, Session, TransactionType
from bvdu_bank.models.base import DUST_QUANTITY, MONEY, PRICE, QUANTITY, Clock, local_now, quantize, to_decimal
from bvdu_bank.services.audit import AuditLog
from bvdu_bank.services.base import BaseService, log_rejections
from bvdu_bank.services.ledger import AccountLedger
from bvdu_bank.services.market import MarketSimulator
from bvdu_bank.store.bank import BankDataStore

logger = logging.getLogger(__name__)


def weighted_average(old_qty: Decimal, old_avg: Decimal, new_qty: Decimal, new_price: Decimal) -> Decimal:
    """Cost basis after adding ``new_qty`` units at ``new_price``."""
    total_qty = old_qty + new_qty
    return quantize((old_qty * old_avg + new_qty * new_price) / total_qty, PRICE)


def _quantity(quantity: Decimal | float | int | str) -> Decimal:
    try:
        value = quantize(to_decimal(quantity), QUANTITY)
    except (InvalidOperation, ValueError) as exc:
        raise InvalidQuantityError(f"Invalid quantity: {quantity!r}") from exc
    if value <= 0:
        raise InvalidQuantityError(f"Quantity must be positive, got {quantity}")
    return value


class TradingEngine(BaseService):
    """Owns the holdings table.

    Buys debit the account at ``price * quantity`` converted to INR and
    re-average the holding's native cost basis; sells credit the same
    conversion and shrink the holding, closing it once only dust remains.
    Costs round up to the paisa and proceeds round down, and a trade worth
    less than one paisa is refused, so no sequence of trades at a fixed
    price can create cash.
    """

    def __init__(
        self,
        store: BankDataStore,
        audit: AuditLog,
        ledger: AccountLedger,
        market: MarketSimulator,
        limits: LimitsConfig | None = None,
        clock: Clock = local_now,
    ) -> None:
        super().__init__(store, audit, clock)
        self.ledger = ledger
        self.market = market
        self.limits = limits or LimitsConfig()

    def holdings_for(self, account_number: int) -> list[Holding]:
        return self.store.holdings.for_account(account_number)

    @log_rejections
    def buy(self, session: Session, asset_id: str, quantity: Decimal | float | int | str) -> Holding:
        """Buy ``quantity`` units of an open asset.

        Returns
        -------
        Holding
            The created or re-averaged holding.
        """
        account = self.ledger.session_account(session)
        price = self.market.get(asset_id)
        if not self.market.is_open(price):
            raise MarketClosedError(
                f"Market for {price.asset_id} ({price.market}) is closed "
                f"(open {price.open_hour:02d}:00 to {price.close_hour:02d}:00)"
            )
        qty = _quantity(quantity)
        cost = quantize(self.market.trade_value_inr(price, qty), MONEY, ROUND_CEILING)
        if cost <= 0:
            raise InvalidQuantityError(f"Buying {qty} {price.asset_id} is worth less than one paisa")
        if cost > account.balance:
            raise InsufficientFundsError(f"Need {cost} INR, balance is {account.balance}")

        key = (account.account_number, price.asset_id)
        holding = self.store.holdings.get(key)
        if holding is None and len(self.store.holdings) >= self.limits.max_holdings:
            raise HoldingLimitReachedError(f"Holdings limit of {self.limits.max_holdings} reached")

        account.balance -= cost
        if holding is None:
            holding = Holding(
                account_number=account.account_number,
                asset_id=price.asset_id,
                asset_name=price.asset_name,
                quantity=qty,
                average_price=price.price,
                market=price.market,
            )
            self.store.holdings.add(holding)
        else:
            holding.average_price = weighted_average(holding.quantity, holding.average_price, qty, price.price)
            holding.quantity += qty

        note = f"Bought {price.asset_id} x {qty:.4f}"
        self._flush(
            self.store.accounts.save,
            self.store.holdings.save,
            self._record(account.account_number, TransactionType.BUY, -cost, account.balance, note),
            partial(self.audit.audit, f"BUY|{account.account_number}|{price.asset_id}|{qty:.4f}|{cost:.2f}INR"),
            partial(self.audit.notify, account.account_number, note),
        )
        logger.info("%d bought %s x %s for %s INR", account.account_number, price.asset_id, qty, cost)
        return holding

    @log_rejections
    def sell(self, session: Session, asset_id: str, quantity: Decimal | float | int | str) -> Decimal:
        """Sell part or all of a holding at the current price.

        Selling is allowed outside market hours.

        Returns
        -------
        Decimal
            INR proceeds credited to the account.
        """
        account = self.ledger.session_account(session)
        price = self.market.get(asset_id)
        key = (account.account_number, price.asset_id)
        holding = self.store.holdings.get(key)
        if holding is None:
            raise NotOwnedError(f"Account {account.account_number} does not own {asset_id}")
        qty = _quantity(quantity)
        if qty > holding.quantity:
            raise InvalidQuantityError(f"Cannot sell {qty}, only {holding.quantity} owned")

        proceeds = quantize(self.market.trade_value_inr(price, qty), MONEY, ROUND_FLOOR)
        if proceeds <= 0:
            raise InvalidQuantityError(f"Selling {qty} {price.asset_id} is worth less than one paisa")
        holding.quantity -= qty
        if holding.quantity <= DUST_QUANTITY:
            self.store.holdings.remove(key)
        account.balance += proceeds

        note = f"Sold {price.asset_id} x {qty:.4f}"
        self._flush(
            self.store.accounts.save,
            self.store.holdings.save,
            self._record(account.account_number, TransactionType.SELL, proceeds, account.balance, note),
            partial(self.audit.audit, f"SELL|{account.account_number}|{price.asset_id}|{qty:.4f}|{proceeds:.2f}INR"),
            partial(self.audit.notify, account.account_number, note),
        )
        logger.info("%d sold %s x %s for %s INR", account.account_number, price.asset_id, qty, proceeds)
        return proceeds
