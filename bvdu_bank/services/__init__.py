"""Engine services operating on the in-memory tables."""

from bvdu_bank.services.audit import AuditLog
from bvdu_bank.services.ledger import AccountLedger, normalize_upi
from bvdu_bank.services.market import MarketSimulator, convert_to_inr, is_market_open
from bvdu_bank.services.trading import TradingEngine, weighted_average
from bvdu_bank.services.valuation import PortfolioValuation, value_holding

__all__ = [
    "AccountLedger",
    "AuditLog",
    "MarketSimulator",
    "PortfolioValuation",
    "TradingEngine",
    "convert_to_inr",
    "is_market_open",
    "normalize_upi",
    "value_holding",
    "weighted_average",
]
