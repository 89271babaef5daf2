"""First-run seed data for an empty data directory."""

from decimal import Decimal

from bvdu_bank.models import AccountType, Market

# (number, name, type, pin, opening balance); UPI is name@bvdu
DEFAULT_ACCOUNTS: list[tuple[int, str, AccountType, int, Decimal]] = [
    (1001, "adarsh", AccountType.SAVINGS, 1234, Decimal("10000.00")),
    (1002, "achyut", AccountType.SAVINGS, 2345, Decimal("8000.00")),
    (1003, "ayush", AccountType.CURRENT, 3456, Decimal("5000.00")),
    (1004, "aabir", AccountType.SAVINGS, 4567, Decimal("12000.00")),
]

# Assets across the three markets; BTC trades around the clock
DEFAULT_PRICES: list[dict] = [
    {"asset_id": "INFY", "name": "Infosys Ltd", "price": "1500", "vol": "0.01", "market": Market.IN, "hours": (9, 15)},
    {"asset_id": "TCS", "name": "TCS", "price": "3200", "vol": "0.008", "market": Market.IN, "hours": (9, 15)},
    {"asset_id": "AAPL", "name": "Apple Inc", "price": "190", "vol": "0.02", "market": Market.US, "hours": (9, 17)},
    {"asset_id": "NVDA", "name": "NVIDIA Corp", "price": "190", "vol": "0.03", "market": Market.US, "hours": (9, 17)},
    {"asset_id": "BTC", "name": "Bitcoin", "price": "35000", "vol": "0.05", "market": Market.US, "hours": (0, 24)},
    {"asset_id": "SIE", "name": "Siemens", "price": "120", "vol": "0.018", "market": Market.EU, "hours": (8, 18)},
]
