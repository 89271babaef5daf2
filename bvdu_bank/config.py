"""Configuration management for bvdu-bank."""

from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path

from bvdu_bank.exceptions import ConfigurationError


@dataclass
class StorageConfig:
    """Location of the plain-text record files."""

    data_dir: Path = field(default_factory=lambda: Path("."))
    accounts_file: str = "accounts.txt"
    transactions_file: str = "transactions.txt"
    holdings_file: str = "holdings.txt"
    prices_file: str = "prices.txt"
    fx_file: str = "fx_rates.txt"
    audit_file: str = "admin_audit.txt"
    notifications_file: str = "notifications.txt"

    @property
    def accounts_path(self) -> Path:
        return self.data_dir / self.accounts_file

    @property
    def transactions_path(self) -> Path:
        return self.data_dir / self.transactions_file

    @property
    def holdings_path(self) -> Path:
        return self.data_dir / self.holdings_file

    @property
    def prices_path(self) -> Path:
        return self.data_dir / self.prices_file

    @property
    def fx_path(self) -> Path:
        return self.data_dir / self.fx_file

    @property
    def audit_path(self) -> Path:
        return self.data_dir / self.audit_file

    @property
    def notifications_path(self) -> Path:
        return self.data_dir / self.notifications_file


@dataclass
class LimitsConfig:
    """Table capacities and ledger thresholds."""

    max_accounts: int = 500
    max_holdings: int = 2000
    max_prices: int = 200
    mini_statement_size: int = 10
    lockout_threshold: int = 3


@dataclass
class MarketConfig:
    """Price simulation and FX defaults."""

    inr_per_usd: Decimal = Decimal("83.5")
    inr_per_eur: Decimal = Decimal("88.2")
    price_floor: Decimal = Decimal("0.0001")
    randomize_multiplier: Decimal = Decimal("5")
    seed: int | None = None


@dataclass
class BankConfig:
    """Main configuration for bvdu-bank."""

    storage: StorageConfig = field(default_factory=StorageConfig)
    limits: LimitsConfig = field(default_factory=LimitsConfig)
    market: MarketConfig = field(default_factory=MarketConfig)
    admin_pin: str = "0013"
    log_level: str = "INFO"
    log_file: Path | None = None

    @classmethod
    def from_env(cls) -> "BankConfig":
        """Create config from environment variables."""
        import os

        storage = StorageConfig(data_dir=Path(os.getenv("BVDU_DATA_DIR", ".")))

        limits = LimitsConfig(
            max_accounts=_int_env("BVDU_MAX_ACCOUNTS", 500),
            lockout_threshold=_int_env("BVDU_LOCKOUT_THRESHOLD", 3),
        )
        if limits.lockout_threshold < 1:
            raise ConfigurationError("BVDU_LOCKOUT_THRESHOLD must be at least 1")

        seed = os.getenv("BVDU_SEED")
        market = MarketConfig(seed=_int_env("BVDU_SEED", 0) if seed else None)

        admin_pin = os.getenv("BVDU_ADMIN_PIN", "0013")
        if not (len(admin_pin) == 4 and admin_pin.isdigit()):
            raise ConfigurationError("BVDU_ADMIN_PIN must be exactly 4 digits")

        log_file = os.getenv("BVDU_LOG_FILE")

        return cls(
            storage=storage,
            limits=limits,
            market=market,
            admin_pin=admin_pin,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_file=Path(log_file) if log_file else None,
        )


def _int_env(name: str, default: int) -> int:
    import os

    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc
