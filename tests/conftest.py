"""Pytest configuration and fixtures."""

import random
from datetime import datetime
from pathlib import Path

import pytest

from bvdu_bank import Bank, BankConfig, StorageConfig
from bvdu_bank.models import Session


class FrozenClock:
    """Settable stand-in for the local wall clock."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set_hour(self, hour: int) -> None:
        self.now = self.now.replace(hour=hour)


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def clock() -> FrozenClock:
    """Clock frozen at noon, when every default market is open."""
    return FrozenClock(datetime(2024, 3, 15, 12, 0, 0))


@pytest.fixture
def rng(seed: int) -> random.Random:
    """Seeded generator for the price walk."""
    return random.Random(seed)


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Empty data directory."""
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture
def config(data_dir: Path) -> BankConfig:
    """Configuration pointing at the temporary data directory."""
    return BankConfig(storage=StorageConfig(data_dir=data_dir))


@pytest.fixture
def bank(config: BankConfig, clock: FrozenClock, rng: random.Random) -> Bank:
    """Started bank seeded with the default accounts and prices."""
    return Bank.open(config, clock=clock, rng=rng)


@pytest.fixture
def session(bank: Bank) -> Session:
    """Session of account 1001 (adarsh, 10000.00 INR)."""
    return bank.ledger.authenticate(1001, 1234)


@pytest.fixture
def other_session(bank: Bank) -> Session:
    """Session of account 1002 (achyut, 8000.00 INR)."""
    return bank.ledger.authenticate(1002, 2345)
