"""Account-opening request generator."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterator

from bvdu_bank.generators.base import BaseGenerator
from bvdu_bank.models import AccountType


@dataclass(frozen=True)
class AccountRequest:
    """Arguments for one ``create_account`` call."""

    name: str
    account_type: AccountType
    pin: int
    initial_deposit: Decimal
    upi_candidate: str


class AccountRequestGenerator(BaseGenerator):
    """Generate valid account-opening requests.

    Savings accounts make up roughly three in four requests. UPI
    candidates are derived from Faker user names, reduced to letters and
    digits and kept unique across the generator's lifetime.
    """

    ACCOUNT_TYPES = [AccountType.SAVINGS, AccountType.CURRENT]
    ACCOUNT_TYPE_WEIGHTS = [0.75, 0.25]

    def __init__(self, seed: int | None = None, locale: str = "en_IN") -> None:
        super().__init__(seed, locale)
        self._issued: set[str] = set()

    def generate(self) -> AccountRequest:
        account_type = self.rng.choices(self.ACCOUNT_TYPES, weights=self.ACCOUNT_TYPE_WEIGHTS, k=1)[0]
        deposit = Decimal(self.rng.randint(500, 50000)) + Decimal(self.rng.randint(0, 99)) / 100
        return AccountRequest(
            name=self.fake.name()[:40],
            account_type=account_type,
            pin=self.rng.randint(1000, 9999),
            initial_deposit=deposit,
            upi_candidate=self._upi_candidate(),
        )

    def generate_batch(self, count: int) -> Iterator[AccountRequest]:
        for _ in range(count):
            yield self.generate()

    def _upi_candidate(self) -> str:
        base = "".join(c for c in self.fake.user_name() if c.isascii() and c.isalnum()).lower()
        base = base[:20] or "user"
        candidate = base
        while candidate in self._issued:
            candidate = f"{base}{self.rng.randint(10, 9999)}"
        self._issued.add(candidate)
        return candidate
