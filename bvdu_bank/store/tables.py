"""In-memory tables backed by record files.

Each table owns one file. Mutable tables (accounts, holdings, prices, FX)
are rewritten whole on ``save``; the transaction log only ever grows.
"""

import logging
from pathlib import Path
from typing import Callable, Generic, Hashable, Iterator, TypeVar

from bvdu_bank.models import Account, FXRates, Holding, PriceRec, Transaction
from bvdu_bank.store.codec import (
    ACCOUNT_CODEC,
    FX_CODEC,
    HOLDING_CODEC,
    PRICE_CODEC,
    TRANSACTION_CODEC,
    RecordCodec,
)
from bvdu_bank.store.files import append_record, load_table, save_table, touch

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
T = TypeVar("T")


class KeyedTable(Generic[K, T]):
    """Insertion-ordered table of records keyed by their identity field.

    With a ``capacity``, loading keeps only the first ``capacity`` records.
    """

    def __init__(
        self,
        path: Path,
        codec: RecordCodec[T],
        key: Callable[[T], K],
        capacity: int | None = None,
    ) -> None:
        self.path = Path(path)
        self.codec = codec
        self.capacity = capacity
        self._key = key
        self._rows: dict[K, T] = {}

    def load(self) -> None:
        """Replace the in-memory rows with the file's contents."""
        self._rows = {}
        records = load_table(self.path, self.codec)
        if self.capacity is not None and len(records) > self.capacity:
            logger.warning(
                "%s holds %d records, keeping the first %d", self.path, len(records), self.capacity
            )
            records = records[: self.capacity]
        for record in records:
            self._rows.setdefault(self._key(record), record)

    def save(self) -> None:
        save_table(self.path, self.codec, self._rows.values())

    def exists(self) -> bool:
        return self.path.exists()

    def touch(self) -> None:
        touch(self.path)

    def get(self, key: K) -> T | None:
        return self._rows.get(key)

    def add(self, record: T) -> None:
        self._rows[self._key(record)] = record

    def remove(self, key: K) -> T | None:
        return self._rows.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self._rows

    def __iter__(self) -> Iterator[T]:
        return iter(list(self._rows.values()))

    def __len__(self) -> int:
        return len(self._rows)


class AccountTable(KeyedTable[int, Account]):
    """Accounts keyed by account number."""

    FIRST_ACCOUNT_NUMBER = 1001

    def __init__(self, path: Path, capacity: int | None = None) -> None:
        super().__init__(path, ACCOUNT_CODEC, lambda a: a.account_number, capacity)

    def next_account_number(self) -> int:
        """Highest existing account number plus one, starting at 1001."""
        return max(
            (a.account_number + 1 for a in self._rows.values()),
            default=self.FIRST_ACCOUNT_NUMBER,
        )

    def find_by_upi(self, upi: str, active_only: bool = True) -> Account | None:
        """Case-insensitive exact UPI lookup."""
        wanted = upi.lower()
        for account in self._rows.values():
            if active_only and not account.active:
                continue
            if account.upi.lower() == wanted:
                return account
        return None

    def upi_taken(self, upi: str) -> bool:
        """Whether any account, active or not, holds ``upi``."""
        return self.find_by_upi(upi, active_only=False) is not None


class HoldingTable(KeyedTable[tuple[int, str], Holding]):
    """Holdings keyed by (account number, asset id)."""

    def __init__(self, path: Path, capacity: int | None = None) -> None:
        super().__init__(path, HOLDING_CODEC, lambda h: h.key, capacity)

    def for_account(self, account_number: int) -> list[Holding]:
        return [h for h in self._rows.values() if h.account_number == account_number]


class PriceTable(KeyedTable[str, PriceRec]):
    """Live prices keyed by asset id (case-sensitive)."""

    def __init__(self, path: Path, capacity: int | None = None) -> None:
        super().__init__(path, PRICE_CODEC, lambda p: p.asset_id, capacity)


class FxTable:
    """Single-row table of FX rates."""

    def __init__(self, path: Path, defaults: FXRates) -> None:
        self.path = Path(path)
        self.rates = defaults

    def load(self) -> None:
        """Keep the current rates unless the file holds a valid row."""
        records = load_table(self.path, FX_CODEC)
        if records:
            self.rates = records[0]

    def save(self) -> None:
        save_table(self.path, FX_CODEC, [self.rates])

    def exists(self) -> bool:
        return self.path.exists()


class TransactionLog:
    """Append-only transaction file.

    Nothing is cached: every query re-reads the file, which is the
    durable audit trail.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def append(self, transaction: Transaction) -> None:
        append_record(self.path, TRANSACTION_CODEC, transaction)

    def all(self, skip_invalid: bool = False) -> list[Transaction]:
        return load_table(self.path, TRANSACTION_CODEC, skip_invalid=skip_invalid)

    def for_account(self, account_number: int, skip_invalid: bool = False) -> list[Transaction]:
        """Transactions of one account, oldest first."""
        return [t for t in self.all(skip_invalid) if t.account_number == account_number]

    def exists(self) -> bool:
        return self.path.exists()

    def touch(self) -> None:
        touch(self.path)
