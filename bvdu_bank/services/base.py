"""Base class for the stateful engine services."""

from __future__ import annotations

import logging
from abc import ABC
from decimal import Decimal
from functools import partial, wraps
from typing import Callable, TypeVar

from bvdu_bank.exceptions import BankError, PersistenceError
from bvdu_bank.models import Transaction, TransactionType
from bvdu_bank.models.base import Clock, local_now
from bvdu_bank.services.audit import AuditLog
from bvdu_bank.store.bank import BankDataStore

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., object])


def log_rejections(func: F) -> F:
    """Log a warning naming the operation whenever it raises a ``BankError``.

    Persistence failures are left to ``flush``, which logs them as errors.
    The exception is re-raised unchanged.
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except PersistenceError:
            raise
        except BankError as exc:
            logging.getLogger(func.__module__).warning(
                "%s rejected: %s: %s", func.__qualname__, type(exc).__name__, exc
            )
            raise

    return wrapper  # type: ignore[return-value]


def flush(*writes: Callable[[], object]) -> None:
    """Run the persistence steps of one applied operation.

    Every step is attempted even if an earlier one fails, so a full disk
    does not also cost the transaction log its entry. Failures are raised
    together once all steps have run.

    Raises
    ------
    PersistenceError
        With ``failures`` listing each failed step.
    """
    failures: list[PersistenceError] = []
    for write in writes:
        try:
            write()
        except PersistenceError as exc:
            logger.error("Persistence step failed: %s", exc)
            failures.append(exc)
    if failures:
        raise PersistenceError(
            f"{len(failures)} of {len(writes)} writes failed; change applied in memory only",
            failures=failures,
        )


class BaseService(ABC):
    """Common wiring for services that mutate persisted tables.

    Parameters
    ----------
    store : BankDataStore
        Tables owned by the engine.
    audit : AuditLog
        Audit and notification sink.
    clock : Clock
        Source of local wall-clock time; injectable for tests.
    """

    def __init__(self, store: BankDataStore, audit: AuditLog, clock: Clock = local_now) -> None:
        self.store = store
        self.audit = audit
        self._clock = clock

    def _now(self):
        return self._clock()

    def _flush(self, *writes: Callable[[], object]) -> None:
        flush(*writes)

    def _transaction(
        self,
        account_number: int,
        transaction_type: TransactionType,
        amount: Decimal,
        balance_after: Decimal,
        note: str,
    ) -> Transaction:
        return Transaction(
            account_number=account_number,
            timestamp=self._now(),
            transaction_type=transaction_type,
            amount=amount,
            balance_after=balance_after,
            note=note,
        )

    def _record(
        self,
        account_number: int,
        transaction_type: TransactionType,
        amount: Decimal,
        balance_after: Decimal,
        note: str,
    ) -> Callable[[], None]:
        """Deferred transaction-log append, for use as a ``_flush`` step."""
        transaction = self._transaction(account_number, transaction_type, amount, balance_after, note)
        return partial(self.store.transactions.append, transaction)
