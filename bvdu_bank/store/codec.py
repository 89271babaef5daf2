"""Pipe-delimited record codecs for every persisted entity.

Each record is one line of ``|``-separated fields in a fixed order.
Codecs are pure: they never touch the filesystem.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Callable, Generic, TypeVar

from bvdu_bank.exceptions import RecordFormatError
from bvdu_bank.models import (
    Account,
    AccountType,
    AuditEntry,
    FXRates,
    Holding,
    Notification,
    PriceRec,
    Transaction,
    TransactionType,
)

T = TypeVar("T")

SEPARATOR = "|"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class RecordCodec(Generic[T]):
    """Encoder/decoder pair for one entity type.

    Parameters
    ----------
    name : str
        Entity name used in error messages.
    field_count : int
        Exact number of fields per line.
    to_fields : Callable[[T], list[str]]
        Renders a record into its field strings, in canonical order.
    from_fields : Callable[[list[str]], T]
        Builds a record from its field strings.
    free_text_tail : bool
        When true the last field is free text and may contain the
        separator (audit and notification messages).
    """

    name: str
    field_count: int
    to_fields: Callable[[T], list[str]]
    from_fields: Callable[[list[str]], T]
    free_text_tail: bool = False

    def encode(self, record: T) -> str:
        """Encode a record as a single line without the trailing newline."""
        fields = self.to_fields(record)
        checked = fields[:-1] if self.free_text_tail else fields
        for value in checked:
            if SEPARATOR in value:
                raise RecordFormatError(f"{self.name} field contains '{SEPARATOR}': {value!r}")
        for value in fields:
            if "\n" in value or "\r" in value:
                raise RecordFormatError(f"{self.name} field contains a line break: {value!r}")
        return SEPARATOR.join(fields)

    def decode(self, line: str) -> T:
        """Decode one line; raises ``RecordFormatError`` if it does not parse."""
        line = line.rstrip("\r\n")
        if self.free_text_tail:
            fields = line.split(SEPARATOR, self.field_count - 1)
        else:
            fields = line.split(SEPARATOR)
        if len(fields) != self.field_count:
            raise RecordFormatError(
                f"{self.name} record has {len(fields)} fields, expected {self.field_count}"
            )
        try:
            return self.from_fields(fields)
        except (ValueError, InvalidOperation) as exc:
            raise RecordFormatError(f"Malformed {self.name} record: {line!r}") from exc


# --- Field formatting ---


def format_money(value: Decimal) -> str:
    return f"{value:.2f}"


def format_price(value: Decimal) -> str:
    return f"{value:.4f}"


def format_quantity(value: Decimal) -> str:
    return f"{value:.6f}"


def format_rate(value: Decimal) -> str:
    return f"{value:.6f}"


def format_timestamp(value: datetime | None) -> str:
    return value.strftime(TIMESTAMP_FORMAT) if value is not None else ""


def parse_timestamp(value: str) -> datetime | None:
    return datetime.strptime(value, TIMESTAMP_FORMAT) if value else None


def _flag(value: bool) -> str:
    return "1" if value else "0"


def _parse_flag(value: str) -> bool:
    return int(value) != 0


def _parse_decimal(value: str) -> Decimal:
    number = Decimal(value)
    if not number.is_finite():
        raise ValueError(f"Non-finite number: {value!r}")
    return number


# --- Account ---


def _account_fields(a: Account) -> list[str]:
    return [
        str(a.account_number),
        a.name,
        a.account_type.value,
        str(a.pin),
        format_money(a.balance),
        format_money(a.loan),
        _flag(a.active),
        _flag(a.frozen),
        str(a.failed_attempts),
        a.upi,
        format_timestamp(a.last_login),
    ]


def _account_from(fields: list[str]) -> Account:
    return Account(
        account_number=int(fields[0]),
        name=fields[1],
        account_type=AccountType.parse(fields[2]),
        pin=int(fields[3]),
        balance=_parse_decimal(fields[4]),
        loan=_parse_decimal(fields[5]),
        active=_parse_flag(fields[6]),
        frozen=_parse_flag(fields[7]),
        failed_attempts=int(fields[8]),
        upi=fields[9],
        last_login=parse_timestamp(fields[10]),
    )


ACCOUNT_CODEC: RecordCodec[Account] = RecordCodec("account", 11, _account_fields, _account_from)


# --- Transaction ---


def _transaction_fields(t: Transaction) -> list[str]:
    return [
        str(t.account_number),
        format_timestamp(t.timestamp),
        t.transaction_type.value,
        format_money(t.amount),
        format_money(t.balance_after),
        t.note,
    ]


def _transaction_from(fields: list[str]) -> Transaction:
    timestamp = parse_timestamp(fields[1])
    if timestamp is None:
        raise ValueError("Transaction without timestamp")
    return Transaction(
        account_number=int(fields[0]),
        timestamp=timestamp,
        transaction_type=TransactionType(fields[2]),
        amount=_parse_decimal(fields[3]),
        balance_after=_parse_decimal(fields[4]),
        note=fields[5],
    )


TRANSACTION_CODEC: RecordCodec[Transaction] = RecordCodec(
    "transaction", 6, _transaction_fields, _transaction_from
)


# --- Holding ---


def _holding_fields(h: Holding) -> list[str]:
    return [
        str(h.account_number),
        h.asset_id,
        h.asset_name,
        format_quantity(h.quantity),
        format_price(h.average_price),
        h.market,
    ]


def _holding_from(fields: list[str]) -> Holding:
    return Holding(
        account_number=int(fields[0]),
        asset_id=fields[1],
        asset_name=fields[2],
        quantity=_parse_decimal(fields[3]),
        average_price=_parse_decimal(fields[4]),
        market=fields[5],
    )


HOLDING_CODEC: RecordCodec[Holding] = RecordCodec("holding", 6, _holding_fields, _holding_from)


# --- Price ---


def _price_fields(p: PriceRec) -> list[str]:
    return [
        p.asset_id,
        p.asset_name,
        format_price(p.price),
        format_rate(p.volatility),
        p.market,
        format_timestamp(p.last_update),
        str(p.open_hour),
        str(p.close_hour),
    ]


def _price_from(fields: list[str]) -> PriceRec:
    return PriceRec(
        asset_id=fields[0],
        asset_name=fields[1],
        price=_parse_decimal(fields[2]),
        volatility=_parse_decimal(fields[3]),
        market=fields[4],
        last_update=parse_timestamp(fields[5]),
        open_hour=int(fields[6]),
        close_hour=int(fields[7]),
    )


PRICE_CODEC: RecordCodec[PriceRec] = RecordCodec("price", 8, _price_fields, _price_from)


# --- FX ---


def _fx_fields(fx: FXRates) -> list[str]:
    return [format_rate(fx.inr_per_usd), format_rate(fx.inr_per_eur), format_timestamp(fx.last_update)]


def _fx_from(fields: list[str]) -> FXRates:
    return FXRates(
        inr_per_usd=_parse_decimal(fields[0]),
        inr_per_eur=_parse_decimal(fields[1]),
        last_update=parse_timestamp(fields[2]),
    )


FX_CODEC: RecordCodec[FXRates] = RecordCodec("fx", 3, _fx_fields, _fx_from)


# --- Audit and notifications ---


def _audit_fields(e: AuditEntry) -> list[str]:
    return [format_timestamp(e.timestamp), e.entry]


def _audit_from(fields: list[str]) -> AuditEntry:
    timestamp = parse_timestamp(fields[0])
    if timestamp is None:
        raise ValueError("Audit entry without timestamp")
    return AuditEntry(timestamp=timestamp, entry=fields[1])


AUDIT_CODEC: RecordCodec[AuditEntry] = RecordCodec(
    "audit", 2, _audit_fields, _audit_from, free_text_tail=True
)


def _notification_fields(n: Notification) -> list[str]:
    return [format_timestamp(n.timestamp), str(n.account_number), n.message]


def _notification_from(fields: list[str]) -> Notification:
    timestamp = parse_timestamp(fields[0])
    if timestamp is None:
        raise ValueError("Notification without timestamp")
    return Notification(timestamp=timestamp, account_number=int(fields[1]), message=fields[2])


NOTIFICATION_CODEC: RecordCodec[Notification] = RecordCodec(
    "notification", 3, _notification_fields, _notification_from, free_text_tail=True
)
