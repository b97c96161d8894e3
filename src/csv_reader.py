import csv
import re
from decimal import Decimal
from typing import Dict, Iterable, Iterator, Optional

from errors import MalformedRecord
from models import (
    Chargeback,
    Deposit,
    Dispute,
    Resolve,
    Transaction,
    TransactionInput,
    TransactionType,
    Withdrawal,
    is_amount_in_range,
)

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1

# ASCII digits only: no exponents, digit separators or non-ASCII numerals.
_ID_PATTERN = re.compile(r"[0-9]+")
_AMOUNT_PATTERN = re.compile(r"[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)")

_MONETARY_TYPES = {
    TransactionType.DEPOSIT: Deposit,
    TransactionType.WITHDRAWAL: Withdrawal,
}

_DISPUTE_TYPES = {
    TransactionType.DISPUTE: Dispute,
    TransactionType.RESOLVE: Resolve,
    TransactionType.CHARGEBACK: Chargeback,
}


def iter_transactions(source: Iterable[str]) -> Iterator[TransactionInput]:
    """
    Lazily read transactions from CSV text with a `type, client, tx, amount` header.

    Whitespace around headers and values is ignored and blank lines are skipped.
    A row that cannot be parsed is yielded as a MalformedRecord instead of being
    raised, so one bad row never stops the rest of the file from being read.
    """
    reader = csv.reader(source)
    header = None

    for fields in reader:
        if not any(field.strip() for field in fields):
            continue

        if header is None:
            header = [field.strip().lower() for field in fields]
            continue

        try:
            yield parse_row(dict(zip(header, fields)), reader.line_num)
        except MalformedRecord as e:
            yield e


def parse_row(row: Dict[str, str], line_number: Optional[int] = None) -> Transaction:
    """Parse one CSV row into a transaction. Raises MalformedRecord."""
    normalized = {k.strip().lower(): (v or "").strip() for k, v in row.items() if k is not None}

    type_str = normalized.get("type", "")
    if not type_str:
        raise MalformedRecord("missing transaction type", line_number)
    try:
        transaction_type = TransactionType(type_str.lower())
    except ValueError as e:
        raise MalformedRecord(f"unsupported transaction type '{type_str}'", line_number) from e

    client_id = _parse_id(normalized, "client", MAX_CLIENT_ID, line_number)
    transaction_id = _parse_id(normalized, "tx", MAX_TRANSACTION_ID, line_number)

    if transaction_type in _DISPUTE_TYPES:
        # Any amount given on a dispute action is ignored.
        return _DISPUTE_TYPES[transaction_type](client_id=client_id, transaction_id=transaction_id)

    amount_str = normalized.get("amount", "")
    if not amount_str:
        raise MalformedRecord(f"no 'amount' for {transaction_type.value} (tx = {transaction_id})", line_number)

    return _MONETARY_TYPES[transaction_type](
        client_id=client_id,
        transaction_id=transaction_id,
        amount=_parse_amount(amount_str, transaction_id, line_number),
    )


def _parse_id(normalized: Dict[str, str], column: str, maximum: int, line_number: Optional[int]) -> int:
    value = normalized.get(column, "")
    if not value:
        raise MalformedRecord(f"missing '{column}' value", line_number)
    if not _ID_PATTERN.fullmatch(value):
        raise MalformedRecord(f"invalid '{column}' value '{value}'", line_number)
    parsed = int(value)
    if parsed > maximum:
        raise MalformedRecord(f"'{column}' value {parsed} out of range", line_number)
    return parsed


def _parse_amount(value: str, transaction_id: int, line_number: Optional[int]) -> Decimal:
    if not _AMOUNT_PATTERN.fullmatch(value):
        raise MalformedRecord(f"invalid amount '{value}' (tx = {transaction_id})", line_number)
    amount = Decimal(value)
    if not is_amount_in_range(amount):
        raise MalformedRecord(f"amount '{value}' out of range (tx = {transaction_id})", line_number)
    return amount
