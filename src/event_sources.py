import csv
import logging
import os
from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, Iterator, Optional

from models import Transaction, TransactionType, MAX_CLIENT_ID, MAX_TRANSACTION_ID

logger = logging.getLogger(__name__)


class EventSourceError(Exception):
    """The input could not be read as CSV at all."""


class EventSource(ABC):
    """Produces transactions in origin order. Single pass: iterate once."""

    @abstractmethod
    def read_transactions(self) -> Iterator[Transaction]:
        ...


class CsvEventSource(EventSource):
    """
    Streams transactions from a CSV file with a `type,client,tx,amount` header.
    Malformed rows are logged and skipped; open/read failures propagate.
    """

    def __init__(self, filepath: str):
        self._filepath = filepath

    def read_transactions(self) -> Iterator[Transaction]:
        # A missing file fails here rather than on first next().
        os.stat(self._filepath)
        return self._iter_rows()

    def _iter_rows(self) -> Iterator[Transaction]:
        with open(self._filepath, "r", encoding="utf-8-sig", newline="") as f:
            reader = csv.DictReader(f)
            try:
                for row in reader:
                    transaction = parse_csv_row(row)
                    if transaction:
                        yield transaction
            except csv.Error as e:
                raise EventSourceError(f"{self._filepath}, line {reader.line_num}: {e}") from e
            except UnicodeDecodeError as e:
                raise EventSourceError(f"{self._filepath}: not valid UTF-8: {e}") from e


class MemoryEventSource(EventSource):
    """Yields an in-memory sequence of transactions once."""

    def __init__(self, transactions: Iterable[Transaction]):
        self._transactions = list(transactions)
        self._consumed = False

    def read_transactions(self) -> Iterator[Transaction]:
        if self._consumed:
            return iter(())
        self._consumed = True
        return iter(self._transactions)


def parse_csv_row(row: Dict[Optional[str], Optional[str]]) -> Optional[Transaction]:
    """Parse CSV row into Transaction. Returns None (and logs) if the row is malformed."""
    try:
        normalized = {
            k.strip(): v.strip()
            for k, v in row.items()
            if isinstance(k, str) and isinstance(v, str)
        }

        transaction_type = TransactionType(normalized["type"].lower())
        client_id = _parse_id(normalized["client"], "client", MAX_CLIENT_ID)
        transaction_id = _parse_id(normalized["tx"], "tx", MAX_TRANSACTION_ID)

        amount = None
        amount_str = normalized.get("amount", "")
        if amount_str:
            amount = _parse_amount(amount_str)

        return Transaction(
            transaction_type=transaction_type,
            client_id=client_id,
            transaction_id=transaction_id,
            amount=amount,
        )
    except (KeyError, ValueError) as e:
        logger.warning(f"Failed to parse row {row}: {e!r}")
        return None


def _parse_id(value: str, field: str, upper: int) -> int:
    parsed = int(value)
    if not 0 <= parsed <= upper:
        raise ValueError(f"{field} {parsed} out of range 0..{upper}")
    return parsed


def _parse_amount(value: str) -> Decimal:
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise ValueError(f"invalid amount {value!r}") from None
    # Negative amounts are rejected as malformed; the ledger never sees them.
    if not amount.is_finite() or amount < 0:
        raise ValueError(f"invalid amount {value!r}")
    return amount
