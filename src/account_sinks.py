import csv
import json
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Dict, Iterable, List, TextIO

from models import ClientAccount

FIELDNAMES = ["client", "available", "held", "total", "locked"]
FOUR_PLACES = Decimal("0.0001")


def format_decimal(value: Decimal) -> str:
    """Format decimal with exactly 4 decimal places."""
    return f"{value.quantize(FOUR_PLACES):f}"


def account_to_row(account: ClientAccount) -> Dict[str, object]:
    return {
        "client": account.client_id,
        "available": format_decimal(account.available),
        "held": format_decimal(account.held),
        "total": format_decimal(account.total),
        "locked": account.locked,
    }


class AccountSink(ABC):
    """Renders final account states. Accounts are written in client id order."""

    @abstractmethod
    def write_accounts(self, accounts: Iterable[ClientAccount]) -> None:
        ...


def _ordered(accounts: Iterable[ClientAccount]) -> List[ClientAccount]:
    return sorted(accounts, key=lambda account: account.client_id)


class CsvAccountSink(AccountSink):
    def __init__(self, stream: TextIO):
        self._stream = stream

    def write_accounts(self, accounts: Iterable[ClientAccount]) -> None:
        writer = csv.DictWriter(self._stream, fieldnames=FIELDNAMES, lineterminator="\n")
        writer.writeheader()
        for account in _ordered(accounts):
            row = account_to_row(account)
            row["locked"] = str(account.locked).lower()
            writer.writerow(row)
        self._stream.flush()


class JsonAccountSink(AccountSink):
    def __init__(self, stream: TextIO):
        self._stream = stream

    def write_accounts(self, accounts: Iterable[ClientAccount]) -> None:
        rows = [account_to_row(account) for account in _ordered(accounts)]
        json.dump(rows, self._stream, indent=2)
        self._stream.write("\n")
        self._stream.flush()


class MemoryAccountSink(AccountSink):
    """Keeps rendered rows in memory instead of writing them anywhere."""

    def __init__(self):
        self.rows: List[Dict[str, object]] = []

    def write_accounts(self, accounts: Iterable[ClientAccount]) -> None:
        self.rows.extend(account_to_row(account) for account in _ordered(accounts))
