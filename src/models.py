from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def moves_funds(self) -> bool:
        """True for the kinds that carry their own amount."""
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


class ProcessingResult(Enum):
    APPLIED = "applied"
    IGNORED = "ignored"


@dataclass(frozen=True)
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Optional[Decimal] = None

    def __repr__(self) -> str:
        return f"Transaction({self.transaction_type.value}, client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False

    @property
    def total(self) -> Decimal:
        return self.available + self.held

    def credit(self, amount: Decimal) -> None:
        self.available += amount

    def debit(self, amount: Decimal) -> None:
        self.available -= amount

    def hold(self, amount: Decimal) -> None:
        self.available -= amount
        self.held += amount

    def release_hold(self, amount: Decimal) -> None:
        self.held -= amount
        self.available += amount

    def charge_back(self, amount: Decimal) -> None:
        self.held -= amount
        self.available -= amount

    def lock(self) -> None:
        # One-way: nothing in the ledger unlocks an account.
        self.locked = True


class ProcessingStats:
    """Counters for how many events changed an account and how many were no-ops."""

    def __init__(self):
        self.applied = 0
        self.ignored = 0

    def record(self, result: ProcessingResult) -> None:
        if result == ProcessingResult.APPLIED:
            self.applied += 1
        else:
            self.ignored += 1

    def __repr__(self) -> str:
        return f"ProcessingStats(applied={self.applied}, ignored={self.ignored})"
