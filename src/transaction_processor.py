from decimal import Decimal
from typing import List, Optional, Tuple

from models import Transaction, TransactionType, ClientAccount, ProcessingResult
from state_manager import StateManager


class TransactionProcessor:
    """
    Applies the ledger rule for each transaction kind against state.

    Failed preconditions (unknown tx, insufficient funds, resolve without
    dispute) are business-rule rejections: the account is left untouched and
    IGNORED is returned. Nothing here raises for them.
    """

    def __init__(self, state: StateManager):
        self._state = state

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction and record it in the history index.

        Returns:
            APPLIED: An account was mutated
            IGNORED: A precondition failed, nothing changed
        """
        match transaction.transaction_type:
            case TransactionType.DEPOSIT:
                result = self._handle_deposit(transaction)
            case TransactionType.WITHDRAWAL:
                result = self._handle_withdrawal(transaction)
            case TransactionType.DISPUTE:
                result = self._handle_dispute(transaction)
            case TransactionType.RESOLVE:
                result = self._handle_resolve(transaction)
            case TransactionType.CHARGEBACK:
                result = self._handle_chargeback(transaction)
            case _:
                result = ProcessingResult.IGNORED

        # Recorded even when ignored: a later resolve looks for any prior dispute.
        self._state.record_transaction(transaction)
        return result

    def _handle_deposit(self, transaction: Transaction) -> ProcessingResult:
        account = self._state.get_or_create_account(transaction.client_id)
        account.credit(_amount_of(transaction))
        return ProcessingResult.APPLIED

    def _handle_withdrawal(self, transaction: Transaction) -> ProcessingResult:
        account = self._state.get_account(transaction.client_id)
        if account is None:
            return ProcessingResult.IGNORED

        amount = _amount_of(transaction)
        if account.available < amount:
            return ProcessingResult.IGNORED

        account.debit(amount)
        return ProcessingResult.APPLIED

    def _handle_dispute(self, transaction: Transaction) -> ProcessingResult:
        history = self._state.get_transaction_history(transaction.client_id, transaction.transaction_id)
        original = _find_original(history)
        if original is None:
            return ProcessingResult.IGNORED

        account = self._state.get_or_create_account(transaction.client_id)
        account.hold(_amount_of(original))
        return ProcessingResult.APPLIED

    def _handle_resolve(self, transaction: Transaction) -> ProcessingResult:
        account, original = self._disputed_original(transaction)
        if account is None or original is None:
            return ProcessingResult.IGNORED

        account.release_hold(_amount_of(original))
        return ProcessingResult.APPLIED

    def _handle_chargeback(self, transaction: Transaction) -> ProcessingResult:
        account, original = self._disputed_original(transaction)
        if account is None or original is None:
            return ProcessingResult.IGNORED

        account.charge_back(_amount_of(original))
        account.lock()
        return ProcessingResult.APPLIED

    def _disputed_original(self, transaction: Transaction) -> Tuple[Optional[ClientAccount], Optional[Transaction]]:
        """Account and original deposit/withdrawal for a resolve or chargeback, if both apply."""
        history = self._state.get_transaction_history(transaction.client_id, transaction.transaction_id)
        if not _has_dispute(history):
            return None, None

        original = _find_original(history)
        if original is None:
            return None, None

        return self._state.get_account(transaction.client_id), original


def _find_original(history: Optional[List[Transaction]]) -> Optional[Transaction]:
    """First deposit or withdrawal in the bucket, in insertion order."""
    if not history:
        return None
    for transaction in history:
        if transaction.transaction_type.moves_funds:
            return transaction
    return None


def _has_dispute(history: Optional[List[Transaction]]) -> bool:
    if not history:
        return False
    return any(t.transaction_type == TransactionType.DISPUTE for t in history)


def _amount_of(transaction: Transaction) -> Decimal:
    if transaction.amount is None:
        return Decimal("0")
    return transaction.amount
