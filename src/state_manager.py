from typing import Dict, List, Optional

from models import Transaction, ClientAccount


class StateManager:
    """
    Owns the client accounts and the transaction history for one ledger run.
    History is bucketed per (client, tx) so later disputes can find the
    transaction they refer to.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        self._history: Dict[int, Dict[int, List[Transaction]]] = {}

    def get_account(self, client_id: int) -> Optional[ClientAccount]:
        """Return the account if it exists, without creating one."""
        return self._accounts.get(client_id)

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create new one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def record_transaction(self, transaction: Transaction) -> None:
        """Append transaction to its (client, tx) history bucket."""
        client_history = self._history.setdefault(transaction.client_id, {})
        client_history.setdefault(transaction.transaction_id, []).append(transaction)

    def get_transaction_history(self, client_id: int, transaction_id: int) -> Optional[List[Transaction]]:
        """Return the events seen so far for (client, tx), or None if there are none."""
        return self._history.get(client_id, {}).get(transaction_id)

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        """Return all accounts (for final output)."""
        return dict(self._accounts)
