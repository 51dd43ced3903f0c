import logging
from typing import Dict

from models import Transaction, ClientAccount, ProcessingStats
from event_sources import EventSource, CsvEventSource
from state_manager import StateManager
from transaction_processor import TransactionProcessor

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Applies transactions one at a time, in arrival order, and keeps the
    resulting account states. Each engine owns its own state; nothing is shared
    between instances.
    """

    def __init__(self):
        self._state = StateManager()
        self._processor = TransactionProcessor(self._state)
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def apply(self, transaction: Transaction) -> None:
        """Apply a single transaction. Rule violations are silent no-ops."""
        result = self._processor.process_transaction(transaction)
        self._stats.record(result)

    def accounts(self) -> Dict[int, ClientAccount]:
        """Current account states keyed by client id."""
        return self._state.get_all_accounts()

    def process(self, source: EventSource) -> Dict[int, ClientAccount]:
        """Drain source into the ledger and return final account states."""
        logger.info("Starting processing")

        for transaction in source.read_transactions():
            self.apply(transaction)

        logger.info(f"Processing complete: {self._stats}")
        return self.accounts()

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        return self.process(CsvEventSource(filepath))
