from decimal import Decimal
from typing import Dict, Optional

from toy_ledger.errors import DuplicateTransactionError
from toy_ledger.models import ClientAccount, HistoryEntry


class Ledger:
    """
    Account map plus deposit history for a single run.
    Owned by exactly one processor; not safe to share between threads.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        self._history: Dict[int, HistoryEntry] = {}

    def get_account(self, client_id: int) -> Optional[ClientAccount]:
        """Return the account for client_id, or None if never seen."""
        return self._accounts.get(client_id)

    def get_or_create_account(self, client_id: int) -> ClientAccount:
        """Get existing account or create an empty, unlocked one."""
        if client_id not in self._accounts:
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def has_transaction(self, transaction_id: int) -> bool:
        return transaction_id in self._history

    def record_deposit(self, transaction_id: int, client_id: int, amount: Decimal) -> HistoryEntry:
        """Store a deposit for future dispute lookups. Entries are never overwritten."""
        if transaction_id in self._history:
            raise DuplicateTransactionError(transaction_id)
        entry = HistoryEntry(client_id=client_id, amount=amount)
        self._history[transaction_id] = entry
        return entry

    def get_history_entry(self, transaction_id: int) -> Optional[HistoryEntry]:
        """Retrieve stored deposit by ID."""
        return self._history.get(transaction_id)

    def get_all_accounts(self) -> Dict[int, ClientAccount]:
        """Return all accounts (for final output)."""
        return dict(self._accounts)
