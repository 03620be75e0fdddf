import logging
from typing import Optional

from toy_ledger.config import Settings, get_settings
from toy_ledger.errors import DuplicateTransactionError
from toy_ledger.models import (
    Chargeback,
    ClientAccount,
    Deposit,
    Dispute,
    DisputeStatus,
    HistoryEntry,
    ProcessingResult,
    Resolve,
    Transaction,
    Withdrawal,
)
from toy_ledger.state_manager import Ledger

logger = logging.getLogger(__name__)


class TransactionProcessor:
    """
    Applies transactions to a ledger, one at a time.
    Business rule violations are ignored and reported as IGNORED; only a
    duplicate deposit id raises.
    """

    def __init__(self, ledger: Ledger, settings: Optional[Settings] = None):
        self._ledger = ledger
        self._settings = settings or get_settings()

    def process_transaction(self, transaction: Transaction) -> ProcessingResult:
        """
        Process a single transaction.

        Returns:
            SUCCESS: ledger state changed
            IGNORED: transaction had no effect (unknown client or tx, insufficient
                funds, wrong dispute status, locked account under strict policy)
        """
        # a reused deposit id is fatal under every locked account policy
        if isinstance(transaction, Deposit) and self._ledger.has_transaction(transaction.transaction_id):
            raise DuplicateTransactionError(transaction.transaction_id)

        if self._settings.locked_account_policy == "strict":
            account = self._ledger.get_account(transaction.client_id)
            if account is not None and account.locked:
                logger.warning(f"{self._describe(transaction)}: account {account.client_id} is locked")
                return ProcessingResult.IGNORED

        match transaction:
            case Deposit():
                return self._handle_deposit(transaction)
            case Withdrawal():
                return self._handle_withdrawal(transaction)
            case Dispute():
                return self._handle_dispute(transaction)
            case Resolve():
                return self._handle_resolve(transaction)
            case Chargeback():
                return self._handle_chargeback(transaction)
            case _:
                raise TypeError(f"not a transaction: {transaction!r}")

    def _handle_deposit(self, transaction: Deposit) -> ProcessingResult:
        # history first: a duplicate id must leave the account untouched
        self._ledger.record_deposit(transaction.transaction_id, transaction.client_id, transaction.amount)
        account = self._ledger.get_or_create_account(transaction.client_id)
        account.credit(transaction.amount)
        return ProcessingResult.SUCCESS

    def _handle_withdrawal(self, transaction: Withdrawal) -> ProcessingResult:
        account = self._ledger.get_account(transaction.client_id)
        if account is None:
            logger.info(f"{self._describe(transaction)}: unknown client")
            return ProcessingResult.IGNORED

        if account.available < transaction.amount:
            logger.info(
                f"{self._describe(transaction)}: insufficient funds "
                f"(available {account.available}, requested {transaction.amount})"
            )
            return ProcessingResult.IGNORED

        account.debit(transaction.amount)
        return ProcessingResult.SUCCESS

    def _handle_dispute(self, transaction: Dispute) -> ProcessingResult:
        found = self._lookup(transaction, DisputeStatus.OPEN)
        if found is None:
            return ProcessingResult.IGNORED
        account, original = found

        account.hold(original.amount)
        original.status = DisputeStatus.DISPUTED
        return ProcessingResult.SUCCESS

    def _handle_resolve(self, transaction: Resolve) -> ProcessingResult:
        found = self._lookup(transaction, DisputeStatus.DISPUTED)
        if found is None:
            return ProcessingResult.IGNORED
        account, original = found

        account.release_hold(original.amount)
        original.status = DisputeStatus.OPEN
        return ProcessingResult.SUCCESS

    def _handle_chargeback(self, transaction: Chargeback) -> ProcessingResult:
        found = self._lookup(transaction, DisputeStatus.DISPUTED)
        if found is None:
            return ProcessingResult.IGNORED
        account, original = found

        # held already includes every disputed deposit of this client, so this
        # only fires if the ledger was corrupted outside the dispute handlers
        if original.amount > account.held:
            logger.warning(
                f"{self._describe(transaction)}: amount {original.amount} exceeds held {account.held}"
            )
            return ProcessingResult.IGNORED

        account.remove_held(original.amount)
        account.lock()
        original.status = DisputeStatus.CHARGED_BACK
        return ProcessingResult.SUCCESS

    def _lookup(self, transaction: Transaction, expected: DisputeStatus) -> Optional[tuple[ClientAccount, HistoryEntry]]:
        """Find the account and referenced deposit, or None if the transaction must be ignored."""
        account = self._ledger.get_account(transaction.client_id)
        if account is None:
            logger.info(f"{self._describe(transaction)}: unknown client")
            return None

        original = self._ledger.get_history_entry(transaction.transaction_id)
        if original is None:
            logger.info(f"{self._describe(transaction)}: referenced deposit not found")
            return None

        if original.client_id != transaction.client_id:
            logger.warning(
                f"{self._describe(transaction)}: deposit belongs to client {original.client_id}"
            )
            return None

        if original.status != expected:
            logger.warning(
                f"{self._describe(transaction)}: deposit is {original.status.value}, expected {expected.value}"
            )
            return None

        return account, original

    @staticmethod
    def _describe(transaction: Transaction) -> str:
        return f"{transaction.transaction_type.value.capitalize()} tx {transaction.transaction_id} client {transaction.client_id}"
