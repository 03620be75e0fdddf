import logging
from contextlib import closing
from typing import Callable, Dict, Iterable, Optional

from toy_ledger.config import Settings, get_settings
from toy_ledger.csv_source import parse_row, read_rows
from toy_ledger.errors import MalformedRecordError
from toy_ledger.models import ClientAccount, ProcessingResult, ProcessingStats, RawRecord, Transaction
from toy_ledger.normalizer import normalize
from toy_ledger.state_manager import Ledger
from toy_ledger.transaction_processor import TransactionProcessor

logger = logging.getLogger(__name__)


class PaymentsEngine:
    """
    Folds an ordered stream of transactions into per-client account state.
    Single pass, single thread: each transaction is fully applied before the next one is read.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self._settings = settings or get_settings()
        self._ledger = Ledger()
        self._processor = TransactionProcessor(self._ledger, self._settings)
        self.stats = ProcessingStats()

    def apply(self, transactions: Iterable[Transaction]) -> Dict[int, ClientAccount]:
        """Apply typed transactions strictly in order and return final account states."""
        for transaction in transactions:
            self._apply_one(transaction)
        return self._finish()

    def process_records(self, records: Iterable[RawRecord]) -> Dict[int, ClientAccount]:
        """Normalize and apply raw records in order, honouring the malformed record policy."""
        for record in records:
            transaction = self._normalize_guarded(normalize, record)
            if transaction is not None:
                self._apply_one(transaction)
        return self._finish()

    def process_file(self, filepath: str) -> Dict[int, ClientAccount]:
        """Process CSV file and return final account states."""
        logger.info(f"Processing {filepath}")
        with closing(read_rows(filepath)) as rows:
            for line, row in rows:
                transaction = self._normalize_guarded(self._parse_csv_row, row, line)
                if transaction is not None:
                    self._apply_one(transaction)
        return self._finish()

    def get_accounts(self) -> Dict[int, ClientAccount]:
        return self._ledger.get_all_accounts()

    def _apply_one(self, transaction: Transaction) -> None:
        result = self._processor.process_transaction(transaction)
        if result == ProcessingResult.SUCCESS:
            self.stats.record_success()
        else:
            self.stats.record_ignored()

    def _normalize_guarded(self, build: Callable[..., Transaction], *args) -> Optional[Transaction]:
        try:
            return build(*args)
        except MalformedRecordError as e:
            if self._settings.malformed_record_policy == "abort":
                logger.error(f"Aborting on malformed record: {e}")
                raise
            self.stats.record_malformed()
            logger.warning(f"Skipping malformed record: {e}")
            return None

    @staticmethod
    def _parse_csv_row(row: Dict, line: int) -> Transaction:
        try:
            return normalize(parse_row(row, line=line))
        except MalformedRecordError as e:
            if e.line is None:
                raise MalformedRecordError(str(e), line=line) from e
            raise

    def _finish(self) -> Dict[int, ClientAccount]:
        logger.info(
            f"Processed: {self.stats.processed}, "
            f"Ignored: {self.stats.ignored}, "
            f"Malformed: {self.stats.malformed}"
        )
        return self._ledger.get_all_accounts()
