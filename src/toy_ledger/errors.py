from typing import Optional


class LedgerError(Exception):
    """Base class for errors that stop a ledger run."""


class MalformedRecordError(LedgerError):
    """An input record could not be turned into a transaction."""

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class DuplicateTransactionError(LedgerError):
    """A deposit reused a transaction id that is already in history."""

    def __init__(self, transaction_id: int):
        self.transaction_id = transaction_id
        super().__init__(f"transaction id {transaction_id} already recorded")
