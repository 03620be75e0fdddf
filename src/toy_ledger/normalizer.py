
from toy_ledger.errors import MalformedRecordError
from toy_ledger.models import (
    Chargeback,
    Deposit,
    Dispute,
    RawRecord,
    Resolve,
    Transaction,
    TransactionType,
    Withdrawal,
)


def normalize(record: RawRecord) -> Transaction:
    """
    Convert a raw record into its typed transaction.

    Raises MalformedRecordError for an unknown action, or for a deposit or
    withdrawal whose amount is missing or not positive. Recovery is up to
    the caller.
    """
    try:
        transaction_type = TransactionType(record.action)
    except ValueError:
        raise MalformedRecordError(f"unknown transaction type {record.action!r}") from None

    match transaction_type:
        case TransactionType.DEPOSIT | TransactionType.WITHDRAWAL:
            if record.amount is None:
                raise MalformedRecordError(
                    f"{transaction_type.value} tx {record.tx_id}: amount is required"
                )
            if record.amount <= 0:
                raise MalformedRecordError(
                    f"{transaction_type.value} tx {record.tx_id}: amount must be positive, got {record.amount}"
                )
            variant = Deposit if transaction_type == TransactionType.DEPOSIT else Withdrawal
            return variant(
                transaction_id=record.tx_id,
                client_id=record.client_id,
                amount=record.amount,
            )
        case TransactionType.DISPUTE:
            return Dispute(transaction_id=record.tx_id, client_id=record.client_id)
        case TransactionType.RESOLVE:
            return Resolve(transaction_id=record.tx_id, client_id=record.client_id)
        case TransactionType.CHARGEBACK:
            return Chargeback(transaction_id=record.tx_id, client_id=record.client_id)
