from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, Field, field_validator

MAX_CLIENT_ID = 65535
MAX_TRANSACTION_ID = 4294967295


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


class ProcessingResult(Enum):
    SUCCESS = "success"
    IGNORED = "ignored"


class DisputeStatus(Enum):
    OPEN = "open"
    DISPUTED = "disputed"
    CHARGED_BACK = "charged_back"


class RawRecord(BaseModel):
    """One input row before it is turned into a typed transaction."""

    action: str = Field(..., description="Transaction type name")
    client_id: int = Field(..., ge=0, le=MAX_CLIENT_ID)
    tx_id: int = Field(..., ge=0, le=MAX_TRANSACTION_ID)
    amount: Optional[Decimal] = Field(default=None, allow_inf_nan=False)

    @field_validator("amount", mode="before")
    @classmethod
    def blank_amount_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


@dataclass(frozen=True)
class Deposit:
    transaction_id: int
    client_id: int
    amount: Decimal
    transaction_type: TransactionType = field(default=TransactionType.DEPOSIT, init=False, repr=False)


@dataclass(frozen=True)
class Withdrawal:
    transaction_id: int
    client_id: int
    amount: Decimal
    transaction_type: TransactionType = field(default=TransactionType.WITHDRAWAL, init=False, repr=False)


@dataclass(frozen=True)
class Dispute:
    transaction_id: int
    client_id: int
    transaction_type: TransactionType = field(default=TransactionType.DISPUTE, init=False, repr=False)


@dataclass(frozen=True)
class Resolve:
    transaction_id: int
    client_id: int
    transaction_type: TransactionType = field(default=TransactionType.RESOLVE, init=False, repr=False)


@dataclass(frozen=True)
class Chargeback:
    transaction_id: int
    client_id: int
    transaction_type: TransactionType = field(default=TransactionType.CHARGEBACK, init=False, repr=False)


Transaction = Union[Deposit, Withdrawal, Dispute, Resolve, Chargeback]


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

    def remove_held(self, amount: Decimal) -> None:
        self.held -= amount

    def lock(self) -> None:
        # one-way: nothing ever unlocks an account
        self.locked = True


@dataclass
class HistoryEntry:
    """A deposit kept around so later disputes know its client and amount."""

    client_id: int
    amount: Decimal
    status: DisputeStatus = DisputeStatus.OPEN


@dataclass
class ProcessingStats:
    processed: int = 0
    ignored: int = 0
    malformed: int = 0

    def record_success(self) -> None:
        self.processed += 1

    def record_ignored(self) -> None:
        self.ignored += 1

    def record_malformed(self) -> None:
        self.malformed += 1
