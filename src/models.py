from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Dict, Union


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"

    @property
    def is_amount_bearing(self) -> bool:
        return self in (TransactionType.DEPOSIT, TransactionType.WITHDRAWAL)


class ProcessingResult(Enum):
    APPLIED = "applied"
    REJECTED = "rejected"
    MALFORMED = "malformed"


@dataclass
class Transaction:
    transaction_type: TransactionType
    client_id: int
    transaction_id: int
    amount: Decimal = Decimal("0")
    under_dispute: bool = False

    def __repr__(self) -> str:
        return (
            f"Transaction({self.transaction_type.value}, client={self.client_id}, "
            f"tx={self.transaction_id}, amount={self.amount}, under_dispute={self.under_dispute})"
        )


@dataclass
class DecodeFailure:
    """A row the reader could not turn into a transaction. Travels the queue in input order."""

    line_number: int
    reason: str
    row: Dict[str, str] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"line {self.line_number}: {self.reason}"


Record = Union[Transaction, DecodeFailure]


@dataclass
class ClientAccount:
    client_id: int
    available: Decimal = Decimal("0")
    held: Decimal = Decimal("0")
    locked: bool = False

    @property
    def total(self) -> Decimal:
        return self.available + self.held


class ProcessingStats:
    """Counters for tracking processing statistics. Updated by the consumer only."""

    def __init__(self):
        self.applied = 0
        self.rejected = 0
        self.malformed = 0

    def record(self, result: ProcessingResult) -> None:
        if result == ProcessingResult.APPLIED:
            self.applied += 1
        elif result == ProcessingResult.REJECTED:
            self.rejected += 1
        else:
            self.malformed += 1

    @property
    def total(self) -> int:
        return self.applied + self.rejected + self.malformed

    def __str__(self) -> str:
        return f"Applied: {self.applied}, Rejected: {self.rejected}, Malformed: {self.malformed}"
