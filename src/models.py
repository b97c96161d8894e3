from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import ClassVar, List, Optional, Union

from errors import LedgerError, MalformedRecord

# Amounts beyond 28 significant digits or magnitude 10**28 cannot be added exactly.
MAX_AMOUNT_DIGITS = 28


class TransactionType(Enum):
    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"
    DISPUTE = "dispute"
    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


class DisputeState(Enum):
    NOT_DISPUTED = "not_disputed"
    DISPUTED = "disputed"
    CHARGED_BACK = "charged_back"


class UndisputeOutcome(Enum):
    """How a disputed transaction leaves the disputed state."""

    RESOLVE = "resolve"
    CHARGEBACK = "chargeback"


class ProcessingResult(Enum):
    FAILED_MALFORMED = "failed_malformed"
    FAILED_REJECTED = "failed_rejected"


@dataclass(frozen=True)
class MonetaryTransaction:
    """Money flowing towards or from a client account."""

    transaction_type: ClassVar[TransactionType]

    client_id: int
    transaction_id: int
    amount: Decimal

    def __repr__(self) -> str:
        return f"{type(self).__name__}(client={self.client_id}, tx={self.transaction_id}, amount={self.amount})"


@dataclass(frozen=True)
class DisputeAction:
    """References a previous deposit for dispute claim handling."""

    transaction_type: ClassVar[TransactionType]

    client_id: int
    transaction_id: int

    def __repr__(self) -> str:
        return f"{type(self).__name__}(client={self.client_id}, tx={self.transaction_id})"


@dataclass(frozen=True, repr=False)
class Deposit(MonetaryTransaction):
    transaction_type: ClassVar[TransactionType] = TransactionType.DEPOSIT


@dataclass(frozen=True, repr=False)
class Withdrawal(MonetaryTransaction):
    transaction_type: ClassVar[TransactionType] = TransactionType.WITHDRAWAL


@dataclass(frozen=True, repr=False)
class Dispute(DisputeAction):
    transaction_type: ClassVar[TransactionType] = TransactionType.DISPUTE


@dataclass(frozen=True, repr=False)
class Resolve(DisputeAction):
    transaction_type: ClassVar[TransactionType] = TransactionType.RESOLVE


@dataclass(frozen=True, repr=False)
class Chargeback(DisputeAction):
    transaction_type: ClassVar[TransactionType] = TransactionType.CHARGEBACK


Transaction = Union[Deposit, Withdrawal, Dispute, Resolve, Chargeback]

TransactionInput = Union[Transaction, MalformedRecord]

# Only deposits can be disputed, withdrawals have already left the account.
DisputableTransaction = Deposit


def is_amount_in_range(amount: Decimal) -> bool:
    if not amount.is_finite():
        return False
    if amount.is_zero():
        return True
    return len(amount.as_tuple().digits) <= MAX_AMOUNT_DIGITS and abs(amount.adjusted()) <= MAX_AMOUNT_DIGITS


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

    def hold(self, amount: Decimal) -> None:
        self.available -= amount
        self.held += amount

    def release_hold(self, amount: Decimal) -> None:
        self.held -= amount
        self.available += amount

    def remove_held(self, amount: Decimal) -> None:
        self.held -= amount

    def snapshot(self) -> "AccountSnapshot":
        return AccountSnapshot(
            client_id=self.client_id,
            available=self.available,
            held=self.held,
            total=self.total,
            locked=self.locked,
        )


@dataclass(frozen=True)
class AccountSnapshot:
    """Read-only view of an account at the end of a run."""

    client_id: int
    available: Decimal
    held: Decimal
    total: Decimal
    locked: bool


@dataclass(frozen=True)
class Diagnostic:
    position: int
    result: ProcessingResult
    error: LedgerError
    transaction: Optional[Transaction] = None

    def __str__(self) -> str:
        if self.transaction is None:
            return f"#{self.position}: {self.error}"
        return f"#{self.position} {self.transaction!r}: {self.error}"


@dataclass
class ProcessingReport:
    """Per-run counters and the diagnostics of every discarded input."""

    processed: int = 0
    failed: int = 0
    diagnostics: List[Diagnostic] = field(default_factory=list)

    def record_success(self) -> None:
        self.processed += 1

    def record_failure(self, diagnostic: Diagnostic) -> None:
        self.failed += 1
        self.diagnostics.append(diagnostic)

    @property
    def malformed(self) -> int:
        return sum(1 for d in self.diagnostics if d.result == ProcessingResult.FAILED_MALFORMED)

    @property
    def rejected(self) -> int:
        return sum(1 for d in self.diagnostics if d.result == ProcessingResult.FAILED_REJECTED)
