import logging
from decimal import DecimalException
from typing import Iterable, Iterator

from account_store import AccountStore
from errors import AmountOutOfRange, LedgerError, MalformedRecord
from models import (
    AccountSnapshot,
    Chargeback,
    Deposit,
    Diagnostic,
    Dispute,
    DisputeAction,
    MonetaryTransaction,
    ProcessingReport,
    ProcessingResult,
    Resolve,
    Transaction,
    TransactionInput,
    UndisputeOutcome,
    Withdrawal,
    is_amount_in_range,
)
from transaction_store import TransactionStore

logger = logging.getLogger(__name__)


class LedgerEngine:
    """
    Applies a sequential log of transactions to the account and transaction stores.

    Each input is handled on its own: a rejected input is logged, recorded in the
    ProcessingReport and skipped, and processing goes on with the next one.
    Every handler makes at most one transaction store call followed by at most one
    account store call, and only makes the second if the first succeeded.
    """

    def __init__(self):
        self._accounts = AccountStore()
        self._transactions = TransactionStore()

    def process_transactions(self, inputs: Iterable[TransactionInput]) -> ProcessingReport:
        """Handle all given inputs in order. Never raises for a rejected input."""
        report = ProcessingReport()

        for position, item in enumerate(inputs, start=1):
            if isinstance(item, MalformedRecord):
                self._reject(report, Diagnostic(position, ProcessingResult.FAILED_MALFORMED, item))
                continue

            try:
                self.process_transaction(item)
            except LedgerError as e:
                result = ProcessingResult.FAILED_MALFORMED if isinstance(e, MalformedRecord) else ProcessingResult.FAILED_REJECTED
                self._reject(report, Diagnostic(position, result, e, item))
            except DecimalException as e:
                error = AmountOutOfRange(f"arithmetic failed: {e!r}")
                self._reject(report, Diagnostic(position, ProcessingResult.FAILED_REJECTED, error, item))
            else:
                report.record_success()

        return report

    def process_transaction(self, transaction: Transaction) -> None:
        """Apply a single transaction. Raises a LedgerError subclass on rejection."""
        match transaction:
            case Deposit():
                self._handle_deposit(transaction)
            case Withdrawal():
                self._handle_withdrawal(transaction)
            case Dispute():
                self._handle_dispute(transaction)
            case Resolve():
                self._handle_undispute(transaction, UndisputeOutcome.RESOLVE)
            case Chargeback():
                self._handle_undispute(transaction, UndisputeOutcome.CHARGEBACK)
            case _:
                raise MalformedRecord(f"unsupported transaction {transaction!r}")

    def accounts(self) -> Iterator[AccountSnapshot]:
        """Snapshots of every account touched so far, in no particular order."""
        return self._accounts.snapshots()

    def _handle_deposit(self, transaction: Deposit) -> None:
        self._check_amount(transaction)
        # A duplicate id is rejected here, before any money moves.
        self._transactions.add_transaction(transaction)
        self._accounts.add_to_balance(transaction.client_id, transaction.amount)

    def _handle_withdrawal(self, transaction: Withdrawal) -> None:
        self._check_amount(transaction)
        self._accounts.add_to_balance(transaction.client_id, -transaction.amount)

    def _handle_dispute(self, transaction: Dispute) -> None:
        original = self._transactions.dispute_transaction(transaction.client_id, transaction.transaction_id)
        self._accounts.hold_amount(original.client_id, original.amount)

    def _handle_undispute(self, transaction: DisputeAction, outcome: UndisputeOutcome) -> None:
        original = self._transactions.undispute_transaction(
            transaction.client_id, transaction.transaction_id, outcome
        )
        if outcome == UndisputeOutcome.RESOLVE:
            self._accounts.release_held_amount(original.client_id, original.amount)
        else:
            self._accounts.charge_back_amount(original.client_id, original.amount)

    @staticmethod
    def _check_amount(transaction: MonetaryTransaction) -> None:
        if not is_amount_in_range(transaction.amount):
            raise AmountOutOfRange(f"Amount out of range (tx = {transaction.transaction_id})")

    @staticmethod
    def _reject(report: ProcessingReport, diagnostic: Diagnostic) -> None:
        logger.warning(f"Discarding input {diagnostic}")
        report.record_failure(diagnostic)
