from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Optional

from errors import ClientMismatch, DuplicateTransaction, InvalidDisputeState, TransactionNotFound
from models import Deposit, DisputableTransaction, DisputeState, UndisputeOutcome


@dataclass
class _DisputableRecord:
    client_id: int
    amount: Decimal
    state: DisputeState = DisputeState.NOT_DISPUTED


class TransactionStore:
    """
    Remembers every accepted deposit and tracks its dispute lifecycle:

        NOT_DISPUTED --dispute--> DISPUTED --resolve--> NOT_DISPUTED
                                  DISPUTED --chargeback--> CHARGED_BACK

    CHARGED_BACK is terminal. Withdrawals are never stored, so any dispute
    action referencing one fails with TransactionNotFound.
    """

    def __init__(self):
        self._records: Dict[int, _DisputableRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, transaction_id: int) -> bool:
        return transaction_id in self._records

    def get_dispute_state(self, transaction_id: int) -> Optional[DisputeState]:
        record = self._records.get(transaction_id)
        return record.state if record is not None else None

    def add_transaction(self, transaction: DisputableTransaction) -> None:
        """Store a deposit so it can be disputed later. Transaction ids are unique across clients."""
        if transaction.transaction_id in self._records:
            raise DuplicateTransaction(f"Transaction already present (tx = {transaction.transaction_id})")

        self._records[transaction.transaction_id] = _DisputableRecord(
            client_id=transaction.client_id,
            amount=transaction.amount,
        )

    def dispute_transaction(self, client_id: int, transaction_id: int) -> DisputableTransaction:
        """Mark a deposit as disputed and return it so the caller can hold its amount."""
        record = self._get_owned_record(client_id, transaction_id, "dispute")

        if record.state != DisputeState.NOT_DISPUTED:
            raise InvalidDisputeState(
                f"Transaction cannot be disputed in state {record.state.value} (tx = {transaction_id})"
            )

        record.state = DisputeState.DISPUTED
        return self._as_deposit(transaction_id, record)

    def undispute_transaction(
        self, client_id: int, transaction_id: int, outcome: UndisputeOutcome
    ) -> DisputableTransaction:
        """
        Close a dispute.

        RESOLVE puts the deposit back to NOT_DISPUTED, so it may be disputed again.
        CHARGEBACK moves it to CHARGED_BACK, after which nothing more can happen to it.
        """
        record = self._get_owned_record(client_id, transaction_id, outcome.value)

        if record.state != DisputeState.DISPUTED:
            raise InvalidDisputeState(f"Transaction not yet disputed (tx = {transaction_id})")

        match outcome:
            case UndisputeOutcome.RESOLVE:
                record.state = DisputeState.NOT_DISPUTED
            case UndisputeOutcome.CHARGEBACK:
                record.state = DisputeState.CHARGED_BACK

        return self._as_deposit(transaction_id, record)

    def _get_owned_record(self, client_id: int, transaction_id: int, action: str) -> _DisputableRecord:
        record = self._records.get(transaction_id)

        if record is None:
            raise TransactionNotFound(f"Transaction not found for {action} (tx = {transaction_id})")

        if record.client_id != client_id:
            raise ClientMismatch(
                f"Mismatching client for {action} (tx = {transaction_id}, "
                f"expected client {record.client_id}, got {client_id})"
            )

        return record

    @staticmethod
    def _as_deposit(transaction_id: int, record: _DisputableRecord) -> Deposit:
        return Deposit(client_id=record.client_id, transaction_id=transaction_id, amount=record.amount)
