import sys
import os
from decimal import Decimal

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from errors import ClientMismatch, DuplicateTransaction, InvalidDisputeState, TransactionNotFound
from models import Deposit, DisputeState, UndisputeOutcome
from transaction_store import TransactionStore


class TestTransactionStore:
    def setup_method(self):
        self.store = TransactionStore()
        self.deposit = Deposit(client_id=1, transaction_id=10, amount=Decimal("2.5"))
        self.store.add_transaction(self.deposit)

    def test_add_starts_undisputed(self):
        assert 10 in self.store
        assert len(self.store) == 1
        assert self.store.get_dispute_state(10) == DisputeState.NOT_DISPUTED

    def test_unknown_transaction_has_no_state(self):
        assert self.store.get_dispute_state(99) is None

    def test_add_twice_rejected(self):
        with pytest.raises(DuplicateTransaction):
            self.store.add_transaction(Deposit(client_id=1, transaction_id=10, amount=Decimal("7")))

        # The original record is untouched
        assert self.store.dispute_transaction(1, 10) == self.deposit

    def test_transaction_ids_unique_across_clients(self):
        with pytest.raises(DuplicateTransaction):
            self.store.add_transaction(Deposit(client_id=2, transaction_id=10, amount=Decimal("7")))
        assert len(self.store) == 1

    def test_dispute_resolve(self):
        assert self.store.dispute_transaction(1, 10) == self.deposit
        assert self.store.get_dispute_state(10) == DisputeState.DISPUTED

        assert self.store.undispute_transaction(1, 10, UndisputeOutcome.RESOLVE) == self.deposit
        assert self.store.get_dispute_state(10) == DisputeState.NOT_DISPUTED

        # Disputable again after resolve
        self.store.dispute_transaction(1, 10)
        assert self.store.get_dispute_state(10) == DisputeState.DISPUTED

    def test_dispute_chargeback_is_terminal(self):
        self.store.dispute_transaction(1, 10)
        assert self.store.undispute_transaction(1, 10, UndisputeOutcome.CHARGEBACK) == self.deposit
        assert self.store.get_dispute_state(10) == DisputeState.CHARGED_BACK

        with pytest.raises(InvalidDisputeState):
            self.store.dispute_transaction(1, 10)
        with pytest.raises(InvalidDisputeState):
            self.store.undispute_transaction(1, 10, UndisputeOutcome.RESOLVE)
        assert self.store.get_dispute_state(10) == DisputeState.CHARGED_BACK

    def test_dispute_twice_rejected(self):
        self.store.dispute_transaction(1, 10)
        with pytest.raises(InvalidDisputeState):
            self.store.dispute_transaction(1, 10)
        assert self.store.get_dispute_state(10) == DisputeState.DISPUTED

    def test_dispute_without_add(self):
        with pytest.raises(TransactionNotFound):
            self.store.dispute_transaction(1, 11)

    @pytest.mark.parametrize("outcome", list(UndisputeOutcome))
    def test_undispute_without_add(self, outcome):
        with pytest.raises(TransactionNotFound):
            self.store.undispute_transaction(1, 11, outcome)

    @pytest.mark.parametrize("outcome", list(UndisputeOutcome))
    def test_undispute_without_dispute(self, outcome):
        with pytest.raises(InvalidDisputeState):
            self.store.undispute_transaction(1, 10, outcome)
        assert self.store.get_dispute_state(10) == DisputeState.NOT_DISPUTED

    def test_dispute_client_mismatch(self):
        with pytest.raises(ClientMismatch):
            self.store.dispute_transaction(2, 10)
        assert self.store.get_dispute_state(10) == DisputeState.NOT_DISPUTED

    @pytest.mark.parametrize("outcome", list(UndisputeOutcome))
    def test_undispute_client_mismatch(self, outcome):
        self.store.dispute_transaction(1, 10)
        with pytest.raises(ClientMismatch):
            self.store.undispute_transaction(2, 10, outcome)
        assert self.store.get_dispute_state(10) == DisputeState.DISPUTED
