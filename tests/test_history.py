import sys
import os
from decimal import Decimal

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from history import TransactionHistory
from models import DisputeStatus, Transaction, TransactionType


class TestTransactionHistory:
    def setup_method(self):
        self.history = TransactionHistory()

    def test_store_and_get(self):
        self.history.store_transaction(Transaction(TransactionType.DEPOSIT, 1, 10, Decimal("5")))

        entry = self.history.get_transaction(10)
        assert entry.transaction_type == TransactionType.DEPOSIT
        assert entry.client_id == 1
        assert entry.amount == Decimal("5")
        assert entry.status == DisputeStatus.NORMAL
        assert 10 in self.history
        assert len(self.history) == 1

    def test_get_missing(self):
        assert self.history.get_transaction(99) is None
        assert 99 not in self.history

    def test_rejects_dispute_records(self):
        with pytest.raises(ValueError):
            self.history.store_transaction(Transaction(TransactionType.DISPUTE, 1, 10))

    def test_rejects_reused_id(self):
        self.history.store_transaction(Transaction(TransactionType.DEPOSIT, 1, 10, Decimal("5")))
        with pytest.raises(KeyError):
            self.history.store_transaction(Transaction(TransactionType.WITHDRAWAL, 1, 10, Decimal("1")))

    def test_set_status(self):
        self.history.store_transaction(Transaction(TransactionType.WITHDRAWAL, 2, 3, Decimal("1")))
        self.history.set_status(3, DisputeStatus.DISPUTED)
        assert self.history.get_transaction(3).status == DisputeStatus.DISPUTED
