"""
Property tests for the ledger invariants.

Sequences are generated over a small pool of clients and transaction ids so
that disputes, resolves and chargebacks frequently reference real records,
records of other clients, and records that were never seen.
"""

import sys
import os
from decimal import Decimal

from hypothesis import given, settings
from hypothesis import strategies as st

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from ledger import LedgerEngine
from models import DisputeStatus, IgnoreReason, Transaction, TransactionType

CLIENTS = st.integers(min_value=1, max_value=3)
TRANSACTION_IDS = st.integers(min_value=1, max_value=12)
AMOUNTS = st.decimals(
    min_value=Decimal("0"),
    max_value=Decimal("1000"),
    places=4,
    allow_nan=False,
    allow_infinity=False,
)


@st.composite
def transactions(draw):
    transaction_type = draw(st.sampled_from(list(TransactionType)))
    amount = draw(AMOUNTS) if transaction_type.carries_amount else None
    return Transaction(transaction_type, draw(CLIENTS), draw(TRANSACTION_IDS), amount)


SEQUENCES = st.lists(transactions(), max_size=60)


def balances(engine):
    return {a.client_id: (a.available, a.held, a.total, a.locked) for a in engine.snapshot()}


class TestLedgerProperties:
    @given(SEQUENCES)
    @settings(max_examples=200)
    def test_balances_match_applied_records_after_every_record(self, sequence):
        engine = LedgerEngine()
        amounts = {}
        owners = {}
        totals = {}

        for transaction in sequence:
            outcome = engine.apply(transaction)
            tx = transaction.transaction_id

            if outcome.applied:
                match transaction.transaction_type:
                    case TransactionType.DEPOSIT:
                        amounts[tx], owners[tx] = transaction.amount, transaction.client_id
                        totals[transaction.client_id] = totals.get(transaction.client_id, Decimal("0")) + transaction.amount
                    case TransactionType.WITHDRAWAL:
                        amounts[tx], owners[tx] = transaction.amount, transaction.client_id
                        totals[transaction.client_id] = totals.get(transaction.client_id, Decimal("0")) - transaction.amount
                    case TransactionType.CHARGEBACK:
                        totals[transaction.client_id] -= amounts[tx]

            for account in engine.snapshot():
                held = sum(
                    (amounts[t] for t, client_id in owners.items()
                     if client_id == account.client_id and engine.get_dispute_status(t) == DisputeStatus.DISPUTED),
                    Decimal("0"),
                )
                assert account.total == totals.get(account.client_id, Decimal("0"))
                assert account.held == held
                assert account.available == account.total - held

    @given(SEQUENCES)
    def test_ignored_records_change_nothing(self, sequence):
        engine = LedgerEngine()
        for transaction in sequence:
            before = balances(engine)
            statuses = {tx: engine.get_dispute_status(tx) for tx in range(1, 13)}

            outcome = engine.apply(transaction)

            if outcome.is_ignored:
                after = balances(engine)
                # A rejected deposit or withdrawal may still introduce a zero-balance account.
                for client_id, values in before.items():
                    assert after[client_id] == values
                for client_id in set(after) - set(before):
                    assert after[client_id] == (Decimal("0"), Decimal("0"), Decimal("0"), False)
                assert statuses == {tx: engine.get_dispute_status(tx) for tx in range(1, 13)}

    @given(SEQUENCES, SEQUENCES)
    def test_locked_accounts_never_move_funds(self, prefix, suffix):
        engine = LedgerEngine()
        engine.apply_all(prefix)
        locked = {a.client_id for a in engine.snapshot() if a.locked}

        for transaction in suffix:
            if transaction.client_id in locked and transaction.transaction_type.carries_amount:
                before = balances(engine)[transaction.client_id]
                outcome = engine.apply(transaction)
                assert outcome.reason == IgnoreReason.ACCOUNT_LOCKED
                assert balances(engine)[transaction.client_id] == before
            else:
                engine.apply(transaction)

        for client_id in locked:
            assert balances(engine)[client_id][3] is True

    @given(SEQUENCES, st.sampled_from([TransactionType.DISPUTE, TransactionType.RESOLVE, TransactionType.CHARGEBACK]))
    def test_terminal_transactions_are_never_reopened(self, sequence, action):
        engine = LedgerEngine()
        owners = {}
        for transaction in sequence:
            if engine.apply(transaction).applied and transaction.transaction_type.carries_amount:
                owners[transaction.transaction_id] = transaction.client_id

        for tx, client_id in owners.items():
            status = engine.get_dispute_status(tx)
            if status not in (DisputeStatus.RESOLVED, DisputeStatus.CHARGED_BACK):
                continue
            before = balances(engine)

            outcome = engine.apply(Transaction(action, client_id, tx))

            assert outcome.is_ignored
            assert balances(engine) == before
            assert engine.get_dispute_status(tx) == status

    @given(SEQUENCES, st.sampled_from([TransactionType.DISPUTE, TransactionType.RESOLVE, TransactionType.CHARGEBACK]), CLIENTS)
    def test_unknown_references_are_ignored(self, sequence, action, client_id):
        engine = LedgerEngine()
        engine.apply_all(sequence)
        before = balances(engine)

        outcome = engine.apply(Transaction(action, client_id, 10_000))

        assert outcome.reason == IgnoreReason.UNKNOWN_TRANSACTION
        assert balances(engine) == before
