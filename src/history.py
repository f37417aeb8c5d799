from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterator, Optional

from models import DisputeStatus, Transaction, TransactionType


@dataclass
class HistoryEntry:
    transaction_type: TransactionType
    client_id: int
    amount: Decimal
    status: DisputeStatus = DisputeStatus.NORMAL


class TransactionHistory:
    """
    Append-only index of deposits and withdrawals for dispute lookups.
    Only the dispute status of an entry ever changes after it is stored.
    """

    def __init__(self):
        self._entries: Dict[int, HistoryEntry] = {}

    def store_transaction(self, transaction: Transaction) -> HistoryEntry:
        """Index a deposit or withdrawal under its transaction id."""
        if not transaction.transaction_type.carries_amount:
            raise ValueError(f"only deposits and withdrawals are indexed, got {transaction.transaction_type.value}")
        if transaction.transaction_id in self._entries:
            raise KeyError(transaction.transaction_id)

        entry = HistoryEntry(
            transaction_type=transaction.transaction_type,
            client_id=transaction.client_id,
            amount=transaction.amount,
        )
        self._entries[transaction.transaction_id] = entry
        return entry

    def get_transaction(self, transaction_id: int) -> Optional[HistoryEntry]:
        """Retrieve stored entry by ID."""
        return self._entries.get(transaction_id)

    def set_status(self, transaction_id: int, status: DisputeStatus) -> None:
        self._entries[transaction_id].status = status

    def __contains__(self, transaction_id: int) -> bool:
        return transaction_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[int]:
        return iter(self._entries)
