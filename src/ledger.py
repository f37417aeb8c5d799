import logging
from typing import Dict, Iterable, List, Optional

from disputes import DisputeStateMachine
from errors import (
    AccountLocked,
    ClientMismatch,
    DuplicateTransaction,
    InsufficientFunds,
    InvalidAmount,
    LedgerError,
    UnknownTransaction,
)
from history import HistoryEntry, TransactionHistory
from models import (
    AccountSnapshot,
    ClientAccount,
    DisputeStatus,
    Outcome,
    ProcessingStats,
    Transaction,
    TransactionType,
)

logger = logging.getLogger(__name__)


class LedgerEngine:
    """
    Replays transactions against client accounts, one record at a time, in order.

    Owns the account table and the transaction history. Every rejected record
    becomes an ignored Outcome; nothing raised by a handler escapes apply().
    Not safe for concurrent mutation: callers must serialize records.
    """

    def __init__(self):
        self._accounts: Dict[int, ClientAccount] = {}
        self._history = TransactionHistory()
        self._disputes = DisputeStateMachine()
        self._stats = ProcessingStats()

    @property
    def stats(self) -> ProcessingStats:
        return self._stats

    def apply(self, transaction: Transaction) -> Outcome:
        """
        Apply a single transaction.

        Returns:
            Outcome.success() when balances or dispute state changed
            Outcome.ignored(reason) when the record was rejected and nothing changed
        """
        try:
            match transaction.transaction_type:
                case TransactionType.DEPOSIT:
                    self._handle_deposit(transaction)
                case TransactionType.WITHDRAWAL:
                    self._handle_withdrawal(transaction)
                case TransactionType.DISPUTE:
                    self._handle_dispute(transaction)
                case TransactionType.RESOLVE:
                    self._handle_resolve(transaction)
                case TransactionType.CHARGEBACK:
                    self._handle_chargeback(transaction)
        except LedgerError as e:
            outcome = Outcome.ignored(e.reason, str(e))
            logger.warning(f"Ignored {transaction}: {e.reason.value}: {e}")
        else:
            outcome = Outcome.success()
            logger.debug(f"Applied {transaction}")

        self._stats.record(outcome)
        return outcome

    def apply_all(self, transactions: Iterable[Transaction]) -> ProcessingStats:
        """Apply transactions in order and return the running stats."""
        for transaction in transactions:
            self.apply(transaction)
        return self._stats

    def snapshot(self) -> List[AccountSnapshot]:
        """Immutable view of every known account, ordered by client id."""
        return [self._accounts[client_id].snapshot() for client_id in sorted(self._accounts)]

    def get_dispute_status(self, transaction_id: int) -> Optional[DisputeStatus]:
        entry = self._history.get_transaction(transaction_id)
        return entry.status if entry is not None else None

    def _get_or_create_account(self, client_id: int) -> ClientAccount:
        if client_id not in self._accounts:
            logger.debug(f"Creating account for client {client_id}")
            self._accounts[client_id] = ClientAccount(client_id=client_id)
        return self._accounts[client_id]

    def _check_fund_movement(self, account: ClientAccount, transaction: Transaction) -> None:
        kind = transaction.transaction_type.value.capitalize()

        if account.locked:
            raise AccountLocked(f"{kind} tx {transaction.transaction_id}: client {account.client_id} is locked")

        if transaction.amount is None or transaction.amount < 0:
            raise InvalidAmount(f"{kind} tx {transaction.transaction_id}: invalid amount {transaction.amount}")

        if transaction.transaction_id in self._history:
            raise DuplicateTransaction(f"{kind} tx {transaction.transaction_id}: transaction id already used")

    def _handle_deposit(self, transaction: Transaction) -> None:
        account = self._get_or_create_account(transaction.client_id)
        self._check_fund_movement(account, transaction)

        account.credit(transaction.amount)
        self._history.store_transaction(transaction)

    def _handle_withdrawal(self, transaction: Transaction) -> None:
        account = self._get_or_create_account(transaction.client_id)
        self._check_fund_movement(account, transaction)

        if account.available < transaction.amount:
            raise InsufficientFunds(
                f"Withdrawal tx {transaction.transaction_id}: requested {transaction.amount}, available {account.available}"
            )

        account.debit(transaction.amount)
        self._history.store_transaction(transaction)

    def _find_disputable(self, transaction: Transaction) -> HistoryEntry:
        """Look up the referenced deposit or withdrawal and check it belongs to the client."""
        action = transaction.transaction_type.value.capitalize()
        original = self._history.get_transaction(transaction.transaction_id)

        if original is None:
            raise UnknownTransaction(f"{action} for tx {transaction.transaction_id}: transaction not found")

        if original.client_id != transaction.client_id:
            raise ClientMismatch(
                f"{action} for tx {transaction.transaction_id}: belongs to client {original.client_id}, not {transaction.client_id}"
            )

        return original

    def _handle_dispute(self, transaction: Transaction) -> None:
        original = self._find_disputable(transaction)
        account = self._accounts[original.client_id]

        if account.locked:
            raise AccountLocked(f"Dispute for tx {transaction.transaction_id}: client {account.client_id} is locked")

        status = self._disputes.next_status(original.status, transaction.transaction_type)

        # Withdrawals are held the same way as deposits; available may go negative.
        account.hold(original.amount)
        self._history.set_status(transaction.transaction_id, status)

    def _handle_resolve(self, transaction: Transaction) -> None:
        original = self._find_disputable(transaction)
        account = self._accounts[original.client_id]
        status = self._disputes.next_status(original.status, transaction.transaction_type)

        account.release_hold(original.amount)
        self._history.set_status(transaction.transaction_id, status)

    def _handle_chargeback(self, transaction: Transaction) -> None:
        original = self._find_disputable(transaction)
        account = self._accounts[original.client_id]
        status = self._disputes.next_status(original.status, transaction.transaction_type)

        account.remove_held(original.amount)
        account.lock()
        self._history.set_status(transaction.transaction_id, status)
        logger.info(f"Chargeback for tx {transaction.transaction_id}: client {account.client_id} locked")
