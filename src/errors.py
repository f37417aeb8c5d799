from models import IgnoreReason


class LedgerError(Exception):
    """
    Base class for non-fatal record rejections.
    The engine converts these into ignored outcomes; they never abort a run.
    """

    reason: IgnoreReason


class UnknownTransaction(LedgerError):
    reason = IgnoreReason.UNKNOWN_TRANSACTION


class ClientMismatch(LedgerError):
    reason = IgnoreReason.CLIENT_MISMATCH


class InvalidStateTransition(LedgerError):
    reason = IgnoreReason.INVALID_STATE_TRANSITION


class InsufficientFunds(LedgerError):
    reason = IgnoreReason.INSUFFICIENT_FUNDS


class AccountLocked(LedgerError):
    reason = IgnoreReason.ACCOUNT_LOCKED


class InvalidAmount(LedgerError):
    reason = IgnoreReason.INVALID_AMOUNT


class DuplicateTransaction(LedgerError):
    reason = IgnoreReason.DUPLICATE_TRANSACTION
