from typing import Dict, Tuple

from errors import InvalidStateTransition
from models import DisputeStatus, TransactionType


class DisputeStateMachine:
    """
    Legal dispute transitions for an indexed deposit or withdrawal.

        NORMAL --dispute--> DISPUTED --resolve----> RESOLVED
                                     --chargeback-> CHARGED_BACK

    RESOLVED and CHARGED_BACK are terminal.
    """

    TRANSITIONS: Dict[Tuple[DisputeStatus, TransactionType], DisputeStatus] = {
        (DisputeStatus.NORMAL, TransactionType.DISPUTE): DisputeStatus.DISPUTED,
        (DisputeStatus.DISPUTED, TransactionType.RESOLVE): DisputeStatus.RESOLVED,
        (DisputeStatus.DISPUTED, TransactionType.CHARGEBACK): DisputeStatus.CHARGED_BACK,
    }

    TERMINAL = frozenset({DisputeStatus.RESOLVED, DisputeStatus.CHARGED_BACK})

    def next_status(self, current: DisputeStatus, action: TransactionType) -> DisputeStatus:
        """Return the status reached by applying action, or raise InvalidStateTransition."""
        try:
            return self.TRANSITIONS[(current, action)]
        except KeyError:
            raise InvalidStateTransition(
                f"cannot {action.value} a transaction in state {current.value}"
            ) from None

    def can_transition(self, current: DisputeStatus, action: TransactionType) -> bool:
        return (current, action) in self.TRANSITIONS

    def is_terminal(self, status: DisputeStatus) -> bool:
        return status in self.TERMINAL
