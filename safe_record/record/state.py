"""
Record lifecycle states and the transition table.

    UNCOMMITTED --insert--> COMMITTED --update--> COMMITTED
                            COMMITTED --delete_record--> DELETED (terminal)

Only Record.new_for_table() produces UNCOMMITTED records. Wrapped and
fetched handles start out COMMITTED when they represent a stored row.
"""

from enum import Enum
from typing import Dict, Optional


class RecordState(str, Enum):
    UNCOMMITTED = "uncommitted"
    COMMITTED = "committed"
    DELETED = "deleted"


TRANSITIONS: Dict[str, Dict[RecordState, RecordState]] = {
    "insert": {RecordState.UNCOMMITTED: RecordState.COMMITTED},
    "update": {RecordState.COMMITTED: RecordState.COMMITTED},
    "delete_record": {RecordState.COMMITTED: RecordState.DELETED},
}


def target_state(operation: str, state: RecordState) -> Optional[RecordState]:
    """State reached by operation from state, or None if it is illegal there."""
    return TRANSITIONS[operation].get(state)
