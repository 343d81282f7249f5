"""
Non-fatal consistency errors.

Neither of these reaches API callers: PartialSyncFailure is attached to a
conversation view, InconsistentFriendshipError is logged while a pair is
reconciled.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class PartialSyncFailure:
    """One candidate conversation that could not be resolved while building a view."""

    conversation_id: str
    other_account_id: str
    reason: str


class InconsistentFriendshipError(Exception):
    """Two account records disagree about their relationship."""

    def __init__(self, account_id: str, other_id: str, detail: str):
        super().__init__(
            f"Inconsistent relationship between {account_id} and {other_id}: {detail}"
        )
        self.account_id = account_id
        self.other_id = other_id
        self.detail = detail
