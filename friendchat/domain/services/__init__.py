"""
DOMAIN SERVICES - Pure rules (no I/O)

- access_policy  → who may message whom, and which conversations stay visible
- friend_graph   → friend-request state machine, status derivation, reconciliation
"""

from friendchat.domain.services.access_policy import (
    can_message,
    history_required,
    is_visible_without_friendship,
    visibility_requires_history,
)
from friendchat.domain.services.friend_graph import (
    PairWrite,
    Transition,
    derive_friend_status,
    find_inconsistencies,
    plan_accept_request,
    plan_decline_request,
    plan_reconciliation,
    plan_remove_friend,
    plan_send_request,
    resolve_relationship,
)

__all__ = [
    "can_message",
    "history_required",
    "is_visible_without_friendship",
    "visibility_requires_history",
    "PairWrite",
    "Transition",
    "derive_friend_status",
    "find_inconsistencies",
    "plan_accept_request",
    "plan_decline_request",
    "plan_reconciliation",
    "plan_remove_friend",
    "plan_send_request",
    "resolve_relationship",
]
