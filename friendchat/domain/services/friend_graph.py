"""
Friend Graph - the friend-request state machine over a pair of accounts.

Pair states (relative to the first account):

    none ──send──▶ sent ──accept (by other)──▶ friends
      ▲              │                            │
      └──decline─────┘◀──────────remove───────────┘

The external store has no cross-record transactions, so every operation is
two single-record writes, planned here as an ordered Transition. A crash
between the two writes leaves a half-committed pair. The write order of
each operation is fixed so that such a state can be recognised later:

- send:    sender first    → orphan "sent" means an interrupted send
- accept:  accepter first  → one-sided friend + pending remnant means an
                             interrupted accept
- decline: requester first → orphan "received" means an interrupted decline
- remove:  remover first   → one-sided friend without remnant means an
                             interrupted removal

resolve_relationship() uses these rules to decide the intended state, and
plan_reconciliation() produces the writes that repair the pair.
derive_friend_status() is for display only and is conservative: a missing
mirror entry reads as "none", never as "friends".
"""

from dataclasses import dataclass

from friendchat.domain.entities.account import Account, FriendRequestStatus
from friendchat.domain.exceptions.invalid_state import InvalidStateError
from friendchat.domain.exceptions.sync import InconsistentFriendshipError
from friendchat.domain.value_objects.account_id import AccountId
from friendchat.domain.value_objects.account_patch import AccountPatch

_MIRROR = {
    FriendRequestStatus.NONE: FriendRequestStatus.NONE,
    FriendRequestStatus.SENT: FriendRequestStatus.RECEIVED,
    FriendRequestStatus.RECEIVED: FriendRequestStatus.SENT,
    FriendRequestStatus.FRIENDS: FriendRequestStatus.FRIENDS,
}

# Relation fields that must hold for each status, seen from one account
_EXPECTED = {
    FriendRequestStatus.NONE: {
        "friends": False,
        "sent_requests": False,
        "received_requests": False,
    },
    FriendRequestStatus.SENT: {
        "friends": False,
        "sent_requests": True,
        "received_requests": False,
    },
    FriendRequestStatus.RECEIVED: {
        "friends": False,
        "sent_requests": False,
        "received_requests": True,
    },
    FriendRequestStatus.FRIENDS: {
        "friends": True,
        "sent_requests": False,
        "received_requests": False,
    },
}


@dataclass(frozen=True)
class PairWrite:
    account_id: AccountId
    patch: AccountPatch


@dataclass(frozen=True)
class Transition:
    writes: tuple[PairWrite, ...] = ()

    @property
    def is_noop(self) -> bool:
        return not self.writes


def _require_distinct(first: Account, second: Account) -> None:
    if first.id == second.id:
        raise InvalidStateError("An account cannot befriend itself.")


def derive_friend_status(viewer: Account, other: Account) -> FriendRequestStatus:
    """Status of `other` as displayed to `viewer`, requiring mirrored entries."""
    if viewer.id == other.id:
        return FriendRequestStatus.SELF
    if viewer.lists_as_friend(other.id) and other.lists_as_friend(viewer.id):
        return FriendRequestStatus.FRIENDS
    # Crossing requests read as RECEIVED on both sides so either can accept
    if viewer.has_request_from(other.id) and other.has_sent_request_to(viewer.id):
        return FriendRequestStatus.RECEIVED
    if viewer.has_sent_request_to(other.id) and other.has_request_from(viewer.id):
        return FriendRequestStatus.SENT
    return FriendRequestStatus.NONE


def resolve_relationship(first: Account, second: Account) -> FriendRequestStatus:
    """Intended state of the pair relative to `first`, recovering half-committed writes."""
    first_lists = first.lists_as_friend(second.id)
    second_lists = second.lists_as_friend(first.id)

    if first_lists and second_lists:
        return FriendRequestStatus.FRIENDS
    if first_lists:
        # Interrupted accept leaves the requester's "sent" entry behind
        if second.has_sent_request_to(first.id):
            return FriendRequestStatus.FRIENDS
        return FriendRequestStatus.NONE
    if second_lists:
        if first.has_sent_request_to(second.id):
            return FriendRequestStatus.FRIENDS
        return FriendRequestStatus.NONE

    # The sender side is written first by both send and decline
    first_sent = first.has_sent_request_to(second.id)
    second_sent = second.has_sent_request_to(first.id)
    if first_sent and second_sent:
        # Both asked concurrently
        return FriendRequestStatus.FRIENDS
    if first_sent:
        return FriendRequestStatus.SENT
    if second_sent:
        return FriendRequestStatus.RECEIVED
    return FriendRequestStatus.NONE


def _diff(account: Account, other_id: AccountId, status: FriendRequestStatus) -> AccountPatch:
    patch = AccountPatch()
    current = {
        "friends": account.lists_as_friend(other_id),
        "sent_requests": account.has_sent_request_to(other_id),
        "received_requests": account.has_request_from(other_id),
    }
    for name, wanted in _EXPECTED[status].items():
        if wanted and not current[name]:
            patch = patch.adding(name, other_id)
        elif not wanted and current[name]:
            patch = patch.removing(name, other_id)
    return patch


def _transition(
    first: Account, second: Account, status: FriendRequestStatus, second_first: bool = False
) -> Transition:
    """Writes that bring both records to `status` (relative to `first`)."""
    writes = [
        PairWrite(first.id, _diff(first, second.id, status)),
        PairWrite(second.id, _diff(second, first.id, _MIRROR[status])),
    ]
    if second_first:
        writes.reverse()
    return Transition(tuple(write for write in writes if not write.patch.is_empty()))


def find_inconsistencies(
    first: Account, second: Account
) -> list[InconsistentFriendshipError]:
    """Describe every way the two records disagree about their relationship."""
    issues = []
    for this, that in ((first, second), (second, first)):
        if this.lists_as_friend(that.id) and not that.lists_as_friend(this.id):
            issues.append(
                InconsistentFriendshipError(
                    this.id.value, that.id.value, "friendship is not reciprocated"
                )
            )
        if this.has_sent_request_to(that.id) and not that.has_request_from(this.id):
            issues.append(
                InconsistentFriendshipError(
                    this.id.value, that.id.value, "sent request has no mirror"
                )
            )
        if this.has_request_from(that.id) and not that.has_sent_request_to(this.id):
            issues.append(
                InconsistentFriendshipError(
                    this.id.value, that.id.value, "received request has no mirror"
                )
            )
        if this.lists_as_friend(that.id) and (
            this.has_sent_request_to(that.id) or this.has_request_from(that.id)
        ):
            issues.append(
                InconsistentFriendshipError(
                    this.id.value, that.id.value, "friend is also pending"
                )
            )
        if this.has_sent_request_to(that.id) and this.has_request_from(that.id):
            issues.append(
                InconsistentFriendshipError(
                    this.id.value, that.id.value, "requests pending in both directions"
                )
            )
    return issues


def plan_reconciliation(first: Account, second: Account) -> Transition:
    """Writes that repair a half-committed pair; a no-op for a consistent pair."""
    if first.id == second.id:
        return Transition()
    return _transition(first, second, resolve_relationship(first, second))


def plan_send_request(sender: Account, target: Account) -> Transition:
    _require_distinct(sender, target)
    current = resolve_relationship(sender, target)
    if current is FriendRequestStatus.FRIENDS:
        raise InvalidStateError(
            f"{sender.id.value} and {target.id.value} are already friends."
        )
    if current is FriendRequestStatus.RECEIVED:
        raise InvalidStateError(
            f"{target.id.value} already sent a friend request; accept it instead."
        )
    return _transition(sender, target, FriendRequestStatus.SENT)


def plan_accept_request(accepter: Account, requester: Account) -> Transition:
    _require_distinct(accepter, requester)
    current = resolve_relationship(accepter, requester)
    if current is FriendRequestStatus.FRIENDS:
        # Already friends; only repairs, never duplicate entries
        return _transition(accepter, requester, FriendRequestStatus.FRIENDS)
    if current is not FriendRequestStatus.RECEIVED:
        raise InvalidStateError(
            f"No pending friend request from {requester.id.value}."
        )
    return _transition(accepter, requester, FriendRequestStatus.FRIENDS)


def plan_decline_request(decliner: Account, requester: Account) -> Transition:
    _require_distinct(decliner, requester)
    current = resolve_relationship(decliner, requester)
    if current is FriendRequestStatus.FRIENDS:
        raise InvalidStateError(
            f"{requester.id.value} is already a friend; remove the friend instead."
        )
    if current is FriendRequestStatus.SENT:
        raise InvalidStateError(
            f"The pending request goes to {requester.id.value}, not from them."
        )
    # Requester side first, so an orphan "received" means an interrupted decline
    return _transition(
        decliner, requester, FriendRequestStatus.NONE, second_first=True
    )


def plan_remove_friend(account: Account, friend: Account) -> Transition:
    _require_distinct(account, friend)
    current = resolve_relationship(account, friend)
    if current is not FriendRequestStatus.FRIENDS:
        return _transition(account, friend, current)
    return _transition(account, friend, FriendRequestStatus.NONE)
