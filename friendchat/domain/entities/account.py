"""
Account Entity - a user identity with friend, privacy and organizer state.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from friendchat.domain.value_objects.account_id import AccountId
from friendchat.domain.value_objects.account_patch import AccountPatch

DEFAULT_USERNAME = "Unknown"


class FriendRequestStatus(str, Enum):
    NONE = "none"
    SENT = "sent"
    RECEIVED = "received"
    FRIENDS = "friends"
    SELF = "self"


@dataclass
class Account:
    # Required fields (no defaults) - must come first
    id: AccountId
    # Relations
    friends: set[AccountId] = field(default_factory=set)
    sent_requests: set[AccountId] = field(default_factory=set)
    received_requests: set[AccountId] = field(default_factory=set)
    # Settings
    is_private: bool = False
    is_organizer: bool = False
    # Profile
    username: str = DEFAULT_USERNAME
    photo_url: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        account_id: AccountId,
        username: Optional[str] = None,
        photo_url: Optional[str] = None,
        is_private: bool = False,
    ) -> Account:
        """Factory for the record written on first sign-in."""
        return cls(
            id=account_id,
            username=username or DEFAULT_USERNAME,
            photo_url=photo_url,
            is_private=is_private,
            created_at=datetime.now(timezone.utc),
        )

    def lists_as_friend(self, other_id: AccountId) -> bool:
        return other_id in self.friends

    def has_sent_request_to(self, other_id: AccountId) -> bool:
        return other_id in self.sent_requests

    def has_request_from(self, other_id: AccountId) -> bool:
        return other_id in self.received_requests

    def is_friends_with(self, other: Account) -> bool:
        """Mutual friendship: both records must list each other."""
        return self.lists_as_friend(other.id) and other.lists_as_friend(self.id)

    def apply(self, patch: AccountPatch) -> None:
        """Apply a partial update in place (removals first, then additions)."""
        for name, ids in patch.remove.items():
            getattr(self, name).difference_update(ids)
        for name, ids in patch.add.items():
            getattr(self, name).update(ids)
        for name, value in patch.values.items():
            setattr(self, name, value)
