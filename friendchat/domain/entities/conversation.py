"""
Conversation Entity - a two-party conversation and its last-message summary.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from friendchat.domain.value_objects.account_id import AccountId
from friendchat.domain.value_objects.conversation_id import ConversationId


@dataclass
class Conversation:
    id: ConversationId
    participants: tuple[AccountId, AccountId]
    last_message: str = ""
    last_message_at: Optional[datetime] = None

    def __post_init__(self):
        if len(self.participants) != 2 or set(self.participants) != set(
            self.id.participants
        ):
            raise ValueError(
                f"Participants {self.participants} do not match conversation {self.id.value}"
            )

    @classmethod
    def start(cls, initiator: AccountId, other: AccountId) -> Conversation:
        """Factory for a conversation with no messages yet."""
        return cls(
            id=ConversationId.for_pair(initiator, other),
            participants=(initiator, other),
        )

    @property
    def has_messages(self) -> bool:
        return self.last_message_at is not None

    def other_participant(self, account_id: AccountId) -> AccountId:
        return self.id.other_participant(account_id)

    def record_message(self, text: str, sent_at: datetime) -> bool:
        """Update the summary; a message older than the current summary is ignored."""
        if self.last_message_at is not None and sent_at < self.last_message_at:
            return False
        self.last_message = text
        self.last_message_at = sent_at
        return True
