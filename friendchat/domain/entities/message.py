"""
Message Entity - a single message in a two-party conversation.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import uuid4

from friendchat.domain.exceptions.validation_error import EmptyMessageError
from friendchat.domain.value_objects.account_id import AccountId
from friendchat.domain.value_objects.conversation_id import ConversationId
from friendchat.domain.value_objects.message_id import MessageId


@dataclass
class Message:
    id: MessageId
    conversation_id: ConversationId
    sender_id: AccountId
    receiver_id: AccountId
    text: str
    sent_at: Optional[datetime] = None  # assigned by the store on append

    @classmethod
    def compose(
        cls, conversation_id: ConversationId, sender_id: AccountId, text: str
    ) -> Message:
        """
        Factory for an outgoing message.

        The receiver is derived from the canonical pairing; text is trimmed
        and must not be empty.
        """
        body = (text or "").strip()
        if not body:
            raise EmptyMessageError()
        return cls(
            id=MessageId(str(uuid4())),
            conversation_id=conversation_id,
            sender_id=sender_id,
            receiver_id=conversation_id.other_participant(sender_id),
            text=body,
        )
