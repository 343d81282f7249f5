"""
Message Repository Port - Interface for the per-conversation message log.
Implementations:
- friendchat/infrastructure/persistence/prisma_message_repository.py
- friendchat/infrastructure/memory/store.py
"""

from abc import ABC, abstractmethod
from typing import Optional

from friendchat.domain.entities.message import Message
from friendchat.domain.value_objects.account_id import AccountId
from friendchat.domain.value_objects.conversation_id import ConversationId


class MessageRepository(ABC):
    @abstractmethod
    async def append(self, message: Message) -> Message:
        """
        Append to the conversation log.

        The store assigns sent_at, non-decreasing within the conversation.
        """
        ...

    @abstractmethod
    async def query(
        self,
        conversation_id: ConversationId,
        sender_id: Optional[AccountId] = None,
        limit: Optional[int] = None,
    ) -> list[Message]:
        """
        Messages ordered by sent_at ascending (oldest first).

        With a limit, only the most recent `limit` messages are returned.
        """
        ...
