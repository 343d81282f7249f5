"""
Conversation Repository Port - Interface for conversation records.
Implementations:
- friendchat/infrastructure/persistence/prisma_conversation_repository.py
- friendchat/infrastructure/memory/store.py
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from friendchat.domain.entities.conversation import Conversation
from friendchat.domain.value_objects.account_id import AccountId
from friendchat.domain.value_objects.conversation_id import ConversationId


class ConversationRepository(ABC):
    @abstractmethod
    async def get(self, conversation_id: ConversationId) -> Optional[Conversation]: ...

    @abstractmethod
    async def list_by_participant(
        self, account_id: AccountId
    ) -> list[Conversation]: ...

    @abstractmethod
    async def create(self, conversation: Conversation) -> Conversation:
        """Insert if absent; returns the stored record (existing one wins)."""
        ...

    @abstractmethod
    async def update_summary(
        self, conversation_id: ConversationId, text: str, sent_at: datetime
    ) -> Optional[Conversation]:
        """
        Update only last_message / last_message_at.

        Ignored when the stored summary is newer. Returns None when the
        record does not exist.
        """
        ...
