"""
Change Feed Port - notifications when account or conversation records change.
Implementations:
- friendchat/infrastructure/realtime/redis_change_feed.py
- friendchat/infrastructure/memory/store.py
"""

from abc import ABC, abstractmethod
from typing import Callable

from friendchat.domain.entities.conversation import Conversation
from friendchat.domain.value_objects.account_id import AccountId

ChangeCallback = Callable[[], None]


class Subscription(ABC):
    @abstractmethod
    async def close(self) -> None:
        """Stop delivering notifications. Calling it again is a no-op."""
        ...


class ChangeFeed(ABC):
    @abstractmethod
    async def subscribe_account(
        self, account_id: AccountId, callback: ChangeCallback
    ) -> Subscription: ...

    @abstractmethod
    async def subscribe_conversations(
        self, participant_id: AccountId, callback: ChangeCallback
    ) -> Subscription: ...

    @abstractmethod
    async def publish_account_changed(self, account_id: AccountId) -> None: ...

    @abstractmethod
    async def publish_conversation_changed(self, conversation: Conversation) -> None:
        """Notify both participants."""
        ...
