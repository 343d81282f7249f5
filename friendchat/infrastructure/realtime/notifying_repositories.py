"""
Notifying Repositories - Decorator pattern for change notifications.

Architecture:
    NotifyingAccountRepository (decorator)
        ↓ wraps
    PrismaAccountRepository (concrete implementation)
        ↓ implements
    AccountRepository (abstract interface)

Write to the store first (source of truth), then publish. A failed publish
is logged and does not fail the write: live views catch up on the next
notification for the same account.
"""

import logging
from datetime import datetime
from typing import Iterable, Optional

from friendchat.domain.entities.account import Account
from friendchat.domain.entities.conversation import Conversation
from friendchat.domain.ports.change_feed import ChangeFeed
from friendchat.domain.ports.repositories import (
    AccountRepository,
    ConversationRepository,
)
from friendchat.domain.value_objects.account_id import AccountId
from friendchat.domain.value_objects.account_patch import AccountPatch
from friendchat.domain.value_objects.conversation_id import ConversationId

logger = logging.getLogger(__name__)


class NotifyingAccountRepository(AccountRepository):
    def __init__(self, repo: AccountRepository, change_feed: ChangeFeed):
        self._repo = repo
        self._change_feed = change_feed

    async def _publish(self, account_id: AccountId) -> None:
        try:
            await self._change_feed.publish_account_changed(account_id)
        except Exception as e:
            logger.warning(f"[ChangeFeed] Publish for account {account_id.value} failed: {e}")

    async def get(self, account_id: AccountId) -> Optional[Account]:
        return await self._repo.get(account_id)

    async def get_many(
        self, account_ids: Iterable[AccountId]
    ) -> dict[AccountId, Account]:
        return await self._repo.get_many(account_ids)

    async def save(self, account: Account) -> Account:
        saved = await self._repo.save(account)
        await self._publish(saved.id)
        return saved

    async def apply(self, account_id: AccountId, patch: AccountPatch) -> Account:
        updated = await self._repo.apply(account_id, patch)
        await self._publish(account_id)
        return updated

    async def search(self, text: str, limit: int) -> list[Account]:
        return await self._repo.search(text, limit)


class NotifyingConversationRepository(ConversationRepository):
    def __init__(self, repo: ConversationRepository, change_feed: ChangeFeed):
        self._repo = repo
        self._change_feed = change_feed

    async def _publish(self, conversation: Conversation) -> None:
        try:
            await self._change_feed.publish_conversation_changed(conversation)
        except Exception as e:
            logger.warning(
                f"[ChangeFeed] Publish for conversation {conversation.id.value} failed: {e}"
            )

    async def get(self, conversation_id: ConversationId) -> Optional[Conversation]:
        return await self._repo.get(conversation_id)

    async def list_by_participant(self, account_id: AccountId) -> list[Conversation]:
        return await self._repo.list_by_participant(account_id)

    async def create(self, conversation: Conversation) -> Conversation:
        stored = await self._repo.create(conversation)
        await self._publish(stored)
        return stored

    async def update_summary(
        self, conversation_id: ConversationId, text: str, sent_at: datetime
    ) -> Optional[Conversation]:
        updated = await self._repo.update_summary(conversation_id, text, sent_at)
        if updated is not None:
            await self._publish(updated)
        return updated
