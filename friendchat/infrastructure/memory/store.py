"""
In-Memory Document Store.

Implements every store port (accounts, conversations, messages, change feed)
over plain dictionaries. Used with STORE_BACKEND=memory for local runs and
by the test suite.

Every read and write yields to the event loop once, so concurrent callers
interleave the same way they would against a remote store. Records are
copied on the way in and out; callers never share state with the store.
"""

import asyncio
import copy
import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional

from friendchat.domain.entities.account import Account
from friendchat.domain.entities.conversation import Conversation
from friendchat.domain.entities.message import Message
from friendchat.domain.exceptions import EntityNotFoundError
from friendchat.domain.ports.change_feed import ChangeCallback, ChangeFeed, Subscription
from friendchat.domain.ports.repositories import (
    AccountRepository,
    ConversationRepository,
    MessageRepository,
)
from friendchat.domain.value_objects.account_id import AccountId
from friendchat.domain.value_objects.account_patch import AccountPatch
from friendchat.domain.value_objects.conversation_id import ConversationId

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _MemorySubscription(Subscription):
    def __init__(self, feed: "InMemoryDocumentStore", key: tuple, callback: ChangeCallback):
        self._feed = feed
        self._key = key
        self._callback = callback
        self.closed = False

    def notify(self) -> None:
        if not self.closed:
            self._callback()

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._feed._detach(self._key, self)


class InMemoryDocumentStore(ChangeFeed):
    """Backing data plus the change feed; repositories below are views onto it."""

    def __init__(self, clock: Optional[Clock] = None):
        self._clock = clock or _utcnow
        self.accounts: dict[AccountId, Account] = {}
        self.conversations: dict[ConversationId, Conversation] = {}
        self.messages: dict[ConversationId, list[Message]] = defaultdict(list)
        self._subscribers: dict[tuple, list[_MemorySubscription]] = defaultdict(list)

    # ==================== CHANGE FEED ====================

    def _detach(self, key: tuple, subscription: _MemorySubscription) -> None:
        subscribers = self._subscribers.get(key)
        if not subscribers:
            return
        try:
            subscribers.remove(subscription)
        except ValueError:
            return
        if not subscribers:
            self._subscribers.pop(key, None)

    def _notify(self, key: tuple) -> None:
        for subscription in list(self._subscribers.get(key, [])):
            try:
                subscription.notify()
            except Exception:
                logger.exception(f"[MemoryStore] Subscriber for {key} failed")

    def subscriber_count(self) -> int:
        return sum(len(subs) for subs in self._subscribers.values())

    async def subscribe_account(
        self, account_id: AccountId, callback: ChangeCallback
    ) -> Subscription:
        key = ("account", account_id)
        subscription = _MemorySubscription(self, key, callback)
        self._subscribers[key].append(subscription)
        return subscription

    async def subscribe_conversations(
        self, participant_id: AccountId, callback: ChangeCallback
    ) -> Subscription:
        key = ("conversations", participant_id)
        subscription = _MemorySubscription(self, key, callback)
        self._subscribers[key].append(subscription)
        return subscription

    async def publish_account_changed(self, account_id: AccountId) -> None:
        self._notify(("account", account_id))

    async def publish_conversation_changed(self, conversation: Conversation) -> None:
        for participant in set(conversation.participants):
            self._notify(("conversations", participant))

    # ==================== CLOCK ====================

    def next_sent_at(self, conversation_id: ConversationId) -> datetime:
        """Store-assigned timestamp, never earlier than the conversation's last message."""
        now = self._clock()
        log = self.messages.get(conversation_id)
        if log and log[-1].sent_at and now < log[-1].sent_at:
            return log[-1].sent_at
        return now


class InMemoryAccountRepository(AccountRepository):
    def __init__(self, store: InMemoryDocumentStore):
        self._store = store

    async def get(self, account_id: AccountId) -> Optional[Account]:
        await asyncio.sleep(0)
        account = self._store.accounts.get(account_id)
        return copy.deepcopy(account) if account else None

    async def get_many(
        self, account_ids: Iterable[AccountId]
    ) -> dict[AccountId, Account]:
        await asyncio.sleep(0)
        found = {}
        for account_id in set(account_ids):
            account = self._store.accounts.get(account_id)
            if account:
                found[account_id] = copy.deepcopy(account)
        return found

    async def save(self, account: Account) -> Account:
        await asyncio.sleep(0)
        stored = self._store.accounts.get(account.id)
        if stored is None:
            stored = copy.deepcopy(account)
            self._store.accounts[account.id] = stored
        else:
            stored.username = account.username
            stored.photo_url = account.photo_url
        await self._store.publish_account_changed(account.id)
        return copy.deepcopy(stored)

    async def apply(self, account_id: AccountId, patch: AccountPatch) -> Account:
        await asyncio.sleep(0)
        stored = self._store.accounts.get(account_id)
        if stored is None:
            raise EntityNotFoundError(f"Account {account_id.value} not found.")
        stored.apply(patch)
        await self._store.publish_account_changed(account_id)
        return copy.deepcopy(stored)

    async def search(self, text: str, limit: int) -> list[Account]:
        await asyncio.sleep(0)
        needle = text.strip().lower()
        matches = [
            account
            for account in self._store.accounts.values()
            if not needle or needle in account.username.lower()
        ]
        matches.sort(key=lambda account: (account.username.lower(), account.id.value))
        return [copy.deepcopy(account) for account in matches[:limit]]


class InMemoryConversationRepository(ConversationRepository):
    def __init__(self, store: InMemoryDocumentStore):
        self._store = store

    async def get(self, conversation_id: ConversationId) -> Optional[Conversation]:
        await asyncio.sleep(0)
        conversation = self._store.conversations.get(conversation_id)
        return copy.deepcopy(conversation) if conversation else None

    async def list_by_participant(self, account_id: AccountId) -> list[Conversation]:
        await asyncio.sleep(0)
        return [
            copy.deepcopy(conversation)
            for conversation in self._store.conversations.values()
            if account_id in conversation.participants
        ]

    async def create(self, conversation: Conversation) -> Conversation:
        await asyncio.sleep(0)
        stored = self._store.conversations.get(conversation.id)
        if stored is None:
            stored = copy.deepcopy(conversation)
            self._store.conversations[conversation.id] = stored
            await self._store.publish_conversation_changed(stored)
        return copy.deepcopy(stored)

    async def update_summary(
        self, conversation_id: ConversationId, text: str, sent_at: datetime
    ) -> Optional[Conversation]:
        await asyncio.sleep(0)
        stored = self._store.conversations.get(conversation_id)
        if stored is None:
            return None
        if stored.record_message(text, sent_at):
            await self._store.publish_conversation_changed(stored)
        return copy.deepcopy(stored)


class InMemoryMessageRepository(MessageRepository):
    def __init__(self, store: InMemoryDocumentStore):
        self._store = store

    async def append(self, message: Message) -> Message:
        await asyncio.sleep(0)
        stored = copy.deepcopy(message)
        stored.sent_at = self._store.next_sent_at(message.conversation_id)
        self._store.messages[message.conversation_id].append(stored)
        return copy.deepcopy(stored)

    async def query(
        self,
        conversation_id: ConversationId,
        sender_id: Optional[AccountId] = None,
        limit: Optional[int] = None,
    ) -> list[Message]:
        await asyncio.sleep(0)
        log = self._store.messages.get(conversation_id, [])
        if sender_id is not None:
            log = [message for message in log if message.sender_id == sender_id]
        if limit is not None:
            log = log[-limit:] if limit > 0 else []
        return [copy.deepcopy(message) for message in log]
