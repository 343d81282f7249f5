"""
Tests for DI wiring, the change-publishing repository decorators and the
Redis listener.

Run with: pytest tests/test_wiring.py -v
"""

import asyncio
import logging
from datetime import datetime, timezone

import pytest

from friendchat.application.commands.friends import SendFriendRequestHandler
from friendchat.application.queries.conversations import ListConversationsHandler
from friendchat.config.settings import TestingConfig
from friendchat.domain.entities.account import Account
from friendchat.domain.entities.conversation import Conversation
from friendchat.domain.ports.change_feed import ChangeFeed
from friendchat.domain.ports.repositories import AccountRepository
from friendchat.domain.value_objects.account_id import AccountId
from friendchat.domain.value_objects.account_patch import AccountPatch
from friendchat.domain.value_objects.conversation_id import ConversationId
from friendchat.infrastructure.realtime import (
    NotifyingAccountRepository,
    NotifyingConversationRepository,
    RedisChangeFeed,
)
from friendchat.infrastructure.realtime.redis_change_feed import RedisSubscription
from friendchat.setup.ioc import create_container

ALICE, BOB = AccountId("alice"), AccountId("bob")


class RecordingFeed(ChangeFeed):
    def __init__(self, fail=False):
        self.published = []
        self._fail = fail

    async def subscribe_account(self, account_id, callback):
        raise NotImplementedError

    async def subscribe_conversations(self, participant_id, callback):
        raise NotImplementedError

    async def publish_account_changed(self, account_id):
        if self._fail:
            raise ConnectionError("redis down")
        self.published.append(("account", account_id.value))

    async def publish_conversation_changed(self, conversation):
        self.published.append(("conversation", conversation.id.value))


class TestContainer:
    def test_memory_container_resolves_handlers(self, store):
        container = create_container(TestingConfig, store=store)

        async def resolve():
            async with container() as request_container:
                handler = await request_container.get(SendFriendRequestHandler)
                listing = await request_container.get(ListConversationsHandler)
                feed = await request_container.get(ChangeFeed)
            await container.close()
            return handler, listing, feed

        handler, listing, feed = asyncio.run(resolve())

        assert isinstance(handler, SendFriendRequestHandler)
        assert isinstance(listing, ListConversationsHandler)
        assert feed is store

    def test_unknown_backend_rejected(self):
        class BrokenConfig(TestingConfig):
            STORE_BACKEND = "sqlite"

        with pytest.raises(ValueError):
            create_container(BrokenConfig)


class TestNotifyingRepositories:
    def test_account_writes_publish(self, accounts):
        feed = RecordingFeed()
        repository: AccountRepository = NotifyingAccountRepository(accounts, feed)

        async def scenario():
            await repository.save(Account.create(ALICE))
            await repository.apply(ALICE, AccountPatch().setting(is_private=True))
            await repository.get(ALICE)

        asyncio.run(scenario())

        assert feed.published == [("account", "alice"), ("account", "alice")]

    def test_publish_failure_does_not_fail_the_write(self, store, accounts):
        repository = NotifyingAccountRepository(accounts, RecordingFeed(fail=True))

        saved = asyncio.run(repository.save(Account.create(ALICE, username="Alice")))

        assert saved.username == "Alice"
        assert ALICE in store.accounts

    def test_conversation_writes_publish(self, conversations):
        feed = RecordingFeed()
        repository = NotifyingConversationRepository(conversations, feed)
        conversation_id = ConversationId.for_pair(ALICE, BOB)

        async def scenario():
            await repository.create(Conversation.start(ALICE, BOB))
            await repository.update_summary(
                conversation_id, "hi", datetime.now(timezone.utc)
            )
            # no record, nothing to announce
            await repository.update_summary(
                ConversationId.for_pair(ALICE, AccountId("carol")),
                "hi",
                datetime.now(timezone.utc),
            )

        asyncio.run(scenario())

        assert feed.published == [
            ("conversation", "alice_bob"),
            ("conversation", "alice_bob"),
        ]


class TestRedisChannels:
    def test_channel_names(self):
        feed = RedisChangeFeed(redis=None, prefix="fc")

        assert feed.account_channel(ALICE) == "fc:account:alice"
        assert feed.conversations_channel(BOB) == "fc:conversations:bob"


class DroppingPubSub:
    """First listen() loses the connection; the retry delivers a message."""

    def __init__(self):
        self.attempts = 0
        self.unsubscribed = []
        self.closed = False

    async def listen(self):
        self.attempts += 1
        if self.attempts == 1:
            raise ConnectionError("Connection reset by peer")
        yield {"type": "subscribe", "channel": "fc:account:alice", "data": 1}
        yield {"type": "message", "channel": "fc:account:alice", "data": "changed"}
        await asyncio.Event().wait()

    async def unsubscribe(self, channel):
        self.unsubscribed.append(channel)

    async def aclose(self):
        self.closed = True


class TestRedisListener:
    def test_listener_recovers_from_connection_loss(self, caplog):
        pubsub = DroppingPubSub()
        calls = []

        async def scenario():
            subscription = RedisSubscription(
                "fc:account:alice", pubsub, lambda: calls.append("changed"), retry_delay=0
            )
            subscription.start()
            for _ in range(100):
                if len(calls) >= 3:
                    break
                await asyncio.sleep(0)
            await subscription.close()

        with caplog.at_level(logging.INFO, logger="friendchat"):
            asyncio.run(scenario())

        # once on the failure, once on recovery, once for the message
        assert len(calls) == 3
        assert pubsub.attempts == 2
        assert "lost its connection" in caplog.text
        assert "recovered" in caplog.text
        assert pubsub.unsubscribed == ["fc:account:alice"]
        assert pubsub.closed
