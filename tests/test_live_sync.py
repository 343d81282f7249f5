"""
Tests for the live conversation feed.

Run with: pytest tests/test_live_sync.py -v
"""

import asyncio

from friendchat.application.commands.messaging import SendMessageCommand, SendMessageHandler
from friendchat.application.services import (
    ConversationViewBuilder,
    LiveConversationFeed,
    MessagingPermissions,
)
from friendchat.application.services.conversation_view import ConversationView
from friendchat.domain.ports.change_feed import ChangeFeed, Subscription
from friendchat.domain.value_objects.account_id import AccountId
from friendchat.domain.value_objects.conversation_id import ConversationId

ALICE = AccountId("alice")


class GatedBuilder:
    """Each build() call waits for its own gate, so tests decide completion order."""

    def __init__(self, fail_on=()):
        self.gates: dict[int, asyncio.Event] = {}
        self.views: dict[int, ConversationView] = {}
        self.calls = 0
        self._fail_on = set(fail_on)

    def gate(self, call: int) -> asyncio.Event:
        return self.gates.setdefault(call, asyncio.Event())

    async def build(self, account_id):
        self.calls += 1
        call = self.calls
        await self.gate(call).wait()
        if call in self._fail_on:
            raise RuntimeError(f"build {call} failed")
        view = ConversationView(account_id=account_id, conversations=[])
        self.views[call] = view
        return view


class CountingSubscription(Subscription):
    def __init__(self):
        self.close_calls = 0

    async def close(self):
        self.close_calls += 1


class CountingFeed(ChangeFeed):
    def __init__(self):
        self.subscriptions: list[CountingSubscription] = []

    async def _subscribe(self):
        subscription = CountingSubscription()
        self.subscriptions.append(subscription)
        return subscription

    async def subscribe_account(self, account_id, callback):
        return await self._subscribe()

    async def subscribe_conversations(self, participant_id, callback):
        return await self._subscribe()

    async def publish_account_changed(self, account_id):
        pass

    async def publish_conversation_changed(self, conversation):
        pass


async def wait_until(predicate, timeout=1.0):
    async def _poll():
        while not predicate():
            await asyncio.sleep(0)

    await asyncio.wait_for(_poll(), timeout)


class TestDelivery:
    def test_initial_view_and_message_updates(self, store, seed, befriend, accounts, conversations, messages):
        alice, bob = seed("alice", "bob")
        befriend(alice, bob)
        builder = ConversationViewBuilder(
            accounts, conversations, MessagingPermissions(accounts, messages)
        )
        sender = SendMessageHandler(conversations, messages)
        delivered = []

        async def deliver(update):
            delivered.append(update)

        async def scenario():
            async with LiveConversationFeed(alice, builder, store, deliver) as feed:
                await feed.settle()
                await sender.execute(
                    SendMessageCommand(bob, ConversationId.for_pair(alice, bob), "hey alice")
                )
                await feed.settle()
                return feed.last_view

        last_view = asyncio.run(scenario())

        assert delivered[0].generation == 1
        assert delivered[0].view.conversations[0].persisted is False
        assert delivered[-1].generation > 1
        assert last_view.conversations[0].last_message == "hey alice"
        generations = [update.generation for update in delivered]
        assert generations == sorted(set(generations))

    def test_stale_result_is_dropped(self, store):
        builder = GatedBuilder()
        delivered = []

        async def deliver(update):
            delivered.append(update.generation)

        async def scenario():
            feed = LiveConversationFeed(ALICE, builder, store, deliver)
            await feed.start()
            feed.notify()
            await wait_until(lambda: builder.calls == 2)

            # the newer recomputation finishes first
            builder.gate(2).set()
            await wait_until(lambda: feed.delivered_generation == 2)
            builder.gate(1).set()
            await feed.settle()
            await feed.close()
            return feed

        feed = asyncio.run(scenario())

        assert delivered == [2]
        assert feed.last_view is builder.views[2]

    def test_failed_recomputation_keeps_last_view(self, store):
        builder = GatedBuilder(fail_on={2})
        delivered = []

        async def deliver(update):
            delivered.append(update.generation)

        async def scenario():
            async with LiveConversationFeed(ALICE, builder, store, deliver) as feed:
                builder.gate(1).set()
                await feed.settle()
                feed.notify()
                builder.gate(2).set()
                await feed.settle()
                return feed

        feed = asyncio.run(scenario())

        assert delivered == [1]
        assert feed.last_view is builder.views[1]
        assert feed.delivered_generation == 1


class TestClose:
    def test_close_releases_subscriptions_once(self):
        change_feed = CountingFeed()
        builder = GatedBuilder()

        async def deliver(update):
            pass

        async def scenario():
            feed = LiveConversationFeed(ALICE, builder, change_feed, deliver)
            await feed.start()
            await feed.close()
            await feed.close()
            return feed

        feed = asyncio.run(scenario())

        assert feed.closed
        assert [subscription.close_calls for subscription in change_feed.subscriptions] == [1, 1]

    def test_close_cancels_in_flight_work_and_detaches(self, store):
        builder = GatedBuilder()
        delivered = []

        async def deliver(update):
            delivered.append(update.generation)

        async def scenario():
            feed = LiveConversationFeed(ALICE, builder, store, deliver)
            await feed.start()
            assert store.subscriber_count() == 2
            await wait_until(lambda: builder.calls == 1)

            await feed.close()
            builder.gate(1).set()
            await store.publish_account_changed(ALICE)
            await asyncio.sleep(0)
            return feed

        feed = asyncio.run(scenario())

        assert delivered == []
        assert builder.calls == 1
        assert store.subscriber_count() == 0
        assert feed.closed
