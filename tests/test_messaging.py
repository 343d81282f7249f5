"""
Tests for sending messages, opening conversations and reading history.

Run with: pytest tests/test_messaging.py -v
"""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from friendchat.application.commands.friends import RemoveFriendCommand, RemoveFriendHandler
from friendchat.application.commands.messaging import (
    EnsureConversationCommand,
    EnsureConversationHandler,
    SendMessageCommand,
    SendMessageHandler,
)
from friendchat.application.queries.conversations import (
    CanMessageHandler,
    CanMessageQuery,
    GetMessagesHandler,
    GetMessagesQuery,
)
from friendchat.application.services import MessagingPermissions
from friendchat.domain.exceptions import (
    AccessDeniedError,
    DomainValidationError,
    EmptyMessageError,
    EntityNotFoundError,
)
from friendchat.domain.value_objects.account_id import AccountId
from friendchat.domain.value_objects.conversation_id import ConversationId
from friendchat.infrastructure.memory import (
    InMemoryConversationRepository,
    InMemoryDocumentStore,
    InMemoryMessageRepository,
)


@pytest.fixture()
def permissions(accounts, messages):
    return MessagingPermissions(accounts, messages)


@pytest.fixture()
def send(conversations, messages):
    handler = SendMessageHandler(conversations, messages)

    def _send(sender: AccountId, other: AccountId, text: str):
        conversation_id = ConversationId.for_pair(sender, other)
        return asyncio.run(handler.execute(SendMessageCommand(sender, conversation_id, text)))

    return _send


@pytest.fixture()
def ensure(conversations, permissions):
    handler = EnsureConversationHandler(conversations, permissions)

    def _ensure(account: AccountId, other: AccountId):
        return asyncio.run(handler.execute(EnsureConversationCommand(account, other)))

    return _ensure


@pytest.fixture()
def can_message(permissions):
    handler = CanMessageHandler(permissions)

    def _can(sender: AccountId, recipient: AccountId) -> bool:
        return asyncio.run(handler.execute(CanMessageQuery(sender, recipient)))

    return _can


class TestSendMessage:
    def test_first_message_creates_conversation_with_summary(self, store, seed, send):
        alice, bob = seed("alice", "bob")

        message = send(alice, bob, "  hello  ")

        conversation = store.conversations[ConversationId.for_pair(alice, bob)]
        assert message.text == "hello"
        assert message.receiver_id == bob
        assert message.sent_at is not None
        assert conversation.last_message == "hello"
        assert conversation.last_message_at == message.sent_at

    def test_later_messages_update_summary_only(self, store, seed, send):
        alice, bob = seed("alice", "bob")
        send(alice, bob, "hello")
        reply = send(bob, alice, "hi there")

        conversation = store.conversations[ConversationId.for_pair(alice, bob)]
        assert conversation.last_message == "hi there"
        assert conversation.last_message_at == reply.sent_at
        assert set(conversation.participants) == {alice, bob}
        assert len(store.messages[conversation.id]) == 2

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    def test_blank_text_rejected_before_any_write(self, store, seed, send, text):
        alice, bob = seed("alice", "bob")

        with pytest.raises(EmptyMessageError):
            send(alice, bob, text)

        assert not store.conversations
        assert not any(store.messages.values())

    def test_outsider_cannot_send(self, store, seed, conversations, messages):
        alice, bob, carol = seed("alice", "bob", "carol")
        handler = SendMessageHandler(conversations, messages)

        with pytest.raises(AccessDeniedError):
            asyncio.run(
                handler.execute(
                    SendMessageCommand(carol, ConversationId.for_pair(alice, bob), "psst")
                )
            )

    def test_too_long_rejected(self, seed, conversations, messages):
        alice, bob = seed("alice", "bob")
        handler = SendMessageHandler(conversations, messages, max_length=5)

        with pytest.raises(DomainValidationError):
            asyncio.run(
                handler.execute(
                    SendMessageCommand(alice, ConversationId.for_pair(alice, bob), "too long")
                )
            )

    def test_sent_at_never_goes_backwards(self):
        start = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        ticks = iter([start, start - timedelta(seconds=30), start + timedelta(seconds=5)])
        store = InMemoryDocumentStore(clock=lambda: next(ticks))
        handler = SendMessageHandler(
            InMemoryConversationRepository(store), InMemoryMessageRepository(store)
        )
        alice, bob = AccountId("alice"), AccountId("bob")
        conversation_id = ConversationId.for_pair(alice, bob)

        async def three_messages():
            sent = []
            for text in ("one", "two", "three"):
                sent.append(
                    await handler.execute(SendMessageCommand(alice, conversation_id, text))
                )
            return sent

        sent = asyncio.run(three_messages())

        stamps = [message.sent_at for message in sent]
        assert stamps == [start, start, start + timedelta(seconds=5)]
        assert store.conversations[conversation_id].last_message == "three"

    def test_concurrent_first_messages_share_one_conversation(self, store, seed, conversations, messages):
        alice, bob = seed("alice", "bob")
        handler = SendMessageHandler(conversations, messages)
        conversation_id = ConversationId.for_pair(alice, bob)

        async def both_at_once():
            return await asyncio.gather(
                handler.execute(SendMessageCommand(alice, conversation_id, "hi bob")),
                handler.execute(SendMessageCommand(bob, conversation_id, "hi alice")),
            )

        first, second = asyncio.run(both_at_once())

        assert list(store.conversations) == [conversation_id]
        latest = max((first, second), key=lambda message: message.sent_at)
        assert store.conversations[conversation_id].last_message_at == latest.sent_at
        assert len(store.messages[conversation_id]) == 2


class TestEnsureConversation:
    """First contact goes through the access policy."""

    def test_private_sender_to_public_recipient(self, store, seed, ensure):
        alice, bob = seed("alice", "bob", private={"alice"})

        conversation = ensure(alice, bob)

        assert conversation.id == ConversationId.for_pair(alice, bob)
        assert not conversation.has_messages
        assert conversation.id in store.conversations

    def test_public_sender_to_private_recipient_denied_until_contacted(self, store, seed, ensure, send):
        alice, bob = seed("alice", "bob", private={"alice"})

        with pytest.raises(AccessDeniedError):
            ensure(bob, alice)
        assert not store.conversations

        send(alice, bob, "hi, it's alice")
        assert ensure(bob, alice).id == ConversationId.for_pair(alice, bob)

    def test_existing_conversation_is_not_regated(self, store, seed, ensure, send):
        alice, bob = seed("alice", "bob")
        send(bob, alice, "hello")
        store.accounts[alice].is_private = True

        assert ensure(bob, alice).last_message == "hello"

    def test_two_public_accounts(self, seed, ensure):
        alice, bob = seed("alice", "bob")
        assert ensure(alice, bob).id == ensure(bob, alice).id

    def test_self_conversation_rejected(self, seed, ensure):
        alice = seed("alice")
        with pytest.raises(DomainValidationError):
            ensure(alice, alice)

    def test_unknown_account(self, seed, ensure):
        alice = seed("alice")
        with pytest.raises(EntityNotFoundError):
            ensure(alice, AccountId("ghost"))


class TestCanMessageQuery:
    def test_scenarios(self, seed, befriend, can_message, send):
        alice, bob, carol, org = seed(
            "alice", "bob", "carol", "org", private={"alice", "carol"}, organizers={"org"}
        )
        assert can_message(alice, bob)
        assert not can_message(bob, alice)
        assert can_message(org, alice)
        assert can_message(alice, org)
        assert not can_message(alice, carol)
        assert not can_message(alice, alice)

        befriend(alice, carol)
        assert can_message(alice, carol)

        send(alice, bob, "hey")
        assert can_message(bob, alice)

    def test_remove_friend_between_public_accounts_keeps_messaging(
        self, store, seed, befriend, accounts, can_message, send
    ):
        alice, bob = seed("alice", "bob")
        befriend(alice, bob)
        send(alice, bob, "hi friend")

        asyncio.run(RemoveFriendHandler(accounts).execute(RemoveFriendCommand(alice, bob)))

        assert can_message(alice, bob)
        assert can_message(bob, alice)
        assert send(bob, alice, "still here").text == "still here"


class TestGetMessages:
    def test_participants_read_latest_page_oldest_first(self, seed, send, messages):
        alice, bob = seed("alice", "bob")
        for index in range(5):
            send(alice, bob, f"message {index}")
        handler = GetMessagesHandler(messages)
        conversation_id = ConversationId.for_pair(alice, bob)

        page = asyncio.run(handler.execute(GetMessagesQuery(bob, conversation_id, limit=3)))

        assert [message.text for message in page] == ["message 2", "message 3", "message 4"]

    def test_outsider_denied(self, seed, messages):
        alice, bob, carol = seed("alice", "bob", "carol")
        handler = GetMessagesHandler(messages)

        with pytest.raises(AccessDeniedError):
            asyncio.run(
                handler.execute(GetMessagesQuery(carol, ConversationId.for_pair(alice, bob)))
            )
