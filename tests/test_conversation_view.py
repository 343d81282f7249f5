"""
Tests for building the conversation list of one account.

Run with: pytest tests/test_conversation_view.py -v
"""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from friendchat.application.services import ConversationViewBuilder, MessagingPermissions
from friendchat.application.services.conversation_view import (
    ConversationSummary,
    ParticipantProfile,
    sort_summaries,
)
from friendchat.domain.entities.conversation import Conversation
from friendchat.domain.entities.message import Message
from friendchat.domain.exceptions import EntityNotFoundError
from friendchat.domain.services.access_policy import can_message
from friendchat.domain.value_objects.account_id import AccountId
from friendchat.domain.value_objects.conversation_id import ConversationId
from friendchat.infrastructure.memory import InMemoryAccountRepository

NOW = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)


class FlakyAccountRepository(InMemoryAccountRepository):
    """Fails lookups of selected accounts, like a timed-out remote read."""

    def __init__(self, store, failing: set):
        super().__init__(store)
        self._failing = failing

    async def get(self, account_id):
        if account_id in self._failing:
            raise TimeoutError(f"lookup of {account_id.value} timed out")
        return await super().get(account_id)


def store_conversation(store, first, second, last_message="", at=None):
    conversation = Conversation(
        id=ConversationId.for_pair(first, second),
        participants=(first, second),
        last_message=last_message,
        last_message_at=at,
    )
    store.conversations[conversation.id] = conversation
    return conversation.id


def store_message(store, sender, receiver, text="hi"):
    message = Message.compose(ConversationId.for_pair(sender, receiver), sender, text)
    message.sent_at = NOW
    store.messages[message.conversation_id].append(message)


@pytest.fixture()
def build(accounts, conversations, messages):
    def _build(account_id, account_repository=None, concurrency=4):
        repository = account_repository or accounts
        builder = ConversationViewBuilder(
            repository,
            conversations,
            MessagingPermissions(repository, messages),
            concurrency=concurrency,
        )
        return asyncio.run(builder.build(account_id))

    return _build


def ids(view):
    return [summary.id.value for summary in view.conversations]


class TestCompleteness:
    def test_friend_without_history_gets_synthesized_entry(self, store, seed, befriend, build):
        alice, bob = seed("alice", "bob")
        befriend(alice, bob)

        view = build(alice)

        assert ids(view) == ["alice_bob"]
        summary = view.conversations[0]
        assert summary.persisted is False
        assert summary.is_friend is True
        assert summary.last_message == ""
        assert summary.last_message_at is None
        assert summary.other.username == "Bob"
        assert not store.conversations

    def test_own_friends_list_decides_entry_but_not_permission(self, store, seed, build):
        alice, bob = seed("alice", "bob", private={"bob"})
        # half of a friendship: only alice's record lists bob
        store.accounts[alice].friends.add(bob)

        view = build(alice)

        assert ids(view) == ["alice_bob"]
        assert view.conversations[0].is_friend is True
        assert not can_message(store.accounts[alice], store.accounts[bob])

    def test_stored_conversation_with_friend_listed_once(self, store, seed, befriend, build):
        alice, bob = seed("alice", "bob")
        befriend(alice, bob)
        store_conversation(store, alice, bob, "hello", NOW)

        view = build(alice)

        assert ids(view) == ["alice_bob"]
        assert view.conversations[0].persisted is True
        assert view.conversations[0].last_message == "hello"

    def test_other_party_profile_is_current(self, store, seed, build):
        alice, bob = seed("alice", "bob")
        store_conversation(store, alice, bob, "hello", NOW)
        store.accounts[bob].username = "Robert"

        view = build(alice)

        assert view.conversations[0].other == ParticipantProfile(bob, "Robert", None)

    def test_unknown_viewer(self, build):
        with pytest.raises(EntityNotFoundError):
            build(AccountId("ghost"))


class TestVisibility:
    def test_both_public_non_friends_visible(self, store, seed, build):
        alice, bob = seed("alice", "bob")
        store_conversation(store, alice, bob, "hello", NOW)

        assert ids(build(alice)) == ["alice_bob"]
        assert ids(build(bob)) == ["alice_bob"]

    def test_privacy_differs_visible_both_ways(self, store, seed, build):
        alice, bob = seed("alice", "bob", private={"alice"})
        store_conversation(store, alice, bob, "hello", NOW)

        assert ids(build(alice)) == ["alice_bob"]
        assert ids(build(bob)) == ["alice_bob"]

    def test_both_private_visible_only_to_the_one_who_was_written_to(self, store, seed, build):
        alice, bob = seed("alice", "bob", private={"alice", "bob"})
        store_conversation(store, alice, bob, "hello", NOW)
        store_message(store, alice, bob)

        assert ids(build(bob)) == ["alice_bob"]
        assert ids(build(alice)) == []

    def test_organizer_conversation_always_visible(self, store, seed, build):
        alice, org = seed("alice", "org", private={"alice", "org"}, organizers={"org"})
        store_conversation(store, alice, org, "welcome", NOW)

        assert ids(build(alice)) == ["alice_org"]

    def test_unfriended_public_conversation_stays(self, store, seed, befriend, build):
        alice, bob = seed("alice", "bob")
        store_conversation(store, alice, bob, "hello", NOW)
        befriend(alice, bob)
        store.accounts[alice].friends.clear()
        store.accounts[bob].friends.clear()

        view = build(alice)

        assert ids(view) == ["alice_bob"]
        assert view.conversations[0].is_friend is False


class TestOrdering:
    def test_newest_first_empty_last(self, store, seed, befriend, build):
        alice, bob, carol, dave, erin = seed("alice", "bob", "carol", "dave", "erin")
        store_conversation(store, alice, bob, "old", NOW - timedelta(hours=2))
        store_conversation(store, alice, carol, "new", NOW)
        befriend(alice, erin)
        befriend(alice, dave)

        assert ids(build(alice)) == ["alice_carol", "alice_bob", "alice_dave", "alice_erin"]

    def test_sort_summaries_puts_undated_last(self):
        def summary(other, at):
            other_id = AccountId(other)
            return ConversationSummary(
                id=ConversationId.for_pair(AccountId("alice"), other_id),
                other=ParticipantProfile(other_id, other),
                last_message="",
                last_message_at=at,
                is_friend=True,
                persisted=at is not None,
            )

        ordered = sort_summaries(
            [summary("bob", None), summary("carol", NOW), summary("dave", NOW + timedelta(1))]
        )

        assert [item.other.id.value for item in ordered] == ["dave", "carol", "bob"]


class TestPartialFailure:
    def test_failed_lookup_drops_only_that_entry(self, store, seed, befriend, build):
        alice, bob, carol = seed("alice", "bob", "carol")
        befriend(alice, bob)
        store_conversation(store, alice, carol, "hello", NOW)
        flaky = FlakyAccountRepository(store, failing={carol})

        view = build(alice, account_repository=flaky, concurrency=1)

        assert ids(view) == ["alice_bob"]
        assert view.is_partial
        assert [failure.other_account_id for failure in view.failures] == ["carol"]
        assert "timed out" in view.failures[0].reason

    def test_missing_other_account_is_a_partial_failure(self, store, seed, build):
        alice = seed("alice")
        store_conversation(store, alice, AccountId("ghost"), "boo", NOW)

        view = build(alice)

        assert ids(view) == []
        assert [failure.conversation_id for failure in view.failures] == ["alice_ghost"]
