"""
Unit tests for the messaging access policy and conversation visibility.

Run with: pytest tests/test_access_policy.py -v
"""

import pytest

from friendchat.domain.entities.account import Account
from friendchat.domain.entities.message import Message
from friendchat.domain.services.access_policy import (
    can_message,
    history_required,
    is_visible_without_friendship,
    visibility_requires_history,
)
from friendchat.domain.value_objects.account_id import AccountId
from friendchat.domain.value_objects.conversation_id import ConversationId


def account(name, private=False, organizer=False, friends=()):
    return Account(
        id=AccountId(name),
        is_private=private,
        is_organizer=organizer,
        friends={AccountId(friend) for friend in friends},
    )


def message_from(sender: Account, recipient: Account) -> Message:
    return Message.compose(
        ConversationId.for_pair(sender.id, recipient.id), sender.id, "hi"
    )


class TestCanMessage:
    """First matching rule wins."""

    def test_both_public(self):
        alice, bob = account("alice"), account("bob")
        assert can_message(alice, bob)
        assert can_message(bob, alice)

    def test_private_sender_may_contact_public_recipient(self):
        alice, bob = account("alice", private=True), account("bob")
        assert can_message(alice, bob)

    def test_public_sender_needs_private_recipient_to_speak_first(self):
        alice, bob = account("alice", private=True), account("bob")
        assert not can_message(bob, alice)
        assert can_message(bob, alice, [message_from(alice, bob)])

    def test_own_messages_do_not_unlock_private_recipient(self):
        alice, bob = account("alice", private=True), account("bob")
        assert not can_message(bob, alice, [message_from(bob, alice)])

    def test_both_private_needs_recipient_history(self):
        alice = account("alice", private=True)
        bob = account("bob", private=True)
        assert not can_message(alice, bob)
        assert can_message(alice, bob, [message_from(bob, alice)])

    def test_asymmetry(self):
        private, public = account("alice", private=True), account("bob")
        assert can_message(private, public) != can_message(public, private)

    @pytest.mark.parametrize("sender_organizer", [True, False])
    def test_organizer_override(self, sender_organizer):
        sender = account("alice", private=True, organizer=sender_organizer)
        recipient = account("bob", private=True, organizer=not sender_organizer)
        assert can_message(sender, recipient)
        assert can_message(recipient, sender)

    def test_mutual_friends(self):
        alice = account("alice", private=True, friends=["bob"])
        bob = account("bob", private=True, friends=["alice"])
        assert can_message(alice, bob)
        assert can_message(bob, alice)

    def test_one_sided_friendship_is_not_friendship(self):
        alice = account("alice", friends=["bob"])
        bob = account("bob", private=True)
        assert not can_message(alice, bob)


class TestHistoryRequired:
    def test_only_when_recipient_private_and_nothing_else_applies(self):
        public, private = account("alice"), account("bob", private=True)
        assert history_required(public, private)
        assert not history_required(private, public)
        assert not history_required(account("carol"), public)

    def test_not_for_organizers_or_friends(self):
        organizer = account("alice", organizer=True)
        private = account("bob", private=True)
        assert not history_required(organizer, private)

        friend = account("carol", friends=["dave"])
        private_friend = account("dave", private=True, friends=["carol"])
        assert not history_required(friend, private_friend)


class TestVisibility:
    """Whether an existing conversation with a non-friend stays listed."""

    def test_both_public_visible(self):
        assert is_visible_without_friendship(account("alice"), account("bob"))

    def test_privacy_differs_visible(self):
        private, public = account("alice", private=True), account("bob")
        assert is_visible_without_friendship(private, public)
        assert is_visible_without_friendship(public, private)

    def test_both_private_depends_on_other_party_history(self):
        alice = account("alice", private=True)
        bob = account("bob", private=True)
        assert visibility_requires_history(alice, bob)
        assert not is_visible_without_friendship(alice, bob, other_has_spoken=False)
        assert is_visible_without_friendship(alice, bob, other_has_spoken=True)

    def test_organizer_always_visible(self):
        alice = account("alice", private=True, organizer=True)
        bob = account("bob", private=True)
        assert not visibility_requires_history(alice, bob)
        assert is_visible_without_friendship(bob, alice)
