"""
Access Policy - decides whether one account may message another.

can_message() evaluates these rules in order, first match wins:

1. Either account is an organizer            → allowed
2. The accounts are (mutual) friends          → allowed
3. Sender is private, recipient is public     → allowed
4. Recipient is private                       → allowed only if the recipient
                                                already sent a message in this
                                                conversation
5. Both accounts are public                   → allowed

Rule 4 is not symmetric: the private side gates first contact, the other
side may only reply once contacted.

is_visible_without_friendship() answers a different question: whether an
EXISTING conversation with a non-friend stays in the viewer's list. It is
evaluated from stored history so that tightening privacy later does not
hide a conversation that already happened.
"""

from typing import Iterable

from friendchat.domain.entities.account import Account
from friendchat.domain.entities.message import Message


def _organizer_involved(first: Account, second: Account) -> bool:
    return first.is_organizer or second.is_organizer


def history_required(sender: Account, recipient: Account) -> bool:
    """True when can_message() will reach rule 4 and needs conversation history."""
    if _organizer_involved(sender, recipient):
        return False
    if sender.is_friends_with(recipient):
        return False
    return recipient.is_private


def can_message(
    sender: Account, recipient: Account, history: Iterable[Message] = ()
) -> bool:
    if _organizer_involved(sender, recipient):
        return True

    if sender.is_friends_with(recipient):
        return True

    if sender.is_private and not recipient.is_private:
        return True

    if recipient.is_private:
        # The recipient must have spoken first
        return any(message.sender_id == recipient.id for message in history)

    return True


def visibility_requires_history(viewer: Account, other: Account) -> bool:
    """Both private and no organizer: visibility depends on who spoke."""
    if _organizer_involved(viewer, other):
        return False
    return viewer.is_private and other.is_private


def is_visible_without_friendship(
    viewer: Account, other: Account, other_has_spoken: bool = False
) -> bool:
    if _organizer_involved(viewer, other):
        return True

    if viewer.is_private != other.is_private:
        return True

    if viewer.is_private and other.is_private:
        return other_has_spoken

    return True
