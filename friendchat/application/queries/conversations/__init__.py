"""Conversation-related queries."""

from friendchat.application.queries.conversations.list_conversations import (
    ListConversationsQuery,
    ListConversationsHandler,
)
from friendchat.application.queries.conversations.get_messages import (
    GetMessagesQuery,
    GetMessagesHandler,
)
from friendchat.application.queries.conversations.can_message import (
    CanMessageQuery,
    CanMessageHandler,
)

__all__ = [
    "ListConversationsQuery",
    "ListConversationsHandler",
    "GetMessagesQuery",
    "GetMessagesHandler",
    "CanMessageQuery",
    "CanMessageHandler",
]
