"""Messaging commands."""

from .ensure_conversation import EnsureConversationCommand, EnsureConversationHandler
from .send_message import SendMessageCommand, SendMessageHandler

__all__ = [
    "EnsureConversationCommand",
    "EnsureConversationHandler",
    "SendMessageCommand",
    "SendMessageHandler",
]
