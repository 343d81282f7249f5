"""
VALUE OBJECTS - Immutable domain types

Each value object:
- Is compared by value
- Is immutable (frozen dataclass)
- Validates itself on creation
"""

from friendchat.domain.value_objects.account_id import AccountId
from friendchat.domain.value_objects.conversation_id import ConversationId
from friendchat.domain.value_objects.message_id import MessageId
from friendchat.domain.value_objects.account_patch import AccountPatch

__all__ = [
    "AccountId",
    "ConversationId",
    "MessageId",
    "AccountPatch",
]
