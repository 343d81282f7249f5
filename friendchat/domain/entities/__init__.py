"""
ENTITIES - Business objects with identity

Each entity:
- Has a unique identifier
- Has behavior (methods)
- Pure Python dataclasses (no ORM, no Pydantic)
"""

from friendchat.domain.entities.account import Account, FriendRequestStatus
from friendchat.domain.entities.conversation import Conversation
from friendchat.domain.entities.message import Message

__all__ = [
    "Account",
    "FriendRequestStatus",
    "Conversation",
    "Message",
]
