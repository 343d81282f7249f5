"""
REPOSITORY PORTS - Data persistence interfaces

Each repository port:
- Is an abstract base class (ABC)
- Defines methods the domain needs
- Does NOT specify implementation (Prisma, in-memory, etc.)

Infrastructure layer provides implementations.
"""

from friendchat.domain.ports.repositories.account_repository import AccountRepository
from friendchat.domain.ports.repositories.conversation_repository import (
    ConversationRepository,
)
from friendchat.domain.ports.repositories.message_repository import MessageRepository

__all__ = [
    "AccountRepository",
    "ConversationRepository",
    "MessageRepository",
]
