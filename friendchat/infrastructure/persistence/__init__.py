"""
Persistence Layer - Database implementations.

Contains Prisma repository implementations for domain ports.
"""

from friendchat.infrastructure.persistence.prisma_account_repository import (
    PrismaAccountRepository,
)
from friendchat.infrastructure.persistence.prisma_conversation_repository import (
    PrismaConversationRepository,
)
from friendchat.infrastructure.persistence.prisma_message_repository import (
    PrismaMessageRepository,
)

__all__ = [
    "PrismaAccountRepository",
    "PrismaConversationRepository",
    "PrismaMessageRepository",
]
