"""In-memory implementations of the store ports."""

from friendchat.infrastructure.memory.store import (
    InMemoryAccountRepository,
    InMemoryConversationRepository,
    InMemoryDocumentStore,
    InMemoryMessageRepository,
)

__all__ = [
    "InMemoryAccountRepository",
    "InMemoryConversationRepository",
    "InMemoryDocumentStore",
    "InMemoryMessageRepository",
]
