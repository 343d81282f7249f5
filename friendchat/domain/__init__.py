"""
DOMAIN LAYER - Friend graph, messaging rules and their data

This layer contains:
- Entities: Business objects with identity (Account, Conversation, Message)
- Value Objects: Immutable types (AccountId, ConversationId, MessageId)
- Ports: Interfaces that infrastructure implements (repositories, change feed)
- Services: Pure domain logic (access policy, friend graph transitions)
- Exceptions: Domain-specific errors

RULES:
1. NO framework imports (no FastAPI, Prisma, Redis, Pydantic, etc.)
2. NO I/O operations
3. Only depends on Python stdlib
"""
