"""
Infrastructure Layer - Technical implementations of domain ports.

This layer contains:
- persistence/: Database implementations (Prisma repositories)
- realtime/: Redis client, pub/sub change feed, notifying repository decorators
- memory/: In-memory store implementing every port (local runs and tests)

Nothing is imported here: the Prisma client only exists after
`prisma generate`, so its adapters are imported where they are wired.
"""
