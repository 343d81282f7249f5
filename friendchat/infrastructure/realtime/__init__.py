"""
Realtime Layer - change notifications.

- redis_client.py: async Redis client factory
- redis_change_feed.py: ChangeFeed over Redis pub/sub
- notifying_repositories.py: repository decorators that publish after writes
"""

from friendchat.infrastructure.realtime.redis_client import (
    close_redis_client,
    create_redis_client,
)
from friendchat.infrastructure.realtime.redis_change_feed import RedisChangeFeed
from friendchat.infrastructure.realtime.notifying_repositories import (
    NotifyingAccountRepository,
    NotifyingConversationRepository,
)

__all__ = [
    "close_redis_client",
    "create_redis_client",
    "RedisChangeFeed",
    "NotifyingAccountRepository",
    "NotifyingConversationRepository",
]
