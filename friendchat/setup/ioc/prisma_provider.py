"""
Prisma + Redis storage provider.

- Prisma client and Redis client: Scope.APP, connected once, closed with
  the container
- change feed: Redis pub/sub, Scope.APP
- repositories: Scope.REQUEST; account and conversation repositories are
  wrapped so every write is published on the change feed
"""

from typing import AsyncIterable

from dishka import Provider, Scope, provide
from prisma import Prisma
from redis.asyncio import Redis

from friendchat.config.settings import Config
from friendchat.domain.ports.change_feed import ChangeFeed
from friendchat.domain.ports.repositories import (
    AccountRepository,
    ConversationRepository,
    MessageRepository,
)
from friendchat.infrastructure.persistence import (
    PrismaAccountRepository,
    PrismaConversationRepository,
    PrismaMessageRepository,
)
from friendchat.infrastructure.realtime import (
    NotifyingAccountRepository,
    NotifyingConversationRepository,
    RedisChangeFeed,
    close_redis_client,
    create_redis_client,
)


class PrismaStorageProvider(Provider):
    def __init__(self, settings: type[Config] = Config):
        super().__init__()
        self._settings = settings

    # ==================== DATABASE ====================

    @provide(scope=Scope.APP)
    async def get_prisma(self) -> AsyncIterable[Prisma]:
        """
        Provide Prisma client (singleton, app-scoped).

        - Scope.APP = created ONCE, shared across all requests
        - disconnected when the container closes
        """
        if self._settings.DATABASE_URL:
            prisma = Prisma(datasource={"url": self._settings.DATABASE_URL})
        else:
            prisma = Prisma()
        await prisma.connect()
        yield prisma
        await prisma.disconnect()

    # ==================== REDIS ====================

    @provide(scope=Scope.APP)
    async def get_redis(self) -> AsyncIterable[Redis]:
        client = await create_redis_client(self._settings.REDIS_URL)
        yield client
        await close_redis_client(client)

    @provide(scope=Scope.APP)
    def get_change_feed(self, redis: Redis) -> ChangeFeed:
        return RedisChangeFeed(redis, prefix=self._settings.CHANGE_FEED_PREFIX)

    # ==================== REPOSITORIES ====================

    @provide(scope=Scope.REQUEST)
    def get_account_repository(
        self, prisma: Prisma, change_feed: ChangeFeed
    ) -> AccountRepository:
        """
        Provide AccountRepository implementation.

        - Return type is ABSTRACT (AccountRepository)
        - Implementation is CONCRETE (PrismaAccountRepository behind the
          notifying decorator)
        """
        return NotifyingAccountRepository(PrismaAccountRepository(prisma), change_feed)

    @provide(scope=Scope.REQUEST)
    def get_conversation_repository(
        self, prisma: Prisma, change_feed: ChangeFeed
    ) -> ConversationRepository:
        return NotifyingConversationRepository(
            PrismaConversationRepository(prisma), change_feed
        )

    @provide(scope=Scope.REQUEST)
    def get_message_repository(self, prisma: Prisma) -> MessageRepository:
        return PrismaMessageRepository(prisma)
