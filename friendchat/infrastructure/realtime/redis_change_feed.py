"""
Redis Change Feed - ChangeFeed over Redis pub/sub.

Channels:
- "{prefix}:account:{account_id}"        account record changed
- "{prefix}:conversations:{account_id}"  a conversation of that account changed

Payloads carry nothing; subscribers re-read the store when notified. Each
subscription owns one PubSub connection and one listener task. No socket
timeout is set on the client: a listener may legitimately wait for hours.
"""

import asyncio
import logging
from typing import Optional

from redis.asyncio import Redis
from redis.asyncio.client import PubSub

from friendchat.config.settings import Config
from friendchat.domain.entities.conversation import Conversation
from friendchat.domain.ports.change_feed import ChangeCallback, ChangeFeed, Subscription
from friendchat.domain.value_objects.account_id import AccountId

logger = logging.getLogger(__name__)

CHANGED = "changed"


class RedisSubscription(Subscription):
    """
    One channel's listener.

    A lost connection does not end the subscription: the failure is logged,
    the callback fires so the consumer re-reads the store, and listen() is
    retried with backoff (redis-py reconnects and resubscribes on the next
    read). The first message after recovery fires the callback again, since
    anything published while disconnected was lost.
    """

    def __init__(
        self,
        channel: str,
        pubsub: PubSub,
        callback: ChangeCallback,
        retry_delay: Optional[float] = None,
        max_retry_delay: Optional[float] = None,
    ):
        self._channel = channel
        self._pubsub = pubsub
        self._callback = callback
        self._retry_delay = (
            Config.CHANGE_FEED_RETRY_DELAY if retry_delay is None else retry_delay
        )
        self._max_retry_delay = (
            Config.CHANGE_FEED_MAX_RETRY_DELAY if max_retry_delay is None else max_retry_delay
        )
        self._task: Optional[asyncio.Task] = None
        self.closed = False

    def start(self) -> None:
        self._task = asyncio.get_running_loop().create_task(self._listen())

    def _notify(self) -> None:
        try:
            self._callback()
        except Exception:
            logger.exception(f"[ChangeFeed] Subscriber on {self._channel} failed")

    async def _listen(self) -> None:
        delay = self._retry_delay
        recovering = False
        while not self.closed:
            try:
                async for message in self._pubsub.listen():
                    if recovering:
                        recovering = False
                        delay = self._retry_delay
                        logger.info(f"[ChangeFeed] Listener on {self._channel} recovered")
                        self._notify()
                        continue
                    if message.get("type") == "message":
                        self._notify()
            except Exception:
                if self.closed:
                    return
                logger.exception(
                    f"[ChangeFeed] Listener on {self._channel} lost its connection; "
                    f"retrying in {delay:.1f}s"
                )
                recovering = True
                self._notify()
                await asyncio.sleep(delay)
                delay = min(delay * 2, self._max_retry_delay)
            else:
                # listen() only returns once nothing is subscribed
                if not self.closed:
                    logger.warning(f"[ChangeFeed] Listener on {self._channel} stopped")
                return

    async def close(self) -> None:
        if self.closed:
            return
        self.closed = True

        if self._task is not None and self._task is not asyncio.current_task():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.warning(f"[ChangeFeed] Listener on {self._channel} ended with: {e}")

        try:
            await self._pubsub.unsubscribe(self._channel)
        finally:
            await self._pubsub.aclose()
        logger.debug(f"[ChangeFeed] Unsubscribed from {self._channel}")


class RedisChangeFeed(ChangeFeed):
    def __init__(self, redis: Redis, prefix: Optional[str] = None):
        self._redis = redis
        self._prefix = prefix or Config.CHANGE_FEED_PREFIX

    def account_channel(self, account_id: AccountId) -> str:
        return f"{self._prefix}:account:{account_id.value}"

    def conversations_channel(self, account_id: AccountId) -> str:
        return f"{self._prefix}:conversations:{account_id.value}"

    async def _subscribe(self, channel: str, callback: ChangeCallback) -> Subscription:
        pubsub = self._redis.pubsub()
        try:
            await pubsub.subscribe(channel)
        except Exception:
            await pubsub.aclose()
            raise
        subscription = RedisSubscription(channel, pubsub, callback)
        subscription.start()
        logger.debug(f"[ChangeFeed] Subscribed to {channel}")
        return subscription

    async def subscribe_account(
        self, account_id: AccountId, callback: ChangeCallback
    ) -> Subscription:
        return await self._subscribe(self.account_channel(account_id), callback)

    async def subscribe_conversations(
        self, participant_id: AccountId, callback: ChangeCallback
    ) -> Subscription:
        return await self._subscribe(self.conversations_channel(participant_id), callback)

    async def publish_account_changed(self, account_id: AccountId) -> None:
        await self._redis.publish(self.account_channel(account_id), CHANGED)

    async def publish_conversation_changed(self, conversation: Conversation) -> None:
        for participant in set(conversation.participants):
            await self._redis.publish(self.conversations_channel(participant), CHANGED)
