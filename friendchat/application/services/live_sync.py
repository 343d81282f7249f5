"""
Live Sync - keeps one account's conversation view current.

Subscribes to the viewer's account record and to every conversation the
viewer participates in. Each notification starts a recomputation tagged
with the next generation number; recomputations may overlap. A result is
delivered only if no newer generation has been delivered already, so the
consumer always ends on the latest view ("last result wins").

A failed recomputation is logged and skipped; the consumer keeps the last
good view. close() releases each subscription exactly once and cancels
in-flight recomputations without surfacing errors.

Usage:
    async with LiveConversationFeed(account_id, builder, change_feed, deliver) as feed:
        ...  # deliver(ViewUpdate) is awaited for every fresh view
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from friendchat.application.services.conversation_view import (
    ConversationView,
    ConversationViewBuilder,
)
from friendchat.domain.ports.change_feed import ChangeFeed, Subscription
from friendchat.domain.value_objects.account_id import AccountId

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ViewUpdate:
    generation: int
    view: ConversationView


Deliver = Callable[[ViewUpdate], Awaitable[None]]


class LiveConversationFeed:
    def __init__(
        self,
        account_id: AccountId,
        builder: ConversationViewBuilder,
        change_feed: ChangeFeed,
        deliver: Deliver,
    ):
        self._account_id = account_id
        self._builder = builder
        self._change_feed = change_feed
        self._deliver = deliver

        self._generation = 0
        self._delivered_generation = 0
        self._tasks: set[asyncio.Task] = set()
        self._subscriptions: list[Subscription] = []
        self._delivery_lock = asyncio.Lock()
        self._started = False
        self._closed = False
        self.last_view: Optional[ConversationView] = None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def delivered_generation(self) -> int:
        return self._delivered_generation

    async def start(self) -> None:
        if self._started:
            raise RuntimeError("Live feed already started")
        self._started = True
        try:
            self._subscriptions.append(
                await self._change_feed.subscribe_account(self._account_id, self.notify)
            )
            self._subscriptions.append(
                await self._change_feed.subscribe_conversations(
                    self._account_id, self.notify
                )
            )
        except Exception:
            await self.close()
            raise
        logger.info(f"[LiveSync] Watching conversations of {self._account_id.value}")
        self.notify()

    def notify(self) -> None:
        """Change callback: schedule a recomputation with the next generation."""
        if self._closed:
            return
        self._generation += 1
        task = asyncio.get_running_loop().create_task(
            self._recompute(self._generation)
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _recompute(self, generation: int) -> None:
        try:
            view = await self._builder.build(self._account_id)
        except Exception as e:
            logger.warning(
                f"[LiveSync] Recomputation {generation} for {self._account_id.value} "
                f"failed, keeping the last view: {e}"
            )
            return

        async with self._delivery_lock:
            if self._closed or generation <= self._delivered_generation:
                logger.debug(
                    f"[LiveSync] Dropping stale view {generation} "
                    f"(delivered {self._delivered_generation})"
                )
                return
            self._delivered_generation = generation
            self.last_view = view
            try:
                await self._deliver(ViewUpdate(generation=generation, view=view))
            except Exception as e:
                logger.warning(f"[LiveSync] Delivering view {generation} failed: {e}")

    async def settle(self) -> None:
        """Wait until every scheduled recomputation has finished."""
        current = asyncio.current_task()
        while True:
            pending = [task for task in self._tasks if task is not current]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True

        subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in subscriptions:
            try:
                await subscription.close()
            except Exception as e:
                logger.warning(f"[LiveSync] Releasing subscription failed: {e}")

        current = asyncio.current_task()
        pending = [task for task in self._tasks if task is not current]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        logger.info(f"[LiveSync] Stopped watching {self._account_id.value}")

    async def __aenter__(self) -> "LiveConversationFeed":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
