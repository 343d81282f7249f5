"""
SearchAccounts Query - find people to befriend or message.

Each hit carries the friend status as seen by the searcher and whether the
searcher may open a conversation with them. The can-message checks run
concurrently, bounded like the conversation view's lookups; a failed check
is logged and reported as "cannot message" rather than failing the search.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from friendchat.application.common.interfaces import Query, QueryHandler
from friendchat.application.services.messaging_permissions import MessagingPermissions
from friendchat.config.settings import Config
from friendchat.domain.entities.account import Account, FriendRequestStatus
from friendchat.domain.exceptions import EntityNotFoundError
from friendchat.domain.ports.repositories import AccountRepository
from friendchat.domain.services.friend_graph import derive_friend_status
from friendchat.domain.value_objects.account_id import AccountId

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccountSearchHit:
    account: Account
    status: FriendRequestStatus
    can_message: bool


@dataclass(frozen=True)
class SearchAccountsQuery(Query[list[AccountSearchHit]]):
    account_id: AccountId
    text: str = ""
    limit: int = Config.SEARCH_LIMIT


class SearchAccountsHandler(QueryHandler[list[AccountSearchHit]]):
    def __init__(
        self,
        account_repository: AccountRepository,
        permissions: MessagingPermissions,
        concurrency: Optional[int] = None,
    ):
        self._accounts = account_repository
        self._permissions = permissions
        self._concurrency = max(1, concurrency or Config.VIEW_FETCH_CONCURRENCY)

    async def execute(self, query: SearchAccountsQuery) -> list[AccountSearchHit]:
        viewer = await self._accounts.get(query.account_id)
        if viewer is None:
            raise EntityNotFoundError(f"Account {query.account_id.value} not found.")

        # One extra so that excluding the viewer still fills the page
        matches = await self._accounts.search(query.text, query.limit + 1)
        others = [account for account in matches if account.id != viewer.id][: query.limit]

        semaphore = asyncio.Semaphore(self._concurrency)
        allowed = await asyncio.gather(
            *(self._can_message(viewer, other, semaphore) for other in others)
        )
        return [
            AccountSearchHit(
                account=other,
                status=derive_friend_status(viewer, other),
                can_message=can,
            )
            for other, can in zip(others, allowed)
        ]

    async def _can_message(
        self, viewer: Account, other: Account, semaphore: asyncio.Semaphore
    ) -> bool:
        try:
            async with semaphore:
                return await self._permissions.evaluate(viewer, other)
        except Exception as e:
            logger.warning(
                f"[Search] Can-message check {viewer.id.value} -> {other.id.value} failed: {e}"
            )
            return False
