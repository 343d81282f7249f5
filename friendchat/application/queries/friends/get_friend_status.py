"""
GetFriendStatus Query.

Read-only: a half-committed pair is logged but not repaired here. The next
friend graph command on the pair does that.
"""

import asyncio
import logging
from dataclasses import dataclass

from friendchat.application.common.interfaces import Query, QueryHandler
from friendchat.domain.entities.account import FriendRequestStatus
from friendchat.domain.exceptions import EntityNotFoundError
from friendchat.domain.ports.repositories import AccountRepository
from friendchat.domain.services.friend_graph import (
    derive_friend_status,
    find_inconsistencies,
)
from friendchat.domain.value_objects.account_id import AccountId

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GetFriendStatusQuery(Query[FriendRequestStatus]):
    account_id: AccountId
    other_id: AccountId


class GetFriendStatusHandler(QueryHandler[FriendRequestStatus]):
    def __init__(self, account_repository: AccountRepository):
        self._accounts = account_repository

    async def execute(self, query: GetFriendStatusQuery) -> FriendRequestStatus:
        if query.account_id == query.other_id:
            return FriendRequestStatus.SELF

        viewer, other = await asyncio.gather(
            self._accounts.get(query.account_id), self._accounts.get(query.other_id)
        )
        if viewer is None:
            raise EntityNotFoundError(f"Account {query.account_id.value} not found.")
        if other is None:
            raise EntityNotFoundError(f"Account {query.other_id.value} not found.")

        for issue in find_inconsistencies(viewer, other):
            logger.warning(f"[FriendGraph] {issue}")
        return derive_friend_status(viewer, other)
