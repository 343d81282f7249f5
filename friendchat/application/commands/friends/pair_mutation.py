"""
Shared flow for friend graph commands.

Each command:
1. Loads both accounts (EntityNotFoundError if either is missing)
2. Repairs a half-committed pair left by an earlier interrupted operation
3. Plans its transition on the repaired snapshots (InvalidStateError if it
   does not apply; an empty plan when the end state already holds)
4. Applies the planned single-account writes in order
5. Re-reads the pair and repairs it again, so two operations racing on
   the same pair (A and B asking each other at once) settle into one state

There is no transaction across the two accounts; step 2 of a later
operation is what heals a crash between the two writes of step 4.
"""

import asyncio
import logging
from typing import Callable

from friendchat.domain.entities.account import Account, FriendRequestStatus
from friendchat.domain.exceptions import EntityNotFoundError, InvalidStateError
from friendchat.domain.ports.repositories import AccountRepository
from friendchat.domain.services.friend_graph import (
    Transition,
    derive_friend_status,
    find_inconsistencies,
    plan_reconciliation,
)
from friendchat.domain.value_objects.account_id import AccountId

logger = logging.getLogger(__name__)

Planner = Callable[[Account, Account], Transition]


class PairMutationHandler:
    def __init__(self, account_repository: AccountRepository):
        self._accounts = account_repository

    async def _load_pair(
        self, actor_id: AccountId, other_id: AccountId
    ) -> tuple[Account, Account]:
        actor, other = await asyncio.gather(
            self._accounts.get(actor_id), self._accounts.get(other_id)
        )
        if actor is None:
            raise EntityNotFoundError(f"Account {actor_id.value} not found.")
        if other is None:
            raise EntityNotFoundError(f"Account {other_id.value} not found.")
        return actor, other

    async def _commit(
        self, actor: Account, other: Account, transition: Transition
    ) -> tuple[Account, Account]:
        latest = {actor.id: actor, other.id: other}
        for write in transition.writes:
            latest[write.account_id] = await self._accounts.apply(
                write.account_id, write.patch
            )
        return latest[actor.id], latest[other.id]

    async def _reconcile(
        self, actor: Account, other: Account
    ) -> tuple[Account, Account]:
        issues = find_inconsistencies(actor, other)
        if not issues:
            return actor, other
        for issue in issues:
            logger.warning(f"[FriendGraph] {issue}; reconciling")
        return await self._commit(actor, other, plan_reconciliation(actor, other))

    async def _mutate(
        self, name: str, actor_id: AccountId, other_id: AccountId, planner: Planner
    ) -> FriendRequestStatus:
        if actor_id == other_id:
            raise InvalidStateError("An account cannot befriend itself.")

        actor, other = await self._load_pair(actor_id, other_id)
        actor, other = await self._reconcile(actor, other)

        transition = planner(actor, other)
        if transition.is_noop:
            logger.debug(
                f"[FriendGraph] {name} {actor_id.value} -> {other_id.value}: already applied"
            )
            return derive_friend_status(actor, other)

        await self._commit(actor, other, transition)
        # A concurrent operation on the same pair may have committed meanwhile;
        # settle whatever both left behind (e.g. crossing requests -> friends)
        actor, other = await self._reconcile(*await self._load_pair(actor_id, other_id))
        status = derive_friend_status(actor, other)
        logger.info(
            f"[FriendGraph] {name} {actor_id.value} -> {other_id.value}: now {status.value}"
        )
        return status
