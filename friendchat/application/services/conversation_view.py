"""
Conversation View - the conversations one account should currently see.

Construction:
1. Load the viewer's current account (friends, privacy, organizer flag).
2. Load every stored conversation the viewer participates in and resolve
   the other party's CURRENT account, not a denormalized copy.
3. Synthesize an empty, unpersisted conversation for each friend that has
   no stored record yet.
4. Keep a stored conversation with a non-friend only if it stays visible
   (see access_policy.is_visible_without_friendship); the both-private case
   checks stored history for a message from the other party.
5. One entry per conversation id.
6. Newest last_message_at first; conversations without messages last.

Per-conversation lookups run concurrently, bounded by a semaphore, and are
joined before sorting. A failed lookup drops that entry only: it is logged
and recorded as a PartialSyncFailure, and the rest of the view is returned.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union

from friendchat.application.services.messaging_permissions import MessagingPermissions
from friendchat.config.settings import Config
from friendchat.domain.entities.account import Account
from friendchat.domain.entities.conversation import Conversation
from friendchat.domain.exceptions import EntityNotFoundError, PartialSyncFailure
from friendchat.domain.ports.repositories import (
    AccountRepository,
    ConversationRepository,
)
from friendchat.domain.services.access_policy import (
    is_visible_without_friendship,
    visibility_requires_history,
)
from friendchat.domain.value_objects.account_id import AccountId
from friendchat.domain.value_objects.conversation_id import ConversationId

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ParticipantProfile:
    id: AccountId
    username: str
    photo_url: Optional[str] = None

    @classmethod
    def from_account(cls, account: Account) -> "ParticipantProfile":
        return cls(id=account.id, username=account.username, photo_url=account.photo_url)


@dataclass(frozen=True)
class ConversationSummary:
    id: ConversationId
    other: ParticipantProfile
    last_message: str
    last_message_at: Optional[datetime]
    is_friend: bool
    persisted: bool


@dataclass
class ConversationView:
    account_id: AccountId
    conversations: list[ConversationSummary]
    failures: list[PartialSyncFailure] = field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        return bool(self.failures)


@dataclass(frozen=True)
class _Candidate:
    conversation_id: ConversationId
    other_id: AccountId
    record: Optional[Conversation]


def sort_summaries(summaries: list[ConversationSummary]) -> list[ConversationSummary]:
    """Newest first; conversations without messages last, ordered by id."""
    dated = sorted(
        (summary for summary in summaries if summary.last_message_at is not None),
        key=lambda summary: summary.last_message_at,
        reverse=True,
    )
    undated = sorted(
        (summary for summary in summaries if summary.last_message_at is None),
        key=lambda summary: summary.id.value,
    )
    return dated + undated


class ConversationViewBuilder:
    def __init__(
        self,
        accounts: AccountRepository,
        conversations: ConversationRepository,
        permissions: MessagingPermissions,
        concurrency: Optional[int] = None,
    ):
        self._accounts = accounts
        self._conversations = conversations
        self._permissions = permissions
        self._concurrency = max(1, concurrency or Config.VIEW_FETCH_CONCURRENCY)

    async def build(self, account_id: AccountId) -> ConversationView:
        viewer = await self._accounts.get(account_id)
        if viewer is None:
            raise EntityNotFoundError(f"Account {account_id.value} not found.")

        records = await self._conversations.list_by_participant(account_id)
        candidates, failures = self._collect_candidates(viewer, records)

        semaphore = asyncio.Semaphore(self._concurrency)
        results = await asyncio.gather(
            *(self._resolve(viewer, candidate, semaphore) for candidate in candidates)
        )

        summaries = []
        for result in results:
            if isinstance(result, PartialSyncFailure):
                failures.append(result)
            elif result is not None:
                summaries.append(result)

        if failures:
            logger.warning(
                f"[ConversationView] View for {account_id.value} is partial: "
                f"{len(failures)} of {len(candidates)} conversation(s) dropped"
            )
        return ConversationView(
            account_id=account_id,
            conversations=sort_summaries(summaries),
            failures=failures,
        )

    def _collect_candidates(
        self, viewer: Account, records: list[Conversation]
    ) -> tuple[list[_Candidate], list[PartialSyncFailure]]:
        candidates: dict[ConversationId, _Candidate] = {}
        failures = []

        for record in records:
            try:
                other_id = record.other_participant(viewer.id)
            except ValueError as e:
                logger.warning(f"[ConversationView] Skipping malformed record: {e}")
                failures.append(
                    PartialSyncFailure(record.id.value, "", f"malformed record: {e}")
                )
                continue
            candidates.setdefault(record.id, _Candidate(record.id, other_id, record))

        for friend_id in viewer.friends:
            if friend_id == viewer.id:
                continue
            conversation_id = ConversationId.for_pair(viewer.id, friend_id)
            # An existing record wins; otherwise an empty one is synthesized later
            candidates.setdefault(
                conversation_id, _Candidate(conversation_id, friend_id, None)
            )

        return list(candidates.values()), failures

    async def _resolve(
        self, viewer: Account, candidate: _Candidate, semaphore: asyncio.Semaphore
    ) -> Union[ConversationSummary, PartialSyncFailure, None]:
        try:
            async with semaphore:
                return await self._summarize(viewer, candidate)
        except Exception as e:
            logger.warning(
                f"[ConversationView] Lookup for {candidate.conversation_id.value} "
                f"failed, dropping it from the view: {e}"
            )
            return PartialSyncFailure(
                conversation_id=candidate.conversation_id.value,
                other_account_id=candidate.other_id.value,
                reason=str(e) or type(e).__name__,
            )

    async def _summarize(
        self, viewer: Account, candidate: _Candidate
    ) -> Optional[ConversationSummary]:
        other = await self._accounts.get(candidate.other_id)
        if other is None:
            raise EntityNotFoundError(f"Account {candidate.other_id.value} not found.")

        # The viewer's own friends list decides the entry; can_message
        # separately requires the friendship to be mutual
        is_friend = viewer.lists_as_friend(other.id)
        if not is_friend:
            other_has_spoken = False
            if visibility_requires_history(viewer, other):
                other_has_spoken = await self._permissions.has_sent_message(
                    candidate.conversation_id, other.id
                )
            if not is_visible_without_friendship(viewer, other, other_has_spoken):
                return None

        record = candidate.record
        return ConversationSummary(
            id=candidate.conversation_id,
            other=ParticipantProfile.from_account(other),
            last_message=record.last_message if record else "",
            last_message_at=record.last_message_at if record else None,
            is_friend=is_friend,
            persisted=record is not None,
        )
