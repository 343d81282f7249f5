"""
Prisma Conversation Repository Implementation.

Mapping:
- Prisma model fields: id, participants, last_message, last_message_at
- Domain entity: Conversation with ConversationId / AccountId value objects

create() is insert-if-absent: two participants sending their first message
at the same time both end up with the one record that won the insert.
update_summary() is a single conditional UPDATE, so an older message can
never overwrite a newer summary.
"""

import logging
from datetime import datetime
from typing import Optional

from prisma import Prisma
from prisma.errors import UniqueViolationError
from prisma.models import Conversation as PrismaConversation

from friendchat.domain.entities.conversation import Conversation
from friendchat.domain.ports.repositories import ConversationRepository
from friendchat.domain.value_objects.account_id import AccountId
from friendchat.domain.value_objects.conversation_id import ConversationId

logger = logging.getLogger(__name__)


class PrismaConversationRepository(ConversationRepository):
    _prisma: Prisma

    def __init__(self, prisma: Prisma):
        self._prisma = prisma

    def _to_entity(self, record: PrismaConversation) -> Conversation:
        """Map Prisma record to domain entity."""
        conversation_id = ConversationId(record.id)
        return Conversation(
            id=conversation_id,
            participants=conversation_id.participants,
            last_message=record.last_message or "",
            last_message_at=record.last_message_at,
        )

    async def get(self, conversation_id: ConversationId) -> Optional[Conversation]:
        record = await self._prisma.conversation.find_unique(
            where={"id": conversation_id.value}
        )
        return self._to_entity(record) if record else None

    async def list_by_participant(self, account_id: AccountId) -> list[Conversation]:
        records = await self._prisma.conversation.find_many(
            where={"participants": {"has": account_id.value}},
        )
        conversations = []
        for record in records:
            try:
                conversations.append(self._to_entity(record))
            except ValueError as e:
                logger.warning(f"[PrismaConversation] Skipping record {record.id}: {e}")
        return conversations

    async def create(self, conversation: Conversation) -> Conversation:
        try:
            record = await self._prisma.conversation.create(
                data={
                    "id": conversation.id.value,
                    "participants": [
                        participant.value for participant in conversation.id.participants
                    ],
                    "last_message": conversation.last_message,
                    "last_message_at": conversation.last_message_at,
                }
            )
        except UniqueViolationError:
            record = await self._prisma.conversation.find_unique(
                where={"id": conversation.id.value}
            )
            if record is None:
                raise
        return self._to_entity(record)

    async def update_summary(
        self, conversation_id: ConversationId, text: str, sent_at: datetime
    ) -> Optional[Conversation]:
        await self._prisma.conversation.update_many(
            where={
                "id": conversation_id.value,
                "OR": [
                    {"last_message_at": None},
                    {"last_message_at": {"lte": sent_at}},
                ],
            },
            data={"last_message": text, "last_message_at": sent_at},
        )
        return await self.get(conversation_id)
