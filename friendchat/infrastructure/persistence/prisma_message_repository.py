"""
Prisma Message Repository Implementation.

Prisma Message Model (from prisma/schema.prisma):
    model Message {
        id              String   @id @default(uuid())
        conversation_id String
        sender_id       String
        receiver_id     String
        text            String
        sent_at         DateTime @default(now())
    }

sent_at is assigned here, not by the caller. Appends to one conversation
are serialized with a transaction-scoped advisory lock keyed on the
conversation id, and a new message never gets an earlier sent_at than
the conversation's latest one, even if the database clock steps back.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from prisma import Prisma
from prisma.models import Message as PrismaMessage

from friendchat.domain.entities.message import Message
from friendchat.domain.ports.repositories.message_repository import MessageRepository
from friendchat.domain.value_objects.account_id import AccountId
from friendchat.domain.value_objects.conversation_id import ConversationId
from friendchat.domain.value_objects.message_id import MessageId

logger = logging.getLogger(__name__)


class PrismaMessageRepository(MessageRepository):
    """
    Prisma implementation of MessageRepository.

    Handles persistence of Message entities to PostgreSQL via Prisma.
    """

    _prisma: Prisma

    def __init__(self, prisma: Prisma):
        self._prisma = prisma

    def _to_entity(self, record: PrismaMessage) -> Message:
        return Message(
            id=MessageId(record.id),
            conversation_id=ConversationId(record.conversation_id),
            sender_id=AccountId(record.sender_id),
            receiver_id=AccountId(record.receiver_id),
            text=record.text,
            sent_at=record.sent_at,
        )

    async def append(self, message: Message) -> Message:
        async with self._prisma.tx() as tx:
            await tx.query_raw(
                "SELECT pg_advisory_xact_lock(hashtext($1))",
                message.conversation_id.value,
            )
            latest = await tx.message.find_first(
                where={"conversation_id": message.conversation_id.value},
                order={"sent_at": "desc"},
            )
            sent_at = datetime.now(timezone.utc)
            if latest and latest.sent_at > sent_at:
                sent_at = latest.sent_at

            record = await tx.message.create(
                data={
                    "id": message.id.value,
                    "conversation_id": message.conversation_id.value,
                    "sender_id": message.sender_id.value,
                    "receiver_id": message.receiver_id.value,
                    "text": message.text,
                    "sent_at": sent_at,
                }
            )
        return self._to_entity(record)

    async def query(
        self,
        conversation_id: ConversationId,
        sender_id: Optional[AccountId] = None,
        limit: Optional[int] = None,
    ) -> list[Message]:
        if limit is not None and limit <= 0:
            return []

        where = {"conversation_id": conversation_id.value}
        if sender_id is not None:
            where["sender_id"] = sender_id.value

        if limit is None:
            records = await self._prisma.message.find_many(
                where=where, order={"sent_at": "asc"}
            )
            return [self._to_entity(record) for record in records]

        records = await self._prisma.message.find_many(
            where=where,
            order={"sent_at": "desc"},
            take=limit,
        )
        records.reverse()  # Now oldest first
        return [self._to_entity(record) for record in records]
