"""
Send Message Command.

Appends a message and keeps the conversation summary current:
- the receiver is derived from the canonical conversation id
- blank text is rejected before touching the store
- the first message creates the conversation record; later messages only
  update last_message / last_message_at

Sending is not gated by the access policy. Callers open new conversations
through EnsureConversationCommand, which is; once a conversation exists,
both participants may keep sending.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from friendchat.application.common.interfaces import Command, CommandHandler
from friendchat.config.settings import Config
from friendchat.domain.entities.conversation import Conversation
from friendchat.domain.entities.message import Message
from friendchat.domain.exceptions import AccessDeniedError, DomainValidationError
from friendchat.domain.ports.repositories import (
    ConversationRepository,
    MessageRepository,
)
from friendchat.domain.value_objects.account_id import AccountId
from friendchat.domain.value_objects.conversation_id import ConversationId

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SendMessageCommand(Command[Message]):
    sender_id: AccountId
    conversation_id: ConversationId
    text: str


class SendMessageHandler(CommandHandler[Message]):
    def __init__(
        self,
        conversation_repository: ConversationRepository,
        message_repository: MessageRepository,
        max_length: Optional[int] = None,
    ):
        self._conversations = conversation_repository
        self._messages = message_repository
        self._max_length = max_length or Config.MESSAGE_MAX_LENGTH

    async def execute(self, command: SendMessageCommand) -> Message:
        if command.sender_id not in command.conversation_id.participants:
            raise AccessDeniedError(
                f"{command.sender_id.value} is not a participant of this conversation."
            )

        message = Message.compose(command.conversation_id, command.sender_id, command.text)
        if len(message.text) > self._max_length:
            raise DomainValidationError(
                f"Message exceeds {self._max_length} characters."
            )

        stored = await self._messages.append(message)
        await self._update_summary(stored)
        logger.debug(
            f"[Messaging] {stored.sender_id.value} -> {stored.receiver_id.value} "
            f"in {stored.conversation_id.value}"
        )
        return stored

    async def _update_summary(self, message: Message) -> None:
        existing = await self._conversations.get(message.conversation_id)
        if existing is None:
            conversation = Conversation(
                id=message.conversation_id,
                participants=(message.sender_id, message.receiver_id),
                last_message=message.text,
                last_message_at=message.sent_at,
            )
            created = await self._conversations.create(conversation)
            if (
                created.last_message_at == message.sent_at
                and created.last_message == message.text
            ):
                return
            # Someone created the record first; fall through to a summary update

        await self._conversations.update_summary(
            message.conversation_id, message.text, message.sent_at
        )
