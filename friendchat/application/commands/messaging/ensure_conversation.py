"""
Ensure Conversation Command.

Opens the conversation between two accounts before its first message.
A brand-new conversation must pass the access policy; an existing one is
returned as is.
"""

import logging
from dataclasses import dataclass

from friendchat.application.common.interfaces import Command, CommandHandler
from friendchat.application.services.messaging_permissions import MessagingPermissions
from friendchat.domain.entities.conversation import Conversation
from friendchat.domain.exceptions import AccessDeniedError, DomainValidationError
from friendchat.domain.ports.repositories import ConversationRepository
from friendchat.domain.value_objects.account_id import AccountId
from friendchat.domain.value_objects.conversation_id import ConversationId

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnsureConversationCommand(Command[Conversation]):
    account_id: AccountId
    other_id: AccountId


class EnsureConversationHandler(CommandHandler[Conversation]):
    def __init__(
        self,
        conversation_repository: ConversationRepository,
        permissions: MessagingPermissions,
    ):
        self._conversations = conversation_repository
        self._permissions = permissions

    async def execute(self, command: EnsureConversationCommand) -> Conversation:
        if command.account_id == command.other_id:
            raise DomainValidationError("Cannot start a conversation with yourself.")

        conversation_id = ConversationId.for_pair(command.account_id, command.other_id)
        existing = await self._conversations.get(conversation_id)
        if existing:
            return existing

        if not await self._permissions.check(command.account_id, command.other_id):
            logger.info(
                f"[Messaging] {command.account_id.value} may not open a conversation "
                f"with {command.other_id.value}"
            )
            raise AccessDeniedError("You cannot message this user.")

        conversation = await self._conversations.create(
            Conversation.start(command.account_id, command.other_id)
        )
        logger.info(f"[Messaging] Conversation {conversation.id.value} opened")
        return conversation
