"""
GetMessages Query - ordered history of one conversation.

Only the two participants may read it. A conversation without a stored
record (a friend nobody has written to yet) simply has no messages.
"""

from dataclasses import dataclass

from friendchat.application.common.interfaces import Query, QueryHandler
from friendchat.config.settings import Config
from friendchat.domain.entities.message import Message
from friendchat.domain.exceptions import AccessDeniedError
from friendchat.domain.ports.repositories import MessageRepository
from friendchat.domain.value_objects.account_id import AccountId
from friendchat.domain.value_objects.conversation_id import ConversationId


@dataclass(frozen=True)
class GetMessagesQuery(Query[list[Message]]):
    account_id: AccountId
    conversation_id: ConversationId
    limit: int = Config.MESSAGE_PAGE_LIMIT


class GetMessagesHandler(QueryHandler[list[Message]]):
    def __init__(self, message_repository: MessageRepository):
        self._messages = message_repository

    async def execute(self, query: GetMessagesQuery) -> list[Message]:
        """
        Returns:
            The latest `limit` messages, oldest first

        Raises:
            AccessDeniedError: If the account is not a participant
        """
        if query.account_id not in query.conversation_id.participants:
            raise AccessDeniedError("You don't have access to this conversation")

        return await self._messages.query(query.conversation_id, limit=query.limit)
