"""List Conversations Query."""

from dataclasses import dataclass

from friendchat.application.common.interfaces import Query, QueryHandler
from friendchat.application.services.conversation_view import (
    ConversationView,
    ConversationViewBuilder,
)
from friendchat.domain.value_objects.account_id import AccountId


@dataclass(frozen=True)
class ListConversationsQuery(Query[ConversationView]):
    account_id: AccountId


class ListConversationsHandler(QueryHandler[ConversationView]):
    def __init__(self, builder: ConversationViewBuilder):
        self._builder = builder

    async def execute(self, query: ListConversationsQuery) -> ConversationView:
        return await self._builder.build(query.account_id)
