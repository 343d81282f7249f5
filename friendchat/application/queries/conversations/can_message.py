"""CanMessage Query - whether an account may open a conversation with another."""

from dataclasses import dataclass

from friendchat.application.common.interfaces import Query, QueryHandler
from friendchat.application.services.messaging_permissions import MessagingPermissions
from friendchat.domain.value_objects.account_id import AccountId


@dataclass(frozen=True)
class CanMessageQuery(Query[bool]):
    sender_id: AccountId
    recipient_id: AccountId


class CanMessageHandler(QueryHandler[bool]):
    def __init__(self, permissions: MessagingPermissions):
        self._permissions = permissions

    async def execute(self, query: CanMessageQuery) -> bool:
        return await self._permissions.check(query.sender_id, query.recipient_id)
