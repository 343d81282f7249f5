"""Get Account Query."""

from dataclasses import dataclass

from friendchat.application.common.interfaces import Query, QueryHandler
from friendchat.domain.entities.account import Account
from friendchat.domain.exceptions import EntityNotFoundError
from friendchat.domain.ports.repositories import AccountRepository
from friendchat.domain.value_objects.account_id import AccountId


@dataclass(frozen=True)
class GetAccountQuery(Query[Account]):
    account_id: AccountId


class GetAccountHandler(QueryHandler[Account]):
    def __init__(self, account_repository: AccountRepository):
        self._accounts = account_repository

    async def execute(self, query: GetAccountQuery) -> Account:
        account = await self._accounts.get(query.account_id)
        if account is None:
            raise EntityNotFoundError(f"Account {query.account_id.value} not found.")
        return account
