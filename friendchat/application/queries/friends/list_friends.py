"""
ListFriends Query - friends plus pending requests in both directions.

Ids that do not resolve to an account are skipped; each list is sorted by
username.
"""

from dataclasses import dataclass, field

from friendchat.application.common.interfaces import Query, QueryHandler
from friendchat.domain.entities.account import Account
from friendchat.domain.exceptions import EntityNotFoundError
from friendchat.domain.ports.repositories import AccountRepository
from friendchat.domain.value_objects.account_id import AccountId


@dataclass
class FriendsOverview:
    friends: list[Account] = field(default_factory=list)
    received: list[Account] = field(default_factory=list)
    sent: list[Account] = field(default_factory=list)


@dataclass(frozen=True)
class ListFriendsQuery(Query[FriendsOverview]):
    account_id: AccountId


def _by_username(account: Account) -> tuple[str, str]:
    return account.username.lower(), account.id.value


class ListFriendsHandler(QueryHandler[FriendsOverview]):
    def __init__(self, account_repository: AccountRepository):
        self._accounts = account_repository

    async def execute(self, query: ListFriendsQuery) -> FriendsOverview:
        account = await self._accounts.get(query.account_id)
        if account is None:
            raise EntityNotFoundError(f"Account {query.account_id.value} not found.")

        wanted = account.friends | account.sent_requests | account.received_requests
        wanted.discard(account.id)
        found = await self._accounts.get_many(wanted)

        def resolve(ids: set[AccountId]) -> list[Account]:
            return sorted(
                (found[account_id] for account_id in ids if account_id in found),
                key=_by_username,
            )

        return FriendsOverview(
            friends=resolve(account.friends),
            received=resolve(account.received_requests - account.friends),
            sent=resolve(account.sent_requests - account.friends),
        )
