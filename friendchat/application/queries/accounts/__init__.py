"""Account queries."""

from friendchat.application.queries.accounts.search_accounts import (
    AccountSearchHit,
    SearchAccountsQuery,
    SearchAccountsHandler,
)
from friendchat.application.queries.accounts.get_account import (
    GetAccountQuery,
    GetAccountHandler,
)

__all__ = [
    "AccountSearchHit",
    "SearchAccountsQuery",
    "SearchAccountsHandler",
    "GetAccountQuery",
    "GetAccountHandler",
]
