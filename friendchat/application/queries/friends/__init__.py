"""Friend graph queries."""

from friendchat.application.queries.friends.list_friends import (
    FriendsOverview,
    ListFriendsQuery,
    ListFriendsHandler,
)
from friendchat.application.queries.friends.get_friend_status import (
    GetFriendStatusQuery,
    GetFriendStatusHandler,
)

__all__ = [
    "FriendsOverview",
    "ListFriendsQuery",
    "ListFriendsHandler",
    "GetFriendStatusQuery",
    "GetFriendStatusHandler",
]
