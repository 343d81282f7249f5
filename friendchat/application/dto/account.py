"""Account DTOs for API request/response."""

from typing import Optional

from pydantic import BaseModel

from friendchat.domain.entities.account import Account, FriendRequestStatus


class ProfileDTO(BaseModel):
    """Public profile of another account."""

    id: str
    username: str
    photo_url: Optional[str] = None
    is_private: bool = False
    is_organizer: bool = False

    @classmethod
    def from_domain(cls, account: Account) -> "ProfileDTO":
        return cls(
            id=account.id.value,
            username=account.username,
            photo_url=account.photo_url,
            is_private=account.is_private,
            is_organizer=account.is_organizer,
        )


class AccountDTO(ProfileDTO):
    """The signed-in account, including its own relations."""

    friends: list[str] = []
    sent_requests: list[str] = []
    received_requests: list[str] = []

    @classmethod
    def from_domain(cls, account: Account) -> "AccountDTO":
        return cls(
            id=account.id.value,
            username=account.username,
            photo_url=account.photo_url,
            is_private=account.is_private,
            is_organizer=account.is_organizer,
            friends=sorted(friend.value for friend in account.friends),
            sent_requests=sorted(other.value for other in account.sent_requests),
            received_requests=sorted(other.value for other in account.received_requests),
        )


class FriendsOverviewDTO(BaseModel):
    friends: list[ProfileDTO]
    received: list[ProfileDTO]
    sent: list[ProfileDTO]


class SearchHitDTO(BaseModel):
    profile: ProfileDTO
    status: FriendRequestStatus
    can_message: bool
