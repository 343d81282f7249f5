"""
Friends API Router - friend requests and the friends list.

Every mutation answers with the resulting status of the pair as seen by
the caller ("sent", "friends", "none").
"""

from logging import getLogger

from dishka.integrations.fastapi import FromDishka, inject
from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from friendchat.application.commands.friends import (
    AcceptFriendRequestCommand,
    AcceptFriendRequestHandler,
    DeclineFriendRequestCommand,
    DeclineFriendRequestHandler,
    RemoveFriendCommand,
    RemoveFriendHandler,
    SendFriendRequestCommand,
    SendFriendRequestHandler,
)
from friendchat.application.dto import FriendsOverviewDTO, ProfileDTO
from friendchat.application.queries.friends import ListFriendsHandler, ListFriendsQuery
from friendchat.domain.entities.account import FriendRequestStatus
from friendchat.presentation.dependencies.auth import (
    AuthAccount,
    get_current_account,
    parse_account_id,
)

logger = getLogger(__name__)


class FriendshipResponse(BaseModel):
    account_id: str
    status: FriendRequestStatus


router = APIRouter(prefix="/friends", tags=["friends"])


@router.get("", response_model=FriendsOverviewDTO, status_code=status.HTTP_200_OK)
@inject
async def list_friends(
    handler: FromDishka[ListFriendsHandler],
    current_account: AuthAccount = Depends(get_current_account),
):
    overview = await handler.execute(ListFriendsQuery(current_account.account_id))
    return FriendsOverviewDTO(
        friends=[ProfileDTO.from_domain(account) for account in overview.friends],
        received=[ProfileDTO.from_domain(account) for account in overview.received],
        sent=[ProfileDTO.from_domain(account) for account in overview.sent],
    )


@router.post(
    "/requests/{account_id}",
    response_model=FriendshipResponse,
    status_code=status.HTTP_200_OK,
)
@inject
async def send_friend_request(
    account_id: str,
    handler: FromDishka[SendFriendRequestHandler],
    current_account: AuthAccount = Depends(get_current_account),
):
    target_id = parse_account_id(account_id)
    result = await handler.execute(
        SendFriendRequestCommand(sender_id=current_account.account_id, target_id=target_id)
    )
    return FriendshipResponse(account_id=target_id.value, status=result)


@router.post(
    "/requests/{account_id}/accept",
    response_model=FriendshipResponse,
    status_code=status.HTTP_200_OK,
)
@inject
async def accept_friend_request(
    account_id: str,
    handler: FromDishka[AcceptFriendRequestHandler],
    current_account: AuthAccount = Depends(get_current_account),
):
    requester_id = parse_account_id(account_id)
    result = await handler.execute(
        AcceptFriendRequestCommand(
            account_id=current_account.account_id, requester_id=requester_id
        )
    )
    return FriendshipResponse(account_id=requester_id.value, status=result)


@router.post(
    "/requests/{account_id}/decline",
    response_model=FriendshipResponse,
    status_code=status.HTTP_200_OK,
)
@inject
async def decline_friend_request(
    account_id: str,
    handler: FromDishka[DeclineFriendRequestHandler],
    current_account: AuthAccount = Depends(get_current_account),
):
    requester_id = parse_account_id(account_id)
    result = await handler.execute(
        DeclineFriendRequestCommand(
            account_id=current_account.account_id, requester_id=requester_id
        )
    )
    return FriendshipResponse(account_id=requester_id.value, status=result)


@router.delete(
    "/{account_id}",
    response_model=FriendshipResponse,
    status_code=status.HTTP_200_OK,
)
@inject
async def remove_friend(
    account_id: str,
    handler: FromDishka[RemoveFriendHandler],
    current_account: AuthAccount = Depends(get_current_account),
):
    """Unfriend. The conversation stays; its visibility is re-evaluated."""
    friend_id = parse_account_id(account_id)
    result = await handler.execute(
        RemoveFriendCommand(account_id=current_account.account_id, friend_id=friend_id)
    )
    return FriendshipResponse(account_id=friend_id.value, status=result)
