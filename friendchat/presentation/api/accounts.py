"""
Accounts API Router - sign-in registration, settings, search.

Flow:
  HTTP Request → Router → Command/Query → Handler → Repository → Store
"""

from logging import getLogger
from typing import Optional

from dishka.integrations.fastapi import FromDishka, inject
from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from friendchat.application.commands.accounts import (
    RegisterAccountCommand,
    RegisterAccountHandler,
    UpdateAccountSettingsCommand,
    UpdateAccountSettingsHandler,
)
from friendchat.application.dto import AccountDTO, ProfileDTO, SearchHitDTO
from friendchat.application.queries.accounts import (
    GetAccountHandler,
    GetAccountQuery,
    SearchAccountsHandler,
    SearchAccountsQuery,
)
from friendchat.application.queries.conversations import (
    CanMessageHandler,
    CanMessageQuery,
)
from friendchat.application.queries.friends import (
    GetFriendStatusHandler,
    GetFriendStatusQuery,
)
from friendchat.config.settings import Config
from friendchat.domain.entities.account import FriendRequestStatus
from friendchat.presentation.dependencies.auth import (
    AuthAccount,
    get_current_account,
    parse_account_id,
)

logger = getLogger(__name__)


# ==================== REQUEST/RESPONSE MODELS ====================


class RegisterAccountRequest(BaseModel):
    """Profile sent on sign-in; token claims fill in whatever is missing."""

    username: Optional[str] = None
    photo_url: Optional[str] = None


class UpdateSettingsRequest(BaseModel):
    is_private: Optional[bool] = None
    username: Optional[str] = None
    photo_url: Optional[str] = None


class FriendStatusResponse(BaseModel):
    account_id: str
    status: FriendRequestStatus


class CanMessageResponse(BaseModel):
    account_id: str
    can_message: bool


# ==================== ROUTER ====================

router = APIRouter(prefix="/accounts", tags=["accounts"])


# ==================== ENDPOINTS ====================


@router.post("/me", response_model=AccountDTO, status_code=status.HTTP_200_OK)
@inject
async def register_account(
    request: RegisterAccountRequest,
    handler: FromDishka[RegisterAccountHandler],
    current_account: AuthAccount = Depends(get_current_account),
):
    """Create the account on first sign-in, refresh the profile afterwards."""
    account = await handler.execute(
        RegisterAccountCommand(
            account_id=current_account.account_id,
            username=request.username or current_account.name,
            photo_url=request.photo_url or current_account.picture,
        )
    )
    return AccountDTO.from_domain(account)


@router.get("/me", response_model=AccountDTO, status_code=status.HTTP_200_OK)
@inject
async def get_me(
    handler: FromDishka[GetAccountHandler],
    current_account: AuthAccount = Depends(get_current_account),
):
    account = await handler.execute(GetAccountQuery(current_account.account_id))
    return AccountDTO.from_domain(account)


@router.patch("/me", response_model=AccountDTO, status_code=status.HTTP_200_OK)
@inject
async def update_settings(
    request: UpdateSettingsRequest,
    handler: FromDishka[UpdateAccountSettingsHandler],
    current_account: AuthAccount = Depends(get_current_account),
):
    """Privacy toggle and profile edits."""
    account = await handler.execute(
        UpdateAccountSettingsCommand(
            account_id=current_account.account_id,
            is_private=request.is_private,
            username=request.username,
            photo_url=request.photo_url,
        )
    )
    return AccountDTO.from_domain(account)


@router.get(
    "/search", response_model=list[SearchHitDTO], status_code=status.HTTP_200_OK
)
@inject
async def search_accounts(
    handler: FromDishka[SearchAccountsHandler],
    current_account: AuthAccount = Depends(get_current_account),
    q: str = "",
    limit: int = Query(Config.SEARCH_LIMIT, ge=1, le=Config.SEARCH_LIMIT),
):
    hits = await handler.execute(
        SearchAccountsQuery(account_id=current_account.account_id, text=q, limit=limit)
    )
    return [
        SearchHitDTO(
            profile=ProfileDTO.from_domain(hit.account),
            status=hit.status,
            can_message=hit.can_message,
        )
        for hit in hits
    ]


@router.get(
    "/{account_id}/friend-status",
    response_model=FriendStatusResponse,
    status_code=status.HTTP_200_OK,
)
@inject
async def get_friend_status(
    account_id: str,
    handler: FromDishka[GetFriendStatusHandler],
    current_account: AuthAccount = Depends(get_current_account),
):
    other_id = parse_account_id(account_id)
    friend_status = await handler.execute(
        GetFriendStatusQuery(account_id=current_account.account_id, other_id=other_id)
    )
    return FriendStatusResponse(account_id=other_id.value, status=friend_status)


@router.get(
    "/{account_id}/can-message",
    response_model=CanMessageResponse,
    status_code=status.HTTP_200_OK,
)
@inject
async def can_message(
    account_id: str,
    handler: FromDishka[CanMessageHandler],
    current_account: AuthAccount = Depends(get_current_account),
):
    other_id = parse_account_id(account_id)
    allowed = await handler.execute(
        CanMessageQuery(sender_id=current_account.account_id, recipient_id=other_id)
    )
    return CanMessageResponse(account_id=other_id.value, can_message=allowed)
