"""
Conversations API Router - conversation list, messages, live updates.

Guidelines:
- Receives handlers via Dependency Injection (Dishka)
- Thin layer: only handles HTTP concerns (request/response)
- Domain exceptions are mapped to status codes by the app's exception handlers

Flow:
  HTTP Request → Router → Command → Handler → Repository → Store
                                 ↓
  HTTP Response ← Router ← Result ←

The WebSocket at /conversations/live pushes the caller's conversation view
every time it changes (friend graph, privacy, new messages).
"""

from logging import getLogger
from typing import Optional

from dishka import AsyncContainer
from dishka.integrations.fastapi import FromDishka, inject
from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    WebSocket,
    WebSocketDisconnect,
    status,
)
from pydantic import BaseModel

from friendchat.application.commands.messaging import (
    EnsureConversationCommand,
    EnsureConversationHandler,
    SendMessageCommand,
    SendMessageHandler,
)
from friendchat.application.dto import ConversationViewDTO, MessageDTO
from friendchat.application.queries.conversations import (
    GetMessagesHandler,
    GetMessagesQuery,
    ListConversationsHandler,
    ListConversationsQuery,
)
from friendchat.application.services import (
    ConversationViewBuilder,
    LiveConversationFeed,
    ViewUpdate,
)
from friendchat.config.settings import Config
from friendchat.domain.ports.change_feed import ChangeFeed
from friendchat.presentation.dependencies.auth import (
    AuthAccount,
    decode_account_token,
    get_current_account,
    parse_account_id,
    parse_conversation_id,
)

logger = getLogger(__name__)


# ==================== REQUEST/RESPONSE MODELS ====================


class EnsureConversationRequest(BaseModel):
    """Open (or look up) the conversation with another account."""

    other_id: str


class EnsureConversationResponse(BaseModel):
    id: str
    last_message: str = ""
    last_message_at: Optional[str] = None


class SendMessageRequest(BaseModel):
    text: str


class MessagesResponse(BaseModel):
    conversation_id: str
    messages: list[MessageDTO]


# ==================== ROUTER ====================

router = APIRouter(prefix="/conversations", tags=["conversations"])


# ==================== ENDPOINTS ====================


@router.get("", response_model=ConversationViewDTO, status_code=status.HTTP_200_OK)
@inject
async def list_conversations(
    handler: FromDishka[ListConversationsHandler],
    current_account: AuthAccount = Depends(get_current_account),
):
    """
    Conversations the caller should currently see, newest first.

    `partial` is true when some entries could not be resolved; `failures`
    says which.
    """
    view = await handler.execute(ListConversationsQuery(current_account.account_id))
    return ConversationViewDTO.from_domain(view)


@router.post(
    "",
    response_model=EnsureConversationResponse,
    status_code=status.HTTP_200_OK,
)
@inject
async def ensure_conversation(
    request: EnsureConversationRequest,
    handler: FromDishka[EnsureConversationHandler],
    current_account: AuthAccount = Depends(get_current_account),
):
    """403 when the access policy does not allow a first contact."""
    conversation = await handler.execute(
        EnsureConversationCommand(
            account_id=current_account.account_id,
            other_id=parse_account_id(request.other_id),
        )
    )
    return EnsureConversationResponse(
        id=conversation.id.value,
        last_message=conversation.last_message,
        last_message_at=(
            conversation.last_message_at.isoformat()
            if conversation.last_message_at
            else None
        ),
    )


@router.get(
    "/{conversation_id}/messages",
    response_model=MessagesResponse,
    status_code=status.HTTP_200_OK,
)
@inject
async def get_messages(
    conversation_id: str,
    handler: FromDishka[GetMessagesHandler],
    current_account: AuthAccount = Depends(get_current_account),
    limit: int = Query(Config.MESSAGE_PAGE_LIMIT, ge=1, le=Config.MESSAGE_PAGE_LIMIT),
):
    parsed_id = parse_conversation_id(conversation_id)
    messages = await handler.execute(
        GetMessagesQuery(
            account_id=current_account.account_id,
            conversation_id=parsed_id,
            limit=limit,
        )
    )
    return MessagesResponse(
        conversation_id=parsed_id.value,
        messages=[MessageDTO.from_domain(message) for message in messages],
    )


@router.post(
    "/{conversation_id}/messages",
    response_model=MessageDTO,
    status_code=status.HTTP_201_CREATED,
)
@inject
async def send_message(
    conversation_id: str,
    request: SendMessageRequest,
    handler: FromDishka[SendMessageHandler],
    current_account: AuthAccount = Depends(get_current_account),
):
    message = await handler.execute(
        SendMessageCommand(
            sender_id=current_account.account_id,
            conversation_id=parse_conversation_id(conversation_id),
            text=request.text,
        )
    )
    return MessageDTO.from_domain(message)


# ==================== LIVE UPDATES ====================


@router.websocket("/live")
async def live_conversations(websocket: WebSocket, token: str = ""):
    """
    Push the conversation view on every change.

    Each frame is a ConversationViewDTO carrying its generation number.
    Frames only ever move forward: a slower, older recomputation is dropped.
    """
    try:
        current_account = decode_account_token(token)
    except HTTPException as e:
        logger.info(f"[Live] Rejected connection: {e.detail}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    container: AsyncContainer = websocket.app.state.dishka_container

    async def deliver(update: ViewUpdate) -> None:
        payload = ConversationViewDTO.from_domain(update.view, update.generation)
        await websocket.send_json(payload.model_dump(mode="json"))

    async with container() as request_container:
        builder = await request_container.get(ConversationViewBuilder)
        change_feed = await request_container.get(ChangeFeed)

        async with LiveConversationFeed(
            current_account.account_id, builder, change_feed, deliver
        ):
            try:
                while True:
                    # Client frames are only keep-alives
                    await websocket.receive_text()
            except WebSocketDisconnect:
                logger.info(f"[Live] {current_account.account_id.value} disconnected")
