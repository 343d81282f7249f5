"""Conversation and message DTOs for API request/response."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from friendchat.application.services.conversation_view import (
    ConversationSummary,
    ConversationView,
)
from friendchat.domain.entities.message import Message
from friendchat.domain.exceptions import PartialSyncFailure


class MessageDTO(BaseModel):
    """DTO for message data returned to frontend."""

    id: str
    conversation_id: str
    sender_id: str
    receiver_id: str
    text: str
    sent_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, message: Message) -> "MessageDTO":
        return cls(
            id=message.id.value,
            conversation_id=message.conversation_id.value,
            sender_id=message.sender_id.value,
            receiver_id=message.receiver_id.value,
            text=message.text,
            sent_at=message.sent_at,
        )


class ConversationSummaryDTO(BaseModel):
    id: str
    other_id: str
    other_username: str
    other_photo_url: Optional[str] = None
    last_message: str = ""
    last_message_at: Optional[datetime] = None
    is_friend: bool
    persisted: bool

    @classmethod
    def from_domain(cls, summary: ConversationSummary) -> "ConversationSummaryDTO":
        return cls(
            id=summary.id.value,
            other_id=summary.other.id.value,
            other_username=summary.other.username,
            other_photo_url=summary.other.photo_url,
            last_message=summary.last_message,
            last_message_at=summary.last_message_at,
            is_friend=summary.is_friend,
            persisted=summary.persisted,
        )


class SyncFailureDTO(BaseModel):
    conversation_id: str
    other_account_id: str
    reason: str

    @classmethod
    def from_domain(cls, failure: PartialSyncFailure) -> "SyncFailureDTO":
        return cls(
            conversation_id=failure.conversation_id,
            other_account_id=failure.other_account_id,
            reason=failure.reason,
        )


class ConversationViewDTO(BaseModel):
    conversations: list[ConversationSummaryDTO]
    partial: bool = False
    failures: list[SyncFailureDTO] = []
    generation: Optional[int] = None

    @classmethod
    def from_domain(
        cls, view: ConversationView, generation: Optional[int] = None
    ) -> "ConversationViewDTO":
        return cls(
            conversations=[
                ConversationSummaryDTO.from_domain(summary)
                for summary in view.conversations
            ],
            partial=view.is_partial,
            failures=[SyncFailureDTO.from_domain(failure) for failure in view.failures],
            generation=generation,
        )
