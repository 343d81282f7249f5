"""
DTOs - Data Transfer Objects

DTOs for transferring data between layers:
- account.py → AccountDTO, ProfileDTO, FriendsOverviewDTO, SearchHitDTO
- conversation.py → ConversationSummaryDTO, ConversationViewDTO, MessageDTO

Note: These are different from domain entities.
DTOs are for API input/output, entities are for business logic.
"""

from friendchat.application.dto.account import (
    AccountDTO,
    FriendsOverviewDTO,
    ProfileDTO,
    SearchHitDTO,
)
from friendchat.application.dto.conversation import (
    ConversationSummaryDTO,
    ConversationViewDTO,
    MessageDTO,
    SyncFailureDTO,
)

__all__ = [
    "AccountDTO",
    "FriendsOverviewDTO",
    "ProfileDTO",
    "SearchHitDTO",
    "ConversationSummaryDTO",
    "ConversationViewDTO",
    "MessageDTO",
    "SyncFailureDTO",
]
