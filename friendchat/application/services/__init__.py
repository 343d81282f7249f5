"""
Application services - orchestration shared by several use cases.

- messaging_permissions → the one place that loads accounts/history for the access policy
- conversation_view     → materialized, sorted conversation list for one account
- live_sync             → recomputes and redelivers the view on store changes
"""

from friendchat.application.services.messaging_permissions import MessagingPermissions
from friendchat.application.services.conversation_view import (
    ConversationSummary,
    ConversationView,
    ConversationViewBuilder,
    ParticipantProfile,
)
from friendchat.application.services.live_sync import LiveConversationFeed, ViewUpdate

__all__ = [
    "MessagingPermissions",
    "ConversationSummary",
    "ConversationView",
    "ConversationViewBuilder",
    "ParticipantProfile",
    "LiveConversationFeed",
    "ViewUpdate",
]
