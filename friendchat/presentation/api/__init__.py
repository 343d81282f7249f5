"""
API Routers - FastAPI endpoint definitions.
"""

from friendchat.presentation.api.accounts import router as accounts_router
from friendchat.presentation.api.conversations import router as conversations_router
from friendchat.presentation.api.friends import router as friends_router

__all__ = [
    "accounts_router",
    "conversations_router",
    "friends_router",
]
