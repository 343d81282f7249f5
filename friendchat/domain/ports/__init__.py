"""
PORTS - Interfaces that infrastructure implements

A "port" is an abstract interface that defines WHAT the domain needs
from the document store, without specifying HOW it's done.

- repositories/   → Account, conversation and message persistence
- change_feed.py  → Change notifications for live views
"""

from friendchat.domain.ports.change_feed import ChangeCallback, ChangeFeed, Subscription

__all__ = [
    "ChangeCallback",
    "ChangeFeed",
    "Subscription",
]
