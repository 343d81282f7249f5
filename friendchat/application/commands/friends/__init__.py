"""Friend graph commands."""

from .send_request import SendFriendRequestCommand, SendFriendRequestHandler
from .accept_request import AcceptFriendRequestCommand, AcceptFriendRequestHandler
from .decline_request import DeclineFriendRequestCommand, DeclineFriendRequestHandler
from .remove_friend import RemoveFriendCommand, RemoveFriendHandler

__all__ = [
    "SendFriendRequestCommand",
    "SendFriendRequestHandler",
    "AcceptFriendRequestCommand",
    "AcceptFriendRequestHandler",
    "DeclineFriendRequestCommand",
    "DeclineFriendRequestHandler",
    "RemoveFriendCommand",
    "RemoveFriendHandler",
]
