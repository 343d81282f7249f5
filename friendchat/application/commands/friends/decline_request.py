"""Decline Friend Request Command."""

from dataclasses import dataclass

from friendchat.application.commands.friends.pair_mutation import PairMutationHandler
from friendchat.application.common.interfaces import Command, CommandHandler
from friendchat.domain.entities.account import FriendRequestStatus
from friendchat.domain.services.friend_graph import plan_decline_request
from friendchat.domain.value_objects.account_id import AccountId


@dataclass(frozen=True)
class DeclineFriendRequestCommand(Command[FriendRequestStatus]):
    account_id: AccountId
    requester_id: AccountId


class DeclineFriendRequestHandler(
    PairMutationHandler, CommandHandler[FriendRequestStatus]
):
    async def execute(self, command: DeclineFriendRequestCommand) -> FriendRequestStatus:
        return await self._mutate(
            "decline_request", command.account_id, command.requester_id, plan_decline_request
        )
