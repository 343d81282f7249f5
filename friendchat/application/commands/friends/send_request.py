"""Send Friend Request Command."""

from dataclasses import dataclass

from friendchat.application.commands.friends.pair_mutation import PairMutationHandler
from friendchat.application.common.interfaces import Command, CommandHandler
from friendchat.domain.entities.account import FriendRequestStatus
from friendchat.domain.services.friend_graph import plan_send_request
from friendchat.domain.value_objects.account_id import AccountId


@dataclass(frozen=True)
class SendFriendRequestCommand(Command[FriendRequestStatus]):
    sender_id: AccountId
    target_id: AccountId


class SendFriendRequestHandler(PairMutationHandler, CommandHandler[FriendRequestStatus]):
    async def execute(self, command: SendFriendRequestCommand) -> FriendRequestStatus:
        return await self._mutate(
            "send_request", command.sender_id, command.target_id, plan_send_request
        )
