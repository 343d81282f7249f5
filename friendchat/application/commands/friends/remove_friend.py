"""
Remove Friend Command.

The conversation between the two accounts is kept; whether it stays in
either view is decided again by the conversation view's visibility rule.
"""

from dataclasses import dataclass

from friendchat.application.commands.friends.pair_mutation import PairMutationHandler
from friendchat.application.common.interfaces import Command, CommandHandler
from friendchat.domain.entities.account import FriendRequestStatus
from friendchat.domain.services.friend_graph import plan_remove_friend
from friendchat.domain.value_objects.account_id import AccountId


@dataclass(frozen=True)
class RemoveFriendCommand(Command[FriendRequestStatus]):
    account_id: AccountId
    friend_id: AccountId


class RemoveFriendHandler(PairMutationHandler, CommandHandler[FriendRequestStatus]):
    async def execute(self, command: RemoveFriendCommand) -> FriendRequestStatus:
        return await self._mutate(
            "remove_friend", command.account_id, command.friend_id, plan_remove_friend
        )
