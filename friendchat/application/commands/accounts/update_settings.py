"""Update Account Settings Command - privacy flag and profile fields."""

from dataclasses import dataclass
from typing import Optional

from friendchat.application.common.interfaces import Command, CommandHandler
from friendchat.domain.entities.account import Account
from friendchat.domain.exceptions import EntityNotFoundError
from friendchat.domain.ports.repositories import AccountRepository
from friendchat.domain.value_objects.account_id import AccountId
from friendchat.domain.value_objects.account_patch import AccountPatch


@dataclass(frozen=True)
class UpdateAccountSettingsCommand(Command[Account]):
    account_id: AccountId
    is_private: Optional[bool] = None
    username: Optional[str] = None
    photo_url: Optional[str] = None


class UpdateAccountSettingsHandler(CommandHandler[Account]):
    def __init__(self, account_repository: AccountRepository):
        self._accounts = account_repository

    async def execute(self, command: UpdateAccountSettingsCommand) -> Account:
        values = {
            name: value
            for name, value in (
                ("is_private", command.is_private),
                ("username", command.username),
                ("photo_url", command.photo_url),
            )
            if value is not None
        }
        if not values:
            account = await self._accounts.get(command.account_id)
            if account is None:
                raise EntityNotFoundError(f"Account {command.account_id.value} not found.")
            return account

        return await self._accounts.apply(command.account_id, AccountPatch().setting(**values))
