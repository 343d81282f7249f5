"""Register Account Command - runs on every sign-in, creates the record the first time."""

from dataclasses import dataclass
from typing import Optional

from friendchat.application.common.interfaces import Command, CommandHandler
from friendchat.domain.entities.account import Account
from friendchat.domain.ports.repositories import AccountRepository
from friendchat.domain.value_objects.account_id import AccountId


@dataclass(frozen=True)
class RegisterAccountCommand(Command[Account]):
    account_id: AccountId
    username: Optional[str] = None
    photo_url: Optional[str] = None


class RegisterAccountHandler(CommandHandler[Account]):
    def __init__(self, account_repository: AccountRepository):
        self._accounts = account_repository

    async def execute(self, command: RegisterAccountCommand) -> Account:
        account = Account.create(
            command.account_id,
            username=command.username,
            photo_url=command.photo_url,
        )
        return await self._accounts.save(account)
