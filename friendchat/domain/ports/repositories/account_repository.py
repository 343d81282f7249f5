"""
Account Repository Port - Interface for account persistence.
Implementations:
- friendchat/infrastructure/persistence/prisma_account_repository.py
- friendchat/infrastructure/memory/store.py
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from friendchat.domain.entities.account import Account
from friendchat.domain.value_objects.account_id import AccountId
from friendchat.domain.value_objects.account_patch import AccountPatch


class AccountRepository(ABC):
    @abstractmethod
    async def get(self, account_id: AccountId) -> Optional[Account]: ...

    @abstractmethod
    async def get_many(
        self, account_ids: Iterable[AccountId]
    ) -> dict[AccountId, Account]: ...

    @abstractmethod
    async def save(self, account: Account) -> Account:
        """Create the record, or merge profile fields into an existing one."""
        ...

    @abstractmethod
    async def apply(self, account_id: AccountId, patch: AccountPatch) -> Account:
        """
        Merge a partial update into one record, atomically for that record.

        Raises EntityNotFoundError when the account does not exist.
        """
        ...

    @abstractmethod
    async def search(self, text: str, limit: int) -> list[Account]: ...
