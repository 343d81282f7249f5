"""
Prisma Account Repository Implementation.

Relations (friends, sent_requests, received_requests) are PostgreSQL text
arrays. apply() is the only writer of those arrays: it locks the row inside
an interactive transaction, merges the patch in Python and writes the
result back, so concurrent patches to the same account never lose updates.
Patches to two different accounts are independent transactions.

Mapping:
- Prisma model fields: id, username, photo_url, is_private, is_organizer,
  friends, sent_requests, received_requests, created_at
- Domain entity: Account with AccountId value objects in its relation sets
"""

import logging
from typing import Iterable, Optional

from prisma import Prisma
from prisma.models import Account as PrismaAccount

from friendchat.domain.entities.account import Account
from friendchat.domain.exceptions import EntityNotFoundError
from friendchat.domain.ports.repositories import AccountRepository
from friendchat.domain.value_objects.account_id import AccountId
from friendchat.domain.value_objects.account_patch import (
    RELATION_FIELDS,
    AccountPatch,
)

logger = logging.getLogger(__name__)


class PrismaAccountRepository(AccountRepository):
    _prisma: Prisma

    def __init__(self, prisma: Prisma):
        self._prisma = prisma

    def _to_entity(self, record: PrismaAccount) -> Account:
        """Map Prisma record to domain entity."""
        return Account(
            id=AccountId(record.id),
            friends={AccountId(value) for value in record.friends},
            sent_requests={AccountId(value) for value in record.sent_requests},
            received_requests={AccountId(value) for value in record.received_requests},
            is_private=record.is_private,
            is_organizer=record.is_organizer,
            username=record.username,
            photo_url=record.photo_url,
            created_at=record.created_at,
        )

    async def get(self, account_id: AccountId) -> Optional[Account]:
        record = await self._prisma.account.find_unique(where={"id": account_id.value})
        return self._to_entity(record) if record else None

    async def get_many(
        self, account_ids: Iterable[AccountId]
    ) -> dict[AccountId, Account]:
        ids = sorted({account_id.value for account_id in account_ids})
        if not ids:
            return {}
        records = await self._prisma.account.find_many(where={"id": {"in": ids}})
        accounts = [self._to_entity(record) for record in records]
        return {account.id: account for account in accounts}

    async def save(self, account: Account) -> Account:
        """Create the record on first sign-in; later sign-ins refresh the profile."""
        record = await self._prisma.account.upsert(
            where={"id": account.id.value},
            data={
                "create": {
                    "id": account.id.value,
                    "username": account.username,
                    "photo_url": account.photo_url,
                    "is_private": account.is_private,
                    "is_organizer": account.is_organizer,
                    "friends": sorted(value.value for value in account.friends),
                    "sent_requests": sorted(value.value for value in account.sent_requests),
                    "received_requests": sorted(
                        value.value for value in account.received_requests
                    ),
                },
                "update": {
                    "username": account.username,
                    "photo_url": account.photo_url,
                },
            },
        )
        return self._to_entity(record)

    async def apply(self, account_id: AccountId, patch: AccountPatch) -> Account:
        async with self._prisma.tx() as tx:
            locked = await tx.query_raw(
                'SELECT id FROM "Account" WHERE id = $1 FOR UPDATE', account_id.value
            )
            record = await tx.account.find_unique(where={"id": account_id.value})
            if not locked or record is None:
                raise EntityNotFoundError(f"Account {account_id.value} not found.")

            account = self._to_entity(record)
            account.apply(patch)

            data = {}
            for name in patch.touched_fields():
                value = getattr(account, name)
                if name in RELATION_FIELDS:
                    data[name] = {"set": sorted(item.value for item in value)}
                else:
                    data[name] = value

            updated = await tx.account.update(
                where={"id": account_id.value}, data=data
            )

        logger.debug(
            f"[PrismaAccount] Applied {sorted(patch.touched_fields())} to {account_id.value}"
        )
        return self._to_entity(updated)

    async def search(self, text: str, limit: int) -> list[Account]:
        needle = text.strip()
        where = {"username": {"contains": needle, "mode": "insensitive"}} if needle else {}
        records = await self._prisma.account.find_many(
            where=where,
            order=[{"username": "asc"}, {"id": "asc"}],
            take=limit,
        )
        return [self._to_entity(record) for record in records]
