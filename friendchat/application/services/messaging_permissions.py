"""
Messaging Permissions - loads what the access policy needs and evaluates it.

Every caller that needs a "may A message B" answer goes through here
(ensuring a conversation, the can-message query, account search), so the
rule is evaluated the same way everywhere.
"""

import asyncio
import logging

from friendchat.domain.entities.account import Account
from friendchat.domain.exceptions import EntityNotFoundError
from friendchat.domain.ports.repositories import AccountRepository, MessageRepository
from friendchat.domain.services.access_policy import can_message, history_required
from friendchat.domain.value_objects.account_id import AccountId
from friendchat.domain.value_objects.conversation_id import ConversationId

logger = logging.getLogger(__name__)


class MessagingPermissions:
    def __init__(self, accounts: AccountRepository, messages: MessageRepository):
        self._accounts = accounts
        self._messages = messages

    async def load_pair(
        self, sender_id: AccountId, recipient_id: AccountId
    ) -> tuple[Account, Account]:
        sender, recipient = await asyncio.gather(
            self._accounts.get(sender_id), self._accounts.get(recipient_id)
        )
        if sender is None:
            raise EntityNotFoundError(f"Account {sender_id.value} not found.")
        if recipient is None:
            raise EntityNotFoundError(f"Account {recipient_id.value} not found.")
        return sender, recipient

    async def has_sent_message(
        self, conversation_id: ConversationId, sender_id: AccountId
    ) -> bool:
        messages = await self._messages.query(
            conversation_id, sender_id=sender_id, limit=1
        )
        return bool(messages)

    async def evaluate(self, sender: Account, recipient: Account) -> bool:
        """Apply the access policy, fetching history only when the policy needs it."""
        if sender.id == recipient.id:
            return False
        history = []
        if history_required(sender, recipient):
            history = await self._messages.query(
                ConversationId.for_pair(sender.id, recipient.id),
                sender_id=recipient.id,
                limit=1,
            )
        allowed = can_message(sender, recipient, history)
        logger.debug(
            f"[Permissions] {sender.id.value} -> {recipient.id.value}: "
            f"{'allowed' if allowed else 'denied'}"
        )
        return allowed

    async def check(self, sender_id: AccountId, recipient_id: AccountId) -> bool:
        if sender_id == recipient_id:
            return False
        sender, recipient = await self.load_pair(sender_id, recipient_id)
        return await self.evaluate(sender, recipient)
