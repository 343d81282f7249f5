"""
Dishka DI Container Setup.

Two providers make up a container:
- AppProvider: application services and command/query handlers
  (Scope.REQUEST), wired against the abstract repository ports
- a storage provider binding those ports to an implementation:
  MemoryStorageProvider (one InMemoryDocumentStore for the whole app) or
  PrismaStorageProvider (PostgreSQL + Redis, see prisma_provider.py)

Scopes: clients, the store and the change feed live for the whole app
(Scope.APP); repositories and handlers are built per request (Scope.REQUEST).

Flow:
  Container → provides → AccountRepository → to → SendFriendRequestHandler
                                 ↓
                uses InMemoryAccountRepository or Notifying(PrismaAccountRepository)
"""

import logging
from typing import Optional

from dishka import AsyncContainer, Provider, Scope, make_async_container, provide

from friendchat.application.commands.accounts import (
    RegisterAccountHandler,
    UpdateAccountSettingsHandler,
)
from friendchat.application.commands.friends import (
    AcceptFriendRequestHandler,
    DeclineFriendRequestHandler,
    RemoveFriendHandler,
    SendFriendRequestHandler,
)
from friendchat.application.commands.messaging import (
    EnsureConversationHandler,
    SendMessageHandler,
)
from friendchat.application.queries.accounts import (
    GetAccountHandler,
    SearchAccountsHandler,
)
from friendchat.application.queries.conversations import (
    CanMessageHandler,
    GetMessagesHandler,
    ListConversationsHandler,
)
from friendchat.application.queries.friends import (
    GetFriendStatusHandler,
    ListFriendsHandler,
)
from friendchat.application.services import (
    ConversationViewBuilder,
    MessagingPermissions,
)
from friendchat.config.settings import Config, get_config
from friendchat.domain.ports.change_feed import ChangeFeed
from friendchat.domain.ports.repositories import (
    AccountRepository,
    ConversationRepository,
    MessageRepository,
)
from friendchat.infrastructure.memory import (
    InMemoryAccountRepository,
    InMemoryConversationRepository,
    InMemoryDocumentStore,
    InMemoryMessageRepository,
)

logger = logging.getLogger(__name__)


class AppProvider(Provider):
    """
    Application dependency provider.

    Everything here depends only on the ports; the storage provider decides
    what actually backs them.
    """

    def __init__(self, settings: type[Config] = Config):
        super().__init__()
        self._settings = settings

    # ==================== SERVICES ====================

    @provide(scope=Scope.REQUEST)
    def get_messaging_permissions(
        self,
        account_repository: AccountRepository,
        message_repository: MessageRepository,
    ) -> MessagingPermissions:
        return MessagingPermissions(account_repository, message_repository)

    @provide(scope=Scope.REQUEST)
    def get_conversation_view_builder(
        self,
        account_repository: AccountRepository,
        conversation_repository: ConversationRepository,
        permissions: MessagingPermissions,
    ) -> ConversationViewBuilder:
        return ConversationViewBuilder(
            account_repository,
            conversation_repository,
            permissions,
            concurrency=self._settings.VIEW_FETCH_CONCURRENCY,
        )

    # ==================== ACCOUNT HANDLERS ====================

    @provide(scope=Scope.REQUEST)
    def get_register_account_handler(
        self, account_repository: AccountRepository
    ) -> RegisterAccountHandler:
        return RegisterAccountHandler(account_repository)

    @provide(scope=Scope.REQUEST)
    def get_update_settings_handler(
        self, account_repository: AccountRepository
    ) -> UpdateAccountSettingsHandler:
        return UpdateAccountSettingsHandler(account_repository)

    @provide(scope=Scope.REQUEST)
    def get_account_handler(
        self, account_repository: AccountRepository
    ) -> GetAccountHandler:
        return GetAccountHandler(account_repository)

    @provide(scope=Scope.REQUEST)
    def get_search_accounts_handler(
        self,
        account_repository: AccountRepository,
        permissions: MessagingPermissions,
    ) -> SearchAccountsHandler:
        return SearchAccountsHandler(
            account_repository,
            permissions,
            concurrency=self._settings.VIEW_FETCH_CONCURRENCY,
        )

    # ==================== FRIEND HANDLERS ====================

    @provide(scope=Scope.REQUEST)
    def get_send_friend_request_handler(
        self, account_repository: AccountRepository
    ) -> SendFriendRequestHandler:
        return SendFriendRequestHandler(account_repository)

    @provide(scope=Scope.REQUEST)
    def get_accept_friend_request_handler(
        self, account_repository: AccountRepository
    ) -> AcceptFriendRequestHandler:
        return AcceptFriendRequestHandler(account_repository)

    @provide(scope=Scope.REQUEST)
    def get_decline_friend_request_handler(
        self, account_repository: AccountRepository
    ) -> DeclineFriendRequestHandler:
        return DeclineFriendRequestHandler(account_repository)

    @provide(scope=Scope.REQUEST)
    def get_remove_friend_handler(
        self, account_repository: AccountRepository
    ) -> RemoveFriendHandler:
        return RemoveFriendHandler(account_repository)

    @provide(scope=Scope.REQUEST)
    def get_list_friends_handler(
        self, account_repository: AccountRepository
    ) -> ListFriendsHandler:
        return ListFriendsHandler(account_repository)

    @provide(scope=Scope.REQUEST)
    def get_friend_status_handler(
        self, account_repository: AccountRepository
    ) -> GetFriendStatusHandler:
        return GetFriendStatusHandler(account_repository)

    # ==================== CONVERSATION HANDLERS ====================

    @provide(scope=Scope.REQUEST)
    def get_list_conversations_handler(
        self, builder: ConversationViewBuilder
    ) -> ListConversationsHandler:
        return ListConversationsHandler(builder)

    @provide(scope=Scope.REQUEST)
    def get_ensure_conversation_handler(
        self,
        conversation_repository: ConversationRepository,
        permissions: MessagingPermissions,
    ) -> EnsureConversationHandler:
        return EnsureConversationHandler(conversation_repository, permissions)

    @provide(scope=Scope.REQUEST)
    def get_send_message_handler(
        self,
        conversation_repository: ConversationRepository,
        message_repository: MessageRepository,
    ) -> SendMessageHandler:
        return SendMessageHandler(
            conversation_repository,
            message_repository,
            max_length=self._settings.MESSAGE_MAX_LENGTH,
        )

    @provide(scope=Scope.REQUEST)
    def get_messages_handler(
        self, message_repository: MessageRepository
    ) -> GetMessagesHandler:
        return GetMessagesHandler(message_repository)

    @provide(scope=Scope.REQUEST)
    def get_can_message_handler(
        self, permissions: MessagingPermissions
    ) -> CanMessageHandler:
        return CanMessageHandler(permissions)


class MemoryStorageProvider(Provider):
    """Binds every port to one shared InMemoryDocumentStore."""

    def __init__(self, store: Optional[InMemoryDocumentStore] = None):
        super().__init__()
        self._store = store or InMemoryDocumentStore()

    @provide(scope=Scope.APP)
    def get_store(self) -> InMemoryDocumentStore:
        return self._store

    @provide(scope=Scope.APP)
    def get_change_feed(self, store: InMemoryDocumentStore) -> ChangeFeed:
        return store

    @provide(scope=Scope.REQUEST)
    def get_account_repository(self, store: InMemoryDocumentStore) -> AccountRepository:
        return InMemoryAccountRepository(store)

    @provide(scope=Scope.REQUEST)
    def get_conversation_repository(
        self, store: InMemoryDocumentStore
    ) -> ConversationRepository:
        return InMemoryConversationRepository(store)

    @provide(scope=Scope.REQUEST)
    def get_message_repository(self, store: InMemoryDocumentStore) -> MessageRepository:
        return InMemoryMessageRepository(store)


def create_container(
    settings: Optional[type[Config]] = None,
    store: Optional[InMemoryDocumentStore] = None,
) -> AsyncContainer:
    """
    Create and configure the DI container.

    Passing a store forces the in-memory backend (tests share the store
    with the container that way).
    """
    settings = settings or get_config()
    if store is not None or settings.STORE_BACKEND == "memory":
        storage = MemoryStorageProvider(store)
    elif settings.STORE_BACKEND == "prisma":
        # Imported here: the Prisma client module only exists after `prisma generate`
        from friendchat.setup.ioc.prisma_provider import PrismaStorageProvider

        storage = PrismaStorageProvider(settings)
    else:
        raise ValueError(f"Unknown STORE_BACKEND: {settings.STORE_BACKEND}")

    logger.info(f"[IoC] Using {type(storage).__name__}")
    return make_async_container(AppProvider(settings), storage)
