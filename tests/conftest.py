import os
import time

import jwt
import pytest

SERVICE_AUTH_SECRET = "test-secret-for-friendchat-service-tokens"

# Config reads the environment at import time
os.environ["APP_ENV"] = "testing"
os.environ["SERVICE_AUTH_SECRET"] = SERVICE_AUTH_SECRET
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from fastapi.testclient import TestClient

from friendchat.config.settings import Config, TestingConfig
from friendchat.domain.entities.account import Account
from friendchat.domain.value_objects.account_id import AccountId
from friendchat.fastapi_app import create_fastapi_app
from friendchat.infrastructure.memory import (
    InMemoryAccountRepository,
    InMemoryConversationRepository,
    InMemoryDocumentStore,
    InMemoryMessageRepository,
)
from friendchat.setup.ioc import create_container


def service_token(account_id: str, name: str = None, expires_in: int = 300) -> str:
    now = int(time.time())
    claims = {
        "sub": account_id,
        "iat": now,
        "exp": now + expires_in,
        "iss": Config.SERVICE_AUTH_ISSUER,
        "aud": Config.SERVICE_AUTH_AUDIENCE,
    }
    if name:
        claims["name"] = name
    return jwt.encode(claims, SERVICE_AUTH_SECRET, algorithm="HS256")


@pytest.fixture()
def store():
    return InMemoryDocumentStore()


@pytest.fixture()
def accounts(store):
    return InMemoryAccountRepository(store)


@pytest.fixture()
def conversations(store):
    return InMemoryConversationRepository(store)


@pytest.fixture()
def messages(store):
    return InMemoryMessageRepository(store)


@pytest.fixture()
def seed(store):
    """Put accounts straight into the store: seed("alice", "bob", private={"bob"})."""

    def _seed(*names, private=(), organizers=()):
        created = []
        for name in names:
            account = Account(
                id=AccountId(name),
                username=name.capitalize(),
                is_private=name in private,
                is_organizer=name in organizers,
            )
            store.accounts[account.id] = account
            created.append(account.id)
        return created[0] if len(created) == 1 else created

    return _seed


@pytest.fixture()
def befriend(store):
    """Make two seeded accounts mutual friends without going through commands."""

    def _befriend(first: AccountId, second: AccountId):
        store.accounts[first].friends.add(second)
        store.accounts[second].friends.add(first)

    return _befriend


@pytest.fixture()
def app(store):
    """FastAPI app wired to the test's in-memory store."""
    container = create_container(TestingConfig, store=store)
    return create_fastapi_app(container=container, settings=TestingConfig)


@pytest.fixture()
def client(app):
    """A test client for the FastAPI app (one event loop for the whole test)."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def auth_headers():
    """auth_headers("alice") → Authorization header for that account."""

    def _headers(account_id: str, name: str = None):
        return {"Authorization": f"Bearer {service_token(account_id, name)}"}

    return _headers
