import os

os.environ.setdefault("SUPABASE_URL", "http://supabase.test")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "service-role-key")
os.environ.setdefault("SUPABASE_ANON_KEY", "anon-key")

import pytest
from fastapi.testclient import TestClient

from servicedesk.database import get_db
from servicedesk.main import app
from servicedesk.middleware.auth import get_identity_provider
from servicedesk.services.change_feed import ChangeFeed
from servicedesk.services.ticket_store import TicketStore
from tests.fakes import FakeIdentityProvider, FakeSupabase

CUSTOMER = {"user_id": "customer-1", "email": "carol@example.com"}
OTHER_CUSTOMER = {"user_id": "customer-2", "email": "dave@example.com"}
AGENT_A = {"user_id": "agent-a", "email": "alice@example.com"}
AGENT_B = {"user_id": "agent-b", "email": "bob@example.com"}
NEWCOMER = {"user_id": "user-no-role", "email": "nora@example.com"}


@pytest.fixture()
def db():
    fake = FakeSupabase()
    fake.add_role(CUSTOMER["user_id"], "customer")
    fake.add_role(OTHER_CUSTOMER["user_id"], "customer")
    fake.add_role(AGENT_A["user_id"], "agent")
    fake.add_role(AGENT_B["user_id"], "agent")
    return fake


@pytest.fixture()
def identity():
    return FakeIdentityProvider({
        "customer-token": CUSTOMER,
        "other-customer-token": OTHER_CUSTOMER,
        "agent-a-token": AGENT_A,
        "agent-b-token": AGENT_B,
        "newcomer-token": NEWCOMER,
    })


@pytest.fixture()
def feed():
    return ChangeFeed()


@pytest.fixture()
def store(db, feed):
    return TicketStore(db, feed)


@pytest.fixture()
def client(db, identity, monkeypatch):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_identity_provider] = lambda: identity
    monkeypatch.setattr(app.state, "change_feed", ChangeFeed())

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
