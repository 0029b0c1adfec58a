"""
Test configuration and fixtures for pytest.

This module provides shared fixtures used across all tests:
- Test database (SQLite in-memory for speed)
- Fake Google endpoints (httpx.MockTransport, no network)
- A controllable clock
- Test client (FastAPI TestClient) with dependencies overridden
- Admin authentication helpers
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Generator, List, Optional, Union
from urllib.parse import parse_qsl

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from homeboard.core.config import Settings
from homeboard.core.security import create_access_token, hash_password
from homeboard.db.base import Base
from homeboard.db.session import get_db
from homeboard.deps import get_clock, get_http_transport, get_settings, get_token_cache
from homeboard.environments.google.auth import GoogleAuthClient, GoogleCalendarConfig
from homeboard.main import app
from homeboard.models import calendar_credential  # noqa: F401  registers the table
from homeboard.services.credential_store import Credential, SqlCredentialStore
from homeboard.services.token_manager import AccessTokenCache, TokenLifecycleManager


ADMIN_PASSWORD = "letmein"

# A Wednesday
NOW = datetime(2024, 6, 12, 9, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# TEST DATABASE SETUP
# ---------------------------------------------------------------------------
# StaticPool keeps the same in-memory connection across all operations

SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Fresh tables for each test function."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


# ---------------------------------------------------------------------------
# CLOCK
# ---------------------------------------------------------------------------


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


# ---------------------------------------------------------------------------
# FAKE GOOGLE
# ---------------------------------------------------------------------------

Reply = Union[tuple, Callable[[httpx.Request], httpx.Response]]


class FakeGoogle:
    """
    Stand-in for Google's token endpoint and Calendar API.

    token_reply / events_reply are (status_code, json_body) tuples, or a
    callable taking the request (may raise httpx errors to simulate a
    network failure). Every request is recorded.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.token_reply: Reply = (200, {
            "access_token": "ya29.fresh",
            "expires_in": 3599,
            "refresh_token": "1//refresh",
            "scope": "https://www.googleapis.com/auth/calendar.readonly",
            "token_type": "Bearer",
        })
        self.events_reply: Reply = (200, {"kind": "calendar#events", "items": []})

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        reply = self.token_reply if request.url.host == "oauth2.googleapis.com" else self.events_reply
        if callable(reply):
            return reply(request)
        status_code, body = reply
        return httpx.Response(status_code, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def token_requests(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.host == "oauth2.googleapis.com"]

    @property
    def events_requests(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.host == "www.googleapis.com"]


def form_of(request: httpx.Request) -> dict:
    """Decode a form-encoded request body."""
    return dict(parse_qsl(request.content.decode()))


def network_down(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


def timed_event(event_id: str, start: str, end: Optional[str] = None, **extra) -> dict:
    """Google event resource with dateTime start/end."""
    event = {"id": event_id, "summary": extra.pop("summary", event_id), "start": {"dateTime": start}}
    if end is not None:
        event["end"] = {"dateTime": end}
    event.update(extra)
    return event


def all_day_event(event_id: str, start: str, end: str, **extra) -> dict:
    """Google event resource with date start/end (end exclusive)."""
    event = {"id": event_id, "summary": extra.pop("summary", event_id), "start": {"date": start}, "end": {"date": end}}
    event.update(extra)
    return event


@pytest.fixture
def google() -> FakeGoogle:
    return FakeGoogle()


# ---------------------------------------------------------------------------
# CONFIGURATION
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def admin_password_hash() -> str:
    return hash_password(ADMIN_PASSWORD)


@pytest.fixture
def test_settings(admin_password_hash: str) -> Settings:
    """Fully configured settings, independent of the environment and .env."""
    return Settings(
        _env_file=None,
        DATABASE_URL=SQLALCHEMY_DATABASE_URL,
        ADMIN_PASSWORD_HASH=admin_password_hash,
        GOOGLE_CLIENT_ID="client-id.apps.googleusercontent.com",
        GOOGLE_CLIENT_SECRET="client-secret",
        GOOGLE_REDIRECT_URI="http://localhost:8000/callback",
        GOOGLE_CALENDAR_ID="family@group.calendar.google.com",
        DISPLAY_TIMEZONE="UTC",
    )


@pytest.fixture
def calendar_config(test_settings: Settings) -> GoogleCalendarConfig:
    return GoogleCalendarConfig.from_settings(test_settings)


# ---------------------------------------------------------------------------
# SERVICE FIXTURES
# ---------------------------------------------------------------------------


@pytest.fixture
def token_cache() -> AccessTokenCache:
    return AccessTokenCache()


@pytest.fixture
def store(db: Session) -> SqlCredentialStore:
    return SqlCredentialStore(db)


@pytest.fixture
def auth_client(calendar_config: GoogleCalendarConfig, google: FakeGoogle) -> GoogleAuthClient:
    return GoogleAuthClient(calendar_config, transport=google.transport)


@pytest.fixture
def token_manager(
    store: SqlCredentialStore,
    auth_client: GoogleAuthClient,
    token_cache: AccessTokenCache,
    clock: FixedClock,
) -> TokenLifecycleManager:
    return TokenLifecycleManager(store, auth_client, token_cache, clock=clock)


@pytest.fixture
def stored_credential(store: SqlCredentialStore, clock: FixedClock) -> Credential:
    """A credential whose access token is valid for another 30 minutes."""
    credential = Credential(
        refresh_token="1//stored-refresh",
        access_token="ya29.stored",
        expires_at=clock() + timedelta(minutes=30),
    )
    store.put(credential)
    return credential


@pytest.fixture
def expired_credential(store: SqlCredentialStore, clock: FixedClock) -> Credential:
    """A credential whose access token expired 10 minutes ago."""
    credential = Credential(
        refresh_token="1//stored-refresh",
        access_token="ya29.stale",
        expires_at=clock() - timedelta(minutes=10),
    )
    store.put(credential)
    return credential


# ---------------------------------------------------------------------------
# TEST CLIENT
# ---------------------------------------------------------------------------


@pytest.fixture(scope="function")
def client(
    db: Session,
    test_settings: Settings,
    google: FakeGoogle,
    clock: FixedClock,
    token_cache: AccessTokenCache,
) -> Generator[TestClient, None, None]:
    """
    Test client wired to the test database, fake Google and fixed clock.
    """
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: test_settings
    app.dependency_overrides[get_http_transport] = lambda: google.transport
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_token_cache] = lambda: token_cache

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers() -> dict:
    """Authorization header carrying a valid admin session token."""
    return {"Authorization": f"Bearer {create_access_token()}"}
