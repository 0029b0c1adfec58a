"""
Dependencies module - reusable FastAPI dependencies for route handlers.

Wires the calendar services together per request:

    get_db ─┐
            ├─ SqlCredentialStore ─┐
    config ─┼─ GoogleAuthClient ───┼─ TokenLifecycleManager ─┬─ AuthorizationFlowController
            │                      │                         └─ CalendarEventFetcher
    app.state.token_cache ─────────┘

Tests swap pieces with app.dependency_overrides (most often
get_http_transport, get_clock and get_settings).
"""

import logging
from datetime import tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import httpx
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from homeboard.core.config import Settings, settings
from homeboard.core.security import ADMIN_SUBJECT, decode_access_token
from homeboard.db.session import get_db
from homeboard.environments.google.auth import GoogleAuthClient, GoogleCalendarConfig
from homeboard.services.authorization import AuthorizationFlowController
from homeboard.services.credential_store import SqlCredentialStore
from homeboard.services.event_fetcher import CalendarEventFetcher
from homeboard.services.token_manager import (
    AccessTokenCache,
    Clock,
    TokenLifecycleManager,
    utc_now,
)


logger = logging.getLogger("homeboard.deps")


# ---------------------------------------------------------------------------
# CONFIGURATION
# ---------------------------------------------------------------------------


def get_settings() -> Settings:
    """Application settings (overridable in tests)."""
    return settings


def get_calendar_config(app_settings: Settings = Depends(get_settings)) -> GoogleCalendarConfig:
    """Google keys, unvalidated; each operation requires what it needs."""
    return GoogleCalendarConfig.from_settings(app_settings)


def get_display_timezone(app_settings: Settings = Depends(get_settings)) -> tzinfo:
    """
    Timezone the week window and the time grid are computed in.

    An unknown zone name falls back to UTC with a warning rather than
    failing every calendar request.
    """
    try:
        return ZoneInfo(app_settings.DISPLAY_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown DISPLAY_TIMEZONE '{app_settings.DISPLAY_TIMEZONE}', using UTC")
        return ZoneInfo("UTC")


def get_http_transport() -> Optional[httpx.AsyncBaseTransport]:
    """Transport for outbound Google calls; None means the real network."""
    return None


def get_clock() -> Clock:
    return utc_now


# ---------------------------------------------------------------------------
# CALENDAR SERVICES
# ---------------------------------------------------------------------------


def get_token_cache(request: Request) -> AccessTokenCache:
    """The process-wide access token cache created at startup."""
    return request.app.state.token_cache


def get_credential_store(db: Session = Depends(get_db)) -> SqlCredentialStore:
    return SqlCredentialStore(db)


def get_auth_client(
    config: GoogleCalendarConfig = Depends(get_calendar_config),
    app_settings: Settings = Depends(get_settings),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_http_transport),
) -> GoogleAuthClient:
    return GoogleAuthClient(
        config=config,
        timeout=app_settings.HTTP_TIMEOUT_SECONDS,
        transport=transport,
    )


def get_token_manager(
    store: SqlCredentialStore = Depends(get_credential_store),
    auth_client: GoogleAuthClient = Depends(get_auth_client),
    cache: AccessTokenCache = Depends(get_token_cache),
    clock: Clock = Depends(get_clock),
) -> TokenLifecycleManager:
    return TokenLifecycleManager(store=store, auth_client=auth_client, cache=cache, clock=clock)


def get_authorization_controller(
    auth_client: GoogleAuthClient = Depends(get_auth_client),
    token_manager: TokenLifecycleManager = Depends(get_token_manager),
) -> AuthorizationFlowController:
    return AuthorizationFlowController(auth_client=auth_client, token_manager=token_manager)


def get_event_fetcher(
    config: GoogleCalendarConfig = Depends(get_calendar_config),
    token_manager: TokenLifecycleManager = Depends(get_token_manager),
    app_settings: Settings = Depends(get_settings),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_http_transport),
) -> CalendarEventFetcher:
    return CalendarEventFetcher(
        config=config,
        token_manager=token_manager,
        timeout=app_settings.HTTP_TIMEOUT_SECONDS,
        transport=transport,
    )


# ---------------------------------------------------------------------------
# ADMIN ACCESS
# ---------------------------------------------------------------------------
# auto_error=False: a missing header gets the same 401 as a bad token
security = HTTPBearer(auto_error=False)


def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """
    Guard for admin-only routes (/authorize, /authorize/status).

    Returns:
        The token subject ("admin")

    Raises:
        401 Unauthorized: Missing, invalid or expired session token
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        raise credentials_exception

    subject = decode_access_token(credentials.credentials)
    if subject != ADMIN_SUBJECT:
        raise credentials_exception

    return subject
