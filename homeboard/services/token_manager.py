"""
Token Lifecycle Manager - keeps one valid Google access token available.

State machine over the single stored credential:

    UNINITIALIZED --exchange_code--> ACTIVE
    ACTIVE  --expires_at reached-->  EXPIRED
    ACTIVE  --Calendar API 401-->    EXPIRED
    EXPIRED --refresh succeeds-->    ACTIVE
    EXPIRED --refresh rejected-->    INVALID   (terminal until a new authorization)

Only an invalid_grant, unauthorized_client or invalid_client answer counts
as a rejection. A 429 or 5xx from the token endpoint leaves the state at
EXPIRED and the next request tries again.

get_valid_access_token() always runs synchronously before a calendar fetch:
no background refresh. Two concurrent requests that both see an expired
token may both refresh; each gets a usable token and the last store write
wins.

The AccessTokenCache is an explicit in-process object (one per app, held
on app.state) handed to every manager. The store stays the source of
truth; the cache only saves a database read while the token is valid, and
is dropped as soon as an expiry is observed.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Optional

from homeboard.environments.base import (
    EnvironmentProvider,
    CredentialStoreError,
    NoCredentialError,
    TokenRefreshError,
)
from homeboard.services.credential_store import Credential, CredentialStore


logger = logging.getLogger("homeboard.services.token_manager")

# Used when the token endpoint omits expires_in (Google normally sends 3599)
DEFAULT_EXPIRES_IN = 3600

# Token endpoint error codes that mean the refresh token itself is no good
REJECTED_GRANT_ERRORS = {"invalid_grant", "unauthorized_client", "invalid_client"}

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current instant, timezone-aware UTC."""
    return datetime.now(timezone.utc)


def is_grant_rejection(error: TokenRefreshError) -> bool:
    """True when Google refused the refresh token, not the request."""
    return error.status_code in (400, 401) and error.error_code in REJECTED_GRANT_ERRORS


class TokenState(str, Enum):
    """Where the stored credential is in its lifecycle."""
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    EXPIRED = "expired"
    INVALID = "invalid"


@dataclass
class _CachedToken:
    access_token: str
    expires_at: datetime


class AccessTokenCache:
    """
    Short-lived in-process cache of the current access token.

    Also remembers a refresh token the provider has rejected, which is
    what makes the INVALID state terminal: a rejected refresh token is not
    sent to Google again. A new authorization replaces it and clears the mark.
    """

    def __init__(self):
        self._token: Optional[_CachedToken] = None
        self._rejected_refresh_token: Optional[str] = None

    def get(self, now: datetime) -> Optional[str]:
        """Cached access token if still valid at `now`; drops it otherwise."""
        if self._token is None:
            return None
        if now >= self._token.expires_at:
            self.invalidate()
            return None
        return self._token.access_token

    def prime(self, credential: Credential) -> None:
        self._token = _CachedToken(credential.access_token, credential.expires_at)

    def invalidate(self) -> None:
        self._token = None

    def mark_rejected(self, refresh_token: str) -> None:
        self._rejected_refresh_token = refresh_token
        self.invalidate()

    def is_rejected(self, refresh_token: str) -> bool:
        return self._rejected_refresh_token is not None and self._rejected_refresh_token == refresh_token

    def clear_rejection(self) -> None:
        self._rejected_refresh_token = None


class TokenLifecycleManager:
    """
    Exchanges authorization codes and refreshes expired access tokens.

    Example:
        manager = TokenLifecycleManager(store, auth_client, cache)

        # One-time setup (OAuth callback)
        await manager.exchange_code(code)

        # Before every calendar fetch
        access_token = await manager.get_valid_access_token()

    Attributes:
        store: Durable credential storage (source of truth)
        auth_client: OAuth provider used for the token endpoint
        cache: Shared in-process access token cache
        clock: Returns the current aware instant (injectable for tests)
    """

    def __init__(
        self,
        store: CredentialStore,
        auth_client: EnvironmentProvider,
        cache: AccessTokenCache,
        clock: Clock = utc_now,
    ):
        self.store = store
        self.auth_client = auth_client
        self.cache = cache
        self.clock = clock

    # -------------------------------------------------------------------------
    # AUTHORIZATION CODE EXCHANGE
    # -------------------------------------------------------------------------

    async def exchange_code(self, code: str) -> Credential:
        """
        Exchange an authorization code and store the resulting credential.

        Args:
            code: The ?code= value from the OAuth callback

        Returns:
            The stored Credential

        Raises:
            ConfigurationError: If client id, secret or redirect URI is unset
            TokenExchangeError: If Google rejects the code or omits a token
            ProviderError: If Google answers 429 or 5xx
            NetworkError: If Google cannot be reached
            CredentialStoreError: If the credential cannot be written
        """
        tokens = await self.auth_client.exchange_code_for_tokens(code)

        credential = Credential(
            refresh_token=tokens.refresh_token,
            access_token=tokens.access_token,
            expires_at=self._expires_at(tokens.expires_in),
        )
        self.store.put(credential)

        self.cache.clear_rejection()
        self.cache.prime(credential)

        logger.info(f"Calendar authorized; access token valid until {credential.expires_at.isoformat()}")
        return credential

    # -------------------------------------------------------------------------
    # VALID ACCESS TOKEN
    # -------------------------------------------------------------------------

    async def get_valid_access_token(self) -> str:
        """
        Return an access token that is valid right now, refreshing if needed.

        Raises:
            NoCredentialError: If no credential has been stored yet
            TokenRefreshError: If the refresh token was rejected (re-authorize)
            ProviderError: If Google answers 429 or 5xx during a refresh (retryable)
            ConfigurationError: If a refresh is needed and client id/secret is unset
            NetworkError: If Google cannot be reached during a refresh
            CredentialStoreError: If the store cannot be read or written
        """
        now = self.clock()

        cached = self.cache.get(now)
        if cached is not None:
            return cached

        credential = self.store.get()
        if credential is None:
            logger.warning("No calendar credential stored; first-time authorization required")
            raise NoCredentialError()

        if not credential.is_expired(now):
            self.cache.prime(credential)
            return credential.access_token

        self.cache.invalidate()
        logger.info(f"Access token expired at {credential.expires_at.isoformat()}; refreshing")

        if self.cache.is_rejected(credential.refresh_token):
            raise TokenRefreshError(
                error_code="invalid_grant",
                error_description="The stored refresh token was already rejected",
                hint="Re-authorize the calendar to continue",
            )

        try:
            tokens = await self.auth_client.refresh_access_token(credential.refresh_token)
        except TokenRefreshError as e:
            # Stored credential stays untouched; only the in-process mark changes
            if is_grant_rejection(e):
                self.cache.mark_rejected(credential.refresh_token)
                logger.error(f"Refresh token rejected by Google ({e.error_code}); re-authorization required")
            else:
                logger.error(f"Token refresh failed ({e.status_code}, {e.error_code}); will retry on the next request")
            raise

        refreshed = Credential(
            refresh_token=credential.refresh_token,
            access_token=tokens.access_token,
            expires_at=self._expires_at(tokens.expires_in),
        )
        self.store.put(refreshed)
        self.cache.prime(refreshed)

        logger.info(f"Access token refreshed; valid until {refreshed.expires_at.isoformat()}")
        return refreshed.access_token

    def expire_access_token(self) -> None:
        """
        Record that the provider refused the current access token.

        Drops the cached token and moves the stored expiry to now, so the
        next get_valid_access_token() refreshes instead of handing the same
        token out until its nominal expiry.
        """
        self.cache.invalidate()

        try:
            credential = self.store.get()
            if credential is None or credential.is_expired(self.clock()):
                return
            self.store.put(Credential(
                refresh_token=credential.refresh_token,
                access_token=credential.access_token,
                expires_at=self.clock(),
            ))
        except CredentialStoreError as e:
            logger.warning(f"Could not mark the access token expired: {e}")
            return

        logger.info("Access token refused by Google; it will be refreshed on the next request")

    # -------------------------------------------------------------------------
    # STATE
    # -------------------------------------------------------------------------

    def state(self) -> TokenState:
        """
        Current lifecycle state, read from the store.

        Raises:
            CredentialStoreError: If the store cannot be read
        """
        credential = self.store.get()
        if credential is None:
            return TokenState.UNINITIALIZED
        if self.cache.is_rejected(credential.refresh_token):
            return TokenState.INVALID
        if credential.is_expired(self.clock()):
            return TokenState.EXPIRED
        return TokenState.ACTIVE

    def _expires_at(self, expires_in: Optional[int]) -> datetime:
        seconds = expires_in if expires_in is not None else DEFAULT_EXPIRES_IN
        return self.clock() + timedelta(seconds=seconds)
