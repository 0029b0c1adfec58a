"""
Base classes and error taxonomy for Environment integrations.

An "environment" is an external provider the dashboard talks to. Today
that is only Google (OAuth + Calendar), but the auth client is written
against the EnvironmentProvider contract so the token lifecycle code does
not depend on Google specifics.

Error taxonomy:
===============
CalendarIntegrationError
├── ConfigurationError        missing setting(s), operator-facing
├── MissingCodeError          callback without ?code=
├── AuthorizationDeniedError  callback with ?error= (consent refused)
├── TokenExchangeError        provider rejected the authorization code
├── TokenRefreshError         provider rejected the refresh token
├── NoCredentialError         first run, nothing authorized yet
├── ProviderError             non-2xx from the Calendar API
├── NetworkError              transport failure / timeout
└── CredentialStoreError      credential table unreachable

`requires_reauthorization` tells the HTTP layer whether to show the
"Re-Authorize" call to action instead of a plain inline error.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, Optional


# ---------------------------------------------------------------------------
# CUSTOM EXCEPTIONS
# ---------------------------------------------------------------------------


class CalendarIntegrationError(Exception):
    """Base exception for every calendar-integration failure."""

    requires_reauthorization: bool = False


class ConfigurationError(CalendarIntegrationError):
    """Raised when one or more required settings are unset."""

    def __init__(self, missing: List[str]):
        self.missing = list(missing)
        super().__init__(
            "Missing required configuration: " + ", ".join(self.missing)
        )


class MissingCodeError(CalendarIntegrationError):
    """Raised when the OAuth callback arrives without an authorization code."""

    def __init__(self, message: str = "No authorization code received. Please try the authorization again."):
        super().__init__(message)


class AuthorizationDeniedError(CalendarIntegrationError):
    """Raised when the provider redirects back with an error (e.g. access_denied)."""

    def __init__(self, error_code: str, error_description: Optional[str] = None):
        self.error_code = error_code
        self.error_description = error_description
        super().__init__(f"Google authorization failed: {error_description or error_code}")


class _ProviderTokenError(CalendarIntegrationError):
    """Shared shape for token endpoint rejections."""

    requires_reauthorization = True
    action = "Token request"

    def __init__(
        self,
        error_code: Optional[str] = None,
        error_description: Optional[str] = None,
        status_code: Optional[int] = None,
        hint: Optional[str] = None,
    ):
        self.error_code = error_code
        self.error_description = error_description
        self.status_code = status_code
        self.hint = hint
        detail = error_description or error_code or "Unknown error"
        message = f"{self.action} failed: {detail}"
        if error_code and error_description:
            message = f"{self.action} failed: {error_code}: {error_description}"
        if hint:
            message = f"{message}. {hint}"
        super().__init__(message)


class TokenExchangeError(_ProviderTokenError):
    """Raised when exchanging an authorization code for tokens fails."""

    action = "Token exchange"


class TokenRefreshError(_ProviderTokenError):
    """Raised when the refresh token is rejected; re-authorization is required."""

    action = "Token refresh"


class NoCredentialError(CalendarIntegrationError):
    """Raised when no credential has been stored yet."""

    requires_reauthorization = True

    def __init__(self, message: str = "No stored calendar credential. Run the first-time authorization."):
        super().__init__(message)


class ProviderError(CalendarIntegrationError):
    """Raised when a Calendar API call returns a non-2xx response."""

    def __init__(
        self,
        status_code: int,
        provider_message: Optional[str] = None,
        hint: Optional[str] = None,
        response: Any = None,
    ):
        self.status_code = status_code
        self.provider_message = provider_message
        self.hint = hint
        self.response = response
        message = f"Calendar API error ({status_code}): {provider_message or 'Failed to fetch events'}"
        if hint:
            message = f"{message}. {hint}"
        super().__init__(message)


class NetworkError(CalendarIntegrationError):
    """Raised on transport-level failures (DNS, connection reset, timeout)."""
    pass


class CredentialStoreError(CalendarIntegrationError):
    """Raised when the credential table cannot be read or written."""
    pass


# ---------------------------------------------------------------------------
# DATA STRUCTURES
# ---------------------------------------------------------------------------


@dataclass
class OAuthTokens:
    """
    Token data returned by a provider's token endpoint.

    expires_in is kept relative (seconds) so the caller can anchor it to
    its own clock when computing expires_at.
    """
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None


# ---------------------------------------------------------------------------
# ABSTRACT BASE CLASSES
# ---------------------------------------------------------------------------


class EnvironmentProvider(ABC):
    """
    Abstract base class for OAuth providers.

    The provider is responsible for:
    - Generating the consent URL
    - Exchanging authorization codes for tokens
    - Refreshing expired access tokens
    """

    @abstractmethod
    def get_authorization_url(self, scopes: List[str], state: Optional[str] = None) -> str:
        """
        Generate the OAuth consent URL.

        Raises:
            ConfigurationError: If the client id or redirect URI is unset
        """
        pass

    @abstractmethod
    async def exchange_code_for_tokens(self, code: str) -> OAuthTokens:
        """
        Exchange an authorization code for access/refresh tokens.

        Raises:
            TokenExchangeError: If the provider rejects the code
            NetworkError: If the token endpoint is unreachable
        """
        pass

    @abstractmethod
    async def refresh_access_token(self, refresh_token: str) -> OAuthTokens:
        """
        Use a refresh token to get a new access token.

        Raises:
            TokenRefreshError: If the refresh token is invalid or revoked
            NetworkError: If the token endpoint is unreachable
        """
        pass
