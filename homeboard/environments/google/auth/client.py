"""
Google OAuth Client - Handles OAuth 2.0 flow with Google APIs.

Key Features:
=============
1. Consent URL generation (offline access, forced consent)
2. Code-to-token exchange
3. Token refresh for seamless access

OAuth 2.0 Flow Implementation:
==============================
1. get_authorization_url() → Admin redirected to Google
2. exchange_code_for_tokens() → Called in callback, gets tokens
3. refresh_access_token() → Renew expired access tokens

Every token endpoint failure keeps Google's own `error` and
`error_description` fields, because those are what the operator needs to
fix the setup (a redirect_uri_mismatch is by far the most common case).
A 429 or 5xx reply is not a verdict on the code or the refresh token and
surfaces as a retryable ProviderError instead.

References:
===========
- OAuth 2.0: https://developers.google.com/identity/protocols/oauth2/web-server
- Token endpoint: https://oauth2.googleapis.com/token
"""

import logging
from typing import List, Optional, Type
from urllib.parse import urlencode

import httpx

from homeboard.environments.base import (
    EnvironmentProvider,
    OAuthTokens,
    NetworkError,
    ProviderError,
    TokenExchangeError,
    TokenRefreshError,
)
from homeboard.environments.google.auth.schemas import (
    AUTHORIZE_KEYS,
    CALENDAR_SCOPES,
    EXCHANGE_KEYS,
    REFRESH_KEYS,
    GoogleCalendarConfig,
    GoogleTokenErrorResponse,
    GoogleTokenResponse,
)


logger = logging.getLogger("homeboard.environments.google.auth")

EXCHANGE_HINT = "Check that GOOGLE_REDIRECT_URI matches the authorized redirect URI exactly"
REFRESH_HINT = "Re-authorize the calendar to continue"
TRANSIENT_HINT = "Google is temporarily unavailable; try again shortly"

# Rate limiting; every 5xx is treated the same way
TRANSIENT_STATUS_CODES = {429}


class GoogleAuthClient(EnvironmentProvider):
    """
    Google OAuth 2.0 Client implementation.

    Example Usage:
        client = GoogleAuthClient(config)

        # Step 1: Consent URL for the admin
        auth_url = client.get_authorization_url()

        # Step 2: Callback
        tokens = await client.exchange_code_for_tokens(code="4/0Ab...")

        # Later: silent refresh
        tokens = await client.refresh_access_token(stored_refresh_token)

    Attributes:
        config: Google settings, validated per operation
        timeout: Seconds before an outbound request is abandoned
    """

    # Google OAuth endpoints
    AUTHORIZATION_URL = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"

    def __init__(
        self,
        config: GoogleCalendarConfig,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the Google OAuth client.

        Args:
            config: Google client id / secret / redirect URI
            timeout: HTTP timeout in seconds for token requests
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self.config = config
        self.timeout = timeout
        self._transport = transport

    # -------------------------------------------------------------------------
    # AUTHORIZATION URL
    # -------------------------------------------------------------------------

    def get_authorization_url(
        self,
        scopes: Optional[List[str]] = None,
        state: Optional[str] = None,
    ) -> str:
        """
        Generate the Google OAuth consent URL.

        access_type=offline is what makes Google issue a refresh token, and
        prompt=consent forces it to issue one again on repeat consent.

        Args:
            scopes: OAuth scopes to request (defaults to CALENDAR_SCOPES)
            state: Optional opaque value echoed back on the callback

        Returns:
            Full authorization URL to send the admin to

        Raises:
            ConfigurationError: If GOOGLE_CLIENT_ID or GOOGLE_REDIRECT_URI is unset
        """
        self.config.require(*AUTHORIZE_KEYS)

        params = {
            "client_id": self.config.client_id,
            "redirect_uri": self.config.redirect_uri,
            "response_type": "code",
            "scope": " ".join(scopes or CALENDAR_SCOPES),
            "access_type": "offline",
            "prompt": "consent",
        }
        if state:
            params["state"] = state

        auth_url = f"{self.AUTHORIZATION_URL}?{urlencode(params)}"

        logger.info(f"Generated Google auth URL (scope={params['scope']})")

        return auth_url

    # -------------------------------------------------------------------------
    # TOKEN EXCHANGE
    # -------------------------------------------------------------------------

    async def exchange_code_for_tokens(self, code: str) -> OAuthTokens:
        """
        Exchange an authorization code for access and refresh tokens.

        Args:
            code: Authorization code from the Google callback

        Returns:
            OAuthTokens with access_token, refresh_token and expires_in

        Raises:
            ConfigurationError: If client id, secret or redirect URI is unset
            TokenExchangeError: On a 4xx answer or when a token is missing
            ProviderError: On a 429 or 5xx answer (retryable)
            NetworkError: If Google cannot be reached
        """
        self.config.require(*EXCHANGE_KEYS)

        token_data = {
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
            "code": code,
            "grant_type": "authorization_code",
            "redirect_uri": self.config.redirect_uri,
        }

        logger.info(f"Exchanging authorization code for tokens (redirect_uri={self.config.redirect_uri})")

        token_response = await self._request_tokens(token_data, TokenExchangeError, EXCHANGE_HINT)

        if not token_response.access_token:
            raise TokenExchangeError(
                error_code="missing_access_token",
                error_description="Google returned no access token",
            )
        if not token_response.refresh_token:
            # Happens when consent was granted before without prompt=consent
            raise TokenExchangeError(
                error_code="missing_refresh_token",
                error_description="Google returned no refresh token",
                hint="Remove the app's access in the Google account settings and authorize again",
            )

        logger.info(
            f"Successfully obtained Google tokens (expires_in={token_response.expires_in})"
        )

        return OAuthTokens(
            access_token=token_response.access_token,
            refresh_token=token_response.refresh_token,
            expires_in=token_response.expires_in,
        )

    # -------------------------------------------------------------------------
    # TOKEN REFRESH
    # -------------------------------------------------------------------------

    async def refresh_access_token(self, refresh_token: str) -> OAuthTokens:
        """
        Use the refresh token to get a new access token.

        Google does not rotate refresh tokens on refresh; if a new one is
        returned anyway it is passed through, otherwise the input is echoed.

        Args:
            refresh_token: The refresh token from the initial authorization

        Returns:
            OAuthTokens with a new access_token and expires_in

        Raises:
            ConfigurationError: If client id or secret is unset
            TokenRefreshError: On a 4xx answer (invalid or revoked refresh token)
            ProviderError: On a 429 or 5xx answer (retryable)
            NetworkError: If Google cannot be reached
        """
        self.config.require(*REFRESH_KEYS)

        refresh_data = {
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
            "refresh_token": refresh_token,
            "grant_type": "refresh_token",
        }

        logger.info("Refreshing access token")

        token_response = await self._request_tokens(refresh_data, TokenRefreshError, REFRESH_HINT)

        if not token_response.access_token:
            raise TokenRefreshError(
                error_code="missing_access_token",
                error_description="Google returned no access token",
                hint=REFRESH_HINT,
            )

        logger.info(f"Successfully refreshed access token (expires_in={token_response.expires_in})")

        return OAuthTokens(
            access_token=token_response.access_token,
            refresh_token=token_response.refresh_token or refresh_token,
            expires_in=token_response.expires_in,
        )

    # -------------------------------------------------------------------------
    # HTTP
    # -------------------------------------------------------------------------

    async def _request_tokens(
        self,
        form: dict,
        error_cls: Type[TokenExchangeError] | Type[TokenRefreshError],
        hint: str,
    ) -> GoogleTokenResponse:
        """POST a form to the token endpoint and parse the 2xx body."""
        async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
            try:
                response = await client.post(self.TOKEN_URL, data=form)
            except httpx.RequestError as e:
                logger.error(f"Network error calling Google token endpoint: {e}")
                raise NetworkError(f"Network error contacting Google: {e}") from e

        if not response.is_success:
            error = _parse_token_error(response)
            logger.error(
                f"Google token endpoint returned {response.status_code}: "
                f"{error.error} - {error.error_description}"
            )
            if response.status_code in TRANSIENT_STATUS_CODES or response.status_code >= 500:
                # Google did not judge the code or refresh token; the call can be repeated
                raise ProviderError(
                    status_code=response.status_code,
                    provider_message=error.error_description or error.error or response.text or None,
                    hint=TRANSIENT_HINT,
                    response=response.text,
                )
            raise error_cls(
                error_code=error.error,
                error_description=error.error_description or (None if error.error else response.text),
                status_code=response.status_code,
                hint=hint,
            )

        try:
            return GoogleTokenResponse(**response.json())
        except ValueError as e:
            raise error_cls(
                error_code="invalid_response",
                error_description=f"Unreadable token response: {e}",
                status_code=response.status_code,
            ) from e


def _parse_token_error(response: httpx.Response) -> GoogleTokenErrorResponse:
    """Read Google's {error, error_description} body, tolerating non-JSON."""
    try:
        body = response.json()
    except ValueError:
        return GoogleTokenErrorResponse()
    if not isinstance(body, dict):
        return GoogleTokenErrorResponse()
    return GoogleTokenErrorResponse(
        error=body.get("error") if isinstance(body.get("error"), str) else None,
        error_description=body.get("error_description"),
    )
