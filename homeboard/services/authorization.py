"""
Authorization Flow Controller - one-time Google consent for the calendar.

    begin_authorization()       → consent URL (admin opens it in a browser)
    handle_callback(params)     → exchanges ?code= and stores the credential

The callback is hit by Google's redirect, which carries no application
credentials, so the route serving it is unauthenticated. Nothing is
written unless a code is present and Google accepts it.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Mapping

from homeboard.environments.base import (
    AuthorizationDeniedError,
    EnvironmentProvider,
    MissingCodeError,
)
from homeboard.environments.google.auth.schemas import CALENDAR_SCOPES
from homeboard.services.token_manager import TokenLifecycleManager


logger = logging.getLogger("homeboard.services.authorization")


@dataclass(frozen=True)
class CallbackOutcome:
    """Result of a successful callback, rendered as the success page."""
    expires_at: datetime
    message: str = "Google Calendar access has been configured."


class AuthorizationFlowController:
    """
    Issues the consent URL and completes the redirect callback.

    Attributes:
        auth_client: OAuth provider that builds the consent URL
        token_manager: Performs the code exchange and stores the credential
    """

    def __init__(self, auth_client: EnvironmentProvider, token_manager: TokenLifecycleManager):
        self.auth_client = auth_client
        self.token_manager = token_manager

    def begin_authorization(self) -> str:
        """
        Build the Google consent URL.

        Raises:
            ConfigurationError: If GOOGLE_CLIENT_ID or GOOGLE_REDIRECT_URI is unset
        """
        auth_url = self.auth_client.get_authorization_url(scopes=CALENDAR_SCOPES)
        logger.info("Issued Google consent URL")
        return auth_url

    async def handle_callback(self, query_params: Mapping[str, str]) -> CallbackOutcome:
        """
        Complete the OAuth redirect.

        Args:
            query_params: The callback's query string as a mapping

        Raises:
            AuthorizationDeniedError: If Google sent ?error= (consent refused)
            MissingCodeError: If there is no ?code=
            TokenExchangeError, NetworkError, ConfigurationError,
            CredentialStoreError: Propagated from the code exchange
        """
        error = query_params.get("error")
        if error:
            logger.warning(f"Google OAuth error on callback: {error}")
            raise AuthorizationDeniedError(error, query_params.get("error_description"))

        code = (query_params.get("code") or "").strip()
        if not code:
            logger.warning("OAuth callback received without an authorization code")
            raise MissingCodeError()

        credential = await self.token_manager.exchange_code(code)
        return CallbackOutcome(expires_at=credential.expires_at)
