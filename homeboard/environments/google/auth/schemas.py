"""
Google OAuth Schemas - Data structures for Google authentication.

This module defines the configuration and token-endpoint payloads used in
the Google OAuth flow. Using Pydantic models ensures type safety and
validation.
"""

from typing import Optional, List, Tuple
from pydantic import BaseModel, Field

from homeboard.core.config import Settings
from homeboard.environments.base import ConfigurationError


# ---------------------------------------------------------------------------
# OAUTH SCOPE CONSTANTS
# ---------------------------------------------------------------------------
# Read-only: the dashboard never writes to the calendar.
# Reference: https://developers.google.com/identity/protocols/oauth2/scopes
CALENDAR_SCOPES = [
    "https://www.googleapis.com/auth/calendar.readonly",
]


# ---------------------------------------------------------------------------
# CONFIGURATION
# ---------------------------------------------------------------------------

# Keys each operation needs, by environment variable name
AUTHORIZE_KEYS: Tuple[str, ...] = ("GOOGLE_CLIENT_ID", "GOOGLE_REDIRECT_URI")
EXCHANGE_KEYS: Tuple[str, ...] = ("GOOGLE_CLIENT_ID", "GOOGLE_CLIENT_SECRET", "GOOGLE_REDIRECT_URI")
REFRESH_KEYS: Tuple[str, ...] = ("GOOGLE_CLIENT_ID", "GOOGLE_CLIENT_SECRET")
FETCH_KEYS: Tuple[str, ...] = ("GOOGLE_CLIENT_ID", "GOOGLE_CLIENT_SECRET", "GOOGLE_CALENDAR_ID")

# Environment variable name -> GoogleCalendarConfig attribute
_KEY_FIELDS = {
    "GOOGLE_CLIENT_ID": "client_id",
    "GOOGLE_CLIENT_SECRET": "client_secret",
    "GOOGLE_REDIRECT_URI": "redirect_uri",
    "GOOGLE_CALENDAR_ID": "calendar_id",
}


class GoogleCalendarConfig(BaseModel):
    """
    Google settings for the calendar integration.

    Loaded from Settings without validation, so the process boots even
    when nothing is configured. Each operation calls require() with the
    keys it needs before doing any work.

    Example:
        config = GoogleCalendarConfig.from_settings(settings)
        config.require(*FETCH_KEYS)  # raises ConfigurationError
    """
    client_id: str = Field("", description="Google OAuth Client ID")
    client_secret: str = Field("", description="Google OAuth Client Secret")
    redirect_uri: str = Field("", description="OAuth callback URL")
    calendar_id: str = Field("", description="Calendar to read events from")

    @classmethod
    def from_settings(cls, settings: Settings) -> "GoogleCalendarConfig":
        """Build the config from application settings."""
        return cls(
            client_id=settings.GOOGLE_CLIENT_ID,
            client_secret=settings.GOOGLE_CLIENT_SECRET,
            redirect_uri=settings.GOOGLE_REDIRECT_URI,
            calendar_id=settings.GOOGLE_CALENDAR_ID,
        )

    def missing(self, *keys: str) -> List[str]:
        """Return the subset of `keys` that are unset or blank, in order."""
        missing = []
        for key in keys:
            value = getattr(self, _KEY_FIELDS[key])
            if not value or not value.strip():
                missing.append(key)
        return missing

    def require(self, *keys: str) -> None:
        """
        Ensure every key in `keys` is set.

        Raises:
            ConfigurationError: Listing all missing keys at once
        """
        missing = self.missing(*keys)
        if missing:
            raise ConfigurationError(missing)


# ---------------------------------------------------------------------------
# TOKEN RESPONSES
# ---------------------------------------------------------------------------

class GoogleTokenResponse(BaseModel):
    """
    Successful response from Google's token endpoint.

    Returned both for the authorization-code exchange and for refreshes.
    Fields are optional so a malformed 200 response can be reported as a
    TokenExchangeError instead of a validation crash.

    Example response from Google:
    {
        "access_token": "ya29.a0AfB_byC...",
        "expires_in": 3599,
        "refresh_token": "1//0eXyz...",
        "scope": "https://www.googleapis.com/auth/calendar.readonly",
        "token_type": "Bearer"
    }
    """
    access_token: Optional[str] = Field(None, description="OAuth access token")
    expires_in: Optional[int] = Field(None, description="Seconds until expiration")
    refresh_token: Optional[str] = Field(None, description="Refresh token for renewal")


class GoogleTokenErrorResponse(BaseModel):
    """
    Error body from Google's token endpoint.

    Example:
    {
        "error": "redirect_uri_mismatch",
        "error_description": "Bad Request"
    }
    """
    error: Optional[str] = Field(None)
    error_description: Optional[str] = Field(None)
