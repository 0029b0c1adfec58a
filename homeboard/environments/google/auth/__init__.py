"""
Google Auth Module - OAuth 2.0 Authentication for Google Calendar

OAuth 2.0 Flow Overview:
========================
1. Admin asks for the consent URL (/authorize)
2. Admin grants read-only calendar access on Google's consent screen
3. Google redirects back to /callback with an authorization code
4. Backend exchanges the code for access + refresh tokens
5. Tokens are stored as the single calendar credential
"""

from homeboard.environments.google.auth.client import GoogleAuthClient
from homeboard.environments.google.auth.schemas import (
    AUTHORIZE_KEYS,
    CALENDAR_SCOPES,
    EXCHANGE_KEYS,
    FETCH_KEYS,
    REFRESH_KEYS,
    GoogleCalendarConfig,
    GoogleTokenResponse,
)

__all__ = [
    "GoogleAuthClient",
    "GoogleCalendarConfig",
    "GoogleTokenResponse",
    "AUTHORIZE_KEYS",
    "CALENDAR_SCOPES",
    "EXCHANGE_KEYS",
    "FETCH_KEYS",
    "REFRESH_KEYS",
]
