"""
Google Environment Module - Google OAuth + Calendar integration.

Architecture:
=============
google/
├── __init__.py           # Module exports
├── auth/                 # OAuth consent URL, code exchange, refresh
│   ├── client.py
│   └── schemas.py
└── calendar/             # Calendar API (events.list)
    ├── client.py
    └── schemas.py

Usage:
======
    from homeboard.environments.google import GoogleAuthClient, GoogleCalendarClient

    auth_client = GoogleAuthClient(config)
    auth_url = auth_client.get_authorization_url()

    tokens = await auth_client.exchange_code_for_tokens(code)

    calendar = GoogleCalendarClient(access_token=tokens.access_token)
    events = await calendar.list_events(calendar_id, time_min, time_max)
"""

from homeboard.environments.google.auth import GoogleAuthClient, GoogleCalendarConfig, CALENDAR_SCOPES
from homeboard.environments.google.calendar import GoogleCalendarClient, CalendarEvent

__all__ = [
    "GoogleAuthClient",
    "GoogleCalendarConfig",
    "GoogleCalendarClient",
    "CalendarEvent",
    "CALENDAR_SCOPES",
]
