"""
Google Calendar Module - read-only Calendar API integration.

Fetches the household calendar's events for a time window; layout and
rendering live in homeboard.services.
"""

from homeboard.environments.google.calendar.client import GoogleCalendarClient
from homeboard.environments.google.calendar.schemas import (
    CalendarEvent,
    CalendarEventsResponse,
    EventTime,
)

__all__ = [
    "GoogleCalendarClient",
    "CalendarEvent",
    "CalendarEventsResponse",
    "EventTime",
]
