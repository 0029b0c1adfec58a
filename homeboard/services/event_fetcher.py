"""
Calendar Event Fetcher - events of the household calendar for a time range.

Each call runs: validate config → get a valid access token (refreshing if
stale) → one events.list request. Token errors (NoCredentialError,
TokenRefreshError) propagate unchanged so the HTTP layer can ask for
re-authorization; Calendar API failures surface as ProviderError. A 401
from the Calendar API marks the access token expired so the next call
refreshes it.
"""

import logging
from datetime import datetime
from typing import List, Optional, Union

import httpx

from homeboard.environments.base import ProviderError
from homeboard.environments.google.auth.schemas import FETCH_KEYS, GoogleCalendarConfig
from homeboard.environments.google.calendar.client import GoogleCalendarClient
from homeboard.environments.google.calendar.schemas import CalendarEvent
from homeboard.services.token_manager import TokenLifecycleManager
from homeboard.services.week_window import MonthWindow, WeekWindow


logger = logging.getLogger("homeboard.services.event_fetcher")


class CalendarEventFetcher:
    """
    Fetches calendar events for a window.

    Example:
        fetcher = CalendarEventFetcher(config, token_manager)
        events = await fetcher.fetch_window(compute_week_window(now))
    """

    def __init__(
        self,
        config: GoogleCalendarConfig,
        token_manager: TokenLifecycleManager,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.token_manager = token_manager
        self.timeout = timeout
        self._transport = transport

    async def fetch_events(self, time_min: datetime, time_max: datetime) -> List[CalendarEvent]:
        """
        Fetch events between two instants, in provider (start-time) order.

        Raises:
            ConfigurationError: Before any I/O, if a required key is unset
            NoCredentialError, TokenRefreshError: Re-authorization needed
            ProviderError: Non-2xx answer from the Calendar API (or 429/5xx on refresh)
            NetworkError: Google unreachable or timed out
        """
        self.config.require(*FETCH_KEYS)

        access_token = await self.token_manager.get_valid_access_token()

        client = GoogleCalendarClient(
            access_token=access_token,
            timeout=self.timeout,
            transport=self._transport,
        )
        try:
            return await client.list_events(
                calendar_id=self.config.calendar_id,
                time_min=time_min,
                time_max=time_max,
            )
        except ProviderError as e:
            if e.status_code == 401:
                self.token_manager.expire_access_token()
            raise

    async def fetch_window(self, window: Union[WeekWindow, MonthWindow]) -> List[CalendarEvent]:
        """Fetch events for a week or month window (inclusive bounds)."""
        logger.info(f"Fetching events for window {window.start.date()} .. {window.end.date()}")
        return await self.fetch_events(window.start, window.end)
