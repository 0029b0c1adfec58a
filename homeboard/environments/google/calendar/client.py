"""
Google Calendar API Client - Fetch calendar events.

This client issues read-only requests to the Google Calendar API and turns
failures into the integration's error types:

- non-2xx responses → ProviderError (HTTP status + Google's message + a hint)
- transport failures and timeouts → NetworkError

API Reference:
==============
- Events API: https://developers.google.com/calendar/api/v3/reference/events/list

Usage Example:
==============
    client = GoogleCalendarClient(access_token="ya29.xxx")
    events = await client.list_events(
        calendar_id="family@group.calendar.google.com",
        time_min=window.start,
        time_max=window.end,
    )
"""

import logging
from datetime import datetime
from typing import List, Optional
from urllib.parse import quote

import httpx

from homeboard.environments.base import NetworkError, ProviderError
from homeboard.environments.google.calendar.schemas import (
    CalendarEvent,
    CalendarEventsResponse,
)


logger = logging.getLogger("homeboard.environments.google.calendar")

# Status-specific hints shown next to Google's own message
STATUS_HINTS = {
    401: "The calendar session has expired; re-authorize the calendar",
    403: "Calendar access was not granted; check the consent and calendar sharing permissions",
    404: "Calendar not found; check GOOGLE_CALENDAR_ID",
}

# Upper bound accepted by events.list
MAX_RESULTS = 2500


class GoogleCalendarClient:
    """
    Google Calendar API client.

    Requires a valid access token with the calendar.readonly scope.
    The token is not refreshed here: callers obtain it from the
    TokenLifecycleManager right before constructing the client.

    Attributes:
        access_token: Google OAuth access token with calendar scope
    """

    # Google Calendar API base URL
    BASE_URL = "https://www.googleapis.com/calendar/v3"

    def __init__(
        self,
        access_token: str,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the Calendar client.

        Args:
            access_token: Valid Google OAuth access token with calendar scope
            timeout: HTTP timeout in seconds
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self.access_token = access_token
        self.timeout = timeout
        self._transport = transport

    # -------------------------------------------------------------------------
    # HTTP
    # -------------------------------------------------------------------------

    def _get_headers(self) -> dict:
        """Get authorization headers for API requests."""
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Accept": "application/json",
        }

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict] = None,
    ) -> dict:
        """
        Make an authenticated request to the Calendar API.

        Args:
            method: HTTP method (GET)
            endpoint: API endpoint path (e.g., "/calendars/primary/events")
            params: Query parameters

        Returns:
            Parsed JSON response

        Raises:
            ProviderError: If Google answers with a non-2xx status
            NetworkError: If the request never completes
        """
        url = f"{self.BASE_URL}{endpoint}"

        async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
            try:
                response = await client.request(
                    method=method,
                    url=url,
                    headers=self._get_headers(),
                    params=params,
                )
            except httpx.RequestError as e:
                logger.error(f"Network error in Calendar API: {e}")
                raise NetworkError(f"Network error contacting Google Calendar: {e}") from e

        if not response.is_success:
            provider_message = _extract_error_message(response)
            hint = STATUS_HINTS.get(response.status_code)
            logger.error(f"Calendar API error: {response.status_code} - {provider_message}")
            raise ProviderError(
                status_code=response.status_code,
                provider_message=provider_message,
                hint=hint,
                response=response.text,
            )

        try:
            return response.json()
        except ValueError as e:
            raise ProviderError(
                status_code=response.status_code,
                provider_message=f"Unreadable Calendar API response: {e}",
                response=response.text,
            ) from e

    # -------------------------------------------------------------------------
    # CALENDAR EVENTS
    # -------------------------------------------------------------------------

    async def list_events(
        self,
        calendar_id: str,
        time_min: datetime,
        time_max: datetime,
    ) -> List[CalendarEvent]:
        """
        List the events of one calendar between two instants.

        One request: recurring events are expanded by Google
        (singleEvents=true) and returned in start-time order
        (orderBy=startTime). The order is kept as-is.

        Args:
            calendar_id: Calendar identifier ("primary" or an email-like id)
            time_min: Inclusive lower bound (timezone-aware)
            time_max: Exclusive upper bound (timezone-aware)

        Returns:
            List of CalendarEvent objects
        """
        params = {
            "timeMin": time_min.isoformat(),
            "timeMax": time_max.isoformat(),
            "singleEvents": "true",
            "orderBy": "startTime",
            "maxResults": MAX_RESULTS,
        }

        logger.info(
            f"Fetching calendar events {params['timeMin']} .. {params['timeMax']}"
        )

        response_data = await self._make_request(
            method="GET",
            endpoint=f"/calendars/{quote(calendar_id, safe='')}/events",
            params=params,
        )

        events_response = CalendarEventsResponse(**response_data)

        logger.info(f"Fetched {len(events_response.items)} calendar events")

        if events_response.next_page_token:
            logger.warning(
                f"More than {MAX_RESULTS} events in range; only the first page is returned"
            )

        return events_response.items


def _extract_error_message(response: httpx.Response) -> str:
    """
    Pull the human-readable message out of a Google API error body.

    Google wraps errors as {"error": {"code": 404, "message": "Not Found"}};
    anything else falls back to the raw body.
    """
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return error["message"]
    if isinstance(error, str):
        return body.get("error_description") or error
    return response.text or response.reason_phrase
