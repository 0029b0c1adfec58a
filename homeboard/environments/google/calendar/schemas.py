"""
Google Calendar Schemas - Data structures for calendar operations.

These Pydantic models represent Google Calendar API responses in a clean,
typed format. They keep Google's wire names as aliases, so an event can be
returned to the dashboard exactly as the provider shaped it:

    event.model_dump(by_alias=True, exclude_none=True)

Reference: https://developers.google.com/calendar/api/v3/reference/events
"""

from datetime import datetime, date as date_type, tzinfo
from typing import Optional, List
from pydantic import BaseModel, Field


class EventTime(BaseModel):
    """
    Event start or end time.

    Google Calendar API returns times in one of two formats:
    - dateTime: For timed events (e.g., "2024-01-15T10:00:00-05:00")
    - date: For all-day events (e.g., "2024-01-15")

    Exactly one of the two is set on a well-formed event.
    """
    date_time: Optional[datetime] = Field(None, alias="dateTime")
    date: Optional[str] = Field(None)  # YYYY-MM-DD format for all-day events
    time_zone: Optional[str] = Field(None, alias="timeZone")

    def is_all_day(self) -> bool:
        """Check if this is an all-day event (date only, no time)."""
        return self.date is not None and self.date_time is None

    def get_date(self, tz: Optional[tzinfo] = None) -> Optional[date_type]:
        """
        Calendar day this time falls on.

        Timed values are converted to `tz` first (when given and the value
        is timezone-aware), so an event at 23:30 UTC lands on the next day
        for a display zone east of UTC.
        """
        if self.date_time is not None:
            return self.get_datetime(tz).date()
        if self.date:
            return date_type.fromisoformat(self.date)
        return None

    def get_datetime(self, tz: Optional[tzinfo] = None) -> Optional[datetime]:
        """Timed value, converted to `tz` when given and the value is aware."""
        if self.date_time is None:
            return None
        if tz is not None and self.date_time.tzinfo is not None:
            return self.date_time.astimezone(tz)
        return self.date_time

    class Config:
        populate_by_name = True


class CalendarEvent(BaseModel):
    """
    A Google Calendar event.

    Immutable snapshot from the provider; never persisted locally.
    Contains the fields the dashboard uses from the API event resource.
    """
    id: str = Field(..., description="Unique event identifier")
    summary: Optional[str] = Field(None, description="Event title")
    description: Optional[str] = Field(None, description="Event description")
    location: Optional[str] = Field(None, description="Event location")

    # Times
    start: Optional[EventTime] = Field(None, description="Event start time")
    end: Optional[EventTime] = Field(None, description="Event end time")

    # Status
    status: Optional[str] = Field(None, description="confirmed, tentative, cancelled")
    html_link: Optional[str] = Field(None, alias="htmlLink")

    class Config:
        populate_by_name = True
        frozen = True

    def is_all_day(self) -> bool:
        """Check if this is an all-day event."""
        if self.start:
            return self.start.is_all_day()
        return False

    def is_timed(self) -> bool:
        """Check if this event carries a date-time start."""
        return self.start is not None and self.start.date_time is not None

    def get_display_title(self) -> str:
        """Get a display-friendly title (with fallback)."""
        return self.summary or "(No title)"


class CalendarEventsResponse(BaseModel):
    """
    Response from the Calendar Events list API.
    """
    kind: Optional[str] = Field(None)
    summary: Optional[str] = Field(None, description="Calendar title")
    time_zone: Optional[str] = Field(None, alias="timeZone")
    items: List[CalendarEvent] = Field(default_factory=list)
    next_page_token: Optional[str] = Field(None, alias="nextPageToken")

    class Config:
        populate_by_name = True
