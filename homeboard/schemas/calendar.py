"""
Calendar schemas - Pydantic response models for the calendar endpoints.

Events are passed through in Google's wire shape (dateTime, htmlLink, ...)
so the dashboard can use them as-is; the layout models are our own.
"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from homeboard.services.token_manager import TokenState


# ---------------------------------------------------------------------------
# AUTHORIZATION
# ---------------------------------------------------------------------------


class AuthorizeResponse(BaseModel):
    """
    Response of GET /authorize.

    Example response:
    {
        "authUrl": "https://accounts.google.com/o/oauth2/v2/auth?client_id=..."
    }
    """
    auth_url: str = Field(..., alias="authUrl")

    class Config:
        populate_by_name = True


class AuthorizationStatus(BaseModel):
    """Response of GET /authorize/status."""
    state: TokenState
    connected: bool
    expires_at: Optional[datetime] = None


# ---------------------------------------------------------------------------
# EVENTS
# ---------------------------------------------------------------------------


class EventsResponse(BaseModel):
    """
    Response of GET /events and GET /events/month.

    events: Google event resources, in start-time order
    """
    events: List[Dict[str, Any]] = Field(default_factory=list)


class CalendarErrorResponse(BaseModel):
    """
    Error body of every JSON calendar endpoint.

    reauthorize: True when the admin must run /authorize again; the
    dashboard shows a "Re-Authorize" button only then.
    """
    error: str
    events: List[Dict[str, Any]] = Field(default_factory=list)
    reauthorize: bool = False
    missing: Optional[List[str]] = None


# ---------------------------------------------------------------------------
# WEEK GRID
# ---------------------------------------------------------------------------


class AllDayPlacementOut(BaseModel):
    event_id: str
    column_index: int


class TimedPlacementOut(BaseModel):
    event_id: str
    column_index: int
    top_offset: float
    height: float
    start_minutes: int
    end_minutes: int
    clipped_start: bool = False
    clipped_end: bool = False
    lane: int = 0
    lane_count: int = 1


class WeekGridResponse(BaseModel):
    """
    Response of GET /events/week.

    days: The five Monday-Friday dates (column 0..4)
    slot_labels: "08:00" .. "19:30", one per 30-minute row
    """
    start: datetime
    end: datetime
    days: List[date]
    slot_labels: List[str]
    slot_height: float
    grid_height: float
    events: List[Dict[str, Any]] = Field(default_factory=list)
    all_day: List[AllDayPlacementOut] = Field(default_factory=list)
    timed: List[TimedPlacementOut] = Field(default_factory=list)
