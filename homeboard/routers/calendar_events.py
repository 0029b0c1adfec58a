"""
Calendar Events Router - event data for the household dashboard.

Endpoints:
==========
- GET /events?timeMin=&timeMax=   → {"events": [...]} for an arbitrary range
- GET /events/week?today=         → current week window + grid placements
- GET /events/month?today=        → {"events": [...]} for the current month

These routes need no login: the dashboard runs on a shared household
screen and the server holds the only calendar credential. Failures never
raise; they return {"error", "events": [], "reauthorize"} with the status
from homeboard.routers.errors.
"""

import logging
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from homeboard.deps import get_clock, get_display_timezone, get_event_fetcher
from homeboard.environments.base import CalendarIntegrationError
from homeboard.routers.errors import calendar_error_response, error_response
from homeboard.schemas.calendar import (
    AllDayPlacementOut,
    EventsResponse,
    TimedPlacementOut,
    WeekGridResponse,
)
from homeboard.services.event_fetcher import CalendarEventFetcher
from homeboard.services.grid_layout import GridLayoutEngine
from homeboard.services.token_manager import Clock
from homeboard.services.week_window import compute_month_window, compute_week_window


logger = logging.getLogger("homeboard.routers.calendar_events")

# Range used when /events is called without timeMax
DEFAULT_RANGE_DAYS = 30


# ---------------------------------------------------------------------------
# ROUTER SETUP
# ---------------------------------------------------------------------------
router = APIRouter(prefix="/events", tags=["calendar-events"])


def _parse_instant(value: str) -> datetime:
    """ISO 8601 instant; a value without an offset is taken as UTC."""
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _local_now(clock: Clock, tz: tzinfo, today: Optional[date]) -> datetime:
    """The instant the window is computed from: `today` at midnight, or now."""
    if today is not None:
        return datetime.combine(today, time.min, tzinfo=tz)
    return clock().astimezone(tz)


def _serialize(events) -> list:
    return [event.model_dump(by_alias=True, exclude_none=True, mode="json") for event in events]


# ---------------------------------------------------------------------------
# ENDPOINTS
# ---------------------------------------------------------------------------


@router.get("", response_model=EventsResponse)
async def list_events(
    time_min: Optional[str] = Query(None, alias="timeMin", description="ISO 8601 start (default: now)"),
    time_max: Optional[str] = Query(None, alias="timeMax", description="ISO 8601 end (default: +30 days)"),
    fetcher: CalendarEventFetcher = Depends(get_event_fetcher),
    clock: Clock = Depends(get_clock),
):
    """
    Events of the household calendar between timeMin and timeMax.

    Returns:
        {"events": [...]} in start-time order, Google's event shape

    Errors:
        400 unparseable or empty range, 401 re-authorization needed,
        500 not configured, 502 Calendar API error, 503 Google or store unreachable
    """
    now = clock()
    try:
        start = _parse_instant(time_min) if time_min else now
    except ValueError:
        return error_response(f"Invalid timeMin: {time_min}", status.HTTP_400_BAD_REQUEST)
    try:
        end = _parse_instant(time_max) if time_max else now + timedelta(days=DEFAULT_RANGE_DAYS)
    except ValueError:
        return error_response(f"Invalid timeMax: {time_max}", status.HTTP_400_BAD_REQUEST)

    if end <= start:
        return error_response("timeMax must be after timeMin", status.HTTP_400_BAD_REQUEST)

    try:
        events = await fetcher.fetch_events(start, end)
    except CalendarIntegrationError as e:
        return calendar_error_response(e)

    return EventsResponse(events=_serialize(events))


@router.get("/week", response_model=WeekGridResponse)
async def week_events(
    today: Optional[date] = Query(None, description="Day to compute the week for (default: today)"),
    lanes: bool = Query(False, description="Place overlapping events side by side"),
    fetcher: CalendarEventFetcher = Depends(get_event_fetcher),
    clock: Clock = Depends(get_clock),
    tz: tzinfo = Depends(get_display_timezone),
):
    """
    The week shown on the dashboard, laid out on the 08:00-20:00 grid.

    Saturday and Sunday show the following week.
    """
    window = compute_week_window(_local_now(clock, tz, today))

    try:
        events = await fetcher.fetch_window(window)
    except CalendarIntegrationError as e:
        return calendar_error_response(e)

    engine = GridLayoutEngine(tz=tz, pack_lanes=lanes)
    grid = engine.layout(events, window)

    return WeekGridResponse(
        start=window.start,
        end=window.end,
        days=window.weekdays(),
        slot_labels=engine.slot_labels(),
        slot_height=engine.slot_height,
        grid_height=engine.grid_height,
        events=_serialize(events),
        all_day=[AllDayPlacementOut(**vars(p)) for p in grid.all_day],
        timed=[TimedPlacementOut(**vars(p)) for p in grid.timed],
    )


@router.get("/month", response_model=EventsResponse)
async def month_events(
    today: Optional[date] = Query(None, description="Any day of the month to show (default: today)"),
    fetcher: CalendarEventFetcher = Depends(get_event_fetcher),
    clock: Clock = Depends(get_clock),
    tz: tzinfo = Depends(get_display_timezone),
):
    """Events of the calendar month containing `today`."""
    window = compute_month_window(_local_now(clock, tz, today))

    try:
        events = await fetcher.fetch_window(window)
    except CalendarIntegrationError as e:
        return calendar_error_response(e)

    return EventsResponse(events=_serialize(events))
