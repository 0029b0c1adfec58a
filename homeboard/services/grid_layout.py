"""
Grid Layout Engine - positions calendar events on the weekly time grid.

The grid has five columns (Monday-Friday of the WeekWindow) and a visible
band of 08:00-20:00 split into 30-minute slots. All-day events go to a
separate row above the grid; timed events get a vertical offset and a
height, clipped to the visible band.

Timed-event rules (minutes since the start day's local midnight):

    start >= 20:00                       → not shown
    start <  08:00 and end <= 08:00      → not shown
    start clipped up to 08:00, end clamped down to 20:00
    duration   = max(end - start, 30)      # short events stay clickable
    top_offset = (start - 08:00) / 30 * slot_height
    height     = duration / 30 * slot_height

Examples with slot_height=30:

    07:00-09:00  → top 0,   height 60   (08:00-09:00 visible)
    19:30-20:30  → top 690, height 30   (19:30-20:00 visible)
    10:00-10:00  → top 60,  height 30   (30-minute floor)

Overlapping events in one column are not separated by default; they share
the column and the rendering surface stacks them. pack_lanes=True assigns
side-by-side lanes with greedy earliest-start interval partitioning.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, tzinfo
from typing import Dict, List, Optional

from homeboard.environments.google.calendar.schemas import CalendarEvent
from homeboard.services.week_window import WeekWindow


logger = logging.getLogger("homeboard.services.grid_layout")

VISIBLE_START_MINUTES = 8 * 60
VISIBLE_END_MINUTES = 20 * 60
SLOT_MINUTES = 30
DEFAULT_SLOT_HEIGHT = 30  # pixels per slot


# ---------------------------------------------------------------------------
# PLACEMENTS
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AllDayPlacement:
    """An all-day event in the row above the grid. No vertical position."""
    event_id: str
    column_index: int


@dataclass(frozen=True)
class TimedPlacement:
    """
    A timed event's rectangle inside one day column.

    start_minutes/end_minutes are the visible (clipped) bounds in minutes
    since midnight; clipped_start/clipped_end tell the renderer the event
    continues beyond the visible band.
    """
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


@dataclass
class WeekGrid:
    """Layout result for one week window."""
    window: WeekWindow
    all_day: List[AllDayPlacement] = field(default_factory=list)
    timed: List[TimedPlacement] = field(default_factory=list)

    def column(self, column_index: int) -> List[TimedPlacement]:
        """Timed placements of one day column, in start-time order."""
        return [p for p in self.timed if p.column_index == column_index]

    def all_day_column(self, column_index: int) -> List[AllDayPlacement]:
        """All-day placements of one day column."""
        return [p for p in self.all_day if p.column_index == column_index]


# ---------------------------------------------------------------------------
# ENGINE
# ---------------------------------------------------------------------------


class GridLayoutEngine:
    """
    Converts a list of calendar events into grid placements.

    Example:
        engine = GridLayoutEngine(tz=ZoneInfo("America/New_York"))
        grid = engine.layout(events, compute_week_window(now))
        for placement in grid.column(0):
            ...

    Attributes:
        slot_height: Pixels per 30-minute slot
        tz: Display timezone timed events are converted to (None keeps
            each event's own offset)
        pack_lanes: Assign side-by-side lanes to overlapping events
    """

    def __init__(
        self,
        slot_height: float = DEFAULT_SLOT_HEIGHT,
        tz: Optional[tzinfo] = None,
        pack_lanes: bool = False,
        visible_start_minutes: int = VISIBLE_START_MINUTES,
        visible_end_minutes: int = VISIBLE_END_MINUTES,
        slot_minutes: int = SLOT_MINUTES,
    ):
        if visible_end_minutes <= visible_start_minutes:
            raise ValueError("Visible window must end after it starts")
        self.slot_height = slot_height
        self.tz = tz
        self.pack_lanes = pack_lanes
        self.visible_start = visible_start_minutes
        self.visible_end = visible_end_minutes
        self.slot_minutes = slot_minutes

    # -------------------------------------------------------------------------
    # GRID GEOMETRY
    # -------------------------------------------------------------------------

    @property
    def slot_count(self) -> int:
        return (self.visible_end - self.visible_start) // self.slot_minutes

    @property
    def grid_height(self) -> float:
        return self.slot_count * self.slot_height

    def slot_labels(self) -> List[str]:
        """Start label of every slot: "08:00", "08:30", ..., "19:30"."""
        return [
            f"{minutes // 60:02d}:{minutes % 60:02d}"
            for minutes in range(self.visible_start, self.visible_end, self.slot_minutes)
        ]

    # -------------------------------------------------------------------------
    # LAYOUT
    # -------------------------------------------------------------------------

    def layout(self, events: List[CalendarEvent], window: WeekWindow) -> WeekGrid:
        """
        Place every event of `events` that falls on Monday-Friday of `window`.

        Events on the weekend, outside the window, or outside the visible
        hours produce no placement.
        """
        columns: Dict = {day: index for index, day in enumerate(window.weekdays())}

        all_day: List[AllDayPlacement] = []
        timed_by_column: Dict[int, List[tuple]] = {index: [] for index in columns.values()}

        for event in events:
            if event.start is None:
                logger.debug(f"Skipping event {event.id} without a start")
                continue

            column_index = columns.get(event.start.get_date(self.tz))
            if column_index is None:
                continue

            if event.is_all_day():
                all_day.append(AllDayPlacement(event_id=event.id, column_index=column_index))
                continue

            placement = self.place_timed(event, column_index)
            if placement is not None:
                timed_by_column[column_index].append((event.start.get_datetime(self.tz), placement))

        timed: List[TimedPlacement] = []
        for column_index in sorted(timed_by_column):
            # Stable: events starting at the same instant keep provider order
            ordered = [p for _, p in sorted(timed_by_column[column_index], key=lambda item: item[0])]
            if self.pack_lanes:
                ordered = assign_lanes(ordered)
            timed.extend(ordered)

        all_day.sort(key=lambda p: p.column_index)

        return WeekGrid(window=window, all_day=all_day, timed=timed)

    def place_timed(self, event: CalendarEvent, column_index: int) -> Optional[TimedPlacement]:
        """
        Position one timed event, or None if it is outside the visible band.
        """
        start = event.start.get_datetime(self.tz)
        end = event.end.get_datetime(self.tz) if event.end and event.end.date_time else start

        midnight = start.replace(hour=0, minute=0, second=0, microsecond=0)
        start_minutes = _minutes_between(midnight, start)
        # Measured from the start day, so an event running past midnight ends after 24:00
        end_minutes = _minutes_between(midnight, end)

        if start_minutes >= self.visible_end:
            return None
        if start_minutes < self.visible_start and end_minutes <= self.visible_start:
            return None

        visible_start = max(start_minutes, self.visible_start)
        visible_end = min(end_minutes, self.visible_end)
        duration = max(visible_end - visible_start, self.slot_minutes)

        return TimedPlacement(
            event_id=event.id,
            column_index=column_index,
            top_offset=(visible_start - self.visible_start) / self.slot_minutes * self.slot_height,
            height=duration / self.slot_minutes * self.slot_height,
            start_minutes=visible_start,
            end_minutes=max(visible_end, visible_start),
            clipped_start=start_minutes < self.visible_start,
            clipped_end=end_minutes > self.visible_end,
        )


# ---------------------------------------------------------------------------
# LANE PACKING
# ---------------------------------------------------------------------------


def assign_lanes(placements: List[TimedPlacement]) -> List[TimedPlacement]:
    """
    Greedy interval partitioning of one column's placements.

    Placements are taken in order of top offset; each goes into the first
    lane whose last rectangle ends at or above its top, or a new lane.
    lane_count is the number of lanes used by the group of transitively
    overlapping placements it belongs to, so the renderer can split the
    column width per group.
    """
    ordered = sorted(placements, key=lambda p: p.top_offset)
    packed: List[TimedPlacement] = []

    group: List[TimedPlacement] = []
    lane_bottoms: List[float] = []
    group_bottom = 0.0

    for placement in ordered:
        bottom = placement.top_offset + placement.height

        if group and placement.top_offset >= group_bottom:
            packed.extend(replace(p, lane_count=len(lane_bottoms)) for p in group)
            group, lane_bottoms = [], []

        for lane, lane_bottom in enumerate(lane_bottoms):
            if lane_bottom <= placement.top_offset:
                lane_bottoms[lane] = bottom
                break
        else:
            lane = len(lane_bottoms)
            lane_bottoms.append(bottom)

        group_bottom = bottom if not group else max(group_bottom, bottom)
        group.append(replace(placement, lane=lane))

    packed.extend(replace(p, lane_count=len(lane_bottoms)) for p in group)
    return packed


def _minutes_between(earlier: datetime, later: datetime) -> int:
    return int((later - earlier).total_seconds() // 60)
