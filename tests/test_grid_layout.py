"""
Tests for GridLayoutEngine - placing events on the weekly time grid.

Grid: Monday-Friday columns, 08:00-20:00 visible, 30-minute slots,
30 px per slot (so 1 minute = 1 px).
"""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from homeboard.environments.google.calendar.schemas import CalendarEvent
from homeboard.services.grid_layout import GridLayoutEngine, TimedPlacement, assign_lanes
from homeboard.services.week_window import compute_week_window

from conftest import all_day_event, timed_event


# Week of Monday 2024-06-10
WINDOW = compute_week_window(datetime(2024, 6, 12, 9, 0, tzinfo=timezone.utc))


def make_events(*resources) -> list:
    return [CalendarEvent(**resource) for resource in resources]


@pytest.fixture
def engine() -> GridLayoutEngine:
    return GridLayoutEngine(tz=timezone.utc)


# ---------------------------------------------------------------------------
# GEOMETRY
# ---------------------------------------------------------------------------


class TestGridGeometry:

    def test_slot_labels(self, engine):
        labels = engine.slot_labels()

        assert len(labels) == 24
        assert labels[0] == "08:00"
        assert labels[1] == "08:30"
        assert labels[-1] == "19:30"

    def test_grid_height(self, engine):
        assert engine.grid_height == 24 * 30

    def test_rejects_empty_visible_window(self):
        with pytest.raises(ValueError):
            GridLayoutEngine(visible_start_minutes=600, visible_end_minutes=600)


# ---------------------------------------------------------------------------
# TIMED EVENTS
# ---------------------------------------------------------------------------


class TestTimedPlacement:

    def _place_one(self, engine, start, end=None) -> TimedPlacement:
        grid = engine.layout(make_events(timed_event("e1", start, end)), WINDOW)
        assert len(grid.timed) == 1
        return grid.timed[0]

    def test_event_inside_visible_hours(self, engine):
        placement = self._place_one(engine, "2024-06-11T10:00:00Z", "2024-06-11T11:30:00Z")

        assert placement.column_index == 1
        assert placement.top_offset == 60
        assert placement.height == 90
        assert (placement.start_minutes, placement.end_minutes) == (600, 690)
        assert not placement.clipped_start
        assert not placement.clipped_end

    def test_event_starting_before_eight_is_clipped(self, engine):
        placement = self._place_one(engine, "2024-06-10T07:00:00Z", "2024-06-10T09:00:00Z")

        assert placement.top_offset == 0
        assert placement.height == 60
        assert placement.clipped_start

    def test_event_running_past_eight_pm_is_clamped(self, engine):
        placement = self._place_one(engine, "2024-06-10T19:30:00Z", "2024-06-10T20:30:00Z")

        assert placement.top_offset == 690
        assert placement.height == 30
        assert placement.clipped_end

    def test_short_event_gets_minimum_height(self, engine):
        placement = self._place_one(engine, "2024-06-10T10:00:00Z", "2024-06-10T10:10:00Z")

        assert placement.height == 30

    def test_zero_length_event(self, engine):
        placement = self._place_one(engine, "2024-06-10T10:00:00Z", "2024-06-10T10:00:00Z")

        assert placement.top_offset == 60
        assert placement.height == 30

    def test_missing_end_treated_as_zero_length(self, engine):
        placement = self._place_one(engine, "2024-06-10T12:00:00Z")

        assert placement.top_offset == 120
        assert placement.height == 30

    def test_zero_length_event_at_eight_is_kept(self, engine):
        placement = self._place_one(engine, "2024-06-10T08:00:00Z", "2024-06-10T08:00:00Z")

        assert placement.top_offset == 0
        assert placement.height == 30

    def test_overnight_event_clamped_at_eight_pm(self, engine):
        placement = self._place_one(engine, "2024-06-10T18:00:00Z", "2024-06-11T02:00:00Z")

        assert placement.column_index == 0
        assert placement.top_offset == 600
        assert placement.height == 120
        assert placement.clipped_end

    @pytest.mark.parametrize("start,end", [
        ("2024-06-10T06:00:00Z", "2024-06-10T07:00:00Z"),  # entirely before 08:00
        ("2024-06-10T07:00:00Z", "2024-06-10T08:00:00Z"),  # ends exactly at 08:00
        ("2024-06-10T20:00:00Z", "2024-06-10T21:00:00Z"),  # starts at 20:00
        ("2024-06-10T22:00:00Z", "2024-06-10T23:00:00Z"),  # late evening
    ])
    def test_events_outside_visible_hours_are_dropped(self, engine, start, end):
        grid = engine.layout(make_events(timed_event("e1", start, end)), WINDOW)

        assert grid.timed == []

    def test_converts_to_display_timezone(self):
        engine = GridLayoutEngine(tz=ZoneInfo("America/New_York"))
        # 14:00 UTC is 10:00 in New York (EDT, UTC-4)
        grid = engine.layout(make_events(timed_event("e1", "2024-06-12T14:00:00Z", "2024-06-12T15:00:00Z")), WINDOW)

        assert grid.timed[0].column_index == 2
        assert grid.timed[0].top_offset == 120

    def test_timezone_conversion_can_change_the_day(self):
        engine = GridLayoutEngine(tz=ZoneInfo("Asia/Tokyo"))
        # Monday 23:30 UTC is Tuesday 08:30 in Tokyo
        grid = engine.layout(make_events(timed_event("e1", "2024-06-10T23:30:00Z", "2024-06-11T00:30:00Z")), WINDOW)

        assert grid.timed[0].column_index == 1
        assert grid.timed[0].top_offset == 30

    def test_slot_height_scales_offsets(self):
        engine = GridLayoutEngine(slot_height=60, tz=timezone.utc)
        grid = engine.layout(make_events(timed_event("e1", "2024-06-10T09:00:00Z", "2024-06-10T10:00:00Z")), WINDOW)

        assert grid.timed[0].top_offset == 120
        assert grid.timed[0].height == 120


# ---------------------------------------------------------------------------
# COLUMNS AND ORDERING
# ---------------------------------------------------------------------------


class TestColumns:

    def test_weekend_events_are_dropped(self, engine):
        events = make_events(
            timed_event("sat", "2024-06-15T10:00:00Z", "2024-06-15T11:00:00Z"),
            all_day_event("sun", "2024-06-16", "2024-06-17"),
        )
        grid = engine.layout(events, WINDOW)

        assert grid.timed == []
        assert grid.all_day == []

    def test_events_outside_window_are_dropped(self, engine):
        grid = engine.layout(make_events(timed_event("e1", "2024-06-18T10:00:00Z", "2024-06-18T11:00:00Z")), WINDOW)

        assert grid.timed == []

    def test_column_is_sorted_by_start(self, engine):
        events = make_events(
            timed_event("late", "2024-06-10T15:00:00Z", "2024-06-10T16:00:00Z"),
            timed_event("early", "2024-06-10T09:00:00Z", "2024-06-10T10:00:00Z"),
            timed_event("tuesday", "2024-06-11T08:00:00Z", "2024-06-11T09:00:00Z"),
        )
        grid = engine.layout(events, WINDOW)

        assert [p.event_id for p in grid.column(0)] == ["early", "late"]
        assert [p.event_id for p in grid.column(1)] == ["tuesday"]
        assert grid.column(4) == []

    def test_same_start_keeps_provider_order(self, engine):
        events = make_events(
            timed_event("first", "2024-06-10T09:00:00Z", "2024-06-10T10:00:00Z"),
            timed_event("second", "2024-06-10T09:00:00Z", "2024-06-10T09:30:00Z"),
        )
        grid = engine.layout(events, WINDOW)

        assert [p.event_id for p in grid.column(0)] == ["first", "second"]

    def test_overlapping_events_share_the_column(self, engine):
        events = make_events(
            timed_event("a", "2024-06-10T09:00:00Z", "2024-06-10T11:00:00Z"),
            timed_event("b", "2024-06-10T10:00:00Z", "2024-06-10T12:00:00Z"),
        )
        grid = engine.layout(events, WINDOW)

        assert [(p.lane, p.lane_count) for p in grid.column(0)] == [(0, 1), (0, 1)]


# ---------------------------------------------------------------------------
# ALL-DAY EVENTS
# ---------------------------------------------------------------------------


class TestAllDayPlacement:

    def test_all_day_event_has_column_only(self, engine):
        grid = engine.layout(make_events(all_day_event("holiday", "2024-06-12", "2024-06-13")), WINDOW)

        assert len(grid.all_day) == 1
        placement = grid.all_day[0]
        assert placement.column_index == 2
        assert not hasattr(placement, "top_offset")
        assert not hasattr(placement, "height")
        assert grid.timed == []

    def test_multi_day_event_placed_on_start_date(self, engine):
        grid = engine.layout(make_events(all_day_event("trip", "2024-06-11", "2024-06-14")), WINDOW)

        assert [(p.event_id, p.column_index) for p in grid.all_day] == [("trip", 1)]
        assert grid.all_day_column(1)[0].event_id == "trip"


# ---------------------------------------------------------------------------
# LANE PACKING
# ---------------------------------------------------------------------------


class TestLanePacking:

    def test_overlapping_events_get_separate_lanes(self):
        engine = GridLayoutEngine(tz=timezone.utc, pack_lanes=True)
        events = make_events(
            timed_event("a", "2024-06-10T09:00:00Z", "2024-06-10T11:00:00Z"),
            timed_event("b", "2024-06-10T10:00:00Z", "2024-06-10T12:00:00Z"),
            timed_event("c", "2024-06-10T11:00:00Z", "2024-06-10T11:30:00Z"),
            timed_event("d", "2024-06-10T14:00:00Z", "2024-06-10T15:00:00Z"),
        )
        grid = engine.layout(events, WINDOW)
        lanes = {p.event_id: (p.lane, p.lane_count) for p in grid.column(0)}

        # c reuses lane 0 once a has ended; d starts a new group
        assert lanes == {"a": (0, 2), "b": (1, 2), "c": (0, 2), "d": (0, 1)}

    def test_adjacent_events_do_not_overlap(self):
        placements = [
            TimedPlacement("a", 0, top_offset=0, height=30, start_minutes=480, end_minutes=510),
            TimedPlacement("b", 0, top_offset=30, height=30, start_minutes=510, end_minutes=540),
        ]

        assert [(p.lane, p.lane_count) for p in assign_lanes(placements)] == [(0, 1), (0, 1)]

    def test_empty_column(self):
        assert assign_lanes([]) == []
