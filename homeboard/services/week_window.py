"""
Week Window - which Monday-Sunday range the dashboard shows.

The grid only has Monday-Friday columns, so on a weekend the current week
has already fully elapsed from the dashboard's point of view. Saturday and
Sunday therefore roll forward to the *next* Monday; every weekday anchors
to its own week's Monday.

    Mon 2024-06-10 .. Fri 2024-06-14  →  2024-06-10 .. 2024-06-16
    Sat 2024-06-15, Sun 2024-06-16    →  2024-06-17 .. 2024-06-23

The window starts at local midnight and ends at 23:59:59.999 on Sunday so
it can be used directly as an inclusive range query.

Usage:
    window = compute_week_window(datetime.now(ZoneInfo("Europe/Paris")))
    window.weekdays()  # [date(2024, 6, 17), ..., date(2024, 6, 21)]
"""

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import List


# 23:59:59.999 - the last instant of a day at millisecond precision
END_OF_DAY = time(23, 59, 59, 999000)

# Monday..Friday
WORKDAYS_PER_WEEK = 5


@dataclass(frozen=True)
class WeekWindow:
    """
    Monday 00:00 .. Sunday 23:59:59.999, in the caller's timezone.

    Derived from "now" on every request; never stored.
    """
    start: datetime
    end: datetime

    @property
    def monday(self) -> date:
        return self.start.date()

    def weekdays(self) -> List[date]:
        """The five Monday-Friday dates, in column order."""
        return [self.monday + timedelta(days=i) for i in range(WORKDAYS_PER_WEEK)]


@dataclass(frozen=True)
class MonthWindow:
    """First day 00:00 .. last day 23:59:59.999 of a calendar month."""
    start: datetime
    end: datetime


def week_monday(today: date) -> date:
    """
    Monday of the week to display for `today`.

    date.weekday() is 0 for Monday .. 6 for Sunday.
    """
    weekday = today.weekday()
    if weekday >= WORKDAYS_PER_WEEK:
        # Saturday → +2 days, Sunday → +1 day
        return today + timedelta(days=7 - weekday)
    return today - timedelta(days=weekday)


def compute_week_window(now: datetime) -> WeekWindow:
    """
    Compute the week window for the instant `now`.

    The window's timezone is `now`'s timezone (naive in, naive out).
    Pure function: no clock reads, no errors.
    """
    monday = week_monday(now.date())
    sunday = monday + timedelta(days=6)
    return WeekWindow(
        start=datetime.combine(monday, time.min, tzinfo=now.tzinfo),
        end=datetime.combine(sunday, END_OF_DAY, tzinfo=now.tzinfo),
    )


def compute_month_window(now: datetime) -> MonthWindow:
    """Compute the calendar month containing `now`, in `now`'s timezone."""
    first = now.date().replace(day=1)
    last_day = calendar.monthrange(first.year, first.month)[1]
    return MonthWindow(
        start=datetime.combine(first, time.min, tzinfo=now.tzinfo),
        end=datetime.combine(first.replace(day=last_day), END_OF_DAY, tzinfo=now.tzinfo),
    )
