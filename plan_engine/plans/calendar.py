"""Plan calendar helpers.

Deterministic, stateless date math shared by compliance analysis and
activity matching. Week 1 runs from the plan start date through the first
Sunday (a partial week unless the plan starts on a Monday). Every later week
is a full Monday-Sunday span.
"""

from datetime import date, datetime, timedelta
from typing import Literal

from plan_engine.plans.types import WeekRange

WeekStatus = Literal["past", "current", "future"]

_SUNDAY = 6


def calendar_day(value: date | None = None) -> date:
    """Reduce a reference date or timestamp to its calendar day (defaults to today)."""
    if value is None:
        return date.today()
    if isinstance(value, datetime):
        return value.date()
    return value


def days_until_sunday(start_date: date) -> int:
    """Days from start_date to the Sunday closing its calendar week (0 on a Sunday)."""
    return _SUNDAY - start_date.weekday()


def get_week_date_range(week_index: int, start_date: date) -> WeekRange:
    """Calculate the calendar range of a plan week.

    Args:
        week_index: 0-based position of the week in the schedule
        start_date: Plan start date

    Returns:
        Inclusive WeekRange
    """
    first_sunday = start_date + timedelta(days=days_until_sunday(start_date))
    if week_index == 0:
        return WeekRange(start=start_date, end=first_sunday)

    week_start = first_sunday + timedelta(days=1 + (week_index - 1) * 7)
    return WeekRange(start=week_start, end=week_start + timedelta(days=6))


def calculate_day_date(start_date: date, week_index: int, day_position: int) -> date:
    """Calculate the calendar date of a scheduled day.

    day_position is the day's position in the week's list, not its encoded
    day_index (see Day).

    Args:
        start_date: Plan start date
        week_index: 0-based week position in the schedule
        day_position: 0-based day position within the week

    Returns:
        Calendar date of the day
    """
    week_range = get_week_date_range(week_index, start_date)
    return week_range.start + timedelta(days=day_position)


def get_week_status(week_range: WeekRange, today: date) -> WeekStatus:
    """Classify a week relative to today."""
    today = calendar_day(today)
    if today > week_range.end:
        return "past"
    if week_range.start <= today <= week_range.end:
        return "current"
    return "future"
