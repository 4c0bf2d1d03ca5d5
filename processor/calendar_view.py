"""Month grid and chronological list data for browsing events."""
import calendar
import logging
from datetime import date
from typing import Dict, Iterable, List, Tuple

from processor.models import DayGroup, Event, MonthView
from processor.time_utils import parse_date, to_minutes

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60


def _start_sort_key(event: Event) -> Tuple[int, str]:
    # Unparsable start times sort after every real time
    minutes = to_minutes(event.start_time)
    return (MINUTES_PER_DAY if minutes is None else minutes, event.title)


def events_on(events: Iterable[Event], day: date) -> List[Event]:
    """Return events scheduled on the given day, ordered by start time."""
    matching = [event for event in events if parse_date(event.date) == day]
    return sorted(matching, key=_start_sort_key)


def group_by_date(events: Iterable[Event]) -> List[DayGroup]:
    """
    Group events into chronological day sections for the list view.

    Events with a malformed date cannot be placed and are left out.

    Args:
        events: Snapshot of events

    Returns:
        DayGroup list ordered by date, each group ordered by start time
    """
    groups: Dict[date, List[Event]] = {}
    skipped = 0

    for event in events:
        event_date = parse_date(event.date)
        if event_date is None:
            skipped += 1
            continue
        groups.setdefault(event_date, []).append(event)

    if skipped:
        logger.debug(f"Left {skipped} events with invalid dates out of the list")

    return [
        DayGroup(date=day, events=tuple(sorted(groups[day], key=_start_sort_key)))
        for day in sorted(groups)
    ]


def build_month(year: int, month: int, events: Iterable[Event]) -> MonthView:
    """
    Build a Sunday-first month grid.

    Args:
        year: Calendar year
        month: Month number, 1-12
        events: Snapshot of events used to flag busy days

    Returns:
        MonthView with blank cells as None
    """
    # monthrange() reports Monday=0; the grid starts on Sunday
    first_weekday, days_in_month = calendar.monthrange(year, month)
    leading_blanks = (first_weekday + 1) % 7

    event_days = set()
    for event in events:
        event_date = parse_date(event.date)
        if event_date and event_date.year == year and event_date.month == month:
            event_days.add(event_date.day)

    cells = [None] * leading_blanks + list(range(1, days_in_month + 1))
    cells += [None] * (-len(cells) % 7)
    weeks = tuple(tuple(cells[i:i + 7]) for i in range(0, len(cells), 7))

    return MonthView(
        year=year,
        month=month,
        leading_blanks=leading_blanks,
        days_in_month=days_in_month,
        event_days=frozenset(event_days),
        weeks=weeks
    )


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    """Move (year, month) by delta months, e.g. -1 for the previous month."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1
