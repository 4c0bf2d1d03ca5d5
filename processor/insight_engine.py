"""Insight statistics computed over a snapshot of calendar events."""
import calendar
import logging
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, Optional, Tuple, Union

from processor.models import (
    DayOfWeekData,
    Event,
    EventStats,
    LocationData,
    TimeSlot,
)
from processor.time_utils import parse_date, parse_time, to_minutes

logger = logging.getLogger(__name__)

DAY_NAMES = ('Sun', 'Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat')

# (name, display range, first hour, last hour); evening also covers 0-5
TIME_SLOTS = (
    ('Morning', '6-12', 6, 11),
    ('Afternoon', '12-18', 12, 17),
    ('Evening', '18-24', 18, 23),
)

TOP_LOCATION_LIMIT = 3


class InsightEngine:
    """Stateless calculator for event insight statistics."""

    def __init__(self, week_start: int = calendar.SUNDAY):
        """
        Initialize the engine.

        Args:
            week_start: First day of the week as a datetime weekday number
                (Monday=0 ... Sunday=6). Defaults to Sunday.
        """
        if not 0 <= week_start <= 6:
            raise ValueError(f"week_start must be 0-6, got {week_start}")
        self.week_start = week_start

    def compute_stats(
        self,
        events: Iterable[Event],
        reference_now: Union[datetime, date]
    ) -> EventStats:
        """
        Compute insight statistics for a snapshot of events.

        Malformed dates and times never raise; an event with a bad field is
        left out of the aggregates that need that field only.

        Args:
            events: Snapshot of events
            reference_now: Current instant; its calendar date is "today"

        Returns:
            Freshly built EventStats
        """
        events = list(events)
        today = parse_date(reference_now)
        week_start = self._week_start_for(today)
        week_end = week_start + timedelta(days=7)

        this_week = 0
        upcoming = 0
        past = 0
        day_counts = [0] * 7
        slot_counts = [0] * len(TIME_SLOTS)
        total_minutes = 0
        timed_events = 0
        location_counts: Dict[str, int] = {}

        for event in events:
            event_date = parse_date(event.date)
            if event_date is None:
                logger.debug(
                    f"Skipping date aggregates for event '{event.id}': "
                    f"invalid date {event.date!r}"
                )
            else:
                if week_start <= event_date < week_end:
                    this_week += 1
                if event_date >= today:
                    upcoming += 1
                else:
                    past += 1
                day_counts[_sunday_index(event_date)] += 1

            slot = self._time_slot_index(event.start_time)
            if slot is None:
                logger.debug(
                    f"Skipping time slot for event '{event.id}': "
                    f"invalid start time {event.start_time!r}"
                )
            else:
                slot_counts[slot] += 1

            duration = self._duration_minutes(event)
            if duration is not None:
                total_minutes += duration
                timed_events += 1

            if isinstance(event.location, str) and event.location.strip():
                location_counts[event.location] = (
                    location_counts.get(event.location, 0) + 1
                )

        day_of_week_data = tuple(
            DayOfWeekData(name=name, count=count)
            for name, count in zip(DAY_NAMES, day_counts)
        )
        # max() keeps the first bucket on ties, so all-zero input yields Sunday
        busiest_day = max(day_of_week_data, key=lambda day: day.count)

        time_slots = tuple(
            TimeSlot(name=name, range=label, count=count)
            for (name, label, _, _), count in zip(TIME_SLOTS, slot_counts)
        )

        avg_minutes = total_minutes // timed_events if timed_events else 0

        return EventStats(
            total_events=len(events),
            this_week_events=this_week,
            upcoming_events=upcoming,
            past_events=past,
            avg_duration_text=format_duration(avg_minutes),
            day_of_week_data=day_of_week_data,
            busiest_day=busiest_day,
            time_slots=time_slots,
            top_locations=self._top_locations(location_counts),
        )

    def _week_start_for(self, today: date) -> date:
        """Return the most recent week-start day on or before today."""
        offset = (today.weekday() - self.week_start) % 7
        return today - timedelta(days=offset)

    def _time_slot_index(self, start_time: str) -> Optional[int]:
        parsed = parse_time(start_time)
        if parsed is None:
            return None

        hour = parsed[0]
        for index, (_, _, first, last) in enumerate(TIME_SLOTS):
            if first <= hour <= last:
                return index
        return len(TIME_SLOTS) - 1

    def _duration_minutes(self, event: Event) -> Optional[int]:
        """
        Minute-precise duration, or None when either time fails to parse
        or the end is not after the start.
        """
        start = to_minutes(event.start_time)
        end = to_minutes(event.end_time)
        if start is None or end is None:
            return None

        duration = end - start
        if duration <= 0:
            logger.debug(
                f"Excluding event '{event.id}' from average duration: "
                f"end {event.end_time!r} is not after start {event.start_time!r}"
            )
            return None
        return duration

    def _top_locations(self, location_counts: Dict[str, int]) -> Tuple[LocationData, ...]:
        # sorted() is stable and dicts keep first-seen order
        ranked = sorted(
            location_counts.items(),
            key=lambda item: item[1],
            reverse=True
        )
        return tuple(
            LocationData(location=location, count=count)
            for location, count in ranked[:TOP_LOCATION_LIMIT]
        )


def compute_stats(
    events: Iterable[Event],
    reference_now: Union[datetime, date],
    week_start: int = calendar.SUNDAY
) -> EventStats:
    """Compute insight statistics with a one-off engine."""
    return InsightEngine(week_start=week_start).compute_stats(
        events, reference_now
    )


def format_duration(minutes: int) -> str:
    """Format minutes as "1h 30m", or "45m" when under an hour."""
    hours, mins = divmod(minutes, 60)
    if hours > 0:
        return f"{hours}h {mins}m"
    return f"{mins}m"


def _sunday_index(day: date) -> int:
    """Weekday index with Sunday=0 ... Saturday=6."""
    return (day.weekday() + 1) % 7
