"""Data models for events and insight statistics."""
from dataclasses import asdict, dataclass
from datetime import date
from typing import Any, Dict, FrozenSet, Optional, Tuple, Union


@dataclass(frozen=True)
class Event:
    """Calendar event as entered by the user."""
    id: str
    title: str
    date: Union[str, date]
    start_time: str
    end_time: str
    location: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True)
class DayOfWeekData:
    """Event count for one day of the week."""
    name: str
    count: int


@dataclass(frozen=True)
class TimeSlot:
    """Event count for one time-of-day bucket."""
    name: str
    range: str
    count: int


@dataclass(frozen=True)
class LocationData:
    """Occurrence count for one location."""
    location: str
    count: int


@dataclass(frozen=True)
class EventStats:
    """Aggregate insight statistics over a snapshot of events."""
    total_events: int
    this_week_events: int
    upcoming_events: int
    past_events: int
    avg_duration_text: str
    day_of_week_data: Tuple[DayOfWeekData, ...]
    busiest_day: DayOfWeekData
    time_slots: Tuple[TimeSlot, ...]
    top_locations: Tuple[LocationData, ...]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        data = asdict(self)
        data['day_of_week_data'] = list(data['day_of_week_data'])
        data['time_slots'] = list(data['time_slots'])
        data['top_locations'] = list(data['top_locations'])
        return data


@dataclass(frozen=True)
class DayGroup:
    """Events sharing one calendar date, for the list view."""
    date: date
    events: Tuple[Event, ...]


@dataclass(frozen=True)
class MonthView:
    """Sunday-first month grid for the calendar view."""
    year: int
    month: int
    leading_blanks: int
    days_in_month: int
    event_days: FrozenSet[int] = frozenset()
    weeks: Tuple[Tuple[Optional[int], ...], ...] = ()
