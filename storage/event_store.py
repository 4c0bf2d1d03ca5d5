"""In-memory event store backing the calendar screens."""
import logging
from datetime import date
from typing import Iterable, List, Tuple

from processor.calendar_view import events_on
from processor.models import Event

logger = logging.getLogger(__name__)


class EventStore:
    """
    Transient store of user events.

    Every mutation swaps in a new tuple, so a snapshot handed to the
    insight engine is never changed underneath it.
    """

    def __init__(self, events: Iterable[Event] = ()):
        self._events: Tuple[Event, ...] = tuple(events)

    def __len__(self) -> int:
        return len(self._events)

    def snapshot(self) -> Tuple[Event, ...]:
        """Return the current events as an immutable tuple."""
        return self._events

    def add(self, event: Event) -> None:
        """Append an event."""
        self._events = self._events + (event,)
        logger.info(f"Added event '{event.id}'")

    def update(self, updated_event: Event) -> int:
        """
        Replace every event sharing the updated event's id.

        Args:
            updated_event: New version of the event

        Returns:
            Count of replaced events (0 if the id is unknown)
        """
        replaced = 0
        events = []
        for event in self._events:
            if event.id == updated_event.id:
                events.append(updated_event)
                replaced += 1
            else:
                events.append(event)

        self._events = tuple(events)
        if replaced:
            logger.info(f"Updated event '{updated_event.id}'")
        else:
            logger.warning(f"Update ignored, unknown event '{updated_event.id}'")
        return replaced

    def delete(self, event_id: str) -> int:
        """
        Remove every event with the given id.

        Returns:
            Count of removed events
        """
        remaining = tuple(e for e in self._events if e.id != event_id)
        removed = len(self._events) - len(remaining)
        self._events = remaining
        logger.info(f"Deleted {removed} events with id '{event_id}'")
        return removed

    def get(self, event_id: str) -> Event:
        """
        Look up an event by id.

        Raises:
            KeyError: If no event has the id
        """
        for event in self._events:
            if event.id == event_id:
                return event
        raise KeyError(event_id)

    def events_on(self, day: date) -> List[Event]:
        """Return events on the given day, ordered by start time."""
        return events_on(self._events, day)

    @classmethod
    def with_sample_events(cls) -> 'EventStore':
        """Create a store seeded with demo events."""
        return cls(sample_events())


def sample_events() -> List[Event]:
    """Demo events shown on first launch."""
    return [
        Event(
            id='1',
            title='Team Meeting',
            date='2025-11-06',
            start_time='9:00 AM',
            end_time='10:00 AM',
            location='Conference Room A',
            description='Weekly team sync and project status update'
        ),
        Event(
            id='2',
            title='Project Review',
            date='2025-11-06',
            start_time='2:00 PM',
            end_time='3:30 PM',
            location='Office 201',
            description='Quarterly project review meeting'
        ),
        Event(
            id='3',
            title='Client Presentation',
            date='2025-11-06',
            start_time='4:00 PM',
            end_time='5:00 PM',
            description='Q4 results presentation'
        ),
        Event(
            id='4',
            title='Lunch',
            date='2025-11-08',
            start_time='12:00 PM',
            end_time='1:00 PM',
            location='Italian Restaurant'
        ),
    ]
