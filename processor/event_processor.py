"""Event processor for validating and normalizing user-entered events."""
import hashlib
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from processor.models import Event
from processor.time_utils import format_time

logger = logging.getLogger(__name__)


class EventValidationError(ValueError):
    """Raised when user input cannot be turned into an Event."""


class EventProcessor:
    """Processor for validating and normalizing event data."""

    MAX_TITLE_LENGTH = 200
    MAX_DESCRIPTION_LENGTH = 2000
    REQUIRED_FIELDS = ('title', 'date', 'start_time', 'end_time')

    def process_events(self, raw_events: List[Dict[str, Any]]) -> List[Event]:
        """
        Process and validate raw event data.

        Args:
            raw_events: List of event dictionaries, e.g. from a request body

        Returns:
            List of validated Event objects
        """
        processed_events = []

        for raw in raw_events:
            try:
                processed_events.append(self.build_event(**self._fields(raw)))
            except EventValidationError as e:
                logger.warning(f"Skipping event: {e}")
                continue

        logger.info(
            f"Processed {len(processed_events)} valid events out of "
            f"{len(raw_events)} total events"
        )
        return processed_events

    def build_event(
        self,
        title: Optional[str],
        date: Optional[str],
        start_time: Optional[str],
        end_time: Optional[str],
        location: Optional[str] = None,
        description: Optional[str] = None,
        event_id: Optional[str] = None
    ) -> Event:
        """
        Validate and normalize a single event.

        Args:
            title: Event title (required)
            date: Event date in any supported format (required)
            start_time: Start time, 12-hour or 24-hour (required)
            end_time: End time, 12-hour or 24-hour (required)
            location: Optional location; blank becomes None
            description: Optional description; blank becomes None
            event_id: Existing id to keep; generated when omitted

        Returns:
            Event object

        Raises:
            EventValidationError: If a required field is missing or invalid
        """
        values = {
            'title': title,
            'date': date,
            'start_time': start_time,
            'end_time': end_time,
        }
        self._validate_required_fields(values)

        # Normalize date to ISO 8601 format
        normalized_date = self._normalize_date(date)
        if not normalized_date:
            raise EventValidationError(
                f"Invalid date format for event '{title}': {date}"
            )

        # Normalize times to "H:MM AM" display format
        normalized_start_time = format_time(start_time)
        if not normalized_start_time:
            raise EventValidationError(
                f"Invalid start time format for event '{title}': {start_time}"
            )

        normalized_end_time = format_time(end_time)
        if not normalized_end_time:
            raise EventValidationError(
                f"Invalid end time format for event '{title}': {end_time}"
            )

        # Truncate fields to maximum length
        title = title.strip()[:self.MAX_TITLE_LENGTH]
        description = _blank_to_none(description)
        if description:
            description = description[:self.MAX_DESCRIPTION_LENGTH]

        if not event_id:
            event_id = self.generate_event_id(
                title=title,
                date=normalized_date,
                time=normalized_start_time
            )

        return Event(
            id=event_id,
            title=title,
            date=normalized_date,
            start_time=normalized_start_time,
            end_time=normalized_end_time,
            location=_blank_to_none(location),
            description=description
        )

    def _fields(self, raw: Dict[str, Any]) -> Dict[str, Any]:
        """Map a raw dictionary (snake_case or camelCase keys) to build_event kwargs."""
        if not isinstance(raw, dict):
            raise EventValidationError(f"Event entry is not an object: {raw!r}")
        return {
            'title': raw.get('title'),
            'date': raw.get('date'),
            'start_time': raw.get('start_time', raw.get('startTime')),
            'end_time': raw.get('end_time', raw.get('endTime')),
            'location': raw.get('location'),
            'description': raw.get('description'),
            'event_id': raw.get('id'),
        }

    def _validate_required_fields(self, values: Dict[str, Any]) -> None:
        """
        Validate that required fields are present and non-blank.

        Args:
            values: Mapping of required field name to value

        Raises:
            EventValidationError: Naming the first missing field
        """
        for name in self.REQUIRED_FIELDS:
            value = values.get(name)
            if not isinstance(value, str) or not value.strip():
                raise EventValidationError(
                    f"Event '{values.get('title') or ''}' missing required "
                    f"field: {name}"
                )

    def _normalize_date(self, date_str: str) -> Optional[str]:
        """
        Normalize date to ISO 8601 format (YYYY-MM-DD).

        Args:
            date_str: Date string in various formats

        Returns:
            ISO 8601 formatted date string or None if parsing fails
        """
        # Try common date formats
        date_formats = [
            '%Y-%m-%d',      # ISO 8601
            '%m/%d/%Y',      # US format
            '%m-%d-%Y',      # US format with dashes
            '%B %d, %Y',     # Full month name
            '%b %d, %Y',     # Abbreviated month name
            '%Y/%m/%d',      # Alternative ISO format
            '%Y.%m.%d',      # Dotted format
        ]

        for fmt in date_formats:
            try:
                date_obj = datetime.strptime(date_str.strip(), fmt)
                return date_obj.strftime('%Y-%m-%d')
            except ValueError:
                continue

        return None

    def generate_event_id(self, title: str, date: str, time: str) -> str:
        """
        Generate an identifier for an event using hash of title + date + time.

        Args:
            title: Event title
            date: Event date (ISO 8601 format)
            time: Event start time

        Returns:
            Event ID (SHA256 hash)
        """
        composite = f"{title}|{date}|{time}"
        return hashlib.sha256(composite.encode('utf-8')).hexdigest()


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None or not str(value).strip():
        return None
    return str(value).strip()
