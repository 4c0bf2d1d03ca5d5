"""Parsing and formatting helpers for event dates and 12-hour times."""
import re
from datetime import date, datetime
from typing import Optional, Tuple, Union

TIME_PATTERN = re.compile(r'^([0-9]{1,2}):([0-9]{2}) ?(AM|PM)$', re.IGNORECASE)
TWENTY_FOUR_HOUR_PATTERN = re.compile(r'^([0-9]{1,2}):([0-9]{2})$')
ISO_DATE_FORMAT = '%Y-%m-%d'


def parse_time(time_str: Optional[str]) -> Optional[Tuple[int, int]]:
    """
    Parse a 12-hour time string such as "9:00 AM" or "2:30pm".

    Args:
        time_str: Time string with a meridiem marker

    Returns:
        Tuple of (hour, minute) in 24-hour form, or None if the string
        does not match or the hour/minute is out of range
    """
    if not isinstance(time_str, str) or not time_str:
        return None

    match = TIME_PATTERN.match(time_str.strip())
    if not match:
        return None

    hour = int(match.group(1))
    minute = int(match.group(2))
    period = match.group(3).upper()

    if not 1 <= hour <= 12 or not 0 <= minute <= 59:
        return None

    if period == 'PM' and hour != 12:
        hour += 12
    elif period == 'AM' and hour == 12:
        hour = 0

    return hour, minute


def to_minutes(time_str: Optional[str]) -> Optional[int]:
    """Return minutes since midnight for a 12-hour time string, or None."""
    parsed = parse_time(time_str)
    if parsed is None:
        return None
    hour, minute = parsed
    return hour * 60 + minute


def format_time(time_str: Optional[str]) -> Optional[str]:
    """
    Normalize a time string to the canonical "H:MM AM" display form.

    Accepts 24-hour input ("14:05") as produced by time pickers, or a
    12-hour string in either case ("02:05pm").

    Args:
        time_str: Time string to normalize

    Returns:
        Canonical display string or None if parsing fails
    """
    if not isinstance(time_str, str) or not time_str:
        return None

    text = time_str.strip()
    parsed = parse_time(text)

    if parsed is None:
        match = TWENTY_FOUR_HOUR_PATTERN.match(text)
        if not match:
            return None
        hour, minute = int(match.group(1)), int(match.group(2))
        if hour > 23 or minute > 59:
            return None
        parsed = (hour, minute)

    hour, minute = parsed
    period = 'PM' if hour >= 12 else 'AM'
    display_hour = hour % 12 or 12
    return f"{display_hour}:{minute:02d} {period}"


def to_24_hour(time_str: Optional[str]) -> Optional[str]:
    """Convert "2:05 PM" to "14:05"; None if the input does not parse."""
    parsed = parse_time(time_str)
    if parsed is None:
        return None
    return '{:02d}:{:02d}'.format(*parsed)


def parse_date(value: Union[str, date, None]) -> Optional[date]:
    """
    Parse an event date.

    Args:
        value: ISO 8601 date string (YYYY-MM-DD) or a date object

    Returns:
        date object or None if the value is missing or malformed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    try:
        return datetime.strptime(value.strip(), ISO_DATE_FORMAT).date()
    except ValueError:
        return None
