"""AWS Lambda handler for calendar event insights."""
import calendar
import json
import logging
import os
import time
from datetime import datetime
from typing import Any, Dict

from processor.event_processor import EventProcessor
from processor.insight_engine import InsightEngine
from storage.dynamodb_store import DynamoDBEventStore

WEEKDAYS = {name.lower(): index for index, name in enumerate(calendar.day_name)}


# Configure JSON logging
class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def parse_week_start(name: str) -> int:
    """
    Resolve a weekday name to a datetime weekday number.

    Raises:
        ValueError: If the name is not an English weekday
    """
    try:
        return WEEKDAYS[name.strip().lower()]
    except KeyError:
        raise ValueError(f"Unknown week start day: {name}") from None


def _error_response(status_code: int, message: str, error: Exception,
                    start_time: float) -> Dict[str, Any]:
    duration = time.time() - start_time
    return {
        'statusCode': status_code,
        'body': json.dumps({
            'message': message,
            'error': str(error),
            'error_type': type(error).__name__,
            'duration_seconds': round(duration, 2)
        })
    }


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Main Lambda handler function for event insights.

    The snapshot comes from event["events"] when present, otherwise from
    the DynamoDB table named by TABLE_NAME, otherwise it is empty.

    Args:
        event: Invocation payload, optionally with "events" and "reference_now"
        context: Lambda context object

    Returns:
        Response dict with statusCode and the computed statistics
    """
    # Read configuration from environment variables
    table_name = os.environ.get('TABLE_NAME', '')
    log_level = os.environ.get('LOG_LEVEL', 'INFO')
    week_start_name = os.environ.get('WEEK_START', 'sunday')

    setup_logging(log_level)
    logger = logging.getLogger(__name__)

    start_time = time.time()
    logger.info(
        "Insight computation started",
        extra={'table_name': table_name, 'week_start': week_start_name}
    )

    try:
        week_start = parse_week_start(week_start_name)
        raw_now = event.get('reference_now')
        reference_now = (
            datetime.fromisoformat(raw_now) if raw_now else datetime.now()
        )
    except (TypeError, ValueError) as e:
        logger.warning(f"Rejected invalid request configuration: {e}")
        return _error_response(400, 'Invalid request', e, start_time)

    try:
        engine = InsightEngine(week_start=week_start)

        if 'events' in event:
            processor = EventProcessor()
            raw_events = event.get('events') or []
            snapshot = processor.process_events(raw_events)
            source = 'request'
        elif table_name:
            try:
                store = DynamoDBEventStore(table_name=table_name)
                snapshot = store.snapshot()
            except Exception as e:
                logger.error(
                    f"Failed to load events from DynamoDB: {str(e)}",
                    extra={'error_type': type(e).__name__},
                    exc_info=True
                )
                return _error_response(
                    500, 'Failed to load events', e, start_time
                )
            source = 'dynamodb'
        else:
            snapshot = ()
            source = 'empty'

        stats = engine.compute_stats(snapshot, reference_now)
        duration = time.time() - start_time

        logger.info(
            "Insight computation completed successfully",
            extra={
                'source': source,
                'total_events': stats.total_events,
                'duration_seconds': round(duration, 2)
            }
        )

        return {
            'statusCode': 200,
            'body': json.dumps({
                'message': 'Insights computed successfully',
                'source': source,
                'reference_date': reference_now.date().isoformat(),
                'statistics': stats.to_dict(),
                'duration_seconds': round(duration, 2)
            })
        }

    except Exception as e:
        logger.error(
            f"Insight computation failed: {str(e)}",
            extra={'error_type': type(e).__name__},
            exc_info=True
        )
        return _error_response(500, 'Insight computation failed', e, start_time)
