"""Integration tests for Lambda handler."""
import json
import logging
import os
from unittest.mock import Mock, patch

import pytest

from lambda_function import JsonFormatter, lambda_handler, parse_week_start, setup_logging
from storage.event_store import sample_events


@pytest.fixture
def mock_env():
    """Set up environment variables for testing."""
    env_vars = {
        'TABLE_NAME': '',
        'LOG_LEVEL': 'INFO',
        'WEEK_START': 'sunday'
    }
    with patch.dict(os.environ, env_vars):
        yield env_vars


@pytest.fixture
def mock_context():
    """Create a mock Lambda context."""
    context = Mock()
    context.function_name = 'test-function'
    context.memory_limit_in_mb = 128
    context.aws_request_id = 'test-request-id'
    return context


@pytest.fixture
def request_events():
    """Raw events as a client would send them."""
    return [
        {'id': '1', 'title': 'Team Meeting', 'date': '2025-11-06',
         'startTime': '9:00 AM', 'endTime': '10:00 AM', 'location': 'Room A'},
        {'id': '2', 'title': 'Review', 'date': '2025-11-06',
         'startTime': '2:00 PM', 'endTime': '3:30 PM', 'location': 'Room A'},
        {'id': '3', 'title': 'Presentation', 'date': '2025-11-06',
         'startTime': '4:00 PM', 'endTime': '5:00 PM'},
        {'id': '4', 'title': 'Broken', 'date': '2025-11-06',
         'startTime': '', 'endTime': '5:00 PM'},
    ]


class TestLambdaHandler:
    """Test cases for Lambda handler."""

    def test_events_from_request(self, mock_env, mock_context, request_events):
        """Test computing insights from events in the payload."""
        event = {
            'events': request_events,
            'reference_now': '2025-11-06T08:00:00'
        }

        response = lambda_handler(event, mock_context)

        assert response['statusCode'] == 200
        body = json.loads(response['body'])
        assert body['message'] == 'Insights computed successfully'
        assert body['source'] == 'request'
        assert body['reference_date'] == '2025-11-06'
        stats = body['statistics']
        assert stats['total_events'] == 3
        assert stats['this_week_events'] == 3
        assert stats['upcoming_events'] == 3
        assert stats['avg_duration_text'] == '1h 10m'
        assert stats['busiest_day'] == {'name': 'Thu', 'count': 3}
        assert stats['top_locations'] == [{'location': 'Room A', 'count': 2}]
        assert 'duration_seconds' in body

    @patch('lambda_function.DynamoDBEventStore')
    def test_events_from_table(self, mock_store_class, mock_context):
        """Test loading the snapshot from DynamoDB."""
        mock_store = Mock()
        mock_store.snapshot.return_value = tuple(sample_events())
        mock_store_class.return_value = mock_store

        with patch.dict(os.environ, {'TABLE_NAME': 'calendar-events'}):
            response = lambda_handler(
                {'reference_now': '2025-11-10T09:00:00'}, mock_context
            )

        assert response['statusCode'] == 200
        body = json.loads(response['body'])
        assert body['source'] == 'dynamodb'
        assert body['statistics']['total_events'] == 4
        assert body['statistics']['past_events'] == 4
        assert body['statistics']['this_week_events'] == 0
        mock_store_class.assert_called_once_with(table_name='calendar-events')

    @patch('lambda_function.DynamoDBEventStore')
    def test_table_failure(self, mock_store_class, mock_context):
        """Test error handling for DynamoDB failures."""
        mock_store = Mock()
        mock_store.snapshot.side_effect = Exception('Table unavailable')
        mock_store_class.return_value = mock_store

        with patch.dict(os.environ, {'TABLE_NAME': 'calendar-events'}):
            response = lambda_handler({}, mock_context)

        assert response['statusCode'] == 500
        body = json.loads(response['body'])
        assert body['message'] == 'Failed to load events'
        assert 'Table unavailable' in body['error']
        assert body['error_type'] == 'Exception'

    @patch('lambda_function.DynamoDBEventStore')
    def test_empty_snapshot_without_table(self, mock_store_class, mock_env,
                                          mock_context):
        """Test that no events and no table yields empty statistics."""
        response = lambda_handler({}, mock_context)

        assert response['statusCode'] == 200
        body = json.loads(response['body'])
        assert body['source'] == 'empty'
        assert body['statistics']['total_events'] == 0
        assert body['statistics']['avg_duration_text'] == '0m'
        assert body['statistics']['top_locations'] == []
        mock_store_class.assert_not_called()

    def test_week_start_from_environment(self, mock_context):
        """Test a Monday week start configured through WEEK_START."""
        event = {
            'events': [
                {'title': 'Sunday', 'date': '2025-11-02',
                 'start_time': '9:00 AM', 'end_time': '10:00 AM'},
                {'title': 'Monday', 'date': '2025-11-03',
                 'start_time': '9:00 AM', 'end_time': '10:00 AM'},
            ],
            'reference_now': '2025-11-06T08:00:00'
        }

        with patch.dict(os.environ, {'WEEK_START': 'Monday'}):
            response = lambda_handler(event, mock_context)

        body = json.loads(response['body'])
        assert body['statistics']['this_week_events'] == 1

    def test_invalid_reference_now(self, mock_env, mock_context):
        """Test that a malformed reference time is rejected."""
        response = lambda_handler(
            {'events': [], 'reference_now': 'yesterday-ish'}, mock_context
        )

        assert response['statusCode'] == 400
        body = json.loads(response['body'])
        assert body['message'] == 'Invalid request'
        assert body['error_type'] == 'ValueError'

    def test_invalid_week_start(self, mock_context):
        """Test that an unknown WEEK_START is rejected."""
        with patch.dict(os.environ, {'WEEK_START': 'someday'}):
            response = lambda_handler({}, mock_context)

        assert response['statusCode'] == 400

    @patch('lambda_function.InsightEngine')
    def test_unexpected_failure(self, mock_engine_class, mock_env, mock_context):
        """Test the catch-all error response."""
        mock_engine_class.return_value.compute_stats.side_effect = (
            RuntimeError('boom')
        )

        response = lambda_handler({}, mock_context)

        assert response['statusCode'] == 500
        body = json.loads(response['body'])
        assert body['message'] == 'Insight computation failed'
        assert body['error_type'] == 'RuntimeError'


class TestLogging:
    """Test cases for logging setup."""

    def test_setup_logging_installs_json_formatter(self):
        """Test that the root logger gets a single JSON handler."""
        setup_logging('DEBUG')

        root_logger = logging.getLogger()
        assert len(root_logger.handlers) == 1
        assert isinstance(root_logger.handlers[0].formatter, JsonFormatter)
        assert root_logger.level == logging.DEBUG

    def test_json_formatter_output(self):
        """Test the JSON log line fields."""
        record = logging.LogRecord(
            'insights', logging.INFO, __file__, 1, 'hello %s', ('world',), None
        )

        data = json.loads(JsonFormatter().format(record))

        assert data['level'] == 'INFO'
        assert data['message'] == 'hello world'
        assert data['logger'] == 'insights'
        assert 'timestamp' in data

    def test_parse_week_start(self):
        """Test weekday name resolution."""
        assert parse_week_start('Sunday') == 6
        assert parse_week_start(' monday ') == 0
        with pytest.raises(ValueError):
            parse_week_start('funday')
