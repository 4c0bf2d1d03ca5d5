"""DynamoDB-backed event store."""
import logging
from typing import Dict, List, Optional, Tuple

import boto3
from botocore.exceptions import ClientError

from processor.models import Event

logger = logging.getLogger(__name__)


class DynamoDBEventStore:
    """Event store persisted in a DynamoDB table keyed by event id."""

    BATCH_SIZE = 25  # DynamoDB batch operation limit

    def __init__(self, table_name: str, region_name: Optional[str] = None):
        """
        Initialize DynamoDB client and table reference.

        Args:
            table_name: Name of the DynamoDB table
            region_name: AWS region; defaults to the environment's region
        """
        self.table_name = table_name
        self.dynamodb = boto3.resource('dynamodb', region_name=region_name)
        self.table = self.dynamodb.Table(table_name)
        logger.info(f"Initialized DynamoDBEventStore for table: {table_name}")

    def get_all_events(self) -> Dict[str, Event]:
        """
        Retrieve all events from DynamoDB using Scan operation.

        Returns:
            Dictionary mapping event id to Event objects

        Raises:
            ClientError: If the scan fails
        """
        logger.info("Scanning DynamoDB table for all events")
        events = {}

        try:
            response = self.table.scan()
            items = response.get('Items', [])

            while 'LastEvaluatedKey' in response:
                response = self.table.scan(
                    ExclusiveStartKey=response['LastEvaluatedKey']
                )
                items.extend(response.get('Items', []))

            for item in items:
                event = self._item_to_event(item)
                if event:
                    events[event.id] = event

            logger.info(f"Retrieved {len(events)} events from DynamoDB")
            return events

        except ClientError as e:
            logger.error(f"Error scanning DynamoDB table: {e}")
            raise

    def snapshot(self) -> Tuple[Event, ...]:
        """Return every stored event as an immutable tuple."""
        return tuple(self.get_all_events().values())

    def put_event(self, event: Event) -> None:
        """Insert or replace a single event."""
        self.table.put_item(Item=self._event_to_item(event))
        logger.info(f"Stored event '{event.id}'")

    def delete_event(self, event_id: str) -> None:
        """Delete a single event by id."""
        self.table.delete_item(Key={'id': event_id})
        logger.info(f"Deleted event '{event_id}'")

    def batch_write_events(self, events: List[Event]) -> int:
        """
        Write events to DynamoDB in batches of 25 items.

        Args:
            events: List of Event objects to write

        Returns:
            Count of successfully written events
        """
        if not events:
            return 0

        logger.info(f"Writing {len(events)} events to DynamoDB")
        success_count = 0

        for i in range(0, len(events), self.BATCH_SIZE):
            batch = events[i:i + self.BATCH_SIZE]

            try:
                with self.table.batch_writer() as writer:
                    for event in batch:
                        writer.put_item(Item=self._event_to_item(event))
                success_count += len(batch)

            except ClientError as e:
                logger.error(
                    f"Error writing batch {i // self.BATCH_SIZE + 1}: {e}"
                )
                continue

        logger.info(f"Successfully wrote {success_count} events")
        return success_count

    def _item_to_event(self, item: dict) -> Optional[Event]:
        """
        Convert DynamoDB item to Event object.

        Args:
            item: DynamoDB item dictionary

        Returns:
            Event object or None if conversion fails
        """
        text_fields = (
            'id', 'title', 'date', 'start_time', 'end_time',
            'location', 'description'
        )
        for name in text_fields:
            value = item.get(name)
            if value is not None and not isinstance(value, str):
                logger.warning(
                    f"Failed to convert item to Event, {name} is "
                    f"{type(value).__name__} not a string"
                )
                return None

        try:
            return Event(
                id=item['id'],
                title=item['title'],
                date=item['date'],
                start_time=item['start_time'],
                end_time=item['end_time'],
                location=item.get('location'),
                description=item.get('description')
            )
        except KeyError as e:
            logger.warning(f"Failed to convert item to Event, missing {e}")
            return None

    def _event_to_item(self, event: Event) -> dict:
        """
        Convert Event object to DynamoDB item.

        Args:
            event: Event object

        Returns:
            DynamoDB item dictionary
        """
        item = {
            'id': event.id,
            'title': event.title,
            'date': str(event.date),
            'start_time': event.start_time,
            'end_time': event.end_time,
        }

        # Add optional fields if present
        if event.location:
            item['location'] = event.location
        if event.description:
            item['description'] = event.description

        return item
