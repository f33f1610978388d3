"""
This module adapts an event store's output into an immutable timeline snapshot.

A snapshot is taken once and then only read: every resolution against it sees
the same events in the same order, and the relation index is built once when
the snapshot is taken and shared by all later calls.
"""
import logging
from typing import Any, AsyncIterable, Dict, Iterable, Iterator, Tuple

from pydantic import ValidationError

from .formatting import DeletionMessageFormatter, Profiles
from .models import TimelineEvent, VersionedMessage
from .resolver import RelationIndex
from .versions import build_versioned_message


class TimelineSnapshot:
    def __init__(self, events: Iterable[TimelineEvent]):
        self._index = RelationIndex(events)

    @classmethod
    def from_json(cls, payloads: Iterable[Dict[str, Any]]) -> "TimelineSnapshot":
        """Parses raw wire payloads. An invalid payload raises a ValidationError."""
        return cls(TimelineEvent.from_json(p) for p in payloads)

    @classmethod
    async def from_stream(
        cls, source: AsyncIterable[TimelineEvent | Dict[str, Any]]
    ) -> "TimelineSnapshot":
        """
        Drains an async event source into a snapshot. Raw payloads are parsed on
        the way; payloads that fail validation are skipped with a warning.
        """
        events = []
        async for item in source:
            if isinstance(item, TimelineEvent):
                events.append(item)
                continue
            try:
                events.append(TimelineEvent.from_json(item))
            except (ValidationError, AttributeError) as e:
                logging.warning(f"Snapshot skipping malformed event payload: {e}")
        return cls(events)

    @property
    def events(self) -> Tuple[TimelineEvent, ...]:
        return self._index.events

    @property
    def index(self) -> RelationIndex:
        return self._index

    def __len__(self) -> int:
        return len(self._index)

    def __iter__(self) -> Iterator[TimelineEvent]:
        return iter(self._index.events)

    def get(self, event_id: str) -> TimelineEvent | None:
        return self._index.get(event_id)

    def resolve_latest(self, original_id: str) -> TimelineEvent | None:
        return self._index.resolve_latest(original_id)

    def find_latest_redaction(self, target_id: str) -> TimelineEvent | None:
        return self._index.find_latest_redaction(target_id)

    def versions_of(self, original_id: str) -> VersionedMessage | None:
        return build_versioned_message(original_id, self._index)

    def deletion_message(
        self,
        redacted_event: TimelineEvent,
        profiles: Profiles = None,
        formatter: DeletionMessageFormatter | None = None,
    ) -> str:
        formatter = formatter or DeletionMessageFormatter()
        return formatter.for_event(redacted_event, self._index, profiles)
