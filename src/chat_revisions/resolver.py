"""
This module resolves the effective state of a message from a timeline snapshot.

Edits and redactions are both "this event replaces that event", so a single
chain walk handles them: the kind of the terminal event tells the caller whether
the message was last edited or deleted.

Two renditions are provided. The module-level functions scan the snapshot at each
hop, which is quadratic in the worst case but needs no setup. `RelationIndex`
builds a referenced-id lookup once per snapshot and answers the same questions
with identical results, for callers resolving many messages against one snapshot.
"""
import logging
from collections import defaultdict
from typing import Dict, Iterable, List, Sequence, Set

from .models import EventKind, TimelineEvent
from .relations import redaction_target, relation_target


def _as_snapshot(events: Iterable[TimelineEvent]) -> Sequence[TimelineEvent]:
    snapshot = events if isinstance(events, (list, tuple)) else list(events)
    if not all(isinstance(e, TimelineEvent) for e in snapshot):
        raise TypeError("All items in events must be TimelineEvent objects")
    return snapshot


def _find(event_id: str, events: Sequence[TimelineEvent]) -> TimelineEvent | None:
    return next((e for e in events if e.event_id == event_id), None)


def resolve_latest(
    original_id: str, events: Iterable[TimelineEvent]
) -> TimelineEvent | None:
    """
    Follows edit and redaction relations from `original_id` to the event that
    currently represents it.

    When several events relate to the same id, the first in snapshot order is
    followed. A chain that revisits an id resolves to the original event; a
    chain that reaches a missing id resolves to nothing.
    """
    snapshot = _as_snapshot(events)
    current_id = original_id
    visited: Set[str] = set()

    while current_id not in visited:
        visited.add(current_id)

        current = _find(current_id, snapshot)
        if current is None:
            logging.debug(f"Revision chain of {original_id} references missing event {current_id}")
            return None

        related = next((e for e in snapshot if relation_target(e) == current_id), None)
        if related is None:
            return current
        current_id = related.event_id

    logging.debug(f"Revision chain of {original_id} loops back to {current_id}, using original")
    return _find(original_id, snapshot)


def find_latest_redaction(
    target_id: str, events: Iterable[TimelineEvent]
) -> TimelineEvent | None:
    """Returns the redaction of `target_id` with the greatest timestamp, earliest in snapshot order on ties."""
    redactions = [e for e in _as_snapshot(events) if redaction_target(e) == target_id]
    if not redactions:
        return None
    # max() keeps the first maximal element, which gives the snapshot-order tie-break.
    return max(redactions, key=lambda e: e.timestamp)


class RelationIndex:
    """
    A lookup over one snapshot from referenced event id to the events that
    supersede it. Building it is linear; each chain hop is then constant time.
    """

    def __init__(self, events: Iterable[TimelineEvent]):
        self.events = tuple(_as_snapshot(events))
        self._by_id: Dict[str, TimelineEvent] = {}
        self._related: Dict[str, List[TimelineEvent]] = defaultdict(list)
        self._redactions: Dict[str, List[TimelineEvent]] = defaultdict(list)

        for event in self.events:
            # The first occurrence of an id wins, matching a front-to-back scan.
            self._by_id.setdefault(event.event_id, event)
            target = relation_target(event)
            if target is None:
                continue
            self._related[target].append(event)
            match event.kind:
                case EventKind.REDACTION:
                    self._redactions[target].append(event)
                case EventKind.MESSAGE | EventKind.ENCRYPTED | EventKind.OTHER:
                    pass

    def __len__(self) -> int:
        return len(self.events)

    def get(self, event_id: str) -> TimelineEvent | None:
        return self._by_id.get(event_id)

    def related_to(self, event_id: str) -> List[TimelineEvent]:
        """All events that edit or redact `event_id`, in snapshot order."""
        return list(self._related.get(event_id, ()))

    def redactions_for(self, event_id: str) -> List[TimelineEvent]:
        return list(self._redactions.get(event_id, ()))

    def resolve_latest(self, original_id: str) -> TimelineEvent | None:
        current_id = original_id
        visited: Set[str] = set()

        while current_id not in visited:
            visited.add(current_id)

            current = self._by_id.get(current_id)
            if current is None:
                logging.debug(f"Revision chain of {original_id} references missing event {current_id}")
                return None

            related = self._related.get(current_id)
            if not related:
                return current
            current_id = related[0].event_id

        logging.debug(f"Revision chain of {original_id} loops back to {current_id}, using original")
        return self._by_id.get(original_id)

    def find_latest_redaction(self, target_id: str) -> TimelineEvent | None:
        redactions = self._redactions.get(target_id)
        if not redactions:
            return None
        return max(redactions, key=lambda e: e.timestamp)
