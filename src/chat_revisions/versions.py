"""
Edit history for a single message and a shared cache of those histories.

Where the resolver answers "what does this message look like now", this module
answers "what has it looked like": every edit reachable from the original,
newest first, together with the redaction that deleted it, if any.
"""
import logging
import threading
from collections import deque
from typing import Dict, Iterable, List, Set

from .models import MessageVersion, TimelineEvent, VersionedMessage
from .relations import edit_target
from .resolver import RelationIndex


def build_versioned_message(
    original_id: str, events: Iterable[TimelineEvent] | RelationIndex
) -> VersionedMessage | None:
    """
    Collects the original event and every edit reachable from it. Edits of edits
    count too, and a relation that loops back is ignored. Returns None when the
    original is not in the snapshot.
    """
    index = events if isinstance(events, RelationIndex) else RelationIndex(events)
    original = index.get(original_id)
    if original is None:
        return None

    seen: Set[str] = {original_id}
    edits: List[TimelineEvent] = []
    pending = deque([original_id])
    while pending:
        current_id = pending.popleft()
        for event in index.related_to(current_id):
            if edit_target(event) != current_id or event.event_id in seen:
                continue
            seen.add(event.event_id)
            edits.append(event)
            pending.append(event.event_id)

    # sorted() is stable, so equal timestamps keep discovery order.
    edits = sorted(edits, key=lambda e: e.timestamp, reverse=True)
    versions = [MessageVersion(event=e) for e in edits]
    versions.append(MessageVersion(event=original, is_original=True))

    redaction = index.find_latest_redaction(original_id)
    return VersionedMessage(
        original_event_id=original_id,
        versions=versions,
        redacted_by=redaction.event_id if redaction else original.redacted_by,
        redaction_event=redaction,
    )


class MessageVersionsCache:
    """
    Holds version histories keyed by original event id, along with reverse
    lookups from an edit id to its original and from an original to the
    redaction that deleted it. Safe to share between threads.
    """

    def __init__(self):
        self._versions: Dict[str, VersionedMessage] = {}
        self._edit_to_original: Dict[str, str] = {}
        self._redactions: Dict[str, TimelineEvent] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._versions)

    def update(self, versioned: VersionedMessage):
        original_id = versioned.original_event_id
        with self._lock:
            self._versions[original_id] = versioned
            for version in versioned.versions:
                if not version.is_original and version.event.event_id != original_id:
                    self._edit_to_original[version.event.event_id] = original_id
            if versioned.redacted_by is not None and versioned.redaction_event is not None:
                self._redactions[original_id] = versioned.redaction_event

    def get(self, original_id: str) -> VersionedMessage | None:
        with self._lock:
            return self._versions.get(original_id)

    def original_id_for(self, edit_id: str) -> str | None:
        with self._lock:
            return self._edit_to_original.get(edit_id)

    def redaction_for(self, original_id: str) -> TimelineEvent | None:
        with self._lock:
            return self._redactions.get(original_id)

    def all_versions(self) -> Dict[str, VersionedMessage]:
        """Returns a copy; later updates do not show up in it."""
        with self._lock:
            return dict(self._versions)

    def clear(self):
        with self._lock:
            self._versions.clear()
            self._edit_to_original.clear()
            self._redactions.clear()
        logging.debug("MessageVersionsCache cleared all versions")
