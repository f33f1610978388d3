"""
This module exports the public API for resolving the effective state of edited
and deleted chat messages.
"""
from .models import (
    EventKind,
    TimelineEvent,
    MemberProfile,
    MessageVersion,
    VersionedMessage,
)
from .relations import edit_target, redaction_target, redaction_reason, relation_target
from .resolver import RelationIndex, resolve_latest, find_latest_redaction
from .formatting import (
    DeletionMessageFormatter,
    build_deletion_message,
    build_deletion_message_for_event,
)
from .protocols import ProfileResolver
from .profiles import ProfileCache
from .snapshot import TimelineSnapshot
from .versions import MessageVersionsCache, build_versioned_message

__all__ = [
    "EventKind",
    "TimelineEvent",
    "MemberProfile",
    "MessageVersion",
    "VersionedMessage",
    "edit_target",
    "redaction_target",
    "redaction_reason",
    "relation_target",
    "RelationIndex",
    "resolve_latest",
    "find_latest_redaction",
    "DeletionMessageFormatter",
    "build_deletion_message",
    "build_deletion_message_for_event",
    "ProfileResolver",
    "ProfileCache",
    "TimelineSnapshot",
    "MessageVersionsCache",
    "build_versioned_message",
]
