"""
This module defines the core data models for message revision resolution using Pydantic.
Timeline events are immutable once parsed: the resolver only ever reads them, so
every model here is frozen.
"""
from enum import StrEnum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class EventKind(StrEnum):
    MESSAGE = "m.room.message"
    REDACTION = "m.room.redaction"
    ENCRYPTED = "m.room.encrypted"
    OTHER = "other"

    @classmethod
    def parse(cls, raw: str | None) -> "EventKind":
        """Maps a wire event type onto a kind; anything unrecognised is OTHER."""
        try:
            return cls(raw)
        except ValueError:
            return cls.OTHER


class TimelineEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    event_id: str
    kind: EventKind = EventKind.OTHER
    sender: str = ""
    timestamp: int = 0  # Unix timestamp in milliseconds
    content: Dict[str, Any] | None = None
    decrypted: Dict[str, Any] | None = None  # Only meaningful for ENCRYPTED
    decrypted_kind: EventKind | None = None
    room_id: str = ""
    rowid: int = 0
    timeline_rowid: int = 0
    state_key: str | None = None
    redacted_by: str | None = None

    @classmethod
    def from_json(cls, payload: Dict[str, Any]) -> "TimelineEvent":
        """
        Builds an event from a wire payload.

        The server timestamp may arrive as either ``timestamp`` or
        ``origin_server_ts``. Blank optional strings are treated as absent and
        non-object documents are dropped rather than rejected.
        """
        timestamp = payload.get("timestamp") or payload.get("origin_server_ts") or 0
        decrypted_type = _non_blank(payload.get("decrypted_type"))
        return cls(
            event_id=payload.get("event_id"),
            kind=EventKind.parse(payload.get("type")),
            sender=payload.get("sender") or "",
            timestamp=timestamp,
            content=_object_or_none(payload.get("content")),
            decrypted=_object_or_none(payload.get("decrypted")),
            decrypted_kind=EventKind.parse(decrypted_type) if decrypted_type else None,
            room_id=payload.get("room_id") or "",
            rowid=payload.get("rowid") or 0,
            timeline_rowid=payload.get("timeline_rowid") or 0,
            state_key=_non_blank(payload.get("state_key")),
            redacted_by=_non_blank(payload.get("redacted_by")),
        )


class MemberProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    display_name: Optional[str] = None
    avatar_url: Optional[str] = None


class MessageVersion(BaseModel):
    model_config = ConfigDict(frozen=True)

    event: TimelineEvent
    is_original: bool = False


class VersionedMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    original_event_id: str
    # Newest first; the original is always the last entry.
    versions: List[MessageVersion] = Field(default_factory=list)
    redacted_by: Optional[str] = None
    redaction_event: Optional[TimelineEvent] = None

    @property
    def latest(self) -> TimelineEvent | None:
        return self.versions[0].event if self.versions else None

    @property
    def is_edited(self) -> bool:
        return len(self.versions) > 1


def _non_blank(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _object_or_none(value: Any) -> Dict[str, Any] | None:
    return value if isinstance(value, dict) else None
