"""
This module renders the human-readable notice shown in place of a deleted message.

The formatter is configured with a plain dict, in the same way the stream
factory is:

- ``time_format``: strftime pattern for the deletion time (default ``"%H:%M"``).
- ``tz``: a ``tzinfo`` to render the time in; ``None`` means local time.
- ``unknown_user``: label used when the redaction has no sender.
- ``clock``: zero-argument callable returning the current time in milliseconds,
  used only when no redaction timestamp is available.
"""
import logging
import time
from datetime import datetime, tzinfo
from typing import Any, Callable, Dict, Iterable, Mapping, Union

from .models import MemberProfile, TimelineEvent
from .protocols import ProfileResolver
from .relations import redaction_reason
from .resolver import RelationIndex, find_latest_redaction

UNKNOWN_USER = "Unknown user"
DEFAULT_TIME_FORMAT = "%H:%M"

# Either a resolver object or a plain cache of user id -> profile / display name.
Profiles = Union[ProfileResolver, Mapping[str, Union[MemberProfile, str]], None]


def _now_millis() -> int:
    return int(time.time() * 1000)


class DeletionMessageFormatter:
    def __init__(self, config: Dict[str, Any] | None = None):
        config = config or {}
        self.time_format = config.get("time_format", DEFAULT_TIME_FORMAT)
        if not isinstance(self.time_format, str):
            raise ValueError("`time_format` must be a strftime pattern string.")
        self.tz = config.get("tz")
        if self.tz is not None and not isinstance(self.tz, tzinfo):
            raise ValueError("`tz` must be a tzinfo instance or None.")
        self.unknown_user = config.get("unknown_user", UNKNOWN_USER)
        self.clock: Callable[[], int] = config.get("clock") or _now_millis

    def display_name(self, sender: str | None, profiles: Profiles = None) -> str:
        if not sender:
            return self.unknown_user
        if isinstance(profiles, Mapping):
            entry = profiles.get(sender)
            name = entry.display_name if isinstance(entry, MemberProfile) else entry
        elif profiles is not None:
            name = profiles.display_name(sender)
        else:
            name = None
        return name or sender

    def format_time(self, timestamp: int) -> str:
        """Renders `timestamp`; one outside the representable range falls back to the clock."""
        try:
            moment = datetime.fromtimestamp(timestamp / 1000, tz=self.tz)
        except (ValueError, OverflowError, OSError) as e:
            logging.debug(f"Deletion timestamp {timestamp} cannot be rendered ({e}), using current time")
            moment = datetime.fromtimestamp(self.clock() / 1000, tz=self.tz)
        return moment.strftime(self.time_format)

    def build(
        self,
        sender: str | None,
        reason: str | None,
        timestamp: int | None,
        profiles: Profiles = None,
    ) -> str:
        """Formats a deletion notice from redaction fields the caller already holds."""
        name = self.display_name(sender, profiles)
        when = self.format_time(timestamp if timestamp is not None else self.clock())
        if reason and reason.strip():
            return f"Removed by {name} for {reason} at {when}"
        return f"Removed by {name} at {when}"

    def for_event(
        self,
        redacted_event: TimelineEvent,
        events: Iterable[TimelineEvent] | RelationIndex,
        profiles: Profiles = None,
    ) -> str:
        """
        Formats a deletion notice for `redacted_event` from the latest redaction
        targeting it in `events`. Without any redaction the notice names the
        unknown user and the current time.
        """
        if isinstance(events, RelationIndex):
            redaction = events.find_latest_redaction(redacted_event.event_id)
        else:
            redaction = find_latest_redaction(redacted_event.event_id, events)

        if redaction is None:
            return self.build(None, None, None, profiles)
        return self.build(
            redaction.sender,
            redaction_reason(redaction),
            redaction.timestamp,
            profiles,
        )


_default_formatter = DeletionMessageFormatter()


def build_deletion_message(
    sender: str | None,
    reason: str | None,
    timestamp: int | None,
    profiles: Profiles = None,
) -> str:
    return _default_formatter.build(sender, reason, timestamp, profiles)


def build_deletion_message_for_event(
    redacted_event: TimelineEvent,
    events: Iterable[TimelineEvent] | RelationIndex,
    profiles: Profiles = None,
) -> str:
    return _default_formatter.for_event(redacted_event, events, profiles)
