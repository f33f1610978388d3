"""
Typed accessors over the loosely-structured event content documents.

All of the "is this field present and well-formed" logic lives here so the
resolver never touches raw content. A missing, blank, or mistyped field is
reported as ``None``: malformed relations are treated as no relation at all.
"""
from typing import Any, Dict

from .models import EventKind, TimelineEvent

REPLACE_REL_TYPE = "m.replace"


def _non_blank_str(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _redaction_content(event: TimelineEvent) -> Dict[str, Any] | None:
    match event.kind:
        case EventKind.REDACTION:
            return event.content
        case EventKind.MESSAGE | EventKind.ENCRYPTED | EventKind.OTHER:
            return None


def redaction_target(event: TimelineEvent) -> str | None:
    """
    Returns the id of the event a redaction deletes.

    ``redacts`` may be a bare event id or an object carrying ``event_id``.
    The string form takes priority when both could apply.
    """
    content = _redaction_content(event)
    if not content:
        return None
    redacts = content.get("redacts")
    as_string = _non_blank_str(redacts)
    if as_string is not None:
        return as_string
    if isinstance(redacts, dict):
        return _non_blank_str(redacts.get("event_id"))
    return None


def _replace_target(document: Dict[str, Any] | None) -> str | None:
    if not document:
        return None
    relates_to = document.get("m.relates_to")
    if not isinstance(relates_to, dict):
        return None
    if relates_to.get("rel_type") != REPLACE_REL_TYPE:
        return None
    return _non_blank_str(relates_to.get("event_id"))


def edit_target(event: TimelineEvent) -> str | None:
    """Returns the id of the event this one replaces through an ``m.replace`` relation."""
    match event.kind:
        case EventKind.MESSAGE:
            return _replace_target(event.content)
        case EventKind.ENCRYPTED:
            # The outer content is ciphertext; only the decrypted payload counts.
            if event.decrypted_kind == EventKind.MESSAGE:
                return _replace_target(event.decrypted)
            return None
        case EventKind.REDACTION | EventKind.OTHER:
            return None


def relation_target(event: TimelineEvent) -> str | None:
    """Returns the id this event supersedes, whether by deleting it or by editing it."""
    match event.kind:
        case EventKind.REDACTION:
            return redaction_target(event)
        case EventKind.MESSAGE | EventKind.ENCRYPTED:
            return edit_target(event)
        case EventKind.OTHER:
            return None


def redaction_reason(event: TimelineEvent) -> str | None:
    content = _redaction_content(event)
    if not content:
        return None
    return _non_blank_str(content.get("reason"))
