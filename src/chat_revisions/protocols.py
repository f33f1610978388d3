"""
This module defines the protocols for the collaborators the resolver consumes.

The formatter talks to a `ProfileResolver`, not to a concrete cache, so any
source of display names (an in-memory cache, a member list, a test double) can
be plugged in without changing the formatting code.
"""
from typing import Protocol, runtime_checkable


@runtime_checkable
class ProfileResolver(Protocol):
    """
    Maps a user id to a display name. Returning None means the user is
    unknown; callers fall back to the raw id.
    """

    def display_name(self, user_id: str) -> str | None:
        ...
