"""
An in-memory profile cache implementing the `ProfileResolver` protocol.
"""
import logging
import threading
from typing import Dict, Mapping

from .models import MemberProfile


class ProfileCache:
    """
    Holds the member profiles known for a conversation. Lookups are read-only
    from the resolver's point of view; writers are the sync layer.
    """

    def __init__(self, profiles: Mapping[str, MemberProfile] | None = None):
        self._profiles: Dict[str, MemberProfile] = dict(profiles or {})
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._profiles)

    def __contains__(self, user_id: object) -> bool:
        with self._lock:
            return user_id in self._profiles

    def update(self, user_id: str, profile: MemberProfile):
        with self._lock:
            self._profiles[user_id] = profile

    def get(self, user_id: str) -> MemberProfile | None:
        with self._lock:
            return self._profiles.get(user_id)

    def display_name(self, user_id: str) -> str | None:
        profile = self.get(user_id)
        if profile is None or not profile.display_name:
            return None
        return profile.display_name

    def clear(self):
        with self._lock:
            count = len(self._profiles)
            self._profiles.clear()
        logging.debug(f"ProfileCache cleared {count} profiles")
