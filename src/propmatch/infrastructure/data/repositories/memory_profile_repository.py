import copy
import logging
import threading
from typing import Dict, List, Optional

from ....domain.entities.user import UserProfile
from ....domain.repositories.profile_repository import ProfileRepository


class InMemoryProfileRepository(ProfileRepository):
    """Process-local profile store; keeps deep copies so callers never share state"""

    def __init__(self):
        self._profiles: Dict[str, UserProfile] = {}
        self._lock = threading.Lock()
        self.logger = logging.getLogger(__name__)

    def get(self, user_id: str) -> Optional[UserProfile]:
        with self._lock:
            profile = self._profiles.get(user_id)
            return copy.deepcopy(profile) if profile is not None else None

    def save(self, profile: UserProfile) -> bool:
        snapshot = copy.deepcopy(profile)
        with self._lock:
            self._profiles[profile.id] = snapshot
        self.logger.debug(f"Stored profile for user {profile.id}")
        return True

    def exists(self, user_id: str) -> bool:
        with self._lock:
            return user_id in self._profiles

    def get_all_ids(self) -> List[str]:
        with self._lock:
            return list(self._profiles.keys())

    def count(self) -> int:
        with self._lock:
            return len(self._profiles)

    def clear(self):
        with self._lock:
            self._profiles.clear()
