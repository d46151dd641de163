import logging
from typing import List, Optional

from pydantic import ValidationError
from redis import Redis
from redis.exceptions import RedisError

from ....application.dto.profile_dto import ProfileSnapshot
from ....domain.entities.user import UserProfile
from ....domain.repositories.profile_repository import ProfileRepository


class RedisProfileRepository(ProfileRepository):
    """Redis-backed profile store holding one JSON snapshot per user"""

    def __init__(self, redis_client: Redis, key_prefix: str = "profile:",
                 ttl_seconds: Optional[int] = None):
        self.redis = redis_client
        self.key_prefix = key_prefix
        self.ttl_seconds = ttl_seconds
        self.logger = logging.getLogger(__name__)

    def _key(self, user_id: str) -> str:
        return f"{self.key_prefix}{user_id}"

    def get(self, user_id: str) -> Optional[UserProfile]:
        try:
            raw = self.redis.get(self._key(user_id))
            if raw is None:
                self.logger.debug(f"No stored profile for user {user_id}")
                return None
            if isinstance(raw, bytes):
                raw = raw.decode("utf-8")
            return ProfileSnapshot.from_json(raw).to_profile()

        except ValidationError as e:
            self.logger.error(f"Stored profile for user {user_id} is invalid: {e}")
            return None
        except RedisError as e:
            self.logger.error(f"Failed to load profile for user {user_id}: {e}")
            return None

    def save(self, profile: UserProfile) -> bool:
        try:
            payload = ProfileSnapshot.from_profile(profile).to_json()
            if self.ttl_seconds:
                success = self.redis.setex(self._key(profile.id), self.ttl_seconds, payload)
            else:
                success = self.redis.set(self._key(profile.id), payload)

            if success:
                self.logger.debug(f"Stored profile for user {profile.id}")
                return True
            self.logger.warning(f"Redis refused profile write for user {profile.id}")
            return False

        except RedisError as e:
            self.logger.error(f"Failed to store profile for user {profile.id}: {e}")
            return False

    def exists(self, user_id: str) -> bool:
        try:
            return bool(self.redis.exists(self._key(user_id)))
        except RedisError as e:
            self.logger.error(f"Failed to check profile for user {user_id}: {e}")
            return False

    def get_all_ids(self) -> List[str]:
        try:
            ids = []
            for key in self.redis.scan_iter(match=f"{self.key_prefix}*"):
                if isinstance(key, bytes):
                    key = key.decode("utf-8")
                ids.append(key[len(self.key_prefix):])
            return ids
        except RedisError as e:
            self.logger.error(f"Failed to list stored profiles: {e}")
            return []

    def count(self) -> int:
        return len(self.get_all_ids())
