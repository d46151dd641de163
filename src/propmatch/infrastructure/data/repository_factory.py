import logging
from typing import Optional

import redis
from redis import Redis

from ...domain.exceptions import ProfileRepositoryError
from ...domain.repositories.profile_repository import ProfileRepository
from .config import StorageConfig
from .repositories.memory_profile_repository import InMemoryProfileRepository
from .repositories.redis_profile_repository import RedisProfileRepository

logger = logging.getLogger(__name__)


class RepositoryFactory:
    """Factory for profile storage backends"""

    def __init__(self, config: Optional[StorageConfig] = None):
        self.config = config or StorageConfig()

    def create_profile_repository(self, redis_client: Optional[Redis] = None) -> ProfileRepository:
        backend = self.config.backend
        if backend == "memory":
            logger.info("Using in-memory profile repository")
            return InMemoryProfileRepository()

        if backend == "redis":
            client = redis_client or redis.Redis.from_url(self.config.redis_url)
            logger.info(f"Using Redis profile repository with prefix {self.config.key_prefix!r}")
            return RedisProfileRepository(
                client,
                key_prefix=self.config.key_prefix,
                ttl_seconds=self.config.ttl_seconds,
            )

        raise ProfileRepositoryError(f"Unknown profile storage backend: {backend}")
