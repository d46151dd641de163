# Repository implementations
from .memory_profile_repository import InMemoryProfileRepository
from .redis_profile_repository import RedisProfileRepository

__all__ = [
    'InMemoryProfileRepository',
    'RedisProfileRepository',
]
