# Data infrastructure layer
from .config import MatchingConfig, StorageConfig
from .repository_factory import RepositoryFactory
from .repositories import InMemoryProfileRepository, RedisProfileRepository

__all__ = [
    # Configuration
    'MatchingConfig',
    'StorageConfig',

    # Factory
    'RepositoryFactory',

    # Repository implementations
    'InMemoryProfileRepository',
    'RedisProfileRepository',
]
