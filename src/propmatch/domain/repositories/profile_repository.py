from abc import ABC, abstractmethod
from typing import List, Optional

from ..entities.user import UserProfile


class ProfileRepository(ABC):
    """Storage backend for user profiles.

    Implementations hold snapshots: ``get`` returns a profile the caller may
    mutate freely, and changes become visible only after ``save``.
    """

    @abstractmethod
    def get(self, user_id: str) -> Optional[UserProfile]:
        pass

    @abstractmethod
    def save(self, profile: UserProfile) -> bool:
        pass

    @abstractmethod
    def exists(self, user_id: str) -> bool:
        pass

    @abstractmethod
    def get_all_ids(self) -> List[str]:
        pass

    @abstractmethod
    def count(self) -> int:
        pass
