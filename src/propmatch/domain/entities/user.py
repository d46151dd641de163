from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from .search import SavedSearch, SearchHistoryItem

# Largest integer a JSON number carries exactly; the "no upper bound" budget
MAX_BUDGET = 9007199254740991.0

MIN_PRIORITY = 1
MAX_PRIORITY = 10
DEFAULT_PRIORITY = 5


@dataclass
class Budget:
    min: float = 0.0
    max: float = MAX_BUDGET

    def __post_init__(self):
        self.min = max(0.0, float(self.min)) if self.min is not None else 0.0
        self.max = min(MAX_BUDGET, float(self.max)) if self.max is not None else MAX_BUDGET
        if self.max < 0:
            self.max = 0.0
        if self.min > self.max:
            self.min = self.max

    def contains(self, price: float) -> bool:
        return self.min <= price <= self.max

    def is_full_range(self) -> bool:
        return self.min <= 0 and self.max >= MAX_BUDGET


def _clamp_priority(value) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return DEFAULT_PRIORITY
    return max(MIN_PRIORITY, min(MAX_PRIORITY, number))


@dataclass
class Priorities:
    """Informational weights (1-10) describing what the user cares about."""
    price: int = DEFAULT_PRIORITY
    location: int = DEFAULT_PRIORITY
    size: int = DEFAULT_PRIORITY
    features: int = DEFAULT_PRIORITY

    def __post_init__(self):
        self.price = _clamp_priority(self.price)
        self.location = _clamp_priority(self.location)
        self.size = _clamp_priority(self.size)
        self.features = _clamp_priority(self.features)


@dataclass
class UserPreferences:
    budget: Budget = None
    property_types: List[str] = None
    locations: List[str] = None
    features: List[str] = None
    priorities: Priorities = None

    def __post_init__(self):
        if self.budget is None:
            self.budget = Budget()
        if self.priorities is None:
            self.priorities = Priorities()
        self.property_types = _dedupe(self.property_types)
        self.locations = _dedupe(self.locations)
        self.features = _dedupe(self.features)

    def is_empty(self) -> bool:
        return (self.budget.is_full_range() and not self.property_types
                and not self.locations and not self.features)


def _dedupe(values: Optional[List[str]]) -> List[str]:
    result: List[str] = []
    for value in values or []:
        if value and value not in result:
            result.append(value)
    return result


@dataclass
class UserProfile:
    id: str
    preferences: UserPreferences
    search_history: List[SearchHistoryItem]
    viewed_properties: List[str]
    favorite_properties: List[str]
    saved_searches: List[SavedSearch]
    last_activity: datetime
    created_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def create(cls, user_id: str):
        now = datetime.now()
        return cls(
            id=user_id,
            preferences=UserPreferences(),
            search_history=[],
            viewed_properties=[],
            favorite_properties=[],
            saved_searches=[],
            last_activity=now,
            created_at=now,
        )

    def touch(self):
        self.last_activity = datetime.now()

    def get_history_ids(self) -> List[str]:
        """Viewed then favorite property ids, without duplicates."""
        return _dedupe(self.viewed_properties + self.favorite_properties)

    def get_saved_search(self, search_id: str) -> Optional[SavedSearch]:
        for saved in self.saved_searches:
            if saved.id == search_id:
                return saved
        return None
