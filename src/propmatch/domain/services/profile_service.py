import logging
import threading
import weakref
from collections import Counter
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Iterable, Iterator, List, Mapping, Optional, TypeVar

from ..entities.property import PropertyInput, PropertyRecord, coerce_properties
from ..entities.search import SavedSearch, SearchEvent, SearchFilters, SearchHistoryItem
from ..entities.user import UserPreferences, UserProfile
from ..repositories.profile_repository import ProfileRepository

T = TypeVar("T")

AFFORDABLE_BUDGET_CEILING = 500_000_000
LUXURY_BUDGET_FLOOR = 1_000_000_000


@dataclass
class ProfileConfig:
    """Retention limits and suggestion sizes for user profiles"""
    max_search_history: int = 50
    max_viewed_properties: int = 100
    suggestion_recent_queries: int = 3
    suggestion_locations: int = 2
    max_suggestions: int = 8


def find_matching_properties(filters: SearchFilters,
                             properties: Iterable[PropertyInput]) -> List[PropertyRecord]:
    """Listings satisfying every bound present in ``filters``."""
    free_locations = [
        loc.lower() for loc in filters.locations if loc not in (filters.regency, filters.province)
    ]
    wanted_types = set(filters.property_types)

    matches: List[PropertyRecord] = []
    for record in coerce_properties(properties):
        if filters.min_price is not None and (record.price is None or record.price < filters.min_price):
            continue
        if filters.max_price is not None and (record.price is None or record.price > filters.max_price):
            continue
        if free_locations and not any(loc in record.get_location_text() for loc in free_locations):
            continue
        if filters.regency and (record.regency or "").lower() != filters.regency.lower():
            continue
        if filters.province and (record.province or "").lower() != filters.province.lower():
            continue
        if wanted_types and record.property_type not in wanted_types:
            continue
        if filters.min_land_area is not None and (record.land_area or 0) < filters.min_land_area:
            continue
        if (filters.min_building_area is not None
                and (record.building_area or 0) < filters.min_building_area):
            continue
        if filters.min_bedrooms is not None and (record.bedrooms or 0) < filters.min_bedrooms:
            continue
        if filters.min_bathrooms is not None and (record.bathrooms or 0) < filters.min_bathrooms:
            continue
        if filters.is_premium and not record.is_premium:
            continue
        if filters.is_hot and not record.is_hot:
            continue
        if filters.is_featured and not record.is_featured:
            continue
        matches.append(record)
    return matches


class ProfileService:
    """
    Owns every write to user profiles.

    Each mutator runs a read-modify-write cycle against the storage backend
    while holding that user's lock, so concurrent writers for one user are
    serialized and writers for different users never block each other.
    """

    def __init__(self, repository: ProfileRepository, config: Optional[ProfileConfig] = None):
        self.repository = repository
        self.config = config or ProfileConfig()
        self.logger = logging.getLogger(__name__)
        # Locks live only while some caller holds them
        self._locks = weakref.WeakValueDictionary()
        self._locks_guard = threading.Lock()

    @contextmanager
    def user_lock(self, user_id: str) -> Iterator[None]:
        with self._locks_guard:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[user_id] = lock
        with lock:
            yield

    def get_or_create(self, user_id: str) -> UserProfile:
        with self.user_lock(user_id):
            profile = self.repository.get(user_id)
            if profile is None:
                profile = UserProfile.create(user_id)
                self.repository.save(profile)
                self.logger.info(f"Created profile for user {user_id}")
            return profile

    def _mutate(self, user_id: str, mutation: Callable[[UserProfile], T]) -> T:
        with self.user_lock(user_id):
            profile = self.get_or_create(user_id)
            result = mutation(profile)
            self._trim(profile)
            profile.touch()
            if not self.repository.save(profile):
                self.logger.error(f"Failed to persist profile for user {user_id}")
            return result

    def record_search(self, user_id: str, query: str, filters: Optional[Mapping[str, Any]] = None,
                      results_count: int = 0) -> None:
        item = SearchHistoryItem.from_event(SearchEvent.create(query, filters, results_count))

        def apply(profile: UserProfile):
            profile.search_history.insert(0, item)

        self._mutate(user_id, apply)

    def record_view(self, user_id: str, property_id: str) -> None:
        property_id = str(property_id)

        def apply(profile: UserProfile):
            viewed = [pid for pid in profile.viewed_properties if pid != property_id]
            viewed.insert(0, property_id)
            profile.viewed_properties = viewed

        self._mutate(user_id, apply)

    def remove_view(self, user_id: str, property_id: str) -> bool:
        property_id = str(property_id)

        def apply(profile: UserProfile) -> bool:
            if property_id not in profile.viewed_properties:
                return False
            profile.viewed_properties = [
                pid for pid in profile.viewed_properties if pid != property_id
            ]
            return True

        return self._mutate(user_id, apply)

    def clear_search_history(self, user_id: str) -> int:
        def apply(profile: UserProfile) -> int:
            removed = len(profile.search_history)
            profile.search_history = []
            return removed

        return self._mutate(user_id, apply)

    def toggle_favorite(self, user_id: str, property_id: str) -> bool:
        """Flip favorite membership and return the new state."""
        property_id = str(property_id)

        def apply(profile: UserProfile) -> bool:
            if property_id in profile.favorite_properties:
                profile.favorite_properties = [
                    pid for pid in profile.favorite_properties if pid != property_id
                ]
                return False
            profile.favorite_properties.insert(0, property_id)
            return True

        return self._mutate(user_id, apply)

    def save_search(self, user_id: str, name: str, query: str,
                    filters: Optional[Mapping[str, Any]] = None) -> SavedSearch:
        saved = SavedSearch.create(name, query, filters)
        self._mutate(user_id, lambda profile: profile.saved_searches.insert(0, saved))
        return saved

    def delete_saved_search(self, user_id: str, search_id: str) -> bool:
        def apply(profile: UserProfile) -> bool:
            remaining = [s for s in profile.saved_searches if s.id != search_id]
            deleted = len(remaining) != len(profile.saved_searches)
            profile.saved_searches = remaining
            return deleted

        return self._mutate(user_id, apply)

    def set_saved_search_notifications(self, user_id: str, search_id: str, enabled: bool) -> bool:
        def apply(profile: UserProfile) -> bool:
            saved = profile.get_saved_search(search_id)
            if saved is None:
                return False
            saved.notification_enabled = bool(enabled)
            return True

        return self._mutate(user_id, apply)

    def update_preferences(self, user_id: str, preferences: UserPreferences) -> None:
        def apply(profile: UserProfile):
            profile.preferences = preferences

        self._mutate(user_id, apply)

    def replace_profile(self, profile: UserProfile) -> bool:
        with self.user_lock(profile.id):
            self._trim(profile)
            return self.repository.save(profile)

    def _trim(self, profile: UserProfile):
        del profile.search_history[self.config.max_search_history:]
        del profile.viewed_properties[self.config.max_viewed_properties:]

    def check_saved_search_matches(self, user_id: str,
                                   properties: Iterable[PropertyInput]) -> List[SavedSearch]:
        """Update and return saved searches that have matches newer than their last notice."""
        records = coerce_properties(properties)

        def apply(profile: UserProfile) -> List[SavedSearch]:
            updated: List[SavedSearch] = []
            now = datetime.now()
            for saved in profile.saved_searches:
                if not saved.notification_enabled:
                    continue
                matches = find_matching_properties(saved.filters, records)
                fresh = [
                    m for m in matches
                    if saved.last_notified is None
                    or (m.created_at is not None and _is_after(m.created_at, saved.last_notified))
                ]
                if fresh:
                    saved.match_count = len(matches)
                    saved.last_notified = now
                    updated.append(saved)
            return updated

        updated = self._mutate(user_id, apply)
        if updated:
            self.logger.info(f"{len(updated)} saved searches have new matches for user {user_id}")
        return updated

    def get_search_suggestions(self, user_id: str) -> List[str]:
        profile = self.get_or_create(user_id)
        suggestions: List[str] = []

        recent = [item.query for item in profile.search_history if item.query]
        suggestions.extend(recent[:self.config.suggestion_recent_queries])

        location_counts: Counter = Counter()
        for item in profile.search_history:
            location_counts.update(item.filters.locations)
        for location, _ in location_counts.most_common(self.config.suggestion_locations):
            suggestions.append(f"Properties in {location}")

        budget = profile.preferences.budget
        if not budget.is_full_range():
            if budget.max < AFFORDABLE_BUDGET_CEILING:
                suggestions.append("Affordable properties")
            elif budget.min > LUXURY_BUDGET_FLOOR:
                suggestions.append("Luxury properties")

        return list(dict.fromkeys(suggestions))[:self.config.max_suggestions]


def _is_after(created_at: datetime, reference: datetime) -> bool:
    # Compare naive and aware timestamps on wall-clock values
    if (created_at.tzinfo is None) != (reference.tzinfo is None):
        created_at = created_at.replace(tzinfo=None)
        reference = reference.replace(tzinfo=None)
    return created_at > reference
