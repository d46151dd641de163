import logging
from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

import numpy as np

from ..entities.property import PropertyInput, PropertyRecord, coerce_properties
from ..entities.search import (
    BehavioralEvent, SaveEvent, SearchEvent, SearchHistoryItem, ViewEvent, coerce_event
)
from ..entities.user import MAX_BUDGET, Budget, UserPreferences, UserProfile
from .feature_extraction import DEFAULT_FEATURE_CONFIG, FeatureConfig, extract_features

SearchInput = Union[SearchEvent, SearchHistoryItem, Mapping[str, Any]]


@dataclass
class ProfilerConfig:
    """Configuration for preference profiling"""
    top_features: int = 5
    narrow_budget_with_views: bool = True


class PreferenceProfiler:
    """Turns behavioral history into a UserPreferences snapshot."""

    def __init__(self, config: Optional[ProfilerConfig] = None,
                 feature_config: FeatureConfig = DEFAULT_FEATURE_CONFIG):
        self.config = config or ProfilerConfig()
        self.feature_config = feature_config
        self.logger = logging.getLogger(__name__)

    def profile(self,
                search_history: Optional[Iterable[SearchInput]] = None,
                viewed_properties: Optional[Iterable[PropertyInput]] = None,
                saved_properties: Optional[Iterable[PropertyInput]] = None) -> UserPreferences:
        """
        Build preferences from searches and viewed/saved listings.

        Budget comes from explicit price filters, narrowed to one standard
        deviation around the mean viewed price. Types and locations are the
        union of filter values; features are the most frequent tags of the
        viewed and saved listings. No input yields empty preferences with a
        full-range budget.
        """
        searches: List[SearchEvent] = []
        for item in search_history or []:
            event = self._to_search_event(item)
            if event is not None:
                searches.append(event)
        viewed = coerce_properties(viewed_properties)
        saved = coerce_properties(saved_properties)

        budget = self._derive_budget(searches, viewed)
        property_types: List[str] = []
        locations: List[str] = []
        for search in searches:
            property_types.extend(search.filters.property_types)
            locations.extend(search.filters.locations)

        features = self._derive_features(viewed + saved)

        preferences = UserPreferences(
            budget=budget,
            property_types=property_types,
            locations=locations,
            features=features,
        )
        if preferences.is_empty():
            self.logger.debug("No usable behavior; returning empty preferences")
            return preferences
        self.logger.debug(
            f"Profiled {len(searches)} searches, {len(viewed)} views, {len(saved)} saves: "
            f"budget=({preferences.budget.min:.0f}, {preferences.budget.max:.0f}), "
            f"{len(preferences.property_types)} types, {len(preferences.locations)} locations"
        )
        return preferences

    def profile_from_events(self, events: Iterable[Union[BehavioralEvent, Mapping[str, Any]]],
                            properties: Iterable[PropertyInput]) -> UserPreferences:
        """Profile an explicit event batch, resolving view/save ids against ``properties``."""
        index = self._index(properties)
        searches: List[SearchEvent] = []
        viewed: List[PropertyRecord] = []
        saved: List[PropertyRecord] = []

        for raw_event in events:
            try:
                event = coerce_event(raw_event)
            except (TypeError, ValueError) as e:
                self.logger.warning(f"Skipping unusable behavioral event: {e}")
                continue
            if isinstance(event, SearchEvent):
                searches.append(event)
            elif isinstance(event, ViewEvent) and event.property_id in index:
                viewed.append(index[event.property_id])
            elif isinstance(event, SaveEvent) and event.property_id in index:
                saved.append(index[event.property_id])

        return self.profile(searches, viewed, saved)

    def profile_user(self, profile: UserProfile,
                     properties: Iterable[PropertyInput]) -> UserPreferences:
        """Profile a stored user, resolving viewed and favorite ids against ``properties``."""
        index = self._index(properties)
        viewed = [index[pid] for pid in profile.viewed_properties if pid in index]
        saved = [index[pid] for pid in profile.favorite_properties if pid in index]
        return self.profile(profile.search_history, viewed, saved)

    def _derive_budget(self, searches: Sequence[SearchEvent],
                       viewed: Sequence[PropertyRecord]) -> Budget:
        priced = [s.filters for s in searches if s.filters.has_price_filter()]
        mins = [f.min_price for f in priced if f.min_price is not None]
        maxes = [f.max_price for f in priced if f.max_price is not None]
        budget_min = min(mins) if mins else 0.0
        budget_max = max(maxes) if maxes else MAX_BUDGET

        prices = [p.price for p in viewed if p.has_price]
        if prices and self.config.narrow_budget_with_views:
            values = np.asarray(prices, dtype=float)
            mean = float(values.mean())
            std = float(values.std())
            budget_min = max(budget_min, mean - std)
            budget_max = min(budget_max, mean + std)

        return Budget(min=budget_min, max=budget_max)

    def _derive_features(self, properties: Sequence[PropertyRecord]) -> List[str]:
        counts: Counter = Counter()
        for property_record in properties:
            counts.update(extract_features(property_record, self.feature_config))
        return [tag for tag, _ in counts.most_common(self.config.top_features)]

    def _to_search_event(self, item: SearchInput) -> Optional[SearchEvent]:
        if isinstance(item, SearchHistoryItem):
            return item.to_event()
        if isinstance(item, Mapping) and "kind" not in item:
            item = dict(item, kind="search")
        try:
            event = coerce_event(item)
        except (TypeError, ValueError) as e:
            self.logger.warning(f"Skipping unusable search history record: {e}")
            return None
        if not isinstance(event, SearchEvent):
            self.logger.warning(f"Skipping {event.kind} event found in search history")
            return None
        return event

    @staticmethod
    def _index(properties: Iterable[PropertyInput]) -> Dict[str, PropertyRecord]:
        index: Dict[str, PropertyRecord] = {}
        for property_record in coerce_properties(properties):
            index.setdefault(property_record.id, property_record)
        return index
