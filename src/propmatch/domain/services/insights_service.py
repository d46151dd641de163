import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

import numpy as np

from ..entities.property import PropertyInput, coerce_properties
from ..entities.recommendation import ActivityPatterns, MarketInsights, PersonalInsights
from ..entities.user import MAX_BUDGET, Budget, UserPreferences, UserProfile

DEFAULT_TRENDING_FEATURES = ["swimming pool", "garage", "garden", "security", "elevator"]


@dataclass
class InsightsConfig:
    """Configuration for market and personal insights"""
    popular_locations: int = 3
    trending_features: List[str] = field(default_factory=lambda: list(DEFAULT_TRENDING_FEATURES))
    favorite_locations: int = 3
    common_search_terms: int = 5
    min_term_length: int = 3
    peak_hours: int = 3
    preferred_days: int = 3


class InsightsAggregator:
    """Market-level statistics over a candidate set, plus per-user activity insights."""

    def __init__(self, config: Optional[InsightsConfig] = None):
        self.config = config or InsightsConfig()
        self.logger = logging.getLogger(__name__)

    def insights(self, properties: Iterable[PropertyInput],
                 preferences: Optional[UserPreferences] = None) -> MarketInsights:
        # Market figures do not depend on preferences
        records = coerce_properties(properties)

        prices = [record.price for record in records if record.has_price]
        average_price = float(np.mean(prices)) if prices else 0.0

        location_counts = Counter(
            record.location_label for record in records if record.location_label
        )
        popular_locations = [
            location for location, _ in location_counts.most_common(self.config.popular_locations)
        ]

        return MarketInsights(
            average_price=average_price,
            popular_locations=popular_locations,
            trending_features=list(self.config.trending_features),
        )

    def personal_insights(self, profile: UserProfile) -> PersonalInsights:
        history = profile.search_history

        prices: List[float] = []
        location_counts: Counter = Counter()
        term_counts: Counter = Counter()
        hour_counts: Counter = Counter()
        day_counts: Counter = Counter()

        for item in history:
            for price in (item.filters.min_price, item.filters.max_price):
                if price:
                    prices.append(price)
            location_counts.update(item.filters.locations)
            term_counts.update(
                term for term in re.split(r"\s+", item.query.lower())
                if len(term) >= self.config.min_term_length
            )
            hour_counts[item.timestamp.hour] += 1
            day_counts[item.timestamp.weekday()] += 1

        price_range = Budget(min=min(prices), max=max(prices)) if prices else Budget(0.0, MAX_BUDGET)

        return PersonalInsights(
            preferred_price_range=price_range,
            favorite_locations=[
                loc for loc, _ in location_counts.most_common(self.config.favorite_locations)
            ],
            common_search_terms=[
                term for term, _ in term_counts.most_common(self.config.common_search_terms)
            ],
            activity_patterns=ActivityPatterns(
                peak_hours=[hour for hour, _ in hour_counts.most_common(self.config.peak_hours)],
                preferred_days=[day for day, _ in day_counts.most_common(self.config.preferred_days)],
            ),
        )
