import logging
import time
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Set

from ..entities.property import PropertyInput, PropertyRecord, coerce_property
from ..entities.recommendation import PropertyScore, ScoreBreakdown
from ..entities.user import Budget, UserPreferences
from .feature_extraction import DEFAULT_FEATURE_CONFIG, FeatureConfig, extract_features


@dataclass
class ScoringWeights:
    price: float = 0.30
    location: float = 0.25
    type: float = 0.20
    feature: float = 0.15
    popularity: float = 0.10

    def normalized(self) -> "ScoringWeights":
        total = self.price + self.location + self.type + self.feature + self.popularity
        if total <= 0:
            return ScoringWeights()
        return ScoringWeights(
            price=self.price / total,
            location=self.location / total,
            type=self.type / total,
            feature=self.feature / total,
            popularity=self.popularity / total,
        )


@dataclass
class ReasonThresholds:
    price_strong: float = 80.0
    price_fair: float = 60.0
    location_strong: float = 80.0
    location_fair: float = 60.0
    type_match: float = 90.0
    feature_match: float = 70.0
    popularity: float = 80.0


@dataclass
class ScoringConfig:
    """Configuration for the weighted multi-criteria scoring model"""
    weights: ScoringWeights = field(default_factory=ScoringWeights)
    price_decay_slope: float = 50.0
    location_baseline: float = 30.0
    type_baseline: float = 20.0
    popularity_base: float = 50.0
    premium_bonus: float = 20.0
    hot_bonus: float = 15.0
    featured_bonus: float = 10.0
    image_bonus: float = 5.0
    confidence_base: float = 0.5
    confidence_increment: float = 0.1
    reason_thresholds: ReasonThresholds = field(default_factory=ReasonThresholds)


REASON_PRICE_STRONG = "Price strongly matches budget"
REASON_PRICE_FAIR = "Price fairly matches budget"
REASON_LOCATION_STRONG = "Location matches preferred areas"
REASON_LOCATION_FAIR = "Strategic location"
REASON_TYPE = "Property type matches preferences"
REASON_FEATURES = "Features match your needs"
REASON_POPULAR = "Popular and in-demand listing"
REASON_FALLBACK = "Interesting property worth a look"


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


class ScoringEngine:
    """Scores candidate listings against user preferences."""

    def __init__(self, config: Optional[ScoringConfig] = None,
                 feature_config: FeatureConfig = DEFAULT_FEATURE_CONFIG):
        self.config = config or ScoringConfig()
        self.weights = self.config.weights.normalized()
        self.feature_config = feature_config
        self.logger = logging.getLogger(__name__)

    def score(self, property_data: PropertyInput, preferences: UserPreferences) -> PropertyScore:
        property_record = coerce_property(property_data)
        thresholds = self.config.reason_thresholds
        reasons: List[str] = []

        price_score = self.price_score(property_record.price, preferences.budget)
        if price_score > thresholds.price_strong:
            reasons.append(REASON_PRICE_STRONG)
        elif price_score > thresholds.price_fair:
            reasons.append(REASON_PRICE_FAIR)

        location_score = self.location_score(property_record, preferences.locations)
        if location_score > thresholds.location_strong:
            reasons.append(REASON_LOCATION_STRONG)
        elif location_score > thresholds.location_fair:
            reasons.append(REASON_LOCATION_FAIR)

        type_score = self.type_score(property_record.property_type, preferences.property_types)
        if type_score > thresholds.type_match:
            reasons.append(REASON_TYPE)

        feature_score = self.feature_score(property_record, preferences.features)
        if feature_score > thresholds.feature_match:
            reasons.append(REASON_FEATURES)

        popularity_score = self.popularity_score(property_record)
        if popularity_score > thresholds.popularity:
            reasons.append(REASON_POPULAR)

        total = (
            price_score * self.weights.price
            + location_score * self.weights.location
            + type_score * self.weights.type
            + feature_score * self.weights.feature
            + popularity_score * self.weights.popularity
        )

        return PropertyScore(
            property_id=property_record.id,
            total_score=_clamp(total),
            breakdown=ScoreBreakdown(
                price_match=price_score,
                location_match=location_score,
                type_match=type_score,
                feature_match=feature_score,
                popularity_bonus=popularity_score,
            ),
            confidence=self.confidence(property_record, preferences),
            reasons=reasons or [REASON_FALLBACK],
        )

    def score_all(self, properties: Iterable[PropertyInput],
                  preferences: UserPreferences) -> List[PropertyScore]:
        """Score every candidate, best first; ties are broken by property id."""
        start_time = time.perf_counter()
        scores = [self.score(property_data, preferences) for property_data in properties]
        scores.sort(key=lambda s: (-s.total_score, s.property_id))
        elapsed_ms = (time.perf_counter() - start_time) * 1000
        self.logger.debug(f"Scored {len(scores)} candidates in {elapsed_ms:.1f}ms")
        return scores

    def price_score(self, price: Optional[float], budget: Budget) -> float:
        if price is None or price <= 0:
            return 0.0
        if budget.contains(price):
            return 100.0
        slope = self.config.price_decay_slope
        if price < budget.min:
            return _clamp(100.0 - ((budget.min - price) / budget.min) * slope)
        if budget.max <= 0:
            return 0.0
        return _clamp(100.0 - ((price - budget.max) / budget.max) * slope)

    def location_score(self, property_record: PropertyRecord,
                       preferred_locations: Sequence[str]) -> float:
        label = property_record.location_label.lower()
        text = property_record.get_location_text()
        for location in preferred_locations:
            wanted = location.strip().lower()
            if not wanted:
                continue
            if (label and (wanted in label or label in wanted)) or (text and wanted in text):
                return 100.0
        return self.config.location_baseline

    def type_score(self, property_type: Optional[str], preferred_types: Sequence[str]) -> float:
        if property_type and property_type in {t.lower() for t in preferred_types}:
            return 100.0
        return self.config.type_baseline

    def feature_score(self, property_record: PropertyRecord,
                      preferred_features: Sequence[str]) -> float:
        wanted: Set[str] = {f.lower() for f in preferred_features if f}
        if not wanted:
            return 0.0
        present = {f.lower() for f in extract_features(property_record, self.feature_config)}
        return _clamp(len(present & wanted) / max(len(wanted), 1) * 100.0)

    def popularity_score(self, property_record: PropertyRecord) -> float:
        score = self.config.popularity_base
        if property_record.is_premium:
            score += self.config.premium_bonus
        if property_record.is_hot:
            score += self.config.hot_bonus
        if property_record.is_featured:
            score += self.config.featured_bonus
        if property_record.has_image:
            score += self.config.image_bonus
        return _clamp(score)

    def confidence(self, property_record: PropertyRecord, preferences: UserPreferences) -> float:
        signals = (
            property_record.has_price,
            bool(property_record.property_type),
            property_record.has_full_location,
            property_record.has_image,
            bool(preferences.property_types),
            bool(preferences.locations),
        )
        confidence = self.config.confidence_base + self.config.confidence_increment * sum(signals)
        return _clamp(confidence, 0.0, 1.0)
