import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from ..entities.property import PropertyInput, PropertyRecord, coerce_property, coerce_properties
from .feature_extraction import DEFAULT_FEATURE_CONFIG, FeatureConfig, extract_features


@dataclass
class SimilarityConfig:
    """Configuration for listing-to-listing similarity"""
    price_weight: float = 0.30
    location_weight: float = 0.25
    type_weight: float = 0.20
    size_weight: float = 0.15
    feature_weight: float = 0.10
    location_mismatch_score: float = 0.2


class SimilarityEngine:
    """Weighted attribute closeness between two listings, in [0, 1]."""

    def __init__(self, config: Optional[SimilarityConfig] = None,
                 feature_config: FeatureConfig = DEFAULT_FEATURE_CONFIG):
        self.config = config or SimilarityConfig()
        self.feature_config = feature_config
        self.logger = logging.getLogger(__name__)

    def similarity(self, first: PropertyInput, second: PropertyInput) -> float:
        a = coerce_property(first)
        b = coerce_property(second)
        return self._similarity(a, extract_features(a, self.feature_config), b)

    def rank_similar(self, target: PropertyInput, candidates: Iterable[PropertyInput],
                     limit: Optional[int] = None) -> List[Tuple[str, float]]:
        """
        Rank candidates by similarity to one target listing.

        The target itself (by id) is skipped. Cost is linear in the number of
        candidates; ties are broken by property id.
        """
        anchor = coerce_property(target)
        anchor_features = extract_features(anchor, self.feature_config)
        ranked = [
            (candidate.id, self._similarity(anchor, anchor_features, candidate))
            for candidate in coerce_properties(candidates)
            if candidate.id != anchor.id
        ]
        ranked.sort(key=lambda item: (-item[1], item[0]))
        return ranked[:limit] if limit is not None else ranked

    def _similarity(self, a: PropertyRecord, a_features: List[str], b: PropertyRecord) -> float:
        config = self.config
        total = (
            self.price_similarity(a, b) * config.price_weight
            + self.location_similarity(a, b) * config.location_weight
            + self.type_similarity(a, b) * config.type_weight
            + self.size_similarity(a, b) * config.size_weight
            + self._feature_overlap(a_features, extract_features(b, self.feature_config))
            * config.feature_weight
        )
        return max(0.0, min(1.0, total))

    @staticmethod
    def price_similarity(a: PropertyRecord, b: PropertyRecord) -> float:
        if not (a.has_price and b.has_price):
            return 0.0
        average = (a.price + b.price) / 2
        return max(0.0, 1.0 - abs(a.price - b.price) / average)

    def location_similarity(self, a: PropertyRecord, b: PropertyRecord) -> float:
        label_a = a.location_label.lower()
        if label_a and label_a == b.location_label.lower():
            return 1.0
        return self.config.location_mismatch_score

    @staticmethod
    def type_similarity(a: PropertyRecord, b: PropertyRecord) -> float:
        return 1.0 if a.property_type and a.property_type == b.property_type else 0.0

    @staticmethod
    def size_similarity(a: PropertyRecord, b: PropertyRecord) -> float:
        size_a = a.get_total_area()
        size_b = b.get_total_area()
        if size_a <= 0 or size_b <= 0:
            return 0.0
        return max(0.0, 1.0 - abs(size_a - size_b) / max(size_a, size_b))

    @staticmethod
    def _feature_overlap(features_a: List[str], features_b: List[str]) -> float:
        common = len(set(features_a) & set(features_b))
        return common / max(len(features_a), len(features_b), 1)
