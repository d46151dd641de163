from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List

from .search import SavedSearch
from .user import Budget


@dataclass
class ScoreBreakdown:
    price_match: float = 0.0
    location_match: float = 0.0
    type_match: float = 0.0
    feature_match: float = 0.0
    popularity_bonus: float = 0.0

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass
class PropertyScore:
    property_id: str
    total_score: float
    breakdown: ScoreBreakdown
    confidence: float
    reasons: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "property_id": self.property_id,
            "total_score": self.total_score,
            "breakdown": self.breakdown.to_dict(),
            "confidence": self.confidence,
            "reasons": list(self.reasons),
        }


@dataclass
class MarketInsights:
    average_price: float = 0.0
    popular_locations: List[str] = field(default_factory=list)
    trending_features: List[str] = field(default_factory=list)


@dataclass
class RecommendationResult:
    for_you: List[str] = field(default_factory=list)
    trending: List[str] = field(default_factory=list)
    similar_to_viewed: List[str] = field(default_factory=list)
    based_on_searches: List[str] = field(default_factory=list)
    insights: MarketInsights = field(default_factory=MarketInsights)
    top_matches: List[PropertyScore] = field(default_factory=list)

    def all_ids(self) -> List[str]:
        return self.for_you + self.trending + self.similar_to_viewed + self.based_on_searches


@dataclass
class ActivityPatterns:
    peak_hours: List[int] = field(default_factory=list)
    preferred_days: List[int] = field(default_factory=list)


@dataclass
class PersonalInsights:
    preferred_price_range: Budget = field(default_factory=Budget)
    favorite_locations: List[str] = field(default_factory=list)
    common_search_terms: List[str] = field(default_factory=list)
    activity_patterns: ActivityPatterns = field(default_factory=ActivityPatterns)


@dataclass
class PersonalizationResult:
    recommendations: RecommendationResult
    saved_searches: List[SavedSearch]
    favorite_properties: List[str]
    insights: PersonalInsights
