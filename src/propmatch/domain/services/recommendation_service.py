import logging
import time
from dataclasses import dataclass
from typing import Iterable, List, Optional, Set

from ..entities.property import PropertyInput, PropertyRecord, coerce_properties
from ..entities.recommendation import PropertyScore, RecommendationResult
from ..entities.user import UserPreferences
from .insights_service import InsightsAggregator
from .scoring_service import ScoringEngine
from .similarity_service import SimilarityEngine


@dataclass
class RecommendationConfig:
    """Configuration for recommendation categories"""
    for_you_limit: int = 6
    trending_limit: int = 5
    similar_limit: int = 5
    based_on_searches_limit: int = 5
    top_matches_limit: int = 10
    hot_weight: int = 3
    featured_weight: int = 2
    premium_weight: int = 1


class RecommendationOrchestrator:
    """Builds categorized recommendation lists from one candidate set."""

    def __init__(self,
                 scoring_engine: Optional[ScoringEngine] = None,
                 similarity_engine: Optional[SimilarityEngine] = None,
                 insights_aggregator: Optional[InsightsAggregator] = None,
                 config: Optional[RecommendationConfig] = None):
        self.scoring_engine = scoring_engine or ScoringEngine()
        self.similarity_engine = similarity_engine or SimilarityEngine()
        self.insights_aggregator = insights_aggregator or InsightsAggregator()
        self.config = config or RecommendationConfig()
        self.logger = logging.getLogger(__name__)

    def recommend(self, properties: Iterable[PropertyInput], preferences: UserPreferences,
                  history_ids: Optional[Iterable[str]] = None) -> RecommendationResult:
        """
        Produce the four recommendation categories and market insights.

        Args:
            properties: Candidate listings; every returned id comes from this set
            preferences: Profiled user preferences
            history_ids: Listings the user already viewed or saved

        Returns:
            RecommendationResult with for_you, trending, similar_to_viewed,
            based_on_searches, top_matches and insights
        """
        start_time = time.perf_counter()
        candidates = coerce_properties(properties)
        history = {str(pid) for pid in (history_ids or [])}

        ranked = self.scoring_engine.score_all(candidates, preferences)

        result = RecommendationResult(
            for_you=[s.property_id for s in ranked[:self.config.for_you_limit]],
            trending=self.trending(candidates),
            similar_to_viewed=self.similar_to_top_match(candidates, ranked),
            based_on_searches=self.based_on_searches(ranked, history),
            insights=self.insights_aggregator.insights(candidates, preferences),
            top_matches=ranked[:self.config.top_matches_limit],
        )

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        self.logger.debug(
            f"Built recommendations from {len(candidates)} candidates "
            f"({len(history)} history ids) in {elapsed_ms:.1f}ms"
        )
        return result

    def trending(self, candidates: List[PropertyRecord]) -> List[str]:
        flagged = [c for c in candidates if c.is_hot or c.is_featured or c.is_premium]
        flagged.sort(key=lambda c: (-self.trending_score(c), c.id))
        return [c.id for c in flagged[:self.config.trending_limit]]

    def trending_score(self, candidate: PropertyRecord) -> int:
        return (
            self.config.hot_weight * int(candidate.is_hot)
            + self.config.featured_weight * int(candidate.is_featured)
            + self.config.premium_weight * int(candidate.is_premium)
        )

    def similar_to_top_match(self, candidates: List[PropertyRecord],
                             ranked: List[PropertyScore]) -> List[str]:
        if not ranked:
            return []
        anchor_id = ranked[0].property_id
        anchor = next((c for c in candidates if c.id == anchor_id), None)
        if anchor is None:
            return []
        similar = self.similarity_engine.rank_similar(
            anchor, candidates, limit=self.config.similar_limit
        )
        return [property_id for property_id, _ in similar]

    def based_on_searches(self, ranked: List[PropertyScore], history: Set[str]) -> List[str]:
        # Scores are pure, so filtering the full ranking equals re-scoring the remainder
        unseen = [s.property_id for s in ranked if s.property_id not in history]
        return unseen[:self.config.based_on_searches_limit]
