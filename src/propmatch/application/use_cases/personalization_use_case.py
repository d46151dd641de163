"""
Use cases for listing personalization.

This module is the library boundary of the recommendation core: preference
profiling, candidate scoring, categorized recommendations, market insights,
and profile tracking with snapshot export/import. Construct one instance per
process and pass it to whatever needs it.
"""

import logging
from datetime import datetime
from typing import Any, Iterable, List, Mapping, Optional

from pydantic import ValidationError

from ...domain.entities.property import PropertyInput, coerce_properties
from ...domain.entities.recommendation import (
    MarketInsights, PersonalizationResult, PropertyScore, RecommendationResult
)
from ...domain.entities.search import SavedSearch
from ...domain.entities.user import UserPreferences, UserProfile
from ...domain.repositories.profile_repository import ProfileRepository
from ...domain.services.insights_service import InsightsAggregator
from ...domain.services.preference_profiler import PreferenceProfiler, SearchInput
from ...domain.services.profile_service import ProfileService
from ...domain.services.recommendation_service import RecommendationOrchestrator
from ...domain.services.scoring_service import ScoringEngine
from ...domain.services.similarity_service import SimilarityEngine
from ...infrastructure.data.config import MatchingConfig
from ...infrastructure.data.repositories.memory_profile_repository import InMemoryProfileRepository
from ...infrastructure.data.repository_factory import RepositoryFactory
from ..dto.profile_dto import ProfileSnapshot

logger = logging.getLogger(__name__)


class PersonalizationUseCase:
    """Use case for personalized listing recommendations"""

    def __init__(self, repository: Optional[ProfileRepository] = None,
                 config: Optional[MatchingConfig] = None):
        self.config = (config or MatchingConfig()).validate()

        self.profiler = PreferenceProfiler(self.config.profiler, self.config.features)
        self.scoring_engine = ScoringEngine(self.config.scoring, self.config.features)
        self.similarity_engine = SimilarityEngine(self.config.similarity, self.config.features)
        self.insights_aggregator = InsightsAggregator(self.config.insights)
        self.orchestrator = RecommendationOrchestrator(
            scoring_engine=self.scoring_engine,
            similarity_engine=self.similarity_engine,
            insights_aggregator=self.insights_aggregator,
            config=self.config.recommendations,
        )
        self.profiles = ProfileService(
            repository or InMemoryProfileRepository(),
            self.config.profiles,
        )

    @classmethod
    def from_config(cls, config: Optional[MatchingConfig] = None, redis_client=None):
        """Build a use case with the storage backend named in the configuration"""
        config = config or MatchingConfig.from_env()
        repository = RepositoryFactory(config.storage).create_profile_repository(redis_client)
        return cls(repository=repository, config=config)

    # Stateless operations

    def analyze_behavior(self,
                         search_history: Optional[Iterable[SearchInput]] = None,
                         viewed_properties: Optional[Iterable[PropertyInput]] = None,
                         saved_properties: Optional[Iterable[PropertyInput]] = None) -> UserPreferences:
        return self.profiler.profile(search_history, viewed_properties, saved_properties)

    def score_candidates(self, properties: Iterable[PropertyInput],
                         preferences: UserPreferences) -> List[PropertyScore]:
        return self.scoring_engine.score_all(properties, preferences)

    def build_recommendations(self, properties: Iterable[PropertyInput],
                              preferences: UserPreferences,
                              history_ids: Optional[Iterable[str]] = None) -> RecommendationResult:
        return self.orchestrator.recommend(properties, preferences, history_ids)

    def compute_insights(self, properties: Iterable[PropertyInput],
                         preferences: Optional[UserPreferences] = None) -> MarketInsights:
        return self.insights_aggregator.insights(properties, preferences)

    def similarity(self, first: PropertyInput, second: PropertyInput) -> float:
        return self.similarity_engine.similarity(first, second)

    # Profile tracking

    def get_or_create_profile(self, user_id: str) -> UserProfile:
        return self.profiles.get_or_create(user_id)

    def record_search(self, user_id: str, query: str,
                      filters: Optional[Mapping[str, Any]] = None, results_count: int = 0) -> None:
        self.profiles.record_search(user_id, query, filters, results_count)

    def record_view(self, user_id: str, property_id: str) -> None:
        self.profiles.record_view(user_id, property_id)

    def remove_view(self, user_id: str, property_id: str) -> bool:
        return self.profiles.remove_view(user_id, property_id)

    def clear_search_history(self, user_id: str) -> int:
        return self.profiles.clear_search_history(user_id)

    def toggle_favorite(self, user_id: str, property_id: str) -> bool:
        return self.profiles.toggle_favorite(user_id, property_id)

    def save_search(self, user_id: str, name: str, query: str,
                    filters: Optional[Mapping[str, Any]] = None) -> SavedSearch:
        return self.profiles.save_search(user_id, name, query, filters)

    def delete_saved_search(self, user_id: str, search_id: str) -> bool:
        return self.profiles.delete_saved_search(user_id, search_id)

    def set_saved_search_notifications(self, user_id: str, search_id: str, enabled: bool) -> bool:
        return self.profiles.set_saved_search_notifications(user_id, search_id, enabled)

    def check_saved_search_matches(self, user_id: str,
                                   properties: Iterable[PropertyInput]) -> List[SavedSearch]:
        return self.profiles.check_saved_search_matches(user_id, properties)

    def get_search_suggestions(self, user_id: str) -> List[str]:
        return self.profiles.get_search_suggestions(user_id)

    def export_profile(self, user_id: str) -> str:
        profile = self.profiles.get_or_create(user_id)
        snapshot = ProfileSnapshot.from_profile(profile, exported_at=datetime.now())
        logger.info(f"Exported profile for user {user_id}")
        return snapshot.to_json()

    def import_profile(self, user_id: str, data: str) -> bool:
        """
        Restore a profile from an exported snapshot.

        Returns False, leaving the stored profile untouched, when the data is
        not a valid snapshot or belongs to a different user.
        """
        try:
            snapshot = ProfileSnapshot.from_json(data)
        except (ValidationError, ValueError, TypeError) as e:
            logger.error(f"Failed to import profile for user {user_id}: {e}")
            return False

        if snapshot.id != user_id:
            logger.warning(
                f"Rejected profile import for user {user_id}: snapshot belongs to {snapshot.id}"
            )
            return False

        if not self.profiles.replace_profile(snapshot.to_profile()):
            logger.error(f"Failed to store imported profile for user {user_id}")
            return False

        logger.info(f"Imported profile for user {user_id}")
        return True

    # Composite

    def generate_personalization(self, user_id: str,
                                 properties: Iterable[PropertyInput]) -> PersonalizationResult:
        """Profile the user against ``properties``, store the preferences, and recommend"""
        candidates = coerce_properties(properties)
        profile = self.profiles.get_or_create(user_id)

        preferences = self.profiler.profile_user(profile, candidates)
        self.profiles.update_preferences(user_id, preferences)

        recommendations = self.orchestrator.recommend(
            candidates, preferences, profile.get_history_ids()
        )
        return PersonalizationResult(
            recommendations=recommendations,
            saved_searches=list(profile.saved_searches),
            favorite_properties=list(profile.favorite_properties),
            insights=self.insights_aggregator.personal_insights(profile),
        )
