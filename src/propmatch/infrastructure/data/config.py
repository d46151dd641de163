import logging
import os
from dataclasses import dataclass, field
from typing import Callable, List, Optional, TypeVar

from dotenv import load_dotenv

from ...domain.exceptions import ConfigurationError
from ...domain.services.feature_extraction import FeatureConfig
from ...domain.services.insights_service import DEFAULT_TRENDING_FEATURES, InsightsConfig
from ...domain.services.preference_profiler import ProfilerConfig
from ...domain.services.profile_service import ProfileConfig
from ...domain.services.recommendation_service import RecommendationConfig
from ...domain.services.scoring_service import ScoringConfig, ScoringWeights
from ...domain.services.similarity_service import SimilarityConfig

logger = logging.getLogger(__name__)

ENV_PREFIX = "PROPMATCH_"
STORAGE_BACKENDS = ("memory", "redis")

T = TypeVar("T")


@dataclass
class StorageConfig:
    """Profile storage backend settings"""
    backend: str = "memory"
    redis_url: str = "redis://localhost:6379/0"
    key_prefix: str = "profile:"
    ttl_seconds: Optional[int] = None


@dataclass
class MatchingConfig:
    """Complete configuration of the recommendation and personalization core"""
    scoring: ScoringConfig = field(default_factory=ScoringConfig)
    similarity: SimilarityConfig = field(default_factory=SimilarityConfig)
    features: FeatureConfig = field(default_factory=FeatureConfig)
    profiler: ProfilerConfig = field(default_factory=ProfilerConfig)
    recommendations: RecommendationConfig = field(default_factory=RecommendationConfig)
    insights: InsightsConfig = field(default_factory=InsightsConfig)
    profiles: ProfileConfig = field(default_factory=ProfileConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)

    def validate(self) -> "MatchingConfig":
        """Raise ConfigurationError for settings no engine can work with"""
        weights = self.scoring.weights
        values = (weights.price, weights.location, weights.type, weights.feature, weights.popularity)
        if any(value < 0 for value in values) or sum(values) <= 0:
            raise ConfigurationError(f"Scoring weights must be non-negative with a positive sum: {weights}")

        similarity = self.similarity
        values = (similarity.price_weight, similarity.location_weight, similarity.type_weight,
                  similarity.size_weight, similarity.feature_weight)
        if any(value < 0 for value in values) or sum(values) <= 0:
            raise ConfigurationError(
                f"Similarity weights must be non-negative with a positive sum: {similarity}"
            )
        if not 0.0 <= similarity.location_mismatch_score <= 1.0:
            raise ConfigurationError("Similarity location mismatch score must be within [0, 1]")

        limits = self.recommendations
        for name in ("for_you_limit", "trending_limit", "similar_limit",
                     "based_on_searches_limit", "top_matches_limit"):
            if getattr(limits, name) < 0:
                raise ConfigurationError(f"{name} must not be negative")

        if self.profiles.max_search_history < 1 or self.profiles.max_viewed_properties < 1:
            raise ConfigurationError("Profile history limits must be at least 1")

        if self.storage.backend not in STORAGE_BACKENDS:
            raise ConfigurationError(f"Unknown profile storage backend: {self.storage.backend}")
        return self

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "MatchingConfig":
        """Load configuration from ``PROPMATCH_*`` environment variables (and an optional .env file)"""
        load_dotenv(env_file)
        return cls(
            scoring=_load_scoring_config(),
            similarity=_load_similarity_config(),
            features=FeatureConfig(
                large_land_area=_env("LARGE_LAND_AREA", float, 200.0),
                large_building_area=_env("LARGE_BUILDING_AREA", float, 150.0),
                many_bedrooms=_env("MANY_BEDROOMS", int, 3),
                many_bathrooms=_env("MANY_BATHROOMS", int, 2),
            ),
            profiler=ProfilerConfig(
                top_features=_env("TOP_FEATURES", int, 5),
            ),
            recommendations=RecommendationConfig(
                for_you_limit=_env("FOR_YOU_LIMIT", int, 6),
                trending_limit=_env("TRENDING_LIMIT", int, 5),
                similar_limit=_env("SIMILAR_LIMIT", int, 5),
                based_on_searches_limit=_env("BASED_ON_SEARCHES_LIMIT", int, 5),
                top_matches_limit=_env("TOP_MATCHES_LIMIT", int, 10),
            ),
            insights=InsightsConfig(
                popular_locations=_env("POPULAR_LOCATIONS", int, 3),
                trending_features=_env("TRENDING_FEATURES", _parse_list, list(DEFAULT_TRENDING_FEATURES)),
            ),
            profiles=ProfileConfig(
                max_search_history=_env("MAX_SEARCH_HISTORY", int, 50),
                max_viewed_properties=_env("MAX_VIEWED_PROPERTIES", int, 100),
            ),
            storage=StorageConfig(
                backend=_env("STORAGE_BACKEND", str, "memory").lower(),
                redis_url=_env("REDIS_URL", str, "redis://localhost:6379/0"),
                key_prefix=_env("REDIS_KEY_PREFIX", str, "profile:"),
                ttl_seconds=_env("PROFILE_TTL_SECONDS", int, None),
            ),
        ).validate()


def _load_scoring_config() -> ScoringConfig:
    return ScoringConfig(
        weights=ScoringWeights(
            price=_env("WEIGHT_PRICE", float, 0.30),
            location=_env("WEIGHT_LOCATION", float, 0.25),
            type=_env("WEIGHT_TYPE", float, 0.20),
            feature=_env("WEIGHT_FEATURE", float, 0.15),
            popularity=_env("WEIGHT_POPULARITY", float, 0.10),
        ),
        price_decay_slope=_env("PRICE_DECAY_SLOPE", float, 50.0),
        location_baseline=_env("LOCATION_BASELINE", float, 30.0),
        type_baseline=_env("TYPE_BASELINE", float, 20.0),
        confidence_base=_env("CONFIDENCE_BASE", float, 0.5),
        confidence_increment=_env("CONFIDENCE_INCREMENT", float, 0.1),
    )


def _load_similarity_config() -> SimilarityConfig:
    return SimilarityConfig(
        price_weight=_env("SIMILARITY_PRICE_WEIGHT", float, 0.30),
        location_weight=_env("SIMILARITY_LOCATION_WEIGHT", float, 0.25),
        type_weight=_env("SIMILARITY_TYPE_WEIGHT", float, 0.20),
        size_weight=_env("SIMILARITY_SIZE_WEIGHT", float, 0.15),
        feature_weight=_env("SIMILARITY_FEATURE_WEIGHT", float, 0.10),
        location_mismatch_score=_env("SIMILARITY_LOCATION_MISMATCH", float, 0.2),
    )


def _parse_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _env(name: str, parser: Callable[[str], T], default: T) -> T:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return parser(raw.strip())
    except ValueError:
        logger.warning(f"Invalid value {raw!r} for {ENV_PREFIX}{name}; using default {default!r}")
        return default
