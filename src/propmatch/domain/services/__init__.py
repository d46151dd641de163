# Domain services
from .feature_extraction import FeatureConfig, extract_features
from .preference_profiler import PreferenceProfiler, ProfilerConfig
from .scoring_service import ScoringConfig, ScoringEngine, ScoringWeights, ReasonThresholds
from .similarity_service import SimilarityConfig, SimilarityEngine
from .insights_service import InsightsAggregator, InsightsConfig
from .recommendation_service import RecommendationConfig, RecommendationOrchestrator
from .profile_service import ProfileConfig, ProfileService, find_matching_properties

__all__ = [
    'FeatureConfig',
    'extract_features',
    'PreferenceProfiler',
    'ProfilerConfig',
    'ScoringConfig',
    'ScoringEngine',
    'ScoringWeights',
    'ReasonThresholds',
    'SimilarityConfig',
    'SimilarityEngine',
    'InsightsAggregator',
    'InsightsConfig',
    'RecommendationConfig',
    'RecommendationOrchestrator',
    'ProfileConfig',
    'ProfileService',
    'find_matching_properties',
]
