"""Recommendation and personalization core for real-estate listings."""

from .application.use_cases.personalization_use_case import PersonalizationUseCase
from .domain.entities import (
    PropertyRecord,
    UserPreferences,
    UserProfile,
    PropertyScore,
    RecommendationResult,
    MarketInsights,
)
from .infrastructure.data.config import MatchingConfig

__version__ = "1.0.0"

__all__ = [
    'PersonalizationUseCase',
    'MatchingConfig',
    'PropertyRecord',
    'UserPreferences',
    'UserProfile',
    'PropertyScore',
    'RecommendationResult',
    'MarketInsights',
]
