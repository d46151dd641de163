# Domain entities
from .property import PropertyRecord, coerce_property, coerce_properties
from .search import (
    SearchFilters,
    SearchEvent,
    ViewEvent,
    SaveEvent,
    BehavioralEvent,
    SearchHistoryItem,
    SavedSearch,
    coerce_event,
)
from .user import MAX_BUDGET, Budget, Priorities, UserPreferences, UserProfile
from .recommendation import (
    ScoreBreakdown,
    PropertyScore,
    MarketInsights,
    RecommendationResult,
    ActivityPatterns,
    PersonalInsights,
    PersonalizationResult,
)

__all__ = [
    'PropertyRecord',
    'coerce_property',
    'coerce_properties',
    'SearchFilters',
    'SearchEvent',
    'ViewEvent',
    'SaveEvent',
    'BehavioralEvent',
    'SearchHistoryItem',
    'SavedSearch',
    'coerce_event',
    'MAX_BUDGET',
    'Budget',
    'Priorities',
    'UserPreferences',
    'UserProfile',
    'ScoreBreakdown',
    'PropertyScore',
    'MarketInsights',
    'RecommendationResult',
    'ActivityPatterns',
    'PersonalInsights',
    'PersonalizationResult',
]
