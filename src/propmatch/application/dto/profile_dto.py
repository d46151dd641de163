from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...domain.entities.search import SavedSearch, SearchFilters, SearchHistoryItem
from ...domain.entities.user import MAX_BUDGET, Budget, Priorities, UserPreferences, UserProfile

SNAPSHOT_VERSION = 1


class SearchFiltersModel(BaseModel):
    """Normalized search filters"""
    min_price: Optional[float] = Field(None, ge=0)
    max_price: Optional[float] = Field(None, ge=0)
    property_types: List[str] = Field(default_factory=list)
    locations: List[str] = Field(default_factory=list)
    regency: Optional[str] = None
    province: Optional[str] = None
    min_land_area: Optional[float] = Field(None, ge=0)
    min_building_area: Optional[float] = Field(None, ge=0)
    min_bedrooms: Optional[int] = Field(None, ge=0)
    min_bathrooms: Optional[int] = Field(None, ge=0)
    is_premium: Optional[bool] = None
    is_hot: Optional[bool] = None
    is_featured: Optional[bool] = None
    extras: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_entity(cls, filters: SearchFilters) -> "SearchFiltersModel":
        return cls(
            min_price=filters.min_price,
            max_price=filters.max_price,
            property_types=list(filters.property_types),
            locations=list(filters.locations),
            regency=filters.regency,
            province=filters.province,
            min_land_area=filters.min_land_area,
            min_building_area=filters.min_building_area,
            min_bedrooms=filters.min_bedrooms,
            min_bathrooms=filters.min_bathrooms,
            is_premium=filters.is_premium,
            is_hot=filters.is_hot,
            is_featured=filters.is_featured,
            extras=dict(filters.extras),
        )

    def to_entity(self) -> SearchFilters:
        return SearchFilters(**self.model_dump())


class SearchHistoryItemModel(BaseModel):
    id: str
    query: str = ""
    filters: SearchFiltersModel = Field(default_factory=SearchFiltersModel)
    timestamp: datetime
    results_count: int = Field(0, ge=0)


class SavedSearchModel(BaseModel):
    id: str
    name: str
    query: str = ""
    filters: SearchFiltersModel = Field(default_factory=SearchFiltersModel)
    created_at: datetime
    notification_enabled: bool = True
    last_notified: Optional[datetime] = None
    match_count: Optional[int] = Field(None, ge=0)


class BudgetModel(BaseModel):
    min: float = Field(0.0, ge=0)
    max: float = Field(MAX_BUDGET, ge=0)


class PrioritiesModel(BaseModel):
    price: int = Field(5, ge=1, le=10)
    location: int = Field(5, ge=1, le=10)
    size: int = Field(5, ge=1, le=10)
    features: int = Field(5, ge=1, le=10)


class UserPreferencesModel(BaseModel):
    budget: BudgetModel = Field(default_factory=BudgetModel)
    property_types: List[str] = Field(default_factory=list)
    locations: List[str] = Field(default_factory=list)
    features: List[str] = Field(default_factory=list)
    priorities: PrioritiesModel = Field(default_factory=PrioritiesModel)


class ProfileSnapshot(BaseModel):
    """Flat, self-describing form of a user profile used for export, import and storage"""
    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1)
    version: int = SNAPSHOT_VERSION
    preferences: UserPreferencesModel = Field(default_factory=UserPreferencesModel)
    search_history: List[SearchHistoryItemModel] = Field(default_factory=list)
    viewed_properties: List[str] = Field(default_factory=list)
    favorite_properties: List[str] = Field(default_factory=list)
    saved_searches: List[SavedSearchModel] = Field(default_factory=list)
    last_activity: datetime
    created_at: Optional[datetime] = None
    exported_at: Optional[datetime] = None

    @field_validator("viewed_properties", "favorite_properties")
    @classmethod
    def dedupe_ids(cls, v: List[str]) -> List[str]:
        return list(dict.fromkeys(v))

    @classmethod
    def from_profile(cls, profile: UserProfile, exported_at: Optional[datetime] = None):
        preferences = profile.preferences
        return cls(
            id=profile.id,
            preferences=UserPreferencesModel(
                budget=BudgetModel(min=preferences.budget.min, max=preferences.budget.max),
                property_types=list(preferences.property_types),
                locations=list(preferences.locations),
                features=list(preferences.features),
                priorities=PrioritiesModel(
                    price=preferences.priorities.price,
                    location=preferences.priorities.location,
                    size=preferences.priorities.size,
                    features=preferences.priorities.features,
                ),
            ),
            search_history=[
                SearchHistoryItemModel(
                    id=item.id,
                    query=item.query,
                    filters=SearchFiltersModel.from_entity(item.filters),
                    timestamp=item.timestamp,
                    results_count=item.results_count,
                )
                for item in profile.search_history
            ],
            viewed_properties=list(profile.viewed_properties),
            favorite_properties=list(profile.favorite_properties),
            saved_searches=[
                SavedSearchModel(
                    id=saved.id,
                    name=saved.name,
                    query=saved.query,
                    filters=SearchFiltersModel.from_entity(saved.filters),
                    created_at=saved.created_at,
                    notification_enabled=saved.notification_enabled,
                    last_notified=saved.last_notified,
                    match_count=saved.match_count,
                )
                for saved in profile.saved_searches
            ],
            last_activity=profile.last_activity,
            created_at=profile.created_at,
            exported_at=exported_at,
        )

    def to_profile(self) -> UserProfile:
        preferences = self.preferences
        return UserProfile(
            id=self.id,
            preferences=UserPreferences(
                budget=Budget(min=preferences.budget.min, max=preferences.budget.max),
                property_types=list(preferences.property_types),
                locations=list(preferences.locations),
                features=list(preferences.features),
                priorities=Priorities(**preferences.priorities.model_dump()),
            ),
            search_history=[
                SearchHistoryItem(
                    id=item.id,
                    query=item.query,
                    filters=item.filters.to_entity(),
                    timestamp=item.timestamp,
                    results_count=item.results_count,
                )
                for item in self.search_history
            ],
            viewed_properties=list(self.viewed_properties),
            favorite_properties=list(self.favorite_properties),
            saved_searches=[
                SavedSearch(
                    id=saved.id,
                    name=saved.name,
                    query=saved.query,
                    filters=saved.filters.to_entity(),
                    created_at=saved.created_at,
                    notification_enabled=saved.notification_enabled,
                    last_notified=saved.last_notified,
                    match_count=saved.match_count,
                )
                for saved in self.saved_searches
            ],
            last_activity=self.last_activity,
            created_at=self.created_at or self.last_activity,
        )

    def to_json(self) -> str:
        return self.model_dump_json(indent=2)

    @classmethod
    def from_json(cls, data: str) -> "ProfileSnapshot":
        return cls.model_validate_json(data)
