import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Union
from uuid import uuid4

from .property import to_optional_datetime, to_optional_float, to_optional_int, to_bool, to_optional_str

logger = logging.getLogger(__name__)

_MIN_PRICE_KEYS = ("min_price", "minPrice", "price_min", "priceMin")
_MAX_PRICE_KEYS = ("max_price", "maxPrice", "price_max", "priceMax")
_TYPE_KEYS = ("property_type", "propertyType", "type", "property_types", "propertyTypes")
_LOCATION_KEYS = ("location", "regency", "province", "locations")
_MIN_LAND_KEYS = ("min_land_area", "minLandArea")
_MIN_BUILDING_KEYS = ("min_building_area", "minBuildingArea")
_MIN_BEDROOM_KEYS = ("min_bedrooms", "minBedrooms")
_MIN_BATHROOM_KEYS = ("min_bathrooms", "minBathrooms")
_FLAG_KEYS = {
    "is_premium": ("is_premium", "isPremium"),
    "is_hot": ("is_hot", "isHot"),
    "is_featured": ("is_featured", "isFeatured"),
}
_KNOWN_KEYS = set(
    _MIN_PRICE_KEYS + _MAX_PRICE_KEYS + _TYPE_KEYS + _LOCATION_KEYS
    + _MIN_LAND_KEYS + _MIN_BUILDING_KEYS + _MIN_BEDROOM_KEYS + _MIN_BATHROOM_KEYS
    + ("budget",)
)
for _aliases in _FLAG_KEYS.values():
    _KNOWN_KEYS.update(_aliases)


def _first(data: Mapping[str, Any], keys) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None


def _string_values(data: Mapping[str, Any], keys) -> List[str]:
    values: List[str] = []
    for key in keys:
        raw = data.get(key)
        items = raw if isinstance(raw, (list, tuple, set)) else [raw]
        for item in items:
            text = to_optional_str(item)
            if text and text not in values:
                values.append(text)
    return values


@dataclass
class SearchFilters:
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    property_types: List[str] = None
    locations: List[str] = None
    regency: Optional[str] = None
    province: Optional[str] = None
    min_land_area: Optional[float] = None
    min_building_area: Optional[float] = None
    min_bedrooms: Optional[int] = None
    min_bathrooms: Optional[int] = None
    is_premium: Optional[bool] = None
    is_hot: Optional[bool] = None
    is_featured: Optional[bool] = None
    extras: Dict[str, Any] = None

    def __post_init__(self):
        if self.property_types is None:
            self.property_types = []
        if self.locations is None:
            self.locations = []
        if self.extras is None:
            self.extras = {}

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "SearchFilters":
        if isinstance(data, SearchFilters):
            return data
        if not data:
            return cls()
        if not isinstance(data, Mapping):
            logger.warning(f"Ignoring search filters of type {type(data).__name__}; expected a mapping")
            return cls()

        min_price = to_optional_float(_first(data, _MIN_PRICE_KEYS))
        max_price = to_optional_float(_first(data, _MAX_PRICE_KEYS))
        budget = data.get("budget")
        if isinstance(budget, Mapping):
            if min_price is None:
                min_price = to_optional_float(budget.get("min"))
            if max_price is None:
                max_price = to_optional_float(budget.get("max"))

        flags = {}
        for name, aliases in _FLAG_KEYS.items():
            raw = _first(data, aliases)
            flags[name] = None if raw is None else to_bool(raw)

        return cls(
            min_price=min_price,
            max_price=max_price,
            property_types=[t.lower() for t in _string_values(data, _TYPE_KEYS)],
            locations=_string_values(data, _LOCATION_KEYS),
            regency=to_optional_str(data.get("regency")),
            province=to_optional_str(data.get("province")),
            min_land_area=to_optional_float(_first(data, _MIN_LAND_KEYS)),
            min_building_area=to_optional_float(_first(data, _MIN_BUILDING_KEYS)),
            min_bedrooms=to_optional_int(_first(data, _MIN_BEDROOM_KEYS)),
            min_bathrooms=to_optional_int(_first(data, _MIN_BATHROOM_KEYS)),
            extras={k: v for k, v in data.items() if k not in _KNOWN_KEYS},
            **flags,
        )

    def has_price_filter(self) -> bool:
        return self.min_price is not None or self.max_price is not None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "min_price": self.min_price,
            "max_price": self.max_price,
            "property_types": list(self.property_types),
            "locations": list(self.locations),
            "regency": self.regency,
            "province": self.province,
            "min_land_area": self.min_land_area,
            "min_building_area": self.min_building_area,
            "min_bedrooms": self.min_bedrooms,
            "min_bathrooms": self.min_bathrooms,
            "is_premium": self.is_premium,
            "is_hot": self.is_hot,
            "is_featured": self.is_featured,
        }
        data = {key: value for key, value in data.items() if value not in (None, [])}
        data.update(self.extras)
        return data


@dataclass
class SearchEvent:
    query: str
    filters: SearchFilters
    timestamp: datetime
    results_count: int = 0
    kind: str = "search"

    @classmethod
    def create(cls, query: str, filters: Optional[Mapping[str, Any]] = None,
               results_count: int = 0, timestamp: Optional[datetime] = None):
        return cls(
            query=query or "",
            filters=SearchFilters.from_dict(filters),
            timestamp=timestamp or datetime.now(),
            results_count=to_optional_int(results_count) or 0,
        )


@dataclass
class ViewEvent:
    property_id: str
    timestamp: datetime = field(default_factory=datetime.now)
    kind: str = "view"


@dataclass
class SaveEvent:
    property_id: str
    timestamp: datetime = field(default_factory=datetime.now)
    kind: str = "save"


BehavioralEvent = Union[SearchEvent, ViewEvent, SaveEvent]


def coerce_event(value: Union[BehavioralEvent, Mapping[str, Any]]) -> BehavioralEvent:
    """Build a behavioral event from a raw mapping tagged with ``kind``."""
    if isinstance(value, (SearchEvent, ViewEvent, SaveEvent)):
        return value
    if not isinstance(value, Mapping):
        raise TypeError(f"Cannot build a behavioral event from {type(value).__name__}")

    kind = str(value.get("kind", "search")).lower()
    timestamp = to_optional_datetime(value.get("timestamp")) or datetime.now()
    if kind == "search":
        return SearchEvent.create(
            query=str(value.get("query") or ""),
            filters=value.get("filters"),
            results_count=value.get("results_count", value.get("resultsCount", 0)),
            timestamp=timestamp,
        )
    property_id = value.get("property_id", value.get("propertyId"))
    if property_id is None:
        raise ValueError(f"{kind} event requires a property_id")
    if kind == "view":
        return ViewEvent(property_id=str(property_id), timestamp=timestamp)
    if kind == "save":
        return SaveEvent(property_id=str(property_id), timestamp=timestamp)
    raise ValueError(f"Unknown behavioral event kind: {kind}")


@dataclass
class SearchHistoryItem:
    id: str
    query: str
    filters: SearchFilters
    timestamp: datetime
    results_count: int = 0

    @classmethod
    def from_event(cls, event: SearchEvent) -> "SearchHistoryItem":
        return cls(
            id=f"search_{uuid4().hex[:12]}",
            query=event.query,
            filters=event.filters,
            timestamp=event.timestamp,
            results_count=event.results_count,
        )

    def to_event(self) -> SearchEvent:
        return SearchEvent(
            query=self.query,
            filters=self.filters,
            timestamp=self.timestamp,
            results_count=self.results_count,
        )


@dataclass
class SavedSearch:
    id: str
    name: str
    query: str
    filters: SearchFilters
    created_at: datetime
    notification_enabled: bool = True
    last_notified: Optional[datetime] = None
    match_count: Optional[int] = None

    @classmethod
    def create(cls, name: str, query: str, filters: Optional[Mapping[str, Any]] = None):
        return cls(
            id=f"saved_{uuid4().hex[:12]}",
            name=name,
            query=query or "",
            filters=SearchFilters.from_dict(filters),
            created_at=datetime.now(),
        )
