import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

logger = logging.getLogger(__name__)

_TRUE_STRINGS = {"true", "1", "yes", "y", "on"}

# camelCase aliases accepted at ingestion, mapped to field names
_FIELD_ALIASES = {
    "propertyType": "property_type",
    "type": "property_type",
    "landArea": "land_area",
    "buildingArea": "building_area",
    "isPremium": "is_premium",
    "isHot": "is_hot",
    "isFeatured": "is_featured",
    "isSold": "is_sold",
    "imageUrl": "image_url",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}


def to_optional_float(value: Any) -> Optional[float]:
    """Parse a non-negative finite number, returning None for anything else."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number) or number < 0:
        return None
    return number


def to_optional_int(value: Any) -> Optional[int]:
    number = to_optional_float(value)
    return int(number) if number is not None else None


def to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0 and not (isinstance(value, float) and math.isnan(value))
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return False


def to_optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def to_optional_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


@dataclass(frozen=True)
class PropertyRecord:
    id: str
    price: Optional[float] = None
    property_type: Optional[str] = None
    province: Optional[str] = None
    regency: Optional[str] = None
    district: Optional[str] = None
    village: Optional[str] = None
    land_area: Optional[float] = None
    building_area: Optional[float] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    is_premium: bool = False
    is_hot: bool = False
    is_featured: bool = False
    is_sold: bool = False
    image_url: Optional[str] = None
    title: Optional[str] = None
    address: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PropertyRecord":
        values: Dict[str, Any] = {}
        for key, value in data.items():
            values[_FIELD_ALIASES.get(key, key)] = value

        property_id = values.get("id")
        if property_id is None:
            logger.warning("Property record without id; using empty identifier")

        return cls(
            id="" if property_id is None else str(property_id),
            price=to_optional_float(values.get("price")),
            property_type=_normalize_type(values.get("property_type")),
            province=to_optional_str(values.get("province")),
            regency=to_optional_str(values.get("regency")),
            district=to_optional_str(values.get("district")),
            village=to_optional_str(values.get("village")),
            land_area=to_optional_float(values.get("land_area")),
            building_area=to_optional_float(values.get("building_area")),
            bedrooms=to_optional_int(values.get("bedrooms")),
            bathrooms=to_optional_int(values.get("bathrooms")),
            is_premium=to_bool(values.get("is_premium")),
            is_hot=to_bool(values.get("is_hot")),
            is_featured=to_bool(values.get("is_featured")),
            is_sold=to_bool(values.get("is_sold")),
            image_url=to_optional_str(values.get("image_url")),
            title=to_optional_str(values.get("title")),
            address=to_optional_str(values.get("address")),
            created_at=to_optional_datetime(values.get("created_at")),
            updated_at=to_optional_datetime(values.get("updated_at")),
        )

    @property
    def has_price(self) -> bool:
        return self.price is not None and self.price > 0

    @property
    def has_full_location(self) -> bool:
        return bool(self.regency and self.province)

    @property
    def has_image(self) -> bool:
        return bool(self.image_url)

    @property
    def location_label(self) -> str:
        """Display location, e.g. "South Jakarta, DKI Jakarta"."""
        return ", ".join(part for part in (self.regency, self.province) if part)

    def get_location_text(self) -> str:
        parts = (self.village, self.district, self.regency, self.province, self.address)
        return " ".join(part for part in parts if part).lower()

    def get_total_area(self) -> float:
        return (self.land_area or 0.0) + (self.building_area or 0.0)


PropertyInput = Union[PropertyRecord, Mapping[str, Any]]


def _normalize_type(value: Any) -> Optional[str]:
    text = to_optional_str(value)
    return text.lower() if text else None


def coerce_property(value: PropertyInput) -> PropertyRecord:
    if isinstance(value, PropertyRecord):
        return value
    if isinstance(value, Mapping):
        return PropertyRecord.from_dict(value)
    raise TypeError(f"Cannot build a PropertyRecord from {type(value).__name__}")


def coerce_properties(values: Optional[Iterable[PropertyInput]]) -> List[PropertyRecord]:
    if not values:
        return []
    return [coerce_property(value) for value in values]
