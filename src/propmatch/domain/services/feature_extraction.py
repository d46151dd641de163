"""
Qualitative feature tags derived from listing attributes.

Shared by the preference profiler, the scoring engine and the similarity
engine so all three speak the same tag vocabulary.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from ..entities.property import PropertyRecord

TYPE_FEATURE_TAGS: Dict[str, Tuple[str, ...]] = {
    "house": ("house", "residential"),
    "apartment": ("apartment", "modern"),
    "boarding_house": ("boarding house", "affordable"),
}


@dataclass
class FeatureConfig:
    """Thresholds for size and room tags"""
    large_land_area: float = 200.0
    large_building_area: float = 150.0
    many_bedrooms: int = 3
    many_bathrooms: int = 2
    type_tags: Dict[str, Tuple[str, ...]] = field(default_factory=lambda: dict(TYPE_FEATURE_TAGS))


DEFAULT_FEATURE_CONFIG = FeatureConfig()


def extract_features(property_record: PropertyRecord,
                     config: FeatureConfig = DEFAULT_FEATURE_CONFIG) -> List[str]:
    tags: List[str] = []

    if property_record.land_area is not None and property_record.land_area > config.large_land_area:
        tags.append("large land")
    if (property_record.building_area is not None
            and property_record.building_area > config.large_building_area):
        tags.append("large building")

    if property_record.bedrooms is not None and property_record.bedrooms >= config.many_bedrooms:
        tags.append("many bedrooms")
    if property_record.bathrooms is not None and property_record.bathrooms >= config.many_bathrooms:
        tags.append("many bathrooms")

    if property_record.property_type:
        tags.extend(config.type_tags.get(property_record.property_type, ()))

    if property_record.is_premium:
        tags.extend(("premium", "exclusive"))
    if property_record.is_hot:
        tags.extend(("hot", "trending"))

    # Type tags may repeat a flag tag; keep first occurrence
    return list(dict.fromkeys(tags))
