"""
Data factories for generating test data for the propmatch test suite.

This module provides factory classes for creating consistent listings and
search histories across test modules.
"""

import random
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, List

import numpy as np

from propmatch.domain.entities.property import PropertyRecord
from propmatch.domain.entities.search import SearchEvent


@dataclass
class FactoryConfig:
    """Configuration for data factories."""
    seed: int = 42
    include_edge_cases: bool = False


class PropertyFactory:
    """Factory for creating PropertyRecord entities."""

    LOCATIONS = [
        ("South Jakarta", "DKI Jakarta"),
        ("Bandung", "West Java"),
        ("Badung", "Bali"),
        ("Surabaya", "East Java"),
        ("Sleman", "Yogyakarta"),
        ("Denpasar", "Bali"),
        ("Bogor", "West Java"),
    ]

    PROPERTY_TYPES = ["house", "apartment", "villa", "boarding_house", "shophouse", "land"]

    def __init__(self, config: FactoryConfig = None):
        self.config = config or FactoryConfig()
        self.rng = np.random.default_rng(self.config.seed)
        random.seed(self.config.seed)
        self._counter = 0

    def create(self, **kwargs) -> PropertyRecord:
        """Create a single PropertyRecord with optional overrides."""
        defaults = self._generate_property_data()
        defaults.update(kwargs)
        return PropertyRecord(**defaults)

    def create_batch(self, count: int, **common_kwargs) -> List[PropertyRecord]:
        """Create multiple listings with optional common attributes."""
        return [self.create(**common_kwargs) for _ in range(count)]

    def create_dict(self, **kwargs) -> Dict[str, Any]:
        """Create a raw camelCase mapping like an external catalog row."""
        record = self.create(**kwargs)
        return {
            "id": record.id,
            "price": record.price,
            "propertyType": record.property_type,
            "regency": record.regency,
            "province": record.province,
            "landArea": record.land_area,
            "buildingArea": record.building_area,
            "bedrooms": record.bedrooms,
            "bathrooms": record.bathrooms,
            "isPremium": record.is_premium,
            "isHot": record.is_hot,
            "isFeatured": record.is_featured,
            "imageUrl": record.image_url,
        }

    def create_edge_cases(self) -> List[PropertyRecord]:
        """Listings with missing or degenerate fields."""
        return [
            PropertyRecord(id="edge-empty"),
            PropertyRecord(id="edge-no-price", property_type="house", regency="Bandung"),
            PropertyRecord(id="edge-zero-price", price=0, land_area=0, building_area=0),
            PropertyRecord(id="edge-no-location", price=1_000_000_000, property_type="apartment"),
        ]

    def _generate_property_data(self) -> Dict[str, Any]:
        self._counter += 1
        regency, province = self.LOCATIONS[int(self.rng.integers(len(self.LOCATIONS)))]
        property_type = self.PROPERTY_TYPES[int(self.rng.integers(len(self.PROPERTY_TYPES)))]
        bedrooms = int(self.rng.integers(1, 6))
        land_area = float(round(self.rng.uniform(0, 600)))
        building_area = float(round(self.rng.uniform(30, 400)))
        price = float(round(self.rng.uniform(100_000_000, 10_000_000_000), -6))

        return {
            "id": f"prop-{self._counter:05d}",
            "title": f"{property_type.replace('_', ' ').title()} in {regency}",
            "price": price,
            "property_type": property_type,
            "regency": regency,
            "province": province,
            "land_area": land_area,
            "building_area": building_area,
            "bedrooms": bedrooms,
            "bathrooms": int(self.rng.integers(1, max(bedrooms, 2))),
            "is_premium": bool(self.rng.random() < 0.2),
            "is_hot": bool(self.rng.random() < 0.15),
            "is_featured": bool(self.rng.random() < 0.1),
            "image_url": f"https://img.example.com/{self._counter}.jpg" if self.rng.random() < 0.8 else None,
            "created_at": datetime(2026, 1, 1) + timedelta(hours=self._counter),
        }


class SearchFactory:
    """Factory for creating search events."""

    QUERIES = ["house in jakarta", "cheap apartment", "villa bali", "boarding house near campus"]

    def __init__(self, config: FactoryConfig = None):
        self.config = config or FactoryConfig()
        self.rng = random.Random(self.config.seed)

    def create(self, query: str = None, filters: Dict[str, Any] = None, **kwargs) -> SearchEvent:
        return SearchEvent.create(
            query=query if query is not None else self.rng.choice(self.QUERIES),
            filters=filters or {},
            results_count=kwargs.get("results_count", self.rng.randint(0, 50)),
            timestamp=kwargs.get("timestamp"),
        )
