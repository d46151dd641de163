"""
Global pytest configuration and fixtures for the propmatch test suite.

Provides shared listings, preferences, engines and a mock Redis client.
"""

import sys
from pathlib import Path
from typing import Dict, List
from unittest.mock import Mock

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from propmatch.application.use_cases.personalization_use_case import PersonalizationUseCase
from propmatch.domain.entities.property import PropertyRecord
from propmatch.domain.entities.user import Budget, UserPreferences
from propmatch.domain.services.profile_service import ProfileService
from propmatch.domain.services.scoring_service import ScoringEngine
from propmatch.domain.services.similarity_service import SimilarityEngine
from propmatch.infrastructure.data.repositories.memory_profile_repository import InMemoryProfileRepository


def pytest_configure(config):
    """Configure pytest with custom settings."""
    np.random.seed(42)
    config.addinivalue_line("markers", "performance: latency checks over large batches")


def pytest_collection_modifyitems(config, items):
    """Add markers based on test file location."""
    for item in items:
        if "performance" in str(item.fspath):
            item.add_marker(pytest.mark.performance)


# =======================
# Listing Fixtures
# =======================

@pytest.fixture
def sample_properties() -> List[PropertyRecord]:
    """Three listings: a premium house, a hot apartment and a fully flagged villa."""
    return [
        PropertyRecord(
            id="prop1",
            title="Luxury house in South Jakarta",
            price=2_000_000_000,
            property_type="house",
            regency="South Jakarta",
            province="DKI Jakarta",
            land_area=300,
            building_area=250,
            bedrooms=4,
            bathrooms=3,
            is_premium=True,
            is_featured=True,
            image_url="https://img.example.com/prop1.jpg",
        ),
        PropertyRecord(
            id="prop2",
            title="Affordable apartment in Bandung",
            price=500_000_000,
            property_type="apartment",
            regency="Bandung",
            province="West Java",
            land_area=0,
            building_area=75,
            bedrooms=2,
            bathrooms=1,
            is_hot=True,
        ),
        PropertyRecord(
            id="prop3",
            title="Strategic villa in Bali",
            price=5_000_000_000,
            property_type="villa",
            regency="Badung",
            province="Bali",
            land_area=500,
            building_area=400,
            bedrooms=5,
            bathrooms=4,
            is_premium=True,
            is_hot=True,
            is_featured=True,
            image_url="https://img.example.com/prop3.jpg",
        ),
    ]


@pytest.fixture
def sample_preferences() -> UserPreferences:
    """Preferences for houses and apartments in Jakarta or Bandung."""
    return UserPreferences(
        budget=Budget(min=100_000_000, max=3_000_000_000),
        property_types=["house", "apartment"],
        locations=["South Jakarta", "Bandung"],
        features=["premium", "large land"],
    )


@pytest.fixture
def raw_property_dict() -> Dict:
    """A camelCase listing as it arrives from an external catalog."""
    return {
        "id": 42,
        "price": "750000000",
        "propertyType": "House",
        "regency": "Sleman",
        "province": "Yogyakarta",
        "landArea": "220",
        "buildingArea": 90,
        "bedrooms": 3,
        "bathrooms": "2",
        "isPremium": "true",
        "isHot": 0,
        "isFeatured": False,
        "imageUrl": "https://img.example.com/42.jpg",
        "createdAt": "2026-01-15T10:30:00",
    }


# =======================
# Engine Fixtures
# =======================

@pytest.fixture
def scoring_engine() -> ScoringEngine:
    return ScoringEngine()


@pytest.fixture
def similarity_engine() -> SimilarityEngine:
    return SimilarityEngine()


@pytest.fixture
def profile_repository() -> InMemoryProfileRepository:
    return InMemoryProfileRepository()


@pytest.fixture
def profile_service(profile_repository) -> ProfileService:
    return ProfileService(profile_repository)


@pytest.fixture
def use_case(profile_repository) -> PersonalizationUseCase:
    return PersonalizationUseCase(repository=profile_repository)


# =======================
# Redis Fixtures
# =======================

@pytest.fixture
def mock_redis():
    """Dictionary-backed mock of a synchronous Redis client."""
    store: Dict[str, str] = {}

    def _set(key, value):
        store[key] = value
        return True

    def _setex(key, ttl, value):
        store[key] = value
        return True

    client = Mock()
    client.store = store
    client.get.side_effect = lambda key: store.get(key)
    client.set.side_effect = _set
    client.setex.side_effect = _setex
    client.exists.side_effect = lambda key: int(key in store)
    client.scan_iter.side_effect = lambda match=None: [
        key for key in list(store) if match is None or key.startswith(match.rstrip("*"))
    ]
    return client
