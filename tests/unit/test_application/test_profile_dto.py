"""
Unit tests for the profile snapshot DTOs.
"""

from datetime import datetime

import pytest
from pydantic import ValidationError

from propmatch.application.dto.profile_dto import PrioritiesModel, ProfileSnapshot, SearchFiltersModel
from propmatch.domain.entities.search import SearchFilters
from propmatch.domain.entities.user import Priorities, UserProfile


class TestProfileSnapshot:
    """Test cases for ProfileSnapshot validation and conversion."""

    def test_from_profile_to_profile(self):
        """Test conversion of a profile with custom priorities."""
        profile = UserProfile.create("u1")
        profile.preferences.priorities = Priorities(price=9, location=2)
        profile.favorite_properties = ["a", "b"]

        restored = ProfileSnapshot.from_profile(profile).to_profile()

        assert restored == profile

    def test_duplicate_ids_are_removed(self):
        """Test that imported id lists are deduplicated."""
        snapshot = ProfileSnapshot(
            id="u1",
            viewed_properties=["a", "b", "a"],
            favorite_properties=["x", "x"],
            last_activity=datetime(2026, 1, 1),
        )
        assert snapshot.viewed_properties == ["a", "b"]
        assert snapshot.favorite_properties == ["x"]

    def test_unknown_fields_are_ignored(self):
        """Test tolerance of extra fields in imported data."""
        snapshot = ProfileSnapshot.from_json(
            '{"id": "u1", "last_activity": "2026-01-01T00:00:00", "theme": "dark"}'
        )
        profile = snapshot.to_profile()

        assert profile.id == "u1"
        assert profile.created_at == profile.last_activity

    def test_missing_identity(self):
        """Test that a snapshot needs a non-empty id."""
        with pytest.raises(ValidationError):
            ProfileSnapshot(id="", last_activity=datetime(2026, 1, 1))

    def test_priorities_range(self):
        """Test that priorities outside 1..10 are invalid."""
        with pytest.raises(ValidationError):
            PrioritiesModel(price=11)

    def test_filters_model_round_trip(self):
        """Test SearchFilters conversion through the model."""
        filters = SearchFilters.from_dict({"minPrice": 5, "type": "villa", "isHot": True, "page": 3})
        assert SearchFiltersModel.from_entity(filters).to_entity() == filters

    def test_negative_price_rejected(self):
        """Test that stored filters cannot hold negative prices."""
        with pytest.raises(ValidationError):
            SearchFiltersModel(min_price=-1)
