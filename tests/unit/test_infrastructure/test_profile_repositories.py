"""
Unit tests for the in-memory and Redis profile repositories.
"""

import json
from datetime import datetime

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from propmatch.domain.entities.search import SavedSearch, SearchEvent, SearchHistoryItem
from propmatch.domain.entities.user import Budget, UserPreferences, UserProfile
from propmatch.infrastructure.data.repositories.memory_profile_repository import InMemoryProfileRepository
from propmatch.infrastructure.data.repositories.redis_profile_repository import RedisProfileRepository


@pytest.fixture
def populated_profile():
    profile = UserProfile.create("user-42")
    profile.preferences = UserPreferences(
        budget=Budget(min=100, max=900),
        property_types=["house"],
        locations=["Bandung"],
        features=["large land"],
    )
    profile.search_history.append(
        SearchHistoryItem.from_event(
            SearchEvent.create("house", {"regency": "Bandung", "sort": "newest"}, results_count=7)
        )
    )
    profile.viewed_properties = ["p1", "p2"]
    profile.favorite_properties = ["p2"]
    profile.saved_searches.append(SavedSearch.create("Bandung houses", "house", {"regency": "Bandung"}))
    return profile


class TestInMemoryProfileRepository:
    """Test cases for the process-local backend."""

    def test_save_and_get(self, populated_profile):
        """Test storing and loading a profile."""
        repository = InMemoryProfileRepository()
        assert repository.save(populated_profile) is True

        loaded = repository.get("user-42")
        assert loaded == populated_profile
        assert loaded is not populated_profile

    def test_get_missing(self):
        """Test loading an unknown user."""
        assert InMemoryProfileRepository().get("nobody") is None

    def test_stored_copy_is_isolated(self, populated_profile):
        """Test that later caller mutations do not leak into storage."""
        repository = InMemoryProfileRepository()
        repository.save(populated_profile)
        populated_profile.viewed_properties.append("p3")

        assert repository.get("user-42").viewed_properties == ["p1", "p2"]

    def test_listing_and_clear(self):
        """Test ids, count, exists and clear."""
        repository = InMemoryProfileRepository()
        for user_id in ("a", "b"):
            repository.save(UserProfile.create(user_id))

        assert sorted(repository.get_all_ids()) == ["a", "b"]
        assert repository.count() == 2
        assert repository.exists("a")

        repository.clear()
        assert repository.count() == 0


class TestRedisProfileRepository:
    """Test cases for the Redis backend."""

    def test_save_and_get_round_trip(self, mock_redis, populated_profile):
        """Test that a stored snapshot restores an equivalent profile."""
        repository = RedisProfileRepository(mock_redis)

        assert repository.save(populated_profile) is True
        mock_redis.set.assert_called_once()
        assert "profile:user-42" in mock_redis.store

        loaded = repository.get("user-42")
        assert loaded.id == "user-42"
        assert loaded.preferences.budget.max == 900
        assert loaded.viewed_properties == ["p1", "p2"]
        assert loaded.favorite_properties == ["p2"]
        assert loaded.search_history[0].filters.extras == {"sort": "newest"}
        assert loaded.saved_searches[0].name == "Bandung houses"

    def test_stored_payload_is_flat_json(self, mock_redis, populated_profile):
        """Test that the stored value is a self-describing JSON record."""
        RedisProfileRepository(mock_redis, key_prefix="pm:").save(populated_profile)

        payload = json.loads(mock_redis.store["pm:user-42"])
        assert payload["id"] == "user-42"
        assert payload["version"] == 1
        assert payload["favorite_properties"] == ["p2"]

    def test_ttl_uses_setex(self, mock_redis, populated_profile):
        """Test that a TTL stores with expiry."""
        repository = RedisProfileRepository(mock_redis, ttl_seconds=3600)
        repository.save(populated_profile)

        mock_redis.setex.assert_called_once()
        assert mock_redis.setex.call_args[0][1] == 3600

    def test_bytes_payload(self, mock_redis, populated_profile):
        """Test decoding of raw byte responses."""
        repository = RedisProfileRepository(mock_redis)
        repository.save(populated_profile)
        mock_redis.store["profile:user-42"] = mock_redis.store["profile:user-42"].encode("utf-8")

        assert repository.get("user-42").id == "user-42"

    def test_get_missing(self, mock_redis):
        """Test loading an unknown user."""
        assert RedisProfileRepository(mock_redis).get("nobody") is None

    def test_invalid_payload_returns_none(self, mock_redis):
        """Test that a corrupt snapshot is logged and ignored."""
        mock_redis.store["profile:broken"] = "{not json"
        assert RedisProfileRepository(mock_redis).get("broken") is None

    def test_redis_errors_are_absorbed(self, mock_redis, populated_profile):
        """Test that connection failures degrade to empty results."""
        mock_redis.get.side_effect = RedisConnectionError("down")
        mock_redis.set.side_effect = RedisConnectionError("down")
        mock_redis.exists.side_effect = RedisConnectionError("down")
        mock_redis.scan_iter.side_effect = RedisConnectionError("down")
        repository = RedisProfileRepository(mock_redis)

        assert repository.get("user-42") is None
        assert repository.save(populated_profile) is False
        assert repository.exists("user-42") is False
        assert repository.get_all_ids() == []
        assert repository.count() == 0

    def test_refused_write(self, mock_redis, populated_profile):
        """Test a write that Redis does not acknowledge."""
        mock_redis.set.side_effect = None
        mock_redis.set.return_value = None
        assert RedisProfileRepository(mock_redis).save(populated_profile) is False

    def test_ids_and_count(self, mock_redis):
        """Test listing stored ids under the key prefix."""
        repository = RedisProfileRepository(mock_redis)
        for user_id in ("a", "b"):
            repository.save(UserProfile.create(user_id))
        mock_redis.store["other:c"] = "{}"

        assert sorted(repository.get_all_ids()) == ["a", "b"]
        assert repository.count() == 2
        assert repository.exists("a") is True

    def test_byte_keys(self, mock_redis):
        """Test decoding of byte keys from scan."""
        mock_redis.scan_iter.side_effect = lambda match=None: [b"profile:x", b"profile:y"]
        assert RedisProfileRepository(mock_redis).get_all_ids() == ["x", "y"]

    def test_datetimes_survive(self, mock_redis):
        """Test that timestamps are restored."""
        profile = UserProfile.create("t")
        profile.last_activity = datetime(2026, 5, 1, 12, 0, 0)
        repository = RedisProfileRepository(mock_redis)
        repository.save(profile)

        assert repository.get("t").last_activity == datetime(2026, 5, 1, 12, 0, 0)
