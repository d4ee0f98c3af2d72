"""Tests for profile service."""

import json

from bytebuddy.adapters.kv_profile_repository import KeyValueProfileRepository
from bytebuddy.domain.profiles import Profile
from bytebuddy.services.profiles import ProfileService
from bytebuddy.services.storage import profile_key
from tests.conftest import FailingWriteStore, InMemoryKeyValueStore


def test_get_returns_none_until_first_save() -> None:
    service = ProfileService(KeyValueProfileRepository(InMemoryKeyValueStore()))

    assert service.get("user-1") is None


def test_save_replaces_profile_and_is_idempotent() -> None:
    store = InMemoryKeyValueStore()
    service = ProfileService(KeyValueProfileRepository(store))
    profile = Profile(age="34", height="170", weight="65", goal="Maintain weight")

    service.save("user-1", Profile(age="20"))
    service.save("user-1", profile)
    service.save("user-1", profile)

    assert service.get("user-1") == profile
    fresh = ProfileService(KeyValueProfileRepository(store))
    assert fresh.get("user-1") == profile


def test_profile_is_stored_with_camel_case_fields() -> None:
    store = InMemoryKeyValueStore()
    service = ProfileService(KeyValueProfileRepository(store))

    service.save(
        "user-1",
        Profile(units="Imperial", activity_level="Active", typical_foods="Rice"),
    )

    stored = json.loads(store.values[profile_key("user-1")])
    assert stored["units"] == "Imperial"
    assert stored["activityLevel"] == "Active"
    assert stored["typicalFoods"] == "Rice"


def test_profiles_are_scoped_per_account() -> None:
    service = ProfileService(KeyValueProfileRepository(InMemoryKeyValueStore()))

    service.save("user-1", Profile(age="30"))

    assert service.get("user-2") is None


def test_save_failure_is_swallowed_and_cached() -> None:
    service = ProfileService(KeyValueProfileRepository(FailingWriteStore()))
    profile = Profile(age="30")

    service.save("user-1", profile)

    assert service.get("user-1") == profile


def test_profile_units_helpers() -> None:
    assert Profile(units="Metric").height_unit == "cm"
    assert Profile(units="Imperial").weight_unit == "lbs"
    assert Profile().is_empty()
    assert not Profile(goal="Lose weight").is_empty()
