"""Key-value repository for health profiles."""

from dataclasses import dataclass

from bytebuddy.adapters.kv_documents import read_document, write_document
from bytebuddy.domain.profiles import Profile
from bytebuddy.services.profiles import ProfileRepository
from bytebuddy.services.storage import KeyValueStore, profile_key

_FIELD_KEYS = {
    "age": "age",
    "gender": "gender",
    "height": "height",
    "weight": "weight",
    "activity_level": "activityLevel",
    "goal": "goal",
    "restrictions": "restrictions",
    "typical_foods": "typicalFoods",
    "eating_habits": "eatingHabits",
}


@dataclass
class KeyValueProfileRepository(ProfileRepository):
    """Stores one camelCase profile document per account."""

    store: KeyValueStore

    def get_profile(self, account_id: str) -> Profile | None:
        """Return the stored profile, if any."""
        row = read_document(self.store, profile_key(account_id), None)
        if not isinstance(row, dict):
            return None
        values = {
            name: "" if row.get(key) is None else str(row[key])
            for name, key in _FIELD_KEYS.items()
        }
        units = "Imperial" if row.get("units") == "Imperial" else "Metric"
        return Profile(units=units, **values)

    def save_profile(self, account_id: str, profile: Profile) -> None:
        """Replace the stored profile."""
        row: dict[str, object] = {
            key: getattr(profile, name) for name, key in _FIELD_KEYS.items()
        }
        row["units"] = profile.units
        write_document(self.store, profile_key(account_id), row)
