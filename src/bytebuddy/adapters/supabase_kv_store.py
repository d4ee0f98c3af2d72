"""Supabase-backed key-value store."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from bytebuddy.services.storage import KeyValueStore


@dataclass
class SupabaseKeyValueStore(KeyValueStore):
    """Supabase implementation storing raw values in a kv table."""

    client: Client
    table: str = "kv_store"

    def get(self, key: str) -> str | None:
        """Return the stored value for a key, if present."""
        response = (
            self.client.table(self.table)
            .select("value")
            .eq("key", key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0].get("value")

    def set(self, key: str, value: str) -> None:
        """Insert or replace the value for a key."""
        self.client.table(self.table).upsert(
            {
                "key": key,
                "value": value,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="key",
        ).execute()

    def delete(self, key: str) -> None:
        """Remove a key if present."""
        self.client.table(self.table).delete().eq("key", key).execute()
