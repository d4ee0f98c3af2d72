"""Supabase repository for remote chat memories."""

from dataclasses import dataclass

from supabase import Client

from bytebuddy.domain.memory import MemoryEntry
from bytebuddy.services.memory_chat import MemoryRepository


@dataclass
class SupabaseMemoryRepository(MemoryRepository):
    """Supabase implementation for the memories table."""

    client: Client

    def add_entry(self, entry: MemoryEntry) -> None:
        """Insert one memory row."""
        response = (
            self.client.table("memories")
            .insert(
                {
                    "user_id": entry.user_id,
                    "conversation_id": entry.conversation_id,
                    "role": entry.role,
                    "content": entry.content,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to store memory in Supabase")

    def list_recent(self, user_id: str, limit: int) -> list[MemoryEntry]:
        """Return the latest memories for a user, oldest first."""
        response = (
            self.client.table("memories")
            .select("user_id, conversation_id, role, content, created_at")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        rows = response.data or []
        return [
            MemoryEntry(
                user_id=row["user_id"],
                conversation_id=row["conversation_id"],
                role=row["role"],
                content=row["content"],
            )
            for row in reversed(rows)
        ]
