"""Chat handler backed by a remote conversation memory."""

import logging
from dataclasses import dataclass
from typing import Protocol

from bytebuddy.domain.chat import Role
from bytebuddy.domain.memory import MemoryEntry
from bytebuddy.services.generation import GenerationService

EMPTY_REPLY = "No response"

_logger = logging.getLogger(__name__)


class MemoryRepository(Protocol):
    """Persistence interface for remote chat memories."""

    def add_entry(self, entry: MemoryEntry) -> None:
        """Store one message."""

    def list_recent(self, user_id: str, limit: int) -> list[MemoryEntry]:
        """Return the user's latest entries in chronological order."""


@dataclass
class MemoryChatService:
    """Persists each exchange remotely and replies with a short context."""

    repository: MemoryRepository
    generation: GenerationService
    context_limit: int = 10

    async def reply(self, user_id: str, conversation_id: str, message: str) -> str:
        """Store the message, generate a reply from recent context, store it."""
        self._add(user_id, conversation_id, "user", message)
        recent = self.repository.list_recent(user_id, self.context_limit)
        prompt = build_memory_prompt(recent)
        reply = (await self.generation.complete(prompt)).strip() or EMPTY_REPLY
        self._add(user_id, conversation_id, "assistant", reply)
        _logger.info("Stored memory exchange for conversation %s", conversation_id)
        return reply

    def _add(
        self, user_id: str, conversation_id: str, role: Role, content: str
    ) -> None:
        self.repository.add_entry(
            MemoryEntry(
                user_id=user_id,
                conversation_id=conversation_id,
                role=role,
                content=content,
            )
        )


def build_memory_prompt(entries: list[MemoryEntry]) -> str:
    """Return the context lines followed by the assistant cue."""
    lines = [f"{entry.role}: {entry.content}" for entry in entries]
    lines.append("assistant:")
    return "\n".join(lines)
