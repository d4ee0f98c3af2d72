"""Domain models for the remote conversation memory."""

from dataclasses import dataclass

from bytebuddy.domain.chat import Role


@dataclass(frozen=True)
class MemoryEntry:
    """Message stored in the remote memory table."""

    user_id: str
    conversation_id: str
    role: Role
    content: str
