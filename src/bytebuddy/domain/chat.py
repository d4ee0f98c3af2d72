"""Domain models for conversations and messages."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

Role = Literal["user", "assistant"]

DEFAULT_TITLE = "New Chat"


@dataclass(frozen=True)
class Citation:
    """Web source attached to an assistant reply."""

    uri: str
    title: str


@dataclass(frozen=True)
class Conversation:
    """Chat thread owned by one account."""

    id: str
    account_id: str
    title: str
    created_at: datetime


@dataclass(frozen=True)
class Message:
    """Single turn in a conversation."""

    id: str
    conversation_id: str
    role: Role
    content: str
    created_at: datetime
    citations: list[Citation] = field(default_factory=list)


@dataclass(frozen=True)
class ChatTurn:
    """Outcome of sending one chat message."""

    conversation: Conversation
    user_message: Message
    reply: Message
    failed: bool = False
