"""Conversation and message store for one account."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import Protocol
from uuid import uuid4

from bytebuddy.domain.chat import (
    DEFAULT_TITLE,
    Citation,
    Conversation,
    Message,
    Role,
)
from bytebuddy.domain.errors import UnknownConversationError

_logger = logging.getLogger(__name__)


class ConversationRepository(Protocol):
    """Persistence interface for an account's conversations and messages."""

    def load_conversations(self, account_id: str) -> list[Conversation]:
        """Return stored conversations in insertion order."""

    def save_conversations(
        self, account_id: str, conversations: list[Conversation]
    ) -> None:
        """Replace the stored conversation collection."""

    def load_messages(self, account_id: str) -> dict[str, list[Message]]:
        """Return stored messages keyed by conversation id."""

    def save_messages(
        self, account_id: str, messages: dict[str, list[Message]]
    ) -> None:
        """Replace the stored message mapping."""


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class ConversationService:
    """In-memory conversation document backed by whole-collection writes.

    The in-memory collections are the source of truth for the session; every
    mutation rewrites both stored collections and a failed write is logged
    without rolling the mutation back.
    """

    account_id: str
    repository: ConversationRepository
    clock: Callable[[], datetime] = field(default=_utc_now)
    _conversations: list[Conversation] = field(default_factory=list, init=False)
    _messages: dict[str, list[Message]] = field(default_factory=dict, init=False)
    _detached: bool = field(default=False, init=False)

    def __post_init__(self) -> None:
        self.reload()

    def reload(self) -> None:
        """Replace in-memory state with the stored collections."""
        try:
            self._conversations = list(
                self.repository.load_conversations(self.account_id)
            )
            self._messages = {
                conversation_id: list(messages)
                for conversation_id, messages in self.repository.load_messages(
                    self.account_id
                ).items()
            }
        except Exception:
            _logger.exception(
                "Failed to load conversations for account %s", self.account_id
            )
            self._conversations = []
            self._messages = {}

    def detach(self) -> None:
        """Stop writing to storage; later mutations stay in memory only."""
        self._detached = True

    def create(self) -> Conversation:
        """Create an empty conversation titled "New Chat"."""
        conversation = Conversation(
            id=f"conv-{uuid4().hex}",
            account_id=self.account_id,
            title=DEFAULT_TITLE,
            created_at=self.clock(),
        )
        self._conversations.append(conversation)
        self._messages[conversation.id] = []
        self._persist()
        return conversation

    def get(self, conversation_id: str) -> Conversation | None:
        """Return a conversation by id, if present."""
        return next(
            (c for c in self._conversations if c.id == conversation_id), None
        )

    def rename(self, conversation_id: str, title: str) -> None:
        """Replace a conversation title; unknown ids are ignored."""
        if self.get(conversation_id) is None:
            return
        self._conversations = [
            replace(c, title=title) if c.id == conversation_id else c
            for c in self._conversations
        ]
        self._persist()

    def remove(self, conversation_id: str) -> None:
        """Delete a conversation together with its messages."""
        self._conversations = [
            c for c in self._conversations if c.id != conversation_id
        ]
        self._messages.pop(conversation_id, None)
        self._persist()

    def append_message(
        self,
        conversation_id: str,
        role: Role,
        content: str,
        citations: list[Citation] | None = None,
    ) -> Message:
        """Append a message to a known conversation and return it."""
        if self.get(conversation_id) is None:
            raise UnknownConversationError(conversation_id)
        message = Message(
            id=f"msg-{uuid4().hex}",
            conversation_id=conversation_id,
            role=role,
            content=content,
            created_at=self.clock(),
            citations=list(citations or []),
        )
        self._messages.setdefault(conversation_id, []).append(message)
        self._persist()
        return message

    def list_conversations(self) -> list[Conversation]:
        """Return conversations newest first."""
        return sorted(self._conversations, key=lambda c: c.created_at, reverse=True)

    def messages(self, conversation_id: str) -> list[Message]:
        """Return a conversation's messages in insertion order."""
        return list(self._messages.get(conversation_id, []))

    def _persist(self) -> None:
        if self._detached:
            return
        try:
            self.repository.save_conversations(
                self.account_id, list(self._conversations)
            )
            self.repository.save_messages(
                self.account_id,
                {key: list(value) for key, value in self._messages.items()},
            )
        except Exception:
            _logger.exception(
                "Failed to persist conversations for account %s", self.account_id
            )
