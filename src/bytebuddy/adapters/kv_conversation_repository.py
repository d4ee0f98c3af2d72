"""Key-value repository for conversations and messages."""

import logging
from dataclasses import dataclass

from bytebuddy.adapters.kv_documents import read_document, write_document
from bytebuddy.domain.chat import Citation, Conversation, Message
from bytebuddy.services.conversations import ConversationRepository
from bytebuddy.services.storage import (
    KeyValueStore,
    conversations_key,
    format_timestamp,
    messages_key,
    parse_timestamp,
)

_logger = logging.getLogger(__name__)


@dataclass
class KeyValueConversationRepository(ConversationRepository):
    """Stores conversations as a list and messages as a map per account."""

    store: KeyValueStore

    def load_conversations(self, account_id: str) -> list[Conversation]:
        """Return stored conversations in insertion order."""
        rows = read_document(self.store, conversations_key(account_id), [])
        conversations: list[Conversation] = []
        for row in rows if isinstance(rows, list) else []:
            try:
                conversations.append(
                    Conversation(
                        id=str(row["id"]),
                        account_id=str(row.get("user_id") or account_id),
                        title=str(row.get("title") or ""),
                        created_at=parse_timestamp(row["created_at"]),
                    )
                )
            except (AttributeError, KeyError, TypeError, ValueError):
                _logger.warning("Skipping malformed conversation for %s", account_id)
        return conversations

    def save_conversations(
        self, account_id: str, conversations: list[Conversation]
    ) -> None:
        """Replace the stored conversation list."""
        write_document(
            self.store,
            conversations_key(account_id),
            [
                {
                    "id": conversation.id,
                    "title": conversation.title,
                    "user_id": conversation.account_id,
                    "created_at": format_timestamp(conversation.created_at),
                }
                for conversation in conversations
            ],
        )

    def load_messages(self, account_id: str) -> dict[str, list[Message]]:
        """Return stored messages keyed by conversation id."""
        mapping = read_document(self.store, messages_key(account_id), {})
        if not isinstance(mapping, dict):
            return {}
        messages: dict[str, list[Message]] = {}
        for conversation_id, rows in mapping.items():
            messages[conversation_id] = [
                message
                for message in (
                    _message_from_row(conversation_id, row)
                    for row in (rows if isinstance(rows, list) else [])
                )
                if message is not None
            ]
        return messages

    def save_messages(
        self, account_id: str, messages: dict[str, list[Message]]
    ) -> None:
        """Replace the stored message map."""
        write_document(
            self.store,
            messages_key(account_id),
            {
                conversation_id: [_message_to_row(message) for message in rows]
                for conversation_id, rows in messages.items()
            },
        )


def _message_from_row(conversation_id: str, row: object) -> Message | None:
    if not isinstance(row, dict):
        return None
    try:
        role = row["role"]
        if role not in ("user", "assistant"):
            return None
        sources = row.get("sources") or []
        return Message(
            id=str(row["id"]),
            conversation_id=str(row.get("conversation_id") or conversation_id),
            role=role,
            content=str(row.get("content") or ""),
            created_at=parse_timestamp(row["created_at"]),
            citations=[
                Citation(uri=str(source["uri"]), title=str(source["title"]))
                for source in sources
                if isinstance(source, dict) and "uri" in source and "title" in source
            ],
        )
    except (AttributeError, KeyError, TypeError, ValueError):
        _logger.warning("Skipping malformed message in %s", conversation_id)
        return None


def _message_to_row(message: Message) -> dict[str, object]:
    row: dict[str, object] = {
        "id": message.id,
        "conversation_id": message.conversation_id,
        "content": message.content,
        "role": message.role,
        "created_at": format_timestamp(message.created_at),
    }
    if message.citations:
        row["sources"] = [
            {"uri": citation.uri, "title": citation.title}
            for citation in message.citations
        ]
    return row
