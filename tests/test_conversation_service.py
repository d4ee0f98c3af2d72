"""Tests for conversation service."""

import json

import pytest

from bytebuddy.adapters.kv_conversation_repository import (
    KeyValueConversationRepository,
)
from bytebuddy.domain.chat import Citation
from bytebuddy.domain.errors import UnknownConversationError
from bytebuddy.services.conversations import ConversationService
from bytebuddy.services.storage import conversations_key, messages_key
from tests.conftest import FailingWriteStore, FrozenClock, InMemoryKeyValueStore


def _service(
    store: InMemoryKeyValueStore, clock: FrozenClock | None = None
) -> ConversationService:
    return ConversationService(
        account_id="user-1",
        repository=KeyValueConversationRepository(store),
        clock=clock or FrozenClock(),
    )


def test_create_starts_with_default_title_and_no_messages() -> None:
    service = _service(InMemoryKeyValueStore())

    conversation = service.create()

    assert conversation.title == "New Chat"
    assert conversation.account_id == "user-1"
    assert service.messages(conversation.id) == []


def test_append_preserves_insertion_order() -> None:
    store = InMemoryKeyValueStore()
    service = _service(store)
    conversation = service.create()

    first = service.append_message(conversation.id, "user", "Hello")
    second = service.append_message(conversation.id, "user", "Are you there?")

    assert [m.id for m in service.messages(conversation.id)] == [first.id, second.id]
    reloaded = _service(store)
    assert [m.content for m in reloaded.messages(conversation.id)] == [
        "Hello",
        "Are you there?",
    ]


def test_append_to_unknown_conversation_fails() -> None:
    service = _service(InMemoryKeyValueStore())

    with pytest.raises(UnknownConversationError):
        service.append_message("conv-missing", "user", "Hello")


def test_remove_deletes_conversation_and_messages() -> None:
    store = InMemoryKeyValueStore()
    service = _service(store)
    kept = service.create()
    removed = service.create()
    service.append_message(removed.id, "user", "Bye")

    service.remove(removed.id)

    assert service.get(removed.id) is None
    assert service.messages(removed.id) == []
    reloaded = _service(store)
    assert [c.id for c in reloaded.list_conversations()] == [kept.id]
    assert removed.id not in json.loads(store.values[messages_key("user-1")])


def test_rename_unknown_conversation_is_noop() -> None:
    store = InMemoryKeyValueStore()
    service = _service(store)
    service.create()
    writes_before = len(store.writes)

    service.rename("conv-missing", "Title")

    assert len(store.writes) == writes_before


def test_rename_replaces_title() -> None:
    service = _service(InMemoryKeyValueStore())
    conversation = service.create()

    service.rename(conversation.id, "Hydration tips")

    assert service.get(conversation.id).title == "Hydration tips"


def test_list_conversations_sorts_newest_first() -> None:
    store = InMemoryKeyValueStore()
    clock = FrozenClock()
    service = _service(store, clock)
    older = service.create()
    clock.advance(minutes=5)
    newer = service.create()

    assert [c.id for c in service.list_conversations()] == [newer.id, older.id]
    stored = json.loads(store.values[conversations_key("user-1")])
    assert [row["id"] for row in stored] == [older.id, newer.id]


def test_listing_tolerates_out_of_order_storage() -> None:
    store = InMemoryKeyValueStore()
    store.values[conversations_key("user-1")] = json.dumps(
        [
            {
                "id": "conv-old",
                "title": "Old",
                "user_id": "user-1",
                "created_at": "2024-01-01T10:00:00.000Z",
            },
            {
                "id": "conv-new",
                "title": "New",
                "user_id": "user-1",
                "created_at": "2024-02-01T10:00:00.000Z",
            },
            {
                "id": "conv-mid",
                "title": "Mid",
                "user_id": "user-1",
                "created_at": "2024-01-15T10:00:00.000Z",
            },
        ]
    )

    service = _service(store)

    assert [c.id for c in service.list_conversations()] == [
        "conv-new",
        "conv-mid",
        "conv-old",
    ]


def test_citations_round_trip_through_storage() -> None:
    store = InMemoryKeyValueStore()
    service = _service(store)
    conversation = service.create()

    service.append_message(
        conversation.id,
        "assistant",
        "Drink water.",
        [Citation(uri="https://example.org/water", title="Water")],
    )

    stored = json.loads(store.values[messages_key("user-1")])[conversation.id][0]
    assert stored["sources"] == [{"uri": "https://example.org/water", "title": "Water"}]
    reloaded = _service(store).messages(conversation.id)[0]
    assert reloaded.citations == [
        Citation(uri="https://example.org/water", title="Water")
    ]


def test_consecutive_same_role_messages_are_allowed() -> None:
    service = _service(InMemoryKeyValueStore())
    conversation = service.create()

    service.append_message(conversation.id, "assistant", "Sorry")
    service.append_message(conversation.id, "assistant", "Sorry again")

    assert [m.role for m in service.messages(conversation.id)] == [
        "assistant",
        "assistant",
    ]


def test_write_failure_keeps_in_memory_state() -> None:
    service = _service(FailingWriteStore())
    conversation = service.create()

    message = service.append_message(conversation.id, "user", "Hello")

    assert service.messages(conversation.id) == [message]
