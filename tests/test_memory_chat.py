"""Tests for the memory-backed chat handler."""

import asyncio

from fastapi.testclient import TestClient

from bytebuddy.api.app import create_app
from bytebuddy.services.memory_chat import MemoryChatService, build_memory_prompt
from tests.conftest import (
    FakeGenerationClient,
    InMemoryMemoryRepository,
    build_generation_service,
)


def test_reply_stores_both_sides_of_exchange(
    memory_repository: InMemoryMemoryRepository,
    generation_client: FakeGenerationClient,
) -> None:
    generation_client.queue("  Try oatmeal.  ")
    service = MemoryChatService(
        repository=memory_repository,
        generation=build_generation_service(generation_client),
    )

    reply = asyncio.run(service.reply("u1", "c1", "Breakfast ideas?"))

    assert reply == "Try oatmeal."
    assert [(e.role, e.content) for e in memory_repository.entries] == [
        ("user", "Breakfast ideas?"),
        ("assistant", "Try oatmeal."),
    ]
    prompt = generation_client.calls[0]["messages"][0]["content"]
    assert prompt == "user: Breakfast ideas?\nassistant:"


def test_reply_uses_latest_context_window(
    memory_repository: InMemoryMemoryRepository,
    generation_client: FakeGenerationClient,
) -> None:
    service = MemoryChatService(
        repository=memory_repository,
        generation=build_generation_service(generation_client),
        context_limit=2,
    )
    asyncio.run(service.reply("u1", "c1", "first"))

    asyncio.run(service.reply("u1", "c1", "second"))

    prompt = generation_client.calls[1]["messages"][0]["content"]
    assert "first" not in prompt
    assert prompt.endswith("user: second\nassistant:")


def test_blank_reply_falls_back(
    memory_repository: InMemoryMemoryRepository,
    generation_client: FakeGenerationClient,
) -> None:
    generation_client.queue("   ")
    service = MemoryChatService(
        repository=memory_repository,
        generation=build_generation_service(generation_client),
    )

    assert asyncio.run(service.reply("u1", "c1", "Hi")) == "No response"


def test_build_memory_prompt_without_entries() -> None:
    assert build_memory_prompt([]) == "assistant:"


def test_chat_endpoint_replies(container, generation_client) -> None:
    generation_client.queue("Hello!")
    with TestClient(create_app(container)) as client:
        response = client.post(
            "/api/chat",
            json={"userId": "u1", "conversationId": "c1", "message": "Hi"},
        )

    assert response.status_code == 200
    assert response.json() == {"reply": "Hello!"}


def test_chat_endpoint_requires_fields(container) -> None:
    with TestClient(create_app(container)) as client:
        response = client.post("/api/chat", json={"userId": "u1", "message": "Hi"})

    assert response.status_code == 400
    assert response.json() == {"error": "Missing required fields"}


def test_chat_endpoint_rejects_unreadable_bodies(container) -> None:
    with TestClient(create_app(container)) as client:
        empty = client.post("/api/chat")
        not_json = client.post("/api/chat", content=b"hello")
        not_object = client.post("/api/chat", json=["u1", "c1", "Hi"])
        wrong_type = client.post(
            "/api/chat",
            json={"userId": 5, "conversationId": "c1", "message": "Hi"},
        )

    for response in (empty, not_json, not_object, wrong_type):
        assert response.status_code == 400
        assert response.json() == {"error": "Missing required fields"}


def test_chat_endpoint_rejects_other_methods(container) -> None:
    with TestClient(create_app(container)) as client:
        get = client.get("/api/chat")
        options = client.options("/api/chat")
        head = client.head("/api/chat")

    for response in (get, options):
        assert response.status_code == 405
        assert response.json() == {"error": "Method not allowed"}
    assert head.status_code == 405


def test_chat_endpoint_reports_generation_failure(
    container, generation_client
) -> None:
    generation_client.queue(RuntimeError("upstream down"))
    with TestClient(create_app(container)) as client:
        response = client.post(
            "/api/chat",
            json={"userId": "u1", "conversationId": "c1", "message": "Hi"},
        )

    assert response.status_code == 500
    assert "error" in response.json()


def test_chat_endpoint_without_memory_store(container) -> None:
    container.memory_chat_service = None
    with TestClient(create_app(container)) as client:
        response = client.post(
            "/api/chat",
            json={"userId": "u1", "conversationId": "c1", "message": "Hi"},
        )

    assert response.status_code == 500
    assert response.json() == {"error": "Memory store is not configured"}


def test_health(container) -> None:
    with TestClient(create_app(container)) as client:
        assert client.get("/health").json() == {"status": "ok"}
