"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import pytest

from bytebuddy.adapters.kv_account_repository import KeyValueAccountRepository
from bytebuddy.adapters.kv_conversation_repository import (
    KeyValueConversationRepository,
)
from bytebuddy.adapters.kv_log_repository import KeyValueLogRepository
from bytebuddy.adapters.kv_profile_repository import KeyValueProfileRepository
from bytebuddy.config import Settings
from bytebuddy.containers import AppContainer
from bytebuddy.domain.generation import GenerationResult
from bytebuddy.domain.memory import MemoryEntry
from bytebuddy.services.accounts import AccountService
from bytebuddy.services.generation import (
    PLAN_DISCLAIMER,
    WATER_HEADING,
    GenerationClient,
    GenerationService,
)
from bytebuddy.services.memory_chat import MemoryChatService, MemoryRepository
from bytebuddy.services.sessions import SessionManager
from bytebuddy.services.storage import KeyValueStore
from bytebuddy.services.tokens import SessionTokenSigner

VALID_PLAN = "\n".join(
    [
        PLAN_DISCLAIMER,
        "",
        "## Day 1",
        "- Breakfast: Oats with berries",
        "",
        WATER_HEADING,
        "- **Litres:** 2.5 L",
        "- **Millilitres:** 2500 ml",
        "- **Cups:** ~10 cups",
    ]
)


@dataclass
class InMemoryKeyValueStore(KeyValueStore):
    """In-memory key-value store for tests."""

    values: dict[str, str] = field(default_factory=dict)
    writes: list[str] = field(default_factory=list)

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.writes.append(key)
        self.values[key] = value

    def delete(self, key: str) -> None:
        self.values.pop(key, None)


@dataclass
class FailingWriteStore(InMemoryKeyValueStore):
    """Store whose writes fail, as with an exhausted storage quota."""

    def set(self, key: str, value: str) -> None:
        raise OSError("quota exceeded")


@dataclass
class FakeGenerationClient(GenerationClient):
    """Fake generation client returning queued results."""

    queued: list[GenerationResult | Exception] = field(default_factory=list)
    default_text: str = "Stay hydrated and consult a professional."
    calls: list[dict[str, object]] = field(default_factory=list)

    def queue(self, *results: GenerationResult | Exception | str) -> None:
        for result in results:
            if isinstance(result, str):
                result = GenerationResult(text=result)
            self.queued.append(result)

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        instructions: str | None,
        messages: list[dict[str, str]],
        web_search: bool,
        reasoning_effort: str | None,
        store: bool,
    ) -> GenerationResult:
        self.calls.append(
            {
                "model": model,
                "instructions": instructions,
                "messages": messages,
                "web_search": web_search,
            }
        )
        if self.queued:
            result = self.queued.pop(0)
            if isinstance(result, Exception):
                raise result
            return result
        return GenerationResult(text=self.default_text)


@dataclass
class GatedGenerationClient(FakeGenerationClient):
    """Generation client that waits for a gate before answering."""

    gate: asyncio.Event = field(default_factory=asyncio.Event)

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        instructions: str | None,
        messages: list[dict[str, str]],
        web_search: bool,
        reasoning_effort: str | None,
        store: bool,
    ) -> GenerationResult:
        await self.gate.wait()
        return await super().generate(
            model=model,
            instructions=instructions,
            messages=messages,
            web_search=web_search,
            reasoning_effort=reasoning_effort,
            store=store,
        )


@dataclass
class InMemoryMemoryRepository(MemoryRepository):
    """In-memory memory repository for tests."""

    entries: list[MemoryEntry] = field(default_factory=list)

    def add_entry(self, entry: MemoryEntry) -> None:
        self.entries.append(entry)

    def list_recent(self, user_id: str, limit: int) -> list[MemoryEntry]:
        return [entry for entry in self.entries if entry.user_id == user_id][-limit:]


@dataclass
class FrozenClock:
    """Clock returning a fixed instant until advanced."""

    now: datetime = field(
        default_factory=lambda: datetime(2024, 3, 10, 12, 0, tzinfo=UTC)
    )

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


def build_generation_service(client: GenerationClient) -> GenerationService:
    return GenerationService(client=client, model="test-model")


def build_session_manager(
    store: KeyValueStore,
    client: GenerationClient,
    clock: FrozenClock | None = None,
) -> SessionManager:
    resolved_clock = clock or FrozenClock()
    return SessionManager(
        accounts=AccountService(
            repository=KeyValueAccountRepository(store),
            signer=SessionTokenSigner(secret="test-secret", clock=resolved_clock),
        ),
        profile_repository=KeyValueProfileRepository(store),
        conversation_repository=KeyValueConversationRepository(store),
        log_repository=KeyValueLogRepository(store),
        generation=build_generation_service(client),
        clock=resolved_clock,
    )


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        openai_api_key="openai-key",
        session_secret="test-secret",
        storage_dir=str(tmp_path / "storage"),
    )


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def generation_client() -> FakeGenerationClient:
    return FakeGenerationClient()


@pytest.fixture
def memory_repository() -> InMemoryMemoryRepository:
    return InMemoryMemoryRepository()


@pytest.fixture
def session_manager(
    store: InMemoryKeyValueStore,
    generation_client: FakeGenerationClient,
    clock: FrozenClock,
) -> SessionManager:
    return build_session_manager(store, generation_client, clock)


@pytest.fixture
def container(
    settings: Settings,
    store: InMemoryKeyValueStore,
    session_manager: SessionManager,
    memory_repository: InMemoryMemoryRepository,
) -> AppContainer:
    generation_service = session_manager.generation
    memory_chat_service = MemoryChatService(
        repository=memory_repository,
        generation=generation_service,
        context_limit=settings.memory_context_limit,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        storage=store,
        generation_service=generation_service,
        session_manager=session_manager,
        memory_chat_service=memory_chat_service,
        close_resources=close_resources,
    )
