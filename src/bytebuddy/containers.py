"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import Client, create_client

from bytebuddy.adapters.json_file_store import JsonFileKeyValueStore
from bytebuddy.adapters.kv_account_repository import KeyValueAccountRepository
from bytebuddy.adapters.kv_conversation_repository import (
    KeyValueConversationRepository,
)
from bytebuddy.adapters.kv_log_repository import KeyValueLogRepository
from bytebuddy.adapters.kv_profile_repository import KeyValueProfileRepository
from bytebuddy.adapters.openai_generation_client import OpenAIGenerationClient
from bytebuddy.adapters.supabase_kv_store import SupabaseKeyValueStore
from bytebuddy.adapters.supabase_memory_repository import SupabaseMemoryRepository
from bytebuddy.config import Settings, parse_storage_backend
from bytebuddy.services.accounts import AccountService
from bytebuddy.services.generation import GenerationService
from bytebuddy.services.memory_chat import MemoryChatService
from bytebuddy.services.sessions import SessionManager
from bytebuddy.services.storage import KeyValueStore
from bytebuddy.services.tokens import SessionTokenSigner


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    storage: KeyValueStore
    generation_service: GenerationService
    session_manager: SessionManager
    memory_chat_service: MemoryChatService | None
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client: Client | None = None
    if resolved_settings.supabase_configured:
        supabase_client = create_client(
            resolved_settings.supabase_url, resolved_settings.supabase_service_key
        )

    backend = parse_storage_backend(resolved_settings.storage_backend)
    storage: KeyValueStore
    if backend == "supabase":
        if supabase_client is None:
            raise ValueError("Supabase storage requires SUPABASE_URL and key")
        storage = SupabaseKeyValueStore(supabase_client)
    else:
        storage = JsonFileKeyValueStore.create(resolved_settings.storage_dir)

    openai_client = OpenAIGenerationClient.create(resolved_settings.openai_api_key)
    generation_service = GenerationService(
        client=openai_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
        web_search=resolved_settings.openai_web_search,
    )
    account_service = AccountService(
        repository=KeyValueAccountRepository(storage),
        signer=SessionTokenSigner(
            secret=resolved_settings.session_secret,
            ttl_hours=resolved_settings.session_ttl_hours,
        ),
    )
    session_manager = SessionManager(
        accounts=account_service,
        profile_repository=KeyValueProfileRepository(storage),
        conversation_repository=KeyValueConversationRepository(storage),
        log_repository=KeyValueLogRepository(storage),
        generation=generation_service,
        timezone_name=resolved_settings.timezone,
        water_goal_ml=resolved_settings.water_goal_ml,
        calorie_goal_kcal=resolved_settings.calorie_goal_kcal,
    )
    memory_chat_service = None
    if supabase_client is not None:
        memory_chat_service = MemoryChatService(
            repository=SupabaseMemoryRepository(supabase_client),
            generation=generation_service,
            context_limit=resolved_settings.memory_context_limit,
        )

    async def close_resources() -> None:
        workspace = session_manager.workspace
        if workspace is not None:
            await workspace.close()
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        storage=storage,
        generation_service=generation_service,
        session_manager=session_manager,
        memory_chat_service=memory_chat_service,
        close_resources=close_resources,
    )
