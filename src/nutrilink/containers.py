"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutrilink.adapters.fatsecret_client import HttpxFatSecretClient
from nutrilink.adapters.json_snapshot_repository import JsonSnapshotRepository
from nutrilink.adapters.supabase_snapshot_repository import (
    SupabaseSnapshotRepository,
)
from nutrilink.config import Settings
from nutrilink.services.accounts import AccountService
from nutrilink.services.cache import InMemoryCache
from nutrilink.services.clock import Clock, SystemClock, today
from nutrilink.services.coaching import CoachingService
from nutrilink.services.diary import DiaryService
from nutrilink.services.nutrition import NutritionService
from nutrilink.services.relationships import RelationshipService
from nutrilink.services.sample_data import preload_if_needed
from nutrilink.services.store import EntityStore, SnapshotRepository


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    clock: Clock
    store: EntityStore
    account_service: AccountService
    relationship_service: RelationshipService
    coaching_service: CoachingService
    diary_service: DiaryService
    nutrition_service: NutritionService
    close_resources: Callable[[], Awaitable[None]]


def build_snapshot_repository(settings: Settings) -> SnapshotRepository:
    """Pick the persistence backend named in settings."""
    if settings.storage_backend == "supabase":
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ValueError("Supabase storage needs SUPABASE_URL and a service key")
        client = create_client(settings.supabase_url, settings.supabase_service_key)
        return SupabaseSnapshotRepository(client, name=settings.supabase_snapshot_name)
    return JsonSnapshotRepository(settings.store_path)


def build_container(
    settings: Settings | None = None, clock: Clock | None = None
) -> AppContainer:
    """Create the default dependency container and load the store."""
    resolved_settings = settings or Settings()
    resolved_clock = clock or SystemClock(resolved_settings.timezone)
    store = EntityStore(
        repository=build_snapshot_repository(resolved_settings),
        now=resolved_clock.now,
    )
    store.load()
    if resolved_settings.seed_sample_data:
        preload_if_needed(store, today(resolved_clock))

    fatsecret_client = HttpxFatSecretClient.create(
        client_id=resolved_settings.fatsecret_client_id,
        client_secret=resolved_settings.fatsecret_client_secret,
        token_url=resolved_settings.fatsecret_token_url,
        search_url=resolved_settings.fatsecret_search_url,
        scope=resolved_settings.fatsecret_scope,
    )
    nutrition_service = NutritionService(
        client=fatsecret_client,
        cache=InMemoryCache(),
        max_results=resolved_settings.fatsecret_max_results,
    )

    async def close_resources() -> None:
        await fatsecret_client.close()

    return AppContainer(
        settings=resolved_settings,
        clock=resolved_clock,
        store=store,
        account_service=AccountService(store),
        relationship_service=RelationshipService(store),
        coaching_service=CoachingService(store),
        diary_service=DiaryService(store, resolved_clock),
        nutrition_service=nutrition_service,
        close_resources=close_resources,
    )
