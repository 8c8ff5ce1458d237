"""Dependency container wiring for the application."""

from dataclasses import dataclass

from supabase import create_client

from meal_diary.adapters.supabase_kv_store import SupabaseKeyValueStore
from meal_diary.config import Settings
from meal_diary.services.entries import EntryRepository
from meal_diary.services.feed import EntryFeedService
from meal_diary.services.storage import KeyValueStore


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    store: KeyValueStore
    entry_repository: EntryRepository
    feed_service: EntryFeedService


def build_container(
    settings: Settings | None = None, store: KeyValueStore | None = None
) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    if store is None:
        supabase_client = create_client(
            resolved_settings.supabase_url, resolved_settings.supabase_service_key
        )
        store = SupabaseKeyValueStore(
            supabase_client, table=resolved_settings.supabase_kv_table
        )
    entry_repository = EntryRepository(
        store=store,
        guest_max_entries=resolved_settings.guest_max_entries,
        storage_key=resolved_settings.entries_storage_key,
        timezone_name=resolved_settings.timezone,
    )
    feed_service = EntryFeedService(
        repository=entry_repository,
        chunk_size=resolved_settings.sort_chunk_size,
        timezone_name=resolved_settings.timezone,
    )
    return AppContainer(
        settings=resolved_settings,
        store=store,
        entry_repository=entry_repository,
        feed_service=feed_service,
    )
