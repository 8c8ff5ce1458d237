"""Supabase-backed key-value store."""

import asyncio
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from supabase import Client

from meal_diary.services.storage import KeyValueStore, StoredItem


@dataclass
class SupabaseKeyValueStore(KeyValueStore):
    """Stores each key as one row of a ``key``/``value`` (jsonb) table."""

    client: Client
    table: str = "kv_store"

    async def get(self, key: str) -> Any | None:
        """Return the stored value for a key."""
        response = await asyncio.to_thread(
            lambda: self.client.table(self.table)
            .select("key, value")
            .eq("key", key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0].get("value")

    async def set(self, key: str, value: Any) -> None:
        """Insert or replace the row for a key."""
        payload = {
            "key": key,
            "value": value,
            "updated_at": datetime.now(tz=UTC).isoformat(),
        }
        await asyncio.to_thread(
            lambda: self.client.table(self.table)
            .upsert(payload, on_conflict="key")
            .execute()
        )

    async def remove(self, key: str) -> None:
        """Delete the row for a key."""
        await asyncio.to_thread(
            lambda: self.client.table(self.table).delete().eq("key", key).execute()
        )

    async def get_multiple(self, keys: list[str]) -> list[StoredItem]:
        """Return values for several keys with one query."""
        if not keys:
            return []
        response = await asyncio.to_thread(
            lambda: self.client.table(self.table)
            .select("key, value")
            .in_("key", keys)
            .execute()
        )
        found = {row["key"]: row.get("value") for row in response.data or []}
        return [StoredItem(key=key, value=found.get(key)) for key in keys]

    async def remove_multiple(self, keys: list[str]) -> None:
        """Delete rows for several keys with one query."""
        if not keys:
            return
        await asyncio.to_thread(
            lambda: self.client.table(self.table).delete().in_("key", keys).execute()
        )
