"""Diary entry repository on top of a key-value store."""

import logging
import math
from collections import Counter
from dataclasses import dataclass
from datetime import UTC, date, datetime, time
from typing import Any
from uuid import uuid4
from zoneinfo import ZoneInfo

from meal_diary.domain.entries import (
    Entry,
    EntryDraft,
    EntryFilter,
    EntryPatch,
    EntryStatistics,
    IngredientCount,
    NutritionStats,
    apply_patch,
)
from meal_diary.domain.meals import MealType, NutritionInfo
from meal_diary.services.entry_records import entry_from_record, entry_to_record
from meal_diary.services.storage import KeyValueStore

ENTRIES_STORAGE_KEY = "@diary_entries"
GUEST_MAX_ENTRIES = 10
_MIN_RATING = 1
_MAX_RATING = 5
_END_OF_DAY = time(23, 59, 59, 999000)

_logger = logging.getLogger(__name__)


class EntryError(Exception):
    """Base error for entry operations."""


class GuestEntryLimitError(EntryError):
    """Raised when a guest has used up the free entry allowance."""

    def __init__(self, limit: int) -> None:
        super().__init__(
            f"Guest entry limit of {limit} reached. Sign in to save more entries."
        )
        self.limit = limit


class EntryNotFoundError(EntryError, LookupError):
    """Raised when an entry id does not exist."""

    def __init__(self, entry_id: str) -> None:
        super().__init__(f"Entry not found: {entry_id}")
        self.entry_id = entry_id


class EntryValidationError(EntryError, ValueError):
    """Raised when entry values are out of range."""


class EntryStorageError(EntryError):
    """Raised when the store fails during a write operation."""


@dataclass
class EntryRepository:
    """Stores the diary as one collection under a single store key."""

    store: KeyValueStore
    guest_max_entries: int = GUEST_MAX_ENTRIES
    storage_key: str = ENTRIES_STORAGE_KEY
    timezone_name: str = "UTC"

    # --- Guest allowance -------------------------------------------------
    async def can_save(self, is_logged_in: bool) -> bool:
        """Return True when another entry may be saved."""
        if is_logged_in:
            return True
        return await self.count() < self.guest_max_entries

    async def remaining(self, is_logged_in: bool) -> float:
        """Return how many entries may still be saved (inf when logged in)."""
        if is_logged_in:
            return math.inf
        return max(0, self.guest_max_entries - await self.count())

    async def count(self) -> int:
        """Return the number of stored records, including unreadable ones."""
        try:
            return len(await self._load_records())
        except Exception:
            _logger.exception("Failed to count entries")
            return 0

    # --- Writes ----------------------------------------------------------
    async def save(self, draft: EntryDraft, is_logged_in: bool = False) -> Entry:
        """Create an entry, newest first in the stored collection."""
        if not is_logged_in and not await self.can_save(is_logged_in):
            raise GuestEntryLimitError(self.guest_max_entries)
        now = datetime.now(tz=UTC)
        entry = Entry(
            id=_generate_entry_id(now),
            user_id=draft.user_id,
            timestamp=draft.timestamp,
            notes=draft.notes,
            meal=draft.meal,
            created_at=now,
            updated_at=now,
            location=draft.location,
            rating=draft.rating,
            would_eat_again=draft.would_eat_again,
        )
        validate_entry(entry)
        try:
            records = await self._load_records()
            await self.store.set(self.storage_key, [entry_to_record(entry), *records])
        except Exception as exc:
            _logger.exception("Failed to save entry")
            raise EntryStorageError("Failed to save entry") from exc
        _logger.info("Saved entry %s", entry.id)
        return entry

    async def update(self, entry_id: str, patch: EntryPatch) -> Entry:
        """Apply a partial update and return the updated entry."""
        try:
            records = await self._load_records()
        except Exception as exc:
            _logger.exception("Failed to load entries for update")
            raise EntryStorageError("Failed to update entry") from exc

        index = _find_record(records, entry_id)
        if index is None:
            raise EntryNotFoundError(entry_id)
        try:
            current = entry_from_record(records[index])
        except (KeyError, TypeError, ValueError) as exc:
            _logger.exception("Stored entry %s is unreadable", entry_id)
            raise EntryStorageError("Failed to update entry") from exc
        updated = apply_patch(current, patch, datetime.now(tz=UTC))
        validate_entry(updated)
        records[index] = entry_to_record(updated)
        try:
            await self.store.set(self.storage_key, records)
        except Exception as exc:
            _logger.exception("Failed to update entry %s", entry_id)
            raise EntryStorageError("Failed to update entry") from exc
        return updated

    async def delete(self, entry_id: str) -> None:
        """Remove an entry. Unknown ids are ignored."""
        try:
            records = await self._load_records()
            remaining = [record for record in records if record.get("id") != entry_id]
            await self.store.set(self.storage_key, remaining)
        except Exception as exc:
            _logger.exception("Failed to delete entry %s", entry_id)
            raise EntryStorageError("Failed to delete entry") from exc

    async def clear_all(self) -> None:
        """Remove every stored entry."""
        try:
            await self.store.remove(self.storage_key)
        except Exception as exc:
            _logger.exception("Failed to clear entries")
            raise EntryStorageError("Failed to clear entries") from exc

    # --- Reads -----------------------------------------------------------
    async def get_all(self) -> list[Entry]:
        """Return all entries in stored order, or [] when the store fails."""
        try:
            records = await self._load_records()
        except Exception:
            _logger.exception("Failed to read entries")
            return []
        entries: list[Entry] = []
        for idx, record in enumerate(records):
            try:
                entries.append(entry_from_record(record))
            except (KeyError, TypeError, ValueError) as exc:
                _logger.warning("Skipping invalid entry record at index %s: %s", idx, exc)
        return entries

    async def get_by_id(self, entry_id: str) -> Entry | None:
        """Return an entry by id, if present."""
        for entry in await self.get_all():
            if entry.id == entry_id:
                return entry
        return None

    async def get_filtered(self, entry_filter: EntryFilter | None = None) -> list[Entry]:
        """Return entries newest first, narrowed by every set filter field."""
        entry_filter = entry_filter or EntryFilter()
        entries = sorted(
            await self.get_all(), key=lambda entry: entry.timestamp, reverse=True
        )
        if entry_filter.start_date is not None:
            entries = [e for e in entries if e.timestamp >= entry_filter.start_date]
        if entry_filter.end_date is not None:
            entries = [e for e in entries if e.timestamp <= entry_filter.end_date]
        if entry_filter.meal_type is not None:
            entries = [e for e in entries if e.meal.meal_type == entry_filter.meal_type]
        if entry_filter.search_query:
            query = entry_filter.search_query.lower()
            entries = [e for e in entries if _matches_query(e, query)]
        return entries

    async def get_recent(self, limit: int = 8) -> list[Entry]:
        """Return the most recent entries."""
        return (await self.get_filtered())[:limit]

    async def get_for_date(self, day: date) -> list[Entry]:
        """Return entries within one local calendar day."""
        tz = ZoneInfo(self.timezone_name)
        return await self.get_filtered(
            EntryFilter(
                start_date=datetime.combine(day, time.min, tzinfo=tz),
                end_date=datetime.combine(day, _END_OF_DAY, tzinfo=tz),
            )
        )

    async def get_today(self) -> list[Entry]:
        """Return today's entries in the configured timezone."""
        tz = ZoneInfo(self.timezone_name)
        return await self.get_for_date(datetime.now(tz=tz).date())

    async def get_nutrition_stats(
        self, start: datetime, end: datetime
    ) -> NutritionStats:
        """Return nutrition totals for entries between ``start`` and ``end``."""
        entries = await self.get_filtered(EntryFilter(start_date=start, end_date=end))
        if not entries:
            return NutritionStats(
                total_entries=0,
                average_calories=0,
                total_nutrition=NutritionInfo(0.0, 0.0, 0.0, 0.0),
            )
        total = _sum_nutrition(entries)
        return NutritionStats(
            total_entries=len(entries),
            average_calories=_round_half_up(total.calories / len(entries)),
            total_nutrition=total,
        )

    async def get_statistics(
        self, entry_filter: EntryFilter | None = None, top_ingredients: int = 5
    ) -> EntryStatistics:
        """Return averages, top ingredients and meal-type counts."""
        entries = await self.get_filtered(entry_filter)
        distribution = dict.fromkeys(MealType, 0)
        ingredients: Counter[str] = Counter()
        for entry in entries:
            distribution[entry.meal.meal_type] += 1
            for ingredient in entry.meal.ingredients or []:
                name = ingredient.strip().lower()
                if name:
                    ingredients[name] += 1

        count = max(len(entries), 1)
        total = _sum_nutrition(entries)
        return EntryStatistics(
            total_entries=len(entries),
            average_calories=_round_half_up(total.calories / count),
            average_nutrition=NutritionInfo(
                calories=total.calories / count,
                protein=total.protein / count,
                carbs=total.carbs / count,
                fat=total.fat / count,
                fiber=(total.fiber or 0.0) / count,
            ),
            top_ingredients=[
                IngredientCount(name=name, count=seen)
                for name, seen in ingredients.most_common(top_ingredients)
            ],
            meal_type_distribution=distribution,
        )

    async def _load_records(self) -> list[dict[str, Any]]:
        stored = await self.store.get(self.storage_key)
        if not stored:
            return []
        if not isinstance(stored, list):
            raise TypeError(f"Unexpected entries payload: {type(stored).__name__}")
        return list(stored)


def validate_entry(entry: Entry) -> None:
    """Reject negative nutrition values and ratings outside 1-5."""
    if entry.rating is not None and not _MIN_RATING <= entry.rating <= _MAX_RATING:
        raise EntryValidationError(f"Rating must be between 1 and 5, got {entry.rating}")
    nutrition_blocks = [entry.meal.nutrition]
    if entry.meal.ai_analysis is not None:
        nutrition_blocks.append(entry.meal.ai_analysis.nutrition)
    for nutrition in nutrition_blocks:
        if nutrition is None:
            continue
        for name, value in vars(nutrition).items():
            if value is not None and value < 0:
                raise EntryValidationError(f"{name} cannot be negative, got {value}")


def _generate_entry_id(now: datetime) -> str:
    return f"entry_{int(now.timestamp() * 1000)}_{uuid4().hex[:9]}"


def _find_record(records: list[dict[str, Any]], entry_id: str) -> int | None:
    for index, record in enumerate(records):
        if record.get("id") == entry_id:
            return index
    return None


def _matches_query(entry: Entry, query: str) -> bool:
    if query in entry.notes.lower():
        return True
    return any(query in ingredient.lower() for ingredient in entry.meal.ingredients or [])


def _sum_nutrition(entries: list[Entry]) -> NutritionInfo:
    total = NutritionInfo(0.0, 0.0, 0.0, 0.0, fiber=0.0)
    for entry in entries:
        nutrition = entry.meal.nutrition
        if nutrition is None:
            continue
        total = NutritionInfo(
            calories=total.calories + nutrition.calories,
            protein=total.protein + nutrition.protein,
            carbs=total.carbs + nutrition.carbs,
            fat=total.fat + nutrition.fat,
            fiber=(total.fiber or 0.0) + (nutrition.fiber or 0.0),
        )
    return total


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)
