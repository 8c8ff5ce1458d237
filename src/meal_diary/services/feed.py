"""Diary feed: filtered, sorted and sectioned entries for display."""

import logging
from dataclasses import dataclass

from meal_diary.domain.entries import Entry, EntryFilter
from meal_diary.domain.sorting import SortedSection, SortMethod
from meal_diary.services.entries import EntryRepository
from meal_diary.services.sections import group_by_date, group_into_sections
from meal_diary.services.sorting import CHUNK_SIZE, sort_all, sort_date_desc

_logger = logging.getLogger(__name__)


@dataclass
class EntryFeedService:
    """Builds sectioned views of the diary."""

    repository: EntryRepository
    chunk_size: int = CHUNK_SIZE
    timezone_name: str = "UTC"

    async def sort(self, entries: list[Entry], method: SortMethod | str) -> list[Entry]:
        """Return entries ordered by ``method``."""
        return await sort_all(entries, method, chunk_size=self.chunk_size)

    async def sort_into_sections(
        self, entries: list[Entry], method: SortMethod | str
    ) -> list[SortedSection]:
        """Sort then group entries; falls back to day groups on failure."""
        if not entries:
            return []
        try:
            ordered = await self.sort(entries, method)
            return group_into_sections(
                ordered, method, timezone_name=self.timezone_name
            )
        except Exception:
            _logger.exception("Sectioning by %s failed, grouping by day", method)
            return group_by_date(
                sort_date_desc(entries), timezone_name=self.timezone_name
            )

    async def load_sections(
        self,
        method: SortMethod | str = SortMethod.DATE_DESC,
        entry_filter: EntryFilter | None = None,
    ) -> list[SortedSection]:
        """Load matching entries from the repository and section them."""
        entries = await self.repository.get_filtered(entry_filter)
        return await self.sort_into_sections(entries, method)
