"""Sorting of diary entries, including a chunked merge sort for large diaries."""

import asyncio
import logging
from functools import cmp_to_key

from meal_diary.domain.entries import Entry
from meal_diary.domain.sorting import (
    SORT_OPTIONS,
    SortDimension,
    SortMetadata,
    SortMethod,
)
from meal_diary.services.metrics import health_score, nutrition_density

CHUNK_SIZE = 50
_EXPENSIVE_DIMENSIONS = {SortDimension.HEALTH_SCORE, SortDimension.NUTRITION_DENSITY}
_DURATION_STEPS_MS = ((50, 10), (200, 50), (500, 150), (1000, 300))
_MAX_DURATION_MS = 500

_METADATA = {option.key: option for option in SORT_OPTIONS}
_logger = logging.getLogger(__name__)


def sort_options() -> list[SortMetadata]:
    """Return every sort option in display order."""
    return list(SORT_OPTIONS)


def is_known_method(method: SortMethod | str) -> bool:
    """Return True when ``method`` is one of the supported sort tags."""
    return method in _METADATA


def get_sort_metadata(method: SortMethod | str) -> SortMetadata:
    """Return metadata for ``method``; unknown methods fall back to date-desc."""
    try:
        return _METADATA[SortMethod(method)]
    except ValueError:
        _logger.warning("Unknown sort method %r, using date-desc", method)
        return SORT_OPTIONS[0]


def dimension_value(entry: Entry, dimension: SortDimension) -> float:
    """Return the numeric value of ``entry`` along ``dimension``."""
    nutrition = entry.meal.nutrition
    if dimension is SortDimension.CALORIES:
        return nutrition.calories if nutrition else 0.0
    if dimension is SortDimension.PROTEIN:
        return nutrition.protein if nutrition else 0.0
    if dimension is SortDimension.HEALTH_SCORE:
        return health_score(entry)
    if dimension is SortDimension.NUTRITION_DENSITY:
        return nutrition_density(entry)
    return entry.timestamp.timestamp()


def compare(a: Entry, b: Entry, method: SortMethod | str) -> float:
    """Return a negative number when ``a`` sorts before ``b``."""
    return _compare(a, b, get_sort_metadata(method))


def merge_sorted(
    left: list[Entry], right: list[Entry], method: SortMethod | str
) -> list[Entry]:
    """Merge two sorted lists; on ties the ``left`` entry comes first."""
    return _merge(left, right, get_sort_metadata(method))


def sort_direct(entries: list[Entry], method: SortMethod | str) -> list[Entry]:
    """Sort a copy of ``entries`` in one pass with the entry comparator."""
    return _sort(entries, get_sort_metadata(method))


async def sort_all(
    entries: list[Entry], method: SortMethod | str, chunk_size: int = CHUNK_SIZE
) -> list[Entry]:
    """Sort entries, splitting large inputs into concurrently sorted chunks.

    Chunks are merged left to right. Any failure falls back to date-desc
    order so callers always get a usable list.
    """
    try:
        metadata = get_sort_metadata(method)
        if len(entries) <= chunk_size:
            return _sort(entries, metadata)
        chunks = [
            entries[start : start + chunk_size]
            for start in range(0, len(entries), chunk_size)
        ]
        sorted_chunks = await asyncio.gather(
            *(_sort_chunk(chunk, metadata) for chunk in chunks)
        )
        result = sorted_chunks[0]
        for chunk in sorted_chunks[1:]:
            result = _merge(result, chunk, metadata)
        return result
    except Exception:
        _logger.exception("Sorting by %s failed, falling back to date-desc", method)
        return sort_date_desc(entries)


def estimated_duration_ms(count: int) -> int:
    """Return a rough sort time estimate for progress feedback."""
    for threshold, duration in _DURATION_STEPS_MS:
        if count < threshold:
            return duration
    return _MAX_DURATION_MS


def is_expensive(method: SortMethod | str) -> bool:
    """Return True when sorting needs a derived metric per entry."""
    return get_sort_metadata(method).dimension in _EXPENSIVE_DIMENSIONS


def sort_date_desc(entries: list[Entry]) -> list[Entry]:
    """Return a copy of ``entries`` ordered newest first."""
    return sorted(entries, key=lambda entry: entry.timestamp, reverse=True)


def _compare(a: Entry, b: Entry, metadata: SortMetadata) -> float:
    difference = dimension_value(a, metadata.dimension) - dimension_value(
        b, metadata.dimension
    )
    return difference if metadata.ascending else -difference


def _merge(
    left: list[Entry], right: list[Entry], metadata: SortMetadata
) -> list[Entry]:
    merged: list[Entry] = []
    i = j = 0
    while i < len(left) and j < len(right):
        if _compare(left[i], right[j], metadata) <= 0:
            merged.append(left[i])
            i += 1
        else:
            merged.append(right[j])
            j += 1
    merged.extend(left[i:])
    merged.extend(right[j:])
    return merged


def _sort(entries: list[Entry], metadata: SortMetadata) -> list[Entry]:
    return sorted(entries, key=cmp_to_key(lambda a, b: _compare(a, b, metadata)))


async def _sort_chunk(chunk: list[Entry], metadata: SortMetadata) -> list[Entry]:
    await asyncio.sleep(0)
    return _sort(chunk, metadata)
