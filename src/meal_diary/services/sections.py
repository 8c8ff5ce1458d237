"""Grouping of sorted entries into titled display sections."""

from collections.abc import Callable
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from meal_diary.domain.entries import Entry
from meal_diary.domain.sorting import (
    RANGE_TABLES,
    SortDimension,
    SortedSection,
    SortMethod,
    ValueRange,
)
from meal_diary.services.sorting import (
    dimension_value,
    get_sort_metadata,
    is_known_method,
)


def group_into_sections(
    sorted_entries: list[Entry],
    method: SortMethod | str,
    *,
    timezone_name: str = "UTC",
    now: datetime | None = None,
) -> list[SortedSection]:
    """Group already-sorted entries by day or by the method's value ranges."""
    if not sorted_entries:
        return []
    metadata = get_sort_metadata(method)
    catch_all = [
        SortedSection(title=f"All Entries ({metadata.label})", data=sorted_entries)
    ]
    if not is_known_method(method):
        return catch_all
    if metadata.dimension is SortDimension.DATE:
        return group_by_date(sorted_entries, timezone_name=timezone_name, now=now)
    table = RANGE_TABLES.get(metadata.dimension)
    if table is None:
        return catch_all
    # Sections run in the same direction as the entries inside them.
    ranges = tuple(
        sorted(table, key=lambda item: item.minimum, reverse=not metadata.ascending)
    )
    return group_by_ranges(
        sorted_entries,
        ranges,
        lambda entry: dimension_value(entry, metadata.dimension),
    )


def group_by_date(
    entries: list[Entry], *, timezone_name: str = "UTC", now: datetime | None = None
) -> list[SortedSection]:
    """Group entries by local calendar day, newest day first."""
    tz = ZoneInfo(timezone_name)
    today = (now or datetime.now(tz=tz)).astimezone(tz).date()
    days: dict[date, list[Entry]] = {}
    for entry in entries:
        days.setdefault(entry.timestamp.astimezone(tz).date(), []).append(entry)
    return [
        SortedSection(title=day_title(day, today), data=days[day])
        for day in sorted(days, reverse=True)
    ]


def group_by_ranges(
    entries: list[Entry],
    ranges: tuple[ValueRange, ...],
    value_of: Callable[[Entry], float],
) -> list[SortedSection]:
    """Bucket entries into ``ranges``; empty buckets produce no section."""
    sections: list[SortedSection] = []
    for value_range in ranges:
        matching = [entry for entry in entries if value_range.contains(value_of(entry))]
        if matching:
            sections.append(
                SortedSection(
                    title=f"{value_range.label} ({len(matching)})", data=matching
                )
            )
    return sections


def day_title(day: date, today: date) -> str:
    """Return "Today", "Yesterday" or a weekday, month and day label."""
    if day == today:
        return "Today"
    if day == today - timedelta(days=1):
        return "Yesterday"
    return f"{day:%A}, {day:%b} {day.day}"
