"""Diary entry endpoints."""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import TYPE_CHECKING

from fastapi import APIRouter, Header, HTTPException, Request, Response, status

from meal_diary.api.models import EntryCreate, EntryUpdate, ensure_aware
from meal_diary.domain.entries import EntryFilter
from meal_diary.domain.meals import MealType  # noqa: TC001
from meal_diary.domain.sorting import SortMethod
from meal_diary.services.entries import (
    EntryNotFoundError,
    EntryStorageError,
    EntryValidationError,
    GuestEntryLimitError,
)
from meal_diary.services.entry_records import entry_to_record, nutrition_to_record
from meal_diary.services.sorting import (
    estimated_duration_ms,
    is_expensive,
    sort_options,
)

if TYPE_CHECKING:
    from meal_diary.containers import AppContainer
    from meal_diary.domain.entries import Entry

router = APIRouter(prefix="/entries", tags=["entries"])

GUEST_USER_ID = "guest"
_UNPROCESSABLE = 422


def _container(request: Request) -> AppContainer:
    return request.app.state.container


def _filter(
    start: datetime | None,
    end: datetime | None,
    meal_type: MealType | None,
    q: str | None,
) -> EntryFilter:
    return EntryFilter(
        start_date=ensure_aware(start) if start else None,
        end_date=ensure_aware(end) if end else None,
        meal_type=meal_type,
        search_query=q,
    )


def _records(entries: list[Entry]) -> list[dict[str, object]]:
    return [entry_to_record(entry) for entry in entries]


@router.get("")
async def list_entries(
    request: Request,
    start: datetime | None = None,
    end: datetime | None = None,
    meal_type: MealType | None = None,
    q: str | None = None,
) -> dict[str, object]:
    """Return entries newest first, optionally filtered."""
    repository = _container(request).entry_repository
    entries = await repository.get_filtered(_filter(start, end, meal_type, q))
    return {"entries": _records(entries)}


@router.get("/sorted")
async def sorted_entries(  # noqa: PLR0913
    request: Request,
    method: SortMethod = SortMethod.DATE_DESC,
    start: datetime | None = None,
    end: datetime | None = None,
    meal_type: MealType | None = None,
    q: str | None = None,
) -> dict[str, object]:
    """Return entries sorted by ``method`` and grouped into sections."""
    feed_service = _container(request).feed_service
    sections = await feed_service.load_sections(
        method, _filter(start, end, meal_type, q)
    )
    total = sum(len(section.data) for section in sections)
    return {
        "method": method.value,
        "estimated_ms": estimated_duration_ms(total),
        "expensive": is_expensive(method),
        "sections": [
            {"title": section.title, "data": _records(section.data)}
            for section in sections
        ],
    }


@router.get("/sort-options")
async def list_sort_options() -> dict[str, object]:
    """Return available sort methods with display metadata."""
    return {
        "options": [
            {
                "key": option.key.value,
                "label": option.label,
                "icon": option.icon,
                "description": option.description,
                "ascending": option.ascending,
            }
            for option in sort_options()
        ]
    }


@router.get("/recent")
async def recent_entries(request: Request, limit: int = 8) -> dict[str, object]:
    """Return the most recent entries."""
    entries = await _container(request).entry_repository.get_recent(limit)
    return {"entries": _records(entries)}


@router.get("/today")
async def todays_entries(request: Request) -> dict[str, object]:
    """Return today's entries."""
    entries = await _container(request).entry_repository.get_today()
    return {"entries": _records(entries)}


@router.get("/day/{day}")
async def entries_for_day(day: date, request: Request) -> dict[str, object]:
    """Return entries for one calendar day."""
    entries = await _container(request).entry_repository.get_for_date(day)
    return {"entries": _records(entries)}


@router.get("/stats")
async def nutrition_stats(
    request: Request, start: datetime, end: datetime
) -> dict[str, object]:
    """Return nutrition totals for a date range."""
    stats = await _container(request).entry_repository.get_nutrition_stats(
        ensure_aware(start), ensure_aware(end)
    )
    return {
        "total_entries": stats.total_entries,
        "average_calories": stats.average_calories,
        "total_nutrition": nutrition_to_record(stats.total_nutrition),
    }


@router.get("/statistics")
async def entry_statistics(
    request: Request,
    start: datetime | None = None,
    end: datetime | None = None,
    meal_type: MealType | None = None,
    q: str | None = None,
) -> dict[str, object]:
    """Return averages, top ingredients and meal-type distribution."""
    statistics = await _container(request).entry_repository.get_statistics(
        _filter(start, end, meal_type, q)
    )
    return {
        "total_entries": statistics.total_entries,
        "average_calories": statistics.average_calories,
        "average_nutrition": nutrition_to_record(statistics.average_nutrition),
        "top_ingredients": [
            {"name": item.name, "count": item.count}
            for item in statistics.top_ingredients
        ],
        "meal_type_distribution": {
            meal_type.value: count
            for meal_type, count in statistics.meal_type_distribution.items()
        },
    }


@router.get("/quota")
async def entry_quota(
    request: Request, x_user_id: str | None = Header(default=None)
) -> dict[str, object]:
    """Return whether the caller may save more entries."""
    repository = _container(request).entry_repository
    is_logged_in = bool(x_user_id)
    remaining = await repository.remaining(is_logged_in)
    return {
        "can_save": await repository.can_save(is_logged_in),
        "remaining": None if math.isinf(remaining) else int(remaining),
        "limit": None if is_logged_in else repository.guest_max_entries,
    }


@router.get("/{entry_id}")
async def get_entry(entry_id: str, request: Request) -> dict[str, object]:
    """Return a single entry."""
    entry = await _container(request).entry_repository.get_by_id(entry_id)
    if entry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return entry_to_record(entry)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_entry(
    payload: EntryCreate,
    request: Request,
    x_user_id: str | None = Header(default=None),
) -> dict[str, object]:
    """Create an entry. Guests are limited to a fixed number of entries."""
    repository = _container(request).entry_repository
    try:
        entry = await repository.save(
            payload.to_draft(x_user_id or GUEST_USER_ID),
            is_logged_in=bool(x_user_id),
        )
    except GuestEntryLimitError as exc:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={"code": "guest_limit_reached", "message": str(exc)},
        ) from exc
    except EntryValidationError as exc:
        raise HTTPException(status_code=_UNPROCESSABLE, detail=str(exc)) from exc
    except EntryStorageError as exc:
        raise _storage_unavailable(exc) from exc
    return entry_to_record(entry)


@router.patch("/{entry_id}")
async def update_entry(
    entry_id: str, payload: EntryUpdate, request: Request
) -> dict[str, object]:
    """Apply a partial update to an entry."""
    repository = _container(request).entry_repository
    try:
        entry = await repository.update(entry_id, payload.to_patch())
    except EntryNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND) from exc
    except EntryValidationError as exc:
        raise HTTPException(status_code=_UNPROCESSABLE, detail=str(exc)) from exc
    except EntryStorageError as exc:
        raise _storage_unavailable(exc) from exc
    return entry_to_record(entry)


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_entry(entry_id: str, request: Request) -> Response:
    """Delete an entry; unknown ids succeed."""
    try:
        await _container(request).entry_repository.delete(entry_id)
    except EntryStorageError as exc:
        raise _storage_unavailable(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def clear_entries(request: Request) -> Response:
    """Delete every entry."""
    try:
        await _container(request).entry_repository.clear_all()
    except EntryStorageError as exc:
        raise _storage_unavailable(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


def _storage_unavailable(exc: EntryStorageError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail={"code": "storage_unavailable", "message": str(exc)},
    )
