"""Domain models for diary entries."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Final

from meal_diary.domain.meals import AIAnalysis, Meal, MealType, NutritionInfo


class _Unset:
    """Marker for patch fields that were not provided."""

    _instance: "_Unset | None" = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Final = _Unset()


@dataclass(frozen=True)
class Location:
    """Where a meal was eaten."""

    latitude: float
    longitude: float
    address: str | None = None


@dataclass(frozen=True)
class Entry:
    """A diary entry: one meal at one point in time."""

    id: str
    user_id: str
    timestamp: datetime
    notes: str
    meal: Meal
    created_at: datetime
    updated_at: datetime
    location: Location | None = None
    rating: int | None = None
    would_eat_again: bool | None = None


@dataclass(frozen=True)
class EntryDraft:
    """Entry content supplied by a caller before it is saved."""

    user_id: str
    timestamp: datetime
    meal: Meal
    notes: str = ""
    location: Location | None = None
    rating: int | None = None
    would_eat_again: bool | None = None


@dataclass(frozen=True)
class MealPatch:
    """Partial changes to a meal. Unset fields keep their current value."""

    photo_uri: str | _Unset = UNSET
    meal_type: MealType | _Unset = UNSET
    nutrition: NutritionInfo | None | _Unset = UNSET
    ingredients: list[str] | None | _Unset = UNSET
    ai_analysis: AIAnalysis | None | _Unset = UNSET
    is_verified: bool | None | _Unset = UNSET


@dataclass(frozen=True)
class EntryPatch:
    """Partial changes to an entry.

    There are no ``id`` or ``created_at`` fields; ``updated_at`` is always
    set by the repository.
    """

    user_id: str | _Unset = UNSET
    timestamp: datetime | _Unset = UNSET
    notes: str | _Unset = UNSET
    location: Location | None | _Unset = UNSET
    rating: int | None | _Unset = UNSET
    would_eat_again: bool | None | _Unset = UNSET
    meal: MealPatch | None = None


@dataclass(frozen=True)
class EntryFilter:
    """Optional, combinable filters for listing entries."""

    start_date: datetime | None = None
    end_date: datetime | None = None
    meal_type: MealType | None = None
    search_query: str | None = None


@dataclass(frozen=True)
class NutritionStats:
    """Nutrition totals over a date range."""

    total_entries: int
    average_calories: int
    total_nutrition: NutritionInfo


@dataclass(frozen=True)
class IngredientCount:
    """How often an ingredient appears across entries."""

    name: str
    count: int


@dataclass(frozen=True)
class EntryStatistics:
    """Aggregate view of a set of entries."""

    total_entries: int
    average_calories: int
    average_nutrition: NutritionInfo
    top_ingredients: list[IngredientCount] = field(default_factory=list)
    meal_type_distribution: dict[MealType, int] = field(default_factory=dict)


def _set_fields(patch: object) -> dict[str, object]:
    return {
        name: value
        for name, value in vars(patch).items()
        if value is not UNSET and name != "meal"
    }


def merge_meal(meal: Meal, patch: MealPatch) -> Meal:
    """Return ``meal`` with every set field of ``patch`` applied."""
    return replace(meal, **_set_fields(patch))


def apply_patch(entry: Entry, patch: EntryPatch, updated_at: datetime) -> Entry:
    """Return ``entry`` with ``patch`` applied and ``updated_at`` refreshed."""
    changes = _set_fields(patch)
    if patch.meal is not None:
        changes["meal"] = merge_meal(entry.meal, patch.meal)
    return replace(
        entry,
        **changes,
        id=entry.id,
        created_at=entry.created_at,
        updated_at=updated_at,
    )
