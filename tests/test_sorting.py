"""Tests for entry sorting."""

import asyncio
import logging
import random
from datetime import timedelta

import pytest

from meal_diary.domain.entries import Entry
from meal_diary.domain.sorting import SortMethod
from meal_diary.services import sorting
from meal_diary.services.sorting import (
    compare,
    estimated_duration_ms,
    get_sort_metadata,
    is_expensive,
    merge_sorted,
    sort_all,
    sort_direct,
    sort_options,
)
from tests.conftest import FIXED_NOW, make_entry


def _random_entries(count: int, seed: int = 7) -> list[Entry]:
    rng = random.Random(seed)
    return [
        make_entry(
            f"entry_{index}",
            timestamp=FIXED_NOW - timedelta(minutes=rng.randrange(0, 5000)),
            calories=rng.choice([0, 150, 150, 420, 800, 1200]),
            protein=rng.choice([0, 5, 12, 30]),
            fat=rng.choice([0, 10, 40]),
            fiber=rng.choice([None, 2, 6]),
        )
        for index in range(count)
    ]


def test_sort_options_cover_every_method() -> None:
    options = sort_options()

    assert [option.key for option in options] == list(SortMethod)
    assert options[0].label == "Latest First"


def test_unknown_method_falls_back_to_date_desc() -> None:
    metadata = get_sort_metadata("by-mood")

    assert metadata.key is SortMethod.DATE_DESC


def test_compare_respects_direction() -> None:
    light = make_entry("a", calories=100)
    heavy = make_entry("b", calories=900)

    assert compare(light, heavy, SortMethod.CALORIES_ASC) < 0
    assert compare(light, heavy, SortMethod.CALORIES_DESC) > 0
    assert compare(light, light, SortMethod.CALORIES_DESC) == 0


def test_compare_treats_missing_nutrition_as_zero() -> None:
    unknown = make_entry("a", calories=None)
    snack = make_entry("b", calories=50, protein=3)

    assert compare(unknown, snack, SortMethod.CALORIES_ASC) < 0
    assert compare(unknown, snack, SortMethod.PROTEIN_DESC) > 0


def test_date_sort_orders_by_timestamp() -> None:
    older = make_entry("old", timestamp=FIXED_NOW - timedelta(days=1))
    newer = make_entry("new", timestamp=FIXED_NOW)

    assert [e.id for e in sort_direct([older, newer], SortMethod.DATE_DESC)] == [
        "new",
        "old",
    ]
    assert [e.id for e in sort_direct([newer, older], SortMethod.DATE_ASC)] == [
        "old",
        "new",
    ]


def test_merge_sorted_prefers_left_on_ties() -> None:
    left = [make_entry("left", calories=300)]
    right = [make_entry("right", calories=300)]

    merged = merge_sorted(left, right, SortMethod.CALORIES_DESC)

    assert [entry.id for entry in merged] == ["left", "right"]


@pytest.mark.parametrize("count", [0, 1, 49, 50, 51, 150])
@pytest.mark.parametrize(
    "method",
    [
        SortMethod.DATE_DESC,
        SortMethod.CALORIES_DESC,
        SortMethod.PROTEIN_ASC,
        SortMethod.HEALTH_SCORE_DESC,
        SortMethod.NUTRITION_DENSITY_ASC,
    ],
)
def test_chunked_sort_matches_direct_sort(count: int, method: SortMethod) -> None:
    entries = _random_entries(count)

    chunked = asyncio.run(sort_all(entries, method))

    assert [e.id for e in chunked] == [e.id for e in sort_direct(entries, method)]


@pytest.mark.parametrize("method", list(SortMethod))
@pytest.mark.parametrize("count", [30, 120])
def test_sorting_twice_is_idempotent(method: SortMethod, count: int) -> None:
    entries = _random_entries(count, seed=3)
    entries += [make_entry(f"dup_{e.id}", timestamp=e.timestamp) for e in entries[:5]]
    original_ids = [entry.id for entry in entries]

    once = asyncio.run(sort_all(entries, method, chunk_size=25))
    twice = asyncio.run(sort_all(once, method, chunk_size=25))

    assert [e.id for e in entries] == original_ids
    assert [e.id for e in once] == [e.id for e in twice]


def test_ascending_sort_is_ordered() -> None:
    entries = _random_entries(120, seed=3)

    ordered = asyncio.run(sort_all(entries, SortMethod.CALORIES_ASC, chunk_size=25))

    calories = [e.meal.nutrition.calories for e in ordered]
    assert calories == sorted(calories)


def test_unknown_method_warns_once_per_sort(caplog: pytest.LogCaptureFixture) -> None:
    entries = _random_entries(120)
    logger = logging.getLogger("meal_diary")
    propagate = logger.propagate
    logger.propagate = True
    try:
        with caplog.at_level(logging.WARNING, logger="meal_diary.services.sorting"):
            result = asyncio.run(sort_all(entries, "by-mood"))
    finally:
        logger.propagate = propagate

    warnings = [r for r in caplog.records if "Unknown sort method" in r.getMessage()]
    assert len(warnings) == 1
    assert [e.id for e in result] == [
        e.id for e in sort_direct(entries, SortMethod.DATE_DESC)
    ]


def test_sort_all_falls_back_to_date_desc(monkeypatch: pytest.MonkeyPatch) -> None:
    def broken(entry: Entry) -> float:
        raise RuntimeError("metric unavailable")

    monkeypatch.setattr(sorting, "health_score", broken)
    entries = _random_entries(80)

    result = asyncio.run(sort_all(entries, SortMethod.HEALTH_SCORE_DESC))

    timestamps = [entry.timestamp for entry in result]
    assert timestamps == sorted(timestamps, reverse=True)
    assert len(result) == 80


def test_estimated_duration_steps() -> None:
    assert estimated_duration_ms(0) == 10
    assert estimated_duration_ms(49) == 10
    assert estimated_duration_ms(50) == 50
    assert estimated_duration_ms(199) == 50
    assert estimated_duration_ms(200) == 150
    assert estimated_duration_ms(500) == 300
    assert estimated_duration_ms(999) == 300
    assert estimated_duration_ms(1000) == 500


def test_is_expensive_for_derived_metrics() -> None:
    assert is_expensive(SortMethod.HEALTH_SCORE_ASC)
    assert is_expensive(SortMethod.NUTRITION_DENSITY_DESC)
    assert not is_expensive(SortMethod.CALORIES_DESC)
    assert not is_expensive(SortMethod.DATE_ASC)
