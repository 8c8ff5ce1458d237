"""Domain models for sorting and sectioning entries."""

import math
from dataclasses import dataclass
from enum import StrEnum

from meal_diary.domain.entries import Entry


class SortMethod(StrEnum):
    """Supported sort orders for diary entries."""

    DATE_DESC = "date-desc"
    DATE_ASC = "date-asc"
    CALORIES_DESC = "calories-desc"
    CALORIES_ASC = "calories-asc"
    PROTEIN_DESC = "protein-desc"
    PROTEIN_ASC = "protein-asc"
    HEALTH_SCORE_DESC = "health-score-desc"
    HEALTH_SCORE_ASC = "health-score-asc"
    NUTRITION_DENSITY_DESC = "nutrition-density-desc"
    NUTRITION_DENSITY_ASC = "nutrition-density-asc"


class SortDimension(StrEnum):
    """Value a sort method orders by."""

    DATE = "date"
    CALORIES = "calories"
    PROTEIN = "protein"
    HEALTH_SCORE = "health-score"
    NUTRITION_DENSITY = "nutrition-density"


@dataclass(frozen=True)
class SortMetadata:
    """Display data and direction for a sort method."""

    key: SortMethod
    label: str
    icon: str
    description: str
    ascending: bool
    dimension: SortDimension


@dataclass(frozen=True)
class SortedSection:
    """Titled group of sorted entries for display."""

    title: str
    data: list[Entry]


@dataclass(frozen=True)
class ValueRange:
    """Half-open bucket ``[minimum, maximum)`` with a display label."""

    minimum: float
    maximum: float
    label: str

    def contains(self, value: float) -> bool:
        return self.minimum <= value < self.maximum


SORT_OPTIONS: tuple[SortMetadata, ...] = (
    SortMetadata(
        SortMethod.DATE_DESC,
        "Latest First",
        "time",
        "Most recent meals first",
        ascending=False,
        dimension=SortDimension.DATE,
    ),
    SortMetadata(
        SortMethod.DATE_ASC,
        "Oldest First",
        "time-outline",
        "Oldest meals first",
        ascending=True,
        dimension=SortDimension.DATE,
    ),
    SortMetadata(
        SortMethod.CALORIES_DESC,
        "Highest Calories",
        "flame",
        "Meals with most calories first",
        ascending=False,
        dimension=SortDimension.CALORIES,
    ),
    SortMetadata(
        SortMethod.CALORIES_ASC,
        "Lowest Calories",
        "flame-outline",
        "Meals with least calories first",
        ascending=True,
        dimension=SortDimension.CALORIES,
    ),
    SortMetadata(
        SortMethod.PROTEIN_DESC,
        "Highest Protein",
        "fitness",
        "High protein meals first",
        ascending=False,
        dimension=SortDimension.PROTEIN,
    ),
    SortMetadata(
        SortMethod.PROTEIN_ASC,
        "Lowest Protein",
        "fitness-outline",
        "Low protein meals first",
        ascending=True,
        dimension=SortDimension.PROTEIN,
    ),
    SortMetadata(
        SortMethod.HEALTH_SCORE_DESC,
        "Healthiest First",
        "heart",
        "Highest health score first",
        ascending=False,
        dimension=SortDimension.HEALTH_SCORE,
    ),
    SortMetadata(
        SortMethod.HEALTH_SCORE_ASC,
        "Least Healthy",
        "heart-outline",
        "Lowest health score first",
        ascending=True,
        dimension=SortDimension.HEALTH_SCORE,
    ),
    SortMetadata(
        SortMethod.NUTRITION_DENSITY_DESC,
        "Most Nutritious",
        "nutrition",
        "Highest nutrition per calorie",
        ascending=False,
        dimension=SortDimension.NUTRITION_DENSITY,
    ),
    SortMetadata(
        SortMethod.NUTRITION_DENSITY_ASC,
        "Least Dense",
        "nutrition-outline",
        "Lowest nutrition density",
        ascending=True,
        dimension=SortDimension.NUTRITION_DENSITY,
    ),
)

RANGE_TABLES: dict[SortDimension, tuple[ValueRange, ...]] = {
    SortDimension.CALORIES: (
        ValueRange(0, 200, "Light (0-200 cal)"),
        ValueRange(200, 400, "Moderate (200-400 cal)"),
        ValueRange(400, 600, "Substantial (400-600 cal)"),
        ValueRange(600, 800, "Large (600-800 cal)"),
        ValueRange(800, math.inf, "Very Large (800+ cal)"),
    ),
    SortDimension.PROTEIN: (
        ValueRange(0, 10, "Low Protein (0-10g)"),
        ValueRange(10, 20, "Moderate Protein (10-20g)"),
        ValueRange(20, 30, "High Protein (20-30g)"),
        ValueRange(30, math.inf, "Very High Protein (30g+)"),
    ),
    SortDimension.HEALTH_SCORE: (
        ValueRange(80, 100, "Excellent (80-100)"),
        ValueRange(60, 80, "Good (60-80)"),
        ValueRange(40, 60, "Fair (40-60)"),
        ValueRange(0, 40, "Poor (0-40)"),
    ),
    SortDimension.NUTRITION_DENSITY: (
        ValueRange(10, math.inf, "Very Dense (10+)"),
        ValueRange(5, 10, "Dense (5-10)"),
        ValueRange(2, 5, "Moderate (2-5)"),
        ValueRange(0, 2, "Low (0-2)"),
    ),
}
