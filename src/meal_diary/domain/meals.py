"""Domain models for meals and nutrition."""

from dataclasses import dataclass, field
from enum import StrEnum


class MealType(StrEnum):
    """Meal slot of a diary entry."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


@dataclass(frozen=True)
class NutritionInfo:
    """Nutrition block of a meal."""

    calories: float
    protein: float
    carbs: float
    fat: float
    fiber: float | None = None
    sugar: float | None = None
    sodium: float | None = None
    water: float | None = None


@dataclass(frozen=True)
class AIInsights:
    """Scores and advice produced by meal analysis."""

    health_score: float
    nutrition_balance: str
    recommendations: list[str] = field(default_factory=list)
    warnings: list[str] | None = None


@dataclass(frozen=True)
class AIAnalysis:
    """Already-computed analysis of a meal photo."""

    detected_meals: list[str]
    confidence: float
    nutrition: NutritionInfo
    meal_category: MealType
    ingredients: list[str] = field(default_factory=list)
    cuisine_type: str | None = None
    comment: str | None = None
    insights: AIInsights | None = None


@dataclass(frozen=True)
class Meal:
    """Food data owned by a diary entry."""

    photo_uri: str
    meal_type: MealType
    nutrition: NutritionInfo | None = None
    ingredients: list[str] | None = None
    ai_analysis: AIAnalysis | None = None
    is_verified: bool | None = None
