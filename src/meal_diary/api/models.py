"""Pydantic request models for the diary API."""

from datetime import UTC, datetime

from pydantic import BaseModel, Field

from meal_diary.domain.entries import (
    UNSET,
    EntryDraft,
    EntryPatch,
    Location,
    MealPatch,
)
from meal_diary.domain.meals import (
    AIAnalysis,
    AIInsights,
    Meal,
    MealType,
    NutritionInfo,
)


class NutritionPayload(BaseModel):
    """Nutrition block payload."""

    calories: float
    protein: float
    carbs: float
    fat: float
    fiber: float | None = None
    sugar: float | None = None
    sodium: float | None = None
    water: float | None = None

    def to_domain(self) -> NutritionInfo:
        return NutritionInfo(**self.model_dump())


class InsightsPayload(BaseModel):
    """Analysis insights payload."""

    health_score: float = Field(alias="healthScore")
    nutrition_balance: str = Field(default="", alias="nutritionBalance")
    recommendations: list[str] = Field(default_factory=list)
    warnings: list[str] | None = None


class AIAnalysisPayload(BaseModel):
    """Meal analysis payload."""

    detected_meals: list[str] = Field(default_factory=list, alias="detectedMeals")
    confidence: float = 0.0
    nutrition: NutritionPayload
    meal_category: MealType = Field(alias="mealCategory")
    ingredients: list[str] = Field(default_factory=list)
    cuisine_type: str | None = Field(default=None, alias="cuisineType")
    comment: str | None = None
    insights: InsightsPayload | None = None

    def to_domain(self) -> AIAnalysis:
        return AIAnalysis(
            detected_meals=self.detected_meals,
            confidence=self.confidence,
            nutrition=self.nutrition.to_domain(),
            meal_category=self.meal_category,
            ingredients=self.ingredients,
            cuisine_type=self.cuisine_type,
            comment=self.comment,
            insights=(
                AIInsights(**self.insights.model_dump())
                if self.insights is not None
                else None
            ),
        )


class MealPayload(BaseModel):
    """Meal payload for new entries."""

    photo_uri: str = Field(default="", alias="photoUri")
    meal_type: MealType = Field(alias="mealType")
    nutrition: NutritionPayload | None = None
    ingredients: list[str] | None = None
    ai_analysis: AIAnalysisPayload | None = Field(default=None, alias="aiAnalysis")
    is_verified: bool | None = Field(default=None, alias="isVerified")

    def to_domain(self) -> Meal:
        return Meal(
            photo_uri=self.photo_uri,
            meal_type=self.meal_type,
            nutrition=self.nutrition.to_domain() if self.nutrition else None,
            ingredients=self.ingredients,
            ai_analysis=self.ai_analysis.to_domain() if self.ai_analysis else None,
            is_verified=self.is_verified,
        )


class LocationPayload(BaseModel):
    """Location payload."""

    latitude: float
    longitude: float
    address: str | None = None

    def to_domain(self) -> Location:
        return Location(**self.model_dump())


class EntryCreate(BaseModel):
    """Request body for creating an entry."""

    timestamp: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))
    notes: str = ""
    meal: MealPayload
    location: LocationPayload | None = None
    rating: int | None = None
    would_eat_again: bool | None = Field(default=None, alias="wouldEatAgain")

    def to_draft(self, user_id: str) -> EntryDraft:
        return EntryDraft(
            user_id=user_id,
            timestamp=ensure_aware(self.timestamp),
            meal=self.meal.to_domain(),
            notes=self.notes,
            location=self.location.to_domain() if self.location else None,
            rating=self.rating,
            would_eat_again=self.would_eat_again,
        )


class MealUpdate(BaseModel):
    """Partial meal changes; omitted fields are left untouched."""

    photo_uri: str | None = Field(default=None, alias="photoUri")
    meal_type: MealType | None = Field(default=None, alias="mealType")
    nutrition: NutritionPayload | None = None
    ingredients: list[str] | None = None
    ai_analysis: AIAnalysisPayload | None = Field(default=None, alias="aiAnalysis")
    is_verified: bool | None = Field(default=None, alias="isVerified")

    def to_patch(self) -> MealPatch:
        provided = self.model_fields_set
        changes: dict[str, object] = {}
        for name in ("photo_uri", "meal_type"):
            if name in provided and getattr(self, name) is not None:
                changes[name] = getattr(self, name)
        for name in ("ingredients", "is_verified"):
            if name in provided:
                changes[name] = getattr(self, name)
        if "nutrition" in provided:
            changes["nutrition"] = self.nutrition.to_domain() if self.nutrition else None
        if "ai_analysis" in provided:
            changes["ai_analysis"] = (
                self.ai_analysis.to_domain() if self.ai_analysis else None
            )
        return MealPatch(**changes)


class EntryUpdate(BaseModel):
    """Partial entry changes; omitted fields are left untouched."""

    timestamp: datetime | None = None
    notes: str | None = None
    meal: MealUpdate | None = None
    location: LocationPayload | None = None
    rating: int | None = None
    would_eat_again: bool | None = Field(default=None, alias="wouldEatAgain")

    def to_patch(self) -> EntryPatch:
        provided = self.model_fields_set
        return EntryPatch(
            timestamp=(
                ensure_aware(self.timestamp)
                if "timestamp" in provided and self.timestamp is not None
                else UNSET
            ),
            notes=self.notes if "notes" in provided and self.notes is not None else UNSET,
            location=(
                (self.location.to_domain() if self.location else None)
                if "location" in provided
                else UNSET
            ),
            rating=self.rating if "rating" in provided else UNSET,
            would_eat_again=(
                self.would_eat_again if "would_eat_again" in provided else UNSET
            ),
            meal=self.meal.to_patch() if self.meal is not None else None,
        )


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
