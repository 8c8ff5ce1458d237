"""Conversion between entries and their stored JSON records."""

from datetime import UTC, datetime
from typing import Any

from meal_diary.domain.entries import Entry, Location
from meal_diary.domain.meals import (
    AIAnalysis,
    AIInsights,
    Meal,
    MealType,
    NutritionInfo,
)

_OPTIONAL_NUTRIENTS = ("fiber", "sugar", "sodium", "water")


def entry_to_record(entry: Entry) -> dict[str, Any]:
    """Serialize an entry into a JSON-compatible record."""
    record: dict[str, Any] = {
        "id": entry.id,
        "userId": entry.user_id,
        "timestamp": entry.timestamp.isoformat(),
        "notes": entry.notes,
        "meal": _meal_to_record(entry.meal),
        "createdAt": entry.created_at.isoformat(),
        "updatedAt": entry.updated_at.isoformat(),
    }
    if entry.location is not None:
        record["location"] = {
            "latitude": entry.location.latitude,
            "longitude": entry.location.longitude,
            "address": entry.location.address,
        }
    if entry.rating is not None:
        record["rating"] = entry.rating
    if entry.would_eat_again is not None:
        record["wouldEatAgain"] = entry.would_eat_again
    return record


def entry_from_record(record: dict[str, Any]) -> Entry:
    """Revive an entry from a stored record.

    Raises KeyError, TypeError or ValueError for malformed records.
    """
    location = record.get("location")
    return Entry(
        id=str(record["id"]),
        user_id=str(record.get("userId", "")),
        timestamp=parse_datetime(record["timestamp"]),
        notes=str(record.get("notes") or ""),
        meal=_meal_from_record(record["meal"]),
        created_at=parse_datetime(record["createdAt"]),
        updated_at=parse_datetime(record["updatedAt"]),
        location=(
            Location(
                latitude=float(location["latitude"]),
                longitude=float(location["longitude"]),
                address=location.get("address"),
            )
            if location
            else None
        ),
        rating=int(record["rating"]) if record.get("rating") is not None else None,
        would_eat_again=record.get("wouldEatAgain"),
    )


def parse_datetime(value: object) -> datetime:
    """Parse an ISO-8601 string or epoch milliseconds into an aware datetime."""
    if isinstance(value, int | float):
        return datetime.fromtimestamp(value / 1000, tz=UTC)
    parsed = datetime.fromisoformat(str(value))
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed


def nutrition_to_record(nutrition: NutritionInfo) -> dict[str, float]:
    record = {
        "calories": nutrition.calories,
        "protein": nutrition.protein,
        "carbs": nutrition.carbs,
        "fat": nutrition.fat,
    }
    for name in _OPTIONAL_NUTRIENTS:
        value = getattr(nutrition, name)
        if value is not None:
            record[name] = value
    return record


def nutrition_from_record(record: dict[str, Any]) -> NutritionInfo:
    optional = {
        name: float(record[name])
        for name in _OPTIONAL_NUTRIENTS
        if record.get(name) is not None
    }
    return NutritionInfo(
        calories=float(record.get("calories", 0.0)),
        protein=float(record.get("protein", 0.0)),
        carbs=float(record.get("carbs", 0.0)),
        fat=float(record.get("fat", 0.0)),
        **optional,
    )


def _meal_to_record(meal: Meal) -> dict[str, Any]:
    record: dict[str, Any] = {
        "photoUri": meal.photo_uri,
        "mealType": meal.meal_type.value,
    }
    if meal.nutrition is not None:
        record["nutrition"] = nutrition_to_record(meal.nutrition)
    if meal.ingredients is not None:
        record["ingredients"] = list(meal.ingredients)
    if meal.ai_analysis is not None:
        record["aiAnalysis"] = _analysis_to_record(meal.ai_analysis)
    if meal.is_verified is not None:
        record["isVerified"] = meal.is_verified
    return record


def _meal_from_record(record: dict[str, Any]) -> Meal:
    nutrition = record.get("nutrition")
    analysis = record.get("aiAnalysis")
    ingredients = record.get("ingredients")
    return Meal(
        photo_uri=str(record.get("photoUri", "")),
        meal_type=MealType(record["mealType"]),
        nutrition=nutrition_from_record(nutrition) if nutrition else None,
        ingredients=[str(item) for item in ingredients]
        if ingredients is not None
        else None,
        ai_analysis=_analysis_from_record(analysis) if analysis else None,
        is_verified=record.get("isVerified"),
    )


def _analysis_to_record(analysis: AIAnalysis) -> dict[str, Any]:
    record: dict[str, Any] = {
        "detectedMeals": list(analysis.detected_meals),
        "confidence": analysis.confidence,
        "nutrition": nutrition_to_record(analysis.nutrition),
        "mealCategory": analysis.meal_category.value,
        "ingredients": list(analysis.ingredients),
        "cuisineType": analysis.cuisine_type,
        "comment": analysis.comment,
    }
    if analysis.insights is not None:
        record["insights"] = {
            "healthScore": analysis.insights.health_score,
            "nutritionBalance": analysis.insights.nutrition_balance,
            "recommendations": list(analysis.insights.recommendations),
            "warnings": analysis.insights.warnings,
        }
    return record


def _analysis_from_record(record: dict[str, Any]) -> AIAnalysis:
    insights = record.get("insights")
    return AIAnalysis(
        detected_meals=list(record.get("detectedMeals", [])),
        confidence=float(record.get("confidence", 0.0)),
        nutrition=nutrition_from_record(record.get("nutrition") or {}),
        meal_category=MealType(record["mealCategory"]),
        ingredients=list(record.get("ingredients", [])),
        cuisine_type=record.get("cuisineType"),
        comment=record.get("comment"),
        insights=(
            AIInsights(
                health_score=float(insights["healthScore"]),
                nutrition_balance=str(insights.get("nutritionBalance", "")),
                recommendations=list(insights.get("recommendations", [])),
                warnings=insights.get("warnings"),
            )
            if insights
            else None
        ),
    )
