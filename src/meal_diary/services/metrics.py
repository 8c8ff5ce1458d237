"""Derived nutrition metrics used for sorting and grouping."""

from meal_diary.domain.entries import Entry

_BASE_HEALTH_SCORE = 50.0
_MAX_FIBER_BONUS = 20.0


def nutrition_density(entry: Entry) -> float:
    """Return protein plus fiber grams per 100 calories."""
    nutrition = entry.meal.nutrition
    if nutrition is None:
        return 0.0
    calories = max(nutrition.calories, 1)
    return (nutrition.protein + (nutrition.fiber or 0.0)) / calories * 100


def health_score(entry: Entry) -> float:
    """Return the analysis health score, or a 0-100 heuristic from macros."""
    analysis = entry.meal.ai_analysis
    if analysis is not None and analysis.insights is not None:
        return analysis.insights.health_score

    nutrition = entry.meal.nutrition
    if nutrition is None or nutrition.calories == 0:
        return 0.0

    protein_ratio = nutrition.protein / nutrition.calories * 100
    fat_ratio = nutrition.fat / nutrition.calories * 100
    fiber_bonus = min((nutrition.fiber or 0.0) * 4, _MAX_FIBER_BONUS)

    score = _BASE_HEALTH_SCORE
    if protein_ratio > 15:
        score += 20
    elif protein_ratio > 10:
        score += 10
    score += fiber_bonus
    if fat_ratio > 35:
        score -= 15
    elif fat_ratio > 30:
        score -= 10
    return max(0.0, min(100.0, score))
