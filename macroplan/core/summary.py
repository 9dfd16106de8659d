"""Intake Summaries - Pure functions for totals, remaining amounts and progress.

All functions are pure: same input always produces same output, no side effects.
"""

from typing import Iterable, Protocol

from .constants import MACRO_KINDS, MACRO_LABELS
from .macros import goal_grams, round_half_up, round_one_decimal, serving_grams, total_calories
from .models import FoodItem, IntakeSummary, MacroGrams, MacroProgress, MacroRatios


class HasMacros(Protocol):
    carbs: float
    protein: float
    fat: float


def aggregate(entries: Iterable[HasMacros]) -> MacroGrams:
    """Sum macros across entries.

    Every entry counts once, in full. An empty list yields zeros.

    Args:
        entries: Meals or anything else exposing carbs/protein/fat

    Returns:
        MacroGrams with the field-wise sums
    """
    totals = MacroGrams()
    for entry in entries:
        totals = MacroGrams(
            carbs=totals.carbs + entry.carbs,
            protein=totals.protein + entry.protein,
            fat=totals.fat + entry.fat,
        )
    return totals


def food_serving(food: FoodItem) -> MacroGrams:
    """Macros for one serving of a food item, one decimal place."""
    return MacroGrams(
        carbs=serving_grams(food.carbs_per_unit, food.serving_size),
        protein=serving_grams(food.protein_per_unit, food.serving_size),
        fat=serving_grams(food.fat_per_unit, food.serving_size),
    )


def aggregate_servings(foods: Iterable[FoodItem]) -> MacroGrams:
    """Sum per-serving macros of food items, keeping one decimal place."""
    totals = aggregate(food_serving(food) for food in foods)
    return MacroGrams(
        carbs=round_one_decimal(totals.carbs),
        protein=round_one_decimal(totals.protein),
        fat=round_one_decimal(totals.fat),
    )


def remaining(goal: MacroGrams, actual: MacroGrams) -> MacroGrams:
    """Goal minus actual per macro. Negative means over goal."""
    return MacroGrams(
        carbs=goal.carbs - actual.carbs,
        protein=goal.protein - actual.protein,
        fat=goal.fat - actual.fat,
    )


def remaining_calories(goal_calories: float, actual_calories: float) -> float:
    """Calories left for the day. Negative means over goal."""
    return goal_calories - actual_calories


def format_signed(value: float) -> str:
    """Format a remaining amount with an explicit sign, e.g. "+115" or "-20".

    The sign follows the unrounded value, so 0.3 shows as "+0".
    """
    rounded = round_half_up(value)
    if value > 0:
        return f"+{rounded}"
    return str(rounded)


def progress_fraction(actual: float, goal: float) -> float:
    """Filled share of the primary progress bar, in [0, 1].

    A zero goal yields 0 whatever the actual amount.
    """
    if goal == 0:
        return 0.0
    return min(max(actual / goal, 0.0), 1.0)


def overflow_fraction(actual: float, goal: float) -> float:
    """Share of the overflow bar past the goal, saturating at a second 100%."""
    if goal == 0 or actual <= goal:
        return 0.0
    return min(max((actual - goal) / goal, 0.0), 1.0)


def percent_of_goal(actual: float, goal: float) -> int:
    """Whole percentage of the goal consumed ("% DV"); 0 for a zero goal."""
    if goal == 0:
        return 0
    return round_half_up(actual / goal * 100)


def macro_progress(label: str, actual: float, goal: float, unit: str = "g") -> MacroProgress:
    return MacroProgress(
        label=label,
        unit=unit,
        current=actual,
        goal=goal,
        fraction=progress_fraction(actual, goal),
        overflow=overflow_fraction(actual, goal),
        percent_of_goal=percent_of_goal(actual, goal),
    )


def summarize_totals(
    totals: MacroGrams,
    entry_count: int,
    daily_calories: float,
    ratios: MacroRatios,
) -> IntakeSummary:
    """Compare already-aggregated totals against the goal.

    Args:
        totals: Aggregated macro grams
        entry_count: Number of entries behind the totals
        daily_calories: Daily calorie goal
        ratios: Active macro ratios

    Returns:
        IntakeSummary with remaining amounts and progress bars
    """
    goal = goal_grams(daily_calories, ratios)
    actual_calories = total_calories(totals)
    calories_left = remaining_calories(daily_calories, actual_calories)

    progress = [
        macro_progress(MACRO_LABELS[macro], getattr(totals, macro), getattr(goal, macro))
        for macro in MACRO_KINDS
    ]
    progress.append(macro_progress("Calories", actual_calories, daily_calories, unit=" kcal"))

    return IntakeSummary(
        totals=totals,
        total_calories=actual_calories,
        goal=goal,
        remaining=remaining(goal, totals),
        remaining_calories=calories_left,
        remaining_calories_label=format_signed(calories_left),
        progress=progress,
        entry_count=entry_count,
    )


def intake_summary(
    entries: list[HasMacros],
    daily_calories: float,
    ratios: MacroRatios,
) -> IntakeSummary:
    """Summarize absolute-gram entries (meals) against the goal."""
    return summarize_totals(aggregate(entries), len(entries), daily_calories, ratios)


def food_library_summary(
    foods: list[FoodItem],
    daily_calories: float,
    ratios: MacroRatios,
) -> IntakeSummary:
    """Summarize per-serving food items against the goal."""
    return summarize_totals(aggregate_servings(foods), len(foods), daily_calories, ratios)
