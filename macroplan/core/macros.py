"""Macro Calculations - Pure functions for nutrition math.

All functions are pure: same input always produces same output, no side effects.

Two precision regimes exist and must not be mixed: goal and meal figures
round to whole grams, food-library serving figures round to one decimal.
"""

import math

from .constants import CALORIES_PER_GRAM, MACRO_KINDS, MacroKind
from .models import MacroGrams, MacroPercentages, MacroRatios


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward positive infinity.

    Python's built-in round() uses banker's rounding, which would turn
    0.5 into 0 and 2.5 into 2.
    """
    return math.floor(value + 0.5)


def round_one_decimal(value: float) -> float:
    """Round to one decimal place, halves toward positive infinity."""
    return math.floor(value * 10 + 0.5) / 10


def grams_from_ratio(total_calories: float, ratio: float, macro: MacroKind) -> int:
    """Calculate whole grams of a macronutrient from calories and ratio.

    Args:
        total_calories: Daily calorie goal
        ratio: The macro's share of calories (0-1)
        macro: Which macronutrient

    Returns:
        Grams rounded to the nearest whole gram
    """
    return round_half_up(total_calories * ratio / CALORIES_PER_GRAM[macro])


def precise_grams_from_ratio(total_calories: float, ratio: float, macro: MacroKind) -> float:
    """Calculate grams of a macronutrient, keeping one decimal place.

    Public API for callers that need fractional goal grams; the planner
    itself shows whole-gram goals from grams_from_ratio and computes food
    servings with serving_grams.
    """
    return round_one_decimal(total_calories * ratio / CALORIES_PER_GRAM[macro])


def calories_from_grams(grams: float, macro: MacroKind) -> float:
    """Calculate calories from grams of a macronutrient (no rounding)."""
    return grams * CALORIES_PER_GRAM[macro]


def total_calories(macros: MacroGrams) -> float:
    """Calculate total calories from macro amounts.

    Uses standard conversion: 4 cal/g carbs, 4 cal/g protein, 9 cal/g fat.
    """
    return (
        calories_from_grams(macros.carbs, "carbs")
        + calories_from_grams(macros.protein, "protein")
        + calories_from_grams(macros.fat, "fat")
    )


def goal_grams(daily_calories: float, ratios: MacroRatios) -> MacroGrams:
    """Calculate goal macros in whole grams from daily calories and ratios."""
    return MacroGrams(
        **{
            macro: grams_from_ratio(daily_calories, getattr(ratios, macro), macro)
            for macro in MACRO_KINDS
        }
    )


def goal_calories(daily_calories: float, ratios: MacroRatios) -> MacroGrams:
    """Calculate each macro's share of the calorie goal, whole calories."""
    return MacroGrams(
        **{
            macro: round_half_up(daily_calories * getattr(ratios, macro))
            for macro in MACRO_KINDS
        }
    )


def percentages_from_ratios(ratios: MacroRatios) -> MacroPercentages:
    """Convert macro ratios to whole percentages.

    Each macro is rounded independently, so the result may sum to 99 or 101.
    """
    return MacroPercentages(
        carbs=round_half_up(ratios.carbs * 100),
        protein=round_half_up(ratios.protein * 100),
        fat=round_half_up(ratios.fat * 100),
    )


def serving_grams(per_unit: float, serving_size: float) -> float:
    """Calculate grams for one serving, rounded to one decimal place."""
    return round_one_decimal(per_unit * serving_size)
