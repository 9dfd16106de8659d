"""Goal Derivation - Pure functions over GoalState.

All functions are pure: state changes return a new GoalState.
"""

from .constants import CUSTOM_PRESET, DEFAULT_PRESET, MACRO_PRESETS
from .macros import goal_calories, goal_grams, percentages_from_ratios
from .models import GoalBreakdown, GoalState, MacroRatios, derived_fat_pct  # noqa: F401


ADJUSTABLE_MACROS = ("carbs", "protein")


class UnknownPresetError(ValueError):
    """Raised when selecting a preset key outside the catalog."""


def is_known_preset(key: str) -> bool:
    return key in MACRO_PRESETS


def validate_preset_key(key: str) -> str:
    """Return the key if it is in the catalog, else the default preset."""
    return key if is_known_preset(key) else DEFAULT_PRESET


def active_ratios(state: GoalState) -> MacroRatios:
    """Get the ratio triple currently in effect.

    A concrete preset yields its fixed ratios. The custom preset yields the
    user's percentages with fat derived from the other two.
    """
    if state.selected_preset == CUSTOM_PRESET:
        return MacroRatios(
            carbs=state.custom_carbs / 100,
            protein=state.custom_protein / 100,
            fat=state.custom_fat / 100,
        )
    return MACRO_PRESETS[validate_preset_key(state.selected_preset)].ratios()


def _check_adjustable(macro: str) -> None:
    if macro not in ADJUSTABLE_MACROS:
        raise ValueError(f"Only carbs and protein can be adjusted, not {macro!r}")


def can_increment(state: GoalState) -> bool:
    """Increment is allowed while custom carbs plus protein are under 100."""
    return state.custom_carbs + state.custom_protein < 100


def can_decrement(state: GoalState, macro: str) -> bool:
    _check_adjustable(macro)
    return getattr(state, f"custom_{macro}") > 0


def increment_custom(state: GoalState, macro: str) -> GoalState:
    """Raise a custom percentage by one point, or return state unchanged."""
    _check_adjustable(macro)
    if not can_increment(state):
        return state
    field = f"custom_{macro}"
    return state.model_copy(update={field: getattr(state, field) + 1})


def decrement_custom(state: GoalState, macro: str) -> GoalState:
    """Lower a custom percentage by one point, or return state unchanged."""
    if not can_decrement(state, macro):
        return state
    field = f"custom_{macro}"
    return state.model_copy(update={field: getattr(state, field) - 1})


def goal_breakdown(state: GoalState) -> GoalBreakdown:
    """Derive grams, calories and percentages for the active distribution.

    Args:
        state: The user's goal configuration

    Returns:
        GoalBreakdown with everything the goal editor displays
    """
    ratios = active_ratios(state)
    return GoalBreakdown(
        daily_calories=state.daily_calories,
        selected_preset=state.selected_preset,
        ratios=ratios,
        percentages=percentages_from_ratios(ratios),
        grams=goal_grams(state.daily_calories, ratios),
        calories=goal_calories(state.daily_calories, ratios),
        custom_carbs=state.custom_carbs,
        custom_protein=state.custom_protein,
        custom_fat=state.custom_fat,
        can_increment=can_increment(state),
        can_decrement_carbs=can_decrement(state, "carbs"),
        can_decrement_protein=can_decrement(state, "protein"),
    )
