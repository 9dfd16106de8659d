"""Unit tests for goal derivation - pure functions, no mocks needed."""

import pytest

from macroplan.core.models import GoalState, MacroGrams, MacroRatios
from macroplan.core.goals import (
    active_ratios,
    can_decrement,
    can_increment,
    decrement_custom,
    derived_fat_pct,
    goal_breakdown,
    increment_custom,
    is_known_preset,
    validate_preset_key,
)


class TestPresetValidation:
    """Tests for is_known_preset and validate_preset_key."""

    def test_known_preset(self):
        assert is_known_preset("keto")
        assert validate_preset_key("keto") == "keto"

    def test_custom_is_known(self):
        assert validate_preset_key("custom") == "custom"

    def test_unknown_falls_back_to_balanced(self):
        assert not is_known_preset("paleo")
        assert validate_preset_key("paleo") == "balanced"


class TestDerivedFat:
    """Tests for derived_fat_pct and GoalState.custom_fat."""

    def test_remainder(self):
        assert derived_fat_pct(40, 30) == 30

    def test_floors_at_zero(self):
        """Carbs plus protein over 100 leaves fat at 0, not negative."""
        assert derived_fat_pct(70, 40) == 0

    def test_state_property(self):
        state = GoalState(selected_preset="custom", custom_carbs=50, custom_protein=20)
        assert state.custom_fat == 30


class TestActiveRatios:
    """Tests for active_ratios."""

    def test_concrete_preset(self):
        """A concrete preset gives its fixed triple."""
        state = GoalState(selected_preset="keto", custom_carbs=10, custom_protein=10)
        assert active_ratios(state) == MacroRatios(carbs=0.05, protein=0.2, fat=0.75)

    def test_custom_uses_percentages(self):
        """Custom ratios come from the stored percentages."""
        state = GoalState(selected_preset="custom", custom_carbs=50, custom_protein=20)
        assert active_ratios(state) == MacroRatios(carbs=0.5, protein=0.2, fat=0.3)

    def test_custom_over_100(self):
        """Carbs+protein over 100 keeps both and floors fat."""
        state = GoalState(selected_preset="custom", custom_carbs=80, custom_protein=40)
        ratios = active_ratios(state)
        assert ratios == MacroRatios(carbs=0.8, protein=0.4, fat=0)


class TestCustomControls:
    """Tests for the +1/-1 custom controls."""

    def test_increment_by_one(self):
        state = GoalState(selected_preset="custom", custom_carbs=40, custom_protein=30)
        assert increment_custom(state, "carbs").custom_carbs == 41
        assert increment_custom(state, "protein").custom_protein == 31

    def test_increment_disabled_at_100(self):
        """70% carbs + 30% protein disables increment; fat is 0."""
        state = GoalState(selected_preset="custom", custom_carbs=70, custom_protein=30)
        assert not can_increment(state)
        assert increment_custom(state, "carbs") == state
        assert increment_custom(state, "protein") == state
        assert state.custom_fat == 0

    def test_decrement_by_one(self):
        state = GoalState(selected_preset="custom", custom_carbs=40, custom_protein=30)
        assert decrement_custom(state, "carbs").custom_carbs == 39

    def test_decrement_disabled_at_zero(self):
        state = GoalState(selected_preset="custom", custom_carbs=0, custom_protein=30)
        assert not can_decrement(state, "carbs")
        assert decrement_custom(state, "carbs") == state
        assert can_decrement(state, "protein")

    def test_decrement_allowed_when_sum_at_100(self):
        state = GoalState(selected_preset="custom", custom_carbs=70, custom_protein=30)
        assert decrement_custom(state, "carbs").custom_carbs == 69

    def test_fat_cannot_be_adjusted(self):
        state = GoalState(selected_preset="custom")
        with pytest.raises(ValueError):
            increment_custom(state, "fat")
        with pytest.raises(ValueError):
            decrement_custom(state, "fat")


class TestGoalBreakdown:
    """Tests for goal_breakdown."""

    def test_balanced_default(self):
        breakdown = goal_breakdown(GoalState())
        assert breakdown.grams == MacroGrams(carbs=225, protein=125, fat=67)
        assert breakdown.percentages.carbs == 45
        assert breakdown.percentages.fat == 30
        assert breakdown.custom_fat == 30

    def test_zero_calories(self):
        breakdown = goal_breakdown(GoalState(daily_calories=0))
        assert breakdown.grams == MacroGrams(carbs=0, protein=0, fat=0)

    def test_very_high_calories(self):
        breakdown = goal_breakdown(GoalState(daily_calories=10000))
        assert breakdown.grams == MacroGrams(carbs=1125, protein=625, fat=333)

    def test_custom_over_100_percentages(self):
        """Displayed percentages can exceed 100 in total."""
        state = GoalState(selected_preset="custom", custom_carbs=80, custom_protein=40)
        breakdown = goal_breakdown(state)
        pct = breakdown.percentages
        assert (pct.carbs, pct.protein, pct.fat) == (80, 40, 0)
        assert not breakdown.can_increment
