"""Planner - Stateful goal, meal and food library management.

Owns one PersistedSlot per piece of state and persists after every
mutation. All calculations are delegated to the core module.
"""

import logging
from typing import Any

from pydantic import BaseModel

from ..core.constants import (
    DEFAULT_CUSTOM_CARBS,
    DEFAULT_CUSTOM_PROTEIN,
    DEFAULT_DAILY_CALORIES,
    DEFAULT_PRESET,
)
from ..core.goals import (
    UnknownPresetError,
    active_ratios,
    decrement_custom,
    goal_breakdown,
    increment_custom,
    is_known_preset,
    validate_preset_key,
)
from ..core.models import FoodItem, GoalBreakdown, GoalState, IntakeSummary, Meal
from ..core.summary import food_library_summary, intake_summary
from .storage import KeyValueStore, ModelListCodec, PersistedSlot


logger = logging.getLogger(__name__)

EntryT = Meal | FoodItem

UI_FLAGS = ("isCollapsed", "isMealPlanningCollapsed")


class Planner:
    """Single-user nutrition planner backed by a key-value store.

    Slot layout:
        dailyCalories, macroPreset, customCarbs, customProtein,
        isCollapsed, isMealPlanningCollapsed, meals, foods
    """

    def __init__(self, store: KeyValueStore) -> None:
        """Load all state from the store, falling back to defaults.

        Args:
            store: Storage medium
        """
        self.store = store
        self._daily_calories = PersistedSlot(store, "dailyCalories", DEFAULT_DAILY_CALORIES)
        self._preset = PersistedSlot(store, "macroPreset", DEFAULT_PRESET)
        self._custom_carbs = PersistedSlot(store, "customCarbs", DEFAULT_CUSTOM_CARBS)
        self._custom_protein = PersistedSlot(store, "customProtein", DEFAULT_CUSTOM_PROTEIN)
        self._ui_flags = {flag: PersistedSlot(store, flag, False) for flag in UI_FLAGS}
        self._meals: PersistedSlot[list[Meal]] = PersistedSlot(
            store, "meals", [], ModelListCodec(Meal)
        )
        self._foods: PersistedSlot[list[FoodItem]] = PersistedSlot(
            store, "foods", [], ModelListCodec(FoodItem)
        )

        validated = validate_preset_key(self._preset.value)
        if validated != self._preset.value:
            logger.warning(
                "Unknown stored preset %r, resetting to %s", self._preset.value, validated
            )
            self._preset.set(validated)

    # ==================== Goal Operations ====================

    @property
    def goal_state(self) -> GoalState:
        return GoalState(
            daily_calories=self._daily_calories.value,
            selected_preset=self._preset.value,
            custom_carbs=self._custom_carbs.value,
            custom_protein=self._custom_protein.value,
        )

    def goal_breakdown(self) -> GoalBreakdown:
        return goal_breakdown(self.goal_state)

    def set_daily_calories(self, calories: float) -> GoalState:
        logger.info("Setting daily calories: %s", calories)
        self._daily_calories.set(calories)
        return self.goal_state

    def select_preset(self, key: str) -> GoalState:
        """Switch the active distribution.

        Raises:
            UnknownPresetError: If key is not in the catalog
        """
        if not is_known_preset(key):
            raise UnknownPresetError(f"Unknown preset: {key}")
        logger.info("Selecting preset: %s", key)
        self._preset.set(key)
        return self.goal_state

    def set_custom_carbs(self, pct: float) -> GoalState:
        self._custom_carbs.set(pct)
        return self.goal_state

    def set_custom_protein(self, pct: float) -> GoalState:
        self._custom_protein.set(pct)
        return self.goal_state

    def adjust_custom(self, macro: str, step: int) -> GoalState:
        """Apply a +1/-1 custom control. Disabled controls change nothing.

        Raises:
            ValueError: If macro is not carbs or protein, or step is not +-1
        """
        state = self.goal_state
        if step == 1:
            updated = increment_custom(state, macro)
        elif step == -1:
            updated = decrement_custom(state, macro)
        else:
            raise ValueError(f"Step must be 1 or -1, got {step}")

        if updated == state:
            logger.debug("Custom %s control disabled, no change", macro)
            return state

        self._custom_carbs.set(updated.custom_carbs)
        self._custom_protein.set(updated.custom_protein)
        return updated

    # ==================== Entry Helpers ====================

    @staticmethod
    def _add(slot: PersistedSlot, entry: EntryT) -> EntryT:
        slot.set([*slot.value, entry])
        return entry

    @staticmethod
    def _update(slot: PersistedSlot, entry_id: str, updates: dict[str, Any]) -> EntryT | None:
        entries = list(slot.value)
        for i, entry in enumerate(entries):
            if entry.id == entry_id:
                entry_data = entry.model_dump()
                entry_data.update({k: v for k, v in updates.items() if k != "id"})
                entries[i] = type(entry)(**entry_data)
                slot.set(entries)
                return entries[i]

        logger.warning("Entry not found: %s", entry_id)
        return None

    @staticmethod
    def _delete(slot: PersistedSlot, entry_id: str) -> bool:
        entries = [e for e in slot.value if e.id != entry_id]
        if len(entries) == len(slot.value):
            logger.warning("Entry not found: %s", entry_id)
            return False
        slot.set(entries)
        return True

    # ==================== Meal Operations ====================

    def list_meals(self) -> list[Meal]:
        return list(self._meals.value)

    def add_meal(self, name: str | None = None, **macros: float) -> Meal:
        """Append a meal. Without a name it is called "Meal N".

        Args:
            name: Display name
            **macros: carbs, protein and fat in grams (default 0)

        Returns:
            The created meal
        """
        if name is None:
            name = f"Meal {len(self._meals.value) + 1}"
        meal = Meal(name=name, **macros)
        logger.info("Adding meal: %s", meal.name)
        return self._add(self._meals, meal)

    def update_meal(self, meal_id: str, updates: dict[str, Any]) -> Meal | None:
        """Update fields of a meal, leaving the others in place.

        Returns:
            Updated Meal, None if no meal has that id
        """
        return self._update(self._meals, meal_id, updates)

    def delete_meal(self, meal_id: str) -> bool:
        logger.info("Deleting meal: %s", meal_id)
        return self._delete(self._meals, meal_id)

    def meal_summary(self) -> IntakeSummary:
        state = self.goal_state
        return intake_summary(self.list_meals(), state.daily_calories, active_ratios(state))

    # ==================== Food Library Operations ====================

    def list_foods(self) -> list[FoodItem]:
        return list(self._foods.value)

    def add_food(self, food: FoodItem) -> FoodItem:
        logger.info("Adding food: %s", food.name)
        return self._add(self._foods, food)

    def update_food(self, food_id: str, updates: dict[str, Any]) -> FoodItem | None:
        return self._update(self._foods, food_id, updates)

    def delete_food(self, food_id: str) -> bool:
        logger.info("Deleting food: %s", food_id)
        return self._delete(self._foods, food_id)

    def food_summary(self) -> IntakeSummary:
        state = self.goal_state
        return food_library_summary(self.list_foods(), state.daily_calories, active_ratios(state))

    # ==================== UI Flags ====================

    def ui_flags(self) -> dict[str, bool]:
        return {flag: slot.value for flag, slot in self._ui_flags.items()}

    def set_ui_flag(self, flag: str, value: bool) -> dict[str, bool]:
        """Set a collapse/expand flag.

        Raises:
            KeyError: If flag is unknown
        """
        self._ui_flags[flag].set(value)
        return self.ui_flags()


def model_updates(model: type[BaseModel], data: dict[str, Any]) -> dict[str, Any]:
    """Validate a partial update against a model's fields.

    Unknown fields are dropped; known ones are validated by building a model
    from them.

    Raises:
        pydantic.ValidationError: If a provided value is invalid
    """
    known = {k: v for k, v in data.items() if k in model.model_fields and k != "id"}
    validated = model(**known)
    return {k: getattr(validated, k) for k in known}
