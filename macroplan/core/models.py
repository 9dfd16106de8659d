"""Core Data Models - Pydantic models for type safety.

Numeric fields are unconstrained apart from rejecting NaN and infinity:
zero, negative and oversized values flow through the calculations unchanged.
"""

import uuid

from pydantic import BaseModel, ConfigDict, Field


def new_entry_id() -> str:
    """Generate a unique identifier for a meal or food entry."""
    return uuid.uuid4().hex


def derived_fat_pct(carbs_pct: float, protein_pct: float) -> float:
    """Fat percentage implied by custom carbs and protein, floored at zero."""
    return max(0, 100 - carbs_pct - protein_pct)


class MacroRatios(BaseModel):
    """Share of total calories per macronutrient, as fractions."""

    carbs: float = 0
    protein: float = 0
    fat: float = 0


class MacroGrams(BaseModel):
    """Absolute amounts per macronutrient, in grams."""

    carbs: float = 0
    protein: float = 0
    fat: float = 0


class MacroPercentages(BaseModel):
    """Rounded percentages; not guaranteed to sum to 100."""

    carbs: int
    protein: int
    fat: int


class Preset(BaseModel):
    """A named, fixed macro distribution offered as a goal template."""

    model_config = ConfigDict(frozen=True)

    key: str
    name: str
    carbs: float
    protein: float
    fat: float

    def ratios(self) -> MacroRatios:
        return MacroRatios(carbs=self.carbs, protein=self.protein, fat=self.fat)


class GoalState(BaseModel):
    """User goal configuration. Custom fat is derived, never stored."""

    model_config = ConfigDict(allow_inf_nan=False)

    daily_calories: float = Field(default=2000, description="Daily calorie target")
    selected_preset: str = Field(default="balanced", description="Preset key")
    custom_carbs: float = Field(default=40, description="Custom carbs percentage")
    custom_protein: float = Field(default=30, description="Custom protein percentage")

    @property
    def custom_fat(self) -> float:
        return derived_fat_pct(self.custom_carbs, self.custom_protein)


class Meal(BaseModel):
    """An ad-hoc meal with absolute macro grams."""

    model_config = ConfigDict(allow_inf_nan=False)

    id: str = Field(default_factory=new_entry_id)
    name: str = ""
    carbs: float = 0
    protein: float = 0
    fat: float = 0


class FoodItem(BaseModel):
    """A food library entry with per-unit macros and a serving size."""

    model_config = ConfigDict(allow_inf_nan=False)

    id: str = Field(default_factory=new_entry_id)
    name: str = ""
    carbs_per_unit: float = 0
    protein_per_unit: float = 0
    fat_per_unit: float = 0
    serving_size: float = 1
    serving_unit: str = Field(default="g", description="Display label only, never converted")


class MacroProgress(BaseModel):
    """Progress bar data for one tracked quantity."""

    label: str
    unit: str
    current: float
    goal: float
    fraction: float = Field(ge=0, le=1)
    overflow: float = Field(ge=0, le=1)
    percent_of_goal: int


class GoalBreakdown(BaseModel):
    """Everything derived from a GoalState for display."""

    daily_calories: float
    selected_preset: str
    ratios: MacroRatios
    percentages: MacroPercentages
    grams: MacroGrams
    calories: MacroGrams
    custom_carbs: float
    custom_protein: float
    custom_fat: float
    can_increment: bool
    can_decrement_carbs: bool
    can_decrement_protein: bool


class IntakeSummary(BaseModel):
    """Totals of a list of entries compared against the goal."""

    totals: MacroGrams
    total_calories: float
    goal: MacroGrams
    remaining: MacroGrams
    remaining_calories: float = Field(description="Negative if over goal")
    remaining_calories_label: str
    progress: list[MacroProgress]
    entry_count: int
