"""Nutrition Constants - Fixed tables shared by all calculations."""

from typing import Literal

from .models import Preset


MacroKind = Literal["carbs", "protein", "fat"]

MACRO_KINDS: tuple[MacroKind, ...] = ("carbs", "protein", "fat")

CALORIES_PER_GRAM: dict[str, int] = {
    "carbs": 4,
    "protein": 4,
    "fat": 9,
}

MACRO_LABELS: dict[str, str] = {
    "carbs": "Carbs",
    "protein": "Protein",
    "fat": "Fat",
}

CUSTOM_PRESET = "custom"
DEFAULT_PRESET = "balanced"

DEFAULT_DAILY_CALORIES = 2000
DEFAULT_CUSTOM_CARBS = 40
DEFAULT_CUSTOM_PROTEIN = 30

# FDA guidelines: https://www.fda.gov/food/nutrition-facts-label/daily-value-nutrition-and-supplement-facts-labels
MACRO_PRESETS: dict[str, Preset] = {
    preset.key: preset
    for preset in (
        Preset(key="athletic", name="Athletic", carbs=0.55, protein=0.25, fat=0.2),
        Preset(key="usda", name="USDA Food Labels", carbs=0.55, protein=0.1, fat=0.35),
        Preset(key="balanced", name="Balanced", carbs=0.45, protein=0.25, fat=0.3),
        Preset(key="zone", name="40 30 30", carbs=0.4, protein=0.3, fat=0.3),
        Preset(key="highProtein", name="High Protein", carbs=0.3, protein=0.4, fat=0.3),
        Preset(key="lowCarb", name="Low Carb", carbs=0.2, protein=0.3, fat=0.5),
        Preset(key="keto", name="Keto", carbs=0.05, protein=0.2, fat=0.75),
        # Ratios here are placeholders; the active custom ratios come from GoalState.
        Preset(key=CUSTOM_PRESET, name="Custom", carbs=0.4, protein=0.3, fat=0.3),
    )
}
