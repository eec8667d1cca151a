"""Recipe domain models."""

from dataclasses import dataclass, field

from nutrition_normalizer.domain.nutrition import MacroTotals, NutritionProfile


@dataclass(frozen=True)
class Recipe:
    """Recipe with its AI-estimated per-serving macros."""

    name: str
    ingredients: list[str]
    servings: int
    ai_estimate: MacroTotals = field(default_factory=MacroTotals)


@dataclass(frozen=True)
class RecipeNutritionResult:
    """Outcome of refreshing a recipe against the nutrition database."""

    recipe: Recipe
    profile: NutritionProfile
    used_external_data: bool
