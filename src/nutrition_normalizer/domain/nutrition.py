"""Nutrition domain models."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from nutrition_normalizer.domain.nutrients import NutrientType


class Provenance(str, Enum):
    """Where a nutrition value came from."""

    LABEL = "label"
    DATABASE = "database"
    AI_ESTIMATE = "ai-estimate"


@dataclass(frozen=True)
class NutrientSample:
    """Single micronutrient observation in its canonical unit."""

    nutrient: NutrientType
    amount: float
    provenance: Provenance


@dataclass(frozen=True)
class MacroTotals:
    """Whole-number macro totals; negative values are clamped to zero."""

    calories: int = 0
    protein: int = 0
    carbs: int = 0
    fat: int = 0
    sugar: int = 0
    added_sugar: int = 0

    def __post_init__(self) -> None:
        for name in ("calories", "protein", "carbs", "fat", "sugar", "added_sugar"):
            object.__setattr__(self, name, max(0, int(getattr(self, name))))


@dataclass(frozen=True)
class IngredientNutrition:
    """Nutrition contributed by one looked-up ingredient."""

    calories: float = 0.0
    protein_g: float = 0.0
    carbs_g: float = 0.0
    fat_g: float = 0.0
    sugar_g: float = 0.0
    added_sugar_g: float = 0.0
    micronutrients: Mapping[NutrientType, float] = field(default_factory=dict)
    provenance: Provenance = Provenance.DATABASE

    def samples(self) -> list[NutrientSample]:
        """Return the micronutrient contributions as samples."""
        return [
            NutrientSample(nutrient, amount, self.provenance)
            for nutrient, amount in self.micronutrients.items()
        ]


@dataclass(frozen=True)
class NutritionProfile:
    """Per-serving macros and micronutrients.

    ``provenance`` is None when no ingredient contributed any data.
    """

    macros: MacroTotals
    micronutrients: Mapping[NutrientType, float] = field(default_factory=dict)
    provenance: Provenance | None = Provenance.DATABASE

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "micronutrients", MappingProxyType(dict(self.micronutrients))
        )


@dataclass(frozen=True)
class FoodSummary:
    """Summary information about a food from FDC."""

    fdc_id: int
    description: str
    brand_owner: str | None
    data_type: str | None


@dataclass(frozen=True)
class FoodPortion:
    """Household measure for a food with its gram weight."""

    description: str
    gram_weight: float


@dataclass(frozen=True)
class FoodDetails:
    """Full FDC food with nutrition per 100 g."""

    summary: FoodSummary
    per_100g: IngredientNutrition
    portions: tuple[FoodPortion, ...] = ()
