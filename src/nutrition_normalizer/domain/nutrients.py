"""Canonical micronutrient types and units."""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum


class Unit(str, Enum):
    """Units a micronutrient amount can be expressed in."""

    MG = "mg"
    MCG = "mcg"
    IU = "IU"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class NutrientTarget:
    """Daily intake target, optionally bounded above."""

    min: float
    max: float | None = None

    def format(self) -> str:
        """Render the target for display."""
        if self.max is None or self.max == self.min:
            return format_amount(self.min)
        if self.min == 0.0:
            return f"<= {format_amount(self.max)}"
        return f"{format_amount(self.min)} - {format_amount(self.max)}"

    def is_satisfied_by(self, amount: float) -> bool:
        """Return True when the amount falls inside the target range."""
        if self.min == 0.0 and self.max is not None:
            return amount <= self.max
        if self.max is not None:
            return self.min <= amount <= self.max
        return amount >= self.min


@dataclass(frozen=True)
class _NutrientInfo:
    id: str
    display_name: str
    unit: Unit
    male_target: NutrientTarget
    female_target: NutrientTarget
    top_sources: tuple[str, ...]


def _info(  # noqa: PLR0913
    nutrient_id: str,
    display_name: str,
    unit: Unit,
    male: NutrientTarget,
    female: NutrientTarget,
    *sources: str,
) -> _NutrientInfo:
    return _NutrientInfo(nutrient_id, display_name, unit, male, female, sources)


class NutrientType(Enum):
    """Closed set of canonical vitamins and minerals."""

    VITAMIN_A = _info(
        "vitamin_a", "Vitamin A", Unit.MCG,
        NutrientTarget(900.0), NutrientTarget(700.0),
        "Carrots", "Sweet potato", "Liver", "Spinach",
    )  # fmt: skip
    VITAMIN_C = _info(
        "vitamin_c", "Vitamin C", Unit.MG,
        NutrientTarget(90.0), NutrientTarget(75.0),
        "Orange", "Bell pepper", "Kiwi", "Strawberries",
    )  # fmt: skip
    VITAMIN_D = _info(
        "vitamin_d", "Vitamin D", Unit.MCG,
        NutrientTarget(20.0), NutrientTarget(20.0),
        "Sunlight", "Salmon", "Fortified milk", "Eggs",
    )  # fmt: skip
    VITAMIN_E = _info(
        "vitamin_e", "Vitamin E", Unit.MG,
        NutrientTarget(15.0), NutrientTarget(15.0),
        "Almonds", "Sunflower seeds", "Avocado",
    )  # fmt: skip
    VITAMIN_K = _info(
        "vitamin_k", "Vitamin K", Unit.MCG,
        NutrientTarget(120.0), NutrientTarget(90.0),
        "Kale", "Spinach", "Broccoli",
    )  # fmt: skip
    VITAMIN_B1 = _info(
        "vitamin_b1", "Vitamin B1 (Thiamine)", Unit.MG,
        NutrientTarget(1.2), NutrientTarget(1.1),
        "Pork", "Whole grains", "Beans",
    )  # fmt: skip
    VITAMIN_B2 = _info(
        "vitamin_b2", "Vitamin B2 (Riboflavin)", Unit.MG,
        NutrientTarget(1.3), NutrientTarget(1.1),
        "Milk", "Eggs", "Lean meat",
    )  # fmt: skip
    VITAMIN_B3 = _info(
        "vitamin_b3", "Vitamin B3 (Niacin)", Unit.MG,
        NutrientTarget(16.0), NutrientTarget(14.0),
        "Chicken", "Tuna", "Peanuts",
    )  # fmt: skip
    VITAMIN_B5 = _info(
        "vitamin_b5", "Vitamin B5 (Pantothenic)", Unit.MG,
        NutrientTarget(5.0), NutrientTarget(5.0),
        "Avocado", "Broccoli", "Chicken",
    )  # fmt: skip
    VITAMIN_B6 = _info(
        "vitamin_b6", "Vitamin B6", Unit.MG,
        NutrientTarget(1.5), NutrientTarget(1.4),
        "Chickpeas", "Salmon", "Potato",
    )  # fmt: skip
    VITAMIN_B7 = _info(
        "vitamin_b7", "Vitamin B7 (Biotin)", Unit.MCG,
        NutrientTarget(30.0), NutrientTarget(30.0),
        "Eggs", "Nuts", "Sweet potato",
    )  # fmt: skip
    VITAMIN_B9 = _info(
        "vitamin_b9", "Vitamin B9 (Folate)", Unit.MCG,
        NutrientTarget(400.0), NutrientTarget(400.0),
        "Lentils", "Spinach", "Fortified cereal",
    )  # fmt: skip
    VITAMIN_B12 = _info(
        "vitamin_b12", "Vitamin B12", Unit.MCG,
        NutrientTarget(2.4), NutrientTarget(2.4),
        "Meat", "Fish", "Eggs",
    )  # fmt: skip
    CALCIUM = _info(
        "calcium", "Calcium", Unit.MG,
        NutrientTarget(1000.0), NutrientTarget(1000.0),
        "Yogurt", "Cheese", "Kale", "Almond milk",
    )  # fmt: skip
    MAGNESIUM = _info(
        "magnesium", "Magnesium", Unit.MG,
        NutrientTarget(420.0), NutrientTarget(320.0),
        "Pumpkin seeds", "Almonds", "Spinach",
    )  # fmt: skip
    POTASSIUM = _info(
        "potassium", "Potassium", Unit.MG,
        NutrientTarget(3400.0), NutrientTarget(2600.0),
        "Banana", "Potato", "Beans", "Avocado",
    )  # fmt: skip
    SODIUM = _info(
        "sodium", "Sodium", Unit.MG,
        NutrientTarget(0.0, 2300.0), NutrientTarget(0.0, 2300.0),
        "Limit processed foods",
    )  # fmt: skip
    IRON = _info(
        "iron", "Iron", Unit.MG,
        NutrientTarget(8.0), NutrientTarget(18.0),
        "Red meat", "Lentils", "Spinach", "Vitamin C pairing",
    )  # fmt: skip
    ZINC = _info(
        "zinc", "Zinc", Unit.MG,
        NutrientTarget(11.0), NutrientTarget(8.0),
        "Oysters", "Beef", "Chickpeas", "Nuts",
    )  # fmt: skip
    IODINE = _info(
        "iodine", "Iodine", Unit.MCG,
        NutrientTarget(150.0), NutrientTarget(150.0),
        "Iodized salt", "Seafood", "Dairy",
    )  # fmt: skip
    SELENIUM = _info(
        "selenium", "Selenium", Unit.MCG,
        NutrientTarget(55.0), NutrientTarget(55.0),
        "Brazil nuts", "Tuna", "Eggs",
    )  # fmt: skip
    PHOSPHORUS = _info(
        "phosphorus", "Phosphorus", Unit.MG,
        NutrientTarget(700.0), NutrientTarget(700.0),
        "Cheese", "Chicken", "Milk", "Nuts",
    )  # fmt: skip
    MANGANESE = _info(
        "manganese", "Manganese", Unit.MG,
        NutrientTarget(2.3), NutrientTarget(1.8),
        "Nuts", "Grains", "Vegetables",
    )  # fmt: skip
    COPPER = _info(
        "copper", "Copper", Unit.MCG,
        NutrientTarget(900.0), NutrientTarget(900.0),
        "Organ meats", "Nuts", "Seeds", "Seafood",
    )  # fmt: skip

    @property
    def id(self) -> str:
        return self.value.id

    @property
    def display_name(self) -> str:
        return self.value.display_name

    @property
    def unit(self) -> Unit:
        """Canonical unit amounts of this nutrient are stored in."""
        return self.value.unit

    @property
    def top_sources(self) -> tuple[str, ...]:
        return self.value.top_sources

    def target_for_gender(self, gender: str | None) -> NutrientTarget:
        """Return the daily target for a gender, defaulting to the female target."""
        if gender is not None and gender.strip().lower() in {"male", "man", "m"}:
            return self.value.male_target
        return self.value.female_target

    @classmethod
    def from_id(cls, nutrient_id: str) -> "NutrientType | None":
        """Look up a type by its stable snake_case id."""
        for nutrient in cls:
            if nutrient.id == nutrient_id:
                return nutrient
        return None


def to_persisted_map(amounts: Mapping[NutrientType, float]) -> dict[str, float]:
    """Convert a type-keyed map into an id-keyed map for storage."""
    return {nutrient.id: value for nutrient, value in amounts.items()}


def from_persisted_map(amounts: Mapping[str, float]) -> dict[NutrientType, float]:
    """Convert an id-keyed map back into types, dropping unknown ids."""
    resolved: dict[NutrientType, float] = {}
    for key, value in amounts.items():
        nutrient = NutrientType.from_id(key)
        if nutrient is not None:
            resolved[nutrient] = float(value)
    return resolved


def format_amount(value: float) -> str:
    """Format an amount without a trailing .0 for whole numbers."""
    if value % 1.0 == 0.0:
        return str(int(value))
    return f"{value:.1f}"


# Accepted unit tokens and the factor applied when reading them.
UNIT_TOKENS: dict[str, tuple[Unit, float]] = {
    "mg": (Unit.MG, 1.0),
    "mcg": (Unit.MCG, 1.0),
    "µg": (Unit.MCG, 1.0),
    "μg": (Unit.MCG, 1.0),
    "ug": (Unit.MCG, 1.0),
    "g": (Unit.MG, 1000.0),
    "iu": (Unit.IU, 1.0),
}
