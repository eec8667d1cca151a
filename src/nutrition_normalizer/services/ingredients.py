"""Parse free-text ingredient lines into quantity, unit and name."""

import re
from collections.abc import Iterable
from dataclasses import dataclass

from nutrition_normalizer.domain.nutrition import FoodPortion

_UNIT_ALIASES: dict[str, str] = {
    "cup": "cup",
    "cups": "cup",
    "c": "cup",
    "tbsp": "tbsp",
    "tablespoon": "tbsp",
    "tablespoons": "tbsp",
    "tsp": "tsp",
    "teaspoon": "tsp",
    "teaspoons": "tsp",
    "oz": "oz",
    "ounce": "oz",
    "ounces": "oz",
    "lb": "lb",
    "lbs": "lb",
    "pound": "lb",
    "pounds": "lb",
    "g": "g",
    "gram": "g",
    "grams": "g",
    "kg": "kg",
    "kilogram": "kg",
    "kilograms": "kg",
    "ml": "ml",
    "milliliter": "ml",
    "milliliters": "ml",
    "l": "l",
    "liter": "l",
    "liters": "l",
    "egg": "egg",
    "eggs": "egg",
    "piece": "piece",
    "pieces": "piece",
    "slice": "slice",
    "slices": "slice",
}

# Approximate gram weights; FDC portions take precedence when they match.
_GRAMS_PER_UNIT: dict[str, float] = {
    "cup": 240.0,
    "tbsp": 15.0,
    "tsp": 5.0,
    "oz": 28.35,
    "lb": 453.6,
    "g": 1.0,
    "kg": 1000.0,
    "ml": 1.0,
    "l": 1000.0,
    "egg": 50.0,
    "piece": 100.0,
    "slice": 25.0,
}

_COUNT_GRAMS = 100.0

_QUANTITY = re.compile(
    r"^\s*(?P<whole>\d+(?:\.\d+)?)"
    r"(?:\s+(?P<num>\d+)/(?P<den>\d+)|/(?P<den_only>\d+))?"
)


@dataclass(frozen=True)
class ParsedIngredient:
    """Ingredient line split into its parts."""

    quantity: float
    unit: str | None
    name: str


def parse_ingredient(text: str) -> ParsedIngredient:
    """Split ``"1.5 lbs chicken breast"`` into quantity, unit and name."""
    cleaned = " ".join(text.split())
    quantity = 1.0
    rest = cleaned
    match = _QUANTITY.match(cleaned)
    if match:
        quantity = _quantity_from_match(match)
        rest = cleaned[match.end() :].strip()

    unit: str | None = None
    name = rest
    if match:
        unit, name = _split_unit(rest)
    return ParsedIngredient(quantity=quantity, unit=unit, name=name or cleaned)


def grams_for(
    parsed: ParsedIngredient, portions: Iterable[FoodPortion] = ()
) -> float | None:
    """Estimate the gram weight of a parsed ingredient."""
    if parsed.quantity <= 0:
        return None
    if parsed.unit is None:
        return parsed.quantity * _COUNT_GRAMS
    for portion in portions:
        if portion.gram_weight > 0 and _portion_matches(portion, parsed.unit):
            return portion.gram_weight * parsed.quantity
    grams_per_unit = _GRAMS_PER_UNIT.get(parsed.unit)
    if grams_per_unit is None:
        return None
    return grams_per_unit * parsed.quantity


def _quantity_from_match(match: re.Match[str]) -> float:
    whole = float(match.group("whole"))
    if match.group("den_only"):
        denominator = float(match.group("den_only"))
        return whole / denominator if denominator else whole
    if match.group("num"):
        denominator = float(match.group("den"))
        if denominator:
            return whole + float(match.group("num")) / denominator
    return whole


def _split_unit(rest: str) -> tuple[str | None, str]:
    if not rest:
        return None, rest
    head, _, tail = rest.partition(" ")
    token = head.lower().rstrip(".")
    unit = _UNIT_ALIASES.get(token)
    if unit is None:
        return None, rest
    if unit in {"egg", "piece", "slice"} and not tail:
        return unit, head
    return unit, tail.strip()


def _portion_matches(portion: FoodPortion, unit: str) -> bool:
    description = portion.description.lower()
    if unit in {"g", "kg", "ml", "l"}:
        return False
    return any(
        re.search(rf"\b{re.escape(alias)}\b", description)
        for alias, canonical in _UNIT_ALIASES.items()
        if canonical == unit and len(alias) > 1
    )
