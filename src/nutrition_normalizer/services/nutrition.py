"""Ingredient nutrition lookups backed by USDA FoodData Central."""

import asyncio
import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from nutrition_normalizer.adapters.fdc_client import FdcClient
from nutrition_normalizer.domain.errors import UnknownUnitError
from nutrition_normalizer.domain.nutrients import NutrientType
from nutrition_normalizer.domain.nutrition import (
    FoodDetails,
    FoodPortion,
    FoodSummary,
    IngredientNutrition,
    Provenance,
)
from nutrition_normalizer.services.cache import Cache
from nutrition_normalizer.services.ingredients import grams_for, parse_ingredient
from nutrition_normalizer.services.units import UnitConverter, parse_unit

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

_MACRO_IDS = {
    1008: "calories",
    1003: "protein_g",
    1005: "carbs_g",
    1004: "fat_g",
    2000: "sugar_g",
    1235: "added_sugar_g",
}

# FDC nutrient id -> (nutrient, unit token used when the payload omits one)
_MICRONUTRIENT_IDS: dict[int, tuple[NutrientType, str]] = {
    1106: (NutrientType.VITAMIN_A, "ug"),
    1162: (NutrientType.VITAMIN_C, "mg"),
    1114: (NutrientType.VITAMIN_D, "ug"),
    1110: (NutrientType.VITAMIN_D, "iu"),
    1109: (NutrientType.VITAMIN_E, "mg"),
    1185: (NutrientType.VITAMIN_K, "ug"),
    1165: (NutrientType.VITAMIN_B1, "mg"),
    1166: (NutrientType.VITAMIN_B2, "mg"),
    1167: (NutrientType.VITAMIN_B3, "mg"),
    1170: (NutrientType.VITAMIN_B5, "mg"),
    1175: (NutrientType.VITAMIN_B6, "mg"),
    1176: (NutrientType.VITAMIN_B7, "ug"),
    1177: (NutrientType.VITAMIN_B9, "ug"),
    1178: (NutrientType.VITAMIN_B12, "ug"),
    1087: (NutrientType.CALCIUM, "mg"),
    1089: (NutrientType.IRON, "mg"),
    1090: (NutrientType.MAGNESIUM, "mg"),
    1091: (NutrientType.PHOSPHORUS, "mg"),
    1092: (NutrientType.POTASSIUM, "mg"),
    1093: (NutrientType.SODIUM, "mg"),
    1095: (NutrientType.ZINC, "mg"),
    1098: (NutrientType.COPPER, "mg"),
    1100: (NutrientType.IODINE, "ug"),
    1101: (NutrientType.MANGANESE, "mg"),
    1103: (NutrientType.SELENIUM, "ug"),
}

_logger = logging.getLogger(__name__)


@dataclass
class NutritionService:
    """FDC search and food lookups with caching and a short retry."""

    fdc_client: FdcClient
    cache: Cache
    converter: UnitConverter = field(default_factory=UnitConverter)
    search_ttl_seconds: int = 3600
    food_ttl_seconds: int = 86400
    debug: bool = False
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def search(self, query: str, limit: int = 5) -> list[FoodSummary]:
        """Search FDC foods with caching."""
        cache_key = f"fdc:search:{query.lower()}:{limit}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, list):
            return cached

        payload = await self._call_with_retry(
            lambda: self.fdc_client.search_foods(query, page_size=limit),
            action="search",
        )
        foods = [_summary(food) for food in payload.get("foods", [])]
        self.cache.set(cache_key, foods, ttl_seconds=self.search_ttl_seconds)
        if self.debug:
            _logger.info("FDC search: query=%s results=%s", query, len(foods))
        return foods

    async def get_food(self, fdc_id: int) -> FoodDetails:
        """Retrieve a food with nutrition per 100 g."""
        cache_key = f"fdc:food:{fdc_id}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, FoodDetails):
            return cached

        payload = await self._call_with_retry(
            lambda: self.fdc_client.get_food(fdc_id),
            action=f"get_food:{fdc_id}",
        )
        details = FoodDetails(
            summary=_summary(payload),
            per_100g=self.extract_nutrition(payload.get("foodNutrients", [])),
            portions=_portions(payload.get("foodPortions", [])),
        )
        self.cache.set(cache_key, details, ttl_seconds=self.food_ttl_seconds)
        if self.debug:
            _logger.info("FDC food: fdc_id=%s", fdc_id)
        return details

    async def lookup_ingredient(self, text: str) -> IngredientNutrition | None:
        """Return nutrition for an ingredient line scaled to its quantity."""
        parsed = parse_ingredient(text)
        results = await self.search(parsed.name, limit=1)
        if not results:
            _logger.info("FDC has no match for ingredient %r", text)
            return None
        details = await self.get_food(results[0].fdc_id)
        grams = grams_for(parsed, details.portions)
        if grams is None:
            _logger.info("Cannot determine grams for ingredient %r", text)
            return None
        return _scale(details.per_100g, grams / 100.0)

    def extract_nutrition(
        self, food_nutrients: list[dict[str, object]]
    ) -> IngredientNutrition:
        """Pull macros and canonical micronutrients out of an FDC nutrient list."""
        macros: dict[str, float] = dict.fromkeys(_MACRO_IDS.values(), 0.0)
        micronutrients: dict[NutrientType, float] = {}
        for nutrient in food_nutrients:
            nutrient_info = nutrient.get("nutrient") or {}
            nutrient_id = nutrient_info.get("id") or nutrient.get("nutrientId")
            amount = nutrient.get("amount", nutrient.get("value"))
            if not isinstance(amount, int | float):
                continue
            if not math.isfinite(amount) or amount <= 0:
                continue
            if nutrient_id in _MACRO_IDS:
                macros[_MACRO_IDS[nutrient_id]] = float(amount)
                continue
            mapping = _MICRONUTRIENT_IDS.get(nutrient_id)
            if mapping is None:
                continue
            nutrient_type, default_unit = mapping
            unit_name = nutrient_info.get("unitName") or nutrient.get("unitName")
            converted = self._to_canonical(
                float(amount), str(unit_name or default_unit), nutrient_type
            )
            if converted is not None and converted > 0:
                micronutrients[nutrient_type] = converted

        return IngredientNutrition(
            micronutrients=micronutrients,
            provenance=Provenance.DATABASE,
            **macros,
        )

    def _to_canonical(
        self, amount: float, unit_name: str, nutrient: NutrientType
    ) -> float | None:
        try:
            reading = parse_unit(unit_name)
        except UnknownUnitError:
            _logger.debug("Ignoring %s reported in %s", nutrient.id, unit_name)
            return None
        return self.converter.convert(reading.apply(amount), reading.unit, nutrient)

    async def _call_with_retry(
        self, func: "Callable[[], Awaitable[dict[str, object]]]", *, action: str
    ) -> dict[str, object]:
        """Call an async function with a short retry."""
        attempt = 0
        while True:
            try:
                return await func()
            except Exception as exc:
                attempt += 1
                if self.debug:
                    _logger.warning(
                        "FDC %s failed (attempt %s/%s, status=%s): %s",
                        action,
                        attempt,
                        self.retry_attempts + 1,
                        _status_code_from_exception(exc),
                        exc,
                    )
                if attempt > self.retry_attempts:
                    raise
                await asyncio.sleep(self.retry_delay_seconds)


def _status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"


def _summary(food: dict[str, object]) -> FoodSummary:
    return FoodSummary(
        fdc_id=int(food["fdcId"]),
        description=str(food.get("description", "")),
        brand_owner=food.get("brandOwner"),
        data_type=food.get("dataType"),
    )


def _portions(raw_portions: list[dict[str, object]]) -> tuple[FoodPortion, ...]:
    portions: list[FoodPortion] = []
    for portion in raw_portions:
        gram_weight = portion.get("gramWeight")
        if not isinstance(gram_weight, int | float) or gram_weight <= 0:
            continue
        measure_unit = portion.get("measureUnit") or {}
        parts = [
            str(portion.get("portionDescription") or ""),
            str(portion.get("modifier") or ""),
            str(measure_unit.get("name") or ""),
        ]
        description = " ".join(part for part in parts if part)
        portions.append(FoodPortion(description=description, gram_weight=gram_weight))
    return tuple(portions)


def _scale(per_100g: IngredientNutrition, factor: float) -> IngredientNutrition:
    return IngredientNutrition(
        calories=per_100g.calories * factor,
        protein_g=per_100g.protein_g * factor,
        carbs_g=per_100g.carbs_g * factor,
        fat_g=per_100g.fat_g * factor,
        sugar_g=per_100g.sugar_g * factor,
        added_sugar_g=per_100g.added_sugar_g * factor,
        micronutrients={
            nutrient: amount * factor
            for nutrient, amount in per_100g.micronutrients.items()
        },
        provenance=per_100g.provenance,
    )
