"""Aggregate label readings and ingredient lookups into nutrition profiles."""

import asyncio
import inspect
import logging
import math
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import NamedTuple

from nutrition_normalizer.domain.errors import UnknownUnitError
from nutrition_normalizer.domain.labels import LabelNutrient
from nutrition_normalizer.domain.nutrients import NutrientType
from nutrition_normalizer.domain.nutrition import (
    IngredientNutrition,
    MacroTotals,
    NutrientSample,
    NutritionProfile,
    Provenance,
)
from nutrition_normalizer.services.resolver import NutrientResolver
from nutrition_normalizer.services.units import UnitConverter, parse_unit

_logger = logging.getLogger(__name__)

_MACRO_FIELDS = (
    "calories",
    "protein_g",
    "carbs_g",
    "fat_g",
    "sugar_g",
    "added_sugar_g",
)


class LabelAmount(NamedTuple):
    """Amount and raw unit token for one label line."""

    amount: float
    unit: str


IngredientLookup = Callable[
    [str], IngredientNutrition | None | Awaitable[IngredientNutrition | None]
]


@dataclass
class NutritionAggregator:
    """Merge per-label and per-ingredient samples into one profile."""

    resolver: NutrientResolver = field(default_factory=NutrientResolver)
    converter: UnitConverter = field(default_factory=UnitConverter)
    max_concurrency: int = 5

    def label_samples(
        self, entries: Iterable[tuple[str, float, str]]
    ) -> list[NutrientSample]:
        """Resolve and convert raw label lines, skipping unusable ones."""
        samples: list[NutrientSample] = []
        for label, amount, unit_token in entries:
            sample = self._label_sample(label, amount, unit_token)
            if sample is not None:
                samples.append(sample)
        return samples

    def aggregate_label(
        self, raw_nutrients: Mapping[str, LabelAmount | tuple[float, str]]
    ) -> dict[NutrientType, float]:
        """Map raw label keys with amounts and units onto canonical nutrients."""
        entries = (
            (label, float(amount), str(unit))
            for label, (amount, unit) in raw_nutrients.items()
        )
        return _last_write_wins(self.label_samples(entries))

    def aggregate_label_nutrients(
        self, nutrients: Iterable[LabelNutrient]
    ) -> dict[NutrientType, float]:
        """Same as ``aggregate_label`` for validated label extraction output."""
        entries = ((item.label, item.amount, item.unit) for item in nutrients)
        return _last_write_wins(self.label_samples(entries))

    async def aggregate_recipe(
        self,
        ingredients: list[str],
        servings: int,
        lookup: IngredientLookup,
    ) -> NutritionProfile:
        """Sum ingredient lookups and scale the totals to one serving."""
        if not ingredients:
            return NutritionProfile(macros=MacroTotals(), provenance=None)

        semaphore = asyncio.Semaphore(max(1, self.max_concurrency))

        async def run(ingredient: str) -> IngredientNutrition | None:
            async with semaphore:
                return await _call_lookup(lookup, ingredient)

        results = await asyncio.gather(*(run(item) for item in ingredients))
        found = [
            (ingredient, result)
            for ingredient, result in zip(ingredients, results, strict=True)
            if result is not None
        ]
        if len(found) < len(ingredients):
            _logger.info(
                "Recipe lookups resolved %s of %s ingredients",
                len(found),
                len(ingredients),
            )
        return _scaled_profile(found, servings)

    def _label_sample(
        self, label: str, amount: float, unit_token: str
    ) -> NutrientSample | None:
        nutrient = self.resolver.identify(label)
        if nutrient is None:
            _logger.debug("Skipping unrecognized label %r", label)
            return None
        if math.isnan(amount) or amount <= 0:
            _logger.debug("Skipping %s with non-positive amount %s", label, amount)
            return None
        try:
            reading = parse_unit(unit_token)
        except UnknownUnitError:
            _logger.warning("Skipping %s with unknown unit %r", label, unit_token)
            return None
        converted = self.converter.convert(
            reading.apply(amount), reading.unit, nutrient
        )
        if converted is None:
            _logger.warning(
                "Skipping %s: cannot convert %s to %s",
                label,
                reading.unit,
                nutrient.unit,
            )
            return None
        return NutrientSample(nutrient, converted, Provenance.LABEL)


def external_data_is_usable(totals: MacroTotals) -> bool:
    """Return True when database macros should replace an AI estimate.

    An all-zero lookup result is indistinguishable from "no data", so only
    non-zero calories or protein count as measured.
    """
    return totals.calories > 0 or totals.protein > 0


def apply_fallback(
    external: NutritionProfile, ai_estimate: MacroTotals
) -> NutritionProfile:
    """Prefer measured data, otherwise keep the AI-estimated macros."""
    if external_data_is_usable(external.macros):
        return external
    return NutritionProfile(macros=ai_estimate, provenance=Provenance.AI_ESTIMATE)


async def _call_lookup(
    lookup: IngredientLookup, ingredient: str
) -> IngredientNutrition | None:
    try:
        if inspect.iscoroutinefunction(lookup):
            result = await lookup(ingredient)
        else:
            # Blocking lookups run in worker threads.
            result = await asyncio.to_thread(lookup, ingredient)
            if inspect.isawaitable(result):
                result = await result
    except Exception as exc:
        _logger.warning("Lookup failed for %r: %s", ingredient, exc)
        return None
    if result is None:
        _logger.debug("No nutrition data for %r", ingredient)
    return result


def _usable_amount(value: float, ingredient: str, field_name: str) -> float:
    if math.isfinite(value) and value >= 0:
        return value
    _logger.warning("Ignoring %s=%s reported for %r", field_name, value, ingredient)
    return 0.0


def _scaled_profile(
    contributions: list[tuple[str, IngredientNutrition]], servings: int
) -> NutritionProfile:
    totals = dict.fromkeys(_MACRO_FIELDS, 0.0)
    micronutrients: dict[NutrientType, float] = {}
    for ingredient, item in contributions:
        for field_name in _MACRO_FIELDS:
            totals[field_name] += _usable_amount(
                getattr(item, field_name), ingredient, field_name
            )
        for sample in item.samples():
            amount = _usable_amount(sample.amount, ingredient, sample.nutrient.id)
            if amount > 0:
                micronutrients[sample.nutrient] = (
                    micronutrients.get(sample.nutrient, 0.0) + amount
                )

    scale = 1.0 / servings if servings > 0 else 1.0
    macros = MacroTotals(
        calories=_whole(totals["calories"] * scale),
        protein=_whole(totals["protein_g"] * scale),
        carbs=_whole(totals["carbs_g"] * scale),
        fat=_whole(totals["fat_g"] * scale),
        sugar=_whole(totals["sugar_g"] * scale),
        added_sugar=_whole(totals["added_sugar_g"] * scale),
    )
    return NutritionProfile(
        macros=macros,
        micronutrients={
            nutrient: amount * scale for nutrient, amount in micronutrients.items()
        },
        provenance=Provenance.DATABASE if contributions else None,
    )


def _whole(value: float) -> int:
    return int(value) if math.isfinite(value) else 0


def _last_write_wins(samples: list[NutrientSample]) -> dict[NutrientType, float]:
    amounts: dict[NutrientType, float] = {}
    for sample in samples:
        amounts[sample.nutrient] = sample.amount
    return amounts
