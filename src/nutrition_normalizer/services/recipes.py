"""Recipe nutrition refresh."""

import logging
from dataclasses import dataclass

from nutrition_normalizer.domain.recipes import Recipe, RecipeNutritionResult
from nutrition_normalizer.services.aggregator import (
    NutritionAggregator,
    apply_fallback,
    external_data_is_usable,
)
from nutrition_normalizer.services.nutrition import NutritionService

_logger = logging.getLogger(__name__)


@dataclass
class RecipeNutritionService:
    """Recompute recipe nutrition from the database, keeping AI macros as backup."""

    aggregator: NutritionAggregator
    nutrition_service: NutritionService

    async def refresh(self, recipe: Recipe) -> RecipeNutritionResult:
        """Look up every ingredient and decide which macros to keep."""
        external = await self.aggregator.aggregate_recipe(
            recipe.ingredients,
            recipe.servings,
            self.nutrition_service.lookup_ingredient,
        )
        used_external = external_data_is_usable(external.macros)
        if not used_external:
            _logger.info(
                "Keeping AI estimate for %r: database totals were empty", recipe.name
            )
        return RecipeNutritionResult(
            recipe=recipe,
            profile=apply_fallback(external, recipe.ai_estimate),
            used_external_data=used_external,
        )
