"""Dependency container wiring."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from nutrition_normalizer.adapters.fdc_client import HttpxFdcClient
from nutrition_normalizer.adapters.openai_label_client import OpenAILabelClient
from nutrition_normalizer.app_logging import configure_logging
from nutrition_normalizer.config import Settings, parse_match_strategy
from nutrition_normalizer.services.aggregator import NutritionAggregator
from nutrition_normalizer.services.aliases import default_alias_table
from nutrition_normalizer.services.cache import InMemoryCache
from nutrition_normalizer.services.labels import LabelExtractionService
from nutrition_normalizer.services.nutrition import NutritionService
from nutrition_normalizer.services.recipes import RecipeNutritionService
from nutrition_normalizer.services.resolver import NutrientResolver
from nutrition_normalizer.services.units import UnitConverter


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    resolver: NutrientResolver
    converter: UnitConverter
    aggregator: NutritionAggregator
    nutrition_service: NutritionService
    label_service: LabelExtractionService
    recipe_service: RecipeNutritionService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    configure_logging(logging.DEBUG if resolved_settings.debug else logging.INFO)

    resolver = NutrientResolver(
        aliases=default_alias_table(),
        match_strategy=parse_match_strategy(resolved_settings.alias_match_strategy),
    )
    converter = UnitConverter()
    aggregator = NutritionAggregator(
        resolver=resolver,
        converter=converter,
        max_concurrency=resolved_settings.lookup_max_concurrency,
    )
    fdc_client = HttpxFdcClient.create(
        api_key=resolved_settings.fdc_api_key,
        base_url=resolved_settings.fdc_base_url,
    )
    nutrition_service = NutritionService(
        fdc_client=fdc_client,
        cache=InMemoryCache(),
        converter=converter,
        debug=resolved_settings.debug,
    )
    label_client = OpenAILabelClient.create(resolved_settings.openai_api_key)
    label_service = LabelExtractionService(
        client=label_client,
        aggregator=aggregator,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    recipe_service = RecipeNutritionService(
        aggregator=aggregator,
        nutrition_service=nutrition_service,
    )

    async def close_resources() -> None:
        await fdc_client.close()
        await label_client.close()

    return AppContainer(
        settings=resolved_settings,
        resolver=resolver,
        converter=converter,
        aggregator=aggregator,
        nutrition_service=nutrition_service,
        label_service=label_service,
        recipe_service=recipe_service,
        close_resources=close_resources,
    )
