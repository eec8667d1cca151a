"""Tests for the FDC-backed nutrition service."""

import asyncio
from dataclasses import dataclass

import httpx
import pytest

from nutrition_normalizer.domain.nutrients import NutrientType
from nutrition_normalizer.services.cache import InMemoryCache
from nutrition_normalizer.services.nutrition import NutritionService
from tests.conftest import FakeFdcClient


def test_search_uses_cache(nutrition_service, fdc_client) -> None:
    results = asyncio.run(nutrition_service.search("chicken", limit=1))
    assert results[0].fdc_id == 171077
    assert fdc_client.search_calls == 1

    cached = asyncio.run(nutrition_service.search("Chicken", limit=1))
    assert cached[0].fdc_id == 171077
    assert fdc_client.search_calls == 1


def test_get_food_extracts_macros_and_micronutrients(nutrition_service) -> None:
    details = asyncio.run(nutrition_service.get_food(171077))

    nutrition = details.per_100g
    assert nutrition.calories == 120
    assert nutrition.protein_g == 22.5
    assert nutrition.carbs_g == 0
    assert nutrition.micronutrients[NutrientType.POTASSIUM] == 334
    # Copper is reported in mg but stored in mcg.
    assert nutrition.micronutrients[NutrientType.COPPER] == pytest.approx(40.0)
    assert nutrition.micronutrients[NutrientType.VITAMIN_D] == pytest.approx(0.2)
    assert details.portions[0].gram_weight == 118


def test_extract_nutrition_converts_iu_and_skips_unknown_units(
    nutrition_service,
) -> None:
    nutrition = nutrition_service.extract_nutrition(
        [
            {"nutrientId": 1110, "value": 40, "unitName": "IU"},
            {"nutrientId": 1106, "value": 0, "unitName": "UG"},
            {"nutrientId": 1093, "value": 5, "unitName": "kJ"},
            {"nutrientId": 1235, "value": 4.2, "unitName": "G"},
            {"nutrientId": 9999, "value": 12, "unitName": "MG"},
        ]
    )

    assert dict(nutrition.micronutrients) == {
        NutrientType.VITAMIN_D: pytest.approx(1.0)
    }
    assert nutrition.added_sugar_g == 4.2


def test_lookup_ingredient_scales_to_parsed_quantity(nutrition_service) -> None:
    nutrition = asyncio.run(nutrition_service.lookup_ingredient("1.5 lbs chicken breast"))

    assert nutrition is not None
    assert nutrition.calories == pytest.approx(120 * 6.804)
    assert nutrition.micronutrients[NutrientType.POTASSIUM] == pytest.approx(
        334 * 6.804
    )


def test_lookup_ingredient_uses_food_portions(nutrition_service) -> None:
    nutrition = asyncio.run(nutrition_service.lookup_ingredient("2 eggs"))

    assert nutrition is not None
    assert nutrition.calories == pytest.approx(143.0)
    assert nutrition.micronutrients[NutrientType.VITAMIN_A] == pytest.approx(160.0)


def test_lookup_ingredient_returns_none_without_match(nutrition_service) -> None:
    assert asyncio.run(nutrition_service.lookup_ingredient("1 cup unobtainium")) is None


@dataclass
class FlakyFdcClient(FakeFdcClient):
    failures_left: int = 1

    async def search_foods(self, query: str, page_size: int = 5) -> dict[str, object]:
        if self.failures_left:
            self.failures_left -= 1
            request = httpx.Request("POST", "https://fdc.test/foods/search")
            raise httpx.HTTPStatusError(
                "busy", request=request, response=httpx.Response(503, request=request)
            )
        return await super().search_foods(query, page_size)


def test_search_retries_once_then_succeeds() -> None:
    client = FlakyFdcClient()
    service = NutritionService(
        client, InMemoryCache(), retry_delay_seconds=0, debug=True
    )

    results = asyncio.run(service.search("egg"))

    assert results[0].fdc_id == 171287
    assert client.failures_left == 0


def test_search_raises_after_retries_exhausted() -> None:
    client = FlakyFdcClient(failures_left=5)
    service = NutritionService(client, InMemoryCache(), retry_delay_seconds=0)

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(service.search("egg"))


def test_extract_nutrition_skips_non_finite_amounts(nutrition_service) -> None:
    nutrition = nutrition_service.extract_nutrition(
        [
            {"nutrientId": 1008, "value": float("nan"), "unitName": "KCAL"},
            {"nutrientId": 1003, "value": float("inf"), "unitName": "G"},
            {"nutrientId": 1089, "value": float("nan"), "unitName": "MG"},
            {"nutrientId": 1095, "value": 2.5, "unitName": "MG"},
        ]
    )

    assert nutrition.calories == 0.0
    assert nutrition.protein_g == 0.0
    assert dict(nutrition.micronutrients) == {NutrientType.ZINC: 2.5}
