"""Shared test fixtures."""

from dataclasses import dataclass, field

import pytest

from nutrition_normalizer.adapters.fdc_client import FdcClient
from nutrition_normalizer.config import Settings
from nutrition_normalizer.services.aggregator import NutritionAggregator
from nutrition_normalizer.services.cache import InMemoryCache
from nutrition_normalizer.services.labels import LabelClient
from nutrition_normalizer.services.nutrition import NutritionService
from nutrition_normalizer.services.resolver import NutrientResolver


def _chicken_food() -> dict[str, object]:
    return {
        "fdcId": 171077,
        "description": "Chicken, broiler or fryers, breast, skinless, boneless, raw",
        "dataType": "SR Legacy",
        "foodNutrients": [
            {"nutrient": {"id": 1008, "unitName": "kcal"}, "amount": 120},
            {"nutrient": {"id": 1003, "unitName": "g"}, "amount": 22.5},
            {"nutrient": {"id": 1004, "unitName": "g"}, "amount": 2.6},
            {"nutrient": {"id": 1005, "unitName": "g"}, "amount": 0},
            {"nutrient": {"id": 1092, "unitName": "mg"}, "amount": 334},
            {"nutrient": {"id": 1098, "unitName": "mg"}, "amount": 0.04},
            {"nutrient": {"id": 1114, "unitName": "UG"}, "amount": 0.2},
        ],
        "foodPortions": [
            {"gramWeight": 118, "modifier": "breast, bone and skin removed"},
        ],
    }


def _egg_food() -> dict[str, object]:
    return {
        "fdcId": 171287,
        "description": "Egg, whole, raw, fresh",
        "dataType": "SR Legacy",
        "foodNutrients": [
            {"nutrientId": 1008, "value": 143, "unitName": "KCAL"},
            {"nutrientId": 1003, "value": 12.6, "unitName": "G"},
            {"nutrientId": 1004, "value": 9.5, "unitName": "G"},
            {"nutrientId": 1005, "value": 0.7, "unitName": "G"},
            {"nutrientId": 2000, "value": 0.4, "unitName": "G"},
            {"nutrientId": 1106, "value": 160, "unitName": "UG"},
        ],
        "foodPortions": [
            {"gramWeight": 50, "measureUnit": {"name": "egg"}, "modifier": "large"},
        ],
    }


@dataclass
class FakeFdcClient(FdcClient):
    """Fake FDC client serving foods from an in-memory catalog."""

    foods: dict[str, dict[str, object]] = field(
        default_factory=lambda: {"chicken": _chicken_food(), "egg": _egg_food()}
    )
    search_calls: int = 0
    food_calls: int = 0

    async def search_foods(self, query: str, page_size: int = 5) -> dict[str, object]:
        self.search_calls += 1
        matches = [
            food for key, food in self.foods.items() if key in query.lower()
        ][:page_size]
        return {
            "foods": [
                {
                    "fdcId": food["fdcId"],
                    "description": food["description"],
                    "dataType": food["dataType"],
                }
                for food in matches
            ]
        }

    async def get_food(self, fdc_id: int) -> dict[str, object]:
        self.food_calls += 1
        for food in self.foods.values():
            if food["fdcId"] == fdc_id:
                return food
        raise KeyError(fdc_id)


@dataclass
class FakeLabelClient(LabelClient):
    """Fake label client returning a fixed extraction payload."""

    payload: dict[str, object] = field(
        default_factory=lambda: {
            "name": "Daily Multi",
            "serving_size": "1 tablet",
            "nutrients": [
                {"label": "Vitamin D3 (as cholecalciferol)", "amount": 2000, "unit": "IU"},
                {"label": "Vitamin C (as ascorbic acid)", "amount": 90, "unit": "mg"},
                {"label": "Zinc (as zinc gluconate)", "amount": 11, "unit": "mg"},
                {"label": "Xylitol", "amount": 500, "unit": "mg"},
            ],
        }
    )
    calls: list[dict[str, object]] = field(default_factory=list)

    async def extract(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        image_data_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        self.calls.append({"model": model, "image_data_url": image_data_url})
        return self.payload


@pytest.fixture
def settings() -> Settings:
    return Settings(openai_api_key="openai-key", fdc_api_key="fdc-key")


@pytest.fixture
def resolver() -> NutrientResolver:
    return NutrientResolver()


@pytest.fixture
def aggregator() -> NutritionAggregator:
    return NutritionAggregator()


@pytest.fixture
def fdc_client() -> FakeFdcClient:
    return FakeFdcClient()


@pytest.fixture
def nutrition_service(fdc_client: FakeFdcClient) -> NutritionService:
    return NutritionService(fdc_client=fdc_client, cache=InMemoryCache())
