"""Tests for supplement label extraction."""

import asyncio

import pytest
from pydantic import ValidationError

from nutrition_normalizer.domain.labels import LabelNutrient
from nutrition_normalizer.domain.nutrients import NutrientType
from nutrition_normalizer.services.aggregator import NutritionAggregator
from nutrition_normalizer.services.labels import (
    LabelExtractionService,
    _to_data_url,
)
from tests.conftest import FakeLabelClient


def _service(client: FakeLabelClient) -> LabelExtractionService:
    return LabelExtractionService(
        client=client,
        aggregator=NutritionAggregator(),
        model="gpt-5.2",
        reasoning_effort="high",
        store=False,
    )


def test_extract_returns_raw_label_lines() -> None:
    client = FakeLabelClient()

    label = asyncio.run(_service(client).extract(b"image-bytes"))

    assert label.name == "Daily Multi"
    assert len(label.nutrients) == 4
    assert label.nutrients[0].unit == "iu"
    assert client.calls[0]["image_data_url"].startswith("data:image/jpeg;base64,")


def test_profile_normalizes_label_to_canonical_amounts() -> None:
    profile = asyncio.run(_service(FakeLabelClient()).profile(b"image-bytes"))

    assert profile == {
        NutrientType.VITAMIN_D: pytest.approx(50.0),
        NutrientType.VITAMIN_C: 90.0,
        NutrientType.ZINC: 11.0,
    }


def test_extract_rejects_unknown_unit_tokens() -> None:
    client = FakeLabelClient(
        payload={
            "name": None,
            "serving_size": None,
            "nutrients": [{"label": "Vitamin C", "amount": 1, "unit": "tablet"}],
        }
    )

    with pytest.raises(ValidationError):
        asyncio.run(_service(client).extract(b"image-bytes"))


def test_label_nutrient_normalizes_unit_token() -> None:
    nutrient = LabelNutrient(label="Biotin", amount=30, unit=" MCG ")

    assert nutrient.unit == "mcg"


def test_to_data_url_uses_png_header() -> None:
    data = b"\x89PNG\r\n\x1a\n" + b"rest"
    url = _to_data_url(data)

    assert url.startswith("data:image/png;base64,")


def test_to_data_url_detects_webp() -> None:
    url = _to_data_url(b"RIFF\x00\x00\x00\x00WEBPVP8 ")

    assert url.startswith("data:image/webp;base64,")


def test_to_data_url_defaults_to_jpeg() -> None:
    data = b"unknown"
    url = _to_data_url(data)

    assert url.startswith("data:image/jpeg;base64,")
