"""Supplement label extraction using LLM vision."""

import base64
from dataclasses import dataclass
from typing import Protocol

from nutrition_normalizer.domain.labels import SupplementLabelExtract
from nutrition_normalizer.domain.nutrients import NutrientType
from nutrition_normalizer.services.aggregator import NutritionAggregator

LABEL_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "name": {"anyOf": [{"type": "string"}, {"type": "null"}]},
        "serving_size": {"anyOf": [{"type": "string"}, {"type": "null"}]},
        "nutrients": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "label": {"type": "string"},
                    "amount": {"type": "number"},
                    "unit": {
                        "type": "string",
                        "enum": ["mg", "mcg", "µg", "ug", "g", "IU"],
                    },
                },
                "required": ["label", "amount", "unit"],
                "additionalProperties": False,
            },
        },
    },
    "required": ["name", "serving_size", "nutrients"],
    "additionalProperties": False,
}

_PROMPT = (
    "Read the Supplement Facts or Nutrition Facts panel in the image. "
    "Return every vitamin and mineral line exactly as printed, with its amount "
    "per serving and unit."
)


class LabelClient(Protocol):
    """Interface for LLM label extraction."""

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
        """Return structured label data."""


@dataclass
class LabelExtractionService:
    """Turns a label photo into raw nutrient lines and a canonical profile."""

    client: LabelClient
    aggregator: NutritionAggregator
    model: str
    reasoning_effort: str | None
    store: bool

    async def extract(self, image_bytes: bytes) -> SupplementLabelExtract:
        """Extract raw nutrient lines from a label photo."""
        raw = await self.client.extract(
            model=self.model,
            reasoning_effort=self.reasoning_effort,
            store=self.store,
            image_data_url=_to_data_url(image_bytes),
            schema=LABEL_SCHEMA,
            prompt=_PROMPT,
        )
        return SupplementLabelExtract.model_validate(raw)

    async def profile(self, image_bytes: bytes) -> dict[NutrientType, float]:
        """Extract a label and normalize it to canonical nutrient amounts."""
        label = await self.extract(image_bytes)
        return self.aggregator.aggregate_label_nutrients(label.nutrients)


def _to_data_url(image_bytes: bytes) -> str:
    """Convert bytes to a base64 data URL for image input."""
    mime_type = _detect_mime_type(image_bytes)
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def _detect_mime_type(image_bytes: bytes) -> str:
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    return "image/jpeg"
