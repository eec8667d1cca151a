"""Models for raw supplement label readings."""

from pydantic import BaseModel, Field, field_validator

from nutrition_normalizer.domain.nutrients import UNIT_TOKENS


class LabelNutrient(BaseModel):
    """Single raw nutrient line read from a label."""

    label: str
    amount: float
    unit: str

    @field_validator("unit")
    @classmethod
    def _known_unit(cls, value: str) -> str:
        token = value.strip().lower()
        if token not in UNIT_TOKENS:
            raise ValueError(f"unsupported unit token: {value!r}")
        return token


class SupplementLabelExtract(BaseModel):
    """Structured output for label extraction."""

    name: str | None = None
    serving_size: str | None = None
    nutrients: list[LabelNutrient] = Field(default_factory=list)
