"""Alias table mapping raw label variants to canonical nutrients."""

import re
from collections.abc import Iterable, Iterator, Mapping
from functools import cache
from types import MappingProxyType

from nutrition_normalizer.domain.nutrients import NutrientType

_NON_ALNUM = re.compile(r"[^a-z0-9]")

_DEFAULT_ALIASES: tuple[tuple[NutrientType, tuple[str, ...]], ...] = (
    (NutrientType.VITAMIN_A, ("vitamin a", "vit a", "retinol", "retinyl")),
    (NutrientType.VITAMIN_C, ("vitamin c", "vit c", "ascorbic")),
    (
        NutrientType.VITAMIN_D,
        ("vitamin d", "vit d", "cholecalciferol", "ergocalciferol"),
    ),
    (NutrientType.VITAMIN_E, ("vitamin e", "vit e", "tocopherol")),
    (NutrientType.VITAMIN_K, ("vitamin k", "vit k", "phytonadione", "menaquinone")),
    (NutrientType.VITAMIN_B1, ("vitamin b1", "vit b1", "thiamine", "thiamin")),
    (NutrientType.VITAMIN_B2, ("vitamin b2", "vit b2", "riboflavin")),
    (NutrientType.VITAMIN_B3, ("vitamin b3", "vit b3", "niacin", "niacinamide")),
    (NutrientType.VITAMIN_B5, ("vitamin b5", "vit b5", "pantothenic")),
    (NutrientType.VITAMIN_B6, ("vitamin b6", "vit b6", "pyridoxine", "pyridoxal")),
    (NutrientType.VITAMIN_B7, ("vitamin b7", "vit b7", "biotin")),
    (NutrientType.VITAMIN_B9, ("vitamin b9", "vit b9", "folate", "folic")),
    (
        NutrientType.VITAMIN_B12,
        ("vitamin b12", "vit b12", "cobalamin", "methylcobalamin"),
    ),
    (NutrientType.CALCIUM, ("calcium",)),
    (NutrientType.MAGNESIUM, ("magnesium",)),
    (NutrientType.POTASSIUM, ("potassium",)),
    (NutrientType.SODIUM, ("sodium",)),
    (NutrientType.IRON, ("iron", "ferrous", "ferric")),
    (NutrientType.ZINC, ("zinc",)),
    (NutrientType.IODINE, ("iodine",)),
    (NutrientType.SELENIUM, ("selenium",)),
    (NutrientType.PHOSPHORUS, ("phosphorus", "phosphate")),
    (NutrientType.MANGANESE, ("manganese",)),
    (NutrientType.COPPER, ("copper",)),
)


def normalize_label(raw: str) -> str:
    """Lowercase and drop everything except ASCII letters and digits."""
    return _NON_ALNUM.sub("", raw.lower())


class AliasTable(Mapping[str, NutrientType]):
    """Read-only, insertion-ordered mapping of normalized alias to nutrient."""

    def __init__(
        self, entries: Iterable[tuple[NutrientType, Iterable[str]]]
    ) -> None:
        table: dict[str, NutrientType] = {}
        for nutrient, aliases in entries:
            for alias in aliases:
                normalized = normalize_label(alias)
                if normalized:
                    table[normalized] = nutrient
        self._table = MappingProxyType(table)

    def __getitem__(self, alias: str) -> NutrientType:
        return self._table[alias]

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        return f"AliasTable({len(self)} aliases)"


@cache
def default_alias_table() -> AliasTable:
    """Return the process-wide alias table, built on first use."""
    return AliasTable(_DEFAULT_ALIASES)
