"""Unit parsing and conversion into canonical nutrient units."""

from dataclasses import dataclass

from nutrition_normalizer.domain.errors import UnknownUnitError
from nutrition_normalizer.domain.nutrients import UNIT_TOKENS, NutrientType, Unit

# Per-vitamin constants; IU ratios are not interchangeable between nutrients.
_VITAMIN_A_MCG_PER_IU = 0.3
_VITAMIN_D_IU_PER_MCG = 40.0


@dataclass(frozen=True)
class UnitReading:
    """Parsed unit token with the factor that brings the amount into ``unit``."""

    unit: Unit
    factor: float = 1.0

    def apply(self, amount: float) -> float:
        return amount * self.factor


def parse_unit(token: str) -> UnitReading:
    """Parse a label unit token such as ``mg``, ``µg`` or ``IU``."""
    entry = UNIT_TOKENS.get(token.strip().lower())
    if entry is None:
        raise UnknownUnitError(token)
    unit, factor = entry
    return UnitReading(unit=unit, factor=factor)


class UnitConverter:
    """Convert amounts into the canonical unit of a nutrient."""

    def convert(
        self, amount: float, from_unit: Unit, nutrient: NutrientType
    ) -> float | None:
        """Return ``amount`` in the nutrient's canonical unit, or None."""
        return self.convert_to_unit(amount, from_unit, nutrient, nutrient.unit)

    def convert_to_unit(
        self,
        amount: float,
        from_unit: Unit,
        nutrient: NutrientType,
        target: Unit,
    ) -> float | None:
        """Return ``amount`` expressed in ``target``, or None if unsupported."""
        if from_unit == target:
            return amount
        if target == Unit.MG:
            return _to_mg(amount, from_unit)
        if target == Unit.MCG:
            return _to_mcg(amount, from_unit, nutrient)
        return _to_iu(amount, from_unit, nutrient)


def _to_mg(amount: float, from_unit: Unit) -> float | None:
    if from_unit == Unit.MCG:
        return amount / 1000.0
    return None


def _to_mcg(amount: float, from_unit: Unit, nutrient: NutrientType) -> float | None:
    if from_unit == Unit.MG:
        return amount * 1000.0
    if from_unit == Unit.IU:
        if nutrient == NutrientType.VITAMIN_A:
            return amount * _VITAMIN_A_MCG_PER_IU
        if nutrient == NutrientType.VITAMIN_D:
            return amount / _VITAMIN_D_IU_PER_MCG
    return None


def _to_iu(amount: float, from_unit: Unit, nutrient: NutrientType) -> float | None:
    if nutrient != NutrientType.VITAMIN_D:
        return None
    if from_unit == Unit.MCG:
        return amount * _VITAMIN_D_IU_PER_MCG
    if from_unit == Unit.MG:
        return amount * 1000.0 * _VITAMIN_D_IU_PER_MCG
    return None
