"""Resolve raw nutrient label strings to canonical nutrient types."""

import logging
from dataclasses import dataclass, field
from typing import Literal

from nutrition_normalizer.domain.nutrients import NutrientType
from nutrition_normalizer.services.aliases import (
    AliasTable,
    default_alias_table,
    normalize_label,
)

MatchStrategy = Literal["first", "longest"]

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NutrientResolver:
    """Alias lookup with a Levenshtein fallback for OCR and typo noise.

    ``match_strategy`` controls which alias wins when several aliases are
    substrings of the input. ``"first"`` takes the first alias in table order;
    ``"longest"`` takes the longest one, keeping table order on ties.
    """

    aliases: AliasTable = field(default_factory=default_alias_table)
    match_strategy: MatchStrategy = "longest"

    def identify(self, raw: str) -> NutrientType | None:
        """Return the nutrient a raw label refers to, or None."""
        normalized = normalize_label(raw)
        if not normalized:
            return None

        exact = self.aliases.get(normalized)
        if exact is not None:
            return exact

        substring_match = self._substring_match(normalized)
        if substring_match is not None:
            return substring_match

        fuzzy_match = self._fuzzy_match(normalized)
        if fuzzy_match is None:
            _logger.debug("No nutrient alias matched label %r", raw)
        return fuzzy_match

    def _substring_match(self, normalized: str) -> NutrientType | None:
        best_alias: str | None = None
        for alias in self.aliases:
            if alias not in normalized:
                continue
            if self.match_strategy == "first":
                return self.aliases[alias]
            if best_alias is None or len(alias) > len(best_alias):
                best_alias = alias
        if best_alias is None:
            return None
        return self.aliases[best_alias]

    def _fuzzy_match(self, normalized: str) -> NutrientType | None:
        best_match: NutrientType | None = None
        best_score: int | None = None
        for alias, nutrient in self.aliases.items():
            distance = levenshtein(normalized, alias)
            if best_score is None or distance < best_score:
                best_score = distance
                best_match = nutrient
        if best_score is None or best_score > max_edit_distance(len(normalized)):
            return None
        return best_match


def max_edit_distance(length: int) -> int:
    """Largest edit distance accepted for an input of the given length."""
    if length >= 10:
        return 3
    if length >= 6:
        return 2
    return 1


def levenshtein(a: str, b: str) -> int:
    """Edit distance using a single row sized to the shorter string."""
    if a == b:
        return 0
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    row = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        diagonal = row[0]
        row[0] = i
        for j, char_b in enumerate(b, start=1):
            above = row[j]
            row[j] = min(
                above + 1,
                row[j - 1] + 1,
                diagonal + (char_a != char_b),
            )
            diagonal = above
    return row[len(b)]
