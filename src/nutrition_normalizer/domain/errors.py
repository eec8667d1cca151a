"""Exception types raised by the normalizer."""


class NutritionError(Exception):
    """Base class for nutrition normalization errors."""


class UnknownUnitError(NutritionError, ValueError):
    """Raised when a unit token is not one of the accepted tokens."""

    def __init__(self, token: str) -> None:
        super().__init__(f"Unknown unit token: {token!r}")
        self.token = token
