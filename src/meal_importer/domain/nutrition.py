"""Nutrition domain models."""

from dataclasses import astuple, dataclass, field, fields

# Decimal places per nutrient, matching how the provider reports its figures.
NUTRIENT_PRECISION: dict[str, int] = {
    "kcal": 0,
    "protein": 1,
    "carbs": 1,
    "fats": 1,
    "fiber": 1,
    "sodium": 0,
    "potassium": 0,
    "calcium": 0,
    "iron": 1,
    "vitamin_c": 1,
    "vitamin_d": 1,
}


@dataclass(frozen=True)
class NutrientProfile:
    """Nutrient amounts for a food."""

    kcal: float = 0
    protein: float = 0.0
    carbs: float = 0.0
    fats: float = 0.0
    fiber: float = 0.0
    sodium: float = 0
    potassium: float = 0
    calcium: float = 0
    iron: float = 0.0
    vitamin_c: float = 0.0
    vitamin_d: float = 0.0

    def values(self) -> tuple[float, ...]:
        """Return the nutrient amounts in field order."""
        return astuple(self)

    def as_dict(self) -> dict[str, float]:
        """Return the nutrient amounts keyed by field name."""
        return {item.name: getattr(self, item.name) for item in fields(self)}


@dataclass(frozen=True)
class Per100g(NutrientProfile):
    """Nutrient amounts per 100 grams of a food."""


@dataclass(frozen=True)
class ForQuantity(NutrientProfile):
    """Nutrient amounts for a specific gram quantity."""


@dataclass(frozen=True)
class FoodMatch:
    """A food resolved by name from the nutrition provider."""

    name: str
    per_100g: Per100g
    category: str
    tags: tuple[str, ...] = field(default_factory=tuple)
    brand: str | None = None
