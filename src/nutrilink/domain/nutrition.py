"""Nutrition domain models."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class MacroTotals:
    """Calories and macronutrient grams summed over food entries."""

    calories: int
    protein: float
    carbs: float
    fat: float


@dataclass(frozen=True)
class Serving:
    """One size option for a food with its own nutrition facts."""

    description: str | None
    calories: float | None
    protein: float | None
    carbs: float | None
    fat: float | None
    metric_amount: float | None = None
    metric_unit: str | None = None
    sugar: float | None = None
    fiber: float | None = None
    sodium: float | None = None
    potassium: float | None = None
    calcium: float | None = None
    iron: float | None = None


@dataclass(frozen=True)
class Food:
    """A food returned by the nutrition database search."""

    id: str
    name: str
    brand: str | None = None
    description: str | None = None
    servings: list[Serving] = field(default_factory=list)
