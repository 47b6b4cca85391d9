"""Domain models for statistics."""

from dataclasses import dataclass
from datetime import date

from nutrilink.domain.nutrition import MacroTotals


@dataclass(frozen=True)
class DailyTotals:
    """Totals for one calendar day."""

    day: date
    calories: int
    protein: float
    carbs: float
    fat: float


@dataclass(frozen=True)
class PeriodSummary:
    """Logged days in a window with averages over the logged days."""

    start: date
    end: date
    daily: list[DailyTotals]
    avg_calories: int | None
    avg_protein: float | None
    avg_carbs: float | None
    avg_fat: float | None


@dataclass(frozen=True)
class ClientProgress:
    """What a coach sees for one client."""

    email: str
    username: str
    goal_calories: str
    today: MacroTotals
    weekly_average_calories: int | None
    remaining_calories: int | None
