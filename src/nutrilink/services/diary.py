"""Food diary: turning a chosen serving into a logged entry."""

import logging
import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from nutrilink.domain.models import Account, DailyLog, FoodEntry
from nutrilink.domain.nutrition import Food, Serving
from nutrilink.errors import MissingDataError, ServingChoiceRequiredError
from nutrilink.services.clock import Clock
from nutrilink.services.nutrition import sole_serving
from nutrilink.services.store import EntityStore

_logger = logging.getLogger(__name__)


@dataclass
class DiaryService:
    """Logs and removes food entries, committing once per action."""

    store: EntityStore
    clock: Clock

    def log_food(self, account: Account, food: Food) -> FoodEntry:
        """Log a food that has exactly one serving."""
        serving = sole_serving(food)
        if serving is None:
            raise ServingChoiceRequiredError(food)
        return self.log_serving(account, food, serving)

    def log_serving(self, account: Account, food: Food, serving: Serving) -> FoodEntry:
        """Add one serving of a food to today's log."""
        if serving.calories is None or not math.isfinite(serving.calories):
            raise MissingDataError(
                f"No calorie info available for this serving of {food.name}"
            )
        now = self.clock.now()
        entry = FoodEntry(
            name=food.name,
            calories=round_calories(serving.calories),
            protein=_grams(serving.protein),
            carbs=_grams(serving.carbs),
            fat=_grams(serving.fat),
            logged_at=now,
        )
        log = self.store.upsert_daily_log(account, now.date())
        self.store.add_food_entry(log, entry)
        self.store.commit()
        _logger.info(
            "Logged %s kcal from %s for %s", entry.calories, food.name, account.email
        )
        return entry

    def remove_entry(self, entry: FoodEntry) -> None:
        self.store.remove_food_entry(entry)
        self.store.commit()

    def delete_log(self, log: DailyLog) -> None:
        self.store.delete_daily_log(log)
        self.store.commit()


def round_calories(value: float) -> int:
    """Round to the nearest whole calorie, halves away from zero."""
    return int(Decimal(str(value)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def _grams(value: float | None) -> float:
    if value is None or not math.isfinite(value):
        return 0.0
    return value
