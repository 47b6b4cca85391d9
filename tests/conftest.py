"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, date, datetime, time, timedelta
from pathlib import Path

import pytest

from nutrilink.adapters.fatsecret_client import FatSecretClient
from nutrilink.config import Settings
from nutrilink.domain.models import Account, DailyLog, FoodEntry
from nutrilink.domain.snapshot import StoreSnapshot
from nutrilink.errors import ExternalServiceError
from nutrilink.services.store import EntityStore, SnapshotRepository

TODAY = date(2025, 12, 3)
NOW = datetime.combine(TODAY, time(12, 30), tzinfo=UTC)


@dataclass
class InMemorySnapshotRepository(SnapshotRepository):
    """Snapshot repository that keeps every save in memory."""

    saves: list[StoreSnapshot] = field(default_factory=list)
    fail_on_save: bool = False

    def load(self) -> StoreSnapshot | None:
        return self.saves[-1] if self.saves else None

    def save(self, snapshot: StoreSnapshot) -> None:
        if self.fail_on_save:
            raise OSError("disk full")
        self.saves.append(snapshot)


@dataclass
class FixedClock:
    """Clock that only moves when told to."""

    current: datetime = NOW

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current = self.current + timedelta(**kwargs)


@dataclass
class FakeFatSecretClient(FatSecretClient):
    """Fake FatSecret client with canned payloads and queued failures."""

    payload: dict[str, object] = field(default_factory=lambda: search_payload())
    failures: list[ExternalServiceError] = field(default_factory=list)
    queries: list[str] = field(default_factory=list)

    async def search_foods(
        self, query: str, max_results: int = 20
    ) -> dict[str, object]:
        self.queries.append(query)
        if self.failures:
            raise self.failures.pop(0)
        return self.payload


def search_payload(foods: object = None) -> dict[str, object]:
    """Build a ``foods/search/v2`` response around a food list."""
    if foods is None:
        foods = [
            {
                "food_id": "33691",
                "food_name": "Banana",
                "food_description": "Per 1 medium - Calories: 105kcal",
                "servings": {
                    "serving": {
                        "serving_description": "1 medium (7\" to 7-7/8\" long)",
                        "metric_serving_amount": "118.000",
                        "metric_serving_unit": "g",
                        "calories": "105",
                        "carbohydrate": "26.95",
                        "protein": "1.29",
                        "fat": "0.39",
                        "fiber": "3.1",
                        "sugar": "14.43",
                    }
                },
            },
            {
                "food_id": "4881224",
                "food_name": "Greek Yogurt",
                "brand_name": "Fage",
                "servings": {
                    "serving": [
                        {
                            "serving_description": "1 container",
                            "metric_serving_amount": "170.000",
                            "metric_serving_unit": "g",
                            "calories": "102.5",
                            "carbohydrate": "6",
                            "protein": "18",
                            "fat": "0",
                        },
                        {
                            "serving_description": "100 g",
                            "metric_serving_amount": "100.000",
                            "metric_serving_unit": "g",
                            "calories": "",
                            "carbohydrate": "3.53",
                            "protein": "10.59",
                            "fat": "n/a",
                        },
                    ]
                },
            },
        ]
    return {
        "foods_search": {
            "max_results": "20",
            "total_results": "2",
            "page_number": "0",
            "results": {"food": foods},
        }
    }


def make_entry(
    name: str,
    calories: int,
    logged_at: datetime = NOW,
    protein: float = 0.0,
    carbs: float = 0.0,
    fat: float = 0.0,
) -> FoodEntry:
    return FoodEntry(
        name=name,
        calories=calories,
        protein=protein,
        carbs=carbs,
        fat=fat,
        logged_at=logged_at,
    )


def add_day(store: EntityStore, account: Account, day: date, calories: int) -> DailyLog:
    """Log one entry worth ``calories`` on ``day``."""
    log = store.upsert_daily_log(account, day)
    store.add_food_entry(
        log,
        make_entry("Daily intake", calories, datetime.combine(day, time(9), UTC)),
    )
    return log


@pytest.fixture
def repository() -> InMemorySnapshotRepository:
    return InMemorySnapshotRepository()


@pytest.fixture
def store(repository: InMemorySnapshotRepository) -> EntityStore:
    return EntityStore(repository=repository, now=lambda: NOW)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def account(store: EntityStore) -> Account:
    return store.add_account(
        email="jason@example.com",
        password="jason456",
        username="JasonStrength",
        goal_calories="2400",
    )


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        fatsecret_client_id="client-id",
        fatsecret_client_secret="client-secret",
        store_path=tmp_path / "nutrilink.json",
    )
