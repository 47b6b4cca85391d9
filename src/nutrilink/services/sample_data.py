"""Demo coaches, clients and logs for an empty store."""

import logging
import random
from datetime import UTC, date, datetime, time, timedelta

from nutrilink.domain.models import Account, FoodEntry, link_coach
from nutrilink.services.store import EntityStore

SAMPLE_DAYS = 30
MIN_DAILY_CALORIES = 1800
MAX_DAILY_CALORIES = 2400

_logger = logging.getLogger(__name__)


def clear_all(store: EntityStore) -> None:
    """Remove every user, coach and log, then commit."""
    store.clear()
    store.commit()


def preload_if_needed(
    store: EntityStore, today: date, rng: random.Random | None = None
) -> bool:
    """Seed the store when it holds no users or coaches.

    Returns True when data was added.
    """
    if not store.is_empty():
        return False
    rng = rng or random.Random()

    sarah = store.add_coach(
        email="sarah.coach@nutrilink.com",
        password="password123",
        name="Sarah Johnson",
        bio="Certified nutritionist and personal trainer with 6 years of experience.",
    )
    mike = store.add_coach(
        email="mike.t@nutrilink.com",
        password="pass456",
        name="Mike Thompson",
        bio="Strength coach specializing in muscle building and athletic performance.",
    )
    clients = [
        ("emily@example.com", "emily123", "EmilyFit", "1700", sarah),
        ("jason@example.com", "jason456", "JasonStrength", "2400", sarah),
        ("anna@example.com", "anna789", "AnnaRunner", "1800", mike),
        ("tom@example.com", "tom321", "TomBulk", "2800", mike),
    ]
    for email, password, username, goal, coach in clients:
        account = store.add_account(
            email=email, password=password, username=username, goal_calories=goal
        )
        _generate_month_of_logs(store, account, today, rng)
        link_coach(account, coach)

    store.commit()
    _logger.info("Preloaded sample data: coaches=2 accounts=%s", len(clients))
    return True


def _generate_month_of_logs(
    store: EntityStore, account: Account, today: date, rng: random.Random
) -> None:
    for offset in range(SAMPLE_DAYS):
        day = today - timedelta(days=offset)
        log = store.upsert_daily_log(account, day)
        store.add_food_entry(
            log,
            FoodEntry(
                name="Daily intake",
                calories=rng.randint(MIN_DAILY_CALORIES, MAX_DAILY_CALORIES),
                protein=0.0,
                carbs=0.0,
                fat=0.0,
                logged_at=datetime.combine(day, time(12, 0), tzinfo=UTC),
            ),
        )
