"""Serializable snapshot of the whole entity graph."""

import logging
from datetime import date, datetime

from pydantic import BaseModel, Field

from nutrilink.domain.models import (
    Account,
    Coach,
    DailyLog,
    FoodEntry,
    attach_entry,
    attach_log,
    link_coach,
    normalize_email,
)

SNAPSHOT_VERSION = 1

_logger = logging.getLogger(__name__)


class FoodEntrySnapshot(BaseModel):
    name: str
    calories: int
    protein: float = 0.0
    carbs: float = 0.0
    fat: float = 0.0
    logged_at: datetime


class DailyLogSnapshot(BaseModel):
    day: date
    calories: int = 0
    food_entries: list[FoodEntrySnapshot] = Field(default_factory=list)


class AccountSnapshot(BaseModel):
    email: str
    password: str
    username: str
    goal_calories: str = ""
    goal_protein: str = ""
    goal_carbs: str = ""
    goal_fat: str = ""
    meal_plan: str = ""
    coach_notes: str = ""
    coach_email: str | None = None
    daily_logs: list[DailyLogSnapshot] = Field(default_factory=list)


class CoachSnapshot(BaseModel):
    email: str
    password: str
    name: str
    bio: str = ""
    client_emails: list[str] = Field(default_factory=list)


class StoreSnapshot(BaseModel):
    """Everything the entity store persists in one commit."""

    version: int = SNAPSHOT_VERSION
    saved_at: datetime | None = None
    coaches: list[CoachSnapshot] = Field(default_factory=list)
    accounts: list[AccountSnapshot] = Field(default_factory=list)


def snapshot_graph(
    accounts: list[Account], coaches: list[Coach], saved_at: datetime | None = None
) -> StoreSnapshot:
    """Capture accounts and coaches as a snapshot."""
    return StoreSnapshot(
        saved_at=saved_at,
        coaches=[
            CoachSnapshot(
                email=coach.email,
                password=coach.password,
                name=coach.name,
                bio=coach.bio,
                client_emails=[client.email for client in coach.clients],
            )
            for coach in coaches
        ],
        accounts=[_snapshot_account(account) for account in accounts],
    )


def restore_graph(snapshot: StoreSnapshot) -> tuple[list[Account], list[Coach]]:
    """Rebuild live entities from a snapshot.

    Log totals are recomputed from their entries. Coach links are rebuilt from
    the accounts' side, in the coach's stored client order where it agrees.
    """
    coaches = [
        Coach(email=item.email, password=item.password, name=item.name, bio=item.bio)
        for item in snapshot.coaches
    ]
    coaches_by_key = {coach.key: coach for coach in coaches}
    accounts: list[Account] = []
    coach_keys: dict[str, str] = {}
    for item in snapshot.accounts:
        account = _restore_account(item)
        accounts.append(account)
        if item.coach_email:
            coach_keys[account.key] = normalize_email(item.coach_email)
    accounts_by_key = {account.key: account for account in accounts}

    for coach_item in snapshot.coaches:
        coach = coaches_by_key[normalize_email(coach_item.email)]
        for client_email in coach_item.client_emails:
            client = accounts_by_key.get(normalize_email(client_email))
            if client is not None and coach_keys.get(client.key) == coach.key:
                link_coach(client, coach)

    for account in accounts:
        coach_key = coach_keys.get(account.key)
        if coach_key is None or account.coach is not None:
            continue
        coach = coaches_by_key.get(coach_key)
        if coach is None:
            _logger.warning(
                "Dropping link from %s to unknown coach %s", account.email, coach_key
            )
            continue
        link_coach(account, coach)
    return accounts, coaches


def _snapshot_account(account: Account) -> AccountSnapshot:
    coach = account.coach
    return AccountSnapshot(
        email=account.email,
        password=account.password,
        username=account.username,
        goal_calories=account.goal_calories,
        goal_protein=account.goal_protein,
        goal_carbs=account.goal_carbs,
        goal_fat=account.goal_fat,
        meal_plan=account.meal_plan,
        coach_notes=account.coach_notes,
        coach_email=coach.email if coach else None,
        daily_logs=[
            DailyLogSnapshot(
                day=log.day,
                calories=log.calories,
                food_entries=[
                    FoodEntrySnapshot(
                        name=entry.name,
                        calories=entry.calories,
                        protein=entry.protein,
                        carbs=entry.carbs,
                        fat=entry.fat,
                        logged_at=entry.logged_at,
                    )
                    for entry in log.food_entries
                ],
            )
            for log in account.daily_logs
        ],
    )


def _restore_account(item: AccountSnapshot) -> Account:
    account = Account(
        email=item.email,
        password=item.password,
        username=item.username,
        goal_calories=item.goal_calories,
        goal_protein=item.goal_protein,
        goal_carbs=item.goal_carbs,
        goal_fat=item.goal_fat,
        meal_plan=item.meal_plan,
        coach_notes=item.coach_notes,
    )
    logs_by_day: dict[date, DailyLog] = {}
    for log_item in item.daily_logs:
        entries_total = sum(entry_item.calories for entry_item in log_item.food_entries)
        if entries_total != log_item.calories:
            _logger.warning(
                "Recomputed calories for %s on %s: stored=%s entries=%s",
                account.email,
                log_item.day,
                log_item.calories,
                entries_total,
            )
        log = logs_by_day.get(log_item.day)
        if log is None:
            log = DailyLog(day=log_item.day)
            logs_by_day[log.day] = log
            attach_log(account, log)
        else:
            _logger.warning(
                "Merged duplicate log for %s on %s", account.email, log_item.day
            )
        for entry_item in log_item.food_entries:
            attach_entry(
                log,
                FoodEntry(
                    name=entry_item.name,
                    calories=entry_item.calories,
                    protein=entry_item.protein,
                    carbs=entry_item.carbs,
                    fat=entry_item.fat,
                    logged_at=entry_item.logged_at,
                ),
            )
    return account
