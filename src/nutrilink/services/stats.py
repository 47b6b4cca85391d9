"""Read-only statistics derived from an account's daily logs.

Every function takes the current day from the caller and never mutates the
graph. Accounts without logs produce empty or zero results.
"""

import calendar
from datetime import date, timedelta
from typing import Literal

from nutrilink.domain.models import Account, DailyLog, FoodEntry
from nutrilink.domain.nutrition import MacroTotals
from nutrilink.domain.stats import DailyTotals, PeriodSummary

Period = Literal["week", "month", "year"]

MONTHS_PER_YEAR = 12
WEEK_DAYS = 7


def recent_logs(account: Account, since_days_ago: int, today: date) -> list[DailyLog]:
    """Logs dated on or after ``today - since_days_ago``, oldest first."""
    start = today - timedelta(days=since_days_ago)
    return _logs_since(account, start)


def average_calories(account: Account, window_size_in_days: int) -> int | None:
    """Integer mean of the most recent ``window_size_in_days`` logs.

    Returns ``None`` when the account has no logs. Logs sharing a day keep
    their insertion order.
    """
    if window_size_in_days <= 0:
        return None
    newest_first = sorted(account.daily_logs, key=lambda log: log.day, reverse=True)
    window = newest_first[:window_size_in_days]
    if not window:
        return None
    return sum(log.calories for log in window) // len(window)


def today_macro_totals(account: Account, today: date) -> MacroTotals:
    """Sum calories and macros over today's entries."""
    log = _log_for_day(account, today)
    if log is None:
        return MacroTotals(calories=0, protein=0.0, carbs=0.0, fat=0.0)
    return _sum_entries(log.food_entries)


def today_entries(account: Account, today: date) -> list[FoodEntry]:
    """Today's entries ordered by the time they were logged."""
    log = _log_for_day(account, today)
    if log is None:
        return []
    return sorted(log.food_entries, key=lambda entry: entry.logged_at)


def history(account: Account) -> list[DailyLog]:
    """All logs, most recent day first."""
    return sorted(account.daily_logs, key=lambda log: log.day, reverse=True)


def window_start(period: Period, today: date) -> date:
    """First day included in a week, month or year window ending today."""
    if period == "week":
        return today - timedelta(days=WEEK_DAYS)
    if period == "month":
        return _shift_months(today, -1)
    if period == "year":
        return _shift_months(today, -MONTHS_PER_YEAR)
    raise ValueError(f"Unknown period: {period}")


def window_logs(account: Account, period: Period, today: date) -> list[DailyLog]:
    """Logs inside a week, month or year window ending today, oldest first."""
    return _logs_since(account, window_start(period, today))


def daily_totals(log: DailyLog) -> DailyTotals:
    macros = _sum_entries(log.food_entries)
    return DailyTotals(
        day=log.day,
        calories=log.calories,
        protein=macros.protein,
        carbs=macros.carbs,
        fat=macros.fat,
    )


def period_summary(account: Account, period: Period, today: date) -> PeriodSummary:
    """Per-day totals for a window plus averages over the logged days."""
    start = window_start(period, today)
    daily = [daily_totals(log) for log in _logs_since(account, start)]
    if not daily:
        return PeriodSummary(
            start=start,
            end=today,
            daily=[],
            avg_calories=None,
            avg_protein=None,
            avg_carbs=None,
            avg_fat=None,
        )
    count = len(daily)
    return PeriodSummary(
        start=start,
        end=today,
        daily=daily,
        avg_calories=sum(day.calories for day in daily) // count,
        avg_protein=sum(day.protein for day in daily) / count,
        avg_carbs=sum(day.carbs for day in daily) / count,
        avg_fat=sum(day.fat for day in daily) / count,
    )


def remaining_calories(account: Account, today: date) -> int | None:
    """Calorie goal minus today's intake, if the goal is numeric."""
    goal = parse_goal(account.goal_calories)
    if goal is None:
        return None
    log = _log_for_day(account, today)
    eaten = log.calories if log else 0
    return goal - eaten


def parse_goal(raw: str | None) -> int | None:
    """Parse a free-form goal such as ``"2400"`` or ``"150 g"``."""
    if raw is None:
        return None
    cleaned = raw.strip().lower().removesuffix("kcal").removesuffix("g").strip()
    if not cleaned:
        return None
    try:
        return int(float(cleaned))
    except ValueError:
        return None


def _logs_since(account: Account, start: date) -> list[DailyLog]:
    return sorted(
        (log for log in account.daily_logs if log.day >= start),
        key=lambda log: log.day,
    )


def _log_for_day(account: Account, day: date) -> DailyLog | None:
    for log in account.daily_logs:
        if log.day == day:
            return log
    return None


def _sum_entries(entries: tuple[FoodEntry, ...] | list[FoodEntry]) -> MacroTotals:
    total = MacroTotals(calories=0, protein=0.0, carbs=0.0, fat=0.0)
    for entry in entries:
        total = MacroTotals(
            calories=total.calories + entry.calories,
            protein=total.protein + entry.protein,
            carbs=total.carbs + entry.carbs,
            fat=total.fat + entry.fat,
        )
    return total


def _shift_months(day: date, months: int) -> date:
    index = day.year * MONTHS_PER_YEAR + (day.month - 1) + months
    year, month = divmod(index, MONTHS_PER_YEAR)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))
