"""Entity graph for accounts, coaches, daily logs and food entries.

Relationship fields are read-only properties. The module-level helpers at the
bottom of this file are the only code that changes them, and each helper
updates both ends of a relationship before returning.
"""

import weakref
from dataclasses import dataclass, field
from datetime import date, datetime

from nutrilink.errors import IntegrityViolation


def normalize_email(email: str) -> str:
    """Return the identity key for an email address."""
    return email.strip().lower()


@dataclass(eq=False)
class FoodEntry:
    """One logged food item with its nutrition facts."""

    name: str
    calories: int
    protein: float
    carbs: float
    fat: float
    logged_at: datetime
    _daily_log: "DailyLog | None" = field(default=None, init=False, repr=False)

    @property
    def daily_log(self) -> "DailyLog | None":
        """The log that owns this entry, if attached."""
        return self._daily_log


@dataclass(eq=False)
class DailyLog:
    """One calendar day of intake for one account."""

    day: date
    _calories: int = field(default=0, init=False, repr=False)
    _food_entries: list[FoodEntry] = field(
        default_factory=list, init=False, repr=False
    )
    _account: "Account | None" = field(default=None, init=False, repr=False)

    @property
    def calories(self) -> int:
        """Running total of the attached entries' calories."""
        return self._calories

    @property
    def food_entries(self) -> tuple[FoodEntry, ...]:
        return tuple(self._food_entries)

    @property
    def account(self) -> "Account | None":
        return self._account


@dataclass(eq=False)
class Account:
    """End user tracking personal nutrition logs and goals."""

    email: str
    password: str
    username: str
    goal_calories: str = ""
    goal_protein: str = ""
    goal_carbs: str = ""
    goal_fat: str = ""
    meal_plan: str = ""
    coach_notes: str = ""
    _daily_logs: list[DailyLog] = field(default_factory=list, init=False, repr=False)
    _coach_ref: "weakref.ReferenceType[Coach] | None" = field(
        default=None, init=False, repr=False
    )

    @property
    def key(self) -> str:
        return normalize_email(self.email)

    @property
    def daily_logs(self) -> tuple[DailyLog, ...]:
        """Logs in insertion order."""
        return tuple(self._daily_logs)

    @property
    def coach(self) -> "Coach | None":
        if self._coach_ref is None:
            return None
        return self._coach_ref()


@dataclass(eq=False)
class Coach:
    """Coach linked to zero or more client accounts."""

    email: str
    password: str
    name: str
    bio: str = ""
    _clients: list[Account] = field(default_factory=list, init=False, repr=False)

    @property
    def key(self) -> str:
        return normalize_email(self.email)

    @property
    def clients(self) -> tuple[Account, ...]:
        return tuple(self._clients)


def attach_entry(log: DailyLog, entry: FoodEntry) -> None:
    """Append an entry to a log and add its calories to the running total."""
    if entry._daily_log is not None:
        raise IntegrityViolation(f"Food entry {entry.name!r} already belongs to a log")
    log._food_entries.append(entry)
    log._calories += entry.calories
    entry._daily_log = log


def detach_entry(entry: FoodEntry) -> DailyLog | None:
    """Remove an entry from its log and subtract its calories."""
    log = entry._daily_log
    if log is None:
        return None
    log._food_entries = [item for item in log._food_entries if item is not entry]
    log._calories -= entry.calories
    entry._daily_log = None
    return log


def attach_log(account: Account, log: DailyLog) -> None:
    """Give ownership of a log to an account.

    Does not check for an existing log on the same day; callers that create
    logs go through ``EntityStore.upsert_daily_log``.
    """
    if log._account is not None:
        raise IntegrityViolation(f"Daily log for {log.day} already has an owner")
    account._daily_logs.append(log)
    log._account = account


def detach_log(log: DailyLog) -> Account | None:
    """Remove a log from its owning account."""
    account = log._account
    if account is None:
        return None
    account._daily_logs = [item for item in account._daily_logs if item is not log]
    log._account = None
    return account


def link_coach(account: Account, coach: Coach) -> None:
    """Link an account and a coach on both sides."""
    current = account.coach
    if current is not None and current is not coach:
        unlink_coach(account)
    account._coach_ref = weakref.ref(coach)
    if not any(client.key == account.key for client in coach._clients):
        coach._clients.append(account)


def unlink_coach(account: Account) -> Coach | None:
    """Break an account's coach link on both sides.

    Clients are matched by email so that independently loaded copies of the
    same account are removed too.
    """
    coach = account.coach
    account._coach_ref = None
    if coach is None:
        return None
    coach._clients = [client for client in coach._clients if client.key != account.key]
    return coach
