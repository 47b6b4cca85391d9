"""In-process entity store with snapshot persistence."""

import hmac
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from typing import Protocol

from nutrilink.domain.models import (
    Account,
    Coach,
    DailyLog,
    FoodEntry,
    attach_entry,
    attach_log,
    detach_entry,
    detach_log,
    normalize_email,
    unlink_coach,
)
from nutrilink.domain.snapshot import StoreSnapshot, restore_graph, snapshot_graph
from nutrilink.errors import DuplicateEmailError, NotFoundError, PersistenceError

_logger = logging.getLogger(__name__)


class SnapshotRepository(Protocol):
    """Persistence interface for whole-graph snapshots."""

    def load(self) -> StoreSnapshot | None:
        """Return the last committed snapshot, if any."""

    def save(self, snapshot: StoreSnapshot) -> None:
        """Durably replace the stored snapshot, or raise and change nothing."""


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class EntityStore:
    """Identity map for accounts and coaches plus their owned logs.

    Mutating methods change memory only. Call ``commit`` once per user action
    to make the batch durable.
    """

    repository: SnapshotRepository
    now: Callable[[], datetime] = _utcnow
    _accounts: dict[str, Account] = field(default_factory=dict, init=False)
    _coaches: dict[str, Coach] = field(default_factory=dict, init=False)

    def load(self) -> None:
        """Replace in-memory state with the last committed snapshot.

        Raises PersistenceError when the stored snapshot cannot be read.
        """
        try:
            snapshot = self.repository.load()
        except Exception as exc:
            _logger.exception("Store load failed")
            raise PersistenceError("Failed to load saved data") from exc
        self._accounts = {}
        self._coaches = {}
        if snapshot is None:
            _logger.info("No stored snapshot, starting with an empty store")
            return
        accounts, coaches = restore_graph(snapshot)
        self._coaches = {coach.key: coach for coach in coaches}
        self._accounts = {account.key: account for account in accounts}
        _logger.info(
            "Loaded store: accounts=%s coaches=%s",
            len(self._accounts),
            len(self._coaches),
        )

    def commit(self) -> None:
        """Persist the whole graph; raises PersistenceError on failure."""
        snapshot = snapshot_graph(self.accounts(), self.coaches(), saved_at=self.now())
        try:
            self.repository.save(snapshot)
        except Exception as exc:
            _logger.exception("Store commit failed")
            raise PersistenceError("Failed to save changes") from exc

    def accounts(self) -> list[Account]:
        return list(self._accounts.values())

    def coaches(self) -> list[Coach]:
        return list(self._coaches.values())

    def is_empty(self) -> bool:
        return not self._accounts and not self._coaches

    def clear(self) -> None:
        """Delete every coach and account."""
        for coach in self.coaches():
            self.delete_coach(coach)
        for account in self.accounts():
            self.delete_account(account)

    def add_account(  # noqa: PLR0913
        self,
        email: str,
        password: str,
        username: str,
        goal_calories: str = "",
        goal_protein: str = "",
        goal_carbs: str = "",
        goal_fat: str = "",
    ) -> Account:
        """Create an account; the email must be unused by accounts and coaches."""
        self._ensure_email_available(email)
        account = Account(
            email=email.strip(),
            password=password,
            username=username,
            goal_calories=goal_calories,
            goal_protein=goal_protein,
            goal_carbs=goal_carbs,
            goal_fat=goal_fat,
        )
        self._accounts[account.key] = account
        return account

    def add_coach(self, email: str, password: str, name: str, bio: str = "") -> Coach:
        """Create a coach; the email must be unused by accounts and coaches."""
        self._ensure_email_available(email)
        coach = Coach(email=email.strip(), password=password, name=name, bio=bio)
        self._coaches[coach.key] = coach
        return coach

    def find_account(self, email: str) -> Account:
        account = self._accounts.get(normalize_email(email))
        if account is None:
            raise NotFoundError(f"No account for {email.strip()}")
        return account

    def find_coach(self, email: str) -> Coach:
        coach = self._coaches.get(normalize_email(email))
        if coach is None:
            raise NotFoundError(f"No coach for {email.strip()}")
        return coach

    def find_by_credentials(self, email: str, password: str) -> Account | Coach:
        """Return the account or coach matching the credentials.

        Accounts are checked before coaches. The type of the result is the
        caller's role.
        """
        key = normalize_email(email)
        account = self._accounts.get(key)
        if account is not None and _same_password(account.password, password):
            return account
        coach = self._coaches.get(key)
        if coach is not None and _same_password(coach.password, password):
            return coach
        raise NotFoundError("Invalid email or password")

    def find_daily_log(self, account: Account, day: date) -> DailyLog | None:
        for log in account.daily_logs:
            if log.day == day:
                return log
        return None

    def upsert_daily_log(self, account: Account, day: date) -> DailyLog:
        """Return the account's log for a day, creating an empty one if needed."""
        existing = self.find_daily_log(account, day)
        if existing is not None:
            return existing
        log = DailyLog(day=day)
        attach_log(account, log)
        _logger.debug("Created daily log for %s on %s", account.email, day)
        return log

    def add_food_entry(self, log: DailyLog, entry: FoodEntry) -> None:
        """Attach a new entry and add its calories to the log total."""
        attach_entry(log, entry)

    def remove_food_entry(self, entry: FoodEntry) -> None:
        """Detach an entry and subtract its calories from its log."""
        if detach_entry(entry) is None:
            _logger.warning(
                "Food entry %r has no daily log; nothing to remove", entry.name
            )

    def delete_daily_log(self, log: DailyLog) -> None:
        """Delete a log and all of its entries."""
        for entry in log.food_entries:
            detach_entry(entry)
        detach_log(log)

    def delete_account(self, account: Account) -> None:
        """Delete an account with its logs and drop it from its coach's clients."""
        unlink_coach(account)
        for log in account.daily_logs:
            self.delete_daily_log(log)
        self._accounts.pop(account.key, None)

    def delete_coach(self, coach: Coach) -> None:
        """Delete a coach; former clients are kept without a coach."""
        for client in coach.clients:
            unlink_coach(client)
        self._coaches.pop(coach.key, None)

    def _ensure_email_available(self, email: str) -> None:
        key = normalize_email(email)
        if key in self._accounts or key in self._coaches:
            raise DuplicateEmailError(email.strip())


def _same_password(stored: str, given: str) -> bool:
    return hmac.compare_digest(stored.encode(), given.encode())
