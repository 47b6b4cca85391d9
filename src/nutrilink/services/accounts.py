"""Account and coach lifecycle actions."""

import logging
from dataclasses import dataclass

from nutrilink.domain.models import Account, Coach
from nutrilink.services.store import EntityStore

_logger = logging.getLogger(__name__)


@dataclass
class AccountService:
    """Application service for registration, sign-in and profile edits."""

    store: EntityStore

    def register_account(
        self, email: str, password: str, username: str, goal_calories: str = ""
    ) -> Account:
        """Create an account and persist it."""
        account = self.store.add_account(
            email=email,
            password=password,
            username=username,
            goal_calories=goal_calories,
        )
        self.store.commit()
        _logger.info("Registered account %s", account.email)
        return account

    def register_coach(
        self, email: str, password: str, name: str, bio: str = ""
    ) -> Coach:
        """Create a coach and persist it."""
        coach = self.store.add_coach(email=email, password=password, name=name, bio=bio)
        self.store.commit()
        _logger.info("Registered coach %s", coach.email)
        return coach

    def sign_in(self, email: str, password: str) -> Account | Coach:
        return self.store.find_by_credentials(email, password)

    def update_goals(
        self,
        account: Account,
        *,
        calories: str | None = None,
        protein: str | None = None,
        carbs: str | None = None,
        fat: str | None = None,
    ) -> Account:
        """Update the goals that were passed; others are left alone."""
        apply_goals(account, calories=calories, protein=protein, carbs=carbs, fat=fat)
        self.store.commit()
        return account

    def delete_account(self, account: Account) -> None:
        self.store.delete_account(account)
        self.store.commit()
        _logger.info("Deleted account %s", account.email)

    def delete_coach(self, coach: Coach) -> None:
        self.store.delete_coach(coach)
        self.store.commit()
        _logger.info("Deleted coach %s", coach.email)


def apply_goals(
    account: Account,
    *,
    calories: str | None = None,
    protein: str | None = None,
    carbs: str | None = None,
    fat: str | None = None,
) -> None:
    if calories is not None:
        account.goal_calories = calories.strip()
    if protein is not None:
        account.goal_protein = protein.strip()
    if carbs is not None:
        account.goal_carbs = carbs.strip()
    if fat is not None:
        account.goal_fat = fat.strip()
