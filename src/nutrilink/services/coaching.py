"""Coach-side management of linked clients."""

from dataclasses import dataclass
from datetime import date

from nutrilink.domain.models import Account, Coach, normalize_email
from nutrilink.domain.stats import ClientProgress
from nutrilink.errors import NotFoundError
from nutrilink.services import stats
from nutrilink.services.accounts import apply_goals
from nutrilink.services.store import EntityStore

PROGRESS_WINDOW_DAYS = 7


@dataclass
class CoachingService:
    """Lets a coach read and edit the plans of their own clients only."""

    store: EntityStore

    def client(self, coach: Coach, email: str) -> Account:
        """Return a linked client by email."""
        key = normalize_email(email)
        for client in coach.clients:
            if client.key == key:
                return client
        raise NotFoundError(f"{email.strip()} is not a client of {coach.email}")

    def set_client_goals(
        self,
        coach: Coach,
        email: str,
        *,
        calories: str | None = None,
        protein: str | None = None,
        carbs: str | None = None,
        fat: str | None = None,
    ) -> Account:
        client = self.client(coach, email)
        apply_goals(client, calories=calories, protein=protein, carbs=carbs, fat=fat)
        self.store.commit()
        return client

    def set_meal_plan(self, coach: Coach, email: str, meal_plan: str) -> Account:
        client = self.client(coach, email)
        client.meal_plan = meal_plan
        self.store.commit()
        return client

    def set_coach_notes(self, coach: Coach, email: str, notes: str) -> Account:
        client = self.client(coach, email)
        client.coach_notes = notes
        self.store.commit()
        return client

    def client_progress(self, coach: Coach, email: str, today: date) -> ClientProgress:
        """Summarize a client's day and recent week for their coach."""
        client = self.client(coach, email)
        return ClientProgress(
            email=client.email,
            username=client.username,
            goal_calories=client.goal_calories,
            today=stats.today_macro_totals(client, today),
            weekly_average_calories=stats.average_calories(
                client, PROGRESS_WINDOW_DAYS
            ),
            remaining_calories=stats.remaining_calories(client, today),
        )
