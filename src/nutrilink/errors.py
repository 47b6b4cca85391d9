"""Error types raised by the NutriLink core."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from nutrilink.domain.nutrition import Food


class NutriLinkError(Exception):
    """Base class for all NutriLink errors."""


class NotFoundError(NutriLinkError):
    """A credential lookup or entity lookup found nothing."""


class IntegrityViolation(NutriLinkError):
    """A mutation would break an invariant of the entity graph."""


class DuplicateEmailError(IntegrityViolation):
    """An email is already registered to an account or a coach."""

    def __init__(self, email: str) -> None:
        super().__init__(f"Email already registered: {email}")
        self.email = email


class PersistenceError(NutriLinkError):
    """A commit did not become durable."""


class ServingChoiceRequiredError(NutriLinkError):
    """A food has several servings and the caller must pick one."""

    def __init__(self, food: "Food") -> None:
        super().__init__(f"Choose a serving for {food.name}")
        self.food = food


class NutritionLookupError(NutriLinkError):
    """Recoverable failure while looking up or using nutrition data."""


class InvalidQueryError(NutritionLookupError):
    """The search query is empty."""


class ExternalServiceError(NutritionLookupError):
    """The nutrition database failed or answered with a non-200 status.

    ``status_code`` is ``None`` when no response was received.
    """

    def __init__(self, status_code: int | None, message: str | None = None) -> None:
        super().__init__(message or f"FatSecret error {status_code}")
        self.status_code = status_code


class DecodeError(NutritionLookupError):
    """A response body was malformed or had an unexpected shape."""


class MissingDataError(NutritionLookupError):
    """A food or serving lacks the data needed to log it."""
