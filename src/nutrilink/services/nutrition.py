"""Nutrition lookup service backed by the FatSecret food search."""

import asyncio
import logging
import math
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from pydantic import ValidationError

from nutrilink.adapters.fatsecret_client import FatSecretClient
from nutrilink.adapters.fatsecret_models import (
    FoodPayload,
    FoodSearchResponse,
    ServingPayload,
)
from nutrilink.domain.nutrition import Food, Serving
from nutrilink.errors import (
    DecodeError,
    ExternalServiceError,
    InvalidQueryError,
    MissingDataError,
)
from nutrilink.services.cache import Cache

HTTP_SERVER_ERROR = 500

_logger = logging.getLogger(__name__)


@dataclass
class NutritionService:
    """Search foods with caching and a short retry on server errors."""

    client: FatSecretClient
    cache: Cache
    max_results: int = 20
    search_ttl_seconds: int = 3600
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def search(self, query: str) -> list[Food]:
        """Return foods matching a query in the service's ranking order."""
        trimmed = query.strip()
        if not trimmed:
            raise InvalidQueryError("Enter a food to search for")
        cache_key = f"fatsecret:search:{trimmed.lower()}:{self.max_results}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, list):
            return list(cached)

        payload = await self._call_with_retry(
            lambda: self.client.search_foods(trimmed, max_results=self.max_results),
            action="search",
        )
        foods = parse_search_response(payload)
        self.cache.set(cache_key, list(foods), ttl_seconds=self.search_ttl_seconds)
        _logger.info("FatSecret search: query=%s results=%s", trimmed, len(foods))
        return foods

    async def _call_with_retry(
        self, func: Callable[[], Awaitable[dict[str, object]]], *, action: str
    ) -> dict[str, object]:
        """Retry server-side failures; client errors and decode errors surface."""
        attempt = 0
        while True:
            try:
                return await func()
            except ExternalServiceError as exc:
                attempt += 1
                _logger.warning(
                    "Nutrition %s failed (attempt %s/%s, status=%s): %s",
                    action,
                    attempt,
                    self.retry_attempts + 1,
                    exc.status_code if exc.status_code is not None else "n/a",
                    exc,
                )
                if attempt > self.retry_attempts or not _is_retryable(exc):
                    raise
                await asyncio.sleep(self.retry_delay_seconds)


def sole_serving(food: Food) -> Serving | None:
    """Return the only serving of a food, or None when the caller must choose."""
    if not food.servings:
        raise MissingDataError(f"No serving info available for {food.name}")
    if len(food.servings) == 1:
        return food.servings[0]
    return None


def parse_search_response(payload: dict[str, object]) -> list[Food]:
    """Convert a raw search payload into foods; a missing food list is empty."""
    try:
        response = FoodSearchResponse.model_validate(payload)
    except ValidationError as exc:
        raise DecodeError("Unexpected food search response") from exc
    results = response.foods_search.results
    if results is None or results.food is None:
        return []
    return [_to_food(item) for item in results.food]


def parse_decimal(value: str | None) -> float | None:
    """Parse a decimal string, returning None for blanks, junk and non-finite values."""
    if value is None:
        return None
    cleaned = value.strip()
    if not cleaned:
        return None
    try:
        number = float(cleaned)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _to_food(item: FoodPayload) -> Food:
    servings = item.servings.serving if item.servings else []
    return Food(
        id=item.food_id,
        name=item.food_name,
        brand=item.brand_name,
        description=item.food_description,
        servings=[_to_serving(serving) for serving in servings],
    )


def _to_serving(item: ServingPayload) -> Serving:
    return Serving(
        description=item.serving_description,
        calories=parse_decimal(item.calories),
        protein=parse_decimal(item.protein),
        carbs=parse_decimal(item.carbohydrate),
        fat=parse_decimal(item.fat),
        metric_amount=parse_decimal(item.metric_serving_amount),
        metric_unit=item.metric_serving_unit,
        sugar=parse_decimal(item.sugar),
        fiber=parse_decimal(item.fiber),
        sodium=parse_decimal(item.sodium),
        potassium=parse_decimal(item.potassium),
        calcium=parse_decimal(item.calcium),
        iron=parse_decimal(item.iron),
    )


def _is_retryable(exc: ExternalServiceError) -> bool:
    return exc.status_code is None or exc.status_code >= HTTP_SERVER_ERROR
