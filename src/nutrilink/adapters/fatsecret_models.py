"""Pydantic models for FatSecret API payloads."""

from pydantic import BaseModel, ConfigDict, field_validator


class TokenResponse(BaseModel):
    """OAuth client-credentials token payload."""

    access_token: str
    token_type: str
    expires_in: int
    scope: str | None = None


class ServingPayload(BaseModel):
    """Nutrition facts for one serving; numbers arrive as decimal strings."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    serving_description: str | None = None
    metric_serving_amount: str | None = None
    metric_serving_unit: str | None = None
    calories: str | None = None
    protein: str | None = None
    carbohydrate: str | None = None
    fat: str | None = None
    sugar: str | None = None
    fiber: str | None = None
    sodium: str | None = None
    potassium: str | None = None
    calcium: str | None = None
    iron: str | None = None


class ServingsPayload(BaseModel):
    serving: list[ServingPayload] = []

    @field_validator("serving", mode="before")
    @classmethod
    def _wrap_single(cls, value: object) -> object:
        # A food with one serving comes back as an object, not a list.
        if value is None:
            return []
        if isinstance(value, dict):
            return [value]
        return value


class FoodPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    food_id: str
    food_name: str
    food_description: str | None = None
    brand_name: str | None = None
    servings: ServingsPayload | None = None


class SearchResults(BaseModel):
    food: list[FoodPayload] | None = None

    @field_validator("food", mode="before")
    @classmethod
    def _wrap_single(cls, value: object) -> object:
        if isinstance(value, dict):
            return [value]
        return value


class FoodsSearch(BaseModel):
    results: SearchResults | None = None


class FoodSearchResponse(BaseModel):
    """Top-level ``foods/search/v2`` response."""

    foods_search: FoodsSearch
