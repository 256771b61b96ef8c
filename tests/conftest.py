"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

import pytest

from meal_importer.adapters.nutritionix_client import NutritionixClient
from meal_importer.config import Settings
from meal_importer.containers import AppContainer
from meal_importer.domain.imports import MealRecord
from meal_importer.domain.nutrition import FoodMatch, Per100g
from meal_importer.services.cache import InMemoryCache
from meal_importer.services.importer import MealImportService, MealRepository
from meal_importer.services.nutrition import NutritionGateway, NutritionService

FIXED_NOW = datetime(2024, 1, 15, 9, 30, tzinfo=UTC)

OATS = FoodMatch(
    name="oats",
    per_100g=Per100g(
        kcal=389,
        protein=16.9,
        carbs=66.3,
        fats=6.9,
        fiber=10.6,
        sodium=2,
        potassium=429,
        calcium=54,
        iron=4.7,
        vitamin_c=0.0,
        vitamin_d=0.0,
    ),
    category="Carbohydrates",
)
MILK = FoodMatch(
    name="milk",
    per_100g=Per100g(
        kcal=61,
        protein=3.2,
        carbs=4.8,
        fats=3.3,
        sodium=43,
        potassium=132,
        calcium=113,
        vitamin_d=1.3,
    ),
    category="Dairy",
)
RICE = FoodMatch(
    name="rice",
    per_100g=Per100g(kcal=130, protein=2.7, carbs=28.2, fats=0.3, fiber=0.4),
    category="Carbohydrates",
)
CHICKEN = FoodMatch(
    name="chicken breast",
    per_100g=Per100g(kcal=165, protein=31.0, fats=3.6, sodium=74, potassium=256),
    category="Protein",
)


def fixed_now() -> datetime:
    return FIXED_NOW


@dataclass
class FakeNutritionGateway(NutritionGateway):
    """Gateway resolving names from a fixed table."""

    foods: dict[str, FoodMatch] = field(
        default_factory=lambda: {
            "oats": OATS,
            "milk": MILK,
            "rice": RICE,
            "chicken": CHICKEN,
        }
    )
    delays: dict[str, float] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)

    async def resolve(self, food_name: str) -> FoodMatch | None:
        self.calls.append(food_name)
        delay = self.delays.get(food_name.lower())
        if delay:
            await asyncio.sleep(delay)
        return self.foods.get(food_name.lower())


@dataclass
class InMemoryMealRepository(MealRepository):
    """In-memory meal repository for tests."""

    meals: list[MealRecord] = field(default_factory=list)
    failing_keys: set[tuple[str, str]] = field(default_factory=set)

    def create_meal(self, record: MealRecord) -> str:
        if (record.date, record.meal_type) in self.failing_keys:
            raise RuntimeError("Failed to create meal")
        self.meals.append(record)
        return str(uuid4())


def nutritionix_food(
    name: str, serving_weight_grams: float = 100, **nutrients: float
) -> dict[str, object]:
    """Build a Nutritionix food entry."""
    payload: dict[str, object] = {
        "food_name": name,
        "serving_weight_grams": serving_weight_grams,
        "full_nutrients": [],
    }
    attr_ids = {"calcium": 301, "iron": 303, "vitamin_c": 401, "vitamin_d": 328}
    for key, value in nutrients.items():
        if key in attr_ids:
            payload["full_nutrients"].append(  # type: ignore[union-attr]
                {"attr_id": attr_ids[key], "value": value}
            )
        else:
            payload[key] = value
    return payload


@dataclass
class FakeNutritionixClient(NutritionixClient):
    """Fake Nutritionix client with in-memory responses."""

    foods: dict[str, dict[str, object]] = field(
        default_factory=lambda: {
            "oats": nutritionix_food(
                "oats",
                nf_calories=389,
                nf_protein=16.9,
                nf_total_carbohydrate=66.3,
                nf_total_fat=6.9,
                nf_dietary_fiber=10.6,
                nf_sodium=2,
                nf_potassium=429,
                calcium=54,
                iron=4.7,
            ),
            "milk": nutritionix_food(
                "milk",
                serving_weight_grams=244,
                nf_calories=149,
                nf_protein=7.7,
                nf_total_carbohydrate=11.7,
                nf_total_fat=7.9,
                nf_sodium=105,
                nf_potassium=322,
                calcium=276,
                vitamin_d=3.2,
            ),
        }
    )
    failures: int = 0
    queries: list[str] = field(default_factory=list)

    async def natural_nutrients(self, query: str) -> dict[str, object]:
        self.queries.append(query)
        if self.failures > 0:
            self.failures -= 1
            raise RuntimeError("Nutritionix unavailable")
        name = query.removeprefix("100g ").lower()
        food = self.foods.get(name)
        return {"foods": [food] if food else []}


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        nutritionix_app_id="app-id",
        nutritionix_api_key="app-key",
    )


@pytest.fixture
def gateway() -> FakeNutritionGateway:
    return FakeNutritionGateway()


@pytest.fixture
def meal_repository() -> InMemoryMealRepository:
    return InMemoryMealRepository()


@pytest.fixture
def container(
    settings: Settings, meal_repository: InMemoryMealRepository
) -> AppContainer:
    nutrition_service = NutritionService(
        client=FakeNutritionixClient(),
        cache=InMemoryCache(),
        retry_delay_seconds=0,
    )
    import_service = MealImportService(
        gateway=nutrition_service,
        repository=meal_repository,
        now=fixed_now,
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        nutrition_service=nutrition_service,
        import_service=import_service,
        close_resources=close_resources,
    )
