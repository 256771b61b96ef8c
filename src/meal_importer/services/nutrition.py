"""Nutrition lookups by food name via Nutritionix."""

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from meal_importer.adapters.nutritionix_client import NutritionixClient
from meal_importer.domain.nutrition import NUTRIENT_PRECISION, FoodMatch, Per100g
from meal_importer.services.cache import Cache
from meal_importer.services.scaling import round_nutrient

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

_FIELD_KEYS = {
    "kcal": "nf_calories",
    "protein": "nf_protein",
    "carbs": "nf_total_carbohydrate",
    "fats": "nf_total_fat",
    "fiber": "nf_dietary_fiber",
    "sodium": "nf_sodium",
    "potassium": "nf_potassium",
}

# USDA attribute ids reported in "full_nutrients".
_ATTR_IDS = {
    "calcium": 301,
    "iron": 303,
    "vitamin_c": 401,
    "vitamin_d": 328,
}

_CATEGORY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Protein", ("chicken", "beef", "pork", "turkey", "lamb", "meat")),
    ("Fish", ("fish", "salmon", "tuna", "cod", "shrimp", "prawn")),
    (
        "Carbohydrates",
        ("rice", "pasta", "bread", "oats", "oatmeal", "quinoa", "cereal"),
    ),
    ("Vegetables", ("broccoli", "spinach", "carrot", "tomato", "pepper", "salad")),
    ("Fruit", ("apple", "banana", "orange", "grape", "berry", "avocado")),
    ("Dairy", ("milk", "yogurt", "cheese", "egg", "butter")),
    ("Nuts", ("nut", "almond", "hazelnut", "pistachio", "seed")),
)
DEFAULT_CATEGORY = "General"

_TAG_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("wholegrain", ("whole", "wholegrain", "wholemeal")),
    ("organic", ("organic",)),
    ("fresh", ("fresh",)),
    ("frozen", ("frozen",)),
    ("protein", ("protein",)),
    ("fiber", ("fiber", "fibre")),
    ("vitamins", ("vitamin",)),
)

_logger = logging.getLogger(__name__)


class NutritionGateway(Protocol):
    """Resolves free-text food names to per-100g profiles."""

    async def resolve(self, food_name: str) -> FoodMatch | None:
        """Return the matching food, or None when nothing matches."""


@dataclass
class NutritionService(NutritionGateway):
    """Nutritionix-backed gateway with caching and a short retry.

    Provider outages are reported the same way as unknown foods.
    """

    client: NutritionixClient
    cache: Cache
    ttl_seconds: int = 86400
    debug: bool = False
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def resolve(self, food_name: str) -> FoodMatch | None:
        """Resolve a food name to its per-100g nutrient profile."""
        query_name = food_name.strip()
        if not query_name:
            return None
        cache_key = f"nutritionix:food:{query_name.lower()}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, FoodMatch):
            return cached

        try:
            payload = await self._call_with_retry(
                lambda: self.client.natural_nutrients(f"100g {query_name}"),
                action=f"resolve:{query_name}",
            )
            foods = payload.get("foods") or []
            if not isinstance(foods, list) or not foods:
                if self.debug:
                    _logger.info("Nutrition lookup: no match for %r", query_name)
                return None
            match = food_match_from_payload(foods[0])
        except Exception as exc:
            _logger.warning("Nutrition lookup failed for %r: %s", query_name, exc)
            return None

        self.cache.set(cache_key, match, ttl_seconds=self.ttl_seconds)
        if self.debug:
            _logger.info("Nutrition lookup: %r -> %r", query_name, match.name)
        return match

    async def _call_with_retry(
        self, func: "Callable[[], Awaitable[dict[str, object]]]", *, action: str
    ) -> dict[str, object]:
        attempt = 0
        while True:
            try:
                return await func()
            except Exception as exc:
                attempt += 1
                if self.debug:
                    _logger.warning(
                        "Nutrition %s failed (attempt %s/%s, status=%s): %s",
                        action,
                        attempt,
                        self.retry_attempts + 1,
                        _status_code_from_exception(exc),
                        exc,
                    )
                if attempt > self.retry_attempts:
                    raise
                await asyncio.sleep(self.retry_delay_seconds)


def food_match_from_payload(food: dict[str, object]) -> FoodMatch:
    """Build a food match from one Nutritionix food entry."""
    name = str(food.get("food_name") or "")
    brand = food.get("brand_name")
    serving_weight = _to_float(food.get("serving_weight_grams")) or 100.0
    multiplier = 100.0 / serving_weight

    raw: dict[str, float] = {
        field_name: _to_float(food.get(key)) for field_name, key in _FIELD_KEYS.items()
    }
    full_nutrients = food.get("full_nutrients") or []
    for field_name, attr_id in _ATTR_IDS.items():
        raw[field_name] = _full_nutrient(full_nutrients, attr_id)

    per_100g = Per100g(
        **{
            field_name: round_nutrient(
                amount * multiplier, NUTRIENT_PRECISION[field_name]
            )
            for field_name, amount in raw.items()
        }
    )
    return FoodMatch(
        name=name,
        per_100g=per_100g,
        category=categorize(name),
        tags=food_tags(name, str(brand) if brand else None),
        brand=str(brand) if brand else None,
    )


def categorize(food_name: str) -> str:
    """Return a coarse category label for a food name."""
    name = food_name.lower()
    for category, keywords in _CATEGORY_KEYWORDS:
        if any(keyword in name for keyword in keywords):
            return category
    return DEFAULT_CATEGORY


def food_tags(food_name: str, brand: str | None = None) -> tuple[str, ...]:
    """Return descriptive tags for a food name and brand."""
    name = food_name.lower()
    tags = [tag for tag, keywords in _TAG_KEYWORDS if any(k in name for k in keywords)]
    if brand:
        tags.append(brand.lower())
    return tuple(tags)


def _full_nutrient(full_nutrients: object, attr_id: int) -> float:
    if not isinstance(full_nutrients, list):
        return 0.0
    for nutrient in full_nutrients:
        if isinstance(nutrient, dict) and nutrient.get("attr_id") == attr_id:
            return _to_float(nutrient.get("value"))
    return 0.0


def _to_float(value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return 0.0
    number = float(value)
    if not math.isfinite(number):
        return 0.0
    return max(number, 0.0)


def _status_code_from_exception(exc: Exception) -> str:
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"
