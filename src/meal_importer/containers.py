"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from meal_importer.adapters.nutritionix_client import HttpxNutritionixClient
from meal_importer.adapters.supabase_meal_repository import SupabaseMealRepository
from meal_importer.config import Settings
from meal_importer.services.cache import InMemoryCache
from meal_importer.services.importer import MealImportService
from meal_importer.services.nutrition import NutritionService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    nutrition_service: NutritionService
    import_service: MealImportService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    meal_repository = SupabaseMealRepository(supabase_client)
    nutritionix_client = HttpxNutritionixClient.create(
        app_id=resolved_settings.nutritionix_app_id,
        api_key=resolved_settings.nutritionix_api_key,
        base_url=resolved_settings.nutritionix_base_url,
    )
    nutrition_service = NutritionService(
        client=nutritionix_client,
        cache=InMemoryCache(resolved_settings.nutrition_cache_max_entries),
        ttl_seconds=resolved_settings.nutrition_cache_ttl_seconds,
        debug=resolved_settings.nutrition_debug,
    )
    import_service = MealImportService(
        gateway=nutrition_service,
        repository=meal_repository,
        concurrency=resolved_settings.import_concurrency,
    )

    async def close_resources() -> None:
        await nutritionix_client.close()

    return AppContainer(
        settings=resolved_settings,
        nutrition_service=nutrition_service,
        import_service=import_service,
        close_resources=close_resources,
    )
