"""Supabase repository for imported meals."""

from dataclasses import dataclass

from supabase import Client

from meal_importer.domain.imports import MealItem, MealRecord
from meal_importer.services.importer import MealRepository


@dataclass
class SupabaseMealRepository(MealRepository):
    """Supabase implementation for meals."""

    client: Client

    def create_meal(self, record: MealRecord) -> str:
        """Insert a meal row and return its id."""
        response = (
            self.client.table("meals")
            .insert(
                {
                    "user_id": str(record.owner_id),
                    "date": record.date,
                    "type": record.meal_type,
                    "items": [_item_payload(item) for item in record.items],
                    "completed": record.completed,
                    "notes": record.notes,
                    "created_at": record.created_at.isoformat(),
                    "updated_at": record.updated_at.isoformat(),
                    "calories": record.totals.kcal,
                    "protein": record.totals.protein,
                    "carbs": record.totals.carbs,
                    "fats": record.totals.fats,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create meal")
        return str(response.data[0]["id"])


def _item_payload(item: MealItem) -> dict[str, object]:
    return {
        "food_name": item.food_name,
        "grams": item.grams,
        "notes": item.notes,
        "calculated_nutrients": item.nutrition.as_dict() if item.nutrition else None,
    }
