"""CSV templates users can fill in and import."""

import csv
import io

from meal_importer.services.parsing import FOOD_NAME_COLUMN
from meal_importer.services.validation import OPTIONAL_COLUMNS, REQUIRED_COLUMNS

MEAL_PLAN_TEMPLATE_FILENAME = "meal_plan_template.csv"
FOOD_LIST_TEMPLATE_FILENAME = "food_list_template.csv"

REFERENCE_FOODS: tuple[str, ...] = (
    "Greek yogurt",
    "Chicken breast",
    "Salmon",
    "Oats",
    "Brown rice",
    "Eggs",
    "Apple",
    "Wholemeal bread",
    "Tuna",
    "Quinoa",
    "Banana",
    "Spinach",
    "Tomatoes",
    "Avocado",
    "Almonds",
)

# (date, meal type, reference food index, grams, notes)
_SAMPLE_MEALS: tuple[tuple[str, str, int, int, str], ...] = (
    ("2024-01-15", "breakfast", 0, 150, "With honey and walnuts"),
    ("2024-01-15", "lunch", 1, 200, "Grilled, with vegetables"),
    ("2024-01-15", "dinner", 2, 180, "Baked, with potatoes"),
    ("2024-01-15", "snack", 6, 120, "Seasonal fruit"),
    ("2024-01-16", "breakfast", 3, 80, "With milk and berries"),
    ("2024-01-16", "lunch", 4, 100, "With mixed vegetables"),
    ("2024-01-16", "dinner", 5, 120, "Hard-boiled, with salad"),
    ("2024-01-17", "breakfast", 7, 60, "With avocado and tomato"),
    ("2024-01-17", "lunch", 8, 150, "Canned in water"),
    ("2024-01-17", "dinner", 9, 80, "With stir-fried vegetables"),
)


def meal_plan_template() -> str:
    """Return a meal-plan CSV pre-filled with sample rows."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(REQUIRED_COLUMNS + OPTIONAL_COLUMNS)
    for meal_date, meal_type, food_index, grams, notes in _SAMPLE_MEALS:
        food_name = REFERENCE_FOODS[food_index]
        writer.writerow([meal_date, meal_type, food_name, grams, notes])
    return buffer.getvalue()


def food_list_template() -> str:
    """Return a single-column food list CSV."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow([FOOD_NAME_COLUMN])
    writer.writerows([food] for food in REFERENCE_FOODS)
    return buffer.getvalue()
