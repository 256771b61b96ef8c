"""Grouping of validated rows into meal drafts."""

from collections.abc import Iterable
from datetime import date, timedelta

from meal_importer.domain.imports import (
    MEAL_TYPES,
    STANDARD_GRAMS,
    WEEKDAYS,
    MealDraft,
    MealItem,
    RawRow,
    ValidatedRow,
    WeeklyGrid,
)


def aggregate(rows: Iterable[ValidatedRow]) -> list[MealDraft]:
    """Group rows by (date, meal type) into drafts, keeping row order."""
    groups: dict[tuple[str, str], list[ValidatedRow]] = {}
    for row in rows:
        groups.setdefault((row.date, row.meal_type), []).append(row)

    drafts: list[MealDraft] = []
    for (meal_date, meal_type), members in groups.items():
        items = tuple(
            MealItem(
                food_name=member.food_name,
                grams=member.grams,
                notes=member.notes,
                nutrition=member.nutrition,
            )
            for member in members
        )
        notes = next((member.notes for member in members if member.notes), "")
        drafts.append(
            MealDraft(date=meal_date, meal_type=meal_type, items=items, notes=notes)
        )
    return drafts


def build_weekly_rows(grid: WeeklyGrid, today: date) -> list[RawRow]:
    """Turn a weekday x meal-type assignment grid into import rows.

    Each assigned food becomes one row dated ``today`` plus the weekday
    ordinal (Monday is 0) with the standard quantity for its meal type.
    """
    days = {day.strip().lower(): cells for day, cells in grid.items()}
    unknown_days = sorted(set(days) - set(WEEKDAYS))
    if unknown_days:
        raise ValueError(f"Unknown weekday(s): {', '.join(unknown_days)}")

    rows: list[RawRow] = []
    for offset, day in enumerate(WEEKDAYS):
        cells = {
            meal_type.strip().lower(): foods
            for meal_type, foods in (days.get(day) or {}).items()
        }
        unknown_meals = sorted(set(cells) - set(MEAL_TYPES))
        if unknown_meals:
            raise ValueError(
                f"Unknown meal type(s) for {day}: {', '.join(unknown_meals)}"
            )
        meal_date = (today + timedelta(days=offset)).isoformat()
        for meal_type in MEAL_TYPES:
            for food_name in cells.get(meal_type) or []:
                rows.append(
                    {
                        "date": meal_date,
                        "mealType": meal_type,
                        "foodName": food_name,
                        "grams": _format_grams(STANDARD_GRAMS[meal_type]),
                        "notes": f"Standard portion for {meal_type}",
                    }
                )
    return rows


def _format_grams(grams: float) -> str:
    return f"{grams:g}"
