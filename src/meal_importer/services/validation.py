"""Validation and enrichment of parsed meal-plan rows."""

import math
import re
from dataclasses import dataclass
from datetime import date, datetime

from meal_importer.domain.imports import (
    MEAL_TYPES,
    RawRow,
    RowRejection,
    ValidatedRow,
)
from meal_importer.services.nutrition import NutritionGateway
from meal_importer.services.scaling import scale_profile

REQUIRED_COLUMNS: tuple[str, ...] = ("date", "mealType", "foodName", "grams")
OPTIONAL_COLUMNS: tuple[str, ...] = ("notes",)

_DATE_FORMATS = ("%Y-%m-%d", "%Y/%m/%d", "%d/%m/%Y", "%d.%m.%Y")
_GRAMS_PATTERN = re.compile(
    r"\d+(?:(?P<separator>[.,])(?P<fraction>\d+))?", re.ASCII
)


@dataclass
class RowValidator:
    """Validates rows and attaches nutrition resolved by food name."""

    gateway: NutritionGateway

    def check(self, row: RawRow, row_index: int) -> ValidatedRow | RowRejection:
        """Apply the structural rules, without nutrition lookup.

        Every rule is evaluated so that a rejection lists all problems.
        """
        values = {
            column: (row.get(column) or "").strip() for column in REQUIRED_COLUMNS
        }
        reasons: list[str] = []

        missing = [column for column, value in values.items() if not value]
        if missing:
            reasons.append(
                "missing or empty column(s): "
                + ", ".join(f"'{column}'" for column in missing)
            )

        parsed_date = None
        if values["date"]:
            parsed_date = parse_date(values["date"])
            if parsed_date is None:
                reasons.append(f"invalid date: {values['date']}")

        meal_type = values["mealType"].lower()
        if values["mealType"] and meal_type not in MEAL_TYPES:
            reasons.append(
                f"invalid meal type: {values['mealType']}. "
                f"Accepted values: {', '.join(MEAL_TYPES)}"
            )

        grams = None
        if values["grams"]:
            grams = parse_grams(values["grams"])
            if grams is None:
                reasons.append(
                    f"invalid quantity: {values['grams']}. Must be a positive number"
                )

        if reasons or parsed_date is None or grams is None:
            return RowRejection(row_index=row_index, reasons=tuple(reasons))

        return ValidatedRow(
            row_index=row_index,
            date=parsed_date.isoformat(),
            meal_type=meal_type,
            food_name=values["foodName"],
            grams=grams,
            notes=(row.get("notes") or "").strip(),
        )

    async def validate(
        self, row: RawRow, row_index: int
    ) -> ValidatedRow | RowRejection:
        """Validate a row and resolve its nutrition."""
        checked = self.check(row, row_index)
        if isinstance(checked, RowRejection):
            return checked
        match = await self.gateway.resolve(checked.food_name)
        if match is None:
            return checked
        return ValidatedRow(
            row_index=checked.row_index,
            date=checked.date,
            meal_type=checked.meal_type,
            food_name=checked.food_name,
            grams=checked.grams,
            notes=checked.notes,
            nutrition=scale_profile(match.per_100g, checked.grams),
            resolved=True,
        )


def parse_date(value: str) -> date | None:
    """Parse a calendar date in one of the accepted formats."""
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


def parse_grams(value: str) -> float | None:
    """Parse a strictly positive gram quantity.

    Plain decimals only. A decimal comma is accepted, but not when exactly
    three digits follow it, since ``1,000`` reads as a thousands separator.
    """
    match = _GRAMS_PATTERN.fullmatch(value.strip())
    if match is None:
        return None
    separator, fraction = match.group("separator"), match.group("fraction")
    if separator == "," and len(fraction) == 3:
        return None
    grams = float(value.strip().replace(",", "."))
    if not math.isfinite(grams) or grams <= 0:
        return None
    return grams
