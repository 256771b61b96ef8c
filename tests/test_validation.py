"""Tests for row validation and enrichment."""

import asyncio

from meal_importer.domain.imports import RowRejection, ValidatedRow
from meal_importer.services.scaling import scale_profile
from meal_importer.services.validation import RowValidator, parse_date, parse_grams
from tests.conftest import OATS, FakeNutritionGateway


def _row(
    date: str = "2024-01-15",
    meal_type: str = "breakfast",
    food_name: str = "Oats",
    grams: str = "80",
    notes: str = "",
) -> dict[str, str]:
    return {
        "date": date,
        "mealType": meal_type,
        "foodName": food_name,
        "grams": grams,
        "notes": notes,
    }


def test_valid_row_is_enriched() -> None:
    validator = RowValidator(FakeNutritionGateway())

    result = asyncio.run(validator.validate(_row(notes=" with honey "), 0))

    assert isinstance(result, ValidatedRow)
    assert result.resolved is True
    assert result.meal_type == "breakfast"
    assert result.grams == 80
    assert result.notes == "with honey"
    assert result.nutrition == scale_profile(OATS.per_100g, 80)


def test_missing_food_name_is_rejected() -> None:
    validator = RowValidator(FakeNutritionGateway())

    result = asyncio.run(
        validator.validate(_row(meal_type="lunch", food_name="", grams="150"), 0)
    )

    assert isinstance(result, RowRejection)
    assert result.reasons == ("missing or empty column(s): 'foodName'",)


def test_invalid_meal_type_lists_accepted_values() -> None:
    validator = RowValidator(FakeNutritionGateway())

    result = asyncio.run(
        validator.validate(_row(meal_type="brunch", food_name="Eggs", grams="100"), 3)
    )

    assert isinstance(result, RowRejection)
    assert len(result.reasons) == 1
    assert "brunch" in result.reasons[0]
    assert "breakfast, lunch, dinner, snack" in result.reasons[0]
    assert result.message.startswith("Row 5: ")


def test_rejection_lists_every_problem_in_one_message() -> None:
    validator = RowValidator(FakeNutritionGateway())
    row = {"date": "2024-01-15", "mealType": "brunch", "foodName": "Eggs"}

    result = validator.check(row, 0)

    assert isinstance(result, RowRejection)
    assert len(result.reasons) == 2
    assert "'grams'" in result.message
    assert "brunch" in result.message


def test_every_missing_column_is_named_once() -> None:
    validator = RowValidator(FakeNutritionGateway())

    result = validator.check({"notes": "nothing else"}, 0)

    assert isinstance(result, RowRejection)
    assert result.reasons == (
        "missing or empty column(s): 'date', 'mealType', 'foodName', 'grams'",
    )


def test_invalid_date_and_grams_are_echoed() -> None:
    validator = RowValidator(FakeNutritionGateway())

    result = validator.check(_row(date="2024-13-45", grams="-5"), 0)

    assert isinstance(result, RowRejection)
    assert "invalid date: 2024-13-45" in result.reasons
    assert any("-5" in reason for reason in result.reasons)


def test_unresolved_food_survives_without_nutrition() -> None:
    gateway = FakeNutritionGateway()
    validator = RowValidator(gateway)

    result = asyncio.run(validator.validate(_row(food_name="Unobtainium Paste"), 0))

    assert isinstance(result, ValidatedRow)
    assert result.resolved is False
    assert result.nutrition is None
    assert gateway.calls == ["Unobtainium Paste"]


def test_rejected_rows_skip_the_lookup() -> None:
    gateway = FakeNutritionGateway()
    validator = RowValidator(gateway)

    asyncio.run(validator.validate(_row(grams="abc"), 0))

    assert gateway.calls == []


def test_meal_type_and_date_are_normalized() -> None:
    validator = RowValidator(FakeNutritionGateway())

    result = validator.check(_row(date="15/01/2024", meal_type=" Breakfast "), 0)

    assert isinstance(result, ValidatedRow)
    assert result.date == "2024-01-15"
    assert result.meal_type == "breakfast"


def test_validation_is_idempotent() -> None:
    validator = RowValidator(FakeNutritionGateway())
    rows = [_row(), _row(food_name="Milk", grams="200"), _row(meal_type="brunch")]

    first = [asyncio.run(validator.validate(row, i)) for i, row in enumerate(rows)]
    second = [asyncio.run(validator.validate(row, i)) for i, row in enumerate(rows)]

    assert first == second


def test_parse_grams() -> None:
    assert parse_grams("80") == 80
    assert parse_grams("80,5") == 80.5
    assert parse_grams("0") is None
    assert parse_grams("nan") is None
    assert parse_grams("ten") is None


def test_parse_date() -> None:
    assert parse_date("2024-01-15").isoformat() == "2024-01-15"
    assert parse_date("15.01.2024").isoformat() == "2024-01-15"
    assert parse_date("yesterday") is None


def test_parse_grams_accepts_plain_decimals_only() -> None:
    assert parse_grams(" 150.25 ") == 150.25
    assert parse_grams("0,5") == 0.5
    assert parse_grams("1_000") is None
    assert parse_grams("1,000") is None
    assert parse_grams("1e3") is None
    assert parse_grams("-80") is None
    assert parse_grams("+80") is None
    assert parse_grams("80.") is None


def test_thousands_separator_is_rejected_not_misread() -> None:
    validator = RowValidator(FakeNutritionGateway())

    outcome = validator.check(_row(grams="1,000"), 0)

    assert isinstance(outcome, RowRejection)
    assert outcome.reasons == ("invalid quantity: 1,000. Must be a positive number",)
