"""Domain models for meal imports."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID

from meal_importer.domain.nutrition import ForQuantity

RawRow = dict[str, str]

# Header line plus 1-based numbering.
ROW_NUMBER_OFFSET = 2


class MealType(StrEnum):
    """Accepted meal types."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"
    SNACK = "snack"


MEAL_TYPES: tuple[str, ...] = tuple(meal_type.value for meal_type in MealType)

WEEKDAYS: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

STANDARD_GRAMS: dict[str, float] = {
    MealType.BREAKFAST: 150,
    MealType.LUNCH: 200,
    MealType.DINNER: 180,
    MealType.SNACK: 100,
}

WeeklyGrid = dict[str, dict[str, list[str]]]


class ImportStage(StrEnum):
    """Lifecycle stages of a single import run."""

    IDLE = "idle"
    PARSING = "parsing"
    VALIDATING = "validating"
    AGGREGATING = "aggregating"
    PERSISTING = "persisting"
    DONE = "done"
    FAILED = "failed"


class ParseFailure(Exception):
    """Raised when a file cannot be turned into rows at all."""

    stage = ImportStage.PARSING

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


def row_number(row_index: int) -> int:
    """Return the user-facing row number for a 0-based data row index."""
    return row_index + ROW_NUMBER_OFFSET


@dataclass(frozen=True)
class ValidatedRow:
    """A row that passed validation, with optional nutrition."""

    row_index: int
    date: str
    meal_type: str
    food_name: str
    grams: float
    notes: str = ""
    nutrition: ForQuantity | None = None
    resolved: bool = False


@dataclass(frozen=True)
class RowRejection:
    """A row that failed validation."""

    row_index: int
    reasons: tuple[str, ...]

    @property
    def message(self) -> str:
        """Single user-facing message listing every complaint."""
        return f"Row {row_number(self.row_index)}: {'; '.join(self.reasons)}"


@dataclass(frozen=True)
class ImportIssue:
    """A problem recorded during an import run."""

    messages: tuple[str, ...]
    row_index: int | None = None
    meal_key: tuple[str, str] | None = None

    @property
    def label(self) -> str:
        """Where the issue happened, for display."""
        if self.row_index is not None:
            return f"Row {row_number(self.row_index)}"
        if self.meal_key is not None:
            return f"Meal {self.meal_key[0]} {self.meal_key[1]}"
        return "Import"

    def describe(self) -> str:
        """Return the issue as a single line."""
        return f"{self.label}: {'; '.join(self.messages)}"


@dataclass(frozen=True)
class MealItem:
    """A food entry inside a meal draft."""

    food_name: str
    grams: float
    notes: str = ""
    nutrition: ForQuantity | None = None


@dataclass(frozen=True)
class MealDraft:
    """An aggregated, not yet persisted meal."""

    date: str
    meal_type: str
    items: tuple[MealItem, ...]
    notes: str = ""

    @property
    def key(self) -> tuple[str, str]:
        """Grouping key of this draft."""
        return (self.date, self.meal_type)


@dataclass(frozen=True)
class MealRecord:
    """A meal as handed to the persistence collaborator."""

    owner_id: UUID
    date: str
    meal_type: str
    items: tuple[MealItem, ...]
    notes: str
    created_at: datetime
    updated_at: datetime
    totals: ForQuantity
    completed: bool = False


@dataclass(frozen=True)
class ImportSummary:
    """Outcome of an import run."""

    succeeded: int
    attempted: int
    rejected: int = 0
    issues: tuple[ImportIssue, ...] = field(default_factory=tuple)
    stage: ImportStage = ImportStage.DONE
