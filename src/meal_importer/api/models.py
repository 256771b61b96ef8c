"""Pydantic models for the import API."""

from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from meal_importer.domain.imports import ImportIssue, ImportSummary, row_number

Weekday = Literal[
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"
]
MealTypeName = Literal["breakfast", "lunch", "dinner", "snack"]


class WeeklyPlanRequest(BaseModel):
    """Weekly grid of food names per weekday and meal type."""

    owner_id: UUID
    plan: dict[Weekday, dict[MealTypeName, list[str]]] = Field(default_factory=dict)


class ImportIssueModel(BaseModel):
    """Import issue payload."""

    label: str
    row: int | None = None
    date: str | None = None
    meal_type: str | None = None
    messages: list[str]

    @classmethod
    def from_issue(cls, issue: ImportIssue) -> "ImportIssueModel":
        return cls(
            label=issue.label,
            row=(
                row_number(issue.row_index) if issue.row_index is not None else None
            ),
            date=issue.meal_key[0] if issue.meal_key else None,
            meal_type=issue.meal_key[1] if issue.meal_key else None,
            messages=list(issue.messages),
        )


class ImportSummaryModel(BaseModel):
    """Import summary payload."""

    stage: str
    succeeded: int
    attempted: int
    rejected: int
    issues: list[ImportIssueModel]

    @classmethod
    def from_summary(cls, summary: ImportSummary) -> "ImportSummaryModel":
        return cls(
            stage=summary.stage.value,
            succeeded=summary.succeeded,
            attempted=summary.attempted,
            rejected=summary.rejected,
            issues=[ImportIssueModel.from_issue(issue) for issue in summary.issues],
        )


class FoodListResponse(BaseModel):
    """Food names read from a food-list file."""

    foods: list[str]
