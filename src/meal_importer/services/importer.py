"""Import orchestration: parse, validate, aggregate, persist."""

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from meal_importer.domain.imports import (
    ImportIssue,
    ImportStage,
    ImportSummary,
    MealDraft,
    MealRecord,
    ParseFailure,
    RawRow,
    RowRejection,
    ValidatedRow,
    WeeklyGrid,
)
from meal_importer.domain.nutrition import ForQuantity
from meal_importer.services.aggregation import aggregate, build_weekly_rows
from meal_importer.services.nutrition import NutritionGateway
from meal_importer.services.parsing import parse_food_list, parse_rows
from meal_importer.services.scaling import sum_profiles
from meal_importer.services.validation import RowValidator

_TRANSITIONS: dict[ImportStage, frozenset[ImportStage]] = {
    ImportStage.IDLE: frozenset({ImportStage.PARSING, ImportStage.VALIDATING}),
    ImportStage.PARSING: frozenset({ImportStage.VALIDATING, ImportStage.FAILED}),
    ImportStage.VALIDATING: frozenset({ImportStage.AGGREGATING}),
    ImportStage.AGGREGATING: frozenset({ImportStage.PERSISTING}),
    ImportStage.PERSISTING: frozenset({ImportStage.DONE}),
    ImportStage.DONE: frozenset(),
    ImportStage.FAILED: frozenset(),
}

DEFAULT_CONCURRENCY = 4

_logger = logging.getLogger(__name__)


class MealRepository(Protocol):
    """Persistence interface for imported meals."""

    def create_meal(self, record: MealRecord) -> str:
        """Persist a meal and return its id."""


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass(frozen=True)
class RunContext:
    """Collaborators and identity for one import run."""

    owner_id: UUID
    store: MealRepository
    gateway: NutritionGateway
    now: Callable[[], datetime] = _utc_now


@dataclass
class ImportRun:
    """A single import run through the pipeline stages."""

    context: RunContext
    concurrency: int = DEFAULT_CONCURRENCY
    stage: ImportStage = ImportStage.IDLE
    history: list[ImportStage] = field(default_factory=list)

    async def run_csv(self, data: bytes, encoding: str = "utf-8") -> ImportSummary:
        """Import a meal-plan CSV file.

        Raises ParseFailure when the file yields no rows at all; every
        later problem is reported inside the summary.
        """
        self._advance(ImportStage.PARSING)
        try:
            rows = parse_rows(data, encoding)
        except ParseFailure as exc:
            self._advance(ImportStage.FAILED)
            _logger.warning("Meal import failed while parsing: %s", exc.reason)
            raise
        return await self._process(rows, issues_by_row=True)

    async def run_weekly_plan(self, grid: WeeklyGrid) -> ImportSummary:
        """Import meals assigned on a weekday x meal-type grid."""
        rows = build_weekly_rows(grid, self.context.now().date())
        return await self._process(rows, issues_by_row=False)

    async def _process(
        self, rows: Sequence[RawRow], *, issues_by_row: bool
    ) -> ImportSummary:
        self._advance(ImportStage.VALIDATING)
        outcomes = await self._validate_all(rows)

        issues: list[ImportIssue] = []
        valid: list[ValidatedRow] = []
        rejected = 0
        for outcome in outcomes:
            if isinstance(outcome, RowRejection):
                rejected += 1
                row = rows[outcome.row_index]
                issues.append(
                    ImportIssue(messages=outcome.reasons, row_index=outcome.row_index)
                    if issues_by_row
                    else ImportIssue(
                        messages=outcome.reasons,
                        meal_key=(row["date"], row["mealType"]),
                    )
                )
                continue
            valid.append(outcome)
            if not outcome.resolved:
                message = (
                    f"food '{outcome.food_name}' not found in the nutrition database"
                )
                issues.append(
                    ImportIssue(messages=(message,), row_index=outcome.row_index)
                    if issues_by_row
                    else ImportIssue(
                        messages=(message,),
                        meal_key=(outcome.date, outcome.meal_type),
                    )
                )

        self._advance(ImportStage.AGGREGATING)
        drafts = aggregate(valid)

        self._advance(ImportStage.PERSISTING)
        succeeded = 0
        for draft in drafts:
            try:
                self._persist(draft)
            except Exception as exc:
                _logger.exception(
                    "Failed to persist meal %s %s", draft.date, draft.meal_type
                )
                issues.append(
                    ImportIssue(
                        messages=(f"could not save meal: {exc}",),
                        meal_key=draft.key,
                    )
                )
            else:
                succeeded += 1

        self._advance(ImportStage.DONE)
        _logger.info(
            "Meal import done: %s/%s meals saved, %s rows rejected, %s issues",
            succeeded,
            len(drafts),
            rejected,
            len(issues),
        )
        return ImportSummary(
            succeeded=succeeded,
            attempted=len(drafts),
            rejected=rejected,
            issues=tuple(issues),
            stage=self.stage,
        )

    async def _validate_all(
        self, rows: Sequence[RawRow]
    ) -> list[ValidatedRow | RowRejection]:
        validator = RowValidator(self.context.gateway)
        semaphore = asyncio.Semaphore(max(self.concurrency, 1))

        async def validate(row: RawRow, row_index: int) -> ValidatedRow | RowRejection:
            async with semaphore:
                return await validator.validate(row, row_index)

        outcomes = await asyncio.gather(
            *(validate(row, row_index) for row_index, row in enumerate(rows))
        )
        return sorted(outcomes, key=lambda outcome: outcome.row_index)

    def _persist(self, draft: MealDraft) -> str:
        timestamp = self.context.now()
        nutrition = [item.nutrition for item in draft.items if item.nutrition]
        record = MealRecord(
            owner_id=self.context.owner_id,
            date=draft.date,
            meal_type=draft.meal_type,
            items=draft.items,
            notes=draft.notes,
            created_at=timestamp,
            updated_at=timestamp,
            totals=sum_profiles(nutrition) if nutrition else ForQuantity(),
            completed=False,
        )
        return self.context.store.create_meal(record)

    def _advance(self, stage: ImportStage) -> None:
        if stage not in _TRANSITIONS[self.stage]:
            raise RuntimeError(
                f"Invalid import stage transition {self.stage} -> {stage}"
            )
        self.history.append(stage)
        self.stage = stage


@dataclass
class MealImportService:
    """Entry point for meal imports, one run per request."""

    gateway: NutritionGateway
    repository: MealRepository
    concurrency: int = DEFAULT_CONCURRENCY
    now: Callable[[], datetime] = _utc_now

    def new_run(self, owner_id: UUID) -> ImportRun:
        """Create a run bound to an owner."""
        context = RunContext(
            owner_id=owner_id,
            store=self.repository,
            gateway=self.gateway,
            now=self.now,
        )
        return ImportRun(context=context, concurrency=self.concurrency)

    async def import_csv(
        self, owner_id: UUID, data: bytes, encoding: str = "utf-8"
    ) -> ImportSummary:
        """Import a meal-plan CSV for an owner."""
        return await self.new_run(owner_id).run_csv(data, encoding)

    async def import_weekly_plan(
        self, owner_id: UUID, grid: WeeklyGrid
    ) -> ImportSummary:
        """Import a weekly grid for an owner."""
        return await self.new_run(owner_id).run_weekly_plan(grid)

    def parse_food_list(self, data: bytes, encoding: str = "utf-8") -> list[str]:
        """Read the food names of a simple food-list file."""
        return parse_food_list(data, encoding)
