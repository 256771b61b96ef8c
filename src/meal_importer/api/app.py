"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import UUID

from fastapi import FastAPI, HTTPException, Request, Response, status

from meal_importer.api.models import (
    FoodListResponse,
    ImportSummaryModel,
    WeeklyPlanRequest,
)
from meal_importer.app_logging import configure_logging
from meal_importer.containers import AppContainer
from meal_importer.domain.imports import ParseFailure
from meal_importer.services.templates import (
    FOOD_LIST_TEMPLATE_FILENAME,
    MEAL_PLAN_TEMPLATE_FILENAME,
    food_list_template,
    meal_plan_template,
)

_CSV_MEDIA_TYPE = "text/csv; charset=utf-8"


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/imports/meal-plan")
    async def import_meal_plan(
        request: Request, owner_id: UUID, encoding: str = "utf-8"
    ) -> ImportSummaryModel:
        """Import a meal-plan CSV sent as the raw request body."""
        state_container: AppContainer = request.app.state.container
        data = await request.body()
        try:
            summary = await state_container.import_service.import_csv(
                owner_id, data, encoding
            )
        except ParseFailure as exc:
            logger.info("Rejected meal-plan upload: %s", exc.reason)
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail={"stage": exc.stage.value, "reason": exc.reason},
            ) from exc
        return ImportSummaryModel.from_summary(summary)

    @app.post("/imports/food-list")
    async def import_food_list(
        request: Request, encoding: str = "utf-8"
    ) -> FoodListResponse:
        """Read food names from a simple food-list CSV."""
        state_container: AppContainer = request.app.state.container
        data = await request.body()
        try:
            foods = state_container.import_service.parse_food_list(data, encoding)
        except ParseFailure as exc:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail={"stage": exc.stage.value, "reason": exc.reason},
            ) from exc
        return FoodListResponse(foods=foods)

    @app.post("/imports/weekly-plan")
    async def import_weekly_plan(
        payload: WeeklyPlanRequest, request: Request
    ) -> ImportSummaryModel:
        """Create meals from a weekly grid of food names."""
        state_container: AppContainer = request.app.state.container
        grid = {
            day: {meal_type: list(foods) for meal_type, foods in meals.items()}
            for day, meals in payload.plan.items()
        }
        try:
            summary = await state_container.import_service.import_weekly_plan(
                payload.owner_id, grid
            )
        except ValueError as exc:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
            ) from exc
        return ImportSummaryModel.from_summary(summary)

    @app.get("/templates/meal-plan.csv")
    async def meal_plan_template_csv() -> Response:
        """Download the meal-plan template."""
        return _csv_response(meal_plan_template(), MEAL_PLAN_TEMPLATE_FILENAME)

    @app.get("/templates/food-list.csv")
    async def food_list_template_csv() -> Response:
        """Download the food-list template."""
        return _csv_response(food_list_template(), FOOD_LIST_TEMPLATE_FILENAME)

    return app


def _csv_response(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=_CSV_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
