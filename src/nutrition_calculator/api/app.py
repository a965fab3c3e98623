"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date
from uuid import UUID

from fastapi import FastAPI, Query, Request, status
from fastapi.responses import JSONResponse

from nutrition_calculator.api.schemas import (
    EntryCreate,
    EntryUpdate,
    GoalsPayload,
    PortionAdjust,
    ProfilePayload,
    TextEstimateRequest,
)
from nutrition_calculator.app_logging import configure_logging
from nutrition_calculator.containers import AppContainer
from nutrition_calculator.domain.entries import FoodEntry
from nutrition_calculator.domain.errors import (
    EntryNotFoundError,
    EstimateError,
    PortionEditNotAllowedError,
    RecordStoreError,
    SupersededEstimateError,
)
from nutrition_calculator.domain.summary import DayOverview
from nutrition_calculator.domain.targets import NutritionGoals, UserProfile
from nutrition_calculator.services import recommendations
from nutrition_calculator.services.food_log import MAX_HISTORY_DAYS, MAX_RESULT_LIMIT


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(EntryNotFoundError)
    async def entry_not_found(_: Request, exc: EntryNotFoundError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)}
        )

    @app.exception_handler(PortionEditNotAllowedError)
    async def portion_edit_not_allowed(
        _: Request, exc: PortionEditNotAllowedError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)}
        )

    @app.exception_handler(EstimateError)
    async def estimate_failed(_: Request, exc: EstimateError) -> JSONResponse:
        if isinstance(exc, SupersededEstimateError):
            return JSONResponse(
                status_code=status.HTTP_409_CONFLICT,
                content={"status": "superseded", "detail": str(exc)},
            )
        logger.warning("Macro estimate failed: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"status": "failed", "detail": str(exc)},
        )

    @app.exception_handler(RecordStoreError)
    async def record_store_failed(_: Request, exc: RecordStoreError) -> JSONResponse:
        logger.error("Record store failure: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"detail": str(exc)},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/days/today")
    async def today(request: Request) -> dict[str, object]:
        """Return today's entries, totals and goal progress."""
        state_container: AppContainer = request.app.state.container
        return _serialize_day(state_container.food_log_service.get_today())

    @app.get("/days")
    async def recent_days(
        request: Request,
        count: int | None = Query(default=None, ge=1, le=MAX_HISTORY_DAYS),
    ) -> dict[str, object]:
        """Return the last days ending today, oldest first."""
        state_container: AppContainer = request.app.state.container
        overviews = state_container.food_log_service.recent_days(count)
        return {"days": [_serialize_day(overview) for overview in overviews]}

    @app.get("/days/{day}")
    async def day_overview(day: date, request: Request) -> dict[str, object]:
        """Return one day's entries, totals and goal progress."""
        state_container: AppContainer = request.app.state.container
        return _serialize_day(state_container.food_log_service.get_day(day))

    @app.post("/entries", status_code=status.HTTP_201_CREATED)
    async def create_entry(payload: EntryCreate, request: Request) -> dict[str, object]:
        """Log a food entry."""
        state_container: AppContainer = request.app.state.container
        entry = state_container.food_log_service.create_entry(
            payload.name,
            payload.totals,
            portions=payload.portions,
            short_label=payload.short_label,
            logged_at=payload.logged_at,
            weight_g=payload.weight_g,
            source_estimates=[
                source.to_domain() for source in payload.alternative_sources
            ],
        )
        return _serialize_entry(entry)

    @app.get("/entries/search")
    async def search_entries(
        request: Request,
        q: str = "",
        limit: int | None = Query(default=None, ge=1, le=MAX_RESULT_LIMIT),
    ) -> dict[str, object]:
        """Search previously logged foods by name."""
        state_container: AppContainer = request.app.state.container
        entries = state_container.food_log_service.search(q, limit)
        return {"entries": [_serialize_entry(entry) for entry in entries]}

    @app.get("/entries/frequent")
    async def frequent_entries(
        request: Request,
        limit: int | None = Query(default=None, ge=1, le=MAX_RESULT_LIMIT),
    ) -> dict[str, object]:
        """Return the most frequently logged foods."""
        state_container: AppContainer = request.app.state.container
        entries = state_container.food_log_service.top_frequent(limit)
        return {"entries": [_serialize_entry(entry) for entry in entries]}

    @app.post("/entries/{entry_id}/portions")
    async def adjust_portions(
        entry_id: UUID, payload: PortionAdjust, request: Request
    ) -> dict[str, object]:
        """Change the portion count of an entry logged today."""
        state_container: AppContainer = request.app.state.container
        entry = state_container.food_log_service.adjust_portions(
            entry_id, payload.delta
        )
        return _serialize_entry(entry)

    @app.patch("/entries/{entry_id}")
    async def update_entry(
        entry_id: UUID, payload: EntryUpdate, request: Request
    ) -> dict[str, object]:
        """Rename an entry or change its short label."""
        state_container: AppContainer = request.app.state.container
        entry = state_container.food_log_service.rename(
            entry_id, name=payload.name, short_label=payload.short_label
        )
        return _serialize_entry(entry)

    @app.delete("/entries/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_entry(entry_id: UUID, request: Request) -> None:
        """Delete an entry."""
        state_container: AppContainer = request.app.state.container
        state_container.food_log_service.delete_entry(entry_id)

    @app.get("/goals")
    async def get_goals(request: Request) -> dict[str, float]:
        state_container: AppContainer = request.app.state.container
        return _serialize_goals(state_container.targets_service.get_goals())

    @app.put("/goals")
    async def save_goals(payload: GoalsPayload, request: Request) -> dict[str, float]:
        state_container: AppContainer = request.app.state.container
        goals = payload.to_domain()
        state_container.targets_service.save_goals(goals)
        return _serialize_goals(goals)

    @app.get("/goals/recommended")
    async def recommended_goals(request: Request) -> dict[str, float]:
        """Return goals recommended for the saved profile."""
        state_container: AppContainer = request.app.state.container
        return _serialize_goals(state_container.targets_service.get_recommended_goals())

    @app.get("/profile")
    async def get_profile(request: Request) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        return _serialize_profile(state_container.targets_service.get_profile())

    @app.put("/profile")
    async def save_profile(
        payload: ProfilePayload, request: Request
    ) -> dict[str, object]:
        state_container: AppContainer = request.app.state.container
        profile = payload.to_domain()
        state_container.targets_service.save_profile(profile)
        return _serialize_profile(profile)

    @app.get("/profile/metrics")
    async def profile_metrics(request: Request) -> dict[str, float]:
        """Return body metrics derived from the saved profile."""
        state_container: AppContainer = request.app.state.container
        profile = state_container.targets_service.get_profile()
        return {
            "bmi": recommendations.body_mass_index(profile),
            "lean_body_mass_kg": recommendations.lean_body_mass(profile),
            "bmr": recommendations.basal_metabolic_rate(profile),
            "tdee": recommendations.total_daily_energy_expenditure(profile),
        }

    @app.post("/estimates/photo")
    async def estimate_photo(request: Request) -> dict[str, object]:
        """Estimate macros from a raw image request body."""
        state_container: AppContainer = request.app.state.container
        image_bytes = await request.body()
        estimate = await state_container.estimator_service.estimate_photo(image_bytes)
        return {"status": "ok", "estimate": estimate.model_dump()}

    @app.post("/estimates/text")
    async def estimate_text(
        payload: TextEstimateRequest, request: Request
    ) -> dict[str, object]:
        """Estimate macros from a food description."""
        state_container: AppContainer = request.app.state.container
        estimate = await state_container.estimator_service.estimate_text(payload.query)
        return {"status": "ok", "estimate": estimate.model_dump()}

    return app


def _serialize_entry(entry: FoodEntry) -> dict[str, object]:
    return {
        "id": str(entry.id),
        "name": entry.name,
        "short_label": entry.short_label,
        "calories": entry.calories,
        "protein_g": entry.protein_g,
        "fat_g": entry.fat_g,
        "carbs_g": entry.carbs_g,
        "portions": entry.portions,
        "actual_calories": entry.actual_calories,
        "actual_protein_g": entry.actual_protein_g,
        "actual_fat_g": entry.actual_fat_g,
        "actual_carbs_g": entry.actual_carbs_g,
        "logged_at": entry.logged_at.isoformat(),
        "weight_g": entry.weight_g,
        "source_estimates": [
            {
                "source": estimate.source,
                "calories": estimate.calories,
                "protein_g": estimate.protein_g,
                "fat_g": estimate.fat_g,
                "carbs_g": estimate.carbs_g,
            }
            for estimate in entry.source_estimates
        ],
    }


def _serialize_day(overview: DayOverview) -> dict[str, object]:
    summary = overview.summary
    progress = overview.progress
    return {
        "day": overview.day.isoformat(),
        "entries": [_serialize_entry(entry) for entry in overview.entries],
        "summary": {
            "total_calories": summary.total_calories,
            "total_protein_g": summary.total_protein_g,
            "total_fat_g": summary.total_fat_g,
            "total_carbs_g": summary.total_carbs_g,
            "food_count": summary.food_count,
            "is_empty": summary.is_empty,
        },
        "progress": {
            "calories": {
                "progress": progress.calories_progress,
                "remaining": progress.calories_remaining,
                "percentage": progress.calories_percentage,
            },
            "protein": {
                "progress": progress.protein_progress,
                "remaining": progress.protein_remaining,
                "percentage": progress.protein_percentage,
            },
            "fat": {
                "progress": progress.fat_progress,
                "remaining": progress.fat_remaining,
                "percentage": progress.fat_percentage,
            },
        },
    }


def _serialize_goals(goals: NutritionGoals) -> dict[str, float]:
    return {
        "daily_calories": goals.daily_calories,
        "daily_protein_g": goals.daily_protein_g,
        "daily_fat_g": goals.daily_fat_g,
    }


def _serialize_profile(profile: UserProfile) -> dict[str, object]:
    return {
        "age": profile.age,
        "gender": profile.gender.value,
        "weight_kg": profile.weight_kg,
        "body_fat_pct": profile.body_fat_pct,
        "height_cm": profile.height_cm,
        "fitness_goal": profile.fitness_goal.value,
    }
