"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutrition_calculator.adapters.openai_estimator_client import OpenAIEstimatorClient
from nutrition_calculator.adapters.supabase_food_entry_repository import (
    SupabaseFoodEntryRepository,
)
from nutrition_calculator.adapters.supabase_goals_repository import (
    SupabaseGoalsRepository,
)
from nutrition_calculator.adapters.supabase_profile_repository import (
    SupabaseProfileRepository,
)
from nutrition_calculator.config import Settings, parse_timezone
from nutrition_calculator.services.cache import InMemoryCache
from nutrition_calculator.services.estimator import MacroEstimatorService
from nutrition_calculator.services.food_log import FoodLogService
from nutrition_calculator.services.targets import TargetsService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    targets_service: TargetsService
    food_log_service: FoodLogService
    estimator_service: MacroEstimatorService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    targets_service = TargetsService(
        goals_repository=SupabaseGoalsRepository(supabase_client),
        profile_repository=SupabaseProfileRepository(supabase_client),
    )
    food_log_service = FoodLogService(
        repository=SupabaseFoodEntryRepository(supabase_client),
        targets_service=targets_service,
        timezone_name=parse_timezone(resolved_settings.timezone),
        search_limit=resolved_settings.search_limit,
        quick_select_limit=resolved_settings.quick_select_limit,
        history_days=resolved_settings.history_days,
    )
    openai_client = OpenAIEstimatorClient.create(resolved_settings.openai_api_key)
    estimator_service = MacroEstimatorService(
        client=openai_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
        cache=InMemoryCache(),
        text_ttl_seconds=resolved_settings.estimate_cache_ttl_seconds,
    )

    async def close_resources() -> None:
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        targets_service=targets_service,
        food_log_service=food_log_service,
        estimator_service=estimator_service,
        close_resources=close_resources,
    )
