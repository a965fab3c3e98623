from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from nutrition_calculator.domain.entries import FoodEntry, SourceEstimate
from nutrition_calculator.domain.errors import (
    EntryNotFoundError,
    PortionEditNotAllowedError,
)
from nutrition_calculator.domain.nutrition import MacroProfile
from nutrition_calculator.domain.targets import DEFAULT_GOALS, NutritionGoals
from nutrition_calculator.services.food_log import (
    MAX_HISTORY_DAYS,
    FoodLogService,
    latest_by_name,
    rank_by_frequency,
)
from nutrition_calculator.services.targets import TargetsService
from tests.conftest import BrokenFoodEntryRepository, InMemoryFoodEntryRepository


def stored_entry(
    name: str, logged_at: datetime, calories: float = 100.0, portions: float = 1.0
) -> FoodEntry:
    return FoodEntry(
        id=uuid4(),
        name=name,
        short_label=name[:3],
        calories=calories,
        protein_g=10.0,
        fat_g=5.0,
        carbs_g=12.0,
        logged_at=logged_at,
        portions=portions,
    )


def test_create_entry_stores_per_portion_values(
    food_log_service: FoodLogService,
) -> None:
    entry = food_log_service.create_entry(
        "Chicken salad",
        MacroProfile(calories=450, protein_g=36, fat_g=18, carbs_g=30),
        portions=3,
        weight_g=600,
        source_estimates=[SourceEstimate("USDA", 440, 35, 17, 31)],
    )

    assert entry.calories == pytest.approx(150)
    assert entry.protein_g == pytest.approx(12)
    assert entry.portions == 1.0
    assert entry.short_label == "Chi"
    assert entry.weight_g == 600
    assert entry.source_estimates[0].source == "USDA"
    assert entry.calories * 3 == pytest.approx(450)


def test_create_entry_keeps_explicit_short_label(
    food_log_service: FoodLogService,
) -> None:
    entry = food_log_service.create_entry(
        "Oatmeal", MacroProfile(300, 10, 6, 50), short_label="OAT"
    )

    assert entry.short_label == "OAT"


def test_create_entry_reads_naive_timestamp_in_configured_zone(
    entry_repository: InMemoryFoodEntryRepository,
    targets_service: TargetsService,
) -> None:
    service = FoodLogService(
        repository=entry_repository,
        targets_service=targets_service,
        timezone_name="Asia/Taipei",
    )

    entry = service.create_entry(
        "Rice", MacroProfile(200, 4, 0.5, 45), logged_at=datetime(2025, 3, 14, 7, 30)
    )

    assert entry.logged_at.utcoffset() == timedelta(hours=8)
    assert [item.id for item in service.list_entries(entry.logged_at.date())] == [
        entry.id
    ]


def test_get_today_summarizes_entries_against_goals(
    food_log_service: FoodLogService,
    targets_service: TargetsService,
) -> None:
    targets_service.save_goals(NutritionGoals(200, 50, 65))
    food_log_service.create_entry("Eggs", MacroProfile(150, 12, 10, 1))
    food_log_service.create_entry("Toast", MacroProfile(100, 3, 1, 20))

    overview = food_log_service.get_today()

    assert overview.day == food_log_service.today()
    assert [entry.name for entry in overview.entries] == ["Eggs", "Toast"]
    assert overview.summary.total_calories == 250
    assert overview.summary.food_count == 2
    assert overview.progress.calories_percentage == pytest.approx(125)
    assert overview.progress.calories_remaining == -50


def test_empty_day_uses_default_goals(food_log_service: FoodLogService) -> None:
    overview = food_log_service.get_today()

    assert overview.entries == []
    assert overview.summary.is_empty
    assert overview.progress.calories_remaining == DEFAULT_GOALS.daily_calories


def test_adjust_portions_changes_today_totals(
    food_log_service: FoodLogService,
) -> None:
    entry = food_log_service.create_entry("Eggs", MacroProfile(150, 12, 10, 1))

    updated = food_log_service.adjust_portions(entry.id, 1)
    overview = food_log_service.get_today()

    assert updated.portions == 2.0
    assert overview.summary.total_calories == 300


def test_adjust_portions_floors_at_one(food_log_service: FoodLogService) -> None:
    entry = food_log_service.create_entry("Eggs", MacroProfile(150, 12, 10, 1))

    updated = food_log_service.adjust_portions(entry.id, -5)

    assert updated.portions == 1.0


def test_adjust_portions_rejects_past_entries(
    food_log_service: FoodLogService,
    entry_repository: InMemoryFoodEntryRepository,
) -> None:
    entry = entry_repository.add(
        stored_entry("Soup", datetime.now(tz=UTC) - timedelta(days=2), portions=2.0)
    )

    with pytest.raises(PortionEditNotAllowedError):
        food_log_service.adjust_portions(entry.id, 1)

    assert entry_repository.entries[entry.id].portions == 2.0


def test_unknown_entry_raises_not_found(food_log_service: FoodLogService) -> None:
    with pytest.raises(EntryNotFoundError):
        food_log_service.adjust_portions(uuid4(), 1)
    with pytest.raises(EntryNotFoundError):
        food_log_service.rename(uuid4(), name="Anything")
    with pytest.raises(EntryNotFoundError):
        food_log_service.delete_entry(uuid4())


def test_rename_updates_name_and_short_label(
    food_log_service: FoodLogService,
) -> None:
    entry = food_log_service.create_entry("Eggs", MacroProfile(150, 12, 10, 1))

    renamed = food_log_service.rename(entry.id, name="Scrambled eggs")
    relabeled = food_log_service.rename(entry.id, short_label="SCR")

    assert renamed.name == "Scrambled eggs"
    assert renamed.short_label == "Egg"
    assert relabeled.short_label == "SCR"


def test_delete_entry_removes_it_from_the_day(
    food_log_service: FoodLogService,
) -> None:
    keep = food_log_service.create_entry("Eggs", MacroProfile(150, 12, 10, 1))
    drop = food_log_service.create_entry("Cake", MacroProfile(400, 5, 20, 50))

    food_log_service.delete_entry(drop.id)
    overview = food_log_service.get_today()

    assert [entry.id for entry in overview.entries] == [keep.id]
    assert overview.summary.total_calories == 150


def test_search_returns_latest_entry_per_name(
    food_log_service: FoodLogService,
    entry_repository: InMemoryFoodEntryRepository,
) -> None:
    now = datetime.now(tz=UTC)
    entry_repository.add(stored_entry("Chicken soup", now - timedelta(days=3), 90))
    latest = entry_repository.add(
        stored_entry("Chicken soup", now - timedelta(days=1), 110)
    )
    entry_repository.add(stored_entry("Grilled chicken", now, 200))
    entry_repository.add(stored_entry("Beef stew", now, 300))

    results = food_log_service.search("  CHICKEN ")

    assert [entry.name for entry in results] == ["Grilled chicken", "Chicken soup"]
    assert results[1].id == latest.id


def test_search_respects_limit_and_blank_query(
    food_log_service: FoodLogService,
    entry_repository: InMemoryFoodEntryRepository,
) -> None:
    now = datetime.now(tz=UTC)
    for index in range(8):
        entry_repository.add(stored_entry(f"Bread {index}", now))

    assert len(food_log_service.search("bread")) == 5
    assert len(food_log_service.search("bread", limit=2)) == 2
    assert food_log_service.search("   ") == []
    assert food_log_service.search(None) == []


def test_top_frequent_orders_by_count(
    food_log_service: FoodLogService,
    entry_repository: InMemoryFoodEntryRepository,
) -> None:
    now = datetime.now(tz=UTC)
    for offset in range(3):
        entry_repository.add(stored_entry("Coffee", now - timedelta(days=offset)))
    for offset in range(2):
        entry_repository.add(stored_entry("Banana", now - timedelta(days=offset)))
    entry_repository.add(stored_entry("Pizza", now))

    results = food_log_service.top_frequent()

    assert [entry.name for entry in results] == ["Coffee", "Banana", "Pizza"]
    assert [entry.name for entry in food_log_service.top_frequent(limit=1)] == [
        "Coffee"
    ]


def test_recent_days_returns_history_oldest_first(
    food_log_service: FoodLogService,
    entry_repository: InMemoryFoodEntryRepository,
) -> None:
    today = food_log_service.today()
    noon_yesterday = datetime.combine(
        today - timedelta(days=1), datetime.min.time(), tzinfo=UTC
    ) + timedelta(hours=12)
    entry_repository.add(stored_entry("Pasta", noon_yesterday, 500))

    days = food_log_service.recent_days()

    assert [overview.day for overview in days] == [
        today - timedelta(days=offset) for offset in range(6, -1, -1)
    ]
    assert days[5].summary.total_calories == 500
    assert days[6].summary.is_empty
    assert len(food_log_service.recent_days(3)) == 3


def test_unreachable_store_degrades_reads_to_empty(
    targets_service: TargetsService,
) -> None:
    service = FoodLogService(
        repository=BrokenFoodEntryRepository(), targets_service=targets_service
    )

    assert service.get_today().entries == []
    assert service.search("soup") == []
    assert service.top_frequent() == []
    assert all(overview.summary.is_empty for overview in service.recent_days())


def test_latest_by_name_and_rank_by_frequency_helpers() -> None:
    now = datetime.now(tz=UTC)
    old_tea = stored_entry("Tea", now - timedelta(hours=5))
    new_tea = stored_entry("Tea", now - timedelta(hours=1))
    cake = stored_entry("Cake", now)

    assert latest_by_name([old_tea, cake, new_tea]) == [cake, new_tea]
    assert rank_by_frequency([old_tea, cake, new_tea], 5) == [new_tea, cake]


def test_counts_and_limits_are_clamped(
    food_log_service: FoodLogService,
    entry_repository: InMemoryFoodEntryRepository,
) -> None:
    now = datetime.now(tz=UTC)
    entry_repository.add(stored_entry("Apple", now - timedelta(minutes=1)))
    entry_repository.add(stored_entry("Apricot", now))

    assert len(food_log_service.recent_days(10**7)) == MAX_HISTORY_DAYS
    assert len(food_log_service.recent_days(0)) == 1
    assert [entry.name for entry in food_log_service.search("ap", limit=-1)] == [
        "Apricot"
    ]
    assert len(food_log_service.top_frequent(limit=0)) == 1
    assert len(food_log_service.search("ap", limit=10**6)) == 2
